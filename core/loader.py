"""Record loading from a pacman database directory.

Sync databases are tar archives of ``<pkg>-<ver>/desc`` files, the local
database is a directory tree of the same files. Both use the ``%FIELD%``
block format read by parse_desc().
"""

from __future__ import annotations

import os
import tarfile
from datetime import datetime
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from base_classes import DatabaseError, RecordLoader
from core.records import Attribute, Record
from core.vercmp import vercmp
from utils.logging_utils import LoggingHandler


STATE_INSTALLED = "installed"
STATE_NOT_INSTALLED = "not installed"
STATE_UPGRADABLE = "upgradable"
LOCAL_REPO = "local"

# desc field -> attribute
_FIELDS: Dict[str, Attribute] = {
    "NAME": Attribute.NAME,
    "VERSION": Attribute.VERSION,
    "DESC": Attribute.DESCRIPTION,
    "URL": Attribute.URL,
    "PACKAGER": Attribute.PACKAGER,
    "BUILDDATE": Attribute.BUILDDATE,
    "INSTALLDATE": Attribute.INSTALLDATE,
    "ISIZE": Attribute.SIZE,
    "SIZE": Attribute.SIZE,
    "GROUPS": Attribute.GROUPS,
    "LICENSE": Attribute.LICENSES,
    "PROVIDES": Attribute.PROVIDES,
    "DEPENDS": Attribute.DEPENDS,
    "CONFLICTS": Attribute.CONFLICTS,
}

_DATES = (Attribute.BUILDDATE, Attribute.INSTALLDATE)


def parse_desc(text: str) -> Dict[str, List[str]]:
    """Parse a pacman ``desc`` file into ``{FIELD: [values...]}``."""
    fields: Dict[str, List[str]] = {}
    current: Optional[str] = None
    for raw in text.splitlines():
        line = raw.strip()
        if not line:
            current = None
            continue
        if current is None and line.startswith("%") and line.endswith("%") and len(line) > 2:
            current = line[1:-1]
            fields.setdefault(current, [])
            continue
        if current is not None:
            fields[current].append(line)
    return fields


def format_size(raw: str) -> str:
    try:
        size = float(raw)
    except ValueError:
        return raw
    for unit in ("B", "KiB", "MiB", "GiB"):
        if size < 1024 or unit == "GiB":
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return raw


def format_date(raw: str) -> str:
    try:
        return datetime.fromtimestamp(int(raw)).strftime("%Y-%m-%d %H:%M")
    except (ValueError, OverflowError, OSError):
        return raw


def desc_to_values(fields: Dict[str, List[str]]) -> Dict[str, str]:
    values: Dict[str, str] = {}
    for key, attr in _FIELDS.items():
        items = fields.get(key)
        if not items or attr.value in values:
            continue
        if attr is Attribute.SIZE:
            values[attr.value] = format_size(items[0])
        elif attr in _DATES:
            values[attr.value] = format_date(items[0])
        else:
            values[attr.value] = ", ".join(items)
    return values


class PacmanLoader(RecordLoader):
    """Loads every package of the configured sync repos plus the local database."""

    def __init__(self, db_path: str, repos: Sequence[str] = (), logger: Optional[LoggingHandler] = None) -> None:
        self.db_path = db_path
        self.repos = list(repos)
        self.logger = logger or LoggingHandler()

    def load_all(self) -> List[Record]:
        if not os.path.isdir(self.db_path):
            raise DatabaseError(f"Could not open package database at {self.db_path}")

        local = dict(self._iter_local())
        seen: Dict[str, Record] = {}

        for repo in self.repos:
            for values in self._iter_sync(repo):
                name = values.get(Attribute.NAME.value, "")
                if not name or name in seen:
                    continue
                values[Attribute.REPO.value] = repo
                installed = local.get(name)
                if installed is None:
                    values[Attribute.INSTALLSTATE.value] = STATE_NOT_INSTALLED
                else:
                    _merge_local(values, installed)
                seen[name] = Record(values)

        for name, values in local.items():
            if name in seen:
                continue
            values[Attribute.REPO.value] = LOCAL_REPO
            values[Attribute.INSTALLSTATE.value] = STATE_INSTALLED
            seen[name] = Record(values)

        records = sorted(seen.values(), key=lambda r: r.name)
        self.logger.load_done({'db_path': self.db_path, 'repos': self.repos, 'local': len(local), 'records': len(records)})
        return records

    # ------------------------------------------------------------------
    def _iter_local(self) -> Iterator[Tuple[str, Dict[str, str]]]:
        local_dir = os.path.join(self.db_path, "local")
        if not os.path.isdir(local_dir):
            return
        for entry in sorted(os.listdir(local_dir)):
            desc = os.path.join(local_dir, entry, "desc")
            if not os.path.isfile(desc):
                continue
            with open(desc, "r", encoding="utf-8", errors="replace") as f:
                values = desc_to_values(parse_desc(f.read()))
            name = values.get(Attribute.NAME.value)
            if name:
                yield name, values

    def _iter_sync(self, repo: str) -> Iterator[Dict[str, str]]:
        path = os.path.join(self.db_path, "sync", f"{repo}.db")
        if not os.path.isfile(path):
            self.logger.load_warning("missing sync database", {'repo': repo, 'path': path})
            return
        try:
            archive = tarfile.open(path, "r:*")
        except (tarfile.TarError, OSError) as e:
            self.logger.load_warning("unreadable sync database", {'repo': repo, 'path': path, 'error': str(e)})
            return
        with archive:
            for member in archive:
                if not member.isfile() or os.path.basename(member.name) != "desc":
                    continue
                handle = archive.extractfile(member)
                if handle is None:
                    continue
                text = handle.read().decode("utf-8", errors="replace")
                yield desc_to_values(parse_desc(text))


def _merge_local(values: Dict[str, str], installed: Dict[str, str]) -> None:
    """Fold the local copy's install data into a repository record."""
    sync_version = values.get(Attribute.VERSION.value, "")
    local_version = installed.get(Attribute.VERSION.value, "")
    # only a newer repository version counts; a local build ahead of it stays installed
    if local_version and vercmp(sync_version, local_version) > 0:
        values[Attribute.INSTALLSTATE.value] = STATE_UPGRADABLE
    else:
        values[Attribute.INSTALLSTATE.value] = STATE_INSTALLED
    install_date = installed.get(Attribute.INSTALLDATE.value)
    if install_date:
        values[Attribute.INSTALLDATE.value] = install_date
