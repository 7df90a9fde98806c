from __future__ import annotations

import io
import os
import sys
import tarfile
from datetime import datetime

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir, os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from base_classes import DatabaseError
from core.loader import (
    LOCAL_REPO,
    STATE_INSTALLED,
    STATE_NOT_INSTALLED,
    STATE_UPGRADABLE,
    PacmanLoader,
    format_date,
    format_size,
    parse_desc,
)
from core.records import Attribute


def _desc(**fields) -> str:
    blocks = []
    for key, value in fields.items():
        values = value if isinstance(value, list) else [value]
        blocks.append("%" + key + "%\n" + "\n".join(values) + "\n")
    return "\n".join(blocks) + "\n"


def _write_sync_db(path, packages):
    with tarfile.open(path, "w:gz") as tar:
        for name, version, desc in packages:
            data = desc.encode("utf-8")
            info = tarfile.TarInfo(f"{name}-{version}/desc")
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))


def _write_local(db_path, name, version, desc):
    pkg_dir = db_path / "local" / f"{name}-{version}"
    pkg_dir.mkdir(parents=True)
    (pkg_dir / "desc").write_text(desc, encoding="utf-8")


@pytest.fixture
def db(tmp_path):
    (tmp_path / "sync").mkdir()
    _write_sync_db(tmp_path / "sync" / "core.db", [
        ("bash", "5.2-1", _desc(NAME="bash", VERSION="5.2-1", DESC="The GNU Bourne Again shell",
                                LICENSE=["GPL-3.0-or-later"], DEPENDS=["readline", "glibc"], ISIZE="9437184")),
        ("zsh", "5.9-1", _desc(NAME="zsh", VERSION="5.9-1", DESC="A very advanced shell")),
    ])
    _write_sync_db(tmp_path / "sync" / "extra.db", [
        ("bash", "9.9-1", _desc(NAME="bash", VERSION="9.9-1", DESC="shadowed copy")),
        ("vim", "9.1-1", _desc(NAME="vim", VERSION="9.1-1", DESC="Vi Improved", GROUPS=["editors"])),
    ])
    _write_local(tmp_path, "bash", "5.2-1", _desc(NAME="bash", VERSION="5.2-1", INSTALLDATE="1700000000"))
    _write_local(tmp_path, "vim", "9.0-1", _desc(NAME="vim", VERSION="9.0-1"))
    _write_local(tmp_path, "mytool", "1.0-1", _desc(NAME="mytool", VERSION="1.0-1", DESC="built locally"))
    return tmp_path


def test_parse_desc_blocks():
    fields = parse_desc("%NAME%\nbash\n\n%DEPENDS%\nreadline\nglibc\n\n")
    assert fields == {"NAME": ["bash"], "DEPENDS": ["readline", "glibc"]}


def test_format_helpers():
    assert format_size("512") == "512 B"
    assert format_size("2048") == "2.0 KiB"
    assert format_size("9437184") == "9.0 MiB"
    assert format_size("n/a") == "n/a"
    assert format_date("0") == datetime.fromtimestamp(0).strftime("%Y-%m-%d %H:%M")
    assert format_date("soon") == "soon"


def test_load_all_merges_repos_and_local(db):
    records = PacmanLoader(str(db), ["core", "extra"]).load_all()
    by_name = {r.name: r for r in records}

    assert [r.name for r in records] == ["bash", "mytool", "vim", "zsh"]

    bash = by_name["bash"]
    assert bash.get(Attribute.REPO) == "core"
    assert bash.get(Attribute.DESCRIPTION) == "The GNU Bourne Again shell"
    assert bash.get(Attribute.INSTALLSTATE) == STATE_INSTALLED
    assert bash.get(Attribute.DEPENDS) == "readline, glibc"
    assert bash.get(Attribute.SIZE) == "9.0 MiB"
    assert bash.get(Attribute.INSTALLDATE) == format_date("1700000000")

    assert by_name["vim"].get(Attribute.INSTALLSTATE) == STATE_UPGRADABLE
    assert by_name["vim"].get(Attribute.GROUPS) == "editors"
    assert by_name["zsh"].get(Attribute.INSTALLSTATE) == STATE_NOT_INSTALLED

    mytool = by_name["mytool"]
    assert mytool.get(Attribute.REPO) == LOCAL_REPO
    assert mytool.get(Attribute.INSTALLSTATE) == STATE_INSTALLED


def test_local_build_newer_than_repo_is_not_upgradable(tmp_path):
    (tmp_path / "sync").mkdir()
    _write_sync_db(tmp_path / "sync" / "core.db", [
        ("git", "2.44.0-1", _desc(NAME="git", VERSION="2.44.0-1")),
        ("less", "1:643-1", _desc(NAME="less", VERSION="1:643-1")),
    ])
    _write_local(tmp_path, "git", "2.45.0-1", _desc(NAME="git", VERSION="2.45.0-1"))
    _write_local(tmp_path, "less", "668-1", _desc(NAME="less", VERSION="668-1"))

    by_name = {r.name: r for r in PacmanLoader(str(tmp_path), ["core"]).load_all()}
    assert by_name["git"].get(Attribute.INSTALLSTATE) == STATE_INSTALLED
    # the repository epoch outranks the larger local version number
    assert by_name["less"].get(Attribute.INSTALLSTATE) == STATE_UPGRADABLE


def test_missing_and_broken_sync_dbs_are_skipped(db):
    (db / "sync" / "broken.db").write_bytes(b"not a tar archive")
    records = PacmanLoader(str(db), ["missing", "broken", "core"]).load_all()
    assert "zsh" in [r.name for r in records]


def test_missing_db_dir_raises(tmp_path):
    with pytest.raises(DatabaseError) as exc:
        PacmanLoader(str(tmp_path / "nope"), ["core"]).load_all()
    assert "nope" in exc.value.user_message
