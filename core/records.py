"""Catalog records and the attributes they expose."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional


class Attribute(str, Enum):
    NAME = "name"
    VERSION = "version"
    DESCRIPTION = "description"
    REPO = "repo"
    URL = "url"
    PACKAGER = "packager"
    INSTALLSTATE = "installstate"
    BUILDDATE = "builddate"
    INSTALLDATE = "installdate"
    SIZE = "size"
    GROUPS = "groups"
    LICENSES = "licenses"
    PROVIDES = "provides"
    DEPENDS = "depends"
    CONFLICTS = "conflicts"

    @property
    def code(self) -> str:
        return _CODES[self]

    @property
    def caption(self) -> str:
        return _CAPTIONS[self]

    @classmethod
    def from_code(cls, char: str) -> Optional["Attribute"]:
        """Map a one-character field code to its attribute, None if unknown."""
        return _BY_CODE.get(char)


_CODES: Dict[Attribute, str] = {
    Attribute.NAME: "n",
    Attribute.VERSION: "v",
    Attribute.DESCRIPTION: "d",
    Attribute.REPO: "r",
    Attribute.URL: "u",
    Attribute.PACKAGER: "p",
    Attribute.INSTALLSTATE: "i",
    Attribute.BUILDDATE: "b",
    Attribute.INSTALLDATE: "a",
    Attribute.SIZE: "s",
    Attribute.GROUPS: "g",
    Attribute.LICENSES: "l",
    Attribute.PROVIDES: "o",
    Attribute.DEPENDS: "e",
    Attribute.CONFLICTS: "c",
}

_CAPTIONS: Dict[Attribute, str] = {
    Attribute.NAME: "Name",
    Attribute.VERSION: "Version",
    Attribute.DESCRIPTION: "Description",
    Attribute.REPO: "Repo",
    Attribute.URL: "URL",
    Attribute.PACKAGER: "Packager",
    Attribute.INSTALLSTATE: "Install state",
    Attribute.BUILDDATE: "Build date",
    Attribute.INSTALLDATE: "Install date",
    Attribute.SIZE: "Size",
    Attribute.GROUPS: "Groups",
    Attribute.LICENSES: "Licenses",
    Attribute.PROVIDES: "Provides",
    Attribute.DEPENDS: "Depends",
    Attribute.CONFLICTS: "Conflicts",
}

_BY_CODE: Dict[str, Attribute] = {code: attr for attr, code in _CODES.items()}
_VALUES = frozenset(a.value for a in Attribute)


@dataclass(frozen=True, eq=False)
class Record:
    """One catalog entry.

    Equality is identity (``eq=False``); matching and ordering go through
    attribute values instead.
    """

    attrs: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "attrs", MappingProxyType(dict(self.attrs)))

    def get(self, attr: Attribute) -> str:
        return self.attrs.get(attr.value, "") or ""

    @property
    def name(self) -> str:
        return self.get(Attribute.NAME)

    def __repr__(self) -> str:
        return f"Record({self.name!r})"

    @classmethod
    def build(cls, **values: str) -> "Record":
        unknown = [k for k in values if k not in _VALUES]
        if unknown:
            raise ValueError(f"Unknown record attributes: {', '.join(sorted(unknown))}")
        return cls(values)
