"""Core DocMirror data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True, slots=True)
class DocumentEntry:
    """One logical document listed in a docset's index."""

    name: str
    path: str
    type: str = ""

    @property
    def display_entry(self) -> str:
        return f"{self.name} ({self.type})"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DocumentEntry":
        return cls(
            name=str(data.get("name", "")),
            path=str(data.get("path", "")),
            type=str(data.get("type", "")),
        )


@dataclass(slots=True)
class Docset:
    """A row of the remote catalog describing one installable docset."""

    slug: str
    name: str
    version: str = ""
    release: str = ""
    mtime: int = 0
    description: str = ""

    @property
    def kind(self) -> str:
        return self.name.lower()

    @property
    def display_name(self) -> str:
        if self.version:
            return f"{self.name} {self.version}"
        return self.name

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Docset":
        return cls(
            slug=str(data["slug"]),
            name=str(data.get("name", data["slug"])),
            version=str(data.get("version") or ""),
            release=str(data.get("release") or ""),
            mtime=int(data.get("mtime") or 0),
            description=str(data.get("description") or ""),
        )


@dataclass(slots=True)
class DocMeta:
    """Metadata persisted alongside an installed docset."""

    release: str = ""
    version: str = ""
    mtime: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"release": self.release, "version": self.version, "mtime": self.mtime}


@dataclass(slots=True)
class SearchResult:
    """A fuzzy match of one entry inside one installed docset."""

    slug: str
    entry: DocumentEntry
    positions: List[int] = field(default_factory=list)
    score: int = 0
