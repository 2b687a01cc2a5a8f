"""Outcomes of install and remove operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True, slots=True)
class Installed:
    slug: str
    documents: int


@dataclass(frozen=True, slots=True)
class UpToDate:
    slug: str
    mtime: int


@dataclass(frozen=True, slots=True)
class Removed:
    slug: str


@dataclass(frozen=True, slots=True)
class Failed:
    slug: str
    reason: str


Event = Union[Installed, UpToDate, Removed, Failed]
