"""Natural version ordering and grouping of catalog rows by kind."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import Dict, Iterable, List, Optional

from docmirror.models import Docset

_TOKEN_PATTERN = re.compile(r"[0-9]+|[^0-9]+")
_NUMBER_PATTERN = re.compile(r"[0-9]+")


def version_parts(version: str) -> List[str]:
    """Split ``version`` into alternating runs of digits and non-digits."""
    return _TOKEN_PATTERN.findall(version)


def _compare_part(left: str, right: str) -> int:
    left_num = _NUMBER_PATTERN.fullmatch(left) is not None
    right_num = _NUMBER_PATTERN.fullmatch(right) is not None
    if left_num and right_num:
        a, b = int(left), int(right)
        return (a > b) - (a < b)
    # numbers sort before words
    if left_num:
        return -1
    if right_num:
        return 1
    return (left > right) - (left < right)


def compare_versions(left: str, right: str) -> int:
    """Compare two version strings naturally.

    Returns a negative number, zero or a positive number when ``left`` is
    lower than, equal to or greater than ``right``. ``"2.10"`` is greater than
    ``"2.9"`` and ``"1.0"`` is lower than ``"1.0.1"``.
    """
    left_parts = version_parts(left)
    right_parts = version_parts(right)
    for a, b in zip(left_parts, right_parts):
        result = _compare_part(a, b)
        if result:
            return result
    return (len(left_parts) > len(right_parts)) - (len(left_parts) < len(right_parts))


@dataclass(slots=True)
class CatalogGroup:
    """One logical product, pointing into :attr:`Catalog.rows` by index.

    ``versions`` lists every row of the kind newest first and includes
    ``current``.
    """

    kind: str
    current: int
    versions: List[int] = field(default_factory=list)


@dataclass(slots=True)
class Catalog:
    rows: List[Docset]
    groups: List[CatalogGroup]

    def current(self, group: CatalogGroup) -> Docset:
        return self.rows[group.current]

    def versions(self, group: CatalogGroup) -> List[Docset]:
        return [self.rows[index] for index in group.versions]

    def find(self, slug: str) -> Optional[Docset]:
        for row in self.rows:
            if row.slug == slug:
                return row
        return None

    def filter(self, text: str) -> List[CatalogGroup]:
        """Groups whose kind or any version slug contains ``text``."""
        needle = text.lower()
        return [
            group
            for group in self.groups
            if needle in group.kind
            or any(needle in self.rows[index].slug.lower() for index in group.versions)
        ]


def group_catalog(rows: Iterable[Docset]) -> Catalog:
    """Fold catalog rows sharing a case-insensitive kind into groups."""
    table = list(rows)
    by_kind: Dict[str, List[int]] = {}
    for index, row in enumerate(table):
        by_kind.setdefault(row.kind, []).append(index)

    newest_first = cmp_to_key(lambda a, b: compare_versions(table[b].version, table[a].version))
    groups = []
    for kind, indices in by_kind.items():
        ordered = sorted(indices, key=newest_first)
        groups.append(CatalogGroup(kind=kind, current=ordered[0], versions=ordered))

    groups.sort(key=lambda group: table[group.current].display_name.lower())
    return Catalog(rows=table, groups=groups)
