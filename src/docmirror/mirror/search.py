"""Fuzzy entry search across installed docsets."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Sequence

from docmirror.errors import MalformedCatalogError, NotInstalledError
from docmirror.mirror.cache import CacheStore
from docmirror.models import DocumentEntry, SearchResult

LOGGER = logging.getLogger(__name__)

FIRST_CHAR_MATCH_BONUS = 10
MATCH_FOLLOWING_SEPARATOR_BONUS = 20
CAMEL_CASE_MATCH_BONUS = 20
ADJACENT_MATCH_BONUS = 5
UNMATCHED_LEADING_CHAR_PENALTY = -5
MAX_UNMATCHED_LEADING_CHAR_PENALTY = -15

SEPARATORS = frozenset("/-_ .\\")


@dataclass(slots=True)
class Match:
    index: int
    text: str
    score: int = 0
    positions: List[int] = field(default_factory=list)


def _equal_fold(left: str, right: str) -> bool:
    return left == right or left.lower() == right.lower()


def _match_candidate(pattern: str, index: int, text: str) -> Match | None:
    match = Match(index=index, text=text)
    pattern_index = 0
    best_score = -1
    matched_index = -1
    adjacent_bonus = 0
    last = ""
    last_index = 0

    for position, char in enumerate(text):
        if pattern_index >= len(pattern):
            break

        if _equal_fold(char, pattern[pattern_index]):
            score = 0
            if position == 0:
                score += FIRST_CHAR_MATCH_BONUS
            if last.islower() and char.isupper():
                score += CAMEL_CASE_MATCH_BONUS
            if position != 0 and last in SEPARATORS:
                score += MATCH_FOLLOWING_SEPARATOR_BONUS
            if match.positions and match.positions[-1] == last_index:
                # consecutive matches compound
                bonus = adjacent_bonus * 2 + ADJACENT_MATCH_BONUS
                score += bonus
                adjacent_bonus += bonus
            if score > best_score:
                best_score = score
                matched_index = position

        next_pattern = pattern[pattern_index + 1] if pattern_index < len(pattern) - 1 else ""
        next_char = text[position + 1] if position + 1 < len(text) else ""

        # Commit the best candidate only when the next pattern character is
        # coming up or the text ends, so later and better occurrences win.
        if not next_char or (next_pattern and _equal_fold(next_pattern, next_char)):
            if matched_index > -1:
                if not match.positions:
                    penalty = matched_index * UNMATCHED_LEADING_CHAR_PENALTY
                    best_score += max(penalty, MAX_UNMATCHED_LEADING_CHAR_PENALTY)
                match.score += best_score
                match.positions.append(matched_index)
                best_score = -1
                matched_index = -1
                pattern_index += 1

        last_index = position
        last = char

    match.score += len(match.positions) - len(text)
    if len(match.positions) != len(pattern):
        return None
    return match


def find(pattern: str, candidates: Sequence[str]) -> List[Match]:
    """Fuzzy-match ``pattern`` as a subsequence of every candidate.

    Matches are ranked by score, highest first; equal scores keep candidate
    order. Bonuses reward matches at the start, after separators, on camel
    case humps and on consecutive characters. An empty pattern matches
    nothing.
    """
    if not pattern:
        return []

    matches = []
    for index, text in enumerate(candidates):
        match = _match_candidate(pattern, index, text)
        if match is not None:
            matches.append(match)
    matches.sort(key=lambda match: match.score, reverse=True)
    return matches


def build_name_index(entries: Sequence[DocumentEntry]) -> List[str]:
    return [entry.name for entry in entries]


class Searcher:
    """Search entry names in one or all installed docsets."""

    def __init__(self, cache: CacheStore) -> None:
        self.cache = cache

    def search_docset(self, query: str, slug: str) -> List[SearchResult]:
        """Search a single docset.

        Raises ``NotInstalledError`` or ``MalformedCatalogError`` when its
        index cannot be loaded.
        """
        entries = self.cache.load_entries(slug)
        return [
            SearchResult(
                slug=slug,
                entry=entries[match.index],
                positions=match.positions,
                score=match.score,
            )
            for match in find(query, build_name_index(entries))
        ]

    def search(
        self, query: str, *, slug: str | None = None, limit: int | None = None
    ) -> List[SearchResult]:
        if slug:
            results = self.search_docset(query, slug)
        else:
            results = []
            for installed in self.cache.installed():
                try:
                    results.extend(self.search_docset(query, installed))
                except (NotInstalledError, MalformedCatalogError) as exc:
                    LOGGER.debug("Skipping %s: %s", installed, exc)

        if limit is not None:
            return results[:limit]
        return results
