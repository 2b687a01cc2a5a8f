"""Mapping between dotted document paths and files in the HTML mirror."""

from __future__ import annotations

from typing import NamedTuple

HTML_SUFFIX = ".html"
INDEX_NAME = "index"


class ResolvedPath(NamedTuple):
    file_path: str
    fragment: str


def split_fragment(doc_path: str) -> tuple[str, str]:
    """Split ``doc_path`` at the first ``#``; the fragment keeps its ``#``."""
    base, sep, rest = doc_path.partition("#")
    return base, sep + rest


def resolve(doc_path: str) -> ResolvedPath:
    """Resolve a dotted document path to a relative ``/``-separated file path.

    ``"language.types.array#intro"`` becomes
    ``("language/types/array.html", "#intro")``. Empty segments and traversal
    sequences are passed through untouched; callers validate input.
    """
    base, fragment = split_fragment(doc_path)
    if not base:
        base = INDEX_NAME

    file_path = base.replace(".", "/")
    if not file_path.endswith(HTML_SUFFIX):
        file_path += HTML_SUFFIX
    return ResolvedPath(file_path, fragment)


def containing_dir(file_path: str) -> str:
    """Directory part of a resolved file path, ``""`` for the mirror root."""
    head, _, _ = file_path.rpartition("/")
    return head
