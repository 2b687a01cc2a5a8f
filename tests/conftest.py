"""Shared fixtures for DocMirror tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List

import pytest

from docmirror.mirror.cache import CacheStore


def install_docset(
    base_dir: Path,
    slug: str,
    entries: List[Dict[str, str]],
    content: Dict[str, str] | None = None,
    mtime: int = 100,
) -> Path:
    """Write a docset directory the way a download leaves it, without HTML."""
    directory = base_dir / slug
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "index.json").write_text(json.dumps({"entries": entries}), encoding="utf-8")
    (directory / "db.json").write_text(json.dumps(content or {}), encoding="utf-8")
    (directory / "meta.json").write_text(
        json.dumps({"release": "", "version": "", "mtime": mtime}), encoding="utf-8"
    )
    return directory


@pytest.fixture
def cache(tmp_path: Path) -> CacheStore:
    return CacheStore(tmp_path / "docs")


@pytest.fixture
def populated_cache(cache: CacheStore) -> CacheStore:
    """Cache with two healthy docsets, one corrupt index and one empty directory."""
    install_docset(
        cache.base_dir,
        "css",
        [
            {"name": "max-height", "path": "max-height", "type": "Properties"},
            {"name": "margin", "path": "margin", "type": "Properties"},
            {"name": "color", "path": "color", "type": "Properties"},
        ],
        {"margin": '<p>See <a href="max-height">max-height</a></p>'},
    )
    install_docset(
        cache.base_dir,
        "javascript",
        [
            {"name": "Map", "path": "global_objects.map", "type": "Map"},
            {"name": "Array.prototype.map()", "path": "global_objects.array.map", "type": "Array"},
        ],
    )
    broken = cache.base_dir / "broken"
    broken.mkdir(parents=True)
    (broken / "index.json").write_text("{not json", encoding="utf-8")
    (cache.base_dir / "empty").mkdir()
    return cache
