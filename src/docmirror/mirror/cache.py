"""On-disk layout of installed docsets."""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path
from typing import Dict, List, Mapping, Tuple

from docmirror.errors import MalformedCatalogError, MalformedContentError, NotInstalledError
from docmirror.mirror.links import rewrite_links
from docmirror.mirror.paths import containing_dir, resolve
from docmirror.models import DocMeta, DocumentEntry

LOGGER = logging.getLogger(__name__)

META_FILE = "meta.json"
LEGACY_MTIME_FILE = "mtime"
INDEX_FILE = "index.json"
CONTENT_FILE = "db.json"
HTML_DIR = "html"


def parse_entries(raw: str | bytes) -> List[DocumentEntry]:
    """Decode an ``index.json`` blob, raising ``ValueError`` when it is malformed."""
    data = json.loads(raw)
    try:
        return [DocumentEntry.from_dict(item) for item in data["entries"]]
    except (KeyError, TypeError, AttributeError) as exc:
        raise ValueError(f"unexpected index layout: {exc!r}") from exc


def parse_content(raw: str | bytes) -> Dict[str, str]:
    """Decode a ``db.json`` blob into a path to HTML mapping.

    Raises ``ValueError`` unless the blob is a JSON object whose values are
    all strings.
    """
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError("content is not a JSON object")
    for doc_path, html in data.items():
        if not isinstance(html, str):
            raise ValueError(f"content for {doc_path!r} is not a string")
    return data


class CacheStore:
    """Owns ``<base_dir>/<slug>/`` for every installed docset.

    Each docset directory holds ``meta.json``, the verbatim ``index.json`` and
    ``db.json`` blobs, and an ``html/`` tree materialized from ``db.json``.
    """

    def __init__(self, base_dir: Path) -> None:
        self.base_dir = Path(base_dir)

    def doc_dir(self, slug: str) -> Path:
        return self.base_dir / slug

    def html_dir(self, slug: str) -> Path:
        return self.doc_dir(slug) / HTML_DIR

    def ensure(self, slug: str) -> Path:
        path = self.doc_dir(slug)
        path.mkdir(parents=True, exist_ok=True)
        return path

    def exists(self, slug: str) -> bool:
        return self.doc_dir(slug).is_dir()

    def installed(self) -> List[str]:
        """Slugs of all installed docsets, sorted by name."""
        if not self.base_dir.is_dir():
            return []
        return sorted(child.name for child in self.base_dir.iterdir() if child.is_dir())

    def remove(self, slug: str) -> None:
        if not self.exists(slug):
            raise NotInstalledError(slug)
        shutil.rmtree(self.doc_dir(slug))
        LOGGER.info("Removed %s", slug)

    # Metadata

    def save_meta(self, slug: str, meta: DocMeta) -> None:
        path = self.doc_dir(slug) / META_FILE
        path.write_text(json.dumps(meta.to_dict()), encoding="utf-8")

    def load_meta(self, slug: str) -> DocMeta:
        """Read ``meta.json``, falling back to the legacy ``mtime`` file.

        Raises ``OSError`` or ``ValueError`` when neither can be read.
        """
        directory = self.doc_dir(slug)
        try:
            data = json.loads((directory / META_FILE).read_text(encoding="utf-8"))
            return DocMeta(
                release=str(data.get("release") or ""),
                version=str(data.get("version") or ""),
                mtime=int(data["mtime"]),
            )
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
            LOGGER.debug("No usable %s for %s (%s), trying legacy file", META_FILE, slug, exc)

        raw = (directory / LEGACY_MTIME_FILE).read_text(encoding="utf-8")
        return DocMeta(mtime=int(raw.strip()))

    def is_stale(self, slug: str, remote_mtime: int) -> bool:
        """Whether the installed copy of ``slug`` is older than ``remote_mtime``."""
        if not self.exists(slug):
            return True
        try:
            stored = self.load_meta(slug).mtime
        except (OSError, ValueError):
            return True
        return stored < remote_mtime

    # Raw blobs

    def save_index(self, slug: str, raw: bytes) -> None:
        (self.doc_dir(slug) / INDEX_FILE).write_bytes(raw)

    def save_content(self, slug: str, raw: bytes) -> None:
        (self.doc_dir(slug) / CONTENT_FILE).write_bytes(raw)

    def load_entries(self, slug: str) -> List[DocumentEntry]:
        path = self.doc_dir(slug) / INDEX_FILE
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise NotInstalledError(slug) from exc

        try:
            return parse_entries(raw)
        except ValueError as exc:
            raise MalformedCatalogError(slug, path) from exc

    def load_content(self, slug: str) -> Dict[str, str]:
        path = self.doc_dir(slug) / CONTENT_FILE
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise NotInstalledError(slug) from exc

        try:
            return parse_content(raw)
        except ValueError as exc:
            raise MalformedContentError(slug, path) from exc

    # HTML tree

    def html_path(self, slug: str, doc_path: str) -> Tuple[Path, str]:
        """Absolute mirror file for ``doc_path`` plus its fragment."""
        file_path, fragment = resolve(doc_path)
        return self.html_dir(slug) / file_path, fragment

    def materialize(self, slug: str, content_map: Mapping[str, str]) -> int:
        """Write every document of ``content_map`` into the HTML tree.

        Each file depends only on its own entry, so the result does not depend
        on iteration order. The first failing write aborts the pass and its
        ``OSError`` propagates; files written before it stay on disk.
        """
        html_root = self.html_dir(slug)
        html_root.mkdir(parents=True, exist_ok=True)

        written = 0
        for doc_path, content in content_map.items():
            file_path, _ = resolve(doc_path)
            destination = html_root / file_path
            destination.parent.mkdir(parents=True, exist_ok=True)
            fixed = rewrite_links(content, containing_dir(file_path))
            destination.write_text(fixed, encoding="utf-8")
            LOGGER.debug("Wrote %s (%s)", destination, doc_path)
            written += 1

        LOGGER.info("Materialized %d documents for %s", written, slug)
        return written

    def unpack(self, slug: str) -> int:
        """Rebuild the HTML tree of ``slug`` from its stored ``db.json``."""
        if not self.exists(slug):
            raise NotInstalledError(slug)
        return self.materialize(slug, self.load_content(slug))
