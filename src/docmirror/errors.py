"""Exceptions raised by DocMirror."""

from __future__ import annotations

from pathlib import Path


class DocMirrorError(Exception):
    """Base exception for DocMirror errors."""


class NotInstalledError(DocMirrorError):
    """Raised when a docset directory is absent or unreadable."""

    def __init__(self, slug: str) -> None:
        super().__init__(f"Documentation {slug} is not installed")
        self.slug = slug


class MalformedCatalogError(DocMirrorError):
    """Raised when a stored ``index.json`` cannot be decoded."""

    def __init__(self, slug: str, path: Path) -> None:
        super().__init__(f"Failed to parse index for {slug}: {path}")
        self.slug = slug
        self.path = path


class MalformedContentError(DocMirrorError):
    """Raised when a stored ``db.json`` cannot be decoded."""

    def __init__(self, slug: str, path: Path) -> None:
        super().__init__(f"Failed to parse content for {slug}: {path}")
        self.slug = slug
        self.path = path


class DownloadError(DocMirrorError):
    """Raised when a remote resource cannot be fetched."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to download {url}: {reason}")
        self.url = url
        self.reason = reason


class ViewerError(DocMirrorError):
    """Raised when the external viewer cannot be launched."""
