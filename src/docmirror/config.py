"""Application configuration defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_CATALOG_URL = "https://devdocs.io/docs.json"
DEFAULT_INDEX_URL = "https://devdocs.io/docs/{slug}/index.json?{mtime}"
DEFAULT_CONTENT_URL = "https://documents.devdocs.io/{slug}/db.json?{mtime}"
DEFAULT_VIEWER = "lynx"

HOME_ENV_VAR = "DOCMIRROR_HOME"


def _get_default_data_dir() -> Path:
    """Get the default docset directory, honouring ``DOCMIRROR_HOME``."""
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".local" / "share" / "devdocs"


@dataclass(slots=True)
class AppConfig:
    data_dir: Path | None = None
    catalog_url: str = DEFAULT_CATALOG_URL
    index_url: str = DEFAULT_INDEX_URL
    content_url: str = DEFAULT_CONTENT_URL
    viewer: str = DEFAULT_VIEWER
    timeout: float = 60.0

    def __post_init__(self) -> None:
        if self.data_dir is None:
            self.data_dir = _get_default_data_dir()

    def resolve_data_dir(self, base_dir: Path | None = None) -> Path:
        if self.data_dir is None:
            self.data_dir = _get_default_data_dir()
        if Path(self.data_dir).is_absolute() or base_dir is None:
            return Path(self.data_dir)
        return base_dir / self.data_dir
