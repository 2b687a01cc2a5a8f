"""Launching an external viewer on a materialized document."""

from __future__ import annotations

import logging
import shlex
import subprocess
from typing import List

from docmirror.config import AppConfig
from docmirror.errors import ViewerError
from docmirror.mirror.cache import CacheStore
from docmirror.models import DocumentEntry

LOGGER = logging.getLogger(__name__)


def build_command(config: AppConfig, cache: CacheStore, slug: str, entry: DocumentEntry) -> List[str]:
    html_path, fragment = cache.html_path(slug, entry.path)
    return [*shlex.split(config.viewer), f"{html_path}{fragment}"]


def open_entry(config: AppConfig, cache: CacheStore, slug: str, entry: DocumentEntry) -> None:
    """Run the configured viewer on ``entry`` and wait for it to exit."""
    command = build_command(config, cache, slug, entry)
    LOGGER.debug("Running %s", command)
    try:
        completed = subprocess.run(command, check=False)
    except OSError as exc:
        raise ViewerError(f"Unable to start {command[0]}: {exc}") from exc
    if completed.returncode != 0:
        raise ViewerError(f"{command[0]} exited with status {completed.returncode}")
