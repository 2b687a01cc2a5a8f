"""HTTP client for the DevDocs catalog and docset bundles."""

from __future__ import annotations

import json
import logging
from typing import Any, List

import httpx

from docmirror.config import AppConfig
from docmirror.errors import DownloadError
from docmirror.events import Installed, UpToDate
from docmirror.mirror.cache import CacheStore, parse_content, parse_entries
from docmirror.models import DocMeta, Docset

LOGGER = logging.getLogger(__name__)


class DevDocsClient:
    """Fetches the remote catalog and installs docsets into a cache."""

    def __init__(self, config: AppConfig, *, http_client: httpx.Client | None = None) -> None:
        self.config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=config.timeout, follow_redirects=True)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "DevDocsClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _get(self, url: str) -> bytes:
        LOGGER.debug("GET %s", url)
        try:
            response = self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise DownloadError(url, str(exc)) from exc
        return response.content

    def _get_json(self, url: str) -> Any:
        raw = self._get(url)
        try:
            return json.loads(raw)
        except ValueError as exc:
            raise DownloadError(url, "response is not valid JSON") from exc

    def list_docsets(self) -> List[Docset]:
        data = self._get_json(self.config.catalog_url)
        if not isinstance(data, list):
            raise DownloadError(self.config.catalog_url, "catalog is not a list")
        return [Docset.from_dict(item) for item in data]

    def index_url(self, docset: Docset) -> str:
        return self.config.index_url.format(slug=docset.slug, mtime=docset.mtime)

    def content_url(self, docset: Docset) -> str:
        return self.config.content_url.format(slug=docset.slug, mtime=docset.mtime)

    def fetch_index(self, docset: Docset) -> bytes:
        """Download the raw ``index.json`` of ``docset`` after checking it decodes."""
        url = self.index_url(docset)
        raw = self._get(url)
        try:
            parse_entries(raw)
        except ValueError as exc:
            raise DownloadError(url, f"malformed index: {exc}") from exc
        return raw

    def fetch_content(self, docset: Docset) -> bytes:
        """Download the raw ``db.json`` of ``docset`` after checking it decodes."""
        url = self.content_url(docset)
        raw = self._get(url)
        try:
            parse_content(raw)
        except ValueError as exc:
            raise DownloadError(url, f"malformed content: {exc}") from exc
        return raw

    def install(self, docset: Docset, cache: CacheStore) -> Installed:
        """Download ``docset`` into ``cache`` and materialize its HTML tree.

        Both bundles are fetched and decoded before anything touches the
        cache. ``meta.json`` is written last, so an install that fails while
        writing is still stale on the next run.
        """
        LOGGER.info("Downloading %s (mtime %d)", docset.slug, docset.mtime)
        index_raw = self.fetch_index(docset)
        content_raw = self.fetch_content(docset)

        cache.ensure(docset.slug)
        cache.save_index(docset.slug, index_raw)
        cache.save_content(docset.slug, content_raw)
        documents = cache.unpack(docset.slug)
        cache.save_meta(
            docset.slug,
            DocMeta(release=docset.release, version=docset.version, mtime=docset.mtime),
        )
        return Installed(slug=docset.slug, documents=documents)

    def install_if_stale(
        self, docset: Docset, cache: CacheStore, *, force: bool = False
    ) -> Installed | UpToDate:
        if not force and not cache.is_stale(docset.slug, docset.mtime):
            LOGGER.info("%s is up to date", docset.slug)
            return UpToDate(slug=docset.slug, mtime=docset.mtime)
        return self.install(docset, cache)
