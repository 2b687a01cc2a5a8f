"""Tests for the DevDocs HTTP client."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest

from docmirror.config import AppConfig
from docmirror.errors import DownloadError
from docmirror.events import Installed, UpToDate
from docmirror.mirror.cache import CacheStore
from docmirror.models import Docset
from docmirror.remote.client import DevDocsClient

CATALOG = [
    {"name": "PHP", "slug": "php", "version": "", "release": "8.3", "mtime": 200},
    {"name": "Python", "slug": "python~3.12", "version": "3.12", "release": "3.12.1", "mtime": 300},
]
INDEX = {"entries": [{"name": "strlen", "path": "function.strlen", "type": "Strings"}], "types": []}
CONTENT = {
    "function.strlen": '<a href="language.types.string">string</a>',
    "index": "<p>PHP</p>",
}


def _config(tmp_path: Path) -> AppConfig:
    return AppConfig(
        data_dir=tmp_path,
        catalog_url="https://devdocs.test/docs.json",
        index_url="https://devdocs.test/docs/{slug}/index.json?{mtime}",
        content_url="https://documents.devdocs.test/{slug}/db.json?{mtime}",
    )


def _handler(requests: list[httpx.Request], content: bytes | None = None):
    def handle(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.host == "devdocs.test" and request.url.path == "/docs.json":
            return httpx.Response(200, json=CATALOG)
        if request.url.path == "/docs/php/index.json":
            return httpx.Response(200, json=INDEX)
        if request.url.host == "documents.devdocs.test" and request.url.path == "/php/db.json":
            if content is not None:
                return httpx.Response(200, content=content)
            return httpx.Response(200, json=CONTENT)
        return httpx.Response(404)

    return handle


def _client_serving(tmp_path: Path, content: bytes) -> DevDocsClient:
    transport = httpx.MockTransport(_handler([], content))
    return DevDocsClient(_config(tmp_path), http_client=httpx.Client(transport=transport))


@pytest.fixture
def requests() -> list[httpx.Request]:
    return []


@pytest.fixture
def client(tmp_path: Path, requests: list[httpx.Request]) -> DevDocsClient:
    transport = httpx.MockTransport(_handler(requests))
    return DevDocsClient(_config(tmp_path), http_client=httpx.Client(transport=transport))


@pytest.fixture
def php() -> Docset:
    return Docset.from_dict(CATALOG[0])


class TestListDocsets:
    """Test catalog listing."""

    def test_list_docsets(self, client: DevDocsClient) -> None:
        docsets = client.list_docsets()
        assert [d.slug for d in docsets] == ["php", "python~3.12"]
        assert docsets[1].version == "3.12"

    def test_catalog_not_a_list(self, tmp_path: Path) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"oops": 1}))
        client = DevDocsClient(_config(tmp_path), http_client=httpx.Client(transport=transport))
        with pytest.raises(DownloadError):
            client.list_docsets()

    def test_http_error(self, tmp_path: Path) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(500))
        client = DevDocsClient(_config(tmp_path), http_client=httpx.Client(transport=transport))
        with pytest.raises(DownloadError) as excinfo:
            client.list_docsets()
        assert excinfo.value.url == "https://devdocs.test/docs.json"

    def test_invalid_json(self, tmp_path: Path) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"<html>"))
        client = DevDocsClient(_config(tmp_path), http_client=httpx.Client(transport=transport))
        with pytest.raises(DownloadError):
            client.list_docsets()


class TestInstall:
    """Test docset installation."""

    def test_urls_carry_mtime(self, client: DevDocsClient, php: Docset) -> None:
        assert client.index_url(php) == "https://devdocs.test/docs/php/index.json?200"
        assert client.content_url(php) == "https://documents.devdocs.test/php/db.json?200"

    def test_fetch_index_and_content(self, client: DevDocsClient, php: Docset) -> None:
        assert json.loads(client.fetch_index(php)) == INDEX
        assert json.loads(client.fetch_content(php)) == CONTENT

    def test_install_writes_layout(self, client: DevDocsClient, php: Docset, tmp_path: Path) -> None:
        cache = CacheStore(tmp_path)
        event = client.install(php, cache)

        assert event == Installed(slug="php", documents=2)
        assert json.loads((tmp_path / "php" / "index.json").read_text()) == INDEX
        assert json.loads((tmp_path / "php" / "db.json").read_text()) == CONTENT
        assert json.loads((tmp_path / "php" / "meta.json").read_text()) == {
            "release": "8.3",
            "version": "",
            "mtime": 200,
        }
        strlen = tmp_path / "php" / "html" / "function" / "strlen.html"
        assert strlen.read_text() == '<a href="../language/types/string.html">string</a>'

    def test_install_if_stale_skips_fresh(
        self, client: DevDocsClient, php: Docset, tmp_path: Path, requests: list[httpx.Request]
    ) -> None:
        cache = CacheStore(tmp_path)
        client.install(php, cache)
        requests.clear()

        assert client.install_if_stale(php, cache) == UpToDate(slug="php", mtime=200)
        assert requests == []

    def test_install_if_stale_force(self, client: DevDocsClient, php: Docset, tmp_path: Path) -> None:
        cache = CacheStore(tmp_path)
        client.install(php, cache)
        assert isinstance(client.install_if_stale(php, cache, force=True), Installed)

    def test_install_if_stale_newer_remote(self, client: DevDocsClient, php: Docset, tmp_path: Path) -> None:
        cache = CacheStore(tmp_path)
        client.install(php, cache)
        php.mtime = 201
        # the mock transport only routes by path, so the newer mtime still resolves
        assert isinstance(client.install_if_stale(php, cache), Installed)
        assert cache.load_meta("php").mtime == 201

    def test_install_missing_docset(self, client: DevDocsClient, tmp_path: Path) -> None:
        cache = CacheStore(tmp_path)
        with pytest.raises(DownloadError):
            client.install(Docset(slug="nope", name="Nope", mtime=1), cache)
        assert not cache.exists("nope")

    def test_install_truncated_content(self, php: Docset, tmp_path: Path) -> None:
        """Should leave no docset directory behind when db.json does not decode."""
        cache = CacheStore(tmp_path)
        client = _client_serving(tmp_path, b"{truncated")

        with pytest.raises(DownloadError, match="malformed content"):
            client.install(php, cache)

        assert not cache.exists("php")
        assert cache.is_stale("php", php.mtime)

    def test_install_non_string_document(self, php: Docset, tmp_path: Path) -> None:
        """Should reject a db.json whose documents are not HTML strings."""
        cache = CacheStore(tmp_path)
        client = _client_serving(tmp_path, b'{"index": null}')

        with pytest.raises(DownloadError):
            client.install(php, cache)
        assert not cache.exists("php")

    def test_bad_update_keeps_previous_install(
        self, client: DevDocsClient, php: Docset, tmp_path: Path
    ) -> None:
        """Should leave the installed copy untouched when an update is malformed."""
        cache = CacheStore(tmp_path)
        client.install(php, cache)
        php.mtime = 201

        with pytest.raises(DownloadError):
            _client_serving(tmp_path, b"{truncated").install_if_stale(php, cache)

        assert cache.load_meta("php").mtime == 200
        assert cache.load_content("php") == CONTENT
        assert (tmp_path / "php" / "html" / "index.html").read_text() == "<p>PHP</p>"
        assert cache.is_stale("php", 201)

    def test_failed_materialize_stays_stale(
        self, client: DevDocsClient, php: Docset, tmp_path: Path
    ) -> None:
        """Should not record freshness until the HTML tree is written."""
        cache = CacheStore(tmp_path)
        with patch.object(CacheStore, "materialize", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                client.install(php, cache)

        assert not (tmp_path / "php" / "meta.json").exists()
        assert cache.is_stale("php", php.mtime)
        assert client.install_if_stale(php, cache) == Installed(slug="php", documents=2)


class TestLifecycle:
    """Test client resource handling."""

    def test_context_manager_closes_owned_client(self, tmp_path: Path) -> None:
        with DevDocsClient(_config(tmp_path)) as client:
            inner = client._client
        assert inner.is_closed

    def test_injected_client_left_open(self, tmp_path: Path) -> None:
        http_client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        with DevDocsClient(_config(tmp_path), http_client=http_client):
            pass
        assert not http_client.is_closed
