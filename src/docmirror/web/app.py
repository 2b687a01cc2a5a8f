"""FastAPI application serving installed mirrors and the search API."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from pydantic import BaseModel

from docmirror.config import AppConfig
from docmirror.errors import MalformedCatalogError, NotInstalledError
from docmirror.mirror.cache import CacheStore
from docmirror.mirror.paths import resolve
from docmirror.mirror.search import Searcher

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="DocMirror Web", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


class EntryModel(BaseModel):
    name: str
    path: str
    type: str
    url: str


class SearchHit(BaseModel):
    docset: str
    name: str
    path: str
    type: str
    positions: List[int]
    url: str


def _cache() -> CacheStore:
    return CacheStore(AppConfig().resolve_data_dir(Path.cwd()))


def _doc_url(slug: str, doc_path: str) -> str:
    file_path, fragment = resolve(doc_path)
    return f"/docs/{slug}/{file_path}{fragment}"


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


@app.get("/docsets")
async def list_docsets() -> dict[str, Any]:
    cache = _cache()
    docsets = []
    for slug in cache.installed():
        try:
            meta = cache.load_meta(slug).to_dict()
        except (OSError, ValueError):
            meta = None
        docsets.append({"slug": slug, "meta": meta})
    return {"docsets": docsets}


@app.get("/docsets/{slug}/entries")
async def list_entries(slug: str) -> dict[str, List[EntryModel]]:
    cache = _cache()
    try:
        entries = cache.load_entries(slug)
    except NotInstalledError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except MalformedCatalogError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return {
        "entries": [
            EntryModel(name=e.name, path=e.path, type=e.type, url=_doc_url(slug, e.path))
            for e in entries
        ]
    }


@app.get("/search")
async def search_entries(q: str = "", docset: str | None = None, limit: int = 50) -> dict[str, List[SearchHit]]:
    query = q.strip()
    if not query:
        raise HTTPException(status_code=400, detail="Empty query")

    limit = max(1, min(limit, 500))
    searcher = Searcher(_cache())
    try:
        results = searcher.search(query, slug=docset, limit=limit)
    except NotInstalledError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except MalformedCatalogError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return {
        "results": [
            SearchHit(
                docset=r.slug,
                name=r.entry.name,
                path=r.entry.path,
                type=r.entry.type,
                positions=r.positions,
                url=_doc_url(r.slug, r.entry.path),
            )
            for r in results
        ]
    }


@app.get("/docs/{slug}/{file_path:path}")
async def serve_document(slug: str, file_path: str) -> FileResponse:
    cache = _cache()
    if not cache.exists(slug):
        raise HTTPException(status_code=404, detail=f"Documentation {slug} is not installed")

    html_root = cache.html_dir(slug).resolve()
    target = (html_root / (file_path or "index.html")).resolve()
    if not target.is_relative_to(html_root):
        raise HTTPException(status_code=403, detail="Access denied: path is outside the mirror")
    if not target.is_file():
        raise HTTPException(status_code=404, detail=f"Document not found: {file_path}")
    return FileResponse(target, media_type="text/html")


@app.delete("/docsets/{slug}")
async def delete_docset(slug: str) -> dict[str, str]:
    cache = _cache()
    try:
        cache.remove(slug)
    except NotInstalledError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {"status": "ok", "removed": slug}
