"""Command line interface for DocMirror."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional, Sequence

import typer
from rich.console import Console
from rich.markup import escape

from docmirror.config import HOME_ENV_VAR, AppConfig
from docmirror.errors import DocMirrorError, NotInstalledError
from docmirror.events import Event, Failed, Removed
from docmirror.mirror.cache import CacheStore
from docmirror.mirror.search import Searcher
from docmirror.mirror.versions import Catalog, group_catalog
from docmirror.models import Docset, DocumentEntry
from docmirror.remote.client import DevDocsClient
from docmirror.render import (
    DEFAULT_PALETTE,
    Palette,
    catalog_table,
    describe_event,
    entries_table,
    results_table,
)
from docmirror.viewer import open_entry

console = Console()
app = typer.Typer(help="DocMirror - offline DevDocs mirror and fuzzy finder")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _build_config(data_dir: Optional[Path]) -> AppConfig:
    return AppConfig(data_dir=data_dir if data_dir is not None else AppConfig().data_dir)


def _build_cache(config: AppConfig) -> CacheStore:
    return CacheStore(config.resolve_data_dir(Path.cwd()))


def _fail(message: str) -> None:
    console.print(f"[{DEFAULT_PALETTE.error}]{escape(message)}[/{DEFAULT_PALETTE.error}]")
    raise typer.Exit(code=1)


def _pick(items: Sequence, number: int, what: str):
    if not 1 <= number <= len(items):
        raise typer.BadParameter(f"{what} number must be between 1 and {len(items)}")
    return items[number - 1]


def _open(config: AppConfig, cache: CacheStore, slug: str, entry: DocumentEntry) -> None:
    try:
        open_entry(config, cache, slug, entry)
    except DocMirrorError as exc:
        _fail(f"Failed to open {entry.display_entry}: {exc}")


def _show_installed(cache: CacheStore, palette: Palette) -> None:
    slugs = cache.installed()
    if not slugs:
        console.print(f"[{palette.warning}]No documentation installed.[/{palette.warning}]")
        return
    for slug in slugs:
        console.print(f"[{palette.slug}]{escape(slug)}[/{palette.slug}]")


def _show_entries(
    config: AppConfig, cache: CacheStore, slug: str, open_number: Optional[int], palette: Palette
) -> None:
    if not cache.exists(slug):
        _fail(f"Documentation {slug} is not installed. Use 'docmirror download {slug}' first")
    try:
        entries = cache.load_entries(slug)
    except DocMirrorError as exc:
        _fail(str(exc))

    if open_number is not None:
        _open(config, cache, slug, _pick(entries, open_number, "Entry"))
        return
    console.print(entries_table(slug, entries, palette))


def _run_search(
    config: AppConfig,
    cache: CacheStore,
    query: str,
    slug: Optional[str],
    limit: int,
    open_number: Optional[int],
    palette: Palette,
) -> None:
    searcher = Searcher(cache)
    try:
        results = searcher.search(query, slug=slug, limit=limit)
    except NotInstalledError as exc:
        _fail(f"Documentation {exc.slug} is not installed")
    except DocMirrorError as exc:
        _fail(str(exc))

    if not results:
        console.print(f"[{palette.warning}]No matches found.[/{palette.warning}]")
        return

    if open_number is not None:
        result = _pick(results, open_number, "Result")
        _open(config, cache, result.slug, result.entry)
        return

    console.print(results_table(query, results, palette, slug))


def _resolve_docset(catalog: Catalog, name: str) -> Optional[Docset]:
    """Find a catalog row by exact slug, else the newest version of a kind."""
    row = catalog.find(name)
    if row is not None:
        return row
    for group in catalog.groups:
        if group.kind == name.lower():
            return catalog.current(group)
    return None


@app.command("list")
def list_installed(
    data_dir: Path = typer.Option(None, "--data-dir", help="Docset directory"),
) -> None:
    """List downloaded documentation sets."""
    config = _build_config(data_dir)
    _show_installed(_build_cache(config), DEFAULT_PALETTE)


@app.command()
def available(
    filter_text: str = typer.Option("", "--filter", "-f", help="Only show names containing this text"),
    data_dir: Path = typer.Option(None, "--data-dir", help="Docset directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """List documentation sets available for download, grouped by product."""
    _setup_logging(verbose)
    config = _build_config(data_dir)
    cache = _build_cache(config)

    try:
        with DevDocsClient(config) as client:
            catalog = group_catalog(client.list_docsets())
    except DocMirrorError as exc:
        _fail(str(exc))

    groups = catalog.filter(filter_text) if filter_text else catalog.groups
    if not groups:
        console.print("[yellow]No documentation sets match.[/yellow]")
        return
    console.print(catalog_table(catalog, groups, cache.installed(), DEFAULT_PALETTE))


@app.command()
def download(
    slugs: List[str] = typer.Argument(..., help="Docset slugs or product names to install"),
    force: bool = typer.Option(False, "--force", help="Download even when up to date"),
    data_dir: Path = typer.Option(None, "--data-dir", help="Docset directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Download documentation sets and build their offline HTML mirror."""
    _setup_logging(verbose)
    config = _build_config(data_dir)
    cache = _build_cache(config)

    events: List[Event] = []
    with DevDocsClient(config) as client:
        try:
            catalog = group_catalog(client.list_docsets())
        except DocMirrorError as exc:
            _fail(str(exc))

        for name in slugs:
            docset = _resolve_docset(catalog, name)
            if docset is None:
                events.append(Failed(slug=name, reason="not found in catalog"))
                continue
            try:
                events.append(client.install_if_stale(docset, cache, force=force))
            except (DocMirrorError, OSError) as exc:
                events.append(Failed(slug=docset.slug, reason=str(exc)))

    for event in events:
        console.print(describe_event(event, DEFAULT_PALETTE))
    if any(isinstance(event, Failed) for event in events):
        raise typer.Exit(code=1)


@app.command()
def view(
    slug: str = typer.Argument(..., help="Installed docset slug"),
    open_number: Optional[int] = typer.Option(None, "--open", "-o", help="Open entry number N in the viewer"),
    data_dir: Path = typer.Option(None, "--data-dir", help="Docset directory"),
) -> None:
    """List the entries of an installed documentation set."""
    config = _build_config(data_dir)
    _show_entries(config, _build_cache(config), slug, open_number, DEFAULT_PALETTE)


@app.command()
def search(
    query: List[str] = typer.Argument(..., help="Query text"),
    docset: Optional[str] = typer.Option(None, "--docset", "-d", help="Only search this docset"),
    limit: int = typer.Option(50, help="Number of results to display"),
    open_number: Optional[int] = typer.Option(None, "--open", "-o", help="Open result number N in the viewer"),
    data_dir: Path = typer.Option(None, "--data-dir", help="Docset directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Fuzzy-search entry names across installed documentation."""
    _setup_logging(verbose)
    config = _build_config(data_dir)
    _run_search(
        config, _build_cache(config), " ".join(query), docset, limit, open_number, DEFAULT_PALETTE
    )


@app.command()
def remove(
    slug: str = typer.Argument(..., help="Installed docset slug"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    data_dir: Path = typer.Option(None, "--data-dir", help="Docset directory"),
) -> None:
    """Delete an installed documentation set."""
    config = _build_config(data_dir)
    cache = _build_cache(config)
    if not cache.exists(slug):
        _fail(f"Documentation {slug} is not installed")
    if not yes and not typer.confirm(f"Are you sure you want to remove {slug}?"):
        console.print("Aborted.")
        return

    try:
        cache.remove(slug)
        event: Event = Removed(slug=slug)
    except (DocMirrorError, OSError) as exc:
        event = Failed(slug=slug, reason=str(exc))
    console.print(describe_event(event, DEFAULT_PALETTE))
    if isinstance(event, Failed):
        raise typer.Exit(code=1)


@app.command()
def unpack(
    slug: str = typer.Argument(..., help="Installed docset slug"),
    data_dir: Path = typer.Option(None, "--data-dir", help="Docset directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Rebuild the HTML mirror of a docset from its stored content."""
    _setup_logging(verbose)
    config = _build_config(data_dir)
    cache = _build_cache(config)
    try:
        written = cache.unpack(slug)
    except DocMirrorError as exc:
        _fail(str(exc))
    console.print(f"Wrote {written} documents to [bold]{cache.html_dir(slug)}[/bold]")


@app.command()
def go(
    args: List[str] = typer.Argument(None, help="[DOCSET] [QUERY...]"),
    data_dir: Path = typer.Option(None, "--data-dir", help="Docset directory"),
) -> None:
    """Pick what to do from the arguments.

    No arguments lists installed docsets. A single installed slug shows its
    entries. An installed slug followed by terms searches that docset.
    Anything else searches every installed docset for all arguments.
    """
    config = _build_config(data_dir)
    cache = _build_cache(config)
    args = args or []

    if not args:
        _show_installed(cache, DEFAULT_PALETTE)
    elif len(args) == 1 and cache.exists(args[0]):
        _show_entries(config, cache, args[0], None, DEFAULT_PALETTE)
    elif len(args) > 1 and cache.exists(args[0]):
        _run_search(config, cache, " ".join(args[1:]), args[0], 50, None, DEFAULT_PALETTE)
    else:
        _run_search(config, cache, " ".join(args), None, 50, None, DEFAULT_PALETTE)


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
    data_dir: Path = typer.Option(None, "--data-dir", help="Docset directory"),
) -> None:
    """Serve installed mirrors and the search API over HTTP."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover - optional extra
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    from docmirror.web.app import app as web_app

    config = _build_config(data_dir)
    resolved = config.resolve_data_dir(Path.cwd())
    os.environ[HOME_ENV_VAR] = str(resolved)

    console.print(f"Starting web interface on http://{host}:{port} (docsets: {resolved})")
    uvicorn.run(web_app, host=host, port=port, reload=False, log_level="info")
