"""Terminal rendering helpers built on Rich."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from rich.markup import escape
from rich.table import Table
from rich.text import Text

from docmirror.events import Event, Failed, Installed, Removed, UpToDate
from docmirror.mirror.versions import Catalog, CatalogGroup
from docmirror.models import DocumentEntry, SearchResult


@dataclass(frozen=True, slots=True)
class Palette:
    """Styles used by every renderer; pass a different instance to restyle."""

    title: str = "bold magenta"
    match: str = "bold green"
    slug: str = "cyan"
    muted: str = "dim"
    ok: str = "green"
    warning: str = "yellow"
    error: str = "red"
    installed_mark: str = "[✓]"
    missing_mark: str = "[ ]"


DEFAULT_PALETTE = Palette()


def highlight(text: str, positions: Iterable[int], palette: Palette) -> Text:
    """Return ``text`` with the characters at ``positions`` emphasised."""
    rendered = Text(text)
    for position in positions:
        if 0 <= position < len(text):
            rendered.stylize(palette.match, position, position + 1)
    return rendered


def _styled(text: str, style: str) -> str:
    return f"[{style}]{escape(text)}[/{style}]"


def describe_event(event: Event, palette: Palette) -> str:
    """Rich markup line describing an install or remove outcome."""
    if isinstance(event, Installed):
        return f"{_styled('Installed', palette.ok)} {_styled(event.slug, palette.slug)} ({event.documents} documents)"
    if isinstance(event, UpToDate):
        return f"{_styled(event.slug, palette.slug)} is up to date (mtime {event.mtime})"
    if isinstance(event, Removed):
        return f"{_styled('Removed', palette.ok)} {_styled(event.slug, palette.slug)}"
    if isinstance(event, Failed):
        return f"{_styled('Failed', palette.error)} {_styled(event.slug, palette.slug)}: {escape(event.reason)}"
    raise TypeError(f"Unknown event: {event!r}")


def entries_table(slug: str, entries: Sequence[DocumentEntry], palette: Palette) -> Table:
    table = Table(title=f"Entries in {slug}", show_header=True, header_style=palette.title)
    table.add_column("#", justify="right")
    table.add_column("Name")
    table.add_column("Type", style=palette.muted)
    table.add_column("Path", style=palette.muted)
    for number, entry in enumerate(entries, start=1):
        table.add_row(str(number), entry.name, entry.type, entry.path)
    return table


def results_table(
    query: str, results: Sequence[SearchResult], palette: Palette, slug: str | None = None
) -> Table:
    title = f"Search results for '{escape(query)}'"
    if slug:
        title += f" in {escape(slug)}"
    table = Table(title=title, show_header=True, header_style=palette.title)
    table.add_column("Docset", style=palette.slug)
    table.add_column("Entry")
    table.add_column("Type", style=palette.muted)
    for result in results:
        table.add_row(
            result.slug,
            highlight(result.entry.name, result.positions, palette),
            result.entry.type,
        )
    return table


def catalog_table(
    catalog: Catalog,
    groups: Sequence[CatalogGroup],
    installed: Iterable[str],
    palette: Palette,
) -> Table:
    installed_slugs = set(installed)
    table = Table(title="Available documentation sets", show_header=True, header_style=palette.title)
    table.add_column("")
    table.add_column("Name")
    table.add_column("Versions")
    table.add_column("Description", style=palette.muted)
    for group in groups:
        current = catalog.current(group)
        rows = catalog.versions(group)
        has_installed = any(row.slug in installed_slugs for row in rows)
        mark = palette.installed_mark if has_installed else palette.missing_mark
        versions = ", ".join(f"{row.version or row.release or '-'} ({row.slug})" for row in rows)
        table.add_row(Text(mark), current.name, versions, current.description)
    return table
