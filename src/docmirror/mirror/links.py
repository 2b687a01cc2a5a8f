"""Hyperlink rewriting for documents stored in the offline mirror.

Stored documents reference each other with corpus-absolute paths
(``/language.types``), dotted logical paths (``language.types.array``) and
bare fragments. Once a document is written to ``html/<dir>/<name>.html`` those
references have to be turned into relative ``.html`` links that a browser can
follow from disk.
"""

from __future__ import annotations

import posixpath
import re
from typing import Sequence

HREF_PATTERN = re.compile(r'href="([^"]*)"')

_PASSTHROUGH_PREFIXES = ("//", "mailto:")
_EMPTY_TARGETS = ("", ".", "./")


def calculate_relative_path(source: Sequence[str], target: Sequence[str]) -> str:
    """Compute the minimal relative path from ``source`` to ``target``.

    Both arguments are sequences of path components. One ``..`` is emitted for
    each source component past the common prefix, followed by the remaining
    target components. Returns ``"."`` when both remainders are empty.
    """
    common = 0
    for left, right in zip(source, target):
        if left != right:
            break
        common += 1

    parts = [".."] * (len(source) - common)
    parts.extend(target[common:])
    if not parts:
        return "."
    return "/".join(parts)


def _is_root(current_dir: str | None) -> bool:
    return current_dir in (None, "", ".")


def rewrite_href(url: str, current_dir: str | None = None) -> str:
    """Rewrite a single href value so it resolves inside the mirror."""
    if (
        "://" in url
        or url.startswith(_PASSTHROUGH_PREFIXES)
        or url.endswith(".html")
    ):
        return url

    if url in _EMPTY_TARGETS:
        return "index.html"

    if url.startswith("#"):
        return "index.html" + url

    is_absolute = url.startswith("/")
    if is_absolute:
        url = url[1:]

    if url.endswith("/"):
        url = url[:-1]

    base, sep, fragment = url.partition("#")
    if base in ("", "."):
        base = "index"

    if "." in base and "/" not in base:
        target = base.replace(".", "/")
        if not _is_root(current_dir):
            base = calculate_relative_path(current_dir.split("/"), target.split("/"))
        else:
            base = target
    elif (
        not is_absolute
        and ".." not in url
        and not _is_root(current_dir)
        and "/" not in base
    ):
        base = posixpath.join(current_dir, base)

    if sep:
        return f"{base}.html#{fragment}"
    return f"{base}.html"


def rewrite_links(content: str, current_dir: str | None = None) -> str:
    """Rewrite every ``href="..."`` attribute value in ``content``.

    ``current_dir`` is the ``/``-separated directory of the document relative
    to the mirror root; ``None``, ``""`` and ``"."`` all mean the root.
    """

    def _replace(match: re.Match[str]) -> str:
        return f'href="{rewrite_href(match.group(1), current_dir)}"'

    return HREF_PATTERN.sub(_replace, content)
