r"""Parse the indented sitemap outline into a tree of entries.

The outline lives in ``config/sitemap.yml`` under a ``sitemap:`` key. Each
entry is a ``- `` list item of the form ``Title [url, file.md]`` with an
optional trailing ``{layout: 'path'}`` mapping; nesting is expressed with two
spaces of indentation per level:

.. code-block:: yaml

    sitemap:
      - Home [/, index.md]
      - Free [/free, free/index.md]
        - Models [models, free/models.md]

Malformed entries are skipped with a warning so one bad line does not abort
the build.

Example
-------
>>> from bem_pages.sitemap.parser import parse_sitemap_line
>>> parse_sitemap_line("Models [models, free/models.md]").url
'models'
>>> parse_sitemap_line("Invalid format") is None
True
"""

from __future__ import annotations

import dataclasses as dc
import logging
import re
import typing as typ
from types import MappingProxyType

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from bem_pages.errors import SitemapError

from .models import (
    OutlineItem,
    SitemapEntry,
    SitemapLeaf,
    SitemapLine,
    SitemapParent,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

logger = logging.getLogger(__name__)

INDENT_WIDTH = 2
ITEM_PATTERN = re.compile(r"^(\s*)-\s*(.+)$")
ROOT_KEY = "sitemap:"
ENTRY_BODY_PATTERN = re.compile(
    r"^\s*([^,{}]+?)\s*,\s*([^,{}]+?)\s*(?:,\s*(\{.*\}))?\s*$"
)

_meta_loader = YAML(typ="safe")


def _entry_bracket(line: str) -> int:
    """Return the index of the ``[`` that opens the entry body, or ``-1``.

    That is the last unescaped ``[`` outside any ``{...}`` metadata, so titles
    may contain bracketed text of their own.
    """
    position = -1
    depth = 0
    escaped = False
    for index, char in enumerate(line):
        if escaped:
            escaped = False
            continue
        match char:
            case "\\":
                escaped = True
            case "{":
                depth += 1
            case "}":
                depth = max(depth - 1, 0)
            case "[" if depth == 0:
                position = index
    return position


def _parse_meta(text: str, line: str) -> dict[str, typ.Any]:
    try:
        loaded = _meta_loader.load(text)
    except YAMLError:
        logger.warning("Could not parse metadata for sitemap line: %s", line)
        return {}
    if not isinstance(loaded, dict):
        logger.warning("Sitemap metadata is not a mapping: %s", line)
        return {}
    return {str(key): value for key, value in loaded.items()}


def parse_sitemap_line(line: str) -> SitemapLine | None:
    """Parse ``Title [url, file.md]`` or ``Title [url, file.md, {layout: ...}]``.

    Parameters
    ----------
    line : str
        Entry text without the leading ``- `` marker.

    Returns
    -------
    SitemapLine or None
        The parsed entry, or ``None`` when the closing bracket or the comma
        between URL and file is missing. Never raises for malformed input.
    """
    text = line.strip()
    if not text.endswith("]"):
        return None
    opening = _entry_bracket(text)
    if opening < 0:
        return None
    body = ENTRY_BODY_PATTERN.match(text[opening + 1 : -1])
    if not body:
        return None
    url, file, meta_text = body.groups()
    meta = _parse_meta(meta_text, text) if meta_text else {}
    title = text[:opening].strip().replace("\\[", "[")
    return SitemapLine(
        title=title, url=url, file=file, meta=MappingProxyType(meta)
    )


def build_full_url(parent_url: str, child_url: str) -> str:
    """Expand ``child_url`` against ``parent_url``.

    Absolute children win outright. Otherwise one trailing slash is removed
    from the parent (an empty parent acts as the root) and the two are joined
    with ``/``. Double slashes inside the parent are kept verbatim.

    >>> build_full_url("/docs/", "page")
    '/docs/page'
    >>> build_full_url("/docs", "/absolute")
    '/absolute'
    >>> build_full_url("", "relative")
    '/relative'
    """
    if child_url.startswith("/"):
        return child_url
    parent = parent_url.removesuffix("/")
    return f"{parent}/{child_url}"


def _normalise_outline(text: str) -> list[str]:
    """Return outline lines, treating a bare body as the list under ``sitemap:``.

    ``"Home [/, index.md]\\n  - About [/about, about.md]"`` is read as if it had
    been written ``"sitemap:\\n  - Home [/, index.md]\\n  - About ..."``.
    """
    lines = text.splitlines()
    if any(line.strip().startswith(ROOT_KEY) for line in lines):
        return lines
    for index, line in enumerate(lines):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if not stripped.startswith("-"):
            lines[index] = f"{' ' * INDENT_WIDTH}- {stripped}"
        break
    return lines


def parse_indented_sitemap(text: str) -> list[OutlineItem]:
    """Group outline lines into nested :class:`OutlineItem` objects.

    Blank lines, ``#`` comments, and the ``sitemap:`` key are ignored. Each
    item attaches to the most recent item indented less than itself.
    """
    roots: list[OutlineItem] = []
    stack: list[tuple[int, list[OutlineItem]]] = [(-1, roots)]
    for number, line in enumerate(_normalise_outline(text), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith(("#", ROOT_KEY)):
            continue
        match = ITEM_PATTERN.match(line)
        if not match:
            logger.warning(
                "Skipping sitemap line %d without a '- ' marker: %s", number, stripped
            )
            continue
        level = len(match.group(1)) // INDENT_WIDTH
        while len(stack) > 1 and stack[-1][0] >= level:
            stack.pop()
        parent_level = stack[-1][0]
        if parent_level >= 0 and level > parent_level + 1:
            logger.warning(
                "Sitemap line %d is indented more than one level below its parent",
                number,
            )
        item = OutlineItem(text=match.group(2).strip(), line_number=number)
        stack[-1][1].append(item)
        stack.append((level, item.children))
    return roots


@dc.dataclass(slots=True)
class _TreeFrame:
    items: cabc.Iterator[OutlineItem]
    built: list[SitemapEntry] = dc.field(default_factory=list)
    owner: SitemapLine | None = None


def build_tree(outline: cabc.Iterable[OutlineItem]) -> list[SitemapEntry]:
    """Parse every outline item into :class:`SitemapLeaf`/:class:`SitemapParent`.

    Items whose line does not parse are skipped with a warning together with
    everything nested under them. The walk uses an explicit stack, so outline
    depth is unbounded.
    """
    frames = [_TreeFrame(items=iter(outline))]
    while True:
        frame = frames[-1]
        item = next(frame.items, None)
        if item is None:
            frames.pop()
            if not frames:
                return frame.built
            frames[-1].built.append(_make_entry(frame.owner, frame.built))
            continue
        parsed = parse_sitemap_line(item.text)
        if parsed is None:
            logger.warning(
                "Could not parse sitemap line %d: %s", item.line_number, item.text
            )
            if item.children:
                logger.warning(
                    "Skipping %d nested entries under sitemap line %d",
                    len(item.children),
                    item.line_number,
                )
            continue
        frames.append(_TreeFrame(items=iter(item.children), owner=parsed))


def _make_entry(line: SitemapLine | None, children: list[SitemapEntry]) -> SitemapEntry:
    if line is None:  # pragma: no cover - the root frame is never converted
        msg = "Root frame has no sitemap line."
        raise RuntimeError(msg)
    if children:
        return SitemapParent(
            title=line.title,
            url=line.url,
            file=line.file,
            children=tuple(children),
            meta=line.meta,
        )
    return SitemapLeaf(title=line.title, url=line.url, file=line.file, meta=line.meta)


def load_sitemap(path: Path) -> list[SitemapEntry]:
    """Read ``path`` and return its sitemap tree.

    Raises
    ------
    SitemapError
        If the file does not exist or contains no valid entries.
    """
    if not path.exists():
        msg = f"Sitemap file '{path}' not found."
        raise SitemapError(msg)
    tree = build_tree(parse_indented_sitemap(path.read_text(encoding="utf-8")))
    if not tree:
        msg = f"Sitemap file '{path}' contains no valid entries."
        raise SitemapError(msg)
    return tree


__all__ = [
    "build_full_url",
    "build_tree",
    "load_sitemap",
    "parse_indented_sitemap",
    "parse_sitemap_line",
]
