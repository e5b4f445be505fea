"""Flatten the sitemap tree into the page registry used by every render."""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ
from types import MappingProxyType

from bem_pages.errors import DuplicateEntryError

from .models import NavBranch, NavNode, Page, PageRegistry, SitemapParent
from .parser import build_full_url, load_sitemap

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from .models import SitemapEntry

logger = logging.getLogger(__name__)

ROOT_URL = "/"
TITLE_SEPARATOR = " | "
DEFAULT_ROOT_NAME = "Home"


@dc.dataclass(slots=True)
class _NavFrame:
    entries: cabc.Iterator[SitemapEntry]
    parent_url: str
    built: list[NavNode] = dc.field(default_factory=list)
    owner_url: str | None = None


def _section(url: str) -> str | None:
    segments = [segment for segment in url.split("/") if segment]
    return segments[0] if segments else None


def flatten(
    tree: cabc.Iterable[SitemapEntry],
    *,
    strict: bool = False,
    default_root_name: str = DEFAULT_ROOT_NAME,
) -> PageRegistry:
    """Walk the tree depth-first and build a :class:`PageRegistry`.

    Parameters
    ----------
    tree : Iterable[SitemapEntry]
        Top-level entries produced by :func:`~bem_pages.sitemap.parser.build_tree`.
    strict : bool, optional
        Reject two entries sharing a URL or a file with
        :class:`~bem_pages.errors.DuplicateEntryError`. By default the later
        entry silently wins.
    default_root_name : str, optional
        Title suffix used when the sitemap has no ``/`` page.

    Returns
    -------
    PageRegistry
        Navigation tree, pages keyed by absolute URL, and the inverse
        ``md2url``/``url2md`` maps.
    """
    ordered: list[Page] = []
    nav = _walk(tree, ordered)

    pages: dict[str, Page] = {}
    files: dict[str, str] = {}
    for page in ordered:
        if page.url in pages or page.file in files:
            if strict:
                msg = (
                    f"Duplicate sitemap entry for url '{page.url}' / file "
                    f"'{page.file}'."
                )
                raise DuplicateEntryError(msg)
            logger.debug("Sitemap entry %s replaces an earlier duplicate", page.url)
        pages[page.url] = page
        files[page.file] = page.url

    md2url = {page.file: url for url, page in pages.items()}
    url2md = {url: file for file, url in md2url.items()}

    root_name = pages[ROOT_URL].name if ROOT_URL in pages else default_root_name
    titled = {
        url: dc.replace(page, title=_page_title(page, pages, root_name))
        for url, page in pages.items()
    }
    return PageRegistry(
        sitemap=nav,
        pages=MappingProxyType(titled),
        md2url=MappingProxyType(md2url),
        url2md=MappingProxyType(url2md),
    )


def _walk(tree: cabc.Iterable[SitemapEntry], ordered: list[Page]) -> tuple[NavNode, ...]:
    """Collect pages in pre-order and return the navigation tree.

    An explicit frame stack keeps arbitrarily deep sitemaps off the Python
    call stack.
    """
    frames = [_NavFrame(entries=iter(tree), parent_url="")]
    while True:
        frame = frames[-1]
        entry = next(frame.entries, None)
        if entry is None:
            frames.pop()
            built = tuple(frame.built)
            if not frames:
                return built
            frames[-1].built.append(NavBranch(url=frame.owner_url or "", children=built))
            continue

        url = build_full_url(frame.parent_url, entry.url)
        ancestors = tuple(
            f.owner_url for f in frames[1:] if f.owner_url and f.owner_url != ROOT_URL
        )
        ordered.append(
            Page(
                url=url,
                file=entry.file,
                name=entry.title,
                title=entry.title,
                section=_section(url),
                breadcrumbs=ancestors,
                meta=entry.meta,
            )
        )
        match entry:
            case SitemapParent(children=children):
                frames.append(
                    _NavFrame(entries=iter(children), parent_url=url, owner_url=url)
                )
            case _:
                frame.built.append(url)


def _page_title(page: Page, pages: cabc.Mapping[str, Page], root_name: str) -> str:
    """Join the page name, its ancestors' names, and the root name.

    A section index page named like its parent section contributes the name
    once: ``Free | Home`` rather than ``Free | Free | Home``.
    """
    if page.url == ROOT_URL:
        return page.name
    parts = [page.name]
    parts.extend(
        pages[crumb].name for crumb in reversed(page.breadcrumbs) if crumb in pages
    )
    parts.append(root_name)
    if len(parts) > 2 and parts[0] == parts[1]:
        del parts[0]
    return TITLE_SEPARATOR.join(parts)


def load_registry(
    path: Path, *, strict: bool = False, default_root_name: str = DEFAULT_ROOT_NAME
) -> PageRegistry:
    """Load the sitemap outline at ``path`` and flatten it."""
    registry = flatten(
        load_sitemap(path), strict=strict, default_root_name=default_root_name
    )
    logger.info("Loaded %d sitemap pages from %s", len(registry.pages), path)
    return registry


__all__ = ["DEFAULT_ROOT_NAME", "ROOT_URL", "flatten", "load_registry"]
