"""Typed structures for the sitemap outline, its tree, and the page registry."""

from __future__ import annotations

import dataclasses as dc
import posixpath
import typing as typ
from types import MappingProxyType

if typ.TYPE_CHECKING:
    import collections.abc as cabc


def _frozen(mapping: cabc.Mapping[str, typ.Any] | None = None) -> cabc.Mapping:
    return MappingProxyType(dict(mapping or {}))


@dc.dataclass(frozen=True, slots=True)
class SitemapLine:
    """One parsed ``Title [url, file.md, {meta}]`` entry."""

    title: str
    url: str
    file: str
    meta: cabc.Mapping[str, typ.Any] = dc.field(default_factory=_frozen)


@dc.dataclass(slots=True)
class OutlineItem:
    """A raw outline entry with its nested entries, before line parsing.

    Attributes
    ----------
    text : str
        Entry text with the ``- `` marker and indentation removed.
    line_number : int
        1-based line number in the outline source, used in warnings.
    children : list[OutlineItem]
        Entries indented one level deeper.
    """

    text: str
    line_number: int = 0
    children: list[OutlineItem] = dc.field(default_factory=list)


@dc.dataclass(frozen=True, slots=True)
class SitemapLeaf:
    """A sitemap entry without children."""

    title: str
    url: str
    file: str
    meta: cabc.Mapping[str, typ.Any] = dc.field(default_factory=_frozen)

    @property
    def layout(self) -> str | None:
        """Return the layout override, if any."""
        return self.meta.get("layout")


@dc.dataclass(frozen=True, slots=True)
class SitemapParent:
    """A sitemap entry with at least one child entry."""

    title: str
    url: str
    file: str
    children: tuple[SitemapEntry, ...]
    meta: cabc.Mapping[str, typ.Any] = dc.field(default_factory=_frozen)

    @property
    def layout(self) -> str | None:
        """Return the layout override, if any."""
        return self.meta.get("layout")


SitemapEntry = SitemapLeaf | SitemapParent


@dc.dataclass(frozen=True, slots=True)
class NavBranch:
    """A navigation node whose page has child pages."""

    url: str
    children: tuple[NavNode, ...]


NavNode = str | NavBranch


def nav_to_json(nodes: cabc.Iterable[NavNode]) -> list[typ.Any]:
    """Render navigation nodes as ``["/", {"/docs": ["/docs/api"]}]``."""
    rendered: list[typ.Any] = []
    for node in nodes:
        match node:
            case NavBranch(url=url, children=children):
                rendered.append({url: nav_to_json(children)})
            case str():
                rendered.append(node)
    return rendered


@dc.dataclass(frozen=True, slots=True)
class Page:
    """Flattened registry entry for one sitemap page.

    Attributes
    ----------
    url : str
        Absolute canonical URL, unique across the registry.
    file : str
        Markdown path relative to the content root.
    name : str
        Raw sitemap title.
    title : str
        Breadcrumb-joined document title (``"Models | Free | Home"``).
    section : str | None
        First URL segment, ``None`` for the root page.
    breadcrumbs : tuple[str, ...]
        Ancestor URLs from the top of the tree down to the parent.
    meta : Mapping[str, Any]
        Extra metadata from the sitemap line (``layout`` and friends).
    html : str | None
        Rendered article HTML once the page has been built.
    """

    url: str
    file: str
    name: str
    title: str
    section: str | None
    breadcrumbs: tuple[str, ...] = ()
    meta: cabc.Mapping[str, typ.Any] = dc.field(default_factory=_frozen)
    html: str | None = None

    @property
    def layout(self) -> str | None:
        """Return the layout override, if any."""
        return self.meta.get("layout")

    def to_dict(self) -> dict[str, typ.Any]:
        """Serialise the page the way ``sitemap.json`` stores it."""
        payload: dict[str, typ.Any] = {
            "file": self.file,
            "url": self.url,
            "name": self.name,
            "title": self.title,
            "section": self.section,
            "breadcrumbs": list(self.breadcrumbs),
            **dict(self.meta),
        }
        if self.html is not None:
            payload["html"] = self.html
        return payload


@dc.dataclass(frozen=True, slots=True)
class PageRegistry:
    """Read-only view of every page, shared by all concurrent renders.

    ``md2url`` and ``url2md`` are exact inverses of each other.
    """

    sitemap: tuple[NavNode, ...]
    pages: cabc.Mapping[str, Page]
    md2url: cabc.Mapping[str, str]
    url2md: cabc.Mapping[str, str]

    def page_for_file(self, file: str) -> Page | None:
        """Return the page rendered from ``file``, if it is in the sitemap."""
        url = self.md2url.get(file)
        return self.pages.get(url) if url is not None else None

    def section_for_file(self, file: str) -> str | None:
        """Return the section of the page rendered from ``file``.

        Files outside the sitemap fall back to their first directory.
        """
        page = self.page_for_file(file)
        if page is not None:
            return page.section
        head = posixpath.normpath(file).split("/", 1)
        return head[0] if len(head) > 1 else None

    def with_html(self, html_by_url: cabc.Mapping[str, str]) -> PageRegistry:
        """Return a copy whose pages carry rendered HTML."""
        pages = {
            url: dc.replace(page, html=html_by_url[url]) if url in html_by_url else page
            for url, page in self.pages.items()
        }
        return dc.replace(self, pages=MappingProxyType(pages))

    def to_dict(self) -> dict[str, typ.Any]:
        """Serialise as ``{sitemap, pages, md2url, url2md}``."""
        return {
            "sitemap": nav_to_json(self.sitemap),
            "pages": {url: page.to_dict() for url, page in self.pages.items()},
            "md2url": dict(self.md2url),
            "url2md": dict(self.url2md),
        }


__all__ = [
    "NavBranch",
    "NavNode",
    "OutlineItem",
    "Page",
    "PageRegistry",
    "SitemapEntry",
    "SitemapLeaf",
    "SitemapLine",
    "SitemapParent",
    "nav_to_json",
]
