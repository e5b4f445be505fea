"""Read-only lookup from page URLs to the anchors their headings carry.

The index is computed once, before any page renders, from every document's
heading set. Link rewriting then maps an inbound fragment (either one of our
hierarchical ids or a GitHub-style anchor written against the upstream
repository) onto the id the target page actually emits, without any render
order dependency between pages.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from types import MappingProxyType
from urllib.parse import quote, unquote

from .slugs import github_anchor_variants, github_slug

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .headings import HeadingRecord


@dc.dataclass(frozen=True, slots=True)
class PageAnchors:
    """Heading ids of one page plus the aliases that point at them."""

    url: str
    ids: frozenset[str]
    aliases: cabc.Mapping[str, str]

    @classmethod
    def from_headings(
        cls, url: str, headings: cabc.Iterable[HeadingRecord]
    ) -> PageAnchors:
        """Build the anchor table for ``url`` from its ordered headings.

        GitHub suffixes repeated slugs with ``-1``, ``-2``; those suffixed
        forms are registered too. When two headings share an alias the first
        heading keeps it.
        """
        ids: set[str] = set()
        aliases: dict[str, str] = {}
        seen_slugs: dict[str, int] = {}
        for heading in headings:
            if not heading.anchor:
                continue
            ids.add(heading.anchor)
            base = github_slug(heading.text)
            count = seen_slugs.get(base)
            if count is None:
                seen_slugs[base] = 1
                candidates = github_anchor_variants(heading.text)
            else:
                seen_slugs[base] = count + 1
                candidates = [f"{base}-{count}", *github_anchor_variants(heading.text)]
            for alias in candidates:
                aliases.setdefault(alias, heading.anchor)
                aliases.setdefault(quote(alias), heading.anchor)
        return cls(url=url, ids=frozenset(ids), aliases=MappingProxyType(aliases))

    def resolve(self, anchor: str) -> str | None:
        """Return the emitted id ``anchor`` refers to, or ``None``."""
        for candidate in dict.fromkeys((anchor, unquote(anchor))):
            if candidate in self.ids:
                return candidate
            if candidate in self.aliases:
                return self.aliases[candidate]
        return None


@dc.dataclass(frozen=True, slots=True)
class AnchorIndex:
    """Anchor tables for every page, keyed by URL."""

    pages: cabc.Mapping[str, PageAnchors] = dc.field(
        default_factory=lambda: MappingProxyType({})
    )

    @classmethod
    def from_headings(
        cls, headings_by_url: cabc.Mapping[str, cabc.Iterable[HeadingRecord]]
    ) -> AnchorIndex:
        """Build an index from ``{url: headings}``."""
        pages = {
            url: PageAnchors.from_headings(url, headings)
            for url, headings in headings_by_url.items()
        }
        return cls(pages=MappingProxyType(pages))

    def resolve(self, url: str, anchor: str) -> str | None:
        """Map ``anchor`` on ``url`` to an emitted id, or ``None``."""
        page = self.pages.get(url)
        if page is None:
            return None
        return page.resolve(anchor)


__all__ = ["AnchorIndex", "PageAnchors"]
