"""Shared dataclasses used by the page generation pipeline."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    from bem_pages.anchors import HeadingRecord


@dc.dataclass(frozen=True, slots=True)
class RenderedPage:
    """Article HTML produced from one markdown document.

    Attributes
    ----------
    file : str
        Markdown path relative to the content root.
    html : str
        Rendered article body.
    headings : tuple[HeadingRecord, ...]
        Headings in document order with the ids they were given.
    url : str or None
        Site URL of the page, when the document is in the sitemap.
    """

    file: str
    html: str
    headings: tuple[HeadingRecord, ...] = ()
    url: str | None = None


__all__ = ["RenderedPage"]
