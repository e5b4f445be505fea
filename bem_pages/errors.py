"""Exception types raised while building the site.

The hierarchy separates failures that abort the whole build (sitemap
problems) from failures scoped to a single document. Document errors carry the
offending source path so the aggregated :class:`SiteBuildError` can report
every broken page in one pass.
"""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc


class BemPagesError(Exception):
    """Base class for all bem_pages errors."""


class SitemapError(BemPagesError):
    """Raised when the sitemap outline is missing or has no usable entries."""


class DuplicateEntryError(SitemapError):
    """Raised in strict mode when two sitemap entries share a URL or file."""


class DocumentError(BemPagesError):
    """Failure tied to a single markdown document."""

    def __init__(self, message: str, *, source: str) -> None:
        super().__init__(message)
        self.source = source


class EmptyDocumentError(DocumentError):
    """Raised when a markdown source is empty or whitespace only."""


class MalformedLinkError(DocumentError):
    """Raised for unclosed link brackets or unclosed link URLs."""


class LinkResolutionError(DocumentError):
    """Raised when a relative link cannot be mapped to a site URL."""


class DuplicateAnchorError(DocumentError):
    """Raised when one document produces the same heading id twice."""


class SiteBuildError(BemPagesError):
    """Aggregate of every per-document failure collected during a build."""

    def __init__(self, failures: cabc.Mapping[str, BaseException]) -> None:
        self.failures = dict(failures)
        lines = [f"{len(self.failures)} page(s) failed to render:"]
        lines.extend(f"- {url}: {exc}" for url, exc in self.failures.items())
        super().__init__("\n".join(lines))


__all__ = [
    "BemPagesError",
    "DocumentError",
    "DuplicateAnchorError",
    "DuplicateEntryError",
    "EmptyDocumentError",
    "LinkResolutionError",
    "MalformedLinkError",
    "SiteBuildError",
    "SitemapError",
]
