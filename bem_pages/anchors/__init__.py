"""Heading slugs, hierarchical anchors, and the cross-page anchor index."""

from .headings import (
    HeadingRecord,
    HeadingStack,
    build_hierarchical_anchor,
    observe_heading,
    split_custom_anchor,
)
from .index import AnchorIndex, PageAnchors
from .slugs import (
    SlugFlavor,
    clean_heading_text,
    github_anchor_variants,
    github_slug,
    hierarchical_slug,
    slugify,
)

__all__ = [
    "AnchorIndex",
    "HeadingRecord",
    "HeadingStack",
    "PageAnchors",
    "SlugFlavor",
    "build_hierarchical_anchor",
    "clean_heading_text",
    "github_anchor_variants",
    "github_slug",
    "hierarchical_slug",
    "observe_heading",
    "slugify",
    "split_custom_anchor",
]
