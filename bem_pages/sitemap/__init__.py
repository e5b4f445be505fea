"""Parse ``config/sitemap.yml`` and flatten it into the page registry.

The registry is built once per build, before any document renders, and is
never mutated afterwards.

Examples
--------
>>> from bem_pages.sitemap import build_tree, flatten, parse_indented_sitemap
>>> outline = "Home [/, index.md]\\n  - About [/about, about.md]"
>>> registry = flatten(build_tree(parse_indented_sitemap(outline)))
>>> registry.pages["/about"].title
'About | Home'
"""

from .models import (
    NavBranch,
    NavNode,
    OutlineItem,
    Page,
    PageRegistry,
    SitemapEntry,
    SitemapLeaf,
    SitemapLine,
    SitemapParent,
)
from .parser import (
    build_full_url,
    build_tree,
    load_sitemap,
    parse_indented_sitemap,
    parse_sitemap_line,
)
from .registry import flatten, load_registry

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
    "build_full_url",
    "build_tree",
    "flatten",
    "load_registry",
    "load_sitemap",
    "parse_indented_sitemap",
    "parse_sitemap_line",
]
