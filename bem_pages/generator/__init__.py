"""Render content documents and assemble the site from the page registry."""

from .anchors import HeadingAnchorExtension
from .classes import ArticleClassExtension
from .link_rewriter import SitemapLinkExtension
from .models import RenderedPage
from .renderer import HtmlContentRenderer, collect_headings, unquote_attributes
from .site_builder import BuildResult, SiteBuilder
from .video import VideoEmbedExtension

__all__ = [
    "ArticleClassExtension",
    "BuildResult",
    "HeadingAnchorExtension",
    "HtmlContentRenderer",
    "RenderedPage",
    "SiteBuilder",
    "SitemapLinkExtension",
    "VideoEmbedExtension",
    "collect_headings",
    "unquote_attributes",
]
