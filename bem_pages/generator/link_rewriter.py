"""Rewrite relative markdown links to the site URLs in the page registry."""

from __future__ import annotations

import typing as typ

from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

from bem_pages.errors import LinkResolutionError
from bem_pages.links import rewrite_href, transform_image_path

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from xml.etree.ElementTree import Element

    from markdown import Markdown

    from bem_pages.anchors import AnchorIndex
    from bem_pages.sitemap import PageRegistry
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    Element = typ.Any


class SitemapLinkExtension(Extension):
    """Rewrite ``<a href>`` and ``<img src>`` for one document.

    Links between content documents are written as relative markdown paths
    (``../free/models.md#section``) so they keep working on GitHub. This
    extension maps them onto absolute site URLs and maps their fragments onto
    the ids the target page emits. Image sources go through the hashed image
    mapping.
    """

    def __init__(
        self,
        registry: PageRegistry,
        current_file: str,
        *,
        anchors: AnchorIndex | None = None,
        images: cabc.Mapping[str, str] | None = None,
        assets: cabc.Mapping[str, str] | None = None,
    ) -> None:
        super().__init__()
        self.registry = registry
        self.current_file = current_file
        self.anchors = anchors
        self.images = images or {}
        self.assets = assets or {}

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the link treeprocessor ahead of heading anchors."""
        processor = SitemapLinkTreeprocessor(md, self)
        md.treeprocessors.register(processor, "bem_sitemap_links", 16)


class SitemapLinkTreeprocessor(Treeprocessor):
    """Resolve every link and image in the parsed tree."""

    def __init__(self, md: Markdown, config: SitemapLinkExtension) -> None:
        super().__init__(md)
        self.config = config

    def run(self, root: Element) -> Element:
        """Rewrite hrefs and image sources in place."""
        for element in root.iter():
            match element.tag:
                case "a":
                    href = element.get("href")
                    if href:
                        element.set("href", self._rewrite(href, element))
                case "img":
                    src = element.get("src")
                    if src and self.config.images:
                        element.set(
                            "src",
                            transform_image_path(
                                src, self.config.images, self.config.current_file
                            ),
                        )
        return root

    def _rewrite(self, href: str, element: Element) -> str:
        try:
            return rewrite_href(
                href,
                self.config.current_file,
                self.config.registry,
                anchors=self.config.anchors,
                assets=self.config.assets,
            )
        except LinkResolutionError as exc:
            label = "".join(element.itertext()).strip()
            msg = f'{exc} Link text: "{label}".'
            raise LinkResolutionError(msg, source=exc.source) from exc


__all__ = ["SitemapLinkExtension", "SitemapLinkTreeprocessor"]
