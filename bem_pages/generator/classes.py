"""Attach BEM ``article__*`` classes to generated block and inline elements."""

from __future__ import annotations

import typing as typ

from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    Element = typ.Any

ARTICLE_CLASSES: dict[str, str] = {
    "p": "article__paragraph",
    "a": "article__link",
    "ul": "article__list",
    "ol": "article__list article__list_ordered",
    "li": "article__list-item",
    "blockquote": "article__blockquote",
    "img": "article__image",
    "table": "article__table",
    "thead": "article__table-head",
    "tbody": "article__table-body",
    "tr": "article__table-row",
    "th": "article__table-cell article__table-cell_header",
    "td": "article__table-cell",
}


class ArticleClassExtension(Extension):
    """Register :class:`ArticleClassTreeprocessor`."""

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Run after heading anchors so their self-links keep their own class."""
        md.treeprocessors.register(ArticleClassTreeprocessor(md), "bem_article_classes", 14)


class ArticleClassTreeprocessor(Treeprocessor):
    """Add the article class for each known tag unless one is already set."""

    def run(self, root: Element) -> Element:
        for element in root.iter():
            css_class = ARTICLE_CLASSES.get(str(element.tag))
            if css_class and not element.get("class"):
                element.set("class", css_class)
        return root


__all__ = ["ARTICLE_CLASSES", "ArticleClassExtension"]
