"""Render markdown documents into article HTML with highlighted code."""

from __future__ import annotations

import re
import typing as typ
from html import escape

from markdown import Markdown
from pygments.formatters.html import HtmlFormatter

from bem_pages.links import validate_markdown_source

from .anchors import HeadingAnchorExtension
from .classes import ArticleClassExtension
from .link_rewriter import SitemapLinkExtension
from .models import RenderedPage
from .video import VideoEmbedExtension

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from markdown.extensions import Extension

    from bem_pages.anchors import AnchorIndex, HeadingRecord
    from bem_pages.sitemap import PageRegistry
else:  # pragma: no cover - type-checking fallback
    Extension = typ.Any

CODE_BLOCK_PATTERN = re.compile(r"```([A-Za-z0-9_+#.-]+)?[^\n]*\n(.*?)```", re.DOTALL)
FENCED_INDENT_PATTERN = re.compile(r"^[ ]{1,3}([`~]{3,})", re.MULTILINE)
FENCE_LABEL_PATTERN = re.compile(
    r"^([`~]{3,})([A-Za-z0-9_+#.-]+)?(,[^\r\n]+)$", re.MULTILINE
)
CODEHILITE_OPEN_TAG = re.compile(r'<div class="codehilite">')
START_TAG_PATTERN = re.compile(r"<[a-zA-Z][^<>]*>")
QUOTED_ATTRIBUTE_PATTERN = re.compile(
    r"""(\s[^\s"'=<>`/]+)="([^\s"'=<>`]+)"(?!/)"""
)
BASE_EXTENSIONS = ("fenced_code", "codehilite", "tables", "sane_lists")


def normalize_fenced_blocks(text: str) -> str:
    """Drop fence indentation and ``,extra`` labels Python-Markdown rejects."""
    without_indent = FENCED_INDENT_PATTERN.sub(r"\1", text)

    def _strip_labels(match: re.Match[str]) -> str:
        fence, language, _extras = match.groups()
        label = language or ""
        return f"{fence}{label}"

    return FENCE_LABEL_PATTERN.sub(_strip_labels, without_indent)


def unquote_attributes(html: str) -> str:
    """Drop quotes around attribute values that HTML5 allows unquoted.

    Values that are empty or contain whitespace, quotes, ``=``, ``<``, ``>``
    or backticks keep their quotes.

    >>> unquote_attributes('<h1 class="a b" id="intro">Intro</h1>')
    '<h1 class="a b" id=intro>Intro</h1>'
    """

    def _unquote(match: re.Match[str]) -> str:
        return QUOTED_ATTRIBUTE_PATTERN.sub(r"\1=\2", match.group(0))

    return START_TAG_PATTERN.sub(_unquote, html)


class HtmlContentRenderer:
    """Render markdown into BEM-classed article HTML.

    One renderer can be shared by concurrent page renders: every call builds
    its own ``Markdown`` instance and heading stack.
    """

    def __init__(
        self,
        pygments_style: str = "monokai",
        extensions: cabc.Sequence[Extension | str] = (),
    ) -> None:
        """Initialize a renderer with a pygments style and extra extensions.

        Parameters
        ----------
        pygments_style : str, optional
            Name of the Pygments style used for syntax highlighting. Defaults to
            ``"monokai"``.
        extensions : Sequence[Extension | str], optional
            Additional Python-Markdown extensions applied to every render.
        """
        self.pygments_style = pygments_style
        self.extensions = tuple(extensions)

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks."""
        formatter = HtmlFormatter(style=self.pygments_style, cssclass="codehilite")
        return formatter.get_style_defs(".codehilite")

    def render_document(
        self,
        text: str,
        source: str,
        *,
        registry: PageRegistry | None = None,
        anchors: AnchorIndex | None = None,
        images: cabc.Mapping[str, str] | None = None,
        assets: cabc.Mapping[str, str] | None = None,
    ) -> RenderedPage:
        """Validate and render one content document.

        Parameters
        ----------
        text : str
            Markdown source.
        source : str
            Path of the document relative to the content root.
        registry : PageRegistry, optional
            Frozen page registry; when given, relative links are resolved to
            site URLs.
        anchors : AnchorIndex, optional
            Precomputed heading ids of every page, used to map link fragments.
        images, assets : Mapping[str, str], optional
            Hashed image mapping and asset mapping.

        Returns
        -------
        RenderedPage
            Article HTML and the headings it contains.

        Raises
        ------
        EmptyDocumentError
            If ``text`` is empty.
        MalformedLinkError
            If ``text`` has an unclosed link.
        LinkResolutionError
            If a relative link does not resolve.
        DuplicateAnchorError
            If two headings produce the same id.
        """
        validate_markdown_source(text, source)
        headings: list[HeadingRecord] = []
        extensions = self._article_extensions(source, headings)
        if registry is not None:
            extensions.append(
                SitemapLinkExtension(
                    registry, source, anchors=anchors, images=images, assets=assets
                )
            )
        html = self._convert(normalize_fenced_blocks(text), extensions)
        return RenderedPage(
            file=source,
            html=html,
            headings=tuple(headings),
            url=registry.md2url.get(source) if registry is not None else None,
        )

    def collect_headings(self, text: str, source: str = "<string>") -> list[HeadingRecord]:
        """Return the headings of ``text`` with the ids a full render assigns."""
        headings: list[HeadingRecord] = []
        self._convert(
            normalize_fenced_blocks(text), [HeadingAnchorExtension(source, headings)]
        )
        return headings

    @staticmethod
    def _article_extensions(
        source: str, headings: list[HeadingRecord]
    ) -> list[Extension | str]:
        return [
            HeadingAnchorExtension(source, headings),
            ArticleClassExtension(),
            VideoEmbedExtension(),
        ]

    def _convert(self, normalized: str, extensions: list[Extension | str]) -> str:
        md = Markdown(
            extensions=[*BASE_EXTENSIONS, *self.extensions, *extensions],
            extension_configs={
                "codehilite": {
                    "linenums": False,
                    "guess_lang": False,
                    "css_class": "codehilite",
                    "pygments_style": self.pygments_style,
                }
            },
            output_format="html",
        )
        html = md.convert(normalized)
        return unquote_attributes(self._annotate_codehilite(html, normalized))

    @staticmethod
    def _annotate_codehilite(html: str, source_markdown: str) -> str:
        """Attach the article class and language to each highlighted block."""
        languages = iter(
            match.group(1) or "text"
            for match in CODE_BLOCK_PATTERN.finditer(source_markdown)
        )

        def _repl(_match: re.Match[str]) -> str:
            lang = escape(next(languages, "text"), quote=True)
            return f'<div class="codehilite article__code" data-language="{lang}">'

        return CODEHILITE_OPEN_TAG.sub(_repl, html)


def collect_headings(markdown_text: str, source: str = "<string>") -> list[HeadingRecord]:
    """Return the headings of ``markdown_text`` as a full render would id them.

    Example
    -------
    >>> [h.anchor for h in collect_headings("# Guide\\n\\n## Install")]
    ['guide', 'guide-install']
    """
    return HtmlContentRenderer().collect_headings(markdown_text, source)


__all__ = [
    "CODE_BLOCK_PATTERN",
    "HtmlContentRenderer",
    "collect_headings",
    "normalize_fenced_blocks",
    "unquote_attributes",
]
