"""Build every sitemap page concurrently against a frozen page registry.

The build runs in three phases:

1. The sitemap is parsed and flattened into a :class:`PageRegistry`. Nothing
   renders until it is complete.
2. Every document's headings are collected and frozen into an
   :class:`AnchorIndex`, so cross-page fragments can be mapped without any
   page depending on another page's render.
3. Documents render concurrently, each with its own heading stack. A failing
   document does not cancel its siblings; failures are collected and
   reported together once every render has finished.

Example
-------
>>> from pathlib import Path
>>> from bem_pages.config import load_site_config
>>> from bem_pages.generator import SiteBuilder
>>> builder = SiteBuilder(load_site_config(Path("config/site.yaml")))  # doctest: +SKIP
>>> builder.run()  # doctest: +SKIP
[PosixPath('site/index.html'), ...]
"""

from __future__ import annotations

import asyncio
import dataclasses as dc
import json
import logging
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from bem_pages.anchors import AnchorIndex
from bem_pages.errors import SiteBuildError
from bem_pages.sitemap import NavBranch, load_registry

from .lastmod import git_lastmod
from .renderer import HtmlContentRenderer

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from bem_pages.anchors import HeadingRecord
    from bem_pages.config import SiteConfig
    from bem_pages.sitemap import Page, PageRegistry

    from .models import RenderedPage

logger = logging.getLogger(__name__)

PAGE_TEMPLATE = "page.html.jinja"
SITEMAP_TEMPLATE = "sitemap.xml.jinja"
SITEMAP_XML_NAME = "sitemap.xml"
INDEX_FILENAME = "index.html"

T = typ.TypeVar("T")


def page_filename(url: str) -> str:
    """Return the flat HTML file name a page URL is published as.

    >>> page_filename("/")
    'index.html'
    >>> page_filename("/common/tweaks")
    'common_tweaks.html'
    """
    stripped = url.strip("/")
    if not stripped:
        return INDEX_FILENAME
    return f"{stripped.replace('/', '_')}.html"


@dc.dataclass(slots=True)
class BuildResult:
    """Outcome of one site build.

    Attributes
    ----------
    registry : PageRegistry
        The frozen registry every page rendered against.
    pages : dict[str, RenderedPage]
        Successfully rendered pages keyed by URL.
    written : list[Path]
        Files written, in the order they were written.
    failures : dict[str, BaseException]
        Per-page errors keyed by URL.
    """

    registry: PageRegistry
    pages: dict[str, RenderedPage] = dc.field(default_factory=dict)
    written: list[Path] = dc.field(default_factory=list)
    failures: dict[str, BaseException] = dc.field(default_factory=dict)

    def raise_for_failures(self) -> None:
        """Raise :class:`SiteBuildError` when any page failed."""
        if self.failures:
            raise SiteBuildError(self.failures)


class SiteBuilder:
    """Render the pages of a sitemap and write the site artifacts."""

    def __init__(
        self,
        config: SiteConfig,
        *,
        renderer: HtmlContentRenderer | None = None,
        templates_dir: Path | None = None,
        lastmod: cabc.Callable[[Path], cabc.Mapping[str, str]] | None = None,
    ) -> None:
        """Initialize the builder with configuration and template context.

        Parameters
        ----------
        config : SiteConfig
            Resolved build settings.
        renderer : HtmlContentRenderer, optional
            Renderer shared by all page renders; defaults to one using the
            configured Pygments style.
        templates_dir : Path, optional
            Directory containing the Jinja templates; defaults to the package
            templates.
        lastmod : Callable[[Path], Mapping[str, str]], optional
            Returns commit dates for content files, keyed by path relative to
            the content directory; defaults to :func:`git_lastmod`.
        """
        self.config = config
        self.renderer = renderer or HtmlContentRenderer(config.pygments_style)
        default_templates = Path(__file__).resolve().parents[1] / "templates"
        self.templates_dir = templates_dir or default_templates
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._lastmod = lastmod or git_lastmod

    def run(self) -> list[Path]:
        """Build the site and return the written paths.

        Raises
        ------
        SiteBuildError
            After every page has been attempted and the successful ones
            written, when at least one page failed.
        """
        result = asyncio.run(self.build())
        result.raise_for_failures()
        return result.written

    async def build(self) -> BuildResult:
        """Run every build phase and return the collected outcome.

        Per-page failures are recorded on the result, never raised; sitemap
        errors abort the build before any page renders.
        """
        registry = load_registry(
            self.config.sitemap,
            strict=self.config.strict_sitemap,
            default_root_name=self.config.name,
        )
        result = BuildResult(registry=registry)
        pages = list(registry.pages.values())

        sources = await self._gather(pages, self._read_headings, result.failures)
        anchors = AnchorIndex.from_headings(
            {url: headings for url, (_text, headings) in sources.items()}
        )
        logger.info("Indexed headings of %d pages", len(sources))

        renderable = [page for page in pages if page.url in sources]

        def _render(page: Page) -> RenderedPage:
            text, _headings = sources[page.url]
            return self.renderer.render_document(
                text,
                page.file,
                registry=registry,
                anchors=anchors,
                images=self.config.image_mapping,
                assets=self.config.asset_mapping,
            )

        result.pages = await self._gather(renderable, _render, result.failures)
        logger.info(
            "Rendered %d pages, %d failed", len(result.pages), len(result.failures)
        )
        result.written = self._write_artifacts(result)
        return result

    def _read_headings(self, page: Page) -> tuple[str, list[HeadingRecord]]:
        """Read a page's markdown and collect its heading ids."""
        path = self.config.content_dir / page.file
        text = path.read_text(encoding="utf-8")
        return text, self.renderer.collect_headings(text, page.file)

    @staticmethod
    async def _gather(
        pages: cabc.Sequence[Page],
        work: cabc.Callable[[Page], T],
        failures: dict[str, BaseException],
    ) -> dict[str, T]:
        """Run ``work`` for every page in worker threads, collecting failures."""
        outcomes = await asyncio.gather(
            *(asyncio.to_thread(work, page) for page in pages),
            return_exceptions=True,
        )
        succeeded: dict[str, T] = {}
        for page, outcome in zip(pages, outcomes, strict=True):
            match outcome:
                case Exception():
                    logger.error("Page %s (%s) failed: %s", page.url, page.file, outcome)
                    failures.setdefault(page.url, outcome)
                case BaseException():
                    raise outcome
                case _:
                    succeeded[page.url] = outcome
        return succeeded

    def _write_artifacts(self, result: BuildResult) -> list[Path]:
        written = [self._write_sitemap_json(result)]
        out_dir = self.config.output_dir
        out_dir.mkdir(parents=True, exist_ok=True)
        navigation = self._navigation(result.registry)
        stylesheet = self.renderer.stylesheet
        for url, rendered in result.pages.items():
            page = result.registry.pages[url]
            template = self.env.get_template(page.layout or PAGE_TEMPLATE)
            html = template.render(
                page=page,
                article=rendered.html,
                breadcrumbs=[
                    result.registry.pages[crumb]
                    for crumb in page.breadcrumbs
                    if crumb in result.registry.pages
                ],
                navigation=navigation,
                base_url=self.config.base_url,
                pygments_css=stylesheet,
                lang=page.meta.get("lang", self.config.language),
            )
            output_path = out_dir / page_filename(url)
            output_path.write_text(html, encoding="utf-8")
            written.append(output_path)
        written.append(self._write_sitemap_xml(result))
        return written

    def _write_sitemap_json(self, result: BuildResult) -> Path:
        registry = result.registry.with_html(
            {url: rendered.html for url, rendered in result.pages.items()}
        )
        path = self.config.sitemap_json
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(registry.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8"
        )
        return path

    def _write_sitemap_xml(self, result: BuildResult) -> Path:
        dates = self._lastmod(self.config.content_dir)
        entries = [
            {"url": url, "lastmod": dates.get(page.file)}
            for url, page in result.registry.pages.items()
            if url in result.pages
        ]
        xml = self.env.get_template(SITEMAP_TEMPLATE).render(
            entries=entries, base_url=self.config.base_url
        )
        path = self.config.output_dir / SITEMAP_XML_NAME
        path.write_text(xml, encoding="utf-8")
        return path

    @staticmethod
    def _navigation(registry: PageRegistry) -> list[Page]:
        """Return the top-level sitemap pages in outline order."""
        urls = [node.url if isinstance(node, NavBranch) else node for node in registry.sitemap]
        return [registry.pages[url] for url in urls if url in registry.pages]


__all__ = ["BuildResult", "SiteBuilder", "page_filename"]
