"""Tests for the concurrent site build and its written artifacts."""

from __future__ import annotations

import asyncio
import json
import shutil
import typing as typ
import xml.etree.ElementTree as ET
from pathlib import Path

import pytest
from bs4 import BeautifulSoup

import bem_pages
from bem_pages.errors import (
    EmptyDocumentError,
    LinkResolutionError,
    SiteBuildError,
    SitemapError,
)
from bem_pages.generator import SiteBuilder
from bem_pages.generator.lastmod import parse_name_only_log
from bem_pages.generator.site_builder import page_filename

if typ.TYPE_CHECKING:
    from bem_pages.config import SiteConfig

OUTLINE = """\
sitemap:
  - Home [/, index.md]
  - Free [/free, free/index.md]
    - Models [models, free/models.md]
  - Broken [/broken, broken.md]
  - Empty [/empty, empty.md]
  - Missing [/missing, missing.md]
"""

DOCUMENTS = {
    "index.md": "# Welcome\n\nSee [setup](free/models.md#setup).\n",
    "free/index.md": "# Free\n\nFree models.\n",
    "free/models.md": "# Models\n\n## Setup\n\nSteps.\n",
    "broken.md": "# Broken\n\n[x](nope.md)\n",
    "empty.md": "",
}

SITEMAP_NS = {"sm": "http://www.sitemaps.org/schemas/sitemap/0.9"}


def _fixed_lastmod(_content_dir: object) -> dict[str, str]:
    return {"index.md": "2024-05-01T10:00:00+00:00"}


@pytest.fixture
def config(site_factory: typ.Callable[[str, dict[str, str]], SiteConfig]) -> SiteConfig:
    return site_factory(OUTLINE, DOCUMENTS)


@pytest.fixture
def builder(config: SiteConfig) -> SiteBuilder:
    return SiteBuilder(config, lastmod=_fixed_lastmod)


def test_build_collects_every_failure(builder: SiteBuilder) -> None:
    result = asyncio.run(builder.build())

    assert set(result.failures) == {"/broken", "/empty", "/missing"}
    assert isinstance(result.failures["/broken"], LinkResolutionError)
    assert isinstance(result.failures["/empty"], EmptyDocumentError)
    assert isinstance(result.failures["/missing"], FileNotFoundError)
    assert set(result.pages) == {"/", "/free", "/free/models"}


def test_successful_pages_are_written_despite_failures(
    builder: SiteBuilder, config: SiteConfig
) -> None:
    with pytest.raises(SiteBuildError) as excinfo:
        builder.run()

    assert set(excinfo.value.failures) == {"/broken", "/empty", "/missing"}
    assert "3 page(s) failed to render" in str(excinfo.value)
    assert (config.output_dir / "index.html").exists()
    assert (config.output_dir / "free_models.html").exists()
    assert not (config.output_dir / "broken.html").exists()


def test_cross_page_fragment_uses_target_heading_id(
    builder: SiteBuilder, config: SiteConfig
) -> None:
    asyncio.run(builder.build())

    soup = BeautifulSoup(
        (config.output_dir / "index.html").read_text(encoding="utf-8"), "html.parser"
    )
    link = soup.find("a", string="setup")
    assert link is not None
    assert link["href"] == "/free/models#models-setup"


def test_page_template_renders_title_and_breadcrumbs(
    builder: SiteBuilder, config: SiteConfig
) -> None:
    asyncio.run(builder.build())

    soup = BeautifulSoup(
        (config.output_dir / "free_models.html").read_text(encoding="utf-8"),
        "html.parser",
    )
    assert soup.title is not None
    assert soup.title.get_text() == "Models | Free | Home"
    assert soup.html["lang"] == "ru"
    crumbs = [link.get_text() for link in soup.select("a.breadcrumbs__link")]
    assert crumbs == ["Free"]
    nav = [link["href"] for link in soup.select("a.aside__link")]
    assert nav == ["/", "/free", "/broken", "/empty", "/missing"]
    assert soup.select("a.aside__link_current") == []
    assert soup.select_one("main.article h1#models") is not None


def test_sitemap_json_carries_rendered_html(
    builder: SiteBuilder, config: SiteConfig
) -> None:
    asyncio.run(builder.build())

    payload = json.loads(config.sitemap_json.read_text(encoding="utf-8"))
    assert payload["md2url"]["free/models.md"] == "/free/models"
    assert payload["url2md"]["/free/models"] == "free/models.md"
    assert "id=models-setup" in payload["pages"]["/free/models"]["html"]
    assert "html" not in payload["pages"]["/broken"]
    assert payload["sitemap"][1] == {"/free": ["/free/models"]}


def test_sitemap_xml_lists_rendered_pages(
    builder: SiteBuilder, config: SiteConfig
) -> None:
    asyncio.run(builder.build())

    root = ET.fromstring((config.output_dir / "sitemap.xml").read_bytes())
    urls = root.findall("sm:url", SITEMAP_NS)
    locs = [url.findtext("sm:loc", namespaces=SITEMAP_NS) for url in urls]
    assert locs == [
        "https://example.com/",
        "https://example.com/free",
        "https://example.com/free/models",
    ]
    assert urls[0].findtext("sm:lastmod", namespaces=SITEMAP_NS) == (
        "2024-05-01T10:00:00+00:00"
    )
    assert urls[1].find("sm:lastmod", SITEMAP_NS) is None


def test_clean_build_returns_written_paths(
    site_factory: typ.Callable[[str, dict[str, str]], SiteConfig],
) -> None:
    config = site_factory(
        "sitemap:\n  - Home [/, index.md]\n",
        {"index.md": "# Home\n"},
    )
    written = SiteBuilder(config, lastmod=lambda _path: {}).run()

    assert written == [
        config.sitemap_json,
        config.output_dir / "index.html",
        config.output_dir / "sitemap.xml",
    ]


def test_unusable_sitemap_aborts_before_rendering(
    site_factory: typ.Callable[[str, dict[str, str]], SiteConfig],
) -> None:
    config = site_factory("sitemap:\n  - not an entry\n", {})

    with pytest.raises(SitemapError):
        SiteBuilder(config, lastmod=lambda _path: {}).run()
    assert not config.output_dir.exists()


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("/", "index.html"),
        ("/about", "about.html"),
        ("/common/tweaks", "common_tweaks.html"),
        ("/docs/", "docs.html"),
    ],
)
def test_page_filename(url: str, expected: str) -> None:
    assert page_filename(url) == expected


def test_parse_name_only_log_keeps_latest_commit_per_file() -> None:
    output = (
        "2024-05-02T09:00:00+00:00\n"
        "\n"
        "index.md\n"
        "free/models.md\n"
        "\n"
        "2024-04-01T09:00:00+00:00\n"
        "\n"
        "index.md\n"
        "free/index.md\n"
    )

    assert parse_name_only_log(output) == {
        "index.md": "2024-05-02T09:00:00+00:00",
        "free/models.md": "2024-05-02T09:00:00+00:00",
        "free/index.md": "2024-04-01T09:00:00+00:00",
    }


def test_layout_metadata_selects_the_page_template(
    site_factory: typ.Callable[[str, dict[str, str]], SiteConfig], tmp_path: Path
) -> None:
    templates = tmp_path / "templates"
    shutil.copytree(Path(bem_pages.__file__).parent / "templates", templates)
    (templates / "landing.html.jinja").write_text(
        "<section class=landing>{{ article | safe }}</section>", encoding="utf-8"
    )
    config = site_factory(
        "sitemap:\n"
        "  - Home [/, index.md, {layout: 'landing.html.jinja'}]\n"
        "  - About [/about, about.md]\n",
        {"index.md": "# Home\n", "about.md": "# About\n"},
    )

    SiteBuilder(config, templates_dir=templates, lastmod=lambda _path: {}).run()

    home = (config.output_dir / "index.html").read_text(encoding="utf-8")
    about = (config.output_dir / "about.html").read_text(encoding="utf-8")
    assert home.startswith("<section class=landing>")
    assert about.startswith("<!DOCTYPE html>")
