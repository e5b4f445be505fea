"""Unit tests for flattening the sitemap tree into the page registry."""

from __future__ import annotations

from pathlib import Path

import pytest

from bem_pages.errors import DuplicateEntryError
from bem_pages.sitemap import (
    PageRegistry,
    build_tree,
    flatten,
    load_registry,
    parse_indented_sitemap,
)


def _registry(outline: str, **kwargs: object) -> PageRegistry:
    return flatten(build_tree(parse_indented_sitemap(outline)), **kwargs)  # type: ignore[arg-type]


def test_two_line_outline() -> None:
    registry = _registry("Home [/, index.md]\n  - About [/about, about.md]")
    assert list(registry.sitemap) == ["/", "/about"]
    assert registry.pages["/"].title == "Home"
    assert registry.pages["/about"].title == "About | Home"


def test_nested_pages_get_titles_breadcrumbs_and_sections(registry: PageRegistry) -> None:
    models = registry.pages["/free/models"]
    assert models.title == "Models | Free | Home"
    assert models.breadcrumbs == ("/free",)
    assert models.section == "free"
    assert registry.pages["/"].section is None
    assert registry.pages["/free"].breadcrumbs == ()


def test_section_index_named_like_its_section_is_not_repeated() -> None:
    registry = _registry(
        "sitemap:\n"
        "  - Home [/, index.md]\n"
        "  - Free [/free, free/index.md]\n"
        "    - Free [overview, free/overview.md]\n"
        "    - Models [models, free/models.md]\n"
    )
    assert registry.pages["/free/overview"].title == "Free | Home"
    assert registry.pages["/free/models"].title == "Models | Free | Home"
    assert registry.pages["/free"].title == "Free | Home"


def test_navigation_tree_serialises_nested_branches(registry: PageRegistry) -> None:
    assert registry.to_dict()["sitemap"] == [
        "/",
        {"/free": ["/free/models"]},
        {"/common": ["/common/tweaks"]},
    ]


def test_md2url_and_url2md_are_inverse(registry: PageRegistry) -> None:
    assert registry.md2url["free/models.md"] == "/free/models"
    for file, url in registry.md2url.items():
        assert registry.url2md[url] == file
    for url, file in registry.url2md.items():
        assert registry.md2url[file] == url
    assert len(registry.md2url) == len(registry.url2md) == len(registry.pages)


def test_root_name_defaults_when_sitemap_has_no_root() -> None:
    registry = _registry("About [/about, about.md]", default_root_name="Voyah")
    assert registry.pages["/about"].title == "About | Voyah"


def test_duplicate_url_last_entry_wins() -> None:
    outline = "sitemap:\n  - First [/a, first.md]\n  - Second [/a, second.md]\n"
    registry = _registry(outline)
    assert registry.pages["/a"].file == "second.md"
    assert registry.url2md["/a"] == "second.md"
    assert "first.md" not in registry.md2url


def test_duplicate_url_rejected_in_strict_mode() -> None:
    outline = "sitemap:\n  - First [/a, first.md]\n  - Second [/a, second.md]\n"
    with pytest.raises(DuplicateEntryError, match="/a"):
        _registry(outline, strict=True)


def test_section_for_file_falls_back_to_directory(registry: PageRegistry) -> None:
    assert registry.section_for_file("common/tweaks.md") == "common"
    assert registry.section_for_file("drafts/note.md") == "drafts"
    assert registry.section_for_file("index.md") is None


def test_with_html_returns_copy(registry: PageRegistry) -> None:
    rendered = registry.with_html({"/": "<p>hi</p>"})
    assert rendered.pages["/"].html == "<p>hi</p>"
    assert registry.pages["/"].html is None
    assert rendered.to_dict()["pages"]["/"]["html"] == "<p>hi</p>"
    assert "html" not in rendered.to_dict()["pages"]["/free"]


def test_registry_mappings_are_read_only(registry: PageRegistry) -> None:
    with pytest.raises(TypeError):
        registry.md2url["new.md"] = "/new"  # type: ignore[index]


def test_load_registry_reads_file(tmp_path: Path) -> None:
    path = tmp_path / "sitemap.yml"
    path.write_text("sitemap:\n  - Home [/, index.md]\n", encoding="utf-8")
    assert list(load_registry(path).pages) == ["/"]
