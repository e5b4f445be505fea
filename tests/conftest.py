"""Shared fixtures for the bem_pages test suite."""

from __future__ import annotations

import typing as typ

import pytest

from bem_pages.config import SiteConfig
from bem_pages.sitemap import build_tree, flatten, parse_indented_sitemap

if typ.TYPE_CHECKING:
    from pathlib import Path

    from bem_pages.sitemap import PageRegistry

SAMPLE_OUTLINE = """\
sitemap:
  - Home [/, index.md]
  - Free [/free, free/index.md]
    - Models [models, free/models.md]
  - Common [/common, common/index.md]
    - Tweaks [tweaks, common/tweaks.md]
"""


@pytest.fixture
def registry() -> PageRegistry:
    """Return the registry of a small two-section site."""
    return flatten(build_tree(parse_indented_sitemap(SAMPLE_OUTLINE)))


@pytest.fixture
def site_factory(tmp_path: Path) -> typ.Callable[[str, dict[str, str]], SiteConfig]:
    """Write a sitemap and content files under ``tmp_path`` and return a config."""

    def _make(outline: str, documents: dict[str, str]) -> SiteConfig:
        content_dir = tmp_path / "content"
        content_dir.mkdir(exist_ok=True)
        for name, text in documents.items():
            path = content_dir / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        sitemap = tmp_path / "sitemap.yml"
        sitemap.write_text(outline, encoding="utf-8")
        return SiteConfig(
            name="Home",
            base_url="https://example.com",
            content_dir=content_dir,
            sitemap=sitemap,
            build_dir=tmp_path / ".build",
            output_dir=tmp_path / "site",
        )

    return _make
