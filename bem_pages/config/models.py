"""Typed dataclasses describing the site build configuration."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path

DEFAULT_BUILD_DIR = ".build"
SITEMAP_JSON_NAME = "sitemap.json"


class SiteConfigError(ValueError):
    """Raised when the site configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class SiteConfig:
    """Resolved build settings.

    Attributes
    ----------
    name : str
        Site name, used as the root title when the sitemap has no ``/`` page.
    base_url : str
        Absolute origin used in ``sitemap.xml`` (no trailing slash).
    content_dir : Path
        Directory the sitemap's markdown paths are relative to.
    sitemap : Path
        Location of the indented sitemap outline.
    build_dir : Path
        Directory for intermediate artifacts such as ``sitemap.json``.
    output_dir : Path
        Directory receiving the HTML pages and ``sitemap.xml``.
    pygments_style : str
        Pygments style for highlighted code.
    language : str
        Default ``lang`` of generated pages; a sitemap entry may override it
        with a ``lang`` metadata key.
    strict_sitemap : bool
        Reject duplicate sitemap URLs or files instead of letting the later
        entry win.
    image_mapping : dict[str, str]
        Source image path to hashed file name.
    asset_mapping : dict[str, str]
        Original link target to published asset URL.
    """

    name: str
    base_url: str
    content_dir: Path
    sitemap: Path
    build_dir: Path = Path(DEFAULT_BUILD_DIR)
    output_dir: Path = Path("site")
    pygments_style: str = "monokai"
    language: str = "ru"
    strict_sitemap: bool = False
    image_mapping: dict[str, str] = dc.field(default_factory=dict)
    asset_mapping: dict[str, str] = dc.field(default_factory=dict)

    @property
    def sitemap_json(self) -> Path:
        """Return the path of the serialised page registry."""
        return self.build_dir / SITEMAP_JSON_NAME


__all__ = ["DEFAULT_BUILD_DIR", "SITEMAP_JSON_NAME", "SiteConfig", "SiteConfigError"]
