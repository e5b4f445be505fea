"""Load the site configuration YAML into a typed dataclass."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from .helpers import (
    _as_bool,
    _base_url,
    _optional_str,
    _resolve_path,
    load_mapping_file,
)
from .models import DEFAULT_BUILD_DIR, SiteConfig, SiteConfigError

DEFAULT_SITE_NAME = "Home"
DEFAULT_PYGMENTS_STYLE = "monokai"
DEFAULT_LANGUAGE = "ru"


def load_site_config(path: Path) -> SiteConfig:
    """Load the YAML configuration describing one site build.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML file (for example ``config/site.yaml``).
        Relative paths inside it are resolved against its directory.

    Returns
    -------
    SiteConfig
        Resolved settings with the image and asset mappings loaded.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    TypeError
        If the top-level YAML structure is not a mapping.
    SiteConfigError
        If the ``site`` section is missing, not a mapping, or holds invalid
        values.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from bem_pages.config import load_site_config
    >>> config = load_site_config(Path("config/site.yaml"))  # doctest: +SKIP
    >>> config.sitemap.name  # doctest: +SKIP
    'sitemap.yml'
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise TypeError(msg)
    raw: dict[str, typ.Any] = dict(loaded)
    site = raw.get("site")
    if not isinstance(site, dict):
        msg = "Configuration must define a 'site' mapping."
        raise SiteConfigError(msg)
    return _build_site_config(site, path.resolve().parent)


def _build_site_config(payload: typ.Mapping[str, typ.Any], base: Path) -> SiteConfig:
    """Build a SiteConfig from the ``site`` mapping, anchoring paths at ``base``."""
    image_mapping = payload.get("image_mapping")
    asset_mapping = payload.get("asset_mapping")
    return SiteConfig(
        name=_optional_str(payload.get("name")) or DEFAULT_SITE_NAME,
        base_url=_base_url(payload.get("base_url")),
        content_dir=_resolve_path(base, payload.get("content_dir"), "."),
        sitemap=_resolve_path(base, payload.get("sitemap"), "sitemap.yml"),
        build_dir=_resolve_path(base, payload.get("build_dir"), DEFAULT_BUILD_DIR),
        output_dir=_resolve_path(base, payload.get("output_dir"), "site"),
        pygments_style=_optional_str(payload.get("pygments_style"))
        or DEFAULT_PYGMENTS_STYLE,
        language=_optional_str(payload.get("language")) or DEFAULT_LANGUAGE,
        strict_sitemap=_as_bool("strict_sitemap", payload.get("strict_sitemap")),
        image_mapping=load_mapping_file(
            _resolve_path(base, image_mapping, "") if image_mapping else None
        ),
        asset_mapping=load_mapping_file(
            _resolve_path(base, asset_mapping, "") if asset_mapping else None
        ),
    )


__all__ = ["load_site_config"]
