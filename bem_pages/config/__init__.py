"""Load and validate the site build configuration.

The configuration is a YAML file with a single ``site`` mapping:

.. code-block:: yaml

    site:
      name: Home
      base_url: https://example.com
      content_dir: ../content
      sitemap: sitemap.yml
      image_mapping: ../.build/image-mapping.json

Examples
--------
>>> from pathlib import Path
>>> from bem_pages.config import load_site_config
>>> site = load_site_config(Path("config/site.yaml"))  # doctest: +SKIP
>>> site.base_url  # doctest: +SKIP
'https://example.com'
"""

from .helpers import load_mapping_file
from .loader import load_site_config
from .models import SiteConfig, SiteConfigError

__all__ = ["SiteConfig", "SiteConfigError", "load_mapping_file", "load_site_config"]
