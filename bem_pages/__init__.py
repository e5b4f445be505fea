"""Build a BEM-classed static site from markdown documents and a sitemap.

This package exposes the CLI entry points used by the ``pages`` console
script to render every page listed in ``sitemap.yml`` and to check the
internal links of the result.

Exports
-------
- ``app``: Cyclopts application with the ``build`` and ``check`` subcommands.
- ``main``: Convenience function that invokes the app.

Examples
--------
>>> from bem_pages import main
>>> main()  # doctest: +SKIP
>>> from bem_pages import app
>>> app.name  # doctest: +SKIP
('pages',)
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
