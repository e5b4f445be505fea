"""Cyclopts CLI entrypoint for building the site and checking its links.

The ``pages`` console script renders every page listed in the sitemap and
writes the HTML pages, ``sitemap.json`` and ``sitemap.xml``. ``pages check``
re-reads ``sitemap.json`` and reports broken internal links and fragments.

Examples
--------
Build with the default configuration:

>>> from bem_pages.cli import main
>>> main()  # doctest: +SKIP

Build with a different configuration file:

>>> from bem_pages.cli import app
>>> app(["build", "--config", "config/staging.yaml"])  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import sys
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .config import load_site_config
from .errors import BemPagesError
from .generator import SiteBuilder
from .integrity import LinkIntegrityChecker

DEFAULT_CONFIG = Path("config/site.yaml")

app = App(name="pages", config=cyclopts.config.Env("INPUT_", command=False))  # type: ignore[unknown-argument]

ConfigOption = typ.Annotated[
    Path, Parameter(help="Path to site config", env_var="INPUT_CONFIG")
]
VerboseOption = typ.Annotated[
    bool, Parameter(help="Log build progress", env_var="INPUT_VERBOSE")
]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command(help="Render every sitemap page and write the site artifacts.")
def build(*, config: ConfigOption = DEFAULT_CONFIG, verbose: VerboseOption = False) -> None:
    """Build the site described by ``config``.

    Every page is attempted; successfully rendered pages are written even
    when others fail.

    Parameters
    ----------
    config : Path, optional
        Path to the ``site.yaml`` configuration file (overridable via
        ``INPUT_CONFIG``).
    verbose : bool, optional
        Log build phases at INFO level.

    Raises
    ------
    SystemExit
        With status 1 when the sitemap is unusable or any page failed.
    """
    _configure_logging(verbose)
    site_config = load_site_config(config)
    builder = SiteBuilder(site_config)
    try:
        written = builder.run()
    except BemPagesError as exc:
        print(exc, file=sys.stderr)  # noqa: T201
        raise SystemExit(1) from exc
    for path in written:
        print(f"wrote {_format_path(path)}")  # noqa: T201


@app.command(help="Check internal links and anchors of the last build.")
def check(*, config: ConfigOption = DEFAULT_CONFIG, verbose: VerboseOption = False) -> None:
    """Report links to unknown pages and fragments naming no heading.

    Parameters
    ----------
    config : Path, optional
        Path to the ``site.yaml`` configuration file (overridable via
        ``INPUT_CONFIG``).
    verbose : bool, optional
        Log progress at INFO level.

    Raises
    ------
    SystemExit
        With status 1 when the build artifact is missing or any link is
        broken.
    """
    _configure_logging(verbose)
    site_config = load_site_config(config)
    try:
        checker = LinkIntegrityChecker.from_sitemap_json(
            site_config.sitemap_json, assets=site_config.asset_mapping.values()
        )
    except BemPagesError as exc:
        print(exc, file=sys.stderr)  # noqa: T201
        raise SystemExit(1) from exc
    issues = checker.check()
    for issue in issues:
        print(issue, file=sys.stderr)  # noqa: T201
    if issues:
        raise SystemExit(1)
    print(f"checked {len(checker.html_by_url)} pages, no broken links")  # noqa: T201


def main() -> None:
    """Invoke the Cyclopts application that powers the `pages` console command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
