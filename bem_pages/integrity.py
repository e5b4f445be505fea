"""Check internal links and fragments across the rendered site.

Rendering already rejects relative markdown links it cannot resolve. This
pass catches what rendering lets through: absolute links to URLs missing
from the sitemap, and fragments that name no heading on their target page.
It reads the HTML stored in ``sitemap.json``, so it can run on its own after
a build.
"""

from __future__ import annotations

import dataclasses as dc
import json
import logging
import typing as typ
from urllib.parse import unquote, urlsplit

from bs4 import BeautifulSoup

from bem_pages.anchors import HeadingRecord, PageAnchors
from bem_pages.errors import BemPagesError
from bem_pages.links import is_passthrough

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

logger = logging.getLogger(__name__)

ROOT_URL = "/"


@dc.dataclass(frozen=True, slots=True)
class LinkIssue:
    """One broken internal link.

    Attributes
    ----------
    page : str
        URL of the page containing the link.
    href : str
        The link as it appears in the HTML.
    reason : str
        Human readable explanation.
    """

    page: str
    href: str
    reason: str

    def __str__(self) -> str:
        return f"{self.page}: {self.href} ({self.reason})"


def _html_ids(html: str) -> frozenset[str]:
    soup = BeautifulSoup(html, "html.parser")
    return frozenset(str(tag["id"]) for tag in soup.find_all(id=True))


def _normalise_path(path: str) -> str:
    decoded = unquote(path)
    if decoded != ROOT_URL:
        decoded = decoded.rstrip("/") or ROOT_URL
    return decoded


class LinkIntegrityChecker:
    """Validate every ``<a href>`` of the rendered pages.

    Parameters
    ----------
    html_by_url : Mapping[str, str]
        Rendered article HTML keyed by page URL.
    assets : Iterable[str], optional
        Published asset URLs that internal links may point at.
    """

    def __init__(
        self,
        html_by_url: cabc.Mapping[str, str],
        *,
        assets: cabc.Iterable[str] = (),
    ) -> None:
        self.html_by_url = dict(html_by_url)
        self.assets = frozenset(_normalise_path(asset) for asset in assets)
        self.ids = {url: _html_ids(html) for url, html in self.html_by_url.items()}

    @classmethod
    def from_sitemap_json(
        cls, path: Path, *, assets: cabc.Iterable[str] = ()
    ) -> LinkIntegrityChecker:
        """Load rendered pages from a ``sitemap.json`` written by a build.

        Raises
        ------
        BemPagesError
            If the file is missing or holds no ``pages`` mapping.
        """
        if not path.exists():
            msg = f"Build artifact '{path}' not found. Run the build first."
            raise BemPagesError(msg)
        payload = json.loads(path.read_text(encoding="utf-8"))
        pages = payload.get("pages") if isinstance(payload, dict) else None
        if not isinstance(pages, dict):
            msg = f"Build artifact '{path}' has no 'pages' mapping."
            raise BemPagesError(msg)
        html_by_url = {
            url: page.get("html") or ""
            for url, page in pages.items()
            if isinstance(page, dict)
        }
        return cls(html_by_url, assets=assets)

    def check(self) -> list[LinkIssue]:
        """Return every broken link, ordered by page then document order."""
        issues: list[LinkIssue] = []
        for url, html in self.html_by_url.items():
            soup = BeautifulSoup(html, "html.parser")
            for anchor in soup.find_all("a", href=True):
                href = str(anchor["href"])
                reason = self._problem(url, href)
                if reason:
                    issues.append(LinkIssue(page=url, href=href, reason=reason))
        logger.info(
            "Checked links on %d pages, %d issues", len(self.html_by_url), len(issues)
        )
        return issues

    def _problem(self, page_url: str, href: str) -> str | None:
        if href.startswith("#"):
            return self._fragment_problem(page_url, href[1:])
        if href.startswith("//") or not href.startswith("/"):
            return None if is_passthrough(href) else "relative link left unresolved"
        parts = urlsplit(href)
        target = _normalise_path(parts.path)
        if target not in self.html_by_url:
            if target in self.assets:
                return None
            return "target page is not in the sitemap"
        if parts.fragment:
            return self._fragment_problem(target, parts.fragment)
        return None

    def _fragment_problem(self, target: str, fragment: str) -> str | None:
        ids = self.ids.get(target, frozenset())
        if fragment in ids or unquote(fragment) in ids:
            return None
        suggestion = self._suggest(target, fragment)
        if suggestion:
            return f'no heading with this id on {target}; use "#{suggestion}"'
        return f"no heading with this id on {target}"

    def _suggest(self, target: str, fragment: str) -> str | None:
        """Map a GitHub-style fragment to the id the target page emits."""
        anchors = self._anchors(target)
        return anchors.resolve(fragment) if anchors is not None else None

    def _anchors(self, target: str) -> PageAnchors | None:
        html = self.html_by_url.get(target)
        if html is None:
            return None
        soup = BeautifulSoup(html, "html.parser")
        records = [
            HeadingRecord(
                level=int(tag.name[1]),
                text=tag.get_text(strip=True),
                anchor=str(tag["id"]),
            )
            for tag in soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"], id=True)
        ]
        return PageAnchors.from_headings(target, records)


__all__ = ["LinkIntegrityChecker", "LinkIssue"]
