"""Tests for the post-build link integrity check."""

from __future__ import annotations

import json
import typing as typ

import pytest

from bem_pages.errors import BemPagesError
from bem_pages.integrity import LinkIntegrityChecker, LinkIssue

if typ.TYPE_CHECKING:
    from pathlib import Path

MODELS_HTML = (
    '<h1 class="article__heading article__heading_level_1" id=models>'
    '<a class="article__heading-anchor" href=#models>Models</a></h1>'
    '<h2 class="article__heading article__heading_level_2" id=models-setup>'
    '<a class="article__heading-anchor" href=#models-setup>Setup</a></h2>'
)


def _checker(home_html: str, **kwargs: typ.Any) -> LinkIntegrityChecker:
    return LinkIntegrityChecker(
        {"/": home_html, "/free/models": MODELS_HTML}, **kwargs
    )


def test_valid_links_produce_no_issues() -> None:
    checker = _checker(
        '<p><a href="/free/models#models-setup">ok</a>'
        '<a href="/free/models/">ok</a>'
        '<a href="https://example.org/x">ext</a>'
        '<a href="mailto:me@example.org">mail</a></p>'
    )
    assert checker.check() == []


def test_unknown_page_is_reported() -> None:
    issues = _checker('<a href="/paid/models">x</a>').check()
    assert issues == [
        LinkIssue(page="/", href="/paid/models", reason="target page is not in the sitemap")
    ]


def test_published_asset_is_not_reported() -> None:
    checker = _checker('<a href="/files/guide.pdf">pdf</a>', assets=["/files/guide.pdf"])
    assert checker.check() == []


def test_missing_fragment_is_reported() -> None:
    issues = _checker('<a href="/free/models#pricing">x</a>').check()
    assert len(issues) == 1
    assert issues[0].reason == "no heading with this id on /free/models"


def test_github_fragment_gets_a_suggestion() -> None:
    issues = _checker('<a href="/free/models#setup">x</a>').check()
    assert len(issues) == 1
    assert issues[0].reason == (
        'no heading with this id on /free/models; use "#models-setup"'
    )


def test_same_page_fragment_checks_own_ids() -> None:
    checker = LinkIntegrityChecker(
        {"/free/models": MODELS_HTML + '<a href="#models">top</a><a href="#nope">x</a>'}
    )
    issues = checker.check()
    assert [issue.href for issue in issues] == ["#nope"]


def test_relative_link_is_reported() -> None:
    issues = _checker('<a href="guide/intro">x</a>').check()
    assert issues[0].reason == "relative link left unresolved"


def test_issue_string_names_page_and_href() -> None:
    issue = LinkIssue(page="/", href="/x", reason="target page is not in the sitemap")
    assert str(issue) == "/: /x (target page is not in the sitemap)"


def test_from_sitemap_json_reads_rendered_html(tmp_path: Path) -> None:
    path = tmp_path / "sitemap.json"
    path.write_text(
        json.dumps(
            {
                "pages": {
                    "/": {"url": "/", "html": '<a href="/gone">x</a>'},
                    "/draft": {"url": "/draft"},
                }
            }
        ),
        encoding="utf-8",
    )
    checker = LinkIntegrityChecker.from_sitemap_json(path)

    assert checker.html_by_url == {"/": '<a href="/gone">x</a>', "/draft": ""}
    assert [issue.href for issue in checker.check()] == ["/gone"]


def test_from_sitemap_json_requires_a_build(tmp_path: Path) -> None:
    with pytest.raises(BemPagesError, match="Run the build first"):
        LinkIntegrityChecker.from_sitemap_json(tmp_path / "sitemap.json")


def test_from_sitemap_json_requires_pages(tmp_path: Path) -> None:
    path = tmp_path / "sitemap.json"
    path.write_text("[]", encoding="utf-8")
    with pytest.raises(BemPagesError, match="no 'pages' mapping"):
        LinkIntegrityChecker.from_sitemap_json(path)
