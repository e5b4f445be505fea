"""Unit tests for heading slug generation."""

from __future__ import annotations

import pytest

from bem_pages.anchors import (
    SlugFlavor,
    clean_heading_text,
    github_anchor_variants,
    github_slug,
    hierarchical_slug,
    slugify,
)

SLUG_SAMPLES = [
    "Test Heading",
    "Выбор приложения / Навигация",
    "  Spaces   and__underscores  ",
    "Version 2.0.5 (beta)!",
    "<code>tag</code> soup",
    "Ёлка & «кавычки»",
    "a--b---c",
    "İstanbul",
    "🚗 Emoji heading",
    "",
]


@pytest.mark.parametrize("text", SLUG_SAMPLES)
def test_hierarchical_slug_is_idempotent(text: str) -> None:
    once = slugify(text)
    assert slugify(once) == once


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Test Heading", "test-heading"),
        ("Выбор приложения / Навигация", "выбор-приложения-навигация"),
        ("snake_case words", "snake-case-words"),
        ("Version 2.0", "version-20"),
        ("<em>Bold</em> move", "bold-move"),
        ("!!!", ""),
    ],
)
def test_hierarchical_slug(text: str, expected: str) -> None:
    assert hierarchical_slug(text) == expected


def test_github_slug_strips_version_dots() -> None:
    assert github_slug("2.0.5") == "205"
    assert slugify("2.0.5", SlugFlavor.GITHUB) == "205"


def test_github_slug_drops_punctuation() -> None:
    assert github_slug("What's new?") == "whats-new"
    assert github_slug("7. Выбор приложения") == "7-выбор-приложения"


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("snake_case option", "snake_case-option"),
        ("max_speed limit", "max_speed-limit"),
        ("__init__ method", "__init__-method"),
    ],
)
def test_github_slug_keeps_underscores(text: str, expected: str) -> None:
    assert github_slug(text) == expected


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("1. Introduction", "Introduction"),
        ("2.1. Install", "Install"),
        ("2.1.3. Deep dive", "Deep dive"),
        ("2.4.3", "2.4.3"),
        ("<b>7.</b> Bold number", "Bold number"),
    ],
)
def test_clean_heading_text(text: str, expected: str) -> None:
    assert clean_heading_text(text) == expected


def test_github_anchor_variants_cover_numbered_forms() -> None:
    assert github_anchor_variants("7. Выбор приложения") == [
        "7-выбор-приложения",
        "выбор-приложения",
    ]


def test_github_anchor_variants_prefer_dotless_version() -> None:
    assert github_anchor_variants("2.0.5")[0] == "205"
