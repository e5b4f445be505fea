"""Unit tests for the per-document heading stack."""

from __future__ import annotations

import pytest

from bem_pages.anchors import (
    HeadingStack,
    build_hierarchical_anchor,
    clean_heading_text,
    observe_heading,
    split_custom_anchor,
)


def test_sibling_replaces_previous_sibling() -> None:
    stack = HeadingStack()
    assert stack.observe(1, "A") == "a"
    assert stack.observe(2, "B") == "a-b"
    anchor = stack.observe(2, "C")
    assert anchor == "a-c"
    assert "b" not in anchor


def test_numbered_heading_under_cyrillic_parent() -> None:
    stack = HeadingStack()
    stack.observe(1, "Мультимедиа")
    anchor = stack.observe(2, clean_heading_text("7. Выбор приложения навигации"))
    assert anchor == "мультимедиа-выбор-приложения-навигации"


def test_skipped_level_leaves_no_double_hyphen() -> None:
    stack = HeadingStack()
    stack.observe(1, "Guide")
    assert stack.observe(3, "Details") == "guide-details"


def test_new_top_level_heading_discards_subtree() -> None:
    stack = HeadingStack()
    stack.observe(1, "One")
    stack.observe(2, "Sub")
    stack.observe(3, "Deep")
    assert stack.observe(1, "Two") == "two"
    assert stack.entries == ["Two"]


@pytest.mark.parametrize("level", [0, 7])
def test_level_out_of_range(level: int) -> None:
    with pytest.raises(ValueError, match="between 1 and 6"):
        HeadingStack().observe(level, "Bad")


def test_observe_heading_mutates_plain_list() -> None:
    entries: list[str] = []
    assert observe_heading(entries, 1, "Top") == "top"
    assert observe_heading(entries, 2, "Child") == "top-child"
    assert entries == ["Top", "Child"]


def test_build_hierarchical_anchor_skips_empty_parts() -> None:
    assert build_hierarchical_anchor(["Guide", "", "!!!", "Setup"]) == "guide-setup"


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Section {#custom-anchor}", ("Section", "custom-anchor")),
        ("Section {#custom-anchor}  ", ("Section", "custom-anchor")),
        ("Plain section", ("Plain section", None)),
        ("{#only-id}", ("", "only-id")),
    ],
)
def test_split_custom_anchor(text: str, expected: tuple[str, str | None]) -> None:
    assert split_custom_anchor(text) == expected
