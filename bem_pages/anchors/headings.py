"""Track ancestor headings and derive hierarchical anchors.

Each document render owns one :class:`HeadingStack`. Observing a heading
truncates the stack at that heading's level, so a new sibling discards the
previous sibling's subtree before its own text is recorded.

Example
-------
>>> from bem_pages.anchors.headings import HeadingStack
>>> stack = HeadingStack()
>>> stack.observe(1, "Мультимедиа")
'мультимедиа'
>>> stack.observe(2, "Выбор приложения навигации")
'мультимедиа-выбор-приложения-навигации'
"""

from __future__ import annotations

import dataclasses as dc
import re

from .slugs import hierarchical_slug

MIN_LEVEL = 1
MAX_LEVEL = 6
CUSTOM_ANCHOR_PATTERN = re.compile(r"\s*\{#([^}]+)\}\s*$")


@dc.dataclass(slots=True)
class HeadingRecord:
    """A heading as it appears in a rendered document.

    Attributes
    ----------
    level : int
        Heading level, 1 to 6.
    text : str
        Plain heading text with markup and any ``{#id}`` suffix removed, but
        numbering prefixes kept.
    anchor : str
        The ``id`` assigned to the heading.
    custom : bool
        ``True`` when the anchor came from an explicit ``{#id}`` suffix.
    """

    level: int
    text: str
    anchor: str
    custom: bool = False


@dc.dataclass(slots=True)
class HeadingStack:
    """Ancestor heading texts indexed by ``level - 1``."""

    entries: list[str] = dc.field(default_factory=list)

    def observe(self, level: int, cleaned_text: str) -> str:
        """Record a heading and return its hierarchical anchor.

        Parameters
        ----------
        level : int
            Heading level between 1 and 6. Levels may skip (H1 to H3); the
            skipped slot keeps whatever an ancestor left there, or stays
            empty.
        cleaned_text : str
            Heading text already stripped of inline markup, numbering and any
            custom anchor suffix.

        Returns
        -------
        str
            The slugified stack entries up to ``level`` joined with ``-``.
            Empty entries are skipped so no double hyphen appears.

        Raises
        ------
        ValueError
            If ``level`` is outside 1–6.
        """
        if not MIN_LEVEL <= level <= MAX_LEVEL:
            msg = f"Heading level must be between 1 and 6, got {level}."
            raise ValueError(msg)
        del self.entries[level - 1 :]
        while len(self.entries) < level - 1:
            self.entries.append("")
        self.entries.append(cleaned_text)
        return build_hierarchical_anchor(self.entries[:level])


def build_hierarchical_anchor(parts: list[str]) -> str:
    """Join the hierarchical slugs of ``parts``, skipping empty ones."""
    slugs = (hierarchical_slug(part) for part in parts if part and part.strip())
    return "-".join(slug for slug in slugs if slug)


def observe_heading(stack: list[str], level: int, cleaned_text: str) -> str:
    """Functional form of :meth:`HeadingStack.observe` over a plain list.

    ``stack`` is mutated in place exactly as the dataclass would mutate its
    ``entries``.
    """
    return HeadingStack(stack).observe(level, cleaned_text)


def split_custom_anchor(text: str) -> tuple[str, str | None]:
    """Split a trailing ``{#explicit-id}`` off ``text``.

    Returns
    -------
    tuple[str, str | None]
        The text without the suffix and the literal id, or ``(text, None)``
        when no suffix is present.
    """
    match = CUSTOM_ANCHOR_PATTERN.search(text)
    if not match:
        return text, None
    return text[: match.start()].rstrip(), match.group(1).strip()


__all__ = [
    "CUSTOM_ANCHOR_PATTERN",
    "HeadingRecord",
    "HeadingStack",
    "build_hierarchical_anchor",
    "observe_heading",
    "split_custom_anchor",
]
