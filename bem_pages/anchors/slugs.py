r"""Turn heading text into URL fragment identifiers.

Two flavours are produced. The hierarchical flavour is the one this site
emits in ``id`` attributes; it keeps Latin letters, digits and Cyrillic. The
GitHub flavour mirrors the anchors GitHub generates for the same markdown so
links written against the upstream repository can be mapped back onto our
own anchors.

Examples
--------
>>> from bem_pages.anchors.slugs import github_slug, hierarchical_slug
>>> hierarchical_slug("Выбор приложения / Навигация")
'выбор-приложения-навигация'
>>> github_slug("2.0.5")
'205'
"""

from __future__ import annotations

import enum
import re

TAG_PATTERN = re.compile(r"<[^>]+>")
NUMBERED_PREFIX_PATTERN = re.compile(r"^\d+(?:\.\d+)*\.\s+(?=\S)")
NUMBERED_HEADING_PATTERN = re.compile(r"^(\d+)\.\s*(.+)$")
VERSION_PATTERN = re.compile(r"\d+(?:\.\d+)+")

_PATH_SEPARATORS = re.compile(r"[/\\]+")
_WORD_SEPARATORS = re.compile(r"[\s_]+")
_HIERARCHICAL_DISALLOWED = re.compile(r"[^a-z0-9\u0400-\u04ff-]+")
_GITHUB_PUNCTUATION = re.compile(r"""[!"#$%&'()*+,./:;<=>?@\[\\\]^`{|}~]""")
_GITHUB_SPACES = re.compile(r"\s+")
_HYPHEN_RUNS = re.compile(r"-{2,}")


class SlugFlavor(enum.StrEnum):
    """Anchor generation schemes."""

    HIERARCHICAL = "hierarchical"
    GITHUB = "github"


def _collapse(text: str) -> str:
    return _HYPHEN_RUNS.sub("-", text).strip("-")


def hierarchical_slug(text: str) -> str:
    """Return the site's own slug for ``text``.

    Path separators and whitespace become hyphens, everything outside
    ``[a-z0-9]``, Cyrillic and ``-`` is dropped, and hyphen runs collapse. The
    result may be empty; callers treat an empty slug as a valid anchor part
    that simply contributes nothing.
    """
    slug = TAG_PATTERN.sub("", text.lower())
    slug = _PATH_SEPARATORS.sub("-", slug)
    slug = _WORD_SEPARATORS.sub("-", slug)
    slug = _HIERARCHICAL_DISALLOWED.sub("", slug)
    return _collapse(slug)


def github_slug(text: str) -> str:
    """Return the anchor GitHub renders for a heading with ``text``.

    A heading that is only a dotted version number (``2.0.5``) loses its dots
    instead of gaining hyphens. Underscores survive, as they do on GitHub.
    """
    stripped = text.strip()
    if VERSION_PATTERN.fullmatch(stripped):
        return stripped.replace(".", "")
    slug = _GITHUB_PUNCTUATION.sub("", stripped.lower())
    slug = _GITHUB_SPACES.sub("-", slug)
    return _collapse(slug)


def slugify(text: str, flavor: SlugFlavor = SlugFlavor.HIERARCHICAL) -> str:
    """Dispatch to the slug function for ``flavor``."""
    match flavor:
        case SlugFlavor.GITHUB:
            return github_slug(text)
        case _:
            return hierarchical_slug(text)


def clean_heading_text(text: str) -> str:
    """Strip HTML tags and a leading ``1.``/``2.1.`` numbering prefix.

    Bare version numbers such as ``2.4.3`` are kept because the prefix must be
    followed by whitespace and more text.
    """
    cleaned = TAG_PATTERN.sub("", text).strip()
    return NUMBERED_PREFIX_PATTERN.sub("", cleaned).strip()


def github_anchor_variants(raw_text: str) -> list[str]:
    """Return every GitHub-style anchor a heading may be referenced by.

    Upstream documents reference numbered headings inconsistently, so all of
    these forms are produced, in lookup priority order:

    * the slug of the raw heading text;
    * the slug of the text with its numbering prefix removed;
    * the dot-less form of a version-number heading;
    * ``"{number}-{slug(rest)}"`` and the bare ``slug(rest)`` for ``N. rest``.
    """
    raw = TAG_PATTERN.sub("", raw_text).strip()
    candidates = [github_slug(raw), github_slug(clean_heading_text(raw))]
    if VERSION_PATTERN.fullmatch(raw):
        candidates.append(raw.replace(".", ""))
    numbered = NUMBERED_HEADING_PATTERN.match(raw)
    if numbered:
        number, rest = numbered.groups()
        rest_slug = github_slug(rest)
        candidates.extend((f"{number}-{rest_slug}", rest_slug))

    variants: list[str] = []
    for candidate in candidates:
        if candidate and candidate not in variants:
            variants.append(candidate)
    return variants


__all__ = [
    "SlugFlavor",
    "clean_heading_text",
    "github_anchor_variants",
    "github_slug",
    "hierarchical_slug",
    "slugify",
]
