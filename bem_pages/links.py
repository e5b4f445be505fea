"""Resolve markdown link targets against the page registry.

Content documents link to each other by relative markdown path
(``../free/models.md#anchor``). These helpers map such targets onto absolute
site URLs, map GitHub-style fragments onto the hierarchical ids our headings
carry, and reject relative links nothing can resolve. External URLs,
absolute paths, and ``mailto:`` targets pass through untouched.

Example
-------
>>> from bem_pages.sitemap import build_tree, flatten, parse_indented_sitemap
>>> from bem_pages.links import resolve_link
>>> outline = "sitemap:\\n  - Free [/free, free/index.md]\\n    - Models [models, free/models.md]"
>>> registry = flatten(build_tree(parse_indented_sitemap(outline)))
>>> resolve_link("models.md", "free/index.md", None, registry)
'/free/models'
"""

from __future__ import annotations

import functools
import logging
import posixpath
import re
import typing as typ
from urllib.parse import unquote, urlsplit

from bem_pages.errors import EmptyDocumentError, LinkResolutionError, MalformedLinkError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from bem_pages.anchors import AnchorIndex
    from bem_pages.sitemap import PageRegistry

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIX = ".md"
PASSTHROUGH_PREFIXES = (
    "http://",
    "https://",
    "mailto:",
    "tel:",
    "data:",
    "javascript:",
    "//",
)
CYRILLIC_PATTERN = re.compile(r"[\u0400-\u04ff]")
FENCED_BLOCK_PATTERN = re.compile(
    r"^[ ]{0,3}(`{3,}|~{3,})[^\n]*\n.*?^[ ]{0,3}\1[`~]*[ \t]*$",
    re.MULTILINE | re.DOTALL,
)
UNCLOSED_BRACKET_PATTERN = re.compile(r"\[([^\]\n]+)$", re.MULTILINE)
UNCLOSED_URL_PATTERN = re.compile(r"\[[^\]\n]+\]\([^)\n]*$", re.MULTILINE)
HASHED_IMAGE_PATTERN = re.compile(
    r"^/[a-f0-9]{16}\.(?:png|jpe?g|gif|svg|webp)$", re.IGNORECASE
)


def is_passthrough(target: str) -> bool:
    """Return ``True`` for targets that are never rewritten."""
    return (
        target.startswith("/")
        or target.lower().startswith(PASSTHROUGH_PREFIXES)
        or "://" in target
    )


def _fragment(url: str, anchor: str | None, anchors: AnchorIndex | None) -> str:
    """Return ``#id`` for ``anchor`` on ``url``, preferring the emitted id."""
    if not anchor:
        return ""
    if anchors is not None:
        resolved = anchors.resolve(url, anchor)
        if resolved:
            return f"#{resolved}"
    decoded = unquote(anchor)
    return f"#{decoded}" if CYRILLIC_PATTERN.search(decoded) else f"#{anchor}"


def _find_in_section(
    basename: str, section: str | None, registry: PageRegistry
) -> str | None:
    """Return the first page in ``section`` whose file has ``basename``."""
    if section is None:
        return None
    for page in registry.pages.values():
        if page.section == section and posixpath.basename(page.file) == basename:
            return page.url
    return None


def resolve_link(
    target: str,
    current_file: str,
    anchor: str | None,
    registry: PageRegistry,
    *,
    anchors: AnchorIndex | None = None,
    assets: cabc.Mapping[str, str] | None = None,
) -> str:
    """Resolve a link written in ``current_file`` to an absolute site URL.

    Parameters
    ----------
    target : str
        Link path without its fragment. An empty target means a same-page
        anchor.
    current_file : str
        Path of the linking document relative to the content root.
    anchor : str or None
        Fragment without ``#``.
    registry : PageRegistry
        The frozen page registry.
    anchors : AnchorIndex, optional
        Heading ids per page; when given, GitHub-style fragments are mapped
        to the target's hierarchical ids. Unknown fragments are kept as
        written and surface in the integrity check.
    assets : Mapping[str, str], optional
        Asset mapping from original link targets to published URLs.

    Returns
    -------
    str
        The rewritten href.

    Raises
    ------
    LinkResolutionError
        If a relative ``.md`` target is not in the sitemap, or a relative
        target has any other extension.
    """
    if assets and target in assets:
        return assets[target] + (f"#{anchor}" if anchor else "")
    if not target:
        current_url = registry.md2url.get(current_file, "")
        return _fragment(current_url, anchor, anchors) if anchor else ""
    if is_passthrough(target):
        return target + (f"#{anchor}" if anchor else "")

    base_dir = posixpath.dirname(current_file)
    resolved = posixpath.normpath(posixpath.join(base_dir, target))

    if target.lower().endswith(MARKDOWN_SUFFIX):
        url = registry.md2url.get(resolved)
        if url is None:
            url = _find_in_section(
                posixpath.basename(resolved),
                registry.section_for_file(current_file),
                registry,
            )
        if url is None:
            msg = (
                f'Unknown relative link in {current_file}: "{target}" '
                f'(resolved to "{resolved}"). The markdown file is not listed in '
                "the sitemap."
            )
            raise LinkResolutionError(msg, source=current_file)
        return url + _fragment(url, anchor, anchors)

    if assets and resolved in assets:
        return assets[resolved] + (f"#{anchor}" if anchor else "")
    if posixpath.splitext(resolved)[1]:
        msg = (
            f'Unknown relative link type in {current_file}: "{resolved}". '
            "Only relative links to .md files are resolvable; use an absolute "
            "URL for anything else."
        )
        raise LinkResolutionError(msg, source=current_file)
    return target + (f"#{anchor}" if anchor else "")


def rewrite_href(
    href: str,
    current_file: str,
    registry: PageRegistry,
    *,
    anchors: AnchorIndex | None = None,
    assets: cabc.Mapping[str, str] | None = None,
) -> str:
    """Split ``href`` into path and fragment and pass it to :func:`resolve_link`.

    A query string is carried over onto the resolved URL, ahead of the
    fragment.
    """
    if is_passthrough(href) and not (assets and href in assets):
        return href
    parts = urlsplit(href)
    resolved = resolve_link(
        parts.path,
        current_file,
        parts.fragment or None,
        registry,
        anchors=anchors,
        assets=assets,
    )
    if not parts.query:
        return resolved
    base, hash_mark, fragment = resolved.partition("#")
    return f"{base}?{parts.query}{hash_mark}{fragment}"


def validate_markdown_source(text: str, source: str) -> None:
    """Reject empty documents and visibly broken inline link syntax.

    Fenced code blocks are ignored by the link checks.

    Raises
    ------
    EmptyDocumentError
        If ``text`` is empty or whitespace only.
    MalformedLinkError
        If a line ends inside ``[...`` or inside ``[...](...``.
    """
    if not text.strip():
        msg = (
            f"Empty markdown input in {source}. Markdown files must contain "
            "content."
        )
        raise EmptyDocumentError(msg, source=source)

    prose = FENCED_BLOCK_PATTERN.sub("", text)
    bracket = UNCLOSED_BRACKET_PATTERN.search(prose)
    if bracket:
        msg = (
            f'Malformed markdown syntax in {source}: unclosed link bracket '
            f'"[{bracket.group(1)}". Links must be closed with "](...)".'
        )
        raise MalformedLinkError(msg, source=source)
    url = UNCLOSED_URL_PATTERN.search(prose)
    if url:
        msg = (
            f'Malformed markdown syntax in {source}: unclosed link URL '
            f'"{url.group(0)}". Links must be closed with ")".'
        )
        raise MalformedLinkError(msg, source=source)


@functools.cache
def _warn_unmapped_image(path: str) -> None:
    logger.warning("Unmapped image: %s", path)


def transform_image_path(
    src: str, mapping: cabc.Mapping[str, str], current_file: str = ""
) -> str:
    """Return the hashed ``/<hash>.<ext>`` path for an image source.

    Lookup order: the path as written, the path relative to the current
    document, the path under the current section, then any mapped file with
    the same basename. Unmapped images are left as written and logged once.
    """
    if (
        not src
        or src.startswith(("http://", "https://", "data:", "//"))
        or HASHED_IMAGE_PATTERN.match(src)
    ):
        return src
    normalized = src.lstrip("/").replace("\\", "/")
    candidates = [normalized]
    if current_file and not src.startswith("/"):
        candidates.append(
            posixpath.normpath(posixpath.join(posixpath.dirname(current_file), normalized))
        )
    section = current_file.split("/", 1)[0] if "/" in current_file else None
    if section:
        candidates.append(f"{section}/{normalized}")
    for candidate in candidates:
        if candidate in mapping:
            return f"/{mapping[candidate]}"

    basename = posixpath.basename(normalized)
    for mapped_path, hashed in mapping.items():
        if posixpath.basename(mapped_path) == basename:
            return f"/{hashed}"
    _warn_unmapped_image(normalized)
    return src


__all__ = [
    "is_passthrough",
    "resolve_link",
    "rewrite_href",
    "transform_image_path",
    "validate_markdown_source",
]
