"""Markdown extension assigning hierarchical ids to headings.

Every heading gets ``class="article__heading article__heading_level_N"`` and
an ``id`` built from its ancestors' text, and its content is wrapped in a
self-link so readers can copy the anchor. A trailing ``{#custom-id}`` replaces
the generated id and never reaches the output.
"""

from __future__ import annotations

import re
import typing as typ
from xml.etree.ElementTree import SubElement

from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor, UnescapeTreeprocessor
from markdown.util import HTML_PLACEHOLDER_RE

from bem_pages.anchors import (
    HeadingRecord,
    HeadingStack,
    clean_heading_text,
    split_custom_anchor,
)
from bem_pages.errors import DuplicateAnchorError

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    Element = typ.Any

HEADING_TAG_PATTERN = re.compile(r"^h([1-6])$")
HEADING_CLASS = "article__heading"
HEADING_ANCHOR_CLASS = "article__heading-anchor"
TAG_PATTERN = re.compile(r"<[^>]+>")


class HeadingAnchorExtension(Extension):
    """Register :class:`HeadingAnchorTreeprocessor` for one document render.

    Parameters
    ----------
    source : str
        Path of the document being rendered, used in error messages.
    records : list[HeadingRecord], optional
        List the processor appends every heading to, in document order.
    """

    def __init__(
        self, source: str = "<string>", records: list[HeadingRecord] | None = None
    ) -> None:
        super().__init__()
        self.source = source
        self.records = records if records is not None else []

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the heading treeprocessor after inline processing."""
        processor = HeadingAnchorTreeprocessor(md, self.source, self.records)
        md.treeprocessors.register(processor, "bem_heading_anchors", 15)


class HeadingAnchorTreeprocessor(Treeprocessor):
    """Walk headings in document order and assign their ids."""

    def __init__(self, md: Markdown, source: str, records: list[HeadingRecord]) -> None:
        super().__init__(md)
        self.source = source
        self.records = records
        self._unescape = UnescapeTreeprocessor(md)

    def run(self, root: Element) -> Element:
        """Assign ids, wrap heading content, and record every heading."""
        stack = HeadingStack()
        seen: set[str] = set()
        for element in list(root.iter()):
            match = HEADING_TAG_PATTERN.match(str(element.tag))
            if not match:
                continue
            level = int(match.group(1))
            custom = self._strip_custom_anchor(element)
            text = self._plain_text(element)
            cleaned = clean_heading_text(text)
            hierarchical = stack.observe(level, cleaned)
            anchor = custom or hierarchical
            if anchor and anchor in seen:
                msg = (
                    f'Duplicate heading anchor "{anchor}" in {self.source}. '
                    "Give one of the headings an explicit id with the "
                    "{#custom-id} syntax."
                )
                raise DuplicateAnchorError(msg, source=self.source)
            seen.add(anchor)
            self.records.append(
                HeadingRecord(level=level, text=text, anchor=anchor, custom=bool(custom))
            )
            self._decorate(element, level, anchor)
        return root

    @staticmethod
    def _strip_custom_anchor(element: Element) -> str | None:
        """Remove a trailing ``{#id}`` from the heading's last text node."""
        if len(element):
            last = element[-1]
            text, custom = split_custom_anchor(last.tail or "")
            if custom:
                last.tail = text
            return custom
        text, custom = split_custom_anchor(element.text or "")
        if custom:
            element.text = text
        return custom

    def _plain_text(self, element: Element) -> str:
        """Return the heading text without markup or stash placeholders."""

        def _from_stash(match: re.Match[str]) -> str:
            index = int(match.group(1))
            blocks = self.md.htmlStash.rawHtmlBlocks
            block = blocks[index] if index < len(blocks) else ""
            return TAG_PATTERN.sub("", block) if isinstance(block, str) else ""

        text = "".join(element.itertext())
        text = HTML_PLACEHOLDER_RE.sub(_from_stash, text)
        return self._unescape.unescape(text).strip()

    @staticmethod
    def _decorate(element: Element, level: int, anchor: str) -> None:
        existing = element.get("class")
        classes = f"{HEADING_CLASS} {HEADING_CLASS}_level_{level}"
        element.set("class", f"{classes} {existing}" if existing else classes)
        if not anchor:
            return
        element.set("id", anchor)
        if element.find(".//a") is not None:
            return
        children = list(element)
        link = SubElement(element, "a", {"href": f"#{anchor}", "class": HEADING_ANCHOR_CLASS})
        link.text = element.text
        element.text = None
        for child in children:
            element.remove(child)
            link.append(child)


__all__ = ["HeadingAnchorExtension", "HeadingAnchorTreeprocessor"]
