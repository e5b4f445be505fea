"""Turn ``@[youtube](VIDEO_ID)`` paragraphs into responsive video embeds.

>>> from markdown import Markdown
>>> from bem_pages.generator.video import VideoEmbedExtension
>>> html = Markdown(extensions=[VideoEmbedExtension()]).convert("@[youtube](dQw4w9WgXcQ)")
>>> html.startswith('<div class="video">') and 'class="video__iframe"' in html
True
"""

from __future__ import annotations

import re
import typing as typ
from xml.etree.ElementTree import SubElement

from markdown.blockprocessors import BlockProcessor
from markdown.extensions import Extension

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    Element = typ.Any

VIDEO_PATTERN = re.compile(r"^\s*@\[youtube\]\(\s*([A-Za-z0-9_-]+)\s*\)\s*$")
YOUTUBE_EMBED_URL = "https://www.youtube.com/embed/{video_id}?rel=0&modestbranding=1"


class VideoEmbedExtension(Extension):
    """Register :class:`VideoEmbedProcessor` ahead of paragraph parsing."""

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the video block processor."""
        md.parser.blockprocessors.register(
            VideoEmbedProcessor(md.parser), "bem_video_embed", 65
        )


class VideoEmbedProcessor(BlockProcessor):
    """Replace a block consisting of one video directive with an iframe."""

    def test(self, parent: Element, block: str) -> bool:
        return bool(VIDEO_PATTERN.match(block))

    def run(self, parent: Element, blocks: list[str]) -> None:
        match = VIDEO_PATTERN.match(blocks.pop(0))
        if match is None:  # pragma: no cover - guarded by test()
            return
        container = SubElement(parent, "div", {"class": "video"})
        SubElement(
            container,
            "iframe",
            {
                "class": "video__iframe",
                "src": YOUTUBE_EMBED_URL.format(video_id=match.group(1)),
                "title": "YouTube video player",
                "allow": "accelerometer; encrypted-media; gyroscope; picture-in-picture",
                "allowfullscreen": "allowfullscreen",
            },
        )


__all__ = ["VideoEmbedExtension", "VideoEmbedProcessor"]
