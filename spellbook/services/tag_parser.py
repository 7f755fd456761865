"""Formula template parsing"""
import logging
import re
from typing import Dict, Iterator, List, Optional, Tuple

from spellbook.domain.segment import Segment, TagSegment, TextSegment
from spellbook.domain.tag import Tag
from spellbook.interfaces.document_store import IDocumentCollection

logger = logging.getLogger(__name__)

# `#{}` is matched too; its empty slug never resolves to a tag
MARKER_PATTERN = re.compile(r"#\{([^}]*)\}")


def iter_markers(content: str) -> Iterator[Tuple[int, int, str]]:
    """Yield (start, end, slug) for each marker, left to right."""
    for match in MARKER_PATTERN.finditer(content or ''):
        yield match.start(), match.end(), match.group(1)


def split_content(content: str) -> List[Tuple[str, str]]:
    """
    Split a template into ('text', value) and ('tag', slug) parts.

    Unterminated markers stay part of the surrounding text.
    """
    parts: List[Tuple[str, str]] = []
    cursor = 0
    for start, end, slug in iter_markers(content):
        if start > cursor:
            parts.append(('text', content[cursor:start]))
        parts.append(('tag', slug))
        cursor = end
    if content and cursor < len(content):
        parts.append(('text', content[cursor:]))
    return parts


def render_segments(segments: List[Segment]) -> str:
    """Reassemble segments into the template they were parsed from."""
    return ''.join(segment.render() for segment in segments)


class TagParser:
    """Turns formula content into text and tag segments, resolving tags by slug"""

    def __init__(self, tags: IDocumentCollection):
        self.tags = tags

    async def find_tag(self, slug: str) -> Optional[Tag]:
        if not slug:
            return None
        doc = await self.tags.find_one({'slug': slug})
        return Tag.from_document(doc) if doc else None

    async def parse(self, content: str) -> List[Segment]:
        parts = split_content(content)

        resolved: Dict[str, Optional[Tag]] = {}
        for kind, value in parts:
            if kind == 'tag' and value not in resolved:
                resolved[value] = await self.find_tag(value)
                if resolved[value] is None:
                    logger.debug(f"No tag found for marker slug '{value}'")

        segments: List[Segment] = []
        for kind, value in parts:
            if kind == 'text':
                segments.append(TextSegment(value))
            else:
                tag = resolved[value]
                segments.append(TagSegment(
                    slug=value,
                    display_name=tag.display_name if tag else value,
                    tag=tag
                ))
        return segments
