"""Parsed formula segments"""
from dataclasses import dataclass
from typing import Optional, Union

from spellbook.domain.tag import Tag


@dataclass(frozen=True)
class TextSegment:
    """Literal template text between markers"""
    value: str
    kind: str = 'text'

    def render(self) -> str:
        return self.value


@dataclass(frozen=True)
class TagSegment:
    """A #{slug} marker, with the resolved Tag when one exists"""
    slug: str
    display_name: str
    tag: Optional[Tag] = None
    kind: str = 'tag'

    @property
    def resolved(self) -> bool:
        return self.tag is not None

    def render(self) -> str:
        """Original marker text."""
        return f"#{{{self.slug}}}"


Segment = Union[TextSegment, TagSegment]
