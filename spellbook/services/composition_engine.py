"""Prompt composition: formula + selections -> final prompt text"""
from typing import List, Mapping, Optional

from spellbook.domain.formula import Formula
from spellbook.domain.snippet import Snippet
from spellbook.services.tag_parser import MARKER_PATTERN, iter_markers


def filler(slug: str) -> str:
    """Text emitted for a marker with no selected snippet."""
    return f" random {slug} "


def compose(formula: Optional[Formula], selections: Mapping[str, Snippet]) -> str:
    """
    Replace every marker with its selected snippet's content, or the filler.

    Single left-to-right pass: snippet content that itself looks like a
    marker is never expanded again.
    """
    if formula is None or not formula.content:
        return ''

    def replace(match) -> str:
        slug = match.group(1)
        snippet = selections.get(slug)
        return snippet.content if snippet is not None else filler(slug)

    return MARKER_PATTERN.sub(replace, formula.content)


def list_unresolved_tags(formula: Optional[Formula], selections: Mapping[str, Snippet]) -> List[str]:
    """Marker slugs without a selection, in order, duplicates kept."""
    if formula is None:
        return []
    return [slug for _, _, slug in iter_markers(formula.content) if slug not in selections]

