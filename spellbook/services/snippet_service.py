"""Snippet library: lookup by tag and the add-snippet flow"""
import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from spellbook.domain.segment import TagSegment
from spellbook.domain.snippet import Snippet
from spellbook.domain.tag import Tag
from spellbook.exceptions import ValidationError
from spellbook.interfaces.document_store import IDocumentCollection
from spellbook.utils.ids import new_business_id, now_iso

logger = logging.getLogger(__name__)

# `#{Display|slug}` or a bare whitespace-separated word
TAGS_INPUT_PATTERN = re.compile(r"#\{([^|]+)\|([^}]+)\}|(\S+)")

SNIPPET_SORT = [("isTop", "desc", False), ("updatedAt", "desc")]


@dataclass(frozen=True)
class TagRef:
    """A tag named in the add-snippet form"""
    display_name: str
    slug: str


def parse_tags_input(tags_input: str) -> List[TagRef]:
    refs: List[TagRef] = []
    for match in TAGS_INPUT_PATTERN.finditer(tags_input or ''):
        if match.group(1) and match.group(2):
            refs.append(TagRef(display_name=match.group(1).strip(), slug=match.group(2).strip()))
        elif match.group(3):
            word = match.group(3).strip()
            refs.append(TagRef(display_name=word, slug=word))
    return refs


def default_tags_input(segment: Optional[TagSegment]) -> str:
    """Pre-fill for the tags field when adding snippets from a selected tag."""
    if segment is None:
        return ''
    return f"#{{{segment.display_name}|{segment.slug}}}"


class SnippetService:
    """Finds snippets for a tag and adds new ones, creating tags on demand"""

    def __init__(self, tags: IDocumentCollection, snippets: IDocumentCollection):
        self.tags = tags
        self.snippets = snippets

    async def find_for_tag(self, tag: Tag) -> List[Snippet]:
        """
        Snippets whose tagIds reference the tag by business id, slug or
        storage id.

        Business-id matches come first, then slug, then storage id; within
        each group pinned snippets first, newest first. A snippet matching
        several keys is listed once, in its earliest group.
        """
        keys = tag.match_keys()
        query = {'$or': [{'tagIds': {'$elemMatch': {'$eq': key}}} for key in keys]}
        docs = await self.snippets.find(query, sort=SNIPPET_SORT)

        groups: Dict[str, List[Snippet]] = {key: [] for key in keys}
        seen = set()
        for doc in docs:
            snippet = Snippet.from_document(doc)
            if snippet.identity in seen:
                continue
            seen.add(snippet.identity)
            first_key = next(key for key in keys if key in snippet.tag_ids)
            groups[first_key].append(snippet)

        result = [snippet for key in keys for snippet in groups[key]]
        logger.debug(f"Found {len(result)} snippets for tag '{tag.slug}'")
        return result

    async def find_or_create_tag(self, ref: TagRef) -> Tag:
        doc = await self.tags.find_one({'slug': ref.slug})
        if doc:
            return Tag.from_document(doc)

        tag = Tag(
            tag_id=new_business_id('tag'),
            slug=ref.slug,
            display_name=ref.display_name,
            created_at=now_iso()
        )
        stored = await self.tags.upsert(tag.to_document())
        logger.info(f"Created tag '{tag.slug}' ({tag.tag_id})")
        return Tag.from_document(stored[0])

    async def add_snippets(self, tags_input: str, items: Iterable[Dict]) -> List[Snippet]:
        """
        Add one snippet per item, linked to every tag in `tags_input`.

        Args:
            tags_input: '#{Display|slug} other-slug ...'
            items: dicts with 'content' and optional 'short_name'

        Raises:
            ValidationError: no tags, or no item with content
        """
        refs = parse_tags_input(tags_input)
        if not refs:
            raise ValidationError("tags", "Enter at least one tag")

        cleaned = []
        for item in items:
            content = (item.get('content') or '').strip()
            if content:
                short_name = (item.get('short_name') or '').strip()
                cleaned.append((short_name or content, content))
        if not cleaned:
            raise ValidationError("items", "Add at least one snippet")

        tags: List[Tag] = []
        for ref in refs:
            if any(t.slug == ref.slug for t in tags):
                continue
            tags.append(await self.find_or_create_tag(ref))

        timestamp = now_iso()
        new_snippets = [
            Snippet(
                snippet_id=new_business_id('snippet'),
                short_name=short_name,
                content=content,
                tag_ids=[t.tag_id for t in tags],
                created_at=timestamp,
                updated_at=timestamp
            )
            for short_name, content in cleaned
        ]
        stored = await self.snippets.upsert([s.to_document() for s in new_snippets])
        logger.info(f"Added {len(stored)} snippets to tags {[t.slug for t in tags]}")
        return [Snippet.from_document(doc) for doc in stored]
