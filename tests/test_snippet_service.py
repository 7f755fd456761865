"""Unit tests for the snippet library."""
import pytest

from spellbook.domain.segment import TagSegment
from spellbook.domain.tag import Tag
from spellbook.exceptions import ValidationError
from spellbook.services.snippet_service import (
    SnippetService,
    TagRef,
    default_tags_input,
    parse_tags_input,
)


@pytest.fixture
def service(seeded_store):
    return SnippetService(seeded_store.tags, seeded_store.snippets)


async def load_tag(store, slug):
    return Tag.from_document(await store.tags.find_one({'slug': slug}))


def test_parse_tags_input_mixed_forms():
    refs = parse_tags_input("#{Hair Color|hair-color} mood  #{ Light | lighting }")

    assert refs == [
        TagRef(display_name="Hair Color", slug="hair-color"),
        TagRef(display_name="mood", slug="mood"),
        TagRef(display_name="Light", slug="lighting"),
    ]


def test_parse_tags_input_empty():
    assert parse_tags_input("   ") == []


def test_default_tags_input():
    segment = TagSegment(slug="color", display_name="Color")

    assert default_tags_input(segment) == "#{Color|color}"
    assert default_tags_input(None) == ""


@pytest.mark.asyncio
async def test_find_for_tag_matches_all_three_keys(service, seeded_store):
    tag = await load_tag(seeded_store, "color")
    await seeded_store.snippets.upsert({
        "snippetId": "s-by-storage-id", "content": "teal", "tagIds": [tag.storage_id]
    })

    found = await service.find_for_tag(tag)

    assert [s.snippet_id for s in found] == ["s1", "s2", "s-by-storage-id"]


@pytest.mark.asyncio
async def test_find_for_tag_lists_snippet_once(service, seeded_store):
    await seeded_store.snippets.upsert({
        "snippetId": "s-both", "content": "gold", "tagIds": ["color", "t1"],
        "updatedAt": "2024-05-01T00:00:00.000Z"
    })
    tag = await load_tag(seeded_store, "color")

    found = await service.find_for_tag(tag)

    ids = [s.snippet_id for s in found]
    assert ids.count("s-both") == 1
    assert ids == ["s-both", "s1", "s2"]


@pytest.mark.asyncio
async def test_find_for_tag_pinned_first(service, seeded_store):
    await seeded_store.snippets.upsert({
        "snippetId": "s-pinned", "content": "white", "tagIds": ["t1"], "isTop": True,
        "updatedAt": "2020-01-01T00:00:00.000Z"
    })
    tag = await load_tag(seeded_store, "color")

    found = await service.find_for_tag(tag)

    assert found[0].snippet_id == "s-pinned"


@pytest.mark.asyncio
async def test_add_snippets_creates_missing_tags_once(service, seeded_store):
    added = await service.add_snippets(
        "#{Color|color} #{Mood|mood} mood",
        [{"content": "gloomy", "short_name": "Gloom"}, {"content": " sunny "}, {"content": "   "}]
    )

    assert len(added) == 2
    mood_tags = await seeded_store.tags.find({"slug": "mood"})
    assert len(mood_tags) == 1
    mood_tag_id = mood_tags[0]["tagId"]
    assert mood_tag_id.startswith("tag-")
    assert mood_tags[0]["displayName"] == "Mood"
    assert mood_tags[0]["sortOrder"] == 999
    assert mood_tags[0]["isMultiSelect"] is False

    gloomy, sunny = added
    assert gloomy.short_name == "Gloom"
    assert sunny.short_name == "sunny"
    assert sunny.content == "sunny"
    assert gloomy.tag_ids == ["t1", mood_tag_id]
    assert gloomy.snippet_id.startswith("snippet-")
    assert gloomy.snippet_id != sunny.snippet_id
    assert gloomy.is_top is False


@pytest.mark.asyncio
async def test_added_snippets_are_found_for_new_tag(service, seeded_store):
    await service.add_snippets("weather", [{"content": "rainy"}])
    tag = await load_tag(seeded_store, "weather")

    found = await service.find_for_tag(tag)

    assert [s.content for s in found] == ["rainy"]


@pytest.mark.asyncio
async def test_add_snippets_requires_tags(service, seeded_store):
    with pytest.raises(ValidationError) as exc_info:
        await service.add_snippets("  ", [{"content": "x"}])

    assert exc_info.value.field == "tags"
    assert len(await seeded_store.snippets.find({})) == 3


@pytest.mark.asyncio
async def test_add_snippets_requires_content(service, seeded_store):
    with pytest.raises(ValidationError) as exc_info:
        await service.add_snippets("newtag", [{"content": "  "}])

    assert exc_info.value.field == "items"
    assert await seeded_store.tags.find_one({"slug": "newtag"}) is None
