"""Unit tests for the tag parser."""
import pytest

from spellbook.domain.segment import TagSegment, TextSegment
from spellbook.services.tag_parser import TagParser, iter_markers, render_segments, split_content


@pytest.fixture
def parser(seeded_store):
    return TagParser(seeded_store.tags)


@pytest.mark.asyncio
async def test_parse_resolves_known_tag(parser):
    """Known slugs carry their Tag and display name."""
    segments = await parser.parse("A #{color} cat")

    assert segments[0] == TextSegment("A ")
    assert segments[2] == TextSegment(" cat")
    tag_segment = segments[1]
    assert isinstance(tag_segment, TagSegment)
    assert tag_segment.slug == "color"
    assert tag_segment.display_name == "Color"
    assert tag_segment.tag.tag_id == "t1"
    assert tag_segment.resolved


@pytest.mark.asyncio
async def test_parse_unknown_tag_falls_back_to_slug(parser):
    segments = await parser.parse("#{weather}")

    assert len(segments) == 1
    assert segments[0].tag is None
    assert segments[0].display_name == "weather"
    assert not segments[0].resolved


@pytest.mark.asyncio
async def test_parse_empty_content(parser):
    assert await parser.parse("") == []


@pytest.mark.asyncio
async def test_parse_without_markers_is_single_text_segment(parser):
    segments = await parser.parse("just text, no tags")

    assert segments == [TextSegment("just text, no tags")]


@pytest.mark.asyncio
async def test_parse_empty_slug_is_unresolved_tag(parser):
    segments = await parser.parse("x #{} y")

    assert segments[1] == TagSegment(slug="", display_name="", tag=None)


@pytest.mark.asyncio
async def test_unterminated_marker_is_literal_text(parser):
    segments = await parser.parse("A #{color cat")

    assert segments == [TextSegment("A #{color cat")]


@pytest.mark.asyncio
async def test_slug_lookup_is_case_sensitive(parser):
    segments = await parser.parse("#{Color}")

    assert segments[0].tag is None


@pytest.mark.asyncio
@pytest.mark.parametrize("content", [
    "",
    "plain",
    "A #{color} cat",
    "#{animal}#{color}",
    "  #{animal} sitting on a #{color} rug  ",
    "broken #{ marker and #{color}",
    "#{} empty and } stray and #{unknown}",
    "多字节 #{color} 文本",
])
async def test_parse_round_trip(parser, content):
    """Rendering parsed segments reconstructs the input exactly."""
    segments = await parser.parse(content)

    assert render_segments(segments) == content


def test_iter_markers_positions():
    markers = list(iter_markers("a #{x} b #{y}"))

    assert markers == [(2, 6, "x"), (9, 13, "y")]


def test_split_content_adjacent_markers():
    assert split_content("#{a}#{b}") == [("tag", "a"), ("tag", "b")]
