"""Tests for stored X article content and markdown rendering."""

from bookmarkd.article_text import (
    article_blocks_to_markdown,
    article_content_to_markdown,
    normalize_article_content,
    parse_article_content,
    serialize_article_content,
)


def _article_payload():
    return {
        "title": "On caching",
        "content": {
            "blocks": [
                {"type": "header-one", "text": "Intro"},
                {"type": "unstyled", "text": "Hello world"},
                {"type": "atomic", "text": " ", "entityRanges": [{"key": 0, "offset": 0, "length": 1}]},
            ],
            "entityMap": [
                {"key": "0", "value": {"type": "MEDIA", "data": {"mediaItems": [{"mediaId": "77"}]}}},
            ],
        },
        "media_entities": [
            {
                "media_id": "77",
                "media_info": {
                    "original_img_url": "https://pbs.twimg.com/media/77.jpg",
                    "original_img_width": 800,
                    "original_img_height": 600,
                },
            }
        ],
    }


def test_normalize_article_content_converts_entity_list_and_media():
    content = normalize_article_content(_article_payload())

    assert content is not None
    assert len(content["blocks"]) == 3
    assert content["entityMap"]["0"]["type"] == "MEDIA"
    assert content["mediaEntities"] == {
        "77": {"url": "https://pbs.twimg.com/media/77.jpg", "width": 800, "height": 600}
    }


def test_normalize_article_content_without_content_is_none():
    assert normalize_article_content(None) is None
    assert normalize_article_content({"title": "x"}) is None


def test_article_content_survives_storage_encoding():
    content = normalize_article_content(_article_payload())
    assert parse_article_content(serialize_article_content(content)) == content


def test_parse_article_content_tolerates_bad_input():
    assert parse_article_content(None) is None
    assert parse_article_content("") is None
    assert parse_article_content("{not json") is None
    assert parse_article_content("[1, 2]") is None
    assert serialize_article_content(None) is None


def test_article_content_to_markdown_renders_headers_and_media_images():
    markdown = article_content_to_markdown(normalize_article_content(_article_payload()))
    assert markdown == "# Intro\n\nHello world\n\n![](https://pbs.twimg.com/media/77.jpg)"


def test_article_blocks_to_markdown_inline_styles_and_links():
    blocks = [
        {
            "type": "unstyled",
            "text": "bold and link",
            "inlineStyleRanges": [{"offset": 0, "length": 4, "style": "BOLD"}],
            "entityRanges": [{"key": "1", "offset": 9, "length": 4}],
        },
        {"type": "blockquote", "text": "quoted"},
        {"type": "unordered-list-item", "text": "item"},
        {"type": "header-two", "text": "Sub"},
    ]
    entity_map = {"1": {"type": "LINK", "data": {"url": "https://example.com"}}}

    markdown = article_blocks_to_markdown(blocks, entity_map)

    assert markdown.splitlines()[0] == "**bold** and [link](https://example.com)"
    assert "> quoted" in markdown
    assert "- item" in markdown
    assert "## Sub" in markdown


def test_article_blocks_to_markdown_collapses_blank_runs():
    blocks = [
        {"type": "unstyled", "text": "a"},
        {"type": "unstyled", "text": ""},
        {"type": "unstyled", "text": ""},
        {"type": "unstyled", "text": "b"},
    ]
    assert article_blocks_to_markdown(blocks) == "a\n\nb"


def test_article_blocks_to_markdown_image_entity():
    blocks = [{"type": "atomic", "text": " ", "entityRanges": [{"key": "2", "offset": 0, "length": 1}]}]
    entity_map = {"2": {"type": "IMAGE", "data": {"src": "https://img.example/x.png", "alt": "diagram"}}}
    assert article_blocks_to_markdown(blocks, entity_map) == "![diagram](https://img.example/x.png)"
