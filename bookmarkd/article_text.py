"""X article content: normalisation, storage encoding and markdown rendering.

Article bodies arrive from the enrichment source as DraftJS-style blocks
plus an entity map (a list of ``{key, value}`` pairs) and a list of media
entities. They are stored as a single JSON object::

    {"blocks": [...], "entityMap": {key: entity}, "mediaEntities": {media_id: {url, width, height}}}
"""

from __future__ import annotations

import json
import re
from typing import Any

_BLANK_RUN_RE = re.compile(r"\n{3,}")

_BLOCK_PREFIXES = {
    "header-one": "# ",
    "header-two": "## ",
    "header-three": "### ",
    "blockquote": "> ",
    "unordered-list-item": "- ",
    "ordered-list-item": "1. ",
}


def _entity_map_to_dict(raw: Any) -> dict[str, Any]:
    if isinstance(raw, list):
        converted: dict[str, Any] = {}
        for item in raw:
            if isinstance(item, dict) and "key" in item:
                converted[str(item["key"])] = item.get("value")
        return converted
    if isinstance(raw, dict):
        return {str(k): v for k, v in raw.items()}
    return {}


def _media_entities_to_dict(raw: Any) -> dict[str, dict[str, Any]]:
    entities: dict[str, dict[str, Any]] = {}
    if not isinstance(raw, list):
        return entities
    for entity in raw:
        if not isinstance(entity, dict):
            continue
        media_id = entity.get("media_id")
        info = entity.get("media_info") or {}
        url = info.get("original_img_url")
        if media_id and url:
            entities[str(media_id)] = {
                "url": url,
                "width": info.get("original_img_width"),
                "height": info.get("original_img_height"),
            }
    return entities


def normalize_article_content(article: dict[str, Any] | None) -> dict[str, Any] | None:
    """Build the stored content object from an enrichment article payload."""
    if not article:
        return None
    content = article.get("content")
    if not isinstance(content, dict):
        return None
    return {
        "blocks": content.get("blocks") or [],
        "entityMap": _entity_map_to_dict(content.get("entityMap")),
        "mediaEntities": _media_entities_to_dict(article.get("media_entities")),
    }


def serialize_article_content(content: dict[str, Any] | None) -> str | None:
    if not content:
        return None
    return json.dumps(content)


def parse_article_content(content_json: str | None) -> dict[str, Any] | None:
    """Decode stored article content; empty or malformed input gives None."""
    if not content_json:
        return None
    try:
        decoded = json.loads(content_json)
    except (json.JSONDecodeError, TypeError):
        return None
    return decoded if isinstance(decoded, dict) else None


def _lookup_entity(entity_map: dict[str, Any], key: Any) -> dict[str, Any] | None:
    entity = entity_map.get(str(key))
    return entity if isinstance(entity, dict) else None


def _apply_inline_formatting(
    text: str,
    style_ranges: list[dict[str, Any]] | None,
    entity_ranges: list[dict[str, Any]] | None,
    entity_map: dict[str, Any],
) -> str:
    if not text:
        return ""

    bold = [False] * len(text)
    italic = [False] * len(text)
    links: list[str | None] = [None] * len(text)

    for rng in style_ranges or []:
        start = int(rng.get("offset", 0))
        end = min(start + int(rng.get("length", 0)), len(text))
        style = rng.get("style")
        for i in range(start, end):
            if style == "BOLD":
                bold[i] = True
            elif style == "ITALIC":
                italic[i] = True

    for rng in entity_ranges or []:
        entity = _lookup_entity(entity_map, rng.get("key"))
        data = (entity or {}).get("data") or {}
        if not entity or entity.get("type") != "LINK" or not data.get("url"):
            continue
        start = int(rng.get("offset", 0))
        end = min(start + int(rng.get("length", 0)), len(text))
        for i in range(start, end):
            links[i] = data["url"]

    # Group runs of identically formatted characters
    segments: list[tuple[str, bool, bool, str | None]] = []
    for i, char in enumerate(text):
        fmt = (bold[i], italic[i], links[i])
        if segments and segments[-1][1:] == fmt:
            prev = segments[-1]
            segments[-1] = (prev[0] + char, *fmt)
        else:
            segments.append((char, *fmt))

    rendered: list[str] = []
    for chunk, is_bold, is_italic, link in segments:
        if is_bold and is_italic:
            chunk = f"***{chunk}***"
        elif is_bold:
            chunk = f"**{chunk}**"
        elif is_italic:
            chunk = f"*{chunk}*"
        if link:
            chunk = f"[{chunk}]({link})"
        rendered.append(chunk)
    return "".join(rendered)


def _atomic_image(
    block: dict[str, Any], entity_map: dict[str, Any], media_entities: dict[str, Any] | None
) -> str | None:
    ranges = block.get("entityRanges") or []
    if not ranges:
        return None
    entity = _lookup_entity(entity_map, ranges[0].get("key"))
    if not entity:
        return None
    data = entity.get("data") or {}

    if entity.get("type") == "MEDIA" and media_entities:
        items = data.get("mediaItems") or []
        media_id = items[0].get("mediaId") if items and isinstance(items[0], dict) else None
        info = media_entities.get(str(media_id)) if media_id else None
        if info and info.get("url"):
            alt = data.get("caption") or data.get("alt") or ""
            return f"![{alt}]({info['url']})"

    if entity.get("type") == "IMAGE" or data.get("src"):
        src = data.get("src") or data.get("url")
        if src:
            return f"![{data.get('alt') or ''}]({src})"
    return None


def article_blocks_to_markdown(
    blocks: list[dict[str, Any]],
    entity_map: dict[str, Any] | None = None,
    media_entities: dict[str, Any] | None = None,
) -> str:
    """Render article blocks to markdown text."""
    entities = entity_map or {}
    lines: list[str] = []

    for block in blocks:
        block_type = block.get("type")

        if block_type == "atomic":
            image = _atomic_image(block, entities, media_entities)
            if image:
                lines.append(image)
            continue

        styled = _apply_inline_formatting(
            block.get("text") or "",
            block.get("inlineStyleRanges"),
            block.get("entityRanges"),
            entities,
        )
        prefix = _BLOCK_PREFIXES.get(block_type or "")
        if prefix:
            lines.append(f"{prefix}{styled}")
        elif styled.strip():
            lines.append(styled)
        else:
            lines.append("")

    return _BLANK_RUN_RE.sub("\n\n", "\n\n".join(lines)).strip()


def article_content_to_markdown(content: dict[str, Any] | None) -> str:
    if not content:
        return ""
    return article_blocks_to_markdown(
        content.get("blocks") or [],
        content.get("entityMap"),
        content.get("mediaEntities"),
    )
