"""FxEmbed media URL builders for stored post media."""

from __future__ import annotations

from typing import Any

_VIDEO_TYPES = {"video", "animated_gif"}


def get_video_url(author: str, post_id: str) -> str:
    return f"https://d.fxtwitter.com/{author}/status/{post_id}.mp4"


def get_photo_url(author: str, post_id: str, index: int = 1) -> str:
    """Photo URL; *index* is 1-based."""
    return f"https://d.fixupx.com/{author}/status/{post_id}/photo/{index}"


def resolve_media_url(author: str, post_id: str, media_type: str, index: int = 1) -> str:
    if media_type in _VIDEO_TYPES:
        return get_video_url(author, post_id)
    return get_photo_url(author, post_id, index)


def get_thumbnail_url(
    author: str, post_id: str, media_type: str, index: int = 1, preview_url: str | None = None
) -> str:
    if media_type in _VIDEO_TYPES and preview_url:
        return preview_url
    return resolve_media_url(author, post_id, media_type, index)


def build_media_items(author: str, post_id: str, rows: list[Any]) -> list[dict[str, Any]]:
    """Shape stored media rows for API output, in stored order."""
    items: list[dict[str, Any]] = []
    for index, row in enumerate(rows, start=1):
        media_type = row["media_type"]
        url = resolve_media_url(author, post_id, media_type, index)
        items.append(
            {
                "id": row["id"],
                "mediaType": media_type,
                "width": row["width"],
                "height": row["height"],
                "durationMs": row["duration_ms"],
                "altText": row["alt_text"],
                "url": url,
                "thumbnailUrl": get_thumbnail_url(author, post_id, media_type, index, row["preview_url"]),
                "shareUrl": url,
            }
        )
    return items
