"""Per-item feed shaping: article link selection and previews."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from ..link_utils import build_x_article_url, is_x_article_url


def has_x_article_link(links: Sequence[Mapping[str, Any]]) -> bool:
    return any(is_x_article_url(link.get("expanded_url")) for link in links)


def select_article_link(links: Sequence[Mapping[str, Any]] | None) -> Mapping[str, Any] | None:
    """Pick the link that best represents the post's article.

    Precedence: the first link typed ``article``; else the first link with a
    preview title; else the first link with a preview image; else None.
    """
    if not links:
        return None

    for link in links:
        if link.get("link_type") == "article":
            return link
    for link in links:
        if link.get("preview_title"):
            return link
    for link in links:
        if link.get("preview_image_url"):
            return link
    return None


def build_article_preview(link: Mapping[str, Any], is_x_article: bool) -> dict[str, Any]:
    return {
        "title": link.get("preview_title") or None,
        "description": link.get("preview_description") or None,
        "imageUrl": link.get("preview_image_url") or None,
        "url": link.get("expanded_url"),
        "domain": link.get("domain") or None,
        "isXArticle": is_x_article,
    }


def build_fallback_article_preview(author: str, post_id: str) -> dict[str, Any]:
    """Preview for an X article whose link carries no preview data."""
    return {
        "title": f"Article by @{author}",
        "description": None,
        "imageUrl": None,
        "url": build_x_article_url(author, post_id),
        "domain": "x.com",
        "isXArticle": True,
    }


def serialize_link(link: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "id": link.get("id"),
        "originalUrl": link.get("original_url"),
        "expandedUrl": link.get("expanded_url"),
        "domain": link.get("domain"),
        "linkType": link.get("link_type"),
        "previewTitle": link.get("preview_title"),
        "previewDescription": link.get("preview_description"),
        "previewImageUrl": link.get("preview_image_url"),
    }
