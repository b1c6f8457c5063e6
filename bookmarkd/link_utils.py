"""Utilities for classifying links and post URLs."""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import urlparse

_POST_URL_RE = re.compile(
    r"(?:https?://)?(?:www\.|mobile\.)?(?:twitter|x|vxtwitter|fxtwitter)\.com/([^/]+)/status/(\d+)",
    re.IGNORECASE,
)
_TCO_RE = re.compile(r"https?://t\.co/[a-zA-Z0-9]+")
_IMAGE_SUFFIX_RE = re.compile(r"\.(jpg|jpeg|png|gif|webp)$", re.IGNORECASE)
_MEDIA_SUFFIX_RE = re.compile(r"\.(mp4|webm|mov)$", re.IGNORECASE)

ARTICLE_URL_PATTERNS = ("medium.com", "substack.com", "dev.to", "/article/", "/blog/")
X_ARTICLE_PATTERNS = ("/article/", "/i/article/")


@dataclass
class ParsedPostUrl:
    author: str
    post_id: str


def parse_post_url(url: str | None) -> ParsedPostUrl | None:
    """Extract author and status id from a twitter/x (or proxy) status URL."""
    if not url:
        return None
    match = _POST_URL_RE.search(url)
    if not match:
        return None
    return ParsedPostUrl(author=match.group(1), post_id=match.group(2))


def extract_domain(url: str) -> str:
    """Return the URL's hostname without a ``www.`` prefix, or '' if unparseable."""
    try:
        host = urlparse(url).hostname or ""
    except ValueError:
        return ""
    return host.replace("www.", "", 1)


def determine_link_type(url: str) -> str:
    lower = url.lower()

    if "twitter.com" in lower or "x.com" in lower:
        return "tweet"
    if "youtube.com" in lower or "youtu.be" in lower:
        return "video"
    if _IMAGE_SUFFIX_RE.search(lower):
        return "image"
    if _MEDIA_SUFFIX_RE.search(lower):
        return "media"
    return "link"


def is_status_link(url: str) -> bool:
    """True for links pointing at another post (never stored as links)."""
    return "/status/" in url


def is_article_url(url: str | None) -> bool:
    """True if the URL points at a known article/blog platform."""
    if not url:
        return False
    lower = url.lower()
    return any(pattern in lower for pattern in ARTICLE_URL_PATTERNS)


def is_x_article_url(url: str | None) -> bool:
    if not url:
        return False
    return any(pattern in url for pattern in X_ARTICLE_PATTERNS)


def categorize_by_urls(expanded_urls: list[str]) -> str:
    """Primary category heuristic used before enrichment."""
    for url in expanded_urls:
        if is_article_url(url):
            return "article"
    return "tweet"


def build_post_url(author: str | None, post_id: str) -> str:
    if author:
        return f"https://x.com/{author}/status/{post_id}"
    return f"https://x.com/i/status/{post_id}"


def build_x_article_url(author: str, post_id: str) -> str:
    return f"https://x.com/{author}/article/{post_id}"


def expand_urls(text: str, links: list[dict]) -> str:
    """Replace t.co URLs in *text* with the expanded URLs from *links*.

    Links with an ``original_url`` are substituted directly; any t.co URL left
    over is matched by position against links that are neither short URLs nor
    status links.
    """
    if not text:
        return text

    expanded = text
    for link in links:
        original = link.get("original_url")
        target = link.get("expanded_url")
        if original and target:
            expanded = expanded.replace(original, target, 1)

    remaining = _TCO_RE.findall(expanded)
    if not remaining or not links:
        return expanded

    unmatched = [
        link
        for link in links
        if link.get("expanded_url")
        and "t.co/" not in link["expanded_url"]
        and not is_status_link(link["expanded_url"])
    ]

    for index, short_url in enumerate(remaining):
        exact = next((link for link in links if link.get("original_url") == short_url), None)
        if exact and exact.get("expanded_url"):
            expanded = expanded.replace(short_url, exact["expanded_url"], 1)
            continue
        if index < len(unmatched):
            expanded = expanded.replace(short_url, unmatched[index]["expanded_url"], 1)

    return expanded
