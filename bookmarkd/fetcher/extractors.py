"""Post parsing from X API v2 bookmark pages and FxTwitter payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..article_text import normalize_article_content
from ..link_utils import build_x_article_url


@dataclass
class SourceMedia:
    """Media attached to a bookmarked post, from ``includes.media``."""

    media_key: str
    media_type: str
    url: str | None = None
    preview_url: str | None = None
    width: int | None = None
    height: int | None = None
    duration_ms: int | None = None
    alt_text: str | None = None

    @classmethod
    def from_api_json(cls, data: dict[str, Any]) -> SourceMedia:
        preview = data.get("preview_image_url")
        return cls(
            media_key=str(data.get("media_key", "")),
            media_type=data.get("type") or "photo",
            url=data.get("url") or preview,
            preview_url=preview,
            width=data.get("width"),
            height=data.get("height"),
            duration_ms=data.get("duration_ms"),
            alt_text=data.get("alt_text"),
        )


@dataclass
class SourceUrl:
    url: str
    expanded_url: str
    display_url: str | None = None


@dataclass
class ReferencedPost:
    type: str  # replied_to | quoted | retweeted
    id: str


@dataclass
class SourcePost:
    """A bookmarked post as returned by the bookmark source."""

    id: str
    text: str
    author_id: str
    author_username: str | None = None
    author_name: str | None = None
    author_avatar_url: str | None = None
    created_at: str | None = None
    urls: list[SourceUrl] = field(default_factory=list)
    referenced: list[ReferencedPost] = field(default_factory=list)
    media: list[SourceMedia] = field(default_factory=list)
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def author(self) -> str:
        return self.author_username or "unknown"

    @property
    def expanded_urls(self) -> list[str]:
        return [u.expanded_url for u in self.urls if u.expanded_url]

    def reference(self, ref_type: str) -> str | None:
        """Return the id of the first referenced post of *ref_type*."""
        for ref in self.referenced:
            if ref.type == ref_type:
                return ref.id
        return None

    @property
    def is_reply(self) -> bool:
        return self.reference("replied_to") is not None

    @property
    def is_quote(self) -> bool:
        return self.reference("quoted") is not None

    @property
    def is_retweet(self) -> bool:
        return self.reference("retweeted") is not None

    @classmethod
    def from_api_json(
        cls,
        tweet: dict[str, Any],
        users: dict[str, dict[str, Any]] | None = None,
        media: dict[str, dict[str, Any]] | None = None,
    ) -> SourcePost:
        """Parse one entry of ``data`` using the page's expansion lookups."""
        users = users or {}
        media = media or {}

        author_id = str(tweet.get("author_id") or "")
        author = users.get(author_id) or {}

        # Long posts carry their full text in note_tweet
        note = tweet.get("note_tweet") or {}
        text = note.get("text") or tweet.get("text") or ""

        entities = tweet.get("entities") or {}
        urls = [
            SourceUrl(
                url=u.get("url", ""),
                expanded_url=u.get("expanded_url") or u.get("url", ""),
                display_url=u.get("display_url"),
            )
            for u in entities.get("urls") or []
        ]

        referenced = [
            ReferencedPost(type=ref.get("type", ""), id=str(ref.get("id", "")))
            for ref in tweet.get("referenced_tweets") or []
            if ref.get("id")
        ]

        media_keys = (tweet.get("attachments") or {}).get("media_keys") or []
        post_media = [SourceMedia.from_api_json(media[key]) for key in media_keys if key in media]

        return cls(
            id=str(tweet.get("id", "")),
            text=text,
            author_id=author_id,
            author_username=author.get("username"),
            author_name=author.get("name"),
            author_avatar_url=author.get("profile_image_url"),
            created_at=tweet.get("created_at"),
            urls=urls,
            referenced=referenced,
            media=post_media,
            raw=tweet,
        )

    def to_raw(self) -> dict[str, Any]:
        """Payload stored in ``raw_json``."""
        raw = dict(self.raw)
        raw["text"] = self.text
        if self.author_username:
            raw["author"] = {"id": self.author_id, "username": self.author_username, "name": self.author_name}
        return raw


@dataclass
class ArticleData:
    """An X article carried by an enriched post."""

    url: str
    title: str | None = None
    description: str | None = None
    image_url: str | None = None
    content: dict[str, Any] | None = None


@dataclass
class ExternalLink:
    """External link card (Twitter card) carried by an enriched post."""

    url: str
    title: str | None = None
    description: str | None = None
    image_url: str | None = None


@dataclass
class EnrichedPost:
    """A post as returned by the FxTwitter API."""

    id: str
    author: str
    author_name: str | None = None
    author_avatar_url: str | None = None
    text: str = ""
    created_at: str | None = None
    photos: list[dict[str, Any]] = field(default_factory=list)
    videos: list[dict[str, Any]] = field(default_factory=list)
    media_all: list[dict[str, Any]] = field(default_factory=list)
    urls: list[dict[str, Any]] = field(default_factory=list)
    article: ArticleData | None = None
    external: ExternalLink | None = None
    quote: EnrichedPost | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def has_media(self) -> bool:
        return bool(self.photos or self.videos or self.media_all)

    @property
    def has_videos(self) -> bool:
        if self.videos:
            return True
        return any(m.get("type") in ("video", "animated_gif") for m in self.media_all)

    @property
    def has_photos(self) -> bool:
        if self.photos:
            return True
        return any(m.get("type") == "photo" for m in self.media_all)

    @classmethod
    def from_fxtwitter_json(cls, data: dict[str, Any] | None) -> EnrichedPost | None:
        """Parse a full API response; None when it carries no ``tweet``."""
        if not isinstance(data, dict):
            return None
        tweet = data.get("tweet")
        if not isinstance(tweet, dict):
            return None
        return cls.from_tweet(tweet)

    @classmethod
    def from_tweet(cls, tweet: dict[str, Any], *, parse_quote: bool = True) -> EnrichedPost:
        author_data = tweet.get("author") or {}
        post_id = str(tweet.get("id", ""))
        author = author_data.get("screen_name") or "unknown"
        media = tweet.get("media") or {}

        quote = None
        quoted = tweet.get("quote")
        if parse_quote and isinstance(quoted, dict) and quoted.get("id"):
            # One hop only: the quoted post's own quote is not parsed
            quote = cls.from_tweet(quoted, parse_quote=False)

        return cls(
            id=post_id,
            author=author,
            author_name=author_data.get("name"),
            author_avatar_url=author_data.get("avatar_url"),
            text=tweet.get("text") or "",
            created_at=tweet.get("created_at"),
            photos=list(media.get("photos") or []),
            videos=list(media.get("videos") or []),
            media_all=list(media.get("all") or []),
            urls=list(tweet.get("urls") or []),
            article=_extract_article(tweet.get("article"), author, post_id),
            external=_extract_external(tweet.get("external")),
            quote=quote,
            raw=tweet,
        )

    def media_summary(self) -> dict[str, Any] | None:
        """Photos/videos summary kept in quote and retweet snapshots."""
        if not (self.photos or self.videos):
            return None
        return {"photos": self.photos or None, "videos": self.videos or None}


def _extract_article(article: Any, author: str, post_id: str) -> ArticleData | None:
    if not isinstance(article, dict):
        return None
    cover = (article.get("cover_media") or {}).get("media_info") or {}
    return ArticleData(
        url=build_x_article_url(author, post_id),
        title=article.get("title"),
        description=article.get("preview_text"),
        image_url=cover.get("original_img_url"),
        content=normalize_article_content(article),
    )


def _extract_external(external: Any) -> ExternalLink | None:
    if not isinstance(external, dict):
        return None
    url = external.get("expanded_url") or external.get("url")
    if not url:
        return None
    return ExternalLink(
        url=url,
        title=external.get("title"),
        description=external.get("description"),
        image_url=external.get("thumbnail_url"),
    )
