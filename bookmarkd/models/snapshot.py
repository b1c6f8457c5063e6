"""Denormalized quote/retweet/article snapshot stored alongside a post."""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LinkSummary(_CamelModel):
    """Article or external link summary inside a snapshot."""

    url: str | None = None
    title: str | None = None
    description: str | None = None
    image_url: str | None = None


class MediaSummary(_CamelModel):
    photos: list[dict[str, Any]] | None = None
    videos: list[dict[str, Any]] | None = None


class NoSnapshot(_CamelModel):
    kind: Literal["none"] = "none"


class RetweetSnapshot(_CamelModel):
    """Original post behind a retweet; never stored as its own row."""

    kind: Literal["retweet"] = "retweet"
    tweet_id: str
    author: str
    author_name: str | None = None
    author_profile_image_url: str | None = None
    text: str = ""
    media: MediaSummary | None = None


class QuoteSnapshot(RetweetSnapshot):
    """Quoted post captured for fallback rendering."""

    kind: Literal["quote"] = "quote"  # type: ignore[assignment]
    article: LinkSummary | None = None
    external: LinkSummary | None = None


class ArticleSnapshot(LinkSummary):
    """Preview of an X article the post itself carries."""

    kind: Literal["article"] = "article"


Snapshot = Annotated[
    Union[NoSnapshot, QuoteSnapshot, RetweetSnapshot, ArticleSnapshot],
    Field(discriminator="kind"),
]
