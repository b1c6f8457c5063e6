"""Progress events emitted by a sync run, and their SSE encoding."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

PREVIEW_TEXT_LENGTH = 100


def preview_text(text: str, length: int = PREVIEW_TEXT_LENGTH) -> str:
    if len(text) > length:
        return text[:length] + "..."
    return text


@dataclass(frozen=True)
class StartEvent:
    sync_id: str

    type: ClassVar[str] = "start"
    is_terminal: ClassVar[bool] = False

    def to_dict(self) -> dict[str, Any]:
        return {"syncId": self.sync_id, "total": None}


@dataclass(frozen=True)
class PageEvent:
    page_number: int
    items_found: int
    cursor: str | None = None

    type: ClassVar[str] = "page"
    is_terminal: ClassVar[bool] = False

    def to_dict(self) -> dict[str, Any]:
        return {"pageNumber": self.page_number, "itemsFound": self.items_found, "cursor": self.cursor}


@dataclass(frozen=True)
class ProcessingEvent:
    current: int
    total: int
    post_id: str
    author: str
    text: str
    bookmark: dict[str, Any] | None = field(default=None, compare=False)

    type: ClassVar[str] = "processing"
    is_terminal: ClassVar[bool] = False

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "current": self.current,
            "total": self.total,
            "item": {"id": self.post_id, "author": self.author, "text": preview_text(self.text)},
        }
        if self.bookmark is not None:
            data["bookmark"] = self.bookmark
        return data


@dataclass(frozen=True)
class DuplicateEvent:
    post_id: str

    type: ClassVar[str] = "duplicate"
    is_terminal: ClassVar[bool] = False

    def to_dict(self) -> dict[str, Any]:
        return {"postId": self.post_id, "skipped": True}


@dataclass(frozen=True)
class CompleteEvent:
    total: int
    new: int
    duplicates: int

    type: ClassVar[str] = "complete"
    is_terminal: ClassVar[bool] = True

    def to_dict(self) -> dict[str, Any]:
        return {"stats": {"total": self.total, "new": self.new, "duplicates": self.duplicates}}


@dataclass(frozen=True)
class ErrorEvent:
    message: str

    type: ClassVar[str] = "error"
    is_terminal: ClassVar[bool] = True

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message}


@dataclass(frozen=True)
class PingEvent:
    timestamp: int = field(default_factory=lambda: int(time.time() * 1000))

    type: ClassVar[str] = "ping"
    is_terminal: ClassVar[bool] = False

    def to_dict(self) -> dict[str, Any]:
        return {"timestamp": self.timestamp}


SyncEvent = Union[StartEvent, PageEvent, ProcessingEvent, DuplicateEvent, CompleteEvent, ErrorEvent, PingEvent]


def format_sse(event: SyncEvent) -> str:
    """Encode an event as one Server-Sent Events frame."""
    return f"event: {event.type}\ndata: {json.dumps(event.to_dict())}\n\n"
