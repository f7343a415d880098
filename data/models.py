"""
Data Models for Scrape Scheduler Application

This module contains the data classes and enumerations used throughout the application:
extraction records, saved scrapes, scheduled posts, and the post status state machine.
"""

import json
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from utils.exceptions import InvalidTransitionError, ValidationError
from utils.helpers import parse_timestamp, to_iso


class Platform(str, Enum):
    """Social platforms a post can be scheduled for."""
    TWITTER = "twitter"
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    LINKEDIN = "linkedin"

    @classmethod
    def parse(cls, value: Any) -> "Platform":
        """Resolve a platform name (case-insensitive) or raise ValidationError."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(p.value for p in cls)
            raise ValidationError(f"Unknown platform '{value}'. Expected one of: {choices}") from None

    @property
    def character_limit(self) -> int:
        """Maximum content length accepted for this platform."""
        from config import settings
        return settings.PLATFORM_CHARACTER_LIMITS.get(self.value, settings.DEFAULT_CHARACTER_LIMIT)


class PostStatus(str, Enum):
    """Lifecycle status of a scheduled post.

    ``pending`` is the only initial state; ``completed`` and ``failed`` are terminal.
    """
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

    @classmethod
    def parse(cls, value: Any) -> "PostStatus":
        """Resolve a status name (case-insensitive) or raise ValidationError."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(s.value for s in cls)
            raise ValidationError(f"Unknown status '{value}'. Expected one of: {choices}") from None

    @property
    def is_terminal(self) -> bool:
        return not ALLOWED_TRANSITIONS[self]

    def can_transition_to(self, target: "PostStatus") -> bool:
        return target in ALLOWED_TRANSITIONS[self]

    def check_transition(self, target: "PostStatus") -> "PostStatus":
        """
        Validate a move from this status to ``target``.

        Returns:
            PostStatus: The target status.

        Raises:
            InvalidTransitionError: If the transition table does not allow the move.
        """
        if not self.can_transition_to(target):
            if self.is_terminal:
                raise InvalidTransitionError(
                    f"Post is already {self.value}; cannot mark it {target.value}")
            raise InvalidTransitionError(f"Cannot move a post from {self.value} to {target.value}")
        return target


ALLOWED_TRANSITIONS: Dict[PostStatus, FrozenSet[PostStatus]] = {
    PostStatus.PENDING: frozenset({PostStatus.COMPLETED, PostStatus.FAILED}),
    PostStatus.COMPLETED: frozenset(),
    PostStatus.FAILED: frozenset(),
}

# Filter values accepted by list queries
STATUS_FILTER_ALL = "all"


def _load_list(value: Any) -> Tuple[str, ...]:
    """Normalise a list column that may arrive as JSON text, a list, or None."""
    if value is None or value == "":
        return ()
    if isinstance(value, str):
        value = json.loads(value)
    return tuple(str(v) for v in value)


@dataclass(frozen=True)
class ExtractionRecord:
    """Structured output of parsing one page.

    Attributes:
        source_url (str): The page the HTML was fetched from.
        title (str): Text of the page title, possibly empty.
        body_text (str): Qualifying paragraphs joined and cut to the body limit.
        images (Tuple[str, ...]): Absolute image URLs in document order.
    """
    source_url: str
    title: str = ""
    body_text: str = ""
    images: Tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.title and not self.body_text and not self.images


@dataclass
class StagedContent:
    """User-editable copy of an extraction record held by the curator."""
    source_url: str
    title: str = ""
    body_text: str = ""
    images: List[str] = field(default_factory=list)

    @classmethod
    def from_record(cls, record: ExtractionRecord) -> "StagedContent":
        return cls(
            source_url=record.source_url,
            title=record.title,
            body_text=record.body_text,
            images=list(record.images),
        )

    def to_record(self) -> ExtractionRecord:
        return ExtractionRecord(
            source_url=self.source_url,
            title=self.title,
            body_text=self.body_text,
            images=tuple(self.images),
        )


@dataclass(frozen=True)
class SavedScrape:
    """An extraction record persisted in the scrape archive."""
    id: str
    source_url: str
    title: str
    body_text: str
    images: Tuple[str, ...]
    created_at: datetime

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "SavedScrape":
        """Build a SavedScrape from a row returned by a record store."""
        return cls(
            id=str(record["id"]),
            source_url=record.get("source_url") or "",
            title=record.get("title") or "",
            body_text=record.get("body_text") or "",
            images=_load_list(record.get("images")),
            created_at=parse_timestamp(record["created_at"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source_url": self.source_url,
            "title": self.title,
            "body_text": self.body_text,
            "images": list(self.images),
            "created_at": to_iso(self.created_at),
        }


@dataclass(frozen=True)
class ScheduledPost:
    """A unit of future publication intent.

    Instances are immutable; a status change produces a new instance via ``with_status``.
    """
    id: str
    content: str
    platform: Platform
    scheduled_time: datetime
    media_urls: Tuple[str, ...] = ()
    status: PostStatus = PostStatus.PENDING
    created_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def with_status(self, status: PostStatus) -> "ScheduledPost":
        """Return a copy moved to ``status`` after checking the transition table."""
        return replace(self, status=self.status.check_transition(status))

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "ScheduledPost":
        """Build a ScheduledPost from a row returned by a record store."""
        created_at = record.get("created_at")
        return cls(
            id=str(record["id"]),
            content=record.get("content") or "",
            platform=Platform.parse(record["platform"]),
            scheduled_time=parse_timestamp(record["scheduled_time"]),
            media_urls=_load_list(record.get("media_urls")),
            status=PostStatus.parse(record.get("status") or PostStatus.PENDING.value),
            created_at=parse_timestamp(created_at) if created_at else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "platform": self.platform.value,
            "scheduled_time": to_iso(self.scheduled_time),
            "media_urls": list(self.media_urls),
            "status": self.status.value,
            "created_at": to_iso(self.created_at) if self.created_at else None,
        }
