"""Data models for the accumulation store and publication ledger."""

from datetime import UTC, datetime
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Source(str, Enum):
    """Content origins aggregated by the digest.

    - HACKERNEWS: Hacker News stories (engagement = points)
    - V2EX: V2EX topics (engagement = replies)
    """

    HACKERNEWS = "hackernews"
    V2EX = "v2ex"


# Snapshots and ledgers are written with camelCase keys
_SNAPSHOT_CONFIG = ConfigDict(
    frozen=True,
    extra="ignore",
    alias_generator=to_camel,
    populate_by_name=True,
)


def _ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive timestamps."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class NormalizedItem(BaseModel):
    """Source-agnostic representation of one piece of content.

    ``id`` is the upstream native identifier and is unique within a
    source. Re-fetching an item may change its counts and content but
    never its ``id``, ``source`` or ``created_at``.
    """

    model_config = _SNAPSHOT_CONFIG

    id: Annotated[str, Field(min_length=1, description="Upstream identifier")]
    source: Source = Field(description="Content origin")
    title: str = Field(default="", description="Item title")
    url: str = Field(default="", description="Article or discussion URL")
    content: str = Field(default="", description="Plain text body (may be empty)")
    category: str = Field(default="", description="Story type or node name")
    author: str = Field(default="", description="Author handle")
    points: int = Field(default=0, description="Upvote-style score")
    replies: int = Field(default=0, description="Reply/comment count")
    created_at: datetime = Field(description="Upstream publication time")
    content_truncated: bool = Field(
        default=False, description="Whether extracted content was cut"
    )

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, v: datetime) -> datetime:
        """Store publication time as an aware UTC-comparable value."""
        return _ensure_utc(v)

    @property
    def engagement(self) -> int:
        """Primary engagement signal used for ranking.

        Points for Hacker News, reply count for V2EX.
        """
        if self.source == Source.HACKERNEWS:
            return self.points
        return self.replies


class DailyPool(BaseModel):
    """Persisted snapshot of one source's items for one calendar day."""

    model_config = _SNAPSHOT_CONFIG

    date: Annotated[str, Field(min_length=1, description="Day key (YYYY-MM-DD)")]
    fetched_at: datetime = Field(description="Time of the last write")
    items: list[NormalizedItem] = Field(default_factory=list)

    @field_validator("fetched_at")
    @classmethod
    def normalize_fetched_at(cls, v: datetime) -> datetime:
        """Store write time as an aware timestamp."""
        return _ensure_utc(v)

    def as_mapping(self) -> dict[str, NormalizedItem]:
        """Index items by id (later duplicates win)."""
        return {item.id: item for item in self.items}


class PublicationEntry(BaseModel):
    """Record that an item id was emitted to the outside world."""

    model_config = _SNAPSHOT_CONFIG

    published_at: datetime = Field(description="Emission timestamp")
    date: str = Field(default="", description="Day key of the emitting run")

    @field_validator("published_at")
    @classmethod
    def normalize_published_at(cls, v: datetime) -> datetime:
        """Store emission time as an aware timestamp."""
        return _ensure_utc(v)


class PublicationIndex(BaseModel):
    """Whole-file ledger: source -> item id -> publication entry."""

    model_config = _SNAPSHOT_CONFIG

    version: int = 1
    sources: dict[str, dict[str, PublicationEntry]] = Field(default_factory=dict)
