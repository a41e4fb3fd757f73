"""Application configuration schema (config.yaml)."""

from enum import Enum
from typing import Annotated
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.config.constants import (
    DEFAULT_AI_LANGUAGE,
    DEFAULT_AI_MODEL,
    DEFAULT_EXCLUDE_NODES,
    DEFAULT_EXTRACTOR_CONCURRENCY,
    DEFAULT_EXTRACTOR_MAX_LENGTH,
    DEFAULT_EXTRACTOR_TIMEOUT_SECONDS,
    DEFAULT_HN_LIMIT,
    DEFAULT_SKIP_HOURS,
    DEFAULT_TOP_N,
    DEFAULT_V2EX_PAGES,
)
from src.fetch.config import FetchConfig


class AiProvider(str, Enum):
    """Supported summarisation backends."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"


class AiConfig(BaseModel):
    """Summarisation settings.

    Attributes:
        provider: Backend used for summaries.
        api_key: API key. Empty falls back to the environment.
        model: Model name passed to the backend.
        base_url: Override for the backend URL (empty uses the default).
        language: Language the summaries are written in.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    provider: AiProvider = AiProvider.OPENAI
    api_key: str = ""
    model: Annotated[str, Field(min_length=1)] = DEFAULT_AI_MODEL
    base_url: str = ""
    language: Annotated[str, Field(min_length=1)] = DEFAULT_AI_LANGUAGE


class HackerNewsConfig(BaseModel):
    """Hacker News collection settings.

    Attributes:
        enabled: Whether the source is collected at all.
        lists: Story lists to read (top, new, best, ask, show, job).
        limit: Stories fetched per list.
        top_n: Items kept in the generated digest.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = True
    lists: list[str] = Field(default_factory=lambda: ["top"])
    limit: Annotated[int, Field(ge=1, le=500)] = DEFAULT_HN_LIMIT
    top_n: Annotated[int, Field(ge=0, le=500)] = DEFAULT_TOP_N


class V2exConfig(BaseModel):
    """V2EX collection settings.

    Attributes:
        enabled: Whether the source is collected at all.
        token: Personal access token for the v2 API. Empty falls back to
            the environment.
        nodes: ``hot``, ``latest`` or node names.
        exclude_nodes: Nodes removed before ranking (case-insensitive).
        top_n: Items kept in the generated digest.
        pages: Pages read per node on the v2 API.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = True
    token: str = ""
    nodes: list[str] = Field(default_factory=lambda: ["hot"])
    exclude_nodes: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDE_NODES)
    )
    top_n: Annotated[int, Field(ge=0, le=500)] = DEFAULT_TOP_N
    pages: Annotated[int, Field(ge=1, le=50)] = DEFAULT_V2EX_PAGES


class ExtractorConfig(BaseModel):
    """Full-text extraction settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = True
    concurrency: Annotated[int, Field(ge=1, le=32)] = DEFAULT_EXTRACTOR_CONCURRENCY
    max_length: Annotated[int, Field(ge=1)] = DEFAULT_EXTRACTOR_MAX_LENGTH
    timeout: Annotated[float, Field(gt=0.0, le=300.0)] = (
        DEFAULT_EXTRACTOR_TIMEOUT_SECONDS
    )


class DigestConfig(BaseModel):
    """Root of config.yaml.

    Every key is optional; missing keys take their defaults.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    ai: AiConfig = Field(default_factory=AiConfig)
    hackernews: HackerNewsConfig = Field(default_factory=HackerNewsConfig)
    v2ex: V2exConfig = Field(default_factory=V2exConfig)
    skip_hours: Annotated[float, Field(ge=0.0)] = DEFAULT_SKIP_HOURS
    seen_skip_hours: Annotated[float, Field(ge=0.0)] = 0.0
    extractor: ExtractorConfig = Field(default_factory=ExtractorConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    timezone: str | None = None

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str | None) -> str | None:
        """Reject names the tz database does not know."""
        if v is None:
            return v
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            msg = f"Unknown timezone: {v}"
            raise ValueError(msg) from e
        return v
