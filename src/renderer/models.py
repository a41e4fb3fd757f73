"""Data models for the renderer module."""

from dataclasses import dataclass, field
from enum import Enum

from src.store.models import NormalizedItem


class RenderProfile(str, Enum):
    """Markdown output profiles.

    - HUMAN_DIGEST: Summary and meta line per item, for reading.
    - LLM_CONTEXT: Everything in HUMAN_DIGEST plus the extracted text.
    """

    HUMAN_DIGEST = "human_digest"
    LLM_CONTEXT = "llm_context"


@dataclass(frozen=True)
class RenderItem:
    """One ranked item ready for rendering.

    Attributes:
        item: The ranked item.
        score: Ranking score.
        digest: Short summary (AI output or snippet).
        context: Full extracted text.
    """

    item: NormalizedItem
    score: float
    digest: str = ""
    context: str = ""


@dataclass(frozen=True)
class RenderData:
    """Input for one markdown document."""

    title: str
    date: str
    summary: str = ""
    items: list[RenderItem] = field(default_factory=list)
    profile: RenderProfile = RenderProfile.HUMAN_DIGEST


@dataclass(frozen=True)
class GeneratedFile:
    """Information about a generated file.

    Attributes:
        path: Relative path from output directory.
        absolute_path: Absolute path to file.
        bytes_written: Number of bytes written.
        sha256: SHA-256 checksum of content.
    """

    path: str
    absolute_path: str
    bytes_written: int
    sha256: str
