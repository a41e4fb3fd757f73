"""Result models for pipeline runs."""

from dataclasses import dataclass, field
from enum import Enum

from src.collectors.errors import ErrorRecord
from src.renderer.models import GeneratedFile
from src.store.models import Source


class GenerateMode(str, Enum):
    """Output profile of a generate run.

    - AI_DIGEST: Markdown digests with AI summaries (human_digest + llm_context)
    - OPENCLAW: JSON documents with full item content for an agent to consume
    """

    AI_DIGEST = "ai_digest"
    OPENCLAW = "openclaw"


@dataclass
class CollectSummary:
    """Outcome of a collect run.

    Attributes:
        day: Day key the items were merged into.
        fetched: Items fetched this run, per source.
        pool: Pool size after merging, per source (only merged sources).
        errors: Feeds that failed as a whole.
    """

    day: str
    fetched: dict[Source, int] = field(default_factory=dict)
    pool: dict[Source, int] = field(default_factory=dict)
    errors: list[ErrorRecord] = field(default_factory=list)


@dataclass
class GenerateSummary:
    """Outcome of a generate run.

    Attributes:
        day: Day key of the run.
        mode: Output profile.
        pooled: Candidate pool size, per enabled source.
        ranked: Ranked item count, per enabled source.
        files: Files written.
        published: Ids marked in the ledger, per source.
    """

    day: str
    mode: GenerateMode
    pooled: dict[Source, int] = field(default_factory=dict)
    ranked: dict[Source, int] = field(default_factory=dict)
    files: list[GeneratedFile] = field(default_factory=list)
    published: dict[Source, int] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        """True when no source produced a ranked item."""
        return not any(self.ranked.values())
