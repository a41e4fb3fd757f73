"""OpenClaw JSON output: ranked items with their full content."""

import json
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from src.ranker.models import ScoredItem


OPENCLAW_PROFILE = "openclaw"
SCORE_DECIMALS = 6


def build_openclaw_payload(
    source_name: str,
    date: str,
    ranked: Sequence[ScoredItem],
    generated_at: datetime,
) -> dict[str, Any]:
    """Assemble the OpenClaw document for one source.

    Args:
        source_name: Short source name (``hn`` or ``v2ex``).
        date: Day key.
        ranked: Ranked items, best first.
        generated_at: Generation timestamp.

    Returns:
        JSON-ready mapping.
    """
    items = []
    for rank, scored in enumerate(ranked, start=1):
        fields = scored.item.model_dump(mode="json", by_alias=True)
        items.append(
            {
                "rank": rank,
                "score": round(scored.score, SCORE_DECIMALS),
                **fields,
                "contentTruncated": bool(scored.item.content_truncated),
            }
        )
    return {
        "profile": OPENCLAW_PROFILE,
        "source": source_name,
        "date": date,
        "topN": len(ranked),
        "generatedAt": generated_at.isoformat().replace("+00:00", "Z"),
        "items": items,
    }


def render_openclaw_json(
    source_name: str,
    date: str,
    ranked: Sequence[ScoredItem],
    generated_at: datetime,
) -> str:
    """Serialize the OpenClaw document with two-space indentation."""
    payload = build_openclaw_payload(source_name, date, ranked, generated_at)
    return json.dumps(payload, indent=2, ensure_ascii=False)
