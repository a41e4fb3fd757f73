"""Prompt templates for digest summaries."""

from collections.abc import Sequence

from src.store.models import NormalizedItem


ITEM_TEXT_MAX_CHARS = 3000
OVERVIEW_MAX_ITEMS = 10

_ITEM_SYSTEM_TEMPLATE = (
    "Rewrite the text into a concise summary in {language}. "
    "Return 1-3 sentences (30-180 words). Retain the deep meaning. "
    "Be creative, be fun."
)

_OVERVIEW_SYSTEM_TEMPLATE = (
    "Write a summary in {language}, 3-5 sentences. Retain deep meaning. "
    "Be creative, be fun."
)

_ITEM_TEMPLATE = "Title: {title}\nContent: {text}"

_OVERVIEW_TEMPLATE = """Top items:
{listing}
Task: Summarize today's highlights. Plain text, no links."""


def item_system_instruction(language: str) -> str:
    """System instruction for a single-item summary."""
    return _ITEM_SYSTEM_TEMPLATE.format(language=language)


def overview_system_instruction(language: str) -> str:
    """System instruction for the whole-digest summary."""
    return _OVERVIEW_SYSTEM_TEMPLATE.format(language=language)


def build_item_prompt(title: str, content: str) -> str:
    """User prompt for one item; falls back to the title when there is no text."""
    text = (content.strip() or title)[:ITEM_TEXT_MAX_CHARS]
    return _ITEM_TEMPLATE.format(title=title, text=text)


def build_overview_prompt(items: Sequence[NormalizedItem]) -> str:
    """User prompt listing the top items with category and points."""
    listing = "\n".join(
        f"- {item.title} ({item.category}, {item.points} pts)"
        for item in items[:OVERVIEW_MAX_ITEMS]
    )
    return _OVERVIEW_TEMPLATE.format(listing=listing)
