"""Plain-text snippets from extracted article content."""

import re


DEFAULT_SNIPPET_LENGTH = 300

# Only cut at a sentence end found past this share of the limit
SENTENCE_CUT_RATIO = 0.4
# Only cut at a space found past this share of the limit
WORD_CUT_RATIO = 0.5

SENTENCE_ENDS = ("。", ". ", "！", "？")
ELLIPSIS = "..."

_CLEANUP_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"^URL Source:.*\n?", re.IGNORECASE | re.MULTILINE), ""),
    (re.compile(r"^Published Time:.*\n?", re.IGNORECASE | re.MULTILINE), ""),
    (re.compile(r"^Markdown Content:\n?", re.IGNORECASE | re.MULTILINE), ""),
    (re.compile(r"^#+\s+.*", re.MULTILINE), ""),
    (re.compile(r"^[-=]{3,}\s*$", re.MULTILINE), ""),
    (re.compile(r"!\[.*?\]\(.*?\)"), ""),
    (re.compile(r"\[([^\]]+)\]\(.*?\)"), r"\1"),
    (re.compile(r"\n{3,}"), "\n\n"),
)


def clean_markdown(content: str) -> str:
    """Drop reader headers, headings, rules and images; unwrap links."""
    for pattern, replacement in _CLEANUP_PATTERNS:
        content = pattern.sub(replacement, content)
    return content.strip()


def generate_snippet(content: str, max_len: int = DEFAULT_SNIPPET_LENGTH) -> str:
    """Build a short plain-text digest of ``content``.

    The text is cut at the last sentence end if one falls past 40% of
    ``max_len``; otherwise at the last space past 50% with an ellipsis;
    otherwise hard-cut with an ellipsis.

    Args:
        content: Extracted markdown or plain text.
        max_len: Maximum snippet length before the ellipsis.

    Returns:
        Snippet, or "" for blank input.
    """
    if not content or not content.strip():
        return ""

    cleaned = clean_markdown(content)
    if len(cleaned) <= max_len:
        return cleaned

    truncated = cleaned[:max_len]
    last_sentence_end = max(truncated.rfind(mark) for mark in SENTENCE_ENDS)
    if last_sentence_end > max_len * SENTENCE_CUT_RATIO:
        return truncated[: last_sentence_end + 1]

    last_space = truncated.rfind(" ")
    if last_space > max_len * WORD_CUT_RATIO:
        return truncated[:last_space] + ELLIPSIS
    return truncated + ELLIPSIS
