"""Fail-soft summarisation of digest items."""

from collections.abc import Sequence

import structlog

from src.llm.errors import LlmApiError
from src.llm.prompts import (
    build_item_prompt,
    build_overview_prompt,
    item_system_instruction,
    overview_system_instruction,
)
from src.llm.protocols import LlmClient
from src.store.models import NormalizedItem


logger = structlog.get_logger()


class Summarizer:
    """Produces per-item and whole-digest summaries.

    API failures are logged and turned into an empty string, which
    callers treat as "use the fallback text".
    """

    def __init__(
        self, client: LlmClient, language: str = "Chinese", run_id: str = ""
    ) -> None:
        self._client = client
        self._language = language
        self._log = logger.bind(component="summarizer", run_id=run_id)

    def summarize_item(self, title: str, content: str) -> str:
        """Summarise one item in 1-3 sentences.

        Returns:
            Summary text, or "" on failure.
        """
        return self._generate(
            build_item_prompt(title, content),
            item_system_instruction(self._language),
            kind="item",
        )

    def summarize_all(self, items: Sequence[NormalizedItem]) -> str:
        """Summarise the day's top items in 3-5 sentences.

        Returns:
            Summary text, or "" when there are no items or the call failed.
        """
        if not items:
            return ""
        return self._generate(
            build_overview_prompt(items),
            overview_system_instruction(self._language),
            kind="overview",
        )

    def _generate(self, prompt: str, system_instruction: str, kind: str) -> str:
        try:
            return self._client.generate_content(prompt, system_instruction).strip()
        except LlmApiError as e:
            self._log.warning(
                "summarize_failed",
                kind=kind,
                status_code=e.status_code,
                error=str(e),
            )
            return ""
