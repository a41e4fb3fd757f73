"""Anthropic Messages API client."""

import httpx

from src.llm.errors import LlmApiError
from src.llm.poster import DEFAULT_RETRY_BASE_DELAY, JsonPoster


ANTHROPIC_DEFAULT_BASE_URL = "https://api.anthropic.com"
ANTHROPIC_VERSION = "2023-06-01"
ANTHROPIC_MAX_TOKENS = 1024


class AnthropicMessagesClient:
    """Client for ``POST <base_url>/v1/messages``."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = "",
        transport: httpx.BaseTransport | None = None,
        retry_base_delay: float = DEFAULT_RETRY_BASE_DELAY,
    ) -> None:
        self._api_key = api_key
        self.model = model
        self._base_url = (base_url or ANTHROPIC_DEFAULT_BASE_URL).rstrip("/")
        self._poster = JsonPoster(
            "anthropic", retry_base_delay=retry_base_delay, transport=transport
        )

    def generate_content(
        self,
        prompt: str,
        system_instruction: str | None = None,
    ) -> str:
        """Send one user message and return the first text block.

        Raises:
            LlmApiError: If the call fails or the reply has no content list.
        """
        body: dict[str, object] = {
            "model": self.model,
            "max_tokens": ANTHROPIC_MAX_TOKENS,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system_instruction:
            body["system"] = system_instruction

        data = self._poster.post(
            f"{self._base_url}/v1/messages",
            headers={
                "Content-Type": "application/json",
                "x-api-key": self._api_key,
                "anthropic-version": ANTHROPIC_VERSION,
            },
            body=body,
        )

        blocks = data.get("content") if isinstance(data, dict) else None
        if not isinstance(blocks, list):
            msg = "No content in messages response"
            raise LlmApiError(msg)
        for block in blocks:
            if isinstance(block, dict) and block.get("type") == "text":
                return (block.get("text") or "").strip()
        return ""
