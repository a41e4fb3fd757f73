"""OpenAI-compatible chat completions client."""

import httpx

from src.llm.errors import LlmApiError
from src.llm.poster import DEFAULT_RETRY_BASE_DELAY, JsonPoster


OPENAI_DEFAULT_BASE_URL = "https://api.openai.com/v1"
OPENAI_TEMPERATURE = 0.4


class OpenAiChatClient:
    """Client for ``POST <base_url>/chat/completions``.

    Works with any OpenAI-compatible endpoint via ``base_url``.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = "",
        transport: httpx.BaseTransport | None = None,
        retry_base_delay: float = DEFAULT_RETRY_BASE_DELAY,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: Bearer API key.
            model: Model identifier.
            base_url: API root; defaults to the public OpenAI endpoint.
            transport: Optional httpx transport (tests inject a MockTransport).
            retry_base_delay: Override for the backoff base in seconds.
        """
        self._api_key = api_key
        self.model = model
        self._base_url = (base_url or OPENAI_DEFAULT_BASE_URL).rstrip("/")
        self._poster = JsonPoster(
            "openai", retry_base_delay=retry_base_delay, transport=transport
        )

    def generate_content(
        self,
        prompt: str,
        system_instruction: str | None = None,
    ) -> str:
        """Run a chat completion and return the first choice's text.

        Raises:
            LlmApiError: If the call fails or the reply has no text.
        """
        messages: list[dict[str, str]] = []
        if system_instruction:
            messages.append({"role": "system", "content": system_instruction})
        messages.append({"role": "user", "content": prompt})

        data = self._poster.post(
            f"{self._base_url}/chat/completions",
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json",
            },
            body={
                "model": self.model,
                "messages": messages,
                "temperature": OPENAI_TEMPERATURE,
            },
        )

        choices = data.get("choices") if isinstance(data, dict) else None
        if not choices:
            msg = "No choices in chat completion response"
            raise LlmApiError(msg)
        text = ((choices[0] or {}).get("message") or {}).get("content") or ""
        return text.strip()
