"""Factory for creating LLM clients."""

import httpx
import structlog

from src.llm.anthropic_client import AnthropicMessagesClient
from src.llm.errors import LlmAuthError
from src.llm.openai_client import OpenAiChatClient
from src.llm.protocols import LlmClient


logger = structlog.get_logger()

PROVIDER_OPENAI = "openai"
PROVIDER_ANTHROPIC = "anthropic"


def create_llm_client(
    provider: str,
    api_key: str,
    model: str,
    base_url: str = "",
    transport: httpx.BaseTransport | None = None,
) -> LlmClient:
    """Create the client for the configured provider.

    Args:
        provider: ``openai`` or ``anthropic``.
        api_key: Provider API key.
        model: Model identifier.
        base_url: Optional API root override.
        transport: Optional httpx transport for tests.

    Returns:
        An LlmClient implementation ready for use.

    Raises:
        LlmAuthError: If no API key is provided.
        ValueError: If the provider is unknown.
    """
    log = logger.bind(component="llm", subcomponent="factory")

    if not api_key:
        msg = (
            "No AI credentials configured "
            "(need ai.api_key, OPENAI_API_KEY or ANTHROPIC_API_KEY)"
        )
        raise LlmAuthError(msg)

    if provider == PROVIDER_ANTHROPIC:
        log.info("llm_client_created", provider=provider, model=model)
        return AnthropicMessagesClient(api_key, model, base_url, transport=transport)

    if provider == PROVIDER_OPENAI:
        log.info("llm_client_created", provider=provider, model=model)
        return OpenAiChatClient(api_key, model, base_url, transport=transport)

    msg = f"Unknown AI provider: {provider}"
    raise ValueError(msg)
