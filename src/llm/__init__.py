"""LLM clients and the digest summarizer."""

from src.llm.anthropic_client import AnthropicMessagesClient
from src.llm.errors import LlmApiError, LlmAuthError
from src.llm.factory import create_llm_client
from src.llm.openai_client import OpenAiChatClient
from src.llm.protocols import LlmClient
from src.llm.summarizer import Summarizer


__all__ = [
    "AnthropicMessagesClient",
    "LlmApiError",
    "LlmAuthError",
    "LlmClient",
    "OpenAiChatClient",
    "Summarizer",
    "create_llm_client",
]
