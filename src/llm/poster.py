"""POST with retry on transient provider errors."""

import random
import time
from http import HTTPStatus
from typing import Any

import httpx
import structlog

from src.llm.errors import LlmApiError


logger = structlog.get_logger()

DEFAULT_TIMEOUT_SECONDS = 60.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_BASE_DELAY = 2.0
_RETRYABLE_STATUS_CODES = {
    HTTPStatus.TOO_MANY_REQUESTS,
    HTTPStatus.INTERNAL_SERVER_ERROR,
    HTTPStatus.BAD_GATEWAY,
    HTTPStatus.SERVICE_UNAVAILABLE,
}


class JsonPoster:
    """Sends JSON requests to a provider and returns the decoded reply.

    Retries with exponential backoff on 429 and 5xx responses.
    """

    def __init__(
        self,
        provider: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_base_delay: float = DEFAULT_RETRY_BASE_DELAY,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._provider = provider
        self._timeout = timeout
        self._max_retries = max_retries
        self._retry_base_delay = retry_base_delay
        self._transport = transport
        self._log = logger.bind(component="llm", subcomponent=provider)

    def post(self, url: str, headers: dict[str, str], body: dict[str, Any]) -> Any:
        """POST ``body`` as JSON.

        Raises:
            LlmApiError: On transport errors, non-200 replies after all
                retries, or a reply that is not JSON.
        """
        last_exc: LlmApiError | None = None

        with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
            for attempt in range(self._max_retries + 1):
                try:
                    response = client.post(url, headers=headers, json=body)
                except httpx.HTTPError as exc:
                    msg = f"{self._provider} request failed: {exc}"
                    raise LlmApiError(msg) from exc

                if response.status_code == HTTPStatus.OK:
                    try:
                        return response.json()
                    except ValueError as exc:
                        msg = f"{self._provider} returned a non-JSON body"
                        raise LlmApiError(msg, status_code=response.status_code) from exc

                last_exc = LlmApiError(
                    f"{self._provider} returned {response.status_code}: "
                    f"{response.text[:200]}",
                    status_code=response.status_code,
                )
                if (
                    response.status_code not in _RETRYABLE_STATUS_CODES
                    or attempt >= self._max_retries
                ):
                    raise last_exc

                delay = self._retry_base_delay * (2**attempt) + random.uniform(0, 1)  # noqa: S311
                self._log.warning(
                    "llm_retryable_error",
                    status=response.status_code,
                    attempt=attempt + 1,
                    retry_delay=round(delay, 1),
                )
                time.sleep(delay)

        raise last_exc or LlmApiError("All retries exhausted")
