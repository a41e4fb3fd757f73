"""HTTP client with retries, size limits, and failure isolation."""

import json
import time
from collections.abc import Collection
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from io import BytesIO
from typing import Any
from urllib.parse import urlparse

import httpx
import structlog

from src.fetch.config import FetchConfig
from src.fetch.constants import (
    DEFAULT_CHUNK_SIZE,
    HTTP_STATUS_BAD_REQUEST,
    HTTP_STATUS_OK_MAX,
    HTTP_STATUS_OK_MIN,
    HTTP_STATUS_SERVER_ERROR_MAX,
    HTTP_STATUS_SERVER_ERROR_MIN,
    HTTP_STATUS_TOO_MANY_REQUESTS,
    MAX_RETRY_AFTER_SECONDS,
)
from src.fetch.metrics import FetchMetrics
from src.fetch.models import (
    FetchError,
    FetchErrorClass,
    FetchFailedError,
    FetchResult,
    ResponseSizeExceededError,
)
from src.fetch.redact import redact_headers, redact_url_credentials


logger = structlog.get_logger()


class HttpFetcher:
    """HTTP GET client shared by every collector.

    Provides:
    - Configurable retry policy with exponential backoff
    - Per-call timeout override
    - Maximum response size enforcement
    - Header redaction for logging
    - Metrics collection

    ``fetch`` never raises; ``get_json`` and ``get_text`` raise
    ``FetchFailedError`` so a pool unit fails cleanly.
    """

    def __init__(
        self,
        config: FetchConfig,
        run_id: str,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP fetcher.

        Args:
            config: Fetch configuration.
            run_id: Unique run identifier for logging.
            transport: Optional httpx transport (tests inject a MockTransport).
        """
        self._config = config
        self._run_id = run_id
        self._transport = transport
        self._metrics = FetchMetrics.get_instance()
        self._log = logger.bind(component="fetch", run_id=run_id)

    @property
    def config(self) -> FetchConfig:
        """Fetch configuration in use."""
        return self._config

    def fetch(
        self,
        source_id: str,
        url: str,
        extra_headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> FetchResult:
        """Fetch a URL with retry support.

        Args:
            source_id: Identifier for the source being fetched.
            url: The URL to fetch.
            extra_headers: Additional headers to include.
            timeout: Per-call timeout in seconds. Defaults to the config value.

        Returns:
            FetchResult with status, body and error information.
        """
        start_time_ns = time.perf_counter_ns()
        log = self._log.bind(
            source_id=source_id,
            url=redact_url_credentials(url),
            domain=urlparse(url).netloc,
        )

        headers = self._build_headers(extra_headers)
        result = self._execute_with_retry(
            url=url,
            headers=headers,
            timeout=timeout or self._config.default_timeout_seconds,
            log=log,
        )

        duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
        self._metrics.record_duration(duration_ms)

        log.debug(
            "fetch_complete",
            status_code=result.status_code,
            bytes=result.body_size,
            duration_ms=round(duration_ms, 2),
            error_class=result.error.error_class.value if result.error else None,
        )
        return result

    def get_json(
        self,
        source_id: str,
        url: str,
        extra_headers: dict[str, str] | None = None,
        timeout: float | None = None,
        allow_status: Collection[int] = (),
    ) -> Any:
        """Fetch a URL and decode the body as JSON.

        Args:
            source_id: Identifier for the source being fetched.
            url: The URL to fetch.
            extra_headers: Additional headers to include.
            timeout: Per-call timeout in seconds.
            allow_status: Status codes that yield ``None`` instead of failing.

        Returns:
            Decoded JSON value, or None for an allowed status.

        Raises:
            FetchFailedError: On any other failure or an undecodable body.
        """
        result = self.fetch(source_id, url, extra_headers, timeout)
        if result.status_code in allow_status:
            return None
        body = self._require_success(url, result)
        try:
            return json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise FetchFailedError(
                redact_url_credentials(url),
                FetchError(
                    error_class=FetchErrorClass.MALFORMED_PAYLOAD,
                    message=f"Invalid JSON body: {e}",
                    status_code=result.status_code,
                ),
            ) from e

    def get_text(
        self,
        source_id: str,
        url: str,
        extra_headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> str:
        """Fetch a URL and decode the body as UTF-8 text.

        Raises:
            FetchFailedError: On failure or a body that is not UTF-8.
        """
        result = self.fetch(source_id, url, extra_headers, timeout)
        body = self._require_success(url, result)
        try:
            return body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise FetchFailedError(
                redact_url_credentials(url),
                FetchError(
                    error_class=FetchErrorClass.MALFORMED_PAYLOAD,
                    message=f"Body is not UTF-8: {e}",
                    status_code=result.status_code,
                ),
            ) from e

    def _require_success(self, url: str, result: FetchResult) -> bytes:
        if result.is_success:
            return result.body_bytes
        error = result.error or FetchError(
            error_class=FetchErrorClass.UNKNOWN,
            message=f"Unexpected status {result.status_code}",
            status_code=result.status_code,
        )
        raise FetchFailedError(redact_url_credentials(url), error)

    def _build_headers(self, extra_headers: dict[str, str] | None) -> dict[str, str]:
        headers: dict[str, str] = {
            "User-Agent": self._config.user_agent,
            "Accept": "*/*",
            "Accept-Encoding": "gzip, deflate",
        }
        if extra_headers:
            headers.update(extra_headers)
        return headers

    def _execute_with_retry(
        self,
        url: str,
        headers: dict[str, str],
        timeout: float,
        log: structlog.stdlib.BoundLogger,
    ) -> FetchResult:
        """Execute request with retry logic.

        Args:
            url: URL to fetch.
            headers: Request headers.
            timeout: Request timeout in seconds.
            log: Bound logger.

        Returns:
            FetchResult from the last attempt.
        """
        policy = self._config.retry_policy
        result: FetchResult | None = None

        for attempt in range(policy.max_retries + 1):
            if attempt > 0:
                delay_ms = policy.get_delay_ms(attempt - 1)
                self._metrics.record_retry()
                log.debug(
                    "retry_attempt",
                    attempt=attempt,
                    delay_ms=delay_ms,
                    max_retries=policy.max_retries,
                )
                time.sleep(delay_ms / 1000.0)

            result = self._execute_single(url, headers, timeout, log, attempt)

            if result.error is None or not policy.should_retry(result.error, attempt):
                break

            if result.error.error_class == FetchErrorClass.RATE_LIMITED:
                retry_after = result.error.retry_after
                if retry_after and retry_after > 0:
                    log.info("rate_limited", retry_after=retry_after, attempt=attempt)
                    time.sleep(min(retry_after, MAX_RETRY_AFTER_SECONDS))

        assert result is not None  # noqa: S101
        if result.error is not None:
            self._metrics.record_failure(result.error.error_class)
        return result

    def _execute_single(
        self,
        url: str,
        headers: dict[str, str],
        timeout: float,
        log: structlog.stdlib.BoundLogger,
        attempt: int,
    ) -> FetchResult:
        """Execute a single HTTP request and classify the outcome."""
        log = log.bind(attempt=attempt, headers=redact_headers(headers))

        try:
            with (
                httpx.Client(
                    timeout=timeout,
                    follow_redirects=True,
                    transport=self._transport,
                ) as client,
                client.stream("GET", url, headers=headers) as response,
            ):
                body = self._read_body_with_limit(response)
                self._metrics.record_request(response.status_code, len(body))
                return FetchResult(
                    status_code=response.status_code,
                    final_url=str(response.url),
                    headers=dict(response.headers),
                    body_bytes=body,
                    error=self._classify_http_error(
                        response.status_code, response.headers
                    ),
                )

        except ResponseSizeExceededError as e:
            return self._failed(url, FetchErrorClass.RESPONSE_SIZE_EXCEEDED, str(e))

        except httpx.TimeoutException as e:
            return self._failed(
                url, FetchErrorClass.NETWORK_TIMEOUT, f"Request timed out: {e}"
            )

        except httpx.ConnectError as e:
            return self._failed(
                url, FetchErrorClass.CONNECTION_ERROR, f"Connection failed: {e}"
            )

        except Exception as e:  # noqa: BLE001
            log.debug("fetch_unexpected_error", error=str(e))
            return self._failed(
                url, FetchErrorClass.UNKNOWN, f"Unexpected error: {e}"
            )

    @staticmethod
    def _failed(url: str, error_class: FetchErrorClass, message: str) -> FetchResult:
        return FetchResult(
            status_code=0,
            final_url=url,
            error=FetchError(error_class=error_class, message=message),
        )

    def _read_body_with_limit(self, response: httpx.Response) -> bytes:
        """Read response body, failing once it passes the size limit.

        Raises:
            ResponseSizeExceededError: If the body is larger than allowed.
        """
        max_size = self._config.max_response_size_bytes
        content_length = response.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > max_size:
            msg = f"Response size {content_length} exceeds limit {max_size}"
            raise ResponseSizeExceededError(msg)

        buffer = BytesIO()
        total_read = 0
        for chunk in response.iter_bytes(chunk_size=DEFAULT_CHUNK_SIZE):
            total_read += len(chunk)
            if total_read > max_size:
                msg = (
                    f"Response size exceeded limit of {max_size} bytes "
                    f"(read {total_read} bytes)"
                )
                raise ResponseSizeExceededError(msg)
            buffer.write(chunk)

        return buffer.getvalue()

    def _classify_http_error(
        self,
        status_code: int,
        headers: httpx.Headers,
    ) -> FetchError | None:
        """Classify HTTP status code as error.

        Returns:
            FetchError if status indicates error, None otherwise.
        """
        if HTTP_STATUS_OK_MIN <= status_code < HTTP_STATUS_OK_MAX:
            return None

        if status_code == HTTP_STATUS_TOO_MANY_REQUESTS:
            return FetchError(
                error_class=FetchErrorClass.RATE_LIMITED,
                message="Rate limited (429 Too Many Requests)",
                status_code=status_code,
                retry_after=self._parse_retry_after(headers.get("retry-after")),
            )

        if HTTP_STATUS_BAD_REQUEST <= status_code < HTTP_STATUS_SERVER_ERROR_MIN:
            return FetchError(
                error_class=FetchErrorClass.HTTP_4XX,
                message=f"Client error ({status_code})",
                status_code=status_code,
            )

        if HTTP_STATUS_SERVER_ERROR_MIN <= status_code < HTTP_STATUS_SERVER_ERROR_MAX:
            return FetchError(
                error_class=FetchErrorClass.HTTP_5XX,
                message=f"Server error ({status_code})",
                status_code=status_code,
            )

        return FetchError(
            error_class=FetchErrorClass.UNKNOWN,
            message=f"Unexpected status ({status_code})",
            status_code=status_code,
        )

    def _parse_retry_after(self, value: str | None) -> int | None:
        """Parse a Retry-After header given in seconds or as an HTTP date."""
        if not value:
            return None

        try:
            return int(value)
        except ValueError:
            pass

        try:
            dt = parsedate_to_datetime(value)
        except (ValueError, TypeError):
            return None
        return max(0, int((dt - datetime.now(UTC)).total_seconds()))
