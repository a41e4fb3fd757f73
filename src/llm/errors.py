"""Domain-specific error types for the LLM module."""


class LlmAuthError(Exception):
    """No usable credentials for the selected provider."""


class LlmApiError(Exception):
    """Provider API call failure.

    Attributes:
        status_code: HTTP status code from the API response (0 if none).
    """

    def __init__(self, message: str, status_code: int = 0) -> None:
        super().__init__(message)
        self.status_code = status_code
