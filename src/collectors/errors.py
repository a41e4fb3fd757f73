"""Error types for the collectors."""

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class CollectorErrorClass(str, Enum):
    """Classification of collector errors.

    - FETCH: HTTP/network errors during fetch
    - PARSE: Response body could not be interpreted
    - SCHEMA: Data doesn't match the expected shape
    """

    FETCH = "FETCH"
    PARSE = "PARSE"
    SCHEMA = "SCHEMA"


class CollectorError(Exception):
    """A whole list or node could not be collected.

    Per-item failures never raise this; they are dropped inside the pool.
    """

    def __init__(
        self,
        error_class: CollectorErrorClass,
        message: str,
        source_id: str | None = None,
        details: dict[str, str | int | bool | None] | None = None,
    ) -> None:
        """Initialize the collector error.

        Args:
            error_class: Classification of the error.
            message: Human-readable error message.
            source_id: Feed that failed, e.g. ``hackernews:top``.
            details: Additional structured error details.
        """
        super().__init__(message)
        self.error_class = error_class
        self.message = message
        self.source_id = source_id
        self.details = details or {}

    def to_dict(
        self,
    ) -> dict[str, str | int | bool | None | dict[str, str | int | bool | None]]:
        """Convert error to dictionary for logging."""
        return {
            "error_class": self.error_class.value,
            "message": self.message,
            "source_id": self.source_id,
            "details": self.details,
        }


class ErrorRecord(BaseModel):
    """Serializable error record for run summaries."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    error_class: CollectorErrorClass = Field(description="Error classification")
    message: Annotated[str, Field(min_length=1, description="Error message")]
    source_id: str | None = Field(default=None, description="Feed identifier")
    details: dict[str, str | int | bool | None] = Field(
        default_factory=dict, description="Additional error details"
    )

    @classmethod
    def from_exception(cls, error: CollectorError) -> "ErrorRecord":
        """Create an ErrorRecord from a CollectorError exception."""
        return cls(
            error_class=error.error_class,
            message=error.message,
            source_id=error.source_id,
            details=error.details,
        )
