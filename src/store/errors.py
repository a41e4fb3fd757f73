"""Domain exceptions for the accumulation store and ledger.

Corrupt snapshots are recovered from locally (treated as empty), so the
only errors that reach callers are precondition and contract violations.
"""


class StoreError(Exception):
    """Base exception for all store errors."""


class InvalidDayError(StoreError):
    """Raised when a day key is not a valid ``YYYY-MM-DD`` date.

    Day keys become file names, so anything else is rejected before it
    touches the filesystem.
    """

    def __init__(self, day: str) -> None:
        """Initialize the error with the rejected key.

        Args:
            day: The invalid day key.
        """
        self.day = day
        super().__init__(f"Invalid day key: {day!r} (expected YYYY-MM-DD)")


class SourceMismatchError(StoreError):
    """Raised when an item is merged into another source's store."""

    def __init__(self, expected: str, actual: str, item_id: str) -> None:
        """Initialize the error.

        Args:
            expected: Source owned by the store.
            actual: Source carried by the item.
            item_id: Offending item id.
        """
        self.expected = expected
        self.actual = actual
        self.item_id = item_id
        super().__init__(
            f"Item {item_id} belongs to source '{actual}', store holds '{expected}'"
        )


class SnapshotCorruptError(StoreError):
    """Raised internally when a persisted file cannot be decoded."""

    def __init__(self, path: str, reason: str) -> None:
        """Initialize the error.

        Args:
            path: Path of the unreadable file.
            reason: Decoder error message.
        """
        self.path = path
        self.reason = reason
        super().__init__(f"Corrupt snapshot {path}: {reason}")
