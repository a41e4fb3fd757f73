"""Durable state for the digest: daily item pools and the publication ledger.

This module provides persistent storage for:
- Per-source, per-day pools with idempotent upsert-by-id merges
- A cross-day ledger of already published item ids
- Atomic whole-file JSON writes
"""

from src.store.days import day_key_for, validate_day_key
from src.store.errors import (
    InvalidDayError,
    SnapshotCorruptError,
    SourceMismatchError,
    StoreError,
)
from src.store.ledger import PublicationLedger
from src.store.metrics import StoreMetrics
from src.store.models import (
    DailyPool,
    NormalizedItem,
    PublicationEntry,
    PublicationIndex,
    Source,
)
from src.store.pool_store import AccumulationStore, MergeResult


__all__ = [
    # Errors
    "InvalidDayError",
    "SnapshotCorruptError",
    "SourceMismatchError",
    "StoreError",
    # Day keys
    "day_key_for",
    "validate_day_key",
    # Metrics
    "StoreMetrics",
    # Models
    "DailyPool",
    "NormalizedItem",
    "PublicationEntry",
    "PublicationIndex",
    "Source",
    # Stores
    "AccumulationStore",
    "MergeResult",
    "PublicationLedger",
]
