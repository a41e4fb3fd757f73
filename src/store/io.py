"""Atomic whole-file JSON persistence."""

import json
import tempfile
from pathlib import Path
from typing import Any

import structlog

from src.store.errors import SnapshotCorruptError


logger = structlog.get_logger()


def write_json_atomic(path: Path, payload: Any) -> int:
    """Write a JSON document so readers never observe a partial file.

    Serializes to a temporary file in the target directory, then renames
    it over the destination.

    Args:
        path: Destination file path.
        payload: JSON-serializable document.

    Returns:
        Number of bytes written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    content_bytes = json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8")

    temp_path = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="wb",
            dir=path.parent,
            prefix=f".{path.stem}_",
            suffix=".json.tmp",
            delete=False,
        ) as temp_file:
            temp_path = Path(temp_file.name)
            temp_file.write(content_bytes)

        temp_path.replace(path)
        temp_path = None

    finally:
        # Clean up temp file if rename failed
        if temp_path and temp_path.exists():
            temp_path.unlink()

    logger.debug("json_written", path=str(path), bytes=len(content_bytes))
    return len(content_bytes)


def read_json(path: Path) -> Any:
    """Read a JSON document.

    Args:
        path: File to read.

    Returns:
        Decoded document.

    Raises:
        FileNotFoundError: If the file does not exist.
        SnapshotCorruptError: If the file cannot be read or decoded.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise
    except (OSError, UnicodeDecodeError) as e:
        raise SnapshotCorruptError(str(path), str(e)) from e

    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise SnapshotCorruptError(str(path), str(e)) from e
