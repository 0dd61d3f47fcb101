"""Bounded ordered key-value map.

This module provides the storage capability the content and access
stores sit on: string keys, byte values, size limits, and ascending
key iteration. An optional JSON file makes the map durable.
"""

from __future__ import annotations

import base64
import json
import os
import threading
from pathlib import Path
from typing import Any

from core.errors import CdnStorageError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


class BoundedOrderedMap:
    """String-keyed byte map with bounded key and value sizes.

    Each ``insert`` or ``remove`` replaces a whole entry at once, so
    readers see either the old or the new value, never a mix.
    """

    def __init__(
        self,
        name: str,
        max_key_bytes: int,
        max_value_bytes: int,
        path: Path | None = None,
    ) -> None:
        """Initialize an empty map or load it from disk.

        Args:
            name: Map name used in logs and errors.
            max_key_bytes: Upper bound on UTF-8 key size.
            max_value_bytes: Upper bound on value size.
            path: Optional JSON file backing the map.

        Raises:
            CdnStorageError: If the backing file cannot be read.
        """
        self._name = name
        self._max_key_bytes = max_key_bytes
        self._max_value_bytes = max_value_bytes
        self._path = path
        self._lock = threading.Lock()
        self._entries: dict[str, bytes] = {}
        if path is not None:
            path.parent.mkdir(parents=True, exist_ok=True)
            if path.exists():
                self._entries = _read_map_file(path)

    def get(self, key: str) -> bytes | None:
        """Return the value stored under key, or None when absent."""
        return self._entries.get(key)

    def insert(self, key: str, value: bytes) -> bytes | None:
        """Store value under key, replacing any previous value.

        Args:
            key: Entry key.
            value: Encoded entry value.

        Returns:
            The replaced value, or None for a new key.

        Raises:
            CdnStorageError: If key or value exceed their bounds or the
                durable write fails. The map is left unchanged.
        """
        self._check_bounds(key, value)
        with self._lock:
            previous = self._entries.get(key)
            updated = dict(self._entries)
            updated[key] = value
            self._commit(updated)
            return previous

    def remove(self, key: str) -> bytes | None:
        """Delete key and return its value, or None when absent.

        Raises:
            CdnStorageError: If the durable write fails.
        """
        with self._lock:
            if key not in self._entries:
                return None
            updated = dict(self._entries)
            previous = updated.pop(key)
            self._commit(updated)
            return previous

    def values(self) -> list[bytes]:
        """Return a snapshot of values in ascending key order."""
        entries = self._entries
        return [entries[key] for key in sorted(entries)]

    def items(self) -> list[tuple[str, bytes]]:
        """Return a snapshot of entries in ascending key order."""
        entries = self._entries
        return [(key, entries[key]) for key in sorted(entries)]

    def __len__(self) -> int:
        return len(self._entries)

    def _check_bounds(self, key: str, value: bytes) -> None:
        key_size = len(key.encode("utf-8"))
        if key_size > self._max_key_bytes:
            raise CdnStorageError(
                f"Key for map '{self._name}' is {key_size} bytes; "
                f"the limit is {self._max_key_bytes} bytes."
            )
        if len(value) > self._max_value_bytes:
            raise CdnStorageError(
                f"Value for key {key} in map '{self._name}' is {len(value)} bytes; "
                f"the limit is {self._max_value_bytes} bytes."
            )

    def _commit(self, updated: dict[str, bytes]) -> None:
        # Swap the whole dict so lock-free readers never see a partial change.
        if self._path is not None:
            _write_map_file(self._path, updated)
        self._entries = updated


def _read_map_file(path: Path) -> dict[str, bytes]:
    """Load a persisted map file.

    Args:
        path: JSON map file path.

    Returns:
        Decoded key to value mapping.

    Raises:
        CdnStorageError: If the file is unreadable or malformed.
    """
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except OSError as error:
        raise CdnStorageError(f"Failed to read map file {path}: {error}.") from error
    except json.JSONDecodeError as error:
        raise CdnStorageError(
            f"Failed to parse map file {path}: {error.msg}. "
            "Restore the file from a backup or remove it to start empty."
        ) from error
    if not isinstance(payload, dict):
        raise CdnStorageError(f"Failed to parse map file {path}: expected JSON object.")
    return {str(key): _decode_value(path, value) for key, value in payload.items()}


def _decode_value(path: Path, value: Any) -> bytes:
    if not isinstance(value, str):
        raise CdnStorageError(f"Failed to parse map file {path}: values must be strings.")
    try:
        return base64.b64decode(value.encode("ascii"), validate=True)
    except ValueError as error:
        raise CdnStorageError(f"Failed to parse map file {path}: {error}.") from error


def _write_map_file(path: Path, entries: dict[str, bytes]) -> None:
    """Atomically replace a persisted map file.

    Raises:
        CdnStorageError: If the file cannot be written.
    """
    payload = {key: base64.b64encode(entries[key]).decode("ascii") for key in sorted(entries)}
    temp_path = path.with_name(path.name + ".tmp")
    try:
        temp_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
        os.replace(temp_path, path)
    except OSError as error:
        _LOGGER.error("map_write_failed", path=str(path), error=str(error))
        raise CdnStorageError(f"Failed to write map file {path}: {error}.") from error
