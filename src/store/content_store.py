"""Versioned content record store.

This module owns every Content record: creation with version 1,
owner-only read-modify-write updates, and snapshot enumeration.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Callable

from core.constants import INITIAL_CONTENT_VERSION
from core.errors import ContentNotFoundError, NotAuthorizedError
from core.logging_config import get_logger
from core.types import Content, ContentUpdate
from store.ordered_map import BoundedOrderedMap
from store.record_payload import decode_content, encode_content

_LOGGER = get_logger(__name__)


class ContentStore:
    """Content persistence over a bounded ordered map.

    The store performs no read authorization; callers consult the
    access controller before handing content to a reader.
    """

    def __init__(
        self,
        content_map: BoundedOrderedMap,
        now_ns: Callable[[], int],
        new_id: Callable[[], str],
    ) -> None:
        """Initialize the store.

        Args:
            content_map: Map holding encoded Content records by id.
            now_ns: Timestamp source in nanoseconds.
            new_id: Generator of collision-free content ids.
        """
        self._map = content_map
        self._now_ns = now_ns
        self._new_id = new_id

    def create(self, owner: str, title: str, body: str) -> Content:
        """Create and persist a new version-1 record.

        Args:
            owner: Caller id of the uploader.
            title: Display title.
            body: Payload text or reference.

        Returns:
            Persisted content record.

        Raises:
            CdnStorageError: If the map rejects the write.
        """
        content = Content(
            id=self._new_id(),
            title=title,
            body=body,
            owner=owner,
            created_at=self._now_ns(),
            updated_at=None,
            version=INITIAL_CONTENT_VERSION,
        )
        self._map.insert(content.id, encode_content(content))
        return content

    def get(self, content_id: str) -> Content | None:
        """Return the stored record, or None when the id is unknown."""
        raw_value = self._map.get(content_id)
        if raw_value is None:
            return None
        return decode_content(raw_value)

    def update(self, content_id: str, updater: str, changes: ContentUpdate) -> Content:
        """Apply an owner update and bump the version.

        Falsy title or body values leave the current value in place.

        Args:
            content_id: Target content id.
            updater: Caller id requesting the update.
            changes: Requested field changes.

        Returns:
            The replacement record as persisted.

        Raises:
            ContentNotFoundError: If no record exists for content_id.
            NotAuthorizedError: If updater is not the recorded owner.
            CdnStorageError: If the map rejects the write.
        """
        current = self.get(content_id)
        if current is None:
            raise ContentNotFoundError(content_id)
        if current.owner != updater:
            _LOGGER.warning("content_update_rejected", content_id=content_id, updater=updater)
            raise NotAuthorizedError("Only the owner can update this content")
        updated = replace(
            current,
            title=changes.title or current.title,
            body=changes.body or current.body,
            updated_at=self._now_ns(),
            version=current.version + 1,
        )
        self._map.insert(content_id, encode_content(updated))
        return updated

    def discard(self, content_id: str) -> None:
        """Remove a record written by an upload that failed to complete."""
        self._map.remove(content_id)

    def list_all(self) -> list[Content]:
        """Return a snapshot of every stored record in map key order."""
        return [decode_content(raw_value) for raw_value in self._map.values()]
