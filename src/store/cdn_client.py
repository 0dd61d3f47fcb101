"""Python SDK for content store operations.

This module composes the content store and access controller into the
caller-facing operations: upload, read, update, access changes, and
enumeration. One client owns one pair of maps.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
import threading
from typing import Callable

from core.clock import MonotonicClock
from core.config import CdnConfig
from core.constants import ACCESS_MAP_NAME, CONTENT_MAP_NAME, MAPS_DIR_NAME, STORAGE_BACKEND_FILE
from core.errors import AccessDeniedError, CdnStorageError, ContentNotFoundError
from core.identifiers import uuid4_identifier
from core.logging_config import get_logger
from core.types import AccessChange, AccessDecision, Content, ContentUpdate
from store.access_controller import AccessController
from store.content_store import ContentStore
from store.ordered_map import BoundedOrderedMap

_LOGGER = get_logger(__name__)


class CdnClient:
    """Primary SDK entry point for content workflows.

    All mutations and paired reads run under one re-entrant lock, so a
    content record and its access record always change together as seen
    by other callers of the same client.
    """

    def __init__(
        self,
        config: CdnConfig | None = None,
        content_map: BoundedOrderedMap | None = None,
        access_map: BoundedOrderedMap | None = None,
        now_ns: Callable[[], int] | None = None,
        new_id: Callable[[], str] | None = None,
    ) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration.
            content_map: Optional map for content records; built from config when omitted.
            access_map: Optional map for access records; built from config when omitted.
            now_ns: Optional timestamp source in nanoseconds.
            new_id: Optional content id generator.
        """
        self._config = config or CdnConfig.from_env()
        self._lock = threading.RLock()
        if content_map is None:
            content_map = _build_map(self._config, CONTENT_MAP_NAME)
        if access_map is None:
            access_map = _build_map(self._config, ACCESS_MAP_NAME)
        self._content_map = content_map
        self._access_map = access_map
        self._contents = ContentStore(
            self._content_map,
            now_ns=now_ns or MonotonicClock().now_ns,
            new_id=new_id or uuid4_identifier,
        )
        self._access = AccessController(
            self._access_map,
            content_store=self._contents,
            access_policy=self._config.access_policy,
        )

    def upload_content(self, owner: str, title: str, body: str) -> str:
        """Store new content readable only by its owner.

        Args:
            owner: Caller id of the uploader.
            title: Display title.
            body: Payload text or reference.

        Returns:
            Id of the created content.

        Raises:
            CdnStorageError: If either record cannot be written. A content
                record written before the failure is rolled back.
        """
        with self._lock:
            content = self._contents.create(owner, title, body)
            try:
                self._access.create_for(content.id, owner)
            except CdnStorageError:
                self._contents.discard(content.id)
                _LOGGER.error("content_upload_rolled_back", content_id=content.id, owner=owner)
                raise
        _LOGGER.info("content_uploaded", content_id=content.id, owner=owner)
        return content.id

    def check_access(self, content_id: str, caller_id: str) -> AccessDecision:
        """Return the read authorization decision for a caller."""
        return self._access.authorize(content_id, caller_id)

    def get_content(self, content_id: str, caller_id: str) -> Content:
        """Read content after an allow-list check.

        Args:
            content_id: Target content id.
            caller_id: Caller requesting the record.

        Returns:
            The current content record.

        Raises:
            ContentNotFoundError: If the content or its access record is missing.
            AccessDeniedError: If the caller is not on a non-empty allow-list.
        """
        with self._lock:
            decision = self._access.authorize(content_id, caller_id)
            if decision is AccessDecision.NOT_FOUND:
                raise ContentNotFoundError(content_id)
            if decision is AccessDecision.DENIED:
                _LOGGER.warning("content_access_denied", content_id=content_id, caller_id=caller_id)
                raise AccessDeniedError(content_id)
            content = self._contents.get(content_id)
        if content is None:
            _LOGGER.error("content_missing_for_access_record", content_id=content_id)
            raise ContentNotFoundError(content_id)
        return content

    def update_content(
        self,
        content_id: str,
        updater: str,
        new_title: str | None = None,
        new_body: str | None = None,
    ) -> Content:
        """Update title and/or body as the owner.

        Empty strings are treated like None and leave the field unchanged.

        Returns:
            The updated record with its new version.

        Raises:
            ContentNotFoundError: If no content exists for content_id.
            NotAuthorizedError: If updater is not the owner.
            CdnStorageError: If the write is rejected.
        """
        changes = ContentUpdate(title=new_title, body=new_body)
        with self._lock:
            content = self._contents.update(content_id, updater, changes)
        _LOGGER.info(
            "content_updated",
            content_id=content_id,
            updater=updater,
            version=content.version,
        )
        return content

    def set_access(
        self,
        content_id: str,
        requester: str,
        target_user: str,
        grant: bool,
    ) -> frozenset[str]:
        """Grant or revoke read access for one caller.

        Returns:
            The resulting allow-list; empty means public.

        Raises:
            ContentNotFoundError: If no access record exists for content_id.
            NotAuthorizedError: Under owner_only policy, for non-owner requesters.
            CdnStorageError: If the write is rejected.
        """
        change = AccessChange(
            content_id=content_id,
            requester=requester,
            target_user=target_user,
            grant=grant,
        )
        with self._lock:
            record = self._access.set_access(change)
        _LOGGER.info(
            "access_updated",
            content_id=content_id,
            requester=requester,
            target_user=target_user,
            grant=grant,
            public=record.is_public,
        )
        return record.allowed_users

    def get_all_content(self) -> list[Content]:
        """Return a snapshot of all content, unfiltered by access."""
        with self._lock:
            return self._contents.list_all()

    def reconcile(self) -> list[str]:
        """Restore owner-only access records for orphaned content.

        Returns:
            Ids of content whose access record was recreated.
        """
        repaired: list[str] = []
        with self._lock:
            for content in self._contents.list_all():
                if self._access.get(content.id) is not None:
                    continue
                self._access.create_for(content.id, content.owner)
                repaired.append(content.id)
                _LOGGER.warning("orphan_access_restored", content_id=content.id, owner=content.owner)
        return repaired

    def with_data_root(self, data_root: str) -> "CdnClient":
        """Clone the client onto file-backed maps under another data root.

        Args:
            data_root: New data root path.

        Returns:
            New SDK client instance.
        """
        resolved_root = Path(data_root).expanduser().resolve()
        updated_config = replace(
            self._config,
            data_root=resolved_root,
            storage_backend=STORAGE_BACKEND_FILE,
        )
        return CdnClient(updated_config)


def _build_map(config: CdnConfig, name: str) -> BoundedOrderedMap:
    """Build a memory or file-backed map for the configured backend.

    Args:
        config: Runtime configuration.
        name: Map name, also the file stem for the file backend.

    Returns:
        Bounded ordered map.
    """
    path = None
    if config.storage_backend == STORAGE_BACKEND_FILE:
        path = config.data_root / MAPS_DIR_NAME / f"{name}.json"
    return BoundedOrderedMap(
        name,
        max_key_bytes=config.max_key_bytes,
        max_value_bytes=config.max_value_bytes,
        path=path,
    )
