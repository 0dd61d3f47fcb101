"""Per-content allow-list authorization.

This module owns every AccessRecord. An empty allow-list is the public
marker: all callers may read the content it guards.
"""

from __future__ import annotations

from dataclasses import replace

from core.constants import ACCESS_POLICY_OWNER_ONLY
from core.errors import ContentNotFoundError, NotAuthorizedError
from core.logging_config import get_logger
from core.types import AccessChange, AccessDecision, AccessRecord
from store.content_store import ContentStore
from store.ordered_map import BoundedOrderedMap
from store.record_payload import decode_access_record, encode_access_record

_LOGGER = get_logger(__name__)


class AccessController:
    """Allow-list persistence and read authorization."""

    def __init__(
        self,
        access_map: BoundedOrderedMap,
        content_store: ContentStore,
        access_policy: str,
    ) -> None:
        """Initialize the controller.

        Args:
            access_map: Map holding encoded AccessRecords by content id.
            content_store: Store used to resolve owners under owner_only policy.
            access_policy: ``permissive`` lets any requester change an
                allow-list; ``owner_only`` requires the content owner.
        """
        self._map = access_map
        self._content_store = content_store
        self._access_policy = access_policy

    def create_for(self, content_id: str, owner: str) -> AccessRecord:
        """Persist the initial owner-only allow-list for new content.

        Raises:
            CdnStorageError: If the map rejects the write.
        """
        record = AccessRecord(content_id=content_id, allowed_users=frozenset({owner}))
        self._map.insert(content_id, encode_access_record(record))
        return record

    def get(self, content_id: str) -> AccessRecord | None:
        raw_value = self._map.get(content_id)
        if raw_value is None:
            return None
        return decode_access_record(raw_value)

    def authorize(self, content_id: str, caller_id: str) -> AccessDecision:
        """Decide whether a caller may read a content item.

        Args:
            content_id: Target content id.
            caller_id: Caller requesting read access.

        Returns:
            NOT_FOUND without an access record, ALLOWED when the allow-list
            is empty or contains the caller, DENIED otherwise.
        """
        record = self.get(content_id)
        if record is None:
            return AccessDecision.NOT_FOUND
        if record.permits(caller_id):
            return AccessDecision.ALLOWED
        return AccessDecision.DENIED

    def set_access(self, change: AccessChange) -> AccessRecord:
        """Grant or revoke one caller on an allow-list.

        Revoking a caller that is not listed is a no-op. Revoking every
        entry, owner included, makes the content public.

        Args:
            change: Requested allow-list change.

        Returns:
            The persisted access record.

        Raises:
            ContentNotFoundError: If no access record exists.
            NotAuthorizedError: Under owner_only policy, if the requester
                does not own the content.
            CdnStorageError: If the map rejects the write.
        """
        record = self.get(change.content_id)
        if record is None:
            raise ContentNotFoundError(change.content_id)
        if self._access_policy == ACCESS_POLICY_OWNER_ONLY:
            self._require_owner(change)
        if change.grant:
            allowed_users = record.allowed_users | {change.target_user}
        else:
            allowed_users = record.allowed_users - {change.target_user}
        updated = replace(record, allowed_users=allowed_users)
        self._map.insert(change.content_id, encode_access_record(updated))
        return updated

    def _require_owner(self, change: AccessChange) -> None:
        content = self._content_store.get(change.content_id)
        if content is None:
            raise ContentNotFoundError(change.content_id)
        if content.owner != change.requester:
            _LOGGER.warning(
                "access_change_rejected",
                content_id=change.content_id,
                requester=change.requester,
            )
            raise NotAuthorizedError("Only the owner can modify access for this content")
