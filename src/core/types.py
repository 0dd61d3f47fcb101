"""Shared typed models.

This module defines immutable records used by the store, access
controller, client, and CLI layers to keep interfaces explicit.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Content:
    """Versioned content document.

    Attributes:
        id: Opaque unique identifier, immutable after creation.
        title: Display title.
        body: Payload text or reference such as a URL.
        owner: Caller id that uploaded the record.
        created_at: Creation timestamp in nanoseconds.
        updated_at: Timestamp of the latest update, None until first update.
        version: Starts at 1 and grows by one per successful update.
    """

    id: str
    title: str
    body: str
    owner: str
    created_at: int
    updated_at: int | None
    version: int


@dataclass(frozen=True)
class AccessRecord:
    """Allow-list companion of one content record.

    An empty allow-list marks the content as public: every caller may read it.

    Attributes:
        content_id: Id of the content this record guards.
        allowed_users: Caller ids granted read access.
    """

    content_id: str
    allowed_users: frozenset[str]

    @property
    def is_public(self) -> bool:
        """Return whether the allow-list is empty and therefore public."""
        return not self.allowed_users

    def permits(self, caller_id: str) -> bool:
        """Return whether a caller may read the guarded content."""
        return self.is_public or caller_id in self.allowed_users


class AccessDecision(Enum):
    """Outcome of an authorization check."""

    ALLOWED = "allowed"
    DENIED = "denied"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class ContentUpdate:
    """Requested field changes for an update.

    Empty strings and None both mean "keep the current value".

    Attributes:
        title: New title, if any.
        body: New body, if any.
    """

    title: str | None = None
    body: str | None = None


@dataclass(frozen=True)
class AccessChange:
    """Grant or revoke request for one allow-list entry.

    Attributes:
        content_id: Content whose allow-list changes.
        requester: Caller asking for the change.
        target_user: Caller id being added or removed.
        grant: True to add, False to remove.
    """

    content_id: str
    requester: str
    target_user: str
    grant: bool
