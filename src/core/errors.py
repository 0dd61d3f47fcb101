"""CDN exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Storage, lookup, and authorization failures each get their own type.
"""

from __future__ import annotations


class CdnError(Exception):
    """Base exception for all content store failures."""


class CdnConfigError(CdnError):
    """Raised for invalid runtime configuration."""


class CdnStorageError(CdnError):
    """Raised when the key-value capability rejects a read or write."""


class ContentNotFoundError(CdnError):
    """Raised when no record exists for a content id."""

    def __init__(self, content_id: str) -> None:
        super().__init__(f"Content with ID={content_id} not found")
        self.content_id = content_id


class NotAuthorizedError(CdnError):
    """Raised when a caller fails an ownership check."""


class AccessDeniedError(NotAuthorizedError):
    """Raised when a caller is not on a content allow-list."""

    def __init__(self, content_id: str) -> None:
        super().__init__(f"Access denied to content with ID={content_id}")
        self.content_id = content_id


class CdnPlaybookError(CdnError):
    """Raised for invalid or unsupported playbook files."""
