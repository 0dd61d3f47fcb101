"""Public SDK surface for the content store.

This module provides a stable import path for library users.
It re-exports the client, configuration, typed records, and errors.
"""

from __future__ import annotations

from core.config import CdnConfig
from core.errors import (
    AccessDeniedError,
    CdnError,
    CdnStorageError,
    ContentNotFoundError,
    NotAuthorizedError,
)
from core.playbook_execution import execute_playbook_file
from core.types import AccessDecision, AccessRecord, Content
from store.cdn_client import CdnClient
from store.ordered_map import BoundedOrderedMap

__all__ = [
    "AccessDecision",
    "AccessDeniedError",
    "AccessRecord",
    "BoundedOrderedMap",
    "CdnClient",
    "CdnConfig",
    "CdnError",
    "CdnStorageError",
    "Content",
    "ContentNotFoundError",
    "NotAuthorizedError",
    "execute_playbook_file",
]
