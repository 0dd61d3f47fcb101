"""Core constants used across CDN modules.

This module centralizes storage bounds, names, and supported options.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path(".cdn")
MAPS_DIR_NAME = "maps"
CONTENT_MAP_NAME = "content"
ACCESS_MAP_NAME = "access_control"
DEFAULT_MAX_KEY_BYTES = 44
DEFAULT_MAX_VALUE_BYTES = 1024
INITIAL_CONTENT_VERSION = 1
STORAGE_BACKEND_MEMORY = "memory"
STORAGE_BACKEND_FILE = "file"
SUPPORTED_STORAGE_BACKENDS = (STORAGE_BACKEND_MEMORY, STORAGE_BACKEND_FILE)
ACCESS_POLICY_PERMISSIVE = "permissive"
ACCESS_POLICY_OWNER_ONLY = "owner_only"
SUPPORTED_ACCESS_POLICIES = (ACCESS_POLICY_PERMISSIVE, ACCESS_POLICY_OWNER_ONLY)
PLAYBOOK_VERSION = 1
