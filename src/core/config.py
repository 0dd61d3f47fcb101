"""Runtime configuration model for the content store.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    ACCESS_POLICY_PERMISSIVE,
    DEFAULT_DATA_ROOT,
    DEFAULT_MAX_KEY_BYTES,
    DEFAULT_MAX_VALUE_BYTES,
    STORAGE_BACKEND_MEMORY,
    SUPPORTED_ACCESS_POLICIES,
    SUPPORTED_STORAGE_BACKENDS,
)
from core.errors import CdnConfigError


@dataclass(frozen=True)
class CdnConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Local root directory for durable map files.
        storage_backend: Either in-process memory or JSON files under data_root.
        access_policy: Who may change an allow-list: anyone or only the owner.
        max_key_bytes: Upper bound on encoded key size.
        max_value_bytes: Upper bound on encoded record size.
    """

    data_root: Path
    storage_backend: str
    access_policy: str
    max_key_bytes: int
    max_value_bytes: int

    @classmethod
    def from_env(cls) -> "CdnConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            CdnConfigError: If environment values are invalid.
        """
        data_root_value = os.getenv("CDN_DATA_ROOT", str(DEFAULT_DATA_ROOT))
        storage_backend = _parse_choice(
            "CDN_STORAGE_BACKEND",
            os.getenv("CDN_STORAGE_BACKEND", STORAGE_BACKEND_MEMORY),
            SUPPORTED_STORAGE_BACKENDS,
        )
        access_policy = _parse_choice(
            "CDN_ACCESS_POLICY",
            os.getenv("CDN_ACCESS_POLICY", ACCESS_POLICY_PERMISSIVE),
            SUPPORTED_ACCESS_POLICIES,
        )
        return cls(
            data_root=Path(data_root_value).expanduser().resolve(),
            storage_backend=storage_backend,
            access_policy=access_policy,
            max_key_bytes=_parse_byte_limit(
                "CDN_MAX_KEY_BYTES", os.getenv("CDN_MAX_KEY_BYTES", str(DEFAULT_MAX_KEY_BYTES))
            ),
            max_value_bytes=_parse_byte_limit(
                "CDN_MAX_VALUE_BYTES",
                os.getenv("CDN_MAX_VALUE_BYTES", str(DEFAULT_MAX_VALUE_BYTES)),
            ),
        )


def _parse_choice(variable_name: str, raw_value: str, supported: tuple[str, ...]) -> str:
    """Validate an enumerated environment value.

    Args:
        variable_name: Environment variable being parsed.
        raw_value: Raw string from environment.
        supported: Accepted values.

    Returns:
        Normalized value.

    Raises:
        CdnConfigError: If value is not one of the supported options.
    """
    normalized_value = raw_value.strip().lower()
    if normalized_value not in supported:
        raise CdnConfigError(
            f"Invalid {variable_name} value: expected one of {', '.join(supported)}, "
            f"got '{raw_value}'."
        )
    return normalized_value


def _parse_byte_limit(variable_name: str, raw_value: str) -> int:
    """Parse a positive byte limit environment value.

    Args:
        variable_name: Environment variable being parsed.
        raw_value: Raw string from environment.

    Returns:
        Parsed positive integer.

    Raises:
        CdnConfigError: If value is not a positive integer.
    """
    try:
        limit = int(raw_value)
    except ValueError as error:
        raise CdnConfigError(
            f"Invalid {variable_name} value: expected integer, got '{raw_value}'. "
            f"Set {variable_name} to a positive number of bytes."
        ) from error
    if limit <= 0:
        raise CdnConfigError(
            f"Invalid {variable_name} value: expected a positive byte count, got {limit}."
        )
    return limit
