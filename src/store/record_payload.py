"""JSON serialization for content and access records.

This module centralizes the byte encoding written into the ordered maps.
It is shared by the content store and access controller.
"""

from __future__ import annotations

import json
from typing import Any

from core.errors import CdnStorageError
from core.types import AccessRecord, Content


def content_to_payload(content: Content) -> dict[str, object]:
    """Serialize Content into a JSON-safe payload.

    Args:
        content: Content record.

    Returns:
        Dictionary payload for JSON encoding.
    """
    return {
        "id": content.id,
        "title": content.title,
        "body": content.body,
        "owner": content.owner,
        "created_at": content.created_at,
        "updated_at": content.updated_at,
        "version": content.version,
    }


def content_from_payload(payload: dict[str, Any]) -> Content:
    """Deserialize a JSON payload into Content.

    Args:
        payload: Serialized content payload.

    Returns:
        Parsed Content record.
    """
    updated_at = payload.get("updated_at")
    return Content(
        id=str(payload["id"]),
        title=str(payload["title"]),
        body=str(payload["body"]),
        owner=str(payload["owner"]),
        created_at=int(payload["created_at"]),
        updated_at=int(updated_at) if updated_at is not None else None,
        version=int(payload["version"]),
    )


def access_record_to_payload(record: AccessRecord) -> dict[str, object]:
    """Serialize AccessRecord; the allow-list is written sorted."""
    return {
        "content_id": record.content_id,
        "allowed_users": sorted(record.allowed_users),
    }


def access_record_from_payload(payload: dict[str, Any]) -> AccessRecord:
    """Deserialize a JSON payload into AccessRecord.

    Raises:
        TypeError: If the allow-list is not a JSON array.
    """
    raw_users = payload["allowed_users"]
    if not isinstance(raw_users, list):
        raise TypeError(f"allowed_users must be a list, got {type(raw_users).__name__}")
    return AccessRecord(
        content_id=str(payload["content_id"]),
        allowed_users=frozenset(str(user) for user in raw_users),
    )


def encode_content(content: Content) -> bytes:
    return _encode(content_to_payload(content))


def decode_content(raw_value: bytes) -> Content:
    """Decode stored bytes into Content.

    Raises:
        CdnStorageError: If the stored bytes are not a valid content payload.
    """
    payload = _decode(raw_value, "content")
    try:
        return content_from_payload(payload)
    except (KeyError, TypeError, ValueError) as error:
        raise CdnStorageError(f"Stored content payload is invalid: {error}.") from error


def encode_access_record(record: AccessRecord) -> bytes:
    return _encode(access_record_to_payload(record))


def decode_access_record(raw_value: bytes) -> AccessRecord:
    """Decode stored bytes into AccessRecord.

    Raises:
        CdnStorageError: If the stored bytes are not a valid access payload.
    """
    payload = _decode(raw_value, "access")
    try:
        return access_record_from_payload(payload)
    except (KeyError, TypeError, ValueError) as error:
        raise CdnStorageError(f"Stored access payload is invalid: {error}.") from error


def _encode(payload: dict[str, object]) -> bytes:
    return json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")


def _decode(raw_value: bytes, record_kind: str) -> dict[str, Any]:
    try:
        payload = json.loads(raw_value.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as error:
        raise CdnStorageError(f"Stored {record_kind} payload is not valid JSON: {error}.") from error
    if not isinstance(payload, dict):
        raise CdnStorageError(f"Stored {record_kind} payload must be a JSON object.")
    return payload
