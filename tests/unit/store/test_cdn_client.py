"""Unit tests for the content store SDK client."""

from __future__ import annotations

from dataclasses import replace
import itertools
import threading

import pytest

from core.config import CdnConfig
from core.errors import (
    AccessDeniedError,
    CdnStorageError,
    ContentNotFoundError,
    NotAuthorizedError,
)
from core.types import AccessDecision
from store.cdn_client import CdnClient
from store.ordered_map import BoundedOrderedMap


def _config(tmp_path, **overrides) -> CdnConfig:
    options = {
        "data_root": tmp_path,
        "storage_backend": "memory",
        "access_policy": "permissive",
        "max_key_bytes": 44,
        "max_value_bytes": 1024,
    }
    options.update(overrides)
    return replace(CdnConfig.from_env(), **options)


def _client(tmp_path, **overrides) -> CdnClient:
    ticks = itertools.count(1_000)
    ids = (f"content-{number}" for number in itertools.count(1))
    return CdnClient(
        _config(tmp_path, **overrides),
        now_ns=lambda: next(ticks),
        new_id=lambda: next(ids),
    )


def test_upload_then_get_returns_fields(tmp_path) -> None:
    """Owner should read back exactly what was uploaded at version 1."""
    client = _client(tmp_path)

    content_id = client.upload_content("alice", "T", "B")
    content = client.get_content(content_id, "alice")

    assert (content.title, content.body, content.owner, content.version, content.updated_at) == (
        "T",
        "B",
        "alice",
        1,
        None,
    )


def test_get_content_distinguishes_missing_and_denied(tmp_path) -> None:
    """Missing ids and denied callers should raise different error kinds."""
    client = _client(tmp_path)
    content_id = client.upload_content("alice", "Secret title", "Secret body")

    with pytest.raises(ContentNotFoundError):
        client.get_content("ghost", "alice")
    with pytest.raises(AccessDeniedError) as denied:
        client.get_content(content_id, "eve")

    assert "Secret" not in str(denied.value)


def test_updates_increment_version(tmp_path) -> None:
    """N successful updates should leave version at 1 + N."""
    client = _client(tmp_path)
    content_id = client.upload_content("alice", "T", "B")

    for index in range(4):
        client.update_content(content_id, "alice", new_body=f"B{index}")

    content = client.get_content(content_id, "alice")
    assert content.version == 5 and content.updated_at is not None


def test_update_by_reader_is_rejected(tmp_path) -> None:
    """Read access does not grant update rights."""
    client = _client(tmp_path)
    content_id = client.upload_content("alice", "T", "B")
    client.set_access(content_id, "alice", "bob", True)

    with pytest.raises(NotAuthorizedError):
        client.update_content(content_id, "bob", new_title="T2")

    assert client.get_content(content_id, "bob").version == 1


def test_non_owner_can_grant_self_under_permissive_policy(tmp_path) -> None:
    """Bob should be able to grant himself access by default."""
    client = _client(tmp_path)
    content_id = client.upload_content("alice", "T", "B")

    client.set_access(content_id, "bob", "bob", True)

    assert client.check_access(content_id, "bob") is AccessDecision.ALLOWED


def test_owner_only_policy_blocks_self_grant(tmp_path) -> None:
    """Under owner_only, a non-owner cannot grant himself access."""
    client = _client(tmp_path, access_policy="owner_only")
    content_id = client.upload_content("alice", "T", "B")

    with pytest.raises(NotAuthorizedError):
        client.set_access(content_id, "bob", "bob", True)

    assert client.check_access(content_id, "bob") is AccessDecision.DENIED


def test_empty_allow_list_is_public(tmp_path) -> None:
    """Revoking the owner should make the content readable by anyone."""
    client = _client(tmp_path)
    content_id = client.upload_content("alice", "T", "B")

    allowed_users = client.set_access(content_id, "alice", "alice", False)

    assert allowed_users == frozenset()
    assert client.get_content(content_id, "stranger").title == "T"


def test_get_all_content_returns_every_upload(tmp_path) -> None:
    """Listing should return exactly one record per upload."""
    client = _client(tmp_path)
    uploads = {client.upload_content("alice", f"T{index}", f"B{index}"): index for index in range(3)}

    listed = client.get_all_content()

    assert len(listed) == 3
    assert all(content.title == f"T{uploads[content.id]}" for content in listed)


def test_upload_rolls_back_content_when_access_write_fails(tmp_path) -> None:
    """A failed access write should not leave orphaned content behind."""
    config = _config(tmp_path)
    content_map = BoundedOrderedMap("content", max_key_bytes=44, max_value_bytes=1024)
    access_map = BoundedOrderedMap("access", max_key_bytes=44, max_value_bytes=8)
    client = CdnClient(config, content_map=content_map, access_map=access_map)

    with pytest.raises(CdnStorageError):
        client.upload_content("alice", "T", "B")

    assert len(content_map) == 0 and client.get_all_content() == []


def test_upload_with_oversized_body_fails_cleanly(tmp_path) -> None:
    """Bodies beyond the value bound should fail and store nothing."""
    client = _client(tmp_path)

    with pytest.raises(CdnStorageError):
        client.upload_content("alice", "T", "x" * 2_000)

    assert client.get_all_content() == []


def test_reconcile_restores_missing_access_record(tmp_path) -> None:
    """Orphaned content should regain an owner-only allow-list."""
    config = _config(tmp_path)
    access_map = BoundedOrderedMap("access", max_key_bytes=44, max_value_bytes=1024)
    client = CdnClient(config, access_map=access_map)
    content_id = client.upload_content("alice", "T", "B")
    access_map.remove(content_id)

    repaired = client.reconcile()

    assert repaired == [content_id]
    assert client.check_access(content_id, "alice") is AccessDecision.ALLOWED
    assert client.check_access(content_id, "eve") is AccessDecision.DENIED


def test_concurrent_updates_are_serialized(tmp_path) -> None:
    """Parallel owner updates should each add exactly one version."""
    client = CdnClient(_config(tmp_path))
    content_id = client.upload_content("alice", "T", "B")

    def _worker(worker_index: int) -> None:
        for step in range(25):
            client.update_content(content_id, "alice", new_body=f"{worker_index}-{step}")

    threads = [threading.Thread(target=_worker, args=(index,)) for index in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert client.get_content(content_id, "alice").version == 201


def test_file_backend_shares_state_across_clients(tmp_path) -> None:
    """Two clients on one data root should see the same records."""
    writer = CdnClient(_config(tmp_path, storage_backend="file"))
    content_id = writer.upload_content("alice", "T", "B")

    reader = CdnClient(_config(tmp_path, storage_backend="file"))

    assert reader.get_content(content_id, "alice").body == "B"


def test_get_content_reports_not_found_when_content_record_is_missing(tmp_path) -> None:
    """An allowed caller should get not-found if only the access record survives."""
    content_map = BoundedOrderedMap("content", max_key_bytes=44, max_value_bytes=1024)
    client = CdnClient(_config(tmp_path), content_map=content_map)
    content_id = client.upload_content("alice", "T", "B")
    content_map.remove(content_id)

    with pytest.raises(ContentNotFoundError):
        client.get_content(content_id, "alice")

    assert client.check_access(content_id, "alice") is AccessDecision.ALLOWED
