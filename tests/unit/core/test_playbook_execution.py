"""Unit tests for playbook execution."""

from __future__ import annotations

from dataclasses import replace
import json

import pytest

from core.config import CdnConfig
from core.errors import AccessDeniedError, CdnPlaybookError
from core.playbook import parse_playbook
from core.playbook_execution import execute_playbook, execute_playbook_file
from store.cdn_client import CdnClient
from tests.fixture_paths import fixture_path


def _client(tmp_path) -> CdnClient:
    config = replace(
        CdnConfig.from_env(),
        data_root=tmp_path,
        storage_backend="memory",
        access_policy="permissive",
    )
    return CdnClient(config)


def test_execute_playbook_file_runs_fixture(tmp_path) -> None:
    """Fixture steps should upload, update, share, and read content."""
    output_lines = execute_playbook_file(_client(tmp_path), str(fixture_path("playbooks/share.yaml")))

    shared = json.loads(output_lines[3])
    assert output_lines[0].startswith("Content uploaded successfully with ID=")
    assert output_lines[1].endswith("updated successfully (version 2)")
    assert (shared["title"], shared["version"]) == ("Launch notes v2", 2)
    assert len(output_lines) == 5


def test_execute_playbook_propagates_denials(tmp_path) -> None:
    """Operation errors should surface unchanged from the client."""
    playbook = parse_playbook(
        {
            "version": 1,
            "steps": [
                {"command": "upload", "owner": "alice", "title": "T", "body": "B", "ref": "doc"},
                {"command": "get", "ref": "doc", "caller": "eve"},
            ],
        }
    )

    with pytest.raises(AccessDeniedError):
        execute_playbook(_client(tmp_path), playbook)


def test_execute_playbook_rejects_unbound_ref(tmp_path) -> None:
    """Steps referring to an unknown ref should fail before calling the client."""
    playbook = parse_playbook(
        {"version": 1, "steps": [{"command": "get", "ref": "doc", "caller": "alice"}]}
    )

    with pytest.raises(CdnPlaybookError):
        execute_playbook(_client(tmp_path), playbook)


def test_execute_playbook_requires_boolean_grant(tmp_path) -> None:
    """set-access steps must state grant as true or false."""
    playbook = parse_playbook(
        {
            "version": 1,
            "steps": [
                {"command": "upload", "owner": "alice", "title": "T", "body": "B", "ref": "doc"},
                {"command": "set-access", "ref": "doc", "requester": "alice", "user": "bob", "grant": "yes"},
            ],
        }
    )

    with pytest.raises(CdnPlaybookError):
        execute_playbook(_client(tmp_path), playbook)


def test_execute_playbook_uses_data_root_default(tmp_path) -> None:
    """A data_root default should route steps to file-backed maps there."""
    data_root = tmp_path / "playbook-root"
    playbook = parse_playbook(
        {
            "version": 1,
            "defaults": {"data_root": str(data_root)},
            "steps": [{"command": "upload", "owner": "alice", "title": "T", "body": "B"}],
        }
    )

    execute_playbook(_client(tmp_path), playbook)

    assert (data_root / "maps" / "content.json").exists()


def test_execute_playbook_keeps_title_and_body_verbatim(tmp_path) -> None:
    """Playbook uploads and updates should store text exactly as the SDK would."""
    client = _client(tmp_path)
    playbook = parse_playbook(
        {
            "version": 1,
            "steps": [
                {"command": "upload", "owner": "alice", "title": "  T  ", "body": " B ", "ref": "doc"},
                {"command": "update", "ref": "doc", "updater": "alice", "title": "   "},
            ],
        }
    )
    direct_id = client.upload_content("alice", "  T  ", " B ")
    client.update_content(direct_id, "alice", new_title="   ")

    execute_playbook(client, playbook)

    stored = {content.id: content for content in client.get_all_content()}
    played = next(content for content_id, content in stored.items() if content_id != direct_id)
    direct = stored[direct_id]
    assert (played.title, played.body, played.version) == ("   ", " B ", 2)
    assert (played.title, played.body, played.version) == (direct.title, direct.body, direct.version)
