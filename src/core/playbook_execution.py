"""Shared playbook execution engine for CLI and SDK workflows.

This module maps validated playbook steps to client operations and
returns printable output lines, one or more per step.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import json
from typing import Any, Mapping, Protocol

from core.errors import CdnPlaybookError
from core.playbook import Playbook, PlaybookStep, load_playbook
from core.types import Content


class PlaybookClient(Protocol):
    """Client API contract required by playbook execution."""

    def with_data_root(self, data_root: str) -> Any: ...

    def upload_content(self, owner: str, title: str, body: str) -> str: ...

    def get_content(self, content_id: str, caller_id: str) -> Content: ...

    def update_content(
        self,
        content_id: str,
        updater: str,
        new_title: str | None = None,
        new_body: str | None = None,
    ) -> Content: ...

    def set_access(
        self,
        content_id: str,
        requester: str,
        target_user: str,
        grant: bool,
    ) -> frozenset[str]: ...

    def get_all_content(self) -> list[Content]: ...


@dataclass
class PlaybookExecutionContext:
    """Mutable context used while executing playbook steps.

    Attributes:
        client: Client receiving the operations.
        refs: Content ids bound by upload steps, keyed by ``ref`` name.
    """

    client: PlaybookClient
    refs: dict[str, str] = field(default_factory=dict)


def execute_playbook_file(client: PlaybookClient, playbook_file: str) -> tuple[str, ...]:
    """Load and execute a playbook file, returning printable output lines."""
    playbook = load_playbook(playbook_file)
    return execute_playbook(client, playbook)


def execute_playbook(client: PlaybookClient, playbook: Playbook) -> tuple[str, ...]:
    """Execute a parsed playbook and return output lines."""
    execution_client = (
        client.with_data_root(playbook.defaults.data_root)
        if playbook.defaults.data_root
        else client
    )
    context = PlaybookExecutionContext(client=execution_client)
    output_lines: list[str] = []
    for step in playbook.steps:
        output_lines.extend(_execute_step(context, step))
    return tuple(output_lines)


def format_content(content: Content) -> str:
    """Render a content record as one JSON line."""
    return json.dumps(asdict(content), sort_keys=True)


def _execute_step(context: PlaybookExecutionContext, step: PlaybookStep) -> tuple[str, ...]:
    if step.command == "upload":
        return (_execute_upload_step(context, step),)
    if step.command == "get":
        return (_execute_get_step(context, step),)
    if step.command == "update":
        return (_execute_update_step(context, step),)
    if step.command == "set-access":
        return (_execute_set_access_step(context, step),)
    if step.command == "list":
        return tuple(format_content(content) for content in context.client.get_all_content())
    raise CdnPlaybookError(f"Unsupported playbook command '{step.command}'.")


def _execute_upload_step(context: PlaybookExecutionContext, step: PlaybookStep) -> str:
    content_id = context.client.upload_content(
        owner=_required_string(step.args, "owner"),
        title=_required_text(step.args, "title"),
        body=_required_text(step.args, "body"),
    )
    ref_name = _optional_string(step.args, "ref")
    if ref_name:
        context.refs[ref_name] = content_id
    return f"Content uploaded successfully with ID={content_id}"


def _execute_get_step(context: PlaybookExecutionContext, step: PlaybookStep) -> str:
    content = context.client.get_content(
        _resolve_content_id(context, step),
        _required_string(step.args, "caller"),
    )
    return format_content(content)


def _execute_update_step(context: PlaybookExecutionContext, step: PlaybookStep) -> str:
    content = context.client.update_content(
        _resolve_content_id(context, step),
        _required_string(step.args, "updater"),
        new_title=_optional_text(step.args, "title"),
        new_body=_optional_text(step.args, "body"),
    )
    return f"Content with ID={content.id} updated successfully (version {content.version})"


def _execute_set_access_step(context: PlaybookExecutionContext, step: PlaybookStep) -> str:
    content_id = _resolve_content_id(context, step)
    context.client.set_access(
        content_id,
        _required_string(step.args, "requester"),
        _required_string(step.args, "user"),
        _required_bool(step.args, "grant"),
    )
    return f"Access updated for content with ID={content_id}"


def _resolve_content_id(context: PlaybookExecutionContext, step: PlaybookStep) -> str:
    content_id = _optional_string(step.args, "content_id")
    if content_id:
        return content_id
    ref_name = _optional_string(step.args, "ref")
    if ref_name is None:
        raise CdnPlaybookError(
            f"Playbook command '{step.command}' requires 'content_id' or 'ref'."
        )
    if ref_name not in context.refs:
        raise CdnPlaybookError(
            f"Playbook ref '{ref_name}' is not bound. Add 'ref: {ref_name}' to an earlier upload."
        )
    return context.refs[ref_name]


def _required_string(args: Mapping[str, object], field_name: str) -> str:
    value = _optional_string(args, field_name)
    if value is None:
        raise CdnPlaybookError(f"Playbook step is missing required field '{field_name}'.")
    return value


def _optional_string(args: Mapping[str, object], field_name: str) -> str | None:
    value = args.get(field_name)
    if value is None:
        return None
    if isinstance(value, str):
        stripped = value.strip()
        return stripped if stripped else None
    raise CdnPlaybookError(f"Playbook field '{field_name}' must be a string when provided.")


def _required_bool(args: Mapping[str, object], field_name: str) -> bool:
    value = args.get(field_name)
    if isinstance(value, bool):
        return value
    raise CdnPlaybookError(f"Playbook field '{field_name}' must be true or false.")


def _required_text(args: Mapping[str, object], field_name: str) -> str:
    value = _optional_text(args, field_name)
    if value is None:
        raise CdnPlaybookError(f"Playbook step is missing required field '{field_name}'.")
    return value


def _optional_text(args: Mapping[str, object], field_name: str) -> str | None:
    """Read a content field verbatim; whitespace is part of the stored text."""
    value = args.get(field_name)
    if value is None or isinstance(value, str):
        return value
    raise CdnPlaybookError(f"Playbook field '{field_name}' must be a string when provided.")
