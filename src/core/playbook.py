"""Typed playbook parsing for scripted content operations.

This module loads and validates YAML playbooks: an ordered list of
upload, get, update, set-access, and list steps run against one client.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Mapping, Sequence, cast

import yaml

from core.constants import PLAYBOOK_VERSION
from core.errors import CdnPlaybookError

PlaybookCommand = Literal["upload", "get", "update", "set-access", "list"]
SUPPORTED_PLAYBOOK_COMMANDS: tuple[PlaybookCommand, ...] = (
    "upload",
    "get",
    "update",
    "set-access",
    "list",
)


@dataclass(frozen=True)
class PlaybookDefaults:
    """Default values applied to playbook execution."""

    data_root: str | None = None


@dataclass(frozen=True)
class PlaybookStep:
    """One runnable step from a playbook file."""

    command: PlaybookCommand
    args: Mapping[str, object]


@dataclass(frozen=True)
class Playbook:
    """Validated playbook root object."""

    version: int
    defaults: PlaybookDefaults
    steps: tuple[PlaybookStep, ...]


def load_playbook(playbook_path: str) -> Playbook:
    """Load and validate a YAML playbook from disk.

    Args:
        playbook_path: File path to YAML playbook.

    Returns:
        Fully validated playbook object.

    Raises:
        CdnPlaybookError: If file is invalid or schema checks fail.
    """
    payload = _load_yaml_payload(playbook_path)
    return parse_playbook(payload)


def parse_playbook(payload: object) -> Playbook:
    """Validate an already-decoded playbook payload."""
    root_mapping = _expect_mapping(payload, "playbook root")
    _validate_keys(root_mapping, {"version", "defaults", "steps"}, "playbook root")
    version = _parse_version(root_mapping)
    defaults = _parse_defaults(root_mapping)
    steps = _parse_steps(root_mapping)
    return Playbook(version=version, defaults=defaults, steps=steps)


def _load_yaml_payload(playbook_path: str) -> object:
    playbook_file = Path(playbook_path).expanduser().resolve()
    if not playbook_file.exists():
        raise CdnPlaybookError(
            f"Playbook file does not exist at {playbook_file}. Provide a valid YAML file path."
        )
    try:
        payload = cast(object, yaml.safe_load(playbook_file.read_text(encoding="utf-8")))
    except OSError as error:
        raise CdnPlaybookError(
            f"Failed to read playbook at {playbook_file}: {error}. Check file permissions."
        ) from error
    except yaml.YAMLError as error:
        raise CdnPlaybookError(
            f"Failed to parse YAML playbook at {playbook_file}: {error}. Fix YAML syntax."
        ) from error
    if payload is None:
        raise CdnPlaybookError(f"Playbook at {playbook_file} is empty. Define 'version' and 'steps'.")
    return payload


def _expect_mapping(value: object, context: str) -> Mapping[str, object]:
    if isinstance(value, Mapping):
        normalized_mapping = {}
        for key, payload in value.items():
            if not isinstance(key, str):
                raise CdnPlaybookError(
                    f"Invalid {context}: expected string keys, got {type(key).__name__}."
                )
            normalized_mapping[key] = payload
        return normalized_mapping
    raise CdnPlaybookError(
        f"Invalid {context}: expected object mapping, got {type(value).__name__}."
    )


def _expect_sequence(value: object, context: str) -> Sequence[object]:
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return value
    raise CdnPlaybookError(f"Invalid {context}: expected list, got {type(value).__name__}.")


def _parse_version(root_mapping: Mapping[str, object]) -> int:
    raw_version = root_mapping.get("version")
    if not isinstance(raw_version, int) or isinstance(raw_version, bool):
        raise CdnPlaybookError("Playbook field 'version' must be an integer. Set version: 1.")
    if raw_version != PLAYBOOK_VERSION:
        raise CdnPlaybookError(f"Unsupported playbook version {raw_version}. Use version: 1.")
    return raw_version


def _parse_defaults(root_mapping: Mapping[str, object]) -> PlaybookDefaults:
    raw_defaults = root_mapping.get("defaults")
    if raw_defaults is None:
        return PlaybookDefaults()
    defaults_mapping = _expect_mapping(raw_defaults, "playbook defaults")
    _validate_keys(defaults_mapping, {"data_root"}, "playbook defaults")
    raw_data_root = defaults_mapping.get("data_root")
    if raw_data_root is not None and not isinstance(raw_data_root, str):
        raise CdnPlaybookError("Playbook field 'data_root' must be a string when provided.")
    data_root = raw_data_root.strip() if raw_data_root else None
    return PlaybookDefaults(data_root=data_root or None)


def _parse_steps(root_mapping: Mapping[str, object]) -> tuple[PlaybookStep, ...]:
    raw_steps = root_mapping.get("steps")
    if raw_steps is None:
        raise CdnPlaybookError("Playbook is missing 'steps'. Add at least one step.")
    step_items = _expect_sequence(raw_steps, "playbook steps")
    if not step_items:
        raise CdnPlaybookError("Playbook 'steps' is empty. Add at least one step.")
    steps = []
    for index, raw_step in enumerate(step_items, 1):
        context = f"step {index}"
        step_mapping = _expect_mapping(raw_step, context)
        command = _parse_command(step_mapping.get("command"), context)
        args = {key: value for key, value in step_mapping.items() if key != "command"}
        steps.append(PlaybookStep(command=command, args=args))
    return tuple(steps)


def _parse_command(raw_command: object, context: str) -> PlaybookCommand:
    if isinstance(raw_command, str) and raw_command in SUPPORTED_PLAYBOOK_COMMANDS:
        return cast(PlaybookCommand, raw_command)
    supported_rows = ", ".join(SUPPORTED_PLAYBOOK_COMMANDS)
    raise CdnPlaybookError(
        f"Unsupported command '{raw_command}' in {context}. Use one of: {supported_rows}."
    )


def _validate_keys(mapping: Mapping[str, object], allowed_keys: set[str], context: str) -> None:
    unknown_keys = sorted(set(mapping) - allowed_keys)
    if unknown_keys:
        raise CdnPlaybookError(f"{context.capitalize()} contains unknown fields: {', '.join(unknown_keys)}.")
