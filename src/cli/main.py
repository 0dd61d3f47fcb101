"""CDN CLI entry points.
This module exposes the content store operations as subcommands.
It maps argparse commands onto SDK calls over file-backed maps.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
import sys
from typing import Any, Sequence

from cli.playbook_command import add_playbook_command, run_playbook_command
from core.config import CdnConfig
from core.constants import STORAGE_BACKEND_FILE
from core.errors import CdnError
from core.logging_config import configure_logging
from core.playbook_execution import format_content
from store.cdn_client import CdnClient


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="cdn", description="Versioned content store CLI")
    parser.add_argument("--data-root", help="Override CDN_DATA_ROOT for this command")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Structured log level written to stderr",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_upload_command(subparsers)
    _add_get_command(subparsers)
    _add_update_command(subparsers)
    _add_set_access_command(subparsers)
    subparsers.add_parser("list", help="Print every stored content record")
    subparsers.add_parser("reconcile", help="Restore access records for orphaned content")
    add_playbook_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CDN CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    try:
        client = _build_client(args.data_root)
        return _dispatch(client, args, parser)
    except CdnError as error:
        print(str(error), file=sys.stderr)
        return 1


def _dispatch(client: CdnClient, args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    if args.command == "upload":
        return _run_upload_command(client, args)
    if args.command == "get":
        return _run_get_command(client, args)
    if args.command == "update":
        return _run_update_command(client, args)
    if args.command == "set-access":
        return _run_set_access_command(client, args)
    if args.command == "list":
        return _run_list_command(client)
    if args.command == "reconcile":
        return _run_reconcile_command(client)
    if args.command == "playbook":
        return run_playbook_command(client, args)
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_client(data_root: str | None) -> CdnClient:
    """Build a file-backed SDK client with optional data-root override.

    Args:
        data_root: Optional override path.

    Returns:
        Configured SDK client.
    """
    config = replace(CdnConfig.from_env(), storage_backend=STORAGE_BACKEND_FILE)
    if data_root:
        config = replace(config, data_root=Path(data_root).expanduser().resolve())
    return CdnClient(config)


def _add_upload_command(subparsers: Any) -> None:
    parser = subparsers.add_parser("upload", help="Upload new content")
    parser.add_argument("--owner", required=True, help="Caller id of the uploader")
    parser.add_argument("--title", required=True, help="Content title")
    parser.add_argument("--body", required=True, help="Content body text or URL")


def _add_get_command(subparsers: Any) -> None:
    parser = subparsers.add_parser("get", help="Read content as a caller")
    parser.add_argument("content_id", help="Content id")
    parser.add_argument("--caller", required=True, help="Caller id requesting access")


def _add_update_command(subparsers: Any) -> None:
    parser = subparsers.add_parser("update", help="Update content as its owner")
    parser.add_argument("content_id", help="Content id")
    parser.add_argument("--updater", required=True, help="Caller id requesting the update")
    parser.add_argument("--title", help="New title; omit or leave empty to keep")
    parser.add_argument("--body", help="New body; omit or leave empty to keep")


def _add_set_access_command(subparsers: Any) -> None:
    parser = subparsers.add_parser("set-access", help="Grant or revoke read access")
    parser.add_argument("content_id", help="Content id")
    parser.add_argument("--requester", required=True, help="Caller id making the change")
    parser.add_argument("--user", required=True, help="Caller id to grant or revoke")
    action_group = parser.add_mutually_exclusive_group(required=True)
    action_group.add_argument("--grant", dest="grant", action="store_true")
    action_group.add_argument("--revoke", dest="grant", action="store_false")


def _run_upload_command(client: CdnClient, args: argparse.Namespace) -> int:
    content_id = client.upload_content(args.owner, args.title, args.body)
    print(f"Content uploaded successfully with ID={content_id}")
    return 0


def _run_get_command(client: CdnClient, args: argparse.Namespace) -> int:
    content = client.get_content(args.content_id, args.caller)
    print(format_content(content))
    return 0


def _run_update_command(client: CdnClient, args: argparse.Namespace) -> int:
    content = client.update_content(
        args.content_id,
        args.updater,
        new_title=args.title,
        new_body=args.body,
    )
    print(f"Content with ID={content.id} updated successfully (version {content.version})")
    return 0


def _run_set_access_command(client: CdnClient, args: argparse.Namespace) -> int:
    client.set_access(args.content_id, args.requester, args.user, args.grant)
    print(f"Access updated for content with ID={args.content_id}")
    return 0


def _run_list_command(client: CdnClient) -> int:
    for content in client.get_all_content():
        print(format_content(content))
    return 0


def _run_reconcile_command(client: CdnClient) -> int:
    for content_id in client.reconcile():
        print(f"Restored access record for content with ID={content_id}")
    return 0
