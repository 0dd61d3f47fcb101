"""Playbook CLI command wiring.

This module registers the playbook subcommand and delegates execution to
the shared playbook engine used by CLI and SDK entry points.
"""

from __future__ import annotations

import argparse
from typing import Any

from core.playbook_execution import execute_playbook_file
from store.cdn_client import CdnClient


def add_playbook_command(subparsers: Any) -> None:
    """Register playbook subcommand."""
    parser = subparsers.add_parser(
        "playbook",
        help="Run a YAML playbook of content operations",
    )
    parser.add_argument("playbook_file", help="Path to YAML playbook file")


def run_playbook_command(client: CdnClient, args: argparse.Namespace) -> int:
    """Handle playbook command invocation."""
    output_lines = execute_playbook_file(client, args.playbook_file)
    for line in output_lines:
        print(line)
    return 0
