"""Runvault CLI entry points.
This module exposes read-only inspection commands for a store file.
It maps argparse commands onto store facade calls.
"""

from __future__ import annotations

import argparse
from pathlib import Path
import sys
from typing import Any, Mapping, Sequence

from core.config import RunVaultConfig
from core.errors import RunVaultError
from core.logging_config import configure_logging
from store.artifact_store import ArtifactStore


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="runvault", description="Runvault store inspection CLI")
    parser.add_argument("--store", help="Override RUNVAULT_STORE_PATH for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_runs_command(subparsers)
    _add_show_command(subparsers)
    _add_system_params_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Runvault CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        store = _build_store(args.store)
        if args.command == "runs":
            return _run_runs_command(store)
        if args.command == "show":
            return _run_show_command(store, args)
        if args.command == "system-params":
            return _run_system_params_command(store)
    except RunVaultError as error:
        print(f"error: {error}", file=sys.stderr)
        return 1
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_store(store_path: str | None) -> ArtifactStore:
    """Build store facade with optional path override.

    Args:
        store_path: Optional override path.

    Returns:
        Configured store facade.
    """
    if store_path:
        return ArtifactStore(Path(store_path).expanduser().resolve())
    return ArtifactStore.from_config(RunVaultConfig.from_env())


def _run_runs_command(store: ArtifactStore) -> int:
    """Handle runs command.

    Args:
        store: Store facade.

    Returns:
        Exit code.
    """
    for summary in store.describe_runs():
        layout = "ok" if summary.compatible else "incompatible"
        params = _format_params(summary.run_params) if summary.run_params is not None else "-"
        print(f"{summary.run_id}\t{len(summary.instance_ids)}\t{layout}\t{params}")
    return 0


def _run_show_command(store: ArtifactStore, args: argparse.Namespace) -> int:
    """Handle show command.

    Args:
        store: Store facade.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    artifact, system_params, run_params = store.load(args.run_id)
    print(f"system_params={_format_params(system_params)}")
    print(f"run_params={_format_params(run_params)}")
    print(f"artifact_type={type(artifact).__name__}")
    return 0


def _run_system_params_command(store: ArtifactStore) -> int:
    """Handle system-params command."""
    system_params = store.get_system_params()
    print(_format_params(system_params) if system_params is not None else "-")
    return 0


def _format_params(params: Mapping[str, Any]) -> str:
    """Render a params mapping as sorted ``key=value`` pairs."""
    return " ".join(f"{key}={_format_value(params[key])}" for key in sorted(params))


def _format_value(value: Any) -> str:
    tolist = getattr(value, "tolist", None)
    if callable(tolist):
        return str(tolist())
    return str(value)


def _add_runs_command(subparsers: Any) -> None:
    """Register runs subcommand."""
    subparsers.add_parser("runs", help="List runs with instance counts and params")


def _add_show_command(subparsers: Any) -> None:
    """Register show subcommand."""
    parser = subparsers.add_parser("show", help="Load the latest instance of one run")
    parser.add_argument("--run-id", help="Optional run id; the most recent run when omitted")


def _add_system_params_command(subparsers: Any) -> None:
    """Register system-params subcommand."""
    subparsers.add_parser("system-params", help="Print stored system params")
