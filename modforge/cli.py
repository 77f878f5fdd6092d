"""Command-line entry point: ``modforge <kind> <name> [options]``."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Sequence

import yaml

from modforge.config import EngineConfig
from modforge.engine import run_structured
from modforge.errors import ScaffoldError, StorageError
from modforge.host import generate_library
from modforge.logging import configure_logging, get_logger
from modforge.metadata import LibraryKind
from modforge.platform import Platform
from modforge.storage import FileSystemStorage, MemoryTree, ResponseCollector
from modforge.utils import (
    console,
    print_error,
    print_file_list,
    print_success,
    print_summary_table,
    print_warning,
)

logger = get_logger("cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="modforge",
        description="Generate an Effect library skeleton inside an Nx workspace",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  modforge infra cache\n"
            "  modforge feature payment --client-server --cqrs\n"
            "  modforge infra database --directory libs/platform --dry-run\n"
            "  modforge feature billing --consolidates-providers --providers stripe,paypal --json\n"
        ),
    )
    parser.add_argument("kind", choices=[k.value for k in LibraryKind], help="Library kind")
    parser.add_argument("name", help="Base name of the library")
    parser.add_argument("--directory", default=None, help="Parent directory for the library")
    parser.add_argument("--description", default=None, help="Library description")
    parser.add_argument("--tags", default=None, help="Comma-separated extra tags")
    parser.add_argument(
        "--platform", choices=[p.value for p in Platform], default=None, help="Target platform"
    )
    parser.add_argument(
        "--client-server",
        dest="include_client_server_split",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Force the client/server split on or off (default: by concern)",
    )
    parser.add_argument("--edge", action="store_true", help="Add an edge runtime layer")
    parser.add_argument("--cqrs", action="store_true", help="Add CQRS command/query/projection files")
    parser.add_argument(
        "--consolidates-providers",
        action="store_true",
        help="Generate an orchestrator over --providers",
    )
    parser.add_argument("--providers", default=None, help="Comma-separated provider names")
    parser.add_argument("--sub-modules", default=None, help="Comma-separated sub-module names")
    parser.add_argument(
        "--workspace", default=None, help="Workspace root to write into (default: config / cwd)"
    )
    parser.add_argument("--config", default=None, help="JSON or YAML configuration file")
    parser.add_argument("--dry-run", action="store_true", help="Plan and render without writing")
    parser.add_argument("--json", action="store_true", help="Print a structured JSON result")
    parser.add_argument(
        "--atomic", action="store_true", help="Stage everything in memory, then write it all at once"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser


def request_from_args(args: argparse.Namespace) -> dict[str, Any]:
    """Map parsed arguments onto a raw request mapping."""
    raw: dict[str, Any] = {
        "name": args.name,
        "library_kind": args.kind,
        "parent_directory": args.directory,
        "description": args.description,
        "tags": args.tags,
        "platform": args.platform,
        "include_client_server_split": args.include_client_server_split,
        "include_edge_surface": True if args.edge else None,
        "include_cqrs": args.cqrs,
        "consolidates_providers": args.consolidates_providers,
        "providers": args.providers,
        "sub_modules": args.sub_modules,
    }
    return {key: value for key, value in raw.items() if value is not None}


def load_config(args: argparse.Namespace) -> EngineConfig:
    config = EngineConfig.load(Path(args.config)) if args.config else EngineConfig.from_env()
    if args.workspace:
        config = config.model_copy(update={"workspace_root": Path(args.workspace)})
    return config


async def _run(args: argparse.Namespace, config: EngineConfig) -> int:
    raw = request_from_args(args)

    if args.json:
        payload = await run_structured(raw, ResponseCollector(), config)
        console.print_json(json.dumps(payload))
        return 0 if payload["ok"] else 1

    workspace = FileSystemStorage(config.workspace_root)
    if args.dry_run or args.atomic:
        result, tree = await generate_library(raw, MemoryTree(root=str(config.workspace_root)), config)
        if args.atomic:
            await tree.commit(workspace)
    else:
        result, _ = await generate_library(raw, workspace, config)

    print_summary_table(
        {
            "Project": result.project_name,
            "Root": result.project_root,
            "Package": result.package_identifier,
            "Files": str(len(result.files_written)),
        },
        title="modforge",
    )
    print_file_list(result.files_written)
    if args.dry_run:
        print_warning("Dry run: nothing was written to disk.")
    else:
        print_success(f"Generated {result.project_name} in {workspace.get_root_path()}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point for ``modforge``."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose)

    try:
        config = load_config(args)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        print_error(f"Error: could not load configuration: {exc}")
        return 1

    try:
        return asyncio.run(_run(args, config))
    except StorageError as exc:
        print_error(f"{exc.kind}: {exc.message}")
        if exc.files_written:
            print_warning(f"{len(exc.files_written)} files were written before the failure:")
            print_file_list(exc.files_written, title="Written")
        return 1
    except ScaffoldError as exc:
        print_error(f"{exc.kind}: {exc.message}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
