"""Command-line entry point for knowmap.

Usage:
    knowmap init [--name NAME]
    knowmap steering [--dry-run] [--depth N]
    knowmap knowledge init [--dry-run] [--depth N]
    knowmap knowledge generate [--dry-run]
    knowmap knowledge update (--delta-spec PATH | --modules NAME [NAME ...]) [--best-effort]
"""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence
from pathlib import Path

from knowmap_core.bootstrap import init_project
from knowmap_core.config import read_config
from knowmap_core.errors import KnowmapError
from knowmap_core.knowledge import (
    KnowledgeUpdateOptions,
    KnowledgeUpdater,
    run_knowledge_generate,
    run_knowledge_init,
    run_steering,
)
from knowmap_core.settings import get_settings
from knowmap_core.telemetry import init_telemetry, shutdown_telemetry

from knowmap_cli import output
from knowmap_cli.output import Verbosity

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(verbosity: Verbosity) -> None:
    if verbosity == "verbose":
        level: int | str = logging.DEBUG
    elif verbosity == "quiet":
        level = logging.ERROR
    else:
        level = get_settings().log_level.upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)


def _cmd_init(args: argparse.Namespace, cwd: Path, verbosity: Verbosity) -> None:
    output.print_init(init_project(cwd, name=args.name), verbosity)


def _cmd_steering(args: argparse.Namespace, cwd: Path, verbosity: Verbosity) -> None:
    output.print_steering(run_steering(cwd, depth=args.depth, dry_run=args.dry_run), verbosity)


def _cmd_knowledge_init(args: argparse.Namespace, cwd: Path, verbosity: Verbosity) -> None:
    output.print_knowledge_init(run_knowledge_init(cwd, depth=args.depth, dry_run=args.dry_run), verbosity)


def _cmd_knowledge_generate(args: argparse.Namespace, cwd: Path, verbosity: Verbosity) -> None:
    output.print_knowledge_generate(run_knowledge_generate(cwd, dry_run=args.dry_run), verbosity)


def _cmd_knowledge_update(args: argparse.Namespace, cwd: Path, verbosity: Verbosity) -> None:
    options = KnowledgeUpdateOptions(
        delta_spec_path=args.delta_spec.resolve() if args.delta_spec else None,
        manual_modules=args.modules,
        best_effort=args.best_effort,
    )
    output.print_knowledge_update(KnowledgeUpdater(cwd).execute(options), verbosity)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="knowmap",
        description="Detect project modules and maintain a Markdown knowledge base for them",
    )
    noise = parser.add_mutually_exclusive_group()
    noise.add_argument("-v", "--verbose", action="store_true", help="Debug logging and detailed output")
    noise.add_argument("-q", "--quiet", action="store_true", help="Only print errors")
    parser.add_argument("--cwd", type=Path, default=Path("."), help="Project root (default: current directory)")

    commands = parser.add_subparsers(dest="command", metavar="COMMAND", required=True)

    init = commands.add_parser("init", help="Create .knowmap.yaml and the knowledge-base skeleton")
    init.add_argument("--name", help="Project name (default: directory name)")
    init.set_defaults(handler=_cmd_init, needs_config=False)

    steering = commands.add_parser("steering", help="Detect modules and write module-map.yaml")
    steering.add_argument("--dry-run", action="store_true", help="Report without writing files")
    steering.add_argument("--depth", type=int, help="Maximum scan depth")
    steering.set_defaults(handler=_cmd_steering, needs_config=True)

    knowledge = commands.add_parser("knowledge", help="Knowledge-base commands")
    knowledge_commands = knowledge.add_subparsers(dest="knowledge_command", metavar="COMMAND", required=True)

    k_init = knowledge_commands.add_parser("init", help="Write raw-scan.md and skeleton documents")
    k_init.add_argument("--dry-run", action="store_true", help="Report without writing files")
    k_init.add_argument("--depth", type=int, help="Maximum scan depth")
    k_init.set_defaults(handler=_cmd_knowledge_init, needs_config=True)

    k_generate = knowledge_commands.add_parser("generate", help="Write a README for every registered module")
    k_generate.add_argument("--dry-run", action="store_true", help="Report without writing files")
    k_generate.set_defaults(handler=_cmd_knowledge_generate, needs_config=True)

    k_update = knowledge_commands.add_parser("update", help="Update module documents from a delta-spec")
    source = k_update.add_mutually_exclusive_group(required=True)
    source.add_argument("--delta-spec", type=Path, help="Delta-spec document listing requirement changes")
    source.add_argument("--modules", nargs="+", metavar="NAME", help="Modules to regenerate")
    k_update.add_argument(
        "--best-effort",
        action="store_true",
        help="Keep going when a module fails and report failures at the end",
    )
    k_update.set_defaults(handler=_cmd_knowledge_update, needs_config=True)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and return the process exit status."""
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 2

    verbosity: Verbosity = "verbose" if args.verbose else "quiet" if args.quiet else "normal"
    configure_logging(verbosity)
    init_telemetry()

    cwd = args.cwd.resolve()
    try:
        if args.needs_config:
            read_config(cwd)
        args.handler(args, cwd, verbosity)
    except KnowmapError as e:
        logger.debug("Command failed", exc_info=True)
        output.print_error(e, verbosity)
        return 1
    finally:
        shutdown_telemetry()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
