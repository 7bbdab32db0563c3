# src/main.py — v2
"""CLI entry point: scan, embed and all commands.

Usage:
    wsindex scan <root> --workspace-id <id> [--run-id <run>]
    wsindex embed <root> --workspace-id <id> [--run-id <run>]
    wsindex all <root> --workspace-id <id> [--run-id <run>]

The RunReport is printed as JSON on stdout. Exit codes: 0 pass, 1 step
failure, 2 invalid request or configuration, 130 interrupted.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from wsindex import __version__
from wsindex.config.settings import ConfigurationError, Settings, load_settings
from wsindex.core.errors import (
    IndexerError,
    RequestValidationError,
    StepFailedError,
    TokenizerLoadError,
)
from wsindex.core.models import RunReport, WorkspaceRequest
from wsindex.logging.logger import setup_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INVALID = 2
EXIT_INTERRUPTED = 130


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return EXIT_FAILED

    try:
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return EXIT_INTERRUPTED
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return EXIT_FAILED


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="wsindex",
        description=f"wsindex v{__version__}: workspace scan, chunk and embed pipeline",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")
    for name, help_text in (
        ("scan", "Scan the workspace tree into directory/file records"),
        ("embed", "Chunk and embed workspace files"),
        ("all", "Scan then embed under one run"),
    ):
        p = subparsers.add_parser(name, help=help_text)
        p.add_argument("root", type=Path, help="Workspace root directory")
        p.add_argument(
            "--workspace-id", required=True,
            help="Stable workspace identifier",
        )
        p.add_argument(
            "--run-id", default=None,
            help="Run ID (derived from workspace, step and time if omitted)",
        )
        p.add_argument(
            "--artifact-root", type=Path, default=None,
            help="Artifact root directory (default: ARTIFACT_ROOT setting)",
        )
        p.set_defaults(func=_cmd_index)

    return parser


def _build_indexer(settings: Settings):
    """Construct store, embedder and chunker once and inject them."""
    from wsindex.chunking.token_chunker import TokenChunker
    from wsindex.indexing.pipeline import WorkspaceIndexer
    from wsindex.rag.embeddings.embedder_factory import create_embedder
    from wsindex.rag.graph_store.graph_store_factory import create_graph_store

    chunker = TokenChunker.from_tokenizer_id(
        settings.tokenizer_id, settings.max_tokens_per_chunk,
    )
    return WorkspaceIndexer(
        settings,
        store=create_graph_store(settings),
        embedder=create_embedder(settings),
        chunker=chunker,
    )


async def _cmd_index(args: argparse.Namespace) -> int:
    """Execute one pipeline step and print its RunReport."""
    overrides: dict[str, object] = {}
    if args.artifact_root is not None:
        overrides["artifact_root"] = args.artifact_root
    try:
        settings = load_settings(**overrides)
    except ValidationError as exc:
        print(f"invalid configuration: {exc}", file=sys.stderr)
        return EXIT_INVALID

    setup_logging(
        level="DEBUG" if args.verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )

    try:
        settings.ensure_complete()
        indexer = _build_indexer(settings)
    except (ConfigurationError, TokenizerLoadError, ValueError) as exc:
        logger.error("Cannot build pipeline: %s", exc)
        return EXIT_INVALID

    request = WorkspaceRequest(
        workspace_root=str(args.root),
        workspace_id=args.workspace_id,
        run_id=args.run_id,
    )
    step = getattr(indexer, args.command)
    try:
        report = await step(request)
    except RequestValidationError as exc:
        logger.error("Invalid request: %s", exc)
        return EXIT_INVALID
    except StepFailedError as exc:
        _print_report(exc.report)
        return EXIT_FAILED
    except IndexerError as exc:
        logger.error("Step %s could not start: %s", args.command, exc)
        return EXIT_FAILED

    _print_report(report)
    return EXIT_OK


def _print_report(report: RunReport) -> None:
    print(report.model_dump_json(indent=2))


if __name__ == "__main__":
    sys.exit(main())
