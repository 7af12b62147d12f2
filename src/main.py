# src/main.py - v2
"""CLI entry point: analyze, batch, stats commands.

Usage:
    nutriscope analyze <file> [--operation analysis|nutrition|tags] [--source-type T] [--mock]
    nutriscope batch <jsonl-file> [--operation ...] [--batch-size N] [--mock]
    nutriscope stats
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from nutriscope.version import __version__

logger = logging.getLogger(__name__)

_OPERATIONS = ("analysis", "nutrition", "tags")


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        from nutriscope.config.settings import Settings

        settings = Settings()
        _setup_logging(settings, args.verbose)
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="nutriscope",
        description=f"nutriscope v{__version__} - AI analysis of nutrition content",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- analyze ---
    p_analyze = subparsers.add_parser(
        "analyze", help="Analyze a single text file",
    )
    p_analyze.add_argument("file", type=Path, help="Path to a UTF-8 text file")
    p_analyze.add_argument(
        "--operation", choices=_OPERATIONS, default="analysis",
        help="Operation to run (default: analysis)",
    )
    p_analyze.add_argument(
        "--source-type", default="general",
        help="Source type: paper, youtube, news, general (default: general)",
    )
    p_analyze.add_argument(
        "--mock", action="store_true",
        help="Use the deterministic mock backend",
    )
    p_analyze.set_defaults(func=_cmd_analyze)

    # --- batch ---
    p_batch = subparsers.add_parser(
        "batch", help="Process a JSON Lines file of inputs",
    )
    p_batch.add_argument(
        "file", type=Path,
        help='JSONL file, one {"content": ..., "source_type": ...} per line',
    )
    p_batch.add_argument(
        "--operation", choices=_OPERATIONS, default="analysis",
        help="Operation to run (default: analysis)",
    )
    p_batch.add_argument(
        "--batch-size", type=int, default=None,
        help="Items submitted together (default: BATCH_SIZE setting)",
    )
    p_batch.add_argument(
        "--mock", action="store_true",
        help="Use the deterministic mock backend",
    )
    p_batch.set_defaults(func=_cmd_batch)

    # --- stats ---
    p_stats = subparsers.add_parser(
        "stats", help="Show the effective orchestrator configuration",
    )
    p_stats.set_defaults(func=_cmd_stats)

    return parser


async def _cmd_analyze(args: argparse.Namespace, settings) -> int:
    """Run one operation over a text file and print the JSON result."""
    from nutriscope.api.facade import create_orchestrator
    from nutriscope.core.models import Operation, OperationRequest

    file_path: Path = args.file
    if not file_path.is_file():
        logger.error("File not found: %s", file_path)
        return 1

    content = file_path.read_text(encoding="utf-8")
    orchestrator = create_orchestrator(settings, mock_mode=args.mock)
    request = OperationRequest.create(Operation(args.operation), content, args.source_type)

    logger.info("Running %s on %s", args.operation, file_path.name)
    result = await orchestrator.execute(request)
    print(result.model_dump_json(indent=2, by_alias=True))
    return 0


async def _cmd_batch(args: argparse.Namespace, settings) -> int:
    """Run one operation over every line of a JSONL file."""
    from nutriscope.api.facade import create_orchestrator

    file_path: Path = args.file
    if not file_path.is_file():
        logger.error("File not found: %s", file_path)
        return 1

    items = _read_batch_file(file_path)
    if not items:
        logger.error("No inputs in %s", file_path)
        return 1
    if args.batch_size is not None and args.batch_size < 1:
        logger.error("--batch-size must be >= 1")
        return 1

    orchestrator = create_orchestrator(settings, mock_mode=args.mock)
    results = await orchestrator.process_batch(
        items, operation=args.operation, batch_size=args.batch_size,
    )

    payload = [r.model_dump(mode="json", by_alias=True) for r in results]
    print(json.dumps(payload, indent=2, ensure_ascii=False))

    failed = sum(1 for r in results if not r.success)
    print(f"\nBatch complete: {len(results) - failed} ok, {failed} failed", file=sys.stderr)
    return 0


async def _cmd_stats(args: argparse.Namespace, settings) -> int:
    """Print the configuration an orchestrator would start with."""
    from nutriscope.config.orchestrator import OrchestratorConfig

    config = OrchestratorConfig.from_settings(settings)
    print(f"\nnutriscope v{__version__}")
    print(f"  Provider:        {settings.llm_provider} ({settings.llm_model})")
    print(f"  Credentials:     {'configured' if settings.has_credentials else 'none (mock)'}")
    print(f"  Cache backend:   {settings.cache_backend}")
    for name, value in config.model_dump().items():
        print(f"  {name + ':':<26} {value}")
    return 0


def _read_batch_file(path: Path) -> list:
    """Parse a JSONL batch file; blank lines are skipped."""
    from nutriscope.batch.models import BatchItem

    items: list[BatchItem] = []
    with path.open(encoding="utf-8") as f:
        for line_no, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError as e:
                raise ValueError(f"{path.name}:{line_no}: invalid JSON ({e.msg})") from e
            if isinstance(record, str):
                record = {"content": record}
            items.append(BatchItem.model_validate(record))
    return items


def _setup_logging(settings, verbose: bool) -> None:
    """Configure logging for CLI usage from settings."""
    from nutriscope.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


if __name__ == "__main__":
    sys.exit(main())
