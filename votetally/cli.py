"""Command-line interface for votetally."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from time import perf_counter
from typing import List, Optional

from votetally.aggregator import ChunkAggregator, find_invalid_records
from votetally.config import AGGREGATOR_CONFIG, AggregatorConfig
from votetally.errors import VoteTallyError
from votetally.io import dump_result, load_chunk_file, result_to_document
from votetally.logging import get_logger, set_global_log_level

logger = get_logger(__name__)

# Invalid records listed by `inspect` before the rest are summarized
_MAX_LISTED_ERRORS = 20


def _format_amount(value: float) -> str:
    """Return an amount with thousands separators and up to six decimals.

    Examples:
        12.5 -> "12.5"; 10.0 -> "10"; 1234567.125 -> "1,234,567.125".
    """
    s = f"{value:,.6f}"
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    return s


def _format_duration(seconds: float) -> str:
    """Return a concise human-readable duration string.

    Examples:
        0.123 -> "123.0 ms"; 1.234 -> "1.23 s"; 75.2 -> "1m 15.2s".
    """
    if seconds < 1.0:
        return f"{seconds * 1000.0:.1f} ms"
    if seconds < 60.0:
        return f"{seconds:.2f} s"
    minutes = int(seconds // 60)
    rem = seconds - minutes * 60
    return f"{minutes}m {rem:.1f}s"


def _plural(n: int, singular: str, plural: Optional[str] = None) -> str:
    """Return grammatically correct unit for count n."""
    if n == 1:
        return singular
    return plural or (singular + "s")


def _default_results_path(chunk_path: Path) -> Path:
    """Return ``<chunk stem>.result.json`` next to the chunk file."""
    return chunk_path.with_name(f"{chunk_path.stem}.result.json")


def _aggregate_chunk(
    path: Path,
    results_override: Optional[Path],
    no_results: bool,
    stdout: bool,
    config: AggregatorConfig,
) -> None:
    """Load a chunk file, aggregate it, and report the totals.

    Args:
        path: Chunk document (JSON or YAML).
        results_override: Where to write the result document.
        no_results: Skip writing the result document.
        stdout: Print the result document to stdout.
        config: Aggregator configuration.
    """
    logger.info(f"Aggregating chunk from: {path}")
    start = perf_counter()

    try:
        records = load_chunk_file(path)
        logger.info(f"Loaded {len(records):,} {_plural(len(records), 'record')}")

        aggregator = ChunkAggregator(config)
        result = aggregator.process(records)
        elapsed = perf_counter() - start

        print(f"   Records:  {len(records):,}")
        print(f"   Voters:   {result.voter_count:,}")
        print(f"   Approved: {_format_amount(result.approved)}")
        print(f"   Rejected: {_format_amount(result.rejected)}")
        print(f"   Total:    {_format_amount(result.total)}")
        logger.info(f"Chunk aggregated in {_format_duration(elapsed)}")

        if stdout:
            print(json.dumps(result_to_document(result), indent=2))

        if not no_results:
            target = dump_result(
                result, results_override or _default_results_path(path)
            )
            logger.info(f"Results written to: {target}")

    except FileNotFoundError:
        logger.error(f"Chunk file not found: {path}")
        print(f"ERROR: Chunk file not found: {path}")
        sys.exit(1)
    except VoteTallyError as e:
        logger.error(f"Failed to aggregate chunk: {type(e).__name__}: {e}")
        print(f"ERROR: Failed to aggregate chunk: {e}")
        sys.exit(1)


def _inspect_chunk(path: Path, config: AggregatorConfig) -> None:
    """Validate a chunk file and report its shape without aggregating it.

    Every unparseable balance is listed so the chunk can be corrected in one pass.
    """
    logger.info(f"Inspecting chunk from: {path}")

    try:
        records = load_chunk_file(path)
    except FileNotFoundError:
        logger.error(f"Chunk file not found: {path}")
        print(f"ERROR: Chunk file not found: {path}")
        sys.exit(1)
    except VoteTallyError as e:
        logger.error(f"Failed to inspect chunk: {type(e).__name__}: {e}")
        print(f"ERROR: Failed to inspect chunk: {e}")
        sys.exit(1)

    voters = {r.voter for r in records}
    approvals = sum(1 for r in records if r.approved > 0)
    print(f"   Records:   {len(records):,}")
    print(f"   Voters:    {len(voters):,}")
    print(f"   Approvals: {approvals:,}")
    print(f"   Rejections: {len(records) - approvals:,}")

    if len(records) > config.chunk_size:
        print(
            f"   Chunk size: {len(records):,} exceeds preferred {config.chunk_size:,}"
        )
    else:
        print(f"   Chunk size: within preferred {config.chunk_size:,}")

    errors = find_invalid_records(records)
    if not errors:
        print("   Balances: all valid")
        return

    print(
        f"   Invalid balances: {len(errors):,} {_plural(len(errors), 'record')}"
    )
    for err in errors[:_MAX_LISTED_ERRORS]:
        print(f"     - {err}")
    if len(errors) > _MAX_LISTED_ERRORS:
        print(f"     ... and {len(errors) - _MAX_LISTED_ERRORS:,} more")
    sys.exit(1)


def _build_config(args: argparse.Namespace) -> AggregatorConfig:
    """Return the aggregator configuration selected on the command line."""
    chunk_size = args.chunk_size
    workers = getattr(args, "workers", None)
    return AggregatorConfig(
        chunk_size=chunk_size if chunk_size is not None else AGGREGATOR_CONFIG.chunk_size,
        max_workers=workers if workers is not None else AGGREGATOR_CONFIG.max_workers,
        min_partition_size=AGGREGATOR_CONFIG.min_partition_size,
        enforce_chunk_size=getattr(args, "enforce_chunk_size", False)
        or AGGREGATOR_CONFIG.enforce_chunk_size,
    )


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the ``votetally`` command.

    Args:
        argv: Optional list of command-line arguments. If ``None``, ``sys.argv``
            is used.
    """
    parser = argparse.ArgumentParser(
        prog="votetally",
        description="Aggregate and inspect vote chunks.",
    )

    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--quiet", action="store_true", help="Suppress console output (logs only)"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        title="Available commands",
        metavar="{aggregate,inspect}",
        help="Available commands",
    )

    aggregate_parser = subparsers.add_parser(
        "aggregate", help="Aggregate a vote chunk"
    )
    aggregate_parser.add_argument(
        "chunk", type=Path, help="Path to chunk document (JSON or YAML)"
    )
    aggregate_parser.add_argument(
        "--results",
        "-r",
        type=Path,
        default=None,
        help="Export result to JSON file (default: <chunk_name>.result.json)",
    )
    aggregate_parser.add_argument(
        "--no-results",
        action="store_true",
        help="Disable result file generation",
    )
    aggregate_parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print result document to stdout",
    )
    aggregate_parser.add_argument(
        "--workers",
        "-w",
        type=int,
        default=None,
        help="Maximum worker threads (default: CPU count)",
    )
    aggregate_parser.add_argument(
        "--enforce-chunk-size",
        action="store_true",
        help="Fail when the chunk holds more records than --chunk-size",
    )

    inspect_parser = subparsers.add_parser(
        "inspect", help="Validate a vote chunk without aggregating"
    )
    inspect_parser.add_argument(
        "chunk", type=Path, help="Path to chunk document (JSON or YAML)"
    )

    for p in (aggregate_parser, inspect_parser):
        p.add_argument(
            "--chunk-size",
            type=int,
            default=None,
            help=f"Preferred maximum records per chunk (default: {AGGREGATOR_CONFIG.chunk_size:,})",
        )

    effective_args = sys.argv[1:] if argv is None else argv

    if not effective_args:
        parser.print_help()
        raise SystemExit(0)

    args = parser.parse_args(effective_args)

    if args.verbose:
        set_global_log_level(logging.DEBUG)
        logger.debug("Debug logging enabled")
    elif args.quiet:
        set_global_log_level(logging.WARNING)
    else:
        set_global_log_level(logging.INFO)

    try:
        config = _build_config(args)
    except ValueError as e:
        parser.error(str(e))

    if args.command == "aggregate":
        _aggregate_chunk(
            path=args.chunk,
            results_override=args.results,
            no_results=args.no_results,
            stdout=args.stdout,
            config=config,
        )
    elif args.command == "inspect":
        _inspect_chunk(args.chunk, config)


if __name__ == "__main__":
    main()
