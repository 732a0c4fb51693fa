"""ChunkAggregator: partitioned parallel aggregation of vote chunks.

A chunk is split into contiguous partitions, each partition is folded into its
own ``PartitionTotals`` on a worker thread, and the partition totals are merged
by value. Voter identifiers are deduplicated once every partition has parsed
successfully.

Failure is atomic: the first ``ParseError`` raised by any partition cancels
partitions that have not started yet and propagates to the caller; no partial
totals are returned.

Performance characteristics:
Time complexity: O(N / P) per partition plus O(P) for the merge, where N is the
record count and P the partition count. Partition count is bounded by the
configured worker limit and by ``min_partition_size`` so small chunks skip the
thread pool entirely.

Space complexity: O(N) for the voter set; partitions hold only two floats.
"""

from __future__ import annotations

import math
import re
import time
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from functools import reduce
from operator import add
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from votetally.config import AGGREGATOR_CONFIG, AggregatorConfig
from votetally.errors import ChunkSizeExceededError, ParseError
from votetally.logging import get_logger
from votetally.types.dto import ChunkResult, PartitionTotals, VoteRecord

logger = get_logger(__name__)

# Plain decimal or float literal: optional sign, digits with optional fraction
# or a bare fraction, optional exponent. ASCII digits only; no whitespace,
# underscores or names.
_BALANCE_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def parse_balance(voter: str, raw: Any) -> float:
    """Parse a record balance into a finite float.

    Stricter than ``float()``: ``inf``/``nan`` spellings and literals that
    overflow to infinity are rejected so chunk totals stay finite.

    Args:
        voter: Identifier of the record's voter, used in the error message.
        raw: Balance as received.

    Returns:
        Parsed balance.

    Raises:
        ParseError: If ``raw`` is not decimal text or does not fit a finite
            float.
    """
    if not isinstance(raw, str):
        raise ParseError(
            voter, raw, f"expected decimal text, got {type(raw).__name__} {raw!r}"
        )
    if _BALANCE_RE.fullmatch(raw) is None:
        raise ParseError(voter, raw)
    value = float(raw)
    if not math.isfinite(value):
        raise ParseError(voter, raw, f"balance {raw!r} is out of range")
    return value


def partition_bounds(n_records: int, partitions: int) -> List[Tuple[int, int]]:
    """Split ``range(n_records)`` into contiguous, near-equal ``(start, stop)`` spans.

    Earlier partitions take the remainder, so sizes differ by at most one.
    Returns a single empty span for an empty chunk.
    """
    if n_records <= 0:
        return [(0, 0)]
    partitions = max(1, min(partitions, n_records))
    base, extra = divmod(n_records, partitions)
    bounds: List[Tuple[int, int]] = []
    start = 0
    for i in range(partitions):
        stop = start + base + (1 if i < extra else 0)
        bounds.append((start, stop))
        start = stop
    return bounds


def fold_partition(
    records: Sequence[VoteRecord], start: int, stop: int
) -> PartitionTotals:
    """Fold ``records[start:stop]`` into approved and rejected sums.

    Raises:
        ParseError: On the first record in the span whose balance does not parse.
    """
    approved = 0.0
    rejected = 0.0
    for i in range(start, stop):
        record = records[i]
        balance = parse_balance(record.voter, record.balance)
        if record.approved > 0:
            approved += balance
        else:
            rejected += balance
    return PartitionTotals(approved=approved, rejected=rejected)


def find_invalid_records(
    records: Iterable[VoteRecord | Mapping[str, Any]],
) -> List[ParseError]:
    """Return a ``ParseError`` for every record whose balance does not parse.

    Unlike ``ChunkAggregator.process`` this scans the whole chunk, so callers
    can correct all offending records before resubmitting.
    """
    errors: List[ParseError] = []
    for record in _coerce_records(records):
        try:
            parse_balance(record.voter, record.balance)
        except ParseError as exc:
            errors.append(exc)
    return errors


def _coerce_records(
    records: Iterable[VoteRecord | Mapping[str, Any]],
) -> Sequence[VoteRecord]:
    """Return ``records`` as an indexable sequence of ``VoteRecord``."""
    items = records if isinstance(records, Sequence) else list(records)
    if all(isinstance(r, VoteRecord) for r in items):
        return items  # type: ignore[return-value]
    return [r if isinstance(r, VoteRecord) else VoteRecord.from_dict(r) for r in items]


class ChunkAggregator:
    """Aggregates one chunk of vote records into a ``ChunkResult``.

    The aggregator holds configuration only and no per-call state, so a single
    instance can serve any number of sequential or concurrent ``process`` calls.

    Attributes:
        config: Partitioning and chunk-size settings in effect.
    """

    def __init__(
        self,
        config: Optional[AggregatorConfig] = None,
        *,
        chunk_size: Optional[int] = None,
        max_workers: Optional[int] = None,
    ) -> None:
        """Initialize a ChunkAggregator.

        Args:
            config: Base configuration. Defaults to the package-wide
                ``AGGREGATOR_CONFIG``.
            chunk_size: Override for ``config.chunk_size``.
            max_workers: Override for ``config.max_workers``.
        """
        base = config or AGGREGATOR_CONFIG
        if chunk_size is not None or max_workers is not None:
            base = AggregatorConfig(
                chunk_size=chunk_size if chunk_size is not None else base.chunk_size,
                max_workers=max_workers if max_workers is not None else base.max_workers,
                min_partition_size=base.min_partition_size,
                enforce_chunk_size=base.enforce_chunk_size,
            )
        self.config = base

    @property
    def chunk_size(self) -> int:
        """Preferred maximum records per chunk for the caller's splitter."""
        return self.config.chunk_size

    def process(
        self, records: Iterable[VoteRecord | Mapping[str, Any]]
    ) -> ChunkResult:
        """Aggregate a chunk of vote records.

        Args:
            records: Vote records, or mappings with ``balance``, ``approved``
                and ``voter`` keys.

        Returns:
            Approved and rejected totals with the distinct voters of the chunk.

        Raises:
            ParseError: If any balance is not a valid decimal literal.
            ChunkSizeExceededError: If chunk-size enforcement is enabled and
                the chunk is larger than ``chunk_size``.
            SchemaError: If a mapping record is missing fields.
        """
        votes = _coerce_records(records)
        n_records = len(votes)

        if self.config.enforce_chunk_size and n_records > self.config.chunk_size:
            logger.error(
                "Chunk of %d records exceeds enforced chunk size %d",
                n_records,
                self.config.chunk_size,
            )
            raise ChunkSizeExceededError(n_records, self.config.chunk_size)

        if n_records == 0:
            return ChunkResult()

        bounds = partition_bounds(n_records, self.config.partition_count(n_records))
        logger.debug(
            "Aggregating %d records across %d partition(s)", n_records, len(bounds)
        )

        start_time = time.perf_counter()
        try:
            if len(bounds) == 1:
                totals = fold_partition(votes, 0, n_records)
            else:
                totals = self._run_parallel(votes, bounds)
        except ParseError as exc:
            logger.error(
                "Chunk of %d records rejected: voter %s has invalid balance %r",
                n_records,
                exc.voter,
                exc.raw,
            )
            raise

        voters = frozenset(record.voter for record in votes)
        elapsed = time.perf_counter() - start_time
        logger.debug(
            "Aggregated %d records (%d distinct voters) in %.3f seconds",
            n_records,
            len(voters),
            elapsed,
        )
        return ChunkResult(
            approved=totals.approved, rejected=totals.rejected, voters=voters
        )

    def _run_parallel(
        self, votes: Sequence[VoteRecord], bounds: List[Tuple[int, int]]
    ) -> PartitionTotals:
        """Fold partitions on a thread pool and merge their totals.

        Waits until every partition finished or one raised. On error the
        partitions still queued are cancelled before the error is re-raised.
        """
        with ThreadPoolExecutor(max_workers=len(bounds)) as pool:
            futures = [
                pool.submit(fold_partition, votes, start, stop)
                for start, stop in bounds
            ]
            done, pending = wait(futures, return_when=FIRST_EXCEPTION)
            for future in done:
                exc = future.exception()
                if exc is not None:
                    for other in pending:
                        other.cancel()
                    logger.debug("Partition failed, aborting chunk: %s", exc)
                    raise exc
            partials = [future.result() for future in futures]

        return reduce(add, partials, PartitionTotals())
