"""Configuration classes for votetally components."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_CHUNK_SIZE = 100_000


@dataclass
class AggregatorConfig:
    """Configuration for chunk aggregation and partition planning."""

    # Advisory maximum records per chunk for the caller's splitting policy
    chunk_size: int = DEFAULT_CHUNK_SIZE

    # Upper bound on worker threads; None uses os.cpu_count()
    max_workers: Optional[int] = None

    # Smallest partition worth handing to a worker thread
    min_partition_size: int = 10_000

    # Reject chunks larger than chunk_size instead of treating it as advisory
    enforce_chunk_size: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.chunk_size, int) or self.chunk_size <= 0:
            raise ValueError(
                f"chunk_size must be a positive integer, got {self.chunk_size!r}"
            )
        if self.max_workers is not None and (
            not isinstance(self.max_workers, int) or self.max_workers <= 0
        ):
            raise ValueError(
                f"max_workers must be a positive integer or None, got {self.max_workers!r}"
            )
        if not isinstance(self.min_partition_size, int) or self.min_partition_size <= 0:
            raise ValueError(
                "min_partition_size must be a positive integer, "
                f"got {self.min_partition_size!r}"
            )

    def resolved_workers(self) -> int:
        """Return the effective worker limit."""
        if self.max_workers is not None:
            return self.max_workers
        return os.cpu_count() or 1

    def partition_count(self, n_records: int) -> int:
        """Calculate how many partitions a chunk of ``n_records`` is split into."""
        if n_records <= 0:
            return 1
        by_size = math.ceil(n_records / self.min_partition_size)
        return max(1, min(by_size, self.resolved_workers()))


# Global configuration instance
AGGREGATOR_CONFIG = AggregatorConfig()
