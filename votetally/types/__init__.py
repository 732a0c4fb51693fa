"""Shared data containers for votetally.

This package defines the immutable records and results exchanged with the
aggregator and contains no aggregation logic.
"""

from votetally.types.dto import ChunkResult, PartitionTotals, VoteRecord

__all__ = [
    "VoteRecord",
    "ChunkResult",
    "PartitionTotals",
]
