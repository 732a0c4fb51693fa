"""votetally: weighted vote chunk aggregation.

Aggregates one chunk of vote records into approved and rejected totals and the
set of distinct voters, folding partitions of the chunk in parallel.

Primary API:
    ChunkAggregator - Aggregates a chunk into a ChunkResult
    VoteRecord, ChunkResult - Input record and output result
    load_chunk(), dump_result() - Versioned JSON/YAML boundary adapter

Example:
    from votetally import ChunkAggregator, VoteRecord

    result = ChunkAggregator().process(
        [
            VoteRecord(balance="10.5", approved=1, voter="a"),
            VoteRecord(balance="5", approved=0, voter="b"),
        ]
    )
    result.approved, result.rejected, result.voters
"""

from __future__ import annotations

from votetally import cli, logging
from votetally._version import __version__
from votetally.aggregator import ChunkAggregator, find_invalid_records, parse_balance
from votetally.config import AGGREGATOR_CONFIG, AggregatorConfig
from votetally.errors import (
    ChunkSizeExceededError,
    ParseError,
    SchemaError,
    VoteTallyError,
)
from votetally.io import dump_result, load_chunk, load_chunk_file, result_to_document
from votetally.types.dto import ChunkResult, PartitionTotals, VoteRecord

__all__ = [
    # Version
    "__version__",
    # Aggregation
    "ChunkAggregator",
    "find_invalid_records",
    "parse_balance",
    # Types
    "VoteRecord",
    "ChunkResult",
    "PartitionTotals",
    # Configuration
    "AggregatorConfig",
    "AGGREGATOR_CONFIG",
    # Errors
    "VoteTallyError",
    "ParseError",
    "ChunkSizeExceededError",
    "SchemaError",
    # I/O
    "load_chunk",
    "load_chunk_file",
    "dump_result",
    "result_to_document",
    # Utilities
    "cli",
    "logging",
]
