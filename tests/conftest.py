"""Global pytest configuration and shared vote fixtures."""

from __future__ import annotations

import pytest

from votetally.types.dto import VoteRecord


@pytest.fixture
def sample_records() -> list[VoteRecord]:
    """Three records with a repeated voter: approved 12.5, rejected 5."""
    return [
        VoteRecord(balance="10.5", approved=1, voter="a"),
        VoteRecord(balance="5", approved=0, voter="b"),
        VoteRecord(balance="2", approved=1, voter="a"),
    ]


@pytest.fixture
def large_records() -> list[VoteRecord]:
    """Records spanning many partitions with a known split of totals."""
    return [
        VoteRecord(
            balance=f"{(i % 97) + 0.25}",
            approved=1 if i % 3 else -1,
            voter=f"voter-{i % 1000}",
        )
        for i in range(25_000)
    ]
