"""Tests for balance parsing, partition planning and per-partition folding."""

from __future__ import annotations

import pytest

from votetally.aggregator import (
    find_invalid_records,
    fold_partition,
    parse_balance,
    partition_bounds,
)
from votetally.errors import ParseError
from votetally.types.dto import PartitionTotals, VoteRecord


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("0", 0.0),
        ("10.5", 10.5),
        ("-2.25", -2.25),
        ("+7", 7.0),
        (".5", 0.5),
        ("3.", 3.0),
        ("1e6", 1_000_000.0),
        ("2.5E-3", 0.0025),
        ("000123.4500", 123.45),
        ("123456789012345678901234567890", 1.2345678901234568e29),
    ],
)
def test_parse_balance_accepts_decimal_literals(raw: str, expected: float) -> None:
    assert parse_balance("v", raw) == pytest.approx(expected)


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "abc",
        " 1",
        "1 ",
        "1_000",
        "0x10",
        "1.2.3",
        "12,5",
        "e5",
        "-",
        "nan",
        "inf",
        "Infinity",
        "1e400",
        # Non-ASCII decimal digits (Arabic-Indic, fullwidth, Devanagari)
        "\u0661\u0662",
        "\uff11\uff12.5",
        "\u0967e2",
        "1\u0660",
    ],
)
def test_parse_balance_rejects_malformed_text(raw: str) -> None:
    with pytest.raises(ParseError) as exc_info:
        parse_balance("voter-9", raw)
    assert exc_info.value.voter == "voter-9"
    assert exc_info.value.raw == raw
    assert "voter-9" in str(exc_info.value)


@pytest.mark.parametrize("raw", [None, 3, 2.5, b"1"])
def test_parse_balance_rejects_non_text(raw: object) -> None:
    with pytest.raises(ParseError, match="expected decimal text"):
        parse_balance("v", raw)


def test_parse_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        parse_balance("v", "x")


@pytest.mark.parametrize(
    "n,parts,expected",
    [
        (0, 4, [(0, 0)]),
        (1, 4, [(0, 1)]),
        (10, 1, [(0, 10)]),
        (10, 3, [(0, 4), (4, 7), (7, 10)]),
        (8, 4, [(0, 2), (2, 4), (4, 6), (6, 8)]),
        (3, 8, [(0, 1), (1, 2), (2, 3)]),
    ],
)
def test_partition_bounds(n: int, parts: int, expected: list[tuple[int, int]]) -> None:
    assert partition_bounds(n, parts) == expected


def test_partition_bounds_cover_range_contiguously() -> None:
    bounds = partition_bounds(1001, 7)
    assert bounds[0][0] == 0
    assert bounds[-1][1] == 1001
    for (_, stop), (start, _) in zip(bounds, bounds[1:]):
        assert stop == start
    sizes = [stop - start for start, stop in bounds]
    assert max(sizes) - min(sizes) <= 1


def test_fold_partition_only_reads_its_span(sample_records: list[VoteRecord]) -> None:
    records = sample_records + [VoteRecord(balance="bad", approved=1, voter="z")]
    assert fold_partition(records, 0, 3) == PartitionTotals(12.5, 5.0)
    assert fold_partition(records, 1, 2) == PartitionTotals(0.0, 5.0)
    with pytest.raises(ParseError):
        fold_partition(records, 2, 4)


def test_partition_totals_merge_by_value() -> None:
    left = PartitionTotals(1.0, 2.0)
    right = PartitionTotals(0.5, 0.25)
    assert left + right == PartitionTotals(1.5, 2.25)
    assert left == PartitionTotals(1.0, 2.0)


def test_find_invalid_records_reports_every_bad_balance() -> None:
    records = [
        VoteRecord(balance="1", approved=1, voter="ok"),
        VoteRecord(balance="x", approved=1, voter="bad-1"),
        {"balance": "", "approved": 0, "voter": "bad-2"},
    ]
    errors = find_invalid_records(records)
    assert [e.voter for e in errors] == ["bad-1", "bad-2"]


def test_find_invalid_records_empty_for_valid_chunk(
    sample_records: list[VoteRecord],
) -> None:
    assert find_invalid_records(sample_records) == []
