"""Tests for chunk document loading and result export."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from votetally.aggregator import ChunkAggregator
from votetally.errors import SchemaError
from votetally.io import (
    SCHEMA_VERSION,
    dump_result,
    load_chunk,
    load_chunk_file,
    result_to_document,
)
from votetally.types.dto import ChunkResult, VoteRecord

BARE_CHUNK = json.dumps(
    [
        {"balance": "10.5", "approved": 1, "voter": "a"},
        {"balance": "5", "approved": 0, "voter": "b"},
        {"balance": "2", "approved": 1, "voter": "a"},
    ]
)


def test_load_bare_json_array() -> None:
    records = load_chunk(BARE_CHUNK)
    assert records[0] == VoteRecord(balance="10.5", approved=1, voter="a")
    assert len(records) == 3


def test_load_versioned_envelope() -> None:
    text = json.dumps(
        {"schema_version": 1, "votes": [{"balance": "1", "approved": 0, "voter": "z"}]}
    )
    assert load_chunk(text) == [VoteRecord(balance="1", approved=0, voter="z")]


def test_load_yaml_document() -> None:
    text = """
schema_version: 1
votes:
  - balance: "10.5"
    approved: 1
    voter: a
  - {balance: "5", approved: 0, voter: b}
"""
    result = ChunkAggregator().process(load_chunk(text))
    assert (result.approved, result.rejected) == (10.5, 5.0)


@pytest.mark.parametrize("text", ["", "[]", "null"])
def test_empty_documents_load_as_empty_chunk(text: str) -> None:
    assert load_chunk(text) == []


def test_unparseable_balance_text_survives_loading() -> None:
    records = load_chunk('[{"balance": "abc", "approved": 1, "voter": "x"}]')
    assert records[0].balance == "abc"


@pytest.mark.parametrize(
    "doc",
    [
        [{"balance": 10.5, "approved": 1, "voter": "a"}],
        [{"balance": "1", "approved": 1}],
        [{"balance": "1", "approved": "yes", "voter": "a"}],
        {"votes": []},
        {"schema_version": 1, "votes": [], "extra": True},
        {"schema_version": 0, "votes": []},
        "just text",
    ],
)
def test_schema_violations_raise_schema_error(doc: object) -> None:
    with pytest.raises(SchemaError):
        load_chunk(json.dumps(doc))


def test_unsupported_schema_version() -> None:
    with pytest.raises(SchemaError, match="schema_version 2"):
        load_chunk(json.dumps({"schema_version": 2, "votes": []}))


def test_malformed_text() -> None:
    with pytest.raises(SchemaError, match="not valid JSON or YAML"):
        load_chunk("[{unclosed")


def test_load_chunk_file(tmp_path: Path) -> None:
    path = tmp_path / "chunk.json"
    path.write_text(BARE_CHUNK, encoding="utf-8")
    assert len(load_chunk_file(path)) == 3


def test_result_document_and_dump(tmp_path: Path) -> None:
    result = ChunkResult(approved=12.5, rejected=5.0, voters=frozenset({"b", "a"}))
    doc = result_to_document(result)
    assert doc == {
        "schema_version": SCHEMA_VERSION,
        "approved": 12.5,
        "rejected": 5.0,
        "voters": ["a", "b"],
    }

    target = dump_result(result, tmp_path / "out" / "result.json")
    assert target.exists()
    assert json.loads(target.read_text(encoding="utf-8")) == doc
    assert ChunkResult.from_dict(doc) == result
