"""Chunk document loading and result export.

Provides the boundary between serialized chunk documents and the in-process
aggregator: parse JSON or YAML text, validate it against the packaged JSON
schema, check the schema version, and return ``VoteRecord`` values. Results go
the other way as a versioned JSON document.
"""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List

import jsonschema
import yaml

from votetally.errors import SchemaError
from votetally.logging import get_logger
from votetally.types.dto import ChunkResult, VoteRecord

logger = get_logger(__name__)

SCHEMA_VERSION = 1
SUPPORTED_SCHEMA_VERSIONS = frozenset({1})


@lru_cache(maxsize=1)
def _chunk_schema() -> Dict[str, Any]:
    try:
        with (
            resources.files("votetally.schemas")
            .joinpath("vote_chunk.json")
            .open("r", encoding="utf-8")
        ) as f:
            return json.load(f)
    except (OSError, ValueError) as exc:  # pragma: no cover
        raise RuntimeError(
            "Failed to locate packaged schema 'votetally/schemas/vote_chunk.json'."
        ) from exc


def validate_chunk_document(data: Any) -> List[Dict[str, Any]]:
    """Validate a decoded chunk document and return its list of record mappings.

    Raises:
        SchemaError: If the document does not match the chunk schema or names
            an unsupported ``schema_version``.
    """
    try:
        jsonschema.validate(data, _chunk_schema())
    except jsonschema.ValidationError as exc:
        location = "/".join(str(p) for p in exc.absolute_path) or "<root>"
        logger.error("Chunk document invalid at %s: %s", location, exc.message)
        raise SchemaError(
            f"Chunk document invalid at {location}: {exc.message}"
        ) from exc

    if isinstance(data, dict):
        version = data["schema_version"]
        if version not in SUPPORTED_SCHEMA_VERSIONS:
            raise SchemaError(
                f"Unsupported chunk schema_version {version}; "
                f"supported: {sorted(SUPPORTED_SCHEMA_VERSIONS)}"
            )
        return data["votes"]
    return data


def load_chunk(text: str) -> List[VoteRecord]:
    """Load, validate and convert a chunk document.

    Accepts JSON or YAML text holding either a bare array of records or a
    ``{"schema_version": 1, "votes": [...]}`` envelope.

    Raises:
        SchemaError: If the text cannot be parsed or fails validation.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise SchemaError(
                f"Chunk document is not valid JSON or YAML: {exc}"
            ) from exc
    if data is None:
        data = []

    records = [VoteRecord.from_dict(item) for item in validate_chunk_document(data)]
    logger.debug("Loaded chunk with %d records", len(records))
    return records


def load_chunk_file(path: Path | str) -> List[VoteRecord]:
    """Read a chunk document from ``path``; see ``load_chunk``."""
    return load_chunk(Path(path).read_text(encoding="utf-8"))


def result_to_document(result: ChunkResult) -> Dict[str, Any]:
    """Return the versioned wire document for a chunk result."""
    return {"schema_version": SCHEMA_VERSION, **result.to_dict()}


def dump_result(result: ChunkResult, path: Path | str) -> Path:
    """Write ``result`` as a JSON document to ``path`` and return the path."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(
        json.dumps(result_to_document(result), indent=2) + "\n", encoding="utf-8"
    )
    logger.debug("Wrote chunk result to %s", target)
    return target
