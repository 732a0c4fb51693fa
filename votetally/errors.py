"""Exception types raised by votetally."""

from __future__ import annotations

from typing import Any


class VoteTallyError(Exception):
    """Base class for all votetally errors."""


class ParseError(VoteTallyError, ValueError):
    """A record's balance is not a valid decimal literal.

    Attributes:
        voter: Identifier of the voter whose record failed to parse.
        raw: The raw, unparsed balance value as received.
        detail: Short description of why parsing failed.
    """

    def __init__(self, voter: str, raw: Any, detail: str | None = None) -> None:
        self.voter = voter
        self.raw = raw
        self.detail = detail or f"invalid decimal literal {raw!r}"
        super().__init__(f"Balance parse error for voter {voter}: {self.detail}")

    def __reduce__(self):
        return (type(self), (self.voter, self.raw, self.detail))


class ChunkSizeExceededError(VoteTallyError):
    """A chunk holds more records than the enforced chunk size allows."""

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(
            f"Chunk of {size} records exceeds the configured chunk size of {limit}"
        )

    def __reduce__(self):
        return (type(self), (self.size, self.limit))


class SchemaError(VoteTallyError, ValueError):
    """A chunk document does not match the supported wire schema."""
