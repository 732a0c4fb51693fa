"""Vote records and aggregation results.

Defines the immutable containers that cross the aggregation boundary. Objects
expose ``to_dict()``/``from_dict()`` using the wire field names of the chunk
schema so adapters can marshal them without extra mapping code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Mapping

from votetally.errors import SchemaError
from votetally.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class VoteRecord:
    """A single weighted vote.

    Attributes:
        balance: Vote weight as decimal text, kept unparsed to avoid precision
            loss in transit.
        approved: Approval flag; any value above zero approves, anything else
            rejects.
        voter: Opaque voter identifier. May repeat within a chunk.
    """

    balance: str
    approved: int
    voter: str

    @property
    def is_approval(self) -> bool:
        return self.approved > 0

    def to_dict(self) -> Dict[str, Any]:
        """Return the wire representation of this record."""
        return {"balance": self.balance, "approved": self.approved, "voter": self.voter}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "VoteRecord":
        """Build a record from a wire mapping.

        The balance is carried through as received; it is validated when the
        chunk is aggregated so that errors name the offending voter.

        Raises:
            SchemaError: If a field is missing or ``approved``/``voter`` have
                the wrong type.
        """
        if not isinstance(data, Mapping):
            raise SchemaError(
                f"Vote record must be a mapping, got {type(data).__name__}"
            )
        missing = [k for k in ("balance", "approved", "voter") if k not in data]
        if missing:
            raise SchemaError(
                f"Vote record missing field(s): {', '.join(missing)}"
            )
        approved = data["approved"]
        if isinstance(approved, bool) or not isinstance(approved, int):
            logger.error("Vote record 'approved' must be an integer: %r", approved)
            raise SchemaError(
                f"Vote record 'approved' must be an integer, got {approved!r}"
            )
        voter = data["voter"]
        if not isinstance(voter, str):
            logger.error("Vote record 'voter' must be a string: %r", voter)
            raise SchemaError(f"Vote record 'voter' must be a string, got {voter!r}")
        return cls(balance=data["balance"], approved=approved, voter=voter)


@dataclass(frozen=True, slots=True)
class PartitionTotals:
    """Approved and rejected sums folded from one partition of a chunk."""

    approved: float = 0.0
    rejected: float = 0.0

    def __add__(self, other: "PartitionTotals") -> "PartitionTotals":
        if not isinstance(other, PartitionTotals):
            return NotImplemented
        return PartitionTotals(
            approved=self.approved + other.approved,
            rejected=self.rejected + other.rejected,
        )


@dataclass(frozen=True, slots=True)
class ChunkResult:
    """Outcome of aggregating one chunk.

    Attributes:
        approved: Sum of balances of approving records.
        rejected: Sum of balances of rejecting records.
        voters: Distinct voter identifiers seen in the chunk.
    """

    approved: float = 0.0
    rejected: float = 0.0
    voters: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def total(self) -> float:
        return self.approved + self.rejected

    @property
    def voter_count(self) -> int:
        return len(self.voters)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable dictionary representation.

        Voters are emitted sorted so repeated dumps of the same result are
        byte-identical; their order carries no meaning.
        """
        return {
            "approved": float(self.approved),
            "rejected": float(self.rejected),
            "voters": sorted(self.voters),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChunkResult":
        """Build a result from its dictionary representation."""
        voters: Iterable[str] = data.get("voters", ())
        if isinstance(voters, str):
            logger.error("Chunk result 'voters' must be a list of strings: %r", voters)
            raise SchemaError(
                f"Chunk result 'voters' must be a list of strings, got {voters!r}"
            )
        try:
            return cls(
                approved=float(data.get("approved", 0.0)),
                rejected=float(data.get("rejected", 0.0)),
                voters=frozenset(voters),
            )
        except (TypeError, ValueError) as exc:
            raise SchemaError(f"Invalid chunk result: {exc}") from exc
