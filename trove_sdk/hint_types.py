"""
ZUSD Trove SDK - Data Types

Hint structures exchanged between the resolver and the trove commands.
"""

from dataclasses import dataclass
from typing import Protocol, Tuple
import json

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Largest value a uint256 key may take
MAX_UINT256 = 2**256 - 1


@dataclass(frozen=True)
class InsertPosition:
    """
    Exact bracket for a key in the sorted trove list.

    The pair is returned by SortedTroves.findInsertPosition and passed
    unchanged as (upperHint, lowerHint) to the mutating call:

      - predecessor: neighbour on the head side of the key
      - successor:   neighbour on the tail side of the key
      - head:        True when the list was empty and the pair is the
                     zero-address "insert at head" sentinel
    """
    predecessor: str
    successor: str
    head: bool = False

    @property
    def upper_hint(self) -> str:
        return self.predecessor

    @property
    def lower_hint(self) -> str:
        return self.successor

    def as_tuple(self) -> Tuple[str, str]:
        return (self.predecessor, self.successor)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "predecessor": self.predecessor,
            "successor": self.successor,
            "head": self.head,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "InsertPosition":
        """Create InsertPosition from dictionary."""
        return cls(
            predecessor=data["predecessor"],
            successor=data["successor"],
            head=bool(data.get("head", False)),
        )


HEAD_OF_LIST = InsertPosition(ZERO_ADDRESS, ZERO_ADDRESS, head=True)


@dataclass(frozen=True)
class RedemptionHints:
    """
    Hints for TroveManager.redeemCollateral.

    first_redemption_hint is the first trove that will be redeemed against;
    partial_redemption_nicr is the NICR the last (partially redeemed) trove
    ends up with, and insert_position is where that trove will be reinserted.
    """
    first_redemption_hint: str
    partial_redemption_nicr: int
    truncated_amount: int
    insert_position: InsertPosition

    def to_dict(self) -> dict:
        return {
            "first_redemption_hint": self.first_redemption_hint,
            "partial_redemption_nicr": str(self.partial_redemption_nicr),
            "truncated_amount": str(self.truncated_amount),
            "insert_position": self.insert_position.to_dict(),
        }

    def to_json(self) -> str:
        """Convert to JSON string (integers as decimal strings)."""
        return json.dumps(self.to_dict(), indent=2)


class RemoteOrderedCollection(Protocol):
    """
    Read-only view of a remote, externally ordered list.

    Implementations must go to the remote side on every call; the ordering
    is owned by the chain and may change between any two calls.
    """

    def has_partition(self, partition: int) -> bool: ...

    def size(self, partition: int) -> int: ...

    def approximate_rank(self, partition: int, key: int,
                         trials: int, seed: int) -> str: ...

    def exact_insert_position(self, partition: int, key: int,
                              hint_a: str, hint_b: str) -> Tuple[str, str]: ...
