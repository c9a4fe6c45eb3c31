"""
ZUSD Trove SDK - Hint Resolver

Finds where a trove belongs in the on-chain sorted list without pulling
the list to the client:

  1. size(partition)                    -> n
  2. approximate_rank(key, n * factor)  -> candidate near the right spot
  3. exact_insert_position(candidate)   -> (predecessor, successor)

The candidate is passed as both search-start hints; the contract walks
outward from it until the key is bracketed.
"""

import logging
from typing import Any, Callable, Optional

from .config import DEFAULT_MAX_ITERATIONS, RANDOM_SEED, SAMPLING_FACTOR
from .errors import HintError, InvalidPartition, RemoteQueryFailed
from .hint_types import (
    HEAD_OF_LIST,
    ZERO_ADDRESS,
    InsertPosition,
    RedemptionHints,
    RemoteOrderedCollection,
)
from .nicr import DECIMAL_PRECISION, format_ratio, require_uint, validate_key

log = logging.getLogger(__name__)


class HintResolver:
    """
    Stateless two-phase hint lookup.

    Every call is a fresh pipeline of remote reads; nothing is remembered
    between calls, so one resolver may be shared across threads. The
    returned bracket is exact only as of the findInsertPosition call:
    another transaction landing before ours can make it stale.

    Usage:
        resolver = HintResolver(TroveRPCClient(load_network()))

        nicr = compute_nicr(coll, debt)
        position = resolver.resolve_insert_position(0, nicr)
        borrower_ops.openTrovewithEth(fee, zusd, position.upper_hint, position.lower_hint)
    """

    def __init__(self, collection: RemoteOrderedCollection,
                 sampling_factor: int = SAMPLING_FACTOR,
                 random_seed: int = RANDOM_SEED):
        """
        Args:
            collection: Remote sorted list (TroveRPCClient in production)
            sampling_factor: getApproxHint trials per trove in the list
            random_seed: Seed for getApproxHint; fixed for reproducible hints
        """
        if sampling_factor <= 0:
            raise ValueError(f"sampling_factor must be positive, got {sampling_factor}")
        self.collection = collection
        self.sampling_factor = sampling_factor
        self.random_seed = random_seed

    def _query(self, method: str, fn: Callable[[], Any]) -> Any:
        try:
            return fn()
        except HintError:
            raise
        except Exception as e:
            raise RemoteQueryFailed(method, str(e)) from e

    def _check_partition(self, partition: Any) -> int:
        if isinstance(partition, bool) or not isinstance(partition, int):
            raise InvalidPartition(partition)
        if not self.collection.has_partition(partition):
            raise InvalidPartition(partition)
        return partition

    def trials_for(self, size: int) -> int:
        """Number of getApproxHint trials for a list of the given size."""
        return size * self.sampling_factor

    def resolve_insert_position(self, partition: int, key: int,
                                seed: Optional[int] = None) -> InsertPosition:
        """
        Exact (predecessor, successor) bracket for key.

        Args:
            partition: Collateral index of the sorted list
            key: NICR of the trove being inserted or moved
            seed: Override the resolver's random seed for this call

        Returns:
            InsertPosition, or HEAD_OF_LIST if the partition has no troves

        Raises:
            InvalidPartition: partition is not a configured collateral
            InvalidKey: key is not a uint256
            RemoteQueryFailed: any of the reads failed; nothing is retried
        """
        partition = self._check_partition(partition)
        key = validate_key(key)
        seed = self.random_seed if seed is None else seed

        n = self._query("size", lambda: self.collection.size(partition))
        if n == 0:
            log.info(f"Partition {partition} is empty, inserting at head")
            return HEAD_OF_LIST

        trials = self.trials_for(n)
        log.debug(f"Resolving NICR {format_ratio(key)} in partition {partition}: "
                  f"{n} troves, {trials} trials")

        candidate = self._query(
            "approximate_rank",
            lambda: self.collection.approximate_rank(partition, key, trials, seed)
        )
        predecessor, successor = self._query(
            "exact_insert_position",
            lambda: self.collection.exact_insert_position(partition, key, candidate, candidate)
        )

        log.debug(f"Approx hint {candidate} -> upper={predecessor} lower={successor}")
        return InsertPosition(predecessor, successor)

    def resolve_redemption_hints(self, partition: int, amount: int, price: int,
                                 max_iterations: int = DEFAULT_MAX_ITERATIONS,
                                 seed: Optional[int] = None) -> RedemptionHints:
        """
        Hints for redeeming amount ZUSD against a collateral at price.

        getRedemptionHints names the first trove to redeem and the NICR the
        last, partially redeemed trove will have; that NICR is then resolved
        to an insert position like any other key. A zero NICR means the
        redemption ends on a full trove and no reinsertion happens.

        Raises:
            InvalidPartition: partition is not a configured collateral
            InvalidAmount: amount, price or max_iterations is not a uint256
            RemoteQueryFailed: getRedemptionHints or the reinsertion lookup failed
        """
        partition = self._check_partition(partition)
        amount = require_uint("amount", amount)
        price = require_uint("price", price)
        max_iterations = require_uint("max_iterations", max_iterations)

        get_hints = getattr(self.collection, "get_redemption_hints", None)
        if get_hints is None:
            raise TypeError(f"{type(self.collection).__name__} cannot compute redemption hints")

        first, partial_nicr, truncated = self._query(
            "get_redemption_hints",
            lambda: get_hints(partition, amount, price, max_iterations)
        )
        log.info(f"Redemption of {format_ratio(amount, DECIMAL_PRECISION)} ZUSD: first hint {first}, "
                 f"truncated to {format_ratio(truncated, DECIMAL_PRECISION)}")

        if partial_nicr == 0 or first == ZERO_ADDRESS:
            position = HEAD_OF_LIST
        else:
            position = self.resolve_insert_position(partition, partial_nicr, seed)

        return RedemptionHints(
            first_redemption_hint=first,
            partial_redemption_nicr=partial_nicr,
            truncated_amount=truncated,
            insert_position=position,
        )
