"""
ZUSD Trove SDK - RPC Client

web3 client for the sorted-trove contracts. Implements the read side of
the hint protocol (RemoteOrderedCollection) against SortedTroves and
HintHelpers, plus the TroveManager, PriceFeed and ZUSD reads the trove
commands need.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests
from web3 import Web3
from web3.exceptions import Web3Exception

from .abis import (
    BORROWER_OPERATIONS_ABI,
    ERC20_ABI,
    HINT_HELPERS_ABI,
    PRICE_FEED_ABI,
    SORTED_TROVES_ABI,
    TROVE_MANAGER1_ABI,
    TROVE_MANAGER2_ABI,
    TROVE_MANAGER3_ABI,
)
from .config import NetworkConfig
from .errors import ConfigError, EmptyCollection, RemoteQueryFailed

log = logging.getLogger(__name__)

CONTRACT_ABIS = {
    "sorted_troves": SORTED_TROVES_ABI,
    "hint_helpers": HINT_HELPERS_ABI,
    "trove_manager1": TROVE_MANAGER1_ABI,
    "trove_manager2": TROVE_MANAGER2_ABI,
    "trove_manager3": TROVE_MANAGER3_ABI,
    "borrower_operations": BORROWER_OPERATIONS_ABI,
    "zusd_token": ERC20_ABI,
    "price_feed": PRICE_FEED_ABI,
}


class TroveRPCClient:
    """
    Read-only view of the on-chain sorted trove list.

    Nothing is cached: each method is one eth_call against the node, so
    results always reflect the chain head at the time of the call.

    Usage:
        config = load_network("hardhat")
        client = TroveRPCClient(config)
        n = client.size(0)
        hint = client.approximate_rank(0, nicr, n * 15, 42)
        upper, lower = client.exact_insert_position(0, nicr, hint, hint)
    """

    def __init__(self, config: NetworkConfig, w3: Optional[Web3] = None):
        """
        Args:
            config: Resolved network (RPC URL, addresses, collaterals)
            w3: Pre-built Web3 instance (tests, custom providers)
        """
        self.config = config
        self.w3 = w3 or Web3(Web3.HTTPProvider(
            config.rpc, request_kwargs={"timeout": config.timeout}
        ))
        self._contracts: Dict[str, Any] = {}

        log.debug(f"TroveRPCClient initialized for {config.name} ({config.rpc})")

    # ═══════════════════════════════════════════════════════════════════════
    # PLUMBING
    # ═══════════════════════════════════════════════════════════════════════

    def contract(self, name: str):
        """web3 contract handle for a manifest entry."""
        if name not in self._contracts:
            abi = CONTRACT_ABIS.get(name)
            if abi is None:
                raise ConfigError(f"No ABI bundled for contract '{name}'")
            self._contracts[name] = self.w3.eth.contract(
                address=self.config.address(name), abi=abi
            )
        return self._contracts[name]

    def token(self, address: str):
        """ERC20 handle for a collateral token."""
        return self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=ERC20_ABI)

    def _call(self, method: str, fn: Callable[[], Any]) -> Any:
        """Run one remote read, mapping every transport or revert failure."""
        try:
            return fn()
        except requests.exceptions.RequestException as e:
            raise RemoteQueryFailed(method, f"Connection failed: {e}") from e
        except Web3Exception as e:
            raise RemoteQueryFailed(method, str(e)) from e
        except (ValueError, OSError) as e:
            # JSON-RPC error payloads and socket errors outside requests
            raise RemoteQueryFailed(method, str(e)) from e

    def transact(self, method: str, submit: Callable[[], Any]) -> Any:
        """Broadcast a signed transaction with the same failure mapping as reads."""
        return self._call(method, submit)

    def is_connected(self) -> bool:
        """Test if the node answers."""
        try:
            return bool(self.w3.is_connected())
        except (requests.exceptions.RequestException, OSError):
            return False

    # ═══════════════════════════════════════════════════════════════════════
    # SORTED LIST (RemoteOrderedCollection)
    # ═══════════════════════════════════════════════════════════════════════

    def has_partition(self, partition: int) -> bool:
        """Whether partition is a configured collateral index (no RPC)."""
        if isinstance(partition, bool) or not isinstance(partition, int):
            return False
        return partition in self.config.partitions

    def size(self, partition: int) -> int:
        """SortedTroves.getSize: number of troves for a collateral."""
        c = self.contract("sorted_troves")
        return int(self._call("getSize", lambda: c.functions.getSize(partition).call()))

    def approximate_rank(self, partition: int, key: int,
                         trials: int, seed: int) -> str:
        """
        HintHelpers.getApproxHint: trove whose NICR is close to key.

        Raises:
            EmptyCollection: trials is zero (nothing to sample)
        """
        if trials <= 0:
            raise EmptyCollection(partition)
        c = self.contract("hint_helpers")
        result = self._call(
            "getApproxHint",
            lambda: c.functions.getApproxHint(partition, key, trials, seed).call()
        )
        hint, diff = result[0], result[1]
        log.debug(f"getApproxHint partition={partition} trials={trials} -> {hint} (diff={diff})")
        return Web3.to_checksum_address(hint)

    def exact_insert_position(self, partition: int, key: int,
                              hint_a: str, hint_b: str) -> Tuple[str, str]:
        """SortedTroves.findInsertPosition: exact (prev, next) pair for key."""
        c = self.contract("sorted_troves")
        prev_id, next_id = self._call(
            "findInsertPosition",
            lambda: c.functions.findInsertPosition(partition, key, hint_a, hint_b).call()
        )
        return Web3.to_checksum_address(prev_id), Web3.to_checksum_address(next_id)

    def get_redemption_hints(self, partition: int, amount: int, price: int,
                             max_iterations: int) -> Tuple[str, int, int]:
        """
        HintHelpers.getRedemptionHints.

        Returns:
            (first_redemption_hint, partial_redemption_nicr, truncated_amount)
        """
        c = self.contract("hint_helpers")
        first, nicr, truncated = self._call(
            "getRedemptionHints",
            lambda: c.functions.getRedemptionHints(partition, amount, price, max_iterations).call()
        )
        return Web3.to_checksum_address(first), int(nicr), int(truncated)

    # ═══════════════════════════════════════════════════════════════════════
    # TROVE MANAGER READS
    # ═══════════════════════════════════════════════════════════════════════

    def gas_compensation(self) -> int:
        """ZUSD reserved per trove to pay liquidators' gas."""
        c = self.contract("trove_manager1")
        return int(self._call("ZUSD_GAS_COMPENSATION",
                              lambda: c.functions.ZUSD_GAS_COMPENSATION().call()))

    def borrowing_fee(self, amount: int) -> int:
        """Borrowing fee for amount at the current (decayed) base rate."""
        c = self.contract("trove_manager2")
        return int(self._call("getBorrowingFeeWithDecay",
                              lambda: c.functions.getBorrowingFeeWithDecay(amount).call()))

    def trove_debt(self, borrower: str) -> int:
        c = self.contract("trove_manager1")
        borrower = Web3.to_checksum_address(borrower)
        return int(self._call("getTroveDebt", lambda: c.functions.getTroveDebt(borrower).call()))

    # ═══════════════════════════════════════════════════════════════════════
    # PRICES / BALANCES
    # ═══════════════════════════════════════════════════════════════════════

    def price(self, partition: int) -> int:
        """PriceFeed.getPrice: USD price of a collateral, 1e18 scale."""
        c = self.contract("price_feed")
        return int(self._call("getPrice", lambda: c.functions.getPrice(partition).call()))

    def prices(self) -> List[int]:
        """Every collateral price, indexed by partition."""
        c = self.contract("price_feed")
        return [int(p) for p in self._call("fetchEntirePrice",
                                           lambda: c.functions.fetchEntirePrice().call())]

    def zusd_balance(self, account: str) -> int:
        c = self.contract("zusd_token")
        account = Web3.to_checksum_address(account)
        return int(self._call("balanceOf", lambda: c.functions.balanceOf(account).call()))
