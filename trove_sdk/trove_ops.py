"""
ZUSD Trove SDK - Trove Operations

Signed borrower, redeemer and liquidator transactions. The contracts do
the accounting; this module only derives the NICR a new trove will have,
asks the resolver for a bracket, and submits.
"""

import logging
from typing import Any, List, Optional, Tuple

from eth_account import Account
from web3 import Web3

from .config import DEFAULT_GAS_LIMIT, DEFAULT_MAX_FEE, DEFAULT_MAX_ITERATIONS, mask_secret
from .errors import ConfigError, InvalidAmount, InvalidPartition
from .hint_resolver import HintResolver
from .hint_types import InsertPosition, RedemptionHints, ZERO_ADDRESS
from .nicr import compute_nicr, expected_debt, require_uint
from .rpc_client import TroveRPCClient

log = logging.getLogger(__name__)

# openTrovewithEth has no collateral index: native ETH is always partition 0
ETH_PARTITION = 0


class TroveOperations:
    """
    Borrower / redeemer actions for one account.

    Usage:
        ops = TroveOperations(client, private_key=key)

        # Open a trove: 5 ETH collateral, 1800 ZUSD
        tx = ops.open_trove_with_eth(1800 * 10**18, 5 * 10**18)

        # Open with an ERC20 collateral (approve first)
        ops.approve_collateral(1, 5 * 10**18)
        tx = ops.open_trove_with_tokens(1, 5 * 10**18, 1800 * 10**18)

        # Redeem ZUSD against partition 0 at 2000 USD/ETH
        tx = ops.redeem_collateral(0, 100 * 10**18, 2000 * 10**18)
    """

    def __init__(self, client: TroveRPCClient,
                 resolver: Optional[HintResolver] = None,
                 private_key: str = "",
                 gas_limit: int = DEFAULT_GAS_LIMIT):
        """
        Args:
            client: Connected TroveRPCClient
            resolver: HintResolver over the same client (built if omitted)
            private_key: Signing key; read-only helpers work without it
            gas_limit: Gas limit for every submitted transaction
        """
        self.client = client
        self.resolver = resolver or HintResolver(client)
        self.private_key = private_key
        self.gas_limit = gas_limit
        self.account = Account.from_key(private_key) if private_key else None

        if self.account:
            log.info(f"Signing as {self.account.address} (key {mask_secret(private_key)})")

    # ═══════════════════════════════════════════════════════════════════════
    # HINTS
    # ═══════════════════════════════════════════════════════════════════════

    def expected_debt(self, amount: int) -> int:
        """Total debt of a new trove borrowing amount ZUSD, at current fee."""
        amount = require_uint("amount", amount)
        fee = self.client.borrowing_fee(amount)
        reserve = self.client.gas_compensation()
        return expected_debt(amount, fee, reserve)

    def hint_for_open(self, partition: int, coll: int,
                      amount: int) -> Tuple[int, InsertPosition]:
        """
        NICR of a trove about to be opened and where it will be inserted.

        Returns:
            (nicr, InsertPosition)
        """
        nicr = compute_nicr(coll, self.expected_debt(amount))
        return nicr, self.resolver.resolve_insert_position(partition, nicr)

    # ═══════════════════════════════════════════════════════════════════════
    # TRANSACTIONS
    # ═══════════════════════════════════════════════════════════════════════

    def _send(self, method: str, fn: Any, value: int = 0) -> str:
        """Build, sign and broadcast a contract call; returns the tx hash."""
        if self.account is None:
            raise ConfigError(f"No private key configured - cannot send {method}")

        w3 = self.client.w3
        address = self.account.address

        def submit():
            tx = fn.build_transaction({
                "from": address,
                "value": value,
                "gas": self.gas_limit,
                "gasPrice": w3.eth.gas_price,
                "nonce": w3.eth.get_transaction_count(address),
                "chainId": w3.eth.chain_id,
            })
            signed = self.account.sign_transaction(tx)
            return w3.eth.send_raw_transaction(signed.raw_transaction)

        tx_hash = Web3.to_hex(self.client.transact(method, submit))
        log.info(f"{method} TX sent: {tx_hash}")
        return tx_hash

    def _check_partition(self, partition: int) -> int:
        if isinstance(partition, bool) or not self.client.has_partition(partition):
            raise InvalidPartition(partition)
        return partition

    def approve_collateral(self, partition: int, amount: int) -> str:
        """Allow BorrowerOperations to pull amount of an ERC20 collateral."""
        partition = self._check_partition(partition)
        token_address = self.client.config.collateral(partition)
        if token_address == ZERO_ADDRESS:
            raise InvalidPartition(partition)
        spender = self.client.config.address("borrower_operations")
        fn = self.client.token(token_address).functions.approve(spender, amount)
        return self._send("approve", fn)

    def open_trove_with_eth(self, amount: int, eth_value: int,
                            max_fee: int = DEFAULT_MAX_FEE) -> str:
        """Open a trove with native ETH collateral, borrowing amount ZUSD."""
        nicr, position = self.hint_for_open(ETH_PARTITION, eth_value, amount)
        log.info(f"Opening ETH trove: {amount} ZUSD, NICR={nicr}, "
                 f"hints=({position.upper_hint}, {position.lower_hint})")
        fn = self.client.contract("borrower_operations").functions.openTrovewithEth(
            max_fee, amount, position.upper_hint, position.lower_hint
        )
        return self._send("openTrovewithEth", fn, value=eth_value)

    def open_trove_with_tokens(self, partition: int, coll: int, amount: int,
                               max_fee: int = DEFAULT_MAX_FEE) -> str:
        """Open a trove with an ERC20 collateral (must be approved first)."""
        if partition == ETH_PARTITION:
            raise InvalidPartition(partition)
        nicr, position = self.hint_for_open(partition, coll, amount)
        log.info(f"Opening trove in partition {partition}: {amount} ZUSD, NICR={nicr}")
        fn = self.client.contract("borrower_operations").functions.openTrovewithTokens(
            max_fee, partition, coll, amount, position.upper_hint, position.lower_hint
        )
        return self._send("openTrovewithTokens", fn)

    def redemption_hints(self, partition: int, amount: int, price: Optional[int] = None,
                         max_iterations: int = DEFAULT_MAX_ITERATIONS) -> RedemptionHints:
        """Redemption hints at price, or at the PriceFeed price when price is None."""
        if price is None:
            self._check_partition(partition)
            price = self.client.price(partition)
            log.info(f"Using on-chain price for partition {partition}: {price}")
        return self.resolver.resolve_redemption_hints(partition, amount, price, max_iterations)

    def redeem_collateral(self, partition: int, amount: int, price: Optional[int] = None,
                          max_iterations: int = DEFAULT_MAX_ITERATIONS,
                          max_fee: int = DEFAULT_MAX_FEE) -> str:
        """
        Redeem ZUSD for collateral from the riskiest troves.

        The amount actually redeemed is the truncated amount returned by
        getRedemptionHints, so the last trove is never left below minimum debt.
        """
        hints = self.redemption_hints(partition, amount, price, max_iterations)
        pos = hints.insert_position
        fn = self.client.contract("trove_manager2").functions.redeemCollateral(
            partition,
            hints.truncated_amount,
            hints.first_redemption_hint,
            pos.upper_hint,
            pos.lower_hint,
            hints.partial_redemption_nicr,
            max_iterations,
            max_fee,
        )
        return self._send("redeemCollateral", fn)

    # ═══════════════════════════════════════════════════════════════════════
    # LIQUIDATION / PRICES
    # ═══════════════════════════════════════════════════════════════════════

    def liquidate_troves(self, partition: int, n: int) -> str:
        """
        Liquidate up to n undercollateralized troves in a partition,
        starting from the lowest ICR.

        The contract reverts with "nothing to liquidate" when no trove is
        below the minimum ratio; that surfaces as RemoteQueryFailed.
        """
        partition = self._check_partition(partition)
        n = require_uint("n", n)
        log.info(f"Liquidating up to {n} troves in partition {partition}")
        fn = self.client.contract("trove_manager3").functions.liquidateTroves(partition, n)
        return self._send("liquidateTroves", fn)

    def set_price(self, partition: int, price: int) -> str:
        """Set one collateral price on a testnet PriceFeed (owner only)."""
        partition = self._check_partition(partition)
        price = require_uint("price", price)
        fn = self.client.contract("price_feed").functions.setTokenPrice(partition, price)
        return self._send("setTokenPrice", fn)

    def set_prices(self, prices: List[int]) -> str:
        """Set every collateral price at once, one entry per partition."""
        if len(prices) != len(self.client.config.partitions):
            raise InvalidAmount("prices", prices,
                                f"expected {len(self.client.config.partitions)} entries")
        prices = [require_uint("price", p) for p in prices]
        fn = self.client.contract("price_feed").functions.setPrice(prices)
        return self._send("setPrice", fn)
