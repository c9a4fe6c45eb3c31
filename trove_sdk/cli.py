#!/usr/bin/env python3
# Copyright (c) 2025 The ZUSD developers
# Distributed under the MIT software license

"""
trove-hints - resolve SortedTroves hints from the command line

Commands:
  size      Number of troves in a partition
  hint      Insert position for a NICR, or for a trove given coll + ZUSD amount
  redeem    Redemption hints (and optionally submit redeemCollateral)
  open      Open an ETH trove with freshly resolved hints
  price     Collateral prices from the PriceFeed (or set one with --set)
  liquidate Liquidate undercollateralized troves in a partition
  debt      Trove debt and ZUSD balance of an account

Configuration (.env next to the working directory is loaded if present):
- TROVE_NETWORK: hardhat | ganache | mumbai
- TROVE_RPC_URL: Override the network's RPC endpoint
- TROVE_MANIFEST: JSON manifest with deployed contract addresses
- TROVE_PRIVATE_KEY: Signing key for open, liquidate, price --set, redeem --send
"""

import argparse
import json
import logging
import os
import sys
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from web3 import Web3

from .config import (
    DEFAULT_MAX_FEE,
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_TIMEOUT,
    NETWORKS,
    RANDOM_SEED,
    SAMPLING_FACTOR,
    load_env_file,
    load_network,
    mask_secret,
)
from .errors import HintError, InvalidPartition
from .hint_resolver import HintResolver
from .nicr import compute_nicr, format_ratio
from .rpc_client import TroveRPCClient
from .trove_ops import TroveOperations

log = logging.getLogger("trove_sdk")


def parse_amount(text: str) -> int:
    """Parse a decimal token amount ("1800", "1.25") to wei."""
    try:
        return Web3.to_wei(Decimal(text), "ether")
    except (InvalidOperation, ValueError):
        raise argparse.ArgumentTypeError(f"invalid amount: {text!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="trove-hints",
                                     description="SortedTroves hint resolver")
    parser.add_argument("--network", default=None, choices=list(NETWORKS.keys()),
                        help="Network (default: $TROVE_NETWORK or hardhat)")
    parser.add_argument("--rpc", default=None, help="RPC URL override")
    parser.add_argument("--manifest", default=None, help="Deployment manifest (JSON)")
    parser.add_argument("--timeout", type=int, default=DEFAULT_TIMEOUT,
                        help="Per-request timeout in seconds")
    parser.add_argument("--factor", type=int, default=SAMPLING_FACTOR,
                        help="getApproxHint trials per trove")
    parser.add_argument("--seed", type=int, default=RANDOM_SEED, help="getApproxHint random seed")
    parser.add_argument("--env-file", default=".env", help="Environment file to load")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("size", help="Troves in a partition")
    p.add_argument("--partition", type=int, default=0)

    p = sub.add_parser("hint", help="Insert position for a trove")
    p.add_argument("--partition", type=int, default=0)
    p.add_argument("--nicr", type=int, help="Raw NICR (1e20 scale)")
    p.add_argument("--coll", type=parse_amount, help="Collateral amount, e.g. 5")
    p.add_argument("--zusd", type=parse_amount, help="ZUSD to borrow, e.g. 1800")

    p = sub.add_parser("redeem", help="Redemption hints")
    p.add_argument("--partition", type=int, default=0)
    p.add_argument("--zusd", type=parse_amount, required=True, help="ZUSD to redeem")
    p.add_argument("--price", type=parse_amount, default=None,
                   help="Collateral price in USD (default: on-chain PriceFeed)")
    p.add_argument("--max-iterations", type=int, default=DEFAULT_MAX_ITERATIONS)
    p.add_argument("--max-fee", type=int, default=DEFAULT_MAX_FEE, help="1e18 = 100%%")
    p.add_argument("--send", action="store_true", help="Submit redeemCollateral")

    p = sub.add_parser("open", help="Open an ETH trove")
    p.add_argument("--eth", type=parse_amount, required=True, help="ETH collateral")
    p.add_argument("--zusd", type=parse_amount, required=True, help="ZUSD to borrow")
    p.add_argument("--max-fee", type=int, default=DEFAULT_MAX_FEE, help="1e18 = 100%%")

    p = sub.add_parser("price", help="Collateral prices")
    p.add_argument("--partition", type=int, default=None, help="One partition (default: all)")
    p.add_argument("--set", type=parse_amount, default=None, dest="new_price",
                   help="Set the partition's price in USD (testnet feed owner)")

    p = sub.add_parser("liquidate", help="Liquidate troves")
    p.add_argument("--partition", type=int, default=0)
    p.add_argument("--count", type=int, default=1, help="Max troves to liquidate")

    p = sub.add_parser("debt", help="Trove debt of an account")
    p.add_argument("account", help="Borrower address")

    return parser


def _require_partition(client: TroveRPCClient, partition: int) -> int:
    if not client.has_partition(partition):
        raise InvalidPartition(partition)
    return partition


def run(args: argparse.Namespace, client: TroveRPCClient) -> dict:
    """Execute a parsed command and return the JSON-ready result."""
    resolver = HintResolver(client, sampling_factor=args.factor, random_seed=args.seed)
    private_key = os.environ.get("TROVE_PRIVATE_KEY", "")

    if args.command == "size":
        partition = _require_partition(client, args.partition)
        return {"partition": partition, "size": client.size(partition)}

    if args.command == "hint":
        if args.nicr is not None:
            nicr = args.nicr
        elif args.coll is not None and args.zusd is not None:
            ops = TroveOperations(client, resolver)
            nicr = compute_nicr(args.coll, ops.expected_debt(args.zusd))
        else:
            raise SystemExit("hint: pass --nicr, or --coll and --zusd")
        position = resolver.resolve_insert_position(args.partition, nicr)
        log.info(f"NICR {format_ratio(nicr)} -> ({position.upper_hint}, {position.lower_hint})")
        return {"partition": args.partition, "nicr": str(nicr), **position.to_dict()}

    if args.command == "redeem":
        if args.send:
            ops = TroveOperations(client, resolver, private_key=private_key)
            tx = ops.redeem_collateral(args.partition, args.zusd, args.price,
                                       args.max_iterations, args.max_fee)
            return {"tx_hash": tx}
        ops = TroveOperations(client, resolver)
        hints = ops.redemption_hints(args.partition, args.zusd, args.price, args.max_iterations)
        return hints.to_dict()

    if args.command == "open":
        ops = TroveOperations(client, resolver, private_key=private_key)
        return {"tx_hash": ops.open_trove_with_eth(args.zusd, args.eth, args.max_fee)}

    if args.command == "price":
        if args.new_price is not None:
            if args.partition is None:
                raise SystemExit("price --set: pass --partition")
            ops = TroveOperations(client, resolver, private_key=private_key)
            return {"tx_hash": ops.set_price(args.partition, args.new_price)}
        if args.partition is not None:
            partition = _require_partition(client, args.partition)
            return {"partition": partition, "price": str(client.price(partition))}
        return {"prices": [str(p) for p in client.prices()]}

    if args.command == "liquidate":
        ops = TroveOperations(client, resolver, private_key=private_key)
        return {"tx_hash": ops.liquidate_troves(args.partition, args.count)}

    if args.command == "debt":
        if not Web3.is_address(args.account):
            raise SystemExit(f"debt: invalid address {args.account!r}")
        account = Web3.to_checksum_address(args.account)
        return {
            "account": account,
            "debt": str(client.trove_debt(account)),
            "zusd_balance": str(client.zusd_balance(account)),
        }

    raise SystemExit(f"unknown command {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format='%(asctime)s [%(levelname)s] %(message)s',
                        stream=sys.stderr)
    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    if load_env_file(args.env_file):
        log.info(f"Loaded config from {args.env_file}")

    key = os.environ.get("TROVE_PRIVATE_KEY", "")
    if key:
        log.info(f"TROVE_PRIVATE_KEY loaded: {mask_secret(key)}")

    try:
        config = load_network(args.network, args.manifest, args.rpc, args.timeout)
        log.info(f"Network: {config.name} (chain_id={config.chain_id}, rpc={config.rpc})")
        result = run(args, TroveRPCClient(config))
    except HintError as e:
        log.error(str(e))
        return 1

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
