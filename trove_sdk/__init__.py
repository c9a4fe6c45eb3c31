"""
ZUSD Trove SDK

Client-side hint resolution for the sorted-trove CDP contracts.

Architecture:
  - Troves live on chain in SortedTroves, ordered by NICR per collateral
  - Inserting needs a (upper, lower) hint pair; finding it client-side
    would mean downloading the whole list
  - Instead: HintHelpers.getApproxHint samples the list, then
    SortedTroves.findInsertPosition walks from the sample to the exact spot

Usage:
    from trove_sdk import load_network, TroveRPCClient, HintResolver, compute_nicr

    client = TroveRPCClient(load_network("hardhat"))
    resolver = HintResolver(client)

    nicr = compute_nicr(5 * 10**18, 2000 * 10**18)
    position = resolver.resolve_insert_position(0, nicr)
    print(position.upper_hint, position.lower_hint)
"""

from .hint_types import (
    HEAD_OF_LIST,
    ZERO_ADDRESS,
    InsertPosition,
    RedemptionHints,
    RemoteOrderedCollection,
)
from .errors import (
    ConfigError,
    EmptyCollection,
    HintError,
    InvalidAmount,
    InvalidKey,
    InvalidPartition,
    RemoteQueryFailed,
)
from .nicr import (
    DECIMAL_PRECISION,
    NICR_PRECISION,
    compute_icr,
    compute_nicr,
    expected_debt,
    validate_key,
)
from .config import NETWORKS, NetworkConfig, load_network
from .rpc_client import TroveRPCClient
from .hint_resolver import HintResolver
from .trove_ops import TroveOperations

__version__ = "0.1.0"
__all__ = [
    # Types
    "InsertPosition", "RedemptionHints", "RemoteOrderedCollection",
    "HEAD_OF_LIST", "ZERO_ADDRESS",
    # Errors
    "HintError", "InvalidPartition", "InvalidAmount", "InvalidKey", "RemoteQueryFailed",
    "EmptyCollection", "ConfigError",
    # Keys
    "NICR_PRECISION", "DECIMAL_PRECISION", "compute_nicr", "compute_icr",
    "expected_debt", "validate_key",
    # Core
    "NETWORKS", "NetworkConfig", "load_network",
    "TroveRPCClient", "HintResolver", "TroveOperations",
]
