"""
ZUSD Trove SDK - Network Configuration

Contract addresses are declared once per network instead of being
re-typed in every script. A JSON manifest (written after a deployment)
can override any field of a built-in network:

    {
        "rpc": "http://127.0.0.1:8545",
        "contracts": {"sorted_troves": "0x...", "hint_helpers": "0x..."},
        "collaterals": ["0x0000000000000000000000000000000000000000", "0x..."]
    }
"""

import copy
import json
import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from web3 import Web3

from .errors import ConfigError
from .hint_types import ZERO_ADDRESS

log = logging.getLogger(__name__)

# =============================================================================
# PROTOCOL DEFAULTS
# =============================================================================

# getApproxHint trials per trove in the list
SAMPLING_FACTOR = 15

# Seed handed to getApproxHint; any value works, a fixed one keeps runs reproducible
RANDOM_SEED = 42

# Slippage protection on the borrowing/redemption fee: 5%
DEFAULT_MAX_FEE = 5 * 10**16

DEFAULT_MAX_ITERATIONS = 50

DEFAULT_GAS_LIMIT = 3_000_000

# Seconds per JSON-RPC request
DEFAULT_TIMEOUT = 30

REQUIRED_CONTRACTS = ("sorted_troves", "hint_helpers")

# =============================================================================
# NETWORKS
# =============================================================================

_LOCAL_CONTRACTS = {
    "sorted_troves": "0xB7f8BC63BbcaD18155201308C8f3540b07f84F5e",
    "hint_helpers": "0x9A9f2CCfdE556A7E9Ff0848998Aa4a0CFD8863AE",
    "borrower_operations": "0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512",
    "trove_manager1": "0x0DCd1Bf9A1b36cE34237eEaFef220932846BCD82",
    "trove_manager2": "0x9A676e781A523b5d0C0e43731313A708CB607508",
    "trove_manager3": "0x0B306BF915C4d645ff596e518fAf3F9669b97016",
    "zusd_token": "0xa85233C63b9Ee964Add6F2cffe00Fd84eb32338f",
    "price_feed": "0x8A791620dd6260079BF849Dc5567aDC3F2FdC318",
}

# Partition 0 is native ETH, the rest are ERC20 collaterals
_LOCAL_COLLATERALS = [
    ZERO_ADDRESS,
    "0x68B1D87F95878fE05B998F19b66F4baba5De1aed",
    "0x3Aa5ebB10DC797CAC828524e59A333d0A371443c",
    "0xc6e7DF5E7b4f2A278906862b61205850344D4e7d",
    "0x59b670e9fA9D0A427751Af201D676719a970857b",
    "0x4ed7c70F96B99c776995fB64377f0d4aB3B0e1C1",
]

NETWORKS = {
    "hardhat": {
        "name": "Hardhat",
        "rpc": "http://127.0.0.1:8545",
        "chain_id": 31337,
        "contracts": _LOCAL_CONTRACTS,
        "collaterals": _LOCAL_COLLATERALS,
    },
    "ganache": {
        "name": "Ganache",
        "rpc": "http://127.0.0.1:8545",
        "chain_id": 1337,
        "contracts": _LOCAL_CONTRACTS,
        "collaterals": _LOCAL_COLLATERALS,
    },
    "mumbai": {
        "name": "Polygon Mumbai",
        "rpc": "https://rpc-mumbai.maticvigil.com",
        "chain_id": 80001,
        # Filled from a deployment manifest
        "contracts": {},
        "collaterals": [ZERO_ADDRESS],
    },
}

DEFAULT_NETWORK = "hardhat"


@dataclass
class NetworkConfig:
    """Resolved network: RPC endpoint plus checksummed contract addresses."""
    key: str
    name: str
    rpc: str
    chain_id: int
    contracts: Dict[str, str] = field(default_factory=dict)
    collaterals: List[str] = field(default_factory=list)
    timeout: int = DEFAULT_TIMEOUT

    @property
    def partitions(self) -> range:
        return range(len(self.collaterals))

    def address(self, contract: str) -> str:
        """Address of a named contract, or ConfigError if the manifest lacks it."""
        try:
            return self.contracts[contract]
        except KeyError:
            raise ConfigError(f"No address for contract '{contract}' on {self.name}") from None

    def collateral(self, partition: int) -> str:
        if partition not in self.partitions:
            raise ConfigError(f"No collateral configured for partition {partition} on {self.name}")
        return self.collaterals[partition]


def checksum(value: str, what: str) -> str:
    """Checksum an address from config, ConfigError if it is not one."""
    if not isinstance(value, str) or not Web3.is_address(value):
        raise ConfigError(f"Invalid address for {what}: {value!r}")
    return Web3.to_checksum_address(value)


def load_manifest(path: str) -> dict:
    """Read a JSON deployment manifest."""
    try:
        with open(path) as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read manifest {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Manifest {path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Manifest {path} must contain a JSON object")
    return data


def load_network(name: Optional[str] = None,
                 manifest_path: Optional[str] = None,
                 rpc_url: Optional[str] = None,
                 timeout: int = DEFAULT_TIMEOUT) -> NetworkConfig:
    """
    Build a NetworkConfig.

    Precedence: explicit arguments > TROVE_* environment > manifest > NETWORKS.

    Args:
        name: Key in NETWORKS (default: $TROVE_NETWORK or "hardhat")
        manifest_path: JSON manifest overriding the built-in entry ($TROVE_MANIFEST)
        rpc_url: RPC endpoint override ($TROVE_RPC_URL)
        timeout: Per-request timeout in seconds

    Raises:
        ConfigError: unknown network, unreadable manifest, bad address,
                     or a required contract missing
    """
    key = name or os.environ.get("TROVE_NETWORK") or DEFAULT_NETWORK
    if key not in NETWORKS:
        raise ConfigError(f"Unknown network '{key}' (known: {', '.join(NETWORKS)})")

    entry = copy.deepcopy(NETWORKS[key])

    manifest_path = manifest_path or os.environ.get("TROVE_MANIFEST")
    if manifest_path:
        manifest = load_manifest(manifest_path)
        log.info(f"Loaded manifest {manifest_path}")
        entry["contracts"] = {**entry.get("contracts", {}), **manifest.get("contracts", {})}
        for k in ("rpc", "chain_id", "collaterals"):
            if k in manifest:
                entry[k] = manifest[k]

    rpc = rpc_url or os.environ.get("TROVE_RPC_URL") or entry["rpc"]

    contracts = {k: checksum(v, k) for k, v in entry.get("contracts", {}).items()}
    missing = [c for c in REQUIRED_CONTRACTS if c not in contracts]
    if missing:
        raise ConfigError(f"Network '{key}' is missing contracts: {', '.join(missing)}")

    collaterals = [checksum(a, f"collateral[{i}]")
                   for i, a in enumerate(entry.get("collaterals", []))]

    return NetworkConfig(
        key=key,
        name=entry.get("name", key),
        rpc=rpc,
        chain_id=int(entry.get("chain_id", 0)),
        contracts=contracts,
        collaterals=collaterals,
        timeout=timeout,
    )


def load_env_file(path: str) -> int:
    """
    Load KEY=VALUE lines into os.environ without overriding existing values.

    Returns:
        Number of variables set
    """
    if not os.path.exists(path):
        return 0
    count = 0
    with open(path) as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                key, value = line.split("=", 1)
                key = key.strip()
                if key not in os.environ:
                    os.environ[key] = value.strip().strip('"').strip("'")
                    count += 1
    return count


def mask_secret(secret: str) -> str:
    """Mask a secret for safe logging. Never log full private keys."""
    return secret[:6] + "..." + secret[-4:] if len(secret) > 10 else "***"
