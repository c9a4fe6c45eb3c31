import random
from unittest.mock import MagicMock

import pytest
from web3 import Web3

from trove_sdk.config import load_network
from trove_sdk.hint_types import ZERO_ADDRESS
from trove_sdk.rpc_client import TroveRPCClient

E18 = 10**18


def addr(i: int) -> str:
    return Web3.to_checksum_address(f"0x{i:040x}")


# ------------------------------------------------------------------
#                      IN-MEMORY SORTED LIST
# ------------------------------------------------------------------
class SnapshotCollection:
    """
    Fully materialised sorted list, ascending by key, one per partition.

    Mirrors the contract primitives closely enough to check brackets:
    approximate_rank samples `trials` random entries and returns the one
    closest to the key; exact_insert_position returns the neighbours
    strictly below and above the key. An entry holding exactly the key is
    the trove being repositioned and is skipped. Every call is recorded.
    """

    def __init__(self, partitions, fail_on=None):
        # partitions: {partition: [(identity, key), ...]}
        self.partitions = {p: sorted(entries, key=lambda e: e[1])
                           for p, entries in partitions.items()}
        self.fail_on = fail_on or {}
        self.calls = []

    def _record(self, name, *args):
        self.calls.append((name, args))
        if name in self.fail_on:
            raise self.fail_on[name]

    def called(self, name):
        return [args for n, args in self.calls if n == name]

    def has_partition(self, partition):
        return partition in self.partitions

    def size(self, partition):
        self._record("size", partition)
        return len(self.partitions[partition])

    def approximate_rank(self, partition, key, trials, seed):
        self._record("approximate_rank", partition, key, trials, seed)
        entries = self.partitions[partition]
        rng = random.Random(seed)
        sample = [entries[rng.randrange(len(entries))] for _ in range(trials)]
        return min(sample, key=lambda e: abs(e[1] - key))[0]

    def exact_insert_position(self, partition, key, hint_a, hint_b):
        self._record("exact_insert_position", partition, key, hint_a, hint_b)
        below = [e for e in self.partitions[partition] if e[1] < key]
        above = [e for e in self.partitions[partition] if e[1] > key]
        predecessor = below[-1][0] if below else ZERO_ADDRESS
        successor = above[0][0] if above else ZERO_ADDRESS
        return predecessor, successor

    def key_of(self, partition, identity):
        for ident, key in self.partitions[partition]:
            if ident == identity:
                return key
        raise KeyError(identity)


@pytest.fixture
def hundred_troves():
    """Partition 0: 100 troves with keys 1e18..100e18; partition 1 empty."""
    return SnapshotCollection({
        0: [(addr(i), i * E18) for i in range(1, 101)],
        1: [],
    })


# ------------------------------------------------------------------
#                        MOCKED WEB3 CLIENT
# ------------------------------------------------------------------
@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("TROVE_NETWORK", "TROVE_RPC_URL", "TROVE_MANIFEST", "TROVE_PRIVATE_KEY"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def network_config():
    return load_network("hardhat")


@pytest.fixture
def contracts():
    names = ("sorted_troves", "hint_helpers", "trove_manager1", "trove_manager2",
             "trove_manager3", "borrower_operations", "zusd_token", "price_feed", "token")
    return {name: MagicMock(name=name) for name in names}


@pytest.fixture
def mock_w3(network_config, contracts):
    by_address = {network_config.contracts[name]: mock
                  for name, mock in contracts.items() if name in network_config.contracts}

    def _contract(address=None, abi=None):
        return by_address.get(address, contracts["token"])

    w3 = MagicMock(name="w3")
    w3.eth.contract.side_effect = _contract
    w3.eth.gas_price = 10**9
    w3.eth.chain_id = 31337
    w3.eth.get_transaction_count.return_value = 7
    w3.eth.send_raw_transaction.return_value = bytes.fromhex("ab" * 32)
    return w3


@pytest.fixture
def client(network_config, mock_w3):
    return TroveRPCClient(network_config, w3=mock_w3)
