import json
import os

import pytest

from trove_sdk.config import (
    DEFAULT_MAX_FEE,
    NETWORKS,
    RANDOM_SEED,
    SAMPLING_FACTOR,
    load_env_file,
    load_network,
    mask_secret,
)
from trove_sdk.errors import ConfigError
from trove_sdk.hint_types import ZERO_ADDRESS


def test_protocol_defaults():
    assert SAMPLING_FACTOR == 15
    assert RANDOM_SEED == 42
    assert DEFAULT_MAX_FEE == 5 * 10**16


def test_default_network_is_local_hardhat():
    config = load_network()

    assert config.key == "hardhat"
    assert config.rpc == "http://127.0.0.1:8545"
    assert config.chain_id == 31337
    assert list(config.partitions) == [0, 1, 2, 3, 4, 5]
    assert config.collateral(0) == ZERO_ADDRESS
    assert config.address("sorted_troves") == "0xB7f8BC63BbcaD18155201308C8f3540b07f84F5e"


def test_network_from_environment(monkeypatch):
    monkeypatch.setenv("TROVE_NETWORK", "ganache")
    monkeypatch.setenv("TROVE_RPC_URL", "http://node:8545")

    config = load_network()

    assert config.key == "ganache"
    assert config.rpc == "http://node:8545"


def test_explicit_rpc_beats_environment(monkeypatch):
    monkeypatch.setenv("TROVE_RPC_URL", "http://env:8545")
    assert load_network("hardhat", rpc_url="http://arg:8545").rpc == "http://arg:8545"


def test_unknown_network():
    with pytest.raises(ConfigError):
        load_network("mainnet")


def test_network_without_contracts_needs_manifest():
    with pytest.raises(ConfigError) as exc:
        load_network("mumbai")
    assert "sorted_troves" in str(exc.value)


def test_manifest_overrides_builtin(tmp_path):
    manifest = tmp_path / "deployment.json"
    manifest.write_text(json.dumps({
        "rpc": "https://rpc.example",
        "chain_id": 80001,
        "contracts": {
            "sorted_troves": "0x5fbdb2315678afecb367f032d93f642f64180aa3",
            "hint_helpers": "0xe7f1725e7734ce288f8367e1bb143e90bb3f0512",
        },
        "collaterals": [ZERO_ADDRESS, "0x9fe46736679d2d9a65f0992f2272de9f3c7fa6e0"],
    }))

    config = load_network("mumbai", manifest_path=str(manifest))

    assert config.rpc == "https://rpc.example"
    assert config.address("sorted_troves") == "0x5FbDB2315678afecb367f032d93F642f64180aa3"
    assert len(config.collaterals) == 2
    # builtin entry is untouched
    assert NETWORKS["mumbai"]["contracts"] == {}


def test_manifest_from_environment_merges_contracts(tmp_path, monkeypatch):
    manifest = tmp_path / "m.json"
    manifest.write_text(json.dumps({
        "contracts": {"hint_helpers": "0x5fbdb2315678afecb367f032d93f642f64180aa3"},
    }))
    monkeypatch.setenv("TROVE_MANIFEST", str(manifest))

    config = load_network("hardhat")

    assert config.address("hint_helpers") == "0x5FbDB2315678afecb367f032d93F642f64180aa3"
    assert config.address("sorted_troves") == NETWORKS["hardhat"]["contracts"]["sorted_troves"]


@pytest.mark.parametrize("bad", ["0x1234", "not-an-address", 42, "0x" + "zz" * 20])
def test_bad_address_in_manifest(tmp_path, bad):
    manifest = tmp_path / "m.json"
    manifest.write_text(json.dumps({"contracts": {"sorted_troves": bad}}))

    with pytest.raises(ConfigError):
        load_network("hardhat", manifest_path=str(manifest))


def test_unreadable_manifest(tmp_path):
    with pytest.raises(ConfigError):
        load_network("hardhat", manifest_path=str(tmp_path / "missing.json"))

    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    with pytest.raises(ConfigError):
        load_network("hardhat", manifest_path=str(broken))

    listing = tmp_path / "list.json"
    listing.write_text("[]")
    with pytest.raises(ConfigError):
        load_network("hardhat", manifest_path=str(listing))


def test_missing_contract_and_collateral_lookup():
    config = load_network("hardhat")
    with pytest.raises(ConfigError):
        config.address("stability_pool")
    with pytest.raises(ConfigError):
        config.collateral(6)


def test_env_file_does_not_override(tmp_path, monkeypatch):
    env = tmp_path / ".env"
    env.write_text('# comment\nTROVE_NETWORK="ganache"\nTROVE_RPC_URL=http://x:1\n\nbroken line\n')
    monkeypatch.setenv("TROVE_RPC_URL", "http://kept:2")
    # registers TROVE_NETWORK with monkeypatch so teardown removes what the loader sets
    monkeypatch.setenv("TROVE_NETWORK", "")
    monkeypatch.delenv("TROVE_NETWORK")

    assert load_env_file(str(env)) == 1
    assert os.environ["TROVE_NETWORK"] == "ganache"
    assert os.environ["TROVE_RPC_URL"] == "http://kept:2"


def test_env_file_missing(tmp_path):
    assert load_env_file(str(tmp_path / "nope")) == 0


def test_mask_secret():
    assert mask_secret("0x" + "ab" * 32) == "0xabab...abab"
    assert mask_secret("short") == "***"
