import pytest
import requests
from web3 import Web3
from web3.exceptions import ContractLogicError

from trove_sdk.errors import ConfigError, EmptyCollection, HintError, RemoteQueryFailed
from trove_sdk.hint_resolver import HintResolver

from tests.conftest import E18

TROVE_A = "0x70997970c51812dc3a010c7d01b50e0d17dc79c8"
TROVE_B = "0x3c44cdddb6a900fa2b585dd299e03d12fa4293bc"
TROVE_C = "0x90f79bf6eb2c4f870365e785982e1f101e93b906"


def test_size_reads_sorted_troves(client, contracts):
    contracts["sorted_troves"].functions.getSize.return_value.call.return_value = 12

    assert client.size(3) == 12
    contracts["sorted_troves"].functions.getSize.assert_called_with(3)


def test_contract_handles_use_manifest_addresses(client, mock_w3, network_config):
    client.contract("sorted_troves")
    client.contract("sorted_troves")

    mock_w3.eth.contract.assert_called_once()
    assert mock_w3.eth.contract.call_args.kwargs["address"] == network_config.contracts["sorted_troves"]


def test_unknown_contract_name(client, mock_w3):
    with pytest.raises(ConfigError) as exc:
        client.contract("stability_pool")
    assert "stability_pool" in str(exc.value)
    mock_w3.eth.contract.assert_not_called()


def test_approximate_rank_returns_checksummed_hint(client, contracts):
    contracts["hint_helpers"].functions.getApproxHint.return_value.call.return_value = (TROVE_A, 17, 99)

    hint = client.approximate_rank(0, 25 * E18, 150, 42)

    assert hint == Web3.to_checksum_address(TROVE_A)
    assert hint != TROVE_A
    contracts["hint_helpers"].functions.getApproxHint.assert_called_with(0, 25 * E18, 150, 42)


def test_approximate_rank_refuses_zero_trials(client, contracts):
    with pytest.raises(EmptyCollection) as exc:
        client.approximate_rank(2, E18, 0, 42)
    assert exc.value.partition == 2
    contracts["hint_helpers"].functions.getApproxHint.assert_not_called()


def test_exact_insert_position(client, contracts):
    contracts["sorted_troves"].functions.findInsertPosition.return_value.call.return_value = [TROVE_A, TROVE_B]

    upper, lower = client.exact_insert_position(0, E18, TROVE_C, TROVE_C)

    assert (upper.lower(), lower.lower()) == (TROVE_A, TROVE_B)
    contracts["sorted_troves"].functions.findInsertPosition.assert_called_with(0, E18, TROVE_C, TROVE_C)


def test_redemption_hints(client, contracts):
    contracts["hint_helpers"].functions.getRedemptionHints.return_value.call.return_value = (
        TROVE_A, 3 * E18, 1800 * E18
    )

    first, nicr, truncated = client.get_redemption_hints(0, 2000 * E18, 1810 * E18, 50)

    assert first.lower() == TROVE_A
    assert (nicr, truncated) == (3 * E18, 1800 * E18)


def test_has_partition_uses_configured_collaterals(client):
    assert client.has_partition(0)
    assert client.has_partition(5)
    assert not client.has_partition(6)
    assert not client.has_partition(-1)
    assert not client.has_partition(True)
    assert not client.has_partition("0")


def test_trove_manager_reads(client, contracts):
    contracts["trove_manager1"].functions.ZUSD_GAS_COMPENSATION.return_value.call.return_value = 200 * E18
    contracts["trove_manager2"].functions.getBorrowingFeeWithDecay.return_value.call.return_value = 9 * E18
    contracts["trove_manager1"].functions.getTroveDebt.return_value.call.return_value = 2009 * E18

    assert client.gas_compensation() == 200 * E18
    assert client.borrowing_fee(1800 * E18) == 9 * E18
    assert client.trove_debt(TROVE_A) == 2009 * E18
    contracts["trove_manager2"].functions.getBorrowingFeeWithDecay.assert_called_with(1800 * E18)


def test_price_feed_reads(client, contracts):
    contracts["price_feed"].functions.getPrice.return_value.call.return_value = 1500 * E18
    contracts["price_feed"].functions.fetchEntirePrice.return_value.call.return_value = [
        1500 * E18, 1500 * E18, 21000 * E18,
    ]

    assert client.price(2) == 1500 * E18
    assert client.prices() == [1500 * E18, 1500 * E18, 21000 * E18]
    contracts["price_feed"].functions.getPrice.assert_called_with(2)


def test_zusd_balance(client, contracts):
    contracts["zusd_token"].functions.balanceOf.return_value.call.return_value = 1800 * E18

    assert client.zusd_balance(TROVE_A) == 1800 * E18
    contracts["zusd_token"].functions.balanceOf.assert_called_with(Web3.to_checksum_address(TROVE_A))


def test_price_read_failure(client, contracts):
    contracts["price_feed"].functions.getPrice.return_value.call.side_effect = ContractLogicError("reverted")

    with pytest.raises(RemoteQueryFailed) as exc:
        client.price(0)
    assert exc.value.method == "getPrice"
    assert isinstance(exc.value, HintError)


@pytest.mark.parametrize("error", [
    requests.exceptions.ConnectionError("connection refused"),
    requests.exceptions.ReadTimeout("timed out"),
    ContractLogicError("execution reverted"),
    ValueError({"code": -32000, "message": "header not found"}),
])
def test_transport_errors_become_remote_query_failed(client, contracts, error):
    contracts["sorted_troves"].functions.getSize.return_value.call.side_effect = error

    with pytest.raises(RemoteQueryFailed) as exc:
        client.size(0)

    assert exc.value.method == "getSize"
    assert exc.value.__cause__ is error


def test_is_connected_false_when_node_down(client, mock_w3):
    mock_w3.is_connected.side_effect = requests.exceptions.ConnectionError("down")
    assert client.is_connected() is False


def test_resolver_over_web3_client(client, contracts):
    contracts["sorted_troves"].functions.getSize.return_value.call.return_value = 100
    contracts["hint_helpers"].functions.getApproxHint.return_value.call.return_value = (TROVE_C, 0, 1)
    contracts["sorted_troves"].functions.findInsertPosition.return_value.call.return_value = (TROVE_A, TROVE_B)

    position = HintResolver(client).resolve_insert_position(0, 55 * E18)

    contracts["hint_helpers"].functions.getApproxHint.assert_called_with(0, 55 * E18, 1500, 42)
    hint = contracts["sorted_troves"].functions.findInsertPosition.call_args.args[2]
    assert hint.lower() == TROVE_C
    assert contracts["sorted_troves"].functions.findInsertPosition.call_args.args[3] == hint
    assert (position.upper_hint.lower(), position.lower_hint.lower()) == (TROVE_A, TROVE_B)


def test_resolver_over_web3_client_empty_list(client, contracts):
    contracts["sorted_troves"].functions.getSize.return_value.call.return_value = 0

    position = HintResolver(client).resolve_insert_position(4, E18)

    assert position.head
    contracts["hint_helpers"].functions.getApproxHint.assert_not_called()
