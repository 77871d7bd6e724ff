"""EVM to EVM bridge flow with mocked providers and Iris."""

from unittest.mock import Mock

import pytest
import requests
from eth_abi import encode
from hexbytes import HexBytes
from solders.keypair import Keypair
from web3 import Web3

from cctp_bridge.bridge import Cctp, EvmBridgeResult
from cctp_bridge.chain import NamedChain
from cctp_bridge.error import AttestationCancelled, BridgeCancelled, InsufficientBalance, InvalidConfig, TransactionFailed
from cctp_bridge.evm import MESSAGE_SENT_TOPIC, ZERO_BYTES32
from cctp_bridge.testing import build_iris_fee_record, build_iris_message_record

RECIPIENT = "0x7612A94AafF7a552C373e3124654C1539a4486A8"
BASE_SEPOLIA_USDC = "0x036CbD53842c5426634e7929541eC2318f3dCF7e"
TESTNET_TOKEN_MESSENGER = "0x8FE6B999Dc680CcFDD5Bf7EB0974218be2542DAA"
TESTNET_MESSAGE_TRANSMITTER = "0xE737e5cEBEEBa77EFE34D4aa090756590b1CE275"


@pytest.fixture()
def session() -> Mock:
    return Mock(spec=requests.Session)


@pytest.fixture()
def cctp(evm_source, evm_destination, session, sleep) -> Cctp:
    return Cctp.new(
        evm_source,
        evm_destination,
        NamedChain.BaseSepolia,
        NamedChain.ArbitrumSepolia,
        RECIPIENT,
        session=session,
        sleep=sleep,
    )


def test_accessors(cctp):
    assert repr(cctp) == "CCTP[BaseSepolia(6)->ArbitrumSepolia(3)]"
    assert cctp.api_url == "https://iris-api-sandbox.circle.com"
    assert cctp.destination_domain_id() == 3
    assert cctp.token_messenger_contract().to_evm() == TESTNET_TOKEN_MESSENGER
    assert cctp.message_transmitter_contract().to_evm() == TESTNET_MESSAGE_TRANSMITTER
    assert cctp.recipient.to_evm() == RECIPIENT


def test_repr_unsupported_chain(evm_source, evm_destination):
    cctp = Cctp.new(evm_source, evm_destination, NamedChain.BinanceSmartChain, NamedChain.Base, RECIPIENT)
    assert repr(cctp) == "CCTP[BinanceSmartChain(4294967295)->Base(6)]"


def test_bridge_end_to_end(cctp, evm_source, evm_destination, session, sleep, make_response, cctp_message, cctp_attestation):
    """Zero allowance: approve, burn, attestation after three polls, receive."""
    session.get.side_effect = [
        make_response(404),
        make_response(200, {"messages": [build_iris_message_record("pending")]}),
        make_response(200, {"messages": [build_iris_message_record("complete", cctp_message, cctp_attestation)]}),
    ]

    result = cctp.bridge(15)

    assert [name for name, args, kwargs in evm_source.method_calls] == [
        "balance_of",
        "allowance",
        "approve",
        "deposit_for_burn",
    ]
    evm_source.approve.assert_called_once_with(BASE_SEPOLIA_USDC, TESTNET_TOKEN_MESSENGER, 15, 1, 180)
    evm_source.deposit_for_burn.assert_called_once_with(
        TESTNET_TOKEN_MESSENGER,
        15,
        3,
        HexBytes(RECIPIENT).rjust(32, b"\x00"),
        BASE_SEPOLIA_USDC,
        ZERO_BYTES32,
        3,
        0,
        2,
        20,
    )
    evm_destination.receive_message.assert_called_once_with(TESTNET_MESSAGE_TRANSMITTER, cctp_message, cctp_attestation, 2, 90)

    burn_hash = HexBytes("0x" + "bb" * 32)
    assert session.get.call_args.args[0] == f"https://iris-api-sandbox.circle.com/v2/messages/6?transactionHash=0x{'bb' * 32}"
    assert [c.args[0] for c in sleep.call_args_list] == [10, 10]

    assert isinstance(result, EvmBridgeResult)
    assert result.approval == HexBytes("0x" + "aa" * 32)
    assert result.burn == burn_hash
    assert result.recv == HexBytes("0x" + "cc" * 32)
    assert result.attestation.message == cctp_message
    assert result.attestation.attestation == cctp_attestation
    assert str(result).startswith(f"Approval: 0x{'aa' * 32}, Burn: 0x{'bb' * 32}, Receive: 0x{'cc' * 32}")


def test_insufficient_balance(cctp, evm_source, evm_destination, session):
    """Balance is checked before any transaction."""
    evm_source.balance_of.return_value = 10

    with pytest.raises(InsufficientBalance, match="have 10 need 15") as exc_info:
        cctp.bridge(15)

    assert exc_info.value.have == 10
    assert exc_info.value.need == 15
    evm_source.approve.assert_not_called()
    evm_source.deposit_for_burn.assert_not_called()
    evm_destination.receive_message.assert_not_called()
    session.get.assert_not_called()


def test_burn_with_allowance(cctp, evm_source):
    """Enough allowance skips approval, explicit fee parameters are passed through."""
    evm_source.allowance.return_value = 15
    caller = "0x37305B1cD40574E4C5Ce33f8e8306Be057fD7341"

    burn_hash, approval_hash = cctp.burn(15, destination_caller=caller, max_fee=7, min_finality_threshold=1000)

    assert approval_hash is None
    assert burn_hash == HexBytes("0x" + "bb" * 32)
    evm_source.approve.assert_not_called()
    args = evm_source.deposit_for_burn.call_args.args
    assert args[5] == HexBytes(caller).rjust(32, b"\x00")
    assert args[6:8] == (7, 1000)


def test_recv(cctp, evm_destination, session, make_response, cctp_message, cctp_attestation):
    session.get.return_value = make_response(200, {"messages": [build_iris_message_record("complete", cctp_message, cctp_attestation)]})

    attestation, recv_hash = cctp.recv(HexBytes("0x" + "bb" * 32))

    assert attestation.message == cctp_message
    assert recv_hash == HexBytes("0x" + "cc" * 32)
    evm_destination.receive_message.assert_called_once()


def test_get_fees(cctp, session, make_response):
    session.get.return_value = make_response(200, [build_iris_fee_record(1000, 1)])

    fees = cctp.get_fees()

    assert session.get.call_args.args[0] == "https://iris-api-sandbox.circle.com/v2/burn/USDC/fees/6/3"
    assert fees.source_fees() == 4
    assert fees.source_finality_threshold() == 1000


def test_get_message_sent_event(cctp, evm_source, cctp_message):
    evm_source.get_transaction_receipt.return_value = {
        "logs": [{"topics": [MESSAGE_SENT_TOPIC], "data": HexBytes(encode(["bytes"], [cctp_message]))}],
    }

    message, message_hash = cctp.get_message_sent_event(HexBytes("0x" + "bb" * 32))

    assert message == cctp_message
    assert message_hash == Web3.keccak(cctp_message)


def test_get_message_sent_event_missing(cctp, evm_source):
    evm_source.get_transaction_receipt.return_value = None
    with pytest.raises(TransactionFailed, match="Transaction not found"):
        cctp.get_message_sent_event(HexBytes("0x" + "bb" * 32))

    evm_source.get_transaction_receipt.return_value = {"logs": []}
    with pytest.raises(TransactionFailed, match="MessageSent event not found"):
        cctp.get_message_sent_event(HexBytes("0x" + "bb" * 32))


def test_wrong_flow_is_rejected(evm_source, solana_provider, evm_destination):
    evm_sol = Cctp.new_evm_sol(evm_source, solana_provider, NamedChain.Sepolia, Keypair().pubkey(), 6893967294776760212)
    with pytest.raises(InvalidConfig):
        evm_sol.bridge(15)

    # EVM to EVM instance built with a provider that cannot burn on EVM
    broken = Cctp.new(solana_provider, evm_destination, NamedChain.Sepolia, NamedChain.Base, RECIPIENT)
    with pytest.raises(InvalidConfig, match="EvmProvider"):
        broken.burn(15)


def test_bridge_after_cancel(cctp, evm_source, evm_destination, session, make_response, cctp_message, cctp_attestation):
    """A cancel with nothing running does not stop the next transfer."""
    session.get.return_value = make_response(200, {"messages": [build_iris_message_record("complete", cctp_message, cctp_attestation)]})

    cctp.cancel()
    result = cctp.bridge(15)

    evm_source.deposit_for_burn.assert_called_once()
    evm_destination.receive_message.assert_called_once()
    assert result.recv == HexBytes("0x" + "cc" * 32)


def test_cancel_during_approval_stops_burn(cctp, evm_source, evm_destination, session, make_response, cctp_message, cctp_attestation):
    """Cancelled while the approval confirms: no burn, and the instance stays usable."""

    def _approve(*args):
        cctp.cancel()
        return HexBytes("0x" + "aa" * 32)

    evm_source.approve.side_effect = _approve

    with pytest.raises(BridgeCancelled, match="before burn"):
        cctp.bridge(15)

    evm_source.deposit_for_burn.assert_not_called()
    session.get.assert_not_called()

    evm_source.approve.side_effect = None
    session.get.return_value = make_response(200, {"messages": [build_iris_message_record("complete", cctp_message, cctp_attestation)]})
    cctp.bridge(15)
    evm_source.deposit_for_burn.assert_called_once()
    evm_destination.receive_message.assert_called_once()


def test_cancel_during_polling(cctp, evm_source, evm_destination, session, make_response):
    def _get(url, timeout):
        cctp.cancel()
        return make_response(404)

    session.get.side_effect = _get

    with pytest.raises(AttestationCancelled):
        cctp.bridge(15)

    evm_source.deposit_for_burn.assert_called_once()
    assert session.get.call_count == 1
    evm_destination.receive_message.assert_not_called()
