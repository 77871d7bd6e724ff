"""web3.py provider layer, offline.

Contract calls are built against an unconnected ``Web3()``, nothing is sent.
"""

from unittest.mock import Mock

import pytest
from eth_abi import encode
from eth_account import Account
from hexbytes import HexBytes
from web3 import Web3
from web3.exceptions import TransactionNotFound

from cctp_bridge.constants import MESSAGE_TRANSMITTER_V2, TOKEN_MESSENGER_V2, USDC_NATIVE_TOKEN
from cctp_bridge.error import ConfirmationTimedOut, TransactionFailed
from cctp_bridge.evm import (
    MESSAGE_SENT_TOPIC,
    ZERO_BYTES32,
    Web3Provider,
    encode_mint_recipient,
    get_message_sent_events,
    prepare_approve_for_burn,
    prepare_deposit_for_burn,
    prepare_receive_message,
    wait_for_confirmations,
)

RECIPIENT = "0x7612A94AafF7a552C373e3124654C1539a4486A8"

USDC = USDC_NATIVE_TOKEN[8453]


@pytest.fixture()
def web3() -> Web3:
    return Web3()


def test_encode_mint_recipient():
    encoded = encode_mint_recipient(RECIPIENT)
    assert len(encoded) == 32
    assert encoded == b"\x00" * 12 + HexBytes(RECIPIENT)


def test_prepare_approve(web3):
    func = prepare_approve_for_burn(web3, USDC, TOKEN_MESSENGER_V2, 15)
    assert func.fn_name == "approve"
    assert func.address == USDC
    assert func.args == (TOKEN_MESSENGER_V2, 15)


def test_prepare_deposit_for_burn(web3):
    mint_recipient = encode_mint_recipient(RECIPIENT)
    func = prepare_deposit_for_burn(
        web3,
        TOKEN_MESSENGER_V2,
        amount=15,
        destination_domain=3,
        mint_recipient=mint_recipient,
        burn_token=USDC,
        max_fee=3,
    )
    assert func.fn_name == "depositForBurn"
    assert func.address == TOKEN_MESSENGER_V2
    assert func.args == (15, 3, mint_recipient, USDC, ZERO_BYTES32, 3, 0)


def test_prepare_deposit_for_burn_needs_bytes32(web3):
    with pytest.raises(AssertionError):
        prepare_deposit_for_burn(web3, TOKEN_MESSENGER_V2, 15, 3, HexBytes(RECIPIENT), USDC)


def test_prepare_receive_message(web3, cctp_message, cctp_attestation):
    func = prepare_receive_message(web3, MESSAGE_TRANSMITTER_V2, cctp_message, cctp_attestation)
    assert func.fn_name == "receiveMessage"
    assert func.args == (cctp_message, cctp_attestation)


def test_get_message_sent_events(cctp_message):
    receipt = {
        "logs": [
            {"topics": [HexBytes("0x" + "11" * 32)], "data": HexBytes("0x")},
            {"topics": [MESSAGE_SENT_TOPIC], "data": HexBytes(encode(["bytes"], [cctp_message]))},
        ]
    }
    assert get_message_sent_events(receipt) == [cctp_message]
    assert get_message_sent_events({"logs": []}) == []


def _mock_web3(receipts: list, block_number: int = 100) -> Mock:
    web3 = Mock()
    web3.eth.get_transaction_receipt.side_effect = receipts
    web3.eth.block_number = block_number
    return web3


def test_wait_for_confirmations(monkeypatch):
    monkeypatch.setattr("cctp_bridge.evm.time.sleep", Mock())
    tx_hash = HexBytes("0x" + "aa" * 32)
    receipt = {"blockNumber": 98, "status": 1}
    web3 = _mock_web3([TransactionNotFound("not yet"), receipt])

    assert wait_for_confirmations(web3, tx_hash, confirmations=2, timeout=60) == receipt
    assert web3.eth.get_transaction_receipt.call_count == 2


def test_wait_for_confirmations_counts_mined_block(monkeypatch):
    monkeypatch.setattr("cctp_bridge.evm.time.sleep", Mock())
    receipt = {"blockNumber": 99, "status": 1}
    web3 = _mock_web3([receipt])

    assert wait_for_confirmations(web3, HexBytes("0x" + "aa" * 32), confirmations=2, timeout=-1) == receipt


def test_wait_for_confirmations_at_head(monkeypatch):
    monkeypatch.setattr("cctp_bridge.evm.time.sleep", Mock())
    receipt = {"blockNumber": 100, "status": 1}
    web3 = _mock_web3([receipt, receipt])

    assert wait_for_confirmations(web3, HexBytes("0x" + "aa" * 32), confirmations=1, timeout=-1) == receipt
    with pytest.raises(ConfirmationTimedOut):
        wait_for_confirmations(web3, HexBytes("0x" + "aa" * 32), confirmations=2, timeout=-1)


def test_wait_for_confirmations_reverted(monkeypatch):
    monkeypatch.setattr("cctp_bridge.evm.time.sleep", Mock())
    web3 = _mock_web3([{"blockNumber": 90, "status": 0}])

    with pytest.raises(TransactionFailed, match="reverted"):
        wait_for_confirmations(web3, HexBytes("0x" + "aa" * 32), confirmations=1, timeout=60)


def test_wait_for_confirmations_timeout(monkeypatch):
    monkeypatch.setattr("cctp_bridge.evm.time.sleep", Mock())
    web3 = Mock()
    web3.eth.get_transaction_receipt.side_effect = TransactionNotFound("never")

    with pytest.raises(ConfirmationTimedOut):
        wait_for_confirmations(web3, HexBytes("0x" + "aa" * 32), confirmations=1, timeout=-1)


def test_web3_provider_signs_with_local_nonce(monkeypatch):
    """Nonce is read once and then counted locally."""
    account = Account.create()
    web3 = Mock()
    web3.eth.get_transaction_count.return_value = 7
    web3.eth.chain_id = 84532
    web3.eth.send_raw_transaction.return_value = HexBytes("0x" + "aa" * 32)
    monkeypatch.setattr("cctp_bridge.evm.wait_for_confirmations", Mock())

    provider = Web3Provider(web3, account)
    assert provider.default_signer_address == account.address

    func = Mock()
    func.fn_name = "approve"
    func.build_transaction.side_effect = lambda tx: {
        **tx,
        "to": USDC,
        "data": "0x",
        "value": 0,
        "gas": 100_000,
        "gasPrice": 1_000_000_000,
    }

    provider.transact(func, 1, 60)
    provider.transact(func, 1, 60)

    nonces = [c.args[0]["nonce"] for c in func.build_transaction.call_args_list]
    assert nonces == [7, 8]
    web3.eth.get_transaction_count.assert_called_once_with(account.address)
    assert web3.eth.send_raw_transaction.call_count == 2


def test_web3_provider_unlocked_sender(monkeypatch):
    monkeypatch.setattr("cctp_bridge.evm.wait_for_confirmations", Mock())
    provider = Web3Provider(Mock(), sender=RECIPIENT.lower())
    assert provider.default_signer_address == RECIPIENT

    func = Mock()
    func.transact.return_value = HexBytes("0x" + "bb" * 32)
    assert provider.transact(func, 1, 60) == HexBytes("0x" + "bb" * 32)
    func.transact.assert_called_once_with({"from": RECIPIENT})
