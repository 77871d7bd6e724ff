"""Shared fixtures: canned Iris responses and mocked chain providers."""

from unittest.mock import Mock

import pytest
import requests
from eth_account import Account
from hexbytes import HexBytes
from solders.keypair import Keypair

from cctp_bridge.evm import EvmProvider
from cctp_bridge.solana import SolanaProvider
from cctp_bridge.testing import craft_cctp_message, forge_attestation

#: Receives minted USDC in EVM tests
RECIPIENT = "0x7612A94AafF7a552C373e3124654C1539a4486A8"

#: Holds USDC on the source chain in EVM tests
SENDER = "0x37305B1cD40574E4C5Ce33f8e8306Be057fD7341"


def _make_response(status_code: int = 200, json_data=None, bad_json: bool = False) -> Mock:
    response = Mock()
    response.status_code = status_code
    if bad_json:
        response.json.side_effect = ValueError("Expecting value: line 1 column 1 (char 0)")
    else:
        response.json.return_value = json_data

    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Error")
    else:
        response.raise_for_status.return_value = None
    return response


@pytest.fixture()
def make_response():
    """Factory for mocked ``requests.Response`` objects."""
    return _make_response


@pytest.fixture()
def sleep() -> Mock:
    """Records waits instead of sleeping."""
    return Mock()


@pytest.fixture()
def attester():
    return Account.create()


@pytest.fixture()
def cctp_message() -> bytes:
    return craft_cctp_message(
        source_domain=6,
        destination_domain=3,
        nonce=1,
        mint_recipient=HexBytes(RECIPIENT).rjust(32, b"\x00"),
        amount=15,
        burn_token=HexBytes("0x036CbD53842c5426634e7929541eC2318f3dCF7e").rjust(32, b"\x00"),
    )


@pytest.fixture()
def cctp_attestation(cctp_message, attester) -> bytes:
    return forge_attestation(cctp_message, attester)


@pytest.fixture()
def evm_source() -> Mock:
    """Source EVM provider holding 100 raw USDC with zero allowance."""
    provider = Mock(spec=EvmProvider)
    provider.default_signer_address = SENDER
    provider.balance_of.return_value = 100
    provider.allowance.return_value = 0
    provider.approve.return_value = HexBytes("0x" + "aa" * 32)
    provider.deposit_for_burn.return_value = HexBytes("0x" + "bb" * 32)
    return provider


@pytest.fixture()
def evm_destination() -> Mock:
    provider = Mock(spec=EvmProvider)
    provider.default_signer_address = RECIPIENT
    provider.receive_message.return_value = HexBytes("0x" + "cc" * 32)
    return provider


@pytest.fixture()
def solana_keypair() -> Keypair:
    return Keypair()


@pytest.fixture()
def solana_provider(solana_keypair) -> Mock:
    provider = Mock(spec=SolanaProvider)
    provider.default_signer = solana_keypair
    return provider
