"""CCTP V2 test helpers.

Build the data Circle's Iris service and the CCTP contracts would produce,
so bridge flows can be tested without a live attestation service:

- :py:func:`craft_cctp_message` packs a CCTP V2 burn message
- :py:func:`forge_attestation` signs it with a test attester
- :py:func:`build_iris_message_record` and :py:func:`build_iris_fee_record` build Iris JSON

Example::

    from eth_account import Account
    from cctp_bridge.testing import craft_cctp_message, forge_attestation, build_iris_message_record

    attester = Account.create()
    message = craft_cctp_message(
        source_domain=6,  # Base
        destination_domain=3,  # Arbitrum
        nonce=1,
        mint_recipient=recipient_bytes32,
        amount=15,
        burn_token=usdc_bytes32,
    )
    attestation = forge_attestation(message, attester)
    response = {"messages": [build_iris_message_record("complete", message, attestation)]}

See `Circle's CCTP contracts <https://github.com/circlefin/evm-cctp-contracts>`__
for the message format.
"""

import struct

from eth_account.signers.local import LocalAccount
from web3 import Web3

from cctp_bridge.constants import FINALITY_THRESHOLD_STANDARD, TOKEN_MESSENGER_V2

#: CCTP message version for V2 protocol
CCTP_MESSAGE_VERSION = 1

#: Burn message body version
BURN_MESSAGE_VERSION = 1

#: Length of a packed V2 message header
MESSAGE_HEADER_LENGTH = 148

#: Length of a packed V2 burn message body
BURN_MESSAGE_BODY_LENGTH = 228


def craft_cctp_message(
    source_domain: int,
    destination_domain: int,
    nonce: int,
    mint_recipient: bytes,
    amount: int,
    burn_token: bytes,
    min_finality_threshold: int = FINALITY_THRESHOLD_STANDARD,
    message_sender: bytes | None = None,
) -> bytes:
    """Craft a CCTP V2 burn message.

    Message header (148 bytes):

    - ``uint32 version``
    - ``uint32 sourceDomain``
    - ``uint32 destinationDomain``
    - ``bytes32 nonce``
    - ``bytes32 sender``, TokenMessenger on source
    - ``bytes32 recipient``, TokenMessenger on destination
    - ``bytes32 destinationCaller``, zero for anyone
    - ``uint32 minFinalityThreshold``
    - ``uint32 finalityThresholdExecuted``

    Burn message body (228 bytes):

    - ``uint32 version``
    - ``bytes32 burnToken``
    - ``bytes32 mintRecipient``
    - ``uint256 amount``
    - ``bytes32 messageSender``
    - ``uint256 maxFee``, ``uint256 feeExecuted``, ``uint256 expirationBlock``, all zero

    :param mint_recipient:
        bytes32 recipient, an EVM address left-padded or a Solana token account

    :param burn_token:
        bytes32 USDC address on the source chain

    :param message_sender:
        bytes32 burner. TokenMessengerV2 if not given.

    :return:
        Packed message bytes (376 bytes total)
    """
    assert len(mint_recipient) == 32, f"mint_recipient must be 32 bytes, got {len(mint_recipient)}"
    assert len(burn_token) == 32, f"burn_token must be 32 bytes, got {len(burn_token)}"

    token_messenger_bytes32 = bytes.fromhex(TOKEN_MESSENGER_V2[2:]).rjust(32, b"\x00")
    message_sender = message_sender or token_messenger_bytes32

    body = struct.pack(">I", BURN_MESSAGE_VERSION)
    body += burn_token
    body += mint_recipient
    body += amount.to_bytes(32, byteorder="big")
    body += message_sender
    body += b"\x00" * 32 * 3

    header = struct.pack(">III", CCTP_MESSAGE_VERSION, source_domain, destination_domain)
    header += nonce.to_bytes(32, byteorder="big")
    header += token_messenger_bytes32
    header += token_messenger_bytes32
    header += b"\x00" * 32
    header += struct.pack(">II", min_finality_threshold, min_finality_threshold)

    message = header + body
    assert len(message) == MESSAGE_HEADER_LENGTH + BURN_MESSAGE_BODY_LENGTH, f"Expected 376 bytes, got {len(message)}"
    return message


def forge_attestation(message: bytes, attester: LocalAccount) -> bytes:
    """Sign a CCTP message with a test attester.

    The attestation is an ECDSA signature over ``keccak256(message)``
    in ``r (32) + s (32) + v (1)`` format.

    :return:
        65-byte attestation
    """
    signed = attester.unsafe_sign_hash(Web3.keccak(message))
    attestation = signed.r.to_bytes(32, byteorder="big") + signed.s.to_bytes(32, byteorder="big") + signed.v.to_bytes(1, byteorder="big")
    assert len(attestation) == 65, f"Expected 65 bytes, got {len(attestation)}"
    return attestation


def build_iris_message_record(
    status: str,
    message: bytes | None = None,
    attestation: bytes | str | None = None,
) -> dict:
    """One entry of the ``messages`` list of ``/v2/messages``.

    :param attestation:
        Signature bytes, or a literal string such as ``"PENDING"``.
    """
    record = {"status": status}
    if message is not None:
        record["message"] = "0x" + message.hex()
    if isinstance(attestation, bytes):
        record["attestation"] = "0x" + attestation.hex()
    elif attestation is not None:
        record["attestation"] = attestation
    return record


def build_iris_fee_record(finality_threshold: int, minimum_fee: float) -> dict:
    """One entry of the ``/v2/burn/USDC/fees`` response."""
    return {"finalityThreshold": finality_threshold, "minimumFee": minimum_fee}
