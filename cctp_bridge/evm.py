"""EVM side of CCTP bridging.

- :py:class:`EvmProvider` is the capability set the bridge needs from an EVM chain:
  USDC balance and allowance reads, ``approve``, ``depositForBurn``, ``receiveMessage``
  and receipt lookups

- :py:class:`Web3Provider` implements it on top of web3.py, signing with a local
  ``eth_account`` account or sending from an unlocked account (Anvil)

- ``prepare_*`` functions build bound contract calls and can be used alone

Example of preparing a burn from Ethereum to Arbitrum by hand::

    from web3 import Web3
    from cctp_bridge.evm import prepare_approve_for_burn, prepare_deposit_for_burn

    web3 = Web3(Web3.HTTPProvider("https://..."))

    approve_fn = prepare_approve_for_burn(web3, usdc, token_messenger, amount=1_000_000)
    approve_fn.transact({"from": sender})

    burn_fn = prepare_deposit_for_burn(
        web3,
        token_messenger,
        amount=1_000_000,
        destination_domain=3,
        mint_recipient=encode_mint_recipient("0x..."),
        burn_token=usdc,
    )
    tx_hash = burn_fn.transact({"from": sender})
"""

import abc
import logging
import time

from eth_abi import decode
from eth_account.signers.local import LocalAccount
from eth_typing import HexAddress
from hexbytes import HexBytes
from web3 import Web3
from web3.contract.contract import ContractFunction
from web3.exceptions import TransactionNotFound

from cctp_bridge.abi import ERC20_ABI, MESSAGE_TRANSMITTER_V2_ABI, TOKEN_MESSENGER_V2_ABI, get_deployed_contract
from cctp_bridge.error import ConfirmationTimedOut, TransactionFailed

logger = logging.getLogger(__name__)

#: ``destinationCaller`` that lets anyone relay the message
ZERO_BYTES32 = b"\x00" * 32

#: keccak256("MessageSent(bytes)")
MESSAGE_SENT_TOPIC = Web3.keccak(text="MessageSent(bytes)")


def encode_mint_recipient(address: HexAddress | str) -> bytes:
    """Convert an EVM address to the bytes32 format of ``mintRecipient``.

    CCTP uses bytes32 for recipients to support non-EVM chains.
    EVM addresses are left-padded with zeros to 32 bytes.
    """
    address = Web3.to_checksum_address(address)
    return bytes.fromhex(address[2:].lower().zfill(64))


def prepare_approve_for_burn(
    web3: Web3,
    burn_token: HexAddress | str,
    token_messenger: HexAddress | str,
    amount: int,
) -> ContractFunction:
    """Build a USDC ``approve()`` call to TokenMessengerV2."""
    usdc = get_deployed_contract(web3, ERC20_ABI, burn_token)
    return usdc.functions.approve(Web3.to_checksum_address(token_messenger), amount)


def prepare_deposit_for_burn(
    web3: Web3,
    token_messenger: HexAddress | str,
    amount: int,
    destination_domain: int,
    mint_recipient: bytes,
    burn_token: HexAddress | str,
    destination_caller: bytes = ZERO_BYTES32,
    max_fee: int = 0,
    min_finality_threshold: int = 0,
) -> ContractFunction:
    """Build a bound ``depositForBurn()`` call on TokenMessengerV2.

    USDC must be approved to TokenMessengerV2 before transacting.

    :param amount:
        Raw token units (6 decimals for USDC)

    :param destination_domain:
        CCTP domain of the destination chain

    :param mint_recipient:
        bytes32 recipient on the destination chain

    :param destination_caller:
        bytes32 of who may call ``receiveMessage()``. Zero means anyone.

    :param max_fee:
        Maximum fee for fast transfers, in burn token units

    :param min_finality_threshold:
        Finality level the burn must reach before attestation
    """
    assert len(mint_recipient) == 32, f"mint_recipient must be bytes32, got {len(mint_recipient)} bytes"
    assert len(destination_caller) == 32, f"destination_caller must be bytes32, got {len(destination_caller)} bytes"
    token_messenger_contract = get_deployed_contract(web3, TOKEN_MESSENGER_V2_ABI, token_messenger)
    return token_messenger_contract.functions.depositForBurn(
        amount,
        destination_domain,
        mint_recipient,
        Web3.to_checksum_address(burn_token),
        destination_caller,
        max_fee,
        min_finality_threshold,
    )


def prepare_receive_message(
    web3: Web3,
    message_transmitter: HexAddress | str,
    message: bytes,
    attestation: bytes,
) -> ContractFunction:
    """Build a bound ``receiveMessage()`` call on MessageTransmitterV2.

    Anyone can call this unless ``destinationCaller`` was set in the burn.
    """
    message_transmitter_contract = get_deployed_contract(web3, MESSAGE_TRANSMITTER_V2_ABI, message_transmitter)
    return message_transmitter_contract.functions.receiveMessage(message, attestation)


def get_message_sent_events(receipt: dict) -> list[bytes]:
    """Extract ``MessageSent(bytes)`` payloads from a transaction receipt."""
    messages = []
    for log in receipt["logs"]:
        topics = log["topics"]
        if topics and HexBytes(topics[0]) == MESSAGE_SENT_TOPIC:
            (message,) = decode(["bytes"], HexBytes(log["data"]))
            messages.append(message)
    return messages


def wait_for_confirmations(
    web3: Web3,
    tx_hash: HexBytes,
    confirmations: int,
    timeout: float,
    poll_delay: float = 1.0,
) -> dict:
    """Wait until a transaction has a receipt buried under enough blocks.

    The block the transaction was mined in counts as the first confirmation.

    :return:
        Transaction receipt

    :raise ConfirmationTimedOut:
        Not confirmed within ``timeout`` seconds

    :raise TransactionFailed:
        Transaction reverted
    """
    started_at = time.time()
    while True:
        try:
            receipt = web3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            receipt = None

        if receipt:
            # The block the transaction landed in is the first confirmation
            tx_confirmations = web3.eth.block_number - receipt["blockNumber"] + 1
            if tx_confirmations >= confirmations:
                if receipt["status"] != 1:
                    raise TransactionFailed(f"Transaction {tx_hash.hex()} reverted")
                logger.debug("Confirmed tx %s with %d confirmations", tx_hash.hex(), tx_confirmations)
                return receipt
            logger.debug("Tx %s has %d confirmations, %d needed", tx_hash.hex(), tx_confirmations, confirmations)

        if time.time() - started_at > timeout:
            raise ConfirmationTimedOut(f"Transaction {tx_hash.hex()} not confirmed with {confirmations} confirmations after {timeout} s")

        time.sleep(poll_delay)


class EvmProvider(abc.ABC):
    """What the bridge needs from an EVM chain.

    Implementations submit transactions and block until the requested
    number of confirmations, returning the transaction hash.
    """

    @property
    @abc.abstractmethod
    def default_signer_address(self) -> HexAddress:
        """Address that signs and pays for transactions."""

    @abc.abstractmethod
    def balance_of(self, token: HexAddress, owner: HexAddress) -> int:
        """Raw ERC-20 balance."""

    @abc.abstractmethod
    def allowance(self, token: HexAddress, owner: HexAddress, spender: HexAddress) -> int:
        """Raw ERC-20 allowance."""

    @abc.abstractmethod
    def approve(
        self,
        token: HexAddress,
        spender: HexAddress,
        amount: int,
        confirmations: int,
        timeout: float,
    ) -> HexBytes:
        """Approve and wait for confirmations."""

    @abc.abstractmethod
    def deposit_for_burn(
        self,
        token_messenger: HexAddress,
        amount: int,
        destination_domain: int,
        mint_recipient: bytes,
        burn_token: HexAddress,
        destination_caller: bytes,
        max_fee: int,
        min_finality_threshold: int,
        confirmations: int,
        timeout: float,
    ) -> HexBytes:
        """Burn and wait for confirmations."""

    @abc.abstractmethod
    def receive_message(
        self,
        message_transmitter: HexAddress,
        message: bytes,
        attestation: bytes,
        confirmations: int,
        timeout: float,
    ) -> HexBytes:
        """Relay an attested message and wait for confirmations."""

    @abc.abstractmethod
    def get_transaction_receipt(self, tx_hash: HexBytes) -> dict | None:
        """Receipt or ``None`` if not yet mined."""


class Web3Provider(EvmProvider):
    """web3.py backed :py:class:`EvmProvider`.

    - With ``account``, transactions are signed locally with a nonce counter
      synced from the chain on first use

    - Without ``account``, transactions go through ``eth_sendTransaction`` from
      ``sender``, which must be unlocked on the node (Anvil)

    .. note ::

        Not thread safe. Two threads signing with the same account lose track of the nonce.
    """

    def __init__(
        self,
        web3: Web3,
        account: LocalAccount | None = None,
        sender: HexAddress | str | None = None,
        poll_delay: float = 1.0,
    ):
        assert account is not None or sender is not None, "Give either a signing account or an unlocked sender"
        self.web3 = web3
        self.account = account
        self.sender = Web3.to_checksum_address(sender) if sender else account.address
        self.poll_delay = poll_delay
        self.current_nonce: int | None = None

    def __repr__(self):
        return f"<Web3Provider {self.sender}>"

    @property
    def default_signer_address(self) -> HexAddress:
        return self.sender

    def sync_nonce(self):
        """Initialise the nonce counter from the chain."""
        self.current_nonce = self.web3.eth.get_transaction_count(self.sender)
        logger.info("Synced nonce for %s to %d", self.sender, self.current_nonce)

    def allocate_nonce(self) -> int:
        if self.current_nonce is None:
            self.sync_nonce()
        nonce = self.current_nonce
        self.current_nonce += 1
        return nonce

    def balance_of(self, token: HexAddress, owner: HexAddress) -> int:
        erc20 = get_deployed_contract(self.web3, ERC20_ABI, token)
        return erc20.functions.balanceOf(Web3.to_checksum_address(owner)).call()

    def allowance(self, token: HexAddress, owner: HexAddress, spender: HexAddress) -> int:
        erc20 = get_deployed_contract(self.web3, ERC20_ABI, token)
        return erc20.functions.allowance(Web3.to_checksum_address(owner), Web3.to_checksum_address(spender)).call()

    def approve(self, token, spender, amount, confirmations, timeout) -> HexBytes:
        func = prepare_approve_for_burn(self.web3, token, spender, amount)
        return self.transact(func, confirmations, timeout)

    def deposit_for_burn(
        self,
        token_messenger,
        amount,
        destination_domain,
        mint_recipient,
        burn_token,
        destination_caller,
        max_fee,
        min_finality_threshold,
        confirmations,
        timeout,
    ) -> HexBytes:
        func = prepare_deposit_for_burn(
            self.web3,
            token_messenger,
            amount=amount,
            destination_domain=destination_domain,
            mint_recipient=mint_recipient,
            burn_token=burn_token,
            destination_caller=destination_caller,
            max_fee=max_fee,
            min_finality_threshold=min_finality_threshold,
        )
        return self.transact(func, confirmations, timeout)

    def receive_message(self, message_transmitter, message, attestation, confirmations, timeout) -> HexBytes:
        func = prepare_receive_message(self.web3, message_transmitter, message, attestation)
        return self.transact(func, confirmations, timeout)

    def get_transaction_receipt(self, tx_hash: HexBytes) -> dict | None:
        try:
            return self.web3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            return None

    def transact(self, func: ContractFunction, confirmations: int, timeout: float) -> HexBytes:
        """Sign or send a bound call, then wait for it to confirm.

        :return:
            Transaction hash
        """
        if self.account is not None:
            tx = func.build_transaction(
                {
                    "from": self.account.address,
                    "nonce": self.allocate_nonce(),
                    "chainId": self.web3.eth.chain_id,
                }
            )
            signed = self.account.sign_transaction(tx)
            tx_hash = self.web3.eth.send_raw_transaction(signed.raw_transaction)
        else:
            tx_hash = func.transact({"from": self.sender})

        tx_hash = HexBytes(tx_hash)
        logger.info("Broadcasted %s: %s", func.fn_name, tx_hash.hex())
        wait_for_confirmations(self.web3, tx_hash, confirmations, timeout, poll_delay=self.poll_delay)
        return tx_hash
