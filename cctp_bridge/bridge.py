"""CCTP bridge orchestrator.

:py:class:`Cctp` drives burn on the source chain, waits for Circle's
attestation and mints on the destination chain. One instance is bound to
a source and destination chain pair and a recipient. It can run any number
of transfers.

Which flows an instance can run depends on how it was constructed:

- :py:meth:`Cctp.new`: EVM to EVM, :py:meth:`Cctp.burn`, :py:meth:`Cctp.recv`, :py:meth:`Cctp.bridge`
- :py:meth:`Cctp.new_solana_evm`: Solana to EVM, :py:meth:`Cctp.bridge_sol_evm`
- :py:meth:`Cctp.new_evm_sol`: EVM to Solana, :py:meth:`Cctp.bridge_evm_sol`
- :py:meth:`Cctp.new_recv`: receive an EVM burn on Solana, :py:meth:`Cctp.recv_message_sol`
- :py:meth:`Cctp.new_reclaim`: close leftover Solana event accounts, :py:meth:`Cctp.reclaim`

Calling a flow the instance was not built for raises :py:class:`cctp_bridge.error.InvalidConfig`.

:py:meth:`Cctp.cancel` stops the running flow before its next transaction or
attestation poll. The next flow on the same instance runs normally.

Example:

.. code-block:: python

    from eth_account import Account
    from web3 import Web3

    from cctp_bridge.bridge import Cctp
    from cctp_bridge.chain import NamedChain
    from cctp_bridge.evm import Web3Provider

    account = Account.from_key(private_key)
    source = Web3Provider(Web3(Web3.HTTPProvider(base_sepolia_rpc)), account)
    destination = Web3Provider(Web3(Web3.HTTPProvider(arbitrum_sepolia_rpc)), account)

    cctp = Cctp.new(source, destination, NamedChain.BaseSepolia, NamedChain.ArbitrumSepolia, account.address)
    result = cctp.bridge(1_000_000)
    print(result)

Each flow blocks until the receive transaction is confirmed or something fails.
Nothing is persisted. If the process dies after the burn, finish the transfer
with :py:meth:`Cctp.recv` or :py:meth:`Cctp.recv_message_sol` using the burn reference.
"""

import enum
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable

import requests
from eth_typing import HexAddress
from hexbytes import HexBytes
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature
from web3 import Web3

from cctp_bridge.address import Address
from cctp_bridge.attestation import Attestation, AttestationClient, DEFAULT_MAX_ATTEMPTS, DEFAULT_POLL_INTERVAL, format_evm_reference
from cctp_bridge.chain import Chain, NamedChain, as_chain, get_chain_confirmation_config
from cctp_bridge.constants import BURN_CONFIRMATIONS, DEFAULT_MAX_FEE, RECEIVE_CONFIRMATIONS, RECEIVE_TIMEOUT_SECONDS
from cctp_bridge.error import (
    BridgeCancelled,
    ChainNotSupported,
    InsufficientBalance,
    InvalidConfig,
    SolanaClaimableAccountsError,
    SolanaFeeRecipientError,
    SolanaInvalidFee,
    TransactionFailed,
)
from cctp_bridge.evm import ZERO_BYTES32, EvmProvider, get_message_sent_events
from cctp_bridge.fee import Fees, fetch_fees
from cctp_bridge.solana import DepositForBurnParams, SolanaProvider, SolanaSigners, get_associated_token_address

logger = logging.getLogger(__name__)

#: Attestation poll interval used inside the bridge flows, seconds
BRIDGE_POLL_INTERVAL = 10

#: Shown in ``repr()`` for a chain without a CCTP domain
UNKNOWN_DOMAIN = 2**32 - 1


class BridgeDirection(enum.Enum):
    """Which flow a :py:class:`Cctp` instance was built for."""

    evm_to_evm = "evm_to_evm"

    solana_to_evm = "solana_to_evm"

    evm_to_solana = "evm_to_solana"

    #: EVM burn done elsewhere, receive on Solana
    receive_on_solana = "receive_on_solana"

    #: Close Solana event accounts
    reclaim = "reclaim"


def _format_hash(value: HexBytes | bytes | Signature | None) -> str:
    if value is None:
        return "None"
    if isinstance(value, bytes):
        return "0x" + bytes(value).hex()
    return str(value)


@dataclass(slots=True)
class EvmBridgeResult:
    """Outcome of an EVM to EVM transfer."""

    #: ``approve()`` transaction, if the allowance had to be raised
    approval: HexBytes | None

    #: ``depositForBurn()`` transaction
    burn: HexBytes

    #: ``receiveMessage()`` transaction
    recv: HexBytes

    #: Attestation relayed to the destination
    attestation: Attestation

    def __str__(self):
        return (
            f"Approval: {_format_hash(self.approval)}, Burn: {_format_hash(self.burn)}, "
            f"Receive: {_format_hash(self.recv)}, Attestation: {self.attestation}"
        )


@dataclass(slots=True)
class SolanaEvmBridgeResult:
    """Outcome of a Solana to EVM transfer."""

    burn: Signature

    recv: HexBytes

    attestation: Attestation

    def __str__(self):
        return f"Burn: {self.burn}, Receive: {_format_hash(self.recv)}, Attestation: {self.attestation}"


@dataclass(slots=True)
class EvmSolanaBridgeResult:
    """Outcome of an EVM to Solana transfer."""

    burn: HexBytes

    recv: Signature

    attestation: Attestation

    def __str__(self):
        return f"Burn: {_format_hash(self.burn)}, Receive: {self.recv}, Attestation: {self.attestation}"


class Cctp:
    """Bridge USDC between two chains with CCTP V2.

    Use the ``new*`` class methods instead of calling the constructor directly.

    Chains, recipient and providers are fixed for the lifetime of the instance.
    The instance does no locking: concurrent transfers from the same signer
    must be serialised by the caller.
    """

    def __init__(
        self,
        source_provider: Any,
        destination_provider: Any,
        source_chain: Chain | NamedChain | int,
        destination_chain: Chain | NamedChain | int,
        recipient: Address,
        direction: BridgeDirection,
        session: requests.Session | None = None,
        api_base_url: str | None = None,
        sleep: Callable[[float], None] | None = None,
        cancel_event: threading.Event | None = None,
    ):
        """
        :param session:
            HTTP session for Iris. Shared by every call on this instance.

        :param api_base_url:
            Override the Iris base URL.

        :param sleep:
            Replace the wait between attestation polls. Used in tests.

        :param cancel_event:
            Set from another thread to stop the running operation.
            Cleared when the next operation starts.
        """
        self.source_provider = source_provider
        self.destination_provider = destination_provider
        self.source_chain = as_chain(source_chain)
        self.destination_chain = as_chain(destination_chain)
        self.recipient = recipient
        self.direction = direction
        self.attestation_client = AttestationClient(
            self.source_chain,
            session=session,
            api_base_url=api_base_url,
            sleep=sleep,
            cancel_event=cancel_event,
        )

    def __repr__(self):
        return f"CCTP[{self.source_chain}({self._domain_or_unknown(self.source_chain)})->{self.destination_chain}({self._domain_or_unknown(self.destination_chain)})]"

    @staticmethod
    def _domain_or_unknown(chain: Chain) -> int:
        try:
            return chain.cctp_domain_id()
        except ChainNotSupported:
            return UNKNOWN_DOMAIN

    @classmethod
    def new(
        cls,
        source_provider: EvmProvider,
        destination_provider: EvmProvider,
        source_chain: NamedChain,
        destination_chain: NamedChain,
        recipient: HexAddress | str,
        **kwargs,
    ) -> "Cctp":
        """EVM to EVM bridge.

        :param recipient:
            Receives the minted USDC on the destination chain.

        :param kwargs:
            Passed to the constructor: ``session``, ``api_base_url``, ``sleep``, ``cancel_event``.
        """
        return cls(
            source_provider,
            destination_provider,
            source_chain,
            destination_chain,
            Address.from_evm(recipient),
            BridgeDirection.evm_to_evm,
            **kwargs,
        )

    @classmethod
    def new_solana_evm(
        cls,
        source_provider: SolanaProvider,
        destination_provider: EvmProvider,
        source_chain: Chain | int,
        destination_chain: NamedChain,
        **kwargs,
    ) -> "Cctp":
        """Solana to EVM bridge.

        The recipient is the destination provider's default signer.
        """
        recipient = Address.from_evm(destination_provider.default_signer_address)
        return cls(
            source_provider,
            destination_provider,
            source_chain,
            destination_chain,
            recipient,
            BridgeDirection.solana_to_evm,
            **kwargs,
        )

    @classmethod
    def new_evm_sol(
        cls,
        source_provider: EvmProvider,
        destination_provider: SolanaProvider,
        source_chain: NamedChain,
        recipient: Pubkey,
        destination_chain: Chain | int,
        **kwargs,
    ) -> "Cctp":
        """EVM to Solana bridge.

        :param recipient:
            Solana wallet. USDC is minted to its associated token account.
        """
        return cls(
            source_provider,
            destination_provider,
            source_chain,
            destination_chain,
            Address.from_pubkey(recipient),
            BridgeDirection.evm_to_solana,
            **kwargs,
        )

    @classmethod
    def new_recv(
        cls,
        source_provider: Any,
        destination_provider: SolanaProvider,
        source_chain: NamedChain,
        destination_chain: Chain | int,
        **kwargs,
    ) -> "Cctp":
        """Receive on Solana a burn made on an EVM chain.

        :param source_provider:
            Not used, can be ``None``.
        """
        return cls(
            source_provider,
            destination_provider,
            source_chain,
            destination_chain,
            Address(),
            BridgeDirection.receive_on_solana,
            **kwargs,
        )

    @classmethod
    def new_reclaim(
        cls,
        source_provider: SolanaProvider,
        destination_provider: Any,
        source_chain: Chain | int,
        **kwargs,
    ) -> "Cctp":
        """Reclaim rent from Solana event accounts.

        The destination is irrelevant and set to Ethereum mainnet.
        """
        return cls(
            source_provider,
            destination_provider,
            source_chain,
            NamedChain.Mainnet,
            Address(),
            BridgeDirection.reclaim,
            **kwargs,
        )

    @property
    def api_url(self) -> str:
        return self.attestation_client.api_url

    def iris_api_url(self, reference: str) -> str:
        return self.attestation_client.iris_api_url(reference)

    def destination_domain_id(self) -> int:
        return self.destination_chain.cctp_domain_id()

    def token_messenger_contract(self) -> Address:
        """TokenMessenger on the source chain, where the burn happens."""
        return self.source_chain.token_messenger_address()

    def message_transmitter_contract(self) -> Address:
        """MessageTransmitter on the destination chain, where the mint happens."""
        return self.destination_chain.message_transmitter_address()

    def cancel(self):
        """Stop the operation in progress.

        It stops before its next transaction or attestation poll with
        :py:class:`cctp_bridge.error.BridgeCancelled`. A transaction already
        submitted is not undone. Operations started later are not affected.
        """
        self.attestation_client.cancel()

    def get_attestation_with_retry(
        self,
        reference: str,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> Attestation:
        """See :py:meth:`cctp_bridge.attestation.AttestationClient.get_attestation_with_retry`."""
        return self.attestation_client.get_attestation_with_retry(reference, max_attempts=max_attempts, poll_interval=poll_interval)

    def get_attestation_evm(
        self,
        tx_hash: HexBytes | bytes | str,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> Attestation:
        return self.attestation_client.get_attestation_evm(tx_hash, max_attempts=max_attempts, poll_interval=poll_interval)

    def get_fees(self) -> Fees:
        """Quote the burn fee between the source and destination chain."""
        return fetch_fees(
            self.attestation_client.session,
            self.api_url,
            self.source_chain.cctp_domain_id(),
            self.destination_domain_id(),
        )

    def get_message_sent_event(self, tx_hash: HexBytes) -> tuple[bytes, HexBytes]:
        """Read the CCTP message emitted by a burn transaction.

        :return:
            Tuple (message bytes, keccak256 of the message)

        :raise TransactionFailed:
            Transaction or its ``MessageSent`` event not found.
        """
        source = self._evm_provider(self.source_provider, "source")
        receipt = source.get_transaction_receipt(tx_hash)
        if receipt is None:
            raise TransactionFailed("Transaction not found")

        messages = get_message_sent_events(receipt)
        if not messages:
            raise TransactionFailed("MessageSent event not found")

        message = messages[0]
        return message, Web3.keccak(message)

    def burn(
        self,
        amount: int,
        destination_caller: HexAddress | str | None = None,
        max_fee: int | None = None,
        min_finality_threshold: int | None = None,
    ) -> tuple[HexBytes, HexBytes | None]:
        """Burn USDC on the source EVM chain.

        Approves TokenMessengerV2 first if the allowance is below ``amount``.

        :param amount:
            Raw USDC units

        :param destination_caller:
            Only this address may relay the message. Anyone if not given.

        :param max_fee:
            Defaults to 3 units

        :param min_finality_threshold:
            Defaults to 0, a standard transfer

        :return:
            Tuple (burn tx hash, approval tx hash or ``None``)

        :raise InsufficientBalance:
            Before any transaction is sent.
        """
        self._check_direction(BridgeDirection.evm_to_evm)
        self.attestation_client.reset()
        return self._burn_evm_to_evm(amount, destination_caller, max_fee, min_finality_threshold)

    def recv(self, burn_hash: HexBytes) -> tuple[Attestation, HexBytes]:
        """Wait for the attestation of a burn and mint on the destination EVM chain.

        :return:
            Tuple (attestation, receive tx hash)
        """
        self._check_direction(BridgeDirection.evm_to_evm)
        self.attestation_client.reset()
        return self._recv_evm(burn_hash)

    def bridge(
        self,
        amount: int,
        destination_caller: HexAddress | str | None = None,
        max_fee: int | None = None,
        min_finality_threshold: int | None = None,
    ) -> EvmBridgeResult:
        """Burn, attest and mint, EVM to EVM."""
        self._check_direction(BridgeDirection.evm_to_evm)
        self.attestation_client.reset()
        burn_hash, approval_hash = self._burn_evm_to_evm(amount, destination_caller, max_fee, min_finality_threshold)
        attestation, recv_hash = self._recv_evm(burn_hash)
        return EvmBridgeResult(
            approval=approval_hash,
            burn=burn_hash,
            recv=recv_hash,
            attestation=attestation,
        )

    def bridge_sol_evm(
        self,
        lamports: int,
        signers: SolanaSigners,
        destination_caller: Pubkey | None = None,
        max_fee: int | None = None,
        min_finality_threshold: int | None = None,
    ) -> SolanaEvmBridgeResult:
        """Burn on Solana, attest and mint on the destination EVM chain.

        Missing ``max_fee`` and ``min_finality_threshold`` come from the fee quote.

        :param lamports:
            Raw USDC units to burn

        :param signers:
            Owner and a fresh message event account keypair

        :raise SolanaInvalidFee:
            ``max_fee`` larger than ``lamports``. Nothing is sent.
        """
        self._check_direction(BridgeDirection.solana_to_evm)
        self.attestation_client.reset()
        source = self._solana_provider(self.source_provider, "source")
        recipient = self.recipient.to_evm()
        mint_recipient = Pubkey(self.recipient.to_bytes32())
        usdc_mint = self.source_chain.usdc_token_address().to_pubkey()

        logger.info("Burning %d on %s for %s on %s", lamports, self.source_chain, recipient, self.destination_chain)

        fees = self.get_fees()
        logger.debug("Fees %s", fees)

        params = DepositForBurnParams(
            amount=lamports,
            destination_domain=self.destination_domain_id(),
            mint_recipient=mint_recipient,
            destination_caller=destination_caller or Pubkey.default(),
            max_fee=max_fee if max_fee is not None else fees.source_fees(),
            min_finality_threshold=min_finality_threshold if min_finality_threshold is not None else fees.source_finality_threshold(),
        )
        if params.max_fee > lamports:
            raise SolanaInvalidFee(params.max_fee, lamports)

        self._check_cancelled("burn")
        logger.info("Using message sent event account %s", signers.message_sent_event_account.pubkey())
        burn_signature = source.deposit_for_burn(params, signers, usdc_mint)
        logger.info("Burn submitted: %s", burn_signature)

        attestation = self.attestation_client.poll_attestation(str(burn_signature), poll_interval=BRIDGE_POLL_INTERVAL)
        logger.info("Receiving %d on %s for %s", lamports, self.destination_chain, recipient)
        recv_hash = self._receive_on_evm(attestation)
        return SolanaEvmBridgeResult(burn=burn_signature, recv=recv_hash, attestation=attestation)

    def bridge_evm_sol(
        self,
        signer: Keypair | None,
        amount: int,
        destination_caller: Pubkey | None = None,
        max_fee: int | None = None,
        min_finality_threshold: int | None = None,
    ) -> EvmSolanaBridgeResult:
        """Burn on an EVM chain, attest and mint on Solana.

        The mint goes to the recipient's USDC associated token account.

        :param signer:
            Signs the Solana receive transaction. Destination provider's default signer if ``None``.

        :param destination_caller:
            Only this Solana key may relay the message. Anyone if not given.
        """
        self._check_direction(BridgeDirection.evm_to_solana)
        self.attestation_client.reset()
        recipient = self.recipient.to_pubkey()
        usdc_mint = self.destination_chain.usdc_token_address().to_pubkey()
        recipient_token_account = get_associated_token_address(recipient, usdc_mint)
        logger.info(
            "Burning %d on %s for %s (token account %s) on %s",
            amount,
            self.source_chain,
            recipient,
            recipient_token_account,
            self.destination_chain,
        )

        caller = bytes(destination_caller) if destination_caller is not None else ZERO_BYTES32
        burn_hash, _ = self._burn_evm(amount, bytes(recipient_token_account), caller, max_fee, min_finality_threshold)

        attestation = self.attestation_client.poll_attestation(format_evm_reference(burn_hash), poll_interval=BRIDGE_POLL_INTERVAL)
        recv_signature = self._receive_on_solana(signer, attestation)
        return EvmSolanaBridgeResult(burn=burn_hash, recv=recv_signature, attestation=attestation)

    def recv_message_sol(self, signer: Keypair | None, reference: str) -> Signature:
        """Mint on Solana for a burn made earlier on the source EVM chain.

        :param reference:
            Burn transaction hash
        """
        self._check_direction(BridgeDirection.receive_on_solana, BridgeDirection.evm_to_solana)
        self.attestation_client.reset()
        attestation = self.attestation_client.poll_attestation(reference)
        return self._receive_on_solana(signer, attestation)

    def reclaim(self, signer: Keypair | None = None) -> list[tuple[Signature, Pubkey]]:
        """Close the message event accounts of past burns and recover their rent.

        Accounts that are not claimable yet or have no burn signature are skipped.
        Any other failure stops the batch.

        :return:
            (reclaim signature, event account) for each closed account
        """
        self._check_direction(BridgeDirection.reclaim, BridgeDirection.solana_to_evm)
        self.attestation_client.reset()
        source = self._solana_provider(self.source_provider, "source")
        signer = signer or source.default_signer
        owner = signer.pubkey()

        try:
            accounts = source.find_claimable_accounts(owner)
        except Exception as e:
            raise SolanaClaimableAccountsError(f"Could not list event accounts of {owner}: {e}") from e

        results = []
        for account in accounts:
            logger.debug("Event account %s", account)
            if not account.is_claimable():
                continue
            if account.signature is None:
                logger.warning("Skipping account %s with no signature", account.address)
                continue

            attestation = self.attestation_client.poll_attestation(account.signature)
            self._check_cancelled(f"reclaiming {account.address}")
            signature = source.reclaim_event_account(signer, account.address, attestation)
            logger.info("Reclaimed %s: %s", account.address, signature)
            results.append((signature, account.address))

        return results

    def _burn_evm_to_evm(
        self,
        amount: int,
        destination_caller: HexAddress | str | None,
        max_fee: int | None,
        min_finality_threshold: int | None,
    ) -> tuple[HexBytes, HexBytes | None]:
        recipient = self.recipient.to_evm()
        logger.info("Burning %d on %s for %s on %s", amount, self.source_chain, recipient, self.destination_chain)
        if destination_caller is not None:
            caller = Address.from_evm(destination_caller).to_bytes32()
        else:
            caller = ZERO_BYTES32
        return self._burn_evm(amount, self.recipient.to_bytes32(), caller, max_fee, min_finality_threshold)

    def _recv_evm(self, burn_hash: HexBytes) -> tuple[Attestation, HexBytes]:
        attestation = self.attestation_client.poll_attestation(format_evm_reference(burn_hash), poll_interval=BRIDGE_POLL_INTERVAL)
        return attestation, self._receive_on_evm(attestation)

    def _burn_evm(
        self,
        amount: int,
        mint_recipient: bytes,
        destination_caller: bytes,
        max_fee: int | None,
        min_finality_threshold: int | None,
    ) -> tuple[HexBytes, HexBytes | None]:
        source = self._evm_provider(self.source_provider, "source")
        owner = source.default_signer_address
        token_messenger = self.token_messenger_contract().to_evm()
        usdc = self.source_chain.usdc_token_address().to_evm()

        balance = source.balance_of(usdc, owner)
        logger.debug("USDC balance of %s is %d", owner, balance)
        if balance < amount:
            raise InsufficientBalance(balance, amount)

        approval_hash = None
        allowance = source.allowance(usdc, owner, token_messenger)
        if allowance < amount:
            self._check_cancelled("approval")
            confirmations, timeout = get_chain_confirmation_config(self.source_chain)
            logger.debug("Allowance %d below %d, approving", allowance, amount)
            approval_hash = source.approve(usdc, token_messenger, amount, confirmations, timeout)
            logger.info("Approved USDC spending: %s", _format_hash(approval_hash))

        self._check_cancelled("burn")
        burn_hash = source.deposit_for_burn(
            token_messenger,
            amount,
            self.destination_domain_id(),
            mint_recipient,
            usdc,
            destination_caller,
            max_fee if max_fee is not None else DEFAULT_MAX_FEE,
            min_finality_threshold if min_finality_threshold is not None else 0,
            BURN_CONFIRMATIONS,
            self.source_chain.confirmation_average_time_seconds(),
        )
        logger.info("Burn confirmed: %s", _format_hash(burn_hash))
        return burn_hash, approval_hash

    def _receive_on_evm(self, attestation: Attestation) -> HexBytes:
        destination = self._evm_provider(self.destination_provider, "destination")
        message_transmitter = self.message_transmitter_contract().to_evm()
        self._check_cancelled("receive")
        recv_hash = destination.receive_message(
            message_transmitter,
            attestation.message,
            attestation.attestation,
            RECEIVE_CONFIRMATIONS,
            RECEIVE_TIMEOUT_SECONDS,
        )
        logger.info("Receive confirmed on %s: %s", self.destination_chain, _format_hash(recv_hash))
        return recv_hash

    def _receive_on_solana(self, signer: Keypair | None, attestation: Attestation) -> Signature:
        destination = self._solana_provider(self.destination_provider, "destination")
        signer = signer or destination.default_signer
        usdc_mint = self.destination_chain.usdc_token_address().to_pubkey()
        token_messenger_program = self.destination_chain.token_messenger_address().to_pubkey()
        remote_token = self.source_chain.usdc_token_address().to_bytes32()

        logger.debug("Receiving on %s for %s", self.destination_chain, signer.pubkey())
        try:
            fee_recipient = destination.fee_recipient_token_account(token_messenger_program, usdc_mint)
        except Exception as e:
            raise SolanaFeeRecipientError(f"Could not find fee recipient token account for {usdc_mint}: {e}") from e

        self._check_cancelled("receive")
        signature = destination.receive_message(
            signer,
            attestation,
            self.source_chain.cctp_domain_id(),
            remote_token,
            usdc_mint,
            fee_recipient,
        )
        logger.info("Receive submitted on %s: %s", self.destination_chain, signature)
        return signature

    def _check_cancelled(self, step: str):
        if self.attestation_client.cancel_event.is_set():
            raise BridgeCancelled(f"{self!r} cancelled before {step}")

    def _check_direction(self, *allowed: BridgeDirection):
        if self.direction not in allowed:
            names = ", ".join(d.value for d in allowed)
            raise InvalidConfig(f"{self!r} was built for {self.direction.value}, this call needs {names}")

    @staticmethod
    def _evm_provider(provider: Any, side: str) -> EvmProvider:
        if not isinstance(provider, EvmProvider):
            raise InvalidConfig(f"The {side} provider must be an EvmProvider, got {type(provider)}")
        return provider

    @staticmethod
    def _solana_provider(provider: Any, side: str) -> SolanaProvider:
        if not isinstance(provider, SolanaProvider):
            raise InvalidConfig(f"The {side} provider must be a SolanaProvider, got {type(provider)}")
        return provider
