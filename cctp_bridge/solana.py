"""Solana side of CCTP bridging.

The CCTP Solana programs are driven through generated instruction encoders
and an RPC client that live outside this package. :py:class:`SolanaProvider`
is the capability set the bridge needs from them:

- ``deposit_for_burn`` on TokenMessengerMinterV2
- ``receive_message`` on MessageTransmitterV2, with the fee recipient token account looked up first
- listing and reclaiming leftover ``MessageSent`` event accounts

Keys and addresses are ``solders`` types.
"""

import abc
import logging
from dataclasses import dataclass, field

from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature

from cctp_bridge.attestation import Attestation
from cctp_bridge.constants import SPL_ASSOCIATED_TOKEN_PROGRAM_ID, SPL_TOKEN_PROGRAM_ID

logger = logging.getLogger(__name__)

#: SPL Token program
TOKEN_PROGRAM_ID = Pubkey.from_string(SPL_TOKEN_PROGRAM_ID)

#: SPL Associated Token Account program
ASSOCIATED_TOKEN_PROGRAM_ID = Pubkey.from_string(SPL_ASSOCIATED_TOKEN_PROGRAM_ID)


def get_associated_token_address(owner: Pubkey, mint: Pubkey) -> Pubkey:
    """Derive the associated token account of ``owner`` for ``mint``.

    CCTP mints to a token account, not a wallet, so this is the
    ``mintRecipient`` of a burn going to Solana.
    """
    address, _ = Pubkey.find_program_address(
        [bytes(owner), bytes(TOKEN_PROGRAM_ID), bytes(mint)],
        ASSOCIATED_TOKEN_PROGRAM_ID,
    )
    return address


@dataclass(slots=True)
class DepositForBurnParams:
    """Arguments of the TokenMessengerMinterV2 ``deposit_for_burn`` instruction."""

    #: Raw USDC units to burn
    amount: int

    #: CCTP domain of the destination chain
    destination_domain: int

    #: bytes32 recipient on the destination chain, as a public key
    mint_recipient: Pubkey

    #: Who may relay the message. Default key means anyone.
    destination_caller: Pubkey = field(default_factory=Pubkey.default)

    #: Maximum fee for fast transfers, in raw USDC units
    max_fee: int = 0

    #: Finality level the burn must reach before attestation
    min_finality_threshold: int = 0


@dataclass(slots=True)
class SolanaSigners:
    """Signers of a Solana burn.

    The message sent event account is a new keypair for every burn.
    It holds the ``MessageSent`` data until it is reclaimed.
    """

    #: Token owner, also pays for the transaction unless ``fee_payer`` is set
    owner: Keypair

    #: Account the program writes the burn message into
    message_sent_event_account: Keypair = field(default_factory=Keypair)

    #: Pays rent for the event account. The owner if not set.
    rent_payer: Keypair | None = None

    #: Pays the transaction fee. The owner if not set.
    fee_payer: Keypair | None = None

    def rent_payer_pubkey(self) -> Pubkey:
        """Account passed as the event rent payer of ``deposit_for_burn``."""
        payer = self.rent_payer if self.rent_payer is not None else self.owner
        return payer.pubkey()

    def fee_payer_pubkey(self) -> Pubkey:
        payer = self.fee_payer if self.fee_payer is not None else self.owner
        return payer.pubkey()

    def pubkeys(self) -> list[Pubkey]:
        return [s.pubkey() for s in self.signers()]

    def signers(self) -> list[Keypair]:
        """Keypairs that sign the burn transaction.

        Owner and event account first, then the fee and rent payers
        when they are other keys. Each key signs once.
        """
        signers = [self.owner, self.message_sent_event_account]
        for extra in (self.fee_payer, self.rent_payer):
            if extra is not None and extra.pubkey() not in [s.pubkey() for s in signers]:
                signers.append(extra)
        return signers


@dataclass(frozen=True, slots=True)
class ClaimableAccount:
    """A ``MessageSent`` event account left behind by a burn."""

    #: Event account address
    address: Pubkey

    #: Burn transaction signature, base58, if known
    signature: str | None

    #: Whether the program lets us close the account yet
    claimable: bool

    def __str__(self):
        return f"{self.address} signature: {self.signature} claimable: {self.claimable}"

    def is_claimable(self) -> bool:
        return self.claimable


class SolanaProvider(abc.ABC):
    """What the bridge needs from a Solana cluster.

    Methods send the transaction and return its signature once
    the RPC node has accepted it.
    """

    @property
    @abc.abstractmethod
    def default_signer(self) -> Keypair:
        """Keypair used when the caller does not pass one."""

    @abc.abstractmethod
    def deposit_for_burn(
        self,
        params: DepositForBurnParams,
        signers: SolanaSigners,
        usdc_mint: Pubkey,
    ) -> Signature:
        """Burn USDC owned by ``signers.owner``."""

    @abc.abstractmethod
    def fee_recipient_token_account(self, token_messenger_program: Pubkey, usdc_mint: Pubkey) -> Pubkey:
        """Token account that collects CCTP fees for ``usdc_mint``."""

    @abc.abstractmethod
    def receive_message(
        self,
        signer: Keypair,
        attestation: Attestation,
        remote_domain: int,
        remote_token: bytes,
        usdc_mint: Pubkey,
        fee_recipient_token_account: Pubkey,
    ) -> Signature:
        """Mint USDC from an attested message.

        :param remote_domain:
            CCTP domain of the burn

        :param remote_token:
            Burned token on the source chain as bytes32
        """

    @abc.abstractmethod
    def find_claimable_accounts(self, owner: Pubkey) -> list[ClaimableAccount]:
        """List event accounts created by burns of ``owner``."""

    @abc.abstractmethod
    def reclaim_event_account(
        self,
        signer: Keypair,
        event_account: Pubkey,
        attestation: Attestation,
    ) -> Signature:
        """Close an event account and return its rent to ``signer``."""
