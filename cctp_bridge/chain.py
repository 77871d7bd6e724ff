"""CCTP chain capabilities.

Resolve a logical chain to the facts the bridge needs:
domain id, TokenMessenger and MessageTransmitter addresses, USDC address,
finality policy and whether Circle's sandbox attestation API serves it.

EVM chains and Solana clusters share one :py:class:`Chain` identity type.
Solana clusters are carried as reserved numeric chain ids
(:py:data:`cctp_bridge.constants.SOLANA_DEVNET_ID`, :py:data:`cctp_bridge.constants.SOLANA_MAINNET_ID`),
so the rest of the code treats "chain" uniformly regardless of architecture.

Any lookup for a chain missing from the tables raises :py:class:`cctp_bridge.error.ChainNotSupported`.
There are no defaults.

Example:

.. code-block:: python

    from cctp_bridge.chain import Chain, NamedChain, SOLANA_DEVNET

    base = Chain.named(NamedChain.Base)
    assert base.cctp_domain_id() == 6
    assert SOLANA_DEVNET.cctp_domain_id() == 5
"""

import enum
from dataclasses import dataclass

from solders.pubkey import Pubkey

from cctp_bridge.address import Address
from cctp_bridge.constants import (
    CHAIN_CONFIRMATION_CONFIG,
    CHAIN_ID_TO_CCTP_DOMAIN,
    CONFIRMATION_AVERAGE_TIME_SECONDS,
    DEFAULT_CONFIRMATION_TIMEOUT_SECONDS,
    DEFAULT_CONFIRMATIONS,
    MESSAGE_TRANSMITTER_ADDRESSES,
    SOLANA_DEVNET_ID,
    SOLANA_DEVNET_USDC_TOKEN,
    SOLANA_MAINNET_ID,
    SOLANA_MAINNET_USDC_TOKEN,
    SOLANA_MESSAGE_TRANSMITTER_V2,
    SOLANA_TOKEN_MESSENGER_MINTER_V2,
    TOKEN_MESSENGER_ADDRESSES,
    USDC_NATIVE_TOKEN,
)
from cctp_bridge.error import ChainNotSupported

#: FNV-1a 64-bit offset basis
FNV_OFFSET_BASIS = 0xCBF29CE484222325

#: FNV-1a 64-bit prime
FNV_PRIME = 0x100000001B3


class NamedChain(enum.IntEnum):
    """EVM chains known by name, valued by their EIP-155 chain id."""

    Mainnet = 1
    Optimism = 10
    BinanceSmartChain = 56
    Unichain = 130
    Polygon = 137
    Fantom = 250
    Base = 8453
    Arbitrum = 42161
    AvalancheFuji = 43113
    Avalanche = 43114
    PolygonAmoy = 80002
    BaseSepolia = 84532
    ArbitrumSepolia = 421614
    Sepolia = 11155111
    OptimismSepolia = 11155420


#: Named chains that are test networks
TESTNETS = {
    NamedChain.AvalancheFuji,
    NamedChain.PolygonAmoy,
    NamedChain.BaseSepolia,
    NamedChain.ArbitrumSepolia,
    NamedChain.Sepolia,
    NamedChain.OptimismSepolia,
}

#: Named chains with a CCTP V2 deployment we bridge on
SUPPORTED_NAMED_CHAINS = {
    NamedChain.Mainnet,
    NamedChain.Arbitrum,
    NamedChain.Base,
    NamedChain.Optimism,
    NamedChain.Unichain,
    NamedChain.Avalanche,
    NamedChain.Polygon,
    NamedChain.Sepolia,
    NamedChain.ArbitrumSepolia,
    NamedChain.AvalancheFuji,
    NamedChain.BaseSepolia,
    NamedChain.OptimismSepolia,
    NamedChain.PolygonAmoy,
}

#: Solana cluster ids
SOLANA_CHAIN_IDS = {SOLANA_DEVNET_ID, SOLANA_MAINNET_ID}


def fnv1a_64(s: str) -> int:
    """64-bit FNV-1a hash of a string.

    Only used to check how the reserved Solana chain ids were derived.
    """
    h = FNV_OFFSET_BASIS
    for b in s.encode("utf-8"):
        h ^= b
        h = (h * FNV_PRIME) & 0xFFFFFFFFFFFFFFFF
    return h


@dataclass(frozen=True, slots=True)
class Chain:
    """A chain CCTP can bridge to or from.

    Wraps a numeric chain id. If the id is a :py:class:`NamedChain` member
    this is a named EVM chain, otherwise an id-only chain such as a Solana cluster.
    """

    #: EIP-155 chain id or a reserved Solana cluster id
    chain_id: int

    def __str__(self):
        named = self.named_chain
        if named is not None:
            return named.name
        if self.chain_id == SOLANA_DEVNET_ID:
            return "SolanaDevnet"
        if self.chain_id == SOLANA_MAINNET_ID:
            return "SolanaMainnet"
        return str(self.chain_id)

    @classmethod
    def named(cls, chain: NamedChain) -> "Chain":
        return cls(int(chain))

    @classmethod
    def from_id(cls, chain_id: int) -> "Chain":
        return cls(chain_id)

    @property
    def named_chain(self) -> NamedChain | None:
        try:
            return NamedChain(self.chain_id)
        except ValueError:
            return None

    def is_solana(self) -> bool:
        return self.chain_id in SOLANA_CHAIN_IDS

    def is_evm(self) -> bool:
        return self.named_chain is not None

    def sandbox(self) -> bool:
        """Is this a test network.

        Selects Circle's sandbox attestation API.
        """
        named = self.named_chain
        if named is not None:
            return named in TESTNETS
        return self.chain_id == SOLANA_DEVNET_ID

    def is_supported(self) -> bool:
        """Can this chain be used with CCTP."""
        named = self.named_chain
        if named is not None:
            return named in SUPPORTED_NAMED_CHAINS
        return self.is_solana()

    def confirmation_average_time_seconds(self) -> int:
        """Average time until Circle attests a burn on this chain.

        `See the CCTP docs <https://developers.circle.com/stablecoins/required-block-confirmations>`__.
        """
        return self._lookup(CONFIRMATION_AVERAGE_TIME_SECONDS)

    def cctp_domain_id(self) -> int:
        """CCTP domain id.

        `See the CCTP docs <https://developers.circle.com/stablecoins/evm-smart-contracts>`__.
        """
        return self._lookup(CHAIN_ID_TO_CCTP_DOMAIN)

    def token_messenger_address(self) -> Address:
        """TokenMessenger contract or program that handles ``depositForBurn``."""
        if self.is_solana():
            return Address.from_pubkey(Pubkey.from_string(SOLANA_TOKEN_MESSENGER_MINTER_V2))
        return Address.from_evm(self._lookup(TOKEN_MESSENGER_ADDRESSES))

    def message_transmitter_address(self) -> Address:
        """MessageTransmitter contract or program that handles ``receiveMessage``."""
        if self.is_solana():
            return Address.from_pubkey(Pubkey.from_string(SOLANA_MESSAGE_TRANSMITTER_V2))
        return Address.from_evm(self._lookup(MESSAGE_TRANSMITTER_ADDRESSES))

    def usdc_token_address(self) -> Address:
        """USDC token contract, or mint on Solana."""
        if self.chain_id == SOLANA_DEVNET_ID:
            return Address.from_pubkey(Pubkey.from_string(SOLANA_DEVNET_USDC_TOKEN))
        if self.chain_id == SOLANA_MAINNET_ID:
            return Address.from_pubkey(Pubkey.from_string(SOLANA_MAINNET_USDC_TOKEN))
        return Address.from_evm(self._lookup(USDC_NATIVE_TOKEN))

    def _lookup(self, table: dict):
        value = table.get(self.chain_id)
        if value is None:
            raise ChainNotSupported(str(self))
        return value


#: Solana devnet as a chain
SOLANA_DEVNET = Chain(SOLANA_DEVNET_ID)

#: Solana mainnet-beta as a chain
SOLANA_MAINNET = Chain(SOLANA_MAINNET_ID)


def as_chain(chain: "Chain | NamedChain | int") -> Chain:
    """Accept a chain in any of the forms callers pass around."""
    if isinstance(chain, Chain):
        return chain
    return Chain(int(chain))


def get_chain_confirmation_config(chain: "Chain | NamedChain | int") -> tuple[int, int]:
    """Confirmation policy for transactions on a chain.

    :return:
        Tuple (required confirmations, timeout seconds).
        Chains without an entry get 1 confirmation and a 3 minute timeout.
    """
    chain = as_chain(chain)
    return CHAIN_CONFIRMATION_CONFIG.get(chain.chain_id, (DEFAULT_CONFIRMATIONS, DEFAULT_CONFIRMATION_TIMEOUT_SECONDS))
