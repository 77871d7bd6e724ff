"""Circle CCTP V2 constants.

Cross-Chain Transfer Protocol V2 deployment addresses and domain mappings
for the EVM chains and Solana clusters this package can bridge between.

CCTP moves USDC with a burn-and-mint flow:

1. Source chain: call ``depositForBurn`` on the TokenMessenger to burn USDC
2. Circle's Iris attestation service signs the burn message
3. Destination chain: call ``receiveMessage`` on the MessageTransmitter to mint USDC

The tables below are keyed by the chain id used by :py:class:`cctp_bridge.chain.Chain`.
EVM chains use their EIP-155 chain id. Solana clusters do not have one,
so they get a reserved 64-bit id, see :py:data:`SOLANA_DEVNET_ID`.

The tables must be kept in sync with the live CCTP deployment:

- `EVM contract addresses <https://developers.circle.com/cctp/evm-smart-contracts>`_
- `Solana programs <https://developers.circle.com/cctp/solana-programs>`_
- `Required block confirmations <https://developers.circle.com/stablecoins/required-block-confirmations>`_
"""

from eth_typing import HexAddress

#: Circle Iris attestation API base URL (mainnet).
IRIS_API_BASE_URL = "https://iris-api.circle.com"

#: Circle Iris attestation API base URL (testnets).
IRIS_API_SANDBOX_URL = "https://iris-api-sandbox.circle.com"

#: Minimum finality threshold for standard (finalized) transfers.
FINALITY_THRESHOLD_STANDARD = 2000

#: Default ``maxFee`` for EVM burns, in the burn token's smallest unit.
DEFAULT_MAX_FEE = 3

#: Confirmations and timeout used when waiting for ``receiveMessage`` transactions.
RECEIVE_CONFIRMATIONS = 2
RECEIVE_TIMEOUT_SECONDS = 90

#: Confirmations used when waiting for ``depositForBurn`` transactions.
#: The timeout comes from the chain's average confirmation time.
BURN_CONFIRMATIONS = 2

#
# Chain ids
#

#: Reserved chain id for Solana devnet.
#:
#: 64-bit FNV-1a hash of the devnet genesis hash prefix ``EtWTRABZaYq6iMfeYKouRu166VU2xqa1``,
#: the same id wallet connectors use for the cluster.
#: See :py:func:`cctp_bridge.chain.fnv1a_64`.
SOLANA_DEVNET_ID = 6893967294776760212

#: Reserved chain id for Solana mainnet-beta.
#:
#: 64-bit FNV-1a hash of ``5eykt4UsFv8P8NJdTREpY1vzqKqZKvdp``.
SOLANA_MAINNET_ID = 1599879352604281932

#: Genesis strings the Solana ids were derived from
SOLANA_DEVNET_GENESIS = "EtWTRABZaYq6iMfeYKouRu166VU2xqa1"
SOLANA_MAINNET_GENESIS = "5eykt4UsFv8P8NJdTREpY1vzqKqZKvdp"

#
# Domain ids
#

#: CCTP domain ID for Ethereum mainnet
CCTP_DOMAIN_ETHEREUM = 0

#: CCTP domain ID for Avalanche C-chain
CCTP_DOMAIN_AVALANCHE = 1

#: CCTP domain ID for Optimism
CCTP_DOMAIN_OPTIMISM = 2

#: CCTP domain ID for Arbitrum One
CCTP_DOMAIN_ARBITRUM = 3

#: CCTP domain ID for Solana
CCTP_DOMAIN_SOLANA = 5

#: CCTP domain ID for Base
CCTP_DOMAIN_BASE = 6

#: CCTP domain ID for Polygon PoS
CCTP_DOMAIN_POLYGON = 7

#: CCTP domain ID for Unichain
CCTP_DOMAIN_UNICHAIN = 10

#: Mapping from chain id to CCTP domain ID.
#:
#: CCTP uses its own domain identifiers, not EVM chain IDs.
#: Testnets share the domain id of their mainnet.
CHAIN_ID_TO_CCTP_DOMAIN: dict[int, int] = {
    1: CCTP_DOMAIN_ETHEREUM,
    11155111: CCTP_DOMAIN_ETHEREUM,
    43114: CCTP_DOMAIN_AVALANCHE,
    43113: CCTP_DOMAIN_AVALANCHE,
    10: CCTP_DOMAIN_OPTIMISM,
    11155420: CCTP_DOMAIN_OPTIMISM,
    42161: CCTP_DOMAIN_ARBITRUM,
    421614: CCTP_DOMAIN_ARBITRUM,
    8453: CCTP_DOMAIN_BASE,
    84532: CCTP_DOMAIN_BASE,
    137: CCTP_DOMAIN_POLYGON,
    80002: CCTP_DOMAIN_POLYGON,
    130: CCTP_DOMAIN_UNICHAIN,
    SOLANA_DEVNET_ID: CCTP_DOMAIN_SOLANA,
    SOLANA_MAINNET_ID: CCTP_DOMAIN_SOLANA,
}

#: Mapping from CCTP domain ID to human-readable chain name.
CCTP_DOMAIN_NAMES: dict[int, str] = {
    CCTP_DOMAIN_ETHEREUM: "Ethereum",
    CCTP_DOMAIN_AVALANCHE: "Avalanche",
    CCTP_DOMAIN_OPTIMISM: "Optimism",
    CCTP_DOMAIN_ARBITRUM: "Arbitrum",
    CCTP_DOMAIN_SOLANA: "Solana",
    CCTP_DOMAIN_BASE: "Base",
    CCTP_DOMAIN_POLYGON: "Polygon",
    CCTP_DOMAIN_UNICHAIN: "Unichain",
}

#
# EVM contracts
#

#: CCTP V2 TokenMessengerV2, entry point for ``depositForBurn``.
#: Same address on all EVM mainnets via CREATE2.
TOKEN_MESSENGER_V2: HexAddress = HexAddress("0x28b5a0e9C621a5BadaA536219b3a228C8168cf5d")

#: CCTP V2 TokenMessengerV2 on EVM testnets.
TOKEN_MESSENGER_V2_TESTNET: HexAddress = HexAddress("0x8FE6B999Dc680CcFDD5Bf7EB0974218be2542DAA")

#: CCTP V2 MessageTransmitterV2, entry point for ``receiveMessage``.
#: Same address on all EVM mainnets via CREATE2.
MESSAGE_TRANSMITTER_V2: HexAddress = HexAddress("0x81D40F21F12A8F0E3252Bccb954D722d4c464B64")

#: CCTP V2 MessageTransmitterV2 on EVM testnets.
MESSAGE_TRANSMITTER_V2_TESTNET: HexAddress = HexAddress("0xE737e5cEBEEBa77EFE34D4aa090756590b1CE275")

#: EVM chain id -> TokenMessengerV2
TOKEN_MESSENGER_ADDRESSES: dict[int, HexAddress] = {
    1: TOKEN_MESSENGER_V2,
    10: TOKEN_MESSENGER_V2,
    130: TOKEN_MESSENGER_V2,
    137: TOKEN_MESSENGER_V2,
    8453: TOKEN_MESSENGER_V2,
    42161: TOKEN_MESSENGER_V2,
    43114: TOKEN_MESSENGER_V2,
    # Testnets
    43113: TOKEN_MESSENGER_V2_TESTNET,
    80002: TOKEN_MESSENGER_V2_TESTNET,
    84532: TOKEN_MESSENGER_V2_TESTNET,
    421614: TOKEN_MESSENGER_V2_TESTNET,
    11155111: TOKEN_MESSENGER_V2_TESTNET,
    11155420: TOKEN_MESSENGER_V2_TESTNET,
}

#: EVM chain id -> MessageTransmitterV2
MESSAGE_TRANSMITTER_ADDRESSES: dict[int, HexAddress] = {
    1: MESSAGE_TRANSMITTER_V2,
    10: MESSAGE_TRANSMITTER_V2,
    130: MESSAGE_TRANSMITTER_V2,
    137: MESSAGE_TRANSMITTER_V2,
    8453: MESSAGE_TRANSMITTER_V2,
    42161: MESSAGE_TRANSMITTER_V2,
    43114: MESSAGE_TRANSMITTER_V2,
    # Testnets
    43113: MESSAGE_TRANSMITTER_V2_TESTNET,
    80002: MESSAGE_TRANSMITTER_V2_TESTNET,
    84532: MESSAGE_TRANSMITTER_V2_TESTNET,
    421614: MESSAGE_TRANSMITTER_V2_TESTNET,
    11155111: MESSAGE_TRANSMITTER_V2_TESTNET,
    11155420: MESSAGE_TRANSMITTER_V2_TESTNET,
}

#: Native (Circle issued) USDC by EVM chain id.
USDC_NATIVE_TOKEN: dict[int, HexAddress] = {
    # Ethereum
    1: HexAddress("0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"),
    # Optimism
    10: HexAddress("0x0b2C639c533813f4Aa9D7837CAf62653d097Ff85"),
    # Unichain
    130: HexAddress("0x078D782b760474a361dDA0AF3839290b0EF57AD6"),
    # Polygon
    137: HexAddress("0x3c499c542cEF5E3811e1192ce70d8cC03d5c3359"),
    # Base
    8453: HexAddress("0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"),
    # Arbitrum
    42161: HexAddress("0xaf88d065e77c8cC2239327C5EDb3A432268e5831"),
    # Avalanche
    43114: HexAddress("0xB97EF9Ef8734C71904D8002F8b6Bc66Dd9c48a6E"),
    # Avalanche Fuji
    43113: HexAddress("0x5425890298aed601595a70AB815c96711a31Bc65"),
    # Polygon Amoy
    80002: HexAddress("0x41E94Eb019C0762f9Bfcf9Fb1E58725BfB0e7582"),
    # Base Sepolia
    84532: HexAddress("0x036CbD53842c5426634e7929541eC2318f3dCF7e"),
    # Arbitrum Sepolia
    421614: HexAddress("0x75faf114eafb1BDbe2F0316DF893fd58CE46AA4d"),
    # Sepolia
    11155111: HexAddress("0x1c7D4B196Cb0C7B01d743Fbc6116a902379C7238"),
    # Optimism Sepolia
    11155420: HexAddress("0x5fd84259d66Cd46123540766Be93DFE6D43130D7"),
}

#
# Solana programs
#

#: CCTP V2 TokenMessengerMinterV2 program, same on devnet and mainnet
SOLANA_TOKEN_MESSENGER_MINTER_V2 = "CCTPV2vPZJS2u2BBsUoscuikbYjnpFmbFsvVuJdgUMQe"

#: CCTP V2 MessageTransmitterV2 program, same on devnet and mainnet
SOLANA_MESSAGE_TRANSMITTER_V2 = "CCTPV2Sm4AdWt5296sk4P66VBZ7bEhcARwFaaS9YPbeC"

#: USDC mint on Solana devnet
SOLANA_DEVNET_USDC_TOKEN = "4zMMC9srt5Ri5X14GAgXhaHii3GnPAEERYPJgZJDncDU"

#: USDC mint on Solana mainnet
SOLANA_MAINNET_USDC_TOKEN = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"

#: SPL token program
SPL_TOKEN_PROGRAM_ID = "TokenkegQfeYyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"

#: SPL associated token account program
SPL_ASSOCIATED_TOKEN_PROGRAM_ID = "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"

#
# Finality
#

#: Average time for the chain to reach the finality Circle attests at, in seconds.
#:
#: Used to size burn confirmation timeouts. A policy hint, not authoritative.
CONFIRMATION_AVERAGE_TIME_SECONDS: dict[int, int] = {
    1: 19 * 60,
    42161: 19 * 60,
    8453: 19 * 60,
    10: 19 * 60,
    130: 19 * 60,
    43114: 20,
    137: 8 * 60,
    # Testnets
    11155111: 60,
    421614: 20,
    43113: 20,
    84532: 20,
    11155420: 20,
    80002: 20,
    # Solana
    SOLANA_DEVNET_ID: 4,
    SOLANA_MAINNET_ID: 4,
}

#: Default confirmation policy for transactions on chains missing from :py:data:`CHAIN_CONFIRMATION_CONFIG`
DEFAULT_CONFIRMATIONS = 1
DEFAULT_CONFIRMATION_TIMEOUT_SECONDS = 180

#: EVM chain id -> (required confirmations, timeout seconds) when waiting for approvals
CHAIN_CONFIRMATION_CONFIG: dict[int, tuple[int, int]] = {
    1: (2, 300),
    42161: (1, 120),
    10: (1, 120),
    137: (15, 180),
    43114: (3, 120),
    56: (2, 120),
    8453: (1, 120),
    130: (1, 120),
}
