"""Bridge testnet USDC from Base Sepolia to Arbitrum Sepolia.

- Manual test, needs a funded testnet account
- The account needs ETH on both chains and USDC on Base Sepolia, see https://faucet.circle.com/
- Circle's sandbox attestation can take 10+ minutes

To run:

.. code-block:: shell

    export JSON_RPC_BASE_SEPOLIA=...
    export JSON_RPC_ARBITRUM_SEPOLIA=...
    export CCTP_PRIVATE_KEY=...
    LOG_LEVEL=info python scripts/cctp/bridge-base-sepolia-to-arbitrum-sepolia.py 0.5
"""

import os
import sys

from eth_account import Account
from web3 import Web3

from cctp_bridge.bridge import Cctp
from cctp_bridge.chain import NamedChain
from cctp_bridge.evm import Web3Provider
from cctp_bridge.utils import setup_console_logging, to_raw_usdc


def main():
    setup_console_logging(default_log_level="info")

    amount = to_raw_usdc(sys.argv[1] if len(sys.argv) > 1 else "0.1")
    account = Account.from_key(os.environ["CCTP_PRIVATE_KEY"])

    source_web3 = Web3(Web3.HTTPProvider(os.environ["JSON_RPC_BASE_SEPOLIA"]))
    destination_web3 = Web3(Web3.HTTPProvider(os.environ["JSON_RPC_ARBITRUM_SEPOLIA"]))
    assert source_web3.eth.chain_id == NamedChain.BaseSepolia
    assert destination_web3.eth.chain_id == NamedChain.ArbitrumSepolia

    cctp = Cctp.new(
        Web3Provider(source_web3, account),
        Web3Provider(destination_web3, account),
        NamedChain.BaseSepolia,
        NamedChain.ArbitrumSepolia,
        account.address,
    )
    print(f"Bridging {amount} raw USDC with {cctp!r}, fees {cctp.get_fees()}")

    result = cctp.bridge(amount)
    print(f"Bridged: {result}")


if __name__ == "__main__":
    main()
