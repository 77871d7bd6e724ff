"""Check the attestation status of a CCTP burn.

Polls Circle's Iris API once a minute until the attestation is ready
and prints the message and attestation to pass to ``receiveMessage()``.

To run:

.. code-block:: shell

    python scripts/cctp/check-attestation.py BaseSepolia 0x<burn tx hash>
"""

import sys

from cctp_bridge.attestation import AttestationClient
from cctp_bridge.chain import Chain, NamedChain
from cctp_bridge.utils import setup_console_logging


def main():
    setup_console_logging(default_log_level="info")

    chain_name, reference = sys.argv[1], sys.argv[2]
    client = AttestationClient(Chain.named(NamedChain[chain_name]))
    print(f"Polling {client.iris_api_url(reference)}")

    attestation = client.get_attestation_with_retry(reference)
    print(f"Message: 0x{attestation.message.hex()}")
    print(f"Attestation: 0x{attestation.attestation.hex()}")


if __name__ == "__main__":
    main()
