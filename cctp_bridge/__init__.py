"""cctp_bridge package root.

Bridge USDC between EVM chains and Solana using Circle's Cross-Chain Transfer Protocol V2.

See :py:class:`cctp_bridge.bridge.Cctp` for the entry point.
"""

import sys


#: Minimum required Python version to run this package
MIN_PYTHON_VERSION = (3, 10)


def _check_python_version():
    """Try early abort if the Python version is too old."""
    if sys.version_info < MIN_PYTHON_VERSION:
        raise RuntimeError(f"cctp-bridge needs Python {MIN_PYTHON_VERSION[0]}.{MIN_PYTHON_VERSION[1]} or later")


_check_python_version()
