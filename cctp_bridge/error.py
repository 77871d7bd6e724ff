"""CCTP bridge exceptions.

All errors raised by this package derive from :py:class:`CctpError`.

HTTP transport errors from ``requests`` and errors raised by the chain
providers are not wrapped and propagate as is.
"""


class CctpError(Exception):
    """Base class for bridge errors."""


class ChainNotSupported(CctpError):
    """The chain is missing from the CCTP capability tables."""

    def __init__(self, chain: str):
        self.chain = chain
        super().__init__(f"Chain not supported: {chain}")


class InvalidAddress(CctpError):
    """A string did not parse as an EVM address or a Solana public key."""

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"Invalid address: {address}")


class AddrError(CctpError):
    """Address has the wrong length for the requested chain-native type."""


class InvalidConfig(CctpError):
    """The bridge was constructed for a different flow than the one called."""


class TransactionFailed(CctpError):
    """A submitted transaction reverted or its expected event was missing."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Transaction failed: {reason}")


class ConfirmationTimedOut(CctpError):
    """Transaction did not reach the requested confirmation depth in time."""


class AttestationFailed(CctpError):
    """Iris reported a failed attestation or returned an unusable record."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Attestation failed: {reason}")


class AttestationTimeout(CctpError):
    """Attestation was not complete after the maximum number of attempts."""

    def __init__(self, reference: str, attempts: int):
        self.reference = reference
        self.attempts = attempts
        super().__init__(f"Timeout waiting for attestation of {reference} after {attempts} attempts")


class BridgeCancelled(CctpError):
    """The operation was cancelled before its next transaction or poll."""


class AttestationCancelled(BridgeCancelled):
    """Polling was stopped through the client's cancel event."""


class EmptyAttestation(CctpError):
    """Iris answered with an empty message list."""

    def __init__(self):
        super().__init__("No attestation messages found from server")


class SolanaInvalidFee(CctpError):
    """Resolved ``max_fee`` is larger than the amount being burned."""

    def __init__(self, max_fee: int, amount: int):
        self.max_fee = max_fee
        self.amount = amount
        super().__init__(f"max fee {max_fee} > amount {amount}")


class SolanaClaimableAccountsError(CctpError):
    """Could not list the reclaimable message event accounts."""


class SolanaFeeRecipientError(CctpError):
    """Could not locate the CCTP fee recipient token account."""


class InsufficientBalance(CctpError):
    """USDC balance is below the amount to burn."""

    def __init__(self, have: int, need: int):
        self.have = have
        self.need = need
        super().__init__(f"Insufficient balance have {have} need {need}")
