"""Circle CCTP V2 attestation service client.

Poll Circle's Iris API for burn attestations needed to complete
cross-chain USDC transfers.

After the burn lands on the source chain, Circle's attestation service
must sign the burn message before the destination chain accepts it.
:py:meth:`AttestationClient.get_attestation_with_retry` polls until the
attestation is ready, failed, or the attempt budget runs out.

The Iris record goes through these states:

- **404**: transaction not yet indexed by Circle
- **pending** / **pending_confirmations**: burn seen, waiting for source chain finality
- **complete**: attestation signed and ready
- **failed**: terminal

Rate limiting (HTTP 429) always cools down for 5 minutes before the next attempt.

Example::

    from cctp_bridge.attestation import AttestationClient
    from cctp_bridge.chain import Chain, NamedChain

    client = AttestationClient(Chain.named(NamedChain.BaseSepolia))
    attestation = client.get_attestation_with_retry("0x...", poll_interval=10)

    # Use attestation.message and attestation.attestation
    # with receiveMessage() on the destination chain
"""

import enum
import logging
import threading
from dataclasses import dataclass
from typing import Callable

import requests
from hexbytes import HexBytes

from cctp_bridge.chain import Chain
from cctp_bridge.constants import CCTP_DOMAIN_NAMES, IRIS_API_BASE_URL, IRIS_API_SANDBOX_URL
from cctp_bridge.error import (
    AttestationCancelled,
    AttestationFailed,
    AttestationTimeout,
    EmptyAttestation,
)

logger = logging.getLogger(__name__)

#: HTTP 404 status code, transaction not yet indexed
HTTP_NOT_FOUND = 404

#: HTTP 429 status code, rate limited
HTTP_TOO_MANY_REQUESTS = 429

#: How long we back off after Iris rate limits us, seconds
RATE_LIMIT_COOL_DOWN = 5 * 60

#: Default number of polls before giving up
DEFAULT_MAX_ATTEMPTS = 30

#: Default seconds between polls
DEFAULT_POLL_INTERVAL = 60

#: Per-request HTTP timeout, seconds
REQUEST_TIMEOUT = 30

#: Placeholder Iris puts in the attestation field before signing
PENDING_ATTESTATION_PLACEHOLDER = "PENDING"


class AttestationStatus(enum.Enum):
    """Status of a message record in an Iris response."""

    pending = "pending"

    pending_confirmations = "pending_confirmations"

    complete = "complete"

    failed = "failed"


@dataclass(frozen=True, slots=True)
class Attestation:
    """Attestation data for a CCTP burn.

    Contains the signed message and attestation needed to call
    ``receiveMessage()`` on the destination chain's MessageTransmitterV2,
    or to reclaim a Solana event account.
    """

    #: The CCTP message bytes to relay to the destination chain
    message: bytes

    #: The signed attestation bytes from Circle's Iris service
    attestation: bytes

    def __str__(self):
        return f"message: 0x{self.message.hex()} attestation: 0x{self.attestation.hex()}"


def decode_hex_field(value: str) -> bytes:
    """Decode a hex string from Iris, with or without ``0x`` prefix.

    :raise AttestationFailed:
        If the value is not hex.
    """
    if value.startswith("0x"):
        value = value[2:]
    try:
        return bytes.fromhex(value)
    except ValueError as e:
        raise AttestationFailed(f"Could not decode hex field: {value[0:32]}") from e


def parse_attestation_message(record: dict) -> tuple[AttestationStatus, Attestation | None]:
    """Turn the first Iris message record into a state transition.

    :return:
        Tuple (status, attestation). Attestation is set only for ``complete``.

    :raise AttestationFailed:
        Unknown status, or a ``complete`` record missing its payload.
    """
    raw_status = record.get("status")
    try:
        status = AttestationStatus(raw_status)
    except ValueError as e:
        raise AttestationFailed(f"Unknown attestation status: {raw_status}") from e

    if status != AttestationStatus.complete:
        return status, None

    attestation_hex = record.get("attestation")
    if attestation_hex is None:
        raise AttestationFailed("Attestation missing")

    # Iris can flag the record complete a moment before the signature is filled in
    if attestation_hex == PENDING_ATTESTATION_PLACEHOLDER:
        return AttestationStatus.pending, None

    message_hex = record.get("message")
    if message_hex is None:
        raise AttestationFailed("Attestation message missing")

    return status, Attestation(
        message=decode_hex_field(message_hex),
        attestation=decode_hex_field(attestation_hex),
    )


def format_evm_reference(tx_hash: HexBytes | bytes | str) -> str:
    """EVM burn hash as Iris wants it, ``0x`` prefixed."""
    if isinstance(tx_hash, bytes):
        return "0x" + tx_hash.hex()
    elif tx_hash.startswith("0x"):
        return tx_hash
    return f"0x{tx_hash}"


class AttestationClient:
    """Poll Circle's Iris API for attestations of burns on one source chain.

    - One HTTP session per client, safe to share between threads
    - Waits happen on a :py:class:`threading.Event`, so another thread can stop
      a poll loop between attempts by calling :py:meth:`cancel`
    - A cancel stops the poll in progress. :py:meth:`get_attestation_with_retry`
      forgets it when the next poll starts, :py:meth:`poll_attestation` does not.
    """

    def __init__(
        self,
        source_chain: Chain,
        session: requests.Session | None = None,
        api_base_url: str | None = None,
        sleep: Callable[[float], None] | None = None,
        cancel_event: threading.Event | None = None,
        on_status_change: Callable[[str, int], None] | None = None,
    ):
        """
        :param source_chain:
            Chain where the burn happened. Its domain id goes into the query
            and its sandbox flag picks the Iris environment.

        :param session:
            Reuse a HTTP session. A new one is created if not given.

        :param api_base_url:
            Override the Iris base URL.

        :param sleep:
            Replace the wait between attempts. Used in tests.

        :param cancel_event:
            Event to stop polling between attempts.

        :param on_status_change:
            Called on every attempt with ``(status, attempt)``.
            Status is ``"waiting_for_indexing"``, ``"rate_limited"`` or an :py:class:`AttestationStatus` value.
        """
        self.source_chain = source_chain
        self.session = session or requests.Session()
        self.api_base_url = api_base_url
        self.sleep = sleep
        self.cancel_event = cancel_event or threading.Event()
        self.on_status_change = on_status_change

    def __repr__(self):
        return f"<AttestationClient {self.source_chain} {self.api_url}>"

    @property
    def api_url(self) -> str:
        """Iris base URL for the source chain's environment."""
        if self.api_base_url:
            return self.api_base_url
        return IRIS_API_SANDBOX_URL if self.source_chain.sandbox() else IRIS_API_BASE_URL

    def iris_api_url(self, reference: str) -> str:
        """Build the message query URL for a burn.

        :param reference:
            EVM transaction hash or Solana transaction signature, passed through as is.
        """
        return f"{self.api_url}/v2/messages/{self.source_chain.cctp_domain_id()}?transactionHash={reference}"

    def cancel(self):
        """Stop the poll loop in progress before its next attempt."""
        self.cancel_event.set()

    def reset(self):
        """Forget an earlier cancel."""
        self.cancel_event.clear()

    def fetch_attestation(self, url: str) -> requests.Response:
        """Single GET against Iris."""
        return self.session.get(url, timeout=REQUEST_TIMEOUT)

    def get_attestation_evm(
        self,
        tx_hash: HexBytes | bytes | str,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> Attestation:
        """Poll for an attestation of an EVM burn transaction.

        Iris wants the hash ``0x`` prefixed.
        """
        return self.get_attestation_with_retry(format_evm_reference(tx_hash), max_attempts=max_attempts, poll_interval=poll_interval)

    def get_attestation_with_retry(
        self,
        reference: str,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> Attestation:
        """Poll for an attestation, forgetting any earlier cancel.

        See :py:meth:`poll_attestation`.
        """
        self.reset()
        return self.poll_attestation(reference, max_attempts=max_attempts, poll_interval=poll_interval)

    def poll_attestation(
        self,
        reference: str,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> Attestation:
        """Poll the Iris API until the attestation is complete.

        - 429: cool down 5 minutes, retry
        - 404: wait ``poll_interval``, retry
        - other non-success status: raise at once
        - undecodable or non-object JSON body: log, wait ``poll_interval``, retry
        - empty message list: raise at once
        - ``pending`` / ``pending_confirmations``: wait ``poll_interval``, retry
        - ``failed``: raise
        - ``complete``: decode and return

        Every branch counts against ``max_attempts``.

        :param reference:
            Burn transaction hash or signature, with or without ``0x``.

        :param max_attempts:
            How many requests before giving up.

        :param poll_interval:
            Seconds between polls.

        :return:
            Decoded :py:class:`Attestation`.

        :raise AttestationTimeout:
            Attempts ran out.

        :raise AttestationFailed:
            Iris reported failure or the record was unusable.

        :raise EmptyAttestation:
            Iris returned no message records.

        :raise AttestationCancelled:
            :py:meth:`cancel` was called.

        :raise requests.HTTPError:
            Iris returned a non-retryable error response.
        """
        domain_id = self.source_chain.cctp_domain_id()
        domain_name = CCTP_DOMAIN_NAMES.get(domain_id, f"domain-{domain_id}")
        url = self.iris_api_url(reference)

        logger.info(
            "Waiting for CCTP attestation on %s: ref=%s, max_attempts=%d, poll_interval=%s\n  Iris API: %s",
            domain_name,
            reference,
            max_attempts,
            poll_interval,
            url,
        )

        for attempt in range(1, max_attempts + 1):
            if self.cancel_event.is_set():
                raise AttestationCancelled(f"Attestation polling cancelled for {reference} before attempt {attempt}")

            logger.debug("Polling CCTP attestation: %s, ref=%s, attempt=%d/%d", domain_name, reference, attempt, max_attempts)

            response = self.fetch_attestation(url)

            if response.status_code == HTTP_TOO_MANY_REQUESTS:
                self._notify("rate_limited", attempt)
                logger.warning("Iris rate limit exceeded, cooling down %d seconds", RATE_LIMIT_COOL_DOWN)
                self._wait(RATE_LIMIT_COOL_DOWN)
                continue

            # Iris returns 404 until it has indexed the transaction
            if response.status_code == HTTP_NOT_FOUND:
                self._notify("waiting_for_indexing", attempt)
                logger.debug("Attestation not yet indexed (404) for %s, retrying in %s s", domain_name, poll_interval)
                self._wait(poll_interval)
                continue

            response.raise_for_status()

            try:
                data = response.json()
            except ValueError as e:
                logger.error("Error decoding attestation response for %s: %s", reference, e)
                self._wait(poll_interval)
                continue

            if not isinstance(data, dict):
                logger.error("Unexpected attestation response for %s: %r", reference, data)
                self._wait(poll_interval)
                continue

            messages = data.get("messages") or []
            if not messages:
                raise EmptyAttestation()

            if len(messages) > 1:
                logger.warning("Iris returned %d messages for %s, using the first one", len(messages), reference)

            status, attestation = parse_attestation_message(messages[0])
            self._notify(status.value, attempt)

            if attestation is not None:
                logger.info(
                    "Attestation complete for %s after %d attempts: ref=%s",
                    domain_name,
                    attempt,
                    reference,
                )
                return attestation

            if status == AttestationStatus.failed:
                raise AttestationFailed(f"Iris reported failed attestation for {reference} on {domain_name}")

            logger.debug("Attestation status for %s: %s (waiting for 'complete')", domain_name, status.value)
            self._wait(poll_interval)

        raise AttestationTimeout(reference, max_attempts)

    def _notify(self, status: str, attempt: int):
        if self.on_status_change is not None:
            self.on_status_change(status, attempt)

    def _wait(self, seconds: float):
        if self.sleep is not None:
            self.sleep(seconds)
            return
        if self.cancel_event.wait(seconds):
            raise AttestationCancelled(f"Attestation polling cancelled while waiting {seconds} s")
