"""CCTP V2 burn fee quotes.

Circle publishes the minimum fee for a burn between two domains.
`See the API reference <https://developers.circle.com/api-reference/cctp/all/get-burn-usdc-fees>`__.

The endpoint returns zero, one or two records: the source chain fee,
optionally followed by the destination chain fee.
"""

import logging
from dataclasses import dataclass

import requests

logger = logging.getLogger(__name__)

#: ``max_fee`` used when exactly one fee record was quoted
SINGLE_RECORD_SOURCE_FEE = 4

#: ``max_fee`` used otherwise
FALLBACK_SOURCE_FEE = 3

#: Finality threshold used when there is not exactly one record
FALLBACK_FINALITY_THRESHOLD = 100


@dataclass(frozen=True, slots=True)
class BurnFee:
    """One fee record."""

    #: The finality threshold, such as block confirmations, used to determine
    #: whether the transfer qualifies as a Fast or Standard Transfer.
    finality_threshold: int

    #: Minimum fee for the transfer in basis points, 1 = 0.01%.
    minimum_fee: float

    def __str__(self):
        return f"finality threshold {self.finality_threshold} minimum fee {self.minimum_fee}"

    @classmethod
    def from_json(cls, data: dict) -> "BurnFee":
        return cls(
            finality_threshold=int(data["finalityThreshold"]),
            minimum_fee=data["minimumFee"],
        )


@dataclass(frozen=True, slots=True)
class Fees:
    """Fee records for a source/destination pair."""

    records: tuple[BurnFee, ...]

    def __str__(self):
        if len(self.records) == 0:
            return "no fees available"
        elif len(self.records) == 1:
            return f"source: {self.records[0]}  destination: None"
        return f"source: {self.records[0]}  destination: {self.records[1]}"

    def source_fees(self) -> int:
        """``max_fee`` to use for the burn when the caller gives none.

        Fixed values, not derived from the quoted minimum fee.
        """
        if len(self.records) == 1:
            return SINGLE_RECORD_SOURCE_FEE
        return FALLBACK_SOURCE_FEE

    def source_finality_threshold(self) -> int:
        """``min_finality_threshold`` to use for the burn when the caller gives none."""
        if len(self.records) == 1:
            return self.records[0].finality_threshold
        return FALLBACK_FINALITY_THRESHOLD


def fetch_fees(
    session: requests.Session,
    api_url: str,
    source_domain: int,
    destination_domain: int,
    timeout: float = 30,
) -> Fees:
    """Query the Iris burn fee endpoint.

    :param api_url:
        Iris base URL.

    :raise requests.HTTPError:
        On non-success response.
    """
    url = f"{api_url}/v2/burn/USDC/fees/{source_domain}/{destination_domain}"
    logger.debug("Getting fees from %s", url)
    response = session.get(url, timeout=timeout)
    response.raise_for_status()
    fees = Fees(tuple(BurnFee.from_json(r) for r in response.json()))
    logger.debug("Fees %s", fees)
    return fees
