"""Burn fee quotes."""

from unittest.mock import Mock

import pytest
import requests

from cctp_bridge.fee import BurnFee, Fees, fetch_fees
from cctp_bridge.testing import build_iris_fee_record


def test_fetch_fees(make_response):
    session = Mock(spec=requests.Session)
    session.get.return_value = make_response(200, [build_iris_fee_record(1000, 1), build_iris_fee_record(2000, 0)])

    fees = fetch_fees(session, "https://iris-api-sandbox.circle.com", 5, 6)

    assert session.get.call_args.args[0] == "https://iris-api-sandbox.circle.com/v2/burn/USDC/fees/5/6"
    assert fees.records == (BurnFee(1000, 1), BurnFee(2000, 0))
    assert str(fees) == "source: finality threshold 1000 minimum fee 1  destination: finality threshold 2000 minimum fee 0"


def test_fetch_fees_http_error(make_response):
    session = Mock(spec=requests.Session)
    session.get.return_value = make_response(400)

    with pytest.raises(requests.HTTPError):
        fetch_fees(session, "https://iris-api.circle.com", 0, 99)


@pytest.mark.parametrize(
    "records,source_fees,finality_threshold,text",
    [
        ((), 3, 100, "no fees available"),
        ((BurnFee(1000, 1),), 4, 1000, "source: finality threshold 1000 minimum fee 1  destination: None"),
        ((BurnFee(1000, 1), BurnFee(2000, 0)), 3, 100, None),
    ],
)
def test_fee_heuristics(records, source_fees, finality_threshold, text):
    """Derived values are fixed fallbacks, not the quoted minimum fee."""
    fees = Fees(records)
    assert fees.source_fees() == source_fees
    assert fees.source_finality_threshold() == finality_threshold
    if text:
        assert str(fees) == text
