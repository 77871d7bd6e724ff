"""Logging setup and USDC unit helpers for scripts."""

import logging
import os
from decimal import Decimal
from pathlib import Path

import coloredlogs

#: USDC has 6 decimals on every CCTP chain
USDC_DECIMALS = 6


def setup_console_logging(
    default_log_level="warning",
    simplified_logging=False,
    log_file: Path | None = None,
) -> logging.Logger:
    """Set up coloured log output.

    - Log level comes from the ``LOG_LEVEL`` environment variable
    - Tune down noisy dependency library logging

    :param log_file:
        Also write the log to this file, at least at INFO level.

    :return:
        Root logger
    """
    level = os.environ.get("LOG_LEVEL", default_log_level).upper()
    numeric_level = getattr(logging, level, None)
    assert numeric_level, f"No level: {level}"

    if simplified_logging:
        fmt = "%(message)s"
    else:
        fmt = "%(asctime)s %(name)-30s %(message)s"
    date_fmt = "%H:%M:%S"

    coloredlogs.install(level=numeric_level, fmt=fmt, datefmt=date_fmt)

    root = logging.getLogger()
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(min(logging.INFO, numeric_level))
        file_handler.setFormatter(logging.Formatter(fmt, date_fmt))
        root.addHandler(file_handler)
        root.setLevel(min(logging.INFO, numeric_level))

    # Mute noise
    logging.getLogger("web3.providers.HTTPProvider").setLevel(logging.WARNING)
    logging.getLogger("web3.RequestManager").setLevel(logging.WARNING)
    logging.getLogger("urllib3.connectionpool").setLevel(logging.WARNING)
    return root


def to_raw_usdc(amount: Decimal | int | str) -> int:
    """Convert a human USDC amount to raw units.

    >>> to_raw_usdc("1.5")
    1500000
    """
    raw = Decimal(amount) * (10**USDC_DECIMALS)
    assert raw == raw.to_integral_value(), f"Too many decimals in {amount}"
    return int(raw)


def from_raw_usdc(raw: int) -> Decimal:
    """Convert raw USDC units to a human amount."""
    return Decimal(raw) / (10**USDC_DECIMALS)
