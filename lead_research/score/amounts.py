"""Funding-amount parsing."""

import math

CURRENCY_SYMBOLS = ("$", "€", "£")

MAGNITUDE_SUFFIXES = {
    "m": 1_000_000,
    "k": 1_000,
}


def parse_funding_amount(amount: str) -> float:
    """Parse a funding string such as '$5M', '€2.5K' or '1,200,000'.

    Currency symbols and thousands separators are ignored; a trailing 'm' or
    'k' scales the value. Anything unparsable yields 0.

    >>> parse_funding_amount("$5M")
    5000000.0
    >>> parse_funding_amount("€2.5K")
    2500.0
    """
    if not amount:
        return 0.0

    cleaned = amount.lower()
    for symbol in CURRENCY_SYMBOLS:
        cleaned = cleaned.replace(symbol, "")
    cleaned = cleaned.replace(",", "").strip()

    multiplier = 1
    if cleaned and cleaned[-1] in MAGNITUDE_SUFFIXES:
        multiplier = MAGNITUDE_SUFFIXES[cleaned[-1]]
        cleaned = cleaned[:-1].strip()

    try:
        value = float(cleaned)
    except ValueError:
        return 0.0

    if not math.isfinite(value):
        return 0.0
    return value * multiplier
