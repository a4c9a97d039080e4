"""
Currency Conversion

DESIGN DECISION: Rates are a fixed table of units-per-USD and are never
refreshed. Every conversion in the engine goes through convert(), so a
live rate provider can later replace the table without touching callers.

Unknown currencies are treated as rate 1 (USD parity) rather than raising.
"""

from decimal import Decimal
from typing import Union

Number = Union[int, float, Decimal]


# Units of each currency per 1 USD
RATE_TO_USD: dict[str, float] = {
    "USD": 1.0,
    "EUR": 0.85,
    "GBP": 0.73,
    "JPY": 110.0,
    "CNY": 6.45,
    "INR": 75.0,
}

SUPPORTED_CURRENCIES: tuple[str, ...] = tuple(RATE_TO_USD)


def rate_for(currency: str) -> float:
    """Units per USD for a currency, 1.0 when the currency is unknown."""
    return RATE_TO_USD.get(currency, 1.0) or 1.0


def is_supported(currency: str) -> bool:
    return currency in RATE_TO_USD


def convert(amount: Number, from_currency: str, to_currency: str) -> float:
    """
    Convert an amount between currencies via USD.

    Equal currencies short-circuit so the amount comes back unchanged
    instead of picking up rounding from rate/rate.
    """
    if from_currency == to_currency:
        return float(amount)

    usd_amount = float(amount) / rate_for(from_currency)
    return usd_amount * rate_for(to_currency)
