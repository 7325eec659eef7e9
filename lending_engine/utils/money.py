"""Currency helpers: minor units and rounding for Decimal amounts"""

from decimal import Decimal, ROUND_CEILING, ROUND_HALF_UP
from typing import Dict

# ISO 4217 exponents that differ from the usual 2
_MINOR_UNIT_EXPONENTS: Dict[str, int] = {
    "JPY": 0,
    "KRW": 0,
    "VND": 0,
    "CLP": 0,
    "ISK": 0,
    "UGX": 0,
    "XAF": 0,
    "XOF": 0,
    "BHD": 3,
    "JOD": 3,
    "KWD": 3,
    "OMR": 3,
    "TND": 3,
}


def minor_unit_exponent(currency: str) -> int:
    """Number of decimal places in the currency's minor unit (USD → 2)"""
    return _MINOR_UNIT_EXPONENTS.get(currency.upper(), 2)


def minor_unit(currency: str) -> Decimal:
    """Smallest representable amount, e.g. Decimal("0.01") for USD"""
    return Decimal(1).scaleb(-minor_unit_exponent(currency))


def round_money(amount: Decimal, currency: str = "USD") -> Decimal:
    """Round half-up to the currency minor unit"""
    return Decimal(amount).quantize(minor_unit(currency), rounding=ROUND_HALF_UP)


def to_minor_units(amount: Decimal, currency: str = "USD") -> int:
    """
    Convert an amount to an integer count of minor units.

    Example:
        Decimal("400.03") USD → 40003
    """
    return int(round_money(amount, currency).scaleb(minor_unit_exponent(currency)))


def from_minor_units(units: int, currency: str = "USD") -> Decimal:
    """Inverse of to_minor_units, quantized to the minor unit"""
    return Decimal(units).scaleb(-minor_unit_exponent(currency)).quantize(minor_unit(currency))


def ceil_whole(amount: Decimal) -> Decimal:
    """Round up to a whole currency unit (display amounts for suggestions)"""
    return Decimal(amount).to_integral_value(rounding=ROUND_CEILING)


def round_whole(amount: Decimal) -> Decimal:
    """Round half-up to a whole currency unit"""
    return Decimal(amount).to_integral_value(rounding=ROUND_HALF_UP)
