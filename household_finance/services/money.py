"""Money / rounding / display helpers.

Centralized so the ledger, balances and transaction writes use identical
rounding and grouping semantics.
"""

from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP, localcontext
import math
from typing import Dict, Tuple

# locale -> (thousands separator, decimal separator)
_SEPARATORS: Dict[str, Tuple[str, str]] = {
    "es-AR": (".", ","),
    "es-ES": (".", ","),
    "pt-BR": (".", ","),
    "de-DE": (".", ","),
    "en-US": (",", "."),
    "en-GB": (",", "."),
    "fr-FR": (" ", ","),
}
DEFAULT_LOCALE = "es-AR"

# Integral values below this print as plain digits
_PLAIN_DIGITS_LIMIT = 1e21


def _quantize(number: Decimal, decimal_places: int) -> Decimal:
    """Round half-up to `decimal_places` with enough precision for any magnitude."""
    with localcontext() as ctx:
        ctx.prec = max(number.adjusted(), 0) + decimal_places + 2
        return number.quantize(Decimal(1).scaleb(-decimal_places), rounding=ROUND_HALF_UP)


def round2(value: float) -> float:
    if not math.isfinite(value):
        return value
    return float(_quantize(Decimal(str(value)), 2))


def format_number(value: float, decimal_places: int, locale: str = DEFAULT_LOCALE) -> str:
    """Group thousands and fix the number of decimals for the given locale."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "-∞" if value < 0 else "∞"
    thousands, decimal_sep = _SEPARATORS.get(locale, _SEPARATORS[DEFAULT_LOCALE])
    rounded = _quantize(Decimal(str(value)), decimal_places)
    if rounded == 0:
        rounded = abs(rounded)  # no "-0,00"
    text = f"{rounded:,.{decimal_places}f}"
    return text.translate(str.maketrans({",": thousands, ".": decimal_sep}))


def plain_number(value: float) -> str:
    """Bare numeric text, without a trailing '.0' on integral values."""
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "-Infinity" if value < 0 else "Infinity"
        if value.is_integer() and abs(value) < _PLAIN_DIGITS_LIMIT:
            return str(int(value))
    return str(value)
