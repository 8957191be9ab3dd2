"""
Lossless conversion between ledger base units and decimal display values.

Ledger amounts arrive as integer strings in the token's smallest unit
(e.g. "1500000" uosmo). Conversion uses Python's arbitrary-precision int,
never float, so values beyond 2**53 keep every digit.

Example:
    format_amount("1500000", "uosmo") -> "1.5"
    denom_to_symbol("uosmo") -> "OSMO"
"""

import re
from decimal import Decimal, localcontext
from typing import Any, Mapping, Optional

from osmosis_tax_gateway.config import settings
from osmosis_tax_gateway.domain.exceptions import DenominationMismatchError
from osmosis_tax_gateway.domain.models import Amount

DEFAULT_DECIMALS = 6
IBC_PREFIX = "ibc/"
MICRO_PREFIX = "u"
UNKNOWN_DENOM = "unknown"

KNOWN_DECIMALS = {
    "uosmo": 6,
    "uion": 6,
    "uatom": 6,
}

KNOWN_SYMBOLS = {
    "uosmo": "OSMO",
    "uion": "ION",
    "uatom": "ATOM",
    UNKNOWN_DENOM: "UNKNOWN",
}

_DIGITS = re.compile(r"[0-9]+")
_DECIMAL = re.compile(r"([0-9]*)(?:\.([0-9]*))?")


def to_decimal(raw: str | int, decimal_places: int) -> str:
    """
    Convert a non-negative base-unit integer to a decimal string.

    Fractional digits are left-padded to decimal_places, then trailing
    zeros are stripped; a zero remainder yields the integer part only.

    Raises:
        ValueError: raw is negative or not an integer
    """
    text = str(raw).strip()
    if not _DIGITS.fullmatch(text):
        raise ValueError(f"Base-unit amount must be a non-negative integer: {raw!r}")
    if decimal_places < 0:
        raise ValueError(f"decimal_places must be >= 0, got {decimal_places}")

    integer_part, fractional_part = divmod(int(text), 10**decimal_places)
    if fractional_part == 0:
        return str(integer_part)

    fraction = str(fractional_part).zfill(decimal_places).rstrip("0")
    return f"{integer_part}.{fraction}"


def to_base_units(value: str, decimal_places: int) -> str:
    """
    Convert a decimal string back to base units.

    Lossy for inputs with more than decimal_places fractional digits: the
    excess digits are truncated, not rounded ("1.0000019" at 6 places -> "1000001").
    """
    text = str(value).strip()
    match = _DECIMAL.fullmatch(text)
    if not text or match is None:
        raise ValueError(f"Not a non-negative decimal amount: {value!r}")

    integer_part = match.group(1) or "0"
    fraction = (match.group(2) or "").ljust(decimal_places, "0")[:decimal_places]

    return str(int(integer_part) * 10**decimal_places + int(fraction or "0"))


def decimals_for(denom: str) -> int:
    """Decimal places for a denomination (6 unless overridden)"""
    if denom.startswith(IBC_PREFIX):
        return DEFAULT_DECIMALS
    return KNOWN_DECIMALS.get(denom, DEFAULT_DECIMALS)


def denom_to_symbol(denom: str) -> str:
    """
    Human-readable symbol for a denomination.

    - known table: "uosmo" -> "OSMO"
    - IBC hashed denoms: "ibc/27394FB0..." -> "IBC/27394F"
    - micro-prefixed: "ujuno" -> "JUNO"
    - anything else uppercased
    """
    if denom in KNOWN_SYMBOLS:
        return KNOWN_SYMBOLS[denom]

    if denom.startswith(IBC_PREFIX):
        return f"IBC/{denom[len(IBC_PREFIX):len(IBC_PREFIX) + 6].upper()}"

    if denom.startswith(MICRO_PREFIX):
        return denom[len(MICRO_PREFIX):].upper()

    return denom.upper()


def format_amount(raw: str | int, denom: str) -> str:
    """Decimal string for a base-unit amount of the given denomination"""
    return to_decimal(raw, decimals_for(denom))


def _field(source: Any, name: str) -> Any:
    if isinstance(source, Mapping):
        return source.get(name)
    return getattr(source, name, None)


def parse_amount(coin: Any) -> Amount:
    """
    Normalize a raw {denom, amount} coin.

    Accepts a mapping or any object with denom/amount attributes. Missing
    pieces fall back to denom "unknown" and amount "0".
    """
    if not coin:
        return Amount(value="0", denom=UNKNOWN_DENOM, symbol="UNKNOWN")

    denom = _field(coin, "denom") or UNKNOWN_DENOM
    raw = _field(coin, "amount") or "0"

    return Amount(value=format_amount(raw, denom), denom=denom, symbol=denom_to_symbol(denom))


def parse_fee(fee: Any) -> Amount:
    """First fee coin, or zero in the chain's fee denomination when absent"""
    coins = _field(fee, "amount") if fee else None
    if not coins:
        return Amount(value="0", denom=settings.fee_denom, symbol=denom_to_symbol(settings.fee_denom))
    return parse_amount(coins[0])


def _normalize(value: Decimal) -> str:
    text = format(value, "f")
    return text.rstrip("0").rstrip(".") if "." in text else text


def amounts_equal(first: Amount, second: Amount) -> bool:
    """Same denomination and same magnitude ("1.50" equals "1.5")"""
    return first.denom == second.denom and Decimal(first.value) == Decimal(second.value)


def add_amounts(first: Amount, second: Amount) -> Amount:
    """
    Exact sum of two amounts of one denomination.

    Raises:
        DenominationMismatchError: denominations differ
    """
    if first.denom != second.denom:
        raise DenominationMismatchError(
            f"Cannot add amounts with different denominations: {first.denom} and {second.denom}"
        )

    # Default context keeps 28 significant digits; size it to the operands
    with localcontext() as ctx:
        ctx.prec = len(first.value) + len(second.value) + 1
        total = Decimal(first.value) + Decimal(second.value)
    return Amount(value=_normalize(total), denom=first.denom, symbol=first.symbol)


def coin_or_none(denom: Optional[str], raw: Optional[str]) -> Optional[Amount]:
    """Amount for a bare (denom, amount) pair, or None when the amount is missing"""
    if raw is None:
        return None
    return parse_amount({"denom": denom or UNKNOWN_DENOM, "amount": raw})
