"""
Conversions between display NEAR amounts and yoctoNEAR integers.
"""

from __future__ import annotations

import re
from decimal import ROUND_FLOOR, Decimal
from typing import Union

from .errors import InvalidAmountError


NEAR_NOMINATION_EXP = 24
NEAR_NOMINATION = 10**NEAR_NOMINATION_EXP

Amount = Union[str, int, Decimal]

_AMOUNT_RE = re.compile(r"([0-9]*)(?:\.([0-9]*))?")


def parse_near_amount(amount: Amount) -> int:
    """
    Convert a display amount ("1", "0.5", "1,000.25") to yoctoNEAR.

    Raises `InvalidAmountError` for anything that is not a plain,
    non-negative decimal with at most 24 fractional digits. Floats are
    refused: their binary value is not the decimal the user typed.
    """

    if isinstance(amount, bool) or isinstance(amount, float):
        raise InvalidAmountError(amount, "expected a decimal string")

    if isinstance(amount, int):
        if amount < 0:
            raise InvalidAmountError(amount, "amount must not be negative")
        return amount * NEAR_NOMINATION

    if isinstance(amount, Decimal):
        if not amount.is_finite() or amount < 0:
            raise InvalidAmountError(amount, "amount must be a finite, non-negative number")
        amount = format(amount, "f")

    if not isinstance(amount, str):
        raise InvalidAmountError(amount, "expected a decimal string")

    match = _AMOUNT_RE.fullmatch(amount.strip().replace(",", ""))
    if match is None:
        raise InvalidAmountError(amount)
    whole, fraction = match.group(1), match.group(2) or ""
    if not whole and not fraction:
        raise InvalidAmountError(amount)
    if len(fraction) > NEAR_NOMINATION_EXP:
        raise InvalidAmountError(amount, "too many fractional digits")

    return int((whole or "0") + fraction.ljust(NEAR_NOMINATION_EXP, "0"))


def yocto_to_near(raw: int) -> Decimal:
    return Decimal(raw).scaleb(-NEAR_NOMINATION_EXP)


def floor_to_cents(value: Decimal) -> Decimal:
    return value.quantize(Decimal("0.01"), rounding=ROUND_FLOOR)
