"""Money conversion and rounding utilities.

Money is always a ``Decimal`` with two fractional digits once rounded.
Floats are converted through ``str()`` so that ``0.1`` becomes
``Decimal("0.1")`` rather than its binary approximation.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import re

from catalogit.domain.errors import InvalidNumericInputError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def to_money(raw) -> Decimal:
    """Convert a decimal-like or numeric value to a Decimal.

    Args:
        raw: Decimal, int, float or numeric string

    Returns:
        Decimal value (not rounded)

    Raises:
        InvalidNumericInputError: If the value is not a finite number
    """
    if raw is None or isinstance(raw, bool):
        raise InvalidNumericInputError(f"Not a numeric value: {raw!r}")

    if isinstance(raw, Decimal):
        value = raw
    elif isinstance(raw, (int, float, str)):
        try:
            value = Decimal(str(raw).strip())
        except InvalidOperation:
            raise InvalidNumericInputError(f"Not a numeric value: {raw!r}")
    else:
        raise InvalidNumericInputError(f"Not a numeric value: {raw!r}")

    if not value.is_finite():
        raise InvalidNumericInputError(f"Value must be finite, got {raw!r}")
    return value


def round2(n) -> Decimal:
    """Round to 2 decimal places, half-up.

    ``round2(round2(x)) == round2(x)`` for every x.
    """
    value = to_money(n)
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def parse_money(amount_str: str) -> Decimal:
    """Parse a user-typed amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "$123.45"
    - "1,234.56"
    - " 99 "

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        InvalidNumericInputError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise InvalidNumericInputError("Empty amount string")

    cleaned = re.sub(r"[$€£¥₹]", "", amount_str.strip())
    cleaned = cleaned.replace(",", "").strip()

    return to_money(cleaned)
