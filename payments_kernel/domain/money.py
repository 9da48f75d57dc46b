"""
Money -- validation of caller-supplied amounts.

Pure functions, zero I/O.  Every amount entering a processor goes through
parse_amount() so that floats, non-numbers, non-positive values and
sub-cent precision are refused before a transaction is opened.
"""

from decimal import Decimal, InvalidOperation

from payments_kernel.db.types import MAX_AMOUNT, MONEY_DECIMAL_PLACES, round_money
from payments_kernel.exceptions import InvalidAmountError


def parse_amount(value: Decimal | int | str) -> Decimal:
    """
    Convert a caller-supplied amount to a positive 2-place Decimal.

    Preconditions: value is a Decimal, an int, or a numeric string.
    Postconditions: Returns a Decimal > 0 quantized to 2 places, equal to
        the input (no rounding is applied to make it fit).

    Raises:
        InvalidAmountError: float input, bool input, unparseable string,
            NaN/Infinity, value <= 0, more than 2 decimal places, or a value
            above MAX_AMOUNT.
    """
    if isinstance(value, (float, bool)):
        raise InvalidAmountError(repr(value), "floating-point and boolean amounts are refused")

    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmountError(repr(value), "not a decimal number") from None

    if not amount.is_finite():
        raise InvalidAmountError(str(amount), "amount must be finite")
    if amount <= 0:
        raise InvalidAmountError(str(amount), "amount must be positive")

    if amount > MAX_AMOUNT:
        raise InvalidAmountError(str(amount), f"amount exceeds the maximum of {MAX_AMOUNT}")

    try:
        quantized = round_money(amount)
    except InvalidOperation:
        raise InvalidAmountError(str(amount), "amount cannot be represented in cents") from None
    if quantized != amount:
        raise InvalidAmountError(
            str(amount), f"more than {MONEY_DECIMAL_PLACES} decimal places"
        )
    return quantized

