"""Fixed-point money handling in integer cents"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN

from split_ledger.domain.exceptions import InvalidAmountError
from split_ledger.domain.models import Split

CENT = Decimal("0.01")
MIN_AMOUNT_CENTS = 1
MAX_AMOUNT_CENTS = 100_000_000  # $1,000,000.00

AmountLike = str | int | float | Decimal


def _to_decimal(value: AmountLike) -> Decimal:
    if isinstance(value, bool):
        raise InvalidAmountError(f"Amount must be a number, got {value!r}")
    if isinstance(value, float):
        # str() keeps 0.1 as "0.1" instead of its binary expansion
        value = str(value)
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmountError(f"Amount must be a number, got {value!r}") from None
    if not amount.is_finite():
        raise InvalidAmountError(f"Amount must be finite, got {value!r}")
    return amount


def round2(value: AmountLike) -> Decimal:
    """
    Round to the nearest cent, ties to even (banker's rounding).

    Example:
        100.005 → 100.00, 100.015 → 100.02, 100.025 → 100.02
    """
    return _to_decimal(value).quantize(CENT, rounding=ROUND_HALF_EVEN)


def validate_amount(value: AmountLike, max_cents: int = MAX_AMOUNT_CENTS) -> Decimal:
    """
    Validate a transaction amount and return it as a Decimal.

    Rejects:
    - non-numeric values
    - zero, negative, or below 0.01
    - more than max_cents
    - more than 2 decimal places

    The range is checked before precision: quantizing an unbounded value can
    exceed the decimal context and raise InvalidOperation.
    """
    amount = _to_decimal(value)
    if amount <= 0:
        raise InvalidAmountError("Amount must be positive")
    if amount * 100 > max_cents:
        raise InvalidAmountError(f"Amount exceeds maximum of {format_currency(max_cents)}")
    if amount.as_tuple().exponent < -2 and amount != amount.quantize(CENT):
        raise InvalidAmountError("Amount must have at most 2 decimal places")
    if amount < CENT:
        raise InvalidAmountError("Amount too small (minimum 0.01)")
    return amount


def to_cents(value: AmountLike, max_cents: int = MAX_AMOUNT_CENTS) -> int:
    """Validate an amount and convert it to integer cents"""
    return int(validate_amount(value, max_cents) * 100)


def split_equally(total_cents: int) -> Split:
    """
    Split an amount in two with integer floor division.

    The odd cent (if any) is returned as remainder for the payer to absorb,
    so 2 * share + remainder == total always holds.

    Example:
        10001 cents → share 5000, remainder 1
    """
    if total_cents < MIN_AMOUNT_CENTS:
        raise InvalidAmountError("Amount too small (minimum 0.01)")

    share = total_cents // 2
    remainder = total_cents - share * 2

    return Split(share_cents=share, remainder_cents=remainder)


def cents_to_decimal(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(CENT)


def format_currency(value: int | Decimal) -> str:
    """Fixed 2-decimal string; ints are read as cents"""
    if isinstance(value, int):
        value = cents_to_decimal(value)
    return f"{round2(value):.2f}"
