"""
Decimal context utilities for decimath.

Provides the glue between DecimalValue's digit-string fields and the standard
library ``decimal`` engine that performs the actual digit arithmetic:
context construction, exact-width contexts, plain-string conversion and
quantization.

Usage:
    from decimath.utils.decimal_utils import make_context, split_plain

    ctx = make_context(50, ROUND_HALF_UP)
    quotient = ctx.divide(Decimal(1), Decimal(3))
    split_plain(quotient)
    # Returns: (False, "0", "33333333333333333333333333333333333333333333333333")
"""
from decimal import Decimal, Context, Inexact, MAX_EMAX, MIN_EMIN, ROUND_HALF_EVEN, ROUND_HALF_UP
from typing import Tuple

# Inexact divisions double their working precision at most this many times
_EXACT_DIVISION_ATTEMPTS = 12


def make_context(digits: int, rounding: str = ROUND_HALF_UP) -> Context:
    """
    Build an isolated decimal Context.

    The exponent range is opened to the implementation limits so that
    arithmetic never overflows before running out of significant digits.

    Args:
        digits: Significant digits kept by inexact operations
        rounding: One of the decimal.ROUND_* constants

    Returns:
        Fresh decimal.Context (never the thread-local default context)

    Raises:
        ValueError: If digits is not positive
    """
    if digits <= 0:
        raise ValueError(f"Context precision must be positive, got {digits}")
    return Context(prec=digits, rounding=rounding, Emax=MAX_EMAX, Emin=MIN_EMIN)


def additive_width(a: Decimal, b: Decimal) -> int:
    """Digits needed to add or subtract a and b without rounding."""
    highest = max(a.adjusted(), b.adjusted(), 0)
    lowest = min(a.as_tuple().exponent, b.as_tuple().exponent, 0)
    return highest - lowest + 2


def multiplicative_width(a: Decimal, b: Decimal) -> int:
    """Digits needed to multiply a and b without rounding."""
    return len(a.as_tuple().digits) + len(b.as_tuple().digits) + 1


def exact_divide(dividend: Decimal, divisor: Decimal, start_digits: int = 64) -> Decimal:
    """
    Divide when the quotient is known to terminate (e.g. Bareiss elimination).

    Precision is doubled until the division no longer signals Inexact.

    Args:
        dividend: Numerator
        divisor: Non-zero denominator
        start_digits: Initial working precision

    Returns:
        The exact quotient, or the best rounded quotient after the last attempt
    """
    digits = max(start_digits, multiplicative_width(dividend, divisor))
    quotient = dividend
    for _ in range(_EXACT_DIVISION_ATTEMPTS):
        ctx = make_context(digits, ROUND_HALF_EVEN)
        quotient = ctx.divide(dividend, divisor)
        if not ctx.flags[Inexact]:
            return quotient
        digits *= 2
    return quotient


def to_plain_string(value: Decimal) -> str:
    """
    Render a Decimal without exponent notation.

    Example:
        >>> to_plain_string(Decimal("1.5E+3"))
        '1500'
    """
    return format(value, 'f')


def split_plain(value: Decimal) -> Tuple[bool, str, str]:
    """
    Split a Decimal into (is_negative, integer_digits, fraction_digits).

    Trailing fraction zeros are dropped; a missing part becomes "0".

    Example:
        >>> split_plain(Decimal("-12.500"))
        (True, '12', '5')
    """
    text = to_plain_string(value)
    is_negative = text.startswith('-')
    if is_negative:
        text = text[1:]

    integer_part, _, fraction_part = text.partition('.')
    integer_part = integer_part.lstrip('0') or "0"
    fraction_part = fraction_part.rstrip('0') or "0"

    if integer_part == "0" and fraction_part == "0":
        is_negative = False

    return is_negative, integer_part, fraction_part


def round_to_places(value: Decimal, places: int, rounding: str = ROUND_HALF_UP) -> Decimal:
    """
    Round a Decimal to a fixed number of fraction digits.

    Args:
        value: Decimal value to round
        places: Number of digits after the decimal point (>= 0)
        rounding: One of the decimal.ROUND_* constants

    Returns:
        Quantized Decimal

    Example:
        >>> round_to_places(Decimal("0.99999999999999"), 6)
        Decimal('1.000000')
    """
    if places < 0:
        raise ValueError(f"places must be non-negative, got {places}")

    # Example: places=6 → quantizer=0.000001
    quantizer = Decimal(1).scaleb(-places)
    ctx = make_context(places + max(value.adjusted(), 0) + 3, rounding)
    return value.quantize(quantizer, rounding=rounding, context=ctx)


def exact_add(a: Decimal, b: Decimal) -> Decimal:
    """a + b without rounding."""
    return make_context(additive_width(a, b)).add(a, b)


def exact_subtract(a: Decimal, b: Decimal) -> Decimal:
    """a - b without rounding."""
    return make_context(additive_width(a, b)).subtract(a, b)


def exact_multiply(a: Decimal, b: Decimal) -> Decimal:
    """a * b without rounding."""
    return make_context(multiplicative_width(a, b)).multiply(a, b)


def plain_width(value: Decimal) -> int:
    """
    Number of digits in the exponent-free rendering of a finite Decimal.

    Example:
        >>> plain_width(Decimal("1E+6")), plain_width(Decimal("0.00012"))
        (7, 6)
    """
    _, digits, exponent = value.as_tuple()
    if exponent >= 0:
        return len(digits) + exponent
    return max(len(digits), 1 - exponent)
