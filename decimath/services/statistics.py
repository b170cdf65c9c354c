"""
Descriptive statistics over sequences of DecimalValue.

Every aggregate needs a non-empty sequence (EmptySequenceError otherwise) and
leaves its input untouched. Results take the locale and precision of the
first element unless an explicit `ctx` is given.

Exact: sum_values, median, modes.
Rounded once to the precision: average, variance, standard_deviation,
geometric_mean, harmonic_mean.
"""
from decimal import Decimal
from typing import List, Optional, Sequence, Union

import structlog

from decimath.errors import DivisionByZeroError, EmptySequenceError, InsufficientElementsError, NegativeValueError
from decimath.schemas.common import PrecisionContext
from decimath.schemas.values import DecimalValue
from decimath.services import arithmetic
from decimath.utils.decimal_utils import exact_add, exact_divide, exact_multiply, exact_subtract

logger = structlog.get_logger(__name__)

Number = Union[DecimalValue, Decimal, int, str]

_GUARD_DIGITS = 10


def _values(values: Sequence[Number], operation: str) -> List[DecimalValue]:
    if values is None or len(values) == 0:
        raise EmptySequenceError(f"{operation} requires at least one value")
    first = DecimalValue.of(values[0])
    return [first] + [
        v if isinstance(v, DecimalValue) else DecimalValue.of(v, locale=first.locale, precision=first.precision)
        for v in values[1:]
        ]


def _result(value: Decimal, like: DecimalValue, precision: Optional[PrecisionContext] = None) -> DecimalValue:
    return DecimalValue.from_decimal(value, locale=like.locale, precision=precision or like.precision)


def _exact_sum(decimals: Sequence[Decimal]) -> Decimal:
    total = Decimal(0)
    for value in decimals:
        total = exact_add(total, value)
    return total


# ============================================================================
# CENTRAL TENDENCY
# ============================================================================

def sum_values(values: Sequence[Number]) -> DecimalValue:
    """Exact sum of all values."""
    items = _values(values, "Sum")
    return _result(_exact_sum([v.to_decimal() for v in items]), items[0])


def average(values: Sequence[Number], ctx: Optional[PrecisionContext] = None) -> DecimalValue:
    """
    Arithmetic mean: exact sum divided once by the count.

    Example:
        >>> average([DecimalValue.of(1), DecimalValue.of(2), DecimalValue.of(4)], PrecisionContext(digits=5))
        DecimalValue('2.3333', locale='en_US')
    """
    items = _values(values, "Average")
    return arithmetic.divide(sum_values(items), len(items), ctx)


def median(values: Sequence[Number]) -> DecimalValue:
    """
    Middle value of a sorted copy; the mean of the two middle values for even counts.

    The input sequence is never reordered.
    """
    items = sorted(_values(values, "Median"))
    middle = len(items) // 2
    if len(items) % 2:
        return items[middle]
    pair_sum = exact_add(items[middle - 1].to_decimal(), items[middle].to_decimal())
    return _result(exact_divide(pair_sum, Decimal(2)), items[0])


def modes(values: Sequence[Number]) -> List[DecimalValue]:
    """
    All values sharing the highest frequency, in first-seen order.

    Equality is exact numeric equality (1.50 and 1.5 count as the same value).
    """
    items = _values(values, "Mode")
    counts = {}
    first_seen = {}
    for item in items:
        key = item.to_decimal()
        counts[key] = counts.get(key, 0) + 1
        first_seen.setdefault(key, item)

    highest = max(counts.values())
    return [first_seen[key] for key, count in counts.items() if count == highest]


# ============================================================================
# DISPERSION
# ============================================================================

def variance(values: Sequence[Number], ctx: Optional[PrecisionContext] = None) -> DecimalValue:
    """
    Population variance: (n * Σx² - (Σx)²) / n², rounded once to `ctx`.

    Raises:
        InsufficientElementsError: Fewer than two values
    """
    items = _values(values, "Variance")
    if len(items) < 2:
        raise InsufficientElementsError(f"Variance requires at least two values, got {len(items)}")

    decimals = [v.to_decimal() for v in items]
    count = Decimal(len(decimals))
    total = _exact_sum(decimals)
    sum_of_squares = _exact_sum([exact_multiply(x, x) for x in decimals])
    numerator = exact_subtract(exact_multiply(count, sum_of_squares), exact_multiply(total, total))

    precision = ctx or items[0].precision
    return _result(precision.to_context().divide(numerator, exact_multiply(count, count)), items[0], precision)


def standard_deviation(values: Sequence[Number], ctx: Optional[PrecisionContext] = None) -> DecimalValue:
    """Square root of the population variance."""
    items = _values(values, "Standard deviation")
    precision = ctx or items[0].precision
    return arithmetic.square_root(variance(items, precision.with_guard_digits(_GUARD_DIGITS)), precision)


# ============================================================================
# OTHER MEANS
# ============================================================================

def geometric_mean(values: Sequence[Number], ctx: Optional[PrecisionContext] = None) -> DecimalValue:
    """
    n-th root of the exact product.

    Raises:
        NegativeValueError: If any value is negative
    """
    items = _values(values, "Geometric mean")
    negative = next((v for v in items if v.is_negative), None)
    if negative is not None:
        logger.debug("Negative value in geometric mean", value=str(negative))
        raise NegativeValueError(f"Geometric mean is undefined for negative value {negative}")

    product = Decimal(1)
    for item in items:
        product = exact_multiply(product, item.to_decimal())
    return arithmetic.nth_root(_result(product, items[0]), len(items), ctx)


def harmonic_mean(values: Sequence[Number], ctx: Optional[PrecisionContext] = None) -> DecimalValue:
    """
    n / Σ(1/x); reciprocals are summed with guard digits.

    Raises:
        DivisionByZeroError: If any value is zero
    """
    items = _values(values, "Harmonic mean")
    if any(v.is_zero() for v in items):
        raise DivisionByZeroError("Harmonic mean is undefined when a value is zero")

    precision = ctx or items[0].precision
    work = precision.with_guard_digits(_GUARD_DIGITS).to_context()
    reciprocal_sum = Decimal(0)
    for item in items:
        reciprocal_sum = work.add(reciprocal_sum, work.divide(Decimal(1), item.to_decimal()))
    if reciprocal_sum.is_zero():
        raise DivisionByZeroError("Harmonic mean is undefined when the reciprocals sum to zero")

    return _result(precision.to_context().divide(Decimal(len(items)), reciprocal_sum), items[0], precision)
