"""
Arithmetic core for DecimalValue.

Provides the basic operations (add, subtract, multiply, divide), powers and
roots, exact comparison, number theory (modulo, gcd, lcm, factorial),
combinatorics and percentages.

All functions are pure: operands are never modified, every result is a new
DecimalValue carrying the left operand's locale, precision and angle mode.

Key concepts:
- add / subtract / multiply are exact: the working context grows with the
  operands' digit counts, no digit is ever rounded away
- divide, inexact powers and roots are rounded to a PrecisionContext
  (explicit `ctx` argument, or the left operand's own precision)
- comparisons are exact digit comparisons, there is no tolerance anywhere

Operands may be given as DecimalValue, Decimal, int or canonical text; they
are converted with DecimalValue.of().
"""
from decimal import Context, Decimal, Inexact, Overflow, ROUND_FLOOR, ROUND_HALF_EVEN
from typing import Optional, Union

import structlog

from decimath.errors import (
    DivisionByZeroError,
    IntegerRequiredError,
    InvalidArgumentError,
    InvalidRangeError,
    RootConvergenceError,
    )
from decimath.schemas.common import PrecisionContext
from decimath.schemas.values import DecimalValue
from decimath.utils.decimal_utils import (
    additive_width,
    exact_add,
    exact_divide,
    exact_multiply,
    exact_subtract,
    make_context,
    )

logger = structlog.get_logger(__name__)

Number = Union[DecimalValue, Decimal, int, str]

# Extra digits carried by iterative root computations before the final rounding
_GUARD_DIGITS = 10
_MAX_ROOT_ITERATIONS = 200
_ONE_HUNDRED = Decimal(100)


# ============================================================================
# HELPERS
# ============================================================================

def _value(number: Number, like: Optional[DecimalValue] = None) -> DecimalValue:
    """Coerce an operand, inheriting locale/precision from `like` for non-DecimalValue inputs."""
    if isinstance(number, DecimalValue):
        return number
    if like is None:
        return DecimalValue.of(number)
    return DecimalValue.of(number, locale=like.locale, precision=like.precision, angle_mode=like.angle_mode)


def _result(value: Decimal, like: DecimalValue, precision: Optional[PrecisionContext] = None) -> DecimalValue:
    return DecimalValue.from_decimal(
        value,
        locale=like.locale,
        precision=precision or like.precision,
        angle_mode=like.angle_mode,
        )


def _require_integer(value: DecimalValue, operation: str) -> int:
    if not value.is_integer():
        raise IntegerRequiredError(f"{operation} requires integer values, got {value}")
    return int(value.to_decimal())


def _floor_modulo(x: Decimal, y: Decimal) -> Decimal:
    """x - |y| * floor(x / |y|), always in [0, |y|)."""
    divisor = abs(y)
    ctx = make_context(additive_width(x, divisor) + max(x.adjusted() - divisor.adjusted(), 0) + 2, ROUND_FLOOR)
    quotient = ctx.divide(x, divisor).quantize(Decimal(1), rounding=ROUND_FLOOR, context=ctx)
    return ctx.subtract(x, ctx.multiply(divisor, quotient))


# ============================================================================
# BASIC OPERATIONS
# ============================================================================

def add(augend: Number, addend: Number) -> DecimalValue:
    """
    Exact sum.

    Example:
        >>> add(DecimalValue.of("0.1"), DecimalValue.of("0.2"))
        DecimalValue('0.3', locale='en_US')
    """
    augend = _value(augend)
    addend = _value(addend, augend)
    return _result(exact_add(augend.to_decimal(), addend.to_decimal()), augend)


def subtract(minuend: Number, subtrahend: Number) -> DecimalValue:
    """Exact difference."""
    minuend = _value(minuend)
    subtrahend = _value(subtrahend, minuend)
    return _result(exact_subtract(minuend.to_decimal(), subtrahend.to_decimal()), minuend)


def multiply(multiplicand: Number, multiplier: Number) -> DecimalValue:
    """Exact product."""
    multiplicand = _value(multiplicand)
    multiplier = _value(multiplier, multiplicand)
    return _result(exact_multiply(multiplicand.to_decimal(), multiplier.to_decimal()), multiplicand)


def divide(dividend: Number, divisor: Number, ctx: Optional[PrecisionContext] = None) -> DecimalValue:
    """
    Quotient rounded to `ctx` (default: the dividend's precision).

    Raises:
        DivisionByZeroError: If the divisor is exactly zero

    Example:
        >>> divide(DecimalValue.of(1), DecimalValue.of(3), PrecisionContext(digits=5))
        DecimalValue('0.33333', locale='en_US')
    """
    dividend = _value(dividend)
    divisor = _value(divisor, dividend)
    if divisor.is_zero():
        logger.debug("Division by zero rejected", dividend=str(dividend))
        raise DivisionByZeroError(f"Division by zero: {dividend} / {divisor}")

    precision = ctx or dividend.precision
    quotient = precision.to_context().divide(dividend.to_decimal(), divisor.to_decimal())
    return _result(quotient, dividend, precision)


def negate(value: Number) -> DecimalValue:
    """Sign-flipped copy."""
    return _value(value).negated()


def absolute(value: Number) -> DecimalValue:
    """Non-negative copy."""
    return _value(value).abs()


# ============================================================================
# COMPARISON
# ============================================================================

def compare(a: Number, b: Number) -> int:
    """
    Exact three-way comparison.

    Returns:
        -1 if a < b, 0 if a == b, +1 if a > b
    """
    x = _value(a).to_decimal()
    y = _value(b).to_decimal()
    if x < y:
        return -1
    if x > y:
        return 1
    return 0


def is_equal_to(a: Number, b: Number) -> bool:
    return compare(a, b) == 0


def is_less_than(a: Number, b: Number) -> bool:
    return compare(a, b) < 0


def is_greater_than(a: Number, b: Number) -> bool:
    return compare(a, b) > 0


def minimum(a: Number, b: Number) -> DecimalValue:
    """Smaller operand (the first one on ties)."""
    a, b = _value(a), _value(b)
    return b if compare(b, a) < 0 else a


def maximum(a: Number, b: Number) -> DecimalValue:
    """Larger operand (the first one on ties)."""
    a, b = _value(a), _value(b)
    return b if compare(b, a) > 0 else a


# ============================================================================
# POWERS AND ROOTS
# ============================================================================

def power(base: Number, exponent: Number, ctx: Optional[PrecisionContext] = None) -> DecimalValue:
    """
    base ** exponent, rounded to `ctx`.

    - exponent 0 → 1 (including 0 ** 0)
    - integer exponents use integer powering (negative → reciprocal)
    - non-integer exponents require a non-negative base

    Raises:
        DivisionByZeroError: Zero base with a negative exponent
        InvalidArgumentError: Negative base with a non-integer exponent; a result longer
                              than Settings.MAX_DIGITS digits or outside the exponent range
    """
    base = _value(base)
    exponent = _value(exponent, base)
    precision = ctx or base.precision

    if exponent.is_zero():
        return DecimalValue.one(locale=base.locale, precision=precision)

    if base.is_zero():
        if exponent.is_negative:
            raise DivisionByZeroError(f"Cannot raise zero to negative exponent {exponent}")
        return DecimalValue.zero(locale=base.locale, precision=precision)

    x = base.to_decimal()
    context = precision.to_context()

    if not exponent.is_integer() and base.is_negative:
        raise InvalidArgumentError(f"Negative base {base} with non-integer exponent {exponent} is not a real number")

    try:
        if exponent.is_integer():
            result = context.power(x, Decimal(int(exponent.to_decimal())))
        else:
            work = precision.with_guard_digits(_GUARD_DIGITS).to_context()
            result = context.plus(work.power(x, exponent.to_decimal()))
    except Overflow as e:
        raise InvalidArgumentError(f"{base} ** {exponent} exceeds the decimal exponent range") from e
    return _result(result, base, precision)


def _newton_root(x: Decimal, degree: int, work: Context) -> Decimal:
    """
    Polish x ** (1/degree) with Newton steps at the working precision.

    The seed is the correctly rounded power, so only a few steps are needed
    whatever the degree; iteration stops once the step is zero or no longer shrinks.

    Raises:
        RootConvergenceError: If the iteration budget runs out
    """
    n = Decimal(degree)
    n_minus_one = Decimal(degree - 1)
    root = work.power(x, work.divide(Decimal(1), n))
    previous_step = None
    for _ in range(_MAX_ROOT_ITERATIONS):
        correction = work.divide(x, work.power(root, degree - 1))
        candidate = work.divide(work.add(work.multiply(n_minus_one, root), correction), n)
        step = abs(work.subtract(candidate, root))
        if not step:
            return candidate
        if previous_step is not None and step >= previous_step:
            # oscillating in the last working digit
            return root
        previous_step = step
        root = candidate

    logger.debug("Root iteration did not converge", degree=degree, digits=work.prec)
    raise RootConvergenceError(f"{degree}-th root did not converge within {_MAX_ROOT_ITERATIONS} steps")


def _snap_exact_root(x: Decimal, degree: int, root: Decimal, digits: int) -> Optional[Decimal]:
    """`root` rounded to `digits`, if that rounding raised to `degree` is exactly x."""
    snapped = make_context(digits, ROUND_HALF_EVEN).plus(root).normalize()
    # c ** degree with c not a multiple of 10 has between (k-1)*degree+1 and k*degree digits
    k = len(snapped.as_tuple().digits)
    x_digits = len(x.normalize().as_tuple().digits)
    if not (k - 1) * degree + 1 <= x_digits <= k * degree:
        return None

    ctx = make_context(x_digits + 1)
    if ctx.power(snapped, degree) == x and not ctx.flags[Inexact]:
        return snapped
    return None


def _integer_root(x: Decimal, degree: int, precision: PrecisionContext) -> Decimal:
    """Positive real `degree`-th root of x > 0, snapped to an exact result when one exists."""
    work = make_context(precision.digits + _GUARD_DIGITS, ROUND_HALF_EVEN)
    root = work.sqrt(x) if degree == 2 else _newton_root(x, degree, work)

    for digits in (precision.digits, max(precision.digits - _GUARD_DIGITS, 1)):
        snapped = _snap_exact_root(x, degree, root, digits)
        if snapped is not None:
            return snapped
    return precision.to_context().plus(root)


def nth_root(radicand: Number, degree: Number, ctx: Optional[PrecisionContext] = None) -> DecimalValue:
    """
    Real `degree`-th root of `radicand`, rounded to `ctx`.

    Raises:
        InvalidArgumentError: Degree zero or negative; even root of a negative radicand;
                              non-integer degree with a negative radicand

    Examples:
        >>> nth_root(DecimalValue.of(27), DecimalValue.of(3))
        DecimalValue('3', locale='en_US')
        >>> nth_root(DecimalValue.of(-8), DecimalValue.of(3))
        DecimalValue('-2', locale='en_US')
    """
    radicand = _value(radicand)
    degree = _value(degree, radicand)
    precision = ctx or radicand.precision

    if degree.is_negative or degree.is_zero():
        logger.debug("Invalid root degree rejected", degree=str(degree))
        raise InvalidArgumentError(f"Root degree must be positive, got {degree}")

    if radicand.is_zero():
        return DecimalValue.zero(locale=radicand.locale, precision=precision)

    if not degree.is_integer():
        if radicand.is_negative:
            raise InvalidArgumentError(f"Non-integer root of negative number {radicand} is not a real number")
        work = precision.with_guard_digits(_GUARD_DIGITS).to_context()
        result = work.power(radicand.to_decimal(), work.divide(Decimal(1), degree.to_decimal()))
        return _result(precision.to_context().plus(result), radicand, precision)

    n = int(degree.to_decimal())
    if radicand.is_negative and n % 2 == 0:
        raise InvalidArgumentError(f"Even root of negative number {radicand} is not a real number")

    root = _integer_root(abs(radicand.to_decimal()), n, precision)
    return _result(-root if radicand.is_negative else root, radicand, precision)


def square_root(radicand: Number, ctx: Optional[PrecisionContext] = None) -> DecimalValue:
    """Square root (see nth_root)."""
    return nth_root(radicand, 2, ctx)


def cubic_root(radicand: Number, ctx: Optional[PrecisionContext] = None) -> DecimalValue:
    """Cubic root (see nth_root)."""
    return nth_root(radicand, 3, ctx)


# ============================================================================
# NUMBER THEORY
# ============================================================================

def modulo(dividend: Number, divisor: Number) -> DecimalValue:
    """
    Non-negative remainder: dividend - |divisor| * floor(dividend / |divisor|).

    Raises:
        DivisionByZeroError: If the divisor is zero

    Examples:
        >>> modulo(DecimalValue.of(-7), DecimalValue.of(3))
        DecimalValue('2', locale='en_US')
    """
    dividend = _value(dividend)
    divisor = _value(divisor, dividend)
    if divisor.is_zero():
        raise DivisionByZeroError(f"Modulo by zero: {dividend} mod {divisor}")
    return _result(_floor_modulo(dividend.to_decimal(), divisor.to_decimal()), dividend)


def factorial(argument: Number) -> DecimalValue:
    """
    n! for non-negative integers.

    Raises:
        IntegerRequiredError: If the argument has decimals
        InvalidArgumentError: If the argument is negative
    """
    argument = _value(argument)
    n = _require_integer(argument, "Factorial")
    if n < 0:
        raise InvalidArgumentError(f"Factorial is only defined for non-negative integers, got {argument}")

    result = Decimal(1)
    for counter in range(2, n + 1):
        result = exact_multiply(result, Decimal(counter))
    return _result(result, argument)


def gcd(a: Number, b: Number) -> DecimalValue:
    """
    Greatest common divisor (Euclidean algorithm), always non-negative.

    Raises:
        IntegerRequiredError: If either operand has decimals

    Example:
        >>> gcd(DecimalValue.of(12), DecimalValue.of(18))
        DecimalValue('6', locale='en_US')
    """
    a = _value(a)
    b = _value(b, a)
    _require_integer(a, "GCD")
    _require_integer(b, "GCD")

    x = abs(a.to_decimal())
    y = abs(b.to_decimal())
    while y > 0:
        x, y = y, _floor_modulo(x, y)
    return _result(x, a)


def lcm(a: Number, b: Number) -> DecimalValue:
    """
    Least common multiple: |a * b| / gcd(a, b); zero when either operand is zero.

    Raises:
        IntegerRequiredError: If either operand has decimals
    """
    a = _value(a)
    b = _value(b, a)
    _require_integer(a, "LCM")
    _require_integer(b, "LCM")

    if a.is_zero() or b.is_zero():
        return DecimalValue.zero(locale=a.locale, precision=a.precision)

    product = abs(exact_multiply(a.to_decimal(), b.to_decimal()))
    return _result(exact_divide(product, gcd(a, b).to_decimal()), a)


# ============================================================================
# COMBINATORICS
# ============================================================================

def _combinatoric_arguments(n: Number, k: Number, operation: str):
    n = _value(n)
    k = _value(k, n)
    n_int = _require_integer(n, operation)
    k_int = _require_integer(k, operation)
    if n_int < 0 or k_int < 0 or k_int > n_int:
        logger.debug("Invalid combinatoric range", operation=operation, n=str(n), k=str(k))
        raise InvalidRangeError(f"{operation} requires 0 <= k <= n, got n={n}, k={k}")
    return n, n_int, k_int


def combination(n: Number, k: Number) -> DecimalValue:
    """
    Binomial coefficient C(n, k), computed as a running product/divide.

    Each step c = c * (n - i) / (i + 1) is an exact integer division, so the
    intermediate values never exceed the final result by more than a factor n.

    Raises:
        IntegerRequiredError: Non-integer arguments
        InvalidRangeError: k > n or negative arguments

    Example:
        >>> combination(5, 2)
        DecimalValue('10', locale='en_US')
    """
    n, n_int, k_int = _combinatoric_arguments(n, k, "Combination")
    k_int = min(k_int, n_int - k_int)

    result = Decimal(1)
    for i in range(k_int):
        result = exact_divide(exact_multiply(result, Decimal(n_int - i)), Decimal(i + 1))
    return _result(result, n)


def permutation(n: Number, k: Number) -> DecimalValue:
    """
    Number of ordered selections P(n, k) = n! / (n - k)!, as a running product.

    Example:
        >>> permutation(5, 2)
        DecimalValue('20', locale='en_US')
    """
    n, n_int, k_int = _combinatoric_arguments(n, k, "Permutation")

    result = Decimal(1)
    for i in range(k_int):
        result = exact_multiply(result, Decimal(n_int - i))
    return _result(result, n)


# ============================================================================
# PERCENTAGES
# ============================================================================

def percent_of(percent: Number, whole: Number, ctx: Optional[PrecisionContext] = None) -> DecimalValue:
    """
    `percent`% of `whole`.

    Example:
        >>> percent_of(DecimalValue.of(15), DecimalValue.of(200))
        DecimalValue('30', locale='en_US')
    """
    percent = _value(percent)
    whole = _value(whole, percent)
    return multiply(whole, divide(percent, _ONE_HUNDRED, ctx))


def percentage_ratio(part: Number, whole: Number, ctx: Optional[PrecisionContext] = None) -> DecimalValue:
    """
    `part` expressed as a percentage of `whole`.

    Raises:
        DivisionByZeroError: If whole is zero
    """
    part = _value(part)
    return multiply(divide(part, whole, ctx), _ONE_HUNDRED)
