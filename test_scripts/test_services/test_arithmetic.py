"""
Tests for the arithmetic core (services/arithmetic.py).

Tests cover:
- Exact add/subtract/multiply, rounded divide
- Powers and roots (exact snapping, negative radicands, invalid degrees)
- Exact comparison helpers
- Number theory: modulo, factorial, gcd, lcm
- Combinatorics and percentages
- Property-based identities (hypothesis)
"""
from decimal import Decimal

import pytest
from hypothesis import given, settings, strategies as st

from decimath.errors import (
    DivisionByZeroError,
    IntegerRequiredError,
    InvalidArgumentError,
    InvalidRangeError,
    RootConvergenceError,
    )
from decimath.schemas.common import PrecisionContext
from decimath.schemas.values import DecimalValue
from decimath.services import arithmetic
from decimath.utils.decimal_utils import make_context


def dv(text) -> DecimalValue:
    return DecimalValue.of(text)


# Finite decimals with a bounded number of digits
decimal_strategy = st.decimals(
    min_value=Decimal("-1e12"),
    max_value=Decimal("1e12"),
    allow_nan=False,
    allow_infinity=False,
    places=8,
    )


# ============================================================================
# BASIC OPERATIONS
# ============================================================================

class TestBasicOperations:

    def test_add_is_exact(self):
        assert arithmetic.add(dv("0.1"), dv("0.2")) == dv("0.3")

    def test_add_huge_and_tiny(self):
        result = arithmetic.add(dv("1e50"), dv("1e-50"))
        assert result.canonical() == "1" + "0" * 50 + "." + "0" * 49 + "1"

    def test_subtract(self):
        assert arithmetic.subtract(dv("5.25"), dv("10")).canonical() == "-4.75"

    def test_multiply_is_exact(self):
        a = dv("99999999999999999999.99")
        digits = str(9999999999999999999999 ** 2)
        assert arithmetic.multiply(a, a).canonical() == f"{digits[:-4]}.{digits[-4:]}"

    def test_result_takes_left_operand_locale(self):
        a = DecimalValue.of("1.5", locale="de_DE")
        b = DecimalValue.of("2", locale="en_US")
        assert arithmetic.add(a, b).locale == "de_DE"
        assert arithmetic.multiply(b, a).locale == "en_US"

    def test_accepts_plain_operands(self):
        assert arithmetic.add(2, "0.5") == dv("2.5")
        assert arithmetic.multiply(Decimal("1.5"), 4) == dv(6)

    def test_operands_unchanged(self):
        a, b = dv("1.50"), dv("2")
        arithmetic.add(a, b)
        assert a.canonical() == "1.50"

    def test_divide_rounded_to_context(self):
        result = arithmetic.divide(dv(1), dv(3), PrecisionContext(digits=5))
        assert result.canonical() == "0.33333"

    def test_divide_uses_dividend_precision(self):
        a = DecimalValue.of(2, precision=PrecisionContext(digits=4))
        assert arithmetic.divide(a, dv(3)).canonical() == "0.6667"

    def test_divide_rounding_policy(self):
        ctx = PrecisionContext(digits=4, rounding="DOWN")
        assert arithmetic.divide(dv(2), dv(3), ctx).canonical() == "0.6666"

    def test_divide_exact_quotient(self):
        assert arithmetic.divide(dv("7.5"), dv("2.5")) == dv(3)

    def test_divide_by_zero(self):
        with pytest.raises(DivisionByZeroError):
            arithmetic.divide(dv(1), dv("0.000"))

    def test_negate_and_absolute(self):
        assert arithmetic.negate(dv("2.5")).canonical() == "-2.5"
        assert arithmetic.absolute(dv("-2.5")).canonical() == "2.5"


# ============================================================================
# COMPARISON
# ============================================================================

class TestComparison:

    @pytest.mark.parametrize("a,b,expected", [
        ("1", "2", -1),
        ("2", "1", 1),
        ("1.50", "1.5", 0),
        ("-0.0001", "0", -1),
        ])
    def test_compare(self, a, b, expected):
        assert arithmetic.compare(dv(a), dv(b)) == expected

    def test_predicates(self):
        assert arithmetic.is_equal_to(dv("3.0"), dv(3))
        assert arithmetic.is_less_than(dv("-1"), dv("0"))
        assert arithmetic.is_greater_than(dv("0.01"), dv("0.001"))

    def test_minimum_maximum(self):
        assert arithmetic.minimum(dv(3), dv(-2)) == dv(-2)
        assert arithmetic.maximum(dv(3), dv(-2)) == dv(3)

    def test_minimum_tie_returns_first(self):
        first = DecimalValue.of("1.0", locale="de_DE")
        second = DecimalValue.of("1", locale="en_US")
        assert arithmetic.minimum(first, second).locale == "de_DE"


# ============================================================================
# POWERS AND ROOTS
# ============================================================================

class TestPower:

    def test_integer_power(self):
        assert arithmetic.power(dv(2), dv(10)) == dv(1024)

    def test_decimal_base(self):
        assert arithmetic.power(dv("1.5"), dv(2)) == dv("2.25")

    def test_negative_exponent(self):
        assert arithmetic.power(dv(2), dv(-2)) == dv("0.25")

    def test_zero_exponent(self):
        assert arithmetic.power(dv(0), dv(0)) == dv(1)
        assert arithmetic.power(dv("-7.5"), dv(0)) == dv(1)

    def test_zero_base_negative_exponent(self):
        with pytest.raises(DivisionByZeroError):
            arithmetic.power(dv(0), dv(-1))

    def test_fractional_exponent(self):
        result = arithmetic.power(dv(4), dv("0.5"), PrecisionContext(digits=20))
        assert result == dv(2)

    def test_result_beyond_digit_limit(self):
        with pytest.raises(InvalidArgumentError):
            arithmetic.power(dv(10), dv(10 ** 12))

    def test_result_beyond_exponent_range(self):
        with pytest.raises(InvalidArgumentError):
            arithmetic.power(dv(10), dv(10 ** 19))

    def test_digit_limit_from_environment(self, monkeypatch):
        monkeypatch.setenv("DECIMATH_MAX_DIGITS", "20000")
        assert len(arithmetic.power(dv(10), dv(15000)).integer_digits) == 15001
        with pytest.raises(InvalidArgumentError):
            arithmetic.power(dv(10), dv(25000))

    def test_negative_base_fractional_exponent(self):
        with pytest.raises(InvalidArgumentError):
            arithmetic.power(dv(-4), dv("0.5"))


class TestRoots:

    @pytest.mark.parametrize("radicand,degree,expected", [
        ("27", 3, "3"),
        ("-8", 3, "-2"),
        ("16", 4, "2"),
        ("0.0001", 2, "0.01"),
        ("1024", 10, "2"),
        ("0", 5, "0"),
        ("7", 1, "7"),
        ])
    def test_exact_roots(self, radicand, degree, expected):
        assert arithmetic.nth_root(dv(radicand), dv(degree)) == dv(expected)

    def test_irrational_root_precision(self):
        result = arithmetic.square_root(dv(2), PrecisionContext(digits=30))
        assert result.canonical() == "1.41421356237309504880168872421"

    def test_cubic_root_irrational(self):
        result = arithmetic.cubic_root(dv(2), PrecisionContext(digits=20))
        assert result.canonical() == "1.2599210498948731648"

    def test_cubic_root_of_negative(self):
        assert arithmetic.cubic_root(dv(-27)) == dv(-3)

    def test_even_root_of_negative(self):
        with pytest.raises(InvalidArgumentError):
            arithmetic.square_root(dv(-4))

    @pytest.mark.parametrize("degree", ["0", "-2"])
    def test_invalid_degree(self, degree):
        with pytest.raises(InvalidArgumentError):
            arithmetic.nth_root(dv(8), dv(degree))

    def test_fractional_degree(self):
        # 8 ** (1 / 1.5) = 8 ** (2/3) = 4
        result = arithmetic.nth_root(dv(8), dv("1.5"), PrecisionContext(digits=20))
        assert arithmetic.subtract(result, dv(4)).to_decimal().copy_abs() < Decimal("1e-15")

    def test_large_degree_root(self):
        # 2 ** (1/50000) = exp(ln 2 / 50000) = 1.0000138630...
        result = arithmetic.nth_root(dv(2), dv(50000), PrecisionContext(digits=20))
        assert result.canonical().startswith("1.00001386")
        back = make_context(40).power(result.to_decimal(), 50000)
        assert abs(back - 2) < Decimal("1e-12")

    def test_large_degree_exact_root(self):
        assert arithmetic.nth_root(dv(2 ** 20000), dv(20000), PrecisionContext(digits=20)) == dv(2)

    def test_root_iteration_budget_exhausted(self, monkeypatch):
        monkeypatch.setattr(arithmetic, "_MAX_ROOT_ITERATIONS", 0)
        with pytest.raises(RootConvergenceError):
            arithmetic.cubic_root(dv(10))


# ============================================================================
# NUMBER THEORY
# ============================================================================

class TestNumberTheory:

    @pytest.mark.parametrize("a,b,expected", [
        ("7", "3", "1"),
        ("-7", "3", "2"),
        ("7", "-3", "1"),
        ("5.5", "2", "1.5"),
        ("-0.5", "0.2", "0.1"),
        ("6", "3", "0"),
        ])
    def test_modulo(self, a, b, expected):
        assert arithmetic.modulo(dv(a), dv(b)) == dv(expected)

    def test_modulo_by_zero(self):
        with pytest.raises(DivisionByZeroError):
            arithmetic.modulo(dv(5), dv(0))

    def test_factorial(self):
        assert arithmetic.factorial(dv(0)) == dv(1)
        assert arithmetic.factorial(dv(5)) == dv(120)
        assert arithmetic.factorial(dv(25)).canonical() == "15511210043330985984000000"

    def test_factorial_rejects_decimals(self):
        with pytest.raises(IntegerRequiredError):
            arithmetic.factorial(dv("2.5"))

    def test_factorial_rejects_negative(self):
        with pytest.raises(InvalidArgumentError):
            arithmetic.factorial(dv(-1))

    def test_gcd(self):
        assert arithmetic.gcd(dv(12), dv(18)) == dv(6)
        assert arithmetic.gcd(dv(-12), dv(18)) == dv(6)
        assert arithmetic.gcd(dv(0), dv(0)) == dv(0)
        assert arithmetic.gcd(dv(0), dv(9)) == dv(9)

    def test_lcm(self):
        assert arithmetic.lcm(dv(4), dv(6)) == dv(12)
        assert arithmetic.lcm(dv(5), dv(0)) == dv(0)

    def test_gcd_large_operands(self):
        a = dv(2 ** 100 * 3)
        b = dv(2 ** 90 * 5)
        assert arithmetic.gcd(a, b) == dv(2 ** 90)

    def test_gcd_requires_integers(self):
        with pytest.raises(IntegerRequiredError):
            arithmetic.gcd(dv("1.5"), dv(3))
        with pytest.raises(IntegerRequiredError):
            arithmetic.lcm(dv(2), dv("0.5"))


# ============================================================================
# COMBINATORICS AND PERCENTAGES
# ============================================================================

class TestCombinatorics:

    def test_combination(self):
        assert arithmetic.combination(dv(5), dv(2)) == dv(10)
        assert arithmetic.combination(dv(5), dv(0)) == dv(1)
        assert arithmetic.combination(dv(5), dv(5)) == dv(1)
        assert arithmetic.combination(dv(52), dv(5)) == dv(2598960)

    def test_permutation(self):
        assert arithmetic.permutation(dv(5), dv(2)) == dv(20)
        assert arithmetic.permutation(dv(5), dv(0)) == dv(1)

    @pytest.mark.parametrize("n,k", [("2", "5"), ("-1", "0"), ("5", "-1")])
    def test_invalid_range(self, n, k):
        with pytest.raises(InvalidRangeError):
            arithmetic.combination(dv(n), dv(k))
        with pytest.raises(InvalidRangeError):
            arithmetic.permutation(dv(n), dv(k))

    def test_requires_integers(self):
        with pytest.raises(IntegerRequiredError):
            arithmetic.combination(dv("5.5"), dv(2))


class TestPercentages:

    def test_percent_of(self):
        assert arithmetic.percent_of(dv(15), dv(200)) == dv(30)
        assert arithmetic.percent_of(dv("12.5"), dv(80)) == dv(10)

    def test_percentage_ratio(self):
        assert arithmetic.percentage_ratio(dv(30), dv(200)) == dv(15)

    def test_percentage_ratio_zero_whole(self):
        with pytest.raises(DivisionByZeroError):
            arithmetic.percentage_ratio(dv(1), dv(0))


# ============================================================================
# PROPERTIES
# ============================================================================

class TestArithmeticProperties:

    @settings(max_examples=100)
    @given(a=decimal_strategy, b=decimal_strategy)
    def test_add_commutative(self, a, b):
        assert arithmetic.add(dv(a), dv(b)) == arithmetic.add(dv(b), dv(a))

    @settings(max_examples=100)
    @given(a=decimal_strategy, b=decimal_strategy)
    def test_subtract_inverts_add(self, a, b):
        assert arithmetic.subtract(arithmetic.add(dv(a), dv(b)), dv(b)) == dv(a)

    @settings(max_examples=100)
    @given(a=decimal_strategy, b=decimal_strategy, c=decimal_strategy)
    def test_multiply_distributes(self, a, b, c):
        left = arithmetic.multiply(dv(a), arithmetic.add(dv(b), dv(c)))
        right = arithmetic.add(arithmetic.multiply(dv(a), dv(b)), arithmetic.multiply(dv(a), dv(c)))
        assert left == right

    @settings(max_examples=100)
    @given(a=decimal_strategy)
    def test_negate_involution(self, a):
        assert arithmetic.negate(arithmetic.negate(dv(a))) == dv(a)

    @settings(max_examples=50)
    @given(a=st.integers(min_value=1, max_value=10 ** 6), b=st.integers(min_value=1, max_value=10 ** 6))
    def test_gcd_lcm_product(self, a, b):
        product = arithmetic.multiply(arithmetic.gcd(dv(a), dv(b)), arithmetic.lcm(dv(a), dv(b)))
        assert product == dv(a * b)

    @settings(max_examples=50)
    @given(root=st.integers(min_value=1, max_value=10 ** 6), degree=st.integers(min_value=2, max_value=5))
    def test_integer_roots_are_exact(self, root, degree):
        assert arithmetic.nth_root(dv(root ** degree), dv(degree)) == dv(root)

    @settings(max_examples=100)
    @given(a=decimal_strategy)
    def test_multiply_by_one(self, a):
        assert arithmetic.multiply(dv(a), dv(1)) == dv(a)

    @settings(max_examples=100)
    @given(a=decimal_strategy.filter(lambda d: d != 0))
    def test_divide_by_itself(self, a):
        assert arithmetic.divide(dv(a), dv(a)) == dv(1)

    @settings(max_examples=50)
    @given(
        a=st.decimals(min_value=Decimal("-1000"), max_value=Decimal("1000"), allow_nan=False, allow_infinity=False, places=2),
        m=st.integers(min_value=0, max_value=4),
        n=st.integers(min_value=0, max_value=4),
        )
    def test_power_of_power(self, a, m, n):
        # wide enough for a ** 16 with seven-digit a: both sides stay exact
        ctx = PrecisionContext(digits=200)
        nested = arithmetic.power(arithmetic.power(dv(a), dv(m), ctx), dv(n), ctx)
        assert nested == arithmetic.power(dv(a), dv(m * n), ctx)

    @settings(max_examples=50)
    @given(n=st.integers(min_value=0, max_value=80), data=st.data())
    def test_combination_symmetry(self, n, data):
        k = data.draw(st.integers(min_value=0, max_value=n))
        assert arithmetic.combination(dv(n), dv(k)) == arithmetic.combination(dv(n), dv(n - k))

    @settings(max_examples=30)
    @given(n=st.integers(min_value=0, max_value=80))
    def test_combination_and_permutation_edges(self, n):
        assert arithmetic.combination(dv(n), dv(0)) == dv(1)
        assert arithmetic.combination(dv(n), dv(n)) == dv(1)
        assert arithmetic.permutation(dv(n), dv(0)) == dv(1)
