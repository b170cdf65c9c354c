"""
Exception taxonomy for decimath.

Every failure of a value, matrix or statistics operation is raised as one of
these typed conditions; no operation substitutes a sentinel (NaN, zero, None).

Each class also derives from the closest builtin exception, so callers can
keep catching ``ValueError`` / ``ZeroDivisionError`` / ``ArithmeticError``.

**Hierarchy**:
- DecimathError
  - InvalidArgumentError (ValueError)
    - IntegerRequiredError
    - InvalidRangeError
    - InvalidExponentError
    - NegativeValueError
  - DivisionByZeroError (ZeroDivisionError)
  - DimensionMismatchError (ValueError)
  - NotSquareError (ValueError)
  - SingularMatrixError (ArithmeticError)
  - RootConvergenceError (ArithmeticError)
  - NumberParseError (ValueError)
    - NoMatchingLocaleError
    - MatrixParseError
  - EmptySequenceError (ValueError)
  - InsufficientElementsError (ValueError)
"""


class DecimathError(Exception):
    """Base class for all decimath errors."""
    pass


class InvalidArgumentError(DecimathError, ValueError):
    """Argument outside the operation's domain (negative root degree, negative factorial, ...)."""
    pass


class IntegerRequiredError(InvalidArgumentError):
    """Operation requires integer operands (empty fraction part)."""
    pass


class InvalidRangeError(InvalidArgumentError):
    """Combinatorics arguments violate 0 <= k <= n."""
    pass


class InvalidExponentError(InvalidArgumentError):
    """Matrix power with a negative or non-integer exponent."""
    pass


class NegativeValueError(InvalidArgumentError):
    """A negative value where only non-negative values are defined (geometric mean)."""
    pass


class DivisionByZeroError(DecimathError, ZeroDivisionError):
    """Divisor is exactly zero."""
    pass


class DimensionMismatchError(DecimathError, ValueError):
    """Matrix shapes are incompatible for the requested operation."""
    pass


class NotSquareError(DecimathError, ValueError):
    """Operation is only defined for square matrices."""
    pass


class SingularMatrixError(DecimathError, ArithmeticError):
    """Matrix has a zero determinant and cannot be inverted."""
    pass


class RootConvergenceError(DecimathError, ArithmeticError):
    """Iterative root computation exhausted its step budget."""
    pass


class NumberParseError(DecimathError, ValueError):
    """Text is not a number under the requested locale."""
    pass


class NoMatchingLocaleError(NumberParseError):
    """No locale of the detection order accepts the text."""
    pass


class MatrixParseError(NumberParseError):
    """Matrix text is empty, ragged or contains an unparsable cell."""
    pass


class EmptySequenceError(DecimathError, ValueError):
    """Aggregate requested over an empty sequence."""
    pass


class InsufficientElementsError(DecimathError, ValueError):
    """Aggregate needs more elements than provided (variance needs two)."""
    pass
