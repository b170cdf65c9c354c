"""
DecimalValue: immutable arbitrary-precision decimal number.

A value is stored as its digit strings (integer part and fraction part, no
sign, no separators) plus a sign flag, the locale it is written in, the
precision context its inexact operations use and an angle mode for
trigonometric collaborators.

**Defaulting rules** (single builder instead of one constructor per combination):
- integer_digits: empty → "0"; leading zeros stripped ("007" → "7")
- fraction_digits: empty → "0"; trailing zeros kept as given (see trimmed())
- is_negative: forced to False for a zero magnitude (no negative zero)
- locale: Babel identifier, dash form accepted ("de-DE" → "de_DE"), default en_US
- precision: PrecisionContext() (100 digits, HALF_UP)
- angle_mode: AngleMode.DEG

**Design Notes**:
- Frozen pydantic model: every operation returns a new instance; the source's
  two in-place mutations (trim zeros, flip sign) are trimmed() and negated()
- Equality and ordering compare exact numeric value (1.50 == 1.5), never
  with a tolerance; locale and precision do not take part in equality
"""
# Postpones evaluation of type hints to improve imports and performance. Also avoid circular import issues.
from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from decimath.config import MIN_DIGIT_LIMIT, get_settings
from decimath.errors import InvalidArgumentError, NumberParseError
from decimath.schemas.common import AngleMode, PrecisionContext
from decimath.utils.decimal_utils import plain_width, split_plain
from decimath.utils.translation_utils import normalize_locale_identifier

DEFAULT_LOCALE = "en_US"

_DIGITS = re.compile(r"[0-9]*")
# Canonical ('.'-separated) text accepted by DecimalValue.of()
_CANONICAL_NUMBER = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def _is_zero_digits(digits: Any) -> bool:
    return isinstance(digits, str) and digits.strip("0") == ""


class DecimalValue(BaseModel):
    """
    Immutable decimal number backed by digit strings.

    Attributes:
        integer_digits: Digits before the decimal point
        fraction_digits: Digits after the decimal point ("0" when none)
        is_negative: Sign flag
        locale: Locale the value is written in (Babel identifier)
        precision: Precision context for inexact operations
        angle_mode: Angle unit for trigonometric collaborators

    Examples:
        >>> v = DecimalValue.of("-1234.50", locale="de_DE")
        >>> v.integer_digits, v.fraction_digits, v.is_negative
        ('1234', '50', True)
        >>> v.canonical()
        '-1234.50'
        >>> v == DecimalValue.of("-1234.5")
        True
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    integer_digits: str = Field("0", description="ASCII digits before the decimal point")
    fraction_digits: str = Field("0", description="ASCII digits after the decimal point")
    is_negative: bool = Field(False, description="Sign flag")
    locale: str = Field(DEFAULT_LOCALE, description="Babel locale identifier")
    precision: PrecisionContext = Field(default_factory=PrecisionContext)
    angle_mode: AngleMode = Field(AngleMode.DEG, description="Angle unit for trig collaborators")

    @model_validator(mode='before')
    @classmethod
    def _no_negative_zero(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("is_negative"):
            if _is_zero_digits(data.get("integer_digits", "0")) and _is_zero_digits(data.get("fraction_digits", "0")):
                data = {**data, "is_negative": False}
        return data

    @field_validator('integer_digits', 'fraction_digits', mode='before')
    @classmethod
    def _validate_digits(cls, v: Any, info) -> str:
        if not isinstance(v, str):
            raise ValueError(f"{info.field_name} must be a string of digits, got {type(v).__name__}")
        if not _DIGITS.fullmatch(v):
            raise ValueError(f"{info.field_name} must contain only ASCII digits, got '{v}'")
        if info.field_name == 'integer_digits':
            return v.lstrip("0") or "0"
        return v or "0"

    @field_validator('locale', mode='before')
    @classmethod
    def _validate_locale(cls, v: Any) -> str:
        return normalize_locale_identifier(v)

    # =========================================================================
    # CONSTRUCTION
    # =========================================================================

    @classmethod
    def of(
        cls,
        value: Union['DecimalValue', Decimal, int, str],
        *,
        locale: Optional[str] = None,
        precision: Optional[PrecisionContext] = None,
        angle_mode: Optional[AngleMode] = None,
        ) -> 'DecimalValue':
        """
        Build a value from an int, a Decimal, canonical text or another DecimalValue.

        Text must use '.' as decimal separator and no grouping (use
        LocaleNumberFormat for localized text); exponent notation is accepted.
        Options left as None keep the source value's setting (or the defaults).

        Raises:
            TypeError: For floats, bools and other unsupported types
            NumberParseError: For malformed text
        """
        if isinstance(value, DecimalValue):
            return value.model_copy(update={
                "locale": normalize_locale_identifier(locale) if locale is not None else value.locale,
                "precision": precision if precision is not None else value.precision,
                "angle_mode": angle_mode if angle_mode is not None else value.angle_mode,
                })

        options = {"locale": locale or DEFAULT_LOCALE, "precision": precision or PrecisionContext(),
                   "angle_mode": angle_mode or AngleMode.DEG}

        if isinstance(value, bool) or isinstance(value, float):
            raise TypeError(f"Cannot build a DecimalValue from {type(value).__name__}")
        if isinstance(value, int):
            return cls(integer_digits=str(abs(value)), is_negative=value < 0, **options)
        if isinstance(value, Decimal):
            return cls.from_decimal(value, **options)
        if isinstance(value, str):
            text = value.strip()
            if not _CANONICAL_NUMBER.fullmatch(text):
                raise NumberParseError(f"Not a number: '{value}'")
            if 'e' in text.lower():
                return cls.from_decimal(Decimal(text), **options)
            is_negative = text.startswith('-')
            integer_part, _, fraction_part = text.lstrip('+-').partition('.')
            return cls(integer_digits=integer_part, fraction_digits=fraction_part, is_negative=is_negative, **options)
        raise TypeError(f"Cannot build a DecimalValue from {type(value).__name__}")

    @classmethod
    def from_decimal(
        cls,
        value: Decimal,
        *,
        locale: str = DEFAULT_LOCALE,
        precision: Optional[PrecisionContext] = None,
        angle_mode: AngleMode = AngleMode.DEG,
        ) -> 'DecimalValue':
        """
        Build a (trimmed) value from a finite Decimal.

        Raises:
            InvalidArgumentError: For NaN/Infinity, or when the plain digit string
                                  would exceed Settings.MAX_DIGITS (e.g. Decimal("1E+999999999"))
        """
        if not value.is_finite():
            raise InvalidArgumentError(f"Cannot represent non-finite value {value}")
        width = plain_width(value)
        if width > MIN_DIGIT_LIMIT:
            limit = get_settings().MAX_DIGITS
            if width > limit:
                raise InvalidArgumentError(f"Value needs {width} digits, the limit is {limit} (DECIMATH_MAX_DIGITS)")
        is_negative, integer_digits, fraction_digits = split_plain(value)
        return cls(
            integer_digits=integer_digits,
            fraction_digits=fraction_digits,
            is_negative=is_negative,
            locale=locale,
            precision=precision or PrecisionContext(),
            angle_mode=angle_mode,
            )

    @classmethod
    def zero(cls, locale: str = DEFAULT_LOCALE, precision: Optional[PrecisionContext] = None) -> 'DecimalValue':
        """Create a zero value."""
        return cls(locale=locale, precision=precision or PrecisionContext())

    @classmethod
    def one(cls, locale: str = DEFAULT_LOCALE, precision: Optional[PrecisionContext] = None) -> 'DecimalValue':
        """Create the value one."""
        return cls(integer_digits="1", locale=locale, precision=precision or PrecisionContext())

    # =========================================================================
    # CONVERSIONS
    # =========================================================================

    def canonical(self) -> str:
        """
        De-localized '.'-separated text; the fraction is omitted when it is exactly "0".

        Examples:
            >>> DecimalValue.of("-3.0").canonical()
            '-3'
        """
        sign = "-" if self.is_negative else ""
        if self.fraction_digits == "0":
            return f"{sign}{self.integer_digits}"
        return f"{sign}{self.integer_digits}.{self.fraction_digits}"

    def to_decimal(self) -> Decimal:
        """Exact Decimal with the same digits."""
        try:
            return Decimal(self.canonical())
        except InvalidOperation as e:
            raise InvalidArgumentError(f"Corrupted digits in {self!r}") from e

    def trimmed(self) -> 'DecimalValue':
        """Copy without trailing fraction zeros ("1.500" → "1.5", "2.000" → "2")."""
        return self.model_copy(update={"fraction_digits": self.fraction_digits.rstrip("0") or "0"})

    def negated(self) -> 'DecimalValue':
        """Copy with the sign flipped (zero stays non-negative)."""
        if self.is_zero():
            return self
        return self.model_copy(update={"is_negative": not self.is_negative})

    def abs(self) -> 'DecimalValue':
        """Copy with a non-negative sign."""
        return self.model_copy(update={"is_negative": False})

    def with_locale(self, locale: str) -> 'DecimalValue':
        """Same number, tagged with another locale."""
        return self.model_copy(update={"locale": normalize_locale_identifier(locale)})

    def with_precision(self, precision: PrecisionContext) -> 'DecimalValue':
        """Same number, with another precision context."""
        return self.model_copy(update={"precision": precision})

    # =========================================================================
    # PREDICATES
    # =========================================================================

    def is_zero(self) -> bool:
        """Check if the value is zero."""
        return _is_zero_digits(self.integer_digits) and _is_zero_digits(self.fraction_digits)

    def is_positive(self) -> bool:
        """Check if the value is strictly positive."""
        return not self.is_negative and not self.is_zero()

    def is_integer(self) -> bool:
        """Check if the fraction part is empty (only zeros)."""
        return _is_zero_digits(self.fraction_digits)

    def has_decimals(self) -> bool:
        """Check if the fraction part carries a non-zero digit."""
        return not self.is_integer()

    # =========================================================================
    # COMPARISON
    # =========================================================================

    def __eq__(self, other: object) -> bool:
        """Exact numeric equality (locale and precision are ignored)."""
        if not isinstance(other, DecimalValue):
            return NotImplemented
        return self.to_decimal() == other.to_decimal()

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __lt__(self, other: 'DecimalValue') -> bool:
        if not isinstance(other, DecimalValue):
            return NotImplemented
        return self.to_decimal() < other.to_decimal()

    def __le__(self, other: 'DecimalValue') -> bool:
        if not isinstance(other, DecimalValue):
            return NotImplemented
        return self.to_decimal() <= other.to_decimal()

    def __gt__(self, other: 'DecimalValue') -> bool:
        if not isinstance(other, DecimalValue):
            return NotImplemented
        return self.to_decimal() > other.to_decimal()

    def __ge__(self, other: 'DecimalValue') -> bool:
        if not isinstance(other, DecimalValue):
            return NotImplemented
        return self.to_decimal() >= other.to_decimal()

    def __hash__(self) -> int:
        """Hash for use in sets/dicts (equal values hash equally: Decimal('1.50') ~ Decimal('1.5'))."""
        return hash(self.to_decimal())

    def __neg__(self) -> 'DecimalValue':
        return self.negated()

    def __abs__(self) -> 'DecimalValue':
        return self.abs()

    def __str__(self) -> str:
        return self.canonical()

    def __repr__(self) -> str:
        return f"DecimalValue('{self.canonical()}', locale='{self.locale}')"
