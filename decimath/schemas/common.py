"""
Common schemas shared across decimath services.

**Domain Coverage**:
- RoundingPolicy: named rounding modes mapped onto decimal.ROUND_* constants
- AngleMode: angle unit carried by values for trigonometric collaborators
- PrecisionContext: significant-digit count + rounding policy governing
  division, roots and other inexact operations

**Design Notes**:
- All models are frozen: a context is a value, never a shared mutable default
- Defaults are plain constants; PrecisionContext.from_settings() reads the
  environment-driven Settings explicitly when a caller wants that
"""
# Postpones evaluation of type hints to improve imports and performance. Also avoid circular import issues.
from __future__ import annotations

import decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from decimath.config import Settings, get_settings
from decimath.utils.decimal_utils import make_context

DEFAULT_PRECISION_DIGITS = 100


class RoundingPolicy(str, Enum):
    """Rounding modes available to a PrecisionContext."""
    HALF_UP = "HALF_UP"
    HALF_EVEN = "HALF_EVEN"
    HALF_DOWN = "HALF_DOWN"
    UP = "UP"
    DOWN = "DOWN"
    CEILING = "CEILING"
    FLOOR = "FLOOR"

    @property
    def decimal_rounding(self) -> str:
        """The matching decimal.ROUND_* constant."""
        return getattr(decimal, f"ROUND_{self.value}")

    @classmethod
    def from_string(cls, value: str) -> 'RoundingPolicy':
        """
        Resolve a policy from its name, case-insensitive, with or without ROUND_ prefix.

        Examples:
            >>> RoundingPolicy.from_string("round_half_even")
            <RoundingPolicy.HALF_EVEN: 'HALF_EVEN'>
        """
        key = value.strip().upper().replace("-", "_")
        if key.startswith("ROUND_"):
            key = key[len("ROUND_"):]
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown rounding policy: '{value}'")


class AngleMode(str, Enum):
    """Angle unit used by trigonometric collaborators."""
    DEG = "DEG"
    RAD = "RAD"
    GRAD = "GRAD"


class PrecisionContext(BaseModel):
    """
    Digit count + rounding policy for inexact operations.

    Attributes:
        digits: Significant digits kept by division, roots and inexact powers
        rounding: Rounding policy applied when digits are dropped

    Examples:
        >>> ctx = PrecisionContext(digits=10, rounding="HALF_EVEN")
        >>> ctx.to_context().divide(Decimal(2), Decimal(3))
        Decimal('0.6666666667')
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    digits: int = Field(DEFAULT_PRECISION_DIGITS, gt=0, description="Significant digits")
    rounding: RoundingPolicy = Field(RoundingPolicy.HALF_UP, description="Rounding policy")

    @field_validator('rounding', mode='before')
    @classmethod
    def _parse_rounding(cls, v):
        if isinstance(v, str) and not isinstance(v, RoundingPolicy):
            return RoundingPolicy.from_string(v)
        return v

    def to_context(self) -> decimal.Context:
        """Build a fresh decimal.Context for this precision."""
        return make_context(self.digits, self.rounding.decimal_rounding)

    def with_guard_digits(self, extra: int) -> 'PrecisionContext':
        """Same rounding, `extra` more digits (working precision for iterative algorithms)."""
        return PrecisionContext(digits=self.digits + extra, rounding=self.rounding)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> 'PrecisionContext':
        """Build the default context from DECIMATH_DEFAULT_PRECISION / DECIMATH_DEFAULT_ROUNDING."""
        settings = settings or get_settings()
        return cls(digits=settings.DEFAULT_PRECISION, rounding=settings.DEFAULT_ROUNDING)
