"""
Pydantic schemas for decimath.

**Organization by Domain**:
- common.py: Shared schemas (RoundingPolicy, AngleMode, PrecisionContext)
- values.py: DecimalValue, the immutable digit-string decimal number

**Design Notes**:
- All models use Pydantic v2 and are frozen
- Arithmetic lives in services, not on the models (no operator overloading
  beyond comparison, negation and abs)
"""
from decimath.schemas.common import (
    AngleMode,
    DEFAULT_PRECISION_DIGITS,
    PrecisionContext,
    RoundingPolicy,
    )
from decimath.schemas.values import (
    DEFAULT_LOCALE,
    DecimalValue,
    )

__all__ = [
    "AngleMode",
    "DEFAULT_PRECISION_DIGITS",
    "PrecisionContext",
    "RoundingPolicy",
    "DEFAULT_LOCALE",
    "DecimalValue",
    ]
