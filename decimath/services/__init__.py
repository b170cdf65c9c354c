"""
Services package.
Arithmetic, locale formatting, matrices and statistics over DecimalValue.

- arithmetic: exact add/subtract/multiply, rounded divide, powers, roots,
  number theory, combinatorics, percentages
- locale_format: LocaleNumberFormat (parse, auto-detect, format, convert)
- matrix: Matrix engine (determinant, inverse, power, ...)
- statistics: aggregates over value sequences
"""
from decimath.services import arithmetic, statistics
from decimath.services.locale_format import (
    DEFAULT_LOCALES,
    LocaleNumberFormat,
    format_number,
    parse_number,
    )
from decimath.services.matrix import Matrix

__all__ = [
    "arithmetic",
    "statistics",
    "DEFAULT_LOCALES",
    "LocaleNumberFormat",
    "format_number",
    "parse_number",
    "Matrix",
    ]
