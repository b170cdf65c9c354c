"""
Utility functions for decimath.

This package contains:
- decimal_utils: decimal.Context construction, exact widths, plain-string splitting
- translation_utils: Babel locale resolution and separator lookup
"""
