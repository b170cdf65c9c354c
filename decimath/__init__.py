"""
decimath: exact decimal arithmetic with locale-aware parsing and a matrix layer.

This package contains:
- schemas: DecimalValue and its precision/locale/angle-mode model
- services: arithmetic, locale number format, matrix engine, statistics
- utils: Decimal context helpers and Babel locale lookup
- errors: the exception taxonomy shared by every service
"""
