"""
Locale utilities for number parsing and formatting.

Resolves locale identifiers through Babel (CLDR data) and exposes the decimal
and grouping separator characters of each locale.

Both lookups are memoized with cachetools (LRU, lock-protected) over the
immutable CLDR data.
"""
import threading
from typing import NamedTuple

import structlog
from babel import Locale, UnknownLocaleError
from babel.numbers import get_decimal_symbol, get_group_symbol
from cachetools import LRUCache, cached

logger = structlog.get_logger(__name__)

# CLDR data never changes at runtime: entries are never invalidated
_LOCALE_CACHE_SIZE = 512


class LocaleSeparators(NamedTuple):
    """Decimal and grouping separator characters of a locale."""
    decimal: str
    grouping: str


@cached(cache=LRUCache(maxsize=_LOCALE_CACHE_SIZE), lock=threading.Lock())
def get_babel_locale(identifier: str) -> Locale:
    """
    Get Babel Locale object for given identifier.

    Accepts both underscore and BCP 47 dash separators.

    Args:
        identifier: Locale identifier (e.g., 'en_US', 'de-DE', 'it')

    Returns:
        Babel Locale object

    Raises:
        ValueError: If Babel has no data for the identifier

    Examples:
        >>> str(get_babel_locale('de-DE'))
        'de_DE'
        >>> get_babel_locale('xx_XX')  # ValueError
    """
    if not isinstance(identifier, str) or not identifier.strip():
        raise ValueError(f"Locale identifier must be a non-empty string, got {identifier!r}")

    try:
        return Locale.parse(identifier.strip().replace('-', '_'))
    except (ValueError, TypeError, UnknownLocaleError) as e:
        logger.debug("Unknown locale identifier", identifier=identifier, error=str(e))
        raise ValueError(f"Unknown locale: '{identifier}'") from e


def normalize_locale_identifier(identifier: str) -> str:
    """
    Normalize a locale identifier to Babel's canonical underscore form.

    Examples:
        >>> normalize_locale_identifier('pt-br')
        'pt_BR'
    """
    return str(get_babel_locale(identifier))


@cached(cache=LRUCache(maxsize=_LOCALE_CACHE_SIZE), lock=threading.Lock())
def get_locale_separators(identifier: str) -> LocaleSeparators:
    """
    Get the decimal and grouping separators of a locale (Latin numbering system).

    Examples:
        >>> get_locale_separators('de_DE')
        LocaleSeparators(decimal=',', grouping='.')
        >>> get_locale_separators('en_US')
        LocaleSeparators(decimal='.', grouping=',')
    """
    locale = get_babel_locale(identifier)
    return LocaleSeparators(
        decimal=get_decimal_symbol(locale),
        grouping=get_group_symbol(locale),
        )
