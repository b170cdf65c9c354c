"""
Locale-aware number parsing and formatting.

Converts between localized number text ("1.234,56" in de_DE, "1,234.56" in
en_US, "1 234,56" in fr_FR) and DecimalValue.

**Number grammar** (per locale, single linear scan):
- optional sign ('+' or '-')
- ASCII digits, grouping separators only after a digit and before the
  decimal separator (group sizes are not validated)
- at most one decimal separator
- optional exponent: 'e' | 'E', optional sign, at least one digit
- surrounding whitespace ignored, nothing else allowed

Separators come from Babel (CLDR, Latin numbering system). Locales whose
grouping symbol is whitespace accept any of space, no-break space and narrow
no-break space when parsing.

**Policy**: blank or malformed text raises NumberParseError; a parse never
substitutes zero.

Usage:
    fmt = LocaleNumberFormat()
    value = fmt.parse("1.234,56", "de_DE")       # canonical "1234.56"
    fmt.format(value, "en_US")                  # "1,234.56"
    fmt.parse_auto_detect("1.234,56").locale    # "de_DE"
"""
from decimal import Decimal
from typing import NamedTuple, Optional, Sequence, Tuple, Union

import structlog

from decimath.errors import InvalidArgumentError, NoMatchingLocaleError, NumberParseError
from decimath.schemas.common import PrecisionContext
from decimath.schemas.values import DEFAULT_LOCALE, DecimalValue
from decimath.utils.translation_utils import LocaleSeparators, get_locale_separators, normalize_locale_identifier

logger = structlog.get_logger(__name__)

# Auto-detection order: common Western formats first, the first consistent locale wins
DEFAULT_LOCALES: Tuple[str, ...] = (
    "en_US", "en_GB", "de_DE", "de", "de_AT", "de_CH", "en_CA",
    "fr_FR", "it_IT", "es_ES", "pt_BR",
    "en", "fr", "it", "ja_JP", "ko_KR", "zh_CN", "zh_TW", "fr_CA",
    "ru_RU", "pl_PL", "nl_NL", "sv_SE", "da_DK", "fi_FI", "cs_CZ",
    "hu_HU", "tr_TR", "ar_AE", "el_GR", "he_IL", "th_TH", "id_ID",
    "vi_VN", "nb_NO", "uk_UA", "ro_RO", "sk_SK", "bg_BG", "hr_HR",
    "lt_LT", "lv_LV", "sl_SI", "et_EE",
    )

_ASCII_DIGITS = frozenset("0123456789")
_SIGNS = frozenset("+-")
_EXPONENT_MARKERS = frozenset("eE")
_WHITESPACE_GROUPING = frozenset(" \u00a0\u202f")

NumberInput = Union[DecimalValue, Decimal, int, str]


class _ScannedNumber(NamedTuple):
    is_negative: bool
    integer_digits: str
    fraction_digits: str
    exponent: str  # "" when absent, otherwise "[+-]digits"


def _separators(locale: str) -> LocaleSeparators:
    try:
        return get_locale_separators(normalize_locale_identifier(locale))
    except ValueError as e:
        raise InvalidArgumentError(str(e)) from e


def _grouping_characters(separators: LocaleSeparators) -> frozenset:
    if separators.grouping.isspace():
        return _WHITESPACE_GROUPING
    return frozenset(separators.grouping)


def _scan_exponent(text: str) -> Optional[str]:
    sign = ""
    if text[:1] in _SIGNS:
        sign, text = text[0], text[1:]
    if not text or any(ch not in _ASCII_DIGITS for ch in text):
        return None
    return sign + text


def _scan(text: str, separators: LocaleSeparators) -> Optional[_ScannedNumber]:
    """Split localized number text into its parts, None when the syntax does not match."""
    if not isinstance(text, str):
        return None
    text = text.strip()
    if not text:
        return None

    grouping = _grouping_characters(separators)
    index, end = 0, len(text)
    is_negative = False
    if text[0] in _SIGNS:
        is_negative = text[0] == "-"
        index = 1

    integer_digits, fraction_digits = [], []
    saw_decimal = False
    while index < end:
        ch = text[index]
        if ch in _ASCII_DIGITS:
            (fraction_digits if saw_decimal else integer_digits).append(ch)
        elif ch == separators.decimal:
            if saw_decimal:
                return None
            saw_decimal = True
        elif ch in grouping:
            # grouping only after a digit, only before the decimal separator
            if saw_decimal or not integer_digits:
                return None
        else:
            break
        index += 1

    if not integer_digits and not fraction_digits:
        return None

    exponent = ""
    if index < end:
        if text[index] not in _EXPONENT_MARKERS:
            return None
        exponent = _scan_exponent(text[index + 1:])
        if exponent is None:
            return None

    return _ScannedNumber(is_negative, "".join(integer_digits), "".join(fraction_digits), exponent)


def _group_integer(digits: str, grouping: str) -> str:
    head = len(digits) % 3 or 3
    groups = [digits[:head]]
    groups.extend(digits[i:i + 3] for i in range(head, len(digits), 3))
    return grouping.join(groups)


class LocaleNumberFormat:
    """
    Locale-aware parser/formatter for DecimalValue.

    Detection order, default locale and precision are fixed at construction
    and read-only afterwards, so one instance can be shared freely.

    Args:
        detection_order: Locales tried by parse_auto_detect(), in order (default DEFAULT_LOCALES)
        precision: PrecisionContext given to parsed values (default PrecisionContext())
        default_locale: Locale used when parse()/format() get none
    """

    def __init__(
        self,
        detection_order: Optional[Sequence[str]] = None,
        precision: Optional[PrecisionContext] = None,
        default_locale: str = DEFAULT_LOCALE,
        ):
        order = DEFAULT_LOCALES if detection_order is None else detection_order
        if isinstance(order, str) or not order:
            raise InvalidArgumentError("detection_order must be a non-empty sequence of locale identifiers")

        self._detection_order = tuple(normalize_locale_identifier(locale) for locale in order)
        self._precision = precision or PrecisionContext()
        self._default_locale = normalize_locale_identifier(default_locale)

    @property
    def detection_order(self) -> Tuple[str, ...]:
        return self._detection_order

    @property
    def precision(self) -> PrecisionContext:
        return self._precision

    @property
    def default_locale(self) -> str:
        return self._default_locale

    def __repr__(self) -> str:
        return f"LocaleNumberFormat(default_locale='{self._default_locale}', locales={len(self._detection_order)})"

    # =========================================================================
    # PARSING
    # =========================================================================

    def is_number(self, text: str, locale: Optional[str] = None) -> bool:
        """
        Check whether `text` is a number in `locale` without building a value.

        Examples:
            >>> LocaleNumberFormat().is_number("1.234,5", "de_DE")
            True
            >>> LocaleNumberFormat().is_number("1.234,5", "en_US")
            False
        """
        return _scan(text, _separators(locale or self._default_locale)) is not None

    def parse(self, text: str, locale: Optional[str] = None) -> DecimalValue:
        """
        Parse localized text into a DecimalValue tagged with `locale`.

        Grouping separators are dropped and the decimal separator replaced by
        '.'; exponent forms are expanded to plain digits.

        Raises:
            NumberParseError: If text is blank or not a number in `locale`
            InvalidArgumentError: If the locale is unknown
        """
        separators = _separators(locale or self._default_locale)
        locale = normalize_locale_identifier(locale) if locale else self._default_locale
        scanned = _scan(text, separators)
        if scanned is None:
            logger.debug("Text rejected by number grammar", text=text, locale=locale)
            raise NumberParseError(f"Not a number in locale {locale}: {text!r}")
        return self._build(scanned, locale)

    def parse_auto_detect(self, text: str) -> DecimalValue:
        """
        Parse text in the first locale of `detection_order` that accepts it.

        Examples:
            >>> LocaleNumberFormat().parse_auto_detect("1.234,56").locale
            'de_DE'

        Raises:
            NoMatchingLocaleError: If no locale accepts the text
        """
        for locale in self._detection_order:
            scanned = _scan(text, _separators(locale))
            if scanned is not None:
                logger.debug("Locale detected", text=text, locale=locale)
                return self._build(scanned, locale)

        raise NoMatchingLocaleError(f"No supported locale accepts {text!r}")

    def _build(self, scanned: _ScannedNumber, locale: str) -> DecimalValue:
        if scanned.exponent:
            sign = "-" if scanned.is_negative else ""
            mantissa = f"{scanned.integer_digits or '0'}.{scanned.fraction_digits or '0'}"
            value = Decimal(f"{sign}{mantissa}e{scanned.exponent}")
            return DecimalValue.from_decimal(value, locale=locale, precision=self._precision)

        return DecimalValue(
            integer_digits=scanned.integer_digits,
            fraction_digits=scanned.fraction_digits,
            is_negative=scanned.is_negative,
            locale=locale,
            precision=self._precision,
            )

    # =========================================================================
    # FORMATTING
    # =========================================================================

    def format(self, value: NumberInput, target_locale: Optional[str] = None) -> str:
        """
        Render a value with the separators of `target_locale`.

        Integer digits are grouped by three from the least significant digit;
        the fraction is omitted when it is exactly "0".

        Examples:
            >>> LocaleNumberFormat().format(DecimalValue.of("-1234567.25"), "de_DE")
            '-1.234.567,25'
        """
        value = DecimalValue.of(value)
        separators = _separators(target_locale or self._default_locale)

        text = _group_integer(value.integer_digits, separators.grouping)
        if value.fraction_digits != "0":
            text = f"{text}{separators.decimal}{value.fraction_digits}"
        return f"-{text}" if value.is_negative else text

    def convert(self, text: str, source_locale: str, target_locale: str) -> str:
        """
        Parse text in one locale and format it in another.

        Example:
            >>> LocaleNumberFormat().convert("1.234,56", "de_DE", "en_US")
            '1,234.56'
        """
        return self.format(self.parse(text, source_locale), target_locale)


# ============================================================================
# MODULE HELPERS
# ============================================================================

def parse_number(text: str, locale: str = DEFAULT_LOCALE, precision: Optional[PrecisionContext] = None) -> DecimalValue:
    """One-shot parse with a fresh formatter."""
    return LocaleNumberFormat(precision=precision, default_locale=locale).parse(text)


def format_number(value: NumberInput, locale: Optional[str] = None) -> str:
    """One-shot format; defaults to the value's own locale."""
    value = DecimalValue.of(value)
    return LocaleNumberFormat(default_locale=locale or value.locale).format(value)
