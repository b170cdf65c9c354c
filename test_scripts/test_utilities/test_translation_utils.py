"""
Tests for Babel locale helpers in utils/translation_utils.py.
"""
import pytest

from decimath.services.locale_format import DEFAULT_LOCALES
from decimath.utils.translation_utils import (
    LocaleSeparators,
    get_babel_locale,
    get_locale_separators,
    normalize_locale_identifier,
    )


class TestLocaleResolution:

    @pytest.mark.parametrize("identifier,expected", [
        ("en_US", "en_US"),
        ("de-DE", "de_DE"),
        ("pt-BR", "pt_BR"),
        (" it ", "it"),
        ])
    def test_normalize(self, identifier, expected):
        assert normalize_locale_identifier(identifier) == expected

    @pytest.mark.parametrize("identifier", ["", "   ", "xx_XX", None, 42])
    def test_invalid_identifiers(self, identifier):
        with pytest.raises(ValueError):
            get_babel_locale(identifier)

    def test_cached(self):
        assert get_babel_locale("fr_FR") is get_babel_locale("fr_FR")


class TestSeparators:

    @pytest.mark.parametrize("identifier,decimal,grouping", [
        ("en_US", ".", ","),
        ("de_DE", ",", "."),
        ("it_IT", ",", "."),
        ("de_CH", ".", "’"),
        ])
    def test_known_separators(self, identifier, decimal, grouping):
        assert get_locale_separators(identifier) == LocaleSeparators(decimal=decimal, grouping=grouping)

    def test_french_grouping_is_whitespace(self):
        assert get_locale_separators("fr_FR").grouping.isspace()

    @pytest.mark.parametrize("identifier", DEFAULT_LOCALES)
    def test_default_locales_have_distinct_single_character_separators(self, identifier):
        separators = get_locale_separators(identifier)
        assert len(separators.decimal) == 1
        assert len(separators.grouping) == 1
        assert separators.decimal != separators.grouping
        assert not separators.decimal.isdigit()
