"""
Unit tests for lexicon.py.

Tests:
- Table registration and read-only tables
- Merged keyword and number word views
- Language names for prompts
"""

import pytest

from saypay.schemas.extraction import ExpenseCategory
from saypay.tools.extraction.lexicon import (
    ENGLISH,
    LEXICONS,
    language_name,
    merged_category_keywords,
    merged_currency_hints,
    merged_number_words,
)


class TestLexicons:
    """Tests for the language tables."""

    def test_four_languages_registered(self):
        assert set(LEXICONS) == {"en", "hi", "es", "fr"}

    def test_tables_are_read_only(self):
        with pytest.raises(TypeError):
            ENGLISH.number_words["eleventy"] = 110

    def test_every_language_covers_every_category(self):
        """Should have keywords for all categories except Misc."""
        for lexicon in LEXICONS.values():
            expected = set(ExpenseCategory) - {ExpenseCategory.MISC}
            assert set(lexicon.category_keywords) == expected, lexicon.code


class TestMergedViews:
    """Tests for the cross-language views used by the parser."""

    def test_number_words_span_languages(self):
        words = merged_number_words()

        assert words["twenty"] == 20
        assert words["veinte"] == 20
        assert words["vingt"] == 20
        assert words["बीस"] == 20

    def test_category_order_matches_enum(self):
        """Should keep declaration order so ties resolve the same way."""
        categories = list(merged_category_keywords())

        assert categories == [c for c in ExpenseCategory if c is not ExpenseCategory.MISC]

    def test_shared_keywords_deduplicated(self):
        transport = merged_category_keywords()[ExpenseCategory.TRANSPORT]

        assert transport.count("taxi") == 1

    def test_currency_hints_in_precedence_order(self):
        assert list(merged_currency_hints()) == ["EUR", "GBP", "INR"]


class TestLanguageName:
    @pytest.mark.parametrize(
        "code,expected",
        [("en", "English"), ("hi", "Hindi"), ("es-MX", "Spanish"), ("FR", "French"), ("de", "English"), (None, "English")],
    )
    def test_language_name(self, code, expected):
        assert language_name(code) == expected
