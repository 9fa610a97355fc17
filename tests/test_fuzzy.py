"""
Tests for the subsequence fuzzy matcher.
"""

import itertools

import pytest

from pulse.search.fuzzy import fuzzy_match


def _is_subsequence(text, query):
    """Reference definition: query chars appear in text, in order."""
    remaining = iter(text.lower())
    return all(ch in remaining for ch in query.lower())


class TestFuzzyMatch:
    """Test the inclusion gate."""

    @pytest.mark.parametrize("text", ["", "Safari", "Terminal", "ü∂ß", "  "])
    def test_empty_query_always_matches(self, text):
        assert fuzzy_match(text, "") is True

    def test_prefix_matches(self):
        assert fuzzy_match("Safari", "saf") is True

    def test_non_contiguous_matches(self):
        assert fuzzy_match("Safari", "sfr") is True
        assert fuzzy_match("Visual Studio Code", "vsc") is True

    def test_case_insensitive(self):
        assert fuzzy_match("Terminal", "TRM") is True
        assert fuzzy_match("terminal", "TeRm") is True

    def test_order_matters(self):
        assert fuzzy_match("Safari", "fas") is False

    def test_query_longer_than_text(self):
        assert fuzzy_match("Saf", "safari") is False

    def test_empty_text_with_query(self):
        assert fuzzy_match("", "a") is False

    def test_repeated_characters_need_repeats(self):
        assert fuzzy_match("Terminal", "tt") is False
        assert fuzzy_match("Settings", "tt") is True

    def test_agrees_with_subsequence_definition(self):
        texts = ["Safari", "Terminal", "System Settings", "aab", "", "Calculator"]
        queries = ["", "a", "aa", "ab", "ba", "sat", "tml", "calc", "ss", "xyz", "S S"]
        for text, query in itertools.product(texts, queries):
            assert fuzzy_match(text, query) == _is_subsequence(text, query), (text, query)
