"""
Tests for the expression evaluator and calculator provider.

Uses real simpleeval (no mocking). Tests math evaluation, formatting,
rejection of non-expressions and safety (no access to builtins/os).
"""

import pytest

from pulse.search.provider import Kind
from pulse.search.providers.calculator import CalculatorProvider, evaluate


class TestEvaluate:
    """Test arithmetic evaluation and formatting."""

    def test_basic_addition(self):
        assert evaluate("2+2") == "4"

    def test_whitespace_ignored(self):
        assert evaluate("  2 + 3 ") == "5"

    def test_repeating_decimal_has_four_digits(self):
        assert evaluate("10/3") == "3.3333"

    def test_trailing_zeros_trimmed(self):
        assert evaluate("0.1+0.2") == "0.3"
        assert evaluate("6/2") == "3"

    def test_caret_is_power(self):
        assert evaluate("2^10") == "1024"

    def test_parentheses(self):
        assert evaluate("2*(3+4)") == "14"

    def test_calc_trigger_stripped(self):
        assert evaluate("calc 2^3") == "8"

    def test_equals_trigger_stripped(self):
        assert evaluate("= sqrt(16)") == "4"

    def test_functions(self):
        assert evaluate("pow(2,8)") == "256"
        assert evaluate("log(e)") == "1"
        assert evaluate("cos(0)") == "1"

    def test_constants(self):
        assert evaluate("pi*2") == "6.2832"
        assert evaluate("e") == "2.7183"

    def test_tiny_negative_is_zero(self):
        assert evaluate("0-0.00001") == "0"

    def test_negative_result(self):
        assert evaluate("3-10") == "-7"


class TestEvaluateRejects:
    """Test inputs that must yield no result."""

    def test_empty(self):
        assert evaluate("") is None
        assert evaluate("   ") is None

    def test_bare_trigger(self):
        assert evaluate("=") is None
        assert evaluate("calc") is None

    def test_division_by_zero(self):
        assert evaluate("1/0") is None

    def test_infinite_literal(self):
        assert evaluate("1e400") is None

    def test_overflow(self):
        assert evaluate("10**10000") is None

    def test_math_domain_error(self):
        assert evaluate("sqrt(-1)") is None

    def test_plain_words(self):
        assert evaluate("safari") is None
        assert evaluate("terminal") is None

    @pytest.mark.parametrize("expr", [
        "alert('x')",
        '"1"+"2"',
        "[1,2]",
        "{1: 2}",
        "`1`",
        "$1",
        "1;2",
    ])
    def test_disallowed_characters(self, expr):
        assert evaluate(expr) is None

    def test_malicious_import_rejected(self):
        assert evaluate("__import__('os').system('ls')") is None

    def test_unknown_function(self):
        assert evaluate("exp(1)") is None

    def test_comparison_is_not_a_number(self):
        assert evaluate("2<3") is None

    def test_syntax_error(self):
        assert evaluate("2+*3") is None

    @pytest.mark.parametrize("expr", ["7%3", "1<<4", "6&3", "7//2", "~1"])
    def test_non_arithmetic_operators(self, expr):
        assert evaluate(expr) is None


class TestCalculatorProvider:
    """Test the single-suggestion provider wrapper."""

    def test_expression_yields_one_candidate(self):
        results = CalculatorProvider().search("2+2")
        assert len(results) == 1
        candidate = results[0]
        assert candidate.display_name == "= 4"
        assert candidate.payload == "4"
        assert candidate.kind is Kind.CALCULATOR
        assert candidate.stable_id == "calc.2+2"

    def test_non_expression_yields_nothing(self):
        assert CalculatorProvider().search("firefox") == []

    def test_lives_in_suggestions(self):
        provider = CalculatorProvider()
        assert provider.section == "Suggestions"
        assert provider.shows_on_empty_query is False
