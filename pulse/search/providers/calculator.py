"""
Calculator Provider - Inline math evaluation in search.

Any query that looks like arithmetic ("2+2", "calc sqrt(16)", "= 2^10")
produces a single suggestion holding the result. Uses simpleeval for safe
expression evaluation (no access to builtins, filesystem, or imports).
"""

import ast
import math
import operator as op
import re
from typing import Optional

from loguru import logger
from simpleeval import InvalidExpression, safe_power, simple_eval

from pulse.search.provider import Candidate, Kind, SourceProvider

TRIGGER_WORDS = ("calc", "=")

# Never handed to the evaluator
DISALLOWED_CHARS = frozenset("{}[]'\"`$;")

FUNCTIONS = {
    "sqrt": math.sqrt,
    "pow": safe_power,
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "log": math.log,
}

CONSTANTS = {
    "pi": math.pi,
    "e": math.e,
}

# Plain arithmetic; simpleeval rejects any operator missing here
OPERATORS = {
    ast.Add: op.add,
    ast.Sub: op.sub,
    ast.Mult: op.mul,
    ast.Div: op.truediv,
    ast.Pow: safe_power,
    ast.USub: op.neg,
    ast.UAdd: op.pos,
}

_CONSTANT_RE = re.compile(r"(?<![a-z])(pi|e)(?![a-z])")


def _normalize(raw: str) -> str:
    expr = raw.strip().lower()
    for trigger in TRIGGER_WORDS:
        if expr.startswith(trigger):
            expr = expr[len(trigger):]
            break
    expr = "".join(expr.split())
    return expr.replace("^", "**")


def _format(value: float) -> str:
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def evaluate(raw: str) -> Optional[str]:
    """
    Evaluate an arithmetic expression.

    Args:
        raw: User input, optionally prefixed with "calc" or "="

    Returns:
        The result with at most 4 fractional digits, or None if the
        input is not a valid, finite arithmetic expression.
    """
    expr = _normalize(raw)
    if not expr:
        return None

    if not any(ch.isdigit() for ch in expr) and not _CONSTANT_RE.search(expr):
        return None

    if any(ch in DISALLOWED_CHARS for ch in expr):
        return None

    try:
        result = simple_eval(expr, operators=OPERATORS, functions=FUNCTIONS, names=CONSTANTS)
    except InvalidExpression:
        return None
    except (SyntaxError, TypeError, ValueError, ZeroDivisionError, OverflowError):
        return None
    except Exception as e:
        logger.warning(f"Unexpected calculator error for '{expr}': {e}")
        return None

    if isinstance(result, bool) or not isinstance(result, (int, float)):
        return None

    try:
        value = float(result)
    except OverflowError:
        return None

    if math.isnan(value) or math.isinf(value):
        return None

    return _format(value)


class CalculatorProvider(SourceProvider):
    """Turns arithmetic queries into a single "= result" suggestion."""

    __gtype_name__ = "PulseCalculatorProvider"

    name = "calculator"
    section = "Suggestions"

    def snapshot(self) -> list[Candidate]:
        return []

    def search(self, query: str) -> list[Candidate]:
        result = evaluate(query)
        if result is None:
            return []

        return [Candidate(
            stable_id=f"calc.{query}",
            display_name=f"= {result}",
            payload=result,
            kind=Kind.CALCULATOR,
            subtitle=query.strip(),
            icon="accessories-calculator",
        )]
