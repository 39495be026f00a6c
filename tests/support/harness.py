from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional, Tuple

import pytest

BASE_DIR = Path(__file__).resolve().parent.parent.parent
SRC_DIR = (BASE_DIR / "src").resolve()

if str(BASE_DIR) not in sys.path:
    sys.path.append(str(BASE_DIR))
if str(SRC_DIR) not in sys.path:
    sys.path.append(str(SRC_DIR))

from lox_ref.evaluator import eval_expr, run as run_program
from lox_ref.lexer_rd import LexErrorLog, tokenize
from lox_ref.parser_rd import ParseError, parse_expression, parse_source
from lox_ref.runtime import (
    LoxBool,
    LoxNameError,
    LoxNil,
    LoxReal,
    LoxRuntimeError,
    LoxScopeError,
    LoxString,
    LoxTypeError,
    NullScope,
    ScopeStack,
)
from lox_ref.tree import format_node
from lox_ref.utils import display_value

RuntimeExpectation = Optional[Tuple[str, object]]

__all__ = [
    "LexErrorLog",
    "LoxNameError",
    "LoxRuntimeError",
    "LoxScopeError",
    "LoxTypeError",
    "NullScope",
    "ParseError",
    "ScopeStack",
    "collect_lex_errors",
    "eval_display",
    "parse_text",
    "parse_statements_text",
    "run_program",
    "run_runtime_case",
    "verify_result",
]


def parse_text(source: str) -> str:
    """Parse one expression and return its prefix text form."""
    return format_node(parse_expression(source))


def parse_statements_text(source: str) -> List[str]:
    """Parse a program and return the text form of each statement."""
    return [format_node(stmt) for stmt in parse_source(source)]


def eval_display(source: str) -> str:
    """Evaluate one expression in a fresh scope and return its display text."""
    return display_value(eval_expr(parse_expression(source)))


def collect_lex_errors(source: str) -> Tuple[List[object], List[Tuple[int, str]]]:
    """Tokenize in recovery mode; returns the tokens and (line, message) errors."""
    errors: List[Tuple[int, str]] = []

    def on_error(_offset: int, line: int, message: str) -> None:
        errors.append((line, message))

    return list(tokenize(source, on_error=on_error)), errors


def verify_result(value: object, kind: str, expected: object) -> None:
    """Assert runtime result shape/value compatibility."""
    match kind:
        case "string":
            assert isinstance(
                value, LoxString
            ), f"expected LoxString, got {type(value).__name__}"
            assert (
                value.value == expected
            ), f"expected {expected!r}, got {value.value!r}"
            return
        case "number":
            assert isinstance(
                value, LoxReal
            ), f"expected number, got {type(value).__name__}"
            assert (
                abs(value.value - float(expected)) <= 1e-9
            ), f"expected {expected}, got {value.value}"
            return
        case "bool":
            assert isinstance(
                value, LoxBool
            ), f"expected LoxBool, got {type(value).__name__}"
            assert value.value is expected, f"expected {expected}, got {value.value}"
            return
        case "nil":
            assert isinstance(value, LoxNil), f"expected nil, got {value!r}"
            return
        case _:
            raise AssertionError(f"unknown expectation kind {kind!r}")


def run_runtime_case(
    source: str,
    expectation: RuntimeExpectation,
    expected_exc: Optional[type],
) -> None:
    """Execute one runtime scenario with optional expected exception."""
    if expected_exc is not None:
        with pytest.raises(expected_exc):
            run_program(source)
        return

    result = run_program(source)
    if expectation is not None:
        verify_result(result, expectation[0], expectation[1])
