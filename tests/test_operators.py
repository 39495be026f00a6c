from __future__ import annotations

import math

import pytest

from lox_ref.eval.expr import apply_binary, apply_unary
from lox_ref.operators import BinaryOp, UnaryOp
from lox_ref.types import FALSE, NIL, TRUE, LoxReal, LoxString
from tests.support.harness import (
    LoxNameError,
    LoxTypeError,
    eval_display,
    run_runtime_case,
)

SCENARIOS = [
    pytest.param("1 + 2;", ("number", 3), None, id="add-numbers"),
    pytest.param('"a" + "b";', ("string", "ab"), None, id="concat-strings"),
    pytest.param('"a" + 1;', None, LoxTypeError, id="add-mixed-typeerror"),
    pytest.param("nil + nil;", None, LoxTypeError, id="add-nil-typeerror"),
    pytest.param("7 - 2;", ("number", 5), None, id="subtract"),
    pytest.param("3 * 4;", ("number", 12), None, id="multiply"),
    pytest.param("9 / 2;", ("number", 4.5), None, id="divide"),
    pytest.param("(1 + 2) * 3;", ("number", 9), None, id="grouped-arith"),
    pytest.param('"a" - "b";', None, LoxTypeError, id="subtract-strings-typeerror"),
    pytest.param('2 * "b";', None, LoxTypeError, id="multiply-string-typeerror"),
    pytest.param('1 == "1";', ("bool", False), None, id="eq-cross-kind"),
    pytest.param("1 == 1;", ("bool", True), None, id="eq-numbers"),
    pytest.param('"a" == "a";', ("bool", True), None, id="eq-strings"),
    pytest.param("nil == nil;", ("bool", True), None, id="eq-nil"),
    pytest.param("nil == false;", ("bool", False), None, id="eq-nil-false"),
    pytest.param("true != false;", ("bool", True), None, id="neq-bools"),
    pytest.param("1 < 2;", ("bool", True), None, id="lt"),
    pytest.param("2 <= 2;", ("bool", True), None, id="lte"),
    pytest.param("3 > 4;", ("bool", False), None, id="gt"),
    pytest.param("3 >= 4;", ("bool", False), None, id="gte"),
    pytest.param('"a" < "b";', None, LoxTypeError, id="lt-strings-typeerror"),
    pytest.param("true and false;", ("bool", False), None, id="and"),
    pytest.param("true or false;", ("bool", True), None, id="or"),
    pytest.param("1 and true;", None, LoxTypeError, id="and-number-typeerror"),
    pytest.param("nil or true;", None, LoxTypeError, id="or-nil-typeerror"),
    pytest.param("false and missing;", None, LoxNameError, id="and-no-short-circuit"),
    pytest.param("true or missing;", None, LoxNameError, id="or-no-short-circuit"),
    pytest.param("!true;", ("bool", False), None, id="not-bool"),
    pytest.param("!0;", ("bool", True), None, id="not-zero"),
    pytest.param("!1;", ("bool", False), None, id="not-number"),
    pytest.param("!nil;", ("bool", True), None, id="not-nil"),
    pytest.param('!"a";', None, LoxTypeError, id="not-string-typeerror"),
    pytest.param("-3;", ("number", -3), None, id="negate"),
    pytest.param("+2;", ("number", 2), None, id="unary-plus"),
    pytest.param('-"a";', None, LoxTypeError, id="negate-string-typeerror"),
    pytest.param("+nil;", None, LoxTypeError, id="plus-nil-typeerror"),
]


@pytest.mark.parametrize("source, expectation, expected_exc", SCENARIOS)
def test_operators(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


@pytest.mark.parametrize(
    "source, expected",
    [
        pytest.param("1 / 0", "Infinity", id="positive"),
        pytest.param("-1 / 0", "-Infinity", id="negative"),
        pytest.param("1 / -0", "-Infinity", id="negative-zero-divisor"),
        pytest.param("0 / 0", "NaN", id="zero-over-zero"),
    ],
)
def test_division_by_zero(source: str, expected: str) -> None:
    assert eval_display(source) == expected


def test_apply_binary_equality_is_structural() -> None:
    assert apply_binary(BinaryOp.EQUAL_TO, LoxString("x"), LoxString("x")) is TRUE
    assert apply_binary(BinaryOp.EQUAL_TO, LoxReal(1.0), LoxString("1")) is FALSE
    assert apply_binary(BinaryOp.NOT_EQUAL_TO, NIL, FALSE) is TRUE


def test_apply_unary_group_is_identity() -> None:
    value = LoxString("kept")
    assert apply_unary(UnaryOp.GROUP, value) is value


@pytest.mark.parametrize(
    "op, lhs, rhs, message",
    [
        pytest.param(BinaryOp.PLUS, LoxString("a"), LoxReal(1.0), 'Cannot add "a" and 1', id="add"),
        pytest.param(BinaryOp.MINUS, LoxString("a"), LoxReal(1.0), 'Cannot subtract 1 from "a"', id="subtract"),
        pytest.param(BinaryOp.TIMES, LoxReal(2.0), NIL, "Cannot multiply 2 and nil", id="multiply"),
        pytest.param(BinaryOp.DIV, TRUE, LoxReal(0.5), "Cannot divide true by 0.5", id="divide"),
        pytest.param(BinaryOp.LESS_THAN, LoxString("a"), LoxString("b"), 'Cannot compare "a" < "b"', id="lt"),
        pytest.param(BinaryOp.GREATER_THAN, NIL, LoxReal(1.0), "Cannot compare nil > 1", id="gt"),
        pytest.param(BinaryOp.LESS_THAN_OR_EQUAL_TO, LoxReal(1.0), FALSE, "Cannot compare 1 <= false", id="lte"),
        pytest.param(BinaryOp.GREATER_THAN_OR_EQUAL_TO, LoxString("x"), NIL, 'Cannot compare "x" >= nil', id="gte"),
        pytest.param(BinaryOp.LOGICAL_OR, NIL, TRUE, "Cannot apply || to nil and true", id="or"),
        pytest.param(BinaryOp.LOGICAL_AND, TRUE, LoxReal(1.0), "Cannot apply && to true and 1", id="and"),
    ],
)
def test_type_error_message(op: BinaryOp, lhs, rhs, message: str) -> None:
    with pytest.raises(LoxTypeError) as exc_info:
        apply_binary(op, lhs, rhs)

    assert str(exc_info.value) == message


REAL_EQUALITY_SCENARIOS = [
    pytest.param("0/0 == 0/0;", ("bool", True), None, id="nan-equals-nan"),
    pytest.param("(1/0 - 1/0) == 0/0;", ("bool", True), None, id="nan-from-infinities"),
    pytest.param("0/0 != 0/0;", ("bool", False), None, id="nan-not-unequal"),
    pytest.param("0 == -0;", ("bool", False), None, id="signed-zeros-differ"),
    pytest.param("0 != -0;", ("bool", True), None, id="signed-zeros-unequal"),
    pytest.param("-0 == -0;", ("bool", True), None, id="negative-zero-self"),
    pytest.param("1 == 1.0;", ("bool", True), None, id="same-value-literals"),
    pytest.param("1/0 == 2/0;", ("bool", True), None, id="infinities-equal"),
]


@pytest.mark.parametrize("source, expectation, expected_exc", REAL_EQUALITY_SCENARIOS)
def test_real_equality(source, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


def test_real_equality_matches_hash() -> None:
    assert LoxReal(math.nan) == LoxReal(-math.nan)
    assert hash(LoxReal(math.nan)) == hash(LoxReal(-math.nan))
    assert LoxReal(0.0) != LoxReal(-0.0)
    assert LoxReal(0.0) != LoxString("0")
    assert len({LoxReal(0.0), LoxReal(-0.0), LoxReal(0.0)}) == 2
