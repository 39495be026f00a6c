from __future__ import annotations

import math
from typing import Callable

from ..operators import BinaryOp, UnaryOp
from ..runtime import Context, LoxBool, LoxNil, LoxReal, LoxString, LoxTypeError, LoxValue
from ..tree import Binary, Node, Unary
from ..types import lox_bool

EvalFunc = Callable[[Node, Context], LoxValue]

def eval_unary(node: Unary, scope: Context, eval_func: EvalFunc) -> LoxValue:
    operand = eval_func(node.operand, scope)
    return apply_unary(node.op, operand)

def eval_binary(node: Binary, scope: Context, eval_func: EvalFunc) -> LoxValue:
    # No short-circuit: `and`/`or` evaluate both sides too.
    left = eval_func(node.left, scope)
    right = eval_func(node.right, scope)
    return apply_binary(node.op, left, right)

def apply_unary(op: UnaryOp, operand: LoxValue) -> LoxValue:
    match op, operand:
        case UnaryOp.GROUP, _:
            return operand
        case UnaryOp.POSITIVE, LoxReal():
            return operand
        case UnaryOp.NEGATIVE, LoxReal(value=v):
            return LoxReal(-v)
        case UnaryOp.POSITIVE | UnaryOp.NEGATIVE, _:
            raise LoxTypeError(f"Cannot convert {operand!r} to a number")
        case UnaryOp.LOGICAL_NOT, LoxBool(value=b):
            return lox_bool(not b)
        case UnaryOp.LOGICAL_NOT, LoxReal(value=v):
            return lox_bool(v == 0.0)
        case UnaryOp.LOGICAL_NOT, LoxNil():
            return lox_bool(True)
        case UnaryOp.LOGICAL_NOT, _:
            raise LoxTypeError(f"Cannot convert {operand!r} to a boolean")
        case _:
            raise LoxTypeError(f"Unsupported unary op {op.symbol}")

def apply_binary(op: BinaryOp, lhs: LoxValue, rhs: LoxValue) -> LoxValue:
    match op:
        case BinaryOp.EQUAL_TO:
            return lox_bool(lhs == rhs)
        case BinaryOp.NOT_EQUAL_TO:
            return lox_bool(lhs != rhs)
        case BinaryOp.PLUS:
            return _add(lhs, rhs)
        case BinaryOp.MINUS | BinaryOp.TIMES | BinaryOp.DIV:
            a, b = _require_reals(op, lhs, rhs)
            return LoxReal(_arith(op, a, b))
        case BinaryOp.LESS_THAN | BinaryOp.GREATER_THAN | BinaryOp.LESS_THAN_OR_EQUAL_TO | BinaryOp.GREATER_THAN_OR_EQUAL_TO:
            a, b = _require_reals(op, lhs, rhs)
            return lox_bool(_compare(op, a, b))
        case BinaryOp.LOGICAL_AND | BinaryOp.LOGICAL_OR:
            if not (isinstance(lhs, LoxBool) and isinstance(rhs, LoxBool)):
                raise LoxTypeError(f"Cannot apply {op.symbol} to {lhs!r} and {rhs!r}")
            if op is BinaryOp.LOGICAL_AND:
                return lox_bool(lhs.value and rhs.value)
            return lox_bool(lhs.value or rhs.value)
        case _:
            raise LoxTypeError(f"Unsupported binary op {op.symbol}")

def _add(lhs: LoxValue, rhs: LoxValue) -> LoxValue:
    match lhs, rhs:
        case LoxString(value=a), LoxString(value=b):
            return LoxString(a + b)
        case LoxReal(value=a), LoxReal(value=b):
            return LoxReal(a + b)
        case _:
            raise LoxTypeError(f"Cannot add {lhs!r} and {rhs!r}")

def _require_reals(op: BinaryOp, lhs: LoxValue, rhs: LoxValue) -> tuple[float, float]:
    if isinstance(lhs, LoxReal) and isinstance(rhs, LoxReal):
        return lhs.value, rhs.value

    match op:
        case BinaryOp.MINUS:
            message = f"Cannot subtract {rhs!r} from {lhs!r}"
        case BinaryOp.TIMES:
            message = f"Cannot multiply {lhs!r} and {rhs!r}"
        case BinaryOp.DIV:
            message = f"Cannot divide {lhs!r} by {rhs!r}"
        case _:
            message = f"Cannot compare {lhs!r} {op.symbol} {rhs!r}"
    raise LoxTypeError(message)

def _arith(op: BinaryOp, a: float, b: float) -> float:
    if op is BinaryOp.MINUS:
        return a - b
    if op is BinaryOp.TIMES:
        return a * b

    # IEEE semantics for division by zero rather than Python's ZeroDivisionError.
    if b == 0.0:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(1.0, a) * math.copysign(1.0, b) * math.inf
    return a / b

def _compare(op: BinaryOp, a: float, b: float) -> bool:
    match op:
        case BinaryOp.LESS_THAN:
            return a < b
        case BinaryOp.GREATER_THAN:
            return a > b
        case BinaryOp.LESS_THAN_OR_EQUAL_TO:
            return a <= b
        case _:
            return a >= b
