"""Operator table: unary, binary and assignment operators with their binding rules.

Precedence numbers follow the C convention: a lower number binds tighter.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict
from typing_extensions import TypeAlias


class Precedence:
    UNARY = 3
    MULTIPLICATION_DIVISION = 5
    ADDITION_SUBTRACTION = 6
    RELATIONAL = 9
    EQUALITY = 10
    LOGICAL_AND = 14
    LOGICAL_OR = 15
    ASSIGNMENT = 16
    # An open parenthesis is never popped by operator reduction, only by ')'.
    GROUP = 100


class UnaryOp(Enum):
    POSITIVE = '+'
    NEGATIVE = '-'
    LOGICAL_NOT = '!'
    GROUP = 'group'

    @property
    def symbol(self) -> str:
        return self.value

    @property
    def precedence(self) -> int:
        if self is UnaryOp.GROUP:
            return Precedence.GROUP
        return Precedence.UNARY


class BinaryOp(Enum):
    PLUS = '+'
    MINUS = '-'
    TIMES = '*'
    DIV = '/'
    EQUAL_TO = '=='
    NOT_EQUAL_TO = '!='
    LESS_THAN = '<'
    GREATER_THAN = '>'
    LESS_THAN_OR_EQUAL_TO = '<='
    GREATER_THAN_OR_EQUAL_TO = '>='
    LOGICAL_OR = '||'
    LOGICAL_AND = '&&'

    @property
    def symbol(self) -> str:
        return self.value

    @property
    def precedence(self) -> int:
        return BINARY_PRECEDENCE[self]

    @property
    def left_associative(self) -> bool:
        return True


class AssignOp(Enum):
    """Assignment; kept apart from BinaryOp because its left side must be a name."""
    ASSIGN = '='

    @property
    def symbol(self) -> str:
        return self.value

    @property
    def precedence(self) -> int:
        return Precedence.ASSIGNMENT


Operator: TypeAlias = UnaryOp | BinaryOp | AssignOp

BINARY_PRECEDENCE: Dict[BinaryOp, int] = {
    BinaryOp.TIMES: Precedence.MULTIPLICATION_DIVISION,
    BinaryOp.DIV: Precedence.MULTIPLICATION_DIVISION,
    BinaryOp.PLUS: Precedence.ADDITION_SUBTRACTION,
    BinaryOp.MINUS: Precedence.ADDITION_SUBTRACTION,
    BinaryOp.LESS_THAN: Precedence.RELATIONAL,
    BinaryOp.GREATER_THAN: Precedence.RELATIONAL,
    BinaryOp.LESS_THAN_OR_EQUAL_TO: Precedence.RELATIONAL,
    BinaryOp.GREATER_THAN_OR_EQUAL_TO: Precedence.RELATIONAL,
    BinaryOp.EQUAL_TO: Precedence.EQUALITY,
    BinaryOp.NOT_EQUAL_TO: Precedence.EQUALITY,
    BinaryOp.LOGICAL_AND: Precedence.LOGICAL_AND,
    BinaryOp.LOGICAL_OR: Precedence.LOGICAL_OR,
}


def should_reduce(stacked: Operator, stacked_precedence: int, incoming_precedence: int) -> bool:
    """Whether a stacked operator must be emitted before the incoming one is pushed.

    Equal precedence only reduces for left-associative binary operators, so
    `1-2-3` groups as `(1-2)-3` while `a = b = 1` stays right-nested.
    """
    if stacked_precedence < incoming_precedence:
        return True

    return (
        stacked_precedence == incoming_precedence
        and isinstance(stacked, BinaryOp)
        and stacked.left_associative
    )
