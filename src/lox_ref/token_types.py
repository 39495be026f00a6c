"""
Token Types for the Lox reference interpreter

Shared between lexer and parser to avoid circular dependencies.
Member names double as the kind names printed by ``tokenize``.
"""

from typing import Dict, Optional
from dataclasses import dataclass
from enum import Enum, auto


class TT(Enum):
    """Token Types"""

    # Literals
    STRING = auto()
    NUMBER = auto()

    # Tokens of one or two characters
    LEFT_PAREN = auto()
    RIGHT_PAREN = auto()
    LEFT_BRACE = auto()
    RIGHT_BRACE = auto()
    COMMA = auto()
    DOT = auto()
    MINUS = auto()
    PLUS = auto()
    SEMICOLON = auto()
    STAR = auto()
    SLASH = auto()
    EQUAL = auto()
    EQUAL_EQUAL = auto()
    BANG = auto()
    BANG_EQUAL = auto()
    LESS = auto()
    LESS_EQUAL = auto()
    GREATER = auto()
    GREATER_EQUAL = auto()

    # Special
    EOF = auto()
    IDENTIFIER = auto()

    # Reserved keywords
    AND = auto()
    CLASS = auto()
    ELSE = auto()
    FALSE = auto()
    FOR = auto()
    FUN = auto()
    IF = auto()
    NIL = auto()
    OR = auto()
    PRINT = auto()
    RETURN = auto()
    SUPER = auto()
    THIS = auto()
    TRUE = auto()
    VAR = auto()
    WHILE = auto()


KEYWORDS: Dict[str, TT] = {
    'and': TT.AND,
    'class': TT.CLASS,
    'else': TT.ELSE,
    'false': TT.FALSE,
    'for': TT.FOR,
    'fun': TT.FUN,
    'if': TT.IF,
    'nil': TT.NIL,
    'or': TT.OR,
    'print': TT.PRINT,
    'return': TT.RETURN,
    'super': TT.SUPER,
    'this': TT.THIS,
    'true': TT.TRUE,
    'var': TT.VAR,
    'while': TT.WHILE,
}


@dataclass(frozen=True)
class Tok:
    """Token with source span and line"""

    type: TT
    lexeme: str
    literal: Optional[str] = None
    start: int = 0
    end: int = 0
    line: int = 1

    def render(self) -> str:
        """Text form used by the ``tokenize`` command"""
        literal = "null" if self.literal is None else self.literal
        return f"{self.type.name} {self.lexeme} {literal}"

    def __repr__(self):
        return f"Tok({self.type.name}, {self.lexeme!r}, line {self.line})"
