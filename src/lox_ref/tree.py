"""AST node types plus the two ways of rendering them.

Nodes are frozen dataclasses forming a closed family; every consumer
dispatches over them with ``match``. ``format_node`` produces the prefix
text form printed by the ``parse`` command, ``to_lark`` converts a tree to a
``lark.Tree`` for the ``pretty()`` debug dump.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple, Union
from typing_extensions import TypeAlias

from lark import Token, Tree

from .operators import BinaryOp, UnaryOp
from .types import LoxBool, LoxNil, LoxReal, LoxString, LoxValue
from .utils import literal_text


# ---------------- Expressions ----------------

@dataclass(frozen=True)
class Unary:
    op: UnaryOp
    operand: Expr

@dataclass(frozen=True)
class Binary:
    op: BinaryOp
    left: Expr
    right: Expr

@dataclass(frozen=True)
class Assignment:
    name: str
    value: Expr

@dataclass(frozen=True)
class Literal:
    value: LoxValue

@dataclass(frozen=True)
class Variable:
    name: str

# ---------------- Statements ----------------

@dataclass(frozen=True)
class ExpressionStatement:
    expr: Expr

@dataclass(frozen=True)
class PrintStatement:
    expr: Expr

@dataclass(frozen=True)
class VarDeclaration:
    name: str
    initializer: Optional[Expr] = None

@dataclass(frozen=True)
class AssignStatement:
    """`name = value;` at statement level; the name must already be bound."""
    name: str
    value: Expr

@dataclass(frozen=True)
class Block:
    statements: Tuple[Stmt, ...] = ()


Expr: TypeAlias = Union[Unary, Binary, Assignment, Literal, Variable]
Stmt: TypeAlias = Union[ExpressionStatement, PrintStatement, VarDeclaration, AssignStatement, Block]
Node: TypeAlias = Union[Expr, Stmt]


# ---------------- Prefix text form ----------------

def format_node(node: Node) -> str:
    match node:
        case Unary(op=op, operand=operand):
            return f"({op.symbol} {format_node(operand)})"
        case Binary(op=op, left=left, right=right):
            return f"({op.symbol} {format_node(left)} {format_node(right)})"
        case Assignment(name=name, value=value):
            return f"{name} = {format_node(value)}"
        case Literal(value=value):
            return literal_text(value)
        case Variable(name=name):
            return name
        case ExpressionStatement(expr=expr):
            return f"{format_node(expr)};"
        case PrintStatement(expr=expr):
            return f"print {format_node(expr)};"
        case VarDeclaration(name=name, initializer=None):
            return f"var {name};"
        case VarDeclaration(name=name, initializer=init):
            return f"var {name} = {format_node(init)};"
        case AssignStatement(name=name, value=value):
            return f"{name} = {format_node(value)};"
        case Block(statements=()):
            return "{}"
        case Block(statements=statements):
            body = "\n".join(format_node(stmt) for stmt in statements)
            indented = "\n".join(f"  {line}" for line in body.splitlines())
            return "{\n" + indented + "\n}"
        case _:
            raise TypeError(f"Unknown node: {type(node).__name__}")


# ---------------- lark dump ----------------

def _literal_token(value: LoxValue) -> Token:
    match value:
        case LoxReal():
            kind = 'NUMBER'
        case LoxString():
            kind = 'STRING'
        case LoxBool():
            kind = 'BOOLEAN'
        case LoxNil():
            kind = 'NIL'
        case _:
            raise TypeError(f"Unexpected value type {type(value).__name__}")

    return Token(kind, literal_text(value))


def to_lark(node: Node) -> Tree:
    """Mirror an AST as a lark Tree; labels follow the node kinds."""
    match node:
        case Unary(op=op, operand=operand):
            label = 'group' if op is UnaryOp.GROUP else 'unary'
            children: List[Union[Tree, Token]] = [] if op is UnaryOp.GROUP else [Token('OP', op.symbol)]
            return Tree(label, children + [to_lark(operand)])
        case Binary(op=op, left=left, right=right):
            return Tree('binary', [Token('OP', op.symbol), to_lark(left), to_lark(right)])
        case Assignment(name=name, value=value):
            return Tree('assign', [Token('IDENTIFIER', name), to_lark(value)])
        case Literal(value=value):
            return Tree('literal', [_literal_token(value)])
        case Variable(name=name):
            return Tree('variable', [Token('IDENTIFIER', name)])
        case ExpressionStatement(expr=expr):
            return Tree('exprstmt', [to_lark(expr)])
        case PrintStatement(expr=expr):
            return Tree('printstmt', [to_lark(expr)])
        case VarDeclaration(name=name, initializer=init):
            decl: List[Union[Tree, Token]] = [Token('IDENTIFIER', name)]
            if init is not None:
                decl.append(to_lark(init))
            return Tree('vardecl', decl)
        case AssignStatement(name=name, value=value):
            return Tree('assignstmt', [Token('IDENTIFIER', name), to_lark(value)])
        case Block(statements=statements):
            return Tree('block', [to_lark(stmt) for stmt in statements])
        case _:
            raise TypeError(f"Unknown node: {type(node).__name__}")


def program_tree(statements: Iterable[Stmt]) -> Tree:
    return Tree('program', [to_lark(stmt) for stmt in statements])
