from __future__ import annotations

import pytest
from lark import Token, Tree

from lox_ref.operators import BinaryOp, UnaryOp
from lox_ref.parser_rd import parse_expression, parse_source
from lox_ref.tree import (
    Block,
    Literal,
    PrintStatement,
    Unary,
    format_node,
    program_tree,
    to_lark,
)
from lox_ref.types import NIL, LoxReal, LoxString


@pytest.mark.parametrize(
    "source, label",
    [
        pytest.param("(1)", "group", id="group"),
        pytest.param("-1", "unary", id="unary"),
        pytest.param("1 + 2", "binary", id="binary"),
        pytest.param("a = 1", "assign", id="assign"),
        pytest.param('"s"', "literal", id="literal"),
        pytest.param("a", "variable", id="variable"),
    ],
)
def test_expression_labels(source: str, label: str) -> None:
    assert to_lark(parse_expression(source)).data == label


def test_binary_children() -> None:
    tree = to_lark(parse_expression("a * 2"))

    assert tree == Tree(
        "binary",
        [
            Token("OP", "*"),
            Tree("variable", [Token("IDENTIFIER", "a")]),
            Tree("literal", [Token("NUMBER", "2.0")]),
        ],
    )


def test_literal_token_kinds() -> None:
    tree = to_lark(parse_expression('"s" == nil'))
    kinds = [token.type for token in tree.scan_values(lambda v: isinstance(v, Token))]

    assert kinds == ["OP", "STRING", "NIL"]


def test_group_has_no_operator_token() -> None:
    tree = to_lark(Unary(UnaryOp.GROUP, Literal(LoxReal(1.0))))

    assert tree == Tree("group", [Tree("literal", [Token("NUMBER", "1.0")])])


def test_statement_labels() -> None:
    statements = parse_source("var a; var b = 1; a = 2; print a; a; { }")
    labels = [child.data for child in program_tree(statements).children]

    assert labels == ["vardecl", "vardecl", "assignstmt", "printstmt", "exprstmt", "block"]


def test_vardecl_without_initializer() -> None:
    tree = to_lark(parse_source("var a;")[0])

    assert tree == Tree("vardecl", [Token("IDENTIFIER", "a")])


def test_format_node_block_indentation() -> None:
    block = Block((PrintStatement(Literal(LoxString("x"))), Block(), Block((PrintStatement(Literal(NIL)),))))

    assert format_node(block) == "{\n  print x;\n  {}\n  {\n    print nil;\n  }\n}"


def test_format_node_operator_symbols() -> None:
    assert BinaryOp.LOGICAL_AND.symbol == "&&"
    assert format_node(parse_expression("!a or b")) == "(|| (! a) b)"
