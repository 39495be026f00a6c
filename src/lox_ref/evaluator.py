from __future__ import annotations

from typing import Iterable, Optional

from .parser_rd import iter_statements
from .runtime import NIL, Context, LoxValue, ScopeStack
from .tree import (
    Assignment,
    AssignStatement,
    Binary,
    Block,
    ExpressionStatement,
    Literal,
    Node,
    PrintStatement,
    Unary,
    Variable,
    VarDeclaration,
)
from .utils import display_value

from .eval.bind import eval_assign_stmt, eval_assignment, eval_var_declaration
from .eval.blocks import eval_block, eval_program
from .eval.expr import eval_binary, eval_unary

# ---------------- Public API ----------------

def eval_expr(ast: Node, scope: Optional[Context]=None) -> LoxValue:
    if scope is None:
        scope = ScopeStack()

    return eval_node(ast, scope)

def run_program(statements: Iterable[Node], scope: Optional[Context]=None) -> LoxValue:
    """Execute statements in order (they may be produced lazily); returns the last value."""
    if scope is None:
        scope = ScopeStack()

    return eval_program(statements, scope, eval_node)

def run(source: str, scope: Optional[Context]=None) -> LoxValue:
    return run_program(iter_statements(source), scope)

# ---------------- Core evaluator ----------------

def eval_node(n: Node, scope: Context) -> LoxValue:
    match n:
        case Literal(value=value):
            return value
        case Variable(name=name):
            return scope.get_variable(name)
        case Unary():
            return eval_unary(n, scope, eval_node)
        case Binary():
            return eval_binary(n, scope, eval_node)
        case Assignment():
            return eval_assignment(n, scope, eval_node)
        case ExpressionStatement(expr=expr):
            return eval_node(expr, scope)
        case PrintStatement(expr=expr):
            print(display_value(eval_node(expr, scope)))
            return NIL
        case VarDeclaration():
            return eval_var_declaration(n, scope, eval_node)
        case AssignStatement():
            return eval_assign_stmt(n, scope, eval_node)
        case Block():
            return eval_block(n, scope, eval_node)
        case _:
            raise TypeError(f"Unknown node: {type(n).__name__}")
