from __future__ import annotations

from typing import Callable

from ..runtime import NIL, Context, LoxNameError, LoxValue
from ..tree import Assignment, AssignStatement, Node, VarDeclaration

EvalFunc = Callable[[Node, Context], LoxValue]

def eval_assignment(node: Assignment, scope: Context, eval_func: EvalFunc) -> LoxValue:
    """`name = value` inside an expression: writes the innermost scope, no existence check."""
    value = eval_func(node.value, scope)
    scope.assign_variable(node.name, value)
    return value

def eval_assign_stmt(node: AssignStatement, scope: Context, eval_func: EvalFunc) -> LoxValue:
    value = eval_func(node.value, scope)

    if not scope.is_defined(node.name):
        raise LoxNameError(node.name)

    scope.assign_variable(node.name, value)
    return value

def eval_var_declaration(node: VarDeclaration, scope: Context, eval_func: EvalFunc) -> LoxValue:
    # The initializer runs before the name exists, so `var a = a;` sees only outer bindings.
    if node.initializer is None:
        scope.declare_variable(node.name)
        return NIL

    value = eval_func(node.initializer, scope)
    scope.declare_variable(node.name)
    scope.assign_variable(node.name, value)
    return NIL
