from __future__ import annotations

from typing import Callable, Iterable

from ..runtime import NIL, Context, LoxValue
from ..tree import Block, Node

EvalFunc = Callable[[Node, Context], LoxValue]

BLOCK_SCOPE = "block"

def eval_program(statements: Iterable[Node], scope: Context, eval_func: EvalFunc) -> LoxValue:
    result: LoxValue = NIL

    for stmt in statements:
        result = eval_func(stmt, scope)

    return result

def eval_block(node: Block, scope: Context, eval_func: EvalFunc) -> LoxValue:
    scope.push_scope(BLOCK_SCOPE)
    try:
        return eval_program(node.statements, scope, eval_func)
    finally:
        scope.pop_scope()
