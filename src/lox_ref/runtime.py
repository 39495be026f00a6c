from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from typing_extensions import Protocol

from .types import (
    NIL, LoxBool, LoxNil, LoxReal, LoxString, LoxValue,
    LoxRuntimeError, LoxTypeError, LoxNameError, LoxScopeError,
)

__all__ = [
    "Context", "Scope", "ScopeStack", "NullScope",
    "NIL", "LoxBool", "LoxNil", "LoxReal", "LoxString", "LoxValue",
    "LoxRuntimeError", "LoxTypeError", "LoxNameError", "LoxScopeError",
]

GLOBAL_SCOPE = "global"


class Context(Protocol):
    """What evaluation needs from its variable environment."""

    def push_scope(self, name: str) -> None: ...
    def pop_scope(self) -> None: ...
    def declare_variable(self, name: str) -> None: ...
    def assign_variable(self, name: str, value: LoxValue) -> None: ...
    def get_variable(self, name: str) -> LoxValue: ...
    def is_defined(self, name: str) -> bool: ...


@dataclass
class Scope:
    name: str
    variables: Dict[str, LoxValue] = field(default_factory=dict)


class ScopeStack:
    """
    Nested variable scopes, innermost last.

    Reads search from the innermost scope outwards. Writes always land in the
    innermost scope, so assigning inside a block rebinds the name locally
    instead of updating an outer binding.
    """

    def __init__(self) -> None:
        self._logger = logging.getLogger("ScopeStack")
        self._scopes: List[Scope] = [Scope(GLOBAL_SCOPE)]

    @property
    def depth(self) -> int:
        return len(self._scopes)

    @property
    def scopes(self) -> List[Scope]:
        return list(self._scopes)

    def push_scope(self, name: str) -> None:
        self._scopes.append(Scope(name))
        self._logger.debug("Pushed scope %r (depth %d)", name, len(self._scopes))

    def pop_scope(self) -> None:
        if len(self._scopes) == 1:
            raise LoxScopeError("Cannot pop the global scope")

        scope = self._scopes.pop()
        self._logger.debug("Popped scope %r (depth %d)", scope.name, len(self._scopes))

    def declare_variable(self, name: str) -> None:
        variables = self._scopes[-1].variables
        if name not in variables:
            variables[name] = NIL
            self._logger.debug("Declared %s in scope %r", name, self._scopes[-1].name)

    def assign_variable(self, name: str, value: LoxValue) -> None:
        self._scopes[-1].variables[name] = value

    def lookup(self, name: str) -> Optional[LoxValue]:
        for scope in reversed(self._scopes):
            if name in scope.variables:
                return scope.variables[name]

        return None

    def get_variable(self, name: str) -> LoxValue:
        value = self.lookup(name)
        if value is None:
            raise LoxNameError(name)

        return value

    def is_defined(self, name: str) -> bool:
        return self.lookup(name) is not None


class NullScope:
    """Context for evaluating a lone expression: nothing is stored, nothing is found."""

    def push_scope(self, name: str) -> None:
        pass

    def pop_scope(self) -> None:
        pass

    def declare_variable(self, name: str) -> None:
        pass

    def assign_variable(self, name: str, value: LoxValue) -> None:
        pass

    def get_variable(self, name: str) -> LoxValue:
        raise LoxNameError(name)

    def is_defined(self, name: str) -> bool:
        return False
