from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from typing_extensions import TypeAlias

# ---------- Value Model ----------

@dataclass(frozen=True)
class LoxString:
    value: str
    def __repr__(self) -> str:
        return f'"{self.value}"'

@dataclass(frozen=True, eq=False)
class LoxReal:
    """Equality compares bit patterns: NaN equals NaN and 0 differs from -0."""
    value: float
    def __repr__(self) -> str:
        v = self.value
        return str(int(v)) if v.is_integer() else str(v)
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LoxReal):
            return NotImplemented
        return _double_bits(self.value) == _double_bits(other.value)
    def __hash__(self) -> int:
        return hash(_double_bits(self.value))

def _double_bits(v: float) -> int:
    # every NaN payload collapses to the canonical quiet NaN
    if math.isnan(v):
        return 0x7FF8000000000000
    return struct.unpack("<q", struct.pack("<d", v))[0]

@dataclass(frozen=True)
class LoxBool:
    value: bool
    def __repr__(self) -> str:
        return "true" if self.value else "false"

@dataclass(frozen=True)
class LoxNil:
    def __repr__(self) -> str:
        return "nil"

NIL = LoxNil()
TRUE = LoxBool(True)
FALSE = LoxBool(False)

LoxValue: TypeAlias = LoxString | LoxReal | LoxBool | LoxNil


def lox_bool(flag: bool) -> LoxBool:
    return TRUE if flag else FALSE

# ---------- Exceptions ----------

class LoxRuntimeError(Exception):
    """Evaluation failure; aborts the statement or expression being run."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

class LoxTypeError(LoxRuntimeError):
    pass

class LoxNameError(LoxRuntimeError):
    def __init__(self, name: str):
        super().__init__(f"Variable {name} is not defined")
        self.name = name

class LoxScopeError(LoxRuntimeError):
    pass
