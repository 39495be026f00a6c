from __future__ import annotations

import logging
import math
import os
from decimal import ROUND_HALF_UP, Decimal, localcontext

from .types import LoxBool, LoxNil, LoxReal, LoxString, LoxValue

DISPLAY_SCALE = Decimal(1).scaleb(-10)

# Plain notation is used for magnitudes in [1e-3, 1e7), scientific otherwise.
_PLAIN_LOW = 1e-3
_PLAIN_HIGH = 1e7


def number_literal_text(value: float) -> str:
    """Canonical double text used for number literals: `1.0`, `12.5`, `1.0E7`, `1.0E-4`."""
    if math.isnan(value):
        return "NaN"

    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"

    if value == 0:
        return "-0.0" if math.copysign(1.0, value) < 0 else "0.0"

    if _PLAIN_LOW <= abs(value) < _PLAIN_HIGH:
        return repr(value)

    # Shortest round-trip digits, re-laid out as d.dddE<exp>.
    sign, digits, exponent = Decimal(repr(value)).normalize().as_tuple()
    text = "".join(str(d) for d in digits)
    exp10 = len(text) + exponent - 1
    mantissa = text[0] + "." + (text[1:] or "0")

    return f"{'-' if sign else ''}{mantissa}E{exp10}"


def format_real(value: float) -> str:
    """Display form of a real: at most 10 fractional digits, half-up, trailing zeros stripped."""
    if math.isnan(value):
        return "NaN"

    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"

    # Doubles carry up to ~330 significant decimal digits once scaled.
    with localcontext() as ctx:
        ctx.prec = 400
        rounded = Decimal(value).quantize(DISPLAY_SCALE, rounding=ROUND_HALF_UP)
        if rounded == 0:
            return "0"

        return format(rounded.normalize(), "f")


def display_value(value: LoxValue) -> str:
    """Text written by `print` and by the `evaluate` command."""
    match value:
        case LoxReal(value=v):
            return format_real(v)
        case LoxString(value=s):
            return s
        case LoxBool(value=b):
            return "true" if b else "false"
        case LoxNil():
            return "nil"
        case _:
            raise TypeError(f"Unexpected value type {type(value).__name__}")


def literal_text(value: LoxValue) -> str:
    """Text form of a literal inside a parsed expression, e.g. `(+ 1.0 "a")` renders `a`."""
    if isinstance(value, LoxReal):
        return number_literal_text(value.value)

    return display_value(value)


def debug_py_trace_enabled() -> bool:
    return bool(os.environ.get("LOX_DEBUG_PY_TRACE"))


def log_level_from_env(default: int = logging.WARNING) -> int:
    """Resolve LOX_LOG_LEVEL (a level name or number) to a logging level."""
    raw = os.environ.get("LOX_LOG_LEVEL", "").strip()
    if not raw:
        return default

    return parse_log_level(raw, default)


def parse_log_level(raw: str, default: int = logging.WARNING) -> int:
    if raw.isdigit():
        return int(raw)

    level = logging.getLevelName(raw.upper())
    if isinstance(level, int):
        return level

    return default
