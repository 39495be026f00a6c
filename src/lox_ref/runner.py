from __future__ import annotations

import logging
import sys
import traceback
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from .evaluator import eval_expr, eval_node, run_program
from .lexer_rd import ErrorCallback, LexErrorLog, Lexer
from .parser_rd import ParseError, iter_statements, parse_expression, parse_source
from .runtime import Context, LoxRuntimeError, LoxValue, NullScope, ScopeStack
from .tree import format_node, program_tree
from .utils import debug_py_trace_enabled, display_value, log_level_from_env, parse_log_level

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_DATA_ERROR = 65
EXIT_RUNTIME_ERROR = 70

USAGE = "Usage: lox-ref [--log-level=LEVEL] [--py-traceback] <tokenize|parse|evaluate|run|tree> <filename>\n" \
        "       lox-ref repl"

_logger = logging.getLogger("LoxRunner")


def _report(exc: Exception, show_trace: bool) -> None:
    print(exc, file=sys.stderr)
    if show_trace:
        print("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)), file=sys.stderr, end="")

# ---------------- Commands ----------------

def _finish(lex_errors: LexErrorLog) -> int:
    """Lexical errors were already echoed; they only decide the exit code."""
    return EXIT_DATA_ERROR if lex_errors else EXIT_OK

def cmd_tokenize(source: str, show_trace: bool = False) -> int:
    """Print every token; lexical errors are all reported before failing."""
    lex_errors = LexErrorLog()
    for tok in Lexer(source, on_error=lex_errors).scan():
        print(tok.render())

    return _finish(lex_errors)

def cmd_parse(source: str, show_trace: bool = False) -> int:
    lex_errors = LexErrorLog()
    try:
        expr = parse_expression(source, lex_errors)
    except ParseError as exc:
        _report(exc, show_trace)
        return EXIT_DATA_ERROR

    print(format_node(expr))
    return _finish(lex_errors)

def cmd_evaluate(source: str, show_trace: bool = False) -> int:
    lex_errors = LexErrorLog()
    try:
        expr = parse_expression(source, lex_errors)
        value = eval_expr(expr, NullScope())
    except ParseError as exc:
        _report(exc, show_trace)
        return EXIT_DATA_ERROR
    except LoxRuntimeError as exc:
        _report(exc, show_trace)
        return EXIT_RUNTIME_ERROR

    print(display_value(value))
    return _finish(lex_errors)

def cmd_run(source: str, show_trace: bool = False) -> int:
    lex_errors = LexErrorLog()
    try:
        run_program(iter_statements(source, lex_errors), ScopeStack())
    except ParseError as exc:
        _report(exc, show_trace)
        return EXIT_DATA_ERROR
    except LoxRuntimeError as exc:
        _report(exc, show_trace)
        return EXIT_RUNTIME_ERROR

    return _finish(lex_errors)

def cmd_tree(source: str, show_trace: bool = False) -> int:
    lex_errors = LexErrorLog()
    try:
        statements = parse_source(source, lex_errors)
    except ParseError as exc:
        _report(exc, show_trace)
        return EXIT_DATA_ERROR

    print(program_tree(statements).pretty(), end="")
    return _finish(lex_errors)

COMMANDS: Dict[str, Callable[[str, bool], int]] = {
    "tokenize": cmd_tokenize,
    "parse": cmd_parse,
    "evaluate": cmd_evaluate,
    "run": cmd_run,
    "tree": cmd_tree,
}

# ---------------- REPL support ----------------

def is_statement_input(text: str) -> bool:
    """REPL input ending in ';' or '}' is run as statements, anything else as an expression."""
    stripped = text.rstrip()
    return stripped.endswith(";") or stripped.endswith("}")

def repl_eval(text: str, scope: Context, on_error: Optional[ErrorCallback] = None) -> Tuple[LoxValue, bool]:
    """Evaluate one REPL entry; the flag tells whether it ran as statements."""
    if is_statement_input(text):
        return run_program(iter_statements(text, on_error), scope), True

    return eval_node(parse_expression(text, on_error), scope), False

# ---------------- CLI ----------------

def _load_source(arg: Optional[str]) -> str:
    """
    Resolve CLI input into source text.
    - None or "-" => read stdin.
    - Otherwise read the named file.
    """

    if arg is None or arg == "-":
        return sys.stdin.read()

    return Path(arg).read_text(encoding="utf-8")

def configure_logging(level: int) -> None:
    logging.basicConfig(level=level, stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")

def main(argv: Optional[List[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    log_level = log_level_from_env()
    show_trace = debug_py_trace_enabled()
    positional: List[str] = []

    for token in args:
        if token.startswith("--log-level="):
            log_level = parse_log_level(token.split("=", 1)[1], log_level)
            continue

        if token == "--py-traceback":
            show_trace = True
            continue

        positional.append(token)

    configure_logging(log_level)

    if positional[:1] == ["repl"]:
        from .repl import repl
        repl()
        return EXIT_OK

    if len(positional) != 2:
        print(USAGE, file=sys.stderr)
        return EXIT_USAGE

    command, filename = positional
    handler = COMMANDS.get(command)
    if handler is None:
        print(f"Unknown command: {command}", file=sys.stderr)
        return EXIT_USAGE

    try:
        source = _load_source(filename)
    except OSError as exc:
        print(f"Cannot read {filename}: {exc}", file=sys.stderr)
        return EXIT_USAGE

    _logger.debug("Running %s on %s (%d chars)", command, filename, len(source))
    return handler(source, show_trace)

def cli() -> None:
    sys.exit(main())

if __name__ == "__main__":
    cli()
