"""Interactive REPL for Lox, powered by prompt_toolkit."""

from __future__ import annotations

import logging
import os
import re
import sys
import traceback
from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.shortcuts import clear

from .lexer_rd import LexErrorLog, tokenize
from .parser_rd import ParseError
from .repl_highlight import LoxLexer
from .runner import repl_eval
from .runtime import LoxNil, LoxRuntimeError, ScopeStack
from .token_types import TT
from .utils import debug_py_trace_enabled, display_value

_logger = logging.getLogger("LoxRepl")

# Zero-width and invisible characters to strip from input.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\u00a0\r]")

# Slash commands: name => (description, argument_hint).
_SLASH_CMDS = {
    "/clear": ("Clear the terminal screen", ""),
    "/py-traceback": ("Toggle Python traceback on errors", "[on|off]"),
    "/reset": ("Reset the REPL environment", ""),
    "/scopes": ("Show the scope stack and its bindings", ""),
}

_INDENT = "  "


def brace_depth(text: str) -> int:
    """Return how many `{` in *text* are still open (never negative)."""
    depth = 0
    for tok in tokenize(text, on_error=lambda _offset, _line, _message: None):
        if tok.type == TT.LEFT_BRACE:
            depth += 1
        elif tok.type == TT.RIGHT_BRACE:
            depth = max(depth - 1, 0)

    return depth


class _SlashCompleter(Completer):
    """Autocomplete slash commands on the primary prompt."""

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        if not text.startswith("/"):
            return

        for cmd, (desc, hint) in _SLASH_CMDS.items():
            if cmd.startswith(text):
                yield Completion(
                    cmd,
                    start_position=-len(text),
                    display_meta=desc,
                )


def _print_scopes(scope: ScopeStack) -> None:
    for level, frame in enumerate(scope.scopes):
        bindings = ", ".join(f"{name} = {display_value(value)}" for name, value in frame.variables.items())
        print(f"{_INDENT * level}{frame.name}: {bindings or '(empty)'}")


def _handle_slash(line: str, scope_box: list[ScopeStack]) -> bool:
    """Handle slash commands. Returns True if the line was a command."""
    stripped = line.strip()
    if not stripped.startswith("/"):
        return False

    parts = stripped.split(None, 1)
    cmd = parts[0]
    arg = parts[1] if len(parts) > 1 else ""

    if cmd == "/clear":
        clear()
        return True

    if cmd == "/py-traceback":
        if arg.lower() in ("on", "1", "true", "yes"):
            os.environ["LOX_DEBUG_PY_TRACE"] = "1"
        elif arg.lower() in ("off", "0", "false", "no"):
            os.environ.pop("LOX_DEBUG_PY_TRACE", None)
        elif arg == "":
            # Toggle.
            if debug_py_trace_enabled():
                os.environ.pop("LOX_DEBUG_PY_TRACE", None)
            else:
                os.environ["LOX_DEBUG_PY_TRACE"] = "1"
        else:
            print("Usage: /py-traceback [on|off]", file=sys.stderr)
            return True

        state = "on" if debug_py_trace_enabled() else "off"
        print(f"Python traceback: {state}")
        return True

    if cmd == "/reset":
        scope_box[0] = ScopeStack()
        print("Environment reset.")
        return True

    if cmd == "/scopes":
        _print_scopes(scope_box[0])
        return True

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return True


def _normalize(text: str) -> str:
    """Strip invisible characters from input."""
    return _INVISIBLE_RE.sub("", text)


def repl() -> None:
    """Interactive read-eval-print loop with prompt_toolkit."""
    # Use a mutable box so /reset can swap the scope stack.
    scope_box: list[ScopeStack] = [ScopeStack()]

    history = InMemoryHistory()
    lexer = LoxLexer()

    bindings = KeyBindings()

    @bindings.add("backspace")
    def _backspace(event):
        buf = event.app.current_buffer
        buf.delete_before_cursor(1)
        if buf.text.startswith("/"):
            buf.start_completion()

    @bindings.add("enter")
    def _enter(event):
        buf = event.app.current_buffer
        depth = brace_depth(buf.text)

        # Balanced braces => accept; otherwise keep reading the block.
        if depth == 0:
            buf.validate_and_handle()
            return

        buf.insert_text("\n" + _INDENT * depth)

    session: PromptSession[str] = PromptSession(
        history=history,
        lexer=lexer,
        completer=_SlashCompleter(),
        complete_while_typing=True,
        key_bindings=bindings,
        multiline=True,
        prompt_continuation="... ",
    )

    print("lox repl - Ctrl-D to exit, / for commands")

    while True:
        try:
            text = session.prompt(">>> ")
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("KeyboardInterrupt")
            continue

        text = _normalize(text)
        if not text.strip():
            continue

        # Slash command?
        if _handle_slash(text, scope_box):
            continue

        try:
            result, stmt = repl_eval(text, scope_box[0], LexErrorLog())
        except (ParseError, LoxRuntimeError) as exc:
            _logger.debug("REPL entry failed: %s", type(exc).__name__)
            print(exc, file=sys.stderr)
            if debug_py_trace_enabled():
                print("\nPython traceback:", file=sys.stderr)
                print(
                    "".join(traceback.format_tb(exc.__traceback__)),
                    file=sys.stderr,
                    end="",
                )
            continue

        if not stmt or not isinstance(result, LoxNil):
            print(display_value(result))
