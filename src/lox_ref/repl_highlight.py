"""prompt_toolkit lexer for live Lox syntax highlighting in the REPL."""

from __future__ import annotations

from typing import Callable

from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .lexer_rd import Lexer as LoxTokenizer
from .token_types import KEYWORDS, TT

# Map highlight groups → prompt_toolkit style strings.
GROUP_STYLE = {
    "keyword": "bold ansicyan",
    "boolean": "ansicyan",
    "constant": "ansicyan",
    "number": "ansimagenta",
    "string": "ansigreen",
    "identifier": "",
    "operator": "",
    "punctuation": "",
}

# Token type → highlight group.
_TT_GROUP = {tt: "keyword" for tt in KEYWORDS.values()}
_TT_GROUP.update({
    TT.TRUE: "boolean",
    TT.FALSE: "boolean",
    TT.NIL: "constant",
    TT.NUMBER: "number",
    TT.STRING: "string",
    TT.IDENTIFIER: "identifier",
    TT.PLUS: "operator",
    TT.MINUS: "operator",
    TT.STAR: "operator",
    TT.SLASH: "operator",
    TT.EQUAL: "operator",
    TT.EQUAL_EQUAL: "operator",
    TT.BANG: "operator",
    TT.BANG_EQUAL: "operator",
    TT.LESS: "operator",
    TT.LESS_EQUAL: "operator",
    TT.GREATER: "operator",
    TT.GREATER_EQUAL: "operator",
    TT.LEFT_PAREN: "punctuation",
    TT.RIGHT_PAREN: "punctuation",
    TT.LEFT_BRACE: "punctuation",
    TT.RIGHT_BRACE: "punctuation",
    TT.COMMA: "punctuation",
    TT.DOT: "punctuation",
    TT.SEMICOLON: "punctuation",
})


def _ignore_error(_offset: int, _line: int, _message: str) -> None:
    pass


def highlight_line(text: str) -> StyleAndTextTuples:
    """Tokenize a single line and return styled fragments."""
    if not text:
        return [("", "")]

    # Lexical errors leave the offending text unstyled.
    tokens = LoxTokenizer(text, on_error=_ignore_error).tokenize()

    result: StyleAndTextTuples = []
    pos = 0

    for tok in tokens:
        if tok.type == TT.EOF or tok.start < pos:
            continue

        # Unstyled gap before token (whitespace, comments, bad characters).
        if tok.start > pos:
            result.append(("", text[pos:tok.start]))

        style = GROUP_STYLE.get(_TT_GROUP.get(tok.type, ""), "")
        result.append((style, text[tok.start:tok.end]))
        pos = tok.end

    # Trailing unstyled text.
    if pos < len(text):
        result.append(("", text[pos:]))

    return result if result else [("", text)]


class LoxLexer(Lexer):
    """prompt_toolkit Lexer that highlights Lox source using the RD lexer."""

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines
        cache: dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                if lineno < len(lines):
                    cache[lineno] = highlight_line(lines[lineno])
                else:
                    cache[lineno] = [("", "")]

            return cache[lineno]

        return get_line
