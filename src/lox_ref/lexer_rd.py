"""
Lexer for the Lox reference interpreter

Tokenizes source code into a lazily produced stream of tokens.

Features:
- Pull-based: tokens are scanned one at a time as the parser asks for them
- Line tracking for error messages
- Error recovery: bad characters are reported and skipped, scanning goes on
"""

import logging
import sys
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, TextIO

from .token_types import KEYWORDS, TT, Tok
from .utils import number_literal_text

ErrorCallback = Callable[[int, int, str], None]

_logger = logging.getLogger("LoxLexer")

# ============================================================================
# Error reporting
# ============================================================================

@dataclass(frozen=True)
class LexError:
    """One lexical error; scanning continues past it"""

    message: str
    offset: int
    line: int

    def __str__(self) -> str:
        return f"[line {self.line}] Error: {self.message}"


class LexErrorLog:
    """
    Error callback that keeps every lexical error of a pass.

    Each error is echoed to ``stream`` as it is found, so a caller can
    finish its work and signal failure once at the end.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream
        self.errors: List[LexError] = []

    def __call__(self, offset: int, line: int, message: str) -> None:
        err = LexError(message, offset, line)
        self.errors.append(err)
        print(err, file=self.stream or sys.stderr)

    def __bool__(self) -> bool:
        return bool(self.errors)

# ============================================================================
# Lexer Implementation
# ============================================================================

class Lexer:
    """
    Lox lexer.

    Errors go to ``on_error(offset, line, message)`` and scanning continues
    past the offending input. Without a callback errors are logged as
    warnings.
    """

    # Operator mapping: longest matches first to handle prefixes correctly
    OPERATORS = [
        # Two-character operators
        ('==', TT.EQUAL_EQUAL),
        ('!=', TT.BANG_EQUAL),
        ('<=', TT.LESS_EQUAL),
        ('>=', TT.GREATER_EQUAL),

        # Single-character operators
        ('=', TT.EQUAL),
        ('!', TT.BANG),
        ('<', TT.LESS),
        ('>', TT.GREATER),
        ('(', TT.LEFT_PAREN),
        (')', TT.RIGHT_PAREN),
        ('{', TT.LEFT_BRACE),
        ('}', TT.RIGHT_BRACE),
        (',', TT.COMMA),
        ('.', TT.DOT),
        ('-', TT.MINUS),
        ('+', TT.PLUS),
        (';', TT.SEMICOLON),
        ('*', TT.STAR),
        ('/', TT.SLASH),
    ]

    def __init__(self, source: str, on_error: Optional[ErrorCallback] = None):
        self.source = source
        self.pos = 0
        self.line = 1
        self.on_error = on_error
        self._tokens: Optional[Iterator[Tok]] = None

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def scan(self) -> Iterator[Tok]:
        """Yield tokens one at a time, ending with EOF"""
        while True:
            self.skip_whitespace()

            if self.pos >= len(self.source):
                yield Tok(TT.EOF, '', None, self.pos, self.pos + 1, self.line)
                return

            tok = self.scan_token()
            if tok is not None:
                yield tok

    def next_token(self) -> Tok:
        """Pull a single token; repeated calls after EOF raise StopIteration"""
        if self._tokens is None:
            self._tokens = self.scan()
        return next(self._tokens)

    def tokenize(self) -> List[Tok]:
        """Tokenize entire source, return token list"""
        return list(self.scan())

    def scan_token(self) -> Optional[Tok]:
        """Scan next token, or return None after reporting an error"""
        ch = self.peek()

        # String literals
        if ch == '"':
            return self.scan_string()

        # Numbers
        if self.is_digit(ch):
            return self.scan_number()

        # Identifiers and keywords
        if self.is_ident_start(ch):
            return self.scan_identifier()

        # Operators and punctuation
        return self.scan_operator()

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_string(self) -> Optional[Tok]:
        """Scan string literal: "..." (may span lines, no escapes)"""
        start = self.pos
        start_line = self.line
        self.advance()  # opening quote

        while self.pos < len(self.source) and self.peek() != '"':
            if self.peek() == '\n':
                self.line += 1
            self.advance()

        if self.pos >= len(self.source):
            self.error("Unterminated string.", self.pos)
            return None

        self.advance()  # closing quote
        lexeme = self.source[start:self.pos]
        return Tok(TT.STRING, lexeme, lexeme[1:-1], start, self.pos, start_line)

    def scan_number(self) -> Tok:
        """Scan number literal: digits, optionally '.' followed by digits"""
        start = self.pos

        # Integer part
        while self.is_digit(self.peek()):
            self.advance()

        # Decimal part; a trailing dot stays a separate DOT token
        if self.peek() == '.' and self.is_digit(self.peek(1)):
            self.advance()
            while self.is_digit(self.peek()):
                self.advance()

        lexeme = self.source[start:self.pos]
        return Tok(TT.NUMBER, lexeme, number_literal_text(float(lexeme)), start, self.pos, self.line)

    def scan_identifier(self) -> Tok:
        """Scan identifier or keyword"""
        start = self.pos

        while self.is_ident_char(self.peek()):
            self.advance()

        lexeme = self.source[start:self.pos]

        # Check if keyword
        token_type = KEYWORDS.get(lexeme, TT.IDENTIFIER)
        return Tok(token_type, lexeme, None, start, self.pos, self.line)

    def scan_operator(self) -> Optional[Tok]:
        """Scan operators and punctuation"""
        for op_str, op_type in self.OPERATORS:
            if self.source.startswith(op_str, self.pos):
                start = self.pos
                self.advance(len(op_str))
                return Tok(op_type, op_str, None, start, self.pos, self.line)

        ch = self.advance()
        self.error(f"Unexpected character: {ch}", self.pos - 1)
        return None

    # ========================================================================
    # Utilities
    # ========================================================================

    def error(self, message: str, offset: int) -> None:
        if self.on_error is None:
            _logger.warning("[line %d] Error: %s", self.line, message)
            return

        self.on_error(offset, self.line, message)

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def advance(self, n: int = 1) -> str:
        """Consume n characters and return them as a string"""
        result = self.source[self.pos:self.pos + n]
        self.pos += n
        return result

    @staticmethod
    def is_digit(ch: str) -> bool:
        return '0' <= ch <= '9'

    @staticmethod
    def is_ident_start(ch: str) -> bool:
        return ch == '_' or ('a' <= ch <= 'z') or ('A' <= ch <= 'Z')

    @classmethod
    def is_ident_char(cls, ch: str) -> bool:
        return cls.is_ident_start(ch) or ('0' <= ch <= '9')

    def skip_whitespace(self) -> None:
        """Skip whitespace and // comments, counting newlines"""
        while self.pos < len(self.source):
            ch = self.peek()
            if ch.isspace():
                if ch == '\n':
                    self.line += 1
                self.advance()
            elif ch == '/' and self.peek(1) == '/':
                self.skip_comment()
            else:
                break

    def skip_comment(self) -> None:
        """Skip comment until end of line"""
        while self.pos < len(self.source) and self.peek() != '\n':
            self.advance()


class TokenStream:
    """Single-token lookahead over a token iterator."""

    def __init__(self, tokens: Iterator[Tok]):
        self._tokens = iter(tokens)
        self._peeked: Optional[Tok] = None

    def peek(self) -> Tok:
        """Look at the next token without consuming it"""
        if self._peeked is None:
            self._peeked = next(self._tokens)
        return self._peeked

    def advance(self) -> Tok:
        """Consume and return the next token"""
        if self._peeked is not None:
            tok, self._peeked = self._peeked, None
            return tok
        return next(self._tokens)

    def has_next(self) -> bool:
        if self._peeked is not None:
            return True
        try:
            self._peeked = next(self._tokens)
        except StopIteration:
            return False
        return True

    def __iter__(self) -> Iterator[Tok]:
        return self

    def __next__(self) -> Tok:
        return self.advance()


# ============================================================================
# Convenience
# ============================================================================

def tokenize(source: str, on_error: Optional[ErrorCallback] = None) -> List[Tok]:
    """Convenience function to tokenize source"""
    lexer = Lexer(source, on_error=on_error)
    return lexer.tokenize()


def token_stream(source: str, on_error: Optional[ErrorCallback] = None) -> TokenStream:
    """Lazy token stream over source, ready for the parsers"""
    return TokenStream(Lexer(source, on_error=on_error).scan())
