"""
stackc Lexer (Tokenizer)
========================

Converts source text into an ordered token sequence for the parser.

Token Categories
----------------
- Numbers: maximal runs of decimal digits, at most 2**64 - 1
- Identifiers: letter or underscore, then letters, digits, underscores
- Keyword: return
- Symbols: + - * / ( ) ; =
- End of input: always the last token

The keyword is only recognized as a whole word: `returnx` is a single
identifier because identifiers are scanned with maximal munch before
the keyword table is consulted.

Example Usage
-------------
>>> from stackc.lexer import Lexer
>>> for token in Lexer("x = 1;").tokenize():
...     print(token)
Token(IDENTIFIER, 'x', 1:1)
Token(SYMBOL, '=', 1:3)
Token(NUMBER, 1, 1:5)
Token(SYMBOL, ';', 1:6)
Token(EOF, 1:7)
"""

import logging
import string
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional

from stackc.errors import LexError, NumberRangeError, SourceLocation

logger = logging.getLogger(__name__)


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Token kinds of the source language."""
    NUMBER = auto()         # Integer literal
    SYMBOL = auto()         # One of + - * / ( ) ; =
    IDENTIFIER = auto()     # Variable name
    RETURN = auto()         # return
    EOF = auto()            # End of input


# Single-character symbols, recognized eagerly
SYMBOLS = frozenset("+-*/();=")

KEYWORDS: dict[str, TokenType] = {
    "return": TokenType.RETURN,
}

# Largest literal a 64-bit register can hold
MAX_LITERAL = (1 << 64) - 1


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single token.

    Attributes:
        type: The TokenType classification
        value: int for numbers, the character for symbols, the name for
            identifiers, None otherwise
        text: Literal source text of the token (empty for EOF)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        filename: Name of the source
    """
    type: TokenType
    value: str | int | None
    text: str
    line: int = 1
    column: int = 1
    filename: str = "<input>"

    def __repr__(self) -> str:
        if self.value is not None:
            if isinstance(self.value, int):
                return f"Token({self.type.name}, {self.value}, {self.line}:{self.column})"
            return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    def is_symbol(self, char: str) -> bool:
        """Return True if this token is the given symbol."""
        return self.type == TokenType.SYMBOL and self.value == char


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes source text.

    The lexer holds no state beyond the scan of one source string, so a
    new instance is created per compilation.

    Usage:
        tokens = list(Lexer(source, filename).tokenize())

    Attributes:
        source: The source text being tokenized
        filename: Name of the source (for error reporting)
    """

    IDENT_START = string.ascii_letters + "_"
    IDENT_CHARS = string.ascii_letters + string.digits + "_"

    def __init__(self, source: str, filename: str = "<input>"):
        self.source = source
        self.filename = filename

        self._pos = 0
        self._line = 1
        self._column = 1
        self._line_start_pos = 0

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens from the source.

        Yields:
            Token objects, ending with an EOF token

        Raises:
            LexError: On the first character that matches no rule
        """
        while True:
            self._skip_whitespace()
            if self._at_end():
                break
            yield self._scan_token()

        yield Token(
            TokenType.EOF, None, "",
            self._line, self._column, self.filename,
        )

    # =========================================================================
    # Character Access
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        """Character at current position + offset, or "" past the end."""
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _advance(self) -> str:
        """Consume the current character, tracking line and column."""
        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
            self._line_start_pos = self._pos
        else:
            self._column += 1

        return char

    def _current_line(self) -> str:
        line_end = self.source.find("\n", self._line_start_pos)
        if line_end == -1:
            line_end = len(self.source)
        return self.source[self._line_start_pos:line_end]

    # =========================================================================
    # Scanning
    # =========================================================================

    def _skip_whitespace(self) -> None:
        while not self._at_end() and self._peek().isspace():
            self._advance()

    def _scan_token(self) -> Token:
        start_line = self._line
        start_column = self._column
        start_pos = self._pos

        char = self._peek()

        if char in SYMBOLS:
            self._advance()
            return self._make_token(TokenType.SYMBOL, char, char, start_line, start_column)

        if char in self.IDENT_START:
            return self._scan_identifier(start_pos, start_line, start_column)

        if char in string.digits:
            return self._scan_number(start_pos, start_line, start_column)

        raise LexError(
            char,
            self._pos,
            location=SourceLocation(self.filename, self._line, self._column),
            source_line=self._current_line(),
        )

    def _scan_identifier(self, start_pos: int, start_line: int, start_column: int) -> Token:
        """Scan an identifier or keyword (maximal munch)."""
        while self._peek() and self._peek() in self.IDENT_CHARS:
            self._advance()

        name = self.source[start_pos:self._pos]

        if name in KEYWORDS:
            return self._make_token(KEYWORDS[name], None, name, start_line, start_column)

        return self._make_token(TokenType.IDENTIFIER, name, name, start_line, start_column)

    def _scan_number(self, start_pos: int, start_line: int, start_column: int) -> Token:
        while self._peek() and self._peek() in string.digits:
            self._advance()

        text = self.source[start_pos:self._pos]
        digits = text.lstrip("0") or "0"
        if len(digits) > len(str(MAX_LITERAL)) or int(digits) > MAX_LITERAL:
            raise NumberRangeError(
                text,
                start_pos,
                location=SourceLocation(self.filename, start_line, start_column),
                source_line=self._current_line(),
            )
        return self._make_token(TokenType.NUMBER, int(digits), text, start_line, start_column)

    def _make_token(
        self,
        token_type: TokenType,
        value: str | int | None,
        text: str,
        line: int,
        column: int,
    ) -> Token:
        return Token(token_type, value, text, line, column, self.filename)


# =============================================================================
# Convenience Functions
# =============================================================================

def tokenize(source: str, filename: str = "<input>") -> list[Token]:
    """
    Tokenize source text into a list ending with EOF.

    Raises:
        LexError: If the source contains a character no rule accepts
    """
    tokens = list(Lexer(source, filename).tokenize())
    logger.debug(f"Lexed {len(tokens)} tokens from {filename}")
    return tokens
