"""
stackc Error Hierarchy
======================

This module defines the exception hierarchy for the stackc compiler.
Every stage of the pipeline reports failures by raising one of these
exceptions; a single top-level handler in the CLI turns them into a
diagnostic and an exit status.

Exception Hierarchy
-------------------
StackCError (base)
├── LexError - character matches no lexical rule
│   └── NumberRangeError - integer literal wider than 64 bits
├── ParseError - grammar violation
│   └── UnexpectedTokenError - token not valid at this point
├── CodeGenError - code generation failures
│   ├── AssignTargetError - assignment target is not a variable
│   └── FrameCapacityError - too many variables for the fixed frame
└── EmulatorError - runtime trap while executing generated code

Error Message Format
--------------------
    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A position in source text for error reporting.

    Attributes:
        filename: Name of the source (or "<input>" for inline text)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Base Exception
# =============================================================================

class StackCError(Exception):
    """
    Base exception for all stackc errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred
        hint: A suggestion for fixing the error
        source_line: The source text of the offending line
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error with location, source context and hint.

        Example:
            <input>:1:5: error: unexpected token ';'
                1 + ;
                    ^
            hint: expected expression
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


# =============================================================================
# Lexical Errors
# =============================================================================

class LexError(StackCError):
    """
    A character in the source matches no lexical rule.

    Lexing stops at the first such character; there is no recovery.

    Attributes:
        char: The offending character
        position: Zero-based offset of the character in the source
    """

    def __init__(
        self,
        char: str,
        position: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        message: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        self.char = char
        self.position = position
        super().__init__(
            message or f"cannot tokenize '{char}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class NumberRangeError(LexError):
    """
    Integer literal too large for a 64-bit register.

    Attributes:
        text: Source text of the literal
    """

    def __init__(
        self,
        text: str,
        position: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.text = text
        super().__init__(
            text[0],
            position,
            location=location,
            source_line=source_line,
            message=f"integer literal {text} does not fit in 64 bits",
            hint="the largest literal is 18446744073709551615",
        )


# =============================================================================
# Parse Errors
# =============================================================================

class ParseError(StackCError):
    """Grammar violation detected by the parser."""
    pass


class UnexpectedTokenError(ParseError):
    """
    Token does not match any alternative of the current production.

    Raised for missing ')' or ';' as well, naming whatever token was
    found in its place.

    Attributes:
        found: Literal source text of the offending token
        expected: Description of what the parser wanted (optional)
    """

    def __init__(
        self,
        found: str,
        expected: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.found = found
        self.expected = expected

        shown = f"'{found}'" if found else "end of input"
        hint = f"expected {expected}" if expected else None

        super().__init__(
            f"unexpected token {shown}",
            location=location,
            hint=hint,
            source_line=source_line,
        )


# =============================================================================
# Code Generation Errors
# =============================================================================

class CodeGenError(StackCError):
    """Error during code generation."""
    pass


class AssignTargetError(CodeGenError):
    """
    Left side of an assignment is not a variable reference.

    The grammar accepts any expression before '=', so `(a+b)=1;` and
    `1=2;` parse fine and are only rejected here.
    """

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        super().__init__(
            "left value must be variable",
            location=location,
            hint="only a bare variable name can appear on the left of '='",
            source_line=source_line,
        )


class FrameCapacityError(CodeGenError):
    """
    More distinct variables than the fixed stack frame can hold.

    Attributes:
        name: The variable that did not fit
        capacity: Number of slots in the frame
    """

    def __init__(
        self,
        name: str,
        capacity: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.name = name
        self.capacity = capacity
        super().__init__(
            f"no stack slot left for '{name}' (frame holds {capacity} variables)",
            location=location,
            hint="use --dynamic-frame or raise STACKC_MAX_VARIABLES",
            source_line=source_line,
        )


# =============================================================================
# Emulator Errors
# =============================================================================

class EmulatorError(StackCError):
    """
    Runtime trap while executing generated assembly.

    Attributes:
        line_number: 1-indexed line of the assembly text being executed
    """

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"{message} (assembly line {line_number})"
        super().__init__(message)
