"""
stackc Compiler Main Module
===========================

Orchestrates the compilation pipeline:

    Source → Lex → Parse → Generate → Assembly

Usage
-----
Command line:
    $ stackcc 'x = 2*3+4; return x;'

Programmatic:
    >>> from stackc import compile_source
    >>> asm = compile_source("return 42;")

Error Handling
--------------
Each stage raises a StackCError subclass on its first failure and the
pipeline stops there. Nothing is written anywhere by the compiler itself;
the caller decides what to do with the assembly or the error.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from stackc.ast import ProgramNode
from stackc.codegen import CodeGenerator
from stackc.config import CompilerOptions
from stackc.lexer import Lexer, Token
from stackc.parser import Parser

logger = logging.getLogger(__name__)


@dataclass
class CompilerResult:
    """
    Result of a successful compilation.

    Attributes:
        filename: Source name used in diagnostics
        assembly: Generated assembly text
        tokens: Token stream produced by the lexer
        ast: The parsed program
        variables: Variable name -> frame offset, in first-use order
    """
    filename: str = "<input>"
    assembly: str = ""
    tokens: list[Token] = field(default_factory=list)
    ast: Optional[ProgramNode] = None
    variables: dict[str, int] = field(default_factory=dict)

    @property
    def token_count(self) -> int:
        return len(self.tokens)


class Compiler:
    """
    Runs the lex/parse/generate pipeline.

    Example:
        result = Compiler().compile("x = 1; return x;")
        print(result.assembly)

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()

    def tokenize(self, source: str) -> list[Token]:
        """
        Raises:
            LexError: If the source cannot be tokenized
        """
        tokens = list(Lexer(source, self.options.filename).tokenize())
        logger.debug(f"Lexed {len(tokens)} tokens")
        return tokens

    def parse(self, source: str, tokens: Optional[list[Token]] = None) -> ProgramNode:
        """
        Raises:
            LexError: If the source cannot be tokenized
            UnexpectedTokenError: If parsing fails
        """
        if tokens is None:
            tokens = self.tokenize(source)
        parser = Parser(tokens, self.options.filename, source.splitlines())
        return parser.parse()

    def compile(self, source: str) -> CompilerResult:
        """
        Compile source text to assembly.

        Raises:
            StackCError: From whichever stage fails first
        """
        result = CompilerResult(filename=self.options.filename)

        result.tokens = self.tokenize(source)
        result.ast = self.parse(source, result.tokens)

        generator = CodeGenerator(self.options, source.splitlines())
        result.assembly = generator.generate(result.ast)
        result.variables = generator.symbols.offsets()

        logger.debug(
            f"Compiled {self.options.filename}: "
            f"{len(result.ast.statements)} statements, {len(result.variables)} variables"
        )
        return result


# =============================================================================
# Convenience Functions
# =============================================================================

def compile_source(source: str, options: Optional[CompilerOptions] = None) -> str:
    """
    Compile source text and return the assembly.

    Raises:
        StackCError: If compilation fails
    """
    return Compiler(options).compile(source).assembly
