"""
stackc Recursive Descent Parser
===============================

Builds the statement trees of a program from the lexer's tokens.

Grammar (EBNF)
--------------
program     ::= statement* EOF
statement   ::= 'return' assign ';'
              | assign ';'
assign      ::= additive ('=' assign)?
additive    ::= multiplicative (('+' | '-') multiplicative)*
multiplicative ::= primary (('*' | '/') primary)*
primary     ::= NUMBER | IDENTIFIER | '(' assign ')'

Precedence (lowest to highest)
------------------------------
1. assignment      =      (right-associative)
2. additive        + -    (left-associative)
3. multiplicative  * /    (left-associative)
4. primary

The left operand of '=' may be any expression here; whether it is an
assignable variable is checked during code generation.

Example Usage
-------------
>>> from stackc.parser import parse_source
>>> program = parse_source("a = b = 1;")
>>> program.statements[0]
BinaryOp(operator=<BinaryOperator.ASSIGN: '='>, ...)
"""

import logging
from typing import Callable, Optional

from stackc.errors import SourceLocation, UnexpectedTokenError
from stackc.lexer import Lexer, Token, TokenType
from stackc.ast import (
    ASTNode,
    ProgramNode,
    ReturnStatement,
    Expression,
    BinaryOp,
    BinaryOperator,
    VariableRef,
    NumberLiteral,
)

logger = logging.getLogger(__name__)


ADDITIVE_OPERATORS = {
    "+": BinaryOperator.ADD,
    "-": BinaryOperator.SUBTRACT,
}

MULTIPLICATIVE_OPERATORS = {
    "*": BinaryOperator.MULTIPLY,
    "/": BinaryOperator.DIVIDE,
}


class Parser:
    """
    Recursive descent parser.

    Parsing stops at the first grammar violation: there is no error
    recovery and no multi-error reporting.

    Attributes:
        tokens: Token list ending with EOF
        filename: Source filename for error reporting
    """

    def __init__(
        self,
        tokens: list[Token],
        filename: str = "<input>",
        source_lines: Optional[list[str]] = None,
    ):
        """
        Initialize the parser.

        Args:
            tokens: Tokens from the lexer, ending with EOF
            filename: Source filename for error messages
            source_lines: Original source lines for error context
        """
        self.tokens = tokens
        self.filename = filename
        self.source_lines = source_lines or []
        self._pos = 0

    def parse(self) -> ProgramNode:
        """
        Parse the token stream into a program.

        Raises:
            UnexpectedTokenError: On the first grammar violation
        """
        statements = []
        while not self._at_end():
            statements.append(self._parse_statement())

        logger.debug(f"Parsed {len(statements)} statements")
        return ProgramNode(
            location=SourceLocation(self.filename, 1, 1),
            statements=statements,
        )

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._peek().type == TokenType.EOF

    def _peek(self) -> Token:
        if self._pos >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[self._pos]

    def _advance(self) -> Token:
        token = self._peek()
        if not self._at_end():
            self._pos += 1
        return token

    def _match_symbol(self, char: str) -> Optional[Token]:
        """Consume the current token if it is the given symbol."""
        if self._peek().is_symbol(char):
            return self._advance()
        return None

    def _expect_symbol(self, char: str) -> Token:
        """
        Consume the given symbol or fail naming the token found instead.

        Raises:
            UnexpectedTokenError: If the current token is something else
        """
        token = self._match_symbol(char)
        if token is None:
            raise self._unexpected(self._peek(), f"'{char}'")
        return token

    def _unexpected(self, token: Token, expected: str) -> UnexpectedTokenError:
        return UnexpectedTokenError(
            token.text,
            expected=expected,
            location=token.location,
            source_line=self._get_source_line(token.line),
        )

    def _get_source_line(self, line: int) -> Optional[str]:
        if 0 < line <= len(self.source_lines):
            return self.source_lines[line - 1]
        return None

    # =========================================================================
    # Statement Parsing
    # =========================================================================

    def _parse_statement(self) -> ASTNode:
        token = self._peek()

        if token.type == TokenType.RETURN:
            self._advance()
            value = self._parse_assignment()
            self._expect_symbol(";")
            return ReturnStatement(location=token.location, value=value)

        expr = self._parse_assignment()
        self._expect_symbol(";")
        return expr

    # =========================================================================
    # Expression Parsing (Operator Precedence)
    # =========================================================================

    def _parse_assignment(self) -> Expression:
        """Parse assignment (right-associative)."""
        expr = self._parse_additive()

        if self._match_symbol("="):
            value = self._parse_assignment()
            return BinaryOp(
                location=expr.location,
                operator=BinaryOperator.ASSIGN,
                left=expr,
                right=value,
            )

        return expr

    def _parse_additive(self) -> Expression:
        return self._parse_binary(self._parse_multiplicative, ADDITIVE_OPERATORS)

    def _parse_multiplicative(self) -> Expression:
        return self._parse_binary(self._parse_primary, MULTIPLICATIVE_OPERATORS)

    def _parse_binary(
        self,
        operand_parser: Callable[[], Expression],
        operators: dict[str, BinaryOperator],
    ) -> Expression:
        """
        Parse a left-associative chain of binary operators.

        Args:
            operand_parser: Parses one operand (the next precedence level)
            operators: Symbol characters accepted at this level
        """
        expr = operand_parser()

        while self._peek().type == TokenType.SYMBOL and self._peek().value in operators:
            op_token = self._advance()
            right = operand_parser()
            expr = BinaryOp(
                location=expr.location,
                operator=operators[op_token.value],
                left=expr,
                right=right,
            )

        return expr

    def _parse_primary(self) -> Expression:
        """Parse a number, identifier or parenthesized expression."""
        token = self._peek()

        if token.type == TokenType.NUMBER:
            self._advance()
            return NumberLiteral(location=token.location, value=token.value)

        if token.type == TokenType.IDENTIFIER:
            self._advance()
            return VariableRef(location=token.location, name=token.value)

        if token.is_symbol("("):
            self._advance()
            expr = self._parse_assignment()
            self._expect_symbol(")")
            return expr

        raise self._unexpected(token, "expression")


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_source(source: str, filename: str = "<input>") -> ProgramNode:
    """
    Lex and parse source text into a program.

    Raises:
        LexError: If the source cannot be tokenized
        UnexpectedTokenError: If parsing fails
    """
    tokens = list(Lexer(source, filename).tokenize())
    return Parser(tokens, filename, source.splitlines()).parse()
