# =============================================================================
# test_parser.py - Parser Unit Tests
# =============================================================================
# Tests for the recursive descent parser: precedence, associativity,
# statements and error reporting.
# =============================================================================

import pytest
from stackc.parser import Parser, parse_source
from stackc.lexer import tokenize
from stackc.ast import (
    ASTPrinter,
    ASTVisitor,
    BinaryOp,
    BinaryOperator,
    NumberLiteral,
    ProgramNode,
    ReturnStatement,
    VariableRef,
    expression_to_source,
)
from stackc.errors import ParseError, UnexpectedTokenError, LexError


# =============================================================================
# Helper Functions
# =============================================================================

def parse_one(source: str):
    """Parse source holding a single statement and return that statement."""
    program = parse_source(source)
    assert len(program.statements) == 1
    return program.statements[0]


def shape(source: str) -> str:
    """Fully parenthesized rendering of a single statement."""
    return expression_to_source(parse_one(source))


def num(value: int) -> NumberLiteral:
    return NumberLiteral(value=value)


def var(name: str) -> VariableRef:
    return VariableRef(name=name)


# =============================================================================
# Program Structure
# =============================================================================

class TestProgram:
    """Test statement sequencing."""

    def test_empty_program(self):
        program = parse_source("")
        assert isinstance(program, ProgramNode)
        assert program.statements == []

    def test_statements_in_source_order(self):
        program = parse_source("a = 1; b = 2; a + b;")
        assert [expression_to_source(s) for s in program.statements] == [
            "(a = 1)",
            "(b = 2)",
            "(a + b)",
        ]

    def test_bare_expression_statement(self):
        assert parse_one("42;") == num(42)

    def test_parser_accepts_token_list(self):
        tokens = tokenize("x;")
        program = Parser(tokens).parse()
        assert program.statements == [var("x")]


# =============================================================================
# Precedence and Associativity
# =============================================================================

class TestPrecedence:
    """Test operator precedence and associativity."""

    def test_multiplication_binds_tighter(self):
        """1+2*3 is Add(1, Mul(2, 3))."""
        assert parse_one("1+2*3;") == BinaryOp(
            operator=BinaryOperator.ADD,
            left=num(1),
            right=BinaryOp(operator=BinaryOperator.MULTIPLY, left=num(2), right=num(3)),
        )

    def test_multiplication_on_the_left(self):
        assert shape("2*3+4;") == "((2 * 3) + 4)"

    def test_division_before_subtraction(self):
        assert shape("8-6/2;") == "(8 - (6 / 2))"

    def test_subtraction_left_associative(self):
        assert shape("10-3-2;") == "((10 - 3) - 2)"

    def test_division_left_associative(self):
        assert shape("100/10/5;") == "((100 / 10) / 5)"

    def test_mixed_additive_chain(self):
        assert shape("1+2-3+4;") == "(((1 + 2) - 3) + 4)"

    def test_parentheses_override_precedence(self):
        assert shape("(1+2)*3;") == "((1 + 2) * 3)"

    def test_nested_parentheses(self):
        assert shape("((((7))));") == "7"

    def test_assignment_right_associative(self):
        """a=b=1 is Assign(a, Assign(b, 1))."""
        assert parse_one("a=b=1;") == BinaryOp(
            operator=BinaryOperator.ASSIGN,
            left=var("a"),
            right=BinaryOp(operator=BinaryOperator.ASSIGN, left=var("b"), right=num(1)),
        )

    def test_assignment_lowest_precedence(self):
        assert shape("x = 2*3+4;") == "(x = ((2 * 3) + 4))"

    def test_assignment_inside_parentheses(self):
        assert shape("(a = 2) * 3;") == "((a = 2) * 3)"


# =============================================================================
# Return Statement
# =============================================================================

class TestReturn:
    """Test return statement parsing."""

    def test_return_expression(self):
        stmt = parse_one("return x + 1;")
        assert isinstance(stmt, ReturnStatement)
        assert expression_to_source(stmt.value) == "(x + 1)"

    def test_return_assignment(self):
        stmt = parse_one("return a = 5;")
        assert expression_to_source(stmt) == "return (a = 5)"

    def test_returnx_is_variable(self):
        """returnx; is an expression statement naming a variable."""
        assert parse_one("returnx;") == var("returnx")

    def test_return_requires_expression(self):
        with pytest.raises(UnexpectedTokenError) as exc_info:
            parse_source("return;")
        assert exc_info.value.found == ";"


# =============================================================================
# Assignment Targets
# =============================================================================

class TestAssignmentTargets:
    """The parser accepts any expression before '='."""

    def test_non_variable_target_parses(self):
        stmt = parse_one("(a+b)=1;")
        assert stmt.operator == BinaryOperator.ASSIGN
        assert expression_to_source(stmt.left) == "(a + b)"

    def test_number_target_parses(self):
        assert shape("1=2;") == "(1 = 2)"


# =============================================================================
# Locations
# =============================================================================

class TestLocations:
    """Nodes remember where they start."""

    def test_binary_op_starts_at_left_operand(self):
        stmt = parse_one("  foo + 1;")
        assert stmt.location.column == 3
        assert stmt.right.location.column == 9

    def test_return_location(self):
        program = parse_source("a;\nreturn a;", filename="prog.sc")
        ret = program.statements[1]
        assert str(ret.location) == "prog.sc:2:1"

    def test_location_ignored_in_equality(self):
        assert parse_one("x;") == parse_one("   x;")


# =============================================================================
# Error Handling
# =============================================================================

class TestParseErrors:
    """Test syntax error reporting."""

    def test_missing_operand(self):
        """1 + ; names the ';' found where an operand was needed."""
        with pytest.raises(UnexpectedTokenError) as exc_info:
            parse_source("1 + ;")
        error = exc_info.value
        assert error.found == ";"
        assert error.location.column == 5
        assert "unexpected token ';'" in str(error)

    def test_missing_semicolon_at_end(self):
        """Reaching the end of input instead of ';' reports end of input."""
        with pytest.raises(UnexpectedTokenError) as exc_info:
            parse_source("x = 1")
        assert exc_info.value.found == ""
        assert exc_info.value.expected == "';'"
        assert "end of input" in str(exc_info.value)

    def test_missing_semicolon_between_statements(self):
        with pytest.raises(UnexpectedTokenError) as exc_info:
            parse_source("a = 1 b = 2;")
        assert exc_info.value.found == "b"

    def test_missing_close_paren(self):
        with pytest.raises(UnexpectedTokenError) as exc_info:
            parse_source("(1 + 2;")
        assert exc_info.value.found == ";"
        assert exc_info.value.expected == "')'"

    def test_unbalanced_close_paren(self):
        with pytest.raises(UnexpectedTokenError) as exc_info:
            parse_source("1);")
        assert exc_info.value.found == ")"

    def test_leading_operator(self):
        with pytest.raises(UnexpectedTokenError) as exc_info:
            parse_source("* 2;")
        assert exc_info.value.found == "*"

    def test_number_text_reported(self):
        """The literal source text of the token is reported."""
        with pytest.raises(UnexpectedTokenError) as exc_info:
            parse_source("x 007;")
        assert exc_info.value.found == "007"

    def test_is_parse_error(self):
        with pytest.raises(ParseError):
            parse_source(";")

    def test_error_has_source_context(self):
        with pytest.raises(UnexpectedTokenError) as exc_info:
            parse_source("a = (1;")
        message = str(exc_info.value)
        assert "    a = (1;" in message
        assert "hint: expected ')'" in message

    def test_lex_error_surfaces_first(self):
        with pytest.raises(LexError):
            parse_source("1 + ; #")


# =============================================================================
# AST Printer
# =============================================================================

class TestASTPrinter:
    """Test the debug printer."""

    def test_print_program(self):
        output = ASTPrinter().print(parse_source("a = b = 1; return a;"))
        assert output.splitlines() == [
            "Program",
            "  Expr: (a = (b = 1))",
            "  Return a",
        ]

    def test_print_single_expression(self):
        stmt = parse_one("1 + x;")
        assert ASTPrinter().print(stmt) == "Expr: (1 + x)"

    def test_print_return_statement(self):
        stmt = parse_one("return 2 * y;")
        assert ASTPrinter().print(stmt) == "Return (2 * y)"


# =============================================================================
# Visitor
# =============================================================================

class NameCollector(ASTVisitor):
    """Collects variable names in visiting order."""

    def __init__(self):
        self.names = []

    def visit_VariableRef(self, node):
        self.names.append(node.name)


class TestVisitor:
    """Test the default child walk of ASTVisitor."""

    def test_collects_names_in_order(self):
        collector = NameCollector()
        collector.visit(parse_source("a = b + 1; return (c = a) * b;"))
        assert collector.names == ["a", "b", "c", "a", "b"]

    def test_empty_program(self):
        collector = NameCollector()
        collector.visit(parse_source(""))
        assert collector.names == []
