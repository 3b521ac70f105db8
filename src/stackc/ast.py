"""
stackc Abstract Syntax Tree (AST) Definitions
=============================================

Node Hierarchy
--------------
ASTNode (base)
├── ProgramNode - ordered list of statements
├── Statements
│   └── ReturnStatement - return expr;
└── Expressions
    ├── NumberLiteral - integer constant
    ├── VariableRef - variable reference
    └── BinaryOp - + - * / and = (assignment)

Any expression followed by ';' is itself a statement, so the program's
statement list holds expression nodes and ReturnStatement nodes side by
side.

Design Notes
------------
- Nodes are dataclasses that own their children outright; a subtree is
  never shared between two parents.
- Binary nodes always carry both children, leaves carry none.
- Each node stores the location where it starts for error reporting.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from stackc.errors import SourceLocation


# =============================================================================
# AST Node Base Classes
# =============================================================================

@dataclass
class ASTNode:
    """
    Base class for all AST nodes.

    Attributes:
        location: Source location where this node starts
    """
    location: SourceLocation = field(
        default_factory=lambda: SourceLocation("<input>", 1, 1),
        compare=False,
    )


@dataclass
class Expression(ASTNode):
    """Base class for nodes that evaluate to a value."""
    pass


@dataclass
class Statement(ASTNode):
    """Base class for statements that are not plain expressions."""
    pass


# =============================================================================
# Program Root Node
# =============================================================================

@dataclass
class ProgramNode(ASTNode):
    """
    Root node: the top-level statements in source order.

    Attributes:
        statements: One entry per ';'-terminated statement
    """
    statements: list[ASTNode] = field(default_factory=list)


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass
class ReturnStatement(Statement):
    """
    Return statement.

    Attributes:
        value: The returned expression
    """
    value: Expression = None


# =============================================================================
# Expression Nodes
# =============================================================================

class BinaryOperator(Enum):
    """Binary operators. The value is the source spelling."""
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    ASSIGN = "="


@dataclass
class BinaryOp(Expression):
    """
    Binary operation (left op right), including assignment.

    Attributes:
        operator: The binary operator
        left: Left operand
        right: Right operand
    """
    operator: BinaryOperator = None
    left: Expression = None
    right: Expression = None


@dataclass
class VariableRef(Expression):
    """
    Variable reference.

    Attributes:
        name: The variable name
    """
    name: str = ""


@dataclass
class NumberLiteral(Expression):
    """
    Integer literal.

    Attributes:
        value: The integer value
    """
    value: int = 0


# =============================================================================
# AST Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Subclasses override visit_* methods for the node types they care
    about; unhandled nodes fall through to generic_visit.

    Usage:
        class NameCollector(ASTVisitor):
            def visit_VariableRef(self, node):
                ...

        NameCollector().visit(program)
    """

    def visit(self, node: ASTNode) -> Any:
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: ASTNode) -> None:
        """Visit all child nodes."""
        for field_value in node.__dict__.values():
            if isinstance(field_value, ASTNode):
                self.visit(field_value)
            elif isinstance(field_value, list):
                for item in field_value:
                    if isinstance(item, ASTNode):
                        self.visit(item)


# =============================================================================
# AST Pretty Printer
# =============================================================================

class ASTPrinter(ASTVisitor):
    """
    Pretty printer for AST debugging (used by `stackcc --ast`).

    Usage:
        print(ASTPrinter().print(program))
    """

    def __init__(self):
        self.output: list[str] = []
        self._indent = ""

    def print(self, node: ASTNode) -> str:
        self.output = []
        self._indent = ""
        self.visit(node)
        return "\n".join(self.output)

    def visit_ProgramNode(self, node: ProgramNode):
        self.output.append("Program")
        self._indent = "  "
        for stmt in node.statements:
            self.visit(stmt)
        self._indent = ""

    def visit_ReturnStatement(self, node: ReturnStatement):
        self.output.append(f"{self._indent}Return {expression_to_source(node.value)}")

    def generic_visit(self, node: ASTNode) -> None:
        # any expression is a statement on its own
        self.output.append(f"{self._indent}Expr: {expression_to_source(node)}")


def expression_to_source(expr: ASTNode) -> str:
    """Render an expression fully parenthesized, e.g. `(x = ((2 * 3) + 4))`."""
    if isinstance(expr, NumberLiteral):
        return str(expr.value)
    if isinstance(expr, VariableRef):
        return expr.name
    if isinstance(expr, BinaryOp):
        left = expression_to_source(expr.left)
        right = expression_to_source(expr.right)
        return f"({left} {expr.operator.value} {right})"
    if isinstance(expr, ReturnStatement):
        return f"return {expression_to_source(expr.value)}"
    return f"<{type(expr).__name__}>"
