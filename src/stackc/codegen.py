"""
x86-64 Code Generator for stackc
================================

Generates GNU assembler (Intel syntax) source from a parsed program.

Code Generation Strategy
------------------------
Every intermediate value lives on the native call stack: each expression
pushes exactly one value, and operators pop their operands into
registers, compute, and push the result.

Register Usage
--------------
| Register | Usage                                     |
|----------|-------------------------------------------|
| rax      | Left operand, results, return value       |
| rdi      | Right operand, value being stored         |
| rdx      | High half for mul/div (cleared before div)|
| rbp      | Frame pointer                             |
| rsp      | Stack pointer / operand stack             |

Stack Frame Layout
------------------
    +----------------+
    | Return address |
    +----------------+
    | Saved rbp      |
    +----------------+ <- rbp
    | variable 1     |  [rbp - 8]
    | variable 2     |  [rbp - 16]
    | ...            |
    +----------------+ <- rsp after prologue (rbp - frame size)
    | Temp values    |  (expression evaluation)
    +----------------+

Variables get slots in order of first use. The prologue reserves a fixed
area of `max_variables` slots, rounded up to 16 bytes, unless the frame
is sized dynamically.

Example output for `return 42;`:
    .intel_syntax noprefix
    .global main
    main:
      push rbp
      mov rbp, rsp
      sub rsp, 208
      push 42
      pop rax
      mov rsp, rbp
      pop rbp
      ret
      mov rsp, rbp
      pop rbp
      ret
"""

import logging
from dataclasses import dataclass
from typing import Optional

from stackc.ast import (
    ASTNode,
    ProgramNode,
    ReturnStatement,
    BinaryOp,
    BinaryOperator,
    VariableRef,
    NumberLiteral,
    expression_to_source,
)
from stackc.config import CompilerOptions, align_frame
from stackc.errors import AssignTargetError, CodeGenError, FrameCapacityError

logger = logging.getLogger(__name__)

# push takes a sign-extended 32-bit immediate
IMM32_MIN = -(1 << 31)
IMM32_MAX = (1 << 31) - 1


# =============================================================================
# Symbol Table for Code Generation
# =============================================================================

@dataclass
class SymbolInfo:
    """
    A variable's stack slot.

    Attributes:
        name: Variable name
        offset: Distance below rbp in bytes (8, 16, ...)
    """
    name: str
    offset: int


class SymbolTable:
    """
    Maps variable names to frame offsets in first-use order.

    The first distinct name gets offset slot_size, each further distinct
    name the next slot. Entries are never removed.
    """

    def __init__(self, slot_size: int = 8, capacity: Optional[int] = None):
        """
        Args:
            slot_size: Bytes per slot
            capacity: Maximum number of variables, or None for no limit
        """
        self.slot_size = slot_size
        self.capacity = capacity
        self._symbols: dict[str, SymbolInfo] = {}

    def __len__(self) -> int:
        return len(self._symbols)

    def __contains__(self, name: str) -> bool:
        return name in self._symbols

    def lookup(self, name: str) -> Optional[SymbolInfo]:
        return self._symbols.get(name)

    def resolve(self, name: str, node: Optional[ASTNode] = None) -> SymbolInfo:
        """
        Return the slot for a name, allocating the next one on first use.

        Raises:
            FrameCapacityError: If a new slot would exceed the capacity
        """
        info = self._symbols.get(name)
        if info is not None:
            return info

        if self.capacity is not None and len(self._symbols) >= self.capacity:
            raise FrameCapacityError(
                name,
                self.capacity,
                location=node.location if node is not None else None,
            )

        info = SymbolInfo(name=name, offset=(len(self._symbols) + 1) * self.slot_size)
        self._symbols[name] = info
        logger.debug(f"Allocated '{name}' at [rbp-{info.offset}]")
        return info

    def offsets(self) -> dict[str, int]:
        """Name -> offset, in allocation order."""
        return {name: info.offset for name, info in self._symbols.items()}


# =============================================================================
# Code Generator Class
# =============================================================================

class CodeGenerator:
    """
    Generates x86-64 assembly from a program.

    One generator may be reused; every call to generate() starts with a
    fresh symbol table.

    Usage:
        asm = CodeGenerator().generate(parse_source("return 1+2;"))
    """

    def __init__(
        self,
        options: Optional[CompilerOptions] = None,
        source_lines: Optional[list[str]] = None,
    ):
        """
        Args:
            options: Compiler options (defaults if None)
            source_lines: Original source lines for error context
        """
        self.options = options or CompilerOptions()
        self.source_lines = source_lines or []
        self._output: list[str] = []
        self.symbols = self._new_symbol_table()

    def _new_symbol_table(self) -> SymbolTable:
        capacity = None if self.options.dynamic_frame else self.options.max_variables
        return SymbolTable(self.options.slot_size, capacity)

    def generate(self, program: ProgramNode) -> str:
        """
        Generate the complete assembly unit.

        The body is generated first so a dynamic frame can be sized from
        the final variable count; the unit is assembled in memory, so a
        failure leaves no partial output behind.

        Raises:
            AssignTargetError: If an assignment target is not a variable
            FrameCapacityError: If the fixed frame runs out of slots
        """
        self.symbols = self._new_symbol_table()
        self._output = []

        for stmt in program.statements:
            self._generate_statement(stmt)

        body = self._output
        self._output = []

        self._emit_header()
        self._emit_prologue()
        self._output.extend(body)
        self._emit_epilogue()

        logger.debug(
            f"Generated {len(self._output)} lines, "
            f"{len(self.symbols)} variables, frame {self._frame_size()} bytes"
        )
        return "\n".join(self._output) + "\n"

    # =========================================================================
    # Assembly Output Methods
    # =========================================================================

    def _emit(self, line: str) -> None:
        self._output.append(line)

    def _emit_instruction(self, mnemonic: str, operand: str = "") -> None:
        if operand:
            self._emit(f"  {mnemonic} {operand}")
        else:
            self._emit(f"  {mnemonic}")

    def _emit_comment(self, comment: str) -> None:
        if self.options.output_comments:
            self._emit(f"  # {comment}")

    # =========================================================================
    # Header, Prologue and Epilogue
    # =========================================================================

    def _emit_header(self) -> None:
        entry = self.options.entry_symbol
        self._emit(".intel_syntax noprefix")
        self._emit(f".global {entry}")
        self._emit(f"{entry}:")

    def _frame_size(self) -> int:
        if not self.options.dynamic_frame:
            return self.options.frame_size
        return align_frame(len(self.symbols) * self.options.slot_size)

    def _emit_prologue(self) -> None:
        self._emit_instruction("push", "rbp")
        self._emit_instruction("mov", "rbp, rsp")
        frame_size = self._frame_size()
        if frame_size or not self.options.dynamic_frame:
            self._emit_instruction("sub", f"rsp, {frame_size}")

    def _emit_epilogue(self) -> None:
        self._emit_instruction("mov", "rsp, rbp")
        self._emit_instruction("pop", "rbp")
        self._emit_instruction("ret")

    # =========================================================================
    # Statement Code Generation
    # =========================================================================

    def _generate_statement(self, stmt: ASTNode) -> None:
        self._emit_comment(expression_to_source(stmt))

        if isinstance(stmt, ReturnStatement):
            self._generate_return(stmt)
            return

        self._generate_expression(stmt)
        # discard the statement's value
        self._emit_instruction("pop", "rax")

    def _generate_return(self, stmt: ReturnStatement) -> None:
        """Leave the value in rax and return immediately."""
        self._generate_expression(stmt.value)
        self._emit_instruction("pop", "rax")
        self._emit_epilogue()

    # =========================================================================
    # Expression Code Generation
    # =========================================================================

    def _generate_expression(self, expr: ASTNode) -> None:
        """Generate code that pushes the value of expr."""
        if isinstance(expr, NumberLiteral):
            self._generate_number(expr)
        elif isinstance(expr, VariableRef):
            self._generate_variable(expr)
        elif isinstance(expr, BinaryOp):
            if expr.operator == BinaryOperator.ASSIGN:
                self._generate_assignment(expr)
            else:
                self._generate_arithmetic(expr)
        else:
            raise CodeGenError(
                f"cannot generate code for {type(expr).__name__}",
                location=expr.location,
            )

    def _generate_number(self, expr: NumberLiteral) -> None:
        if IMM32_MIN <= expr.value <= IMM32_MAX:
            self._emit_instruction("push", str(expr.value))
        else:
            self._emit_instruction("mov", f"rax, {expr.value}")
            self._emit_instruction("push", "rax")

    def _generate_address(self, expr: ASTNode) -> None:
        """Push the address of an lvalue."""
        if not isinstance(expr, VariableRef):
            raise AssignTargetError(
                location=expr.location,
                source_line=self._get_source_line(expr.location.line),
            )

        info = self.symbols.resolve(expr.name, expr)
        self._emit_instruction("mov", "rax, rbp")
        self._emit_instruction("sub", f"rax, {info.offset}")
        self._emit_instruction("push", "rax")

    def _generate_variable(self, expr: VariableRef) -> None:
        self._generate_address(expr)
        self._emit_instruction("pop", "rax")
        self._emit_instruction("mov", "rax, [rax]")
        self._emit_instruction("push", "rax")

    def _generate_assignment(self, expr: BinaryOp) -> None:
        """Store the right value at the left address and push it again."""
        self._generate_address(expr.left)
        self._generate_expression(expr.right)

        self._emit_instruction("pop", "rdi")
        self._emit_instruction("pop", "rax")
        self._emit_instruction("mov", "[rax], rdi")
        self._emit_instruction("push", "rdi")

    def _generate_arithmetic(self, expr: BinaryOp) -> None:
        self._generate_expression(expr.left)
        self._generate_expression(expr.right)

        self._emit_instruction("pop", "rdi")
        self._emit_instruction("pop", "rax")

        op = expr.operator
        if op == BinaryOperator.ADD:
            self._emit_instruction("add", "rax, rdi")
        elif op == BinaryOperator.SUBTRACT:
            self._emit_instruction("sub", "rax, rdi")
        elif op == BinaryOperator.MULTIPLY:
            self._emit_instruction("mul", "rdi")
        elif op == BinaryOperator.DIVIDE:
            self._emit_instruction("mov", "rdx, 0")
            self._emit_instruction("div", "rdi")

        self._emit_instruction("push", "rax")

    def _get_source_line(self, line: int) -> Optional[str]:
        if 0 < line <= len(self.source_lines):
            return self.source_lines[line - 1]
        return None
