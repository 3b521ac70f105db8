"""
stackc - Arithmetic Compiler for a Stack Machine
================================================

stackc translates a tiny arithmetic-and-assignment language into x86-64
assembly (GNU assembler, Intel syntax). Every intermediate value is
pushed to and popped from the native call stack.

The language
------------
A program is a list of ';'-terminated statements:

    x = 2 * 3 + 4;
    y = x / 2;
    return x - y;

- integers, variables, + - * / and parentheses
- '=' assigns and yields the assigned value (right-associative)
- 'return expr;' ends the program with expr as the exit value
- without a return, the value of the last statement is returned

Pipeline
--------
    Source → Lexer → Parser → AST → CodeGenerator → Assembly

Quick Start
-----------
>>> from stackc import compile_source, run_assembly
>>> asm = compile_source("x = 2*3+4; return x;")
>>> run_assembly(asm).exit_status
10

Or from the shell:
    $ stackcc 'x = 2*3+4; return x;' > prog.s
    $ cc -o prog prog.s && ./prog; echo $?
    10
"""

__version__ = "0.1.0"

# =============================================================================
# Public API Exports
# =============================================================================

from stackc.compiler import Compiler, CompilerResult, compile_source
from stackc.config import CompilerOptions
from stackc.errors import (
    StackCError,
    SourceLocation,
    LexError,
    NumberRangeError,
    ParseError,
    UnexpectedTokenError,
    CodeGenError,
    AssignTargetError,
    FrameCapacityError,
    EmulatorError,
)
from stackc.lexer import Lexer, Token, TokenType, tokenize
from stackc.parser import Parser, parse_source
from stackc.codegen import CodeGenerator, SymbolTable
from stackc.emulator import Emulator, EmulatorResult, run_assembly
from stackc.ast import (
    ASTNode,
    ProgramNode,
    ReturnStatement,
    BinaryOp,
    BinaryOperator,
    VariableRef,
    NumberLiteral,
    ASTVisitor,
    ASTPrinter,
)

__all__ = [
    "__version__",
    # Main API
    "Compiler",
    "CompilerResult",
    "CompilerOptions",
    "compile_source",
    # Errors
    "StackCError",
    "SourceLocation",
    "LexError",
    "NumberRangeError",
    "ParseError",
    "UnexpectedTokenError",
    "CodeGenError",
    "AssignTargetError",
    "FrameCapacityError",
    "EmulatorError",
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    "tokenize",
    # Parser
    "Parser",
    "parse_source",
    # Code generator
    "CodeGenerator",
    "SymbolTable",
    # Emulator
    "Emulator",
    "EmulatorResult",
    "run_assembly",
    # AST
    "ASTNode",
    "ProgramNode",
    "ReturnStatement",
    "BinaryOp",
    "BinaryOperator",
    "VariableRef",
    "NumberLiteral",
    "ASTVisitor",
    "ASTPrinter",
]
