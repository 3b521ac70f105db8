"""
x86-64 Subset Emulator
======================

Executes the assembly produced by the code generator without a native
assembler, so compiled programs can be checked on any host.

Supported instructions (Intel syntax, 64-bit operands only):

    push reg | imm        pop reg
    mov reg, reg | imm    mov reg, [reg]    mov [reg], reg
    add reg, reg | imm    sub reg, reg | imm
    mul reg               div reg
    ret

Directives (lines starting with '.'), labels and '#' comments are
skipped. Registers hold unsigned 64-bit values; `mul` writes the 128-bit
product to rdx:rax and `div` divides rdx:rax, trapping on a zero divisor
or a quotient that does not fit in 64 bits, as the hardware does.

Execution starts at the entry label with a sentinel return address on
the stack and stops when `ret` pops it.

Usage
-----
>>> from stackc.emulator import run_assembly
>>> run_assembly(compile_source("x = 2*3+4; return x;")).exit_status
10
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from stackc.errors import EmulatorError

logger = logging.getLogger(__name__)

MASK64 = (1 << 64) - 1
IMM64_MIN = -(1 << 63)
REGISTERS = ("rax", "rbx", "rcx", "rdx", "rsi", "rdi", "rbp", "rsp")

STACK_TOP = 0x7FFF_FFFF_F000
RETURN_SENTINEL = 0xDEAD_BEEF_0000


@dataclass
class Instruction:
    """
    One decoded instruction.

    Attributes:
        mnemonic: Lower-case mnemonic
        operands: Operand strings with whitespace stripped
        line_number: 1-indexed line in the assembly text
    """
    mnemonic: str
    operands: list[str] = field(default_factory=list)
    line_number: int = 0


@dataclass
class EmulatorResult:
    """
    Outcome of running a program.

    Attributes:
        rax: Final value of rax (unsigned 64-bit)
        steps: Instructions executed
    """
    rax: int
    steps: int

    @property
    def exit_status(self) -> int:
        """Process exit status: the low byte of the return value."""
        return self.rax & 0xFF

    @property
    def signed_rax(self) -> int:
        return self.rax - (1 << 64) if self.rax >> 63 else self.rax


def decode(assembly: str, entry_symbol: str = "main") -> list[Instruction]:
    """
    Decode the instructions following the entry label.

    Raises:
        EmulatorError: If the entry label is missing
    """
    instructions = []
    found_entry = False

    for line_number, raw in enumerate(assembly.splitlines(), start=1):
        line = raw.split("#", 1)[0].strip()
        if not line or line.startswith("."):
            continue
        if line.endswith(":"):
            if line[:-1] == entry_symbol:
                found_entry = True
            continue
        if not found_entry:
            continue

        mnemonic, _, rest = line.partition(" ")
        operands = [op.strip() for op in rest.split(",")] if rest.strip() else []
        instructions.append(Instruction(mnemonic.lower(), operands, line_number))

    if not found_entry:
        raise EmulatorError(f"entry label '{entry_symbol}' not found")
    return instructions


class Emulator:
    """
    Interprets decoded instructions against a register file and a sparse
    64-bit memory.

    Usage:
        emulator = Emulator(assembly)
        result = emulator.run()
        print(result.exit_status)
    """

    def __init__(self, assembly: str, entry_symbol: str = "main", max_steps: int = 1_000_000):
        self.program = decode(assembly, entry_symbol)
        self.max_steps = max_steps
        self.registers: dict[str, int] = {}
        self.memory: dict[int, int] = {}
        self.reset()

    def reset(self) -> None:
        self.registers = {name: 0 for name in REGISTERS}
        self.memory = {}
        self.registers["rsp"] = STACK_TOP
        self._push(RETURN_SENTINEL)

    def run(self) -> EmulatorResult:
        """
        Execute from the entry label until it returns.

        Raises:
            EmulatorError: On a trap, an unsupported instruction, falling
                off the end of the program or exceeding max_steps
        """
        pc = 0
        steps = 0

        while True:
            if pc >= len(self.program):
                raise EmulatorError("execution ran past the last instruction")
            if steps >= self.max_steps:
                raise EmulatorError(f"step limit of {self.max_steps} exceeded")

            instr = self.program[pc]
            steps += 1

            if instr.mnemonic == "ret":
                target = self._pop()
                if target == RETURN_SENTINEL:
                    break
                raise EmulatorError(
                    f"ret to unknown address 0x{target:X}", instr.line_number
                )

            self._execute(instr)
            pc += 1

        logger.debug(f"Program returned {self.registers['rax']} after {steps} steps")
        return EmulatorResult(rax=self.registers["rax"], steps=steps)

    # =========================================================================
    # Memory and Stack
    # =========================================================================

    def _load(self, address: int, line_number: Optional[int] = None) -> int:
        if address % 8:
            raise EmulatorError(f"unaligned load from 0x{address:X}", line_number)
        return self.memory.get(address, 0)

    def _store(self, address: int, value: int, line_number: Optional[int] = None) -> None:
        if address % 8:
            raise EmulatorError(f"unaligned store to 0x{address:X}", line_number)
        self.memory[address] = value & MASK64

    def _push(self, value: int) -> None:
        self.registers["rsp"] = (self.registers["rsp"] - 8) & MASK64
        self._store(self.registers["rsp"], value)

    def _pop(self) -> int:
        value = self._load(self.registers["rsp"])
        self.registers["rsp"] = (self.registers["rsp"] + 8) & MASK64
        return value

    # =========================================================================
    # Operand Decoding
    # =========================================================================

    def _register(self, operand: str, instr: Instruction) -> str:
        name = operand.lower()
        if name not in self.registers:
            raise EmulatorError(
                f"'{instr.mnemonic}' expects a 64-bit register, got '{operand}'",
                instr.line_number,
            )
        return name

    def _value(self, operand: str, instr: Instruction) -> int:
        """Value of a register or immediate operand."""
        name = operand.lower()
        if name in self.registers:
            return self.registers[name]
        try:
            value = int(operand, 0)
        except ValueError:
            raise EmulatorError(
                f"unsupported operand '{operand}' for '{instr.mnemonic}'",
                instr.line_number,
            ) from None
        if not IMM64_MIN <= value <= MASK64:
            raise EmulatorError(
                f"immediate '{operand}' does not fit in 64 bits",
                instr.line_number,
            )
        return value & MASK64

    def _memory_register(self, operand: str) -> Optional[str]:
        """Register inside a `[reg]` operand, or None if not a memory operand."""
        if operand.startswith("[") and operand.endswith("]"):
            return operand[1:-1].strip().lower()
        return None

    def _expect_operands(self, instr: Instruction, count: int) -> None:
        if len(instr.operands) != count:
            raise EmulatorError(
                f"'{instr.mnemonic}' takes {count} operand(s), got {len(instr.operands)}",
                instr.line_number,
            )

    # =========================================================================
    # Execution
    # =========================================================================

    def _execute(self, instr: Instruction) -> None:
        regs = self.registers
        ops = instr.operands
        m = instr.mnemonic

        if m == "push":
            self._expect_operands(instr, 1)
            self._push(self._value(ops[0], instr))

        elif m == "pop":
            self._expect_operands(instr, 1)
            regs[self._register(ops[0], instr)] = self._pop()

        elif m == "mov":
            self._expect_operands(instr, 2)
            self._execute_mov(instr)

        elif m in ("add", "sub"):
            self._expect_operands(instr, 2)
            dest = self._register(ops[0], instr)
            value = self._value(ops[1], instr)
            if m == "add":
                regs[dest] = (regs[dest] + value) & MASK64
            else:
                regs[dest] = (regs[dest] - value) & MASK64

        elif m == "mul":
            self._expect_operands(instr, 1)
            product = regs["rax"] * regs[self._register(ops[0], instr)]
            regs["rax"] = product & MASK64
            regs["rdx"] = (product >> 64) & MASK64

        elif m == "div":
            self._expect_operands(instr, 1)
            divisor = regs[self._register(ops[0], instr)]
            if divisor == 0:
                raise EmulatorError("division by zero", instr.line_number)
            dividend = (regs["rdx"] << 64) | regs["rax"]
            quotient, remainder = divmod(dividend, divisor)
            if quotient > MASK64:
                raise EmulatorError("division overflow", instr.line_number)
            regs["rax"] = quotient
            regs["rdx"] = remainder

        else:
            raise EmulatorError(f"unsupported instruction '{m}'", instr.line_number)

    def _execute_mov(self, instr: Instruction) -> None:
        dest, src = instr.operands

        dest_mem = self._memory_register(dest)
        if dest_mem is not None:
            address = self.registers[self._register(dest_mem, instr)]
            self._store(address, self._value(src, instr), instr.line_number)
            return

        target = self._register(dest, instr)
        src_mem = self._memory_register(src)
        if src_mem is not None:
            address = self.registers[self._register(src_mem, instr)]
            self.registers[target] = self._load(address, instr.line_number)
        else:
            self.registers[target] = self._value(src, instr)


# =============================================================================
# Convenience Functions
# =============================================================================

def run_assembly(assembly: str, entry_symbol: str = "main") -> EmulatorResult:
    """
    Run generated assembly and return its result.

    Raises:
        EmulatorError: If execution traps
    """
    return Emulator(assembly, entry_symbol).run()
