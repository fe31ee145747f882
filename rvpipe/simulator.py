"""Functional execution of an assembly program, driving the pipeline timing model."""

from __future__ import annotations

import argparse
import operator
import re
import sys
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path

from .models import REGISTER_COUNT
from .parser import OPERAND_SLOTS, ParseError, Parser

MEMORY_BYTES = 1 << 20
MEMORY_WORDS = MEMORY_BYTES >> 2
MAX_STEPS = 50
CONTROL_FLOW = frozenset({"beq", "bne", "bge", "blt", "jal", "jalr"})

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1


class SimulatorError(RuntimeError):
    """Raised when an instruction cannot be executed."""


def _wrap(value: int) -> int:
    """Reduce ``value`` to a signed 32-bit integer."""
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value


def _to_int(text: str) -> int:
    """Read the integer at the start of ``text``, ignoring anything after it."""
    match = _LEADING_INT.match(text)
    if match is None:
        raise SimulatorError(f"expected an integer, got {text!r}")
    value = int(match.group(1))
    if not _INT_MIN <= value <= _INT_MAX:
        raise SimulatorError(f"integer out of range: {text!r}")
    return value


def _quarter(value: int) -> int:
    """Divide by four, truncating toward zero."""
    return _div(value, 4)


def _div(dividend: int, divisor: int) -> int:
    if divisor == 0:
        return dividend
    quotient = abs(dividend) // abs(divisor)
    return quotient if (dividend < 0) == (divisor < 0) else -quotient


def _rem(dividend: int, divisor: int) -> int:
    if divisor == 0:
        return dividend
    return dividend - divisor * _div(dividend, divisor)


_REGISTER_OPS: dict[str, Callable[[int, int], int]] = {
    "add": operator.add,
    "sub": operator.sub,
    "and": operator.and_,
    "or": operator.or_,
    "mul": operator.mul,
    "div": _div,
    "rem": _rem,
    "slt": lambda a, b: int(a < b),
}

_IMMEDIATE_OPS: dict[str, Callable[[int, int], int]] = {
    "addi": operator.add,
    "andi": operator.and_,
    "ori": operator.or_,
    "slli": lambda a, n: a << (n & 31),
    "srli": lambda a, n: a >> (n & 31),
    "srai": lambda a, n: a >> (n & 31),
}

_BRANCH_OPS: dict[str, Callable[[int, int], bool]] = {
    "beq": operator.eq,
    "bne": operator.ne,
    "bge": operator.ge,
    "blt": operator.lt,
}


class Simulator:
    """Executes a program instruction by instruction and records its pipeline timing."""

    def __init__(self, lines: Iterable[str] = (), forwarding: bool = False):
        self.parser = Parser(lines, forwarding)
        self.pipeline = self.parser.pipeline
        self.commands = self.parser.commands
        self.register_map = self.parser.register_map
        self.command_count = self.parser.command_count
        self.registers = [0] * REGISTER_COUNT
        self.data = [0] * MEMORY_WORDS
        self.pc = 0
        self.pc_next = 0

    # -- operand helpers -------------------------------------------------

    def _register(self, name: str) -> int:
        index = self.register_map.get(name)
        if index is None:
            raise SimulatorError(f"invalid register {name!r}")
        return index

    def _destination(self, name: str) -> int:
        index = self._register(name)
        if index == 0:
            raise SimulatorError("cannot write to x0")
        return index

    def _address(self, base: str, register: str) -> int:
        """Resolve an ``offset(register)`` operand, or a bare number, to a byte address."""
        location = base if "x" in base else f"{base}({register})"
        lparen = location.find("(")
        if lparen != -1:
            offset = _to_int(location[:lparen]) if lparen > 0 else 0
            reg = self._register(location[lparen + 1:-1])
            return self.registers[reg] + offset
        return _to_int(location)

    def _word_index(self, base: str, register: str) -> int:
        address = self._address(base, register)
        if address % 4 or not 0 <= address < MEMORY_BYTES:
            raise SimulatorError(f"invalid word address {address}")
        return address // 4

    def _byte_address(self, base: str, register: str) -> int:
        address = self._address(base, register)
        if not 0 <= address < MEMORY_BYTES:
            raise SimulatorError(f"address out of range {address}")
        return address

    def _halfword_address(self, base: str, register: str) -> int:
        address = self._address(base, register)
        if address % 2 or not 0 <= address < MEMORY_BYTES:
            raise SimulatorError(f"invalid halfword address {address}")
        return address

    # -- instruction groups ----------------------------------------------

    def _memory(self, opcode: str, target: str, base: str, register: str) -> None:
        if opcode in ("lw", "lb", "lh"):
            rd = self._destination(target)
        else:
            rs = self._register(target)
        if opcode == "lw":
            self.registers[rd] = self.data[self._word_index(base, register)]
        elif opcode == "sw":
            self.data[self._word_index(base, register)] = self.registers[rs]
        elif opcode == "lb":
            address = self._byte_address(base, register)
            byte = (self.data[address // 4] >> (8 * (address % 4))) & 0xFF
            self.registers[rd] = byte - 0x100 if byte & 0x80 else byte
        elif opcode == "sb":
            address = self._byte_address(base, register)
            shift = 8 * (address % 4)
            word = self.data[address // 4] & ~(0xFF << shift)
            self.data[address // 4] = _wrap(word | ((self.registers[rs] & 0xFF) << shift))
        elif opcode == "lh":
            address = self._halfword_address(base, register)
            half = (self.data[address // 4] >> (16 * ((address % 4) // 2))) & 0xFFFF
            self.registers[rd] = half - 0x10000 if half & 0x8000 else half
        else:
            address = self._halfword_address(base, register)
            shift = 16 * ((address % 4) // 2)
            word = self.data[address // 4] & ~(0xFFFF << shift)
            self.data[address // 4] = _wrap(word | ((self.registers[rs] & 0xFFFF) << shift))
        self.pc_next = self.pc + 1

    def _jal(self, rd_name: str, offset_text: str) -> None:
        offset = _to_int(offset_text)
        rd = self._register(rd_name)
        if rd != 0:
            self.registers[rd] = self.pc + 1
        target = self.pc + _quarter(offset)
        self.pc_next = self.pc + 1 if target == self.pc else target

    def _jalr(self, rd_name: str, rs_name: str, offset_text: str) -> None:
        rd = self._register(rd_name)
        rs = self._register(rs_name)
        target = self.registers[rs] + _quarter(_to_int(offset_text))
        if rd != 0:
            self.registers[rd] = self.pc + 1
        self.pc_next = target

    def _auipc(self, rd_name: str, imm_text: str) -> None:
        rd = self._register(rd_name)
        result = _wrap(self.pc + (_to_int(imm_text) << 12))
        if rd != 0:
            self.registers[rd] = result
        self.pc_next = self.pc + 1

    # -- public interface ------------------------------------------------

    def execute(self, tokens: Sequence[str]) -> int:
        """Execute one instruction at the current PC and return the next PC."""
        opcode, a, b, c = (list(tokens) + [""] * OPERAND_SLOTS)[:OPERAND_SLOTS]
        if opcode in _REGISTER_OPS:
            rs1, rs2 = self._register(b), self._register(c)
            rd = self._destination(a)
            self.registers[rd] = _wrap(_REGISTER_OPS[opcode](self.registers[rs1], self.registers[rs2]))
            self.pc_next = self.pc + 1
        elif opcode in _IMMEDIATE_OPS:
            rs1 = self._register(b)
            rd = self._destination(a)
            self.registers[rd] = _wrap(_IMMEDIATE_OPS[opcode](self.registers[rs1], _to_int(c)))
            self.pc_next = self.pc + 1
        elif opcode in _BRANCH_OPS:
            rs1, rs2 = self._register(a), self._register(b)
            offset = _quarter(_to_int(c))
            taken = _BRANCH_OPS[opcode](self.registers[rs1], self.registers[rs2])
            self.pc_next = self.pc + offset if taken else self.pc + 1
        elif opcode in ("lw", "sw", "lb", "sb", "lh", "sh"):
            self._memory(opcode, a, b, c)
        elif opcode == "jal":
            self._jal(a, b)
        elif opcode == "jalr":
            self._jalr(a, b, c)
        elif opcode == "auipc":
            self._auipc(a, b)
        else:
            raise SimulatorError(f"unknown instruction {opcode!r}")
        return self.pc_next

    def run(self) -> int:
        """Run the program, feeding every executed instruction to the pipeline.

        Execution stops when the PC leaves the program or after ``MAX_STEPS + 1``
        instructions. Returns the number of instructions executed.
        """
        steps = 0
        while 0 <= self.pc < len(self.commands):
            tokens = self.commands[self.pc]
            self.execute(tokens)
            self.command_count[self.pc] += 1

            text = " ".join(token for token in tokens if token)
            command = self.parser.parametric_commands[self.pc]
            command.value = self.registers[self.register_map.get(tokens[1], 0)]
            self.pipeline.run_command(command, text)
            self.pipeline.save()
            if tokens[0] in CONTROL_FLOW:
                self.pipeline.insert_halt(command)

            self.pc = self.pc_next
            steps += 1
            if steps > MAX_STEPS:
                break
        return steps


def main(argv: list[str] | None = None) -> int:
    """Simulate a program file and write its pipeline table."""
    parser = argparse.ArgumentParser(description="Simulate a program on a five-stage pipeline.")
    parser.add_argument("forwarding", type=int, help="1 to enable forwarding, 0 to disable it")
    parser.add_argument("program", type=Path, help="file of assembly instructions")
    parser.add_argument("--output", "-o", type=Path, default=Path("output.txt"))
    args = parser.parse_args(argv)

    try:
        lines = args.program.read_text().splitlines()
    except OSError:
        print("File could not be opened.", file=sys.stderr)
        return 1

    try:
        simulator = Simulator(lines, bool(args.forwarding))
        simulator.run()
    except (ParseError, SimulatorError) as error:
        print(f"error: {error}", file=sys.stderr)
        return 1

    try:
        with args.output.open("w") as out:
            simulator.pipeline.print_table(out)
    except OSError:
        print(f"Error opening {args.output} for writing.", file=sys.stderr)
        return 1
    return 0