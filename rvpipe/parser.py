"""Turning assembly text into tokens and hazard-annotated commands."""

from __future__ import annotations

import re
from collections.abc import Iterable

from .hazards import bypass_table
from .models import REGISTER_COUNT, Command
from .pipeline import STAGE_NAMES, Pipeline

OPERAND_SLOTS = 4

R_TYPE = frozenset({"add", "sub", "and", "or", "slt", "mul", "div", "rem"})
I_TYPE = frozenset({"addi", "andi", "ori", "slli", "srli", "srai"})
LOADS = frozenset({"lw", "lh", "lb"})
STORES = frozenset({"sw", "sh", "sb"})
BRANCHES = frozenset({"beq", "bne", "bge", "blt"})

_SEPARATORS = re.compile(r"[, \t()]+")
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1


class ParseError(ValueError):
    """Raised when a line of assembly cannot be turned into a command."""


def tokenize(line: str) -> list[str]:
    """Split a line into tokens, dropping any ``#`` comment.

    Commas, blanks, tabs and parentheses all separate tokens.
    """
    code = line.split("#", 1)[0]
    return [token for token in _SEPARATORS.split(code) if token]


def _to_int(text: str) -> int:
    """Read the integer at the start of ``text``, ignoring anything after it."""
    match = _LEADING_INT.match(text)
    if match is None:
        raise ParseError(f"expected an integer, got {text!r}")
    value = int(match.group(1))
    if not _INT_MIN <= value <= _INT_MAX:
        raise ParseError(f"integer out of range: {text!r}")
    return value


class Parser:
    """Reads assembly lines and builds the commands the simulator runs."""

    def __init__(self, lines: Iterable[str] = (), forwarding: bool = False):
        self.register_map = {f"x{index}": index for index in range(REGISTER_COUNT)}
        self.bypass = bypass_table(forwarding)
        self.pipeline = Pipeline(forwarding, STAGE_NAMES, fifo=False)
        self.commands: list[list[str]] = []
        self.parametric_commands: list[Command] = []
        for line in lines:
            self.parse_line(line)
        self.command_count = [0] * len(self.commands)

    def parse_line(self, line: str) -> Command | None:
        """Parse one line; return its command, or None for a blank line."""
        tokens = tokenize(line.rstrip("\n"))
        if not tokens:
            return None
        tokens = (tokens + [""] * OPERAND_SLOTS)[:OPERAND_SLOTS]
        command = self.define(tokens)
        self.commands.append(tokens)
        self.parametric_commands.append(command)
        return command

    def define(self, tokens: list[str]) -> Command:
        """Build the hazard-annotated command for a token list."""
        if not tokens:
            raise ParseError("empty command")
        opcode = tokens[0]
        hazards = self.bypass.get(opcode)
        if hazards is None:
            raise ParseError(f"error in command type: {opcode!r}")
        registers = [self.register_map.get(token, 0) for token in tokens if "x" in token]

        try:
            if opcode in R_TYPE:
                destination, source1, source2 = registers[0], registers[1], registers[2]
                constant = -1
            elif opcode in I_TYPE:
                destination, source1, source2 = registers[0], registers[1], -1
                constant = _to_int(tokens[3])
            elif opcode in LOADS:
                destination, source1, source2 = registers[0], registers[1], -1
                constant = 0 if "x" in tokens[2] else _to_int(tokens[2])
            elif opcode in STORES:
                destination, source1, source2 = -1, registers[0], registers[1]
                constant = 0 if "x" in tokens[2] else _to_int(tokens[2])
            elif opcode in BRANCHES:
                destination, source1, source2 = -1, registers[0], registers[1]
                constant = -1
            elif opcode == "jalr":
                destination, source1, source2 = registers[0], registers[1], -1
                constant = _to_int(tokens[3])
            elif opcode in ("jal", "auipc"):
                destination, source1, source2 = registers[0], -1, -1
                constant = _to_int(tokens[2])
            else:
                raise ParseError(f"error in command type: {opcode!r}")
        except IndexError:
            raise ParseError(f"missing operands in {' '.join(tokens).strip()!r}") from None

        bypass1, bypass2, read, write = hazards
        return Command(
            opcode=opcode,
            stage_lengths=list(range(len(STAGE_NAMES))),
            stage_names=list(STAGE_NAMES),
            destination=destination,
            source1=source1,
            source2=source2,
            bypass_index1=bypass1,
            bypass_index2=bypass2,
            read_index=read,
            write_index=write,
            value=0,
            constant=constant,
        )