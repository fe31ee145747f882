"""Disassembly of 32-bit instruction words written as hexadecimal text."""

from __future__ import annotations

import argparse
from collections.abc import Callable, Iterable
from pathlib import Path

INSTRUCTION_HEX_DIGITS = 8
INVALID = "Invalid instruction"
INVALID_CAPITALISED = "Invalid Instruction"
OUT_OF_BOUNDS = "The offset is out of bounds"

_R_MNEMONICS = {
    ("000", "0000000"): "add",
    ("000", "0100000"): "sub",
    ("100", "0000000"): "xor",
    ("110", "0000000"): "or",
    ("111", "0000000"): "and",
    ("001", "0000000"): "sll",
    ("101", "0000000"): "srl",
    ("101", "0100000"): "sra",
    ("000", "0000001"): "mul",
    ("100", "0000001"): "div",
    ("111", "0000001"): "rem",
}
_I_ARITHMETIC = {"000": "addi", "100": "xori", "110": "ori", "111": "andi"}
_I_SHIFTS = {
    ("001", "000000"): "slli",
    ("101", "000000"): "srli",
    ("101", "010000"): "srai",
}
_LOADS = {
    "000": "lb",
    "001": "lh",
    "010": "lw",
    "011": "ld",
    "100": "lbu",
    "101": "lhu",
    "110": "lwu",
}
_STORES = {"000": "sb", "001": "sh", "010": "sw", "011": "sd"}
_BRANCHES = {
    "000": "beq",
    "001": "bne",
    "100": "blt",
    "101": "bge",
    "110": "bltu",
    "111": "bgeu",
}


def hex_to_binary(text: str) -> str:
    """Return the 32-bit binary string for the first eight hex digits of ``text``."""
    digits = text[:INSTRUCTION_HEX_DIGITS]
    if len(digits) < INSTRUCTION_HEX_DIGITS:
        raise ValueError(f"instruction needs {INSTRUCTION_HEX_DIGITS} hex digits: {text!r}")
    try:
        return "".join(f"{int(digit, 16):04b}" for digit in digits)
    except ValueError:
        raise ValueError(f"not a hexadecimal instruction: {text!r}") from None


def binary_to_decimal(bits: str, signed: bool = False) -> int:
    """Read a binary string, as two's complement when ``signed`` is true."""
    value = int(bits, 2)
    if signed and bits[0] == "1":
        value -= 1 << len(bits)
    return value


def _reg(bits: str) -> str:
    return f"x{binary_to_decimal(bits)}"


def _truncating_quarter(value: int) -> int:
    quotient = abs(value) // 4
    return quotient if value >= 0 else -quotient


def _in_bounds(inst_no: int, offset: int, total: int) -> bool:
    target = inst_no + _truncating_quarter(offset)
    return 0 <= target <= total


def _r_format(bits: str) -> str:
    func7, rs2, rs1, func3, rd = bits[0:7], bits[7:12], bits[12:17], bits[17:20], bits[20:25]
    mnemonic = _R_MNEMONICS.get((func3, func7))
    if mnemonic is None:
        return INVALID
    return f"{mnemonic} {_reg(rd)} {_reg(rs1)} {_reg(rs2)}"


def _i_format_immediate(bits: str) -> str:
    imm, rs1, func3, rd = bits[0:12], bits[12:17], bits[17:20], bits[20:25]
    mnemonic = _I_ARITHMETIC.get(func3)
    if mnemonic is not None:
        return f"{mnemonic} {_reg(rd)} {_reg(rs1)} {binary_to_decimal(imm, True)}"
    mnemonic = _I_SHIFTS.get((func3, imm[:6]))
    if mnemonic is not None:
        return f"{mnemonic} {_reg(rd)} {_reg(rs1)} {binary_to_decimal(imm[6:])}"
    return INVALID_CAPITALISED


def _i_format_load(bits: str) -> str:
    imm, rs1, func3, rd = bits[0:12], bits[12:17], bits[17:20], bits[20:25]
    mnemonic = _LOADS.get(func3)
    if mnemonic is None:
        return INVALID
    return f"{mnemonic} {_reg(rd)} {binary_to_decimal(imm, True)} {_reg(rs1)}"


def _s_format(bits: str) -> str:
    imm = bits[0:7] + bits[20:25]
    rs2, rs1, func3 = bits[7:12], bits[12:17], bits[17:20]
    mnemonic = _STORES.get(func3)
    if mnemonic is None:
        return INVALID_CAPITALISED
    return f"{mnemonic} {_reg(rs2)} {binary_to_decimal(imm, True)} {_reg(rs1)}"


def _b_format(bits: str, inst_no: int, total: int) -> str:
    imm = bits[0] + bits[24] + bits[1:7] + bits[20:24] + "0"
    rs2, rs1, func3 = bits[7:12], bits[12:17], bits[17:20]
    offset = binary_to_decimal(imm, True)
    if not _in_bounds(inst_no, offset, total):
        return OUT_OF_BOUNDS
    prefix = f"{_BRANCHES[func3]} " if func3 in _BRANCHES else ""
    return f"{prefix}{_reg(rs1)} {_reg(rs2)} {offset}"


def _jal(bits: str, inst_no: int, total: int) -> str:
    imm = bits[0] + bits[12:20] + bits[11] + bits[1:11] + "0"
    offset = binary_to_decimal(imm, True)
    if not _in_bounds(inst_no, offset, total):
        return OUT_OF_BOUNDS
    return f"jal {_reg(bits[20:25])} {offset}"


def _jalr(bits: str) -> str:
    imm, rs1 = bits[0:12], bits[12:17]
    return f"jalr x0 {_reg(rs1)} {binary_to_decimal(imm, True)}"


def _lui(bits: str) -> str:
    nibbles = "".join(str(binary_to_decimal(bits[start:start + 4])) for start in range(0, 20, 4))
    return f"lui {_reg(bits[20:25])} 0x{nibbles}"


def _auipc(bits: str) -> str:
    shifted = (binary_to_decimal(bits[0:20]) << 12) & 0xFFFFFFFF
    return f"auipc {_reg(bits[20:25])} 0x{shifted:x}"


_SIMPLE_FORMATS: dict[str, Callable[[str], str]] = {
    "0110011": _r_format,
    "0010011": _i_format_immediate,
    "0000011": _i_format_load,
    "0100011": _s_format,
    "1100111": _jalr,
    "0110111": _lui,
    "0010111": _auipc,
}
_RELATIVE_FORMATS: dict[str, Callable[[str, int, int], str]] = {
    "1100011": _b_format,
    "1101111": _jal,
}


def disassemble(word: str, inst_no: int, total: int) -> str:
    """Disassemble one hex instruction word.

    ``inst_no`` is the 1-based position of the instruction and ``total`` the
    number of instructions; jump targets outside that range are reported.
    """
    bits = hex_to_binary(word)
    opcode = bits[25:32]
    if opcode in _SIMPLE_FORMATS:
        return _SIMPLE_FORMATS[opcode](bits)
    if opcode in _RELATIVE_FORMATS:
        return _RELATIVE_FORMATS[opcode](bits, inst_no, total)
    return INVALID


def disassemble_program(lines: Iterable[str]) -> list[str]:
    """Disassemble every non-blank line of a program, one instruction per line."""
    words = [line.strip() for line in lines if line.strip()]
    total = len(words)
    return [disassemble(word, number, total) for number, word in enumerate(words, start=1)]


def main(argv: list[str] | None = None) -> int:
    """Disassemble a file of hex words into a file of assembly lines."""
    parser = argparse.ArgumentParser(description="Disassemble hexadecimal instruction words.")
    parser.add_argument("--input", "-i", default="given_input.txt", type=Path)
    parser.add_argument("--output", "-o", default="instructions.txt", type=Path)
    args = parser.parse_args(argv)

    try:
        lines = args.input.read_text().splitlines()
    except OSError:
        lines = []
    result = disassemble_program(lines)
    args.output.write_text("".join(f"{line}\n" for line in result))
    return 0