"""Hazard parameters per opcode.

Each entry is ``(bypass_index1, bypass_index2, read_index, write_index)``.
"""

from __future__ import annotations

_COMMON: dict[str, tuple[int, int, int, int]] = {
    "add": (2, 2, 2, 4),
    "and": (2, 2, 2, 4),
    "or": (2, 2, 2, 4),
    "sub": (2, 2, 2, 4),
    "mul": (2, 2, 2, 4),
    "div": (2, 2, 2, 4),
    "rem": (2, 2, 2, 4),
    "addi": (2, -1, 2, 4),
    "andi": (2, -1, 2, 4),
    "ori": (2, -1, 2, 4),
    "slli": (2, -1, 2, 4),
    "srli": (2, -1, 2, 4),
    "srai": (2, -1, 2, 4),
    "lw": (3, -1, 2, 4),
    "sw": (2, -1, 2, -1),
    "lb": (3, -1, 2, 4),
    "sb": (2, -1, 2, -1),
    "lh": (3, -1, 2, 4),
    "sh": (2, -1, 2, -1),
    "jal": (-1, -1, 2, 4),
    "auipc": (-1, -1, -1, 4),
}

_WITH_FORWARDING: dict[str, tuple[int, int, int, int]] = {
    "beq": (1, 1, 2, -1),
    "bge": (1, 1, 2, -1),
    "blt": (1, 1, 2, -1),
    "bne": (1, 1, 2, -1),
    "slt": (1, 1, 2, 4),
    "jalr": (1, -1, 2, 4),
}

_WITHOUT_FORWARDING: dict[str, tuple[int, int, int, int]] = {
    "beq": (2, 2, 2, -1),
    "bge": (2, 2, 2, -1),
    "blt": (2, 2, 2, -1),
    "bne": (2, 2, 2, -1),
    "slt": (2, 2, 2, 4),
    "jalr": (2, -1, 2, 4),
}


def bypass_table(forwarding: bool) -> dict[str, tuple[int, int, int, int]]:
    """Return a fresh opcode-to-hazard-parameters table."""
    table = dict(_COMMON)
    table.update(_WITH_FORWARDING if forwarding else _WITHOUT_FORWARDING)
    return table