"""Data records shared by the parser, the pipeline model and the simulator."""

from __future__ import annotations

from dataclasses import dataclass, field

REGISTER_COUNT = 32
STAGE_COUNT = 5


@dataclass
class Command:
    """A decoded instruction together with its hazard parameters.

    The indices name pipeline stages: ``bypass_index1`` and ``bypass_index2``
    are the stages after which a result can be forwarded, ``read_index`` is the
    stage at which source operands are needed, and ``write_index`` the stage at
    which the destination register is written back. ``-1`` means "not used".
    """

    opcode: str
    stage_lengths: list[int]
    stage_names: list[str]
    destination: int = -1
    source1: int = -1
    source2: int = -1
    bypass_index1: int = -1
    bypass_index2: int = -1
    read_index: int = -1
    write_index: int = -1
    value: int = 0
    constant: int = 0


@dataclass
class RegisterFile:
    """Per-register ready times and values."""

    size: int = REGISTER_COUNT
    update_time: list[int] = field(init=False)
    intermediate_update_time: list[int] = field(init=False)
    values: list[int] = field(init=False)

    def __post_init__(self) -> None:
        self.update_time = [0] * self.size
        self.intermediate_update_time = [0] * self.size
        self.values = [0] * self.size

    def copy(self) -> RegisterFile:
        """Return an independent copy of this register file."""
        clone = RegisterFile(self.size)
        clone.update_time = list(self.update_time)
        clone.intermediate_update_time = list(self.intermediate_update_time)
        clone.values = list(self.values)
        return clone


@dataclass
class RuntimeData:
    """The timing of one instruction as it passed through the pipeline.

    ``stages`` holds a ``[start, end]`` pair for every stage.
    """

    command: Command
    start_time: int
    stage_count: int = STAGE_COUNT
    text: str = ""
    stage_names: list[str] = field(init=False)
    stages: list[list[int]] = field(init=False)

    def __post_init__(self) -> None:
        self.stage_names = [""] * self.stage_count
        self.stages = [[0, 0] for _ in range(self.stage_count)]