"""Timing model of a five-stage in-order pipeline."""

from __future__ import annotations

import sys
from dataclasses import replace
from typing import TextIO

from .models import Command, RegisterFile, RuntimeData

STAGE_NAMES = ("IF", "ID", "EX", "MEM", "WB")
LATCH_DELAY = 20
LABEL_WIDTH = 15
ASYMMETRIC_MESSAGE = "Error: Pipeline is too asymmetric to print a table"


class Pipeline:
    """Tracks when every pipeline stage becomes free and when registers are ready.

    Instructions are first run speculatively; ``save`` commits them to the
    history and ``restore`` throws them away.
    """

    def __init__(self, bypass_active: bool, stage_names=STAGE_NAMES, fifo: bool = False):
        self.bypass_active = bypass_active
        self.fifo_active = fifo
        count = len(stage_names)
        self.stage_map = {name: index for index, name in enumerate(stage_names)}
        self.stage_empty_time = [0] * count
        self.smart_stage_empty_time = [0] * count
        self.smart_stage_start_time = [0] * count
        self.register_file = RegisterFile()
        self.scratch_register_file = RegisterFile()
        self.pending: list[RuntimeData] = []
        self.history: list[RuntimeData] = []
        self.time_taken = 0
        self.cycle = -1

    def run_command(self, command: Command, text: str = "") -> RuntimeData:
        """Schedule one instruction and return its stage timings."""
        cmd = replace(
            command,
            stage_lengths=list(command.stage_lengths),
            stage_names=list(command.stage_names),
        )
        count = len(cmd.stage_names)
        padded = [length + LATCH_DELAY for length in cmd.stage_lengths[:-1]]
        padded.extend(cmd.stage_lengths[-1:])
        length = max(padded)
        cmd.stage_lengths = [length] * count

        if self.cycle == -1:
            self.cycle = length
        elif self.cycle != length:
            self.cycle = -2

        fifo = self.fifo_active and cmd.destination == -1
        slots = [self.stage_map[name] for name in cmd.stage_names]
        empty = self.smart_stage_empty_time
        started = self.smart_stage_start_time
        scratch = self.scratch_register_file

        runtime = RuntimeData(cmd, self.stage_empty_time[0], count, text)
        runtime.stage_names[0] = cmd.stage_names[0]
        runtime.stages[0] = [empty[slots[0]], -1]
        started[slots[0]] = empty[slots[0]]

        for j in range(count - 1):
            end = runtime.stages[j][0] + cmd.stage_lengths[j]

            if j + 1 == cmd.read_index:
                ready = (
                    scratch.intermediate_update_time
                    if self.bypass_active
                    else scratch.update_time
                )
                for source in (cmd.source1, cmd.source2):
                    if source not in (-1, 0):
                        end = max(end, ready[source])

            following = slots[j + 1]
            if end < empty[following] and (end > started[following] or fifo):
                end = empty[following]

            if cmd.destination != -1:
                if j == cmd.bypass_index1:
                    scratch.intermediate_update_time[cmd.destination] = end
                if j == cmd.write_index:
                    scratch.update_time[cmd.destination] = end

            runtime.stages[j][1] = end
            runtime.stage_names[j + 1] = cmd.stage_names[j + 1]
            runtime.stages[j + 1] = [end, -1]
            empty[slots[j]] = end
            started[following] = end

        last = count - 1
        finish = runtime.stages[last][0] + cmd.stage_lengths[last]
        empty[slots[last]] = finish
        self.time_taken = max(self.time_taken, finish)
        if cmd.destination != -1:
            if cmd.write_index == last:
                scratch.update_time[cmd.destination] = finish
            if cmd.read_index == last:
                scratch.intermediate_update_time[cmd.destination] = finish
            if cmd.destination != 0:
                self.register_file.values[cmd.destination] = cmd.value
        runtime.stages[last][1] = finish

        self.pending.append(runtime)
        return runtime

    def save(self) -> None:
        """Commit the pending instructions and the scratch state."""
        self.history.extend(self.pending)
        self.pending.clear()
        self.register_file = self.scratch_register_file.copy()
        self.stage_empty_time = list(self.smart_stage_empty_time)

    def restore(self) -> None:
        """Discard the pending instructions and roll the scratch state back."""
        self.pending.clear()
        self.scratch_register_file = self.register_file.copy()
        self.smart_stage_empty_time = list(self.stage_empty_time)

    def insert_halt(self, command: Command) -> None:
        """Hold fetch until the last committed instruction resolves its control flow."""
        if not self.history:
            raise IndexError("no committed instruction to stall behind")
        resolved = self.history[-1].stages[command.read_index - 1][1]
        self.stage_empty_time[0] = resolved
        self.smart_stage_empty_time[0] = resolved
        self.restore()

    def format_table(self) -> str:
        """Render the committed history as a cycle table.

        Raises ValueError when stages have differing lengths.
        """
        if self.cycle < 0:
            raise ValueError(ASYMMETRIC_MESSAGE)
        cycle = self.cycle
        header = " " * LABEL_WIDTH + "||" + "".join(
            f"{index:>4}|" for index in range(self.time_taken // cycle)
        )
        lines = [header]
        for record in self.history:
            cells = ["    |"] * (record.stages[0][0] // cycle)
            for name, (start, end) in zip(record.stage_names, record.stages):
                cells.append(f"{name[:4]:<4}|")
                cells.extend(["  * |"] * ((end - start - cycle) // cycle))
            cells.extend(["    |"] * ((self.time_taken - record.stages[-1][1]) // cycle))
            lines.append(f"{record.text:<{LABEL_WIDTH}}||" + "".join(cells))
        return "\n".join(lines) + "\n"

    def print_table(self, out: TextIO | None = None) -> None:
        """Write the cycle table, or the asymmetry message, to ``out``."""
        stream = sys.stdout if out is None else out
        try:
            text = self.format_table()
        except ValueError as error:
            text = f"{error}\n"
        stream.write(text)