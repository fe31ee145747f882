# rvpipe

`rvpipe` runs a small RISC-V subset on a model of the classic five-stage
pipeline (IF, ID, EX, MEM, WB). It executes an assembly program, follows
branches and jumps, and draws a cycle-by-cycle table of every executed
instruction, showing where the pipeline stalls. Forwarding can be turned on
or off so the two timings can be compared.

A disassembler is included too. It turns 32-bit machine words written in
hexadecimal into assembly text.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Instructions the simulator runs

- R-type: `add`, `sub`, `and`, `or`, `slt`, `mul`, `div`, `rem`
- I-type: `addi`, `andi`, `ori`, `slli`, `srli`, `srai`
- Loads and stores: `lw`, `lh`, `lb`, `sw`, `sh`, `sb`
- Branches: `beq`, `bne`, `blt`, `bge`
- Jumps: `jal`, `jalr`
- `auipc`

Operands may be separated by commas, blanks or tabs, and memory operands may
be written as `offset(xN)` or as `offset xN`. Anything after `#` on a line is
ignored, and blank lines are skipped. Branch and jump offsets are in bytes
and are divided by four (truncating toward zero), so an offset of `8` moves
two instructions forward. A `jal` whose offset comes to zero instructions
moves on to the next one.

Register values are 32-bit signed. Division and remainder by zero leave the
dividend in the destination. Memory is 1 MiB; word accesses must be
4-byte aligned and halfword accesses 2-byte aligned.

## Running a program

```
rvpipe-sim 1 instructions.txt
```

The first argument is `1` to enable forwarding or `0` to disable it; the
second is the program file. The table is written to `output.txt`, or to the
file given with `--output`/`-o`. Execution stops when the program counter
leaves the program or after 51 instructions, which stops runaway loops.

The command exits with status 1 and a message on standard error when the
program file cannot be read, when a line cannot be parsed (an unknown
mnemonic or missing operands), when an instruction cannot be executed (an
invalid register, a write to `x0` by an arithmetic or load instruction, or a
misaligned or out-of-range address), or when the output file cannot be
written.

Example program:

```
addi x1 x0 5
addi x2 x0 7
add x3 x1 x2
sw x3 0(x0)
lw x4 0(x0)
```

Each row of the table is one executed instruction and each column a clock
cycle. A stage name marks the cycle in which the instruction enters that
stage, and `*` marks each further cycle it spends held in it.

## Disassembling machine code

```
rvpipe-disasm
```

This reads `given_input.txt` in the current directory (or the file given
with `--input`/`-i`), one hexadecimal 32-bit word per line such as
`00500093`, and writes one line of assembly per word to `instructions.txt`
(or the file given with `--output`/`-o`). Blank lines are skipped; if the
input file cannot be read, an empty output file is written.

Words that cannot be decoded come out as `Invalid instruction` (or
`Invalid Instruction` for some formats). Branches and `jal` whose target
would fall outside the program come out as `The offset is out of bounds`.

The disassembler knows more mnemonics than the simulator runs, among them
`xor`, `sll`, `srl`, `sra`, `xori`, `ld`, `lbu`, `lhu`, `lwu`, `sd`, `bltu`,
`bgeu` and `lui`. A program holding any of these cannot be passed straight
to `rvpipe-sim`.

## Using it from Python

```python
from rvpipe.simulator import Simulator

program = ["addi x1 x0 5", "addi x2 x0 7", "add x3 x1 x2"]
simulator = Simulator(program, forwarding=True)
simulator.run()                          # number of instructions executed
print(simulator.registers[3])            # 12
print(simulator.pipeline.format_table())
```

- `rvpipe.disassembler`: `disassemble(word, inst_no, total)` decodes one
  word, with `inst_no` its 1-based position and `total` the number of
  instructions; `disassemble_program(lines)` decodes a whole program;
  `hex_to_binary` and `binary_to_decimal` are the bit helpers it uses.
- `rvpipe.parser`: `tokenize(line)` splits one line of assembly; `Parser`
  turns lines into hazard-annotated `Command` records and raises
  `ParseError` for lines it cannot read.
- `rvpipe.hazards`: `bypass_table(forwarding)` gives, for each opcode, the
  stages at which its result can be forwarded, its operands are read and its
  result is written back.
- `rvpipe.pipeline`: `Pipeline` schedules commands with `run_command`,
  commits them with `save`, discards them with `restore`, stalls fetch
  behind a branch or jump with `insert_halt`, and renders the committed
  instructions with `format_table` or writes them with `print_table`.
- `rvpipe.simulator`: `Simulator.execute(tokens)` runs one instruction and
  returns the next program counter; `Simulator.run()` runs the program.
  `SimulatorError` is raised for invalid operands or addresses.
- `rvpipe.models`: the `Command`, `RegisterFile` and `RuntimeData` records.

## What it does not do

The simulator produces no trace of register or memory contents; after a run
they are available only from Python, as `Simulator.registers` and
`Simulator.data`. There are no labels: branch and jump targets must be
written as numeric byte offsets.