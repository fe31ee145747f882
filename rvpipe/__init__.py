"""Five-stage RISC-V pipeline timing simulator and machine-code disassembler."""

__version__ = "0.1.0"

__all__ = ["models", "hazards", "pipeline", "parser", "disassembler", "simulator"]