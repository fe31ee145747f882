[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rvpipe"
version = "0.1.0"
description = "A five-stage RISC-V pipeline simulator with stall/forwarding timing tables and a machine-code disassembler"
requires-python = ">=3.10"
dependencies = []
keywords = ["risc-v", "riscv", "pipeline", "simulator", "disassembler", "hazards", "forwarding"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Emulators",
    "Topic :: Education",
    "Topic :: Software Development :: Disassemblers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
rvpipe-sim = "rvpipe.simulator:main"
rvpipe-disasm = "rvpipe.disassembler:main"

[tool.hatch.build.targets.wheel]
packages = ["rvpipe"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
