[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cpusandbox"
version = "0.1.0"
description = "Building blocks for a configurable CPU: architecture description, register file, memory with MMIO hooks, expression-driven ALU and a two-pass assembler."
requires-python = ">=3.10"
dependencies = []
keywords = ["cpu", "emulator", "simulator", "assembler", "isa", "alu", "education"]
classifiers = [
    "Development Status :: 3 - Alpha",
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
    "Topic :: Software Development :: Assemblers",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["cpusandbox"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
