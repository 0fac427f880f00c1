"""Data model describing a configurable CPU architecture."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class RegisterDef:
    """A register: its name, bit width, reset value and optional role."""

    name: str
    width: int
    initial: int = 0
    role: str = ""


@dataclass
class ALUOp:
    """An ALU operation defined by an expression over operands a, b and c."""

    name: str
    code: int
    expression: str
    flag_rules: dict[str, str] = field(default_factory=dict)
    latency: int = 1


@dataclass
class MicroOp:
    """One micro-operation step: copy, alu, mem_read, mem_write, branch or halt."""

    action: str
    args: dict[str, str] = field(default_factory=dict)


@dataclass
class Instruction:
    """An instruction: opcode, bit-field encoding and its microcode."""

    name: str
    opcode: int
    format: str = ""
    encoding: list[int] = field(default_factory=list)
    microcode: list[MicroOp] = field(default_factory=list)


@dataclass
class FlagDef:
    """A status flag occupying one bit of the flags register."""

    name: str
    bit: int
    type: str = ""


@dataclass
class PeripheralDef:
    """A memory-mapped peripheral covering an inclusive address range."""

    name: str
    type: str
    address_start: int
    address_end: int
    parameters: dict[str, str] = field(default_factory=dict)


@dataclass
class Config:
    """A complete architecture description."""

    name: str
    data_width: int
    addr_width: int
    memory_size: int
    registers: list[RegisterDef] = field(default_factory=list)
    alu_flags: list[FlagDef] = field(default_factory=list)
    alu_ops: list[ALUOp] = field(default_factory=list)
    instructions: list[Instruction] = field(default_factory=list)
    peripherals: list[PeripheralDef] = field(default_factory=list)