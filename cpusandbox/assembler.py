"""Two-pass assembler producing machine code for a configured architecture."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from .alu import _parse_unsigned
from .config import Config, Instruction

_U64 = (1 << 64) - 1

_COMMENT = re.compile(r";|//")
_SEPARATORS = re.compile(r"[\s,]+")


class AssemblyError(RuntimeError):
    """Raised for unknown instructions, registers, labels or operands."""


class OperandType(Enum):
    """Kind of an instruction operand."""

    REGISTER = "register"
    IMMEDIATE = "immediate"


def calculate_reg_bits(reg_count: int) -> int:
    """Bits needed to encode a register index among ``reg_count`` registers."""
    if reg_count <= 1:
        return 1
    return (reg_count - 1).bit_length()


def _width_mask(width: int) -> int:
    return _U64 if width >= 64 else (1 << width) - 1


def _signature(inst: Instruction) -> list[OperandType]:
    return [
        OperandType.REGISTER if enc >= -3 else OperandType.IMMEDIATE
        for enc in inst.encoding
        if enc < 0
    ]


@dataclass
class _ParsedLine:
    tokens: list[str]
    inst: Instruction
    total_bits: int
    units: int


class Assembler:
    """Turns assembly source into machine code units, one byte each."""

    def __init__(self, config: Config) -> None:
        self.config = config
        self.reg_field_width = calculate_reg_bits(len(config.registers))
        self.opcode_field_width = min(8, config.data_width)
        self._reg_index = {}
        for i, reg in enumerate(config.registers):
            self._reg_index.setdefault(reg.name, i)

    @staticmethod
    def _tokenize(line: str) -> list[str]:
        code = _COMMENT.split(line, maxsplit=1)[0]
        return [tok for tok in _SEPARATORS.split(code) if tok]

    def _operand_type(self, token: str) -> OperandType:
        return OperandType.REGISTER if token in self._reg_index else OperandType.IMMEDIATE

    def _field_width(self, position: int, enc: int) -> int:
        if enc >= 0:
            return self.opcode_field_width if position == 0 else 4
        if enc >= -3:
            return self.reg_field_width
        if enc == -6:
            return 16
        if enc == -7:
            return self.config.addr_width
        return 8

    @staticmethod
    def _parse_operand(op: str, labels: dict[str, int]) -> int:
        cleaned = op[1:] if op.startswith("#") else op
        if cleaned in labels:
            return labels[cleaned]
        try:
            return _parse_unsigned(cleaned)
        except ValueError:
            raise AssemblyError(f"Invalid operand or missing label: {op}") from None

    def _match(self, tokens: list[str]) -> Instruction:
        actual = [self._operand_type(tok) for tok in tokens[1:]]
        for inst in self.config.instructions:
            if inst.name == tokens[0] and _signature(inst) == actual:
                return inst
        raise AssemblyError(f"Unknown instruction: {tokens[0]}")

    def assemble(self, source: str, load_address: int = 0) -> bytes:
        """Assemble source text; labels resolve to addresses from ``load_address``."""
        data_width = self.config.data_width
        labels: dict[str, int] = {}
        parsed: list[_ParsedLine] = []
        address = load_address

        for line in source.split("\n"):
            tokens = self._tokenize(line)
            if not tokens:
                continue
            if tokens[0].endswith(":"):
                labels[tokens[0][:-1]] = address
                tokens = tokens[1:]
                if not tokens:
                    continue
            inst = self._match(tokens)
            total_bits = sum(
                self._field_width(pos, enc) for pos, enc in enumerate(inst.encoding)
            )
            units = (total_bits + data_width - 1) // data_width
            parsed.append(_ParsedLine(tokens, inst, total_bits, units))
            address += units

        output = bytearray()
        for pline in parsed:
            accum = 0
            operands = iter(pline.tokens[1:])
            for pos, enc in enumerate(pline.inst.encoding):
                width = self._field_width(pos, enc)
                if enc >= 0:
                    value = enc
                else:
                    token = next(operands, None)
                    if token is None:
                        raise AssemblyError(f"Missing operands for {pline.tokens[0]}")
                    if enc >= -3:
                        if token not in self._reg_index:
                            raise AssemblyError(f"Unknown register: {token}")
                        value = self._reg_index[token]
                    else:
                        value = self._parse_operand(token, labels)
                accum = ((accum << width) | (value & _width_mask(width))) & _U64

            fetched_bits = pline.units * data_width
            accum = (accum << (fetched_bits - pline.total_bits)) & _U64
            unit_mask = _width_mask(data_width)
            for shift in range(fetched_bits - data_width, -1, -data_width):
                output.append((accum >> shift) & unit_mask & 0xFF)

        return bytes(output)