"""Arithmetic logic unit driven by configurable operator expressions."""

from __future__ import annotations

import re
import string
from dataclasses import dataclass
from enum import Enum, auto

from .config import ALUOp, Config

_U64 = (1 << 64) - 1

_C_INTEGER = re.compile(r"\s*([+-]?)(0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*)")


def _parse_unsigned(text: str) -> int:
    """Parse the leading integer of ``text`` with C base-0 rules (0x hex, 0 octal)."""
    match = _C_INTEGER.match(text)
    if match is None:
        raise ValueError(f"Not an integer: {text!r}")
    sign, digits = match.groups()
    if digits[:2].lower() == "0x":
        value = int(digits[2:], 16)
    elif digits.startswith("0"):
        value = int(digits, 8)
    else:
        value = int(digits, 10)
    if value > _U64:
        raise ValueError(f"Integer out of range: {text!r}")
    return (-value if sign == "-" else value) & _U64


def _width_mask(width: int) -> int:
    return _U64 if width >= 64 else (1 << width) - 1


class _Kind(Enum):
    OPERAND_A = auto()
    OPERAND_B = auto()
    OPERAND_C = auto()
    LITERAL = auto()
    LPAREN = auto()
    RPAREN = auto()
    ADD = auto()
    SUB = auto()
    MUL = auto()
    AND = auto()
    OR = auto()
    XOR = auto()
    NOT = auto()
    SHL = auto()
    SHR = auto()


@dataclass(frozen=True)
class _Token:
    kind: _Kind
    value: int = 0


_OPERANDS = {"a": _Kind.OPERAND_A, "b": _Kind.OPERAND_B, "c": _Kind.OPERAND_C}
_SINGLE_OPS = {
    "+": _Kind.ADD,
    "-": _Kind.SUB,
    "*": _Kind.MUL,
    "&": _Kind.AND,
    "|": _Kind.OR,
    "^": _Kind.XOR,
    "~": _Kind.NOT,
}
_DOUBLE_OPS = {"<": _Kind.SHL, ">": _Kind.SHR}
_VALUE_KINDS = {_Kind.OPERAND_A, _Kind.OPERAND_B, _Kind.OPERAND_C, _Kind.LITERAL}
_PRECEDENCE = {
    _Kind.NOT: 4,
    _Kind.MUL: 3,
    _Kind.ADD: 2,
    _Kind.SUB: 2,
    _Kind.AND: 1,
    _Kind.OR: 1,
    _Kind.XOR: 1,
}

_BINARY = {
    _Kind.ADD: lambda x, y: x + y,
    _Kind.SUB: lambda x, y: x - y,
    _Kind.MUL: lambda x, y: x * y,
    _Kind.AND: lambda x, y: x & y,
    _Kind.OR: lambda x, y: x | y,
    _Kind.XOR: lambda x, y: x ^ y,
    _Kind.SHL: lambda x, y: x << y if y < 64 else 0,
    _Kind.SHR: lambda x, y: x >> y if y < 64 else 0,
}


def _tokenize(expr: str) -> list[_Token]:
    tokens: list[_Token] = []
    i, n = 0, len(expr)
    while i < n:
        ch = expr[i]
        if ch in string.digits:
            j = i
            while j < n and (expr[j] in string.digits or expr[j] == "x"):
                j += 1
            tokens.append(_Token(_Kind.LITERAL, _parse_unsigned(expr[i:j])))
            i = j
            continue
        if ch == "(":
            tokens.append(_Token(_Kind.LPAREN))
        elif ch == ")":
            tokens.append(_Token(_Kind.RPAREN))
        elif ch in _OPERANDS:
            tokens.append(_Token(_OPERANDS[ch]))
        elif ch in _SINGLE_OPS:
            tokens.append(_Token(_SINGLE_OPS[ch]))
        elif ch in _DOUBLE_OPS and expr[i + 1:i + 2] == ch:
            tokens.append(_Token(_DOUBLE_OPS[ch]))
            i += 1
        i += 1
    return tokens


def _to_rpn(tokens: list[_Token]) -> list[_Token]:
    output: list[_Token] = []
    ops: list[_Token] = []
    for tok in tokens:
        if tok.kind in _VALUE_KINDS:
            output.append(tok)
        elif tok.kind is _Kind.LPAREN:
            ops.append(tok)
        elif tok.kind is _Kind.RPAREN:
            while ops and ops[-1].kind is not _Kind.LPAREN:
                output.append(ops.pop())
            if ops:
                ops.pop()
        else:
            prec = _PRECEDENCE.get(tok.kind, 0)
            while (
                ops
                and ops[-1].kind is not _Kind.LPAREN
                and _PRECEDENCE.get(ops[-1].kind, 0) >= prec
            ):
                output.append(ops.pop())
            ops.append(tok)
    output.extend(reversed(ops))
    return output


def _evaluate(rpn: list[_Token], a: int, b: int, c: int) -> int:
    operands = {_Kind.OPERAND_A: a, _Kind.OPERAND_B: b, _Kind.OPERAND_C: c}
    stack: list[int] = []
    try:
        for tok in rpn:
            if tok.kind in operands:
                stack.append(operands[tok.kind])
            elif tok.kind is _Kind.LITERAL:
                stack.append(tok.value)
            elif tok.kind is _Kind.NOT:
                stack.append(~stack.pop() & _U64)
            else:
                right = stack.pop()
                left = stack.pop()
                stack.append(_BINARY[tok.kind](left, right) & _U64)
        return stack[-1]
    except IndexError:
        raise ValueError("Malformed ALU expression") from None


@dataclass(frozen=True)
class ALUResult:
    """The masked result of an ALU operation and the flag bits it produced."""

    value: int
    flags: int


class ALU:
    """Evaluates the ALU operations of a configuration and computes flags."""

    def __init__(self, config: Config) -> None:
        self.config = config
        self._mask = _width_mask(config.data_width)
        self._sign_bit = 1 << (config.data_width - 1)
        self._compiled = {op.name: _to_rpn(_tokenize(op.expression)) for op in config.alu_ops}

    def _op_def(self, op_name: str) -> ALUOp:
        return next(op for op in self.config.alu_ops if op.name == op_name)

    def _flag_bit(self, flag_name: str) -> int | None:
        return next((f.bit for f in self.config.alu_flags if f.name == flag_name), None)

    def execute(self, op_name: str, a: int, b: int = 0, c: int = 0, width: int = 0) -> ALUResult:
        """Run an operation; a positive width overrides the data width for masking."""
        try:
            rpn = self._compiled[op_name]
        except KeyError:
            raise KeyError(f"Unknown ALU operation: {op_name}") from None
        op_def = self._op_def(op_name)

        a, b, c = a & _U64, b & _U64, c & _U64
        if width > 0:
            mask, sign_bit = _width_mask(width), 1 << (width - 1)
        else:
            mask, sign_bit = self._mask, self._sign_bit

        result = _evaluate(rpn, a, b, c) & mask

        flags = 0
        for flag_name, logic in op_def.flag_rules.items():
            bit = self._flag_bit(flag_name)
            if bit is None:
                continue
            if logic == "result_zero":
                value = result == 0
            elif logic == "result_negative":
                value = bool(result & sign_bit)
            elif logic == "carry_add":
                value = a > ((mask - b) & _U64)
            elif logic == "carry_sub":
                value = a < b
            elif logic == "overflow_add":
                value = not ((a ^ b) & sign_bit) and bool((a ^ result) & sign_bit)
            elif logic == "overflow_sub":
                value = bool((a ^ b) & sign_bit) and bool((a ^ result) & sign_bit)
            elif logic == "parity":
                value = bin(result).count("1") % 2 == 0
            else:
                value = False
            if value:
                flags |= 1 << bit

        return ALUResult(result, flags)