"""Register file with per-register width masking and role lookup."""

from __future__ import annotations

from typing import Optional, Union

from .config import Config, RegisterDef

_U64 = (1 << 64) - 1


class RegisterError(RuntimeError):
    """Raised for unknown registers, bad indices or a missing program counter."""


def _mask(value: int, width: int) -> int:
    value &= _U64
    if width >= 64:
        return value
    return value & ((1 << width) - 1)


class RegisterFile:
    """Holds the values of the registers described by a configuration."""

    def __init__(self, config: Config) -> None:
        self.defs: list[RegisterDef] = list(config.registers)
        self._values: list[int] = [d.initial & _U64 for d in self.defs]
        self._index = {d.name: i for i, d in enumerate(self.defs)}
        self._pc_index: Optional[int] = None
        for i, d in enumerate(self.defs):
            if d.role == "program_counter":
                self._pc_index = i

    def _resolve(self, key: Union[str, int]) -> int:
        if isinstance(key, str):
            try:
                return self._index[key]
            except KeyError:
                raise RegisterError(f"Unknown register: {key}") from None
        if not 0 <= key < len(self._values):
            raise RegisterError(f"Register index out of bound: {key}")
        return key

    def read(self, key: Union[str, int]) -> int:
        """Return the value of a register given by name or index."""
        return self._values[self._resolve(key)]

    def write(self, key: Union[str, int], value: int) -> None:
        """Store a value, masked to the register's width."""
        idx = self._resolve(key)
        self._values[idx] = _mask(value, self.defs[idx].width)

    def _require_pc(self) -> int:
        if self._pc_index is None:
            raise RegisterError("No program counter register defined")
        return self._pc_index

    @property
    def pc(self) -> int:
        """The program counter value."""
        return self._values[self._require_pc()]

    @pc.setter
    def pc(self, value: int) -> None:
        idx = self._require_pc()
        self._values[idx] = _mask(value, self.defs[idx].width)

    def increment_pc(self, amount: int = 1) -> None:
        """Advance the PC, wrapping modulo the largest value its width holds."""
        idx = self._require_pc()
        width = self.defs[idx].width
        max_value = _U64 if width == 64 else (1 << width) - 1
        self._values[idx] = ((self._values[idx] + amount) & _U64) % max_value

    def find_by_role(self, role: str) -> Optional[int]:
        """Index of the first register with the given role, or None."""
        return next((i for i, d in enumerate(self.defs) if d.role == role), None)

    def values(self) -> list[int]:
        """A copy of all register values in definition order."""
        return list(self._values)

    def reset(self) -> None:
        """Restore every register to its initial value."""
        self._values = [d.initial & _U64 for d in self.defs]

    def __len__(self) -> int:
        return len(self._values)