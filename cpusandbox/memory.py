"""Byte-addressed memory with word-sized access and memory-mapped I/O."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Optional

ReadCallback = Callable[[int], int]
WriteCallback = Callable[[int, int], None]

_SUPPORTED_WORD_SIZES = (4, 8, 16, 32, 64)


class MemoryAccessError(RuntimeError):
    """Raised on an out-of-bounds memory access."""


@dataclass
class MMIORegion:
    """An inclusive address range routed to I/O callbacks."""

    start: int
    end: int
    read_cb: Optional[ReadCallback] = None
    write_cb: Optional[WriteCallback] = None

    def __contains__(self, address: int) -> bool:
        return self.start <= address <= self.end


class Memory:
    """Little-endian memory accessed in words of a fixed bit width."""

    def __init__(self, size: int, word_size_bits: int = 8) -> None:
        if word_size_bits not in _SUPPORTED_WORD_SIZES:
            raise ValueError(f"Unsupported word size: {word_size_bits} bits")
        self.raw = bytearray(size)
        self.word_size_bytes = max(1, (word_size_bits + 7) // 8)
        self._mask = (1 << word_size_bits) - 1
        self._io_regions: list[MMIORegion] = []

    def __len__(self) -> int:
        return len(self.raw)

    def is_valid_address(self, address: int) -> bool:
        """True if a full word starting at the address lies inside memory."""
        return address >= 0 and address + self.word_size_bytes - 1 < len(self.raw)

    def _find_io_region(self, address: int) -> Optional[MMIORegion]:
        return next((r for r in self._io_regions if address in r), None)

    def read(self, address: int) -> int:
        """Read a word, or ask the mapped I/O region for it."""
        if not self.is_valid_address(address):
            raise MemoryAccessError(f"Memory read out of bounds: {address}")
        region = self._find_io_region(address)
        if region is not None:
            return region.read_cb(address) if region.read_cb else 0
        end = address + self.word_size_bytes
        return int.from_bytes(self.raw[address:end], "little")

    def write(self, address: int, value: int) -> None:
        """Write a word masked to the word size; mapped I/O also sees it."""
        if not self.is_valid_address(address):
            raise MemoryAccessError(f"Memory write out of bounds: {address}")
        region = self._find_io_region(address)
        if region is not None and region.write_cb:
            region.write_cb(address, value)
        value &= self._mask
        end = address + self.word_size_bytes
        self.raw[address:end] = value.to_bytes(self.word_size_bytes, "little")

    def read_bytes(self, address: int, count: int) -> bytes:
        """Read raw bytes, bypassing I/O regions."""
        for offset in range(count):
            if not self.is_valid_address(address + offset):
                raise MemoryAccessError("Memory read out of bounds")
        return bytes(self.raw[address:address + count])

    def write_bytes(self, address: int, data: Iterable[int]) -> None:
        """Write raw bytes, bypassing I/O regions."""
        for offset, byte in enumerate(data):
            if not self.is_valid_address(address + offset):
                raise MemoryAccessError("Memory write out of bounds")
            self.raw[address + offset] = byte & 0xFF

    def load_program(self, machine_code: Iterable[int], start_address: int = 0) -> None:
        """Copy machine code into memory at the given address."""
        self.write_bytes(start_address, machine_code)

    def reset(self) -> None:
        """Zero all memory; I/O mappings are kept."""
        self.raw[:] = bytes(len(self.raw))

    def map_io_region(
        self,
        start: int,
        end: int,
        read_cb: Optional[ReadCallback] = None,
        write_cb: Optional[WriteCallback] = None,
    ) -> None:
        """Route accesses to [start, end] through the given callbacks."""
        self._io_regions.append(MMIORegion(start, end, read_cb, write_cb))

    def reset_io_hooks(self) -> None:
        """Remove every I/O mapping."""
        self._io_regions.clear()