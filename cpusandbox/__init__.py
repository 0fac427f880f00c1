"""Configurable CPU building blocks: architecture description, register file, memory with MMIO, ALU and assembler."""

__version__ = "0.1.0"
__all__ = ["config", "registers", "memory", "alu", "assembler"]