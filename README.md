# cpusandbox

Building blocks for a CPU whose architecture is described by data rather than
code. The word width, registers, ALU operations, flags and instruction
encodings all come from a `Config`, and each component follows it.

The package has no dependencies outside the standard library.

## Components

- `cpusandbox.config`: dataclasses that describe an architecture. They are
  `Config`, `RegisterDef`, `ALUOp`, `FlagDef`, `Instruction`, `MicroOp` and
  `PeripheralDef`. You build them in Python.
- `cpusandbox.registers.RegisterFile`: register values that you can address by
  name or by index with `read(key)` and `write(key, value)`.
  - Each write is masked to the register's width.
  - The `pc` property reads and sets the program counter, which is the register
    whose role is `program_counter`.
  - `increment_pc(amount)` advances the program counter, wrapping modulo
    `2**width - 1`.
  - `find_by_role(role)` returns the index of the first register with that
    role, or `None`.
  - `values()` returns a copy of every value, and `reset()` restores the
    initial values.
  - An unknown name, an index out of range, or a missing program counter raises
    `RegisterError`.
- `cpusandbox.memory.Memory`: byte-addressed storage for little-endian words of
  4, 8, 16, 32 or 64 bits. Any other word size raises `ValueError`.
  - `read` and `write` access one word. A write is masked to the word size.
  - `read_bytes`, `write_bytes` and `load_program` move raw bytes and do not
    pass through I/O regions.
  - `map_io_region(start, end, read_cb, write_cb)` routes word accesses in the
    inclusive range to callbacks. A mapped write is also stored in memory. A
    mapped read with no read callback returns 0.
  - `reset_io_hooks()` removes every mapping. `reset()` zeroes the storage and
    keeps the mappings.
  - The underlying `bytearray` is available as `raw`.
  - An access out of bounds raises `MemoryAccessError`.
- `cpusandbox.alu.ALU`: evaluates the expression of each operation.
  - Expressions use the operands `a`, `b` and `c`, integer literals (decimal,
    `0x` hex or leading-zero octal), `+ - * & | ^ ~ << >>` and parentheses.
  - `execute(op_name, a, b=0, c=0, width=0)` masks the result to the data width.
    A positive `width` overrides it.
  - It returns an `ALUResult` with `value` and `flags`.
  - The flag rules are `result_zero`, `result_negative`, `carry_add`,
    `carry_sub`, `overflow_add`, `overflow_sub` and `parity`.
  - An unknown operation raises `KeyError`.
- `cpusandbox.assembler.Assembler`: a two-pass assembler.
  - It strips `;` and `//` comments and resolves `label:` definitions.
  - It picks the instruction form by its operand signature (`OperandType`).
  - It packs the fields MSB first into units of the data width.
  - `assemble(source, load_address=0)` returns `bytes`, one byte per memory
    unit.
  - Encoding entries of 0 or more are literal fields. The first is the opcode,
    at most 8 bits; later ones are 4 bits.
  - The register fields are -1 `dest`, -2 `src` and -3 `addr_reg`. Their width
    comes from `calculate_reg_bits(len(config.registers))`.
  - -4 is `offset` and -5 is `imm8`, both 8 bits. -6 is `imm16`, 16 bits. -7 is
    `address`, `addr_width` bits.
  - Errors raise `AssemblyError`.

## Example

```python
from cpusandbox.alu import ALU
from cpusandbox.assembler import Assembler
from cpusandbox.config import ALUOp, Config, FlagDef, Instruction, MicroOp, RegisterDef
from cpusandbox.memory import Memory

cfg = Config(
    name="Demo",
    data_width=8,
    addr_width=8,
    memory_size=256,
    registers=[
        RegisterDef("R0", 8),
        RegisterDef("R1", 8),
        RegisterDef("PC", 8, role="program_counter"),
    ],
    alu_flags=[FlagDef("Z", 0, "zero"), FlagDef("C", 1, "carry")],
    alu_ops=[ALUOp("ADD", 0, "a + b", {"Z": "result_zero", "C": "carry_add"})],
    instructions=[
        Instruction("LDI", 2, encoding=[2, -1, -5], microcode=[MicroOp("copy")]),
        Instruction("HLT", 15, encoding=[15], microcode=[MicroOp("halt")]),
    ],
)

code = Assembler(cfg).assemble("LDI R1, 42\nHLT")
assert code == b"\x02\x4a\x80\x0f"

mem = Memory(cfg.memory_size, cfg.data_width)
mem.load_program(code, 0)

result = ALU(cfg).execute("ADD", 200, 100)
assert (result.value, result.flags) == (44, 0b10)  # wrapped, carry set

output = []
mem.map_io_region(0x80, 0x80, None, lambda addr, val: output.append(chr(val)))
mem.write(0x80, ord("H"))
assert output == ["H"]
```

## What it does not do

- Nothing reads an architecture from a file. A `Config` is built in Python.
- Nothing fetches, decodes or runs instructions. `MicroOp` and `PeripheralDef`
  are description only: no component carries out microcode or attaches
  peripherals on its own.
- There is no command-line program and no graphical interface.

## Running the tests

```
pip install .[test]
pytest
```