import pytest

from cpusandbox.assembler import Assembler, AssemblyError, calculate_reg_bits
from cpusandbox.config import Config, Instruction, RegisterDef

DEST, SRC, ADDR_REG, OFFSET, IMM8, IMM16, ADDRESS = -1, -2, -3, -4, -5, -6, -7


def eight_bit_config():
    return Config(
        name="8-Bit",
        data_width=8,
        addr_width=16,
        memory_size=65536,
        registers=[
            RegisterDef("R0", 8),
            RegisterDef("R1", 8),
            RegisterDef("R2", 8),
            RegisterDef("R3", 8),
            RegisterDef("PC", 16, 0, "program_counter"),
            RegisterDef("SP", 16, 65535, "stack_pointer"),
            RegisterDef("FLAGS", 8, 0, "status_flags"),
        ],
        instructions=[
            Instruction("NOP", 0, encoding=[0]),
            Instruction("LDI", 2, encoding=[2, DEST, IMM8]),
            Instruction("MOV", 3, encoding=[3, DEST, SRC]),
            Instruction("MOV", 4, encoding=[4, DEST, IMM8]),
            Instruction("ADD", 5, encoding=[5, DEST, SRC]),
            Instruction("JMP", 7, encoding=[7, ADDRESS]),
            Instruction("CALL", 11, encoding=[11, ADDRESS]),
            Instruction("LDW", 12, encoding=[12, DEST, IMM16]),
            Instruction("HLT", 15, encoding=[15]),
        ],
    )


@pytest.fixture
def assembler():
    return Assembler(eight_bit_config())


def test_basic_program(assembler):
    source = (
        "start:\n"
        "  LDI R0, 42  ; Load 42 to R0\n"
        "  LDI R1, 10\n"
        "  ADD R0, R1\n"
        "  HLT\n"
    )
    code = assembler.assemble(source, 0)
    assert len(code) == 9
    assert code == bytes([0x02, 0x05, 0x40, 0x02, 0x21, 0x40, 0x05, 0x04, 15])


def test_label_resolution(assembler):
    source = "  JMP target\n  NOP\ntarget:\n  HLT\n"
    code = assembler.assemble(source, 0)
    assert code == bytes([0x07, 0x00, 0x04, 0x00, 15])


def test_labels_follow_load_address(assembler):
    source = "  JMP target\n  NOP\ntarget:\n  HLT\n"
    code = assembler.assemble(source, 0x100)
    assert code[:3] == bytes([0x07, 0x01, 0x04])


def test_label_on_same_line_as_instruction(assembler):
    code = assembler.assemble("JMP here\nhere: HLT", 0)
    assert code == bytes([0x07, 0x00, 0x03, 15])


def test_hash_prefixed_hex_immediate(assembler):
    assert assembler.assemble("CALL #0x1000\nHLT", 0) == bytes([0x0B, 0x10, 0x00, 15])


def test_sixteen_bit_immediate(assembler):
    code = assembler.assemble("LDW R0, 0x1234", 0)
    assert code == bytes([0x0C, 0x02, 0x46, 0x80])


def test_overload_chosen_by_operand_kinds(assembler):
    assert assembler.assemble("MOV R2, R1", 0)[0] == 3
    assert assembler.assemble("MOV R2, 7", 0)[0] == 4


def test_slash_comments_and_blank_lines(assembler):
    assert assembler.assemble("\n  // nothing\nHLT // stop\n\n", 0) == bytes([15])


def test_unknown_instruction(assembler):
    with pytest.raises(AssemblyError, match="Unknown instruction"):
        assembler.assemble("XYZ R0, R1", 0)


def test_wrong_operand_count_is_unknown_instruction(assembler):
    with pytest.raises(AssemblyError, match="Unknown instruction"):
        assembler.assemble("LDI R0", 0)


def test_missing_label(assembler):
    with pytest.raises(AssemblyError, match="Invalid operand or missing label: nowhere"):
        assembler.assemble("JMP nowhere", 0)


def test_four_bit_units():
    config = Config(
        name="Tiny4",
        data_width=4,
        addr_width=4,
        memory_size=16,
        registers=[
            RegisterDef("A", 4),
            RegisterDef("B", 4),
            RegisterDef("PC", 4, 0, "program_counter"),
        ],
        instructions=[
            Instruction("ADD", 1, encoding=[1, DEST, SRC]),
            Instruction("HLT", 15, encoding=[15]),
        ],
    )
    asm = Assembler(config)
    assert asm.opcode_field_width == 4
    assert asm.reg_field_width == 2
    assert asm.assemble("ADD A, B\nHLT", 0) == bytes([1, 1, 15])


@pytest.mark.parametrize(
    "count, bits", [(0, 1), (1, 1), (2, 1), (3, 2), (7, 3), (8, 3), (9, 4), (16, 4)]
)
def test_calculate_reg_bits(count, bits):
    assert calculate_reg_bits(count) == bits