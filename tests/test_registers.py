import pytest

from cpusandbox.config import Config, RegisterDef
from cpusandbox.registers import RegisterError, RegisterFile


def make_config():
    return Config(
        name="8-Bit",
        data_width=8,
        addr_width=16,
        memory_size=65536,
        registers=[
            RegisterDef("R0", 8, 0),
            RegisterDef("R1", 8, 0),
            RegisterDef("R2", 8, 0),
            RegisterDef("R3", 8, 0),
            RegisterDef("PC", 16, 0, "program_counter"),
            RegisterDef("SP", 16, 65535, "stack_pointer"),
            RegisterDef("FLAGS", 8, 0, "status_flags"),
        ],
    )


@pytest.fixture
def regs():
    return RegisterFile(make_config())


def test_size_and_roles(regs):
    assert len(regs) == 7
    assert regs.find_by_role("program_counter") == 4
    assert regs.find_by_role("stack_pointer") == 5
    assert regs.find_by_role("status_flags") == 6
    assert regs.find_by_role("nothing") is None


def test_initial_values(regs):
    assert regs.read("PC") == 0
    assert regs.read("SP") == 65535
    assert regs.read("FLAGS") == 0
    assert regs.read("R0") == 0


def test_width_masking(regs):
    regs.write("SP", 0x12345678)
    assert regs.read("SP") == 0x5678
    regs.write("R0", 0x12345678)
    assert regs.read("R0") == 0x78
    regs.write("FLAGS", 0xFFF)
    assert regs.read("FLAGS") == 0xFF


def test_pc_functions(regs):
    assert regs.pc == 0
    regs.pc = 0xDEADBEEF
    assert regs.pc == 0xBEEF
    regs.pc = 65530
    regs.increment_pc(3)
    assert regs.pc == 65533


def test_increment_pc_wraps_modulo_max(regs):
    regs.pc = 65533
    regs.increment_pc(4)
    assert regs.pc == 2


def test_increment_pc_default_amount(regs):
    regs.pc = 10
    regs.increment_pc()
    assert regs.pc == 11


def test_index_access(regs):
    regs.write(0, 0xAA)
    assert regs.read(0) == 0xAA
    assert regs.read("R0") == 0xAA


def test_reset(regs):
    regs.write("SP", 100)
    regs.write("R0", 20)
    regs.reset()
    assert regs.read("SP") == 65535
    assert regs.read("R0") == 0


def test_values_returns_copy(regs):
    vals = regs.values()
    assert vals == [0, 0, 0, 0, 0, 65535, 0]
    vals[0] = 99
    assert regs.read(0) == 0


@pytest.mark.parametrize("key", ["INVALID_REG", 7, -1])
def test_invalid_read(regs, key):
    with pytest.raises(RegisterError):
        regs.read(key)


@pytest.mark.parametrize("key", ["INVALID_REG", 100])
def test_invalid_write(regs, key):
    with pytest.raises(RegisterError):
        regs.write(key, 10)


def test_missing_pc():
    cfg = Config("x", 8, 8, 16, registers=[RegisterDef("A", 8, 0)])
    regs = RegisterFile(cfg)
    with pytest.raises(RegisterError, match="No program counter"):
        _ = regs.pc
    with pytest.raises(RegisterError):
        regs.increment_pc(1)