import pytest

from x16emu.disasm import Disassembly, disassemble
from x16emu.opcodes import AddressMode, addressing_mode, mnemonic


def _memory(start, data, size=0x10000):
    mem = bytearray(size)
    mem[start : start + len(data)] = bytes(data)
    return mem


def _reader(mem):
    return lambda address: mem[address]


def test_immediate():
    mem = _memory(0x200, [0xA9, 0x42])
    result = disassemble(_reader(mem), 0x200)
    assert result == Disassembly("lda #$42", 2, None)


def test_implied_has_length_one():
    mem = _memory(0x200, [0xEA])
    result = disassemble(_reader(mem), 0x200)
    assert result.text == mnemonic(0xEA)
    assert result.length == 1
    assert result.effective_address is None


def test_brk_is_two_bytes():
    mem = _memory(0x200, [0x00])
    assert disassemble(_reader(mem), 0x200).length == 2


def test_zero_page_x_effective_address():
    mem = _memory(0x300, [0xB5, 0x10])
    result = disassemble(_reader(mem), 0x300, x=5)
    assert result.length == 2
    assert result.effective_address == 0x10 + 5


def test_indirect_indexed_y():
    mem = _memory(0x300, [0xB1, 0x20])
    mem[0x20] = 0x00
    mem[0x21] = 0x30
    result = disassemble(_reader(mem), 0x300, y=4)
    assert result.effective_address == 0x3000 + 4


def test_absolute_jump():
    mem = _memory(0x400, [0x4C, 0x34, 0x12])
    result = disassemble(_reader(mem), 0x400)
    assert result.text == "jmp $1234"
    assert result.length == 3
    assert result.effective_address == 0x1234


def test_absolute_indirect():
    mem = _memory(0x400, [0x6C, 0x34, 0x12])
    mem[0x1234] = 0xCD
    mem[0x1235] = 0xAB
    result = disassemble(_reader(mem), 0x400)
    assert result.effective_address == 0xABCD


def test_absolute_indexed_indirect_uses_x():
    mem = _memory(0x400, [0x7C, 0x00, 0x12])
    mem[0x1202] = 0x78
    mem[0x1203] = 0x56
    result = disassemble(_reader(mem), 0x400, x=2)
    assert result.effective_address == 0x5678


def test_branch_to_itself():
    pc = 0x0812
    mem = _memory(pc, [0xD0, 0xFE])
    result = disassemble(_reader(mem), pc)
    assert result.text == f"bne ${pc:x}"
    assert result.length == 2
    assert result.effective_address is None


def test_zero_page_relative():
    pc = 0x0900
    mem = _memory(pc, [0x0F, 0x44, 0x00])
    result = disassemble(_reader(mem), pc)
    assert result.length == 3
    assert result.text == f"bbr0 $44, ${pc + 3:04x}"


def test_operand_read_wraps_at_top_of_memory():
    mem = _memory(0xFFFF, [0xA5])
    mem[0] = 0x33
    result = disassemble(_reader(mem), 0xFFFF)
    assert result.effective_address == 0x33


@pytest.mark.parametrize("opcode", range(256))
def test_length_follows_template(opcode):
    mem = _memory(0x1000, [opcode])
    result = disassemble(_reader(mem), 0x1000)
    template = mnemonic(opcode)
    if addressing_mode(opcode) is AddressMode.ZPREL or "%04x" in template:
        assert result.length == 3
    elif "%02x" in template or opcode == 0x00:
        assert result.length == 2
    else:
        assert result.length == 1
    assert "%" not in result.text