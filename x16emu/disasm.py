"""Disassembly of single 65C02 instructions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from x16emu.opcodes import mnemonic

_X_RELATIVE = frozenset(
    {
        0x01, 0x15, 0x16, 0x1D, 0x1E, 0x21, 0x34, 0x35, 0x36, 0x3C, 0x3D,
        0x41, 0x55, 0x56, 0x5D, 0x5E, 0x61, 0x74, 0x75, 0x76, 0x7C, 0x7D,
        0x7E, 0x81, 0x94, 0x95, 0x9D, 0x9E, 0xA1, 0xB4, 0xB5, 0xBC, 0xBD,
        0xC1, 0xD5, 0xD6, 0xDD, 0xDE, 0xE1, 0xF5, 0xF6, 0xFD, 0xFE,
    }
)


@dataclass(frozen=True)
class Disassembly:
    """One disassembled instruction."""

    text: str
    length: int
    effective_address: int | None = None


def _signed(byte: int) -> int:
    return byte - 0x100 if byte & 0x80 else byte


def _hex_arg(value: int) -> int:
    # Negative branch targets print as 32-bit unsigned values.
    return value % (1 << 32) if value < 0 else value


def disassemble(read: Callable[[int], int], pc: int, x: int = 0, y: int = 0) -> Disassembly:
    """Disassemble the instruction at ``pc``.

    ``read`` returns the byte at a 16-bit address; ``x`` and ``y`` are the
    index registers used to work out the effective address.
    """

    def byte(address: int) -> int:
        return read(address & 0xFFFF) & 0xFF

    def word(address: int) -> int:
        return byte(address) | (byte(address + 1) << 8)

    opcode = byte(pc)
    template = mnemonic(opcode)

    is_branch = opcode == 0x80 or (opcode & 0x1F) == 0x10
    is_zprel = (opcode & 0x0F) == 0x0F
    is_xrel = opcode in _X_RELATIVE
    is_immediate = (opcode & 0x1F) == 0x09 or opcode in (0xA0, 0xA2, 0xC0, 0xE0)
    is_yrel = (opcode & 0x17) == 0x11 or opcode in (0x96, 0xB6)
    is_indirect = (
        (opcode & 0x0F) == 0x01 or (opcode & 0x1F) == 0x12 or opcode in (0x6C, 0x7C)
    )

    if is_zprel:
        target = pc + 3 + _signed(byte(pc + 2))
        return Disassembly(template % (byte(pc + 1), _hex_arg(target)), 3)

    text = template
    length = 1
    effective: int | None = None

    if "%02x" in template:
        length = 2
        if is_branch:
            text = template % _hex_arg(pc + 2 + _signed(byte(pc + 1)))
        else:
            operand = byte(pc + 1)
            text = template % operand
            if is_indirect:
                ptr = (operand + x) & 0xFFFF if is_xrel else operand
                effective = word(ptr)
                if is_yrel:
                    effective += y
            elif not is_immediate:
                effective = operand
                if is_xrel:
                    effective += x
                if is_yrel:
                    effective += y
    elif "%04x" in template:
        length = 3
        operand = word(pc + 1)
        text = template % operand
        if is_indirect:
            ptr = (operand + x) & 0xFFFF if is_xrel else operand
            effective = word(ptr)
        else:
            effective = operand
            if is_xrel:
                effective += x
        if is_yrel:
            effective += y

    if opcode == 0x00:
        # BRK skips a signature byte.
        length = 2

    return Disassembly(text, length, effective)