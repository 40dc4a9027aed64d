"""Commander X16 emulator pieces: 65C02 CPU, opcode tables, disassembler, cartridges, I2C bus, file helpers and icon."""

__version__ = "0.1.0"
__all__ = ["cartridge", "cpu", "disasm", "files", "i2c", "icon", "instructions", "opcodes"]