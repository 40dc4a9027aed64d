# x16emu

Building blocks for emulating the Commander X16 in pure Python, with no
dependencies beyond the standard library (Python 3.10 or later).

- `x16emu.cpu`: `CPU65C02`, a 65C02 core driven by memory read and write callables you supply.
- `x16emu.opcodes`: the opcode tables. `addressing_mode(opcode)`, `operation_name(opcode)`, `cycles(opcode)` and `mnemonic(opcode)` look them up, and `Flag` and `AddressMode` name the status bits and addressing modes.
- `x16emu.instructions`: `operation(name)` returns the function that carries out a named operation such as `"adc"` or `"bbr3"`.
- `x16emu.disasm`: `disassemble(read, pc, x, y)` decodes one instruction into a `Disassembly` with `text`, `length` and `effective_address`.
- `x16emu.cartridge`: `Cartridge` reads, builds and saves `.crt` cartridge images. `BankType` names the bank kinds, and `CartridgeError` is raised for bad paths and images.
- `x16emu.files`: `open_file` / `X16File` give file access with position tracking. They unpack gzip-compressed files (`.gz`, `-gz`, `.z`, `-z`, `_z`, `.Z`) into a temporary file and pack them again on close if anything was written. `close_all()` closes every file still open.
- `x16emu.i2c`: `I2CBus` decodes bit-banged I2C transfers and routes them to SMC ($42) and RTC ($6F) device objects. It also holds `RingBuffer`s for keyboard and mouse bytes. `Mouse` queues movement and button packets.
- `x16emu.icon`: the 96x96 window icon. `icon_pixels()` returns palette indices and `icon_rgba()` returns RGBA bytes, with `PALETTE` mapping the indices to colours.

## Installing

```
pip install .
```

## Running a program on the CPU

```python
from x16emu.cpu import CPU65C02

memory = bytearray(0x10000)
memory[0xFFFC:0xFFFE] = (0x00, 0x02)          # reset vector -> $0200
memory[0x0200:0x0203] = (0xA9, 0x42, 0xDB)     # lda #$42 ; stp

stopped = []
cpu = CPU65C02(
    read=lambda addr: memory[addr],
    write=lambda addr, value: memory.__setitem__(addr, value),
    stop=stopped.append,
    vector_pull=lambda: None,
)
cpu.reset()
cpu.step()
print(hex(cpu.a))   # 0x42
```

- `step()` runs one instruction.
- `execute(ticks)` runs until the clock has advanced by that many cycles.
- `irq()` and `nmi()` raise interrupts. `irq()` is ignored while the interrupt-disable flag is set, but either one ends a `WAI`.
- `hook_external(callback)` calls a function after every instruction. Pass `None` to remove it.

The registers are the attributes `a`, `x`, `y`, `sp`, `pc` and `status`. The cycle count is `clockticks` and the instruction count is `instructions`.

## Disassembling

```python
from x16emu.disasm import disassemble

result = disassemble(lambda addr: memory[addr], 0x0200, 0, 0)
print(result.text, result.length)   # lda #$42 2
```

## Building a cartridge

```python
from x16emu.cartridge import BankType, Cartridge

cart = Cartridge()
cart.description = "Demo"
cart.fill(32, 33, BankType.ROM, 0xEA)
cart.save("game.crt")

loaded = Cartridge.load("game.crt", False)
print(loaded.read(0xC000, 32))      # 234
print(loaded.description)           # Demo
```

Bank numbers follow the machine: cartridge banks start at 32.

- `define_bank_range`, `import_files` and `fill` set bank types and contents.
- `write` changes only RAM and NVRAM banks.
- `save_nvram()` writes the NVRAM banks of a loaded cartridge to the `.nvram` file beside it. When that file exists, `load` takes initialised NVRAM banks from it.

## Using the I2C bus

```python
from x16emu.i2c import I2CBus

bus = I2CBus(smc=my_smc, rtc=my_rtc)   # any objects with read(offset) and write(offset, value)
bus.port.clk_in, bus.port.data_in = 1, 0
bus.step()
```

Reads from an address with no device give $FF.

## What this package does not do

This package has no display or video chip, no sound, and no system memory map or ROM banking. It has no keyboard or joystick input from the host and no debugger screen. There is no command that starts a complete machine. The SMC and RTC behind the I2C bus are not included; supply your own objects for them.

## Running the tests

```
pip install .[test]
pytest
```