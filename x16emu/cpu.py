"""A 65C02 processor core driven by memory access callbacks."""

from __future__ import annotations

from typing import Callable

from x16emu.instructions import operation
from x16emu.opcodes import BASE_STACK, AddressMode, Flag, addressing_mode, cycles, operation_name

_TABLE = tuple(
    (addressing_mode(code), operation(operation_name(code)), cycles(code)) for code in range(256)
)

_RESET_VECTOR = 0xFFFC
_NMI_VECTOR = 0xFFFA
_IRQ_VECTOR = 0xFFFE
_INTERRUPT_CYCLES = 7


class CPU65C02:
    """A 65C02 that reads and writes memory through the callbacks it is given.

    ``read(address)`` returns the byte at a 16-bit address and
    ``write(address, value)`` stores one. ``stop(address)`` is called when a
    STP instruction runs and ``vector_pull()`` whenever an interrupt vector
    is about to be fetched.
    """

    def __init__(
        self,
        read: Callable[[int], int],
        write: Callable[[int, int], None],
        stop: Callable[[int], None] | None = None,
        vector_pull: Callable[[], None] | None = None,
    ) -> None:
        self._read = read
        self._write = write
        self._stop = stop
        self._vector_pull = vector_pull
        self.pc = 0
        self.sp = 0
        self.a = 0
        self.x = 0
        self.y = 0
        self.status = 0
        self.instructions = 0
        self.clockticks = 0
        self.clockgoal = 0
        self.ea = 0
        self.reladdr = 0
        self.opcode = 0
        self.penalty_op = False
        self.penalty_addr = False
        self.waiting = False
        self._hook: Callable[[], None] | None = None
        self._mode = AddressMode.IMP
        self._mode_handlers = {
            AddressMode.IMP: self._no_operand,
            AddressMode.ACC: self._no_operand,
            AddressMode.IMM: self._imm,
            AddressMode.ZP: self._zp,
            AddressMode.ZPX: self._zpx,
            AddressMode.ZPY: self._zpy,
            AddressMode.REL: self._rel,
            AddressMode.ABSO: self._abso,
            AddressMode.ABSX: self._absx,
            AddressMode.ABSY: self._absy,
            AddressMode.IND: self._ind,
            AddressMode.INDX: self._indx,
            AddressMode.INDY: self._indy,
            AddressMode.IND0: self._ind0,
            AddressMode.AINX: self._ainx,
            AddressMode.ZPREL: self._zprel,
        }

    # ------------------------------------------------------------------
    # bus access

    def read(self, address: int) -> int:
        return self._read(address & 0xFFFF) & 0xFF

    def write(self, address: int, value: int) -> None:
        self._write(address & 0xFFFF, value & 0xFF)

    def stop(self, address: int) -> None:
        if self._stop is not None:
            self._stop(address)

    def vector_pull(self) -> None:
        if self._vector_pull is not None:
            self._vector_pull()

    def _word(self, address: int) -> int:
        return self.read(address) | (self.read((address + 1) & 0xFFFF) << 8)

    def _fetch(self) -> int:
        value = self.read(self.pc)
        self.pc = (self.pc + 1) & 0xFFFF
        return value

    # ------------------------------------------------------------------
    # operand access and stack

    def get_value(self) -> int:
        """The operand of the current instruction."""
        if self._mode is AddressMode.ACC:
            return self.a
        return self.read(self.ea)

    def put_value(self, value: int) -> None:
        """Store the result of the current instruction."""
        if self._mode is AddressMode.ACC:
            self.a = value & 0xFF
        else:
            self.write(self.ea, value)

    def push8(self, value: int) -> None:
        self.write(BASE_STACK + self.sp, value)
        self.sp = (self.sp - 1) & 0xFF

    def push16(self, value: int) -> None:
        self.write(BASE_STACK + self.sp, (value >> 8) & 0xFF)
        self.write(BASE_STACK + ((self.sp - 1) & 0xFF), value & 0xFF)
        self.sp = (self.sp - 2) & 0xFF

    def pull8(self) -> int:
        self.sp = (self.sp + 1) & 0xFF
        return self.read(BASE_STACK + self.sp)

    def pull16(self) -> int:
        low = self.read(BASE_STACK + ((self.sp + 1) & 0xFF))
        high = self.read(BASE_STACK + ((self.sp + 2) & 0xFF))
        self.sp = (self.sp + 2) & 0xFF
        return low | (high << 8)

    # ------------------------------------------------------------------
    # addressing modes

    def _no_operand(self) -> None:
        pass

    def _imm(self) -> None:
        self.ea = self.pc
        self.pc = (self.pc + 1) & 0xFFFF

    def _zp(self) -> None:
        self.ea = self._fetch()

    def _zpx(self) -> None:
        self.ea = (self._fetch() + self.x) & 0xFF

    def _zpy(self) -> None:
        self.ea = (self._fetch() + self.y) & 0xFF

    def _rel(self) -> None:
        offset = self._fetch()
        self.reladdr = offset | 0xFF00 if offset & 0x80 else offset

    def _abso(self) -> None:
        self.ea = self._word(self.pc)
        self.pc = (self.pc + 2) & 0xFFFF

    def _indexed_absolute(self, index: int) -> None:
        base = self._word(self.pc)
        self.ea = (base + index) & 0xFFFF
        if (base ^ self.ea) & 0xFF00:
            self.penalty_addr = True
        self.pc = (self.pc + 2) & 0xFFFF

    def _absx(self) -> None:
        self._indexed_absolute(self.x)

    def _absy(self) -> None:
        self._indexed_absolute(self.y)

    def _ind(self) -> None:
        # The 65C02 has no page-wrap bug on indirect jumps.
        self.ea = self._word(self._word(self.pc))
        self.pc = (self.pc + 2) & 0xFFFF

    def _indx(self) -> None:
        pointer = (self._fetch() + self.x) & 0xFF
        self.ea = self.read(pointer) | (self.read((pointer + 1) & 0xFF) << 8)

    def _zero_page_pointer(self) -> int:
        pointer = self._fetch()
        return self.read(pointer) | (self.read((pointer + 1) & 0xFF) << 8)

    def _indy(self) -> None:
        base = self._zero_page_pointer()
        self.ea = (base + self.y) & 0xFFFF
        if (base ^ self.ea) & 0xFF00:
            self.penalty_addr = True

    def _ind0(self) -> None:
        self.ea = self._zero_page_pointer()

    def _ainx(self) -> None:
        pointer = (self._word(self.pc) + self.x) & 0xFFFF
        self.ea = self._word(pointer)
        self.pc = (self.pc + 2) & 0xFFFF

    def _zprel(self) -> None:
        self.ea = self.read(self.pc)
        offset = self.read((self.pc + 1) & 0xFFFF)
        self.reladdr = offset | 0xFF00 if offset & 0x80 else offset
        self.pc = (self.pc + 2) & 0xFFFF

    # ------------------------------------------------------------------
    # execution

    def reset(self) -> None:
        """Load the reset vector and put the registers in their power-on state."""
        self.pc = self._word(_RESET_VECTOR)
        self.a = 0
        self.x = 0
        self.y = 0
        self.sp = 0xFD
        self.status |= Flag.CONSTANT | Flag.BREAK | Flag.INTERRUPT
        self.status &= ~Flag.DECIMAL & 0xFF
        self.waiting = False

    def _run_instruction(self) -> None:
        self.opcode = self._fetch()
        self.status |= Flag.CONSTANT
        self.penalty_op = False
        self.penalty_addr = False
        mode, run, ticks = _TABLE[self.opcode]
        self._mode = mode
        self._mode_handlers[mode]()
        run(self)
        self.clockticks += ticks
        if self.penalty_op and self.penalty_addr:
            self.clockticks += 1
        self.instructions += 1
        if self._hook is not None:
            self._hook()

    def step(self) -> None:
        """Run one instruction, or one idle cycle while waiting for an interrupt."""
        if self.waiting:
            self.clockticks += 1
            self.clockgoal = self.clockticks
            return
        self._run_instruction()
        self.clockgoal = self.clockticks

    def execute(self, tickcount: int) -> None:
        """Run instructions until ``tickcount`` more clock cycles have passed."""
        if self.waiting:
            self.clockticks += tickcount
            self.clockgoal = self.clockticks
            return
        self.clockgoal += tickcount
        while self.clockticks < self.clockgoal:
            self._run_instruction()

    def _interrupt(self, vector: int) -> None:
        self.push16(self.pc)
        self.push8(self.status & ~Flag.BREAK & 0xFF)
        self.status |= Flag.INTERRUPT
        self.status &= ~Flag.DECIMAL & 0xFF
        self.vector_pull()
        self.pc = self._word(vector)
        self.clockticks += _INTERRUPT_CYCLES

    def irq(self) -> None:
        """Raise a maskable interrupt; it always ends a WAI."""
        if not self.status & Flag.INTERRUPT:
            self._interrupt(_IRQ_VECTOR)
        self.waiting = False

    def nmi(self) -> None:
        """Raise a non-maskable interrupt."""
        self._interrupt(_NMI_VECTOR)
        self.waiting = False

    def hook_external(self, callback: Callable[[], None] | None) -> None:
        """Call ``callback`` after every instruction; None removes it."""
        self._hook = callback