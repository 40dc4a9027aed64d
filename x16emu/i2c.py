"""The I2C bus with its bit-level protocol, the input ring buffers and the mouse."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

DATA_MASK = 1
CLK_MASK = 2

DEVICE_SMC = 0x42
DEVICE_RTC = 0x6F

KEYBOARD_BUFFER_SIZE = 16
MOUSE_BUFFER_SIZE = 8

_STATE_START = 0
_STATE_STOP = -1

_UNMAPPED_REGISTER = 0xFF


class I2CDevice(Protocol):
    def read(self, offset: int) -> int: ...

    def write(self, offset: int, value: int) -> None: ...


class RingBuffer:
    """A byte ring buffer holding up to ``size - 1`` values."""

    def __init__(self, size: int) -> None:
        if size < 2 or size & (size - 1):
            raise ValueError(f"ring buffer size must be a power of two: {size}")
        self._data = [0] * size
        self._mask = size - 1
        self._head = 0
        self._tail = 0

    def add(self, value: int) -> bool:
        """Store a value; return False and drop it if the buffer is full."""
        following = (self._head + 1) & self._mask
        if following == self._tail:
            return False
        self._data[self._head] = value & 0xFF
        self._head = following
        return True

    def next(self) -> int:
        """Take the oldest value, or 0 if the buffer is empty."""
        if self._head == self._tail:
            return 0
        value = self._data[self._tail]
        self._tail = (self._tail + 1) & self._mask
        return value

    def flush(self) -> None:
        self._head = self._tail = 0

    def __len__(self) -> int:
        return (self._mask + 1 + self._head - self._tail) & self._mask


@dataclass
class I2CPort:
    """The clock and data lines as seen by the bus."""

    clk_in: int = 0
    data_in: int = 0
    data_out: int = 0


class I2CBus:
    """Decodes bit-banged I2C transfers and routes them to the SMC and RTC."""

    def __init__(self, smc: I2CDevice | None = None, rtc: I2CDevice | None = None) -> None:
        self.smc = smc
        self.rtc = rtc
        self.port = I2CPort()
        self.keyboard = RingBuffer(KEYBOARD_BUFFER_SIZE)
        self.mouse_buffer = RingBuffer(MOUSE_BUFFER_SIZE)
        self._old_clk = 0
        self._old_data = 0
        self.device = 0
        self.offset = 0
        self.reset_state()

    def reset_state(self) -> None:
        """Drop any transfer in progress."""
        self._state = _STATE_STOP
        self._read_mode = False
        self._value = 0
        self._count = 0

    def _target(self, device: int) -> I2CDevice | None:
        if device == DEVICE_SMC:
            return self.smc
        if device == DEVICE_RTC:
            return self.rtc
        return None

    def read(self, device: int, offset: int) -> int:
        """Read a register; absent devices read as $FF."""
        target = self._target(device)
        if target is None:
            return 0xFF
        return target.read(offset) & 0xFF

    def write(self, device: int, offset: int, value: int) -> None:
        """Write a register; writes to absent devices are ignored."""
        target = self._target(device)
        if target is not None:
            target.write(offset, value & 0xFF)

    def step(self) -> None:
        """React to the current state of the clock and data lines."""
        port = self.port
        if port.clk_in == self._old_clk and port.data_in == self._old_data:
            return

        if self._state == _STATE_STOP and port.clk_in == 0 and port.data_in == 0:
            self._state = _STATE_START

        if self._state == 1 and port.clk_in == 1 and port.data_in == 1 and self._old_data == 0:
            self._state = _STATE_STOP
            self._count = 0
            self._read_mode = False

        if self._state != _STATE_STOP and port.clk_in == 1 and self._old_clk == 0:
            self._clock_rising()

        self._old_clk = port.clk_in
        self._old_data = port.data_in

    def _clock_rising(self) -> None:
        port = self.port
        port.data_out = 1
        if self._state < 8:
            if self._read_mode:
                if self._state == 0:
                    self._value = self.read(self.device, self.offset)
                port.data_out = (self._value >> 7) & 1
                self._value = (self._value << 1) & 0xFF
            else:
                self._value = ((self._value << 1) | (port.data_in & 1)) & 0xFF
            self._state += 1
            return

        if self._read_mode:
            if port.data_in:
                self._count = 0
                self._read_mode = False
        else:
            ack = True
            if self._count == 0:
                self.device = self._value >> 1
                self._read_mode = bool(self._value & 1)
                if self.device not in (DEVICE_SMC, DEVICE_RTC):
                    ack = False
            elif self._count == 1:
                self.offset = self._value
            else:
                self.write(self.device, self.offset, self._value)
                self.offset = (self.offset + 1) & 0xFF
            if ack:
                port.data_out = 0
                self._count += 1
            else:
                self._count = 0
                self._read_mode = False
        self._state = _STATE_START


def _int16(value: int) -> int:
    return ((value + 0x8000) & 0xFFFF) - 0x8000


def _clamp(value: int) -> int:
    return max(-256, min(255, value))


class Mouse:
    """Accumulates mouse movement and buttons and queues PS/2-style packets."""

    def __init__(self, buffer: RingBuffer | None = None) -> None:
        self.buffer = buffer if buffer is not None else RingBuffer(MOUSE_BUFFER_SIZE)
        self.buttons = 0
        self.diff_x = 0
        self.diff_y = 0

    def button_down(self, num: int) -> None:
        self.buttons = (self.buttons | (1 << num)) & 0xFF

    def button_up(self, num: int) -> None:
        self.buttons &= ((1 << num) ^ 0xFF) & 0xFF

    def move(self, x: int, y: int) -> None:
        self.diff_x = _int16(self.diff_x + x)
        self.diff_y = _int16(self.diff_y - y)

    def _send(self, x: int, y: int, buttons: int) -> bool:
        if len(self.buffer) >= 5:
            return False
        header = ((y >> 9) & 1) << 5 | ((x >> 9) & 1) << 4 | 1 << 3 | buttons
        self.buffer.add(header)
        self.buffer.add(x)
        self.buffer.add(y)
        return True

    def send_state(self) -> None:
        """Queue packets for the pending movement, at most 255 per axis each."""
        while True:
            send_x = _clamp(self.diff_x)
            send_y = _clamp(self.diff_y)
            self._send(send_x, send_y, self.buttons)
            self.diff_x = _int16(self.diff_x - send_x)
            self.diff_y = _int16(self.diff_y - send_y)
            if not (self.diff_x != 0 and self.diff_y != 0):
                break

    def read(self, reg: int) -> int:
        """Read a mouse register; no register is mapped, so every read gives $FF."""
        if not 0 <= reg <= 0xFF:
            raise ValueError(f"mouse register out of range: {reg}")
        return _UNMAPPED_REGISTER