"""Operations of the 65C02 instruction set.

Each operation is a function that takes the processor and carries out one
instruction. It runs after the addressing mode has set up the operand. The
processor object must provide:

* registers ``a``, ``x``, ``y``, ``sp``, ``pc`` and ``status`` as plain ints;
* ``ea`` (effective address), ``reladdr`` (16-bit sign-extended branch
  offset) and ``opcode`` (the opcode being executed);
* ``penalty_op``, set when the operation takes an extra cycle on a page
  crossing, ``clockticks``, the running cycle count, and ``waiting``;
* ``get_value()`` and ``put_value(value)`` for the operand;
* ``push8``, ``push16``, ``pull8`` and ``pull16`` for the stack;
* ``read(address)``, ``vector_pull()`` and ``stop(address)``.
"""

from __future__ import annotations

from typing import Any, Callable

from x16emu.opcodes import Flag

Operation = Callable[[Any], None]

_C = int(Flag.CARRY)
_Z = int(Flag.ZERO)
_I = int(Flag.INTERRUPT)
_D = int(Flag.DECIMAL)
_B = int(Flag.BREAK)
_CONSTANT = int(Flag.CONSTANT)
_V = int(Flag.OVERFLOW)
_N = int(Flag.SIGN)

_NOP_PENALTY_OPCODES = frozenset({0x1C, 0x3C, 0x5C, 0x7C, 0xDC, 0xFC})

_OPERATIONS: dict[str, Operation] = {}


def _register(name: str) -> Callable[[Operation], Operation]:
    def register(func: Operation) -> Operation:
        _OPERATIONS[name] = func
        return func

    return register


def operation(name: str) -> Operation:
    """The function that carries out the named operation."""
    try:
        return _OPERATIONS[name]
    except KeyError:
        raise ValueError(f"unknown operation: {name!r}") from None


# ----------------------------------------------------------------------
# flag helpers


def _set(cpu, flag: int, on) -> None:
    if on:
        cpu.status |= flag
    else:
        cpu.status &= ~flag & 0xFF


def _zero_sign(cpu, n: int) -> None:
    _set(cpu, _Z, not n & 0xFF)
    _set(cpu, _N, n & 0x80)


def _branch(cpu, same_page_ticks: int) -> None:
    old = cpu.pc
    cpu.pc = (cpu.pc + cpu.reladdr) & 0xFFFF
    if (old ^ cpu.pc) & 0xFF00:
        cpu.clockticks += same_page_ticks + 1
    else:
        cpu.clockticks += same_page_ticks


# ----------------------------------------------------------------------
# arithmetic and logic


@_register("adc")
def _adc(cpu) -> None:
    cpu.penalty_op = True
    value = cpu.get_value() & 0xFFFF
    carry = cpu.status & _C
    if cpu.status & _D:
        low = (cpu.a & 0x0F) + (value & 0x0F) + carry
        high = (cpu.a & 0xF0) + (value & 0xF0)
        if low > 0x09:
            high += 0x10
            low += 0x06
        if high > 0x90:
            high += 0x60
        _set(cpu, _C, high & 0xFF00)
        result = (low & 0x0F) | (high & 0xF0)
        _zero_sign(cpu, result)
        cpu.clockticks += 1
    else:
        result = (cpu.a + value + carry) & 0xFFFF
        _set(cpu, _C, result & 0xFF00)
        _set(cpu, _Z, not result & 0xFF)
        _set(cpu, _V, (result ^ cpu.a) & (result ^ value) & 0x80)
        _set(cpu, _N, result & 0x80)
    cpu.a = result & 0xFF


@_register("sbc")
def _sbc(cpu) -> None:
    cpu.penalty_op = True
    carry = cpu.status & _C
    a = cpu.a
    if cpu.status & _D:
        value = cpu.get_value() & 0xFFFF
        result = (a - (value & 0x0F) + carry - 1) & 0xFFFF
        if (result & 0x0F) > (a & 0x0F):
            result = (result - 6) & 0xFFFF
        result = (result - (value & 0xF0)) & 0xFFFF
        if (result & 0xFFF0) > (a & 0xF0):
            result = (result - 0x60) & 0xFFFF
        _set(cpu, _C, result <= a)
        _zero_sign(cpu, result)
        cpu.clockticks += 1
    else:
        value = (cpu.get_value() & 0xFFFF) ^ 0x00FF
        result = (a + value + carry) & 0xFFFF
        _set(cpu, _C, result & 0xFF00)
        _set(cpu, _Z, not result & 0xFF)
        _set(cpu, _V, (result ^ a) & (result ^ value) & 0x80)
        _set(cpu, _N, result & 0x80)
    cpu.a = result & 0xFF


def _logic(name: str, combine: Callable[[int, int], int]) -> None:
    def logic(cpu) -> None:
        cpu.penalty_op = True
        result = combine(cpu.a, cpu.get_value() & 0xFFFF)
        _zero_sign(cpu, result)
        cpu.a = result & 0xFF

    logic.__name__ = name
    _OPERATIONS[name] = logic


_logic("and", lambda a, v: a & v)
_logic("ora", lambda a, v: a | v)
_logic("eor", lambda a, v: a ^ v)


@_register("bit")
def _bit(cpu) -> None:
    value = cpu.get_value() & 0xFFFF
    _set(cpu, _Z, not (cpu.a & value) & 0xFF)
    # BIT #imm only affects Z on the 65C02.
    if cpu.opcode != 0x89:
        cpu.status = (cpu.status & 0x3F) | (value & 0xC0)


def _compare(cpu, register: int) -> None:
    value = cpu.get_value() & 0xFFFF
    result = (register - value) & 0xFFFF
    byte = value & 0xFF
    _set(cpu, _C, register >= byte)
    _set(cpu, _Z, register == byte)
    _set(cpu, _N, result & 0x80)


@_register("cmp")
def _cmp(cpu) -> None:
    cpu.penalty_op = True
    _compare(cpu, cpu.a)


@_register("cpx")
def _cpx(cpu) -> None:
    _compare(cpu, cpu.x)


@_register("cpy")
def _cpy(cpu) -> None:
    _compare(cpu, cpu.y)


# ----------------------------------------------------------------------
# shifts, rotates, increments


@_register("asl")
def _asl(cpu) -> None:
    result = ((cpu.get_value() & 0xFFFF) << 1) & 0xFFFF
    _set(cpu, _C, result & 0xFF00)
    _zero_sign(cpu, result)
    cpu.put_value(result & 0xFF)


@_register("lsr")
def _lsr(cpu) -> None:
    value = cpu.get_value() & 0xFFFF
    result = value >> 1
    _set(cpu, _C, value & 1)
    _zero_sign(cpu, result)
    cpu.put_value(result & 0xFF)


@_register("rol")
def _rol(cpu) -> None:
    value = cpu.get_value() & 0xFFFF
    result = ((value << 1) | (cpu.status & _C)) & 0xFFFF
    _set(cpu, _C, result & 0xFF00)
    _zero_sign(cpu, result)
    cpu.put_value(result & 0xFF)


@_register("ror")
def _ror(cpu) -> None:
    value = cpu.get_value() & 0xFFFF
    result = (value >> 1) | ((cpu.status & _C) << 7)
    _set(cpu, _C, value & 1)
    _zero_sign(cpu, result)
    cpu.put_value(result & 0xFF)


@_register("inc")
def _inc(cpu) -> None:
    result = ((cpu.get_value() & 0xFFFF) + 1) & 0xFFFF
    _zero_sign(cpu, result)
    cpu.put_value(result & 0xFF)


@_register("dec")
def _dec(cpu) -> None:
    result = ((cpu.get_value() & 0xFFFF) - 1) & 0xFFFF
    _zero_sign(cpu, result)
    cpu.put_value(result & 0xFF)


def _step_register(name: str, register: str, delta: int) -> None:
    def step(cpu) -> None:
        value = (getattr(cpu, register) + delta) & 0xFF
        setattr(cpu, register, value)
        _zero_sign(cpu, value)

    step.__name__ = name
    _OPERATIONS[name] = step


_step_register("inx", "x", 1)
_step_register("iny", "y", 1)
_step_register("dex", "x", -1)
_step_register("dey", "y", -1)


# ----------------------------------------------------------------------
# loads, stores, transfers


def _load(name: str, register: str) -> None:
    def load(cpu) -> None:
        cpu.penalty_op = True
        value = cpu.get_value() & 0xFF
        setattr(cpu, register, value)
        _zero_sign(cpu, value)

    load.__name__ = name
    _OPERATIONS[name] = load


_load("lda", "a")
_load("ldx", "x")
_load("ldy", "y")


def _store(name: str, register: str | None) -> None:
    def store(cpu) -> None:
        cpu.put_value(getattr(cpu, register) if register else 0)

    store.__name__ = name
    _OPERATIONS[name] = store


_store("sta", "a")
_store("stx", "x")
_store("sty", "y")
_store("stz", None)


def _transfer(name: str, source: str, target: str, flags: bool = True) -> None:
    def transfer(cpu) -> None:
        value = getattr(cpu, source)
        setattr(cpu, target, value)
        if flags:
            _zero_sign(cpu, value)

    transfer.__name__ = name
    _OPERATIONS[name] = transfer


_transfer("tax", "a", "x")
_transfer("tay", "a", "y")
_transfer("tsx", "sp", "x")
_transfer("txa", "x", "a")
_transfer("tya", "y", "a")
_transfer("txs", "x", "sp", flags=False)


# ----------------------------------------------------------------------
# stack


def _push_register(name: str, register: str) -> None:
    def push(cpu) -> None:
        cpu.push8(getattr(cpu, register))

    push.__name__ = name
    _OPERATIONS[name] = push


def _pull_register(name: str, register: str) -> None:
    def pull(cpu) -> None:
        value = cpu.pull8() & 0xFF
        setattr(cpu, register, value)
        _zero_sign(cpu, value)

    pull.__name__ = name
    _OPERATIONS[name] = pull


for _name, _reg in (("a", "a"), ("x", "x"), ("y", "y")):
    _push_register("ph" + _name, _reg)
    _pull_register("pl" + _name, _reg)


@_register("php")
def _php(cpu) -> None:
    cpu.push8(cpu.status | _B)


@_register("plp")
def _plp(cpu) -> None:
    cpu.status = cpu.pull8() | _CONSTANT


# ----------------------------------------------------------------------
# flags


def _flag_op(name: str, flag: int, on: bool) -> None:
    def flag_op(cpu) -> None:
        _set(cpu, flag, on)

    flag_op.__name__ = name
    _OPERATIONS[name] = flag_op


_flag_op("clc", _C, False)
_flag_op("sec", _C, True)
_flag_op("cld", _D, False)
_flag_op("sed", _D, True)
_flag_op("cli", _I, False)
_flag_op("sei", _I, True)
_flag_op("clv", _V, False)


# ----------------------------------------------------------------------
# control flow


def _conditional_branch(name: str, flag: int, when_set: bool) -> None:
    def branch(cpu) -> None:
        if bool(cpu.status & flag) == when_set:
            _branch(cpu, 1)

    branch.__name__ = name
    _OPERATIONS[name] = branch


_conditional_branch("bcc", _C, False)
_conditional_branch("bcs", _C, True)
_conditional_branch("bne", _Z, False)
_conditional_branch("beq", _Z, True)
_conditional_branch("bpl", _N, False)
_conditional_branch("bmi", _N, True)
_conditional_branch("bvc", _V, False)
_conditional_branch("bvs", _V, True)


@_register("bra")
def _bra(cpu) -> None:
    _branch(cpu, 0)


@_register("jmp")
def _jmp(cpu) -> None:
    cpu.pc = cpu.ea & 0xFFFF


@_register("jsr")
def _jsr(cpu) -> None:
    cpu.push16((cpu.pc - 1) & 0xFFFF)
    cpu.pc = cpu.ea & 0xFFFF


@_register("rts")
def _rts(cpu) -> None:
    cpu.pc = (cpu.pull16() + 1) & 0xFFFF


@_register("rti")
def _rti(cpu) -> None:
    cpu.status = cpu.pull8()
    cpu.pc = cpu.pull16() & 0xFFFF


@_register("brk")
def _brk(cpu) -> None:
    cpu.pc = (cpu.pc + 1) & 0xFFFF
    cpu.push16(cpu.pc)
    cpu.push8(cpu.status | _B)
    _set(cpu, _I, True)
    _set(cpu, _D, False)
    cpu.vector_pull()
    cpu.pc = cpu.read(0xFFFE) | (cpu.read(0xFFFF) << 8)


@_register("nop")
def _nop(cpu) -> None:
    if cpu.opcode in _NOP_PENALTY_OPCODES:
        cpu.penalty_op = True


@_register("stp")
def _stp(cpu) -> None:
    cpu.stop((cpu.pc - 1) & 0xFFFF)


@_register("wai")
def _wai(cpu) -> None:
    cpu.waiting = True


# ----------------------------------------------------------------------
# 65C02 bit operations


@_register("tsb")
def _tsb(cpu) -> None:
    value = cpu.get_value() & 0xFF
    _set(cpu, _Z, not cpu.a & value)
    cpu.put_value(value | cpu.a)


@_register("trb")
def _trb(cpu) -> None:
    value = cpu.get_value() & 0xFF
    _set(cpu, _Z, not cpu.a & value)
    cpu.put_value(value & (cpu.a ^ 0xFF))


def _bit_branch(name: str, mask: int, when_set: bool) -> None:
    def branch(cpu) -> None:
        if bool(cpu.get_value() & mask) == when_set:
            _branch(cpu, 1)

    branch.__name__ = name
    _OPERATIONS[name] = branch


def _bit_modify(name: str, mask: int, setting: bool) -> None:
    def modify(cpu) -> None:
        value = cpu.get_value() & 0xFF
        cpu.put_value(value | mask if setting else value & ~mask & 0xFF)

    modify.__name__ = name
    _OPERATIONS[name] = modify


for _bit_number in range(8):
    _mask = 1 << _bit_number
    _bit_branch(f"bbr{_bit_number}", _mask, False)
    _bit_branch(f"bbs{_bit_number}", _mask, True)
    _bit_modify(f"smb{_bit_number}", _mask, True)
    _bit_modify(f"rmb{_bit_number}", _mask, False)