import pytest

from x16emu.cpu import CPU65C02
from x16emu.opcodes import Flag, cycles

ORIGIN = 0x0200


def make_cpu(program, **callbacks):
    memory = bytearray(0x10000)
    memory[ORIGIN : ORIGIN + len(program)] = bytes(program)
    memory[0xFFFC] = ORIGIN & 0xFF
    memory[0xFFFD] = ORIGIN >> 8
    cpu = CPU65C02(memory.__getitem__, memory.__setitem__, **callbacks)
    cpu.reset()
    return cpu, memory


def test_reset_loads_vector_and_registers():
    cpu, _ = make_cpu([])
    assert cpu.pc == ORIGIN
    assert cpu.sp == 0xFD
    assert (cpu.a, cpu.x, cpu.y) == (0, 0, 0)
    required = Flag.INTERRUPT | Flag.BREAK | Flag.CONSTANT
    assert cpu.status & required == required
    assert not cpu.status & Flag.DECIMAL


def test_lda_immediate_sets_flags_and_cycles():
    cpu, _ = make_cpu([0xA9, 0x80])
    cpu.step()
    assert cpu.a == 0x80
    assert cpu.status & Flag.SIGN
    assert not cpu.status & Flag.ZERO
    assert cpu.pc == ORIGIN + 2
    assert cpu.clockticks == cycles(0xA9)


def test_sta_absolute_writes_memory():
    cpu, memory = make_cpu([0xA9, 0x42, 0x8D, 0x00, 0x30])
    cpu.step()
    cpu.step()
    assert memory[0x3000] == 0x42


def test_jsr_and_rts_round_trip():
    cpu, memory = make_cpu([0x20, 0x00, 0x03])
    memory[0x0300] = 0x60
    cpu.step()
    assert cpu.pc == 0x0300
    cpu.step()
    assert cpu.pc == ORIGIN + 3
    assert cpu.sp == 0xFD


def test_push_pull_round_trip():
    cpu, _ = make_cpu([])
    start = cpu.sp
    cpu.push8(0x5A)
    cpu.push16(0xBEEF)
    assert cpu.pull16() == 0xBEEF
    assert cpu.pull8() == 0x5A
    assert cpu.sp == start


def test_stack_pointer_wraps():
    cpu, memory = make_cpu([])
    cpu.sp = 0
    cpu.push8(0x11)
    assert cpu.sp == 0xFF
    assert memory[0x100] == 0x11
    assert cpu.pull8() == 0x11
    assert cpu.sp == 0


def test_indirect_jump_has_no_page_bug():
    cpu, memory = make_cpu([0x6C, 0xFF, 0x12])
    memory[0x12FF] = 0x34
    memory[0x1300] = 0x12
    cpu.step()
    assert cpu.pc == 0x1234


def test_zero_page_x_wraps():
    cpu, memory = make_cpu([0xA2, 0x02, 0xB5, 0xFF])
    memory[0x01] = 0x77
    cpu.step()
    cpu.step()
    assert cpu.a == 0x77


def test_indirect_y_pointer_wraps_in_zero_page():
    cpu, memory = make_cpu([0xA0, 0x01, 0xB1, 0xFF])
    memory[0xFF] = 0x00
    memory[0x00] = 0x30
    memory[0x3001] = 0x66
    cpu.step()
    cpu.step()
    assert cpu.a == 0x66


def test_zero_page_indirect():
    cpu, memory = make_cpu([0xB2, 0x20])
    memory[0x20] = 0x00
    memory[0x21] = 0x40
    memory[0x4000] = 0x5A
    cpu.step()
    assert cpu.a == 0x5A


@pytest.mark.parametrize(
    "low, high, extra",
    [(0xFF, 0x10, 1), (0x00, 0x10, 0)],
)
def test_page_crossing_penalty(low, high, extra):
    cpu, _ = make_cpu([0xA2, 0x01, 0xBD, low, high])
    cpu.step()
    before = cpu.clockticks
    cpu.step()
    assert cpu.clockticks - before == cycles(0xBD) + extra


def test_branch_taken_and_not_taken():
    cpu, _ = make_cpu([0x38, 0xB0, 0x02])
    cpu.step()
    before = cpu.clockticks
    cpu.step()
    assert cpu.pc == ORIGIN + 3 + 2
    assert cpu.clockticks - before == cycles(0xB0) + 1

    cpu, _ = make_cpu([0x18, 0xB0, 0x02])
    cpu.step()
    before = cpu.clockticks
    cpu.step()
    assert cpu.pc == ORIGIN + 3
    assert cpu.clockticks - before == cycles(0xB0)


def test_accumulator_mode_shift():
    cpu, _ = make_cpu([0xA9, 0x81, 0x0A])
    cpu.step()
    cpu.step()
    assert cpu.a == 0x02
    assert cpu.status & Flag.CARRY


def test_decimal_add():
    cpu, _ = make_cpu([0xF8, 0xA9, 0x19, 0x18, 0x69, 0x01])
    for _ in range(4):
        cpu.step()
    assert cpu.a == 0x20
    assert not cpu.status & Flag.CARRY


def test_bbs_branches_on_set_bit():
    cpu, memory = make_cpu([0x8F, 0x10, 0x03])
    memory[0x10] = 0x01
    cpu.step()
    assert cpu.pc == ORIGIN + 3 + 3


def test_put_and_get_value_through_effective_address():
    cpu, memory = make_cpu([])
    cpu.ea = 0x3000
    cpu.put_value(0x1AB)
    assert memory[0x3000] == 0xAB
    assert cpu.get_value() == 0xAB


def test_irq_is_masked_after_reset():
    cpu, memory = make_cpu([])
    memory[0xFFFE] = 0x00
    memory[0xFFFF] = 0x90
    cpu.irq()
    assert cpu.pc == ORIGIN
    assert cpu.clockticks == 0


def test_irq_when_enabled_jumps_to_vector():
    cpu, memory = make_cpu([0x58])
    memory[0xFFFE] = 0x00
    memory[0xFFFF] = 0x90
    cpu.step()
    before = cpu.clockticks
    cpu.irq()
    assert cpu.pc == 0x9000
    assert cpu.clockticks - before == 7
    assert cpu.status & Flag.INTERRUPT
    pushed_status = memory[0x100 + cpu.sp + 1]
    assert not pushed_status & Flag.BREAK


def test_nmi_ignores_interrupt_mask():
    calls = []
    cpu, memory = make_cpu([], vector_pull=lambda: calls.append(True))
    memory[0xFFFA] = 0x00
    memory[0xFFFB] = 0x80
    cpu.nmi()
    assert cpu.pc == 0x8000
    assert calls == [True]


def test_brk_pushes_break_flag_and_return_address():
    calls = []
    cpu, memory = make_cpu([0x00, 0xEA], vector_pull=lambda: calls.append(True))
    memory[0xFFFE] = 0x00
    memory[0xFFFF] = 0x90
    cpu.step()
    assert cpu.pc == 0x9000
    assert calls == [True]
    assert memory[0x100 + cpu.sp + 1] & Flag.BREAK
    assert cpu.pull8() & Flag.BREAK
    assert cpu.pull16() == ORIGIN + 2


def test_wai_waits_until_irq():
    cpu, _ = make_cpu([0xCB])
    cpu.step()
    assert cpu.waiting
    before = cpu.clockticks
    cpu.execute(100)
    assert cpu.clockticks == before + 100
    assert cpu.pc == ORIGIN + 1
    cpu.irq()
    assert not cpu.waiting


def test_stp_reports_its_address():
    stops = []
    cpu, _ = make_cpu([0xDB], stop=stops.append)
    cpu.step()
    assert stops == [ORIGIN]


def test_execute_runs_to_goal_and_calls_hook():
    calls = []
    cpu, _ = make_cpu([0xEA] * 64)
    cpu.hook_external(lambda: calls.append(cpu.pc))
    cpu.execute(10)
    assert 10 <= cpu.clockticks < 10 + cycles(0xEA)
    assert len(calls) == cpu.instructions
    assert calls[-1] == cpu.pc
    cpu.hook_external(None)
    cpu.step()
    assert len(calls) == cpu.instructions - 1