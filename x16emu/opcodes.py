"""Opcode tables for the 65C02: addressing modes, operations, cycle counts and mnemonics."""

from __future__ import annotations

import enum

BASE_STACK = 0x100


class Flag(enum.IntFlag):
    """Bits of the processor status register."""

    CARRY = 0x01
    ZERO = 0x02
    INTERRUPT = 0x04
    DECIMAL = 0x08
    BREAK = 0x10
    CONSTANT = 0x20
    OVERFLOW = 0x40
    SIGN = 0x80


class AddressMode(enum.Enum):
    """How an instruction finds its operand."""

    IMP = "imp"
    ACC = "acc"
    IMM = "imm"
    ZP = "zp"
    ZPX = "zpx"
    ZPY = "zpy"
    REL = "rel"
    ABSO = "abso"
    ABSX = "absx"
    ABSY = "absy"
    IND = "ind"
    INDX = "indx"
    INDY = "indy"
    IND0 = "ind0"
    AINX = "ainx"
    ZPREL = "zprel"


_ADDRESS_ROWS = """
imp indx imp imp zp zp zp zp imp imm acc imp abso abso abso zprel
rel indy ind0 imp zp zpx zpx zp imp absy acc imp abso absx absx zprel
abso indx imp imp zp zp zp zp imp imm acc imp abso abso abso zprel
rel indy ind0 imp zpx zpx zpx zp imp absy acc imp absx absx absx zprel
imp indx imp imp imp zp zp zp imp imm acc imp abso abso abso zprel
rel indy ind0 imp imp zpx zpx zp imp absy imp imp imp absx absx zprel
imp indx imp imp zp zp zp zp imp imm acc imp ind abso abso zprel
rel indy ind0 imp zpx zpx zpx zp imp absy imp imp ainx absx absx zprel
rel indx imp imp zp zp zp zp imp imm imp imp abso abso abso zprel
rel indy ind0 imp zpx zpx zpy zp imp absy imp imp abso absx absx zprel
imm indx imm imp zp zp zp zp imp imm imp imp abso abso abso zprel
rel indy ind0 imp zpx zpx zpy zp imp absy imp imp absx absx absy zprel
imm indx imp imp zp zp zp zp imp imm imp imp abso abso abso zprel
rel indy ind0 imp imp zpx zpx zp imp absy imp imp imp absx absx zprel
imm indx imp imp zp zp zp zp imp imm imp imp abso abso abso zprel
rel indy ind0 imp imp zpx zpx zp imp absy imp imp imp absx absx zprel
"""

_OPERATION_ROWS = """
brk ora nop nop tsb ora asl rmb0 php ora asl nop tsb ora asl bbr0
bpl ora ora nop trb ora asl rmb1 clc ora inc nop trb ora asl bbr1
jsr and nop nop bit and rol rmb2 plp and rol nop bit and rol bbr2
bmi and and nop bit and rol rmb3 sec and dec nop bit and rol bbr3
rti eor nop nop nop eor lsr rmb4 pha eor lsr nop jmp eor lsr bbr4
bvc eor eor nop nop eor lsr rmb5 cli eor phy nop nop eor lsr bbr5
rts adc nop nop stz adc ror rmb6 pla adc ror nop jmp adc ror bbr6
bvs adc adc nop stz adc ror rmb7 sei adc ply nop jmp adc ror bbr7
bra sta nop nop sty sta stx smb0 dey bit txa nop sty sta stx bbs0
bcc sta sta nop sty sta stx smb1 tya sta txs nop stz sta stz bbs1
ldy lda ldx nop ldy lda ldx smb2 tay lda tax nop ldy lda ldx bbs2
bcs lda lda nop ldy lda ldx smb3 clv lda tsx nop ldy lda ldx bbs3
cpy cmp nop nop cpy cmp dec smb4 iny cmp dex wai cpy cmp dec bbs4
bne cmp cmp nop nop cmp dec smb5 cld cmp phx stp nop cmp dec bbs5
cpx sbc nop nop cpx sbc inc smb6 inx sbc nop nop cpx sbc inc bbs6
beq sbc sbc nop nop sbc inc smb7 sed sbc plx nop nop sbc inc bbs7
"""

_CYCLE_ROWS = """
7 6 2 2 5 3 5 5 3 2 2 2 6 4 6 5
2 5 5 2 5 4 6 5 2 4 2 2 6 4 7 5
6 6 2 2 3 3 5 5 4 2 2 2 4 4 6 5
2 5 5 2 4 4 6 5 2 4 2 2 4 4 7 5
6 6 2 2 2 3 5 5 3 2 2 2 3 4 6 5
2 5 5 2 2 4 6 5 2 4 3 2 2 4 7 5
6 6 2 2 3 3 5 5 4 2 2 2 5 4 6 5
2 5 5 2 4 4 6 5 2 4 4 2 6 4 7 5
3 6 2 2 3 3 3 5 2 2 2 2 4 4 4 5
2 6 5 2 4 4 4 5 2 5 2 2 4 5 5 5
2 6 2 2 3 3 3 5 2 2 2 2 4 4 4 5
2 5 5 2 4 4 4 5 2 4 2 2 4 4 4 5
2 6 2 2 3 3 5 5 2 2 2 3 4 4 6 5
2 5 5 2 2 4 6 5 2 4 3 1 2 4 7 5
2 6 2 2 3 3 5 5 2 2 2 2 4 4 6 5
2 5 5 2 2 4 6 5 2 4 4 2 2 4 7 5
"""

_ADDRESS_MODES = tuple(AddressMode(name) for name in _ADDRESS_ROWS.split())
_OPERATIONS = tuple(_OPERATION_ROWS.split())
_CYCLES = tuple(int(n) for n in _CYCLE_ROWS.split())

_MNEMONICS = (
    # $0X
    "brk ", "ora ($%02x,x)", "nop ", "nop ", "tsb $%02x", "ora $%02x", "asl $%02x", "rmb0 $%02x",
    "php ", "ora #$%02x", "asl a", "nop ", "tsb $%04x", "ora $%04x", "asl $%04x", "bbr0 $%02x, $%04x",
    # $1X
    "bpl $%02x", "ora ($%02x),y", "ora ($%02x)", "nop ", "trb $%02x", "ora $%02x,x", "asl $%02x,x", "rmb1 $%02x",
    "clc ", "ora $%04x,y", "inc a", "nop ", "trb $%04x", "ora $%04x,x", "asl $%04x,x", "bbr1 $%02x, $%04x",
    # $2X
    "jsr $%04x", "and ($%02x,x)", "nop ", "nop ", "bit $%02x", "and $%02x", "rol $%02x", "rmb2 $%02x",
    "plp ", "and #$%02x", "rol a", "nop ", "bit $%04x", "and $%04x", "rol $%04x", "bbr2 $%02x, $%04x",
    # $3X
    "bmi $%02x", "and ($%02x),y", "and ($%02x)", "nop ", "bit $%02x,x", "and $%02x,x", "rol $%02x,x", "rmb3 $%02x",
    "sec ", "and $%04x,y", "dec a", "nop ", "bit $%04x,x", "and $%04x,x", "rol $%04x,x", "bbr3 $%02x, $%04x",
    # $4X
    "rti ", "eor ($%02x,x)", "nop ", "nop ", "nop ", "eor $%02x", "lsr $%02x", "rmb4 $%02x",
    "pha ", "eor #$%02x", "lsr a", "nop ", "jmp $%04x", "eor $%04x", "lsr $%04x", "bbr4 $%02x, $%04x",
    # $5X
    "bvc $%02x", "eor ($%02x),y", "eor ($%02x)", "nop ", "nop ", "eor $%02x,x", "lsr $%02x,x", "rmb5 $%02x",
    "cli ", "eor $%04x,y", "phy ", "nop ", "nop ", "eor $%04x,x", "lsr $%04x,x", "bbr5 $%02x, $%04x",
    # $6X
    "rts ", "adc ($%02x,x)", "nop ", "nop ", "stz $%02x", "adc $%02x", "ror $%02x", "rmb6 $%02x",
    "pla ", "adc #$%02x", "ror a", "nop ", "jmp ($%04x)", "adc $%04x", "ror $%04x", "bbr6 $%02x, $%04x",
    # $7X
    "bvs $%02x", "adc ($%02x),y", "adc ($%02x)", "nop ", "stz $%02x,x", "adc $%02x,x", "ror $%02x,x", "rmb7 $%02x",
    "sei ", "adc $%04x,y", "ply ", "nop ", "jmp ($%04x,x)", "adc $%04x,x", "ror $%04x,x", "bbr7 $%02x, $%04x",
    # $8X
    "bra $%02x", "sta ($%02x,x)", "nop ", "nop ", "sty $%02x", "sta $%02x", "stx $%02x", "smb0 $%02x",
    "dey ", "bit #$%02x", "txa ", "nop ", "sty $%04x", "sta $%04x", "stx $%04x", "bbs0 $%02x, $%04x",
    # $9X
    "bcc $%02x", "sta ($%02x),y", "sta ($%02x)", "nop ", "sty $%02x,x", "sta $%02x,x", "stx $%02x,y", "smb1 $%02x",
    "tya ", "sta $%04x,y", "txs ", "nop ", "stz $%04x", "sta $%04x,x", "stz $%04x,x", "bbs1 $%02x, $%04x",
    # $AX
    "ldy #$%02x", "lda ($%02x,x)", "ldx #$%02x", "nop ", "ldy $%02x", "lda $%02x", "ldx $%02x", "smb2 $%02x",
    "tay ", "lda #$%02x", "tax ", "nop ", "ldy $%04x", "lda $%04x", "ldx $%04x", "bbs2 $%02x, $%04x",
    # $BX
    "bcs $%02x", "lda ($%02x),y", "lda ($%02x)", "nop ", "ldy $%02x,x", "lda $%02x,x", "ldx $%02x,y", "smb3 $%02x",
    "clv ", "lda $%04x,y", "tsx ", "nop ", "ldy $%04x,x", "lda $%04x,x", "ldx $%04x,y", "bbs3 $%02x, $%04x",
    # $CX
    "cpy #$%02x", "cmp ($%02x,x)", "nop ", "nop ", "cpy $%02x", "cmp $%02x", "dec $%02x", "smb4 $%02x",
    "iny ", "cmp #$%02x", "dex ", "wai ", "cpy $%04x", "cmp $%04x", "dec $%04x", "bbs4 $%02x, $%04x",
    # $DX
    "bne $%02x", "cmp ($%02x),y", "cmp ($%02x)", "nop ", "nop ", "cmp $%02x,x", "dec $%02x,x", "smb5 $%02x",
    "cld ", "cmp $%04x,y", "phx ", "dbg ", "nop ", "cmp $%04x,x", "dec $%04x,x", "bbs5 $%02x, $%04x",
    # $EX
    "cpx #$%02x", "sbc ($%02x,x)", "nop ", "nop ", "cpx $%02x", "sbc $%02x", "inc $%02x", "smb6 $%02x",
    "inx ", "sbc #$%02x", "nop ", "nop ", "cpx $%04x", "sbc $%04x", "inc $%04x", "bbs6 $%02x, $%04x",
    # $FX
    "beq $%02x", "sbc ($%02x),y", "sbc ($%02x)", "nop ", "nop ", "sbc $%02x,x", "inc $%02x,x", "smb7 $%02x",
    "sed ", "sbc $%04x,y", "plx ", "nop ", "nop ", "sbc $%04x,x", "inc $%04x,x", "bbs7 $%02x, $%04x",
)


def _check(opcode: int) -> int:
    if not 0 <= opcode <= 0xFF:
        raise ValueError(f"opcode out of range: {opcode}")
    return opcode


def addressing_mode(opcode: int) -> AddressMode:
    """The addressing mode the CPU uses for an opcode."""
    return _ADDRESS_MODES[_check(opcode)]


def operation_name(opcode: int) -> str:
    """Name of the operation the CPU carries out for an opcode."""
    return _OPERATIONS[_check(opcode)]


def cycles(opcode: int) -> int:
    """Base number of clock cycles an opcode takes."""
    return _CYCLES[_check(opcode)]


def mnemonic(opcode: int) -> str:
    """The printf-style assembly template for an opcode."""
    return _MNEMONICS[_check(opcode)]