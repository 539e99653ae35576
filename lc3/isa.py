"""Opcode enumeration and bit-field helpers shared by every instruction.

Each LC-3 instruction is one 16-bit word. The top four bits select the
opcode; the remaining twelve hold opcode-specific fields in a handful of
fixed positions:

    15..12  opcode
    11..9   DR / SR (and the n/z/p bits of BR)
    8..6    SR1 / BaseR
    5       immediate-mode bit (ADD, AND)
    4..0    imm5          5..0  offset6
    8..0    PCoffset9     10..0 PCoffset11
    7..0    trapvect8
"""

from enum import Enum, IntEnum, auto

from .constants import WORD_MASK, sign_extend


class OpCode(IntEnum):
    BR = 0  # branch
    ADD = 1  # add
    LD = 2  # load
    ST = 3  # store
    JSR = 4  # jump to subroutine
    AND = 5  # bitwise and
    LDR = 6  # load base+offset
    STR = 7  # store base+offset
    RTI = 8  # return from interrupt (reserved here)
    NOT = 9  # bitwise not
    LDI = 10  # load indirect
    STI = 11  # store indirect
    JMP = 12  # jump
    RES = 13  # reserved
    LEA = 14  # load effective address
    TRAP = 15  # execute trap


class Outcome(Enum):
    """What the fetch loop should do after an instruction has executed."""

    CONTINUE = auto()
    HALT = auto()


def decode_opcode(inst: int) -> OpCode | None:
    """Return the opcode held in bits 15-12 of ``inst``.

    Returns None when ``inst`` is not a 16-bit instruction word.
    """
    if not isinstance(inst, int) or not 0 <= inst <= WORD_MASK:
        return None
    return OpCode((inst >> 12) & 0xF)


def register_field(inst: int, shift: int) -> int:
    """Extract the 3-bit register selector whose low bit is at ``shift``."""
    return (inst >> shift) & 0b111


def flag_bit(inst: int, bit: int) -> int:
    return (inst >> bit) & 0b1


def unsigned_field(inst: int, width: int) -> int:
    return inst & ((1 << width) - 1)


def signed_field(inst: int, width: int) -> int:
    """Extract the low ``width`` bits of ``inst`` as a two's-complement int."""
    return sign_extend(unsigned_field(inst, width), width)
