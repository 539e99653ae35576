from enum import IntEnum

from .constants import PC_START, WORD_MASK


class ConditionFlag(IntEnum):
    """Condition codes, laid out like the n/z/p bits of a BR instruction."""

    POS = 1 << 0
    ZRO = 1 << 1
    NEG = 1 << 2


class RegisterFile:
    """LC-3 register file: R0-R7, the PC and the condition codes.

    Registers hold unsigned 16-bit words; arithmetic interprets them as
    two's complement. Exactly one condition flag is set at any time.
    """

    def __init__(self, pc: int = PC_START):
        self.r: list[int] = [0] * 8
        self.pc: int = pc & WORD_MASK
        self.cond: ConditionFlag = ConditionFlag.ZRO

    def read_register(self, register: int) -> int:
        if not 0 <= register < 8:
            raise ValueError("invalid register")
        return self.r[register]

    def write_register(self, register: int, value: int) -> None:
        if not 0 <= register < 8:
            raise ValueError("invalid register")
        # Mask to 16 bits to handle negative values from sign extension
        self.r[register] = value & WORD_MASK

    def update_flags(self, register: int) -> None:
        """Set the condition codes from the value held in ``register``."""
        value = self.r[register]
        if value & 0x8000:  # bit 15 set = negative
            self.cond = ConditionFlag.NEG
        elif value == 0:
            self.cond = ConditionFlag.ZRO
        else:
            self.cond = ConditionFlag.POS

    def __str__(self) -> str:
        regs = " ".join(f"R{i}={v:#06x}" for i, v in enumerate(self.r))
        return f"PC={self.pc:#06x} {regs} COND={self.cond.name}"
