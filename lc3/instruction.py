from __future__ import annotations

from typing import TYPE_CHECKING

from .constants import R7, WORD_MASK
from .isa import (
    OpCode,
    Outcome,
    decode_opcode,
    flag_bit,
    register_field,
    signed_field,
    unsigned_field,
)
from .trap import Trap, TrapVector

if TYPE_CHECKING:
    from .console import Console
    from .memory import Memory
    from .register import RegisterFile


class ReservedOpcodeError(ValueError):
    """Raised when an RTI or reserved (RES) instruction is executed."""

    def __init__(self, inst: int, opcode: OpCode):
        super().__init__(f"reserved opcode {opcode.name} in instruction {inst:#06x}")
        self.inst = inst
        self.opcode = opcode


class Instruction:
    def __init__(self, inst: int):
        self.inst = inst

    @property
    def opcode(self) -> OpCode | None:
        return decode_opcode(self.inst)

    def execute(
        self,
        registers: RegisterFile,
        memory: Memory,
        console: Console | None = None,
    ) -> Outcome:
        return Outcome.CONTINUE

    def __str__(self) -> str:
        return f".FILL {self.inst:#06x}"


class OperateInstruction(Instruction):
    """Common decoding for ADD and AND: register or imm5 second operand."""

    mnemonic: str = ""

    def __init__(self, inst: int):
        super().__init__(inst)
        self.dr: int = register_field(self.inst, 9)
        self.sr1: int = register_field(self.inst, 6)
        self.i: int = flag_bit(self.inst, 5)
        if self.i:
            self.imm5: int = signed_field(self.inst, 5)
        else:
            self.sr2: int = register_field(self.inst, 0)

    def _get_operand2(self, registers: RegisterFile) -> int:
        """Get the second operand (either imm5 or sr2 register value)."""
        if self.i:
            return self.imm5
        return registers.read_register(self.sr2)

    def __str__(self) -> str:
        operand2 = f"#{self.imm5}" if self.i else f"R{self.sr2}"
        return f"{self.mnemonic} R{self.dr}, R{self.sr1}, {operand2}"


class AddInstruction(OperateInstruction):
    mnemonic = "ADD"

    def execute(self, registers, memory, console=None) -> Outcome:
        # two's-complement add, wraps on overflow
        value = registers.read_register(self.sr1) + self._get_operand2(registers)
        registers.write_register(self.dr, value)
        registers.update_flags(self.dr)
        return Outcome.CONTINUE


class AndInstruction(OperateInstruction):
    mnemonic = "AND"

    def execute(self, registers, memory, console=None) -> Outcome:
        value = registers.read_register(self.sr1) & self._get_operand2(registers)
        registers.write_register(self.dr, value)
        registers.update_flags(self.dr)
        return Outcome.CONTINUE


class NotInstruction(Instruction):
    def __init__(self, inst: int):
        super().__init__(inst)
        self.dr: int = register_field(self.inst, 9)
        self.sr: int = register_field(self.inst, 6)

    def execute(self, registers, memory, console=None) -> Outcome:
        registers.write_register(self.dr, ~registers.read_register(self.sr))
        registers.update_flags(self.dr)
        return Outcome.CONTINUE

    def __str__(self) -> str:
        return f"NOT R{self.dr}, R{self.sr}"


class BranchInstruction(Instruction):
    def __init__(self, inst: int):
        super().__init__(inst)
        # n/z/p bits line up with ConditionFlag.NEG/ZRO/POS
        self.nzp: int = register_field(self.inst, 9)
        self.pc_offset9: int = signed_field(self.inst, 9)

    def execute(self, registers, memory, console=None) -> Outcome:
        if self.nzp & registers.cond:
            registers.pc = (registers.pc + self.pc_offset9) & WORD_MASK
        return Outcome.CONTINUE

    def __str__(self) -> str:
        if not self.nzp:
            return "NOP"
        conditions = "".join(
            c for c, bit in (("n", 0b100), ("z", 0b010), ("p", 0b001)) if self.nzp & bit
        )
        return f"BR{conditions} #{self.pc_offset9}"


class JumpInstruction(Instruction):
    def __init__(self, inst: int):
        super().__init__(inst)
        self.base_r: int = register_field(self.inst, 6)

    def execute(self, registers, memory, console=None) -> Outcome:
        registers.pc = registers.read_register(self.base_r)
        return Outcome.CONTINUE

    def __str__(self) -> str:
        if self.base_r == R7:
            return "RET"
        return f"JMP R{self.base_r}"


class JumpSubroutineInstruction(Instruction):
    def __init__(self, inst: int):
        super().__init__(inst)
        self.long_flag: int = flag_bit(self.inst, 11)
        if self.long_flag:
            self.pc_offset11: int = signed_field(self.inst, 11)
        else:
            self.base_r: int = register_field(self.inst, 6)

    def execute(self, registers, memory, console=None) -> Outcome:
        # Resolve the target before R7 is overwritten (JSRR R7 jumps to old R7)
        if self.long_flag:
            target = (registers.pc + self.pc_offset11) & WORD_MASK
        else:
            target = registers.read_register(self.base_r)
        registers.write_register(R7, registers.pc)
        registers.pc = target
        return Outcome.CONTINUE

    def __str__(self) -> str:
        if self.long_flag:
            return f"JSR #{self.pc_offset11}"
        return f"JSRR R{self.base_r}"


class PCRelativeInstruction(Instruction):
    """Common decoding for LD, LDI, LEA, ST and STI."""

    mnemonic: str = ""

    def __init__(self, inst: int):
        super().__init__(inst)
        self.r: int = register_field(self.inst, 9)  # DR for loads, SR for stores
        self.pc_offset9: int = signed_field(self.inst, 9)

    def _effective_address(self, registers: RegisterFile) -> int:
        # registers.pc already points at the next instruction
        return (registers.pc + self.pc_offset9) & WORD_MASK

    def __str__(self) -> str:
        return f"{self.mnemonic} R{self.r}, #{self.pc_offset9}"


class LoadInstruction(PCRelativeInstruction):
    mnemonic = "LD"

    def execute(self, registers, memory, console=None) -> Outcome:
        registers.write_register(self.r, memory.read(self._effective_address(registers)))
        registers.update_flags(self.r)
        return Outcome.CONTINUE


class LoadIndirectInstruction(PCRelativeInstruction):
    mnemonic = "LDI"

    def execute(self, registers, memory, console=None) -> Outcome:
        pointer = memory.read(self._effective_address(registers))
        registers.write_register(self.r, memory.read(pointer))
        registers.update_flags(self.r)
        return Outcome.CONTINUE


class LoadEffectiveAddressInstruction(PCRelativeInstruction):
    mnemonic = "LEA"

    def execute(self, registers, memory, console=None) -> Outcome:
        registers.write_register(self.r, self._effective_address(registers))
        registers.update_flags(self.r)
        return Outcome.CONTINUE


class StoreInstruction(PCRelativeInstruction):
    mnemonic = "ST"

    def execute(self, registers, memory, console=None) -> Outcome:
        memory.write(self._effective_address(registers), registers.read_register(self.r))
        return Outcome.CONTINUE


class StoreIndirectInstruction(PCRelativeInstruction):
    mnemonic = "STI"

    def execute(self, registers, memory, console=None) -> Outcome:
        pointer = memory.read(self._effective_address(registers))
        memory.write(pointer, registers.read_register(self.r))
        return Outcome.CONTINUE


class BaseOffsetInstruction(Instruction):
    """Common decoding for LDR and STR."""

    mnemonic: str = ""

    def __init__(self, inst: int):
        super().__init__(inst)
        self.r: int = register_field(self.inst, 9)
        self.base_r: int = register_field(self.inst, 6)
        self.offset6: int = signed_field(self.inst, 6)

    def _effective_address(self, registers: RegisterFile) -> int:
        return (registers.read_register(self.base_r) + self.offset6) & WORD_MASK

    def __str__(self) -> str:
        return f"{self.mnemonic} R{self.r}, R{self.base_r}, #{self.offset6}"


class LoadRegisterInstruction(BaseOffsetInstruction):
    mnemonic = "LDR"

    def execute(self, registers, memory, console=None) -> Outcome:
        registers.write_register(self.r, memory.read(self._effective_address(registers)))
        registers.update_flags(self.r)
        return Outcome.CONTINUE


class StoreRegisterInstruction(BaseOffsetInstruction):
    mnemonic = "STR"

    def execute(self, registers, memory, console=None) -> Outcome:
        memory.write(self._effective_address(registers), registers.read_register(self.r))
        return Outcome.CONTINUE


class TrapInstruction(Instruction):
    """
    TRAP: save the return address in R7 and run the trap routine.

    R7 is written before dispatch, so when the vector is unknown and
    ValueError propagates, R7 already holds the incremented PC.
    """

    def __init__(self, inst: int):
        super().__init__(inst)
        self.trapvect8: int = unsigned_field(self.inst, 8)

    def execute(self, registers, memory, console=None) -> Outcome:
        registers.write_register(R7, registers.pc)
        trap_handler: Trap = Trap(registers, memory, console)
        return trap_handler.handle(self.trapvect8)

    def __str__(self) -> str:
        try:
            return TrapVector(self.trapvect8).name
        except ValueError:
            return f"TRAP {self.trapvect8:#04x}"


class ReservedInstruction(Instruction):
    """RTI and RES: not implemented by this machine."""

    def execute(self, registers, memory, console=None) -> Outcome:
        raise ReservedOpcodeError(self.inst, self.opcode)

    def __str__(self) -> str:
        return f"{self.opcode.name} ; reserved"
