from functools import lru_cache

from .isa import OpCode, decode_opcode
from .instruction import (
    Instruction,
    AddInstruction,
    AndInstruction,
    NotInstruction,
    BranchInstruction,
    JumpInstruction,
    JumpSubroutineInstruction,
    LoadInstruction,
    LoadIndirectInstruction,
    LoadRegisterInstruction,
    LoadEffectiveAddressInstruction,
    StoreInstruction,
    StoreIndirectInstruction,
    StoreRegisterInstruction,
    TrapInstruction,
    ReservedInstruction,
)


@lru_cache(maxsize=4096)
def decode(inst: int) -> Instruction:
    opcode = decode_opcode(inst)

    match opcode:
        case OpCode.BR:
            return BranchInstruction(inst)
        case OpCode.ADD:
            return AddInstruction(inst)
        case OpCode.LD:
            return LoadInstruction(inst)
        case OpCode.ST:
            return StoreInstruction(inst)
        case OpCode.JSR:
            return JumpSubroutineInstruction(inst)
        case OpCode.AND:
            return AndInstruction(inst)
        case OpCode.LDR:
            return LoadRegisterInstruction(inst)
        case OpCode.STR:
            return StoreRegisterInstruction(inst)
        case OpCode.RTI:
            return ReservedInstruction(inst)
        case OpCode.NOT:
            return NotInstruction(inst)
        case OpCode.LDI:
            return LoadIndirectInstruction(inst)
        case OpCode.STI:
            return StoreIndirectInstruction(inst)
        case OpCode.JMP:
            return JumpInstruction(inst)
        case OpCode.RES:
            return ReservedInstruction(inst)
        case OpCode.LEA:
            return LoadEffectiveAddressInstruction(inst)
        case OpCode.TRAP:
            return TrapInstruction(inst)
        case _:
            raise ValueError(f"not a 16-bit instruction word: {inst!r}")
