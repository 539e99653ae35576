from __future__ import annotations

import sys

from .console import Console
from .constants import WORD_MASK
from .decoder import decode
from .instruction import Instruction, ReservedInstruction
from .isa import Outcome
from .memory import Memory
from .register import RegisterFile


def execute_instruction(
    inst: int,
    registers: RegisterFile,
    memory: Memory,
    console: Console | None = None,
    ignore_reserved: bool = False,
) -> Outcome:
    """Decode ``inst`` and run its handler against the given machine state.

    ``registers.pc`` must already point past ``inst``. RTI and RES raise
    ReservedOpcodeError unless ``ignore_reserved`` is set, in which case
    they leave the state untouched.
    """
    instruction = decode(inst)
    if ignore_reserved and isinstance(instruction, ReservedInstruction):
        return Outcome.CONTINUE
    return instruction.execute(registers, memory, console)


class CpuState:
    """Represents the architectural state of the emulated CPU."""

    def __init__(
        self,
        memory: Memory | None = None,
        console: Console | None = None,
        trace: bool = False,
        ignore_reserved: bool = False,
    ):
        self.trace: bool = trace
        self.ignore_reserved: bool = ignore_reserved
        self.registers: RegisterFile = RegisterFile()
        self.console: Console = console if console else Console()
        # Memory is shared with Machine; fall back to a private instance for
        # standalone CpuState usage in tests.
        self.memory: Memory = memory if memory else Memory(console=self.console)
        self.halted: bool = False

    def step(self) -> Instruction:
        """
        Execute a single instruction.

        The PC is incremented before the instruction runs, so PC-relative
        offsets and saved return addresses refer to the following word.
        """
        pc = self.registers.pc
        inst_word = self.memory.read(pc)
        self.registers.pc = (pc + 1) & WORD_MASK

        instruction = decode(inst_word)
        if self.trace:
            print(f"PC={pc:#06x} inst: {inst_word:#06x} {instruction}", file=sys.stderr)

        outcome = execute_instruction(
            inst_word,
            self.registers,
            self.memory,
            self.console,
            ignore_reserved=self.ignore_reserved,
        )
        if outcome is Outcome.HALT:
            self.halted = True
        return instruction

    def run(self, max_steps: int | None = None) -> int:
        """Run until HALT or until max_steps is reached.

        Returns the number of instructions executed.
        """
        steps = 0
        while not self.halted:
            if max_steps is not None and steps >= max_steps:
                break
            self.step()
            steps += 1
        return steps
