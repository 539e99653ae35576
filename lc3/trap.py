from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING

from .console import Console, EOF_CHAR
from .constants import MEMORY_SIZE, WORD_MASK
from .isa import Outcome

if TYPE_CHECKING:
    from .memory import Memory
    from .register import RegisterFile

IN_PROMPT = b"Enter a character: "
HALT_MESSAGE = b"HALT\n"


class TrapVector(IntEnum):
    GETC = 0x20  # read a character, no echo
    OUT = 0x21  # write a character
    PUTS = 0x22  # write a word-per-character string
    IN = 0x23  # prompt, read and echo a character
    PUTSP = 0x24  # write a byte-packed string
    HALT = 0x25  # stop execution


class Trap:
    """Service routines reached through the TRAP instruction.

    Routines exchange data through R0 and talk to the host through a
    :class:`Console`.
    """

    def __init__(
        self,
        registers: RegisterFile,
        memory: Memory,
        console: Console | None = None,
    ):
        self.registers = registers
        self.memory = memory
        self.console: Console = console if console else Console()

    def handle(self, vector: int) -> Outcome:
        match vector:
            case TrapVector.GETC:
                self._trap_getc()
            case TrapVector.OUT:
                self._trap_out()
            case TrapVector.PUTS:
                self._trap_puts()
            case TrapVector.IN:
                self._trap_in()
            case TrapVector.PUTSP:
                self._trap_putsp()
            case TrapVector.HALT:
                return self._trap_halt()
            case _:
                raise ValueError(f"unimplemented trap vector: {vector:#04x}")
        return Outcome.CONTINUE

    def _trap_getc(self) -> None:
        """
        GETC: read a single character from the keyboard
        Returns:
          R0 = character code (not echoed)
        """
        self.registers.write_register(0, self.console.read_char())

    def _trap_out(self) -> None:
        """
        OUT: write a character to the console
        Arguments:
          R0 = character (low byte is written)
        """
        char = self.registers.read_register(0) & 0xFF
        self.console.write(bytes([char]))
        self.console.flush()

    def _trap_puts(self) -> None:
        """
        PUTS: write a string, one character per word
        Arguments:
          R0 = address of the first character; the string ends at x0000

        Raises ValueError if no terminator is found in the whole memory.
        """
        start = self.registers.read_register(0)
        out = bytearray()
        for i in range(MEMORY_SIZE):
            word = self.memory.read((start + i) & WORD_MASK)
            if word == 0:
                break
            out.append(word & 0xFF)
        else:
            raise ValueError(f"unterminated string at {start:#06x}")
        self.console.write(bytes(out))
        self.console.flush()

    def _trap_in(self) -> None:
        """
        IN: prompt for a character, echo it and return it
        Returns:
          R0 = character code
        """
        self.console.write(IN_PROMPT)
        self.console.flush()
        char = self.console.read_char()
        if char != EOF_CHAR:
            self.console.write(bytes([char & 0xFF]))
            self.console.flush()
        self.registers.write_register(0, char)

    def _trap_putsp(self) -> None:
        """
        PUTSP: write a string packed two characters per word
        Arguments:
          R0 = address of the first word; low byte first, ends at x0000

        A zero high byte ends the string after the low byte of that word.
        Raises ValueError if no terminator is found in the whole memory.
        """
        start = self.registers.read_register(0)
        out = bytearray()
        for i in range(MEMORY_SIZE):
            word = self.memory.read((start + i) & WORD_MASK)
            if word == 0:
                break
            out.append(word & 0xFF)
            high = word >> 8
            if high == 0:
                break
            out.append(high)
        else:
            raise ValueError(f"unterminated string at {start:#06x}")
        self.console.write(bytes(out))
        self.console.flush()

    def _trap_halt(self) -> Outcome:
        self.console.write(HALT_MESSAGE)
        self.console.flush()
        return Outcome.HALT
