from __future__ import annotations

from typing import TYPE_CHECKING

from .constants import KBDR, KBSR, MEMORY_SIZE, WORD_MASK

if TYPE_CHECKING:
    from .console import Console


class Memory:
    """Flat 64K-word address space with memory-mapped keyboard registers.

    Every address is valid; addresses and values are truncated to 16 bits.
    When a console is attached, reading KBSR polls it and latches a pending
    character into KBDR.
    """

    def __init__(self, console: Console | None = None):
        self.cells: list[int] = [0] * MEMORY_SIZE
        self.console: Console | None = console

    def read(self, addr: int) -> int:
        """Read the word at ``addr``"""
        addr &= WORD_MASK
        if addr == KBSR and self.console is not None:
            if self.console.key_ready():
                self.cells[KBSR] = 1 << 15
                self.cells[KBDR] = self.console.read_char() & WORD_MASK
            else:
                self.cells[KBSR] = 0
        return self.cells[addr]

    def write(self, addr: int, value: int) -> None:
        """Write ``value`` to the word at ``addr``"""
        self.cells[addr & WORD_MASK] = value & WORD_MASK

    def load(self, origin: int, words: list[int]) -> None:
        """Copy ``words`` into consecutive cells starting at ``origin``."""
        origin &= WORD_MASK
        if origin + len(words) > MEMORY_SIZE:
            raise ValueError(
                f"{len(words)} words at {origin:#06x} run past the end of memory"
            )
        self.cells[origin : origin + len(words)] = [w & WORD_MASK for w in words]
