from __future__ import annotations

import struct

from .console import Console
from .constants import MEMORY_SIZE
from .cpu import CpuState
from .memory import Memory


def parse_image(data: bytes) -> tuple[int, list[int]]:
    """Split an object image into its origin and payload words.

    An image is a sequence of big-endian 16-bit words; the first word is
    the load address of the rest.
    """
    if len(data) < 2:
        raise ValueError("image has no origin word")
    if len(data) % 2:
        raise ValueError(f"image length {len(data)} is not a whole number of words")
    words = list(struct.unpack(f">{len(data) // 2}H", data))
    origin, payload = words[0], words[1:]
    if origin + len(payload) > MEMORY_SIZE:
        raise ValueError(
            f"image of {len(payload)} words at {origin:#06x} does not fit in memory"
        )
    return origin, payload


class Machine:

    def __init__(
        self,
        trace: bool = False,
        console: Console | None = None,
        ignore_reserved: bool = False,
    ):
        self.console: Console = console if console else Console()
        self.memory: Memory = Memory(console=self.console)
        # CpuState shares the same memory object to keep a single address space.
        self.cpu: CpuState = CpuState(
            memory=self.memory,
            console=self.console,
            trace=trace,
            ignore_reserved=ignore_reserved,
        )
        self.entrypoint: int | None = None
        self.trace: bool = trace

    def load_image(self, data: bytes) -> int:
        """Load an object image into memory and return its origin.

        The first image loaded sets the entry point.
        """
        origin, payload = parse_image(data)
        self.memory.load(origin, payload)
        if self.entrypoint is None:
            self.entrypoint = origin
            self.cpu.registers.pc = origin
        return origin

    def load_file(self, file: str) -> int:
        """Load an object image from disk and return its origin."""
        with open(file, "rb") as f:
            image_bytes = f.read()
        return self.load_image(image_bytes)

    def run(self, max_steps: int | None = None) -> int:
        return self.cpu.run(max_steps=max_steps)
