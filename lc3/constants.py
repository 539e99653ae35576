"""Shared constants and utility functions for the LC-3 emulator."""

WORD_MASK = 0xFFFF
MEMORY_SIZE = 1 << 16

# Default load address for user programs
PC_START = 0x3000

# Memory-mapped device registers
KBSR = 0xFE00  # Keyboard status
KBDR = 0xFE02  # Keyboard data
DSR = 0xFE04  # Display status
DDR = 0xFE06  # Display data

# Link register used by JSR/JSRR/TRAP and RET
R7 = 7


def sign_extend(value: int, bits: int) -> int:
    """Sign-extend a value from the given number of bits to a Python int.

    Args:
        value: The unsigned value to sign-extend
        bits: The number of bits in the original value

    Returns:
        The sign-extended value as a signed Python integer
    """
    sign_bit = 1 << (bits - 1)
    return (value & (sign_bit - 1)) - (value & sign_bit)
