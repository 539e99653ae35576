import os
import select
import sys

# Value returned for a character read at end of input (C EOF as a 16-bit word)
EOF_CHAR = 0xFFFF


class Console:
    """Character I/O against the host terminal.

    Streams are looked up on every call so that ``sys.stdin``/``sys.stdout``
    can be swapped out (e.g. in tests) after the console is created.

    Input is read straight from the stdin file descriptor, the same source
    ``key_ready`` polls, so no pending byte is hidden in a Python buffer.
    """

    def read_char(self) -> int:
        """Block until one character is available and return its code."""
        data = os.read(sys.stdin.fileno(), 1)
        if not data:
            return EOF_CHAR
        return data[0]

    def write(self, data: bytes) -> None:
        sys.stdout.buffer.write(data)

    def flush(self) -> None:
        sys.stdout.buffer.flush()

    def key_ready(self) -> bool:
        """Return True if a character can be read without blocking."""
        try:
            readable, _, _ = select.select([sys.stdin], [], [], 0)
        except (OSError, ValueError, TypeError):
            # stdin is not selectable (closed or not a real file)
            return False
        return bool(readable)
