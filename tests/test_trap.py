import unittest
from unittest.mock import MagicMock, call

from lc3.console import EOF_CHAR
from lc3.constants import MEMORY_SIZE
from lc3.isa import Outcome
from lc3.memory import Memory
from lc3.register import ConditionFlag, RegisterFile
from lc3.trap import HALT_MESSAGE, IN_PROMPT, Trap, TrapVector


class TrapTestCase(unittest.TestCase):

    def setUp(self):
        self.registers = RegisterFile()
        self.memory = Memory()
        self.console = MagicMock()
        self.trap = Trap(self.registers, self.memory, self.console)

    def written(self) -> bytes:
        return b"".join(c.args[0] for c in self.console.write.call_args_list)


class TestTrapGetc(TrapTestCase):
    """Tests for GETC (x20)."""

    def test_getc_reads_into_r0(self):
        self.console.read_char.return_value = ord("a")
        outcome = self.trap.handle(TrapVector.GETC)
        self.assertEqual(outcome, Outcome.CONTINUE)
        self.assertEqual(self.registers.read_register(0), ord("a"))
        # no echo
        self.console.write.assert_not_called()

    def test_getc_does_not_set_flags(self):
        self.registers.cond = ConditionFlag.NEG
        self.console.read_char.return_value = ord("a")
        self.trap.handle(0x20)
        self.assertEqual(self.registers.cond, ConditionFlag.NEG)

    def test_getc_eof(self):
        self.console.read_char.return_value = EOF_CHAR
        self.trap.handle(TrapVector.GETC)
        self.assertEqual(self.registers.read_register(0), 0xFFFF)


class TestTrapOut(TrapTestCase):
    """Tests for OUT (x21)."""

    def test_out_writes_low_byte(self):
        self.registers.write_register(0, 0x0141)
        self.trap.handle(TrapVector.OUT)
        self.console.write.assert_called_once_with(b"A")
        self.console.flush.assert_called()


class TestTrapPuts(TrapTestCase):
    """Tests for PUTS (x22)."""

    def test_puts_writes_until_terminator(self):
        for i, c in enumerate(b"hello"):
            self.memory.write(0x4000 + i, c)
        self.memory.write(0x4006, ord("!"))  # past the terminator
        self.registers.write_register(0, 0x4000)
        self.trap.handle(TrapVector.PUTS)
        self.assertEqual(self.written(), b"hello")

    def test_puts_empty_string(self):
        self.registers.write_register(0, 0x4000)
        self.trap.handle(TrapVector.PUTS)
        self.assertEqual(self.written(), b"")

    def test_puts_wraps_past_end_of_memory(self):
        self.memory.load(0xFFFE, [ord("a"), ord("b")])
        self.memory.write(0x0000, ord("c"))
        self.registers.write_register(0, 0xFFFE)
        self.trap.handle(TrapVector.PUTS)
        self.assertEqual(self.written(), b"abc")

    def test_puts_unterminated_string(self):
        self.memory.cells[:] = [ord("x")] * MEMORY_SIZE
        self.registers.write_register(0, 0x4000)
        with self.assertRaises(ValueError):
            self.trap.handle(TrapVector.PUTS)
        self.console.write.assert_not_called()


class TestTrapIn(TrapTestCase):
    """Tests for IN (x23)."""

    def test_in_prompts_and_echoes(self):
        self.console.read_char.return_value = ord("x")
        self.trap.handle(TrapVector.IN)
        self.assertEqual(
            self.console.write.call_args_list, [call(IN_PROMPT), call(b"x")]
        )
        self.assertEqual(self.registers.read_register(0), ord("x"))

    def test_in_eof_is_not_echoed(self):
        self.console.read_char.return_value = EOF_CHAR
        self.trap.handle(TrapVector.IN)
        self.assertEqual(self.written(), IN_PROMPT)
        self.assertEqual(self.registers.read_register(0), 0xFFFF)


class TestTrapPutsp(TrapTestCase):
    """Tests for PUTSP (x24)."""

    def test_putsp_two_chars_per_word(self):
        self.memory.load(0x4000, [0x6548, 0x6C6C, 0x216F, 0x0000])  # "Hell" "o!"
        self.registers.write_register(0, 0x4000)
        self.trap.handle(TrapVector.PUTSP)
        self.assertEqual(self.written(), b"Hello!")

    def test_putsp_odd_length(self):
        self.memory.load(0x4000, [0x6548, 0x006C, 0x6F6F])
        self.registers.write_register(0, 0x4000)
        self.trap.handle(TrapVector.PUTSP)
        self.assertEqual(self.written(), b"Hel")

    def test_putsp_unterminated_string(self):
        self.memory.cells[:] = [0x7878] * MEMORY_SIZE
        self.registers.write_register(0, 0x4000)
        with self.assertRaises(ValueError):
            self.trap.handle(TrapVector.PUTSP)
        self.console.write.assert_not_called()


class TestTrapHalt(TrapTestCase):
    """Tests for HALT (x25)."""

    def test_halt_returns_halt(self):
        outcome = self.trap.handle(TrapVector.HALT)
        self.assertEqual(outcome, Outcome.HALT)
        self.assertEqual(self.written(), HALT_MESSAGE)
        self.console.flush.assert_called()


class TestTrapUnknown(TrapTestCase):

    def test_unknown_vector(self):
        with self.assertRaises(ValueError):
            self.trap.handle(0x26)


if __name__ == "__main__":
    unittest.main()
