import unittest
from lc3.constants import PC_START, sign_extend
from lc3.register import ConditionFlag, RegisterFile


class TestRegister(unittest.TestCase):

    def test_initial_state(self):
        registers: RegisterFile = RegisterFile()
        self.assertEqual(registers.r, [0] * 8)
        self.assertEqual(registers.pc, PC_START)
        self.assertEqual(registers.cond, ConditionFlag.ZRO)

    def test_write_masks_to_16_bits(self):
        registers: RegisterFile = RegisterFile()
        registers.write_register(1, -1)
        self.assertEqual(registers.read_register(1), 0xFFFF)
        registers.write_register(2, 0x12345)
        self.assertEqual(registers.read_register(2), 0x2345)

    def test_invalid_register(self):
        registers: RegisterFile = RegisterFile()
        with self.assertRaises(ValueError):
            registers.read_register(8)
        with self.assertRaises(ValueError):
            registers.write_register(-1, 0)

    def test_update_flags(self):
        registers: RegisterFile = RegisterFile()
        cases = [
            (0x0000, ConditionFlag.ZRO),
            (0x0001, ConditionFlag.POS),
            (0x7FFF, ConditionFlag.POS),
            (0x8000, ConditionFlag.NEG),
            (0xFFFF, ConditionFlag.NEG),
        ]
        for value, flag in cases:
            registers.write_register(3, value)
            registers.update_flags(3)
            self.assertEqual(registers.cond, flag)

    def test_exactly_one_flag_set(self):
        registers: RegisterFile = RegisterFile()
        for value in (0, 1, 0x8000):
            registers.write_register(0, value)
            registers.update_flags(0)
            set_flags = [f for f in ConditionFlag if registers.cond & f]
            self.assertEqual(len(set_flags), 1)

    def test_flag_values_match_branch_bits(self):
        self.assertEqual(ConditionFlag.NEG, 0b100)
        self.assertEqual(ConditionFlag.ZRO, 0b010)
        self.assertEqual(ConditionFlag.POS, 0b001)


class TestSignExtend(unittest.TestCase):

    def test_negative_5_bit(self):
        self.assertEqual(sign_extend(0b10000, 5), -16)
        self.assertEqual(sign_extend(0b10000, 5) & 0xFFFF, 0xFFF0)

    def test_positive_9_bit_unchanged(self):
        self.assertEqual(sign_extend(0b011111111, 9), 0xFF)

    def test_matches_or_with_high_mask(self):
        for bits in (5, 6, 9, 11):
            for value in (0, 1, 1 << (bits - 1), (1 << bits) - 1):
                expected = value
                if value & (1 << (bits - 1)):
                    expected = (value | (0xFFFF << bits)) & 0xFFFF
                self.assertEqual(sign_extend(value, bits) & 0xFFFF, expected)


if __name__ == "__main__":
    unittest.main()
