import unittest

from rv32sc import isa
from rv32sc.isa import Opcode


class EncoderTestCase(unittest.TestCase):
    # Encodings as produced by the GNU assembler.
    def test_known_encodings(self):
        for word, expected in [
            (isa.addi(1, 0, 5),    0x0050_0093),
            (isa.addi(1, 0, -1),   0xFFF0_0093),
            (isa.add(3, 1, 2),     0x0020_81B3),
            (isa.sub(4, 1, 2),     0x4020_8233),
            (isa.srai(1, 1, 3),    0x4030_D093),
            (isa.lui(1, 0x12345),  0x1234_50B7),
            (isa.sw(2, 1, 8),      0x0020_A423),
            (isa.lw(3, 1, -4),     0xFFC0_A183),
            (isa.beq(1, 2, 8),     0x0020_8463),
            (isa.beq(0, 0, -4),    0xFE00_0EE3),
            (isa.jal(0, 0),        0x0000_006F),
            (isa.jal(1, 12),       0x00C0_00EF),
            (isa.jal(0, -4),       0xFFDF_F06F),
            (isa.jalr(0, 1, 0),    0x0000_8067),
        ]:
            with self.subTest(expected=f"{expected:08x}"):
                self.assertEqual(word, expected)

    def test_nop(self):
        self.assertEqual(isa.addi(0, 0, 0), isa.NOP)

    def test_fields(self):
        fields = isa.fields(isa.sub(4, 1, 2))
        self.assertEqual(fields, isa.Fields(
            opcode=Opcode.OP.value, rd=4, funct3=0, rs1=1, rs2=2, funct7=0b0100000))

    def test_bad_register(self):
        with self.assertRaises(AssertionError):
            isa.add(32, 0, 0)
        with self.assertRaises(AssertionError):
            isa.slli(1, 1, 32)
