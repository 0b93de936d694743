import unittest

from rv32sc.branch import BranchUnit
from rv32sc.isa import F_BEQ, F_BNE, F_BLT, F_BGE, F_BLTU, F_BGEU
from rv32sc.sim import simulate


class BranchUnitTestCase(unittest.TestCase):
    def decide(self, cases):
        """Runs each (funct3, rs1, rs2, branch, jump) and collects take."""
        dut = BranchUnit()
        results = []

        async def testbench(ctx):
            for funct3, rs1, rs2, branch, jump in cases:
                ctx.set(dut.funct3, funct3)
                ctx.set(dut.rs1, rs1)
                ctx.set(dut.rs2, rs2)
                ctx.set(dut.branch, branch)
                ctx.set(dut.jump, jump)
                results.append(ctx.get(dut.take))

        simulate(dut, testbench, clocked=False)
        return results

    def assertConditions(self, cases):
        keys = [(funct3, rs1, rs2, 1, 0) for funct3, rs1, rs2, _ in cases]
        for (funct3, rs1, rs2, expected), take in zip(cases, self.decide(keys)):
            self.assertEqual(take, expected, f"funct3={funct3:03b} {rs1:#x}, {rs2:#x}")

    def test_equality(self):
        self.assertConditions([
            (F_BEQ, 5, 5, 1),
            (F_BEQ, 5, 6, 0),
            (F_BNE, 5, 5, 0),
            (F_BNE, 5, 6, 1),
            (F_BEQ, 0xFFFF_FFFF, 0xFFFF_FFFF, 1),
        ])

    def test_signed(self):
        self.assertConditions([
            (F_BLT, 0xFFFF_FFFF, 1, 1),
            (F_BLT, 1, 0xFFFF_FFFF, 0),
            (F_BLT, 3, 3, 0),
            (F_BGE, 0xFFFF_FFFF, 1, 0),
            (F_BGE, 1, 0xFFFF_FFFF, 1),
            (F_BGE, 3, 3, 1),
            (F_BLT, 0x8000_0000, 0x7FFF_FFFF, 1),
        ])

    def test_unsigned(self):
        self.assertConditions([
            (F_BLTU, 0xFFFF_FFFF, 1, 0),
            (F_BLTU, 1, 0xFFFF_FFFF, 1),
            (F_BLTU, 3, 3, 0),
            (F_BGEU, 0xFFFF_FFFF, 1, 1),
            (F_BGEU, 1, 0xFFFF_FFFF, 0),
            (F_BGEU, 3, 3, 1),
        ])

    def test_undefined_funct3(self):
        self.assertConditions([
            (0b010, 0, 0, 0),
            (0b011, 0, 0, 0),
            (0b010, 0, 1, 0),
            (0b011, 1, 0, 0),
        ])

    def test_not_a_branch(self):
        # A condition that holds means nothing without the branch flag.
        self.assertEqual(self.decide([
            (F_BEQ, 5, 5, 0, 0),
            (F_BGEU, 3, 3, 0, 0),
        ]), [0, 0])

    def test_jump_always_taken(self):
        self.assertEqual(self.decide([
            (F_BEQ, 5, 6, 0, 1),
            (0b010, 0, 0, 0, 1),
            (F_BNE, 5, 5, 1, 1),
        ]), [1, 1, 1])
