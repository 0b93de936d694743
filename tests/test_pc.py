import unittest

from rv32sc.pc import ProgramCounter
from rv32sc.sim import simulate


class ProgramCounterTestCase(unittest.TestCase):
    def test_advance(self):
        dut = ProgramCounter(reset_vector=0x100)

        async def testbench(ctx):
            self.assertEqual(ctx.get(dut.pc), 0x100)
            self.assertEqual(ctx.get(dut.pc_plus_4), 0x104)
            for expected in (0x104, 0x108, 0x10C):
                await ctx.tick()
                self.assertEqual(ctx.get(dut.pc), expected)

        simulate(dut, testbench)

    def test_branch(self):
        dut = ProgramCounter()

        async def testbench(ctx):
            ctx.set(dut.take_branch, 1)
            ctx.set(dut.target, 0x200)
            await ctx.tick()
            self.assertEqual(ctx.get(dut.pc), 0x200)
            # Targets aren't forced to alignment.
            ctx.set(dut.target, 0x301)
            await ctx.tick()
            self.assertEqual(ctx.get(dut.pc), 0x301)
            ctx.set(dut.take_branch, 0)
            await ctx.tick()
            self.assertEqual(ctx.get(dut.pc), 0x305)

        simulate(dut, testbench)

    def test_stall(self):
        dut = ProgramCounter(reset_vector=0x40)

        async def testbench(ctx):
            ctx.set(dut.stall, 1)
            await ctx.tick()
            self.assertEqual(ctx.get(dut.pc), 0x40)
            ctx.set(dut.take_branch, 1)
            ctx.set(dut.target, 0x80)
            await ctx.tick()
            self.assertEqual(ctx.get(dut.pc), 0x40)
            ctx.set(dut.stall, 0)
            await ctx.tick()
            self.assertEqual(ctx.get(dut.pc), 0x80)

        simulate(dut, testbench)

    def test_wraps(self):
        dut = ProgramCounter()

        async def testbench(ctx):
            ctx.set(dut.take_branch, 1)
            ctx.set(dut.target, 0xFFFF_FFFC)
            await ctx.tick()
            ctx.set(dut.take_branch, 0)
            self.assertEqual(ctx.get(dut.pc_plus_4), 0)
            await ctx.tick()
            self.assertEqual(ctx.get(dut.pc), 0)

        simulate(dut, testbench)

    def test_bad_reset_vector(self):
        with self.assertRaisesRegex(ValueError, r"word-aligned"):
            ProgramCounter(reset_vector=0x102)
        with self.assertRaises(ValueError):
            ProgramCounter(reset_vector=-4)
        with self.assertRaises(ValueError):
            ProgramCounter(reset_vector=1 << 32)
