from amaranth import *
from amaranth.lib.wiring import *

from rv32sc.decoder import AluOp

class Alu(Component):
    """32-bit integer ALU.

    All operations are two's complement and wrap at 32 bits. Shifts use only
    the bottom 5 bits of b. The flags are computed for every operation whether
    or not anybody is looking at them; overflow is only ever set by ADD and
    SUB.

    Attributes
    ----------
    a (input): left operand.
    b (input): right operand.
    op (input): operation to perform.
    result (output): result of the operation. Zero for op encodings that
        aren't members of AluOp.
    zero (output): result == 0.
    overflow (output): signed overflow from ADD/SUB.
    negative (output): bit 31 of result.
    """
    a: In(32)
    b: In(32)
    op: In(AluOp)

    result: Out(32)
    zero: Out(1)
    overflow: Out(1)
    negative: Out(1)

    def elaborate(self, platform):
        m = Module()

        a = self.a
        b = self.b
        shamt = b[:5]

        adder_sum = Signal(32)
        difference = Signal(32)
        m.d.comb += [
            adder_sum.eq(a + b),
            difference.eq(a - b),
        ]

        with m.Switch(self.op):
            with m.Case(AluOp.ADD):
                m.d.comb += [
                    self.result.eq(adder_sum),
                    # Operands agree in sign but the result doesn't.
                    self.overflow.eq((a[31] == b[31]) & (adder_sum[31] != a[31])),
                ]
            with m.Case(AluOp.SUB):
                m.d.comb += [
                    self.result.eq(difference),
                    # Operands differ in sign and the result doesn't match a.
                    self.overflow.eq(
                        (a[31] != b[31]) & (difference[31] != a[31])
                    ),
                ]
            with m.Case(AluOp.AND):
                m.d.comb += self.result.eq(a & b)
            with m.Case(AluOp.OR):
                m.d.comb += self.result.eq(a | b)
            with m.Case(AluOp.XOR):
                m.d.comb += self.result.eq(a ^ b)
            with m.Case(AluOp.SLT):
                m.d.comb += self.result.eq(a.as_signed() < b.as_signed())
            with m.Case(AluOp.SLTU):
                m.d.comb += self.result.eq(a < b)
            with m.Case(AluOp.SLL):
                m.d.comb += self.result.eq(a << shamt)
            with m.Case(AluOp.SRL):
                m.d.comb += self.result.eq(a >> shamt)
            with m.Case(AluOp.SRA):
                m.d.comb += self.result.eq(a.as_signed() >> shamt)
            # Unused encodings produce 0 with no flags but zero.

        m.d.comb += [
            self.zero.eq(self.result == 0),
            self.negative.eq(self.result[31]),
        ]

        return m
