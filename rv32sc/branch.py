from amaranth import *
from amaranth.lib.wiring import *

from rv32sc import oneof
from rv32sc.isa import F_BEQ, F_BNE, F_BLT, F_BGE, F_BLTU, F_BGEU

class BranchUnit(Component):
    """Decides whether the next PC comes from the branch target.

    This works directly on the register values rather than on the ALU flags.
    Jumps are always taken, whatever funct3 and branch say. Conditional
    branches are resolved in the same cycle; there's no prediction.

    Attributes
    ----------
    rs1 (input): first source register value.
    rs2 (input): second source register value.
    funct3 (input): branch condition, from the instruction.
    branch (input): instruction is a conditional branch.
    jump (input): instruction is JAL or JALR.
    take (output): use the branch target for the next PC.
    """
    rs1: In(32)
    rs2: In(32)
    funct3: In(3)
    branch: In(1)
    jump: In(1)

    take: Out(1)

    def elaborate(self, platform):
        m = Module()

        equal = Signal(1)
        signed_less_than = Signal(1)
        unsigned_less_than = Signal(1)
        m.d.comb += [
            equal.eq(self.rs1 == self.rs2),
            signed_less_than.eq(self.rs1.as_signed() < self.rs2.as_signed()),
            unsigned_less_than.eq(self.rs1 < self.rs2),
        ]

        # Undefined funct3 encodings (010, 011) never branch.
        condition = Signal(1)
        m.d.comb += condition.eq(oneof([
            (self.funct3 == F_BEQ, equal),
            (self.funct3 == F_BNE, ~equal),
            (self.funct3 == F_BLT, signed_less_than),
            (self.funct3 == F_BGE, ~signed_less_than),
            (self.funct3 == F_BLTU, unsigned_less_than),
            (self.funct3 == F_BGEU, ~unsigned_less_than),
        ]))

        m.d.comb += self.take.eq(self.jump | (self.branch & condition))

        return m
