from amaranth import *
from amaranth.lib.wiring import *

from rv32sc import mux

class ProgramCounter(Component):
    """The program counter register and its next-value logic.

    The PC normally advances by 4 each cycle, or loads the branch target when
    take_branch is asserted. Nothing forces it to stay word-aligned. Reset
    (from the enclosing domain) returns it to reset_vector, and takes priority
    over stall, which takes priority over everything else.

    Parameters
    ----------
    reset_vector (int): address of the first instruction fetched after reset.

    Attributes
    ----------
    take_branch (input): load target instead of pc + 4.
    target (input): branch/jump target address.
    stall (input): hold the current value.
    pc (output): current value.
    pc_plus_4 (output): pc + 4, wrapping at 32 bits.
    """

    def __init__(self, *, reset_vector = 0):
        if not 0 <= reset_vector < 2**32:
            raise ValueError(f"reset vector {reset_vector:#x} won't fit in PC")
        if reset_vector & 0b11:
            raise ValueError(f"reset vector {reset_vector:#x} is not word-aligned")

        self.reset_vector = reset_vector

        super().__init__({
            'take_branch': In(1),
            'target': In(32),
            'stall': In(1),
            'pc': Out(32, init = reset_vector),
            'pc_plus_4': Out(32),
        })

    def elaborate(self, platform):
        m = Module()

        next_pc = Signal(32)
        m.d.comb += [
            self.pc_plus_4.eq(self.pc + 4),
            next_pc.eq(mux(self.take_branch, self.target, self.pc_plus_4)),
        ]

        with m.If(~self.stall):
            m.d.sync += self.pc.eq(next_pc)

        return m
