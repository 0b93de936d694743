# 32-bit x 32 register file with two combinational read ports.

from amaranth import *
from amaranth.lib.wiring import *

from rv32sc import AlwaysReady

def RegWrite(addrbits = 5):
    return Signature({
        'reg': Out(addrbits),
        'value': Out(32),
    })

class RegisterFile(Component):
    """The register file.

    Registers are built from flops rather than a memory so that a reset can
    clear all of them in one cycle. Reads are combinational and see the value
    from before any write happening in the same cycle. x0 always reads as
    zero, and writes aimed at it are dropped.

    Attributes
    ----------
    rs1_addr (input): register number for the first read port.
    rs1_data (output): contents of that register.
    rs2_addr (input): register number for the second read port.
    rs2_data (output): contents of that register.
    write_cmd (input): when valid, the payload value is stored in the payload
        register at the next clock edge.
    regs: the 32 register signals, x0 first, for inspection by testbenches.
    """
    rs1_addr: In(5)
    rs1_data: Out(32)
    rs2_addr: In(5)
    rs2_data: Out(32)

    write_cmd: In(AlwaysReady(RegWrite()))

    def __init__(self):
        super().__init__()

        self.regs = [Signal(32, name = f"x{i}") for i in range(32)]

    def elaborate(self, platform):
        m = Module()

        regs = Array(self.regs)

        # x0 is hardwired to zero on both ports.
        m.d.comb += [
            self.rs1_data.eq(Mux(self.rs1_addr != 0, regs[self.rs1_addr], 0)),
            self.rs2_data.eq(Mux(self.rs2_addr != 0, regs[self.rs2_addr], 0)),
        ]

        # Block writes to x0.
        for i, reg in enumerate(self.regs):
            if i == 0:
                continue
            with m.If(self.write_cmd.valid & (self.write_cmd.payload.reg == i)):
                m.d.sync += reg.eq(self.write_cmd.payload.value)

        return m
