# Instruction and data memories for the single-cycle core.
#
# Both are read combinationally. The whole instruction has to complete in one
# cycle, leaving no room for a registered read. Neither can fail: addresses
# past the end produce a harmless value and stores there go nowhere.

from amaranth import *
from amaranth.lib import memory
from amaranth.lib.wiring import *

from rv32sc import mux, oneof
from rv32sc.isa import NOP, F_B, F_H, F_BU, F_HU

class InstructionMemory(Component):
    """Read-only word-addressed program storage.

    Parameters
    ----------
    contents (list of integer): instruction words, loaded starting at word 0.
        Words not covered by contents hold NOP.
    depth (integer): number of 32-bit words in the memory.

    Attributes
    ----------
    addr (input): byte address to fetch from. The bottom two bits are ignored.
    inst (output): instruction word at addr, or NOP if addr is past the end.
    """
    addr: In(32)
    inst: Out(32)

    def __init__(self, contents = (), *, depth = 256):
        super().__init__()

        if depth <= 0:
            raise ValueError(f"instruction memory depth must be positive, not {depth}")
        contents = list(contents)
        if len(contents) > depth:
            raise ValueError(
                f"program of {len(contents)} words won't fit in {depth} words "
                "of instruction memory"
            )

        self.depth = depth
        self.contents = contents + [NOP] * (depth - len(contents))

        self.m = memory.Memory(
            shape = unsigned(32),
            depth = depth,
            init = self.contents,
        )
        self.rp = self.m.read_port(domain = "comb")

    def elaborate(self, platform):
        m = Module()

        m.submodules.m = self.m

        index = Signal(30)
        m.d.comb += [
            index.eq(self.addr[2:]),
            self.rp.addr.eq(index),
            self.inst.eq(mux(index < self.depth, self.rp.data, NOP)),
        ]

        return m

class DataMemory(Component):
    """Byte-addressable little-endian data storage.

    The memory is built from one 8-bit flop per byte rather than an inferred
    RAM, so that reset can clear all of it in a single cycle. Accesses don't
    need to be aligned.

    Loads: the access width and extension come from funct3 (LB, LH, LW, LBU,
    LHU), and any other funct3 loads a full word. A load whose base address is
    past the end of the memory returns 0; bytes of a wider load that run off
    the end read as 0.

    Stores: SB writes one byte, SH two, and SW or any other funct3 four. A
    store whose base address is past the end is dropped, as are any bytes of a
    wider store that run off the end.

    Parameters
    ----------
    depth (integer): size of the memory in bytes.

    Attributes
    ----------
    addr (input): byte address of the access.
    funct3 (input): access width/extension, from the instruction.
    read_en (input): when low, read_data is forced to zero.
    read_data (output): loaded value, extended to 32 bits.
    write_en (input): store write_data at addr on the next clock edge.
    write_data (input): value to store; only the low bytes are used for SB/SH.
    bytes: the byte signals, lowest address first, for inspection by
        testbenches.
    """
    addr: In(32)
    funct3: In(3)
    read_en: In(1)
    read_data: Out(32)
    write_en: In(1)
    write_data: In(32)

    def __init__(self, *, depth = 1024):
        super().__init__()

        if depth <= 0:
            raise ValueError(f"data memory depth must be positive, not {depth}")

        self.depth = depth
        self.bytes = [Signal(8, name = f"byte{i}") for i in range(depth)]

    def elaborate(self, platform):
        m = Module()

        mem = Array(self.bytes)
        depth = self.depth

        in_bounds = Signal(1)
        m.d.comb += in_bounds.eq(self.addr < depth)

        # Address of each byte lane, and whether it falls inside the memory.
        lane_addr = [self.addr + i for i in range(4)]
        lane_ok = [a < depth for a in lane_addr]

        # Load lane mixer.
        lanes = [Signal(8, name = f"lane{i}") for i in range(4)]
        for lane, a, ok in zip(lanes, lane_addr, lane_ok):
            with m.If(ok):
                m.d.comb += lane.eq(mem[a])

        byte = lanes[0]
        half = Cat(lanes[0], lanes[1])
        word = Cat(*lanes)

        load_result = Signal(32)
        m.d.comb += [
            load_result.eq(oneof([
                # LB (signed): sign extend
                (self.funct3 == F_B, Cat(byte, byte[7].replicate(24))),
                # LH (signed): sign extend
                (self.funct3 == F_H, Cat(half, half[15].replicate(16))),
                # LBU (unsigned): zero extend
                (self.funct3 == F_BU, Cat(byte, Const(0, 24))),
                # LHU (unsigned): zero extend
                (self.funct3 == F_HU, Cat(half, Const(0, 16))),
                # LW, and anything undefined, get the whole word.
            ], default = word)),
            self.read_data.eq(mux(in_bounds & self.read_en, load_result, 0)),
        ]

        # Store byte strobes.
        strobes = Signal(4)
        with m.Switch(self.funct3):
            with m.Case(F_B):
                m.d.comb += strobes.eq(0b0001)
            with m.Case(F_H):
                m.d.comb += strobes.eq(0b0011)
            with m.Default():
                m.d.comb += strobes.eq(0b1111)

        with m.If(self.write_en & in_bounds):
            for i in range(4):
                with m.If(strobes[i] & lane_ok[i]):
                    m.d.sync += mem[lane_addr[i]].eq(
                        self.write_data[8 * i:8 * (i + 1)]
                    )

        return m
