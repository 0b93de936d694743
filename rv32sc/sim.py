"""Host-side harness for running the core in the Amaranth simulator.

The building blocks (:func:`reset`, :func:`step`, :func:`sample`,
:func:`read_registers`, :func:`read_data`) are meant to be used from a
testbench, the same way stream helpers are; :func:`run` strings them together
for the common case of "reset, run a program, look at the result".
"""

import logging
from typing import NamedTuple

from amaranth.sim import Simulator

from rv32sc.isa import fields


__all__ = [
    "Snapshot", "RunResult",
    "simulate", "reset", "sample", "step", "read_registers", "read_data", "run",
]


logger = logging.getLogger(__name__)


class Snapshot(NamedTuple):
    """Debug port values for one cycle."""
    pc: int
    inst: int
    alu_result: int
    rs1: int
    rs2: int

    def __str__(self):
        return (f"{self.pc:08x}  {self.inst:08x}  "
                f"rs1={self.rs1:08x} rs2={self.rs2:08x} alu={self.alu_result:08x}")


class RunResult(NamedTuple):
    trace: list
    pc: int
    registers: list
    data: bytes


def simulate(dut, *testbenches, clocked = True, vcd_file = None):
    """Run ``testbenches`` against ``dut`` until they all return.

    With ``clocked`` set, the ``sync`` domain gets a 1 MHz clock. Purely
    combinational designs have no such domain and must pass ``clocked = False``.
    """
    sim = Simulator(dut)
    if clocked:
        sim.add_clock(1e-6)
    for testbench in testbenches:
        sim.add_testbench(testbench)
    if vcd_file is not None:
        with sim.write_vcd(vcd_file):
            sim.run()
    else:
        sim.run()


async def reset(ctx, cpu, cycles = 3):
    """Hold ``cpu`` in reset for ``cycles`` clock edges."""
    ctx.set(cpu.reset, 1)
    for _ in range(cycles):
        await ctx.tick()
    ctx.set(cpu.reset, 0)
    logger.info("reset released after %d cycles, pc=%08x", cycles, ctx.get(cpu.debug.pc))


def sample(ctx, cpu):
    """The debug port as it stands now: the instruction that will commit at the
    next clock edge, and the values it is using."""
    return Snapshot(
        pc = ctx.get(cpu.debug.pc),
        inst = ctx.get(cpu.debug.inst),
        alu_result = ctx.get(cpu.debug.alu_result),
        rs1 = ctx.get(cpu.debug.rs1),
        rs2 = ctx.get(cpu.debug.rs2),
    )


async def step(ctx, cpu):
    """Execute one instruction and return the new debug snapshot, i.e. the
    instruction fetched from the updated PC."""
    await ctx.tick()
    snapshot = sample(ctx, cpu)
    logger.debug("now at %s", snapshot)
    return snapshot


def read_registers(ctx, cpu):
    """Contents of x0..x31."""
    return [ctx.get(reg) for reg in cpu.regfile.regs]


def read_data(ctx, cpu, addr = 0, length = None):
    """Contents of data memory from ``addr``; bytes past the end read as 0."""
    if length is None:
        length = cpu.dmem.depth - addr
    return bytes(
        ctx.get(cpu.dmem.bytes[a]) if a < cpu.dmem.depth else 0
        for a in range(addr, addr + length)
    )


def run(cpu, *, cycles, reset_cycles = 3, stop_on_self_loop = True, vcd_file = None):
    """Reset ``cpu`` and run it for at most ``cycles`` instructions.

    The trace holds one snapshot per committed instruction, taken just before
    it commits. If ``stop_on_self_loop`` is set, the run ends as soon as an
    instruction jumps to itself, which is how most test programs say they are
    done.
    """
    result = None

    async def testbench(ctx):
        nonlocal result
        await reset(ctx, cpu, reset_cycles)
        trace = []
        committed = sample(ctx, cpu)
        for _ in range(cycles):
            trace.append(committed)
            after = await step(ctx, cpu)
            if stop_on_self_loop and after.pc == committed.pc:
                logger.info("stopped at %08x: instruction %08x (opcode %#04x) jumps to itself",
                            committed.pc, committed.inst, fields(committed.inst).opcode)
                break
            committed = after
        result = RunResult(
            trace = trace,
            pc = ctx.get(cpu.debug.pc),
            registers = read_registers(ctx, cpu),
            data = read_data(ctx, cpu),
        )

    simulate(cpu, testbench, vcd_file = vcd_file)
    return result
