# A single-cycle RV32I core.
#
# Every instruction is fetched, decoded, executed, and written back in one
# clock cycle. All of the work between the state elements is combinational;
# the register file, data memory, and PC all commit together at the clock edge,
# using only values derived from the state before that edge.

from amaranth import *
from amaranth.hdl import ResetInserter
from amaranth.lib.wiring import *

from rv32sc import mux
from rv32sc import isa
from rv32sc.isa import Opcode
from rv32sc.decoder import ImmediateGenerator, ControlUnit, AluSrc, WriteSrc
from rv32sc.alu import Alu
from rv32sc.branch import BranchUnit
from rv32sc.regfile import RegisterFile
from rv32sc.mem import InstructionMemory, DataMemory
from rv32sc.pc import ProgramCounter

# Program loaded when no image is provided. Ends up with x1=5, x2=3, x3=8,
# x4=2, x5=1, x6=7, x7=6, x8=0, then runs off into NOPs.
DEFAULT_PROGRAM = [
    isa.addi(1, 0, 5),
    isa.addi(2, 0, 3),
    isa.add(3, 1, 2),
    isa.sub(4, 1, 2),
    isa.and_(5, 1, 2),
    isa.or_(6, 1, 2),
    isa.xor(7, 1, 2),
    isa.slt(8, 1, 2),
]

# Observation points for testbenches. These describe the instruction that will
# commit at the next clock edge.
DebugPort = Signature({
    'pc': Out(32),
    'inst': Out(32),
    'alu_result': Out(32),
    'rs1': Out(32),
    'rs2': Out(32),
})

class Processor(Component):
    """The core, plus its private instruction and data memories.

    Parameters
    ----------
    program (list of integer): instruction words to load at word 0 of
        instruction memory. If omitted, DEFAULT_PROGRAM is used.
    imem_depth (int): size of instruction memory in words.
    dmem_depth (int): size of data memory in bytes.
    reset_vector (int): address of the first instruction after reset.

    Attributes
    ----------
    reset (input): synchronous reset. While asserted, each clock edge returns
        the PC to reset_vector and clears the register file and data memory,
        overriding whatever the current instruction would have written.
    debug (output): trace port, see DebugPort.

    pc, imem, dmem, regfile, immgen, control, alu, branch: the component
        instances, for inspection by testbenches.
    """
    reset: In(1)
    debug: Out(DebugPort)

    def __init__(self, *,
                 program = None,
                 imem_depth = 256,
                 dmem_depth = 1024,
                 reset_vector = 0):
        super().__init__()

        if program is None:
            program = DEFAULT_PROGRAM

        # State elements.
        self.pc = ProgramCounter(reset_vector = reset_vector)
        self.imem = InstructionMemory(program, depth = imem_depth)
        self.dmem = DataMemory(depth = dmem_depth)
        self.regfile = RegisterFile()

        # Combinational units.
        self.immgen = ImmediateGenerator()
        self.control = ControlUnit()
        self.alu = Alu()
        self.branch = BranchUnit()

    def elaborate(self, platform):
        m = Module()

        # Only the state elements are affected by reset. Instruction memory is
        # read-only and has nothing to clear.
        m.submodules.pc = ResetInserter(self.reset)(self.pc)
        m.submodules.regfile = ResetInserter(self.reset)(self.regfile)
        m.submodules.dmem = ResetInserter(self.reset)(self.dmem)
        m.submodules.imem = imem = self.imem

        m.submodules.immgen = immgen = self.immgen
        m.submodules.control = control = self.control
        m.submodules.alu = alu = self.alu
        m.submodules.branch = branch = self.branch

        # Fetch.
        inst = Signal(32)
        m.d.comb += [
            imem.addr.eq(self.pc.pc),
            inst.eq(imem.inst),
        ]

        # Decode. The fields live at fixed positions whatever the format.
        opcode = Signal(7)
        rd = Signal(5)
        funct3 = Signal(3)
        rs1 = Signal(5)
        rs2 = Signal(5)
        funct7 = Signal(7)
        m.d.comb += [
            opcode.eq(inst[0:7]),
            rd.eq(inst[7:12]),
            funct3.eq(inst[12:15]),
            rs1.eq(inst[15:20]),
            rs2.eq(inst[20:25]),
            funct7.eq(inst[25:32]),

            control.opcode.eq(opcode),
            control.funct3.eq(funct3),
            control.funct7.eq(funct7),

            immgen.inst.eq(inst),

            self.regfile.rs1_addr.eq(rs1),
            self.regfile.rs2_addr.eq(rs2),
        ]

        ctrl = control.ctrl
        imm = immgen.imm
        rs1_data = self.regfile.rs1_data
        rs2_data = self.regfile.rs2_data

        # ALU operand selection. Note that the A side is rs1 for both REG and
        # IMM, and only the PC for AUIPC. The fourth encoding of alu_src is
        # never produced by the ControlUnit, but zeroes both operands anyway.
        alu_a = Signal(32)
        alu_b = Signal(32)
        with m.Switch(ctrl.alu_src):
            with m.Case(AluSrc.REG):
                m.d.comb += [
                    alu_a.eq(rs1_data),
                    alu_b.eq(rs2_data),
                ]
            with m.Case(AluSrc.IMM):
                m.d.comb += [
                    alu_a.eq(rs1_data),
                    alu_b.eq(imm),
                ]
            with m.Case(AluSrc.PC):
                m.d.comb += [
                    alu_a.eq(self.pc.pc),
                    alu_b.eq(imm),
                ]

        m.d.comb += [
            alu.a.eq(alu_a),
            alu.b.eq(alu_b),
            alu.op.eq(ctrl.alu_op),
        ]

        # Branch decision, from the raw register values rather than the ALU.
        m.d.comb += [
            branch.rs1.eq(rs1_data),
            branch.rs2.eq(rs2_data),
            branch.funct3.eq(funct3),
            branch.branch.eq(ctrl.branch),
            branch.jump.eq(ctrl.jump),
        ]

        # Branch target. Branches and JAL are PC-relative; JALR is relative to
        # rs1 and has bit 0 of the sum cleared.
        pc_relative = Signal(32)
        jalr_sum = Signal(32)
        target = Signal(32)
        m.d.comb += [
            pc_relative.eq(self.pc.pc + imm),
            jalr_sum.eq(rs1_data + imm),
            target.eq(mux(
                opcode == Opcode.JALR,
                Cat(0, jalr_sum[1:]),
                pc_relative,
            )),
        ]

        # Data memory, addressed by the ALU.
        m.d.comb += [
            self.dmem.addr.eq(alu.result),
            self.dmem.funct3.eq(funct3),
            self.dmem.read_en.eq(ctrl.mem_read),
            self.dmem.write_en.eq(ctrl.mem_write),
            self.dmem.write_data.eq(rs2_data),
        ]

        # Write-back selection. As with alu_src, the fourth encoding produces
        # zero.
        writeback = Signal(32)
        with m.Switch(ctrl.write_src):
            with m.Case(WriteSrc.ALU):
                m.d.comb += writeback.eq(alu.result)
            with m.Case(WriteSrc.MEM):
                m.d.comb += writeback.eq(self.dmem.read_data)
            with m.Case(WriteSrc.PC_PLUS_4):
                m.d.comb += writeback.eq(self.pc.pc_plus_4)

        # Commit. These all take effect at the same clock edge.
        m.d.comb += [
            self.regfile.write_cmd.valid.eq(ctrl.reg_write),
            self.regfile.write_cmd.payload.reg.eq(rd),
            self.regfile.write_cmd.payload.value.eq(writeback),

            self.pc.take_branch.eq(branch.take),
            self.pc.target.eq(target),
            # Nothing in a single-cycle design ever needs to hold the PC.
            self.pc.stall.eq(0),
        ]

        m.d.comb += [
            self.debug.pc.eq(self.pc.pc),
            self.debug.inst.eq(inst),
            self.debug.alu_result.eq(alu.result),
            self.debug.rs1.eq(rs1_data),
            self.debug.rs2.eq(rs2_data),
        ]

        return m
