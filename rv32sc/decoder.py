# Combinational decode logic.

from amaranth import *
from amaranth.lib.wiring import *
from amaranth.lib.enum import *
from amaranth.lib.data import *

from rv32sc.isa import Opcode

class AluOp(Enum, shape = 4):
    ADD  = 0
    SUB  = 1
    AND  = 2
    OR   = 3
    XOR  = 4
    SLT  = 5
    SLTU = 6
    SLL  = 7
    SRL  = 8
    SRA  = 9

class AluSrc(Enum, shape = 2):
    # A = rs1, B = rs2
    REG = 0
    # A = rs1, B = immediate
    IMM = 1
    # A = PC, B = immediate
    PC  = 2
    # 3 is never generated by the ControlUnit; the operand muxes produce zero
    # for it.

class WriteSrc(Enum, shape = 2):
    ALU       = 0
    MEM       = 1
    PC_PLUS_4 = 2
    # 3 is never generated by the ControlUnit; the write-back mux produces
    # zero for it.

class ControlSignals(Struct):
    reg_write: unsigned(1)
    mem_read: unsigned(1)
    mem_write: unsigned(1)
    branch: unsigned(1)
    jump: unsigned(1)

    alu_src: AluSrc
    alu_op: AluOp
    write_src: WriteSrc

class ImmediateGenerator(Component):
    """The ImmediateGenerator extracts the sign-extended immediate from an
    instruction word, choosing the format from the opcode.

    Anything that isn't a recognized opcode produces an immediate of zero.

    Attributes
    ----------
    inst (input): instruction word.
    imm (output): immediate in the format implied by inst's opcode.
    """
    inst: In(32)

    imm: Out(32)

    def elaborate(self, platform):
        m = Module()

        inst = self.inst

        imm_i = Signal(32)
        imm_s = Signal(32)
        imm_b = Signal(32)
        imm_u = Signal(32)
        imm_j = Signal(32)
        m.d.comb += [
            imm_i.eq(Cat(inst[20:31], inst[31].replicate(21))),
            imm_s.eq(Cat(inst[7:12], inst[25:31], inst[31].replicate(21))),
            imm_b.eq(Cat(0, inst[8:12], inst[25:31], inst[7],
                         inst[31].replicate(20))),
            imm_u.eq(inst & 0xFFFFF000),
            imm_j.eq(Cat(0, inst[21:31], inst[20], inst[12:20],
                         inst[31].replicate(12))),
        ]

        with m.Switch(inst[0:7]):
            with m.Case(Opcode.OP_IMM, Opcode.LOAD, Opcode.JALR):
                m.d.comb += self.imm.eq(imm_i)
            with m.Case(Opcode.STORE):
                m.d.comb += self.imm.eq(imm_s)
            with m.Case(Opcode.BRANCH):
                m.d.comb += self.imm.eq(imm_b)
            with m.Case(Opcode.LUI, Opcode.AUIPC):
                m.d.comb += self.imm.eq(imm_u)
            with m.Case(Opcode.JAL):
                m.d.comb += self.imm.eq(imm_j)
            # Everything else leaves imm at zero.

        return m

class ControlUnit(Component):
    """The ControlUnit turns the opcode, funct3 and funct7 fields of an
    instruction into the control signals that steer the rest of the datapath.

    Unrecognized opcodes aren't an error: they produce the all-zero
    ControlSignals value, which writes nothing, touches no memory, and lets
    the PC advance by 4.

    Attributes
    ----------
    opcode (input): inst[6:0]
    funct3 (input): inst[14:12]
    funct7 (input): inst[31:25]
    ctrl (output): decoded control signals, see ControlSignals.
    """
    opcode: In(7)
    funct3: In(3)
    funct7: In(7)

    ctrl: Out(ControlSignals)

    def elaborate(self, platform):
        m = Module()

        ctrl = self.ctrl

        # ALU operation for OP and OP-IMM, which share their funct3 encoding.
        # funct7 bit 5 picks SUB over ADD and SRA over SRL. OP-IMM has no
        # subtract: in an ADDI those bits belong to the immediate.
        is_op = Signal(1)
        m.d.comb += is_op.eq(self.opcode == Opcode.OP)

        funct_op = Signal(AluOp)
        with m.Switch(self.funct3):
            with m.Case(0b000):
                with m.If(is_op & self.funct7[5]):
                    m.d.comb += funct_op.eq(AluOp.SUB)
                with m.Else():
                    m.d.comb += funct_op.eq(AluOp.ADD)
            with m.Case(0b001):
                m.d.comb += funct_op.eq(AluOp.SLL)
            with m.Case(0b010):
                m.d.comb += funct_op.eq(AluOp.SLT)
            with m.Case(0b011):
                m.d.comb += funct_op.eq(AluOp.SLTU)
            with m.Case(0b100):
                m.d.comb += funct_op.eq(AluOp.XOR)
            with m.Case(0b101):
                with m.If(self.funct7[5]):
                    m.d.comb += funct_op.eq(AluOp.SRA)
                with m.Else():
                    m.d.comb += funct_op.eq(AluOp.SRL)
            with m.Case(0b110):
                m.d.comb += funct_op.eq(AluOp.OR)
            with m.Case(0b111):
                m.d.comb += funct_op.eq(AluOp.AND)

        # Branch comparisons. The BranchUnit makes the actual decision from the
        # register values, so this only determines what shows up on the ALU
        # result for a branch.
        branch_op = Signal(AluOp)
        with m.Switch(self.funct3):
            with m.Case(0b000, 0b001):
                m.d.comb += branch_op.eq(AluOp.SUB)
            with m.Case(0b100, 0b101):
                m.d.comb += branch_op.eq(AluOp.SLT)
            with m.Case(0b110, 0b111):
                m.d.comb += branch_op.eq(AluOp.SLTU)

        with m.Switch(self.opcode):
            with m.Case(Opcode.OP):
                m.d.comb += [
                    ctrl.reg_write.eq(1),
                    ctrl.alu_src.eq(AluSrc.REG),
                    ctrl.alu_op.eq(funct_op),
                    ctrl.write_src.eq(WriteSrc.ALU),
                ]
            with m.Case(Opcode.OP_IMM):
                m.d.comb += [
                    ctrl.reg_write.eq(1),
                    ctrl.alu_src.eq(AluSrc.IMM),
                    ctrl.alu_op.eq(funct_op),
                    ctrl.write_src.eq(WriteSrc.ALU),
                ]
            with m.Case(Opcode.LOAD):
                m.d.comb += [
                    ctrl.reg_write.eq(1),
                    ctrl.mem_read.eq(1),
                    ctrl.alu_src.eq(AluSrc.IMM),
                    ctrl.alu_op.eq(AluOp.ADD),
                    ctrl.write_src.eq(WriteSrc.MEM),
                ]
            with m.Case(Opcode.STORE):
                m.d.comb += [
                    ctrl.mem_write.eq(1),
                    ctrl.alu_src.eq(AluSrc.IMM),
                    ctrl.alu_op.eq(AluOp.ADD),
                ]
            with m.Case(Opcode.BRANCH):
                m.d.comb += [
                    ctrl.branch.eq(1),
                    ctrl.alu_src.eq(AluSrc.REG),
                    ctrl.alu_op.eq(branch_op),
                ]
            with m.Case(Opcode.LUI):
                m.d.comb += [
                    ctrl.reg_write.eq(1),
                    ctrl.alu_src.eq(AluSrc.IMM),
                    ctrl.alu_op.eq(AluOp.ADD),
                    ctrl.write_src.eq(WriteSrc.ALU),
                ]
            with m.Case(Opcode.AUIPC):
                m.d.comb += [
                    ctrl.reg_write.eq(1),
                    ctrl.alu_src.eq(AluSrc.PC),
                    ctrl.alu_op.eq(AluOp.ADD),
                    ctrl.write_src.eq(WriteSrc.ALU),
                ]
            with m.Case(Opcode.JAL):
                # The jump target comes from the PC adder, so the ALU inputs
                # are left at their defaults.
                m.d.comb += [
                    ctrl.reg_write.eq(1),
                    ctrl.jump.eq(1),
                    ctrl.write_src.eq(WriteSrc.PC_PLUS_4),
                ]
            with m.Case(Opcode.JALR):
                m.d.comb += [
                    ctrl.reg_write.eq(1),
                    ctrl.jump.eq(1),
                    ctrl.alu_src.eq(AluSrc.IMM),
                    ctrl.alu_op.eq(AluOp.ADD),
                    ctrl.write_src.eq(WriteSrc.PC_PLUS_4),
                ]
            # Anything else gets the reset value of ctrl: all flags clear,
            # REG/ADD/ALU.

        return m
