# RV32I encoding definitions and instruction assembly helpers.
#
# Nothing in here generates logic; it's used to build program images for the
# core (the default program, tests, and anything fed in from the command line)
# and to pick instructions apart when printing traces.

from typing import NamedTuple

from amaranth.lib.enum import Enum

class Opcode(Enum, shape = 7):
    LOAD   = 0b0000011
    OP_IMM = 0b0010011
    AUIPC  = 0b0010111
    STORE  = 0b0100011
    OP     = 0b0110011
    LUI    = 0b0110111
    BRANCH = 0b1100011
    JALR   = 0b1100111
    JAL    = 0b1101111

# ADDI x0, x0, 0: the canonical NOP, and what instruction memory produces
# for any address it doesn't hold.
NOP = 0x0000_0013

# funct3 values for branches
F_BEQ  = 0b000
F_BNE  = 0b001
F_BLT  = 0b100
F_BGE  = 0b101
F_BLTU = 0b110
F_BGEU = 0b111

# funct3 values for loads and stores
F_B  = 0b000
F_H  = 0b001
F_W  = 0b010
F_BU = 0b100
F_HU = 0b101

# funct3 values for register-register and register-immediate ALU ops
F_ADD  = 0b000
F_SLL  = 0b001
F_SLT  = 0b010
F_SLTU = 0b011
F_XOR  = 0b100
F_SRL  = 0b101
F_OR   = 0b110
F_AND  = 0b111

# funct7 bit 5 selects SUB over ADD and SRA over SRL.
F7_ALT = 0b0100000

class Fields(NamedTuple):
    opcode: int
    rd: int
    funct3: int
    rs1: int
    rs2: int
    funct7: int

def fields(inst):
    """Splits an instruction word into its fixed-position fields."""
    return Fields(
        opcode = inst & 0x7F,
        rd = (inst >> 7) & 0x1F,
        funct3 = (inst >> 12) & 0b111,
        rs1 = (inst >> 15) & 0x1F,
        rs2 = (inst >> 20) & 0x1F,
        funct7 = (inst >> 25) & 0x7F,
    )

def _check_regs(*regs):
    for r in regs:
        assert 0 <= r < 32, f"x{r} is not a register"

# Format encoders. Immediates may be negative; they're truncated to the width
# of their field, so it's on the caller to keep them in range.

def r_type(opcode, funct3, funct7, rd, rs1, rs2):
    _check_regs(rd, rs1, rs2)
    return (funct7 << 25) | (rs2 << 20) | (rs1 << 15) | (funct3 << 12) \
            | (rd << 7) | opcode.value

def i_type(opcode, funct3, rd, rs1, imm):
    _check_regs(rd, rs1)
    return ((imm & 0xFFF) << 20) | (rs1 << 15) | (funct3 << 12) \
            | (rd << 7) | opcode.value

def s_type(funct3, rs1, rs2, imm):
    _check_regs(rs1, rs2)
    imm &= 0xFFF
    return ((imm >> 5) << 25) | (rs2 << 20) | (rs1 << 15) | (funct3 << 12) \
            | ((imm & 0x1F) << 7) | Opcode.STORE.value

def b_type(funct3, rs1, rs2, offset):
    _check_regs(rs1, rs2)
    offset &= 0x1FFF
    return (((offset >> 12) & 1) << 31) \
            | (((offset >> 5) & 0x3F) << 25) \
            | (rs2 << 20) | (rs1 << 15) | (funct3 << 12) \
            | (((offset >> 1) & 0xF) << 8) \
            | (((offset >> 11) & 1) << 7) \
            | Opcode.BRANCH.value

def u_type(opcode, rd, imm):
    """imm here is the 20-bit value that lands in inst[31:12]."""
    _check_regs(rd)
    return ((imm & 0xFFFFF) << 12) | (rd << 7) | opcode.value

def j_type(rd, offset):
    _check_regs(rd)
    offset &= 0x1FFFFF
    return (((offset >> 20) & 1) << 31) \
            | (((offset >> 1) & 0x3FF) << 21) \
            | (((offset >> 11) & 1) << 20) \
            | (((offset >> 12) & 0xFF) << 12) \
            | (rd << 7) | Opcode.JAL.value

# Mnemonics. Operand order follows assembly syntax.

def _alu_rr(funct3, funct7 = 0):
    def encode(rd, rs1, rs2):
        return r_type(Opcode.OP, funct3, funct7, rd, rs1, rs2)
    return encode

def _alu_ri(funct3):
    def encode(rd, rs1, imm):
        return i_type(Opcode.OP_IMM, funct3, rd, rs1, imm)
    return encode

def _shift_ri(funct3, funct7 = 0):
    def encode(rd, rs1, shamt):
        assert 0 <= shamt < 32, f"shift amount {shamt} out of range"
        return i_type(Opcode.OP_IMM, funct3, rd, rs1, (funct7 << 5) | shamt)
    return encode

def _load(funct3):
    def encode(rd, rs1, offset):
        return i_type(Opcode.LOAD, funct3, rd, rs1, offset)
    return encode

def _store(funct3):
    def encode(rs2, rs1, offset):
        return s_type(funct3, rs1, rs2, offset)
    return encode

def _branch(funct3):
    def encode(rs1, rs2, offset):
        return b_type(funct3, rs1, rs2, offset)
    return encode

add  = _alu_rr(F_ADD)
sub  = _alu_rr(F_ADD, F7_ALT)
sll  = _alu_rr(F_SLL)
slt  = _alu_rr(F_SLT)
sltu = _alu_rr(F_SLTU)
xor  = _alu_rr(F_XOR)
srl  = _alu_rr(F_SRL)
sra  = _alu_rr(F_SRL, F7_ALT)
or_  = _alu_rr(F_OR)
and_ = _alu_rr(F_AND)

addi  = _alu_ri(F_ADD)
slti  = _alu_ri(F_SLT)
sltiu = _alu_ri(F_SLTU)
xori  = _alu_ri(F_XOR)
ori   = _alu_ri(F_OR)
andi  = _alu_ri(F_AND)
slli  = _shift_ri(F_SLL)
srli  = _shift_ri(F_SRL)
srai  = _shift_ri(F_SRL, F7_ALT)

lb  = _load(F_B)
lh  = _load(F_H)
lw  = _load(F_W)
lbu = _load(F_BU)
lhu = _load(F_HU)

sb = _store(F_B)
sh = _store(F_H)
sw = _store(F_W)

beq  = _branch(F_BEQ)
bne  = _branch(F_BNE)
blt  = _branch(F_BLT)
bge  = _branch(F_BGE)
bltu = _branch(F_BLTU)
bgeu = _branch(F_BGEU)

def lui(rd, imm):
    return u_type(Opcode.LUI, rd, imm)

def auipc(rd, imm):
    return u_type(Opcode.AUIPC, rd, imm)

def jal(rd, offset):
    return j_type(rd, offset)

def jalr(rd, rs1, offset):
    return i_type(Opcode.JALR, 0b000, rd, rs1, offset)
