# architecture.py

# Copyright (C) 2025 The RV32I Datapath authors. License: GNU GPL Version 3

# This file is part of RV32I Datapath. RV32I Datapath is free software:
# you can redistribute it and/or modify it under the terms of the GNU
# General Public License as published by the Free Software Foundation,
# either version 3 of the License, or (at your option) any later
# version. RV32I Datapath is distributed in the hope that it will be
# useful, but WITHOUT ANY WARRANTY; without even the implied warranty
# of MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the GNU
# General Public License for more details. You should have received a
# copy of the GNU General Public License along with RV32I Datapath. If
# not, see <https://www.gnu.org/licenses/>.

# --------------------------------------------------------------------
# architecture.py defines global constants and tables specifying
# formats, opcodes, mnemonics, and register names. The assembler
# encodes from statement_spec and the decoder builds its lookup
# tables from the same dictionary, so the two cannot disagree.
# --------------------------------------------------------------------

from enum import Enum

# --------------------------------------------------------------------
# Bit indexing
# --------------------------------------------------------------------

# Bits are indexed Little End: bit 0 is the least significant bit and
# bit 31 is the sign bit of a word.

def get_bit_in_word_le(w, i):
    return (w >> i) & 0x0001

# Field w[hi:lo], inclusive at both ends, as an unsigned integer

def get_field(w, hi, lo):
    return (w >> lo) & ((1 << (hi - lo + 1)) - 1)

# --------------------------------------------------------------------
# Architecture constants
# --------------------------------------------------------------------

word_bytes = 4
register_count = 32

# Memory sizes are given in words; addresses are in bytes

default_program_words = 1024
default_data_words = 1024
default_initial_pc = 0

words_per_line = 4

# --------------------------------------------------------------------
# Instruction classes, immediate formats, ALU operations
# --------------------------------------------------------------------

class InstrKind(Enum):
    R = "R"
    I_ALU = "I"
    LOAD = "L"
    STORE = "S"
    BRANCH = "B"
    LUI = "LUI"
    AUIPC = "AUIPC"
    JAL = "JAL"
    JALR = "JALR"

class ImmFormat(Enum):
    I = "I"
    S = "S"
    B = "B"
    U = "U"
    J = "J"

class AluOp(Enum):
    ADD = "ADD"
    SUB = "SUB"
    AND = "AND"
    OR = "OR"
    XOR = "XOR"
    SLL = "SLL"
    SRL = "SRL"
    SRA = "SRA"
    SLT = "SLT"
    SLTU = "SLTU"
    SEQ = "SEQ"

# --------------------------------------------------------------------
# Opcodes
# --------------------------------------------------------------------

opcode_of_kind = {
    InstrKind.R:      0b0110011,
    InstrKind.I_ALU:  0b0010011,
    InstrKind.LOAD:   0b0000011,
    InstrKind.STORE:  0b0100011,
    InstrKind.BRANCH: 0b1100011,
    InstrKind.LUI:    0b0110111,
    InstrKind.AUIPC:  0b0010111,
    InstrKind.JAL:    0b1101111,
    InstrKind.JALR:   0b1100111,
}

kind_of_opcode = {op: kind for kind, op in opcode_of_kind.items()}

funct7_base = 0b0000000
funct7_alt = 0b0100000  # SUB, SRA, SRAI

# --------------------------------------------------------------------
# Instruction fields
# --------------------------------------------------------------------

# opcode[6:0] rd[11:7] funct3[14:12] rs1[19:15] rs2[24:20] funct7[31:25]

def field_opcode(w):
    return get_field(w, 6, 0)

def field_rd(w):
    return get_field(w, 11, 7)

def field_funct3(w):
    return get_field(w, 14, 12)

def field_rs1(w):
    return get_field(w, 19, 15)

def field_rs2(w):
    return get_field(w, 24, 20)

def field_funct7(w):
    return get_field(w, 31, 25)

# --------------------------------------------------------------------
# Register names
# --------------------------------------------------------------------

abi_names = [
    "zero", "ra", "sp", "gp", "tp", "t0", "t1", "t2",
    "s0", "s1", "a0", "a1", "a2", "a3", "a4", "a5",
    "a6", "a7", "s2", "s3", "s4", "s5", "s6", "s7",
    "s8", "s9", "s10", "s11", "t3", "t4", "t5", "t6",
]

register_index = {name: i for i, name in enumerate(abi_names)}
register_index["fp"] = 8
register_index.update({f"x{i}": i for i in range(register_count)})

# Return the register number for a name (case-insensitive) or None

def lookup_register(name):
    return register_index.get(name.strip().lower())

# --------------------------------------------------------------------
# Instruction set
# --------------------------------------------------------------------

# Each entry gives the class of the instruction and the values of the
# fixed fields. funct7 is None where the field is part of an immediate
# or absent. For branches, alu_op is the comparison the ALU performs
# and invert says whether the branch is taken when that comparison is
# false.

def mk_spec(kind, funct3=None, funct7=None, alu_op=AluOp.ADD, invert=False):
    return {"kind": kind, "funct3": funct3, "funct7": funct7,
            "alu_op": alu_op, "invert": invert}

R = InstrKind.R
I = InstrKind.I_ALU

statement_spec = {
    # R-type
    "ADD":   mk_spec(R, 0b000, funct7_base, AluOp.ADD),
    "SUB":   mk_spec(R, 0b000, funct7_alt, AluOp.SUB),
    "SLL":   mk_spec(R, 0b001, funct7_base, AluOp.SLL),
    "SLT":   mk_spec(R, 0b010, funct7_base, AluOp.SLT),
    "SLTU":  mk_spec(R, 0b011, funct7_base, AluOp.SLTU),
    "XOR":   mk_spec(R, 0b100, funct7_base, AluOp.XOR),
    "SRL":   mk_spec(R, 0b101, funct7_base, AluOp.SRL),
    "SRA":   mk_spec(R, 0b101, funct7_alt, AluOp.SRA),
    "OR":    mk_spec(R, 0b110, funct7_base, AluOp.OR),
    "AND":   mk_spec(R, 0b111, funct7_base, AluOp.AND),

    # I-type arithmetic; the shifts carry funct7 in imm[11:5]
    "ADDI":  mk_spec(I, 0b000, None, AluOp.ADD),
    "SLTI":  mk_spec(I, 0b010, None, AluOp.SLT),
    "SLTIU": mk_spec(I, 0b011, None, AluOp.SLTU),
    "XORI":  mk_spec(I, 0b100, None, AluOp.XOR),
    "ORI":   mk_spec(I, 0b110, None, AluOp.OR),
    "ANDI":  mk_spec(I, 0b111, None, AluOp.AND),
    "SLLI":  mk_spec(I, 0b001, funct7_base, AluOp.SLL),
    "SRLI":  mk_spec(I, 0b101, funct7_base, AluOp.SRL),
    "SRAI":  mk_spec(I, 0b101, funct7_alt, AluOp.SRA),

    # Loads and stores; the address is always rs1 + imm
    "LB":    mk_spec(InstrKind.LOAD, 0b000),
    "LH":    mk_spec(InstrKind.LOAD, 0b001),
    "LW":    mk_spec(InstrKind.LOAD, 0b010),
    "LBU":   mk_spec(InstrKind.LOAD, 0b100),
    "LHU":   mk_spec(InstrKind.LOAD, 0b101),
    "SB":    mk_spec(InstrKind.STORE, 0b000),
    "SH":    mk_spec(InstrKind.STORE, 0b001),
    "SW":    mk_spec(InstrKind.STORE, 0b010),

    # Branches: two comparisons cover all six conditions
    "BEQ":   mk_spec(InstrKind.BRANCH, 0b000, None, AluOp.SEQ, False),
    "BNE":   mk_spec(InstrKind.BRANCH, 0b001, None, AluOp.SEQ, True),
    "BLT":   mk_spec(InstrKind.BRANCH, 0b100, None, AluOp.SLT, False),
    "BGE":   mk_spec(InstrKind.BRANCH, 0b101, None, AluOp.SLT, True),
    "BLTU":  mk_spec(InstrKind.BRANCH, 0b110, None, AluOp.SLTU, False),
    "BGEU":  mk_spec(InstrKind.BRANCH, 0b111, None, AluOp.SLTU, True),

    # Upper immediates and jumps
    "LUI":   mk_spec(InstrKind.LUI),
    "AUIPC": mk_spec(InstrKind.AUIPC),
    "JAL":   mk_spec(InstrKind.JAL),
    "JALR":  mk_spec(InstrKind.JALR, 0b000),
}

del R, I

# Pseudo-instructions are rewritten in assembler pass 1

pseudo_spec = {
    "NOP": ("ADDI", ["x0", "x0", "0"]),
}

shift_immediates = ("SLLI", "SRLI", "SRAI")

def is_shift_immediate(mnemonic):
    return mnemonic in shift_immediates
