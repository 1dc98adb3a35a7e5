# datapath.py

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

# -------------------------------------------------------------------------
# datapath.py defines the multiplexers and the branch logic of the
# single cycle datapath. Each is a pure selection function.
# -------------------------------------------------------------------------

import arithmetic as arith
from architecture import InstrKind

# -------------------------------------------------------------------------
# Branch resolution
# -------------------------------------------------------------------------

# The ALU leaves 1 or 0 for the comparison; invert selects the
# negated condition (BNE, BGE, BGEU)

def take_branch(branch, invert, alu_result):
    if not branch:
        return False
    return (alu_result != 0) != bool(invert)

# -------------------------------------------------------------------------
# Next pc
# -------------------------------------------------------------------------

# Priority: jalr, jal, taken branch, sequential

def next_pc(pc, taken=False, branch_offset=0, jump=False, is_jalr=False,
            immediate=0, rs1_value=0):
    if is_jalr:
        x = (rs1_value + immediate) & ~1
    elif jump:
        x = pc + immediate
    elif taken:
        x = pc + branch_offset
    else:
        x = pc + 4
    return arith.limit32(x)

# -------------------------------------------------------------------------
# Operand and result selection
# -------------------------------------------------------------------------

# ALU operand A: the pc for AUIPC and JAL, 0 for LUI, otherwise rs1

def alu_operand_a(bundle, pc, rs1_value):
    if bundle.kind in (InstrKind.AUIPC, InstrKind.JAL):
        return arith.word_to_int(pc)
    elif bundle.kind == InstrKind.LUI:
        return 0
    else:
        return rs1_value

def alu_src(alu_src_imm, rs2_value, immediate):
    return immediate if alu_src_imm else rs2_value

def write_back(mem_to_reg, alu_result, memory_value):
    return memory_value if mem_to_reg else alu_result
