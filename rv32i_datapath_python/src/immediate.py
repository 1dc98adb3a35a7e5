# immediate.py

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

# ----------------------------------------------------------------------
# immediate.py is the immediate generator: it gathers the immediate
# bits of an instruction word for a given format and sign extends
# them to a signed 32-bit value.
# ----------------------------------------------------------------------

import common
import arithmetic as arith
from architecture import ImmFormat, get_field, get_bit_in_word_le

# I: imm[11:0] = inst[31:20]

def imm_i(w):
    return arith.sign_extend(get_field(w, 31, 20), 12)

# S: imm[11:5] = inst[31:25], imm[4:0] = inst[11:7]

def imm_s(w):
    x = (get_field(w, 31, 25) << 5) | get_field(w, 11, 7)
    return arith.sign_extend(x, 12)

# B: imm[12] = inst[31], imm[10:5] = inst[30:25], imm[4:1] = inst[11:8],
#    imm[11] = inst[7], imm[0] = 0

def imm_b(w):
    x = (get_bit_in_word_le(w, 31) << 12) \
        | (get_bit_in_word_le(w, 7) << 11) \
        | (get_field(w, 30, 25) << 5) \
        | (get_field(w, 11, 8) << 1)
    return arith.sign_extend(x, 13)

# U: imm[31:12] = inst[31:12], imm[11:0] = 0

def imm_u(w):
    return arith.word_to_int(w & 0xFFFFF000)

# J: imm[20] = inst[31], imm[10:1] = inst[30:21], imm[11] = inst[20],
#    imm[19:12] = inst[19:12], imm[0] = 0

def imm_j(w):
    x = (get_bit_in_word_le(w, 31) << 20) \
        | (get_field(w, 19, 12) << 12) \
        | (get_bit_in_word_le(w, 20) << 11) \
        | (get_field(w, 30, 21) << 1)
    return arith.sign_extend(x, 21)

generators = {
    ImmFormat.I: imm_i,
    ImmFormat.S: imm_s,
    ImmFormat.B: imm_b,
    ImmFormat.U: imm_u,
    ImmFormat.J: imm_j,
}

def generate(fmt, word):
    g = generators.get(fmt)
    if g is None:
        raise common.UnsupportedOperationError(f"unknown immediate format {fmt!r}")
    result = g(arith.limit32(word))
    common.mode.devlog(f"immediate {fmt.value} word={arith.word_to_hex8(word)} imm={result}")
    return result

# Number of significant bits in each format, used by the assembler to
# check that an offset can be encoded

significant_bits = {
    ImmFormat.I: 12,
    ImmFormat.S: 12,
    ImmFormat.B: 13,
    ImmFormat.U: 32,
    ImmFormat.J: 21,
}

def fits(fmt, x):
    k = significant_bits[fmt]
    return -(1 << (k - 1)) <= x < (1 << (k - 1))

