# arithmetic.py

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

# ------------------------------------------------------------------------
# arithmetic.py defines arithmetic for the architecture using Python
# arithmetic. This includes word representation, data conversions,
# sign extension, and the ALU used by the datapath.
# ------------------------------------------------------------------------

import common
from architecture import AluOp

word32mask = 0xFFFFFFFF
const80000000 = 0x80000000  # 2^31
const100000000 = 0x100000000  # 2^32

word_true = 1
word_false = 0

# ------------------------------------------------------------------------
# Words, binary numbers, and two's complement integers
# ------------------------------------------------------------------------

# A word has two views. The unsigned view is an integer x with
# 0 <= x < 2^32 and is used for instruction words, program memory and
# the pc. The signed view is an integer in [-2^31, 2^31) and is used
# for registers, data memory and ALU values. Both views have the same
# 32 bits, so conversion never loses information.

def limit32(x):
    return x & word32mask

def int_to_word(x):
    return x & word32mask

def word_to_int(w):
    x = w & word32mask
    return x - const100000000 if x & const80000000 else x

def sign_extend(x, bits):
    sign = 1 << (bits - 1)
    x &= (1 << bits) - 1
    return x - (1 << bits) if x & sign else x

def bool_to_word(x):
    return word_true if x else word_false

# ------------------------------------------------------------------------
# Hexadecimal notation
# ------------------------------------------------------------------------

def word_to_hex8(x):
    return f"{limit32(x):08x}"

def show_word(w):
    return f"0x{word_to_hex8(w)} ({word_to_int(w)})"

# ------------------------------------------------------------------------
# ALU operations
# ------------------------------------------------------------------------

# Operands arrive as signed ints. Each operation returns the signed
# view of its 32-bit result. Shifts use only the low 5 bits of b.

def shift_amount(b):
    return b & 0x1F

def op_add(a, b):
    return word_to_int(a + b)

def op_sub(a, b):
    return word_to_int(a - b)

def op_and(a, b):
    return word_to_int(a & b)

def op_or(a, b):
    return word_to_int(a | b)

def op_xor(a, b):
    return word_to_int(a ^ b)

def op_sll(a, b):
    return word_to_int(a << shift_amount(b))

def op_srl(a, b):
    return word_to_int(int_to_word(a) >> shift_amount(b))

def op_sra(a, b):
    return word_to_int(a >> shift_amount(b))

def op_slt(a, b):
    return bool_to_word(a < b)

def op_sltu(a, b):
    return bool_to_word(int_to_word(a) < int_to_word(b))

def op_seq(a, b):
    return bool_to_word(a == b)

alu_ops = {
    AluOp.ADD: op_add,
    AluOp.SUB: op_sub,
    AluOp.AND: op_and,
    AluOp.OR: op_or,
    AluOp.XOR: op_xor,
    AluOp.SLL: op_sll,
    AluOp.SRL: op_srl,
    AluOp.SRA: op_sra,
    AluOp.SLT: op_slt,
    AluOp.SLTU: op_sltu,
    AluOp.SEQ: op_seq,
}

# ------------------------------------------------------------------------
# Flags
# ------------------------------------------------------------------------

class AluResult:
    def __init__(self, result, zero, negative, overflow, carry):
        self.result = result
        self.zero = zero
        self.negative = negative
        self.overflow = overflow
        self.carry = carry

    def flags(self):
        return {"zero": self.zero, "negative": self.negative,
                "overflow": self.overflow, "carry": self.carry}

    def show_flags(self):
        xs = ""
        xs += "Z" if self.zero else "-"
        xs += "N" if self.negative else "-"
        xs += "V" if self.overflow else "-"
        xs += "C" if self.carry else "-"
        return xs

    def to_string(self):
        return f"result={show_word(self.result)} flags={self.show_flags()}"

# Overflow and carry are only meaningful for ADD and SUB. Overflow uses
# the sign rule; ADD carry is the unsigned carry out of bit 31 and SUB
# carry is the unsigned borrow.

def overflow_flag(op, a, b, r):
    if op == AluOp.ADD:
        return (a < 0) == (b < 0) and (a < 0) != (r < 0)
    elif op == AluOp.SUB:
        return (a < 0) != (b < 0) and (a < 0) != (r < 0)
    else:
        return False

def carry_flag(op, a, b):
    if op == AluOp.ADD:
        return int_to_word(a) + int_to_word(b) > word32mask
    elif op == AluOp.SUB:
        return int_to_word(a) < int_to_word(b)
    else:
        return False

# ------------------------------------------------------------------------
# ALU
# ------------------------------------------------------------------------

def alu_op_from(op):
    if isinstance(op, AluOp):
        return op
    if isinstance(op, str):
        try:
            return AluOp(op.upper())
        except ValueError:
            pass
    raise common.UnsupportedOperationError(f"unsupported ALU operation {op!r}")

def execute(op, a, b):
    op = alu_op_from(op)
    f = alu_ops.get(op)
    if f is None:
        raise common.UnsupportedOperationError(f"unsupported ALU operation {op!r}")
    a = word_to_int(a)
    b = word_to_int(b)
    r = f(a, b)
    result = AluResult(r, r == 0, r < 0,
                       overflow_flag(op, a, b, r), carry_flag(op, a, b))
    common.mode.devlog(f"alu {op.value} a={show_word(a)} b={show_word(b)} "
                       f"{result.to_string()}")
    return result
