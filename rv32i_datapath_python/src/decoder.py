# decoder.py

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
# decoder.py is the control unit: it splits an instruction word into
# its fields and produces the control signals for the datapath
# -------------------------------------------------------------------------

import common
import architecture as arch
import arithmetic as arith
import immediate as imm
from architecture import InstrKind, ImmFormat

# -------------------------------------------------------------------------
# Control signals for each instruction class
# -------------------------------------------------------------------------

def mk_signals(reg_write, mem_read, mem_write, mem_to_reg, alu_src_imm,
               branch, jump, imm_format):
    return {"reg_write": reg_write, "mem_read": mem_read,
            "mem_write": mem_write, "mem_to_reg": mem_to_reg,
            "alu_src_imm": alu_src_imm, "branch": branch, "jump": jump,
            "imm_format": imm_format}

control_signals = {
    #                          regW   memR   memW   m2r    immB   br     jump
    InstrKind.R:      mk_signals(True,  False, False, False, False, False, False, None),
    InstrKind.I_ALU:  mk_signals(True,  False, False, False, True,  False, False, ImmFormat.I),
    InstrKind.LOAD:   mk_signals(True,  True,  False, True,  True,  False, False, ImmFormat.I),
    InstrKind.STORE:  mk_signals(False, False, True,  False, True,  False, False, ImmFormat.S),
    InstrKind.BRANCH: mk_signals(False, False, False, False, False, True,  False, ImmFormat.B),
    InstrKind.LUI:    mk_signals(True,  False, False, False, True,  False, False, ImmFormat.U),
    InstrKind.AUIPC:  mk_signals(True,  False, False, False, True,  False, False, ImmFormat.U),
    InstrKind.JAL:    mk_signals(True,  False, False, False, True,  False, True,  ImmFormat.J),
    InstrKind.JALR:   mk_signals(True,  False, False, False, True,  False, True,  ImmFormat.I),
}

missing_kinds = [k.name for k in InstrKind if k not in control_signals]
if missing_kinds:
    raise common.SimulatorError(
        f"control table has no entry for {', '.join(missing_kinds)}")

# -------------------------------------------------------------------------
# Decode tables
# -------------------------------------------------------------------------

# decode_tables[kind][(funct3, funct7)] = mnemonic, built from the same
# statement_spec the assembler encodes from. The key holds None where
# the instruction does not fix that field.

fixed_kinds = (InstrKind.LUI, InstrKind.AUIPC, InstrKind.JAL)

def build_decode_tables():
    tables = {k: {} for k in InstrKind}
    for mnemonic, spec in arch.statement_spec.items():
        tables[spec["kind"]][(spec["funct3"], spec["funct7"])] = mnemonic
    return tables

decode_tables = build_decode_tables()

def lookup_mnemonic(kind, funct3, funct7):
    table = decode_tables[kind]
    if kind in fixed_kinds:
        return table.get((None, None))
    m = table.get((funct3, funct7))
    if m is None:
        m = table.get((funct3, None))
    return m

# -------------------------------------------------------------------------
# Control bundle
# -------------------------------------------------------------------------

class ControlBundle:
    def __init__(self, word, kind, mnemonic):
        spec = arch.statement_spec[mnemonic]
        signals = control_signals[kind]
        self.word = word
        self.kind = kind
        self.mnemonic = mnemonic.lower()
        self.opcode = arch.field_opcode(word)
        self.funct3 = arch.field_funct3(word)
        self.funct7 = arch.field_funct7(word)
        self.rd = arch.field_rd(word)
        self.rs1 = arch.field_rs1(word)
        self.rs2 = arch.field_rs2(word)
        self.reg_write = signals["reg_write"]
        self.mem_read = signals["mem_read"]
        self.mem_write = signals["mem_write"]
        self.mem_to_reg = signals["mem_to_reg"]
        self.alu_src_imm = signals["alu_src_imm"]
        self.branch = signals["branch"]
        self.branch_invert = spec["invert"]
        self.jump = signals["jump"]
        self.imm_format = signals["imm_format"]
        self.alu_op = spec["alu_op"]

    def is_jalr(self):
        return self.kind == InstrKind.JALR

    def as_dict(self):
        return {
            "opcode": self.opcode, "funct3": self.funct3,
            "funct7": self.funct7, "rd": self.rd, "rs1": self.rs1,
            "rs2": self.rs2, "reg_write": self.reg_write,
            "mem_read": self.mem_read, "mem_write": self.mem_write,
            "mem_to_reg": self.mem_to_reg, "alu_src_imm": self.alu_src_imm,
            "branch": self.branch, "branch_invert": self.branch_invert,
            "jump": self.jump,
            "imm_format": self.imm_format.value if self.imm_format else None,
            "alu_op": self.alu_op.value, "kind": self.kind.value,
            "mnemonic": self.mnemonic,
        }

# -------------------------------------------------------------------------
# Decode
# -------------------------------------------------------------------------

def decode(word):
    word = arith.limit32(word)
    opcode = arch.field_opcode(word)
    kind = arch.kind_of_opcode.get(opcode)
    if kind is None:
        raise common.UnsupportedInstructionError(
            word, f"unsupported opcode {opcode:#09b}")
    funct3 = arch.field_funct3(word)
    funct7 = arch.field_funct7(word)
    mnemonic = lookup_mnemonic(kind, funct3, funct7)
    if mnemonic is None:
        raise common.UnsupportedInstructionError(
            word, f"unsupported {kind.name} instruction funct3={funct3:03b} "
                  f"funct7={funct7:07b}")
    bundle = ControlBundle(word, kind, mnemonic)
    common.mode.devlog(f"decode {arith.word_to_hex8(word)} {show_bundle(bundle)}")
    return bundle

def show_signal(name, x):
    return f"{name}={1 if x else 0}"

def show_bundle(b):
    xs = f"{b.mnemonic} kind={b.kind.value} rd={b.rd} rs1={b.rs1} rs2={b.rs2}"
    xs += " " + " ".join([
        show_signal("regWrite", b.reg_write),
        show_signal("memRead", b.mem_read),
        show_signal("memWrite", b.mem_write),
        show_signal("memToReg", b.mem_to_reg),
        show_signal("aluSrcImm", b.alu_src_imm),
        show_signal("branch", b.branch),
        show_signal("branchInvert", b.branch_invert),
        show_signal("jump", b.jump)])
    xs += f" imm={b.imm_format.value if b.imm_format else '-'}"
    xs += f" aluOp={b.alu_op.value}"
    return xs

# -------------------------------------------------------------------------
# Disassembler
# -------------------------------------------------------------------------

def reg_name(i):
    return f"x{i}"

def disassemble(word):
    b = decode(word)
    word = b.word
    m = b.mnemonic
    k = b.kind
    if k == InstrKind.R:
        return f"{m} {reg_name(b.rd)}, {reg_name(b.rs1)}, {reg_name(b.rs2)}"
    x = imm.generate(b.imm_format, word)
    if k == InstrKind.I_ALU:
        if arch.is_shift_immediate(m.upper()):
            x = b.rs2
        return f"{m} {reg_name(b.rd)}, {reg_name(b.rs1)}, {x}"
    elif k in (InstrKind.LOAD, InstrKind.JALR):
        return f"{m} {reg_name(b.rd)}, {x}({reg_name(b.rs1)})"
    elif k == InstrKind.STORE:
        return f"{m} {reg_name(b.rs2)}, {x}({reg_name(b.rs1)})"
    elif k == InstrKind.BRANCH:
        return f"{m} {reg_name(b.rs1)}, {reg_name(b.rs2)}, {x}"
    elif k in (InstrKind.LUI, InstrKind.AUIPC):
        return f"{m} {reg_name(b.rd)}, {arch.get_field(word, 31, 12):#x}"
    else:
        return f"{m} {reg_name(b.rd)}, {x}"
