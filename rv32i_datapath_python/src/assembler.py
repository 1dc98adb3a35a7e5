# assembler.py

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

# ---------------------------------------------------------------------
# assembler.py translates assembly language to machine language
# ---------------------------------------------------------------------

import re
import common
import state as st
import architecture as arch
import arithmetic as arith
import immediate as imm
from architecture import InstrKind, ImmFormat, statement_spec

# ----------------------------------------------------------------------
# Assembler
# ----------------------------------------------------------------------

# Pass 1 parses every line, binds labels and assigns addresses; pass 2
# resolves label operands and generates the machine words. Errors are
# recorded on the statement where they occur, and if there are any the
# earliest one is raised after both passes with the full list attached.

listing_header = "Line Addr Code     Source"

def assembler(src_text):
    ai = st.AsmInfo(src_text)
    ai.metadata.push_src(listing_header)
    asm_pass1(ai)
    asm_pass2(ai)
    if ai.n_asm_errors > 0:
        common.mode.devlog(f"{ai.n_asm_errors} errors detected")
        raise_errors(ai)
    ai.asm_listing_text = ai.metadata.to_text()
    common.mode.devlog(ai.show_symbol_table())
    return ai

def raise_errors(ma):
    errors = []
    for s in ma.asm_stmt:
        for err in s["errors"]:
            errors.append((s["lineNumber"], s["srcLine"], err))
    line_number, src_line, msg = errors[0]
    raise common.AssemblyError(line_number, src_line, msg, errors)

# ----------------------------------------------------------------------
# Regular expressions for the parser
# ----------------------------------------------------------------------

name_parser = re.compile(r"^[a-zA-Z_.][a-zA-Z0-9_.]*$")
label_parser = re.compile(r"^\s*([^\s:,()]+)\s*:")
int_parser = re.compile(r"^([+-]?)(0[xX][0-9a-fA-F]+|0[bB][01]+|[0-9]+)$")
mem_parser = re.compile(r"^(.*?)\(\s*([^()\s]+)\s*\)$")
comment_parser = re.compile(r"(#|//)")
paren_space_parser = re.compile(r"\s*\(\s*([^()]*?)\s*\)")
operand_separator = re.compile(r"\s*,\s*|\s+")

# ----------------------------------------------------------------------
# Assembly language statement
# ----------------------------------------------------------------------

def mk_asm_stmt(line_number, address, src_line):
    return {
        "lineNumber": line_number,
        "address": address,
        "srcLine": src_line,
        "fieldLabels": [],
        "fieldOperation": "",
        "fieldOperands": "",
        "fieldComment": "",
        "mnemonic": None,
        "operation": None,
        "operands": [],
        "codeWord": None,
        "errors": []
    }

# ----------------------------------------------------------------------
# Error messages
# ----------------------------------------------------------------------

def mk_err_msg(ma, s, err):
    common.mode.devlog(f"line {s['lineNumber']}: {err}")
    s["errors"].append(err)
    ma.n_asm_errors += 1

# ----------------------------------------------------------------------
# Parser
# ----------------------------------------------------------------------

def split_comment(line):
    m = comment_parser.search(line)
    if m:
        return line[:m.start()], line[m.start():]
    return line, ""

# Operands are separated by commas, whitespace, or both. Spaces around
# the parentheses of off(reg) are removed first so it stays one operand.

def split_operands(xs):
    xs = paren_space_parser.sub(r"(\1)", xs.strip())
    return operand_separator.split(xs)

def parse_asm_line(ma, s):
    line, s["fieldComment"] = split_comment(s["srcLine"])

    # Any number of "label:" prefixes
    m = label_parser.match(line)
    while m:
        s["fieldLabels"].append(m.group(1))
        line = line[m.end():]
        m = label_parser.match(line)

    parts = line.strip().split(None, 1)
    if parts:
        s["fieldOperation"] = parts[0]
        s["fieldOperands"] = parts[1].strip() if len(parts) > 1 else ""
    if s["fieldOperands"]:
        s["operands"] = split_operands(s["fieldOperands"])

    common.mode.devlog(f"parse_asm_line {s['lineNumber']}")
    common.mode.devlog(f"  fieldLabels = {s['fieldLabels']}")
    common.mode.devlog(f"  fieldOperation = /{s['fieldOperation']}/")
    common.mode.devlog(f"  operands = {s['operands']}")
    common.mode.devlog(f"  fieldComment = /{s['fieldComment']}/")

def parse_operation(ma, s):
    op_str = s["fieldOperation"].upper()
    if not op_str:
        return
    pseudo = arch.pseudo_spec.get(op_str)
    if pseudo:
        if s["operands"]:
            mk_err_msg(ma, s, f"{op_str} takes no operands")
        op_str, operands = pseudo
        s["operands"] = list(operands)
        common.mode.devlog(f"pseudo instruction rewritten to {op_str} {s['operands']}")
    x = statement_spec.get(op_str)
    if x is None:
        mk_err_msg(ma, s, f"unknown mnemonic {s['fieldOperation']}")
    s["mnemonic"] = op_str
    s["operation"] = x

# ----------------------------------------------------------------------
# Assembler Pass 1
# ----------------------------------------------------------------------

def asm_pass1(ma):
    common.mode.devlog(f"Assembler Pass 1: {len(ma.asm_src_lines)} source lines")
    for i, line in enumerate(ma.asm_src_lines):
        s = mk_asm_stmt(i + 1, ma.location_counter, line)
        ma.asm_stmt.append(s)
        parse_asm_line(ma, s)
        parse_operation(ma, s)
        handle_labels(ma, s)
        if s["mnemonic"]:
            ma.location_counter += arch.word_bytes
        common.mode.devlog(f"Pass 1 line {s['lineNumber']} address={s['address']:#x}"
                           f" lc={ma.location_counter:#x}")

def handle_labels(ma, s):
    for label in s["fieldLabels"]:
        if not name_parser.match(label):
            mk_err_msg(ma, s, f"{label} is not a valid label")
        elif label in ma.symbol_table:
            mk_err_msg(ma, s, f"{label} has already been defined")
        else:
            ident = st.Identifier(label, s["address"], s["lineNumber"])
            ma.symbol_table[label] = ident
            common.mode.devlog(f"label {label} = {s['address']:#x}")

# ----------------------------------------------------------------------
# Operands
# ----------------------------------------------------------------------

# Each require_ function records an error on the statement and returns
# None when the operand is malformed

def parse_int(xs):
    m = int_parser.match(xs.strip())
    if not m:
        return None
    sign, digits = m.group(1), m.group(2)
    if digits[:2].lower() == "0x":
        x = int(digits[2:], 16)
    elif digits[:2].lower() == "0b":
        x = int(digits[2:], 2)
    else:
        x = int(digits, 10)
    return -x if sign == "-" else x

def require_n_operands(ma, s, *ns):
    k = len(s["operands"])
    if k not in ns:
        expected = " or ".join(str(n) for n in ns)
        mk_err_msg(ma, s, f"{s['mnemonic']} has {k} operands but {expected} required")
        return False
    for x in s["operands"]:
        if not x:
            mk_err_msg(ma, s, "empty operand")
            return False
    return True

def require_reg(ma, s, field):
    r = arch.lookup_register(field)
    if r is None:
        mk_err_msg(ma, s, f"{field} is not a register")
    return r

def require_imm(ma, s, field, lo, hi, what="immediate"):
    x = parse_int(field)
    if x is None:
        mk_err_msg(ma, s, f"{field} is not a valid {what}")
    elif x < lo or x > hi:
        mk_err_msg(ma, s, f"{what} {x} is outside {lo}..{hi}")
        x = None
    return x

# off(rs1), with the offset defaulting to 0

def require_mem(ma, s, field):
    m = mem_parser.match(field)
    if not m:
        mk_err_msg(ma, s, f"{field} must be offset(register)")
        return None, None
    off_src = m.group(1).strip() or "0"
    off = require_imm(ma, s, off_src, imm12_min, imm12_max, "offset")
    rs1 = require_reg(ma, s, m.group(2))
    return off, rs1

# A branch or jump target is either a numeric offset or a label whose
# offset from the current instruction is computed here

def require_target(ma, s, field, fmt):
    x = parse_int(field)
    if x is None:
        if not name_parser.match(field):
            mk_err_msg(ma, s, f"{field} is not a valid target")
            return None
        ident = ma.symbol_table.get(field)
        if ident is None:
            mk_err_msg(ma, s, f"label {field} is not defined")
            return None
        ident.usage_lines.append(s["lineNumber"])
        x = ident.value - s["address"]
        common.mode.devlog(f"target {field} = {ident.value:#x} offset={x}")
    if x % 2 != 0:
        mk_err_msg(ma, s, f"target offset {x} is not even")
        return None
    if not imm.fits(fmt, x):
        mk_err_msg(ma, s, f"target offset {x} does not fit in a {fmt.value}-format immediate")
        return None
    return x

imm12_min = -2048
imm12_max = 2047
shamt_max = 31
imm20_min = -(1 << 19)
imm20_max = (1 << 20) - 1

# ----------------------------------------------------------------------
# Instruction encoding
# ----------------------------------------------------------------------

def mk_word_r(opcode, funct3, funct7, rd, rs1, rs2):
    return (funct7 << 25) | (rs2 << 20) | (rs1 << 15) | (funct3 << 12) \
        | (rd << 7) | opcode

def mk_word_i(opcode, funct3, rd, rs1, k):
    return ((k & 0xFFF) << 20) | (rs1 << 15) | (funct3 << 12) | (rd << 7) | opcode

def mk_word_s(opcode, funct3, rs1, rs2, k):
    k &= 0xFFF
    return ((k >> 5) << 25) | (rs2 << 20) | (rs1 << 15) | (funct3 << 12) \
        | ((k & 0x1F) << 7) | opcode

def mk_word_b(opcode, funct3, rs1, rs2, k):
    return (((k >> 12) & 1) << 31) | (((k >> 5) & 0x3F) << 25) | (rs2 << 20) \
        | (rs1 << 15) | (funct3 << 12) | (((k >> 1) & 0xF) << 8) \
        | (((k >> 11) & 1) << 7) | opcode

def mk_word_u(opcode, rd, k):
    return ((k & 0xFFFFF) << 12) | (rd << 7) | opcode

def mk_word_j(opcode, rd, k):
    return (((k >> 20) & 1) << 31) | (((k >> 1) & 0x3FF) << 21) \
        | (((k >> 11) & 1) << 20) | (((k >> 12) & 0xFF) << 12) | (rd << 7) | opcode

def encode_r(ma, s, op, opcode):
    if not require_n_operands(ma, s, 3):
        return None
    rd, rs1, rs2 = [require_reg(ma, s, x) for x in s["operands"]]
    if None in (rd, rs1, rs2):
        return None
    return mk_word_r(opcode, op["funct3"], op["funct7"], rd, rs1, rs2)

def encode_i_alu(ma, s, op, opcode):
    if not require_n_operands(ma, s, 3):
        return None
    rd = require_reg(ma, s, s["operands"][0])
    rs1 = require_reg(ma, s, s["operands"][1])
    if arch.is_shift_immediate(s["mnemonic"]):
        shamt = require_imm(ma, s, s["operands"][2], 0, shamt_max, "shift amount")
        k = None if shamt is None else (op["funct7"] << 5) | shamt
    else:
        k = require_imm(ma, s, s["operands"][2], imm12_min, imm12_max)
    if None in (rd, rs1, k):
        return None
    return mk_word_i(opcode, op["funct3"], rd, rs1, k)

def encode_load(ma, s, op, opcode):
    if not require_n_operands(ma, s, 2):
        return None
    rd = require_reg(ma, s, s["operands"][0])
    off, rs1 = require_mem(ma, s, s["operands"][1])
    if None in (rd, off, rs1):
        return None
    return mk_word_i(opcode, op["funct3"], rd, rs1, off)

def encode_store(ma, s, op, opcode):
    if not require_n_operands(ma, s, 2):
        return None
    rs2 = require_reg(ma, s, s["operands"][0])
    off, rs1 = require_mem(ma, s, s["operands"][1])
    if None in (rs2, off, rs1):
        return None
    return mk_word_s(opcode, op["funct3"], rs1, rs2, off)

def encode_branch(ma, s, op, opcode):
    if not require_n_operands(ma, s, 3):
        return None
    rs1 = require_reg(ma, s, s["operands"][0])
    rs2 = require_reg(ma, s, s["operands"][1])
    k = require_target(ma, s, s["operands"][2], ImmFormat.B)
    if None in (rs1, rs2, k):
        return None
    return mk_word_b(opcode, op["funct3"], rs1, rs2, k)

def encode_upper(ma, s, op, opcode):
    if not require_n_operands(ma, s, 2):
        return None
    rd = require_reg(ma, s, s["operands"][0])
    k = require_imm(ma, s, s["operands"][1], imm20_min, imm20_max,
                    "upper immediate")
    if None in (rd, k):
        return None
    return mk_word_u(opcode, rd, k)

# JAL rd, target or JAL target (rd = ra)

def encode_jal(ma, s, op, opcode):
    if not require_n_operands(ma, s, 1, 2):
        return None
    if len(s["operands"]) == 1:
        rd = arch.register_index["ra"]
        target = s["operands"][0]
    else:
        rd = require_reg(ma, s, s["operands"][0])
        target = s["operands"][1]
    k = require_target(ma, s, target, ImmFormat.J)
    if None in (rd, k):
        return None
    return mk_word_j(opcode, rd, k)

# JALR rd, off(rs1) or JALR rd, rs1, imm or JALR rs1 (rd = ra, imm 0)

def encode_jalr(ma, s, op, opcode):
    if not require_n_operands(ma, s, 1, 2, 3):
        return None
    xs = s["operands"]
    if len(xs) == 1:
        rd = arch.register_index["ra"]
        rs1 = require_reg(ma, s, xs[0])
        off = 0
    elif len(xs) == 2:
        rd = require_reg(ma, s, xs[0])
        off, rs1 = require_mem(ma, s, xs[1])
    else:
        rd = require_reg(ma, s, xs[0])
        rs1 = require_reg(ma, s, xs[1])
        off = require_imm(ma, s, xs[2], imm12_min, imm12_max)
    if None in (rd, rs1, off):
        return None
    return mk_word_i(opcode, op["funct3"], rd, rs1, off)

encoders = {
    InstrKind.R: encode_r,
    InstrKind.I_ALU: encode_i_alu,
    InstrKind.LOAD: encode_load,
    InstrKind.STORE: encode_store,
    InstrKind.BRANCH: encode_branch,
    InstrKind.LUI: encode_upper,
    InstrKind.AUIPC: encode_upper,
    InstrKind.JAL: encode_jal,
    InstrKind.JALR: encode_jalr,
}

# ----------------------------------------------------------------------
# Pass 2
# ----------------------------------------------------------------------

def asm_pass2(ma):
    common.mode.devlog("Assembler Pass 2")
    for s in ma.asm_stmt:
        op = s["operation"]
        common.mode.devlog(f"Pass2 line {s['lineNumber']} = /{s['srcLine']}/")
        if op is not None:
            opcode = arch.opcode_of_kind[op["kind"]]
            s["codeWord"] = encoders[op["kind"]](ma, s, op, opcode)
        if s["mnemonic"]:
            x = s["codeWord"] if s["codeWord"] is not None else 0
            ma.machine_code.append(x)
            ma.line_map.append(s["lineNumber"])
            ma.metadata.add_mapping(s["address"], s["lineNumber"])
            common.mode.devlog(f"Pass2 {s['address']:#06x} {arith.word_to_hex8(x)}")
        ma.metadata.push_src(listing_line(s))

def listing_line(s):
    line = str(s["lineNumber"]).rjust(4)
    if s["codeWord"] is not None:
        return f"{line} {s['address']:04x} {arith.word_to_hex8(s['codeWord'])} {s['srcLine']}"
    return f"{line}{' ' * 15}{s['srcLine']}"
