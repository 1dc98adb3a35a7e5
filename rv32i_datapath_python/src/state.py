# state.py

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
# state.py defines the data structures produced by the assembler
# -------------------------------------------------------------------------

import common

# -------------------------------------------------------------------------
# Assembler information
# -------------------------------------------------------------------------

# One AsmInfo is created for each call to the assembler and holds
# everything it builds. Nothing is kept between calls.

class AsmInfo:
    def __init__(self, src_text):
        self.asm_src_lines = src_text.replace("\r", "").split("\n")
        self.asm_stmt = []
        self.symbol_table = {}
        self.location_counter = 0
        self.machine_code = []
        self.line_map = []
        self.metadata = Metadata()
        self.asm_listing_text = ""
        self.n_asm_errors = 0

    def output(self):
        return {"machine_code": list(self.machine_code),
                "line_map": list(self.line_map)}

    def show_symbol_table(self):
        xs = "Symbol table\n"
        xs += "Name          Addr   Def  Used\n"
        for name in sorted(self.symbol_table.keys()):
            x = self.symbol_table[name]
            xs += (f"{name.ljust(12)}  {x.value:04x}  {str(x.def_line).rjust(4)}"
                   f"  {','.join(map(str, x.usage_lines))}\n")
        return xs

# -------------------------------------------------------------------------
# Symbol table
# -------------------------------------------------------------------------

# A label is bound to the byte address of the instruction that follows
# it

class Identifier:
    def __init__(self, name, v, def_line):
        self.name = name
        self.value = v
        self.def_line = def_line
        self.usage_lines = []

# -------------------------------------------------------------------------
# Metadata
# -------------------------------------------------------------------------

# Metadata pairs each emitted word address with the source line it
# came from and holds the lines of the listing

class Metadata:
    def __init__(self):
        self.clear()

    def clear(self):
        self.pairs = []
        self.listing_plain = []

    def add_mapping(self, a, i):
        common.mode.devlog(f"metadata add_mapping {a:#x} -> line {i}")
        self.pairs.append((a, i))

    def push_src(self, xs):
        self.listing_plain.append(xs)

    def get_src_idx(self, a):
        for (addr, i) in self.pairs:
            if addr == a:
                return i
        return None

    def to_text(self):
        return "\n".join(self.listing_plain)
