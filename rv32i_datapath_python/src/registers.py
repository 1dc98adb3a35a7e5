# registers.py

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
# registers.py defines the register file and the program counter
# -------------------------------------------------------------------------

import common
import architecture as arch
import arithmetic as arith

# -------------------------------------------------------------------------
# Register file
# -------------------------------------------------------------------------

# 32 signed 32-bit registers. x0 reads as 0 whatever is stored in its
# slot, and writes to it are ignored.

class RegisterFile:
    def __init__(self):
        self.regs = [0] * arch.register_count

    def check_index(self, i):
        if not isinstance(i, int) or i < 0 or i >= arch.register_count:
            raise common.RegisterIndexError(i)

    def read(self, i):
        self.check_index(i)
        return 0 if i == 0 else self.regs[i]

    def read_pair(self, rs1, rs2):
        self.check_index(rs1)
        self.check_index(rs2)
        return self.read(rs1), self.read(rs2)

    def write(self, i, x):
        self.check_index(i)
        if i == 0:
            common.mode.devlog("write to x0 ignored")
            return False
        self.regs[i] = arith.word_to_int(x)
        common.mode.devlog(f"x{i} := {arith.show_word(x)}")
        return True

    def read_by_name(self, name):
        i = arch.lookup_register(name)
        if i is None:
            raise common.RegisterIndexError(name)
        return self.read(i)

    def reset(self):
        common.mode.devlog("Resetting registers")
        self.regs = [0] * arch.register_count

    def export_state(self):
        return {"registers": [self.read(i) for i in range(arch.register_count)]}

    def import_state(self, state):
        regs = state.get("registers") if isinstance(state, dict) else None
        if not isinstance(regs, list) or len(regs) != arch.register_count:
            raise common.StateError(
                f"register state must hold {arch.register_count} values")
        self.regs = [arith.word_to_int(x) for x in regs]
        self.regs[0] = 0

# -------------------------------------------------------------------------
# Program counter
# -------------------------------------------------------------------------

# The pc holds the unsigned byte address of the next instruction and is
# always word aligned.

class ProgramCounter:
    def __init__(self, initial=arch.default_initial_pc):
        self.initial = self.check(initial)
        self.value = self.initial

    def check(self, x):
        x = arith.limit32(x)
        if x % arch.word_bytes != 0:
            raise common.AddressError(x, f"pc {x:#x} is not word aligned")
        return x

    def set(self, x):
        self.value = self.check(x)

    def increment(self, k=arch.word_bytes):
        self.set(self.value + k)

    def reset(self):
        self.value = self.initial
