# memory.py

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

# memory.py defines the word stores used for program memory and data
# memory: fixed size arrays of 32-bit words, addressed in bytes.

import common
import architecture as arch
import arithmetic as arith

# -------------------------------------------------------------
# Word store
# -------------------------------------------------------------

# An address is valid when it is a multiple of 4 and its word index
# lies inside the store. Invalid addresses raise AddressError before
# anything is changed. Program memory keeps the unsigned view of each
# word and data memory keeps the signed view; the bits are the same.

class WordStore:
    def __init__(self, name, n_words, signed):
        if not isinstance(n_words, int) or n_words <= 0:
            raise common.StateError(f"invalid {name} memory size: {n_words}")
        self.name = name
        self.n_words = n_words
        self.signed = signed
        self.words = [0] * n_words

    def view(self, x):
        return arith.word_to_int(x) if self.signed else arith.limit32(x)

    def word_index(self, address):
        if not isinstance(address, int):
            raise common.AddressError(address, f"{self.name} address {address!r} is not an integer")
        if address % arch.word_bytes != 0:
            raise common.AddressError(
                address, f"{self.name} address {address:#x} is not word aligned")
        i = address // arch.word_bytes
        if i < 0 or i >= self.n_words:
            raise common.AddressError(
                address, f"{self.name} address {address:#x} is out of range (word {i})")
        return i

    def read(self, address):
        x = self.words[self.word_index(address)]
        common.mode.devlog(f"{self.name} read {address:#x} = {arith.show_word(x)}")
        return x

    def write(self, address, value, enable=True):
        if not enable:
            return False
        i = self.word_index(address)
        self.words[i] = self.view(value)
        common.mode.devlog(f"{self.name} write {address:#x} := {arith.show_word(value)}")
        return True

    def reset(self):
        common.mode.devlog(f"reset {self.name} memory")
        self.words = [0] * self.n_words

    # Load a list of words sequentially starting at byte address base

    def load(self, words, base=0):
        start = self.word_index(base)
        if start + len(words) > self.n_words:
            raise common.AddressError(
                base, f"{len(words)} words do not fit in {self.name} memory "
                      f"at {base:#x} ({self.n_words} words)")
        for k, w in enumerate(words):
            self.words[start + k] = self.view(w)

    # Load {byte_address: value}. Every address is checked before any
    # word is written.

    def load_map(self, m):
        entries = [(self.word_index(a), v) for a, v in m.items()]
        for i, v in entries:
            self.words[i] = self.view(v)

    def export_state(self):
        return {"words": list(self.words)}

    def import_state(self, state):
        words = state.get("words") if isinstance(state, dict) else None
        if not isinstance(words, list):
            raise common.StateError(f"{self.name} memory state has no word list")
        if len(words) != self.n_words:
            raise common.StateError(
                f"{self.name} memory state has {len(words)} words, "
                f"memory has {self.n_words}")
        self.words = [self.view(w) for w in words]

    # (address, value) for every non-zero word

    def nonzero(self):
        return [(i * arch.word_bytes, x) for i, x in enumerate(self.words) if x != 0]

    def dump(self, start=0, count=None):
        i = self.word_index(start)
        end = self.n_words if count is None else min(i + count, self.n_words)
        return [f"0x{k * arch.word_bytes:04x}: 0x{arith.word_to_hex8(self.words[k])}"
                f" ({arith.word_to_int(self.words[k])})"
                for k in range(i, end)]

class ProgramMemory(WordStore):
    def __init__(self, n_words=arch.default_program_words):
        super().__init__("program", n_words, False)

class DataMemory(WordStore):
    def __init__(self, n_words=arch.default_data_words):
        super().__init__("data", n_words, True)
