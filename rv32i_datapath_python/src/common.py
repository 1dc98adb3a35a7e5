# common.py

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
# common.py
# ----------------------------------------------------------------------

# Developer tracing is switched on with --verbose. Every module logs
# through the single mode object so the CLI controls all output.

class Mode:
    def __init__(self):
        self.trace = False
        self.show_err = True

    def set_trace(self):
        self.trace = True

    def clear_trace(self):
        self.trace = False

    def devlog(self, xs):
        if self.trace:
            print(xs)

    def errlog(self, xs):
        if self.show_err:
            print(xs)

mode = Mode()

# ----------------------------------------------------------------------
# Logging error message
# ----------------------------------------------------------------------

def indicate_error(xs):
    print(f"\033[91m\033[1m{xs}\033[0m") # ANSI escape codes for red and bold

# ----------------------------------------------------------------------
# Errors
# ----------------------------------------------------------------------

# Every failure in the core is raised where it is detected and is not
# caught again inside the core. A failing step leaves the machine state
# exactly as far as it got; the caller decides whether to reset.

class SimulatorError(Exception):
    pass

class AddressError(SimulatorError):
    # unaligned or out of range memory / pc access
    def __init__(self, address, msg):
        super().__init__(msg)
        self.address = address

class RegisterIndexError(SimulatorError):
    def __init__(self, index):
        super().__init__(f"register index {index} is outside 0..31")
        self.index = index

class UnsupportedInstructionError(SimulatorError):
    def __init__(self, word, msg):
        super().__init__(f"{msg} (instruction 0x{word & 0xFFFFFFFF:08x})")
        self.word = word

class UnsupportedOperationError(SimulatorError):
    pass

class StateError(SimulatorError):
    # rejected snapshot or state import
    pass

class AssemblyError(SimulatorError):
    def __init__(self, line_number, src_line, msg, errors=None):
        super().__init__(f"Error on line {line_number} (\"{src_line}\"): {msg}")
        self.line_number = line_number
        self.src_line = src_line
        self.msg = msg
        self.errors = errors if errors is not None else [(line_number, src_line, msg)]
