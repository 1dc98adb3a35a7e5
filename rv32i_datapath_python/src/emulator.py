# emulator.py

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
# emulator.py defines the machine language semantics: one call to step
# moves a single instruction through the single cycle datapath
# -------------------------------------------------------------------------

import common
import architecture as arch
import arithmetic as arith
import immediate as imm
import decoder as dec
import datapath as dp
from memory import ProgramMemory, DataMemory
from registers import RegisterFile, ProgramCounter

# ------------------------------------------------------------------------
# Emulator state
# ------------------------------------------------------------------------

# All of the mutable machine state is held here and passed explicitly
# to the functions below

class EmulatorState:
    def __init__(self, program_words=arch.default_program_words,
                 data_words=arch.default_data_words,
                 initial_pc=arch.default_initial_pc):
        common.mode.devlog(f"new EmulatorState program_words={program_words} "
                           f"data_words={data_words} pc={initial_pc:#x}")
        self.program_memory = ProgramMemory(program_words)
        self.data_memory = DataMemory(data_words)
        self.registers = RegisterFile()
        self.pc = ProgramCounter(initial_pc)
        self.cycles = 0

# -------------------------------------------------------------------------
# Initialize machine state
# -------------------------------------------------------------------------

# Program memory survives a reset so the loaded program can be rerun

def reset(es):
    common.mode.devlog("reset the processor")
    es.registers.reset()
    es.data_memory.reset()
    es.pc.reset()
    es.cycles = 0

def load_program(es, machine_code):
    common.mode.devlog(f"load_program {len(machine_code)} words")
    es.program_memory.reset()
    reset(es)
    es.program_memory.load(machine_code)

def program_finished(es, n_instructions):
    return es.pc.value >= n_instructions * arch.word_bytes

# -------------------------------------------------------------------------
# Execute one instruction
# -------------------------------------------------------------------------

def step(es):
    pc_before = es.pc.value
    common.mode.devlog(f"step pc={pc_before:#x} cycle={es.cycles}")

    # Fetch and decode
    word = es.program_memory.read(pc_before)
    bundle = dec.decode(word)

    # Register read and immediate
    rs1_value, rs2_value = es.registers.read_pair(bundle.rs1, bundle.rs2)
    immediate = None
    if bundle.imm_format is not None:
        immediate = imm.generate(bundle.imm_format, word)

    # ALU
    operand_a = dp.alu_operand_a(bundle, pc_before, rs1_value)
    operand_b = dp.alu_src(bundle.alu_src_imm, rs2_value, immediate)
    alu = arith.execute(bundle.alu_op, operand_a, operand_b)

    # Branch
    taken = dp.take_branch(bundle.branch, bundle.branch_invert, alu.result)

    # Memory
    memory_address = None
    memory_value = None
    if bundle.mem_read or bundle.mem_write:
        memory_address = alu.result
    if bundle.mem_read:
        memory_value = es.data_memory.read(memory_address)
    if bundle.mem_write:
        es.data_memory.write(memory_address, rs2_value, True)

    # Write back
    write_back_value = None
    if bundle.reg_write and bundle.rd != 0:
        if bundle.jump:
            write_back_value = arith.word_to_int(pc_before + arch.word_bytes)
        else:
            write_back_value = dp.write_back(bundle.mem_to_reg, alu.result, memory_value)
        es.registers.write(bundle.rd, write_back_value)

    # Next pc
    k = immediate if immediate is not None else 0
    pc_after = dp.next_pc(pc_before, taken, k, bundle.jump, bundle.is_jalr(),
                          k, rs1_value)
    es.pc.set(pc_after)
    es.cycles += 1

    return {
        "pc_before": pc_before,
        "pc_after": pc_after,
        "instruction_word": word,
        "control": bundle,
        "immediate": immediate,
        "rs1_value": rs1_value,
        "rs2_value": rs2_value,
        "alu_operand_a": operand_a,
        "alu_operand_b": operand_b,
        "alu_result": alu.result,
        "alu_flags": alu.flags(),
        "memory_address": memory_address,
        "memory_read_value": memory_value,
        "branch_taken": taken,
        "write_back_value": write_back_value,
    }

def run_steps(es, n):
    return [step(es) for _ in range(n)]

# -------------------------------------------------------------------------
# State export and snapshots
# -------------------------------------------------------------------------

def export_state(es):
    return {
        "pc": es.pc.value,
        "cycles": es.cycles,
        "registers": es.registers.export_state()["registers"],
        "words": es.data_memory.export_state()["words"],
    }

# The whole state is checked before anything is changed

def import_state(es, state):
    if not isinstance(state, dict):
        raise common.StateError("machine state must be a dict")
    for key in ("pc", "cycles", "registers", "words"):
        if key not in state:
            raise common.StateError(f"machine state has no {key}")
    regs = state["registers"]
    words = state["words"]
    if not isinstance(regs, list) or len(regs) != arch.register_count:
        raise common.StateError(
            f"register state must hold {arch.register_count} values")
    if not isinstance(words, list) or len(words) != es.data_memory.n_words:
        raise common.StateError(
            f"data memory state must hold {es.data_memory.n_words} words")
    pc = state["pc"]
    if not isinstance(pc, int) or pc % arch.word_bytes != 0:
        raise common.StateError(f"pc {pc!r} is not a word aligned address")
    cycles = state["cycles"]
    if not isinstance(cycles, int) or isinstance(cycles, bool) or cycles < 0:
        raise common.StateError(f"cycle count {cycles!r} is not a non-negative integer")
    es.registers.import_state({"registers": regs})
    es.data_memory.import_state({"words": words})
    es.pc.set(pc)
    es.cycles = cycles

# A snapshot also holds program memory, so restoring it rebuilds the
# complete machine

def snapshot(es):
    snap = export_state(es)
    snap["program"] = es.program_memory.export_state()["words"]
    return snap

def restore(es, snap):
    program = snap.get("program") if isinstance(snap, dict) else None
    if not isinstance(program, list) or len(program) != es.program_memory.n_words:
        raise common.StateError(
            f"snapshot must hold {es.program_memory.n_words} program words")
    import_state(es, snap)
    es.program_memory.import_state({"words": program})
    common.mode.devlog(f"restored snapshot pc={es.pc.value:#x} cycle={es.cycles}")

# -------------------------------------------------------------------------
# Display
# -------------------------------------------------------------------------

def dump_registers(es):
    xs = []
    n = arch.words_per_line
    for i in range(0, arch.register_count, n):
        xs.append("  ".join(
            f"{('x' + str(j)).rjust(3)} {arch.abi_names[j].ljust(4)} "
            f"{arith.word_to_hex8(es.registers.read(j))}"
            for j in range(i, i + n)))
    return "\n".join(xs)

def dump_memory(es):
    xs = [f"0x{a:04x}: 0x{arith.word_to_hex8(x)} ({x})"
          for (a, x) in es.data_memory.nonzero()]
    return "\n".join(xs) if xs else "(all data memory words are zero)"

def show_trace(t):
    b = t["control"]
    xs = f"pc={t['pc_before']:#06x} {arith.word_to_hex8(t['instruction_word'])}"
    xs += f"  {dec.disassemble(t['instruction_word'])}\n"
    xs += f"  {dec.show_bundle(b)}\n"
    xs += f"  imm={t['immediate']} rs1={t['rs1_value']} rs2={t['rs2_value']}"
    xs += f" a={t['alu_operand_a']} b={t['alu_operand_b']}"
    xs += f" alu={t['alu_result']}"
    xs += " flags=" + "".join(
        c if t["alu_flags"][k] else "-"
        for (c, k) in (("Z", "zero"), ("N", "negative"),
                       ("V", "overflow"), ("C", "carry")))
    if t["memory_address"] is not None:
        xs += f"\n  mem[{t['memory_address']:#x}]"
        if t["memory_read_value"] is not None:
            xs += f" -> {t['memory_read_value']}"
        if b.mem_write:
            xs += f" <- {t['rs2_value']}"
    if t["branch_taken"]:
        xs += "\n  branch taken"
    if t["write_back_value"] is not None:
        xs += f"\n  x{b.rd} := {t['write_back_value']}"
    xs += f"\n  pc -> {t['pc_after']:#06x}"
    return xs
