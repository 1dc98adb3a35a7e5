# main.py

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

# main.py is the command line interface

import sys
import argparse

import common
import architecture as arch
import arithmetic as arith
import assembler
import decoder as dec
import emulator as em

default_max_steps = 1000

def read_source(file_path):
    with open(file_path, "r", encoding="utf-8") as f:
        return f.read()

def assemble_file(file_path):
    asm_info = assembler.assembler(read_source(file_path))
    print("Assembly successful!")
    print(asm_info.asm_listing_text)
    print()
    print(asm_info.show_symbol_table())
    return 0

def run_file(file_path, max_steps=default_max_steps, trace=False,
             dump_mem=False, dump_regs=False, program_words=None,
             data_words=None, initial_pc=None):
    asm_info = assembler.assembler(read_source(file_path))
    n = len(asm_info.machine_code)
    es = em.EmulatorState(
        program_words if program_words is not None else arch.default_program_words,
        data_words if data_words is not None else arch.default_data_words,
        initial_pc if initial_pc is not None else arch.default_initial_pc)
    em.load_program(es, asm_info.machine_code)

    print("\n--- Running Emulator ---")
    status = 0
    try:
        while not em.program_finished(es, n) and es.cycles < max_steps:
            t = em.step(es)
            if trace:
                line = asm_info.metadata.get_src_idx(t["pc_before"])
                print(f"[{es.cycles}] line {line}: {em.show_trace(t)}")
        if em.program_finished(es, n):
            print(f"Program finished after {es.cycles} instructions.")
        else:
            print(f"Emulator stopped after {max_steps} instructions (limit reached).")
    except common.SimulatorError as e:
        common.indicate_error(f"Stopped at pc={es.pc.value:#x} "
                              f"after {es.cycles} instructions: {e}")
        status = 1
    print("------------------------")

    if dump_regs:
        print(em.dump_registers(es))
    if dump_mem:
        print(em.dump_memory(es))
    return status

def decode_words(words):
    for xs in words:
        w = arith.limit32(int(xs, 16))
        print(f"{arith.word_to_hex8(w)}  {dec.disassemble(w)}")
        print(f"  {dec.show_bundle(dec.decode(w))}")
    return 0

def build_parser():
    parser = argparse.ArgumentParser(prog="rv32i-sim",
                                     description="RV32I assembler and datapath simulator")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Assemble command
    assemble_parser = subparsers.add_parser("assemble", help="Assemble an RV32I assembly file")
    assemble_parser.add_argument("file", help="Path to the assembly file")
    assemble_parser.add_argument("--verbose", action="store_true", help="Enable verbose debug logging")

    # Run command
    run_parser = subparsers.add_parser("run", help="Assemble and run an RV32I assembly file")
    run_parser.add_argument("file", help="Path to the assembly file")
    run_parser.add_argument("--steps", type=int, default=default_max_steps,
                            help="Maximum number of instructions to execute")
    run_parser.add_argument("--trace", action="store_true", help="Show the datapath trace of every step")
    run_parser.add_argument("--mem-dump", action="store_true", help="Dump data memory after execution")
    run_parser.add_argument("--reg-dump", action="store_true", help="Dump registers after execution")
    run_parser.add_argument("--program-words", type=int, help="Program memory size in words")
    run_parser.add_argument("--data-words", type=int, help="Data memory size in words")
    run_parser.add_argument("--pc", type=lambda x: int(x, 0), help="Initial pc")
    run_parser.add_argument("--verbose", action="store_true", help="Enable verbose debug logging")

    # Decode command
    decode_parser = subparsers.add_parser("decode", help="Decode hexadecimal instruction words")
    decode_parser.add_argument("words", nargs="+", help="Instruction words, e.g. 00a00093")
    decode_parser.add_argument("--verbose", action="store_true", help="Enable verbose debug logging")

    return parser

def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if getattr(args, "verbose", False):
        common.mode.set_trace()
    try:
        if args.command == "assemble":
            return assemble_file(args.file)
        elif args.command == "run":
            return run_file(args.file, args.steps, args.trace, args.mem_dump,
                            args.reg_dump, args.program_words, args.data_words,
                            args.pc)
        elif args.command == "decode":
            return decode_words(args.words)
        else:
            parser.print_help()
            return 1
    except common.AssemblyError as e:
        common.indicate_error(str(e))
        for (line_number, src_line, msg) in e.errors[1:]:
            common.mode.errlog(f"Error on line {line_number} (\"{src_line}\"): {msg}")
        return 1
    except common.SimulatorError as e:
        common.indicate_error(str(e))
        return 1
    except FileNotFoundError:
        common.indicate_error(f"Error: File not found at {args.file}")
        return 1
    except ValueError as e:
        common.indicate_error(f"Error: {e}")
        return 1
    finally:
        common.mode.clear_trace()

if __name__ == "__main__":
    sys.exit(main())
