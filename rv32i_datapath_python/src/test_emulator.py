import pytest
import common
import assembler as asm
import emulator as em
from emulator import EmulatorState

def boot(src, **kwargs):
    es = EmulatorState(**kwargs)
    ai = asm.assembler(src)
    em.load_program(es, ai.machine_code)
    return es, len(ai.machine_code)

def run_to_end(es, n, limit=1000):
    traces = []
    while not em.program_finished(es, n) and len(traces) < limit:
        traces.append(em.step(es))
    return traces

def test_emulator_init():
    es = EmulatorState()
    assert es is not None
    assert es.pc.value == 0
    assert es.cycles == 0
    assert es.program_memory.n_words == 1024
    assert es.data_memory.n_words == 1024

def test_example_program():
    es, n = boot("addi x1, x0, 10\naddi x2, x0, 5\nadd x3, x1, x2\nsw x3, 0(x0)")
    em.run_steps(es, 4)
    assert es.registers.read(1) == 10
    assert es.registers.read(2) == 5
    assert es.registers.read(3) == 15
    assert es.data_memory.read(0) == 15
    assert es.pc.value == 16
    assert es.cycles == 4
    assert em.program_finished(es, n)

def test_trace_record():
    es, n = boot("addi x1, x0, 10\nsw x1, 4(x0)")
    t = em.step(es)
    assert set(t) == {
        "pc_before", "pc_after", "instruction_word", "control", "immediate",
        "rs1_value", "rs2_value", "alu_operand_a", "alu_operand_b",
        "alu_result", "alu_flags", "memory_address", "memory_read_value",
        "branch_taken", "write_back_value"}
    assert t["pc_before"] == 0 and t["pc_after"] == 4
    assert t["instruction_word"] == 0x00A00093
    assert t["control"].mnemonic == "addi"
    assert t["immediate"] == 10
    assert t["alu_result"] == 10
    assert t["write_back_value"] == 10
    assert t["memory_address"] is None
    assert t["branch_taken"] is False
    t = em.step(es)
    assert t["memory_address"] == 4
    assert t["memory_read_value"] is None
    assert t["write_back_value"] is None
    assert es.data_memory.read(4) == 10

def test_loop():
    src = """\
    addi x1, x0, 3
    addi x2, x0, 0
loop:
    add x2, x2, x1
    addi x1, x1, -1
    bne x1, x0, loop
    sw x2, 8(x0)
"""
    es, n = boot(src)
    traces = run_to_end(es, n)
    assert len(traces) == 12
    assert es.registers.read(2) == 6
    assert es.data_memory.read(8) == 6
    assert [t["branch_taken"] for t in traces if t["control"].branch] == \
        [True, True, False]

def test_signed_and_unsigned_branches():
    src = """\
    addi x1, x0, -1
    blt x1, x0, signed
    addi x5, x0, 1
signed:
    bgeu x1, x0, unsigned
    addi x6, x0, 1
unsigned:
    bge x0, x1, done
    addi x7, x0, 1
done:
"""
    es, n = boot(src)
    run_to_end(es, n)
    assert es.registers.read(5) == 0
    assert es.registers.read(6) == 0
    assert es.registers.read(7) == 0

def test_jal_and_jalr():
    src = """\
    jal ra, func
    addi x5, x0, 1
    jal x0, end
func:
    addi x6, x0, 2
    jalr x0, 0(ra)
end:
"""
    es, n = boot(src)
    traces = run_to_end(es, n)
    assert [t["pc_before"] for t in traces] == [0, 12, 16, 4, 8]
    assert traces[0]["write_back_value"] == 4
    assert es.registers.read_by_name("ra") == 4
    assert es.registers.read(5) == 1
    assert es.registers.read(6) == 2
    assert es.pc.value == 20

def test_lui_and_auipc():
    es, n = boot("lui x1, 0x12345\nauipc x2, 1")
    em.run_steps(es, 2)
    assert es.registers.read(1) == 0x12345000
    assert es.registers.read(2) == 4 + 4096

def test_load_after_store():
    es, n = boot("addi x1, x0, 42\nsw x1, 4(x0)\nlw x2, 4(x0)")
    traces = em.run_steps(es, 3)
    assert traces[2]["memory_read_value"] == 42
    assert es.registers.read(2) == 42

def test_write_to_x0_is_ignored():
    es, n = boot("addi x0, x0, 5")
    t = em.step(es)
    assert es.registers.read(0) == 0
    assert t["write_back_value"] is None

def test_failure_stops_without_rollback():
    es, n = boot("addi x1, x0, 2\nlw x2, 0(x1)")
    em.step(es)
    with pytest.raises(common.AddressError):
        em.step(es)
    assert es.registers.read(1) == 2
    assert es.pc.value == 4
    assert es.cycles == 1

def test_unsupported_instruction():
    es = EmulatorState()
    em.load_program(es, [0xFFFFFFFF])
    with pytest.raises(common.UnsupportedInstructionError):
        em.step(es)

def test_fetch_outside_program_memory():
    es = EmulatorState(program_words=1)
    em.load_program(es, [0x00000013])
    em.step(es)
    with pytest.raises(common.AddressError):
        em.step(es)

def test_reset_keeps_program():
    es, n = boot("addi x1, x0, 10\nsw x1, 0(x0)")
    em.run_steps(es, 2)
    em.reset(es)
    assert es.pc.value == 0
    assert es.cycles == 0
    assert es.registers.read(1) == 0
    assert es.data_memory.read(0) == 0
    assert es.program_memory.read(0) == 0x00A00093

def test_initial_pc():
    es = EmulatorState(initial_pc=4)
    em.load_program(es, [0x00100093, 0x00200093])
    em.step(es)
    assert es.registers.read(1) == 2
    em.reset(es)
    assert es.pc.value == 4

def test_snapshot_and_restore():
    es, n = boot("addi x1, x0, 1\naddi x2, x0, 2\nsw x1, 0(x0)\naddi x1, x0, 9")
    em.run_steps(es, 2)
    snap = em.snapshot(es)
    em.run_steps(es, 2)
    assert es.registers.read(1) == 9
    em.restore(es, snap)
    assert es.pc.value == 8
    assert es.cycles == 2
    assert es.registers.read(1) == 1
    assert es.data_memory.read(0) == 0
    em.step(es)
    assert es.data_memory.read(0) == 1

def test_export_and_import_state():
    es, n = boot("addi x1, x0, 7")
    em.step(es)
    state = em.export_state(es)
    assert set(state) == {"pc", "cycles", "registers", "words"}
    assert state["registers"][1] == 7
    other = EmulatorState()
    em.import_state(other, state)
    assert other.registers.read(1) == 7
    assert other.pc.value == 4

def test_import_state_rejects_bad_state():
    es = EmulatorState(data_words=4)
    good = em.export_state(es)
    with pytest.raises(common.StateError):
        em.import_state(es, dict(good, words=[0] * 5))
    with pytest.raises(common.StateError):
        em.import_state(es, dict(good, registers=[0] * 3))
    with pytest.raises(common.StateError):
        em.import_state(es, dict(good, pc=2))
    with pytest.raises(common.StateError):
        em.import_state(es, {"pc": 0})
    for cycles in ("x", -1, 2.0):
        with pytest.raises(common.StateError):
            em.import_state(es, dict(good, cycles=cycles, pc=8))
    assert es.pc.value == 0
    assert es.cycles == 0
    with pytest.raises(common.StateError):
        em.restore(es, good)

def test_dumps_and_trace_display():
    es, n = boot("addi x1, x0, 10\naddi x2, x0, 5\nadd x3, x1, x2\nsw x3, 0(x0)")
    traces = em.run_steps(es, 4)
    assert "0000000f" in em.dump_registers(es)
    assert len(em.dump_registers(es).splitlines()) == 8
    assert em.dump_memory(es) == "0x0000: 0x0000000f (15)"
    xs = em.show_trace(traces[3])
    assert "sw x3, 0(x0)" in xs
    assert "mem[0x0] <- 15" in xs
