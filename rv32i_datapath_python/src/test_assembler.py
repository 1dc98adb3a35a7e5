import pytest
import common
import assembler as asm
import decoder as dec
import immediate as imm
from architecture import ImmFormat

example_program = """\
addi x1, x0, 10
addi x2, x0, 5
add x3, x1, x2
sw x3, 0(x0)
"""

def test_example_program():
    ai = asm.assembler(example_program)
    assert ai.machine_code == [0x00A00093, 0x00500113, 0x002081B3, 0x00302023]
    assert ai.line_map == [1, 2, 3, 4]
    assert ai.output() == {"machine_code": ai.machine_code,
                           "line_map": [1, 2, 3, 4]}

def test_comments_blank_lines_and_line_map():
    src = """\
# comment line

addi x1, x0, 1   # trailing comment
// another comment
addi x2, x0, 2   // trailing
"""
    ai = asm.assembler(src)
    assert ai.machine_code == [0x00100093, 0x00200113]
    assert ai.line_map == [3, 5]
    assert ai.metadata.get_src_idx(4) == 5
    assert ai.metadata.get_src_idx(8) is None

def test_backward_branch_offset():
    src = """\
loop: addi x1, x1, -1
      bne x1, x0, loop
"""
    ai = asm.assembler(src)
    assert ai.machine_code == [0xFFF08093, 0xFE009EE3]
    assert imm.generate(ImmFormat.B, ai.machine_code[1]) == -4

def test_forward_branch_and_label_on_own_line():
    src = """\
    beq x0, x0, done
    addi x1, x0, 1
done:
    addi x2, x0, 2
"""
    ai = asm.assembler(src)
    assert ai.symbol_table["done"].value == 8
    assert ai.symbol_table["done"].def_line == 3
    assert ai.symbol_table["done"].usage_lines == [1]
    assert imm.generate(ImmFormat.B, ai.machine_code[0]) == 8

def test_numeric_branch_offset():
    ai = asm.assembler("bne x1, x0, -4")
    assert ai.machine_code == [0xFE009EE3]

def test_nop():
    ai = asm.assembler("nop")
    assert ai.machine_code == [0x00000013]

def test_case_and_abi_names():
    a = asm.assembler("ADD X3, X1, X2").machine_code
    b = asm.assembler("add x3, x1, x2").machine_code
    assert a == b
    bundle = dec.decode(asm.assembler("add s0, a0, t6").machine_code[0])
    assert (bundle.rd, bundle.rs1, bundle.rs2) == (8, 10, 31)

def test_integer_notations():
    ai = asm.assembler("addi x1, x0, 0x10\naddi x1, x0, -0b11\naddi x1, x0, +7")
    assert [imm.generate(ImmFormat.I, w) for w in ai.machine_code] == [16, -3, 7]

def test_immediate_limits():
    ai = asm.assembler("addi x1, x0, -2048\naddi x1, x0, 2047")
    assert [imm.generate(ImmFormat.I, w) for w in ai.machine_code] == [-2048, 2047]

def test_store_negative_offset():
    assert asm.assembler("sw x3, -4(x2)").machine_code == [0xFE312E23]

def test_load():
    assert asm.assembler("lw x1, 4(x2)").machine_code == [0x00412083]

def test_whitespace_separated_operands():
    assert asm.assembler("addi x1 x0 10").machine_code == [0x00A00093]
    assert asm.assembler("addi x1, x0 10").machine_code == [0x00A00093]
    assert asm.assembler("addi x1 ,x0,10").machine_code == [0x00A00093]
    assert asm.assembler("sw x3 -4(x2)").machine_code == [0xFE312E23]
    assert asm.assembler("lw x1, 4 ( x2 )").machine_code == [0x00412083]

def test_shift_immediate():
    assert asm.assembler("srai x1, x1, 3").machine_code == [0x4030D093]

def test_upper_immediates():
    assert asm.assembler("lui x5, 0x12345").machine_code == [0x123452B7]
    assert asm.assembler("lui x1, -1").machine_code == [0xFFFFF0B7]
    assert asm.assembler("auipc x1, 1").machine_code == [0x00001097]

def test_jal_forms():
    src = """\
jal ra, target
jal target
target: jal x0, -8
"""
    ai = asm.assembler(src)
    assert ai.machine_code[0] == 0x008000EF
    b = dec.decode(ai.machine_code[1])
    assert b.rd == 1
    assert imm.generate(ImmFormat.J, ai.machine_code[1]) == 4
    assert imm.generate(ImmFormat.J, ai.machine_code[2]) == -8

def test_jalr_forms():
    ai = asm.assembler("jalr x5\njalr x1, 4(x2)\njalr x1, x2, 4")
    short = dec.decode(ai.machine_code[0])
    assert (short.rd, short.rs1) == (1, 5)
    assert imm.generate(ImmFormat.I, ai.machine_code[0]) == 0
    assert ai.machine_code[1] == ai.machine_code[2]

def test_listing_and_symbol_table():
    ai = asm.assembler("start: addi x1, x0, 10\n  bne x1, x0, start")
    assert ai.asm_listing_text.splitlines()[0] == asm.listing_header
    assert "00a00093" in ai.asm_listing_text
    table = ai.show_symbol_table()
    assert "start" in table

# Errors

def assembly_error(src):
    with pytest.raises(common.AssemblyError) as e:
        asm.assembler(src)
    return e.value

def test_unknown_mnemonic():
    e = assembly_error("addi x1, x0, 1\nfoo x1, x2")
    assert e.line_number == 2
    assert e.src_line == "foo x1, x2"
    assert "unknown mnemonic" in e.msg
    assert "line 2" in str(e)

def test_unresolved_label():
    e = assembly_error("beq x0, x0, nowhere")
    assert e.line_number == 1
    assert "nowhere" in e.msg

def test_duplicate_label():
    e = assembly_error("a: nop\na: nop")
    assert e.line_number == 2

def test_bad_label():
    e = assembly_error("1abc: nop")
    assert e.line_number == 1

@pytest.mark.parametrize("src", [
    "addi x1, x0, 2048",
    "addi x1, x0, -2049",
    "slli x1, x1, 32",
    "add x1, x2",
    "add x1, x2, x32",
    "add x1, , x2",
    "lw x1, x2",
    "beq x0, x0, 3",
    "beq x0, x0, 4096",
    "jal x1, 1048576",
    "lui x1, 0x100000",
    "addi x1, x0, ten",
    "nop x1",
])
def test_malformed_operands(src):
    e = assembly_error(src)
    assert e.line_number == 1

def test_errors_are_collected():
    e = assembly_error("nop\nbogus\nnop\naddi x1, x0, 5000")
    assert e.line_number == 2
    assert [x[0] for x in e.errors] == [2, 4]
