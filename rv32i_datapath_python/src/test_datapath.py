import decoder as dec
import datapath as dp

def test_branch_law():
    for r in (-3, 0, 1, 7):
        assert dp.take_branch(True, False, r) == (r != 0)
        assert dp.take_branch(True, True, r) == (r == 0)
        assert dp.take_branch(False, False, r) is False
        assert dp.take_branch(False, True, r) is False

def test_next_pc_jalr():
    assert dp.next_pc(0, is_jalr=True, rs1_value=5, immediate=2) == 6
    assert dp.next_pc(0, is_jalr=True, rs1_value=7, immediate=0) == 6

def test_next_pc_priority():
    assert dp.next_pc(0, taken=True, branch_offset=8, jump=True,
                      is_jalr=True, immediate=4, rs1_value=8) == 12
    assert dp.next_pc(0x10, taken=True, branch_offset=4, jump=True,
                      immediate=-8) == 8
    assert dp.next_pc(0x10, taken=True, branch_offset=-4) == 0x0C
    assert dp.next_pc(0x10, taken=False, branch_offset=-4) == 0x14

def test_next_pc_wraps():
    assert dp.next_pc(0xFFFFFFFC) == 0
    assert dp.next_pc(0, taken=True, branch_offset=-4) == 0xFFFFFFFC

def test_alu_operand_a():
    lui = dec.decode(0x123452B7)
    auipc = dec.decode(0x00001097)
    jal = dec.decode(0x008000EF)
    add = dec.decode(0x002081B3)
    assert dp.alu_operand_a(lui, 8, 99) == 0
    assert dp.alu_operand_a(auipc, 8, 99) == 8
    assert dp.alu_operand_a(jal, 8, 99) == 8
    assert dp.alu_operand_a(add, 8, 99) == 99

def test_alu_src_and_write_back():
    assert dp.alu_src(True, 1, 2) == 2
    assert dp.alu_src(False, 1, 2) == 1
    assert dp.write_back(True, 1, 2) == 2
    assert dp.write_back(False, 1, 2) == 1
