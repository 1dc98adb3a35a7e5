import main

example_program = """\
addi x1, x0, 10
addi x2, x0, 5
add x3, x1, x2
sw x3, 0(x0)
"""

def write_source(tmp_path, text, name="prog.s"):
    p = tmp_path / name
    p.write_text(text, encoding="utf-8")
    return str(p)

def test_assemble(tmp_path, capsys):
    path = write_source(tmp_path, "start: " + example_program)
    assert main.main(["assemble", path]) == 0
    out = capsys.readouterr().out
    assert "Assembly successful!" in out
    assert "00a00093" in out
    assert "start" in out

def test_assemble_error(tmp_path, capsys):
    path = write_source(tmp_path, "addi x1, x0, 1\nfoo x1\nbar x2\n")
    assert main.main(["assemble", path]) == 1
    out = capsys.readouterr().out
    assert "Error on line 2" in out
    assert "Error on line 3" in out

def test_run_with_dumps(tmp_path, capsys):
    path = write_source(tmp_path, example_program)
    assert main.main(["run", path, "--reg-dump", "--mem-dump", "--trace"]) == 0
    out = capsys.readouterr().out
    assert "Program finished after 4 instructions." in out
    assert "0x0000: 0x0000000f (15)" in out
    assert "line 4" in out

def test_run_step_limit(tmp_path, capsys):
    path = write_source(tmp_path, "loop: beq x0, x0, loop\n")
    assert main.main(["run", path, "--steps", "5"]) == 0
    assert "limit reached" in capsys.readouterr().out

def test_run_error(tmp_path, capsys):
    path = write_source(tmp_path, "addi x1, x0, 2\nlw x2, 0(x1)\n")
    assert main.main(["run", path]) == 1
    assert "not word aligned" in capsys.readouterr().out

def test_run_small_data_memory(tmp_path, capsys):
    path = write_source(tmp_path, "sw x0, 8(x0)\n")
    assert main.main(["run", path, "--data-words", "2"]) == 1
    assert "out of range" in capsys.readouterr().out

def test_decode(capsys):
    assert main.main(["decode", "00a00093", "0xfe009ee3"]) == 0
    out = capsys.readouterr().out
    assert "addi x1, x0, 10" in out
    assert "bne x1, x0, -4" in out
    assert "regWrite=1" in out

def test_decode_unsupported(capsys):
    assert main.main(["decode", "ffffffff"]) == 1
    assert "unsupported opcode" in capsys.readouterr().out

def test_missing_file(tmp_path, capsys):
    assert main.main(["assemble", str(tmp_path / "missing.s")]) == 1
    assert "File not found" in capsys.readouterr().out
