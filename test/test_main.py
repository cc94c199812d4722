"""
Driver tests: running program files, dumping, exit status, and the examples
"""

import json

import pytest
import main
from main import EXIT_FAILURE, EXIT_STACK_EXHAUSTED, evaluate_line
from interpreter import create_interpreter


def write_program(tmp_path, expression, name="prog.json"):
  path = tmp_path / name
  path.write_text(json.dumps({"name": name, "expression": expression}))
  return str(path)


class TestRunScript:
  """Test running program files"""

  def test_runs_program(self, tmp_path, capsys):
    path = write_program(tmp_path, {"kind": "Print", "value": {"kind": "Str", "value": "hi"}})
    main.main([path])
    assert capsys.readouterr().out == "hi"

  def test_missing_file(self, tmp_path, capsys):
    with pytest.raises(SystemExit) as exc_info:
      main.main([str(tmp_path / "nope.json")])
    assert exc_info.value.code == EXIT_FAILURE
    assert "not found" in capsys.readouterr().err

  def test_malformed_input(self, tmp_path, capsys):
    path = write_program(tmp_path, {"kind": "Print"})
    with pytest.raises(SystemExit) as exc_info:
      main.main([path])
    assert exc_info.value.code == EXIT_FAILURE
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Malformed input" in captured.err

  def test_invalid_json(self, tmp_path, capsys):
    path = tmp_path / "broken.json"
    path.write_text("{ not json")
    with pytest.raises(SystemExit) as exc_info:
      main.main([str(path)])
    assert exc_info.value.code == EXIT_FAILURE
    assert "line 1" in capsys.readouterr().err

  def test_runtime_error_keeps_earlier_output(self, tmp_path, capsys):
    path = write_program(tmp_path, {
      "kind": "Let",
      "name": {"text": "_"},
      "value": {"kind": "Print", "value": {"kind": "Int", "value": 1}},
      "next": {"kind": "Var", "text": "missing"},
    })
    with pytest.raises(SystemExit) as exc_info:
      main.main([path])
    assert exc_info.value.code == EXIT_FAILURE
    captured = capsys.readouterr()
    assert captured.out == "1"
    assert "UnboundVariable: Unbound variable: missing" in captured.err

  def test_debug_shows_environment(self, tmp_path, capsys):
    path = write_program(tmp_path, {
      "kind": "Let",
      "name": {"text": "x"},
      "value": {"kind": "Bool", "value": True},
      "next": {"kind": "Binary", "lhs": {"kind": "Var", "text": "x"}, "op": "Sub",
               "rhs": {"kind": "Int", "value": 1}},
    })
    with pytest.raises(SystemExit):
      main.main(["--debug", path])
    err = capsys.readouterr().err
    assert "TypeMismatch" in err
    assert "Environment at error:" in err
    assert "x = true : Bool" in err

  def test_stack_exhaustion_is_fatal(self, tmp_path, capsys):
    loop = {
      "kind": "Let",
      "name": {"text": "loop"},
      "value": {
        "kind": "Function",
        "parameters": [],
        "value": {"kind": "Call", "callee": {"kind": "Var", "text": "loop"}, "arguments": []},
      },
      "next": {"kind": "Call", "callee": {"kind": "Var", "text": "loop"}, "arguments": []},
    }
    path = write_program(tmp_path, loop)
    with pytest.raises(SystemExit) as exc_info:
      main.main(["--recursion-limit", "500", path])
    assert exc_info.value.code == EXIT_STACK_EXHAUSTED
    assert "stack exhausted" in capsys.readouterr().err

  @pytest.mark.parametrize("dump", [False, True])
  def test_nesting_deeper_than_limit_is_fatal(self, tmp_path, capsys, dump):
    """A document nested past the recursion limit fails while loading"""
    depth = 2000
    leaf = '{"kind": "Int", "value": 1}'
    chain = ('{"kind": "Binary", "lhs": ' * depth) + leaf + (', "op": "Add", "rhs": ' + leaf + "}") * depth
    path = tmp_path / "deep.json"
    path.write_text('{"name": "deep", "expression": {"kind": "Print", "value": ' + chain + "}}")
    args = ["--recursion-limit", "500", str(path)]
    with pytest.raises(SystemExit) as exc_info:
      main.main(["--dump"] + args if dump else args)
    assert exc_info.value.code == EXIT_STACK_EXHAUSTED
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "stack exhausted while loading" in captured.err


class TestDump:

  def test_dump_shows_tree(self, tmp_path, capsys):
    path = write_program(tmp_path, {"kind": "Print", "value": {"kind": "Int", "value": 3}}, "show.json")
    main.main(["--dump", path])
    out = capsys.readouterr().out
    assert "Program: show.json" in out
    assert "Print\n  operand: IntLiteral(3)" in out


class TestInteractive:
  """Test evaluation of single interactive lines"""

  def test_expression_line(self):
    line = '{"kind": "Binary", "lhs": {"kind": "Int", "value": 1}, "op": "Add", "rhs": {"kind": "Int", "value": 2}}'
    assert evaluate_line(line, create_interpreter()) == "=> 3 : Int"

  def test_print_line_shows_output_then_void(self):
    line = '{"kind": "Print", "value": {"kind": "Str", "value": "hey"}}'
    assert evaluate_line(line, create_interpreter()) == "hey\n=> void : Void"

  def test_program_line(self):
    line = '{"name": "p", "expression": {"kind": "Bool", "value": false}}'
    assert evaluate_line(line, create_interpreter()) == "=> false : Bool"


class TestExamples:
  """Run every example program and compare with its expected output"""

  def test_examples_directory(self, examples_dir, capsys):
    programs = sorted(examples_dir.glob("*.json"))
    assert programs, "No example programs found"

    for program in programs:
      expected_file = program.with_suffix(".expected")
      if not expected_file.exists():
        continue
      main.main([str(program)])
      out = capsys.readouterr().out
      assert out == expected_file.read_text(), f"Unexpected output from {program.name}"
