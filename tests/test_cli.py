import builtins
import json
import shutil
from pathlib import Path

import pytest

from uni.__main__ import main

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def feed(monkeypatch, lines):
    pending = iter(lines)

    def fake_input(prompt=''):
        try:
            return next(pending)
        except StopIteration:
            raise EOFError from None

    monkeypatch.setattr(builtins, 'input', fake_input)


def test_run_file(capsys):
    main([str(EXAMPLES / 'program_1.uni')])
    assert capsys.readouterr().out == 'Hello World!!\n'


def test_runtime_fault_exits_with_status_1(tmp_path, capsys):
    program = tmp_path / 'bad.uni'
    program.write_text('println("before")\nprintln(1 / 0)\n', encoding='utf-8')
    with pytest.raises(SystemExit) as exc:
        main([str(program)])
    assert exc.value.code == 1
    captured = capsys.readouterr()
    assert captured.out == 'before\n'
    assert captured.err.strip() == 'Error: ZeroDivisionError: integer divide by zero'


def test_parse_error_exits_with_status_1(tmp_path, capsys):
    program = tmp_path / 'bad.uni'
    program.write_text('var = 1\n', encoding='utf-8')
    with pytest.raises(SystemExit) as exc:
        main([str(program)])
    assert exc.value.code == 1
    assert 'expected IDENT, got ASSIGN instead' in capsys.readouterr().err


def test_missing_file(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        main([str(tmp_path / 'nope.uni')])
    assert exc.value.code == 1
    assert 'not found' in capsys.readouterr().err


def test_emit_and_run_ast(tmp_path, capsys):
    program = tmp_path / 'program_5.uni'
    shutil.copy(EXAMPLES / 'program_5.uni', program)
    main(['--emit-ast', str(program)])
    ast_path = tmp_path / 'program_5.uni.ast.json'
    assert capsys.readouterr().out.strip() == str(ast_path)
    data = json.loads(ast_path.read_text(encoding='utf-8'))
    assert data['type'] == 'Program'
    main(['--ast', str(ast_path)])
    assert capsys.readouterr().out == '[1 2 3 5 8 9]\n'


def test_verbose_writes_debug_file(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    main(['-vv', str(EXAMPLES / 'program_1.uni')])
    trace = (tmp_path / 'debug.txt').read_text(encoding='utf-8')
    assert 'declare greeting' in trace
    assert capsys.readouterr().out == 'Hello World!!\n'


def test_repl_keeps_state_and_survives_faults(monkeypatch, capsys):
    feed(monkeypatch, ['var x = 2', 'x * 21', 'println("hi")', '1 / 0', 'var y = @', 'x'])
    main([])
    captured = capsys.readouterr()
    assert captured.out == 'Uni Version 0.1.0\n\n42\nhi\n\n2\n\n'
    errors = captured.err.strip().split('\n')
    assert errors[0] == 'Error: ZeroDivisionError: integer divide by zero'
    assert errors[1].startswith('Error: invalid token found')


def test_repl_prints_values(monkeypatch, capsys):
    feed(monkeypatch, ['[1, 2.0, "s"]', 'var m = {"k": 1.5}', 'm', 'fn f() { return 1 }', 'f'])
    main([])
    out = capsys.readouterr().out.split('\n')
    assert out[1:6] == ['[1 2 s]', '', 'map[k:1.5]', '', '<fn f>']


def test_deep_recursion_in_batch_mode(tmp_path, capsys):
    program = tmp_path / 'deep.uni'
    program.write_text('fn down(n) { if n == 0 { return 0 } return down(n - 1) }\nprintln(down(1000))\n', encoding='utf-8')
    main([str(program)])
    assert capsys.readouterr().out == '0\n'


def test_runaway_recursion_exits_with_status_1(tmp_path, capsys):
    program = tmp_path / 'forever.uni'
    program.write_text('fn forever() { return forever() }\nforever()\n', encoding='utf-8')
    with pytest.raises(SystemExit) as exc:
        main([str(program)])
    assert exc.value.code == 1
    assert capsys.readouterr().err.strip() == 'Error: RecursionError: maximum call depth exceeded'


def test_repl_survives_runaway_recursion(monkeypatch, capsys):
    feed(monkeypatch, ['fn forever() { return forever() }', 'forever()', '1 + 1'])
    main([])
    captured = capsys.readouterr()
    assert captured.out == 'Uni Version 0.1.0\n\n2\n\n'
    assert captured.err.strip() == 'Error: RecursionError: maximum call depth exceeded'


@pytest.mark.parametrize('content', ['{not json', '{"type": "Goto"}', '{"type": "Program"}'])
def test_invalid_ast_file_exits_with_status_1(tmp_path, capsys, content):
    ast_path = tmp_path / 'broken.uni.ast.json'
    ast_path.write_text(content, encoding='utf-8')
    with pytest.raises(SystemExit) as exc:
        main(['--ast', str(ast_path)])
    assert exc.value.code == 1
    assert capsys.readouterr().err.startswith(f'Error: invalid AST file {ast_path}')
