from pathlib import Path

import pytest

from uni.interpreter import parse_program, Interpreter

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def run_example(name):
    with open(EXAMPLES / name, 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    return interp


def test_program_1(capsys):
    run_example('program_1.uni')
    out = capsys.readouterr().out.strip()
    assert out == 'Hello World!!'


def test_program_2(capsys):
    run_example('program_2.uni')
    out = capsys.readouterr().out
    assert out == '0 1 1 2 3 5 8 13 21 34 \n'


def test_program_3(capsys):
    run_example('program_3.uni')
    out = capsys.readouterr().out.strip().split('\n')
    assert out == [
        '1', '2', 'Fizz', '4', 'Buzz', 'Fizz', '7', '8', 'Fizz', 'Buzz',
        '11', 'Fizz', '13', '14', 'FizzBuzz',
    ]


def test_program_4(capsys):
    run_example('program_4.uni')
    out = capsys.readouterr().out.strip()
    assert out == 'map[a:3 b:2 c:2]\n3 7'


def test_program_5(capsys):
    interp = run_example('program_5.uni')
    out = capsys.readouterr().out.strip()
    assert out == '[1 2 3 5 8 9]'
    assert interp.env.live_scopes == 1


def test_program_6(capsys):
    run_example('program_6.uni')
    out = capsys.readouterr().out.strip()
    assert out == '[100 2 3]\n1 2\n10 <nil> 10'


@pytest.mark.parametrize('name', sorted(p.name for p in EXAMPLES.glob('*.uni')))
def test_examples_render_and_reparse(name):
    source = (EXAMPLES / name).read_text(encoding='utf-8')
    program = parse_program(source)
    assert parse_program(str(program)) == program
