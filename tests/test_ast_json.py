import json

import pytest

from uni.ast import Block, Literal
from uni.ast_json import ast_from_obj, ast_to_obj
from uni.interpreter import Interpreter, parse_program

SOURCE = '''
fn apply(xs, k) {
    for i, x in xs {
        if x > k { xs[i] = -x } else { xs[i] = x * 2.5 }
    }
    return
}
var data = [1, 5, 10]
var names = {"a": true, 2: "two"}
apply(data, 4)
data = data
while false { println(len(names), !true) }
print(data, names[2])
'''


def test_dump_is_plain_json():
    obj = ast_to_obj(parse_program(SOURCE))
    text = json.dumps(obj)
    assert json.loads(text) == obj
    assert obj['type'] == 'Program'
    assert obj['body'][0]['type'] == 'FuncDecl'
    assert obj['body'][0]['params'] == ['xs', 'k']


def test_load_restores_the_tree():
    program = parse_program(SOURCE)
    restored = ast_from_obj(json.loads(json.dumps(ast_to_obj(program))))
    assert restored == program


def test_restored_tree_runs(capsys):
    program = ast_from_obj(json.loads(json.dumps(ast_to_obj(parse_program(SOURCE)))))
    Interpreter().run(program)
    assert capsys.readouterr().out == '[2.5 -5 -10]two'


def test_literal_types_survive():
    obj = ast_to_obj(Block([Literal(2.0, 'Float'), Literal(2, 'Integer')]))
    restored = ast_from_obj(json.loads(json.dumps(obj)))
    assert type(restored.statements[0].value) is float
    assert type(restored.statements[1].value) is int


def test_unknown_node_type():
    with pytest.raises(ValueError):
        ast_from_obj({'type': 'Goto'})
    with pytest.raises(TypeError):
        ast_to_obj(object())
