import pytest

from uni.errors import LexerError
from uni.lexer import EOF, tokenize


def kinds(source):
    return [tok.kind for tok in tokenize(source)]


def test_keywords_and_identifiers():
    assert kinds('var orbit = true or false') == ['VAR', 'IDENT', 'ASSIGN', 'TRUE', 'OR', 'FALSE', EOF]


def test_numbers_and_strings():
    tokens = list(tokenize('12 3.5 4. "hi there"'))
    assert [(t.kind, t.text) for t in tokens[:-1]] == [
        ('INT', '12'), ('FLOAT', '3.5'), ('FLOAT', '4.'), ('STRING', 'hi there'),
    ]


def test_two_character_operators_win():
    assert kinds('<= >= == != < > = !') == ['LEQ', 'GEQ', 'EQ', 'NEQ', 'LT', 'GT', 'ASSIGN', 'NOT', EOF]


def test_delimiter_count_matches_units():
    source = ', : ; ( ) [ ] { } + - * / # trailing comment\n<= =='
    tokens = list(tokenize(source))
    assert tokens[-1].kind == EOF
    assert len(tokens) - 1 == 15
    assert [t.kind for t in tokens].count(EOF) == 1


def test_unicode_identifier():
    tokens = list(tokenize('größe'))
    assert tokens[0].kind == 'IDENT'
    assert tokens[0].text == 'größe'


def test_positions():
    tokens = list(tokenize('var x\n  = 1'))
    assert (tokens[0].line, tokens[0].column) == (1, 1)
    assert (tokens[2].line, tokens[2].column) == (2, 3)


def test_invalid_character_after_valid_tokens():
    stream = tokenize('var x = 1 @')
    produced = []
    with pytest.raises(LexerError) as exc:
        for tok in stream:
            produced.append(tok.kind)
    assert produced == ['VAR', 'IDENT', 'ASSIGN', 'INT']
    assert exc.value.line == 1
    assert exc.value.column == 11
