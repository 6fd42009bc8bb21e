"""Tokenizer for the Uni language.

The terminals of the language are declared as a Lark grammar and lexed
with Lark's basic lexer. Keywords are declared as string terminals; Lark
retypes an identifier match that spells a keyword exactly, so `or` is an
`OR` token while `orbit` stays an `IDENT`.

`tokenize` is a generator: tokens are produced only as the parser asks
for them, and the stream always ends with exactly one `EOF` token.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from lark import Lark
from lark.exceptions import UnexpectedCharacters

from .errors import LexerError


UNI_TOKENS = r"""
    start: _token*

    _token: TRUE | FALSE | VAR | IF | ELSE | WHILE | FOR | IN | FN | RETURN
          | LEN | PRINT | PRINTLN | OR | AND
          | IDENT | INT | FLOAT | STRING
          | COMMA | COLON | SEMICOLON | LPAREN | RPAREN | LBRACKET | RBRACKET
          | LCURLY | RCURLY
          | ASSIGN | PLUS | MINUS | ASTERISK | SLASH | NOT
          | LT | GT | LEQ | GEQ | EQ | NEQ

    // Keywords
    TRUE: "true"
    FALSE: "false"
    VAR: "var"
    IF: "if"
    ELSE: "else"
    WHILE: "while"
    FOR: "for"
    IN: "in"
    FN: "fn"
    RETURN: "return"
    LEN: "len"
    PRINT: "print"
    PRINTLN: "println"
    OR: "or"
    AND: "and"

    // Identifiers and literals
    IDENT: /[^\W\d]\w*/
    FLOAT.2: /\d+\.\d*/
    INT: /\d+/
    STRING: /"[^"]*"/

    // Delimiters
    COMMA: ","
    COLON: ":"
    SEMICOLON: ";"
    LPAREN: "("
    RPAREN: ")"
    LBRACKET: "["
    RBRACKET: "]"
    LCURLY: "{"
    RCURLY: "}"

    // Operators
    ASSIGN: "="
    PLUS: "+"
    MINUS: "-"
    ASTERISK: "*"
    SLASH: "/"
    NOT: "!"
    LT: "<"
    GT: ">"
    LEQ: "<="
    GEQ: ">="
    EQ: "=="
    NEQ: "!="

    COMMENT: /#[^\n]*/
    %import common.WS
    %ignore WS
    %ignore COMMENT
"""


UNI_LEXER = Lark(
    UNI_TOKENS,
    parser='lalr',
    lexer='basic',
)


EOF = 'EOF'


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    line: int = 0
    column: int = 0


def tokenize(source: str) -> Iterator[Token]:
    """Lazily convert source code into tokens, ending with an EOF token.

    An unrecognized character raises `LexerError` when the stream reaches
    it; the tokens before it have already been produced.
    """
    try:
        for tok in UNI_LEXER.lex(source):
            text = str(tok)
            if tok.type == 'STRING':
                text = text[1:-1]
            yield Token(tok.type, text, tok.line, tok.column)
    except UnexpectedCharacters as e:
        raise LexerError(f"invalid token found: {e.char!r}", e.line, e.column) from None
    lines = source.split('\n')
    yield Token(EOF, '', len(lines), len(lines[-1]) + 1)
