"""Parser for the Uni language.

Statements are parsed by recursive descent, dispatching on the leading
token. Expressions are parsed by precedence climbing (a Pratt parser):
a prefix form is parsed for the current token, then binary operators are
folded in for as long as the current operator binds tighter than the
precedence floor the caller passed in.

The parser keeps two tokens of lookahead (`current` and `peek`) and pulls
further tokens from the token iterator only when it advances, so
`Parser.parse` yields each top-level statement as soon as its last token
has been read.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Callable, Dict, Iterable, Iterator, List, Tuple

from .ast import (
    Node, Block, VarDecl, IfStmt, WhileStmt, ForEachStmt, FuncDecl, ReturnStmt,
    ExprStmt, IndexAssign, Literal, Ident, ArrayLit, MapLit, Index, Call,
    UnaryOp, BinaryOp, Len, Print,
)
from .errors import ParseError
from .lexer import EOF, Token


class Precedence(IntEnum):
    LOWEST = 1
    EQUALITY = 2        # == !=
    BOOLEAN = 3         # or and
    RELATIONAL = 4      # < > <= >=
    ADDITIVE = 5        # + -
    MULTIPLICATIVE = 6  # * /
    PREFIX = 7          # +x -x !x


PRECEDENCES: Dict[str, Precedence] = {
    'EQ': Precedence.EQUALITY,
    'NEQ': Precedence.EQUALITY,
    'OR': Precedence.BOOLEAN,
    'AND': Precedence.BOOLEAN,
    'LT': Precedence.RELATIONAL,
    'GT': Precedence.RELATIONAL,
    'LEQ': Precedence.RELATIONAL,
    'GEQ': Precedence.RELATIONAL,
    'PLUS': Precedence.ADDITIVE,
    'MINUS': Precedence.ADDITIVE,
    'ASTERISK': Precedence.MULTIPLICATIVE,
    'SLASH': Precedence.MULTIPLICATIVE,
}

INT64_MAX = (1 << 63) - 1


class Parser:
    def __init__(self, tokens: Iterable[Token]):
        self.tokens = iter(tokens)
        self.current = Token(EOF, '')
        self.peek = Token(EOF, '')
        self.prefix_parsers: Dict[str, Callable[[], Node]] = {
            'TRUE': self.parse_boolean,
            'FALSE': self.parse_boolean,
            'INT': self.parse_integer,
            'FLOAT': self.parse_float,
            'STRING': self.parse_string,
            'PLUS': self.parse_unary,
            'MINUS': self.parse_unary,
            'NOT': self.parse_unary,
            'IDENT': self.parse_identifier,
            'LPAREN': self.parse_grouped,
            'LBRACKET': self.parse_array,
            'LCURLY': self.parse_map,
            'LEN': self.parse_len,
            'PRINT': self.parse_print,
            'PRINTLN': self.parse_print,
        }

    def advance(self) -> Token:
        """Move to the next token and return the one just left behind."""
        previous = self.current
        self.current = self.peek
        nxt = next(self.tokens, None)
        self.peek = nxt if nxt is not None else Token(EOF, '', self.current.line, self.current.column)
        return previous

    def expect(self, *kinds: str) -> Token:
        token = self.current
        if token.kind in kinds:
            return token
        if len(kinds) == 1:
            raise ParseError(f"expected {kinds[0]}, got {token.kind} instead", token.line, token.column)
        raise ParseError(f"expected one of {', '.join(kinds)}, got {token.kind} instead", token.line, token.column)

    def consume(self, kind: str) -> Token:
        self.expect(kind)
        return self.advance()

    def skip_semicolons(self):
        while self.current.kind == 'SEMICOLON':
            self.advance()

    def parse(self) -> Iterator[Node]:
        """Yield top-level statements one at a time."""
        self.advance()
        self.advance()
        while True:
            self.skip_semicolons()
            if self.current.kind == EOF:
                return
            yield self.parse_statement()

    ###########################################################################
    # Statements
    ###########################################################################

    def parse_statement(self) -> Node:
        kind = self.current.kind
        if kind == 'VAR' or (kind == 'IDENT' and self.peek.kind == 'ASSIGN'):
            stmt = self.parse_var_decl()
        elif kind == 'IF':
            stmt = self.parse_if_stmt()
        elif kind == 'WHILE':
            stmt = self.parse_while_stmt()
        elif kind == 'FOR':
            stmt = self.parse_for_stmt()
        elif kind == 'FN':
            stmt = self.parse_func_decl()
        elif kind == 'RETURN':
            stmt = self.parse_return_stmt()
        elif kind == 'LCURLY':
            stmt = self.parse_block()
        else:
            stmt = self.parse_expr_stmt()
        # optional terminator
        if self.current.kind == 'SEMICOLON':
            self.advance()
        return stmt

    def parse_var_decl(self) -> VarDecl:
        is_new = self.current.kind == 'VAR'
        if is_new:
            self.advance()
        name = self.consume('IDENT').text
        self.consume('ASSIGN')
        value = self.parse_expression()
        return VarDecl(name, value, is_new)

    def parse_if_stmt(self) -> IfStmt:
        self.consume('IF')
        condition = self.parse_expression()
        consequence = self.parse_block()
        alternative = None
        if self.current.kind == 'ELSE':
            self.advance()
            if self.current.kind == 'IF':
                alternative = Block([self.parse_if_stmt()])
            else:
                alternative = self.parse_block()
        return IfStmt(condition, consequence, alternative)

    def parse_while_stmt(self) -> WhileStmt:
        self.consume('WHILE')
        condition = self.parse_expression()
        body = self.parse_block()
        return WhileStmt(condition, body)

    def parse_for_stmt(self) -> ForEachStmt:
        self.consume('FOR')
        key = self.consume('IDENT').text
        value = None
        if self.current.kind == 'COMMA':
            self.advance()
            value = self.consume('IDENT').text
        self.consume('IN')
        subject = self.parse_expression()
        body = self.parse_block()
        return ForEachStmt(key, value, subject, body)

    def parse_func_decl(self) -> FuncDecl:
        self.consume('FN')
        name = self.consume('IDENT').text
        self.consume('LPAREN')
        params: List[str] = []
        if self.current.kind != 'RPAREN':
            while True:
                params.append(self.consume('IDENT').text)
                if self.current.kind != 'COMMA':
                    break
                self.advance()
        self.consume('RPAREN')
        body = self.parse_block()
        return FuncDecl(name, params, body)

    def parse_return_stmt(self) -> ReturnStmt:
        self.consume('RETURN')
        if self.current.kind in ('RCURLY', 'SEMICOLON', EOF):
            return ReturnStmt(None)
        return ReturnStmt(self.parse_expression())

    def parse_block(self) -> Block:
        self.consume('LCURLY')
        statements: List[Node] = []
        while True:
            self.skip_semicolons()
            if self.current.kind == 'RCURLY':
                break
            if self.current.kind == EOF:
                self.expect('RCURLY')
            statements.append(self.parse_statement())
        self.advance()
        return Block(statements)

    def parse_expr_stmt(self) -> Node:
        expr = self.parse_expression()
        if self.current.kind == 'ASSIGN':
            if not isinstance(expr, Index):
                token = self.current
                raise ParseError(f"invalid assignment target {expr}", token.line, token.column)
            self.advance()
            return IndexAssign(expr, self.parse_expression())
        return ExprStmt(expr)

    ###########################################################################
    # Expressions
    ###########################################################################

    def parse_expression(self, precedence: Precedence = Precedence.LOWEST) -> Node:
        token = self.current
        prefix = self.prefix_parsers.get(token.kind)
        if prefix is None:
            raise ParseError(f"unary parse function for {token.kind} not found", token.line, token.column)
        left = prefix()
        while precedence < self.current_precedence():
            left = self.parse_binary(left)
        return left

    def current_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.current.kind, Precedence.LOWEST)

    def parse_binary(self, left: Node) -> BinaryOp:
        precedence = self.current_precedence()
        op_token = self.advance()
        right = self.parse_expression(precedence)
        return BinaryOp(op_token.text, left, right)

    def parse_unary(self) -> UnaryOp:
        op_token = self.advance()
        operand = self.parse_expression(Precedence.PREFIX)
        return UnaryOp(op_token.text, operand)

    def parse_boolean(self) -> Literal:
        token = self.advance()
        return Literal(token.kind == 'TRUE', 'Boolean')

    def parse_integer(self) -> Literal:
        token = self.advance()
        # out-of-range literals saturate at the int64 maximum
        return Literal(min(int(token.text), INT64_MAX), 'Integer')

    def parse_float(self) -> Literal:
        token = self.advance()
        return Literal(float(token.text), 'Float')

    def parse_string(self) -> Literal:
        token = self.advance()
        return Literal(token.text, 'String')

    def parse_identifier(self) -> Node:
        node: Node = Ident(self.advance().text)
        while True:
            if self.current.kind == 'LBRACKET':
                self.advance()
                index = self.parse_expression()
                self.consume('RBRACKET')
                node = Index(node, index)
                continue
            if self.current.kind == 'LPAREN' and isinstance(node, Ident):
                self.advance()
                node = Call(node.name, self.parse_expression_list('RPAREN'))
                continue
            break
        return node

    def parse_grouped(self) -> Node:
        self.consume('LPAREN')
        expr = self.parse_expression()
        self.consume('RPAREN')
        return expr

    def parse_array(self) -> ArrayLit:
        self.consume('LBRACKET')
        return ArrayLit(self.parse_expression_list('RBRACKET'))

    def parse_map(self) -> MapLit:
        self.consume('LCURLY')
        entries: List[Tuple[Node, Node]] = []
        while self.current.kind != 'RCURLY':
            if self.current.kind == EOF:
                self.expect('RCURLY')
            key = self.parse_expression()
            self.consume('COLON')
            entries.append((key, self.parse_expression()))
            if self.current.kind == 'COMMA':
                self.advance()
        self.advance()
        return MapLit(entries)

    def parse_len(self) -> Len:
        self.consume('LEN')
        self.consume('LPAREN')
        subject = self.parse_expression()
        self.consume('RPAREN')
        return Len(subject)

    def parse_print(self) -> Print:
        newline = self.advance().kind == 'PRINTLN'
        self.consume('LPAREN')
        return Print(self.parse_expression_list('RPAREN'), newline)

    def parse_expression_list(self, end: str) -> List[Node]:
        """Parse expressions up to and including the closing `end` token.

        The opening delimiter must already be consumed. Commas between
        items are accepted but not required.
        """
        items: List[Node] = []
        while self.current.kind != end:
            if self.current.kind == EOF:
                self.expect(end)
            items.append(self.parse_expression())
            if self.current.kind == 'COMMA':
                self.advance()
        self.advance()
        return items
