"""Interpreter for the Uni language.

This module ties the pipeline together: `tokenize` feeds a `Parser`,
whose statements are executed one at a time by the `Interpreter`. The
interpreter walks the AST directly, resolving names through a chain of
scopes held in an `Environment` arena.

Operations on operand kinds the language does not define (adding a
string to an integer, calling an unknown function, indexing a number)
quietly produce no value (`None`). Faults inherited from the host
semantics, such as integer division by zero or an array index out of
range, raise `RuntimeFault`.
"""

from __future__ import annotations

import operator
import sys
from pathlib import Path
from typing import Any, Iterable, List, Optional, Tuple, Union

from .ast import (
    Program, Node, Block, VarDecl, IfStmt, WhileStmt, ForEachStmt, FuncDecl,
    ReturnStmt, ExprStmt, IndexAssign, Literal, Ident, ArrayLit, MapLit, Index,
    Call, UnaryOp, BinaryOp, Len, Print,
)
from .environment import Environment
from .errors import ReturnSignal, RuntimeFault
from .lexer import tokenize
from .parser import Parser
from .types import (
    ArrayVal, MapVal, BOOL, INT, FLOAT, STRING, ARRAY, MAP,
    type_name, wrap_int64, truncate_divide, float_divide, format_print_args,
)


COMPARISONS = {
    '<': operator.lt,
    '>': operator.gt,
    '<=': operator.le,
    '>=': operator.ge,
    '==': operator.eq,
    '!=': operator.ne,
}

ARITHMETIC = {
    '+': operator.add,
    '-': operator.sub,
    '*': operator.mul,
}

# Each Uni call nests a handful of Python frames; the limit is raised to fit
MAX_CALL_DEPTH = 2000
RECURSION_LIMIT = 16000


def parse_statements(source: str) -> Iterable[Node]:
    """Lazily parse source code into top-level statements."""
    return Parser(tokenize(source)).parse()


def parse_program(source: str) -> Program:
    """Parse the whole source into a Program AST."""
    return Program(list(parse_statements(source)))


class Interpreter:
    """Core interpreter that executes Uni AST."""
    def __init__(self, debug_level: int = 0, debug_file: str = 'debug.txt', out=None):
        self.env = Environment()
        self.global_scope = self.env.root
        self.out = out  # None writes to the current sys.stdout
        self.call_depth = 0
        if sys.getrecursionlimit() < RECURSION_LIMIT:
            sys.setrecursionlimit(RECURSION_LIMIT)
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w', encoding='utf-8') if debug_level > 0 else None

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    # Public API
    def run(self, program: Union[Program, Iterable[Node]], scope: Optional[int] = None) -> Any:
        """Execute statements in order and return the value of the last one.

        Statements are pulled one at a time, so a lazily parsed program
        runs every statement that precedes a syntax error.
        """
        if scope is None:
            scope = self.global_scope
        statements = program.body if isinstance(program, Program) else program
        if self.debug_level >= 1:
            self.debug('run start')
        value = None
        count = 0
        for stmt in statements:
            value = self.execute(stmt, scope)
            if isinstance(value, ReturnSignal):
                value = value.value
            count += 1
        if self.debug_level >= 1:
            self.debug(f'run end after {count} statements')
        return value

    def run_source(self, source: str, scope: Optional[int] = None) -> Any:
        return self.run(parse_statements(source), scope)

    ###########################################################################
    # Statements
    ###########################################################################

    def execute_block(self, block: Block, scope: int) -> Optional[ReturnSignal]:
        for stmt in block.statements:
            result = self.execute(stmt, scope)
            # only a return leaves the block early
            if isinstance(result, ReturnSignal):
                return result
        return None

    def execute(self, node: Node, scope: int) -> Any:
        if isinstance(node, VarDecl):
            if node.is_new:
                value = self.evaluate(node.value, scope)
                self.env.declare(scope, node.name, value)
                if self.debug_level >= 2:
                    self.debug(f"declare {node.name} = {value!r}")
                return None
            _, found = self.env.get(scope, node.name)
            if not found:
                if self.debug_level >= 3:
                    self.debug(f"assignment to undeclared {node.name} dropped")
                return None
            value = self.evaluate(node.value, scope)
            self.env.set(scope, node.name, value)
            if self.debug_level >= 2:
                self.debug(f"assign {node.name} = {value!r}")
            return None
        if isinstance(node, IndexAssign):
            container = self.evaluate(node.target.target, scope)
            key = self.evaluate(node.target.index, scope)
            value = self.evaluate(node.value, scope)
            if isinstance(container, ArrayVal):
                container.items[self.array_position(container, key)] = value
            elif isinstance(container, MapVal):
                container.set(key, value)
            elif self.debug_level >= 3:
                self.debug(f"cannot assign into {type_name(container)}")
            return None
        if isinstance(node, FuncDecl):
            self.env.set_function(scope, node.name, node)
            if self.debug_level >= 2:
                self.debug(f"define function {node.name}({', '.join(node.params)})")
            return None
        if isinstance(node, Block):
            with self.env.child(scope) as block_scope:
                return self.execute_block(node, block_scope)
        if isinstance(node, IfStmt):
            cond = self.condition(node.condition, scope, 'if')
            if self.debug_level >= 3:
                self.debug(f"if condition -> {cond}")
            if cond:
                with self.env.child(scope) as branch_scope:
                    return self.execute_block(node.consequence, branch_scope)
            if node.alternative is not None:
                with self.env.child(scope) as branch_scope:
                    return self.execute_block(node.alternative, branch_scope)
            return None
        if isinstance(node, WhileStmt):
            while self.condition(node.condition, scope, 'while'):
                with self.env.child(scope) as loop_scope:
                    res = self.execute_block(node.body, loop_scope)
                if res is not None:
                    return res
            return None
        if isinstance(node, ForEachStmt):
            subject = self.evaluate(node.subject, scope)
            for key, value in self.iterate(subject):
                with self.env.child(scope) as loop_scope:
                    self.env.declare(loop_scope, node.key, key)
                    if node.value is not None:
                        self.env.declare(loop_scope, node.value, value)
                    res = self.execute_block(node.body, loop_scope)
                if res is not None:
                    return res
            return None
        if isinstance(node, ReturnStmt):
            value = self.evaluate(node.value, scope) if node.value is not None else None
            return ReturnSignal(value)
        if isinstance(node, ExprStmt):
            return self.evaluate(node.expr, scope)
        raise NotImplementedError(f"execute: unexpected node type {type(node)}")

    def condition(self, node: Node, scope: int, construct: str) -> bool:
        value = self.evaluate(node, scope)
        if not isinstance(value, bool):
            raise RuntimeFault('TypeError', f'{construct} condition must be bool, got {type_name(value)}')
        return value

    def iterate(self, subject: Any) -> List[Tuple[Any, Any]]:
        kind = type_name(subject)
        if kind == STRING:
            return list(enumerate(subject))
        if kind == ARRAY:
            return list(enumerate(subject.items))
        if kind == MAP:
            return list(subject.items())
        if self.debug_level >= 3:
            self.debug(f"cannot iterate over {kind}")
        return []

    ###########################################################################
    # Expressions
    ###########################################################################

    def evaluate(self, node: Node, scope: int) -> Any:
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, Ident):
            value, found = self.env.get(scope, node.name)
            if found:
                return value
            func, _ = self.env.get_function(scope, node.name)
            return func
        if isinstance(node, ArrayLit):
            return ArrayVal([self.evaluate(el, scope) for el in node.elements])
        if isinstance(node, MapLit):
            result = MapVal()
            for key_node, val_node in node.entries:
                result.set(self.evaluate(key_node, scope), self.evaluate(val_node, scope))
            return result
        if isinstance(node, Index):
            target = self.evaluate(node.target, scope)
            index = self.evaluate(node.index, scope)
            if isinstance(target, ArrayVal):
                return target.items[self.array_position(target, index)]
            if isinstance(target, MapVal):
                return target.get(index)
            if self.debug_level >= 3:
                self.debug(f"cannot index {type_name(target)}")
            return None
        if isinstance(node, Call):
            return self.call_function(node, scope)
        if isinstance(node, UnaryOp):
            return self.apply_unary_op(node.op, self.evaluate(node.operand, scope))
        if isinstance(node, BinaryOp):
            # both operands are always evaluated; `or` and `and` do not short-circuit
            left = self.evaluate(node.left, scope)
            right = self.evaluate(node.right, scope)
            return self.apply_binary_op(node.op, left, right)
        if isinstance(node, Len):
            subject = self.evaluate(node.subject, scope)
            if isinstance(subject, str):
                return len(subject)
            if isinstance(subject, ArrayVal):
                return len(subject.items)
            if isinstance(subject, MapVal):
                return len(subject)
            return None
        if isinstance(node, Print):
            values = [self.evaluate(arg, scope) for arg in node.args]
            print(format_print_args(values, node.newline), end='', file=self.out)
            return None
        raise NotImplementedError(f"evaluate: unexpected node type {type(node)}")

    def array_position(self, array: ArrayVal, index: Any) -> int:
        if type_name(index) != INT:
            raise RuntimeFault('TypeError', f'array index must be int, got {type_name(index)}')
        if index < 0 or index >= len(array.items):
            raise RuntimeFault('IndexError', f'index out of range [{index}] with length {len(array.items)}')
        return index

    def call_function(self, node: Call, scope: int) -> Any:
        func, found = self.env.get_function(scope, node.name)
        if not found:
            value, _ = self.env.get(scope, node.name)
            func = value if isinstance(value, FuncDecl) else None
        if func is None:
            if self.debug_level >= 3:
                self.debug(f"call to undefined function {node.name}")
            return None
        if len(func.params) != len(node.args):
            if self.debug_level >= 3:
                self.debug(f"{node.name} expects {len(func.params)} arguments, got {len(node.args)}")
            return None
        args = [self.evaluate(arg, scope) for arg in node.args]
        if self.debug_level >= 2:
            self.debug(f"call {node.name}({', '.join(repr(a) for a in args)})")
        if self.call_depth >= MAX_CALL_DEPTH:
            raise RuntimeFault('RecursionError', 'maximum call depth exceeded')
        self.call_depth += 1
        try:
            # the call scope hangs off the call site, not the declaration site
            with self.env.child(scope) as call_scope:
                for param, arg in zip(func.params, args):
                    self.env.declare(call_scope, param, arg)
                res = self.execute_block(func.body, call_scope)
        except RecursionError:
            raise RuntimeFault('RecursionError', 'maximum call depth exceeded') from None
        finally:
            self.call_depth -= 1
        return res.value if res is not None else None

    def apply_unary_op(self, op: str, operand: Any) -> Any:
        kind = type_name(operand)
        if kind == BOOL and op == '!':
            return not operand
        if kind == INT:
            if op == '+':
                return operand
            if op == '-':
                return wrap_int64(-operand)
        if kind == FLOAT:
            if op == '+':
                return operand
            if op == '-':
                return -operand
        return self.unsupported(f"{op}{kind}")

    def apply_binary_op(self, op: str, a: Any, b: Any) -> Any:
        left, right = type_name(a), type_name(b)
        if left == BOOL and right == BOOL:
            if op == '==':
                return a == b
            if op == '!=':
                return a != b
            if op == 'or':
                return a or b
            if op == 'and':
                return a and b
        elif left == INT and right == INT:
            if op in COMPARISONS:
                return COMPARISONS[op](a, b)
            if op in ARITHMETIC:
                return wrap_int64(ARITHMETIC[op](a, b))
            if op == '/':
                return truncate_divide(a, b)
        elif left in (INT, FLOAT) and right in (INT, FLOAT):
            # mixed operands promote the int side
            a, b = float(a), float(b)
            if op in COMPARISONS:
                return COMPARISONS[op](a, b)
            if op in ARITHMETIC:
                return ARITHMETIC[op](a, b)
            if op == '/':
                return float_divide(a, b)
        elif left == STRING and right == STRING:
            if op == '+':
                return a + b
        return self.unsupported(f"{left} {op} {right}")

    def unsupported(self, description: str) -> None:
        if self.debug_level >= 3:
            self.debug(f"unsupported operation {description}")
        return None


def run_program(source: str, debug_level: int = 0) -> Any:
    """Convenience function to run a Uni program from a source string."""
    interpreter = Interpreter(debug_level=debug_level)
    try:
        return interpreter.run_source(source)
    finally:
        interpreter.close()


def run_file(file_path: Union[str, Path], debug_level: int = 0) -> Interpreter:
    """Run a Uni file, returning the interpreter instance."""
    with open(file_path, 'r', encoding='utf-8') as f:
        source = f.read()
    interpreter = Interpreter(debug_level=debug_level)
    try:
        interpreter.run_source(source)
    finally:
        interpreter.close()
    return interpreter
