"""Abstract Syntax Tree (AST) definitions for the Uni language.

The AST classes defined in this module represent the syntactic structure
of parsed Uni programs. They are used by the interpreter to evaluate
Uni code. Each node corresponds to a construct in the Uni grammar.

`str(node)` renders the node back to Uni source. The rendering fully
parenthesizes operator expressions and terminates declarations, returns
and expression statements with `;`, so parsing it again yields a
structurally equal tree.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Tuple, Any


@dataclass
class Node:
    """Base class for all AST nodes."""
    pass


@dataclass
class Program(Node):
    body: List[Node]

    def __str__(self) -> str:
        return '\n'.join(str(stmt) for stmt in self.body)


###############################################################################
# Statements
###############################################################################


@dataclass
class Block(Node):
    statements: List[Node]

    def __str__(self) -> str:
        if not self.statements:
            return '{}'
        return '{ ' + ' '.join(str(stmt) for stmt in self.statements) + ' }'


@dataclass
class VarDecl(Node):
    name: str
    value: Node
    is_new: bool = True  # False for a reassignment of an existing name

    def __str__(self) -> str:
        prefix = 'var ' if self.is_new else ''
        return f"{prefix}{self.name} = {self.value};"


@dataclass
class IfStmt(Node):
    condition: Node
    consequence: Block
    alternative: Optional[Block] = None

    def __str__(self) -> str:
        out = f"if {self.condition} {self.consequence}"
        if self.alternative is not None:
            out += f" else {self.alternative}"
        return out


@dataclass
class WhileStmt(Node):
    condition: Node
    body: Block

    def __str__(self) -> str:
        return f"while {self.condition} {self.body}"


@dataclass
class ForEachStmt(Node):
    key: str
    value: Optional[str]
    subject: Node
    body: Block

    def __str__(self) -> str:
        names = self.key if self.value is None else f"{self.key}, {self.value}"
        return f"for {names} in {self.subject} {self.body}"


@dataclass
class FuncDecl(Node):
    name: str
    params: List[str]
    body: Block

    def __str__(self) -> str:
        return f"fn {self.name}({', '.join(self.params)}) {self.body}"


@dataclass
class ReturnStmt(Node):
    value: Optional[Node]

    def __str__(self) -> str:
        if self.value is None:
            return 'return;'
        return f"return {self.value};"


@dataclass
class ExprStmt(Node):
    expr: Node

    def __str__(self) -> str:
        return f"{self.expr};"


@dataclass
class IndexAssign(Node):
    target: 'Index'
    value: Node

    def __str__(self) -> str:
        return f"{self.target} = {self.value};"


###############################################################################
# Expressions
###############################################################################


@dataclass
class Literal(Node):
    value: Any
    literal_type: str  # 'Boolean', 'Integer', 'Float', 'String'

    def __str__(self) -> str:
        if self.literal_type == 'Boolean':
            return 'true' if self.value else 'false'
        if self.literal_type == 'String':
            return f'"{self.value}"'
        if self.literal_type == 'Float':
            # the lexer only reads plain decimals
            text = format(Decimal(repr(self.value)), 'f')
            return text if '.' in text else text + '.0'
        return str(self.value)


@dataclass
class Ident(Node):
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass
class ArrayLit(Node):
    elements: List[Node]

    def __str__(self) -> str:
        return '[' + ', '.join(str(el) for el in self.elements) + ']'


@dataclass
class MapLit(Node):
    entries: List[Tuple[Node, Node]]

    def __str__(self) -> str:
        return '{' + ', '.join(f"{k}: {v}" for k, v in self.entries) + '}'


@dataclass
class Index(Node):
    target: Node
    index: Node

    def __str__(self) -> str:
        return f"{self.target}[{self.index}]"


@dataclass
class Call(Node):
    name: str
    args: List[Node]

    def __str__(self) -> str:
        return f"{self.name}({', '.join(str(a) for a in self.args)})"


@dataclass
class UnaryOp(Node):
    op: str
    operand: Node

    def __str__(self) -> str:
        return f"({self.op}{self.operand})"


@dataclass
class BinaryOp(Node):
    op: str
    left: Node
    right: Node

    def __str__(self) -> str:
        return f"({self.left} {self.op} {self.right})"


@dataclass
class Len(Node):
    subject: Node

    def __str__(self) -> str:
        return f"len({self.subject})"


@dataclass
class Print(Node):
    args: List[Node]
    newline: bool = False

    def __str__(self) -> str:
        keyword = 'println' if self.newline else 'print'
        return f"{keyword}({', '.join(str(a) for a in self.args)})"
