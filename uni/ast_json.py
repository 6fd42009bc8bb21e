"""JSON serialization/deserialization for the Uni AST.

This module converts between Uni AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. Every node becomes an
object tagged with its class name under `"type"`; map literal entries
become two-element lists.
"""

from __future__ import annotations

from typing import Any

from .ast import (
    Program,
    Block,
    VarDecl,
    IfStmt,
    WhileStmt,
    ForEachStmt,
    FuncDecl,
    ReturnStmt,
    ExprStmt,
    IndexAssign,
    Literal,
    Ident,
    ArrayLit,
    MapLit,
    Index,
    Call,
    UnaryOp,
    BinaryOp,
    Len,
    Print,
)


def ast_to_obj(node: Any) -> Any:
    # Primitives
    if node is None:
        return None
    if isinstance(node, (int, float, str, bool)):
        return node

    # Statements
    if isinstance(node, Program):
        return {"type": "Program", "body": [ast_to_obj(n) for n in node.body]}
    if isinstance(node, Block):
        return {"type": "Block", "statements": [ast_to_obj(s) for s in node.statements]}
    if isinstance(node, VarDecl):
        return {"type": "VarDecl", "name": node.name, "value": ast_to_obj(node.value), "is_new": node.is_new}
    if isinstance(node, IfStmt):
        return {
            "type": "IfStmt",
            "condition": ast_to_obj(node.condition),
            "consequence": ast_to_obj(node.consequence),
            "alternative": ast_to_obj(node.alternative),
        }
    if isinstance(node, WhileStmt):
        return {"type": "WhileStmt", "condition": ast_to_obj(node.condition), "body": ast_to_obj(node.body)}
    if isinstance(node, ForEachStmt):
        return {
            "type": "ForEachStmt",
            "key": node.key,
            "value": node.value,
            "subject": ast_to_obj(node.subject),
            "body": ast_to_obj(node.body),
        }
    if isinstance(node, FuncDecl):
        return {"type": "FuncDecl", "name": node.name, "params": list(node.params), "body": ast_to_obj(node.body)}
    if isinstance(node, ReturnStmt):
        return {"type": "ReturnStmt", "value": ast_to_obj(node.value)}
    if isinstance(node, ExprStmt):
        return {"type": "ExprStmt", "expr": ast_to_obj(node.expr)}
    if isinstance(node, IndexAssign):
        return {"type": "IndexAssign", "target": ast_to_obj(node.target), "value": ast_to_obj(node.value)}

    # Expressions
    if isinstance(node, Literal):
        return {"type": "Literal", "value": node.value, "literal_type": node.literal_type}
    if isinstance(node, Ident):
        return {"type": "Ident", "name": node.name}
    if isinstance(node, ArrayLit):
        return {"type": "ArrayLit", "elements": [ast_to_obj(e) for e in node.elements]}
    if isinstance(node, MapLit):
        return {"type": "MapLit", "entries": [[ast_to_obj(k), ast_to_obj(v)] for (k, v) in node.entries]}
    if isinstance(node, Index):
        return {"type": "Index", "target": ast_to_obj(node.target), "index": ast_to_obj(node.index)}
    if isinstance(node, Call):
        return {"type": "Call", "name": node.name, "args": [ast_to_obj(a) for a in node.args]}
    if isinstance(node, UnaryOp):
        return {"type": "UnaryOp", "op": node.op, "operand": ast_to_obj(node.operand)}
    if isinstance(node, BinaryOp):
        return {"type": "BinaryOp", "op": node.op, "left": ast_to_obj(node.left), "right": ast_to_obj(node.right)}
    if isinstance(node, Len):
        return {"type": "Len", "subject": ast_to_obj(node.subject)}
    if isinstance(node, Print):
        return {"type": "Print", "args": [ast_to_obj(a) for a in node.args], "newline": node.newline}

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None or isinstance(obj, (int, float, str, bool)):
        return obj
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    if t == "Program":
        return Program(body=[ast_from_obj(n) for n in obj["body"]])
    if t == "Block":
        return Block(statements=[ast_from_obj(s) for s in obj["statements"]])
    if t == "VarDecl":
        return VarDecl(
            name=obj["name"],
            value=ast_from_obj(obj["value"]),
            is_new=bool(obj.get("is_new", True)),
        )
    if t == "IfStmt":
        return IfStmt(
            condition=ast_from_obj(obj["condition"]),
            consequence=ast_from_obj(obj["consequence"]),
            alternative=ast_from_obj(obj.get("alternative")),
        )
    if t == "WhileStmt":
        return WhileStmt(condition=ast_from_obj(obj["condition"]), body=ast_from_obj(obj["body"]))
    if t == "ForEachStmt":
        return ForEachStmt(
            key=obj["key"],
            value=obj.get("value"),
            subject=ast_from_obj(obj["subject"]),
            body=ast_from_obj(obj["body"]),
        )
    if t == "FuncDecl":
        return FuncDecl(name=obj["name"], params=list(obj["params"]), body=ast_from_obj(obj["body"]))
    if t == "ReturnStmt":
        return ReturnStmt(value=ast_from_obj(obj.get("value")))
    if t == "ExprStmt":
        return ExprStmt(expr=ast_from_obj(obj["expr"]))
    if t == "IndexAssign":
        return IndexAssign(target=ast_from_obj(obj["target"]), value=ast_from_obj(obj["value"]))
    if t == "Literal":
        return Literal(value=obj["value"], literal_type=obj["literal_type"])
    if t == "Ident":
        return Ident(name=obj["name"])
    if t == "ArrayLit":
        return ArrayLit(elements=[ast_from_obj(e) for e in obj["elements"]])
    if t == "MapLit":
        return MapLit(entries=[(ast_from_obj(k), ast_from_obj(v)) for (k, v) in obj["entries"]])
    if t == "Index":
        return Index(target=ast_from_obj(obj["target"]), index=ast_from_obj(obj["index"]))
    if t == "Call":
        return Call(name=obj["name"], args=[ast_from_obj(a) for a in obj["args"]])
    if t == "UnaryOp":
        return UnaryOp(op=obj["op"], operand=ast_from_obj(obj["operand"]))
    if t == "BinaryOp":
        return BinaryOp(op=obj["op"], left=ast_from_obj(obj["left"]), right=ast_from_obj(obj["right"]))
    if t == "Len":
        return Len(subject=ast_from_obj(obj["subject"]))
    if t == "Print":
        return Print(args=[ast_from_obj(a) for a in obj["args"]], newline=bool(obj.get("newline", False)))

    raise ValueError(f"Unknown AST node type: {t}")
