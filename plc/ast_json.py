"""JSON serialization/deserialization for the PLC AST.

This module converts between PLC AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. Only the parsed shape is
kept: analysis annotations are not serialized, so a loaded tree must be
analyzed again before it is run.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict

from .ast import (
    Source,
    GlobalDecl,
    FuncParam,
    FuncDecl,
    ExprStmt,
    VarDecl,
    Assign,
    IfStmt,
    SwitchStmt,
    Case,
    WhileStmt,
    ReturnStmt,
    Literal,
    Group,
    BinaryOp,
    Access,
    Call,
    ListLit,
)


def ast_to_obj(node: Any) -> Any:
    if node is None:
        return None
    if isinstance(node, list):
        return [ast_to_obj(n) for n in node]

    if isinstance(node, Source):
        return {"type": "Source", "globals": ast_to_obj(node.globals), "functions": ast_to_obj(node.functions)}
    if isinstance(node, GlobalDecl):
        return {
            "type": "GlobalDecl",
            "name": node.name,
            "mutable": node.mutable,
            "type_name": node.type_name,
            "value": ast_to_obj(node.value),
            "is_list": node.is_list,
        }
    if isinstance(node, FuncParam):
        return {"type": "FuncParam", "name": node.name, "type_name": node.type_name}
    if isinstance(node, FuncDecl):
        return {
            "type": "FuncDecl",
            "name": node.name,
            "params": ast_to_obj(node.params),
            "return_type_name": node.return_type_name,
            "body": ast_to_obj(node.body),
        }
    if isinstance(node, ExprStmt):
        return {"type": "ExprStmt", "expr": ast_to_obj(node.expr)}
    if isinstance(node, VarDecl):
        return {
            "type": "VarDecl",
            "name": node.name,
            "type_name": node.type_name,
            "value": ast_to_obj(node.value),
        }
    if isinstance(node, Assign):
        return {"type": "Assign", "receiver": ast_to_obj(node.receiver), "value": ast_to_obj(node.value)}
    if isinstance(node, IfStmt):
        return {
            "type": "IfStmt",
            "condition": ast_to_obj(node.condition),
            "then_block": ast_to_obj(node.then_block),
            "else_block": ast_to_obj(node.else_block),
        }
    if isinstance(node, SwitchStmt):
        return {"type": "SwitchStmt", "condition": ast_to_obj(node.condition), "cases": ast_to_obj(node.cases)}
    if isinstance(node, Case):
        return {"type": "Case", "value": ast_to_obj(node.value), "block": ast_to_obj(node.block)}
    if isinstance(node, WhileStmt):
        return {"type": "WhileStmt", "condition": ast_to_obj(node.condition), "body": ast_to_obj(node.body)}
    if isinstance(node, ReturnStmt):
        return {"type": "ReturnStmt", "value": ast_to_obj(node.value)}
    if isinstance(node, Literal):
        value = str(node.value) if isinstance(node.value, Decimal) else node.value
        return {"type": "Literal", "value": value, "literal_type": node.literal_type}
    if isinstance(node, Group):
        return {"type": "Group", "expr": ast_to_obj(node.expr)}
    if isinstance(node, BinaryOp):
        return {"type": "BinaryOp", "op": node.op, "left": ast_to_obj(node.left), "right": ast_to_obj(node.right)}
    if isinstance(node, Access):
        return {"type": "Access", "name": node.name, "offset": ast_to_obj(node.offset)}
    if isinstance(node, Call):
        return {"type": "Call", "name": node.name, "args": ast_to_obj(node.args)}
    if isinstance(node, ListLit):
        return {"type": "ListLit", "values": ast_to_obj(node.values)}

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None:
        return None
    if isinstance(obj, list):
        return [ast_from_obj(o) for o in obj]
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    if t == "Source":
        return Source(globals=ast_from_obj(obj["globals"]), functions=ast_from_obj(obj["functions"]))
    if t == "GlobalDecl":
        return GlobalDecl(
            name=obj["name"],
            mutable=bool(obj["mutable"]),
            type_name=obj.get("type_name"),
            value=ast_from_obj(obj.get("value")),
            is_list=bool(obj.get("is_list", False)),
        )
    if t == "FuncParam":
        return FuncParam(name=obj["name"], type_name=obj.get("type_name"))
    if t == "FuncDecl":
        return FuncDecl(
            name=obj["name"],
            params=ast_from_obj(obj["params"]),
            return_type_name=obj.get("return_type_name"),
            body=ast_from_obj(obj["body"]),
        )
    if t == "ExprStmt":
        return ExprStmt(expr=ast_from_obj(obj["expr"]))
    if t == "VarDecl":
        return VarDecl(name=obj["name"], type_name=obj.get("type_name"), value=ast_from_obj(obj.get("value")))
    if t == "Assign":
        return Assign(receiver=ast_from_obj(obj["receiver"]), value=ast_from_obj(obj["value"]))
    if t == "IfStmt":
        return IfStmt(
            condition=ast_from_obj(obj["condition"]),
            then_block=ast_from_obj(obj["then_block"]),
            else_block=ast_from_obj(obj.get("else_block", [])),
        )
    if t == "SwitchStmt":
        return SwitchStmt(condition=ast_from_obj(obj["condition"]), cases=ast_from_obj(obj["cases"]))
    if t == "Case":
        return Case(value=ast_from_obj(obj.get("value")), block=ast_from_obj(obj["block"]))
    if t == "WhileStmt":
        return WhileStmt(condition=ast_from_obj(obj["condition"]), body=ast_from_obj(obj["body"]))
    if t == "ReturnStmt":
        return ReturnStmt(value=ast_from_obj(obj["value"]))
    if t == "Literal":
        return literal_from_obj(obj)
    if t == "Group":
        return Group(expr=ast_from_obj(obj["expr"]))
    if t == "BinaryOp":
        return BinaryOp(op=obj["op"], left=ast_from_obj(obj["left"]), right=ast_from_obj(obj["right"]))
    if t == "Access":
        return Access(name=obj["name"], offset=ast_from_obj(obj.get("offset")))
    if t == "Call":
        return Call(name=obj["name"], args=ast_from_obj(obj["args"]))
    if t == "ListLit":
        return ListLit(values=ast_from_obj(obj["values"]))

    raise ValueError(f"Unknown AST node type: {t}")


def literal_from_obj(obj: Dict[str, Any]) -> Literal:
    literal_type = obj["literal_type"]
    value = obj["value"]
    if literal_type == 'Decimal':
        value = Decimal(value)
    return Literal(value=value, literal_type=literal_type)
