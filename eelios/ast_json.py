"""JSON serialization/deserialization for the Eelios AST.

This module converts between Eelios AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. It supports a full
round-trip for all node types, `Span` and `DataType`.
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any, Dict

from .ast import (
    Literal,
    Param,
    FunctionLit,
    ClosureLit,
    ArrayLit,
    Ident,
    Grouping,
    Index,
    Call,
    UnaryOp,
    BinaryOp,
    LValueIdent,
    LValueIndex,
    Print,
    Assign,
    Evaluate,
    Execute,
    If,
    While,
    Length,
    Input,
    ToString,
    ToNumber,
    ToBoolean,
    IsNumber,
    IsBoolean,
)
from .span import Span
from .types import DataType


NODE_TYPES = {
    cls.__name__: cls
    for cls in (
        Literal, Param, FunctionLit, ClosureLit, ArrayLit, Ident, Grouping,
        Index, Call, UnaryOp, BinaryOp, LValueIdent, LValueIndex, Print,
        Assign, Evaluate, Execute, If, While, Length, Input, ToString,
        ToNumber, ToBoolean, IsNumber, IsBoolean,
    )
}


def datatype_to_obj(t: DataType) -> Dict[str, Any]:
    return {
        "kind": t.kind,
        "args": [datatype_to_obj(a) for a in t.args],
        "returns": datatype_to_obj(t.returns) if t.returns is not None else None,
    }


def datatype_from_obj(o: Dict[str, Any]) -> DataType:
    returns = o.get("returns")
    return DataType(
        o["kind"],
        tuple(datatype_from_obj(x) for x in o.get("args", [])),
        datatype_from_obj(returns) if returns is not None else None,
    )


def ast_to_obj(node: Any) -> Any:
    # Primitives
    if node is None or isinstance(node, (int, float, str, bool)):
        return node
    if isinstance(node, list):
        return [ast_to_obj(n) for n in node]

    if isinstance(node, DataType):
        return {"__type__": "DataType", "value": datatype_to_obj(node)}
    if isinstance(node, Span):
        return {"__type__": "Span", "start": node.start, "end": node.end}

    name = type(node).__name__
    if NODE_TYPES.get(name) is not type(node):
        raise TypeError(f"Unsupported node for serialization: {name}")
    obj = {"type": name}
    for f in fields(node):
        obj[f.name] = ast_to_obj(getattr(node, f.name))
    return obj


def ast_from_obj(obj: Any) -> Any:
    if obj is None or isinstance(obj, (int, float, str, bool)):
        return obj
    if isinstance(obj, list):
        return [ast_from_obj(o) for o in obj]
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    tag = obj.get("__type__")
    if tag == "DataType":
        return datatype_from_obj(obj["value"])
    if tag == "Span":
        return Span(obj["start"], obj["end"])

    t = obj.get("type")
    cls = NODE_TYPES.get(t)
    if cls is None:
        raise ValueError(f"Unknown AST node type: {t}")
    return cls(**{f.name: ast_from_obj(obj[f.name]) for f in fields(cls) if f.name in obj})
