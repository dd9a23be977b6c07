"""Abstract Syntax Tree (AST) definitions for the Eelios language.

Eelios has no statements: every construct is an expression. Nodes that
derive from `Instruction` (print, assignment, eval, exec, if, while and the
built-in keywords) are still expressions; unless they are run, they evaluate
to a value of datatype `Instruction` that carries the node itself.

Every node records the `Span` of source text it was parsed from. Spans do
not take part in equality so trees can be compared structurally.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, List, Optional, Union

from .span import Span
from .types import DataType


NO_SPAN = Span(0, 0)


def span_field():
    return field(default=NO_SPAN, compare=False)


@dataclass
class Node:
    """Base class for all AST nodes."""
    pass


# Expressions

@dataclass
class Literal(Node):
    value: Union[str, float, bool]
    literal_type: str  # 'String', 'Number' or 'Boolean'
    span: Span = span_field()


@dataclass
class Param:
    name: str
    datatype: DataType
    span: Span = span_field()


@dataclass
class FunctionLit(Node):
    params: List[Param]
    return_type: DataType
    body: Node
    span: Span = span_field()

    @property
    def datatype(self) -> DataType:
        return DataType.function([p.datatype for p in self.params], self.return_type)


@dataclass
class ClosureLit(Node):
    params: List[Param]
    return_type: DataType
    body: Node
    span: Span = span_field()

    @property
    def datatype(self) -> DataType:
        return DataType.closure([p.datatype for p in self.params], self.return_type)


@dataclass
class ArrayLit(Node):
    elements: List[Node]
    span: Span = span_field()


@dataclass
class Ident(Node):
    name: str
    span: Span = span_field()


@dataclass
class Grouping(Node):
    expr: Node
    span: Span = span_field()


@dataclass
class Index(Node):
    target: Node
    index: Node
    span: Span = span_field()


@dataclass
class Call(Node):
    func: Node
    args: List[Node]
    span: Span = span_field()


@dataclass
class UnaryOp(Node):
    op: str  # '+' or '-'
    operand: Node
    span: Span = span_field()


@dataclass
class BinaryOp(Node):
    op: str
    left: Node
    right: Node
    span: Span = span_field()


# Assignment targets

@dataclass
class LValueIdent(Node):
    name: str
    span: Span = span_field()


@dataclass
class LValueIndex(Node):
    target: 'LValue'
    index: Node
    span: Span = span_field()


LValue = Union[LValueIdent, LValueIndex]


# Instructions

@dataclass
class Instruction(Node):
    """Base class for nodes that are run rather than computed."""
    pass


@dataclass
class Print(Instruction):
    exprs: List[Node]
    span: Span = span_field()


@dataclass
class Assign(Instruction):
    target: LValue
    value: Node
    span: Span = span_field()


@dataclass
class Evaluate(Instruction):
    expr: Node
    span: Span = span_field()


@dataclass
class Execute(Instruction):
    expr: Node
    span: Span = span_field()


@dataclass
class If(Instruction):
    condition: Node
    then_branch: Node
    else_branch: Optional[Node]
    span: Span = span_field()


@dataclass
class While(Instruction):
    condition: Node
    body: Node
    span: Span = span_field()


@dataclass
class Builtin(Instruction):
    """A built-in keyword applied to one operand, e.g. ``len xs``."""
    keyword: ClassVar[str] = ''
    expr: Optional[Node]
    span: Span = span_field()


@dataclass
class Length(Builtin):
    keyword: ClassVar[str] = 'len'


@dataclass
class Input(Builtin):
    keyword: ClassVar[str] = 'input'


@dataclass
class ToString(Builtin):
    keyword: ClassVar[str] = 'toString'


@dataclass
class ToNumber(Builtin):
    keyword: ClassVar[str] = 'toNumber'


@dataclass
class ToBoolean(Builtin):
    keyword: ClassVar[str] = 'toBoolean'


@dataclass
class IsNumber(Builtin):
    keyword: ClassVar[str] = 'isNumber'


@dataclass
class IsBoolean(Builtin):
    keyword: ClassVar[str] = 'isBoolean'


BUILTINS = {cls.keyword: cls for cls in (Length, Input, ToString, ToNumber, ToBoolean, IsNumber, IsBoolean)}
