"""Runtime values for Eelios.

A `Value` pairs a raw payload with the `DataType` it was checked against and
the span of the expression that produced it. Payloads are plain Python
objects:

* ``String`` -> ``str``
* ``Number`` -> ``float``
* ``Boolean`` -> ``bool``
* ``Array<T>`` -> ``list`` of raw payloads of type ``T``
* ``Function`` -> the `FunctionLit` node itself
* ``Closure`` -> a `Closure`
* ``Instruction`` -> an instruction node, or a ``list`` of them
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional

from .ast import ClosureLit, FunctionLit, Node
from .span import Span
from .types import DataType

if TYPE_CHECKING:
    from .environment import Environment


@dataclass(frozen=True)
class Value:
    payload: Any
    datatype: DataType
    span: Span

    def __repr__(self) -> str:
        return f"Value({to_string(self.payload, self.datatype)!r}: {self.datatype!r})"

    def __str__(self) -> str:
        return to_string(self.payload, self.datatype)

    def with_span(self, span: Span) -> 'Value':
        return Value(self.payload, self.datatype, span)


@dataclass(frozen=True, eq=False)
class Closure:
    """A closure literal together with the environment it was evaluated in."""
    literal: ClosureLit
    environment: Optional['Environment']

    def __repr__(self) -> str:
        return f"<closure {self.literal.datatype!r}>"


@dataclass(frozen=True)
class Lens:
    """Read/write access to one storage location (a variable or an array element)."""
    get: Callable[[], Value]
    set: Callable[[Value], None]


def format_number(x: float) -> str:
    """Render a number the way Eelios prints it: ``3`` rather than ``3.0``."""
    if isinstance(x, bool) or not isinstance(x, (int, float)):
        return str(x)
    if math.isnan(x):
        return 'NaN'
    if math.isinf(x):
        return 'Infinity' if x > 0 else '-Infinity'
    if float(x).is_integer() and abs(x) < 1e21:
        return str(int(x))
    return repr(float(x))


def to_string(payload: Any, datatype: DataType) -> str:
    """Convert a payload to the text `print` and `toString` produce."""
    kind = datatype.kind
    if kind == 'Any':
        kind = _kind_of(payload)
    if kind == 'String':
        return payload
    if kind == 'Number':
        return format_number(payload)
    if kind == 'Boolean':
        return 'true' if payload else 'false'
    if kind == 'Array':
        element = datatype.element if datatype.kind == 'Array' else DataType.any()
        return '[' + ', '.join(to_string(item, element) for item in payload) + ']'
    if kind == 'Function':
        return f"<function {payload.datatype!r}>"
    if kind == 'Closure':
        return repr(payload)
    if kind == 'Instruction':
        if isinstance(payload, list):
            return '[' + ', '.join(to_string(item, datatype) for item in payload) + ']'
        return f"<instruction {type(payload).__name__}>"
    if payload is None:
        return 'null'
    return str(payload)


def _kind_of(payload: Any) -> str:
    # Elements of an Array<Any> carry no datatype of their own.
    if isinstance(payload, str):
        return 'String'
    if isinstance(payload, bool):
        return 'Boolean'
    if isinstance(payload, (int, float)):
        return 'Number'
    if isinstance(payload, list):
        return 'Array'
    if isinstance(payload, FunctionLit):
        return 'Function'
    if isinstance(payload, Closure):
        return 'Closure'
    if isinstance(payload, Node):
        return 'Instruction'
    return 'Any'
