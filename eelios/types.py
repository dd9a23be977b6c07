"""Datatypes for Eelios.

Every runtime value carries exactly one `DataType`. This module defines the
closed set of datatype kinds, their printing, and `is_expected_datatype`, the
compatibility check used for arguments, return values, operands, array
homogeneity and assignment.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


KINDS = ('Any', 'String', 'Number', 'Boolean', 'Instruction', 'Array', 'Function', 'Closure')


@dataclass(frozen=True)
class DataType:
    """Represents an Eelios datatype.

    `kind` is one of `KINDS`. `Array<T>` keeps its element type in `args`;
    functions and closures keep their parameter types in `args` and their
    return type in `returns`. For example `|Number, Number| -> Boolean`
    becomes `DataType('Function', (Number, Number), Boolean)`.
    """
    kind: str
    args: Tuple['DataType', ...] = ()
    returns: Optional['DataType'] = None

    def __repr__(self) -> str:
        if self.kind == 'Array':
            return f"Array<{self.element!r}>"
        if self.kind == 'Function':
            params = ', '.join(repr(a) for a in self.args)
            return f"|{params}| -> {self.returns!r}"
        if self.kind == 'Closure':
            params = ', '.join(repr(a) for a in self.args)
            return f"({params}) => {self.returns!r}"
        return self.kind

    __str__ = __repr__

    @property
    def element(self) -> 'DataType':
        return self.args[0]

    @property
    def parameters(self) -> Tuple['DataType', ...]:
        return self.args

    # Convenience constructors
    @staticmethod
    def any() -> 'DataType':
        return DataType('Any')

    @staticmethod
    def string() -> 'DataType':
        return DataType('String')

    @staticmethod
    def number() -> 'DataType':
        return DataType('Number')

    @staticmethod
    def boolean() -> 'DataType':
        return DataType('Boolean')

    @staticmethod
    def instruction() -> 'DataType':
        return DataType('Instruction')

    @staticmethod
    def array(element: 'DataType') -> 'DataType':
        return DataType('Array', (element,))

    @staticmethod
    def function(parameters, returns: 'DataType') -> 'DataType':
        return DataType('Function', tuple(parameters), returns)

    @staticmethod
    def closure(parameters, returns: 'DataType') -> 'DataType':
        return DataType('Closure', tuple(parameters), returns)


PRIMITIVES = ('String', 'Number', 'Boolean')


def is_expected_datatype(expected: DataType, actual: DataType) -> bool:
    """Return True if a value of type `actual` may stand where `expected` is required.

    The relation is not symmetric: `Instruction` accepts `Array<Instruction>`
    and `Array<Any>`, but no array type accepts `Instruction`.
    """
    kind = expected.kind
    if kind == 'Any':
        return True
    if kind in PRIMITIVES:
        return actual.kind == kind
    if kind == 'Instruction':
        if actual.kind == 'Instruction':
            return True
        return actual.kind == 'Array' and actual.element.kind in ('Instruction', 'Any')
    if kind in ('Function', 'Closure'):
        if actual.kind != kind or len(expected.args) != len(actual.args):
            return False
        for want, got in zip(expected.args, actual.args):
            if not is_expected_datatype(want, got):
                return False
        return is_expected_datatype(expected.returns, actual.returns)
    if kind == 'Array':
        return actual.kind == 'Array' and is_expected_datatype(expected.element, actual.element)
    raise TypeError(f"unknown datatype kind {kind!r}")


def describe_expected(expected) -> str:
    """Render a list of acceptable datatypes as ``A``, ``A or B``, ``A, B or C``."""
    names = [repr(t) for t in expected]
    if len(names) <= 1:
        return ''.join(names)
    return ', '.join(names[:-1]) + ' or ' + names[-1]
