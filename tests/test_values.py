import math

from eelios.ast import ArrayLit, ClosureLit, Evaluate, FunctionLit, Literal, Print
from eelios.errors import ExpectedButFound, OutOfBounds, UndefinedVariable
from eelios.span import Span
from eelios.types import DataType
from eelios.value import Closure, format_number, to_string

NUMBER = DataType.number()


def test_format_number():
    assert format_number(3.0) == '3'
    assert format_number(-0.5) == '-0.5'
    assert format_number(1e21) == '1e+21'
    assert format_number(math.nan) == 'NaN'
    assert format_number(math.inf) == 'Infinity'
    assert format_number(-math.inf) == '-Infinity'


def test_to_string():
    assert to_string([1.0, 2.0], DataType.array(NUMBER)) == '[1, 2]'
    assert to_string([['a'], []], DataType.array(DataType.array(DataType.string()))) == '[[a], []]'
    assert to_string(True, DataType.boolean()) == 'true'
    assert to_string([2.0, 'x', False], DataType.array(DataType.any())) == '[2, x, false]'

    body = ArrayLit([Evaluate(Literal(1.0, 'Number'))])
    f = FunctionLit([], NUMBER, body)
    assert to_string(f, f.datatype) == '<function || -> Number>'
    c = ClosureLit([], NUMBER, body)
    assert to_string(Closure(c, None), c.datatype) == '<closure () => Number>'
    assert to_string(Print([]), DataType.instruction()) == '<instruction Print>'


def test_span_description():
    source = 'x <- 1\neval y'
    assert Span(12, 13).describe(source) == 'Line: 2, Character: 6-7'
    assert Span(0, 1).describe(source) == 'Line: 1, Character: 1-2'
    assert Span(2, 4).merge(Span(0, 3)) == Span(0, 4)


def test_error_messages():
    error = UndefinedVariable('y', Span(12, 13))
    assert str(error) == 'Undefined variable, y, at 12..13'
    assert error.describe('x <- 1\neval y') == 'Undefined variable, y, at Line: 2, Character: 6-7'
    assert str(OutOfBounds(3.0, Span(0, 1))) == 'Index 3, at 0..1, is out of bounds'

    error = ExpectedButFound(['"b"', '"a"'], 'the end of the program', Span(5, 5))
    assert str(error) == 'Expected "a" or "b", but found the end of the program, at 5..5'
