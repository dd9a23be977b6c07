import pytest

from eelios.environment import Environment, Variable
from eelios.errors import UndefinedVariable
from eelios.span import Span
from eelios.types import DataType
from eelios.value import Value


def number(x):
    return Value(float(x), DataType.number(), Span(0, 0))


def test_lookup_walks_the_chain():
    outer = Environment(None, Variable('a', number(1)))
    inner = Environment(outer, Variable('b', number(2)))
    assert inner.get_variable('a', Span(0, 1)).value.payload == 1
    assert inner.get_variable('b', Span(0, 1)).value.payload == 2
    assert inner.has_variable('a')
    assert not outer.has_variable('b')


def test_newest_binding_shadows():
    outer = Environment(None, Variable('x', number(1)))
    inner = Environment(outer, Variable('x', number(2)))
    assert inner.get_variable('x', Span(0, 1)).value.payload == 2
    assert outer.get_variable('x', Span(0, 1)).value.payload == 1


def test_unbound_name():
    env = Environment(None, Variable('x', number(1)))
    with pytest.raises(UndefinedVariable) as e:
        env.get_variable('y', Span(3, 4))
    assert e.value.name == 'y'
    assert e.value.span == Span(3, 4)


def test_variables_are_updated_in_place():
    variable = Variable('x', number(1))
    env = Environment(None, variable)
    variable.value = number(5)
    assert env.get_variable('x', Span(0, 1)).datatype == DataType.number()
    assert env.get_variable('x', Span(0, 1)).value.payload == 5
