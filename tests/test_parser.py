import pytest

from eelios.ast import (
    ArrayLit, Assign, BinaryOp, Call, Evaluate, FunctionLit, Ident, If,
    Index, Input, Literal, LValueIdent, LValueIndex, Param, Print, While,
)
from eelios.errors import (
    ExpectedButFound, InvalidAssignment, InvalidCharacter, InvalidDataType,
    InvalidParameter, UnterminatedStringLiteral,
)
from eelios.parser import parse_program, preprocess, tokenize
from eelios.span import Span
from eelios.types import DataType


def num(x):
    return Literal(float(x), 'Number')


def test_single_expression_is_the_program():
    assert parse_program('print "hi"') == Print([Literal('hi', 'String')])


def test_several_expressions_make_an_instruction_array():
    program = parse_program('print 1; print 2')
    assert program == ArrayLit([Print([num(1)]), Print([num(2)])])


def test_newlines_separate_expressions():
    program = parse_program('x <- 1\nprint x\n')
    assert program == ArrayLit([
        Assign(LValueIdent('x'), num(1)),
        Print([Ident('x')]),
    ])


def test_operator_precedence():
    program = parse_program('eval 1 + 2 * 3 ^ 2 = 19 and true')
    assert program == Evaluate(BinaryOp(
        'and',
        BinaryOp('=', BinaryOp('+', num(1), BinaryOp('*', num(2), BinaryOp('^', num(3), num(2)))), num(19)),
        Literal(True, 'Boolean'),
    ))


def test_symbolic_logic_operators():
    assert parse_program('eval a & b | c') == Evaluate(
        BinaryOp('or', BinaryOp('and', Ident('a'), Ident('b')), Ident('c')))


def test_print_joins_with_dots():
    assert parse_program('print "a" . x . 1') == Print([Literal('a', 'String'), Ident('x'), num(1)])


def test_function_literal():
    program = parse_program('f <- |a: Number, b: Array<String>| -> Number [eval a]')
    assert program == Assign(LValueIdent('f'), FunctionLit(
        [Param('a', DataType.number()), Param('b', DataType.array(DataType.string()))],
        DataType.number(),
        ArrayLit([Evaluate(Ident('a'))]),
    ))


def test_function_and_closure_types():
    program = parse_program('f <- |g: |Number| -> Number, h: () => Any| -> Boolean [eval true]')
    params = program.value.params
    assert params[0].datatype == DataType.function([DataType.number()], DataType.number())
    assert params[1].datatype == DataType.closure([], DataType.any())


def test_if_while_and_indexed_assignment():
    program = parse_program('while i < 3 do [xs[i] <- i, i <- i + 1]')
    assert isinstance(program, While)
    assert program.body.elements[0] == Assign(LValueIndex(LValueIdent('xs'), Ident('i')), Ident('i'))

    program = parse_program('if a then print 1\nelse print 2')
    assert program == If(Ident('a'), Print([num(1)]), Print([num(2)]))


def test_calls_indexing_and_input():
    assert parse_program('eval f(1, g())[0]') == Evaluate(
        Index(Call(Ident('f'), [num(1), Call(Ident('g'), [])]), num(0)))
    assert parse_program('name <- input "Name?"') == Assign(LValueIdent('name'), Input(Literal('Name?', 'String')))
    assert parse_program('eval input') == Evaluate(Input(None))


def test_string_escapes_and_comments():
    program = parse_program('print "a\\tb\\n\\"q\\" \\x"  # trailing comment')
    assert program == Print([Literal('a\tb\n"q" x', 'String')])


def test_spans():
    program = parse_program('x <- 12')
    assert program.span == Span(0, 7)
    assert program.target.span == Span(0, 1)
    assert program.value.span == Span(5, 7)


def test_empty_program():
    assert parse_program('') == ArrayLit([])
    assert parse_program('# nothing here\n') == ArrayLit([])


def test_preprocess_keeps_offsets():
    source = 'x <- [1,\n2]\nif x then\n  print "a\nb"\nelse print 2 # c\nprint x'
    out = preprocess(source)
    assert len(out) == len(source)
    assert out == 'x <- [1,\n2];if x then\n  print "a\nb"\nelse print 2 # c;print x'


def test_tokenize():
    assert [str(t) for t in tokenize('x <- 1 + "a"')] == ['x', '<-', '1', '+', '"a"']


def test_invalid_character():
    with pytest.raises(InvalidCharacter) as e:
        parse_program('print 1 $ 2')
    assert e.value.character == '$'
    assert e.value.span == Span(8, 9)


def test_unterminated_string():
    with pytest.raises(UnterminatedStringLiteral) as e:
        parse_program('print "abc')
    assert e.value.text == '"abc'
    assert e.value.span == Span(6, 10)


def test_unexpected_end():
    with pytest.raises(ExpectedButFound) as e:
        parse_program('print')
    assert e.value.found == 'the end of the program'


def test_unexpected_token():
    with pytest.raises(ExpectedButFound) as e:
        parse_program('x <- )')
    assert e.value.found == '")"'
    assert e.value.span == Span(5, 6)


def test_duplicate_parameters():
    with pytest.raises(InvalidParameter) as e:
        parse_program('f <- |a: Number, a: String| -> Number [eval 1]')
    assert e.value.name == 'a'


def test_unknown_datatype():
    with pytest.raises(InvalidDataType) as e:
        parse_program('f <- |a: Foo| -> Number [eval 1]')
    assert e.value.name == 'Foo'


def test_invalid_assignment_target():
    with pytest.raises(InvalidAssignment):
        parse_program('1 <- 2')
    with pytest.raises(InvalidAssignment):
        parse_program('f(1) <- 2')
