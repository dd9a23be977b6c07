import pytest

from eelios.types import DataType, describe_expected, is_expected_datatype

ANY = DataType.any()
STRING = DataType.string()
NUMBER = DataType.number()
BOOLEAN = DataType.boolean()
INSTRUCTION = DataType.instruction()

ALL_TYPES = [
    ANY, STRING, NUMBER, BOOLEAN, INSTRUCTION,
    DataType.array(NUMBER),
    DataType.array(DataType.array(STRING)),
    DataType.function([NUMBER, STRING], BOOLEAN),
    DataType.closure([], INSTRUCTION),
]


@pytest.mark.parametrize('t', ALL_TYPES, ids=repr)
def test_every_datatype_accepts_itself(t):
    assert is_expected_datatype(t, t)
    assert is_expected_datatype(ANY, t)


def test_primitives_only_accept_themselves():
    assert not is_expected_datatype(NUMBER, STRING)
    assert not is_expected_datatype(STRING, ANY)
    assert not is_expected_datatype(BOOLEAN, DataType.array(BOOLEAN))


def test_instruction_accepts_instruction_arrays_but_not_the_reverse():
    assert is_expected_datatype(INSTRUCTION, DataType.array(INSTRUCTION))
    assert is_expected_datatype(INSTRUCTION, DataType.array(ANY))
    assert not is_expected_datatype(INSTRUCTION, DataType.array(NUMBER))
    assert not is_expected_datatype(DataType.array(INSTRUCTION), INSTRUCTION)


def test_arrays_compare_their_elements():
    assert is_expected_datatype(DataType.array(ANY), DataType.array(NUMBER))
    assert not is_expected_datatype(DataType.array(NUMBER), DataType.array(ANY))
    assert not is_expected_datatype(DataType.array(NUMBER), NUMBER)


def test_functions_and_closures():
    f = DataType.function([NUMBER], NUMBER)
    assert is_expected_datatype(DataType.function([ANY], ANY), f)
    assert not is_expected_datatype(DataType.function([NUMBER, NUMBER], NUMBER), f)
    assert not is_expected_datatype(DataType.function([NUMBER], STRING), f)
    assert not is_expected_datatype(DataType.closure([NUMBER], NUMBER), f)


def test_unknown_kind_is_a_programmer_error():
    with pytest.raises(TypeError):
        is_expected_datatype(DataType('Bogus'), NUMBER)


def test_printing():
    assert repr(NUMBER) == 'Number'
    assert repr(ANY) == 'Any'
    assert repr(DataType.array(STRING)) == 'Array<String>'
    assert repr(DataType.function([NUMBER, NUMBER], NUMBER)) == '|Number, Number| -> Number'
    assert str(DataType.closure([NUMBER], BOOLEAN)) == '(Number) => Boolean'
    assert describe_expected([NUMBER]) == 'Number'
    assert describe_expected([NUMBER, STRING]) == 'Number or String'
