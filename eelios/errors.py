from typing import List, Sequence

from eelios.span import Span
from eelios.types import DataType, describe_expected
from eelios.value import format_number


class EeliosError(Exception):
    """Base class for errors reported to the author of an Eelios program.

    Every error carries the `Span` it refers to. `describe(source)` renders the
    message with a line/character position; `str()` falls back to raw offsets.
    """
    def __init__(self, span: Span):
        self.span = span
        super().__init__(self.message(repr(span)))

    def message(self, where: str) -> str:
        raise NotImplementedError

    def describe(self, source: str) -> str:
        return self.message(self.span.describe(source))


class EeliosRuntimeError(EeliosError):
    """Raised by the evaluator."""


class EeliosSyntaxError(EeliosError):
    """Raised by the parser."""


# Runtime errors

class UndefinedVariable(EeliosRuntimeError):
    def __init__(self, name: str, span: Span):
        self.name = name
        super().__init__(span)

    def message(self, where: str) -> str:
        return f"Undefined variable, {self.name}, at {where}"


class ExpectedDataTypesButFound(EeliosRuntimeError):
    def __init__(self, expected: Sequence[DataType], found: DataType, span: Span):
        self.expected: List[DataType] = list(expected)
        self.found = found
        super().__init__(span)

    def message(self, where: str) -> str:
        return (f"Expected a value of type {describe_expected(self.expected)}, "
                f"but found a value of type {self.found!r}, at {where}")


class OutOfBounds(EeliosRuntimeError):
    def __init__(self, index, span: Span):
        self.index = index
        super().__init__(span)

    def message(self, where: str) -> str:
        return f"Index {format_number(self.index)}, at {where}, is out of bounds"


InvalidIndex = OutOfBounds


class InvalidFunction(EeliosRuntimeError):
    def message(self, where: str) -> str:
        return f"The function call, at {where}, didn't evaluate to a value"


class InvalidClosure(EeliosRuntimeError):
    def message(self, where: str) -> str:
        return f"The closure call, at {where}, didn't evaluate to a value"


class InvalidInstruction(EeliosRuntimeError):
    def message(self, where: str) -> str:
        return f"The instruction, at {where}, didn't evaluate to a value"


class InvalidSelf(EeliosRuntimeError):
    def message(self, where: str) -> str:
        return (f"Use of self, at {where}, is invalid as it's not being used "
                f"inside of a function or closure")


class InvalidArguments(EeliosRuntimeError):
    def __init__(self, expected_count: int, span: Span):
        self.expected_count = expected_count
        super().__init__(span)

    def message(self, where: str) -> str:
        return (f"Provided more or less than {self.expected_count} arguments to the "
                f"function or closure, at {where}")


class CannotCompare(EeliosRuntimeError):
    def message(self, where: str) -> str:
        return f"Cannot compare values of type Array, Instruction, Function or Closure, at {where}"


class InvalidNumber(EeliosRuntimeError):
    def __init__(self, raw: str, span: Span):
        self.raw = raw
        super().__init__(span)

    def message(self, where: str) -> str:
        return f"Cannot convert \"{self.raw}\", at {where}, to a Number"


class InvalidBoolean(EeliosRuntimeError):
    def __init__(self, raw: str, span: Span):
        self.raw = raw
        super().__init__(span)

    def message(self, where: str) -> str:
        return f"Cannot convert \"{self.raw}\", at {where}, to a Boolean"


class InvalidKeywordInstruction(EeliosRuntimeError):
    """An expression-only keyword was run as an instruction."""
    keyword = ''

    def message(self, where: str) -> str:
        return f"The {self.keyword} keyword, at {where}, can only be used inside of an expression"


class InvalidExec(InvalidKeywordInstruction):
    keyword = 'exec'


class InvalidLen(InvalidKeywordInstruction):
    keyword = 'len'


class InvalidInput(InvalidKeywordInstruction):
    keyword = 'input'


class InvalidToString(InvalidKeywordInstruction):
    keyword = 'toString'


class InvalidToNumber(InvalidKeywordInstruction):
    keyword = 'toNumber'


class InvalidToBoolean(InvalidKeywordInstruction):
    keyword = 'toBoolean'


class InvalidIsNumber(InvalidKeywordInstruction):
    keyword = 'isNumber'


class InvalidIsBoolean(InvalidKeywordInstruction):
    keyword = 'isBoolean'


# Syntax errors

class InvalidCharacter(EeliosSyntaxError):
    def __init__(self, character: str, span: Span):
        self.character = character
        super().__init__(span)

    def message(self, where: str) -> str:
        return f"Found an invalid character, \"{self.character}\", at {where}"


class UnterminatedStringLiteral(EeliosSyntaxError):
    def __init__(self, text: str, span: Span):
        self.text = text
        super().__init__(span)

    def message(self, where: str) -> str:
        return f"Found an unterminated string literal, {self.text}, at {where}"


class ExpectedButFound(EeliosSyntaxError):
    def __init__(self, expected: Sequence[str], found: str, span: Span):
        self.expected = sorted(expected)
        self.found = found
        super().__init__(span)

    def message(self, where: str) -> str:
        if not self.expected:
            return f"Found an unexpected {self.found}, at {where}"
        wanted = self.expected[0] if len(self.expected) == 1 else \
            ', '.join(self.expected[:-1]) + ' or ' + self.expected[-1]
        return f"Expected {wanted}, but found {self.found}, at {where}"


class InvalidDataType(EeliosSyntaxError):
    def __init__(self, name: str, span: Span):
        self.name = name
        super().__init__(span)

    def message(self, where: str) -> str:
        return f"Found an invalid datatype, {self.name}, at {where}"


class InvalidParameter(EeliosSyntaxError):
    def __init__(self, name: str, span: Span):
        self.name = name
        super().__init__(span)

    def message(self, where: str) -> str:
        return f"Multiple parameters share the name \"{self.name}\", at {where}"


class InvalidAssignment(EeliosSyntaxError):
    def message(self, where: str) -> str:
        return f"Only a variable or an element of one can be assigned to, at {where}"
