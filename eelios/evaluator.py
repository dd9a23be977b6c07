"""Tree-walking evaluator for Eelios.

An `Evaluator` runs one instruction tree. Expressions are computed by
`evaluate_expression`; assignment targets are resolved to a `Lens` by
`evaluate_lvalue`; instructions are run by `evaluate_instruction`, which
returns the value produced by an `eval` (ending the enclosing sequence) or
None to carry on.

A fresh evaluator is created for every function or closure call, with the
parameters bound in a new environment, and for every `if`/`while` body,
which shares the caller's environment.
"""

from __future__ import annotations

import math
import re
from typing import Callable, List, Optional, Tuple, Union

from .ast import (
    NO_SPAN, Node, Literal, FunctionLit, ClosureLit, ArrayLit, Ident, Grouping, Index,
    Call, UnaryOp, BinaryOp, LValueIdent, LValueIndex, Print, Assign,
    Evaluate, Execute, If, While, Builtin, Length, Input, ToString,
    ToNumber, ToBoolean, IsNumber, IsBoolean,
)
from .console import Console
from .environment import Environment, Variable
from .errors import (
    ExpectedDataTypesButFound, UndefinedVariable, OutOfBounds,
    InvalidFunction, InvalidClosure, InvalidSelf, InvalidInstruction,
    InvalidArguments, InvalidExec, CannotCompare, InvalidNumber,
    InvalidBoolean, InvalidLen, InvalidInput, InvalidToString,
    InvalidToNumber, InvalidToBoolean, InvalidIsNumber, InvalidIsBoolean,
)
from .span import Span
from .types import DataType, is_expected_datatype
from .value import Value, Closure, Lens, to_string


ANY = DataType.any()
STRING = DataType.string()
NUMBER = DataType.number()
BOOLEAN = DataType.boolean()
INSTRUCTION = DataType.instruction()
ARRAY_ANY = DataType.array(ANY)

ARITHMETIC_OPS = ('-', '*', '/', '^', '%')
COMPARISON_OPS = ('<', '>', '<=', '>=')
UNCOMPARABLE_KINDS = ('Array', 'Instruction', 'Function', 'Closure')

MISPLACED_KEYWORDS = {
    Length: InvalidLen,
    Input: InvalidInput,
    ToString: InvalidToString,
    ToNumber: InvalidToNumber,
    ToBoolean: InvalidToBoolean,
    IsNumber: InvalidIsNumber,
    IsBoolean: InvalidIsBoolean,
}

DECIMAL = re.compile(r'[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|Infinity)')
NON_DECIMAL = re.compile(r'0[xX][0-9a-fA-F]+|0[oO][0-7]+|0[bB][01]+')

Tracer = Callable[[int, str], None]
SelfValue = Union[FunctionLit, Closure]


def parse_number(text: str) -> Optional[float]:
    """Parse `text` as a number literal, or return None if it is not one.

    Accepts surrounding whitespace, decimal and exponent notation,
    ``Infinity`` and the ``0x``/``0o``/``0b`` prefixes. Blank text is not a
    number.
    """
    stripped = text.strip()
    if not stripped:
        return None
    if NON_DECIMAL.fullmatch(stripped):
        return float(int(stripped, 0))
    if DECIMAL.fullmatch(stripped):
        return float(stripped)
    return None


def divide(a: float, b: float) -> float:
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def modulus(a: float, b: float) -> float:
    try:
        return math.fmod(a, b)
    except ValueError:
        return math.nan


def power(a: float, b: float) -> float:
    try:
        return math.pow(a, b)
    except OverflowError:
        if a < 0 and b % 2 == 1:
            return -math.inf
        return math.inf
    except ValueError:
        # 0 raised to a negative power; an odd exponent keeps the sign of -0
        if a == 0:
            if float(b).is_integer() and b % 2 == 1:
                return math.copysign(math.inf, a)
            return math.inf
        return math.nan


def arithmetic(op: str, a: float, b: float) -> float:
    if op == '-':
        return a - b
    if op == '*':
        return a * b
    if op == '/':
        return divide(a, b)
    if op == '%':
        return modulus(a, b)
    if op == '^':
        return power(a, b)
    raise NotImplementedError(f"unknown arithmetic operator {op}")


def compare(op: str, a: float, b: float) -> bool:
    if op == '<':
        return a < b
    if op == '>':
        return a > b
    if op == '<=':
        return a <= b
    if op == '>=':
        return a >= b
    raise NotImplementedError(f"unknown comparison operator {op}")


def check_index(index: Value, length: int) -> int:
    """Return `index` as a list position, raising OutOfBounds unless ``0 <= index < length``."""
    position = index.payload
    if not float(position).is_integer() or not 0 <= position < length:
        raise OutOfBounds(position, index.span)
    return int(position)


class Evaluator:
    def __init__(self, instruction, environment: Optional[Environment] = None,
                 self_value: Optional[SelfValue] = None,
                 console: Optional[Console] = None, tracer: Optional[Tracer] = None):
        self.instruction = instruction
        self.environment = environment
        self.self_value = self_value
        self.console = console if console is not None else Console()
        self.tracer = tracer

    def evaluate(self) -> Optional[Value]:
        return self.evaluate_instruction(self.instruction)

    def trace(self, level: int, msg: str):
        if self.tracer is not None:
            self.tracer(level, msg)

    def sub_evaluator(self, instruction, environment: Optional[Environment],
                      self_value: Optional[SelfValue]) -> 'Evaluator':
        return Evaluator(instruction, environment, self_value, self.console, self.tracer)

    def expect(self, expected: DataType, value: Value) -> Value:
        if not is_expected_datatype(expected, value.datatype):
            raise ExpectedDataTypesButFound([expected], value.datatype, value.span)
        return value

    # Expressions

    def evaluate_expression(self, expr: Node, instruction: bool = False) -> Value:
        """Compute the value of `expr`.

        With `instruction` set, array literals, `exec` and the built-in
        keywords are not computed: like every other instruction node they
        evaluate to an `Instruction` value wrapping the node, to be run by
        the caller.
        """
        if isinstance(expr, Literal):
            return Value(expr.value, DataType(expr.literal_type), expr.span)
        if isinstance(expr, FunctionLit):
            return Value(expr, expr.datatype, expr.span)
        if isinstance(expr, ClosureLit):
            return Value(Closure(expr, self.environment), expr.datatype, expr.span)
        if isinstance(expr, ArrayLit) and not instruction:
            return self.evaluate_array(expr)
        if isinstance(expr, Ident):
            return self.evaluate_ident(expr)
        if isinstance(expr, Grouping):
            return self.evaluate_expression(expr.expr, instruction).with_span(expr.span)
        if isinstance(expr, Index):
            return self.evaluate_index(expr)
        if isinstance(expr, Call):
            return self.call_function(expr)
        if isinstance(expr, UnaryOp):
            operand = self.expect(NUMBER, self.evaluate_expression(expr.operand))
            if expr.op == '-':
                return Value(-operand.payload, NUMBER, expr.span)
            return Value(operand.payload, NUMBER, expr.span)
        if isinstance(expr, BinaryOp):
            return self.apply_binary_op(expr)
        if isinstance(expr, Execute) and not instruction:
            result = self.evaluate_instruction(expr.expr)
            if result is None:
                raise InvalidInstruction(expr.expr.span)
            return result
        if isinstance(expr, Builtin) and not instruction:
            return self.apply_builtin(expr)
        # Everything else is an instruction used as a value.
        return Value(expr, INSTRUCTION, expr.span)

    def evaluate_array(self, expr: ArrayLit) -> Value:
        if not expr.elements:
            return Value([], ARRAY_ANY, expr.span)
        items = []
        element_type: Optional[DataType] = None
        for element in expr.elements:
            value = self.evaluate_expression(element)
            if element_type is None:
                element_type = value.datatype
            elif not is_expected_datatype(element_type, value.datatype):
                raise ExpectedDataTypesButFound([element_type], value.datatype, value.span)
            items.append(value.payload)
        return Value(items, DataType.array(element_type), expr.span)

    def evaluate_ident(self, expr: Ident) -> Value:
        if expr.name == 'self':
            if self.self_value is None:
                raise InvalidSelf(expr.span)
            if isinstance(self.self_value, Closure):
                return Value(self.self_value, self.self_value.literal.datatype, expr.span)
            return Value(self.self_value, self.self_value.datatype, expr.span)
        if self.environment is None:
            raise UndefinedVariable(expr.name, expr.span)
        variable = self.environment.get_variable(expr.name, expr.span)
        return Value(variable.value.payload, variable.datatype, expr.span)

    def evaluate_index(self, expr: Index) -> Value:
        target = self.evaluate_expression(expr.target)
        is_string = target.datatype.kind == 'String'
        if not is_string and not is_expected_datatype(ARRAY_ANY, target.datatype):
            raise ExpectedDataTypesButFound([ARRAY_ANY, STRING], target.datatype, target.span)
        index = self.expect(NUMBER, self.evaluate_expression(expr.index))
        position = check_index(index, len(target.payload))
        if is_string:
            return Value(target.payload[position], STRING, expr.span)
        return Value(target.payload[position], target.datatype.element, expr.span)

    def call_function(self, expr: Call) -> Value:
        target = self.evaluate_expression(expr.func)
        kind = target.datatype.kind
        if kind == 'Function':
            literal = target.payload
            environment = None
        elif kind == 'Closure':
            literal = target.payload.literal
            environment = target.payload.environment
        else:
            raise ExpectedDataTypesButFound(
                [DataType.function([], ANY), DataType.closure([], ANY)],
                target.datatype, target.span)
        if len(literal.params) != len(expr.args):
            raise InvalidArguments(len(literal.params), expr.span)
        args = [self.evaluate_expression(arg) for arg in expr.args]
        for param, arg in zip(literal.params, args):
            if not is_expected_datatype(param.datatype, arg.datatype):
                raise ExpectedDataTypesButFound([param.datatype], arg.datatype, arg.span)
        for param, arg in zip(literal.params, args):
            environment = Environment(environment, Variable(param.name, arg))
        self.trace(2, f"call {target.datatype!r} at {expr.span!r} with {args!r}")
        result = self.sub_evaluator(literal.body, environment, target.payload).evaluate()
        if result is None:
            if kind == 'Function':
                raise InvalidFunction(expr.span)
            raise InvalidClosure(expr.span)
        if not is_expected_datatype(literal.return_type, result.datatype):
            raise ExpectedDataTypesButFound([literal.return_type], result.datatype, result.span)
        self.trace(2, f"return {result!r} from call at {expr.span!r}")
        return result.with_span(expr.span)

    def apply_binary_op(self, expr: BinaryOp) -> Value:
        op = expr.op
        if op in ('and', 'or'):
            return self.apply_logic_op(expr)
        left = self.evaluate_expression(expr.left)
        right = self.evaluate_expression(expr.right)
        if op == '+':
            if left.datatype.kind not in ('Number', 'String'):
                raise ExpectedDataTypesButFound([NUMBER, STRING], left.datatype, left.span)
            if not is_expected_datatype(left.datatype, right.datatype):
                raise ExpectedDataTypesButFound([left.datatype], right.datatype, right.span)
            return Value(left.payload + right.payload, left.datatype, expr.span)
        if op in ARITHMETIC_OPS or op in COMPARISON_OPS:
            for operand in (left, right):
                self.expect(NUMBER, operand)
            if op in ARITHMETIC_OPS:
                return Value(arithmetic(op, left.payload, right.payload), NUMBER, expr.span)
            return Value(compare(op, left.payload, right.payload), BOOLEAN, expr.span)
        if op in ('=', '!='):
            if left.datatype.kind in UNCOMPARABLE_KINDS:
                raise CannotCompare(left.span)
            if not is_expected_datatype(left.datatype, right.datatype):
                raise ExpectedDataTypesButFound([left.datatype], right.datatype, right.span)
            equal = left.payload == right.payload
            return Value(equal if op == '=' else not equal, BOOLEAN, expr.span)
        raise NotImplementedError(f"unknown binary operator {op}")

    def apply_logic_op(self, expr: BinaryOp) -> Value:
        left = self.expect(BOOLEAN, self.evaluate_expression(expr.left))
        if expr.op == 'and' and not left.payload:
            return Value(False, BOOLEAN, expr.span)
        if expr.op == 'or' and left.payload:
            return Value(True, BOOLEAN, expr.span)
        right = self.expect(BOOLEAN, self.evaluate_expression(expr.right))
        return Value(right.payload, BOOLEAN, expr.span)

    def apply_builtin(self, expr: Builtin) -> Value:
        if isinstance(expr, Input):
            prompt = None
            if expr.expr is not None:
                prompt = self.expect(STRING, self.evaluate_expression(expr.expr)).payload
            return Value(self.console.read_line(prompt), STRING, expr.span)
        value = self.evaluate_expression(expr.expr)
        if isinstance(expr, Length):
            if value.datatype.kind != 'String' and not is_expected_datatype(ARRAY_ANY, value.datatype):
                raise ExpectedDataTypesButFound([ARRAY_ANY, STRING], value.datatype, value.span)
            return Value(float(len(value.payload)), NUMBER, expr.span)
        if isinstance(expr, ToString):
            return Value(to_string(value.payload, value.datatype), STRING, expr.span)
        text = self.expect(STRING, value).payload
        if isinstance(expr, ToNumber):
            number = parse_number(text)
            if number is None:
                raise InvalidNumber(text, expr.expr.span)
            return Value(number, NUMBER, expr.span)
        if isinstance(expr, ToBoolean):
            if text not in ('true', 'false'):
                raise InvalidBoolean(text, expr.expr.span)
            return Value(text == 'true', BOOLEAN, expr.span)
        if isinstance(expr, IsNumber):
            return Value(parse_number(text) is not None, BOOLEAN, expr.span)
        if isinstance(expr, IsBoolean):
            return Value(text in ('true', 'false'), BOOLEAN, expr.span)
        raise NotImplementedError(f"unknown built-in {type(expr).__name__}")

    # Assignment targets

    def evaluate_lvalue(self, node) -> Tuple[Lens, Span]:
        if isinstance(node, LValueIdent):
            if self.environment is None or not self.environment.has_variable(node.name):
                variable = Variable(node.name, Value(None, ANY, node.span))
                self.environment = Environment(self.environment, variable)
            else:
                variable = self.environment.get_variable(node.name, node.span)

            def set_variable(value: Value):
                variable.value = value
            return Lens(lambda: variable.value, set_variable), node.span

        if isinstance(node, LValueIndex):
            base, span = self.evaluate_lvalue(node.target)
            stored = base.get()
            if not is_expected_datatype(ARRAY_ANY, stored.datatype):
                raise ExpectedDataTypesButFound([ARRAY_ANY], stored.datatype, span)
            index = self.expect(NUMBER, self.evaluate_expression(node.index))

            def get_element() -> Value:
                array = base.get()
                position = check_index(index, len(array.payload))
                return Value(array.payload[position], array.datatype.element, array.span)

            def set_element(value: Value):
                array = base.get()
                position = check_index(index, len(array.payload))
                items = list(array.payload)
                items[position] = value.payload
                base.set(Value(items, DataType.array(value.datatype), array.span))
            return Lens(get_element, set_element), node.span

        raise NotImplementedError(f"evaluate_lvalue: unexpected node type {type(node)}")

    # Instructions

    def evaluate_instruction(self, expr, span: Span = NO_SPAN) -> Optional[Value]:
        """Run `expr` as an instruction; return the value it produced, if any.

        `span` locates the array `expr` was taken from, for payloads that
        carry no span of their own.
        """
        if isinstance(expr, list):
            return self.run_sequence(expr, span)
        if not isinstance(expr, Node):
            # e.g. the empty slot of a variable that was never given a value
            raise InvalidInstruction(span)
        value = self.evaluate_expression(expr, True)
        self.expect(INSTRUCTION, value)
        if isinstance(value.payload, list):
            return self.run_sequence(value.payload, value.span)
        return self.execute(value.payload)

    def run_sequence(self, instructions: List, span: Span = NO_SPAN) -> Optional[Value]:
        for ins in instructions:
            result = self.evaluate_instruction(ins, span)
            if result is not None:
                return result
        return None

    def execute(self, ins: Node) -> Optional[Value]:
        self.trace(3, f"run {type(ins).__name__} at {ins.span!r}")
        if isinstance(ins, ArrayLit):
            return self.run_sequence(ins.elements, ins.span)
        if isinstance(ins, Print):
            text = ''.join(str(self.evaluate_expression(e)) for e in ins.exprs)
            self.console.write_line(text)
            return None
        if isinstance(ins, Assign):
            lens, _ = self.evaluate_lvalue(ins.target)
            expected = lens.get().datatype
            value = self.evaluate_expression(ins.value)
            self.expect(expected, value)
            lens.set(value)
            return None
        if isinstance(ins, Evaluate):
            return self.evaluate_expression(ins.expr)
        if isinstance(ins, Execute):
            raise InvalidExec(ins.span)
        if isinstance(ins, Builtin):
            raise MISPLACED_KEYWORDS[type(ins)](ins.span)
        if isinstance(ins, If):
            condition = self.expect(BOOLEAN, self.evaluate_expression(ins.condition))
            if condition.payload:
                return self.run_body(ins.then_branch)
            if ins.else_branch is not None:
                return self.run_body(ins.else_branch)
            return None
        if isinstance(ins, While):
            while True:
                condition = self.expect(BOOLEAN, self.evaluate_expression(ins.condition))
                if not condition.payload:
                    return None
                result = self.run_body(ins.body)
                if result is not None:
                    return result
        raise NotImplementedError(f"execute: unexpected node type {type(ins)}")

    def run_body(self, body: Node) -> Optional[Value]:
        # Bodies share this evaluator's environment; variables they declare stay visible here.
        evaluator = self.sub_evaluator(body, self.environment, self.self_value)
        result = evaluator.evaluate()
        self.environment = evaluator.environment
        return result
