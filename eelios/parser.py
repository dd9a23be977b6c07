"""Parser for the Eelios language.

This module implements a two-stage parsing pipeline:

1. **Preprocessing**: newlines that logically separate the expressions of a
   program are replaced with semicolons, one character for one character,
   so that every offset in the preprocessed text still points at the same
   place in the original source. Newlines inside brackets, strings and
   comments, or next to an operator that needs another operand, are left
   alone.

2. **Parsing**: the preprocessed source is fed into a Lark LALR parser
   configured with the Eelios grammar. The parse tree is turned into an
   AST by `ASTTransformer`; every node gets the `Span` it was parsed from.

Lark's own exceptions never escape: they are converted into the
`EeliosSyntaxError` family by `parse_program`.
"""

from __future__ import annotations

import re
from typing import List, Optional

from lark import Lark, Token, Transformer, v_args
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedToken, VisitError

from .ast import (
    Node, Literal, Param, FunctionLit, ClosureLit, ArrayLit, Ident, Grouping,
    Index, Call, UnaryOp, BinaryOp, LValueIdent, LValueIndex, Print, Assign,
    Evaluate, Execute, If, While, Length, Input, ToString, ToNumber,
    ToBoolean, IsNumber, IsBoolean,
)
from .errors import (
    EeliosError, EeliosSyntaxError, ExpectedButFound, InvalidAssignment,
    InvalidCharacter, InvalidDataType, InvalidParameter,
    UnterminatedStringLiteral,
)
from .span import Span
from .types import DataType


# A newline is not a separator when the code before it still needs an operand...
CONTINUE_AFTER = set(';,([{+-*/%^=<>!&|:.')
CONTINUE_AFTER_WORDS = {
    'print', 'eval', 'exec', 'if', 'then', 'else', 'while', 'do', 'and', 'or',
    'len', 'toString', 'toNumber', 'toBoolean', 'isNumber', 'isBoolean',
}
# ...or when the next line carries on the current expression.
CONTINUE_BEFORE = set('.&')
CONTINUE_BEFORE_WORDS = {'then', 'else', 'do', 'and', 'or'}

WORD = re.compile(r'[A-Za-z_][A-Za-z0-9_]*')


def _next_code(source: str, i: int) -> str:
    """Return the text of the next line with code on it, starting after offset `i`."""
    length = len(source)
    while i < length:
        c = source[i]
        if c == '#':
            while i < length and source[i] != '\n':
                i += 1
            continue
        if c.isspace():
            i += 1
            continue
        end = source.find('\n', i)
        return source[i:] if end == -1 else source[i:end]
    return ''


def _continues(before: str, after: str) -> bool:
    if not before or not after:
        return True
    if before[-1] in CONTINUE_AFTER:
        return True
    word = re.search(r'[A-Za-z_][A-Za-z0-9_]*$', before)
    if word and word.group(0) in CONTINUE_AFTER_WORDS:
        return True
    if after[0] in CONTINUE_BEFORE:
        return True
    word = WORD.match(after)
    return bool(word and word.group(0) in CONTINUE_BEFORE_WORDS)


def preprocess(source: str) -> str:
    """Replace newlines that separate top-level expressions with semicolons.

    Eelios programs are sequences of expressions separated by ``;``. A
    newline at bracket depth zero counts as a separator too, unless the line
    ends in something that needs another operand (an operator, a comma, a
    keyword such as ``then``) or the next line starts by continuing the
    expression (``else``, ``and``, ``.``...). The result has exactly the same
    length as `source`.
    """
    result: List[str] = []
    code: List[str] = []  # characters outside strings and comments, for look-behind
    depth = 0  # nesting depth for (), [], {}
    i = 0
    length = len(source)
    in_string = False
    escape = False
    in_comment = False
    while i < length:
        c = source[i]
        if in_comment:
            if c == '\n':
                in_comment = False
            else:
                result.append(c)
                i += 1
                continue
        if in_string:
            result.append(c)
            if escape:
                escape = False
            elif c == '\\':
                escape = True
            elif c == '"':
                in_string = False
                code.append(c)
            i += 1
            continue
        if c == '#':
            in_comment = True
            result.append(c)
            i += 1
            continue
        if c == '"':
            in_string = True
            result.append(c)
            i += 1
            continue
        if c in '([{':
            depth += 1
        elif c in ')]}':
            if depth > 0:
                depth -= 1
        if c == '\n' and depth == 0:
            before = ''.join(code).rstrip()
            if not _continues(before, _next_code(source, i + 1)):
                result.append(';')
                code.append(';')
                i += 1
                continue
        result.append(c)
        code.append(c)
        i += 1
    return ''.join(result)


EELIOS_GRAMMAR = r"""
    program: (expression? ";")* expression?

    ?expression: instruction
               | logic

    ?instruction: "print" logic ("." logic)*                          -> print_ins
                | "eval" expression                                   -> eval_ins
                | "exec" expression                                   -> exec_ins
                | "if" logic "then" expression ["else" expression]    -> if_ins
                | "while" logic "do" expression                       -> while_ins
                | postfix "<-" expression                             -> assign_ins

    // Expressions with precedence
    ?logic: equality
          | logic "and" equality   -> and_op
          | logic "&" equality     -> and_op
          | logic "or" equality    -> or_op
          | logic "|" equality     -> or_op
    ?equality: comparison
             | equality "=" comparison   -> eq
             | equality "!=" comparison  -> ne
    ?comparison: sum
               | comparison "<" sum   -> lt
               | comparison ">" sum   -> gt
               | comparison "<=" sum  -> le
               | comparison ">=" sum  -> ge
    ?sum: product
        | sum "+" product  -> add
        | sum "-" product  -> sub
    ?product: power
            | product "*" power  -> mul
            | product "/" power  -> div
            | product "%" power  -> mod
    ?power: unary
          | power "^" unary  -> pow
    ?unary: postfix
          | "+" unary          -> pos
          | "-" unary          -> neg
          | "len" unary        -> length
          | "toString" unary   -> to_string
          | "toNumber" unary   -> to_number
          | "toBoolean" unary  -> to_boolean
          | "isNumber" unary   -> is_number
          | "isBoolean" unary  -> is_boolean
          | "input" [postfix]  -> input
    ?postfix: primary
            | postfix "[" expression "]"      -> index
            | postfix "(" [arguments] ")"     -> call
    arguments: expression ("," expression)*

    ?primary: STRING                                       -> string
            | NUMBER                                       -> number
            | "true"                                       -> true_lit
            | "false"                                      -> false_lit
            | IDENT                                        -> ident
            | "(" expression ")"                           -> grouping
            | "[" [expression ("," expression)*] "]"       -> array
            | "|" [params] "|" "->" datatype primary       -> function_lit
            | "(" [params] ")" "=>" datatype primary       -> closure_lit
    params: param ("," param)*
    param: IDENT ":" datatype

    // Datatypes
    ?datatype: IDENT                                 -> named_type
             | "Array" "<" datatype ">"              -> array_type
             | "|" [datatypes] "|" "->" datatype     -> function_type
             | "(" [datatypes] ")" "=>" datatype     -> closure_type
    datatypes: datatype ("," datatype)*

    // Tokens
    STRING: /"(\\.|[^"\\])*"/
    NUMBER: /\d+(\.\d+)?|\.\d+/
    IDENT: /[a-zA-Z_][a-zA-Z0-9_]*/

    COMMENT: /#[^\n]*/
    %ignore COMMENT
    %import common.WS
    %ignore WS
"""


EELIOS_PARSER = Lark(
    EELIOS_GRAMMAR,
    start='program',
    parser='lalr',
    propagate_positions=True,
    maybe_placeholders=False,
    lexer='contextual',
)


NAMED_TYPES = {
    'Any': DataType.any(),
    'String': DataType.string(),
    'Number': DataType.number(),
    'Boolean': DataType.boolean(),
    'Instruction': DataType.instruction(),
}

ESCAPES = {'n': '\n', 't': '\t', 'r': '\r', '0': '\0', '"': '"', '\\': '\\'}
ESCAPE = re.compile(r'\\(.)', re.S)


def unescape(raw: str) -> str:
    """Strip the quotes from a string token and resolve its escapes.

    An unknown escape stands for the escaped character itself.
    """
    return ESCAPE.sub(lambda m: ESCAPES.get(m.group(1), m.group(1)), raw[1:-1])


def span_of(meta) -> Span:
    if getattr(meta, 'empty', True):
        return Span(0, 0)
    return Span(meta.start_pos, meta.end_pos)


def token_span(token: Token) -> Span:
    return Span(token.start_pos, token.end_pos)


def to_lvalue(node: Node):
    """Turn the parsed left-hand side of `<-` into an assignment target."""
    if isinstance(node, Ident):
        return LValueIdent(node.name, node.span)
    if isinstance(node, Index):
        return LValueIndex(to_lvalue(node.target), node.index, node.span)
    raise InvalidAssignment(node.span)


def _binary(op: str):
    def build(self, meta, children):
        left, right = children
        return BinaryOp(op, left, right, span_of(meta))
    return build


def _builtin(cls):
    def build(self, meta, children):
        return cls(children[0] if children else None, span_of(meta))
    return build


@v_args(meta=True)
class ASTTransformer(Transformer):
    """Transforms the raw parse tree into an AST."""

    def program(self, meta, children):
        if len(children) == 1:
            return children[0]
        return ArrayLit(list(children), span_of(meta))

    # Instructions
    def print_ins(self, meta, children):
        return Print(list(children), span_of(meta))

    def eval_ins(self, meta, children):
        return Evaluate(children[0], span_of(meta))

    def exec_ins(self, meta, children):
        return Execute(children[0], span_of(meta))

    def if_ins(self, meta, children):
        else_branch = children[2] if len(children) > 2 else None
        return If(children[0], children[1], else_branch, span_of(meta))

    def while_ins(self, meta, children):
        return While(children[0], children[1], span_of(meta))

    def assign_ins(self, meta, children):
        target, value = children
        return Assign(to_lvalue(target), value, span_of(meta))

    # Operators
    and_op = _binary('and')
    or_op = _binary('or')
    eq = _binary('=')
    ne = _binary('!=')
    lt = _binary('<')
    gt = _binary('>')
    le = _binary('<=')
    ge = _binary('>=')
    add = _binary('+')
    sub = _binary('-')
    mul = _binary('*')
    div = _binary('/')
    mod = _binary('%')
    pow = _binary('^')

    def pos(self, meta, children):
        return UnaryOp('+', children[0], span_of(meta))

    def neg(self, meta, children):
        return UnaryOp('-', children[0], span_of(meta))

    length = _builtin(Length)
    to_string = _builtin(ToString)
    to_number = _builtin(ToNumber)
    to_boolean = _builtin(ToBoolean)
    is_number = _builtin(IsNumber)
    is_boolean = _builtin(IsBoolean)
    input = _builtin(Input)

    def index(self, meta, children):
        target, index = children
        return Index(target, index, span_of(meta))

    def call(self, meta, children):
        args = children[1] if len(children) > 1 else []
        return Call(children[0], args, span_of(meta))

    def arguments(self, meta, children):
        return list(children)

    # Primaries
    def string(self, meta, children):
        return Literal(unescape(str(children[0])), 'String', span_of(meta))

    def number(self, meta, children):
        return Literal(float(children[0]), 'Number', span_of(meta))

    def true_lit(self, meta, children):
        return Literal(True, 'Boolean', span_of(meta))

    def false_lit(self, meta, children):
        return Literal(False, 'Boolean', span_of(meta))

    def ident(self, meta, children):
        return Ident(str(children[0]), span_of(meta))

    def grouping(self, meta, children):
        return Grouping(children[0], span_of(meta))

    def array(self, meta, children):
        return ArrayLit(list(children), span_of(meta))

    def function_lit(self, meta, children):
        params = children[0] if isinstance(children[0], list) else []
        return_type, body = children[-2], children[-1]
        return FunctionLit(params, return_type, body, span_of(meta))

    def closure_lit(self, meta, children):
        params = children[0] if isinstance(children[0], list) else []
        return_type, body = children[-2], children[-1]
        return ClosureLit(params, return_type, body, span_of(meta))

    def params(self, meta, children):
        seen = set()
        for param in children:
            if param.name in seen:
                raise InvalidParameter(param.name, param.span)
            seen.add(param.name)
        return list(children)

    def param(self, meta, children):
        name, datatype = children
        return Param(str(name), datatype, token_span(name))

    # Datatypes
    def named_type(self, meta, children):
        name = children[0]
        if str(name) not in NAMED_TYPES:
            raise InvalidDataType(str(name), token_span(name))
        return NAMED_TYPES[str(name)]

    def array_type(self, meta, children):
        return DataType.array(children[0])

    def function_type(self, meta, children):
        params = children[0] if len(children) > 1 else []
        return DataType.function(params, children[-1])

    def closure_type(self, meta, children):
        params = children[0] if len(children) > 1 else []
        return DataType.closure(params, children[-1])

    def datatypes(self, meta, children):
        return list(children)


TERMINAL_NAMES = {
    'IDENT': 'a name',
    'NUMBER': 'a number',
    'STRING': 'a string',
    '$END': 'the end of the program',
}


def describe_terminal(name: str) -> str:
    if name in TERMINAL_NAMES:
        return TERMINAL_NAMES[name]
    try:
        terminal = EELIOS_PARSER.get_terminal(name)
    except KeyError:
        return name
    return f'"{terminal.pattern.value}"'


def to_syntax_error(error: Exception, source: str) -> Optional[EeliosSyntaxError]:
    """Convert a Lark parse error into the matching `EeliosSyntaxError`."""
    end_of_source = Span(len(source), len(source))
    if isinstance(error, UnexpectedCharacters):
        pos = error.pos_in_stream
        if source[pos:pos + 1] == '"':
            end = source.find('\n', pos)
            end = len(source) if end == -1 else end
            return UnterminatedStringLiteral(source[pos:end], Span(pos, end))
        return InvalidCharacter(error.char, Span(pos, pos + 1))
    if isinstance(error, UnexpectedToken):
        token = error.token
        expected = [describe_terminal(name) for name in error.expected]
        if token.type == '$END':
            return ExpectedButFound(expected, TERMINAL_NAMES['$END'], end_of_source)
        start = token.start_pos
        end = token.end_pos if token.end_pos is not None else start + len(token)
        found = 'a new line' if source[start:start + 1] == '\n' else f'"{token}"'
        return ExpectedButFound(expected, found, Span(start, end))
    if isinstance(error, UnexpectedEOF):
        expected = [describe_terminal(name) for name in error.expected]
        return ExpectedButFound(expected, TERMINAL_NAMES['$END'], end_of_source)
    return None


def tokenize(source: str) -> List[Token]:
    """Return the token stream of `source`, for tooling and debug output."""
    text = preprocess(source)
    try:
        return list(EELIOS_PARSER.lex(text))
    except UnexpectedCharacters as e:
        raise to_syntax_error(e, source) from None


def parse_program(source: str) -> Node:
    """Parse Eelios source code into an AST.

    A program made of a single expression parses to that expression; a
    program of several parses to an `ArrayLit` running them in order.
    Syntax errors are raised as `EeliosSyntaxError` subclasses.
    """
    pre = preprocess(source)
    try:
        tree = EELIOS_PARSER.parse(pre)
        return ASTTransformer().transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, EeliosError):
            raise e.orig_exc from None
        raise
    except (UnexpectedCharacters, UnexpectedToken, UnexpectedEOF) as e:
        error = to_syntax_error(e, source)
        if error is None:
            raise
        raise error from None
