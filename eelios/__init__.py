# Eelios language package
# This package provides a parser and a tree-walking interpreter for the Eelios language.
from .errors import EeliosError, EeliosRuntimeError, EeliosSyntaxError
from .interpreter import run_program, compile_module, Interpreter
from .parser import parse_program

__all__ = [
    'run_program',
    'compile_module',
    'parse_program',
    'Interpreter',
    'EeliosError',
    'EeliosRuntimeError',
    'EeliosSyntaxError',
]
