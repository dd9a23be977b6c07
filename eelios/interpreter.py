"""Interpreter front end for the Eelios language.

`Interpreter` ties the parser and the evaluator together and owns the
debug trace. When `debug_level` is above zero, trace lines are written to
`debug_file`:

* level 1: parse and run phases, and the final result
* level 2: every function and closure call with its arguments and result
* level 3: every instruction that is run, and the token stream of the source
"""

from typing import Optional

from .ast import Node
from .console import Console
from .errors import EeliosError
from .evaluator import Evaluator
from .parser import parse_program, tokenize
from .value import Value


class Interpreter:
    def __init__(self, debug_level: int = 0, debug_file: str = 'debug.txt',
                 console: Optional[Console] = None):
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w', encoding='utf-8') if debug_level > 0 else None
        self.console = console if console is not None else Console()

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    def trace(self, level: int, msg: str):
        if self.debug_level >= level:
            self.debug(msg)

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    def parse(self, source: str) -> Node:
        self.debug(f"parse {len(source)} characters")
        if self.debug_level >= 3:
            for token in tokenize(source):
                self.debug(f"token {token.type} {token.value!r} at {token.start_pos}")
        try:
            return parse_program(source)
        except EeliosError as e:
            self.debug(f"syntax error: {e}")
            raise

    def run(self, program: Node) -> Optional[Value]:
        tracer = self.trace if self.debug_level > 0 else None
        evaluator = Evaluator(program, console=self.console, tracer=tracer)
        self.debug(f"run {type(program).__name__}")
        try:
            result = evaluator.evaluate()
            self.debug(f"result {result!r}")
            return result
        except EeliosError as e:
            self.debug(f"runtime error: {e}")
            raise
        finally:
            self.close()

    def run_source(self, source: str) -> Optional[Value]:
        try:
            program = self.parse(source)
        except EeliosError:
            self.close()
            raise
        return self.run(program)


def run_program(source: str, debug_level: int = 0, console: Optional[Console] = None) -> Optional[Value]:
    """Convenience function to parse and run an Eelios program from a source string."""
    interpreter = Interpreter(debug_level=debug_level, console=console)
    return interpreter.run_source(source)


def compile_module(file_path: str, debug_level: int = 0, console: Optional[Console] = None) -> Optional[Value]:
    """Parse and run an Eelios file, returning the value it evaluated to."""
    with open(file_path, 'r', encoding='utf-8') as f:
        source = f.read()
    return run_program(source, debug_level=debug_level, console=console)
