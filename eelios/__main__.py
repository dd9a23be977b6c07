"""CLI entry point for the Eelios interpreter.

Usage:
    python -m eelios [-v|-vv|-vvv] <program_file>
    python -m eelios [-v...] --emit-ast <program_file>
    python -m eelios [-v...] --ast <ast_json_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --emit-ast    Parse the given .ee file and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero. The value the program evaluates to, if any,
is printed once it finishes.
"""

import argparse
import json
import sys
from pathlib import Path

from .ast_json import ast_to_obj, ast_from_obj
from .errors import EeliosError, EeliosSyntaxError
from .interpreter import Interpreter
from .parser import parse_program


def read_source(path: Path) -> str:
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(1)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def report(error: EeliosError, source=None) -> None:
    kind = 'Syntax error' if isinstance(error, EeliosSyntaxError) else 'Runtime error'
    message = error.describe(source) if source is not None else str(error)
    print(f"{kind}: {message}", file=sys.stderr)
    sys.exit(1)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Eelios language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='EE_FILE', help='emit AST JSON for the given .ee file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='Eelios program file (.ee) to execute')
    args = parser.parse_args(argv)

    # Emit AST mode
    if args.emit_ast:
        program_file = Path(args.emit_ast)
        source = read_source(program_file)
        try:
            ast_program = parse_program(source)
        except EeliosError as e:
            report(e, source)
        obj = ast_to_obj(ast_program)
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(obj, out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    # Execute from AST JSON
    if args.ast:
        ast_path = Path(args.ast)
        data = json.loads(read_source(ast_path))
        ast_program = ast_from_obj(data)
        interpreter = Interpreter(debug_level=args.v)
        try:
            result = interpreter.run(ast_program)
        except EeliosError as e:
            report(e)
        if result is not None:
            print(result)
        return

    # Default: execute source file
    if not args.program:
        parser.error('missing program file; or use --emit-ast/--ast')
    source = read_source(Path(args.program))
    interpreter = Interpreter(debug_level=args.v)
    try:
        result = interpreter.run_source(source)
    except EeliosError as e:
        report(e, source)
    if result is not None:
        print(result)


if __name__ == '__main__':
    main()
