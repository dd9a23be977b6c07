import builtins
from pathlib import Path

from eelios.interpreter import parse_program, Interpreter

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_7_input(monkeypatch, capsys):
    monkeypatch.setattr(builtins, 'input', lambda prompt='': 'Ada')
    with open(EXAMPLES / 'program_7.ee', 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    out = capsys.readouterr().out.strip()
    assert out == 'What is your name?\nHello, Ada!'
