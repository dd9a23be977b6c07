from pathlib import Path

from eelios.interpreter import parse_program, Interpreter

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_5_array_assignment(capsys):
    with open(EXAMPLES / 'program_5.ee', 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    out = capsys.readouterr().out.strip()
    assert out == 'scores: [10, 25, 30], count: 3'
