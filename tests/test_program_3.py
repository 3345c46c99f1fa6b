from pathlib import Path

from plc.interpreter import run_program

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_3(capsys):
    with open(EXAMPLES / 'program_3.plc', 'r', encoding='utf-8') as f:
        source = f.read()
    result = run_program(source)
    out = capsys.readouterr().out.strip()
    assert out == 'total: 14'
    assert result == 14
