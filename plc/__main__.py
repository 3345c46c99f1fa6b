"""CLI entry point for the PLC interpreter.

Usage:
    python -m plc [-v|-vv|-vvv] <program_file>
    python -m plc [-v...] --check <program_file>
    python -m plc [-v...] --emit-ast <program_file>
    python -m plc [-v...] --ast <ast_json_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --check       Parse and analyze the program without running it
  --emit-ast    Parse the given .plc file and emit an AST JSON file
  --ast         Analyze and execute a previously emitted AST JSON file

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero. When a program runs, the process exits with
the integer returned by `main` (0 when `main` returns anything else).
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Optional

from .analyzer import Analyzer
from .ast import Source
from .ast_json import ast_to_obj, ast_from_obj
from .errors import LexError, ParseError, PlcError
from .interpreter import Interpreter
from .parser import parse_program

DEBUG_FILE = 'debug.txt'


def read_file(path: Path) -> str:
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(1)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def exit_code(result: Any) -> int:
    if isinstance(result, int) and not isinstance(result, bool):
        return result
    return 0


def analyze_and_run(ast_program: Source, debug_level: int, debug_file: Optional[str]) -> int:
    Analyzer(debug_level=debug_level, debug_file=debug_file).analyze(ast_program)
    interpreter = Interpreter(debug_level=debug_level, debug_file=debug_file)
    return exit_code(interpreter.run(ast_program))


def main(argv: Optional[list] = None) -> None:
    parser = argparse.ArgumentParser(description="PLC language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--check', metavar='PLC_FILE', help='parse and analyze the given .plc file')
    group.add_argument('--emit-ast', metavar='PLC_FILE', help='emit AST JSON for the given .plc file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='PLC program file (.plc) to execute')
    args = parser.parse_args(argv)

    debug_file: Optional[str] = None
    if args.v > 0:
        debug_file = DEBUG_FILE
        # start every run with an empty trace
        open(debug_file, 'w', encoding='utf-8').close()

    try:
        # Check mode
        if args.check:
            ast_program = parse_program(read_file(Path(args.check)))
            Analyzer(debug_level=args.v, debug_file=debug_file).analyze(ast_program)
            print('ok')
            return

        # Emit AST mode
        if args.emit_ast:
            program_file = Path(args.emit_ast)
            ast_program = parse_program(read_file(program_file))
            out_path = program_file.with_name(program_file.name + '.ast.json')
            with open(out_path, 'w', encoding='utf-8') as out:
                json.dump(ast_to_obj(ast_program), out, ensure_ascii=False, indent=2)
            print(str(out_path))
            return

        # Execute from AST JSON
        if args.ast:
            ast_path = Path(args.ast)
            data = json.loads(read_file(ast_path))
            sys.exit(analyze_and_run(ast_from_obj(data), args.v, debug_file))

        # Default: execute source file
        if not args.program:
            parser.error('missing program file; or use --check/--emit-ast/--ast')
        source = read_file(Path(args.program))
        sys.exit(analyze_and_run(parse_program(source), args.v, debug_file))
    except (LexError, ParseError) as e:
        print(f"{type(e).__name__}: {e}", file=sys.stderr)
        sys.exit(1)
    except PlcError as e:
        print(f"{e.err.name}: {e.err.message}", file=sys.stderr)
        sys.exit(1)
    except (ValueError, TypeError) as e:
        # malformed AST JSON
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
