"""CLI entry point for the Uni interpreter.

Usage:
    python -m uni [-v|-vv|-vvv]                 # interactive session
    python -m uni [-v|-vv|-vvv] <program_file>
    python -m uni [-v...] --emit-ast <program_file>
    python -m uni [-v...] --ast <ast_json_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --emit-ast    Parse the given .uni file and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero.
"""

import argparse
import builtins
import json
import sys
from pathlib import Path

from . import __version__
from .ast_json import ast_to_obj, ast_from_obj
from .errors import UniError
from .interpreter import parse_program, Interpreter
from .types import to_string


def read_source(path: Path) -> str:
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(1)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def execute(interpreter: Interpreter, program) -> None:
    try:
        interpreter.run(program)
    except UniError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        interpreter.close()


def repl(debug_level: int = 0) -> None:
    """Read-eval-print loop sharing one global scope across lines."""
    print(f"Uni Version {__version__}")
    interpreter = Interpreter(debug_level=debug_level)
    try:
        while True:
            try:
                line = builtins.input('>> ')
            except EOFError:
                print()
                break
            try:
                value = interpreter.run_source(line)
            except UniError as e:
                print(f"Error: {e}", file=sys.stderr)
                continue
            print('' if value is None else to_string(value))
    finally:
        interpreter.close()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Uni language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='UNI_FILE', help='emit AST JSON for the given .uni file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='Uni program file (.uni) to execute')
    args = parser.parse_args(argv)

    # Emit AST mode
    if args.emit_ast:
        program_file = Path(args.emit_ast)
        source = read_source(program_file)
        try:
            ast_program = parse_program(source)
        except UniError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(ast_to_obj(ast_program), out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    # Execute from AST JSON
    if args.ast:
        try:
            ast_program = ast_from_obj(json.loads(read_source(Path(args.ast))))
        except (ValueError, TypeError, KeyError) as e:
            print(f"Error: invalid AST file {args.ast}: {e}", file=sys.stderr)
            sys.exit(1)
        execute(Interpreter(debug_level=args.v), ast_program)
        return

    if not args.program:
        repl(args.v)
        return

    # Statements run as they are parsed
    source = read_source(Path(args.program))
    interpreter = Interpreter(debug_level=args.v)
    try:
        interpreter.run_source(source)
    except UniError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        interpreter.close()


if __name__ == '__main__':
    main()
