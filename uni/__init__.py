# Uni language package
# This package provides a tokenizer, parser and tree-walking interpreter for the Uni language.
__version__ = '0.1.0'

from .errors import UniError, LexerError, ParseError, RuntimeFault
from .interpreter import run_program, run_file, parse_program, Interpreter

__all__ = [
    'run_program',
    'run_file',
    'parse_program',
    'Interpreter',
    'UniError',
    'LexerError',
    'ParseError',
    'RuntimeFault',
]
