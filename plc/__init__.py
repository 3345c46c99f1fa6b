# PLC language package
# This package provides a lexer, parser, static analyzer and interpreter for PLC.
from .analyzer import Analyzer, analyze_program
from .errors import ErrorVal, LexError, ParseError, PlcError
from .interpreter import Interpreter, run_program
from .lexer import tokenize
from .parser import parse_program

__all__ = [
    'tokenize',
    'parse_program',
    'analyze_program',
    'run_program',
    'Analyzer',
    'Interpreter',
    'ErrorVal',
    'PlcError',
    'LexError',
    'ParseError',
]
