"""Tokenizer for PLC source text.

The lexer walks the source one character at a time. `peek` checks the
upcoming characters against one single-character pattern per position
without consuming anything; `match` performs the same check and advances
past the characters on success. Every token records the offset of its
first character, so error messages and later phases can point back into
the source.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import List

from .errors import LexError


class TokenType(enum.Enum):
    IDENTIFIER = 'IDENTIFIER'
    INTEGER = 'INTEGER'
    DECIMAL = 'DECIMAL'
    CHARACTER = 'CHARACTER'
    STRING = 'STRING'
    OPERATOR = 'OPERATOR'


@dataclass(frozen=True)
class Token:
    type: TokenType
    literal: str
    offset: int


ESCAPE_CHARS = "[bnrt'\"\\\\]"
TWO_CHAR_OPERATORS = ('!=', '==', '&&', '||')


class Lexer:
    def __init__(self, source: str):
        self.source = source
        self.index = 0
        self.start = 0

    def lex(self) -> List[Token]:
        tokens: List[Token] = []
        while self.index < len(self.source):
            if self.source[self.index].isspace():
                self.index += 1
                continue
            self.start = self.index
            tokens.append(self.lex_token())
        return tokens

    def lex_token(self) -> Token:
        if self.peek('[A-Za-z@_]'):
            return self.lex_identifier()
        if self.peek('[0-9]') or self.peek('-', '[0-9]'):
            return self.lex_number()
        if self.peek("'"):
            return self.lex_character()
        if self.peek('"'):
            return self.lex_string()
        return self.lex_operator()

    def lex_identifier(self) -> Token:
        self.match('[A-Za-z@_]')
        while self.match('[A-Za-z0-9_-]'):
            pass
        return self.emit(TokenType.IDENTIFIER)

    def lex_number(self) -> Token:
        self.match('-')
        # a leading zero is a complete integer part on its own
        if not self.match('0'):
            self.match('[1-9]')
            while self.match('[0-9]'):
                pass
        if self.peek('\\.', '[0-9]'):
            self.match('\\.')
            while self.match('[0-9]'):
                pass
            return self.emit(TokenType.DECIMAL)
        return self.emit(TokenType.INTEGER)

    def lex_character(self) -> Token:
        self.match("'")
        if self.peek('\\\\'):
            self.lex_escape()
        elif not self.match('[^\\\\\n\r]'):
            raise LexError('invalid character literal', self.index)
        if not self.match("'"):
            raise LexError('unterminated character literal', self.index)
        return self.emit(TokenType.CHARACTER)

    def lex_string(self) -> Token:
        self.match('"')
        while not self.match('"'):
            if self.peek('\\\\'):
                self.lex_escape()
            elif not self.match('[^\\\\"\n\r]'):
                raise LexError('unterminated string literal', self.index)
        return self.emit(TokenType.STRING)

    def lex_escape(self) -> None:
        self.match('\\\\')
        if not self.match(ESCAPE_CHARS):
            raise LexError('invalid escape sequence', self.index)

    def lex_operator(self) -> Token:
        for op in TWO_CHAR_OPERATORS:
            if self.match(re.escape(op[0]), re.escape(op[1])):
                return self.emit(TokenType.OPERATOR)
        self.index += 1
        return self.emit(TokenType.OPERATOR)

    def peek(self, *patterns: str) -> bool:
        """Check the next characters against one pattern per position."""
        for i, pattern in enumerate(patterns):
            if self.index + i >= len(self.source):
                return False
            if not re.fullmatch(pattern, self.source[self.index + i]):
                return False
        return True

    def match(self, *patterns: str) -> bool:
        """Like `peek`, but advance past the characters on success."""
        if self.peek(*patterns):
            self.index += len(patterns)
            return True
        return False

    def emit(self, token_type: TokenType) -> Token:
        return Token(token_type, self.source[self.start:self.index], self.start)


def tokenize(source: str) -> List[Token]:
    """Convert source code into a list of tokens."""
    return Lexer(source).lex()
