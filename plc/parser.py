"""Parser for PLC.

A recursive-descent parser: each rule of the grammar has its own method and
references to other rules are calls to their methods. Binary operator tiers
fold left-associatively into `BinaryOp` chains. Like the lexer, the parser
works through `peek`/`match` helpers, except that a pattern is either a
`TokenType` (matching the token's type) or a string (matching the token's
literal text).

The `parse_program` function is the public entry point and returns a
`Source` AST node representing the entire program.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional, Union

from .ast import (
    Source, GlobalDecl, FuncParam, FuncDecl, Statement, ExprStmt, VarDecl,
    Assign, IfStmt, SwitchStmt, Case, WhileStmt, ReturnStmt, Expression,
    Literal, Group, BinaryOp, Access, Call, ListLit,
)
from .errors import ParseError
from .lexer import Token, TokenType, tokenize

Pattern = Union[TokenType, str]

ESCAPES = {
    'b': '\b',
    'n': '\n',
    'r': '\r',
    't': '\t',
    "'": "'",
    '"': '"',
    '\\': '\\',
}

BLOCK_END = ('END', 'ELSE', 'CASE', 'DEFAULT')


class Parser:
    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0

    # Token stream helpers

    def peek(self, *patterns: Pattern) -> bool:
        for i, pattern in enumerate(patterns):
            if self.pos + i >= len(self.tokens):
                return False
            token = self.tokens[self.pos + i]
            if isinstance(pattern, TokenType):
                if token.type != pattern:
                    return False
            elif token.literal != pattern:
                return False
        return True

    def match(self, *patterns: Pattern) -> bool:
        if self.peek(*patterns):
            self.pos += len(patterns)
            return True
        return False

    def previous(self) -> Token:
        return self.tokens[self.pos - 1]

    def current_offset(self) -> int:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos].offset
        if self.tokens:
            last = self.tokens[-1]
            return last.offset + len(last.literal)
        return 0

    def error(self, message: str) -> ParseError:
        if self.pos < len(self.tokens):
            message = f"{message}, got {self.tokens[self.pos].literal!r}"
        else:
            message = f"{message}, got end of input"
        return ParseError(message, self.current_offset())

    def expect(self, pattern: Pattern, what: Optional[str] = None) -> Token:
        if not self.match(pattern):
            if what is None:
                what = pattern.value.lower() if isinstance(pattern, TokenType) else repr(pattern)
            raise self.error(f"expected {what}")
        return self.previous()

    # Declarations

    def parse_source(self) -> Source:
        globals_: List[GlobalDecl] = []
        functions: List[FuncDecl] = []
        while self.peek('LIST') or self.peek('VAR') or self.peek('VAL'):
            globals_.append(self.parse_global())
        while self.peek('FUN'):
            functions.append(self.parse_function())
        if self.pos < len(self.tokens):
            raise self.error("expected global or function declaration")
        return Source(globals_, functions)

    def parse_global(self) -> GlobalDecl:
        keyword = self.tokens[self.pos].literal
        self.pos += 1
        name = self.expect(TokenType.IDENTIFIER, 'global name').literal
        type_name: Optional[str] = None
        if self.match(':'):
            type_name = self.expect(TokenType.IDENTIFIER, 'type name').literal
        value: Optional[Expression] = None
        is_list = keyword == 'LIST'
        if self.match('='):
            if self.peek('['):
                value = self.parse_list_literal()
                is_list = True
            else:
                value = self.parse_expression()
        self.expect(';')
        return GlobalDecl(name, keyword != 'VAL', type_name, value, is_list)

    def parse_list_literal(self) -> ListLit:
        self.expect('[')
        values = [self.parse_expression()]
        while self.match(','):
            values.append(self.parse_expression())
        self.expect(']')
        return ListLit(values)

    def parse_function(self) -> FuncDecl:
        self.expect('FUN')
        name = self.expect(TokenType.IDENTIFIER, 'function name').literal
        self.expect('(')
        params: List[FuncParam] = []
        if not self.peek(')'):
            params.append(self.parse_param())
            while self.match(','):
                params.append(self.parse_param())
        self.expect(')')
        return_type_name: Optional[str] = None
        if self.match(':'):
            return_type_name = self.expect(TokenType.IDENTIFIER, 'return type name').literal
        self.expect('DO')
        body = self.parse_block()
        self.expect('END')
        return FuncDecl(name, params, return_type_name, body)

    def parse_param(self) -> FuncParam:
        name = self.expect(TokenType.IDENTIFIER, 'parameter name').literal
        type_name: Optional[str] = None
        if self.match(':'):
            type_name = self.expect(TokenType.IDENTIFIER, 'type name').literal
        return FuncParam(name, type_name)

    # Statements

    def parse_block(self) -> List[Statement]:
        statements: List[Statement] = []
        while self.pos < len(self.tokens) and not any(self.peek(word) for word in BLOCK_END):
            statements.append(self.parse_statement())
        return statements

    def parse_statement(self) -> Statement:
        if self.peek('LET'):
            return self.parse_declaration_statement()
        if self.peek('IF'):
            return self.parse_if_statement()
        if self.peek('SWITCH'):
            return self.parse_switch_statement()
        if self.peek('WHILE'):
            return self.parse_while_statement()
        if self.peek('RETURN'):
            return self.parse_return_statement()
        expr = self.parse_expression()
        if self.match('='):
            value = self.parse_expression()
            self.expect(';')
            return Assign(expr, value)
        self.expect(';')
        return ExprStmt(expr)

    def parse_declaration_statement(self) -> VarDecl:
        self.expect('LET')
        name = self.expect(TokenType.IDENTIFIER, 'variable name').literal
        type_name: Optional[str] = None
        if self.match(':'):
            type_name = self.expect(TokenType.IDENTIFIER, 'type name').literal
        value: Optional[Expression] = None
        if self.match('='):
            value = self.parse_expression()
        self.expect(';')
        return VarDecl(name, type_name, value)

    def parse_if_statement(self) -> IfStmt:
        self.expect('IF')
        condition = self.parse_expression()
        self.expect('DO')
        then_block = self.parse_block()
        else_block: List[Statement] = []
        if self.match('ELSE'):
            else_block = self.parse_block()
        self.expect('END')
        return IfStmt(condition, then_block, else_block)

    def parse_switch_statement(self) -> SwitchStmt:
        self.expect('SWITCH')
        condition = self.parse_expression()
        cases: List[Case] = []
        while self.peek('CASE'):
            cases.append(self.parse_case_statement())
        cases.append(self.parse_case_statement())
        self.expect('END')
        return SwitchStmt(condition, cases)

    def parse_case_statement(self) -> Case:
        if self.match('CASE'):
            value = self.parse_expression()
            self.expect(':')
            return Case(value, self.parse_block())
        self.expect('DEFAULT')
        return Case(None, self.parse_block())

    def parse_while_statement(self) -> WhileStmt:
        self.expect('WHILE')
        condition = self.parse_expression()
        self.expect('DO')
        body = self.parse_block()
        self.expect('END')
        return WhileStmt(condition, body)

    def parse_return_statement(self) -> ReturnStmt:
        self.expect('RETURN')
        value = self.parse_expression()
        self.expect(';')
        return ReturnStmt(value)

    # Expressions

    def parse_expression(self) -> Expression:
        return self.parse_logical_expression()

    def parse_logical_expression(self) -> Expression:
        node = self.parse_comparison_expression()
        while self.match('&&') or self.match('||'):
            op = self.previous().literal
            node = BinaryOp(op, node, self.parse_comparison_expression())
        return node

    def parse_comparison_expression(self) -> Expression:
        node = self.parse_additive_expression()
        while self.match('<') or self.match('>') or self.match('==') or self.match('!='):
            op = self.previous().literal
            node = BinaryOp(op, node, self.parse_additive_expression())
        return node

    def parse_additive_expression(self) -> Expression:
        node = self.parse_multiplicative_expression()
        while self.match('+') or self.match('-'):
            op = self.previous().literal
            node = BinaryOp(op, node, self.parse_multiplicative_expression())
        return node

    def parse_multiplicative_expression(self) -> Expression:
        node = self.parse_primary_expression()
        while self.match('*') or self.match('/') or self.match('%') or self.match('^'):
            op = self.previous().literal
            node = BinaryOp(op, node, self.parse_primary_expression())
        return node

    def parse_primary_expression(self) -> Expression:
        if self.match('NIL'):
            return Literal(None, 'Nil')
        if self.match('TRUE'):
            return Literal(True, 'Boolean')
        if self.match('FALSE'):
            return Literal(False, 'Boolean')
        if self.match(TokenType.INTEGER):
            return Literal(int(self.previous().literal), 'Integer')
        if self.match(TokenType.DECIMAL):
            return Literal(Decimal(self.previous().literal), 'Decimal')
        if self.match(TokenType.CHARACTER):
            return Literal(self.unescape(self.previous()), 'Character')
        if self.match(TokenType.STRING):
            return Literal(self.unescape(self.previous()), 'String')
        if self.match('('):
            expr = self.parse_expression()
            self.expect(')')
            return Group(expr)
        if self.match(TokenType.IDENTIFIER):
            return self.parse_identifier_expression(self.previous().literal)
        raise self.error("expected expression")

    def parse_identifier_expression(self, name: str) -> Expression:
        if self.match('('):
            args: List[Expression] = []
            if not self.peek(')'):
                args.append(self.parse_expression())
                while self.match(','):
                    args.append(self.parse_expression())
            self.expect(')')
            return Call(name, args)
        if self.match('['):
            offset = self.parse_expression()
            self.expect(']')
            return Access(name, offset)
        return Access(name)

    def unescape(self, token: Token) -> str:
        """Strip the quotes from a character/string token and resolve escapes."""
        body = token.literal[1:-1]
        chars: List[str] = []
        i = 0
        while i < len(body):
            ch = body[i]
            if ch == '\\':
                i += 1
                if i >= len(body) or body[i] not in ESCAPES:
                    raise ParseError('invalid escape sequence', token.offset)
                ch = ESCAPES[body[i]]
            chars.append(ch)
            i += 1
        return ''.join(chars)


def parse_program(source: str) -> Source:
    """Parse the given source code into a Source AST."""
    return Parser(tokenize(source)).parse_source()
