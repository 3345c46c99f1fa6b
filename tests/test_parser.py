from decimal import Decimal

import pytest

from plc.ast import (
    Source, GlobalDecl, FuncParam, FuncDecl, ExprStmt, VarDecl, Assign,
    IfStmt, SwitchStmt, Case, WhileStmt, ReturnStmt, Literal, Group,
    BinaryOp, Access, Call, ListLit,
)
from plc.errors import LexError, ParseError
from plc.lexer import Token, TokenType
from plc.parser import Parser, parse_program


def body_of(statements: str):
    """Parse `statements` as the body of `main` and return it."""
    return parse_program(f'FUN main() DO {statements} END').functions[0].body


def expr_of(expression: str):
    return body_of(f'{expression};')[0].expr


def test_empty_program():
    assert parse_program('') == Source([], [])


def test_globals():
    source = parse_program('VAR x: Integer = 1; VAL name = "n"; LIST xs: Decimal = [1.5, 2.0]; VAR y: Boolean;')
    assert source.globals == [
        GlobalDecl('x', True, 'Integer', Literal(1, 'Integer')),
        GlobalDecl('name', False, None, Literal('n', 'String')),
        GlobalDecl('xs', True, 'Decimal',
                   ListLit([Literal(Decimal('1.5'), 'Decimal'), Literal(Decimal('2.0'), 'Decimal')]), True),
        GlobalDecl('y', True, 'Boolean', None),
    ]


def test_bracketed_initializer_marks_a_list():
    decl = parse_program('VAL xs = [1];').globals[0]
    assert decl.is_list
    assert not decl.mutable


def test_function_signature():
    function = parse_program('FUN add(a: Integer, b): Integer DO RETURN a + b; END').functions[0]
    assert function == FuncDecl(
        'add',
        [FuncParam('a', 'Integer'), FuncParam('b')],
        'Integer',
        [ReturnStmt(BinaryOp('+', Access('a'), Access('b')))],
    )


def test_statements():
    assert body_of('LET x: Integer = 1; LET y; x = 2; xs[0] = x; f(x, 1);') == [
        VarDecl('x', 'Integer', Literal(1, 'Integer')),
        VarDecl('y', None, None),
        Assign(Access('x'), Literal(2, 'Integer')),
        Assign(Access('xs', Literal(0, 'Integer')), Access('x')),
        ExprStmt(Call('f', [Access('x'), Literal(1, 'Integer')])),
    ]


def test_if_else():
    assert body_of('IF TRUE DO f(); ELSE g(); END') == [
        IfStmt(Literal(True, 'Boolean'), [ExprStmt(Call('f', []))], [ExprStmt(Call('g', []))]),
    ]


def test_while():
    assert body_of('WHILE x < 3 DO x = x + 1; END') == [
        WhileStmt(
            BinaryOp('<', Access('x'), Literal(3, 'Integer')),
            [Assign(Access('x'), BinaryOp('+', Access('x'), Literal(1, 'Integer')))],
        ),
    ]


def test_switch_default_is_last_case():
    statement = body_of("SWITCH c CASE 'a': f(); CASE 'b': DEFAULT g(); END")[0]
    assert statement == SwitchStmt(Access('c'), [
        Case(Literal('a', 'Character'), [ExprStmt(Call('f', []))]),
        Case(Literal('b', 'Character'), []),
        Case(None, [ExprStmt(Call('g', []))]),
    ])


def test_switch_requires_default():
    with pytest.raises(ParseError):
        body_of('SWITCH x CASE 1: f(); END')


def test_literals():
    assert expr_of('NIL') == Literal(None, 'Nil')
    assert expr_of('FALSE') == Literal(False, 'Boolean')
    assert expr_of('-12') == Literal(-12, 'Integer')
    assert expr_of('0.25') == Literal(Decimal('0.25'), 'Decimal')
    assert expr_of("'\\''") == Literal("'", 'Character')
    assert expr_of('"a\\nb\\\\"') == Literal('a\nb\\', 'String')


def test_precedence():
    assert expr_of('1 + 2 * 3') == BinaryOp(
        '+', Literal(1, 'Integer'), BinaryOp('*', Literal(2, 'Integer'), Literal(3, 'Integer')))
    assert expr_of('a < b + 1 && c') == BinaryOp(
        '&&',
        BinaryOp('<', Access('a'), BinaryOp('+', Access('b'), Literal(1, 'Integer'))),
        Access('c'),
    )


def test_left_associativity():
    assert expr_of('a - b - c') == BinaryOp('-', BinaryOp('-', Access('a'), Access('b')), Access('c'))
    assert expr_of('a && b || c') == BinaryOp('||', BinaryOp('&&', Access('a'), Access('b')), Access('c'))
    assert expr_of('a % b ^ c') == BinaryOp('^', BinaryOp('%', Access('a'), Access('b')), Access('c'))


def test_group():
    assert expr_of('(1 + 2) * 3') == BinaryOp(
        '*', Group(BinaryOp('+', Literal(1, 'Integer'), Literal(2, 'Integer'))), Literal(3, 'Integer'))


def test_missing_semicolon_points_at_next_token():
    with pytest.raises(ParseError) as exc:
        parse_program('FUN main() DO print(1) END')
    assert exc.value.offset == 23
    assert "expected ';'" in exc.value.message


def test_error_at_end_of_input():
    with pytest.raises(ParseError) as exc:
        parse_program('VAR x = 1')
    assert exc.value.offset == 9
    assert 'end of input' in exc.value.message


def test_globals_must_precede_functions():
    with pytest.raises(ParseError):
        parse_program('FUN main() DO END VAR x = 1;')


def test_missing_expression():
    with pytest.raises(ParseError) as exc:
        parse_program('VAR x = ;')
    assert exc.value.offset == 8


def test_lex_errors_surface_from_parse_program():
    with pytest.raises(LexError):
        parse_program("VAL c = '\\x';")


def test_unescape_rejects_unknown_escapes_in_tokens():
    tokens = [
        Token(TokenType.IDENTIFIER, 'VAL', 0),
        Token(TokenType.IDENTIFIER, 's', 4),
        Token(TokenType.OPERATOR, '=', 6),
        Token(TokenType.STRING, '"a\\q"', 8),
        Token(TokenType.OPERATOR, ';', 13),
    ]
    with pytest.raises(ParseError) as exc:
        Parser(tokens).parse_source()
    assert exc.value.message == 'invalid escape sequence'
    assert exc.value.offset == 8
