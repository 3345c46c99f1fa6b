import pytest

from plc.analyzer import Analyzer, analyze_program
from plc.ast import Literal, annotate
from plc.errors import PlcError
from plc.parser import parse_program
from plc.types import ANY, BOOLEAN, DECIMAL, INTEGER, NIL, STRING, list_of


def analysis_error(source: str) -> str:
    with pytest.raises(PlcError) as exc:
        analyze_program(source)
    return exc.value.err.name


def main_body(statements: str, returns: str = '') -> str:
    return f'FUN main(){returns} DO {statements} END'


def test_print_is_only_defined_with_one_argument():
    analyze_program(main_body('print(1);'))
    assert analysis_error(main_body('print();')) == 'NameError'
    assert analysis_error(main_body('print(1, 2);')) == 'NameError'


def test_integer_literal_range():
    analyze_program('VAL big = 2147483647; VAL small = -2147483648;')
    assert analysis_error('VAL x = 2147483648;') == 'TypeError'
    assert analysis_error('VAL x = -2147483649;') == 'TypeError'


def test_decimal_literal_range():
    analyze_program('VAL x = 1.5;')
    assert analysis_error('VAL x = 1' + '0' * 310 + '.0;') == 'TypeError'


def test_global_types():
    source = analyze_program('VAR x: Decimal = 1.0; VAL s = "a"; LIST xs: Integer = [1, 2]; VAR n: Any = 1;')
    x, s, xs, n = (g.variable for g in source.globals)
    assert x.type is DECIMAL and x.mutable
    assert s.type is STRING and not s.mutable
    assert xs.type is list_of(INTEGER)
    assert n.type is ANY


def test_global_needs_type_or_value():
    assert analysis_error('VAR x;') == 'TypeError'


def test_global_initializer_must_be_assignable():
    assert analysis_error('VAR x: Integer = "one";') == 'TypeError'
    assert analysis_error('LIST xs: Integer = [1, "two"];') == 'TypeError'
    assert analysis_error('VAL xs = [1, 2.0];') == 'TypeError'
    assert analysis_error('VAR x: Widget = 1;') == 'NameError'


def test_string_concatenation_and_addition():
    source = analyze_program(main_body('LET a = "1" + "1"; LET b = 1 + 1; LET c = "n" + 1;'))
    a, b, c = source.functions[0].body
    assert a.value.type is STRING
    assert b.value.type is INTEGER
    assert c.value.type is STRING
    assert analysis_error(main_body('LET x = 1 + 1.0;')) == 'TypeError'
    assert analysis_error(main_body('LET x = TRUE + 1;')) == 'TypeError'


def test_arithmetic_and_logic():
    source = analyze_program(main_body('LET a = 2 ^ 3; LET b = 1.5 * 2.0; LET c = TRUE && FALSE;'))
    a, b, c = source.functions[0].body
    assert a.value.type is INTEGER
    assert b.value.type is DECIMAL
    assert c.value.type is BOOLEAN
    assert analysis_error(main_body('LET x = 2.0 ^ 3;')) == 'TypeError'
    assert analysis_error(main_body('LET x = 1 || TRUE;')) == 'TypeError'
    assert analysis_error(main_body('LET x = "a" * 2;')) == 'TypeError'


def test_comparisons_require_same_comparable_type():
    analyze_program(main_body("LET a = 1 < 2; LET b = 'a' == 'b'; LET c = \"x\" != \"y\";"))
    assert analysis_error(main_body('LET x = 1 < 2.0;')) == 'TypeError'
    assert analysis_error(main_body('LET x = TRUE == TRUE;')) == 'TypeError'
    assert analysis_error(main_body('LET x = NIL == NIL;')) == 'TypeError'


def test_declaration_needs_type_or_value():
    assert analysis_error(main_body('LET y;')) == 'TypeError'
    analyze_program(main_body('LET y: Integer;'))


def test_undefined_names():
    assert analysis_error(main_body('print(x);')) == 'NameError'
    assert analysis_error(main_body('f();')) == 'NameError'


def test_functions_see_themselves_but_not_later_functions():
    analyze_program('FUN loop(n: Integer): Integer DO RETURN loop(n); END')
    assert analysis_error('FUN main() DO helper(); END FUN helper() DO END') == 'NameError'
    analyze_program('FUN helper() DO END FUN main() DO helper(); END')


def test_call_arguments_are_checked():
    analyze_program('FUN f(a: Integer, b) DO END FUN main() DO f(1, "anything"); END')
    assert analysis_error('FUN f(a: Integer) DO END FUN main() DO f("1"); END') == 'TypeError'


def test_call_types_are_return_types():
    source = analyze_program('FUN f(): String DO RETURN "s"; END FUN g() DO END FUN main() DO f(); g(); END')
    first, second = source.functions[2].body
    assert first.expr.type is STRING
    assert second.expr.type is NIL
    assert first.expr.function is source.functions[0].function


def test_return_types():
    analyze_program(main_body('RETURN 1;', ': Integer'))
    analyze_program(main_body('RETURN NIL;'))
    analyze_program(main_body('RETURN 1;', ': Any'))
    assert analysis_error(main_body('RETURN "s";', ': Integer')) == 'TypeError'
    assert analysis_error(main_body('RETURN 1;')) == 'TypeError'
    assert analysis_error(main_body('print(1); RETURN "late";', ': Integer')) == 'TypeError'


def test_nested_returns_only_analyze_their_value():
    analyze_program(main_body('IF TRUE DO RETURN 1; ELSE RETURN 2; END', ': Integer'))
    analyze_program(main_body('WHILE TRUE DO RETURN 5; END'))
    analyze_program(main_body('IF TRUE DO RETURN 1.0; END', ': Integer'))
    analyze_program(main_body('SWITCH 1 DEFAULT RETURN "s"; END'))
    assert analysis_error(main_body('WHILE TRUE DO RETURN missing; END')) == 'NameError'
    assert analysis_error(main_body('IF TRUE DO RETURN 1 + "a" * 2; END')) == 'TypeError'


def test_any_expression_is_a_statement():
    source = analyze_program('VAL x = 1; FUN main() DO x; 1 + 2; END')
    assert source.functions[0].body[1].expr.type is INTEGER


def test_assignment_rules():
    analyze_program('VAR x = 1; FUN main() DO x = 2; END')
    assert analysis_error('VAL x = 1; FUN main() DO x = 2; END') == 'TypeError'
    assert analysis_error('VAR x = 1; FUN main() DO x = "2"; END') == 'TypeError'
    assert analysis_error('FUN f(a) DO a = 1; END') == 'TypeError'
    assert analysis_error(main_body('f() = 1;')) == 'TypeError'
    analyze_program(main_body('LET a: Any = 1; a = "now a string";'))


def test_list_access():
    source = analyze_program('LIST xs: String = ["a"]; FUN main() DO LET s = xs[0]; xs[0] = "b"; END')
    declaration = source.functions[0].body[0]
    assert declaration.value.type is STRING
    assert analysis_error('LIST xs: String = ["a"]; FUN main() DO LET s = xs["0"]; END') == 'TypeError'
    assert analysis_error('VAR x = 1; FUN main() DO LET s = x[0]; END') == 'TypeError'
    assert analysis_error('LIST xs: String = ["a"]; FUN main() DO xs[0] = 1; END') == 'TypeError'


def test_conditions_must_be_boolean():
    assert analysis_error(main_body('IF 1 DO print(1); END')) == 'TypeError'
    assert analysis_error(main_body('WHILE "yes" DO END')) == 'TypeError'


def test_if_needs_a_statement():
    assert analysis_error(main_body('IF TRUE DO ELSE print(1); END')) == 'TypeError'


def test_switch_cases_must_match_condition():
    analyze_program(main_body('SWITCH 1 CASE 1: print(1); DEFAULT print(0); END'))
    assert analysis_error(main_body('SWITCH 1 CASE "1": print(1); DEFAULT print(0); END')) == 'TypeError'


def test_block_scopes_do_not_leak():
    assert analysis_error(main_body('WHILE FALSE DO LET z = 1; END print(z);')) == 'NameError'
    assert analysis_error(main_body('IF TRUE DO LET z = 1; END print(z);')) == 'NameError'
    assert analysis_error(main_body('SWITCH 1 DEFAULT LET z = 1; END print(z);')) == 'NameError'


def test_parameters_default_to_any():
    source = analyze_program('FUN f(a, b: Integer) DO END')
    function = source.functions[0].function
    assert function.param_types == [ANY, INTEGER]
    assert function.return_type is NIL
    assert function.arity == 2


def test_annotations_are_written_once():
    node = Literal(1, 'Integer')
    annotate(node, 'type', INTEGER)
    with pytest.raises(ValueError):
        annotate(node, 'type', INTEGER)


def test_analyzing_twice_is_rejected():
    source = analyze_program('VAL x = 1;')
    with pytest.raises(ValueError):
        Analyzer().analyze(source)


def test_debug_trace(tmp_path):
    trace = tmp_path / 'trace.txt'
    Analyzer(debug_level=2, debug_file=str(trace)).analyze(parse_program('VAL x = 1; FUN main() DO END'))
    lines = trace.read_text(encoding='utf-8').splitlines()
    assert 'global x: Integer' in lines
    assert 'function main(): Nil' in lines
    assert lines[-1] == 'analyzed 1 globals, 1 functions'


def test_main_signature_is_resolved():
    source = analyze_program('VAL x: Integer = 1; FUN main(): Integer DO RETURN x; END')
    assert source.functions[0].function.return_type is INTEGER
    assert source.functions[0].body[0].value.variable is source.globals[0].variable


def test_untyped_uninitialized_declaration_fails_before_return():
    assert analysis_error('FUN main(): Integer DO LET y; RETURN y; END') == 'TypeError'
