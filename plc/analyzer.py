"""Static analysis for PLC.

The analyzer walks a parsed `Source` once. It resolves every name to a
binding and every expression to a type, records both on the tree, and
checks the typing rules as it goes. The first violation raises a
`PlcError` ('NameError' or 'TypeError') and analysis stops; there is no
partial result.

Globals are analyzed in declaration order, then functions in declaration
order. A function is bound before its body is analyzed, so it may call
itself, but not a function declared after it. A RETURN written directly in
a function body must match the declared return type; one nested inside
IF, SWITCH or WHILE only has its value analyzed.
"""

from __future__ import annotations

from typing import List, Optional

from .ast import (
    Source, GlobalDecl, FuncDecl, Statement, ExprStmt, VarDecl, Assign,
    IfStmt, SwitchStmt, WhileStmt, ReturnStmt, Expression, Literal, Group,
    BinaryOp, Access, Call, ListLit, annotate,
)
from .debug import Tracer
from .errors import type_error
from .parser import parse_program
from .scope import Scope
from .types import (
    Type, Variable, Function, ANY, NIL, BOOLEAN, COMPARABLE, INTEGER,
    DECIMAL, CHARACTER, STRING, INTEGER_MIN, INTEGER_MAX, DECIMAL_MAX,
    get_type, list_of, is_assignable, require_assignable,
)

AnalysisScope = Scope[Variable, Function]

LITERAL_TYPES = {
    'Nil': NIL,
    'Boolean': BOOLEAN,
    'Integer': INTEGER,
    'Decimal': DECIMAL,
    'Character': CHARACTER,
    'String': STRING,
}

NUMERIC_TYPES = (INTEGER, DECIMAL)


class Analyzer(Tracer):
    """Resolves names and types over an AST, annotating it in place."""
    def __init__(self, parent: Optional[AnalysisScope] = None, debug_level: int = 0,
                 debug_file: Optional[str] = None):
        super().__init__(debug_level, debug_file)
        self.scope: AnalysisScope = Scope(parent)
        self.scope.define_function('print', 1, Function('print', [ANY], NIL))

    def analyze(self, source: Source) -> Source:
        try:
            for global_ in source.globals:
                self.analyze_global(global_, self.scope)
            for function in source.functions:
                self.analyze_function(function, self.scope)
            self.debug(f"analyzed {len(source.globals)} globals, {len(source.functions)} functions")
            return source
        finally:
            self.close_debug()

    # Declarations

    def analyze_global(self, node: GlobalDecl, scope: AnalysisScope) -> None:
        declared: Optional[Type] = None
        if node.type_name is not None:
            declared = get_type(node.type_name)
            if node.is_list:
                declared = list_of(declared)
        elif node.value is None:
            raise type_error(f'global {node.name} needs a type or an initial value')
        if node.value is not None:
            if isinstance(node.value, ListLit):
                element = declared.element if declared is not None else None
                self.analyze_list(node.value, scope, element)
            else:
                self.analyze_expression(node.value, scope)
            if declared is None:
                declared = node.value.type
            require_assignable(declared, node.value.type)
        variable = scope.define_variable(node.name, Variable(node.name, node.mutable, declared))
        annotate(node, 'variable', variable)
        if self.debug_level >= 2:
            self.debug(f"global {node.name}: {declared}")

    def analyze_function(self, node: FuncDecl, scope: AnalysisScope) -> None:
        param_types = [get_type(p.type_name) if p.type_name is not None else ANY for p in node.params]
        return_type = get_type(node.return_type_name) if node.return_type_name is not None else NIL
        function = scope.define_function(
            node.name, len(param_types), Function(node.name, param_types, return_type))
        annotate(node, 'function', function)
        if self.debug_level >= 2:
            self.debug(f"function {node.name}({', '.join(map(str, param_types))}): {return_type}")
        body = scope.child()
        for param, param_type in zip(node.params, param_types):
            body.define_variable(param.name, Variable(param.name, False, param_type))
        for statement in node.body:
            self.analyze_statement(statement, body)
            # only returns directly in the body are checked against the signature
            if isinstance(statement, ReturnStmt):
                require_assignable(return_type, statement.value.type)

    # Statements

    def analyze_block(self, statements: List[Statement], scope: AnalysisScope) -> None:
        for statement in statements:
            self.analyze_statement(statement, scope)

    def analyze_statement(self, node: Statement, scope: AnalysisScope) -> None:
        if isinstance(node, ExprStmt):
            self.analyze_expression(node.expr, scope)
            return
        if isinstance(node, VarDecl):
            if node.type_name is None and node.value is None:
                raise type_error(f'declaration of {node.name} needs a type or an initial value')
            declared = get_type(node.type_name) if node.type_name is not None else None
            if node.value is not None:
                self.analyze_expression(node.value, scope)
                if declared is None:
                    declared = node.value.type
                require_assignable(declared, node.value.type)
            variable = scope.define_variable(node.name, Variable(node.name, True, declared))
            annotate(node, 'variable', variable)
            if self.debug_level >= 2:
                self.debug(f"declare {node.name}: {declared}")
            return
        if isinstance(node, Assign):
            if not isinstance(node.receiver, Access):
                raise type_error('assignment receiver must be a variable or list element')
            self.analyze_expression(node.receiver, scope)
            if not node.receiver.variable.mutable:
                raise type_error(f'cannot assign to immutable {node.receiver.name}')
            self.analyze_expression(node.value, scope)
            require_assignable(node.receiver.type, node.value.type)
            return
        if isinstance(node, IfStmt):
            self.analyze_expression(node.condition, scope)
            require_assignable(BOOLEAN, node.condition.type)
            if not node.then_block:
                raise type_error('IF requires at least one statement in its DO block')
            self.analyze_block(node.then_block, scope.child())
            self.analyze_block(node.else_block, scope.child())
            return
        if isinstance(node, SwitchStmt):
            self.analyze_expression(node.condition, scope)
            for case in node.cases:
                if case.value is not None:
                    self.analyze_expression(case.value, scope)
                    require_assignable(node.condition.type, case.value.type)
                self.analyze_block(case.block, scope.child())
            return
        if isinstance(node, WhileStmt):
            self.analyze_expression(node.condition, scope)
            require_assignable(BOOLEAN, node.condition.type)
            self.analyze_block(node.body, scope.child())
            return
        if isinstance(node, ReturnStmt):
            self.analyze_expression(node.value, scope)
            return
        raise NotImplementedError(f"analyze_statement: unexpected node type {type(node)}")

    # Expressions

    def analyze_expression(self, node: Expression, scope: AnalysisScope) -> Type:
        if isinstance(node, Literal):
            self.check_literal(node)
            annotate(node, 'type', LITERAL_TYPES[node.literal_type])
        elif isinstance(node, Group):
            annotate(node, 'type', self.analyze_expression(node.expr, scope))
        elif isinstance(node, BinaryOp):
            left = self.analyze_expression(node.left, scope)
            right = self.analyze_expression(node.right, scope)
            annotate(node, 'type', self.binary_result(node.op, left, right))
        elif isinstance(node, Access):
            if node.offset is not None:
                offset_type = self.analyze_expression(node.offset, scope)
                require_assignable(INTEGER, offset_type)
            variable = scope.lookup_variable(node.name)
            annotate(node, 'variable', variable)
            if node.offset is None:
                annotate(node, 'type', variable.type)
            elif variable.type.element is None:
                raise type_error(f'{node.name} of type {variable.type} cannot be indexed')
            else:
                annotate(node, 'type', variable.type.element)
        elif isinstance(node, Call):
            arg_types = [self.analyze_expression(arg, scope) for arg in node.args]
            function = scope.lookup_function(node.name, len(node.args))
            for param_type, arg_type in zip(function.param_types, arg_types):
                require_assignable(param_type, arg_type)
            annotate(node, 'function', function)
            annotate(node, 'type', function.return_type)
            if self.debug_level >= 3:
                self.debug(f"call {node.name}/{len(node.args)} -> {function.return_type}")
        elif isinstance(node, ListLit):
            self.analyze_list(node, scope, None)
        else:
            raise NotImplementedError(f"analyze_expression: unexpected node type {type(node)}")
        return node.type

    def analyze_list(self, node: ListLit, scope: AnalysisScope, element: Optional[Type]) -> Type:
        """Type a list literal.

        With a known element type every value must be assignable to it;
        otherwise the first value fixes the element type.
        """
        for value in node.values:
            value_type = self.analyze_expression(value, scope)
            if element is None:
                element = value_type
            require_assignable(element, value_type)
        annotate(node, 'type', list_of(element))
        return node.type

    def check_literal(self, node: Literal) -> None:
        if node.literal_type == 'Integer':
            if not INTEGER_MIN <= node.value <= INTEGER_MAX:
                raise type_error(f'integer literal {node.value} is out of range')
        elif node.literal_type == 'Decimal':
            if abs(node.value) > DECIMAL_MAX:
                raise type_error(f'decimal literal {node.value} is out of range')

    def binary_result(self, op: str, left: Type, right: Type) -> Type:
        if op in ('&&', '||'):
            if left is not BOOLEAN or right is not BOOLEAN:
                raise type_error(f'{op} expects Boolean operands, got {left} and {right}')
            return BOOLEAN
        if op in ('<', '>', '==', '!='):
            if not is_assignable(COMPARABLE, left) or left is not right:
                raise type_error(f'{op} expects comparable operands of the same type, got {left} and {right}')
            return BOOLEAN
        if op == '+':
            if left is STRING or right is STRING:
                return STRING
            if left in NUMERIC_TYPES and left is right:
                return left
            raise type_error(f'+ not defined for {left} and {right}')
        if op in ('-', '*', '/', '%'):
            if left not in NUMERIC_TYPES or right not in NUMERIC_TYPES:
                raise type_error(f'{op} expects numeric operands, got {left} and {right}')
            return left
        if op == '^':
            if left is not INTEGER or right is not INTEGER:
                raise type_error(f'^ expects Integer operands, got {left} and {right}')
            return INTEGER
        raise type_error(f'unknown operator {op}')


def analyze_program(source: str, debug_level: int = 0) -> Source:
    """Parse and analyze PLC source text, returning the annotated AST."""
    return Analyzer(debug_level=debug_level).analyze(parse_program(source))
