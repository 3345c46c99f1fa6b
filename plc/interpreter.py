"""Interpreter for PLC.

A tree-walking evaluator over the same AST the analyzer annotates. Values
live in a runtime scope tree that mirrors the analysis one: the root holds
globals, functions and the `print` builtin; each function call, IF/ELSE
block, SWITCH case and WHILE iteration runs in its own child scope.

The active scope is passed to every `execute`/`evaluate` call. Statement
execution returns None when it completes normally and a `ReturnSignal`
when a RETURN was executed; every block forwards a signal as soon as it
sees one, up to the enclosing function call, which unwraps it.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, List, Optional, Union

from .analyzer import Analyzer
from .ast import (
    Source, GlobalDecl, FuncDecl, FuncParam, Statement, ExprStmt, VarDecl,
    Assign, IfStmt, SwitchStmt, WhileStmt, ReturnStmt, Expression, Literal,
    Group, BinaryOp, Access, Call, ListLit,
)
from .builtin_function import BuiltinFunction
from .debug import Tracer
from .errors import ErrorVal, PlcError, runtime_error
from .parser import parse_program
from .scope import Scope
from .types import NIL_VALUE, CharVal, ListVal, is_integral, is_number, to_string, type_name


@dataclass
class Binding:
    """A variable binding holding a live value."""
    name: str
    mutable: bool
    value: Any


@dataclass
class ReturnSignal:
    """Result of executing a RETURN: carries the value up to the call boundary."""
    value: Any


class FunctionValue:
    """Represents a user-defined PLC function."""
    def __init__(self, name: str, params: List[FuncParam], body: List[Statement], scope: 'RuntimeScope'):
        self.name = name
        self.params = params
        self.body = body
        self.scope = scope  # defining scope, parent of every call scope

    @property
    def arity(self) -> int:
        return len(self.params)

    def __repr__(self) -> str:
        return f"<function {self.name}/{self.arity}>"


RuntimeFunction = Union[BuiltinFunction, FunctionValue]
RuntimeScope = Scope[Binding, RuntimeFunction]


class Interpreter(Tracer):
    """Core interpreter that executes a PLC AST."""
    def __init__(self, parent: Optional[RuntimeScope] = None, debug_level: int = 0,
                 debug_file: Optional[str] = None):
        super().__init__(debug_level, debug_file)
        self.global_scope: RuntimeScope = Scope(parent)
        self.load_builtins()

    def load_builtins(self):
        def std_print(args: List[Any]) -> Any:
            print(to_string(args[0]))
            return NIL_VALUE

        self.global_scope.define_function('print', 1, BuiltinFunction('print', 1, std_print))

    # Public API
    def run(self, source: Source) -> Any:
        """Define all globals and functions, then invoke `main/0` and return its result."""
        try:
            for global_ in source.globals:
                self.define_global(global_, self.global_scope)
            for function in source.functions:
                self.define_function(function, self.global_scope)
            main = self.global_scope.lookup_function('main', 0)
            result = self.call_function(main, [])
            self.debug(f"main returned {to_string(result)}")
            return result
        finally:
            self.close_debug()

    def define_global(self, node: GlobalDecl, scope: RuntimeScope) -> None:
        value = self.evaluate(node.value, scope) if node.value is not None else NIL_VALUE
        scope.define_variable(node.name, Binding(node.name, node.mutable, value))
        if self.debug_level >= 2:
            self.debug(f"global {node.name} = {to_string(value)}")

    def define_function(self, node: FuncDecl, scope: RuntimeScope) -> None:
        scope.define_function(node.name, len(node.params),
                              FunctionValue(node.name, node.params, node.body, scope))
        if self.debug_level >= 2:
            self.debug(f"define function {node.name}/{len(node.params)}")

    # Statements

    def execute_block(self, statements: List[Statement], scope: RuntimeScope) -> Optional[ReturnSignal]:
        for stmt in statements:
            result = self.execute(stmt, scope)
            # propagate return signals
            if isinstance(result, ReturnSignal):
                return result
        return None

    def execute(self, node: Statement, scope: RuntimeScope) -> Optional[ReturnSignal]:
        if isinstance(node, ExprStmt):
            self.evaluate(node.expr, scope)
            return None
        if isinstance(node, VarDecl):
            value = self.evaluate(node.value, scope) if node.value is not None else NIL_VALUE
            scope.define_variable(node.name, Binding(node.name, True, value))
            if self.debug_level >= 2:
                self.debug(f"declare {node.name} = {to_string(value)}")
            return None
        if isinstance(node, Assign):
            self.assign(node.receiver, self.evaluate(node.value, scope), scope)
            return None
        if isinstance(node, IfStmt):
            cond = self.require_boolean(self.evaluate(node.condition, scope), 'IF')
            if self.debug_level >= 3:
                self.debug(f"if condition -> {to_string(cond)}")
            if cond:
                return self.execute_block(node.then_block, scope.child())
            return self.execute_block(node.else_block, scope.child())
        if isinstance(node, SwitchStmt):
            cond = self.evaluate(node.condition, scope)
            for case in node.cases:
                if case.value is not None and self.equal_values(self.evaluate(case.value, scope), cond):
                    return self.execute_block(case.block, scope.child())
            for case in node.cases:
                if case.value is None:
                    return self.execute_block(case.block, scope.child())
            return None
        if isinstance(node, WhileStmt):
            while self.require_boolean(self.evaluate(node.condition, scope), 'WHILE'):
                # a fresh scope per iteration: declarations never carry over
                res = self.execute_block(node.body, scope.child())
                if isinstance(res, ReturnSignal):
                    return res
            return None
        if isinstance(node, ReturnStmt):
            return ReturnSignal(self.evaluate(node.value, scope))
        raise NotImplementedError(f"execute: unexpected node type {type(node)}")

    def assign(self, receiver: Expression, value: Any, scope: RuntimeScope) -> None:
        if not isinstance(receiver, Access):
            raise runtime_error('invalid assignment target')
        binding = scope.find_variable(receiver.name)
        if binding is None:
            raise runtime_error(f'cannot assign to undeclared variable {receiver.name}')
        if not binding.mutable:
            raise runtime_error(f'cannot assign to immutable variable {receiver.name}')
        if receiver.offset is None:
            binding.value = value
            return
        container = binding.value
        if not isinstance(container, ListVal):
            raise runtime_error(f'cannot index {type_name(container)} {receiver.name}')
        index = self.require_index(self.evaluate(receiver.offset, scope), container)
        container.items[index] = value

    # Expressions

    def evaluate(self, node: Expression, scope: RuntimeScope) -> Any:
        if isinstance(node, Literal):
            if node.literal_type == 'Nil':
                return NIL_VALUE
            if node.literal_type == 'Character':
                return CharVal(node.value)
            return node.value
        if isinstance(node, Group):
            return self.evaluate(node.expr, scope)
        if isinstance(node, BinaryOp):
            # both sides are always evaluated, left first
            left = self.evaluate(node.left, scope)
            right = self.evaluate(node.right, scope)
            return self.apply_binary_op(node.op, left, right)
        if isinstance(node, Access):
            value = scope.lookup_variable(node.name).value
            if node.offset is None:
                return value
            if not isinstance(value, ListVal):
                raise runtime_error(f'cannot index {type_name(value)} {node.name}')
            index = self.require_index(self.evaluate(node.offset, scope), value)
            return value.items[index]
        if isinstance(node, Call):
            args = [self.evaluate(arg, scope) for arg in node.args]
            func = scope.lookup_function(node.name, len(args))
            if self.debug_level >= 3:
                self.debug(f"call {node.name}({', '.join(to_string(a) for a in args)})")
            return self.call_function(func, args)
        if isinstance(node, ListLit):
            return ListVal([self.evaluate(value, scope) for value in node.values])
        raise NotImplementedError(f"evaluate: unexpected node type {type(node)}")

    def call_function(self, func: Any, args: List[Any]) -> Any:
        if isinstance(func, BuiltinFunction):
            return func.fn(args)
        if isinstance(func, FunctionValue):
            call_scope = func.scope.child()
            for param, arg in zip(func.params, args):
                call_scope.define_variable(param.name, Binding(param.name, False, arg))
            res = self.execute_block(func.body, call_scope)
            if isinstance(res, ReturnSignal):
                return res.value
            return NIL_VALUE
        raise runtime_error(f'{func!r} is not callable')

    def require_boolean(self, value: Any, construct: str) -> bool:
        if not isinstance(value, bool):
            raise runtime_error(f'{construct} condition must be Boolean, got {type_name(value)}')
        return value

    def require_index(self, index: Any, container: ListVal) -> int:
        if not is_integral(index):
            raise runtime_error(f'list index must be Integer, got {type_name(index)}')
        index = int(index)
        if index < 0 or index >= len(container.items):
            raise runtime_error(f'list index {index} out of range')
        return index

    def apply_binary_op(self, op: str, a: Any, b: Any) -> Any:
        if op == '+':
            # If either operand is string, perform concatenation
            if isinstance(a, str) or isinstance(b, str):
                return to_string(a) + to_string(b)
            if is_number(a) and is_number(b):
                return a + b
            raise runtime_error(f'unsupported + for {type_name(a)} and {type_name(b)}')
        if op in ('-', '*', '/', '%'):
            if not is_number(a) or not is_number(b):
                raise runtime_error(f'unsupported {op} for {type_name(a)} and {type_name(b)}')
            x, y = Decimal(a), Decimal(b)
            if op == '-':
                return x - y
            if op == '*':
                return x * y
            if y == 0:
                raise PlcError(ErrorVal('DivideByZero', 'division by zero'))
            return x / y if op == '/' else x % y
        if op == '^':
            if not is_integral(a) or not is_integral(b):
                raise runtime_error(f'^ expects Integer operands, got {type_name(a)} and {type_name(b)}')
            if b < 0:
                raise runtime_error('negative exponent')
            return int(a) ** int(b)
        if op in ('==', '!='):
            eq = self.equal_values(a, b)
            return eq if op == '==' else not eq
        if op in ('<', '>'):
            if not self.is_ordered(a, b):
                raise runtime_error(f'comparison not supported for {type_name(a)} and {type_name(b)}')
            if isinstance(a, CharVal):
                a, b = a.value, b.value
            return a < b if op == '<' else a > b
        if op in ('&&', '||'):
            if not isinstance(a, bool) or not isinstance(b, bool):
                raise runtime_error(f'{op} expects Boolean operands, got {type_name(a)} and {type_name(b)}')
            return (a and b) if op == '&&' else (a or b)
        raise runtime_error(f'unknown operator {op}')

    def is_ordered(self, a: Any, b: Any) -> bool:
        if is_number(a) and is_number(b):
            return True
        return isinstance(a, (str, CharVal)) and type(a) is type(b)

    def equal_values(self, a: Any, b: Any) -> bool:
        # Structural equality; integers and decimals compare by numeric value
        if is_number(a) and is_number(b):
            return a == b
        if isinstance(a, ListVal) and isinstance(b, ListVal):
            if len(a.items) != len(b.items):
                return False
            return all(self.equal_values(x, y) for x, y in zip(a.items, b.items))
        if type(a) is not type(b):
            return False
        return a == b


def run_program(source: str, debug_level: int = 0, debug_file: Optional[str] = None) -> Any:
    """Convenience function to parse, analyze and run a PLC program from source text."""
    ast_program = parse_program(source)
    Analyzer(debug_level=debug_level, debug_file=debug_file).analyze(ast_program)
    interpreter = Interpreter(debug_level=debug_level, debug_file=debug_file)
    return interpreter.run(ast_program)
