"""Abstract Syntax Tree (AST) definitions for PLC.

The parser builds these nodes once and never restructures them. The
analyzer then fills the annotation slots (`type`, `variable`, `function`)
exactly once each; the interpreter and any other consumer of an analyzed
tree only read them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Union

from .types import Function, Type, Variable


@dataclass
class Node:
    """Base class for all AST nodes."""
    pass


@dataclass
class Expression(Node):
    type: Optional[Type] = field(default=None, init=False, repr=False, compare=False)


@dataclass
class Literal(Expression):
    value: Any  # None, bool, int, Decimal or str
    literal_type: str  # 'Nil', 'Boolean', 'Integer', 'Decimal', 'Character', 'String'


@dataclass
class Group(Expression):
    expr: Expression


@dataclass
class BinaryOp(Expression):
    op: str
    left: Expression
    right: Expression


@dataclass
class Access(Expression):
    name: str
    offset: Optional[Expression] = None
    variable: Optional[Variable] = field(default=None, init=False, repr=False, compare=False)


@dataclass
class Call(Expression):
    name: str
    args: List[Expression]
    function: Optional[Function] = field(default=None, init=False, repr=False, compare=False)


@dataclass
class ListLit(Expression):
    values: List[Expression]


@dataclass
class ExprStmt(Node):
    expr: Expression


@dataclass
class VarDecl(Node):
    name: str
    type_name: Optional[str]
    value: Optional[Expression]
    variable: Optional[Variable] = field(default=None, init=False, repr=False, compare=False)


@dataclass
class Assign(Node):
    receiver: Expression
    value: Expression


@dataclass
class IfStmt(Node):
    condition: Expression
    then_block: List['Statement']
    else_block: List['Statement']


@dataclass
class Case(Node):
    value: Optional[Expression]  # None for the DEFAULT block
    block: List['Statement']


@dataclass
class SwitchStmt(Node):
    condition: Expression
    cases: List[Case]


@dataclass
class WhileStmt(Node):
    condition: Expression
    body: List['Statement']


@dataclass
class ReturnStmt(Node):
    value: Expression


Statement = Union[ExprStmt, VarDecl, Assign, IfStmt, SwitchStmt, WhileStmt, ReturnStmt]


@dataclass
class GlobalDecl(Node):
    name: str
    mutable: bool
    type_name: Optional[str]
    value: Optional[Expression]
    is_list: bool = False  # for lists, type_name names the element type
    variable: Optional[Variable] = field(default=None, init=False, repr=False, compare=False)


@dataclass
class FuncParam:
    name: str
    type_name: Optional[str] = None


@dataclass
class FuncDecl(Node):
    name: str
    params: List[FuncParam]
    return_type_name: Optional[str]
    body: List[Statement]
    function: Optional[Function] = field(default=None, init=False, repr=False, compare=False)


@dataclass
class Source(Node):
    globals: List[GlobalDecl]
    functions: List[FuncDecl]


def annotate(node: Node, slot: str, value: Any) -> None:
    """Fill an annotation slot; each slot may be written only once."""
    if getattr(node, slot) is not None:
        raise ValueError(f'{type(node).__name__}.{slot} is already resolved')
    setattr(node, slot, value)
