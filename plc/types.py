"""Type definitions and helpers for PLC.

This module defines the nominal type model used by the analyzer and the
value classes used by the interpreter. Every type owns a defining scope;
nesting of those scopes encodes the "is-a" relation, so a type is
assignable to another exactly when the target's scope encloses its own.
It also provides the helpers for converting runtime values to their
textual form.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional
import sys

from .errors import name_error, type_error
from .scope import Scope


@dataclass(eq=False)
class Type:
    """A nominal PLC type.

    Types compare by identity. `element` is set only for list types and
    names the type of their elements.
    """
    name: str
    scope: Scope
    element: Optional['Type'] = None

    def __repr__(self) -> str:
        return self.name


ANY = Type('Any', Scope())
NIL = Type('Nil', Scope(ANY.scope))
BOOLEAN = Type('Boolean', Scope(ANY.scope))
COMPARABLE = Type('Comparable', Scope(ANY.scope))
INTEGER = Type('Integer', Scope(COMPARABLE.scope))
DECIMAL = Type('Decimal', Scope(COMPARABLE.scope))
CHARACTER = Type('Character', Scope(COMPARABLE.scope))
STRING = Type('String', Scope(COMPARABLE.scope))

BUILTIN_TYPES: Dict[str, Type] = {
    t.name: t for t in (ANY, NIL, BOOLEAN, COMPARABLE, INTEGER, DECIMAL, CHARACTER, STRING)
}

_LIST_TYPES: Dict[Type, Type] = {}

INTEGER_MIN = -2 ** 31
INTEGER_MAX = 2 ** 31 - 1
DECIMAL_MAX = Decimal(sys.float_info.max)


def get_type(name: str) -> Type:
    """Resolve a type name written in source code."""
    if name in BUILTIN_TYPES:
        return BUILTIN_TYPES[name]
    raise name_error(f'unknown type {name}')


def list_of(element: Type) -> Type:
    """Return the (unique) list type with the given element type.

    List types are invariant and all sit directly below Any.
    """
    if element not in _LIST_TYPES:
        _LIST_TYPES[element] = Type(f'List<{element.name}>', Scope(ANY.scope), element)
    return _LIST_TYPES[element]


def is_assignable(target: Type, source: Type) -> bool:
    return source.scope.is_within(target.scope)


def require_assignable(target: Type, source: Type) -> None:
    if not is_assignable(target, source):
        raise type_error(f'{source} not assignable to {target}')


@dataclass
class Variable:
    """A variable binding produced by analysis."""
    name: str
    mutable: bool
    type: Type


@dataclass
class Function:
    """A function binding produced by analysis."""
    name: str
    param_types: List[Type]
    return_type: Type

    @property
    def arity(self) -> int:
        return len(self.param_types)


@dataclass(frozen=True)
class NilVal:
    """Marker object for the PLC `NIL` value."""
    def __repr__(self) -> str:
        return 'NIL'


NIL_VALUE = NilVal()


@dataclass(frozen=True)
class CharVal:
    """A PLC character. Kept apart from `str` so that `+` does not treat it as a string."""
    value: str

    def __repr__(self) -> str:
        return f"CharVal({self.value!r})"


@dataclass
class ListVal:
    """Represents a PLC list value. Lists are mutable through indexed assignment."""
    items: List[Any]

    def __repr__(self) -> str:
        return f"List({self.items!r})"


def is_number(value: Any) -> bool:
    # bool is a subclass of int; booleans are not numbers in PLC
    return isinstance(value, (int, Decimal)) and not isinstance(value, bool)


def is_integral(value: Any) -> bool:
    """True for integers, and for decimals with no fractional part."""
    if isinstance(value, Decimal):
        return value.is_finite() and value == value.to_integral_value()
    return is_number(value)


def type_name(value: Any) -> str:
    """Return the PLC type name of a runtime value."""
    if isinstance(value, NilVal):
        return 'Nil'
    if isinstance(value, bool):
        return 'Boolean'
    if isinstance(value, int):
        return 'Integer'
    if isinstance(value, Decimal):
        return 'Decimal'
    if isinstance(value, CharVal):
        return 'Character'
    if isinstance(value, str):
        return 'String'
    if isinstance(value, ListVal):
        return 'List'
    return type(value).__name__


def to_string(value: Any) -> str:
    """Convert a PLC value to its textual form, as used by `print` and `+`."""
    if isinstance(value, NilVal):
        return 'nil'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, int):
        return str(value)
    if isinstance(value, Decimal):
        # plain notation, never an exponent
        return format(value, 'f')
    if isinstance(value, CharVal):
        return value.value
    if isinstance(value, str):
        return value
    if isinstance(value, ListVal):
        return '[' + ', '.join(to_string(item) for item in value.items) + ']'
    return str(value)
