from typing import Dict, Generic, Optional, Tuple, TypeVar

from .errors import name_error

V = TypeVar('V')
F = TypeVar('F')


class Scope(Generic[V, F]):
    """A nested binding table mapping names to bindings.

    Variables are keyed by name alone; functions by the pair (name, arity),
    which is the only overloading the language has. The same class holds
    type bindings during analysis and value bindings during execution, and
    also serves as the defining scope of each type.
    """
    def __init__(self, parent: Optional['Scope[V, F]'] = None):
        self.parent = parent
        self.variables: Dict[str, V] = {}
        self.functions: Dict[Tuple[str, int], F] = {}

    def child(self) -> 'Scope[V, F]':
        return Scope(parent=self)

    def define_variable(self, name: str, binding: V) -> V:
        self.variables[name] = binding
        return binding

    def define_function(self, name: str, arity: int, binding: F) -> F:
        self.functions[(name, arity)] = binding
        return binding

    def find_variable(self, name: str) -> Optional[V]:
        scope: Optional[Scope[V, F]] = self
        while scope is not None:
            if name in scope.variables:
                return scope.variables[name]
            scope = scope.parent
        return None

    def find_function(self, name: str, arity: int) -> Optional[F]:
        scope: Optional[Scope[V, F]] = self
        while scope is not None:
            if (name, arity) in scope.functions:
                return scope.functions[(name, arity)]
            scope = scope.parent
        return None

    def lookup_variable(self, name: str) -> V:
        binding = self.find_variable(name)
        if binding is None:
            raise name_error(f'undefined variable {name}')
        return binding

    def lookup_function(self, name: str, arity: int) -> F:
        binding = self.find_function(name, arity)
        if binding is None:
            raise name_error(f'undefined function {name}/{arity}')
        return binding

    def is_within(self, other: 'Scope') -> bool:
        """True if `other` is this scope or one of its ancestors."""
        scope: Optional[Scope] = self
        while scope is not None:
            if scope is other:
                return True
            scope = scope.parent
        return False
