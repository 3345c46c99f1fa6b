from dataclasses import dataclass
from typing import Any, Callable, List


@dataclass
class BuiltinFunction:
    """A host-implemented function, bound like user functions by (name, arity)."""
    name: str
    arity: int
    fn: Callable[[List[Any]], Any]

    def __repr__(self) -> str:
        return f"<builtin {self.name}/{self.arity}>"
