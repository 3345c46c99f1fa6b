from dataclasses import dataclass


@dataclass
class ErrorVal:
    """Describes a language-level failure.

    `name` is one of 'NameError', 'TypeError', 'RuntimeError' or
    'DivideByZero'; `message` is a human readable explanation.
    """
    name: str
    message: str

    def __repr__(self) -> str:
        return f"Error(name={self.name!r}, message={self.message!r})"


class PlcError(Exception):
    """Exception type used to propagate analysis and runtime errors."""
    def __init__(self, err: ErrorVal):
        super().__init__(f"{err.name}: {err.message}")
        self.err = err


class LexError(Exception):
    """Raised on the first malformed token, at the offending offset."""
    def __init__(self, message: str, offset: int):
        super().__init__(f"{message} at offset {offset}")
        self.message = message
        self.offset = offset


class ParseError(Exception):
    """Raised on the first grammar violation, at the offending token."""
    def __init__(self, message: str, offset: int):
        super().__init__(f"{message} at offset {offset}")
        self.message = message
        self.offset = offset


def name_error(message: str) -> PlcError:
    return PlcError(ErrorVal('NameError', message))


def type_error(message: str) -> PlcError:
    return PlcError(ErrorVal('TypeError', message))


def runtime_error(message: str) -> PlcError:
    return PlcError(ErrorVal('RuntimeError', message))
