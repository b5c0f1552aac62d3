"""Error kinds and the exception raised by the template engine."""

from enum import StrEnum
from typing import Self


class StrEnumWithDoc(StrEnum):
    """String enum whose members carry their own docstring."""

    def __new__(cls, value: str, doc: str = "") -> Self:
        """Create a new enum member with a docstring."""
        obj = str.__new__(cls, value)
        obj._value_ = value
        obj.__doc__ = doc
        return obj


class ErrorKind(StrEnumWithDoc):
    """Category of an evaluation or parsing failure."""

    SYNTAX_ERROR = "syntax_error", "Input does not conform to the template grammar."
    VARIABLE_NOT_FOUND = "variable_not_found", "Referenced variable is not registered."
    FUNCTION_NOT_FOUND = "function_not_found", "Called function is not registered."
    ARITY_MISMATCH = "arity_mismatch", "Function received the wrong number of arguments."
    TYPE_MISMATCH = "type_mismatch", "Function received an argument of the wrong type."
    INVALID_ARGUMENT = "invalid_argument", "Argument has the right type but an unusable value."
    SYSTEM_QUERY_FAILED = "system_query_failed", "Reading system state (e.g. the hostname) failed."
    LITERAL_PARSE_ERROR = "literal_parse_error", "Literal text could not be converted to a value."
    CALLABLE_FAILED = "callable_failed", "Host function raised an unexpected exception or returned a non-value."


class HermesError(Exception):
    """Failure produced while parsing or evaluating a template.

    Attributes:
        kind: The category of the failure.
        message: Human-readable description.

    """

    def __init__(self, kind: ErrorKind, message: str) -> None:
        self.kind = kind
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.kind.value!r}, {self.message!r})"


class TemplateSyntaxError(HermesError):
    """The whole input was rejected by the parser."""

    def __init__(self, message: str, source: str, position: int) -> None:
        self.source = source
        self.position = position
        super().__init__(ErrorKind.SYNTAX_ERROR, f"{message} at position {position}")

    def describe(self) -> str:
        """Render the offending input with a caret under the failing position."""
        return f"{self.message}\n  {self.source}\n  {' ' * self.position}^"


def arity_mismatch(function: str, expected: str, got: int) -> HermesError:
    msg = f"{function}() expects {expected}, got {got}"
    return HermesError(ErrorKind.ARITY_MISMATCH, msg)


def type_mismatch(function: str, expected: str) -> HermesError:
    msg = f"{function}() only accepts {expected}"
    return HermesError(ErrorKind.TYPE_MISMATCH, msg)
