"""Registry of template variables and host functions.

The registry (the "cache") is the symbol table every template is evaluated
against. Both variables and functions are kept in insertion-ordered lists
rather than dicts: names may repeat, and lookups return the first match.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from ._builtins import builtin_functions
from ._errors import ErrorKind, HermesError
from ._value import Value, is_value, to_value

logger = logging.getLogger(__name__)

# Signature shared by built-in and host functions
HostFunction = Callable[[Sequence[Value]], Value]

DEFAULT_CAPACITY = 16


@dataclass(frozen=True, slots=True)
class Variable:
    name: str
    value: Value


@dataclass(frozen=True, slots=True)
class FunctionEntry:
    name: str
    function: HostFunction


class Registry:
    """Ordered collection of named variables and named functions.

    Every registry starts with the built-in functions (``hostname``,
    ``random_str``, ``random_num``, ``random_bool``, ``current_time``).

    Variable names are not unique: ``add_variable`` always appends and
    ``get_variable`` returns the first entry with a matching name.
    ``set_variable`` replaces every entry with that name by a single fresh
    entry at the end of the order, and does nothing when the name is absent.

    Function names are not unique either. ``add_function`` appends, so
    registering a name that already exists (including a built-in) has no
    visible effect: the earlier entry keeps winning the lookup.

    A registry is not thread-safe; callers sharing one across threads must
    serialize access themselves.

    Args:
        capacity_hint: Expected number of variables. Only a sizing hint.
        rng: Source of randomness for the random built-ins.

    """

    def __init__(self, capacity_hint: int = DEFAULT_CAPACITY, *, rng: random.Random | None = None) -> None:
        if capacity_hint < 0:
            msg = f"capacity_hint must be non-negative. Got: {capacity_hint}"
            raise ValueError(msg)
        self.capacity_hint = capacity_hint
        self._variables: list[Variable] = []
        self._functions: list[FunctionEntry] = [
            FunctionEntry(name, function) for name, function in builtin_functions(rng or random.Random())
        ]

    @property
    def variables(self) -> tuple[Variable, ...]:
        """Snapshot of the variables in iteration order."""
        return tuple(self._variables)

    @property
    def functions(self) -> tuple[FunctionEntry, ...]:
        """Snapshot of the function entries in registration order."""
        return tuple(self._functions)

    # --- Variables ---

    def add_variable(self, name: str, value: Value | bool | int | float | str) -> None:
        """Append a variable. An existing variable with the same name is kept."""
        self._variables.append(Variable(name, to_value(value)))

    def get_variable(self, name: str) -> Variable | None:
        """Get the first variable named ``name``, or ``None``."""
        return next((v for v in self._variables if v.name == name), None)

    def set_variable(self, name: str, value: Value | bool | int | float | str) -> None:
        """Replace the value of an existing variable.

        All entries named ``name`` are removed and one new entry is appended,
        so the variable moves to the end of the iteration order. When no such
        variable exists this is a no-op; use ``add_variable`` to create one.
        """
        if self.get_variable(name) is None:
            logger.debug("set_variable(%r) ignored: no such variable", name)
            return
        new_value = to_value(value)
        self.remove_variable(name)
        self._variables.append(Variable(name, new_value))

    def remove_variable(self, name: str) -> None:
        """Remove every variable named ``name``."""
        self._variables = [v for v in self._variables if v.name != name]

    # --- Functions ---

    def add_function(self, name: str, function: HostFunction) -> None:
        """Append a function entry. Earlier entries with the same name still win."""
        if not callable(function):
            msg = f"Function '{name}' must be callable. Got: {type(function).__name__}"
            raise TypeError(msg)
        if self.has_function(name):
            logger.debug("Function %r already registered; new entry is shadowed", name)
        self._functions.append(FunctionEntry(name, function))

    def function(self, name: str | None = None) -> Callable[[HostFunction], HostFunction]:
        """Decorator to register a host function.

        Args:
            name: Name used in templates. Defaults to the function's ``__name__``.

        Example:
            @registry.function()
            def shout(args):
                return Text(str(args[0]).upper())

        """

        def decorator(func: HostFunction) -> HostFunction:
            self.add_function(name or func.__name__, func)
            return func

        return decorator

    def has_function(self, name: str) -> bool:
        return any(f.name == name for f in self._functions)

    def call_function(self, name: str, args: Sequence[Value]) -> Value:
        """Invoke the first function registered as ``name``.

        Args:
            name: The function name.
            args: Evaluated argument values.

        Returns:
            The value returned by the function.

        Raises:
            HermesError: ``FUNCTION_NOT_FOUND`` if no function is registered
                under ``name``; any ``HermesError`` raised by the function
                itself, unchanged; ``CALLABLE_FAILED`` if the function raised
                another error or returned something that is not a value.

        """
        entry = next((f for f in self._functions if f.name == name), None)
        if entry is None:
            msg = f"function '{name}' not found"
            raise HermesError(ErrorKind.FUNCTION_NOT_FOUND, msg)

        logger.debug("Calling %s with %d argument(s)", name, len(args))
        try:
            result = entry.function(list(args))
        except HermesError:
            raise
        except Exception as e:
            msg = f"function '{name}' failed: {e}"
            raise HermesError(ErrorKind.CALLABLE_FAILED, msg) from e

        if not is_value(result):
            msg = f"function '{name}' returned {type(result).__name__}, not a template value"
            raise HermesError(ErrorKind.CALLABLE_FAILED, msg)
        return result
