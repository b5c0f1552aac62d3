"""Built-in functions registered into every registry."""

from __future__ import annotations

import functools
import math
import socket
import string
from datetime import datetime
from typing import TYPE_CHECKING

from ._errors import ErrorKind, HermesError, arity_mismatch, type_mismatch
from ._value import INT32_MAX, INT32_MIN, Boolean, Float, Integer, Text, Value, to_float32

if TYPE_CHECKING:
    import random
    from collections.abc import Callable, Sequence

RANDOM_STR_CHARSET = string.digits + string.ascii_lowercase + string.ascii_uppercase


def hostname(args: Sequence[Value]) -> Value:  # noqa: ARG001
    """Return the machine's network hostname."""
    try:
        name = socket.gethostname()
    except OSError as e:
        msg = f"hostname() failed: {e}"
        raise HermesError(ErrorKind.SYSTEM_QUERY_FAILED, msg) from e
    if not name:
        msg = "hostname() failed: hostname is empty"
        raise HermesError(ErrorKind.SYSTEM_QUERY_FAILED, msg)
    return Text(name)


def random_str(rng: random.Random, args: Sequence[Value]) -> Value:
    """Return a random alphanumeric string of the requested length.

    Example:
        ${random_str(10)} -> "a8Fk2LmQ0z"

    """
    if len(args) != 1:
        raise arity_mismatch("random_str", "one argument", len(args))
    match args[0]:
        case Integer(length):
            pass
        case _:
            raise type_mismatch("random_str", "one integer argument")
    if length < 0:
        msg = f"random_str() length must be non-negative, got {length}"
        raise HermesError(ErrorKind.INVALID_ARGUMENT, msg)
    return Text("".join(rng.choices(RANDOM_STR_CHARSET, k=length)))


def random_bool(rng: random.Random, args: Sequence[Value]) -> Value:  # noqa: ARG001
    return Boolean(rng.getrandbits(1) == 1)


def _random_int(rng: random.Random, low: int, high: int) -> Integer:
    if low >= high:
        msg = f"random_num() range [{low}, {high}) is empty"
        raise HermesError(ErrorKind.INVALID_ARGUMENT, msg)
    return Integer(rng.randrange(low, high))


def _random_float(rng: random.Random, low: float, high: float) -> Float:
    if not (math.isfinite(low) and math.isfinite(high)):
        msg = f"random_num() bounds must be finite, got [{low}, {high})"
        raise HermesError(ErrorKind.INVALID_ARGUMENT, msg)
    if not low < high:
        msg = f"random_num() range [{low}, {high}) is empty"
        raise HermesError(ErrorKind.INVALID_ARGUMENT, msg)
    # Rounding to 32 bits may land on the upper bound; draw again
    while True:
        number = to_float32(low + (high - low) * rng.random())
        if low <= number < high:
            return Float(number)


def random_num(rng: random.Random, args: Sequence[Value]) -> Value:
    """Return a random number.

    - no arguments: any 32-bit integer
    - ``n``: a number in ``[0, n)``, integer or float following ``n``
    - ``a, b``: a number in ``[a, b)``; both bounds must have the same type

    """
    match list(args):
        case []:
            return Integer(rng.randint(INT32_MIN, INT32_MAX))
        case [Integer(high)]:
            return _random_int(rng, 0, high)
        case [Float(high)]:
            return _random_float(rng, 0.0, high)
        case [_]:
            raise type_mismatch("random_num", "an integer or float argument")
        case [Integer(low), Integer(high)]:
            return _random_int(rng, low, high)
        case [Float(low), Float(high)]:
            return _random_float(rng, low, high)
        case [_, _]:
            raise type_mismatch("random_num", "two integer or two float arguments")
        case _:
            raise arity_mismatch("random_num", "0-2 arguments", len(args))


def current_time(args: Sequence[Value]) -> Value:
    """Format the current local time with a strftime pattern.

    Example:
        ${current_time("%d/%m/%Y %H:%M")} -> "02/04/2023 12:50"

    """
    if len(args) != 1:
        raise arity_mismatch("current_time", "one argument", len(args))
    match args[0]:
        case Text(pattern):
            pass
        case _:
            raise type_mismatch("current_time", "one string argument")
    try:
        return Text(datetime.now().astimezone().strftime(pattern))
    except ValueError as e:
        msg = f"current_time() cannot use format {pattern!r}: {e}"
        raise HermesError(ErrorKind.INVALID_ARGUMENT, msg) from e


def builtin_functions(rng: random.Random) -> list[tuple[str, Callable[[Sequence[Value]], Value]]]:
    """Build the built-in function table, binding the random built-ins to ``rng``."""
    return [
        ("hostname", hostname),
        ("random_str", functools.partial(random_str, rng)),
        ("random_num", functools.partial(random_num, rng)),
        ("random_bool", functools.partial(random_bool, rng)),
        ("current_time", current_time),
    ]
