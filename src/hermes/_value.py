"""Runtime values produced by template evaluation.

A value is one of four immutable variants:

- Integer: 32-bit signed integer
- Float: 32-bit IEEE float
- Text: string
- Boolean: bool

Each variant stringifies with ``str()``; this is the text that ``render``
splices into its output.
"""

import math
import struct
from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


def to_float32(number: float) -> float:
    """Round a Python float to the nearest 32-bit float.

    Magnitudes beyond the 32-bit range become signed infinities.
    """
    try:
        return struct.unpack("f", struct.pack("f", number))[0]
    except OverflowError:
        return math.copysign(math.inf, number)


def _format_float32(number: float) -> str:
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "inf" if number > 0 else "-inf"

    # Shortest decimal that maps back onto the same 32-bit float
    candidate = repr(number)
    for precision in range(1, 10):
        text = f"{number:.{precision}g}"
        if to_float32(float(text)) == number:
            candidate = text
            break

    text = format(Decimal(candidate), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


@dataclass(frozen=True, slots=True)
class Integer:
    value: int

    KIND: ClassVar[str] = "integer"

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            msg = f"Integer payload must be an int. Got: {type(self.value).__name__}"
            raise TypeError(msg)
        if not INT32_MIN <= self.value <= INT32_MAX:
            msg = f"Integer payload out of 32-bit range: {self.value}"
            raise ValueError(msg)

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True, slots=True)
class Float:
    value: float

    KIND: ClassVar[str] = "float"

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, (int, float)):
            msg = f"Float payload must be a float. Got: {type(self.value).__name__}"
            raise TypeError(msg)
        object.__setattr__(self, "value", to_float32(float(self.value)))

    def __str__(self) -> str:
        return _format_float32(self.value)


@dataclass(frozen=True, slots=True)
class Text:
    value: str

    KIND: ClassVar[str] = "text"

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            msg = f"Text payload must be a str. Got: {type(self.value).__name__}"
            raise TypeError(msg)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Boolean:
    value: bool

    KIND: ClassVar[str] = "boolean"

    def __post_init__(self) -> None:
        if not isinstance(self.value, bool):
            msg = f"Boolean payload must be a bool. Got: {type(self.value).__name__}"
            raise TypeError(msg)

    def __str__(self) -> str:
        return "true" if self.value else "false"


Value = Integer | Float | Text | Boolean


def is_value(obj: object) -> bool:
    """Check whether ``obj`` is one of the four value variants."""
    return isinstance(obj, (Integer, Float, Text, Boolean))


def to_value(obj: object) -> Value:
    """Convert a Python scalar (or an existing value) to a value.

    Args:
        obj: A value, or a Python ``bool``, ``int``, ``float`` or ``str``.

    Returns:
        The corresponding value variant.

    Raises:
        TypeError: If ``obj`` has no value counterpart.
        ValueError: If an ``int`` does not fit in 32 bits.

    """
    match obj:
        case Integer() | Float() | Text() | Boolean():
            return obj
        case bool():
            return Boolean(obj)
        case int():
            return Integer(obj)
        case float():
            return Float(obj)
        case str():
            return Text(obj)
        case _:
            msg = f"Cannot convert {type(obj).__name__} to a template value"
            raise TypeError(msg)
