"""Loading and exporting variables files.

A variables file is a TOML document with a ``[variables]`` table::

    [variables]
    name = "liudao"
    len = 10
    ratio = 2.5
    enabled = true
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any

import tomli_w
from pydantic import BaseModel, ConfigDict, StrictBool, StrictFloat, StrictInt, StrictStr, ValidationError

from ._value import INT32_MAX, INT32_MIN, Boolean, Float, Integer, Text, Value, to_value

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ._registry import Registry

logger = logging.getLogger(__name__)


class VariablesFileError(Exception):
    """Variables file could not be read or is invalid."""


# StrictBool first so that TOML booleans are never read as integers
ScalarValue = StrictBool | StrictInt | StrictFloat | StrictStr


class VariablesDocument(BaseModel):
    """Schema of a variables TOML document."""

    model_config = ConfigDict(extra="forbid")

    variables: dict[str, ScalarValue] = {}

    def to_values(self) -> dict[str, Value]:
        """Convert the validated scalars to template values, keeping file order."""
        values: dict[str, Value] = {}
        for name, scalar in self.variables.items():
            if isinstance(scalar, int) and not isinstance(scalar, bool) and not INT32_MIN <= scalar <= INT32_MAX:
                msg = f"Variable '{name}' does not fit in a 32-bit integer: {scalar}"
                raise VariablesFileError(msg)
            values[name] = to_value(scalar)
        return values


def toml_to_variables(toml_contents: dict[str, Any]) -> dict[str, Value]:
    """Validate parsed TOML contents and convert them to template values.

    Args:
        toml_contents: The parsed TOML dictionary.

    Returns:
        Mapping from variable name to value, in document order.

    Raises:
        VariablesFileError: If the document does not match the schema.

    """
    try:
        document = VariablesDocument.model_validate(toml_contents)
    except ValidationError as e:
        msg = f"Invalid variables document: {e}"
        raise VariablesFileError(msg) from e
    return document.to_values()


def load_variables_from_toml(input_path: Path | str) -> dict[str, Value]:
    """Load variables from a TOML file.

    Args:
        input_path: Path to the variables TOML file.

    Returns:
        Mapping from variable name to value, in document order.

    Raises:
        VariablesFileError: If the file is missing, is not TOML, or does not
            match the schema.

    """
    input_path = Path(input_path)
    try:
        with input_path.open("rb") as f:
            toml_contents = tomllib.load(f)
    except OSError as e:
        msg = f"Cannot read variables file {input_path}: {e}"
        raise VariablesFileError(msg) from e
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {input_path}: {e}"
        raise VariablesFileError(msg) from e

    variables = toml_to_variables(toml_contents)
    logger.debug(f"Loaded {len(variables)} variable(s) from {input_path}")
    return variables


def _serialize_value(value: Value) -> bool | int | float | str:
    match value:
        case Integer(v) | Float(v) | Text(v) | Boolean(v):
            return v
    msg = f"Cannot serialize {type(value).__name__}"
    raise TypeError(msg)


def export_variables_to_toml(variables: Mapping[str, Value], output_path: Path | str) -> None:
    """Write variables to a TOML file readable by ``load_variables_from_toml``."""
    output_path = Path(output_path)
    document = {"variables": {name: _serialize_value(value) for name, value in variables.items()}}
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("wb") as f:
        tomli_w.dump(document, f)
    logger.debug(f"Exported {len(variables)} variable(s) to {output_path}")


def add_variables(registry: Registry, variables: Mapping[str, Value]) -> None:
    """Add every variable to ``registry``, in mapping order."""
    for name, value in variables.items():
        registry.add_variable(name, value)
