"""Evaluation of parsed templates against a registry."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ._errors import ErrorKind, HermesError
from ._parser import (
    BooleanLiteral,
    FunctionCall,
    NumberLiteral,
    StringLiteral,
    TextSegment,
    VariableRef,
    parse,
)
from ._value import Boolean, Float, Integer, Text

if TYPE_CHECKING:
    from collections.abc import Iterator

    from ._parser import Node
    from ._registry import Registry
    from ._value import Value

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ItemResult:
    """Outcome of evaluating one top-level item.

    Exactly one of ``value`` and ``error`` is set.
    """

    value: Value | None = None
    error: HermesError | None = None

    def __post_init__(self) -> None:
        if (self.value is None) == (self.error is None):
            msg = "ItemResult needs exactly one of value and error"
            raise ValueError(msg)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Value:
        """Return the value, or raise the item's error."""
        if self.error is not None:
            raise self.error
        assert self.value is not None
        return self.value

    def render(self) -> str:
        """Stringify the value; a failed item renders as the empty string."""
        return str(self.value) if self.error is None else ""


@dataclass(frozen=True, slots=True)
class EvaluationResult:
    """Per-item results of evaluating a template, in input order.

    Behaves as a read-only sequence of ``ItemResult``.

    Attributes:
        items: One result per top-level item.

    """

    items: tuple[ItemResult, ...] = field(default_factory=tuple)

    def __iter__(self) -> Iterator[ItemResult]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index: int) -> ItemResult:
        return self.items[index]

    @property
    def success(self) -> bool:
        """Check if every item evaluated without error."""
        return all(item.ok for item in self.items)

    @property
    def errors(self) -> list[tuple[int, HermesError]]:
        """List of (item index, error) for the failed items."""
        return [(i, item.error) for i, item in enumerate(self.items) if item.error is not None]

    def render(self) -> str:
        """Concatenate the stringified items, failed items contributing nothing."""
        return "".join(item.render() for item in self.items)


def literal_value(node: NumberLiteral | BooleanLiteral | StringLiteral) -> Value:
    """Convert a literal node to its value.

    Raises:
        HermesError: ``LITERAL_PARSE_ERROR`` if the text does not fit the
            value type, e.g. an integer beyond 32 bits.

    """
    try:
        match node:
            case NumberLiteral(text) if node.is_float:
                return Float(float(text))
            case NumberLiteral(text):
                return Integer(int(text))
            case BooleanLiteral("true"):
                return Boolean(True)  # noqa: FBT003
            case BooleanLiteral("false"):
                return Boolean(False)  # noqa: FBT003
            case StringLiteral(text):
                return Text(text)
    except (TypeError, ValueError) as e:
        logger.warning("Literal %r could not be converted: %s", node, e)
        msg = f"cannot convert literal {node.text!r}: {e}"
        raise HermesError(ErrorKind.LITERAL_PARSE_ERROR, msg) from e

    logger.warning("Unknown literal %r", node)
    msg = f"cannot convert literal {node.text!r}"
    raise HermesError(ErrorKind.LITERAL_PARSE_ERROR, msg)


def evaluate_node(node: Node, registry: Registry) -> Value:
    """Evaluate one parse-tree node, arguments before the enclosing call.

    Raises:
        HermesError: If the node, or any node below it, fails. The first
            failing argument of a call aborts the call.

    """
    match node:
        case TextSegment(text):
            return Text(text)
        case VariableRef(name):
            variable = registry.get_variable(name)
            if variable is None:
                msg = f"variable '{name}' not found"
                raise HermesError(ErrorKind.VARIABLE_NOT_FOUND, msg)
            logger.debug("Resolved %s = %r", name, variable.value)
            return variable.value
        case FunctionCall(name, args):
            arg_values = [evaluate_node(arg, registry) for arg in args]
            result = registry.call_function(name, arg_values)
            logger.debug("%s(%s) -> %r", name, ", ".join(map(repr, arg_values)), result)
            return result
        case NumberLiteral() | BooleanLiteral() | StringLiteral():
            return literal_value(node)
        case _:
            msg = f"Unknown node type: {type(node)}"
            raise TypeError(msg)


def evaluate(source: str, registry: Registry) -> EvaluationResult:
    """Parse and evaluate a template.

    Every top-level item is evaluated independently; a failing item is
    reported in its own ``ItemResult`` and does not affect its siblings.

    Args:
        source: The template text.
        registry: Variables and functions to resolve against.

    Returns:
        EvaluationResult with one entry per top-level item.

    Raises:
        TemplateSyntaxError: If the template does not parse. No item is
            evaluated in that case.

    Example:
        >>> registry = Registry()
        >>> registry.add_variable("name", "liudao")
        >>> [str(item.value) for item in evaluate("hi +${name}", registry)]
        ['hi ', 'liudao']

    """
    nodes = parse(source)
    logger.debug("Parsed %d item(s)", len(nodes))

    items: list[ItemResult] = []
    for node in nodes:
        try:
            items.append(ItemResult(value=evaluate_node(node, registry)))
        except HermesError as e:
            logger.debug("Item %r failed: %s", node, e)
            items.append(ItemResult(error=e))
    return EvaluationResult(items=tuple(items))


def render(source: str, registry: Registry) -> str:
    """Evaluate a template and join the results into one string.

    Failed items contribute an empty string. Use ``evaluate`` to see why an
    item failed.

    Raises:
        TemplateSyntaxError: If the template does not parse.

    """
    return evaluate(source, registry).render()
