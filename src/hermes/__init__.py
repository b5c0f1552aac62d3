"""Micro-templating engine for generating dynamic text."""

__all__ = [
    "Boolean",
    "ErrorKind",
    "EvaluationResult",
    "Float",
    "FunctionEntry",
    "HermesError",
    "HostFunction",
    "Integer",
    "ItemResult",
    "Registry",
    "TemplateSyntaxError",
    "Text",
    "Value",
    "Variable",
    "evaluate",
    "parse",
    "render",
    "to_value",
]

from ._errors import ErrorKind, HermesError, TemplateSyntaxError
from ._evaluator import EvaluationResult, ItemResult, evaluate, render
from ._parser import parse
from ._registry import FunctionEntry, HostFunction, Registry, Variable
from ._value import Boolean, Float, Integer, Text, Value, to_value
