"""Template parser.

A template is a sequence of items separated by ``+``::

    template   := [ item ( "+" item )* ]
    item       := marker | literal | text
    marker     := "${" expr "}"
    expr       := marker | string | number | boolean | call | identifier
    call       := identifier "(" [ expr ( "," expr )* ] ")"
    identifier := [A-Za-z_][A-Za-z0-9_]*
    number     := "-"? digit+ ( "." digit+ )?
    boolean    := "true" | "false"
    string     := '"' any character except '"' '"'

Whitespace inside a marker is ignored between tokens. Outside markers the
text of an item is kept verbatim; an item whose whole text is a number,
boolean or string literal becomes that literal. A marker directly adjacent to
text starts a new item, so ``host-${hostname()}`` is two items.

Because whole-item literals are typed, numeric-looking text is normalized on
rendering: ``1.50`` renders as ``1.5`` and ``007`` as ``7``. Quote the item
(``"007"``) to keep it verbatim.

Expressions nest at most ``MAX_NESTING_DEPTH`` levels (markers inside
markers and calls inside call arguments both count); deeper input is a
syntax error.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ._errors import TemplateSyntaxError


@dataclass(slots=True, frozen=True)
class TextSegment:
    text: str


@dataclass(slots=True, frozen=True)
class VariableRef:
    name: str


@dataclass(slots=True, frozen=True)
class FunctionCall:
    name: str
    args: tuple[Node, ...]


@dataclass(slots=True, frozen=True)
class NumberLiteral:
    text: str

    @property
    def is_float(self) -> bool:
        return "." in self.text


@dataclass(slots=True, frozen=True)
class BooleanLiteral:
    text: str


@dataclass(slots=True, frozen=True)
class StringLiteral:
    text: str


Node = TextSegment | VariableRef | FunctionCall | NumberLiteral | BooleanLiteral | StringLiteral

SEPARATOR = "+"
MARKER_OPEN = "${"
MARKER_CLOSE = "}"

# Maximum expression nesting; deeper input is a syntax error
MAX_NESTING_DEPTH = 100

_IDENTIFIER_RX = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_NUMBER_RX = re.compile(r"-?[0-9]+(?:\.[0-9]+)?")
_BOOLEANS = ("true", "false")


def parse_literal(text: str) -> NumberLiteral | BooleanLiteral | StringLiteral | None:
    """Classify ``text`` as a literal if the whole of it is one.

    Returns:
        The literal node, or ``None`` if ``text`` is not exactly one literal.

    """
    if _NUMBER_RX.fullmatch(text):
        return NumberLiteral(text)
    if text in _BOOLEANS:
        return BooleanLiteral(text)
    if len(text) >= 2 and text[0] == '"' and text[-1] == '"' and '"' not in text[1:-1]:  # noqa: PLR2004
        return StringLiteral(text[1:-1])
    return None


class _Parser:
    """Single-pass recursive descent parser over one template string."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.pos = 0
        self.depth = 0

    def error(self, message: str, position: int | None = None) -> TemplateSyntaxError:
        return TemplateSyntaxError(message, self.source, self.pos if position is None else position)

    def at_end(self) -> bool:
        return self.pos >= len(self.source)

    def peek(self) -> str:
        return self.source[self.pos] if not self.at_end() else ""

    def skip_whitespace(self) -> None:
        while not self.at_end() and self.source[self.pos].isspace():
            self.pos += 1

    def expect(self, token: str) -> None:
        if not self.source.startswith(token, self.pos):
            found = repr(self.peek()) if not self.at_end() else "end of input"
            msg = f"expected {token!r}, found {found}"
            raise self.error(msg)
        self.pos += len(token)

    # --- Top level ---

    def parse_template(self) -> list[Node]:
        items: list[Node] = []
        if not self.source:
            return items

        # True while the previous item may be followed directly by another
        expect_item = True
        while not self.at_end():
            if self.source.startswith(MARKER_OPEN, self.pos):
                items.append(self.parse_marker())
                expect_item = False
            elif self.peek() == SEPARATOR:
                if expect_item:
                    msg = "expected an item before '+'"
                    raise self.error(msg)
                self.pos += 1
                expect_item = True
            elif self.peek() == MARKER_CLOSE:
                msg = "unbalanced '}' outside of a marker"
                raise self.error(msg)
            else:
                items.append(self.parse_text_item())
                expect_item = False

        if expect_item:
            msg = "expected an item after '+'"
            raise self.error(msg)
        return items

    def parse_text_item(self) -> Node:
        start = self.pos
        if self.peek() == '"':
            end = self.source.find('"', start + 1)
            if end == -1:
                msg = "unterminated string literal"
                raise self.error(msg, start)
            self.pos = end + 1
            if not (self.at_end() or self.peek() == SEPARATOR or self.source.startswith(MARKER_OPEN, self.pos)):
                msg = "expected '+' after string literal"
                raise self.error(msg)
            return StringLiteral(self.source[start + 1 : end])

        while not self.at_end():
            if self.peek() in (SEPARATOR, MARKER_CLOSE) or self.source.startswith(MARKER_OPEN, self.pos):
                break
            self.pos += 1
        text = self.source[start : self.pos]
        return parse_literal(text) or TextSegment(text)

    # --- Expressions ---

    def parse_marker(self) -> Node:
        start = self.pos
        self.expect(MARKER_OPEN)
        node = self.parse_expr()
        self.skip_whitespace()
        if self.at_end():
            msg = "unterminated marker, expected '}'"
            raise self.error(msg, start)
        self.expect(MARKER_CLOSE)
        return node

    def parse_expr(self) -> Node:
        if self.depth >= MAX_NESTING_DEPTH:
            msg = f"nesting too deep (more than {MAX_NESTING_DEPTH} levels)"
            raise self.error(msg)
        self.depth += 1
        try:
            return self._parse_expr()
        finally:
            self.depth -= 1

    def _parse_expr(self) -> Node:  # noqa: PLR0911
        self.skip_whitespace()
        if self.at_end():
            msg = "expected an expression, found end of input"
            raise self.error(msg)

        if self.source.startswith(MARKER_OPEN, self.pos):
            return self.parse_marker()

        char = self.peek()
        if char == '"':
            start = self.pos
            end = self.source.find('"', start + 1)
            if end == -1:
                msg = "unterminated string literal"
                raise self.error(msg, start)
            self.pos = end + 1
            return StringLiteral(self.source[start + 1 : end])

        if char == "-" or char.isdigit():
            match = _NUMBER_RX.match(self.source, self.pos)
            if match is None:
                msg = "invalid number literal"
                raise self.error(msg)
            self.pos = match.end()
            if self.peek() == "." or _IDENTIFIER_RX.match(self.peek()):
                msg = f"invalid number literal {self.source[match.start() : self.pos + 1]!r}"
                raise self.error(msg, match.start())
            return NumberLiteral(match.group())

        match = _IDENTIFIER_RX.match(self.source, self.pos)
        if match is None:
            msg = f"unexpected character {char!r}"
            raise self.error(msg)
        name = match.group()
        self.pos = match.end()

        if name in _BOOLEANS:
            return BooleanLiteral(name)
        if self.peek() == "(":
            return self.parse_call(name)
        return VariableRef(name)

    def parse_call(self, name: str) -> FunctionCall:
        self.expect("(")
        args: list[Node] = []
        self.skip_whitespace()
        if self.peek() == ")":
            self.pos += 1
            return FunctionCall(name, ())

        while True:
            args.append(self.parse_expr())
            self.skip_whitespace()
            if self.peek() == ",":
                self.pos += 1
                continue
            if self.peek() == ")":
                self.pos += 1
                return FunctionCall(name, tuple(args))
            found = repr(self.peek()) if not self.at_end() else "end of input"
            msg = f"expected ',' or ')' in arguments of {name}(), found {found}"
            raise self.error(msg)


def parse(source: str) -> list[Node]:
    """Parse a template into its top-level items.

    Args:
        source: The template text.

    Returns:
        One node per top-level item, in input order.

    Raises:
        TemplateSyntaxError: If any part of the input is malformed. Nothing
            is returned for the well-formed parts.

    """
    return _Parser(source).parse_template()
