"""Tests for template parsing in hermes._parser."""

import pytest

from hermes import ErrorKind, TemplateSyntaxError
from hermes._parser import (
    MAX_NESTING_DEPTH,
    BooleanLiteral,
    FunctionCall,
    NumberLiteral,
    StringLiteral,
    TextSegment,
    VariableRef,
    parse,
    parse_literal,
)


class TestTopLevel:
    def test_empty_input_has_no_items(self):
        assert parse("") == []

    def test_single_marker(self):
        assert parse("${name}") == [VariableRef("name")]

    def test_plus_separates_items(self):
        assert parse("${a}+${b}") == [VariableRef("a"), VariableRef("b")]

    def test_plain_text_item(self):
        assert parse("hello world") == [TextSegment("hello world")]

    def test_text_keeps_whitespace(self):
        assert parse(" a +${b}") == [TextSegment(" a "), VariableRef("b")]

    def test_marker_adjacent_to_text_starts_new_item(self):
        assert parse("host-${hostname()}.local") == [
            TextSegment("host-"),
            FunctionCall("hostname", ()),
            TextSegment(".local"),
        ]

    def test_adjacent_markers(self):
        assert parse("${a}${b}") == [VariableRef("a"), VariableRef("b")]

    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("true", BooleanLiteral("true")),
            ("false", BooleanLiteral("false")),
            ("42", NumberLiteral("42")),
            ("-2.5", NumberLiteral("-2.5")),
            ('"dd"', StringLiteral("dd")),
            ('""', StringLiteral("")),
        ],
    )
    def test_top_level_literals(self, source: str, expected):
        assert parse(source) == [expected]

    def test_top_level_string_may_contain_plus(self):
        assert parse('"a+b"+${c}') == [StringLiteral("a+b"), VariableRef("c")]

    def test_text_that_only_looks_like_a_literal(self):
        assert parse("1.") == [TextSegment("1.")]
        assert parse("truely") == [TextSegment("truely")]
        assert parse('say "hi"') == [TextSegment('say "hi"')]

    def test_dollar_without_brace_is_text(self):
        assert parse("$5") == [TextSegment("$5")]

    def test_composite_input(self):
        source = '${hostname()}+"dd"+true+${name}+${invalid}+${random_str(${len})}+${multiply(1,-2.5,3)}'
        assert parse(source) == [
            FunctionCall("hostname", ()),
            StringLiteral("dd"),
            BooleanLiteral("true"),
            VariableRef("name"),
            VariableRef("invalid"),
            FunctionCall("random_str", (VariableRef("len"),)),
            FunctionCall("multiply", (NumberLiteral("1"), NumberLiteral("-2.5"), NumberLiteral("3"))),
        ]


class TestExpressions:
    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("${x}", VariableRef("x")),
            ("${_private_1}", VariableRef("_private_1")),
            ("${ x }", VariableRef("x")),
            ("${true}", BooleanLiteral("true")),
            ("${true_value}", VariableRef("true_value")),
            ("${0}", NumberLiteral("0")),
            ("${-12}", NumberLiteral("-12")),
            ("${3.25}", NumberLiteral("3.25")),
            ('${"a b}c"}', StringLiteral("a b}c")),
            ("${${x}}", VariableRef("x")),
        ],
    )
    def test_single_expression(self, source: str, expected):
        assert parse(source) == [expected]

    def test_call_without_arguments(self):
        assert parse("${random_bool()}") == [FunctionCall("random_bool", ())]

    def test_call_with_whitespace(self):
        assert parse("${ random_num( 1 , 2 ) }") == [
            FunctionCall("random_num", (NumberLiteral("1"), NumberLiteral("2"))),
        ]

    def test_nested_calls_and_markers(self):
        assert parse('${f(g(${x}, "s"), true, h())}') == [
            FunctionCall(
                "f",
                (
                    FunctionCall("g", (VariableRef("x"), StringLiteral("s"))),
                    BooleanLiteral("true"),
                    FunctionCall("h", ()),
                ),
            ),
        ]

    def test_number_literal_kind(self):
        assert NumberLiteral("10").is_float is False
        assert NumberLiteral("-0.5").is_float is True


class TestSyntaxErrors:
    @pytest.mark.parametrize(
        ("source", "position"),
        [
            ("${name", 0),
            ("${}", 2),
            ("${name)}", 6),
            ("${f(1,}", 7),
            ("${f(1 2)}", 6),
            ("${1.}", 2),
            ("${1abc}", 2),
            ("${-}", 2),
            ('${"open}', 2),
            ('"open', 0),
            ('"dd"x', 4),
            ("abc}", 3),
            ("${a}}", 4),
            ("+${a}", 0),
            ("${a}+", 5),
            ("${a}++${b}", 5),
            ("${true()}", 6),
            ("${a.b}", 3),
        ],
    )
    def test_malformed_input(self, source: str, position: int):
        with pytest.raises(TemplateSyntaxError) as excinfo:
            parse(source)
        assert excinfo.value.kind == ErrorKind.SYNTAX_ERROR
        assert excinfo.value.position == position
        assert f"position {position}" in excinfo.value.message

    def test_whole_input_fails_atomically(self):
        # The first items are valid, but nothing is returned
        with pytest.raises(TemplateSyntaxError):
            parse("${a}+${b}+${c")

    def test_describe_points_at_position(self):
        with pytest.raises(TemplateSyntaxError) as excinfo:
            parse("${a}}")
        lines = excinfo.value.describe().splitlines()
        assert lines[1] == "  ${a}}"
        assert lines[2] == "      ^"

    def test_nesting_limit_on_markers(self):
        allowed = "${" * MAX_NESTING_DEPTH + "x" + "}" * MAX_NESTING_DEPTH
        assert parse(allowed) == [VariableRef("x")]

        too_deep = "${" * (MAX_NESTING_DEPTH + 1) + "x" + "}" * (MAX_NESTING_DEPTH + 1)
        with pytest.raises(TemplateSyntaxError, match="nesting too deep") as excinfo:
            parse(too_deep)
        assert excinfo.value.position == 2 * (MAX_NESTING_DEPTH + 1)

    def test_nesting_limit_on_calls(self):
        depth = MAX_NESTING_DEPTH
        allowed = "${" + "f(" * (depth - 1) + "x" + ")" * (depth - 1) + "}"
        assert len(parse(allowed)) == 1

        too_deep = "${" + "f(" * depth + "x" + ")" * depth + "}"
        with pytest.raises(TemplateSyntaxError, match="nesting too deep"):
            parse(too_deep)

    def test_very_deep_input_is_rejected_without_recursion_error(self):
        with pytest.raises(TemplateSyntaxError):
            parse("${" * 600 + "x" + "}" * 600)


class TestParseLiteral:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("10", NumberLiteral("10")),
            ("-0.25", NumberLiteral("-0.25")),
            ("true", BooleanLiteral("true")),
            ('"quoted"', StringLiteral("quoted")),
            ("plain", None),
            ("1.", None),
            ("", None),
            ('"a"b"', None),
            (" 10", None),
        ],
    )
    def test_classification(self, text: str, expected):
        assert parse_literal(text) == expected
