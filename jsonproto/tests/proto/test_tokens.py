"""Tests for token streams"""

# pylint: disable=redefined-outer-name,unused-variable,expression-not-assigned,singleton-comparison

import math

import pytest

from jsonproto.proto.tokens import (
    TokenCursor,
    TokenError,
    TokenKind,
    lex_json,
    tokens_from_python,
)


def kinds(tokens):
    return [token.kind for token in tokens]


def describe_lex_json():
    def marks_object_keys_as_field_names(expect):
        tokens = list(lex_json('{"a": "b", "c": {"d": null}}'))
        expect(kinds(tokens)) == [
            TokenKind.OBJECT_START,
            TokenKind.FIELD_NAME,
            TokenKind.STRING,
            TokenKind.FIELD_NAME,
            TokenKind.OBJECT_START,
            TokenKind.FIELD_NAME,
            TokenKind.NULL,
            TokenKind.OBJECT_END,
            TokenKind.OBJECT_END,
        ]
        expect([t.value for t in tokens if t.kind == TokenKind.FIELD_NAME]) == ["a", "c", "d"]

    def decodes_scalars(expect):
        tokens = list(lex_json('[1, -2.5, 1e3, "x\\u00e9\\n", true, false, null]'))
        values = [t.value for t in tokens[1:-1]]
        expect(values) == [1, -2.5, 1000.0, "xé\n", True, False, None]
        expect(isinstance(tokens[1].value, int)) == True
        expect(isinstance(tokens[3].value, float)) == True

    def keeps_source_spelling(expect):
        tokens = list(lex_json("[12.50]"))
        expect(tokens[1].text) == "12.50"

    def tracks_positions(expect):
        tokens = list(lex_json('{\n  "count": 5\n}'))
        expect((tokens[1].line, tokens[1].column)) == (2, 3)
        expect((tokens[2].line, tokens[2].column)) == (2, 12)

    def accepts_empty_containers(expect):
        expect(kinds(lex_json("{}"))) == [TokenKind.OBJECT_START, TokenKind.OBJECT_END]
        expect(kinds(lex_json("[]"))) == [TokenKind.ARRAY_START, TokenKind.ARRAY_END]

    def accepts_bare_scalars(expect):
        expect(kinds(lex_json(" 42 "))) == [TokenKind.NUMBER]

    def rejects_missing_colon(expect):
        with pytest.raises(TokenError) as exinfo:
            list(lex_json('{"a" 1}'))

        expect(str(exinfo.value)).includes("line 1")

    def rejects_trailing_comma(expect):
        with pytest.raises(TokenError):
            list(lex_json("[1,]"))

    def rejects_non_string_keys(expect):
        with pytest.raises(TokenError):
            list(lex_json("{1: 2}"))

    def rejects_mismatched_brackets(expect):
        with pytest.raises(TokenError):
            list(lex_json('{"a": [1}'))

    def rejects_unterminated_input(expect):
        with pytest.raises(TokenError) as exinfo:
            list(lex_json('{"a": 1'))

        expect(str(exinfo.value)).includes("Unexpected end of input")

    def rejects_trailing_data(expect):
        with pytest.raises(TokenError):
            list(lex_json("1 2"))

    def rejects_unknown_characters(expect):
        with pytest.raises(TokenError):
            list(lex_json("{@}"))

    def rejects_empty_input(expect):
        with pytest.raises(TokenError):
            list(lex_json(""))

    def rejects_integer_literals_beyond_conversion_limit(expect):
        with pytest.raises(TokenError) as exinfo:
            list(lex_json('{"total": 1' + "0" * 5000 + "}"))

        expect(str(exinfo.value)).includes("line 1, column 11")


def describe_tokens_from_python():
    def walks_nested_values(expect):
        tokens = list(tokens_from_python({"a": [1, True], "b": None}))
        expect(kinds(tokens)) == [
            TokenKind.OBJECT_START,
            TokenKind.FIELD_NAME,
            TokenKind.ARRAY_START,
            TokenKind.NUMBER,
            TokenKind.BOOL,
            TokenKind.ARRAY_END,
            TokenKind.FIELD_NAME,
            TokenKind.NULL,
            TokenKind.OBJECT_END,
        ]

    def distinguishes_bool_from_number(expect):
        tokens = list(tokens_from_python([True, 1]))
        expect(tokens[1].kind) == TokenKind.BOOL
        expect(tokens[2].kind) == TokenKind.NUMBER

    def rejects_integers_beyond_conversion_limit(expect):
        with pytest.raises(TokenError):
            list(tokens_from_python([10**5000]))

    def rejects_unsupported_values(expect):
        with pytest.raises(TypeError):
            list(tokens_from_python({"a": {1, 2}}))
        with pytest.raises(TypeError):
            list(tokens_from_python({1: "a"}))


def describe_cursor():
    def starts_before_first_token(expect):
        cursor = TokenCursor.from_json("[1]")
        expect(cursor.current_token()) == None
        expect(cursor.advance()) == TokenKind.ARRAY_START
        expect(cursor.advance()) == TokenKind.NUMBER
        expect(cursor.advance()) == TokenKind.ARRAY_END
        expect(cursor.advance()) == None

    def reads_scalar_values(expect):
        cursor = TokenCursor.from_python(["s", 7, 2.5, False])
        cursor.advance()
        cursor.advance()
        expect(cursor.text_value()) == "s"
        cursor.advance()
        expect(cursor.int_value()) == 7
        expect(cursor.long_value()) == 7
        expect(cursor.is_integral()) == True
        expect(cursor.text_value()) == "7"
        cursor.advance()
        expect(cursor.double_value()) == 2.5
        expect(cursor.int_value()) == 2
        expect(cursor.is_integral()) == False
        cursor.advance()
        expect(cursor.bool_value()) == False
        expect(cursor.text_value()) == "false"

    def checks_integer_ranges(expect):
        cursor = TokenCursor.from_python(2**31)
        cursor.advance()
        expect(cursor.long_value()) == 2**31
        with pytest.raises(TokenError) as exinfo:
            cursor.int_value()

        expect(str(exinfo.value)).includes("out of range of int32")

    def widens_huge_integers_to_infinity(expect):
        cursor = TokenCursor.from_python([10**400, -(10**400)])
        cursor.advance()
        cursor.advance()
        expect(cursor.double_value()) == math.inf
        expect(cursor.float_value()) == math.inf
        cursor.advance()
        expect(cursor.double_value()) == -math.inf

    def rounds_float_values(expect):
        cursor = TokenCursor.from_python(0.1)
        cursor.advance()
        expect(cursor.double_value()) == 0.1
        expect(cursor.float_value()) == pytest.approx(0.1, rel=1e-7)
        expect(cursor.float_value() != 0.1) == True

    def rejects_accessor_misuse(expect):
        cursor = TokenCursor.from_python({})
        cursor.advance()
        with pytest.raises(TokenError):
            cursor.text_value()
        with pytest.raises(TokenError):
            cursor.number_value()

    def skips_nested_subtrees(expect):
        cursor = TokenCursor.from_json('{"a": {"b": [1, {"c": 2}]}, "d": 3}')
        cursor.advance()
        cursor.advance()
        cursor.advance()
        expect(cursor.current_token()) == TokenKind.OBJECT_START
        cursor.skip_subtree()
        expect(cursor.current_token()) == TokenKind.OBJECT_END
        expect(cursor.advance()) == TokenKind.FIELD_NAME
        expect(cursor.text_value()) == "d"

    def skip_is_a_no_op_on_scalars(expect):
        cursor = TokenCursor.from_python(5)
        cursor.advance()
        cursor.skip_subtree()
        expect(cursor.current_token()) == TokenKind.NUMBER

    def reports_location(expect):
        cursor = TokenCursor.from_json('\n  {"a": 1}')
        cursor.advance()
        expect(cursor.location()) == (2, 3)
        expect(TokenCursor.from_python({}).location()) == None
