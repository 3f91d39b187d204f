"""Token streams consumed by the decoder.

A TokenCursor is a pull cursor over Token values. Tokens come from JSON text
(lex_json, lexed with Lark) or from already-parsed Python values
(tokens_from_python).
"""

import json
import math
import os
import struct
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import StrEnum, auto
from typing import Any

from lark import Lark
from lark.exceptions import LarkError, UnexpectedInput

_g_lexer: Lark | None = None

INT32_MIN, INT32_MAX = -(2**31), 2**31 - 1
INT64_MIN, INT64_MAX = -(2**63), 2**63 - 1


class TokenError(RuntimeError):
    """Raised when a token stream is malformed or misread."""


class TokenKind(StrEnum):
    """Kinds of tokens in a structured-text stream."""

    OBJECT_START = auto()
    OBJECT_END = auto()
    ARRAY_START = auto()
    ARRAY_END = auto()
    FIELD_NAME = auto()
    STRING = auto()
    NUMBER = auto()
    BOOL = auto()
    NULL = auto()


_CONTAINER_STARTS = (TokenKind.OBJECT_START, TokenKind.ARRAY_START)
_CONTAINER_ENDS = (TokenKind.OBJECT_END, TokenKind.ARRAY_END)


@dataclass(frozen=True, slots=True)
class Token:
    """One token. value is the decoded scalar, text its source spelling."""

    kind: TokenKind
    value: Any = None
    text: str = ""
    line: int | None = None
    column: int | None = None


def round_float32(value: float) -> float:
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


class TokenCursor:
    """Pull cursor over a token sequence.

    The cursor starts before the first token; advance() moves to the next
    token and returns its kind, or None once the stream is exhausted.
    """

    def __init__(self, tokens: Iterable[Token]) -> None:
        self._tokens: Iterator[Token] = iter(tokens)
        self._current: Token | None = None

    @classmethod
    def from_json(cls, text: str) -> "TokenCursor":
        return cls(lex_json(text))

    @classmethod
    def from_python(cls, value: Any) -> "TokenCursor":
        return cls(tokens_from_python(value))

    def current(self) -> Token | None:
        return self._current

    def current_token(self) -> TokenKind | None:
        return self._current.kind if self._current is not None else None

    def advance(self) -> TokenKind | None:
        self._current = next(self._tokens, None)
        return self.current_token()

    def location(self) -> tuple[int, int] | None:
        token = self._current
        if token is None or token.line is None or token.column is None:
            return None
        return (token.line, token.column)

    def _require(self, *kinds: TokenKind) -> Token:
        token = self._current
        if token is None or token.kind not in kinds:
            found = token.kind if token is not None else "end of input"
            expected = ", ".join(str(k) for k in kinds)
            raise TokenError(f"Current token is {found}, expected {expected}")
        return token

    def text_value(self) -> str:
        """Text of a field name or scalar token."""
        token = self._require(
            TokenKind.FIELD_NAME,
            TokenKind.STRING,
            TokenKind.NUMBER,
            TokenKind.BOOL,
            TokenKind.NULL,
        )
        if token.kind in (TokenKind.FIELD_NAME, TokenKind.STRING):
            return token.value
        return token.text

    def number_value(self) -> int | float:
        return self._require(TokenKind.NUMBER).value

    def is_integral(self) -> bool:
        token = self._current
        return (
            token is not None
            and token.kind == TokenKind.NUMBER
            and isinstance(token.value, int)
        )

    def _integer(self, low: int, high: int, type_name: str) -> int:
        value = self.number_value()
        if isinstance(value, float):
            if not math.isfinite(value):
                raise TokenError(f"Numeric value ({value}) is not a valid {type_name}")
            value = int(value)
        if value < low or value > high:
            raise TokenError(f"Numeric value ({value}) out of range of {type_name}")
        return value

    def int_value(self) -> int:
        """32-bit integer value; floats truncate toward zero."""
        return self._integer(INT32_MIN, INT32_MAX, "int32")

    def long_value(self) -> int:
        """64-bit integer value; floats truncate toward zero."""
        return self._integer(INT64_MIN, INT64_MAX, "int64")

    def double_value(self) -> float:
        """Number as a double; integers too large for one become infinite."""
        value = self.number_value()
        try:
            return float(value)
        except OverflowError:
            return math.inf if value > 0 else -math.inf

    def float_value(self) -> float:
        """Number rounded to single precision."""
        return round_float32(self.double_value())

    def bool_value(self) -> bool:
        return self._require(TokenKind.BOOL).value

    def skip_subtree(self) -> None:
        """If on a container start, advance to its matching end token."""
        if self.current_token() not in _CONTAINER_STARTS:
            return

        depth = 1
        while depth:
            kind = self.advance()
            if kind is None:
                raise TokenError("Unexpected end of input while skipping a value")
            if kind in _CONTAINER_STARTS:
                depth += 1
            elif kind in _CONTAINER_ENDS:
                depth -= 1


def _lexer() -> Lark:
    global _g_lexer

    if not _g_lexer:
        with open(f"{os.path.dirname(__file__)}/json.lark", encoding="utf-8") as f:
            grammar = f.read()

        _g_lexer = Lark(grammar, parser="lalr", lexer="basic")

    return _g_lexer


# Structural expectations while lexing
_VALUE = "value"
_VALUE_OR_END = "value or ']'"
_KEY = "property name"
_KEY_OR_END = "property name or '}'"
_COLON = "':'"
_COMMA_OR_END = "',' or closing bracket"
_DONE = "end of input"

_SCALARS = {
    "STRING": TokenKind.STRING,
    "NUMBER": TokenKind.NUMBER,
    "TRUE": TokenKind.BOOL,
    "FALSE": TokenKind.BOOL,
    "NULL": TokenKind.NULL,
}


def _scalar_value(type_: str, text: str) -> Any:
    if type_ == "STRING":
        return json.loads(text)
    if type_ == "NUMBER":
        if any(ch in text for ch in ".eE"):
            return float(text)
        return int(text)
    if type_ == "TRUE":
        return True
    if type_ == "FALSE":
        return False
    return None


def lex_json(text: str) -> Iterator[Token]:
    """Tokenize JSON text, marking object keys as FIELD_NAME tokens.

    Raises TokenError on lexical or structural errors, at the point the
    stream reaches them.
    """
    stack: list[str] = []
    expect = _VALUE

    def after_value() -> str:
        return _COMMA_OR_END if stack else _DONE

    def fail(message: str, line: int | None, column: int | None) -> TokenError:
        return TokenError(f"{message} at line {line}, column {column}")

    try:
        for raw in _lexer().lex(text):
            type_, line, column = raw.type, raw.line, raw.column

            if expect == _DONE:
                raise fail(f"Unexpected {raw.value!r} after end of document", line, column)

            if type_ == "COLON":
                if expect != _COLON:
                    raise fail(f"Expected {expect}, found ':'", line, column)
                expect = _VALUE
                continue

            if type_ == "COMMA":
                if expect != _COMMA_OR_END:
                    raise fail(f"Expected {expect}, found ','", line, column)
                expect = _KEY if stack[-1] == "{" else _VALUE
                continue

            if type_ in ("RBRACE", "RSQB"):
                opener = "{" if type_ == "RBRACE" else "["
                allowed = (_COMMA_OR_END, _KEY_OR_END if opener == "{" else _VALUE_OR_END)
                if expect not in allowed or not stack or stack[-1] != opener:
                    raise fail(f"Expected {expect}, found {raw.value!r}", line, column)
                stack.pop()
                kind = TokenKind.OBJECT_END if opener == "{" else TokenKind.ARRAY_END
                yield Token(kind, text=raw.value, line=line, column=column)
                expect = after_value()
                continue

            if expect in (_KEY, _KEY_OR_END):
                if type_ != "STRING":
                    raise fail(f"Expected {expect}, found {raw.value!r}", line, column)
                name = _scalar_value(type_, raw.value)
                yield Token(TokenKind.FIELD_NAME, name, raw.value, line, column)
                expect = _COLON
                continue

            if expect not in (_VALUE, _VALUE_OR_END):
                raise fail(f"Expected {expect}, found {raw.value!r}", line, column)

            if type_ == "LBRACE":
                stack.append("{")
                yield Token(TokenKind.OBJECT_START, text=raw.value, line=line, column=column)
                expect = _KEY_OR_END
            elif type_ == "LSQB":
                stack.append("[")
                yield Token(TokenKind.ARRAY_START, text=raw.value, line=line, column=column)
                expect = _VALUE_OR_END
            else:
                try:
                    value = _scalar_value(type_, raw.value)
                except ValueError as err:
                    raise fail(f"Invalid {type_.lower()} literal ({err})", line, column) from err
                yield Token(_SCALARS[type_], value, raw.value, line, column)
                expect = after_value()
    except UnexpectedInput as err:
        raise fail("Unexpected character", err.line, err.column) from err
    except (LarkError, json.JSONDecodeError) as err:
        raise TokenError(f"Invalid JSON: {err}") from err

    if expect != _DONE:
        raise TokenError(f"Unexpected end of input, expected {expect}")


def tokens_from_python(value: Any) -> Iterator[Token]:
    """Tokens for a plain Python value: dict, list, tuple, str, int, float,
    bool or None."""
    if value is None:
        yield Token(TokenKind.NULL, None, "null")
    elif isinstance(value, bool):
        yield Token(TokenKind.BOOL, value, "true" if value else "false")
    elif isinstance(value, int | float):
        try:
            text = json.dumps(value)
        except ValueError as err:
            raise TokenError(f"Cannot tokenize number: {err}") from err
        yield Token(TokenKind.NUMBER, value, text)
    elif isinstance(value, str):
        yield Token(TokenKind.STRING, value, json.dumps(value))
    elif isinstance(value, dict):
        yield Token(TokenKind.OBJECT_START, text="{")
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(f"Object keys must be strings, not {type(key).__name__}")
            yield Token(TokenKind.FIELD_NAME, key, json.dumps(key))
            yield from tokens_from_python(item)
        yield Token(TokenKind.OBJECT_END, text="}")
    elif isinstance(value, list | tuple):
        yield Token(TokenKind.ARRAY_START, text="[")
        for item in value:
            yield from tokens_from_python(item)
        yield Token(TokenKind.ARRAY_END, text="]")
    else:
        raise TypeError(f"Cannot tokenize value of type {type(value).__name__}")
