"""Coercion of scalar tokens into field values.

Each reader returns the typed value, or None when the token means "no
value". For numbers and booleans that is a null token, blank text or the
text "null". Token kinds a semantic type cannot be read from raise
TypeMismatch; text that looks like the right kind but cannot be converted
raises InvalidValue.

Decoded values by semantic type: INT32/INT64 -> int, FLOAT32/FLOAT64 ->
float, BOOL -> bool, STRING -> str, BYTES -> bytes, ENUM ->
EnumValueDescriptor. MESSAGE values are produced by the decoder.
"""

import base64
import binascii
import logging
import math
import re
from typing import Any

from ..schema.descriptors import EnumValueDescriptor, FieldDescriptor, SemanticType
from .config import Base64Variant, DecodeConfig
from .errors import (
    DecodeError,
    InvalidValue,
    NullPrimitive,
    TypeMismatch,
    UnknownEnumIndex,
    UnknownEnumName,
)
from .tokens import (
    INT32_MAX,
    INT32_MIN,
    INT64_MAX,
    INT64_MIN,
    TokenCursor,
    TokenError,
    TokenKind,
    round_float32,
)

logger = logging.getLogger(__name__)

_INTEGER_TEXT = re.compile(r"[+-]?[0-9]+")
_DECIMAL_TEXT = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

_SPECIAL_FLOATS = {
    "NaN": math.nan,
    "Infinity": math.inf,
    "+Infinity": math.inf,
    "-Infinity": -math.inf,
    "INF": math.inf,
    "+INF": math.inf,
    "-INF": -math.inf,
}

_INTEGER_RANGES = {
    SemanticType.INT32: (INT32_MIN, INT32_MAX),
    SemanticType.INT64: (INT64_MIN, INT64_MAX),
}

_INT64_DIGITS = len(str(INT64_MAX))

_TRUE_TEXT = ("true", "True")
_FALSE_TEXT = ("false", "False")


def _is_null_text(text: str) -> bool:
    return not text or text == "null"


def _abbreviate(text: str, limit: int = 40) -> str:
    return text if len(text) <= limit else f"{text[:limit]}..."


def _error(cls: type[DecodeError], message: str, field: FieldDescriptor, cursor: TokenCursor) -> DecodeError:
    return cls(message, field=field, token=cursor.current_token(), location=cursor.location())


def type_mismatch(field: FieldDescriptor, cursor: TokenCursor) -> DecodeError:
    """TypeMismatch naming the field's semantic type and the current token."""
    token = cursor.current_token() or "end of input"
    return _error(
        TypeMismatch,
        f"Cannot deserialize {field.full_name} of type {field.semantic_type} out of {token} token",
        field,
        cursor,
    )


def read_integer(field: FieldDescriptor, cursor: TokenCursor) -> int | None:
    kind = cursor.current_token()
    if kind == TokenKind.NUMBER:
        try:
            if field.semantic_type == SemanticType.INT32:
                return cursor.int_value()
            return cursor.long_value()
        except TokenError as err:
            raise _error(InvalidValue, str(err), field, cursor) from err

    if kind == TokenKind.STRING:
        text = cursor.text_value().strip()
        if _is_null_text(text):
            return None
        if not _INTEGER_TEXT.fullmatch(text):
            raise _error(
                InvalidValue,
                f"Cannot deserialize {field.semantic_type} from {text!r}: not a valid integer",
                field,
                cursor,
            )
        low, high = _INTEGER_RANGES[field.semantic_type]
        # Digit count is checked before int() so oversized text never reaches it
        digits = text.lstrip("+-").lstrip("0")
        if len(digits) > _INT64_DIGITS or not low <= int(text) <= high:
            raise _error(
                InvalidValue,
                f"Overflow: numeric value ({_abbreviate(text)}) out of range of {field.semantic_type}",
                field,
                cursor,
            )
        return int(text)

    if kind == TokenKind.NULL:
        return None
    raise type_mismatch(field, cursor)


def _parse_float_text(text: str) -> float | None:
    if text in _SPECIAL_FLOATS:
        return _SPECIAL_FLOATS[text]
    if _DECIMAL_TEXT.fullmatch(text):
        return float(text)
    return None


def read_float(field: FieldDescriptor, cursor: TokenCursor) -> float | None:
    single = field.semantic_type == SemanticType.FLOAT32
    kind = cursor.current_token()
    if kind == TokenKind.NUMBER:
        return cursor.float_value() if single else cursor.double_value()

    if kind == TokenKind.STRING:
        text = cursor.text_value().strip()
        if _is_null_text(text):
            return None
        value = _parse_float_text(text)
        if value is None:
            raise _error(
                InvalidValue,
                f"Cannot deserialize {field.semantic_type} from {text!r}: not a valid number",
                field,
                cursor,
            )
        return round_float32(value) if single else value

    if kind == TokenKind.NULL:
        return None
    raise type_mismatch(field, cursor)


def read_bool(field: FieldDescriptor, cursor: TokenCursor) -> bool | None:
    kind = cursor.current_token()
    if kind == TokenKind.BOOL:
        return cursor.bool_value()

    if kind == TokenKind.NUMBER and cursor.is_integral():
        return cursor.number_value() != 0

    if kind == TokenKind.STRING:
        text = cursor.text_value().strip()
        if text in _TRUE_TEXT:
            return True
        if text in _FALSE_TEXT:
            return False
        if _is_null_text(text):
            return None
        raise _error(
            InvalidValue,
            f"Cannot deserialize {field.semantic_type} from {text!r}: only 'true' or 'false' recognized",
            field,
            cursor,
        )

    if kind == TokenKind.NULL:
        return None
    raise type_mismatch(field, cursor)


def read_string(field: FieldDescriptor, cursor: TokenCursor) -> str | None:
    kind = cursor.current_token()
    if kind == TokenKind.STRING:
        return cursor.text_value()
    if kind == TokenKind.NULL:
        return None
    if kind in (TokenKind.NUMBER, TokenKind.BOOL):
        return cursor.text_value()
    raise type_mismatch(field, cursor)


def read_bytes(field: FieldDescriptor, cursor: TokenCursor, config: DecodeConfig) -> bytes | None:
    kind = cursor.current_token()
    if kind == TokenKind.STRING:
        text = cursor.text_value()
        altchars = b"-_" if config.base64_variant == Base64Variant.URL_SAFE else None
        try:
            return base64.b64decode(text, altchars=altchars, validate=True)
        except (binascii.Error, ValueError) as err:
            raise _error(
                InvalidValue,
                f"Cannot decode {config.base64_variant} base64 for {field.full_name}: {err}",
                field,
                cursor,
            ) from err
    if kind == TokenKind.NULL:
        return None
    raise type_mismatch(field, cursor)


def _ignorable_enum(text: str, config: DecodeConfig) -> bool:
    return (config.accept_empty_string_as_null_for_enum and not text) or config.ignore_unknown_enum_values


def read_enum(field: FieldDescriptor, cursor: TokenCursor, config: DecodeConfig) -> EnumValueDescriptor | None:
    enum_type = field.enum_type
    if enum_type is None:
        raise ValueError(f"{field.full_name} is not an enum field")

    kind = cursor.current_token()
    if kind == TokenKind.STRING:
        text = cursor.text_value()
        value = enum_type.find_value_by_name(text)
        if value is None:
            if _ignorable_enum(text.strip(), config):
                logger.debug("Dropping unknown %s name %r for %s", enum_type.name, text, field.full_name)
                return None
            names = ", ".join(v.name for v in enum_type.values)
            raise _error(
                UnknownEnumName,
                f"Cannot deserialize {enum_type.name} from {text!r}: "
                f"value not one of declared enum instance names [{names}]",
                field,
                cursor,
            )
        return value

    if kind == TokenKind.NUMBER:
        if config.fail_on_numbers_for_enums:
            raise _error(
                TypeMismatch,
                f"Not allowed to deserialize {enum_type.name} out of a number "
                "(disable fail_on_numbers_for_enums to allow)",
                field,
                cursor,
            )
        if not cursor.is_integral():
            raise type_mismatch(field, cursor)

        number = cursor.number_value()
        value = enum_type.find_value_by_number(number)
        if value is None:
            if config.ignore_unknown_enum_values:
                logger.debug("Dropping unknown %s number %d for %s", enum_type.name, number, field.full_name)
                return None
            valid = ",".join(str(n) for n in enum_type.numbers())
            raise _error(
                UnknownEnumIndex,
                f"Cannot deserialize {enum_type.name} from number {number}: "
                f"index value outside legal index range [{valid}]",
                field,
                cursor,
            )
        return value

    if kind == TokenKind.NULL:
        return None
    raise type_mismatch(field, cursor)


def read_scalar(field: FieldDescriptor, cursor: TokenCursor, config: DecodeConfig) -> Any:
    """Read the current token as a value of any non-message semantic type."""
    semantic_type = field.semantic_type

    if semantic_type in (SemanticType.INT32, SemanticType.INT64):
        value = read_integer(field, cursor)
    elif semantic_type in (SemanticType.FLOAT32, SemanticType.FLOAT64):
        value = read_float(field, cursor)
    elif semantic_type == SemanticType.BOOL:
        value = read_bool(field, cursor)
    elif semantic_type == SemanticType.STRING:
        return read_string(field, cursor)
    elif semantic_type == SemanticType.BYTES:
        return read_bytes(field, cursor, config)
    elif semantic_type == SemanticType.ENUM:
        return read_enum(field, cursor, config)
    else:
        raise type_mismatch(field, cursor)

    if value is None and config.fail_on_null_for_primitives:
        raise _error(
            NullPrimitive,
            f"Cannot map null into {field.full_name} of type {semantic_type} "
            "(disable fail_on_null_for_primitives to allow)",
            field,
            cursor,
        )
    return value
