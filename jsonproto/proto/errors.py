"""Errors raised while decoding a token stream into a message.

Every DecodeError ends the decode call that raised it; no partial message
is returned.
"""

from ..schema.descriptors import FieldDescriptor
from .tokens import TokenKind


class DecodeError(RuntimeError):
    """Base exception for decoding errors.

    field is the full name of the field being decoded (if any), token the
    offending token kind and location its (line, column) when the token
    source provides one.
    """

    def __init__(
        self,
        message: str,
        *,
        field: FieldDescriptor | str | None = None,
        token: TokenKind | None = None,
        location: tuple[int, int] | None = None,
    ) -> None:
        if isinstance(field, FieldDescriptor):
            field = field.full_name
        self.field = field
        self.token = token
        self.location = location
        self.reason = message

        if location is not None:
            message = f"{message} (line {location[0]}, column {location[1]})"
        super().__init__(message)


class ExpectedFieldName(DecodeError):
    """Raised when an object member does not start with a property name."""


class UnknownProperty(DecodeError):
    """Raised when a property matches no field and unknown properties fail."""


class TypeMismatch(DecodeError):
    """Raised when a token kind cannot be read as the field's type."""


class UnexpectedArray(DecodeError):
    """Raised when an array is given for a singular field."""


class ExpectedArray(DecodeError):
    """Raised when a single value is given for a repeated field."""


class NullPrimitive(DecodeError):
    """Raised when null is given for a primitive under the strict null policy."""


class UnknownEnumName(DecodeError):
    """Raised when an enum name is not declared by the enum type."""


class UnknownEnumIndex(DecodeError):
    """Raised when an enum number is not declared by the enum type."""


class InvalidValue(DecodeError):
    """Raised when scalar text cannot be coerced into the field's type."""
