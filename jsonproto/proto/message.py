"""Message instances and the builder that accumulates decoded values."""

import base64
from collections.abc import Iterator
from typing import Any

from ..schema.descriptors import FieldDescriptor, MessageDescriptor, SemanticType
from .naming import NameTranslator, NamingPolicy, translator_for

_SCALAR_DEFAULTS: dict[SemanticType, Any] = {
    SemanticType.INT32: 0,
    SemanticType.INT64: 0,
    SemanticType.FLOAT32: 0.0,
    SemanticType.FLOAT64: 0.0,
    SemanticType.BOOL: False,
    SemanticType.STRING: "",
    SemanticType.BYTES: b"",
}


def default_value(field: FieldDescriptor) -> Any:
    """Value an unset field reads as."""
    if field.repeated:
        return ()
    if field.enum_type is not None:
        return field.enum_type.values[0]
    if field.message_type is not None:
        return Message.default(field.message_type)
    return _SCALAR_DEFAULTS[field.semantic_type]


def _lookup_field(
    descriptor: MessageDescriptor, values: dict[FieldDescriptor, Any], name: str
) -> FieldDescriptor:
    field = descriptor.find_field(name)
    if field is not None:
        return field
    for candidate in values:
        if candidate.is_extension and candidate.name == name:
            return candidate
    raise KeyError(f"{descriptor.name} has no field {name}")


def _check_owner(descriptor: MessageDescriptor, field: FieldDescriptor) -> None:
    if field.containing_type is not descriptor:
        raise ValueError(f"{field.full_name} does not belong to {descriptor.name}")


class Message:
    """An immutable, decoded message.

    Values are keyed by field descriptor. Repeated values are stored as
    tuples; unset fields read as their type default.
    """

    __slots__ = ("_descriptor", "_values")

    def __init__(
        self, descriptor: MessageDescriptor, values: dict[FieldDescriptor, Any] | None = None
    ) -> None:
        self._descriptor = descriptor
        self._values: dict[FieldDescriptor, Any] = dict(values or {})

    @classmethod
    def default(cls, descriptor: MessageDescriptor) -> "Message":
        """The empty instance of a message type."""
        return cls(descriptor)

    @property
    def descriptor(self) -> MessageDescriptor:
        return self._descriptor

    def get_field(self, field: FieldDescriptor) -> Any:
        _check_owner(self._descriptor, field)
        if field in self._values:
            return self._values[field]
        return default_value(field)

    def has_field(self, field: FieldDescriptor | str) -> bool:
        if isinstance(field, str):
            try:
                field = _lookup_field(self._descriptor, self._values, field)
            except KeyError:
                return False
        return field in self._values

    def list_fields(self) -> Iterator[tuple[FieldDescriptor, Any]]:
        """Set fields in declaration order, followed by set extensions."""
        for field in self._descriptor.fields:
            if field in self._values:
                yield field, self._values[field]
        for field, value in self._values.items():
            if field.is_extension:
                yield field, value

    def to_builder(self) -> "MessageBuilder":
        builder = MessageBuilder(self._descriptor)
        for field, value in self._values.items():
            builder._values[field] = list(value) if field.repeated else value
        return builder

    def to_dict(self, naming: NamingPolicy | NameTranslator = NamingPolicy.LOWER_CAMEL_CASE) -> dict[str, Any]:
        """JSON-ready view of the set fields.

        Enums render by name, bytes as standard base64 and nested messages
        recursively.
        """
        translate = translator_for(naming)
        out: dict[str, Any] = {}
        for field, value in self.list_fields():
            if field.repeated:
                out[translate(field.name)] = [_plain(field, v, naming) for v in value]
            else:
                out[translate(field.name)] = _plain(field, value, naming)
        return out

    def __getitem__(self, name: str) -> Any:
        field = self._descriptor.find_field(name)
        if field is None:
            field = _lookup_field(self._descriptor, self._values, name)
        return self.get_field(field)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Message):
            return NotImplemented
        return self._descriptor is other._descriptor and self._values == other._values

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        body = ", ".join(f"{field.name}={value!r}" for field, value in self.list_fields())
        return f"{self._descriptor.name}({body})"


def _plain(field: FieldDescriptor, value: Any, naming: NamingPolicy | NameTranslator) -> Any:
    if field.semantic_type == SemanticType.ENUM:
        return value.name
    if field.semantic_type == SemanticType.BYTES:
        return base64.b64encode(value).decode("ascii")
    if field.semantic_type == SemanticType.MESSAGE:
        return value.to_dict(naming)
    return value


class MessageBuilder:
    """Mutable accumulator for one message.

    A builder is owned by a single decode call; it is never shared.
    """

    def __init__(self, descriptor: MessageDescriptor) -> None:
        self._descriptor = descriptor
        self._values: dict[FieldDescriptor, Any] = {}

    @property
    def descriptor(self) -> MessageDescriptor:
        return self._descriptor

    def set_field(self, field: FieldDescriptor, value: Any) -> None:
        """Assign a singular field, replacing any previous value."""
        _check_owner(self._descriptor, field)
        if field.repeated:
            raise ValueError(f"{field.full_name} is repeated; use add_repeated()")
        self._values[field] = value

    def add_repeated(self, field: FieldDescriptor, value: Any) -> None:
        """Append one element to a repeated field."""
        _check_owner(self._descriptor, field)
        if not field.repeated:
            raise ValueError(f"{field.full_name} is not repeated; use set_field()")
        self._values.setdefault(field, []).append(value)

    def clear_field(self, field: FieldDescriptor) -> None:
        self._values.pop(field, None)

    def has_field(self, field: FieldDescriptor) -> bool:
        return field in self._values

    def get_field(self, field: FieldDescriptor) -> Any:
        _check_owner(self._descriptor, field)
        if field in self._values:
            value = self._values[field]
            return tuple(value) if field.repeated else value
        return default_value(field)

    def new_sub_builder(self, field: FieldDescriptor) -> "MessageBuilder":
        """Empty builder for the message type of a MESSAGE field."""
        if field.message_type is None:
            raise ValueError(f"{field.full_name} is not a message field")
        return MessageBuilder(field.message_type)

    def build(self) -> Message:
        values = {
            field: tuple(value) if field.repeated else value for field, value in self._values.items()
        }
        return Message(self._descriptor, values)

    def __repr__(self) -> str:
        body = ", ".join(f"{field.name}={value!r}" for field, value in self._values.items())
        return f"{self._descriptor.name}.Builder({body})"
