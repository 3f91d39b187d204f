"""Parsed schema definitions, before linking into runtime descriptors."""

from dataclasses import dataclass

from dataclasses_json import DataClassJsonMixin

from .descriptors import PRIMITIVE_SEMANTIC_TYPES


@dataclass
class SchemaType(DataClassJsonMixin):
    """Reference to a primitive or user-defined type by name."""

    name: str


@dataclass
class SchemaEnumValue(DataClassJsonMixin):
    """Represents a single enum value."""

    name: str
    number: int


@dataclass
class SchemaEnum(DataClassJsonMixin):
    """Represents an enum type definition."""

    name: str
    values: list[SchemaEnumValue]


@dataclass
class SchemaField(DataClassJsonMixin):
    """Represents a field of a message or extension block."""

    name: str
    type: SchemaType
    repeated: bool


@dataclass
class SchemaMessage(DataClassJsonMixin):
    """Represents a message type definition.

    extendable=True when the body declares `extensions`, which allows
    `extend` blocks to register additional fields for it.
    """

    name: str
    fields: list[SchemaField]
    extendable: bool


@dataclass
class SchemaExtend(DataClassJsonMixin):
    """Represents an `extend` block adding fields to an extendable message."""

    target: str
    fields: list[SchemaField]


@dataclass
class SchemaFile(DataClassJsonMixin):
    """Represents a complete schema file."""

    enums: list[SchemaEnum]
    messages: list[SchemaMessage]
    extends: list[SchemaExtend]


def is_primitive(t: SchemaType) -> bool:
    """Check if a type is a primitive type."""
    return t.name in PRIMITIVE_SEMANTIC_TYPES
