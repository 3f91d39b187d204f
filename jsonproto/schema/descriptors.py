"""Runtime descriptors for message types.

Descriptors are built once by a DescriptorPool and only read afterwards.
Field descriptors hash by identity, so two fields with the same name in
different messages never alias each other in lookup tables or caches.
"""

from dataclasses import dataclass, field
from enum import StrEnum, auto


class SemanticType(StrEnum):
    """Declared value kind of a field."""

    INT32 = auto()
    INT64 = auto()
    FLOAT32 = auto()
    FLOAT64 = auto()
    BOOL = auto()
    STRING = auto()
    BYTES = auto()
    ENUM = auto()
    MESSAGE = auto()


PRIMITIVE_SEMANTIC_TYPES: dict[str, SemanticType] = {
    "int32": SemanticType.INT32,
    "int64": SemanticType.INT64,
    "float32": SemanticType.FLOAT32,
    "float64": SemanticType.FLOAT64,
    "bool": SemanticType.BOOL,
    "string": SemanticType.STRING,
    "bytes": SemanticType.BYTES,
}


@dataclass(frozen=True, slots=True)
class EnumValueDescriptor:
    """One named value of an enum."""

    name: str
    number: int
    index: int


@dataclass(frozen=True, eq=False, slots=True)
class EnumDescriptor:
    """Describes an enum type: its values in declaration order."""

    name: str
    values: tuple[EnumValueDescriptor, ...]

    def find_value_by_name(self, name: str) -> EnumValueDescriptor | None:
        for value in self.values:
            if value.name == name:
                return value
        return None

    def find_value_by_number(self, number: int) -> EnumValueDescriptor | None:
        for value in self.values:
            if value.number == number:
                return value
        return None

    def numbers(self) -> list[int]:
        """Sorted list of the numbers this enum accepts."""
        return sorted(value.number for value in self.values)

    def __repr__(self) -> str:
        return f"EnumDescriptor({self.name})"


@dataclass(eq=False, slots=True)
class MessageDescriptor:
    """Describes a message type.

    fields is assigned by the pool while linking, which lets a message refer
    to itself or to messages declared later in the same schema.
    """

    name: str
    extendable: bool = False
    fields: tuple["FieldDescriptor", ...] = field(default=())

    def find_field(self, name: str) -> "FieldDescriptor | None":
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def __repr__(self) -> str:
        return f"MessageDescriptor({self.name})"


@dataclass(frozen=True, eq=False, slots=True)
class FieldDescriptor:
    """Describes one field of a message, or one extension of it."""

    name: str
    semantic_type: SemanticType
    containing_type: MessageDescriptor
    repeated: bool = False
    enum_type: EnumDescriptor | None = None
    message_type: MessageDescriptor | None = None
    is_extension: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.containing_type.name}.{self.name}"

    def __repr__(self) -> str:
        suffix = "[]" if self.repeated else ""
        return f"FieldDescriptor({self.full_name}: {self.semantic_type}{suffix})"
