"""Descriptor pool: links parsed schema definitions into runtime descriptors.

The pool is the schema provider of the decoder. It is built once and only
read afterwards, so one pool can back any number of decoders and threads.
"""

import logging
from typing import TYPE_CHECKING

from ..proto.message import Message
from .descriptors import (
    PRIMITIVE_SEMANTIC_TYPES,
    EnumDescriptor,
    EnumValueDescriptor,
    FieldDescriptor,
    MessageDescriptor,
    SemanticType,
)
from .extensions import ExtensionInfo, ExtensionRegistry
from .parser import parse
from .types import SchemaField, SchemaFile

if TYPE_CHECKING:
    from ..proto.decoder import Decoder

logger = logging.getLogger(__name__)


class DescriptorPool:
    """Message and enum descriptors of one schema, plus its extensions."""

    def __init__(self) -> None:
        self._messages: dict[str, MessageDescriptor] = {}
        self._enums: dict[str, EnumDescriptor] = {}
        self._extensions = ExtensionRegistry()

    @classmethod
    def from_schema(cls, schema: SchemaFile) -> "DescriptorPool":
        pool = cls()
        pool._link(schema)
        return pool

    @property
    def extensions(self) -> ExtensionRegistry:
        return self._extensions

    @property
    def messages(self) -> list[MessageDescriptor]:
        return list(self._messages.values())

    @property
    def enums(self) -> list[EnumDescriptor]:
        return list(self._enums.values())

    def message(self, name: str) -> MessageDescriptor:
        try:
            return self._messages[name]
        except KeyError:
            raise KeyError(f"Unknown message type {name}") from None

    def enum(self, name: str) -> EnumDescriptor:
        try:
            return self._enums[name]
        except KeyError:
            raise KeyError(f"Unknown enum type {name}") from None

    def fields_of(self, descriptor: MessageDescriptor) -> tuple[FieldDescriptor, ...]:
        return descriptor.fields

    def extensions_of(self, descriptor: MessageDescriptor) -> list[ExtensionInfo]:
        return self._extensions.find_extensions(descriptor)

    def is_extendable(self, descriptor: MessageDescriptor) -> bool:
        return descriptor.extendable

    def decoder(self, name: str, *, build: bool = True) -> "Decoder":
        """Decoder for the named message type, bound to this pool's extensions."""
        from ..proto.decoder import Decoder

        return Decoder(self.message(name), build=build, extensions=self._extensions)

    def _link(self, schema: SchemaFile) -> None:
        for enum in schema.enums:
            self._enums[enum.name] = EnumDescriptor(
                name=enum.name,
                values=tuple(
                    EnumValueDescriptor(name=v.name, number=v.number, index=i)
                    for i, v in enumerate(enum.values)
                ),
            )

        # Shells first, so fields can refer to any message in the file
        for msg in schema.messages:
            self._messages[msg.name] = MessageDescriptor(name=msg.name, extendable=msg.extendable)

        for msg in schema.messages:
            descriptor = self._messages[msg.name]
            descriptor.fields = tuple(self._make_field(descriptor, f, False) for f in msg.fields)

        for ext in schema.extends:
            target = self._messages[ext.target]
            for f in ext.fields:
                field = self._make_field(target, f, True)
                default_instance = None
                if field.message_type is not None:
                    default_instance = Message.default(field.message_type)
                self._extensions.add(ExtensionInfo(field, default_instance))

        logger.debug(
            "Linked %d messages, %d enums, %d extensions",
            len(self._messages),
            len(self._enums),
            len(self._extensions),
        )

    def _make_field(
        self, owner: MessageDescriptor, f: SchemaField, is_extension: bool
    ) -> FieldDescriptor:
        type_name = f.type.name
        if type_name in PRIMITIVE_SEMANTIC_TYPES:
            return FieldDescriptor(
                name=f.name,
                semantic_type=PRIMITIVE_SEMANTIC_TYPES[type_name],
                containing_type=owner,
                repeated=f.repeated,
                is_extension=is_extension,
            )
        if type_name in self._enums:
            return FieldDescriptor(
                name=f.name,
                semantic_type=SemanticType.ENUM,
                containing_type=owner,
                repeated=f.repeated,
                enum_type=self._enums[type_name],
                is_extension=is_extension,
            )
        return FieldDescriptor(
            name=f.name,
            semantic_type=SemanticType.MESSAGE,
            containing_type=owner,
            repeated=f.repeated,
            message_type=self._messages[type_name],
            is_extension=is_extension,
        )


def load_pool(text: str) -> DescriptorPool:
    """Parse a schema definition and link it into a descriptor pool."""
    return DescriptorPool.from_schema(parse(text))
