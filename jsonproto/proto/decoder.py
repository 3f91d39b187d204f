"""Decoding of token streams into messages of one type.

A Decoder is built once per message type and reused across documents,
possibly from several threads at a time. Each decode call owns its builder
and its property lookup table; the only state shared between calls is the
cache of nested decoders, keyed by field.
"""

import logging
import threading
from typing import Any

from ..schema.descriptors import FieldDescriptor, MessageDescriptor, SemanticType
from ..schema.extensions import ExtensionRegistry
from .coercion import read_scalar, type_mismatch
from .config import DEFAULT_CONFIG, DecodeConfig, UnknownPropertyPolicy
from .errors import ExpectedArray, ExpectedFieldName, UnexpectedArray, UnknownProperty
from .message import Message, MessageBuilder
from .naming import translator_for
from .resolver import FieldResolver
from .tokens import TokenCursor, TokenKind

logger = logging.getLogger(__name__)


class Decoder:
    """Decodes objects into messages of one type.

    With build=True (the default) decode() returns an immutable Message;
    with build=False it returns the populated MessageBuilder. Nested
    messages are always built.

    Example:
        pool = load_pool(schema_text)
        decoder = Decoder(pool.message("Point"), extensions=pool.extensions)
        point = decoder.decode_json('{"x": 1, "y": 2}')
    """

    def __init__(
        self,
        descriptor: MessageDescriptor,
        *,
        build: bool = True,
        extensions: ExtensionRegistry | None = None,
    ) -> None:
        self._descriptor = descriptor
        self._build = build
        self._extensions = extensions if extensions is not None else ExtensionRegistry.empty()
        self._sub_decoders: dict[FieldDescriptor, Decoder] = {}
        self._sub_decoders_lock = threading.Lock()

    @property
    def descriptor(self) -> MessageDescriptor:
        return self._descriptor

    @property
    def build(self) -> bool:
        return self._build

    def decode(self, cursor: TokenCursor, config: DecodeConfig | None = None) -> Message | MessageBuilder:
        """Decode the object at the cursor.

        A cursor that has not been advanced yet is moved to its first token.
        On return the cursor sits on the object's closing token.
        """
        builder = MessageBuilder(self._descriptor)
        self._populate(builder, cursor, config or DEFAULT_CONFIG)

        if self._build:
            return builder.build()
        return builder

    def decode_json(self, text: str, config: DecodeConfig | None = None) -> Message | MessageBuilder:
        return self.decode(TokenCursor.from_json(text), config)

    def decode_python(self, value: Any, config: DecodeConfig | None = None) -> Message | MessageBuilder:
        return self.decode(TokenCursor.from_python(value), config)

    def cached_decoder(self, field: FieldDescriptor) -> "Decoder | None":
        """The nested decoder cached for a message field, if resolved yet."""
        return self._sub_decoders.get(field)

    def _populate(self, builder: MessageBuilder, cursor: TokenCursor, config: DecodeConfig) -> None:
        token = cursor.current_token()
        if token is None:
            token = cursor.advance()

        # Tolerate a single-element array wrapped around the object
        if token == TokenKind.ARRAY_START:
            token = cursor.advance()

        if token == TokenKind.OBJECT_END:
            return
        if token == TokenKind.OBJECT_START:
            token = cursor.advance()
            if token == TokenKind.OBJECT_END:
                return

        descriptor = self._descriptor
        extension_infos = self._extensions.find_extensions(descriptor) if descriptor.extendable else []
        resolver = FieldResolver.build(descriptor, extension_infos, translator_for(config.name_translation))

        while True:
            if token != TokenKind.FIELD_NAME:
                raise ExpectedFieldName(
                    f"Expected {TokenKind.FIELD_NAME} token in {descriptor.name}, "
                    f"found {token or 'end of input'}",
                    token=token,
                    location=cursor.location(),
                )

            name = cursor.text_value()
            resolved = resolver.resolve(name)

            if resolved is None:
                self._handle_unknown_property(builder, resolver, name, cursor, config)
                cursor.advance()
                cursor.skip_subtree()
            else:
                field, default_instance = resolved
                cursor.advance()
                self._set_field(builder, field, default_instance, cursor, config)

            token = cursor.advance()
            if token == TokenKind.OBJECT_END:
                return

    def _handle_unknown_property(
        self,
        builder: MessageBuilder,
        resolver: FieldResolver,
        name: str,
        cursor: TokenCursor,
        config: DecodeConfig,
    ) -> None:
        handler = config.unknown_property_handler
        if handler is not None and handler(builder, name):
            logger.debug("Unknown property %r of %s handled by callback", name, self._descriptor.name)
            return

        if config.on_unknown_property == UnknownPropertyPolicy.FAIL:
            known = ", ".join(repr(n) for n in resolver.property_names())
            raise UnknownProperty(
                f"Unrecognized property {name!r} for {self._descriptor.name} (known properties: {known})",
                field=name,
                token=cursor.current_token(),
                location=cursor.location(),
            )

        logger.debug("Skipping unknown property %r of %s", name, self._descriptor.name)

    def _set_field(
        self,
        builder: MessageBuilder,
        field: FieldDescriptor,
        default_instance: Message | None,
        cursor: TokenCursor,
        config: DecodeConfig,
    ) -> None:
        value = self._read_value(builder, field, default_instance, cursor, config)
        if value is None:
            return

        if not field.repeated:
            builder.set_field(field, value)
        elif isinstance(value, list):
            for item in value:
                builder.add_repeated(field, item)
        elif config.accept_single_value_as_array:
            builder.add_repeated(field, value)
        else:
            raise ExpectedArray(
                f"Cannot deserialize repeated {field.full_name} out of a single value "
                "(enable accept_single_value_as_array to allow)",
                field=field,
                token=cursor.current_token(),
                location=cursor.location(),
            )

    def _read_value(
        self,
        builder: MessageBuilder,
        field: FieldDescriptor,
        default_instance: Message | None,
        cursor: TokenCursor,
        config: DecodeConfig,
        in_array: bool = False,
    ) -> Any:
        token = cursor.current_token()

        if token == TokenKind.ARRAY_START:
            if field.repeated and not in_array:
                return self._read_array(builder, field, default_instance, cursor, config)
            where = "inside an array" if in_array else "for singular field"
            raise UnexpectedArray(
                f"Cannot deserialize {field.full_name} out of an array {where}",
                field=field,
                token=token,
                location=cursor.location(),
            )

        if field.semantic_type != SemanticType.MESSAGE:
            return read_scalar(field, cursor, config)

        if token == TokenKind.OBJECT_START:
            decoder = self._sub_decoder(builder, field, default_instance)
            return decoder.decode(cursor, config)
        if token == TokenKind.NULL:
            return None
        raise type_mismatch(field, cursor)

    def _read_array(
        self,
        builder: MessageBuilder,
        field: FieldDescriptor,
        default_instance: Message | None,
        cursor: TokenCursor,
        config: DecodeConfig,
    ) -> list[Any]:
        values: list[Any] = []
        while cursor.advance() != TokenKind.ARRAY_END:
            value = self._read_value(builder, field, default_instance, cursor, config, in_array=True)
            if value is not None:
                values.append(value)
        return values

    def _sub_decoder(
        self, builder: MessageBuilder, field: FieldDescriptor, default_instance: Message | None
    ) -> "Decoder":
        decoder = self._sub_decoders.get(field)
        if decoder is not None:
            return decoder

        if default_instance is not None:
            target = default_instance.descriptor
        else:
            target = builder.new_sub_builder(field).descriptor

        candidate = Decoder(target, build=True, extensions=self._extensions)
        with self._sub_decoders_lock:
            decoder = self._sub_decoders.setdefault(field, candidate)

        if decoder is candidate:
            logger.debug("Cached decoder for %s -> %s", field.full_name, target.name)
        return decoder
