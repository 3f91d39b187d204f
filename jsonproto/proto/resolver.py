"""Property name lookup for one message type."""

from collections.abc import Iterable
from dataclasses import dataclass

from ..schema.descriptors import FieldDescriptor, MessageDescriptor
from ..schema.extensions import ExtensionInfo
from ..schema.parser import ValidationError
from .message import Message
from .naming import NameTranslator


@dataclass(frozen=True, slots=True)
class FieldResolver:
    """Maps translated property names to fields, then to extensions.

    Schema fields take precedence: the extension table is only consulted
    for names no schema field claims.
    """

    fields: dict[str, FieldDescriptor]
    extensions: dict[str, ExtensionInfo]

    @classmethod
    def build(
        cls,
        descriptor: MessageDescriptor,
        extension_infos: Iterable[ExtensionInfo],
        translate: NameTranslator,
    ) -> "FieldResolver":
        fields: dict[str, FieldDescriptor] = {}
        for field in descriptor.fields:
            key = translate(field.name)
            if key in fields:
                raise ValidationError(
                    f"{descriptor.name}: fields {fields[key].name} and {field.name} "
                    f"both translate to property {key!r}"
                )
            fields[key] = field

        extensions = {translate(info.descriptor.name): info for info in extension_infos}
        return cls(fields=fields, extensions=extensions)

    def resolve(self, name: str) -> tuple[FieldDescriptor, Message | None] | None:
        """The field for a property name plus the extension's default instance.

        Returns None when the name matches neither a field nor an extension.
        """
        field = self.fields.get(name)
        if field is not None:
            return field, None

        info = self.extensions.get(name)
        if info is not None:
            return info.descriptor, info.default_instance
        return None

    def property_names(self) -> list[str]:
        return sorted(set(self.fields) | set(self.extensions))
