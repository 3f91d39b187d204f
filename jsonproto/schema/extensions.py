"""Extension lookup scoped to extendable message types."""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .descriptors import FieldDescriptor, MessageDescriptor

if TYPE_CHECKING:
    from ..proto.message import Message


@dataclass(frozen=True, slots=True)
class ExtensionInfo:
    """An extension field plus, for message-typed extensions, the empty
    instance of its target type."""

    descriptor: FieldDescriptor
    default_instance: "Message | None" = None


class ExtensionRegistry:
    """Registered extensions, grouped by the message type they extend."""

    def __init__(self) -> None:
        self._by_target: dict[MessageDescriptor, list[ExtensionInfo]] = {}

    @classmethod
    def empty(cls) -> "ExtensionRegistry":
        return cls()

    def add(self, info: ExtensionInfo) -> None:
        field = info.descriptor
        if not field.is_extension:
            raise ValueError(f"{field.full_name} is not an extension field")
        if not field.containing_type.extendable:
            raise ValueError(f"{field.containing_type.name} does not declare extensions")
        self._by_target.setdefault(field.containing_type, []).append(info)

    def find_extensions(self, descriptor: MessageDescriptor) -> list[ExtensionInfo]:
        return list(self._by_target.get(descriptor, ()))

    def __len__(self) -> int:
        return sum(len(infos) for infos in self._by_target.values())
