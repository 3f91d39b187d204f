"""Per-call decoding options."""

from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import StrEnum, auto
from typing import TYPE_CHECKING, Any

from .naming import NameTranslator, NamingPolicy

if TYPE_CHECKING:
    from .message import MessageBuilder


class UnknownPropertyPolicy(StrEnum):
    """What to do with a property that matches no field or extension."""

    SKIP = auto()
    FAIL = auto()


class Base64Variant(StrEnum):
    """Alphabet used for BYTES fields."""

    STANDARD = auto()
    URL_SAFE = auto()


# Called with (builder, property name); returning True skips the value.
UnknownPropertyHandler = Callable[["MessageBuilder", str], bool]


@dataclass(frozen=True)
class DecodeConfig:
    """Options recognized by the decoder.

    Defaults match the strict behavior: unknown properties fail, numbers are
    accepted for enums, nulls for primitives leave the field unset.
    """

    accept_single_value_as_array: bool = False
    fail_on_null_for_primitives: bool = False
    accept_empty_string_as_null_for_enum: bool = False
    fail_on_numbers_for_enums: bool = False
    ignore_unknown_enum_values: bool = False
    on_unknown_property: UnknownPropertyPolicy = UnknownPropertyPolicy.FAIL
    name_translation: NamingPolicy | NameTranslator = NamingPolicy.LOWER_CAMEL_CASE
    base64_variant: Base64Variant = Base64Variant.STANDARD
    unknown_property_handler: UnknownPropertyHandler | None = None

    def with_options(self, **changes: Any) -> "DecodeConfig":
        """Copy of this config with the given options replaced."""
        return replace(self, **changes)


DEFAULT_CONFIG = DecodeConfig()
