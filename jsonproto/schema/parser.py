"""Schema definition parser using Lark."""

import os
from dataclasses import dataclass
from typing import Any, TypeVar

from lark import Lark
from lark.exceptions import LarkError
from lark.visitors import Transformer

from .types import (
    SchemaEnum,
    SchemaEnumValue,
    SchemaExtend,
    SchemaField,
    SchemaFile,
    SchemaMessage,
    SchemaType,
    is_primitive,
)

_g_parser: Lark | None = None


class ValidationError(RuntimeError):
    """Raised when a schema definition is malformed or inconsistent."""


@dataclass
class _Name:
    value: str


@dataclass
class _Number:
    value: int


@dataclass
class _Repeated:
    pass


@dataclass
class _Extensions:
    pass


TFilter = TypeVar("TFilter", bound=object)


def _filter(args: list[Any], class_type: type[TFilter]) -> list[TFilter]:
    return [v for v in args if isinstance(v, class_type)]


def _find_one(args: list[Any], class_type: type[object]) -> Any:
    filtered = _filter(args, class_type)
    if len(filtered) == 0:
        return None
    if len(filtered) > 1:
        raise RuntimeError(f"Found more than one {class_type}")

    if hasattr(filtered[0], "value"):
        return filtered[0].value
    return filtered[0]


TMany = TypeVar("TMany")


def _find_many(args: list[Any], class_type: type[TMany]) -> list[TMany]:
    return _filter(args, class_type)


class TreeTransformer(Transformer):
    """Transform parse tree into schema definitions."""

    def start(self, args: list[Any]) -> SchemaFile:
        return SchemaFile(
            enums=_find_many(args, SchemaEnum),
            messages=_find_many(args, SchemaMessage),
            extends=_find_many(args, SchemaExtend),
        )

    def enum(self, args: list[Any]) -> SchemaEnum:
        return SchemaEnum(
            name=_find_one(args, _Name),
            values=_find_many(args, SchemaEnumValue),
        )

    def enum_value(self, args: list[Any]) -> SchemaEnumValue:
        return SchemaEnumValue(
            name=_find_one(args, _Name),
            number=_find_one(args, _Number),
        )

    def message(self, args: list[Any]) -> SchemaMessage:
        return SchemaMessage(
            name=_find_one(args, _Name),
            fields=_find_many(args, SchemaField),
            extendable=bool(_filter(args, _Extensions)),
        )

    def extensions(self, args: list[Any]) -> _Extensions:
        return _Extensions()

    def extend(self, args: list[Any]) -> SchemaExtend:
        return SchemaExtend(
            target=_find_one(args, _Name),
            fields=_find_many(args, SchemaField),
        )

    def field(self, args: list[Any]) -> SchemaField:
        return SchemaField(
            name=_find_one(args, _Name),
            type=_find_one(args, SchemaType),
            repeated=_find_one(args, _Repeated) is not None,
        )

    def repeated(self, args: list[Any]) -> _Repeated:
        return _Repeated()

    def name(self, args: list[Any]) -> _Name:
        return _Name(value=str(args[0]))

    def number(self, args: list[Any]) -> _Number:
        return _Number(value=int(args[0]))

    def type(self, args: list[Any]) -> SchemaType:
        return SchemaType(name=str(args[0]))


def _check_unique(names: list[str], what: str) -> None:
    seen: set[str] = set()
    for name in names:
        if name in seen:
            raise ValidationError(f"Duplicate {what} {name}")
        seen.add(name)


def validate(schema: SchemaFile) -> None:
    """Validate a parsed schema definition."""
    _check_unique(
        [enum.name for enum in schema.enums] + [msg.name for msg in schema.messages],
        "type name",
    )

    enum_map = {enum.name: enum for enum in schema.enums}
    message_map = {msg.name: msg for msg in schema.messages}

    for enum in schema.enums:
        if not enum.values:
            raise ValidationError(f"Enum {enum.name} declares no values")
        _check_unique([v.name for v in enum.values], f"value name in enum {enum.name}:")
        _check_unique([str(v.number) for v in enum.values], f"value number in enum {enum.name}:")

    def check_types(fields: list[SchemaField], owner: str) -> None:
        for f in fields:
            if is_primitive(f.type):
                continue
            if f.type.name not in enum_map and f.type.name not in message_map:
                raise ValidationError(f"{owner}.{f.name} refers to undeclared type {f.type.name}")

    for msg in schema.messages:
        _check_unique([f.name for f in msg.fields], f"field in message {msg.name}:")
        check_types(msg.fields, msg.name)

    # Extension names share one scope with the target's own fields
    extension_names: dict[str, set[str]] = {}
    for ext in schema.extends:
        target = message_map.get(ext.target)
        if target is None:
            raise ValidationError(f"extend refers to undeclared message {ext.target}")
        if not target.extendable:
            raise ValidationError(f"Message {ext.target} does not declare extensions")
        check_types(ext.fields, ext.target)

        taken = extension_names.setdefault(ext.target, {f.name for f in target.fields})
        for f in ext.fields:
            if f.name in taken:
                raise ValidationError(f"Extension {f.name} collides with a field of {ext.target}")
            taken.add(f.name)


def _parser() -> Lark:
    global _g_parser

    if not _g_parser:
        with open(f"{os.path.dirname(__file__)}/schema.lark", encoding="utf-8") as f:
            grammar = f.read()

        _g_parser = Lark(grammar)

    return _g_parser


def parse(text: str) -> SchemaFile:
    """Parse and validate a schema definition file."""
    try:
        tree = _parser().parse(text)
    except LarkError as err:
        raise ValidationError(f"Invalid schema definition: {err}") from err

    schema = TreeTransformer().transform(tree)
    validate(schema)

    return schema
