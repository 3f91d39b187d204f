"""Translation of declared field names into JSON property names."""

from collections.abc import Callable
from enum import StrEnum, auto


class NamingPolicy(StrEnum):
    """Built-in property naming policies.

    Declared field names are expected in snake_case, as schema files write
    them. LOWER_CAMEL_CASE is the protobuf JSON mapping and the default.
    """

    LOWER_CAMEL_CASE = auto()
    UPPER_CAMEL_CASE = auto()
    SNAKE_CASE = auto()
    KEBAB_CASE = auto()
    LOWER_CASE = auto()
    PRESERVE = auto()


NameTranslator = Callable[[str], str]


def to_lower_camel_case(name: str) -> str:
    """foo_bar_baz -> fooBarBaz; letters after an underscore are capitalized."""
    out: list[str] = []
    capitalize_next = False
    for ch in name:
        if ch == "_":
            capitalize_next = True
        elif capitalize_next:
            out.append(ch.upper())
            capitalize_next = False
        else:
            out.append(ch)
    return "".join(out)


def to_upper_camel_case(name: str) -> str:
    camel = to_lower_camel_case(name)
    return camel[:1].upper() + camel[1:]


def _separated(name: str, separator: str) -> str:
    out: list[str] = []
    for i, ch in enumerate(name):
        if ch == "_":
            out.append(separator)
        elif ch.isupper():
            if i > 0 and name[i - 1] != "_" and not name[i - 1].isupper():
                out.append(separator)
            out.append(ch.lower())
        else:
            out.append(ch)
    return "".join(out)


def to_snake_case(name: str) -> str:
    return _separated(name, "_")


def to_kebab_case(name: str) -> str:
    return _separated(name, "-")


_TRANSLATORS: dict[NamingPolicy, NameTranslator] = {
    NamingPolicy.LOWER_CAMEL_CASE: to_lower_camel_case,
    NamingPolicy.UPPER_CAMEL_CASE: to_upper_camel_case,
    NamingPolicy.SNAKE_CASE: to_snake_case,
    NamingPolicy.KEBAB_CASE: to_kebab_case,
    NamingPolicy.LOWER_CASE: str.lower,
    NamingPolicy.PRESERVE: lambda name: name,
}


def translator_for(policy: NamingPolicy | NameTranslator) -> NameTranslator:
    """Return the translation function for a policy or a custom callable."""
    if isinstance(policy, NamingPolicy):
        return _TRANSLATORS[policy]
    if callable(policy):
        return policy
    raise TypeError(f"Unsupported naming policy {policy!r}")


def translate(policy: NamingPolicy | NameTranslator, name: str) -> str:
    """Translate a declared field name under the given policy."""
    return translator_for(policy)(name)
