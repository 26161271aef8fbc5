"""Type Descriptors - Target shapes for response deserialization.

A descriptor string such as "Array<Map<String, Margin>>" is parsed once into
a tree of frozen dataclasses:

    Primitive(kind)   String, Integer, Float, Boolean, Date, DateTime, Object, File
    ArrayOf(item)     Array<T>
    MapOf(value)      Map<String, T>  (Hash<String, T> is accepted as an alias)
    Named(type_id)    any other identifier; resolved against a ModelRegistry

Parsing is memoized, so the deserializer never re-parses a string it has
already seen.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Union

from bitmex_api.errors import TypeDescriptorError


class PrimitiveKind(str, Enum):
    """Primitive targets understood by the converter."""

    STRING = "String"
    INTEGER = "Integer"
    FLOAT = "Float"
    BOOLEAN = "Boolean"
    DATE = "Date"
    DATETIME = "DateTime"
    OBJECT = "Object"
    FILE = "File"


# Spellings used by generated model schemas that mean the same primitive
_PRIMITIVE_ALIASES: dict[str, PrimitiveKind] = {
    "BOOLEAN": PrimitiveKind.BOOLEAN,
    "x-any": PrimitiveKind.OBJECT,
}

_CONTAINER_NAMES = {"Array", "Map", "Hash"}

# Identifiers, generic brackets, and the comma between map type arguments
_TOKEN_PATTERN = re.compile(r"\s*(?:([A-Za-z_][A-Za-z0-9_\-]*)|(<|>|,))")


@dataclass(frozen=True)
class Primitive:
    kind: PrimitiveKind

    def __str__(self) -> str:
        return self.kind.value


@dataclass(frozen=True)
class ArrayOf:
    item: "TypeDescriptor"

    def __str__(self) -> str:
        return f"Array<{self.item}>"


@dataclass(frozen=True)
class MapOf:
    value: "TypeDescriptor"

    def __str__(self) -> str:
        return f"Map<String, {self.value}>"


@dataclass(frozen=True)
class Named:
    type_id: str

    def __str__(self) -> str:
        return self.type_id


TypeDescriptor = Union[Primitive, ArrayOf, MapOf, Named]

STRING = Primitive(PrimitiveKind.STRING)
FILE = Primitive(PrimitiveKind.FILE)

# Targets for which an unparseable body is taken as the raw value
RAW_TEXT_TARGETS = frozenset(
    {Primitive(PrimitiveKind.STRING), Primitive(PrimitiveKind.DATE), Primitive(PrimitiveKind.DATETIME)}
)


def _tokenize(text: str) -> list[str]:
    tokens: list[str] = []
    pos = 0
    stripped_len = len(text.rstrip())
    while pos < stripped_len:
        match = _TOKEN_PATTERN.match(text, pos)
        if match is None:
            raise TypeDescriptorError(
                f"Unexpected character {text[pos:pos + 1]!r} at position {pos} in {text!r}"
            )
        tokens.append(match.group(1) or match.group(2))
        pos = match.end()
    return tokens


class _Parser:
    """Recursive-descent parser over the token list of one descriptor string."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._tokens = _tokenize(text)
        self._pos = 0

    def parse(self) -> TypeDescriptor:
        descriptor = self._descriptor()
        if self._pos != len(self._tokens):
            raise TypeDescriptorError(
                f"Unexpected trailing token {self._tokens[self._pos]!r} in {self._text!r}"
            )
        return descriptor

    def _peek(self) -> str | None:
        return self._tokens[self._pos] if self._pos < len(self._tokens) else None

    def _next(self) -> str:
        token = self._peek()
        if token is None:
            raise TypeDescriptorError(f"Unexpected end of type descriptor {self._text!r}")
        self._pos += 1
        return token

    def _expect(self, expected: str) -> None:
        token = self._next()
        if token != expected:
            raise TypeDescriptorError(
                f"Expected {expected!r} but found {token!r} in {self._text!r}"
            )

    def _descriptor(self) -> TypeDescriptor:
        name = self._next()
        if name in ("<", ">", ","):
            raise TypeDescriptorError(f"Expected a type name but found {name!r} in {self._text!r}")

        if name in _CONTAINER_NAMES and self._peek() == "<":
            self._expect("<")
            if name == "Array":
                item = self._descriptor()
                self._expect(">")
                return ArrayOf(item)
            key = self._next()
            if key != "String":
                raise TypeDescriptorError(
                    f"Map keys must be String, got {key!r} in {self._text!r}"
                )
            self._expect(",")
            value = self._descriptor()
            self._expect(">")
            return MapOf(value)

        if name in _PRIMITIVE_ALIASES:
            return Primitive(_PRIMITIVE_ALIASES[name])
        try:
            return Primitive(PrimitiveKind(name))
        except ValueError:
            return Named(name)


@lru_cache(maxsize=None)
def parse_type_descriptor(text: str) -> TypeDescriptor:
    """Parse a descriptor string such as "Array<Margin>" into a descriptor tree.

    Raises:
        TypeDescriptorError: If the string does not follow the grammar.
    """
    if not text or not text.strip():
        raise TypeDescriptorError("Type descriptor must not be empty")
    return _Parser(text).parse()


def as_descriptor(value: "TypeDescriptor | str") -> TypeDescriptor:
    """Accept either an already-parsed descriptor or a descriptor string."""
    if isinstance(value, str):
        return parse_type_descriptor(value)
    return value
