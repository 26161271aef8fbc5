"""Tests for type descriptor parsing.

Tests cover:
- Primitive names and aliases
- Array<T> / Map<String, T> / Hash<String, T> nesting
- Named model types
- Malformed descriptors
- Memoization and string rendering
"""

import pytest

from bitmex_api.errors import TypeDescriptorError
from bitmex_api.type_descriptor import (
    ArrayOf,
    MapOf,
    Named,
    Primitive,
    PrimitiveKind,
    as_descriptor,
    parse_type_descriptor,
)


class TestPrimitives:
    """Primitive names parse to Primitive."""

    @pytest.mark.parametrize("kind", list(PrimitiveKind))
    def test_every_kind(self, kind: PrimitiveKind) -> None:
        assert parse_type_descriptor(kind.value) == Primitive(kind)

    def test_boolean_alias(self) -> None:
        assert parse_type_descriptor("BOOLEAN") == Primitive(PrimitiveKind.BOOLEAN)

    def test_x_any_is_object(self) -> None:
        assert parse_type_descriptor("x-any") == Primitive(PrimitiveKind.OBJECT)

    def test_surrounding_whitespace(self) -> None:
        assert parse_type_descriptor("  Integer ") == Primitive(PrimitiveKind.INTEGER)


class TestContainers:
    """Generic containers nest recursively."""

    def test_array(self) -> None:
        assert parse_type_descriptor("Array<Margin>") == ArrayOf(Named("Margin"))

    def test_map(self) -> None:
        assert parse_type_descriptor("Map<String, Integer>") == MapOf(
            Primitive(PrimitiveKind.INTEGER)
        )

    def test_hash_alias(self) -> None:
        assert parse_type_descriptor("Hash<String, Float>") == MapOf(
            Primitive(PrimitiveKind.FLOAT)
        )

    def test_map_without_space(self) -> None:
        assert parse_type_descriptor("Map<String,Integer>") == parse_type_descriptor(
            "Map<String, Integer>"
        )

    def test_deep_nesting(self) -> None:
        assert parse_type_descriptor("Array<Map<String, Array<Margin>>>") == ArrayOf(
            MapOf(ArrayOf(Named("Margin")))
        )

    def test_bare_container_name_is_named(self) -> None:
        assert parse_type_descriptor("Array") == Named("Array")


class TestNamed:
    """Anything else is a named model type."""

    def test_model_name(self) -> None:
        assert parse_type_descriptor("ConnectedUsers") == Named("ConnectedUsers")

    def test_lowercase_primitive_is_named(self) -> None:
        assert parse_type_descriptor("string") == Named("string")


class TestMalformed:
    """Malformed descriptors raise TypeDescriptorError."""

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "   ",
            "Array<",
            "Array<Margin",
            "Array<>",
            "Array<Margin>>",
            "Map<Integer, Margin>",
            "Map<String Margin>",
            "Margin Extra",
            "<Margin>",
            "Array[Margin]",
        ],
    )
    def test_rejected(self, text: str) -> None:
        with pytest.raises(TypeDescriptorError):
            parse_type_descriptor(text)

    def test_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            parse_type_descriptor("Array<")


class TestHelpers:
    """as_descriptor, memoization and rendering."""

    def test_parse_memoized(self) -> None:
        assert parse_type_descriptor("Array<Margin>") is parse_type_descriptor("Array<Margin>")

    def test_as_descriptor_passes_through(self) -> None:
        descriptor = ArrayOf(Named("Margin"))
        assert as_descriptor(descriptor) is descriptor

    def test_as_descriptor_parses_strings(self) -> None:
        assert as_descriptor("Integer") == Primitive(PrimitiveKind.INTEGER)

    def test_str_round_trips_canonical_form(self) -> None:
        text = "Array<Map<String, Margin>>"
        assert str(parse_type_descriptor(text)) == text

    def test_descriptors_hashable(self) -> None:
        assert len({parse_type_descriptor("Integer"), Primitive(PrimitiveKind.INTEGER)}) == 1
