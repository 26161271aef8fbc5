"""Model Registry - Descriptors for named response types.

Each exchange model is an ApiModel subclass: a Pydantic model whose field
aliases are the wire keys and whose swagger_types map every field to a
type descriptor string. Registering a model parses those strings once and
stores the result as a ModelSpec, which is all the deserializer needs to
build an instance: a factory plus an ordered list of FieldSpecs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Iterator, TypeVar

from pydantic import BaseModel, ConfigDict

from bitmex_api.errors import TypeDescriptorError, UnknownTypeError
from bitmex_api.type_descriptor import TypeDescriptor, parse_type_descriptor


class ApiModel(BaseModel):
    """Base class for exchange models.

    Fields are declared with alias=<wire key>. Instances start empty and are
    filled field by field, so model_fields_set records exactly which fields
    the server sent.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    # field name -> type descriptor string, e.g. {"timestamp": "DateTime"}
    swagger_types: ClassVar[dict[str, str]] = {}
    # fields that must be present and non-null in every payload
    required_fields: ClassVar[frozenset[str]] = frozenset()

    @classmethod
    def attribute_map(cls) -> dict[str, str]:
        """Field name -> wire key."""
        return {name: info.alias or name for name, info in cls.model_fields.items()}

    @classmethod
    def type_map(cls) -> dict[str, str]:
        """Field name -> type descriptor string."""
        return dict(cls.swagger_types)

    def to_dict(self) -> dict[str, Any]:
        """Wire-keyed dict of the fields that have been set."""
        return self.model_dump(by_alias=True, exclude_unset=True, mode="json")


@dataclass(frozen=True)
class FieldSpec:
    """How one model field is read from the wire."""

    name: str
    wire_key: str
    descriptor: TypeDescriptor
    required: bool = False

    def set(self, instance: Any, value: Any) -> None:
        setattr(instance, self.name, value)


@dataclass(frozen=True)
class ModelSpec:
    """Everything needed to build one named model from decoded JSON."""

    type_id: str
    factory: Callable[[], Any]
    fields: tuple[FieldSpec, ...]


ModelT = TypeVar("ModelT", bound=type[ApiModel])


class ModelRegistry:
    """Maps type ids to ModelSpecs.

    Usage:
        registry = ModelRegistry()

        @registry.register
        class Margin(ApiModel):
            ...

        spec = registry.get("Margin")
    """

    def __init__(self) -> None:
        self._specs: dict[str, ModelSpec] = {}

    def register(self, model_cls: ModelT) -> ModelT:
        """Register an ApiModel subclass under its class name. Usable as a decorator."""
        self.add(build_model_spec(model_cls))
        return model_cls

    def add(self, spec: ModelSpec) -> None:
        self._specs[spec.type_id] = spec

    def get(self, type_id: str) -> ModelSpec:
        """Return the ModelSpec for type_id.

        Raises:
            UnknownTypeError: If nothing is registered under type_id.
        """
        try:
            return self._specs[type_id]
        except KeyError:
            raise UnknownTypeError(type_id, self._specs.keys()) from None

    def __contains__(self, type_id: object) -> bool:
        return type_id in self._specs

    def __iter__(self) -> Iterator[str]:
        return iter(self._specs)

    def __len__(self) -> int:
        return len(self._specs)


def build_model_spec(model_cls: type[ApiModel]) -> ModelSpec:
    """Parse a model's attribute and type maps into a ModelSpec.

    Raises:
        TypeDescriptorError: If a field has no type descriptor or the
            descriptor is malformed.
    """
    attribute_map = model_cls.attribute_map()
    type_map = model_cls.type_map()

    fields = []
    for name, wire_key in attribute_map.items():
        if name not in type_map:
            raise TypeDescriptorError(
                f"{model_cls.__name__}.{name} has no entry in swagger_types"
            )
        fields.append(
            FieldSpec(
                name=name,
                wire_key=wire_key,
                descriptor=parse_type_descriptor(type_map[name]),
                required=name in model_cls.required_fields,
            )
        )

    return ModelSpec(type_id=model_cls.__name__, factory=model_cls, fields=tuple(fields))


# Registry populated by bitmex_api.domain at import time
default_registry = ModelRegistry()
