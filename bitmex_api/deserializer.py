"""Deserializer - Converts ResponseEnvelopes into typed values.

The requested type is a TypeDescriptor (or a descriptor string, parsed once
and memoized). JSON bodies are decoded and then converted recursively:
primitives are coerced, Array<T> and Map<String, T> recurse into their
items, and named types are built from their ModelSpec in the registry.
File targets bypass JSON entirely and are written to a temp directory.
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
import uuid
from collections.abc import Mapping
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable

from bitmex_api.errors import (
    DeserializationError,
    ResponseParseError,
    UnsupportedContentTypeError,
)
from bitmex_api.models import Configuration, ResponseEnvelope
from bitmex_api.registry import ModelRegistry
from bitmex_api.type_descriptor import (
    FILE,
    RAW_TEXT_TARGETS,
    ArrayOf,
    MapOf,
    Named,
    Primitive,
    PrimitiveKind,
    TypeDescriptor,
    as_descriptor,
)

DEFAULT_CONTENT_TYPE = "application/json"

_FILENAME_PATTERN = re.compile(r"""filename=['"]?([^'"\s]+)['"]?""")


def _to_int(data: Any) -> int:
    if isinstance(data, str):
        try:
            return int(data)
        except ValueError:
            return int(float(data))
    return int(data)


def _to_datetime(data: Any) -> datetime:
    if not isinstance(data, str):
        raise TypeError(f"expected an ISO-8601 string, got {type(data).__name__}")
    return datetime.fromisoformat(data)


def _to_date(data: Any) -> date:
    return _to_datetime(data).date()


_PRIMITIVE_CONVERTERS: dict[PrimitiveKind, Callable[[Any], Any]] = {
    PrimitiveKind.STRING: str,
    PrimitiveKind.INTEGER: _to_int,
    PrimitiveKind.FLOAT: float,
    # Only the literal JSON true counts; no truthiness coercion
    PrimitiveKind.BOOLEAN: lambda data: data is True,
    PrimitiveKind.DATETIME: _to_datetime,
    PrimitiveKind.DATE: _to_date,
    PrimitiveKind.OBJECT: lambda data: data,
    PrimitiveKind.FILE: lambda data: data,
}


def filename_from_content_disposition(header: str | None) -> str | None:
    """Extract the filename parameter, stripped of any directory components."""
    if not header:
        return None
    match = _FILENAME_PATTERN.search(header)
    if match is None:
        return None
    name = os.path.basename(match.group(1).replace("\\", "/"))
    if name in ("", ".", ".."):
        return None
    return name


class Deserializer:
    """Converts response bodies into the requested type shape.

    Args:
        registry: Model specs for named types.
        configuration: Supplies temp_folder_path for downloads.
        logger: Logger for the download reminder.
    """

    def __init__(
        self,
        registry: ModelRegistry,
        configuration: Configuration,
        logger: logging.Logger | None = None,
    ) -> None:
        self._registry = registry
        self._configuration = configuration
        self._logger = logger or logging.getLogger(configuration.logger_name)

    def deserialize(
        self,
        response: ResponseEnvelope,
        return_type: TypeDescriptor | str | None,
    ) -> Any:
        """Deserialize a response body to return_type.

        Returns:
            The converted value, a Path for File targets, or None when the
            body is empty or no return type was requested.

        Raises:
            UnsupportedContentTypeError: If the body is not JSON.
            ResponseParseError: If the JSON is malformed and the target is
                not String, Date or DateTime.
            DeserializationError: If the data does not fit the target shape.
            UnknownTypeError: If a named type is not registered.
        """
        if return_type is None or not response.content:
            return None

        descriptor = as_descriptor(return_type)
        if descriptor == FILE:
            return self.download_file(response)

        content_type = response.header("Content-Type") or DEFAULT_CONTENT_TYPE
        if not content_type.startswith(DEFAULT_CONTENT_TYPE):
            raise UnsupportedContentTypeError(content_type)

        body = response.text
        try:
            data = json.loads(body)
        except json.JSONDecodeError as e:
            if descriptor not in RAW_TEXT_TARGETS:
                raise ResponseParseError(f"Invalid JSON in response body: {e}") from e
            data = body

        return self.convert(data, descriptor)

    def convert(self, data: Any, return_type: TypeDescriptor | str) -> Any:
        """Convert decoded JSON data to return_type.

        None converts to None for every target.
        """
        if data is None:
            return None
        descriptor = as_descriptor(return_type)

        if isinstance(descriptor, Primitive):
            try:
                return _PRIMITIVE_CONVERTERS[descriptor.kind](data)
            except (TypeError, ValueError) as e:
                raise DeserializationError(
                    f"Cannot convert {type(data).__name__} to {descriptor}: {e}"
                ) from e

        if isinstance(descriptor, ArrayOf):
            if not isinstance(data, list):
                raise DeserializationError(
                    f"Expected a list for {descriptor}, got {type(data).__name__}"
                )
            return [self.convert(item, descriptor.item) for item in data]

        if isinstance(descriptor, MapOf):
            if not isinstance(data, Mapping):
                raise DeserializationError(
                    f"Expected a mapping for {descriptor}, got {type(data).__name__}"
                )
            return {key: self.convert(value, descriptor.value) for key, value in data.items()}

        return self._build_model(data, descriptor)

    def _build_model(self, data: Any, descriptor: Named) -> Any:
        spec = self._registry.get(descriptor.type_id)
        if not isinstance(data, Mapping):
            raise DeserializationError(
                f"Expected a mapping for {descriptor}, got {type(data).__name__}"
            )

        model = spec.factory()
        for field in spec.fields:
            value = data.get(field.wire_key)
            if field.required and value is None:
                raise DeserializationError(
                    f"{descriptor}.{field.name} is required but '{field.wire_key}' is missing"
                )
            # Falsy values (0, False, "", empty containers) are skipped like missing ones
            if not value:
                continue
            field.set(model, self.convert(value, field.descriptor))
        return model

    def download_file(self, response: ResponseEnvelope) -> Path:
        """Write the response body to a new file under the temp folder.

        Each download gets its own directory, so the server-supplied file
        name is kept verbatim without colliding with concurrent downloads.
        """
        download_dir = Path(
            tempfile.mkdtemp(prefix="download-", dir=self._configuration.temp_folder_path)
        )
        filename = filename_from_content_disposition(response.header("Content-Disposition"))
        path = download_dir / (filename or uuid.uuid4().hex)

        path.write_bytes(response.content)
        self._logger.info(
            "File written to %s. Please move the file to a proper folder for further "
            "processing and delete the temp afterwards",
            path,
        )
        return path
