"""Request Builder - Turns a RequestIntent into a SignedRequest.

Order matters: headers are merged, the body is encoded, and only then is the
Authenticator asked for headers, so the signature covers the exact body and
query string that go on the wire.
"""

from __future__ import annotations

import io
import json
import logging
import re
from typing import Any
from urllib.parse import quote

from bitmex_api.auth import Authenticator, apply_auth_settings, encode_query, to_wire_value
from bitmex_api.errors import ApiClientError
from bitmex_api.models import Configuration, RequestIntent, SignedRequest
from bitmex_api.registry import ApiModel

FORM_URLENCODED = "application/x-www-form-urlencoded"
MULTIPART_FORM_DATA = "multipart/form-data"
JSON_MEDIA_TYPE = "application/json"

BODY_METHODS = frozenset({"POST", "PATCH", "PUT", "DELETE"})

_REPEATED_SLASHES = re.compile(r"/+")
# Reserved URL characters that must survive percent-encoding
_URL_SAFE_CHARS = ";/?:@&=+$,[]!*'()"


def build_request_url(host: str, path: str) -> str:
    """Join host and path with exactly one slash between segments, percent-encoded."""
    path = _REPEATED_SLASHES.sub("/", f"/{path}")
    return quote(host + path, safe=_URL_SAFE_CHARS)


def _is_file(value: Any) -> bool:
    return isinstance(value, io.IOBase)


def build_request_body(
    header_params: dict[str, str],
    form_params: dict[str, Any],
    body: Any,
) -> dict[str, Any] | str | None:
    """Choose the request payload from the content type and the supplied params.

    Returns:
        A dict of form fields (non-file values rendered as wire strings,
        None values dropped) for form content types, the explicit body as a string
        otherwise, or None when there is nothing to send.
    """
    content_type = header_params.get("Content-Type")
    if content_type in (FORM_URLENCODED, MULTIPART_FORM_DATA):
        return {
            key: value if _is_file(value) else str(to_wire_value(value))
            for key, value in form_params.items()
            if value is not None
        }
    if body is not None:
        return body if isinstance(body, str) else object_to_http_body(body)
    return None


def encode_form(data: dict[str, Any]) -> str:
    """URL-encode form fields.

    Raises:
        ApiClientError: If a field holds a file; files cannot be url-encoded.
    """
    for key, value in data.items():
        if _is_file(value):
            raise ApiClientError(
                f"Form parameter '{key}' is a file and cannot be sent as {FORM_URLENCODED}"
            )
    return encode_query(data)


def object_to_http_body(model: Any) -> str | None:
    """Serialize a model, a list of models, or a plain JSON value to a JSON string."""
    if model is None:
        return None
    if isinstance(model, list):
        payload: Any = [object_to_hash(item) for item in model]
    else:
        payload = object_to_hash(model)
    return json.dumps(payload, separators=(",", ":"))


def object_to_hash(obj: Any) -> Any:
    if isinstance(obj, ApiModel):
        return obj.to_dict()
    return obj


def select_header_accept(accepts: list[str]) -> str | None:
    """Accept header for a list of acceptable media types (JSON preferred)."""
    if not accepts:
        return None
    if any(accept.lower() == JSON_MEDIA_TYPE for accept in accepts):
        return JSON_MEDIA_TYPE
    return ",".join(accepts)


def select_header_content_type(content_types: list[str]) -> str:
    """Content-Type header for a list of supported media types (JSON preferred)."""
    if not content_types:
        return JSON_MEDIA_TYPE
    if any(content_type.lower() == JSON_MEDIA_TYPE for content_type in content_types):
        return JSON_MEDIA_TYPE
    return content_types[0]


class RequestBuilder:
    """Builds SignedRequests for one client.

    Args:
        configuration: Client configuration (host, auth settings, debug flag).
        authenticator: Supplies the auth headers for each request.
        default_headers: Headers sent with every request unless overridden.
        logger: Logger for debug output.
    """

    def __init__(
        self,
        configuration: Configuration,
        authenticator: Authenticator,
        default_headers: dict[str, str],
        logger: logging.Logger | None = None,
    ) -> None:
        self._configuration = configuration
        self._authenticator = authenticator
        self._default_headers = default_headers
        self._logger = logger or logging.getLogger(configuration.logger_name)

    def build(
        self,
        intent: RequestIntent,
        access_token: str | None = None,
        nonce: int | None = None,
    ) -> SignedRequest:
        """Build and sign the request described by intent.

        Args:
            intent: The caller's description of the call.
            access_token: Overrides the configured access token.
            nonce: Fixed signing nonce; the current time if None.
        """
        config = self._configuration
        method = intent.method.upper()
        url = build_request_url(config.host, intent.path)

        header_params = {**self._default_headers, **intent.header_params}
        query_params = dict(intent.query_params)
        apply_auth_settings(header_params, query_params, intent.auth_names, config.auth_settings)

        body = ""
        if method in BODY_METHODS:
            header_params["Content-Type"] = FORM_URLENCODED
            request_body = build_request_body(header_params, intent.form_params, intent.body)
            if isinstance(request_body, dict):
                body = encode_form(request_body)
            elif request_body is not None:
                body = request_body
            if config.debug:
                self._logger.debug("HTTP request body param ~BEGIN~\n%s\n~END~", body)

        header_params.update(
            self._authenticator.build_auth_headers(
                method, intent.path, query_params, body, access_token=access_token, nonce=nonce
            )
        )
        if config.debug:
            self._logger.debug("HTTP request header params ~BEGIN~\n%s\n~END~", header_params)

        query = encode_query(query_params)
        if query:
            url = f"{url}?{query}"

        return SignedRequest(method=method, url=url, headers=header_params, body=body)
