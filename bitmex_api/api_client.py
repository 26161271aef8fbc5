"""ApiClient - The single entry point every endpoint call goes through.

call_api builds a SignedRequest, executes it, records the response as
last_response, raises ApiError for non-2xx statuses, and deserializes the
body into the requested return type.

Usage:
    with ApiClient(Configuration(api_key="...", api_secret="...")) as client:
        margin = client.call_api("GET", "/user/margin", return_type="Margin")
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Any

import bitmex_api.domain  # noqa: F401  (registers the exchange models)
from bitmex_api.auth import Authenticator
from bitmex_api.deserializer import Deserializer
from bitmex_api.errors import ApiError
from bitmex_api.models import Configuration, RequestIntent, ResponseEnvelope, SignedRequest
from bitmex_api.registry import ModelRegistry, default_registry
from bitmex_api.request_builder import JSON_MEDIA_TYPE, RequestBuilder, build_request_url
from bitmex_api.transport import Transport
from bitmex_api.type_descriptor import TypeDescriptor

# Version of the client (sent in the User-Agent header)
CLIENT_VERSION = "1.0.0"
DEFAULT_USER_AGENT = f"bitmex-api-python/{CLIENT_VERSION}"


class ApiClient:
    """Signs, sends and deserializes API calls for one configuration.

    Args:
        configuration: Host, credentials, TLS and debug settings.
        registry: Named model types; the exchange models by default.
        transport: Executes requests; built from configuration if None.
        access_token: Overrides configuration.access_token for this client.
    """

    def __init__(
        self,
        configuration: Configuration | None = None,
        registry: ModelRegistry | None = None,
        transport: Transport | None = None,
        access_token: str | None = None,
    ) -> None:
        self.configuration = configuration or Configuration()
        self.access_token = access_token
        self.default_headers: dict[str, str] = {
            "Content-Type": JSON_MEDIA_TYPE,
            "User-Agent": DEFAULT_USER_AGENT,
        }
        self.logger = logging.getLogger(self.configuration.logger_name)

        self._authenticator = Authenticator(self.configuration, self.logger)
        self._builder = RequestBuilder(
            self.configuration, self._authenticator, self.default_headers, self.logger
        )
        self._deserializer = Deserializer(
            registry if registry is not None else default_registry,
            self.configuration,
            self.logger,
        )
        self._transport = transport or Transport(self.configuration)

        self._last_response: ResponseEnvelope | None = None
        self._last_response_lock = Lock()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying transport."""
        self._transport.close()

    @property
    def host(self) -> str:
        return self.configuration.host

    @property
    def user_agent(self) -> str:
        return self.default_headers["User-Agent"]

    @user_agent.setter
    def user_agent(self, user_agent: str) -> None:
        self.default_headers["User-Agent"] = user_agent

    @property
    def last_response(self) -> ResponseEnvelope | None:
        """The most recent response seen by this client.

        Best-effort under concurrent use: another thread's call may replace
        it at any time.
        """
        with self._last_response_lock:
            return self._last_response

    def call_api(
        self,
        method: str,
        path: str,
        *,
        header_params: dict[str, str] | None = None,
        query_params: dict[str, Any] | None = None,
        form_params: dict[str, Any] | None = None,
        body: Any = None,
        return_type: str | None = None,
        auth_names: tuple[str, ...] | list[str] = (),
    ) -> Any:
        """Execute one API call.

        Args:
            method: HTTP method.
            path: Path relative to the configured host, e.g. "/user/margin".
            header_params: Headers overriding the defaults.
            query_params: Query parameters (signed along with the path).
            form_params: Form fields, sent url-encoded for body-carrying verbs.
            body: Explicit body, used when the content type is not a form type.
            return_type: Type descriptor of the result, e.g. "Array<Margin>".
            auth_names: Configured auth settings to attach.

        Returns:
            The deserialized body, or None if return_type is None or the
            body is empty.

        Raises:
            TransportError: If no response was received.
            ApiError: If the response status is not 2xx.
            UnsupportedContentTypeError, ResponseParseError,
            DeserializationError, UnknownTypeError: If the body cannot be
                converted to return_type.
        """
        intent = RequestIntent(
            method=method,
            path=path,
            header_params=header_params or {},
            query_params=query_params or {},
            form_params=form_params or {},
            body=body,
            return_type=return_type,
            auth_names=tuple(auth_names),
        )
        request = self.build_request(intent)
        response = self._transport.execute(request)

        with self._last_response_lock:
            self._last_response = response

        if self.configuration.debug:
            self.logger.debug("HTTP response body ~BEGIN~\n%s\n~END~", response.text)

        if not response.success:
            raise ApiError(
                response.reason_phrase or None,
                code=response.status_code,
                response_headers=response.headers,
                response_body=response.text,
            )

        if intent.return_type is None:
            return None
        return self.deserialize(response, intent.return_type)

    def build_request(self, intent: RequestIntent, nonce: int | None = None) -> SignedRequest:
        """Build and sign a request without sending it."""
        return self._builder.build(intent, access_token=self.access_token, nonce=nonce)

    def build_request_url(self, path: str) -> str:
        return build_request_url(self.host, path)

    def deserialize(
        self, response: ResponseEnvelope, return_type: TypeDescriptor | str | None
    ) -> Any:
        return self._deserializer.deserialize(response, return_type)

    def convert_to_type(self, data: Any, return_type: TypeDescriptor | str) -> Any:
        return self._deserializer.convert(data, return_type)
