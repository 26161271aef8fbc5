"""Authenticator - Computes the auth headers for a request.

Two mutually exclusive modes:
- access token: a single AccessToken header, no signing.
- API key: HMAC-SHA256 over METHOD + request path + nonce + body, sent as
  api-nonce / api-key / api-signature headers.

The signature must be computed over the body exactly as it will be sent,
so the request builder calls this only after the body is encoded.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import re
import time
from typing import Any, Callable, Iterable
from urllib.parse import urlencode

from bitmex_api.errors import AuthSettingError
from bitmex_api.models import AuthSetting, Configuration

_REPEATED_SLASHES = re.compile(r"/+")


def sign(secret: str, message: str) -> str:
    """Hex-encoded HMAC-SHA256 of message under secret."""
    return hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()


def to_wire_value(value: Any) -> Any:
    """Render a scalar parameter as the exchange expects it (booleans lowercase)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def encode_query(query_params: dict[str, Any]) -> str:
    """Form-encode query parameters the same way for signing and for the URL.

    None values are left out entirely.
    """
    params: dict[str, Any] = {}
    for key, value in query_params.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            params[key] = [to_wire_value(item) for item in value if item is not None]
        else:
            params[key] = to_wire_value(value)
    return urlencode(params, doseq=True)


class Authenticator:
    """Builds auth headers from a Configuration.

    Args:
        configuration: Client configuration holding the credentials.
        logger: Logger for debug output of the signing material.
        clock: Returns the current time in seconds; the nonce is derived
               from it in milliseconds.
    """

    def __init__(
        self,
        configuration: Configuration,
        logger: logging.Logger | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._configuration = configuration
        self._logger = logger or logging.getLogger(configuration.logger_name)
        self._clock = clock

    def next_nonce(self) -> int:
        return int(self._clock() * 1000)

    def build_auth_headers(
        self,
        method: str,
        path: str,
        query_params: dict[str, Any] | None,
        body: str,
        access_token: str | None = None,
        nonce: int | None = None,
    ) -> dict[str, str]:
        """Return the headers that authenticate this request.

        Args:
            method: HTTP method, any case.
            path: Request path relative to the configured base path.
            query_params: Query parameters; appended to the signed path when non-empty.
            body: The encoded body string exactly as it will be sent.
            access_token: Overrides the configured access token.
            nonce: Fixed nonce; the current time in milliseconds if None.
        """
        token = access_token or self._configuration.access_token
        if token:
            return {"AccessToken": token}

        config = self._configuration
        method = method.upper()
        if nonce is None:
            nonce = self.next_nonce()

        query = encode_query(query_params) if query_params else ""
        if query:
            path = f"{path}?{query}"
        request_path = _REPEATED_SLASHES.sub("/", f"{config.base_path}/{path}")

        message = f"{method}{request_path}{nonce}{body}"
        signature = sign(config.api_secret or "", message)

        if config.debug:
            # NOTE: includes the secret in cleartext
            self._logger.debug(
                "[AuthHeader]%s",
                {
                    "nonce": nonce,
                    "http_method": method,
                    "request_path": request_path,
                    "data": body,
                    "signed": message,
                    "api_key": config.api_key,
                    "api_secret": config.api_secret,
                },
            )

        return {
            "api-nonce": str(nonce),
            "api-key": config.api_key or "",
            "api-signature": signature,
        }


def apply_auth_settings(
    header_params: dict[str, str],
    query_params: dict[str, Any],
    auth_names: Iterable[str],
    auth_settings: dict[str, AuthSetting],
) -> None:
    """Place each named auth setting into the headers or query parameters.

    Names with no configured setting are skipped.

    Raises:
        AuthSettingError: If a setting's location is neither header nor query.
    """
    for auth_name in auth_names:
        setting = auth_settings.get(auth_name)
        if setting is None:
            continue
        if setting.location == "header":
            header_params[setting.key] = setting.value
        elif setting.location == "query":
            query_params[setting.key] = setting.value
        else:
            raise AuthSettingError(
                f"Authentication token must be in `query` or `header`, "
                f"got '{setting.location}' for '{auth_name}'"
            )
