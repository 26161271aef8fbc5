"""Transport - Sends SignedRequests and captures ResponseEnvelopes.

Every HTTP status produces an envelope; deciding what a non-2xx status means
is left to the caller. Connection, TLS and timeout failures raise
TransportError. Nothing is retried.
"""

from __future__ import annotations

from typing import Any

import httpx

from bitmex_api.errors import TransportError
from bitmex_api.models import Configuration, ResponseEnvelope, SignedRequest


def build_client_kwargs(configuration: Configuration) -> dict[str, Any]:
    """Build kwargs for httpx.Client including TLS configuration.

    Args:
        configuration: Client configuration with optional TLS settings.

    Returns:
        Dictionary of kwargs for httpx.Client constructor.
    """
    kwargs: dict[str, Any] = {}

    if configuration.timeout is not None:
        kwargs["timeout"] = configuration.timeout

    # Handle client certificate (mTLS)
    if configuration.cert_file and configuration.key_file:
        kwargs["cert"] = (configuration.cert_file, configuration.key_file)
    elif configuration.cert_file:
        kwargs["cert"] = configuration.cert_file

    # Handle server verification
    if not configuration.verify_ssl:
        kwargs["verify"] = False
    elif configuration.ssl_ca_cert:
        kwargs["verify"] = configuration.ssl_ca_cert
    # else: use httpx default (True)

    return kwargs


class Transport:
    """Executes requests over one pooled httpx client.

    Usage:
        with Transport(configuration) as transport:
            envelope = transport.execute(signed_request)
    """

    def __init__(self, configuration: Configuration) -> None:
        self._client = httpx.Client(**build_client_kwargs(configuration))

    def __enter__(self) -> "Transport":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def execute(self, request: SignedRequest) -> ResponseEnvelope:
        """Send one request and capture the response.

        Args:
            request: The signed request to send.

        Returns:
            ResponseEnvelope for any HTTP status.

        Raises:
            TransportError: If no response was received.
        """
        try:
            http_response = self._client.request(
                method=request.method,
                url=request.url,
                headers=request.headers,
                content=request.body.encode("utf-8") if request.body else None,
            )
        except httpx.TimeoutException as e:
            raise TransportError(f"Request timeout: {e}") from e
        except httpx.ConnectError as e:
            raise TransportError(f"Connection error: {e}") from e
        except httpx.RequestError as e:
            raise TransportError(f"Request error: {e}") from e
        except UnicodeEncodeError as e:
            # Header values must be ASCII
            raise TransportError(
                f"Encoding error: non-ASCII characters in request "
                f"({e.object[e.start:e.end]!r} at position {e.start})"
            ) from e

        return self._convert_response(http_response)

    def _convert_response(self, response: httpx.Response) -> ResponseEnvelope:
        """Convert httpx Response to ResponseEnvelope.

        Repeated headers are joined with ", " per RFC 9110.
        """
        headers: dict[str, str] = {}
        for key, value in response.headers.multi_items():
            key_lower = key.lower()
            if key_lower in headers:
                headers[key_lower] = f"{headers[key_lower]}, {value}"
            else:
                headers[key_lower] = value

        return ResponseEnvelope(
            status_code=response.status_code,
            reason_phrase=response.reason_phrase or "",
            headers=headers,
            content=response.content,
        )
