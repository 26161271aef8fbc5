"""Internal data models for bitmex-api.

All models use Pydantic v2. Request-side models are frozen: a request is
built fresh for every call and never mutated once built.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# Configuration Models
# =============================================================================


class AuthSetting(BaseModel):
    """Where and how a single credential is attached to a request."""

    model_config = ConfigDict(extra="forbid")

    location: str = Field(description="'header' or 'query'")
    key: str = Field(description="Header or query parameter name")
    value: str = Field(description="Credential value")


class Configuration(BaseModel):
    """Client configuration. Read-only from the client's point of view."""

    model_config = ConfigDict(extra="forbid")

    host: str = Field(
        default="https://www.bitmex.com/api/v1",
        description="Base URL every request path is appended to",
    )
    base_path: str = Field(
        default="/api/v1", description="Path prefix included in the signed request path"
    )
    api_key: str | None = Field(default=None, description="Public API key")
    api_secret: str | None = Field(default=None, description="API secret used for HMAC signing")
    access_token: str | None = Field(
        default=None, description="Access token; replaces HMAC signing when set"
    )
    verify_ssl: bool = Field(default=True, description="Verify the server certificate")
    cert_file: str | None = Field(default=None, description="Client certificate (mTLS)")
    key_file: str | None = Field(default=None, description="Client certificate key (mTLS)")
    ssl_ca_cert: str | None = Field(default=None, description="CA bundle path")
    temp_folder_path: str | None = Field(
        default=None, description="Directory for downloaded files (system temp dir if unset)"
    )
    timeout: float | None = Field(
        default=None, description="Request timeout in seconds (transport default if unset)"
    )
    debug: bool = Field(default=False, description="Log request/response bodies and signing data")
    logger_name: str = Field(default="bitmex_api", description="Name of the logger to write to")
    auth_settings: dict[str, AuthSetting] = Field(
        default_factory=dict, description="Auth setting name -> placement"
    )

    @field_validator("host")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


# =============================================================================
# Core HTTP Models
# =============================================================================


class RequestIntent(BaseModel):
    """Everything a caller says about one API call, before any encoding."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    method: str = Field(description="HTTP method (GET, POST, etc.)")
    path: str = Field(description="Path relative to the configured host")
    header_params: dict[str, str] = Field(default_factory=dict, description="Caller headers")
    query_params: dict[str, Any] = Field(default_factory=dict, description="Query parameters")
    form_params: dict[str, Any] = Field(default_factory=dict, description="Form parameters")
    body: Any = Field(default=None, description="Explicit body (str, JSON value, or model)")
    return_type: str | None = Field(default=None, description="Type descriptor of the result")
    auth_names: tuple[str, ...] = Field(
        default=(), description="Names of configured auth settings to apply"
    )


class SignedRequest(BaseModel):
    """A request ready for transmission.

    The url already carries the encoded query string and body is the exact
    string that was signed.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    method: str = Field(description="Upper-case HTTP method")
    url: str = Field(description="Absolute, percent-encoded URL including query string")
    headers: dict[str, str] = Field(default_factory=dict, description="Final request headers")
    body: str = Field(default="", description="Encoded body; empty for body-less verbs")


class ResponseEnvelope(BaseModel):
    """One HTTP response as captured by the transport.

    Header keys are lowercase; use header() for case-insensitive lookup.
    """

    model_config = ConfigDict(extra="forbid")

    status_code: int = Field(description="HTTP status code")
    reason_phrase: str = Field(default="", description="HTTP status message")
    headers: dict[str, str] = Field(
        default_factory=dict, description="Response headers (lowercase keys)"
    )
    content: bytes = Field(default=b"", description="Raw response body")

    @field_validator("headers")
    @classmethod
    def lowercase_header_keys(cls, v: dict[str, str]) -> dict[str, str]:
        return {key.lower(): value for key, value in v.items()}

    @property
    def success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def header(self, name: str, default: str | None = None) -> str | None:
        return self.headers.get(name.lower(), default)
