"""
Core HTTP client for the Recharge API.

Handles configuration, authentication headers, request dispatch, response
classification and rate-limit metadata. Pagination lives in
``recharge_cli.core.pagination`` and is built on top of ``APIClient.get``.
"""

import contextlib
import dataclasses
import http.client
import json
import logging
import os
import time
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from recharge_cli.core.enums import ApiVersion

logger = logging.getLogger(__name__)

# Configuration
DEFAULT_BASE_URL = "https://api.rechargeapps.com"
DEFAULT_TIMEOUT = 30

ACCESS_TOKEN_HEADER = "X-Recharge-Access-Token"
VERSION_HEADER = "X-Recharge-Version"


# =============================================================================
# Errors
# =============================================================================


class RechargeError(Exception):
    """Base error class for all Recharge client errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result: dict[str, Any] = {"error": self.message}
        if self.details:
            result["details"] = self.details
        return result


class RequestError(RechargeError):
    """The HTTP exchange itself failed (DNS, refused connection, timeout)."""


class ValidationError(RechargeError, ValueError):
    """Validation error for local input/data issues (not API errors)."""


class VersionError(RechargeError):
    """Operation is not available under the active API version."""


class APIError(RechargeError):
    """API error with status code, decoded body and rate-limit headers."""

    def __init__(
        self,
        message: str,
        status: int = 0,
        body: dict | None = None,
        rate_limit: "RateLimitInfo | None" = None,
    ):
        super().__init__(message, body)
        self.status = status
        self.rate_limit = rate_limit

    @property
    def body(self) -> dict[str, Any]:
        """Full decoded response body."""
        return self.details

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result = super().to_dict()
        if self.status:
            result["status"] = self.status
        return result


class AuthenticationError(APIError):
    """Credentials were rejected (401/403)."""


class NotFoundError(APIError):
    """Requested resource does not exist (404)."""


class UnprocessableEntityError(APIError):
    """Server rejected the payload (422)."""


class RateLimitError(APIError):
    """Too many requests (429)."""

    @property
    def retry_after(self) -> int | None:
        return self.rate_limit.retry_after if self.rate_limit else None


# =============================================================================
# Configuration
# =============================================================================


def _parse_version(value: ApiVersion | str) -> ApiVersion:
    try:
        return ApiVersion.parse(value)
    except ValueError as e:
        raise ValidationError(str(e)) from e


@dataclass(frozen=True)
class Config:
    """
    Immutable client configuration.

    Switching API version produces a new instance via ``with_api_version``.
    """

    access_token: str
    api_version: ApiVersion = ApiVersion.default()
    base_url: str = DEFAULT_BASE_URL
    timeout: int = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if not self.access_token:
            raise ValidationError("API access token cannot be empty")
        if self.timeout < 1:
            raise ValidationError("Timeout must be at least 1 second")
        object.__setattr__(self, "api_version", _parse_version(self.api_version))

    @classmethod
    def from_env(
        cls,
        access_token: str | None = None,
        api_version: ApiVersion | str | None = None,
        base_url: str | None = None,
        timeout: int | None = None,
    ) -> "Config":
        """
        Build a config from explicit values, falling back to the environment.

        Args:
            access_token: Access token (or RECHARGE_ACCESS_TOKEN env var)
            api_version: API version (or RECHARGE_API_VERSION env var)
            base_url: API base URL (or RECHARGE_BASE_URL env var)
            timeout: Request timeout in seconds (or RECHARGE_TIMEOUT env var)

        """
        env_timeout = os.environ.get("RECHARGE_TIMEOUT")
        if timeout is None and env_timeout:
            try:
                timeout = int(env_timeout)
            except ValueError:
                raise ValidationError(f"RECHARGE_TIMEOUT must be an integer, got {env_timeout!r}")

        return cls(
            access_token=access_token or os.environ.get("RECHARGE_ACCESS_TOKEN", ""),
            api_version=api_version or os.environ.get("RECHARGE_API_VERSION") or ApiVersion.default(),
            base_url=base_url or os.environ.get("RECHARGE_BASE_URL", DEFAULT_BASE_URL),
            timeout=timeout if timeout is not None else DEFAULT_TIMEOUT,
        )

    def with_api_version(self, api_version: ApiVersion | str) -> "Config":
        """Return a copy of this config using a different API version."""
        return dataclasses.replace(self, api_version=_parse_version(api_version))


# =============================================================================
# Response types
# =============================================================================


def _header_lookup(headers: Mapping[str, str], name: str) -> str | None:
    name = name.lower()
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def _int_or_none(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


@dataclass(frozen=True)
class RateLimitInfo:
    """Rate-limit metadata parsed from response headers."""

    limit: int | None = None
    remaining: int | None = None
    reset: int | None = None
    retry_after: int | None = None

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "RateLimitInfo":
        return cls(
            limit=_int_or_none(_header_lookup(headers, "X-RateLimit-Limit")),
            remaining=_int_or_none(_header_lookup(headers, "X-RateLimit-Remaining")),
            reset=_int_or_none(_header_lookup(headers, "X-RateLimit-Reset")),
            retry_after=_int_or_none(_header_lookup(headers, "Retry-After")),
        )

    @property
    def is_exhausted(self) -> bool:
        return self.remaining is not None and self.remaining <= 0

    @property
    def is_approaching_limit(self) -> bool:
        """True once remaining drops to 10% of the limit or below."""
        if self.limit is None or self.remaining is None:
            return False
        return self.remaining <= int(self.limit * 0.1)

    def seconds_until_reset(self, now: float | None = None) -> int | None:
        if self.reset is None:
            return None
        now = time.time() if now is None else now
        return max(0, self.reset - int(now))

    def to_dict(self) -> dict[str, Any]:
        return {
            "limit": self.limit,
            "remaining": self.remaining,
            "reset": self.reset,
            "reset_in_seconds": self.seconds_until_reset(),
            "retry_after": self.retry_after,
            "is_exhausted": self.is_exhausted,
            "is_approaching_limit": self.is_approaching_limit,
        }


@dataclass
class RawResponse:
    """Decoded body plus response headers for one successful exchange."""

    body: dict[str, Any]
    headers: dict[str, str] = field(default_factory=dict)

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        return _header_lookup(self.headers, name)

    @property
    def rate_limit(self) -> RateLimitInfo:
        return RateLimitInfo.from_headers(self.headers)


# =============================================================================
# Transport
# =============================================================================


@dataclass
class TransportResponse:
    """What a transport hands back for a single HTTP exchange."""

    status: int
    reason: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""


class Transport(Protocol):
    """
    Sends one HTTP request.

    Implementations return a ``TransportResponse`` for every status code,
    including 4xx/5xx. Connection-level failures raise ``OSError`` (or an
    ``http.client.HTTPException``).
    """

    def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: bytes | None,
        timeout: int,
    ) -> TransportResponse: ...


class UrllibTransport:
    """Default transport built on ``urllib.request``."""

    def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: bytes | None,
        timeout: int,
    ) -> TransportResponse:
        req = urllib.request.Request(url, data=body, headers=headers, method=method)
        try:
            with urllib.request.urlopen(req, timeout=timeout) as response:
                return TransportResponse(
                    status=response.status,
                    reason=response.reason or "",
                    headers=dict(response.headers.items()),
                    body=response.read(),
                )
        except urllib.error.HTTPError as e:
            # Error statuses are still responses; classification happens upstream
            return TransportResponse(
                status=e.code,
                reason=str(e.reason or ""),
                headers=dict(e.headers.items()) if e.headers else {},
                body=e.read() or b"",
            )


# =============================================================================
# Client
# =============================================================================


def _decode_body(raw: bytes) -> dict[str, Any]:
    if not raw:
        return {}
    try:
        decoded = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return {}
    return decoded if isinstance(decoded, dict) else {}


def _error_message(body: dict[str, Any], reason: str) -> str:
    for key in ("error", "errors"):
        if body.get(key) is not None:
            value = body[key]
            return value if isinstance(value, str) else json.dumps(value)
    return reason


def _query_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


class APIClient:
    """
    Low-level HTTP client for the Recharge API.

    Handles:
    - URL building and mandatory auth/version headers
    - HTTP methods (GET, POST, PUT, DELETE)
    - Response classification into the error taxonomy
    - API version switching
    """

    def __init__(self, config: Config, transport: Transport | None = None):
        """
        Initialize the API client.

        Args:
            config: Immutable client configuration
            transport: HTTP transport (defaults to UrllibTransport)

        """
        self.config = config
        self.transport = transport or UrllibTransport()

    # =========================================================================
    # Version handling
    # =========================================================================

    @property
    def api_version(self) -> ApiVersion:
        return self.config.api_version

    def set_api_version(self, api_version: ApiVersion | str) -> "APIClient":
        """Switch the API version for all subsequent requests."""
        self.config = self.config.with_api_version(api_version)
        return self

    @contextlib.contextmanager
    def using_version(self, api_version: ApiVersion | str) -> Iterator["APIClient"]:
        """Temporarily switch API version, restoring the original on exit."""
        original = self.config.api_version
        self.set_api_version(api_version)
        try:
            yield self
        finally:
            if self.config.api_version is not original:
                self.set_api_version(original)

    def require_version(self, operation: str, *versions: ApiVersion) -> None:
        """Raise VersionError unless the active version is one of ``versions``."""
        if self.api_version in versions:
            return
        allowed = ", ".join(v.value for v in versions)
        raise VersionError(
            f"{operation} is only available in API version(s): {allowed}. "
            f"Current version: {self.api_version.value}"
        )

    # =========================================================================
    # Request building
    # =========================================================================

    def build_url(self, endpoint: str, params: Mapping[str, Any] | None = None) -> str:
        """Join base URL and endpoint with a single slash and append the query."""
        url = f"{self.config.base_url.rstrip('/')}/{endpoint.lstrip('/')}"
        if params:
            filtered = {k: _query_value(v) for k, v in params.items() if v is not None}
            if filtered:
                url = f"{url}?{urllib.parse.urlencode(filtered, doseq=True)}"
        return url

    def build_headers(self) -> dict[str, str]:
        """Headers carried by every request."""
        return {
            ACCESS_TOKEN_HEADER: self.config.access_token,
            VERSION_HEADER: self.config.api_version.value,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def request(
        self,
        method: str,
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        data: Any = None,
        include_headers: bool = False,
    ) -> dict[str, Any] | RawResponse:
        """
        Make an HTTP request to the API.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            endpoint: API path (e.g., /subscriptions)
            params: Query parameters; None values are dropped
            data: JSON request body
            include_headers: Return a RawResponse instead of the bare body

        Returns:
            Decoded JSON body, or RawResponse when include_headers is set

        Raises:
            RequestError: On transport failures
            APIError: On HTTP status >= 400 (or one of its subclasses)

        """
        url = self.build_url(endpoint, params)
        body = json.dumps(data, allow_nan=False).encode("utf-8") if data is not None else None

        logger.debug("%s %s", method, url)
        try:
            response = self.transport.send(method, url, self.build_headers(), body, self.config.timeout)
        except TimeoutError:
            raise RequestError(f"Request timed out after {self.config.timeout} seconds")
        except urllib.error.URLError as e:
            raise RequestError(f"HTTP request failed: {e.reason}")
        except (OSError, http.client.HTTPException) as e:
            raise RequestError(f"HTTP request failed: {e}")

        logger.debug("%s %s -> %s", method, url, response.status)
        return self._handle_response(response, include_headers)

    def _handle_response(
        self,
        response: TransportResponse,
        include_headers: bool,
    ) -> dict[str, Any] | RawResponse:
        body = _decode_body(response.body)

        if response.status < 400:
            if include_headers:
                raw = RawResponse(body=body, headers=response.headers)
                if raw.rate_limit.is_approaching_limit:
                    logger.warning("Approaching rate limit: %s", raw.rate_limit.to_dict())
                return raw
            return body

        message = _error_message(body, response.reason)
        rate_limit = RateLimitInfo.from_headers(response.headers)
        error_cls: type[APIError] = APIError
        if response.status in (401, 403):
            error_cls = AuthenticationError
        elif response.status == 404:
            error_cls = NotFoundError
        elif response.status == 422:
            error_cls = UnprocessableEntityError
        elif response.status == 429:
            error_cls = RateLimitError
            logger.warning("Rate limited (retry after %s s)", rate_limit.retry_after)

        raise error_cls(message, status=response.status, body=body, rate_limit=rate_limit)

    # =========================================================================
    # HTTP Methods
    # =========================================================================

    def get(
        self,
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        include_headers: bool = False,
    ) -> dict[str, Any] | RawResponse:
        """Make a GET request."""
        return self.request("GET", endpoint, params=params, include_headers=include_headers)

    def post(self, endpoint: str, data: dict | None = None) -> dict[str, Any]:
        """Make a POST request."""
        return self.request("POST", endpoint, data=data if data is not None else {})

    def put(self, endpoint: str, data: dict | None = None) -> dict[str, Any]:
        """Make a PUT request."""
        return self.request("PUT", endpoint, data=data if data is not None else {})

    def delete(self, endpoint: str) -> dict[str, Any]:
        """Make a DELETE request."""
        return self.request("DELETE", endpoint)
