"""
Core layer - HTTP dispatch, pagination and raw types.

This layer provides:
- Immutable Config and the low-level APIClient with auth/version headers
- The error taxonomy (request, authentication, API, rate-limit, validation)
- Version-aware cursor pagination
- Sort/status parameter validation
- Typed dataclasses for API resources
"""

from recharge_cli.core.client import (
    APIClient,
    APIError,
    AuthenticationError,
    Config,
    NotFoundError,
    RateLimitError,
    RateLimitInfo,
    RawResponse,
    RechargeError,
    RequestError,
    Transport,
    TransportResponse,
    UnprocessableEntityError,
    UrllibTransport,
    ValidationError,
    VersionError,
)
from recharge_cli.core.enums import ApiVersion
from recharge_cli.core.pagination import Cursors, Paginator, extract_cursors
from recharge_cli.core.sorting import normalize_choice, normalize_sort

__all__ = [
    "APIClient",
    "APIError",
    "ApiVersion",
    "AuthenticationError",
    "Config",
    "Cursors",
    "NotFoundError",
    "Paginator",
    "RateLimitError",
    "RateLimitInfo",
    "RawResponse",
    "RechargeError",
    "RequestError",
    "Transport",
    "TransportResponse",
    "UnprocessableEntityError",
    "UrllibTransport",
    "ValidationError",
    "VersionError",
    "extract_cursors",
    "normalize_choice",
    "normalize_sort",
]
