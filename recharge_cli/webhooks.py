"""
Webhook signature validation.

Recharge signs each delivery with ``sha256(client_secret + body)`` (hex) and
sends it in the ``X-Recharge-Hmac-Sha256`` header. The secret must come
before the body.
"""

import hashlib
import hmac
from collections.abc import Mapping
from typing import Any

from recharge_cli.core.client import ValidationError

SIGNATURE_HEADER = "X-Recharge-Hmac-Sha256"


def _as_bytes(value: str | bytes) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else value


def compute_signature(client_secret: str, body: str | bytes) -> str:
    return hashlib.sha256(_as_bytes(client_secret) + _as_bytes(body)).hexdigest()


def validate(client_secret: str, body: str | bytes, signature: str) -> bool:
    """Constant-time check of ``signature`` against the computed digest."""
    return hmac.compare_digest(compute_signature(client_secret, body), signature.strip())


def extract_signature(headers: Mapping[str, Any]) -> str:
    """
    Case-insensitive lookup of the signature header.

    List values (as produced by some frameworks) use their first element.

    Raises:
        ValidationError: If the header is missing or empty

    """
    wanted = SIGNATURE_HEADER.lower()
    for key, value in headers.items():
        if str(key).lower() != wanted:
            continue
        if isinstance(value, (list, tuple)):
            value = value[0] if value else ""
        if value:
            return str(value)
        break
    raise ValidationError(f"Missing required webhook signature header: {SIGNATURE_HEADER}")


def validate_from_headers(client_secret: str, body: str | bytes, headers: Mapping[str, Any]) -> bool:
    return validate(client_secret, body, extract_signature(headers))
