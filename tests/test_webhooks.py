"""Tests for webhook signature validation."""

import hashlib

import pytest

from recharge_cli import webhooks
from recharge_cli.core.client import ValidationError
from recharge_cli.core.enums import WebhookTopic

SECRET = "shh"
BODY = '{"subscription": {"id": 1}}'
SIGNATURE = hashlib.sha256((SECRET + BODY).encode()).hexdigest()


def test_secret_comes_before_body():
    assert webhooks.compute_signature(SECRET, BODY) == SIGNATURE
    assert webhooks.compute_signature(SECRET, BODY) != hashlib.sha256((BODY + SECRET).encode()).hexdigest()


def test_validate_accepts_str_and_bytes():
    assert webhooks.validate(SECRET, BODY, SIGNATURE)
    assert webhooks.validate(SECRET, BODY.encode(), SIGNATURE)


def test_validate_rejects_tampered_body():
    assert not webhooks.validate(SECRET, BODY + " ", SIGNATURE)
    assert not webhooks.validate("other", BODY, SIGNATURE)


@pytest.mark.parametrize(
    "headers",
    [
        {"X-Recharge-Hmac-Sha256": SIGNATURE},
        {"x-recharge-hmac-sha256": SIGNATURE},
        {"X-RECHARGE-HMAC-SHA256": [SIGNATURE, "ignored"]},
    ],
)
def test_validate_from_headers(headers):
    assert webhooks.validate_from_headers(SECRET, BODY, headers)


@pytest.mark.parametrize("headers", [{}, {"X-Recharge-Hmac-Sha256": ""}, {"X-Recharge-Hmac-Sha256": []}])
def test_missing_signature_header(headers):
    with pytest.raises(ValidationError, match="X-Recharge-Hmac-Sha256"):
        webhooks.extract_signature(headers)


def test_topics_grouped_by_resource():
    grouped = WebhookTopic.grouped_by_resource()
    assert "charge/paid" in grouped["charge"]
    assert grouped["discount"] == ["discount/created", "discount/updated", "discount/deleted"]
    assert sum(len(v) for v in grouped.values()) == len(WebhookTopic)
