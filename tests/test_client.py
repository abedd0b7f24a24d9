"""Tests for request building, dispatch and response classification."""

import urllib.error

import pytest

from recharge_cli.core.client import (
    APIClient,
    APIError,
    AuthenticationError,
    Config,
    NotFoundError,
    RateLimitError,
    RateLimitInfo,
    RawResponse,
    RequestError,
    UnprocessableEntityError,
    ValidationError,
    VersionError,
)
from recharge_cli.core.enums import ApiVersion, ChargeSort

# =============================================================================
# Config
# =============================================================================


class TestConfig:
    def test_defaults(self):
        config = Config(access_token="tok")
        assert config.api_version is ApiVersion.V2021_11
        assert config.base_url == "https://api.rechargeapps.com"
        assert config.timeout == 30

    def test_empty_token_rejected(self):
        with pytest.raises(ValidationError, match="access token"):
            Config(access_token="")

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError, match="Timeout"):
            Config(access_token="tok", timeout=0)

    def test_version_string_is_parsed(self):
        assert Config(access_token="tok", api_version="2021-01").api_version is ApiVersion.V2021_01

    def test_unknown_version_rejected(self):
        with pytest.raises(ValidationError, match="Unsupported API version: 2020-01"):
            Config(access_token="tok", api_version="2020-01")

    def test_with_api_version_returns_new_instance(self):
        original = Config(access_token="tok", timeout=5)
        switched = original.with_api_version("2021-01")
        assert switched is not original
        assert original.api_version is ApiVersion.V2021_11
        assert switched.api_version is ApiVersion.V2021_01
        assert switched.timeout == 5

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("RECHARGE_ACCESS_TOKEN", "env-token")
        monkeypatch.setenv("RECHARGE_API_VERSION", "2021-01")
        monkeypatch.setenv("RECHARGE_BASE_URL", "https://sandbox.example")
        monkeypatch.setenv("RECHARGE_TIMEOUT", "12")
        config = Config.from_env()
        assert config.access_token == "env-token"
        assert config.api_version is ApiVersion.V2021_01
        assert config.base_url == "https://sandbox.example"
        assert config.timeout == 12

    def test_from_env_explicit_overrides(self, monkeypatch):
        monkeypatch.setenv("RECHARGE_ACCESS_TOKEN", "env-token")
        monkeypatch.delenv("RECHARGE_API_VERSION", raising=False)
        config = Config.from_env(access_token="explicit")
        assert config.access_token == "explicit"
        assert config.api_version is ApiVersion.V2021_11

    def test_from_env_missing_token(self, monkeypatch):
        monkeypatch.delenv("RECHARGE_ACCESS_TOKEN", raising=False)
        with pytest.raises(ValidationError):
            Config.from_env()

    @pytest.mark.parametrize("timeout", [0, -5])
    def test_from_env_explicit_timeout_still_validated(self, timeout):
        with pytest.raises(ValidationError, match="Timeout"):
            Config.from_env(access_token="tok", timeout=timeout)

    def test_from_env_bad_timeout(self, monkeypatch):
        monkeypatch.setenv("RECHARGE_TIMEOUT", "soon")
        with pytest.raises(ValidationError, match="RECHARGE_TIMEOUT"):
            Config.from_env(access_token="tok")


# =============================================================================
# Request building
# =============================================================================


class TestRequestBuilding:
    @pytest.mark.parametrize(
        "base_url, endpoint",
        [
            ("https://api.example", "subscriptions"),
            ("https://api.example/", "/subscriptions"),
            ("https://api.example//", "//subscriptions"),
            ("https://api.example", "/subscriptions"),
        ],
    )
    def test_single_slash_join(self, transport, base_url, endpoint):
        client = APIClient(Config(access_token="tok", base_url=base_url), transport=transport)
        assert client.build_url(endpoint) == "https://api.example/subscriptions"

    def test_query_is_encoded_and_none_dropped(self, client):
        url = client.build_url("/charges", {"status": "queued", "cursor": "a b/c", "ids": None})
        assert url == "https://api.example/charges?status=queued&cursor=a+b%2Fc"

    def test_enum_query_values_use_their_value(self, client):
        assert client.build_url("/charges", {"sort_by": ChargeSort.ID_DESC}) == "https://api.example/charges?sort_by=id-desc"

    def test_empty_params_add_no_question_mark(self, client):
        assert client.build_url("/charges", {}) == "https://api.example/charges"
        assert client.build_url("/charges", {"x": None}) == "https://api.example/charges"

    @pytest.mark.parametrize("method", ["GET", "POST", "PUT", "DELETE"])
    def test_mandatory_headers_on_every_request(self, client, transport, method):
        transport.queue({})
        client.request(method, "/anything")
        headers = transport.requests[0].headers
        assert headers == {
            "X-Recharge-Access-Token": "test-token",
            "X-Recharge-Version": "2021-11",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def test_version_header_follows_active_version(self, client, transport):
        transport.queue({}).queue({})
        client.get("/a")
        client.set_api_version("2021-01")
        client.get("/b")
        assert transport.requests[0].headers["X-Recharge-Version"] == "2021-11"
        assert transport.requests[1].headers["X-Recharge-Version"] == "2021-01"

    def test_json_body_serialized(self, client, transport):
        transport.queue({"subscription": {"id": 1}})
        client.post("/subscriptions", {"quantity": 2})
        assert transport.requests[0].json == {"quantity": 2}
        assert transport.requests[0].method == "POST"

    def test_unserializable_body_is_fatal(self, client, transport):
        with pytest.raises(TypeError):
            client.post("/subscriptions", {"when": object()})
        assert transport.requests == []

    def test_nan_body_is_fatal(self, client, transport):
        with pytest.raises(ValueError):
            client.post("/charges", {"amount": float("nan")})
        assert transport.requests == []

    def test_timeout_passed_to_transport(self, transport):
        client = APIClient(Config(access_token="tok", timeout=7), transport=transport)
        transport.queue({})
        client.get("/x")
        assert transport.requests[0].timeout == 7


# =============================================================================
# Response interpretation
# =============================================================================


class TestResponses:
    def test_body_returned_by_default(self, client, transport):
        transport.queue({"customer": {"id": 5}})
        assert client.get("/customers/5") == {"customer": {"id": 5}}

    def test_raw_response_when_headers_requested(self, client, transport):
        transport.queue({"charges": []}, headers={"Link": "<x>", "X-RateLimit-Remaining": "9"})
        response = client.get("/charges", include_headers=True)
        assert isinstance(response, RawResponse)
        assert response.body == {"charges": []}
        assert response.header("link") == "<x>"
        assert response.rate_limit.remaining == 9

    @pytest.mark.parametrize("raw", [b"", b"not json", b"[1, 2]", b"\xff\xfe"])
    def test_empty_or_undecodable_body_is_empty_mapping(self, client, transport, raw):
        transport.queue(raw)
        assert client.delete("/webhooks/1") == {}

    def test_forbidden_is_authentication_error(self, client, transport):
        transport.queue({"error": "forbidden"}, status=403, reason="Forbidden")
        with pytest.raises(AuthenticationError) as exc:
            client.get("/customers")
        assert exc.value.message == "forbidden"
        assert exc.value.status == 403
        assert exc.value.body == {"error": "forbidden"}

    def test_unauthorized_is_authentication_error(self, client, transport):
        transport.queue(None, status=401, reason="Unauthorized")
        with pytest.raises(AuthenticationError) as exc:
            client.get("/customers")
        assert exc.value.message == "Unauthorized"

    def test_nested_errors_serialized_to_json(self, client, transport):
        transport.queue({"errors": {"field": "bad"}}, status=500, reason="Internal Server Error")
        with pytest.raises(APIError) as exc:
            client.get("/charges")
        assert type(exc.value) is APIError
        assert exc.value.message == '{"field": "bad"}'
        assert exc.value.status == 500
        assert exc.value.body == {"errors": {"field": "bad"}}

    def test_error_preferred_over_errors(self, client, transport):
        transport.queue({"error": "first", "errors": "second"}, status=400)
        with pytest.raises(APIError, match="first"):
            client.get("/charges")

    def test_reason_phrase_fallback(self, client, transport):
        transport.queue({"detail": "x"}, status=502, reason="Bad Gateway")
        with pytest.raises(APIError, match="Bad Gateway"):
            client.get("/charges")

    def test_not_found(self, client, transport):
        transport.queue({"errors": "Not Found"}, status=404)
        with pytest.raises(NotFoundError) as exc:
            client.get("/charges/1")
        assert isinstance(exc.value, APIError)
        assert exc.value.status == 404

    def test_unprocessable(self, client, transport):
        transport.queue({"errors": {"email": ["is invalid"]}}, status=422)
        with pytest.raises(UnprocessableEntityError):
            client.post("/customers", {"email": "nope"})

    def test_rate_limited(self, client, transport):
        transport.queue(
            {"error": "slow down"},
            status=429,
            headers={
                "X-RateLimit-Limit": "40",
                "X-RateLimit-Remaining": "0",
                "X-RateLimit-Reset": "1700000000",
                "Retry-After": "2",
            },
        )
        with pytest.raises(RateLimitError) as exc:
            client.get("/charges")
        err = exc.value
        assert err.status == 429
        assert err.retry_after == 2
        assert err.rate_limit == RateLimitInfo(limit=40, remaining=0, reset=1700000000, retry_after=2)
        assert err.to_dict() == {"error": "slow down", "details": {"error": "slow down"}, "status": 429}

    def test_transport_failure_wrapped(self, client, transport):
        transport.fail(ConnectionRefusedError("refused"))
        with pytest.raises(RequestError) as exc:
            client.get("/charges")
        assert not isinstance(exc.value, ConnectionRefusedError)
        assert "refused" in exc.value.message

    def test_url_error_wrapped(self, client, transport):
        transport.fail(urllib.error.URLError("Name or service not known"))
        with pytest.raises(RequestError, match="Name or service not known"):
            client.get("/charges")

    def test_timeout_wrapped(self, client, transport):
        transport.fail(TimeoutError())
        with pytest.raises(RequestError, match="timed out after 30 seconds"):
            client.get("/charges")


# =============================================================================
# Rate limit info
# =============================================================================


class TestRateLimitInfo:
    def test_parses_numeric_headers_case_insensitively(self):
        info = RateLimitInfo.from_headers({"x-ratelimit-limit": "100", "x-ratelimit-remaining": "abc"})
        assert info.limit == 100
        assert info.remaining is None
        assert info.reset is None

    def test_exhausted_and_approaching(self):
        assert RateLimitInfo(limit=40, remaining=0).is_exhausted
        assert RateLimitInfo(limit=40, remaining=4).is_approaching_limit
        assert not RateLimitInfo(limit=40, remaining=5).is_approaching_limit
        assert not RateLimitInfo().is_approaching_limit

    def test_seconds_until_reset(self):
        info = RateLimitInfo(reset=1000)
        assert info.seconds_until_reset(now=990) == 10
        assert info.seconds_until_reset(now=2000) == 0
        assert RateLimitInfo().seconds_until_reset() is None


# =============================================================================
# Version handling
# =============================================================================


class TestVersions:
    def test_set_api_version_replaces_config(self, client):
        before = client.config
        client.set_api_version(ApiVersion.V2021_01)
        assert client.config is not before
        assert client.api_version is ApiVersion.V2021_01

    def test_using_version_restores(self, client):
        with client.using_version("2021-01"):
            assert client.api_version is ApiVersion.V2021_01
        assert client.api_version is ApiVersion.V2021_11

    def test_using_version_restores_on_error(self, client):
        with pytest.raises(RuntimeError):
            with client.using_version("2021-01"):
                raise RuntimeError("boom")
        assert client.api_version is ApiVersion.V2021_11

    def test_require_version(self, client):
        client.require_version("plans", ApiVersion.V2021_11)
        with pytest.raises(VersionError, match="only available in API version"):
            client.require_version("discount count", ApiVersion.V2021_01)
