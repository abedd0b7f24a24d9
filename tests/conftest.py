"""Pytest configuration - loads .env and provides a scripted fake transport."""

import json
import urllib.parse
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest
from dotenv import load_dotenv

from recharge_cli.core.client import APIClient, Config, TransportResponse
from recharge_cli.core.enums import ApiVersion

# Load .env from project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)


@dataclass
class SentRequest:
    """One request captured by FakeTransport."""

    method: str
    url: str
    headers: dict[str, str]
    body: bytes | None
    timeout: int

    @property
    def path(self) -> str:
        return urllib.parse.urlsplit(self.url).path

    @property
    def query(self) -> dict[str, str]:
        return dict(urllib.parse.parse_qsl(urllib.parse.urlsplit(self.url).query))

    @property
    def json(self) -> Any:
        return json.loads(self.body) if self.body else None


@dataclass
class FakeTransport:
    """Replays queued responses in order and records every request."""

    responses: list[TransportResponse | Exception] = field(default_factory=list)
    requests: list[SentRequest] = field(default_factory=list)

    def queue(
        self,
        body: Any = None,
        status: int = 200,
        headers: dict[str, str] | None = None,
        reason: str = "",
    ) -> "FakeTransport":
        raw = b"" if body is None else (body if isinstance(body, bytes) else json.dumps(body).encode())
        self.responses.append(TransportResponse(status=status, reason=reason, headers=headers or {}, body=raw))
        return self

    def fail(self, error: Exception) -> "FakeTransport":
        self.responses.append(error)
        return self

    def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: bytes | None,
        timeout: int,
    ) -> TransportResponse:
        self.requests.append(SentRequest(method, url, dict(headers), body, timeout))
        if not self.responses:
            raise AssertionError(f"Unexpected request: {method} {url}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def config() -> Config:
    return Config(access_token="test-token", api_version=ApiVersion.V2021_11, base_url="https://api.example")


@pytest.fixture
def client(config: Config, transport: FakeTransport) -> APIClient:
    return APIClient(config, transport=transport)


@pytest.fixture
def legacy_client(config: Config, transport: FakeTransport) -> APIClient:
    return APIClient(config.with_api_version(ApiVersion.V2021_01), transport=transport)
