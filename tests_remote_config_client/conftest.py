"""
Shared fixtures for remote_config_client tests.
"""
import json
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from remote_config_client.auth import StaticTokenProvider
from remote_config_client.config import RemoteConfigSettings
from remote_config_client.errors import AuthError
from remote_config_client.types import TransportResponse

PROJECT_ID = "demo-project"
ENDPOINT = f"https://firebaseremoteconfig.googleapis.com/v1/projects/{PROJECT_ID}/remoteConfig"
TOKEN = "ya29.test-access-token"


class FakeRemoteConfigServer:
    """In-memory server enforcing If-Match semantics on one document."""

    def __init__(self, document: Optional[Dict[str, Any]] = None, conflict_status: int = 409):
        self.document: Dict[str, Any] = document if document is not None else {"parameters": {}}
        self.revision = 1
        self.conflict_status = conflict_status
        self.requests: List[httpx.Request] = []

    @property
    def etag(self) -> str:
        return f'"etag-{PROJECT_ID}-{self.revision:04d}"'

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "GET":
            return httpx.Response(200, headers={"ETag": self.etag}, json=self.document)

        if request.method == "PUT":
            if_match = request.headers.get("if-match")
            if if_match != "*" and if_match != self.etag:
                return httpx.Response(
                    self.conflict_status,
                    json={
                        "error": {
                            "code": self.conflict_status,
                            "message": "ETag mismatch",
                            "status": "ABORTED",
                        }
                    },
                )
            self.document = json.loads(request.content)
            self.revision += 1
            return httpx.Response(200, headers={"ETag": self.etag}, json=self.document)

        return httpx.Response(405)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep host environment out of settings resolution."""
    for name in (
        "FIREBASE_PROJECT_ID",
        "REMOTE_CONFIG_BASE_URL",
        "REMOTE_CONFIG_TIMEOUT",
        "REMOTE_CONFIG_TRACE",
        "FIREBASE_ACCESS_TOKEN",
        "GOOGLE_OAUTH_ACCESS_TOKEN",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings():
    return RemoteConfigSettings(project_id=PROJECT_ID)


@pytest.fixture
def token_provider():
    return StaticTokenProvider(TOKEN)


@pytest.fixture
def failing_token_provider():
    provider = MagicMock()
    provider.provide.side_effect = AuthError("no credentials")
    return provider


@pytest.fixture
def fake_server():
    return FakeRemoteConfigServer()


@pytest.fixture
def mock_transport():
    """Mock sync Transport returning an empty document with an ETag."""
    transport = MagicMock()
    transport.request.return_value = TransportResponse(
        status=200,
        headers={"ETag": '"v1"'},
        content=b'{"parameters": {}}',
    )
    return transport


@pytest.fixture
def mock_async_transport():
    transport = MagicMock()
    transport.request = AsyncMock(
        return_value=TransportResponse(
            status=200,
            headers={"ETag": '"v1"'},
            content=b'{"parameters": {}}',
        )
    )
    transport.close = AsyncMock()
    return transport
