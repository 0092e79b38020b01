"""Shared fixtures for all tests."""

import base64
import json

import httpx
import pytest
from fastapi.testclient import TestClient

from voicevision.core.config import Settings
from voicevision.core.gateway import GatewayClient
from voicevision.main import app

# SOI + APP0/JFIF header, every byte value once, EOI
JPEG_BYTES = (
    b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00"
    + bytes(range(256))
    + b"\xff\xd9"
)


class StubGateway:
    """httpx.MockTransport handler standing in for the hosted gateway.

    Records every request body in `calls`. Non-streaming requests get `reply`
    as the assistant content; streaming requests get `stream_chunks` joined.
    """

    def __init__(self):
        self.calls: list[dict] = []
        self.headers: list[httpx.Headers] = []
        self.status = 200
        self.reply: str | None = '{"objects": ["chair"], "personCount": 0}'
        self.stream_chunks = [
            b'data: {"choices":[{"delta":{"content":"Hel"}}]}\n\n',
            b'data: {"choices":[{"delta":{"content":"lo"}}]}\n\n',
            b"data: [DONE]\n\n",
        ]
        self.raise_exc: Exception | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.calls.append(body)
        self.headers.append(request.headers)

        if self.raise_exc is not None:
            raise self.raise_exc
        if self.status != 200:
            return httpx.Response(self.status, text="upstream said no")
        if body.get("stream"):
            return httpx.Response(
                200,
                headers={"content-type": "text/event-stream"},
                content=b"".join(self.stream_chunks),
            )
        return httpx.Response(
            200,
            json={"choices": [{"message": {"role": "assistant", "content": self.reply}}]},
        )

    @property
    def call_count(self) -> int:
        return len(self.calls)


@pytest.fixture
def jpeg_bytes() -> bytes:
    return JPEG_BYTES


@pytest.fixture
def jpeg_data_uri() -> str:
    return "data:image/jpeg;base64," + base64.b64encode(JPEG_BYTES).decode()


@pytest.fixture
def api_key(monkeypatch) -> str:
    monkeypatch.setenv("GATEWAY_API_KEY", "test-gateway-key")
    return "test-gateway-key"


@pytest.fixture
def stub_gateway() -> StubGateway:
    return StubGateway()


@pytest.fixture
def settings() -> Settings:
    return Settings(gateway_url="http://gateway.test/v1/chat/completions", gateway_model="test-model")


@pytest.fixture
def gateway(settings, stub_gateway) -> GatewayClient:
    return GatewayClient(settings, transport=httpx.MockTransport(stub_gateway))


@pytest.fixture
def client(api_key, settings, gateway, mocker):
    """TestClient whose lifespan opens (and on shutdown closes) the stub-backed gateway."""
    mocker.patch.object(Settings, "from_env", return_value=settings)
    mocker.patch("voicevision.main.GatewayClient", return_value=gateway)
    with TestClient(app) as test_client:
        yield test_client
