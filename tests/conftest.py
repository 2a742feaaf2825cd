"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncGenerator, Callable, Mapping
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from gigachat_agents.api.app import app
from gigachat_agents.auth.models import AccessToken
from gigachat_agents.auth.service import TokenProvider
from gigachat_agents.config import GigaChatSettings
from gigachat_agents.embeddings.models import EmbeddingResult
from gigachat_agents.embeddings.service import EmbeddingService
from gigachat_agents.exceptions import EmbeddingError


class StaticTokenProvider(TokenProvider):
    """Token provider returning the same long-lived token."""

    def __init__(self) -> None:
        self.calls = 0

    async def get_token(self) -> AccessToken:
        self.calls += 1
        return AccessToken(
            value="test-token",
            expires_at=datetime.now(UTC) + timedelta(minutes=30),
        )


class FakeEmbeddingService(EmbeddingService):
    """In-memory embedding service recording every requested text.

    Texts listed in ``failing`` raise EmbeddingError; unknown texts get
    ``default`` when given, otherwise they fail too.
    """

    def __init__(
        self,
        vectors: Mapping[str, list[float]],
        failing: set[str] | None = None,
        default: list[float] | None = None,
    ) -> None:
        self.vectors = dict(vectors)
        self.failing = failing or set()
        self.default = default
        self.calls: list[str] = []
        self.closed = False

    @property
    def model_name(self) -> str:
        return "Embeddings"

    async def embed(self, text: str) -> EmbeddingResult:
        self.calls.append(text)
        vector = self.vectors.get(text, self.default)
        if text in self.failing or vector is None:
            raise EmbeddingError(f"No embedding for {text!r}")
        return EmbeddingResult(embedding=vector, model=self.model_name)

    async def close(self) -> None:
        self.closed = True


def json_response(data: object, status_code: int = 200) -> MagicMock:
    """Mock httpx response with a JSON body."""
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = data
    if status_code >= 400:
        request = httpx.Request("POST", "http://test")
        real = httpx.Response(status_code, request=request, text="error")
        response.raise_for_status.side_effect = httpx.HTTPStatusError(
            f"HTTP {status_code}", request=request, response=real
        )
    else:
        response.raise_for_status = MagicMock()
    return response


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client for FastAPI app.

    Yields:
        AsyncClient configured for testing.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def gigachat_settings() -> GigaChatSettings:
    """GigaChat settings pointing at a test host."""
    return GigaChatSettings(
        auth_url="http://auth.test/api/v2/oauth",
        base_url="http://api.test/api/v1",
    )


@pytest.fixture
def token_provider() -> StaticTokenProvider:
    """Token provider that never talks to the network."""
    return StaticTokenProvider()


@pytest.fixture
def fake_embeddings() -> Callable[..., FakeEmbeddingService]:
    """Factory for in-memory embedding services."""
    return FakeEmbeddingService


@pytest.fixture
def make_response() -> Callable[..., MagicMock]:
    """Factory for mocked httpx responses."""
    return json_response
