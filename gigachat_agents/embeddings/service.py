"""Embedding service interface and GigaChat implementation."""

import time
from abc import ABC, abstractmethod

import httpx

from gigachat_agents.auth.service import TokenProvider
from gigachat_agents.config import GigaChatSettings, get_settings
from gigachat_agents.embeddings.models import EmbeddingResult
from gigachat_agents.exceptions import EmbeddingError, ErrorCode
from gigachat_agents.http import build_client, new_request_id
from gigachat_agents.logging_config import get_logger
from gigachat_agents.observability.metrics import track_embedding_request

logger = get_logger(__name__)


class EmbeddingService(ABC):
    """Abstract base class for embedding services.

    Defines the interface for generating text embeddings.
    """

    @abstractmethod
    async def embed(self, text: str) -> EmbeddingResult:
        """Generate embedding for a single text.

        Args:
            text: Text to embed.

        Returns:
            EmbeddingResult with vector.

        Raises:
            EmbeddingError: If embedding fails.
            AuthenticationError: If no access token can be obtained.
        """
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model name used for embeddings."""
        ...

    async def close(self) -> None:
        """Release resources held by the service."""


class GigaChatEmbeddingService(EmbeddingService):
    """Embedding service backed by the GigaChat ``/embeddings`` endpoint.

    Every request carries a bearer token from the token provider and a
    fresh ``X-Request-ID``.
    """

    def __init__(
        self,
        token_provider: TokenProvider,
        model: str = "Embeddings",
        settings: GigaChatSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the GigaChat embedding service.

        Args:
            token_provider: Source of bearer tokens.
            model: Embedding model name.
            settings: GigaChat configuration. Uses defaults if not provided.
            client: HTTP client. Creates new one if not provided.
        """
        self._token_provider = token_provider
        self._model = model
        self._settings = settings or get_settings().gigachat
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = build_client(self._settings)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def model_name(self) -> str:
        """Get the model name."""
        return self._model

    async def embed(self, text: str) -> EmbeddingResult:
        """Generate embedding for a single text.

        Only the first embedding of the response is used.

        Args:
            text: Text to embed.

        Returns:
            EmbeddingResult with vector.

        Raises:
            EmbeddingError: On network error, non-success status, or a
                malformed or empty response body.
            AuthenticationError: If no access token can be obtained.
        """
        token = await self._token_provider.get_token()
        client = await self._get_client()
        url = f"{self._settings.base_url}/embeddings"

        payload = {
            "model": self._model,
            "input": [text],
        }
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Authorization": token.bearer(),
            "X-Request-ID": new_request_id(),
        }

        start_time = time.perf_counter()
        try:
            response = await client.post(url, json=payload, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            track_embedding_request(
                self._model, time.perf_counter() - start_time, success=False
            )
            logger.error(
                f"Embedding request failed: {e.response.status_code}",
                extra={"url": url, "status": e.response.status_code},
            )
            raise EmbeddingError(
                f"Embedding service returned {e.response.status_code}",
                code=ErrorCode.EMBEDDING_SERVICE_ERROR,
                details={"status_code": e.response.status_code},
            ) from e
        except httpx.RequestError as e:
            track_embedding_request(
                self._model, time.perf_counter() - start_time, success=False
            )
            logger.error(
                f"Embedding request error: {e}",
                extra={"url": url},
            )
            raise EmbeddingError(
                f"Failed to connect to embedding service: {e}",
                code=ErrorCode.EMBEDDING_SERVICE_ERROR,
                details={"url": url},
            ) from e

        duration = time.perf_counter() - start_time
        try:
            data = response.json()
            embedding = (data.get("data") or [{}])[0].get("embedding") or []
            result = None
            if embedding:
                result = EmbeddingResult(embedding=embedding, model=self._model)
        except (AttributeError, IndexError, KeyError, TypeError, ValueError) as e:
            # pydantic.ValidationError is a ValueError
            track_embedding_request(self._model, duration, success=False)
            logger.error(
                "Invalid response from embedding service",
                extra={"url": url, "error": str(e)},
            )
            raise EmbeddingError(
                f"Invalid response from embedding service: {e}",
                code=ErrorCode.EMBEDDING_SERVICE_ERROR,
                details={"error": str(e)},
            ) from e

        if result is None:
            track_embedding_request(self._model, duration, success=False)
            raise EmbeddingError(
                "Embedding service returned no embedding",
                code=ErrorCode.EMBEDDING_EMPTY_RESPONSE,
                details={"model": self._model},
            )

        track_embedding_request(self._model, duration)
        return result
