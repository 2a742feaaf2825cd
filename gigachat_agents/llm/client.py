"""LLM client interface and GigaChat implementation."""

import time
from abc import ABC, abstractmethod

import httpx

from gigachat_agents.auth.service import TokenProvider
from gigachat_agents.config import GigaChatSettings, get_settings
from gigachat_agents.exceptions import ErrorCode, LLMError
from gigachat_agents.http import build_client, new_request_id
from gigachat_agents.llm.models import GenerationResult, Message, Role
from gigachat_agents.logging_config import get_logger
from gigachat_agents.observability.metrics import track_llm_request

logger = get_logger(__name__)


class LLMClient(ABC):
    """Abstract base class for LLM clients.

    Defines the interface for generating text with LLMs.
    """

    @abstractmethod
    async def generate(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> GenerationResult:
        """Generate text from messages.

        Args:
            messages: Conversation messages.
            temperature: Sampling temperature override.
            max_tokens: Maximum tokens override.

        Returns:
            GenerationResult with generated text.

        Raises:
            LLMError: If generation fails.
            AuthenticationError: If no access token can be obtained.
        """
        ...

    async def generate_text(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> GenerationResult:
        """Generate text from a system/user prompt pair.

        A system message is sent whenever ``system_prompt`` is given, even blank.
        """
        messages: list[Message] = []

        if system_prompt is not None:
            messages.append(Message(role=Role.SYSTEM, content=system_prompt))

        messages.append(Message(role=Role.USER, content=prompt))

        return await self.generate(
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model name."""
        ...

    async def close(self) -> None:
        """Release resources held by the client."""


class GigaChatClient(LLMClient):
    """Client for the GigaChat ``/chat/completions`` endpoint.

    Requests are never streamed and never retried.
    """

    def __init__(
        self,
        token_provider: TokenProvider,
        model: str = "GigaChat",
        temperature: float = 0.1,
        max_tokens: int = 2000,
        settings: GigaChatSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the GigaChat client.

        Args:
            token_provider: Source of bearer tokens.
            model: Chat model name.
            temperature: Default sampling temperature.
            max_tokens: Default maximum tokens.
            settings: GigaChat configuration.
            client: HTTP client (for testing).
        """
        self._token_provider = token_provider
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._settings = settings or get_settings().gigachat
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = build_client(self._settings)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def model_name(self) -> str:
        """Get the model name."""
        return self._model

    async def generate(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> GenerationResult:
        """Generate text using the chat completions API."""
        token = await self._token_provider.get_token()
        client = await self._get_client()
        url = f"{self._settings.base_url}/chat/completions"

        payload = {
            "model": self._model,
            "messages": [
                {"role": msg.role.value, "content": msg.content} for msg in messages
            ],
            "temperature": self._temperature if temperature is None else temperature,
            "max_tokens": self._max_tokens if max_tokens is None else max_tokens,
            "stream": False,
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

        except httpx.TimeoutException as e:
            track_llm_request(self._model, time.perf_counter() - start_time, 0, 0, success=False)
            logger.error(f"LLM request timed out: {e}")
            raise LLMError(
                "LLM request timed out",
                code=ErrorCode.LLM_TIMEOUT,
                details={"timeout": self._settings.timeout},
            ) from e

        except httpx.HTTPStatusError as e:
            track_llm_request(self._model, time.perf_counter() - start_time, 0, 0, success=False)
            status = e.response.status_code
            logger.error(f"LLM request failed: {status}")

            if status == 429:
                raise LLMError(
                    "Rate limit exceeded",
                    code=ErrorCode.LLM_RATE_LIMIT,
                    details={"status_code": status},
                ) from e

            raise LLMError(
                f"LLM service returned {status}",
                code=ErrorCode.LLM_SERVICE_ERROR,
                details={"status_code": status},
            ) from e

        except httpx.RequestError as e:
            track_llm_request(self._model, time.perf_counter() - start_time, 0, 0, success=False)
            logger.error(f"LLM connection error: {e}")
            raise LLMError(
                f"Failed to connect to LLM service: {e}",
                code=ErrorCode.LLM_SERVICE_ERROR,
                details={"url": url},
            ) from e

        duration = time.perf_counter() - start_time
        try:
            data = response.json()
            choices = data.get("choices")
            if not choices:
                raise LLMError(
                    "LLM response contains no choices",
                    code=ErrorCode.LLM_EMPTY_RESPONSE,
                    details={"model": self._model},
                )
            message = choices[0]["message"]
            usage = data.get("usage") or {}

            result = GenerationResult(
                content=message["content"],
                model=data.get("model", self._model),
                prompt_tokens=usage.get("prompt_tokens", 0),
                completion_tokens=usage.get("completion_tokens", 0),
                total_tokens=usage.get("total_tokens", 0),
            )

        except LLMError:
            track_llm_request(self._model, duration, 0, 0, success=False)
            raise
        except (AttributeError, KeyError, IndexError, TypeError, ValueError) as e:
            track_llm_request(self._model, duration, 0, 0, success=False)
            raise LLMError(
                f"Invalid response from LLM: {e}",
                code=ErrorCode.LLM_SERVICE_ERROR,
                details={"error": str(e)},
            ) from e

        track_llm_request(
            result.model, duration, result.prompt_tokens, result.completion_tokens
        )
        return result
