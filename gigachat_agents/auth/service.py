"""Access token providers for the GigaChat API."""

import asyncio
from abc import ABC, abstractmethod

import httpx
from pydantic import SecretStr

from gigachat_agents.auth.models import AccessToken
from gigachat_agents.config import GigaChatSettings, Scope, get_settings
from gigachat_agents.exceptions import AuthenticationError, ErrorCode
from gigachat_agents.http import build_client, new_request_id
from gigachat_agents.logging_config import get_logger
from gigachat_agents.observability.metrics import track_auth_request, track_token_cache

logger = get_logger(__name__)


class TokenProvider(ABC):
    """Abstract base class for bearer token sources."""

    @abstractmethod
    async def get_token(self) -> AccessToken:
        """Return a token usable for the next request.

        Raises:
            AuthenticationError: If no token can be obtained.
        """
        ...

    async def close(self) -> None:
        """Release resources held by the provider."""


class GigaChatTokenProvider(TokenProvider):
    """Exchanges the authorization key for OAuth access tokens.

    With ``cache_tokens`` enabled a token is reused until it gets within
    ``token_refresh_margin`` seconds of its expiry. Otherwise every call
    performs a fresh exchange.
    """

    def __init__(
        self,
        credentials: SecretStr,
        scope: Scope,
        settings: GigaChatSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the token provider.

        Args:
            credentials: Base64 authorization key.
            scope: API tier to request tokens for.
            settings: GigaChat connection configuration.
            client: HTTP client (for testing).
        """
        self._credentials = credentials
        self._scope = scope
        self._settings = settings or get_settings().gigachat
        self._client = client
        self._owns_client = client is None
        self._token: AccessToken | None = None
        self._lock = asyncio.Lock()

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
    def scope(self) -> Scope:
        """API tier tokens are requested for."""
        return self._scope

    async def get_token(self) -> AccessToken:
        """Return a cached token or exchange credentials for a new one."""
        if not self._settings.cache_tokens:
            return await self.authenticate()

        async with self._lock:
            margin = self._settings.token_refresh_margin
            if self._token is not None and self._token.is_valid(margin):
                track_token_cache(hit=True)
                return self._token

            track_token_cache(hit=False)
            self._token = await self.authenticate()
            return self._token

    async def authenticate(self) -> AccessToken:
        """Exchange credentials and scope for a new access token.

        Returns:
            Freshly issued AccessToken.

        Raises:
            AuthenticationError: On network error, non-success status or a
                response without ``access_token``.
        """
        client = await self._get_client()
        url = self._settings.auth_url
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "application/json",
            "RqUID": new_request_id(),
            "Authorization": f"Basic {self._credentials.get_secret_value()}",
        }

        try:
            response = await client.post(
                url,
                data={"scope": self._scope.value},
                headers=headers,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            track_auth_request(self._scope.value, success=False)
            status = e.response.status_code
            logger.error(
                f"Failed to obtain access token: {status}",
                extra={"url": url, "status": status, "body": e.response.text},
            )
            raise AuthenticationError(
                f"OAuth endpoint returned {status}",
                details={"status_code": status},
            ) from e
        except httpx.RequestError as e:
            track_auth_request(self._scope.value, success=False)
            logger.error(f"Access token request error: {e}", extra={"url": url})
            raise AuthenticationError(
                f"Failed to connect to OAuth endpoint: {e}",
                details={"url": url},
            ) from e

        try:
            token = AccessToken.from_response(response.json())
        except (KeyError, TypeError, ValueError) as e:
            track_auth_request(self._scope.value, success=False)
            raise AuthenticationError(
                f"Invalid response from OAuth endpoint: {e}",
                code=ErrorCode.AUTH_INVALID_RESPONSE,
                details={"error": str(e)},
            ) from e

        track_auth_request(self._scope.value)
        logger.debug(
            "Obtained access token",
            extra={"scope": self._scope.value, "expires_at": token.expires_at},
        )
        return token
