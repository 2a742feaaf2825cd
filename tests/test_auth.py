"""Tests for GigaChat authentication."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from pydantic import SecretStr

from gigachat_agents.auth.models import AccessToken
from gigachat_agents.auth.service import GigaChatTokenProvider
from gigachat_agents.config import GigaChatSettings, Scope
from gigachat_agents.exceptions import AuthenticationError, ErrorCode


def _expires_in(minutes: float) -> int:
    """Epoch milliseconds ``minutes`` from now."""
    return int((datetime.now(UTC) + timedelta(minutes=minutes)).timestamp() * 1000)


class TestAccessToken:
    """Tests for AccessToken model."""

    def test_from_response(self) -> None:
        """Token and millisecond expiry are parsed."""
        token = AccessToken.from_response(
            {"access_token": "abc", "expires_at": 1_700_000_000_000}
        )
        assert token.value.get_secret_value() == "abc"
        assert token.expires_at == datetime.fromtimestamp(1_700_000_000, tz=UTC)

    def test_from_response_without_expiry(self) -> None:
        """Missing expiry is allowed."""
        token = AccessToken.from_response({"access_token": "abc"})
        assert token.expires_at is None

    def test_from_response_missing_token(self) -> None:
        """Missing access_token raises KeyError."""
        with pytest.raises(KeyError):
            AccessToken.from_response({"expires_at": 1})

    def test_bearer(self) -> None:
        """Bearer header value is built from the token."""
        token = AccessToken(value=SecretStr("abc"))
        assert token.bearer() == "Bearer abc"

    def test_is_valid_respects_margin(self) -> None:
        """Token close to expiry is not valid."""
        now = datetime(2024, 1, 1, tzinfo=UTC)
        token = AccessToken(value=SecretStr("abc"), expires_at=now + timedelta(seconds=30))

        assert token.is_valid(margin=0, now=now)
        assert not token.is_valid(margin=60, now=now)

    def test_is_valid_without_expiry(self) -> None:
        """Token without expiry is never reused."""
        token = AccessToken(value=SecretStr("abc"))
        assert not token.is_valid()


class TestGigaChatTokenProvider:
    """Tests for GigaChatTokenProvider."""

    def _provider(
        self,
        settings: GigaChatSettings,
        mock_client: AsyncMock,
        scope: Scope = Scope.PERSONAL,
    ) -> GigaChatTokenProvider:
        return GigaChatTokenProvider(
            SecretStr("Y2xpZW50OnNlY3JldA=="),
            scope,
            settings=settings,
            client=mock_client,
        )

    @pytest.mark.asyncio
    async def test_authenticate_request_shape(
        self,
        gigachat_settings: GigaChatSettings,
        make_response: Callable[..., MagicMock],
    ) -> None:
        """Token request carries scope, Basic auth and a RqUID."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.return_value = make_response(
            {"access_token": "tok", "expires_at": _expires_in(30)}
        )

        provider = self._provider(gigachat_settings, mock_client, Scope.B2B)
        token = await provider.authenticate()

        assert token.value.get_secret_value() == "tok"
        call = mock_client.post.call_args
        assert call.args[0] == "http://auth.test/api/v2/oauth"
        assert call.kwargs["data"] == {"scope": "GIGACHAT_API_B2B"}
        headers = call.kwargs["headers"]
        assert headers["Authorization"] == "Basic Y2xpZW50OnNlY3JldA=="
        assert headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert headers["RqUID"]

    @pytest.mark.asyncio
    async def test_token_is_cached_until_expiry(
        self,
        gigachat_settings: GigaChatSettings,
        make_response: Callable[..., MagicMock],
    ) -> None:
        """A valid token is reused."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.return_value = make_response(
            {"access_token": "tok", "expires_at": _expires_in(30)}
        )

        provider = self._provider(gigachat_settings, mock_client)
        first = await provider.get_token()
        second = await provider.get_token()

        assert first is second
        assert mock_client.post.call_count == 1

    @pytest.mark.asyncio
    async def test_expiring_token_is_renewed(
        self,
        gigachat_settings: GigaChatSettings,
        make_response: Callable[..., MagicMock],
    ) -> None:
        """A token inside the refresh margin is replaced."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.return_value = make_response(
            {"access_token": "tok", "expires_at": _expires_in(0.5)}
        )

        provider = self._provider(gigachat_settings, mock_client)
        await provider.get_token()
        await provider.get_token()

        assert mock_client.post.call_count == 2

    @pytest.mark.asyncio
    async def test_caching_disabled(self, make_response: Callable[..., MagicMock]) -> None:
        """Every call authenticates when caching is off."""
        settings = GigaChatSettings(auth_url="http://auth.test/oauth", cache_tokens=False)
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.return_value = make_response(
            {"access_token": "tok", "expires_at": _expires_in(30)}
        )

        provider = self._provider(settings, mock_client)
        await provider.get_token()
        await provider.get_token()

        assert mock_client.post.call_count == 2

    @pytest.mark.asyncio
    async def test_error_status(
        self,
        gigachat_settings: GigaChatSettings,
        make_response: Callable[..., MagicMock],
    ) -> None:
        """Non-success status raises AuthenticationError."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.return_value = make_response({}, status_code=401)

        provider = self._provider(gigachat_settings, mock_client)

        with pytest.raises(AuthenticationError) as exc_info:
            await provider.get_token()

        assert exc_info.value.code == ErrorCode.AUTH_FAILED
        assert exc_info.value.details["status_code"] == 401

    @pytest.mark.asyncio
    async def test_connection_error(self, gigachat_settings: GigaChatSettings) -> None:
        """Network failure raises AuthenticationError."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.side_effect = httpx.ConnectError("refused")

        provider = self._provider(gigachat_settings, mock_client)

        with pytest.raises(AuthenticationError) as exc_info:
            await provider.get_token()

        assert exc_info.value.code == ErrorCode.AUTH_FAILED

    @pytest.mark.asyncio
    async def test_response_without_token(
        self,
        gigachat_settings: GigaChatSettings,
        make_response: Callable[..., MagicMock],
    ) -> None:
        """Body without access_token is an invalid response."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.post.return_value = make_response({"expires_at": _expires_in(30)})

        provider = self._provider(gigachat_settings, mock_client)

        with pytest.raises(AuthenticationError) as exc_info:
            await provider.get_token()

        assert exc_info.value.code == ErrorCode.AUTH_INVALID_RESPONSE

    @pytest.mark.asyncio
    async def test_close_keeps_injected_client(self, gigachat_settings: GigaChatSettings) -> None:
        """An injected client is not closed by the provider."""
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        provider = self._provider(gigachat_settings, mock_client)

        await provider.close()

        mock_client.aclose.assert_not_called()
