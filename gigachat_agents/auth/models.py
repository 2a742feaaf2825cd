"""Authentication data models."""

from datetime import UTC, datetime, timedelta

from pydantic import BaseModel, Field, SecretStr


class AccessToken(BaseModel):
    """Short-lived bearer token issued by the OAuth endpoint.

    Attributes:
        value: The bearer token.
        expires_at: Expiry moment, if the endpoint reported one.
    """

    value: SecretStr = Field(description="Bearer token")
    expires_at: datetime | None = Field(default=None, description="Token expiry (UTC)")

    @classmethod
    def from_response(cls, data: dict) -> "AccessToken":
        """Build a token from the OAuth JSON body.

        ``expires_at`` is sent in epoch milliseconds.

        Raises:
            KeyError: If ``access_token`` is missing.
        """
        expires_at = None
        raw_expiry = data.get("expires_at")
        if raw_expiry is not None:
            expires_at = datetime.fromtimestamp(int(raw_expiry) / 1000, tz=UTC)
        return cls(value=SecretStr(data["access_token"]), expires_at=expires_at)

    def is_valid(self, margin: float = 0.0, now: datetime | None = None) -> bool:
        """Whether the token stays valid for at least ``margin`` seconds.

        Tokens without a known expiry are never considered reusable.
        """
        if self.expires_at is None:
            return False
        now = now or datetime.now(UTC)
        return self.expires_at - timedelta(seconds=margin) > now

    def bearer(self) -> str:
        """Authorization header value."""
        return f"Bearer {self.value.get_secret_value()}"
