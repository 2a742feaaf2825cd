"""Application configuration using Pydantic Settings.

All configuration is loaded from environment variables.
No secrets are hardcoded.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Scope(str, Enum):
    """GigaChat API tier the credentials belong to."""

    PERSONAL = "GIGACHAT_API_PERS"
    B2B = "GIGACHAT_API_B2B"
    CORPORATE = "GIGACHAT_API_CORP"


DEFAULT_TEXT_TEMPLATE = "{{title}} {{description}}"
DEFAULT_SYSTEM_PROMPT = "Выдели основные мысли из статьи."
DEFAULT_USER_PROMPT = "{{message}}"


class GigaChatSettings(BaseSettings):
    """GigaChat API connection configuration.

    Shared by the embedding classifier and the completion agent.
    """

    model_config = SettingsConfigDict(env_prefix="GIGACHAT_")

    auth_url: str = Field(
        default="https://ngw.devices.sberbank.ru:9443/api/v2/oauth",
        description="OAuth endpoint issuing access tokens",
    )
    base_url: str = Field(
        default="https://gigachat.devices.sberbank.ru/api/v1",
        description="GigaChat REST API base URL",
    )
    credentials: SecretStr | None = Field(
        default=None,
        description="Base64 authorization key (client_id:client_secret)",
    )
    scope: Scope = Field(
        default=Scope.PERSONAL,
        description="API tier for token requests",
    )
    verify_ssl: bool = Field(
        default=True,
        description="Verify HTTPS certificates",
    )
    ca_bundle: Path | None = Field(
        default=None,
        description="CA bundle with the Russian trusted root certificate",
    )
    timeout: float = Field(
        default=30.0,
        description="Read timeout in seconds",
    )
    connect_timeout: float = Field(
        default=5.0,
        description="Connect timeout in seconds",
    )
    cache_tokens: bool = Field(
        default=True,
        description="Reuse access tokens until they are about to expire",
    )
    token_refresh_margin: float = Field(
        default=60.0,
        description="Seconds before expiry at which a cached token is renewed",
    )


class ClassifierSettings(BaseSettings):
    """Embedding classifier configuration."""

    model_config = SettingsConfigDict(env_prefix="CLASSIFIER_")

    labels: list[str] = Field(
        default_factory=list,
        description="Labels to classify into (JSON list)",
    )
    text: str = Field(
        default=DEFAULT_TEXT_TEMPLATE,
        description="Template producing the text to classify",
    )
    min_similarity: float = Field(
        default=0.7,
        description="Minimum cosine similarity for a label to be selected",
    )
    model: str = Field(
        default="Embeddings",
        description="Embedding model (Embeddings or EmbeddingsGigaR)",
    )
    expected_receive_period_in_days: int = Field(
        default=2,
        description="Days without events before the agent is not working",
    )


class CompletionSettings(BaseSettings):
    """Completion agent configuration."""

    model_config = SettingsConfigDict(env_prefix="COMPLETION_")

    model: str = Field(
        default="GigaChat",
        description="Chat model name",
    )
    system_prompt: str = Field(
        default=DEFAULT_SYSTEM_PROMPT,
        description="System prompt template",
    )
    user_prompt: str = Field(
        default=DEFAULT_USER_PROMPT,
        description="User prompt template",
    )
    temperature: float = Field(
        default=0.1,
        description="Sampling temperature (0-2)",
    )
    max_tokens: int = Field(
        default=2000,
        description="Maximum tokens in response",
    )
    expected_receive_period_in_days: int = Field(
        default=2,
        description="Days without events before the agent is not working",
    )


class Settings(BaseSettings):
    """Main application settings.

    Aggregates all configuration sections.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application settings
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    # API settings
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host",
    )
    api_port: int = Field(
        default=8000,
        description="API server port",
    )

    # Nested settings
    gigachat: GigaChatSettings = Field(default_factory=GigaChatSettings)
    classifier: ClassifierSettings = Field(default_factory=ClassifierSettings)
    completion: CompletionSettings = Field(default_factory=CompletionSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()
