"""Agent options and their validation.

Options are checked once, when an agent is configured. Any problem is
reported as a single ConfigurationError listing every invalid field.
"""

from typing import Any, Self

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic import ValidationError as PydanticValidationError

from gigachat_agents.config import (
    DEFAULT_SYSTEM_PROMPT,
    DEFAULT_TEXT_TEMPLATE,
    DEFAULT_USER_PROMPT,
    Scope,
    Settings,
)
from gigachat_agents.exceptions import ConfigurationError, TemplateError
from gigachat_agents.templating import EventTemplate


def _check_template(value: str, required: bool = True) -> str:
    if required and not value.strip():
        raise ValueError("must not be blank")
    try:
        EventTemplate(value)
    except TemplateError as e:
        raise ValueError(e.message) from e
    return value


class AgentOptions(BaseModel):
    """Options shared by GigaChat agents."""

    credentials: SecretStr = Field(description="GigaChat authorization key")
    scope: Scope = Field(default=Scope.PERSONAL, description="API tier")
    expected_receive_period_in_days: int = Field(
        default=2,
        ge=1,
        description="Days without events before the agent is not working",
    )

    @field_validator("credentials")
    @classmethod
    def _credentials_present(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value().strip():
            raise ValueError("credentials are required")
        return value

    @classmethod
    def build(cls, **data: Any) -> Self:
        """Validate options.

        Raises:
            ConfigurationError: If any option is missing or invalid.
        """
        try:
            return cls(**data)
        except PydanticValidationError as e:
            errors = [
                f"{'.'.join(str(part) for part in err['loc']) or 'options'}: {err['msg']}"
                for err in e.errors()
            ]
            raise ConfigurationError(
                f"Invalid {cls.__name__}: " + "; ".join(errors),
                details={"errors": errors},
            ) from e


class ClassifierOptions(AgentOptions):
    """Embedding classifier options.

    Attributes:
        labels: Labels to classify into, unique and non-blank.
        text: Template producing the text to classify.
        min_similarity: Inclusive selection threshold.
        model: Embedding model name.
    """

    labels: list[str] = Field(min_length=1, description="Labels to classify into")
    text: str = Field(default=DEFAULT_TEXT_TEMPLATE, description="Text template")
    min_similarity: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Minimum cosine similarity",
    )
    model: str = Field(default="Embeddings", min_length=1, description="Embedding model")

    @field_validator("labels")
    @classmethod
    def _labels_unique(cls, value: list[str]) -> list[str]:
        if any(not label.strip() for label in value):
            raise ValueError("labels must not be blank")
        duplicates = sorted({label for label in value if value.count(label) > 1})
        if duplicates:
            raise ValueError(f"duplicate labels: {', '.join(duplicates)}")
        return value

    @field_validator("text")
    @classmethod
    def _text_template(cls, value: str) -> str:
        return _check_template(value)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ClassifierOptions":
        """Build classifier options from environment settings."""
        gigachat = settings.gigachat
        classifier = settings.classifier
        return cls.build(
            credentials=gigachat.credentials or SecretStr(""),
            scope=gigachat.scope,
            labels=classifier.labels,
            text=classifier.text,
            min_similarity=classifier.min_similarity,
            model=classifier.model,
            expected_receive_period_in_days=classifier.expected_receive_period_in_days,
        )


class CompletionOptions(AgentOptions):
    """Completion agent options."""

    model: str = Field(default="GigaChat", min_length=1, description="Chat model")
    system_prompt: str = Field(
        default=DEFAULT_SYSTEM_PROMPT,
        description="System prompt template",
    )
    user_prompt: str = Field(
        default=DEFAULT_USER_PROMPT,
        description="User prompt template",
    )
    temperature: float = Field(default=0.1, ge=0.0, le=2.0, description="Temperature")
    max_tokens: int = Field(default=2000, gt=0, description="Maximum tokens")

    @field_validator("user_prompt")
    @classmethod
    def _user_prompt_template(cls, value: str) -> str:
        return _check_template(value)

    @field_validator("system_prompt")
    @classmethod
    def _system_prompt_template(cls, value: str) -> str:
        return _check_template(value, required=False)

    @classmethod
    def from_settings(cls, settings: Settings) -> "CompletionOptions":
        """Build completion options from environment settings."""
        gigachat = settings.gigachat
        completion = settings.completion
        return cls.build(
            credentials=gigachat.credentials or SecretStr(""),
            scope=gigachat.scope,
            model=completion.model,
            system_prompt=completion.system_prompt,
            user_prompt=completion.user_prompt,
            temperature=completion.temperature,
            max_tokens=completion.max_tokens,
            expected_receive_period_in_days=completion.expected_receive_period_in_days,
        )
