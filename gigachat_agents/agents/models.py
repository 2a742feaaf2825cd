"""Agent event and outcome models."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field


class Event(BaseModel):
    """A unit of input or output flowing between agents.

    Attributes:
        id: Unique event identifier.
        payload: Arbitrary event data.
        created_at: When the event was created.
    """

    id: str = Field(default_factory=lambda: str(uuid4()), description="Event ID")
    payload: dict[str, Any] = Field(default_factory=dict, description="Event data")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Creation time (UTC)",
    )


class SkipReason(str, Enum):
    """Why an event produced no output."""

    EMPTY_TEXT = "empty_text"
    AUTHENTICATION_FAILED = "authentication_failed"
    EMBEDDING_FAILED = "embedding_failed"
    INVALID_EMBEDDING = "invalid_embedding"
    COMPLETION_FAILED = "completion_failed"
    TEMPLATE_ERROR = "template_error"
    INTERNAL_ERROR = "internal_error"

    @property
    def is_error(self) -> bool:
        """Whether the skip counts as an agent error."""
        return self is not SkipReason.EMPTY_TEXT


class Outcome(BaseModel):
    """Result of handling one event: emitted or skipped.

    Attributes:
        event: The emitted event, if any.
        skip_reason: Why nothing was emitted.
        detail: Human-readable detail for skipped events.
    """

    event: Event | None = Field(default=None, description="Emitted event")
    skip_reason: SkipReason | None = Field(default=None, description="Skip reason")
    detail: str | None = Field(default=None, description="Skip detail")

    @classmethod
    def emitted(cls, event: Event) -> "Outcome":
        """Outcome carrying an outgoing event."""
        return cls(event=event)

    @classmethod
    def skipped(cls, reason: SkipReason, detail: str | None = None) -> "Outcome":
        """Outcome for an event that produced no output."""
        return cls(skip_reason=reason, detail=detail)

    @property
    def is_emitted(self) -> bool:
        """Whether an event was emitted."""
        return self.event is not None

    @property
    def label(self) -> str:
        """Metric label for this outcome."""
        if self.skip_reason is None:
            return "emitted"
        return self.skip_reason.value
