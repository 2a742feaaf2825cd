"""Agent base class: batch receive, per-event isolation and status."""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from typing import Any

from gigachat_agents.agents.models import Event, Outcome, SkipReason
from gigachat_agents.exceptions import GigaChatAgentsError, TemplateError
from gigachat_agents.logging_config import get_logger
from gigachat_agents.observability.metrics import track_agent_outcome

logger = get_logger(__name__)

# An error this close before the last emitted event still counts as recent.
RECENT_ERROR_WINDOW = timedelta(minutes=2)


class Agent(ABC):
    """Abstract base class for event-processing agents.

    Subclasses implement ``process`` for a single event. ``receive`` feeds
    a batch through ``handle_event`` strictly in order; a failing event
    never stops the rest of the batch.
    """

    def __init__(self, name: str, expected_receive_period_in_days: int = 2) -> None:
        """Initialize the agent.

        Args:
            name: Agent name used in logs and metrics.
            expected_receive_period_in_days: Window for ``is_working``.
        """
        self.name = name
        self._expected_receive_period = timedelta(days=expected_receive_period_in_days)
        self.last_receive_at: datetime | None = None
        self.last_event_at: datetime | None = None
        self.last_error_at: datetime | None = None

    @abstractmethod
    async def process(self, event: Event) -> Outcome:
        """Process one event.

        Expected failures are returned as skipped outcomes. Anything
        raised is caught by ``handle_event``.
        """
        ...

    async def receive(self, events: Iterable[Event]) -> list[Event]:
        """Handle a batch of events sequentially.

        Args:
            events: Incoming events.

        Returns:
            Emitted events, in input order.
        """
        emitted: list[Event] = []
        for event in events:
            self.last_receive_at = datetime.now(UTC)
            outcome = await self.handle_event(event)
            if outcome.event is not None:
                emitted.append(outcome.event)
        return emitted

    async def handle_event(self, event: Event) -> Outcome:
        """Process one event behind the isolation boundary.

        Never raises; every failure becomes a skipped outcome.
        """
        outcome = await self._run(event)
        self._record(outcome)
        track_agent_outcome(self.name, outcome.label)
        return outcome

    async def dry_run(self, payload: dict[str, Any]) -> Outcome:
        """Process a payload without touching status or outcome metrics."""
        return await self._run(Event(payload=payload))

    async def _run(self, event: Event) -> Outcome:
        try:
            outcome = await self.process(event)
        except TemplateError as e:
            logger.error(
                f"Failed to render template: {e.message}",
                extra={"agent": self.name, "event_id": event.id},
            )
            outcome = Outcome.skipped(SkipReason.TEMPLATE_ERROR, e.message)
        except GigaChatAgentsError as e:
            logger.error(
                f"Error processing event: {e.message}",
                extra={"agent": self.name, "event_id": event.id, "code": e.code.value},
            )
            outcome = Outcome.skipped(SkipReason.INTERNAL_ERROR, e.message)
        except Exception as e:
            logger.exception(
                f"Unexpected error processing event: {e}",
                extra={"agent": self.name, "event_id": event.id},
            )
            outcome = Outcome.skipped(SkipReason.INTERNAL_ERROR, str(e))

        return outcome

    def _record(self, outcome: Outcome) -> None:
        now = datetime.now(UTC)
        if outcome.is_emitted:
            self.last_event_at = now
        elif outcome.skip_reason is not None and outcome.skip_reason.is_error:
            self.last_error_at = now

    def has_recent_errors(self) -> bool:
        """Whether an error was logged after (or shortly before) the last emitted event.

        An error with no emitted event yet counts as recent.
        """
        if self.last_error_at is None:
            return False
        if self.last_event_at is None:
            return True
        return self.last_error_at > self.last_event_at - RECENT_ERROR_WINDOW

    def is_working(self, now: datetime | None = None) -> bool:
        """Whether events arrived recently and processing is not failing."""
        if self.last_receive_at is None:
            return False
        now = now or datetime.now(UTC)
        received_recently = self.last_receive_at > now - self._expected_receive_period
        return received_recently and not self.has_recent_errors()

    async def close(self) -> None:
        """Release resources held by the agent."""
