"""API routes feeding events to the configured agents."""

from typing import Any

from fastapi import APIRouter, HTTPException, Request, status
from pydantic import BaseModel, Field

from gigachat_agents.agents.base import Agent
from gigachat_agents.agents.models import Event
from gigachat_agents.logging_config import get_logger

logger = get_logger(__name__)

CLASSIFIER = "classifier"
COMPLETION = "completion"

# Create router
router = APIRouter(prefix="/api/v1", tags=["Agents"])


class EventBatchRequest(BaseModel):
    """Request body carrying event payloads."""

    events: list[dict[str, Any]] = Field(
        min_length=1,
        description="Event payloads, processed in order",
    )


class EventBatchResponse(BaseModel):
    """Events emitted for a batch."""

    events: list[Event] = Field(description="Emitted events, in input order")
    emitted: int = Field(description="Number of emitted events")
    skipped: int = Field(description="Number of events that produced no output")


class AgentStatus(BaseModel):
    """Status of one agent."""

    name: str = Field(description="Agent name")
    configured: bool = Field(description="Whether the agent has valid options")
    working: bool = Field(default=False, description="Whether the agent is working")
    last_receive_at: str | None = Field(default=None, description="Last receive time")
    last_error_at: str | None = Field(default=None, description="Last error time")


def get_agents(request: Request) -> dict[str, Agent | None]:
    """Agents built at startup, keyed by route name."""
    return getattr(request.app.state, "agents", {})


def _require_agent(request: Request, name: str) -> Agent:
    agent = get_agents(request).get(name)
    if agent is None:
        logger.warning(f"Agent not configured: {name}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "error": f"{name} agent not configured",
                "message": "Set GIGACHAT_CREDENTIALS and the agent options to enable it",
            },
        )
    return agent


async def run_batch(agent: Agent, request: EventBatchRequest) -> EventBatchResponse:
    """Feed a batch of payloads through an agent."""
    events = [Event(payload=payload) for payload in request.events]
    emitted = await agent.receive(events)
    return EventBatchResponse(
        events=emitted,
        emitted=len(emitted),
        skipped=len(events) - len(emitted),
    )


@router.post("/classify", response_model=EventBatchResponse)
async def classify_endpoint(request: Request, body: EventBatchRequest) -> EventBatchResponse:
    """Classify event payloads against the configured labels."""
    return await run_batch(_require_agent(request, CLASSIFIER), body)


@router.post("/complete", response_model=EventBatchResponse)
async def complete_endpoint(request: Request, body: EventBatchRequest) -> EventBatchResponse:
    """Attach GigaChat completions to event payloads."""
    return await run_batch(_require_agent(request, COMPLETION), body)


@router.get("/agents", response_model=list[AgentStatus])
async def agents_endpoint(request: Request) -> list[AgentStatus]:
    """Report configuration and working status of every agent."""
    statuses: list[AgentStatus] = []
    for name in (CLASSIFIER, COMPLETION):
        agent = get_agents(request).get(name)
        if agent is None:
            statuses.append(AgentStatus(name=name, configured=False))
            continue
        statuses.append(
            AgentStatus(
                name=name,
                configured=True,
                working=agent.is_working(),
                last_receive_at=_isoformat(agent.last_receive_at),
                last_error_at=_isoformat(agent.last_error_at),
            )
        )
    return statuses


def _isoformat(value: Any) -> str | None:
    return value.isoformat() if value is not None else None
