"""Agent runtime: events, outcomes, options and the base agent."""

from gigachat_agents.agents.base import Agent
from gigachat_agents.agents.models import Event, Outcome, SkipReason
from gigachat_agents.agents.options import (
    AgentOptions,
    ClassifierOptions,
    CompletionOptions,
)

__all__ = [
    "Agent",
    "AgentOptions",
    "ClassifierOptions",
    "CompletionOptions",
    "Event",
    "Outcome",
    "SkipReason",
]
