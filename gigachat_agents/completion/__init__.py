"""GigaChat completion agent."""

from gigachat_agents.completion.pipeline import CompletionAgent

__all__ = ["CompletionAgent"]
