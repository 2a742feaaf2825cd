"""LLM client module."""

from gigachat_agents.llm.client import GigaChatClient, LLMClient
from gigachat_agents.llm.models import GenerationResult, Message, Role

__all__ = [
    "GenerationResult",
    "GigaChatClient",
    "LLMClient",
    "Message",
    "Role",
]
