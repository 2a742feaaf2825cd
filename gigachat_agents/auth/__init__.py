"""GigaChat authentication module."""

from gigachat_agents.auth.models import AccessToken
from gigachat_agents.auth.service import GigaChatTokenProvider, TokenProvider

__all__ = [
    "AccessToken",
    "GigaChatTokenProvider",
    "TokenProvider",
]
