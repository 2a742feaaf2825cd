"""Embedding service module."""

from gigachat_agents.embeddings.models import EmbeddingResult
from gigachat_agents.embeddings.service import EmbeddingService, GigaChatEmbeddingService

__all__ = [
    "EmbeddingResult",
    "EmbeddingService",
    "GigaChatEmbeddingService",
]
