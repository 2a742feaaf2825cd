"""Embedding-based label classifier."""

from gigachat_agents.classifier.cache import LabelEmbeddingCache
from gigachat_agents.classifier.pipeline import EmbeddingClassifierAgent
from gigachat_agents.classifier.scoring import (
    ClassificationResult,
    classify,
    score_labels,
    select_labels,
)
from gigachat_agents.classifier.similarity import cosine_similarity, vector_norm

__all__ = [
    "ClassificationResult",
    "EmbeddingClassifierAgent",
    "LabelEmbeddingCache",
    "classify",
    "cosine_similarity",
    "score_labels",
    "select_labels",
    "vector_norm",
]
