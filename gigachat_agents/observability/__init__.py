"""Observability module for metrics and monitoring."""

from gigachat_agents.observability.metrics import (
    MetricsMiddleware,
    get_metrics,
    track_agent_outcome,
    track_auth_request,
    track_embedding_request,
    track_label_cache,
    track_labels_selected,
    track_llm_request,
    track_token_cache,
)

__all__ = [
    "MetricsMiddleware",
    "get_metrics",
    "track_agent_outcome",
    "track_auth_request",
    "track_embedding_request",
    "track_label_cache",
    "track_labels_selected",
    "track_llm_request",
    "track_token_cache",
]
