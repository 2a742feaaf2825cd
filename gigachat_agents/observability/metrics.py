"""Prometheus metrics for GigaChat agents.

Provides metrics instrumentation for:
- HTTP request latency and counts
- OAuth token requests
- Embedding request latency
- LLM token usage and latency
- Label embedding cache lookups
- Agent event outcomes and selected labels
"""

import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

# HTTP Request Metrics
HTTP_REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint", "status_code"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

HTTP_REQUEST_TOTAL = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

# Auth Metrics
AUTH_REQUEST_TOTAL = Counter(
    "gigachat_auth_requests_total",
    "Total OAuth token requests",
    ["scope", "status"],
)

AUTH_TOKEN_CACHE_TOTAL = Counter(
    "gigachat_auth_token_cache_total",
    "Access token cache lookups",
    ["result"],  # "result" label values: hit, miss
)

# Embedding Metrics
EMBEDDING_REQUEST_DURATION = Histogram(
    "embedding_request_duration_seconds",
    "Embedding request duration in seconds",
    ["model", "status"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0],
)

EMBEDDING_REQUEST_TOTAL = Counter(
    "embedding_requests_total",
    "Total embedding requests",
    ["model", "status"],
)

# LLM Metrics
LLM_REQUEST_DURATION = Histogram(
    "llm_request_duration_seconds",
    "LLM request duration in seconds",
    ["model", "status"],
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
)

LLM_TOKENS_TOTAL = Counter(
    "llm_tokens_total",
    "Total LLM tokens used",
    ["model", "type"],  # "type" label values: prompt, completion
)

LLM_REQUEST_TOTAL = Counter(
    "llm_requests_total",
    "Total LLM requests",
    ["model", "status"],
)

# Classifier Metrics
LABEL_CACHE_LOOKUPS = Counter(
    "label_embedding_cache_lookups_total",
    "Label embedding cache lookups",
    ["result"],  # "result" label values: hit, miss, failed
)

LABELS_SELECTED = Histogram(
    "classifier_labels_selected",
    "Number of labels selected per classified event",
    buckets=[0, 1, 2, 3, 5, 10, 20, 50],
)

# Agent Metrics
AGENT_EVENTS_TOTAL = Counter(
    "agent_events_total",
    "Events handled by agents",
    ["agent", "outcome"],
)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to collect HTTP request metrics."""

    def __init__(self, app: ASGIApp) -> None:
        """Initialize the middleware."""
        super().__init__(app)

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Process request and collect metrics."""
        # Skip metrics endpoint to avoid recursion
        if request.url.path == "/metrics":
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        endpoint = self._normalize_endpoint(request.url.path)

        HTTP_REQUEST_DURATION.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).observe(duration)

        HTTP_REQUEST_TOTAL.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).inc()

        return response

    def _normalize_endpoint(self, path: str) -> str:
        """Normalize endpoint path to reduce cardinality."""
        if path.startswith("/health"):
            return "/health"
        if path.startswith("/api/v1/"):
            parts = path.split("/")
            if len(parts) >= 4:
                return f"/api/v1/{parts[3]}"
        return path


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    """Get the content type for metrics response."""
    return CONTENT_TYPE_LATEST


def track_auth_request(scope: str, success: bool = True) -> None:
    """Track an OAuth token request."""
    status = "success" if success else "error"
    AUTH_REQUEST_TOTAL.labels(scope=scope, status=status).inc()


def track_token_cache(hit: bool) -> None:
    """Track an access token cache lookup."""
    AUTH_TOKEN_CACHE_TOTAL.labels(result="hit" if hit else "miss").inc()


def track_embedding_request(
    model: str,
    duration: float,
    success: bool = True,
) -> None:
    """Track embedding request metrics.

    Args:
        model: Embedding model name.
        duration: Request duration in seconds.
        success: Whether the request succeeded.
    """
    status = "success" if success else "error"

    EMBEDDING_REQUEST_DURATION.labels(model=model, status=status).observe(duration)
    EMBEDDING_REQUEST_TOTAL.labels(model=model, status=status).inc()


def track_llm_request(
    model: str,
    duration: float,
    prompt_tokens: int,
    completion_tokens: int,
    success: bool = True,
) -> None:
    """Track LLM request metrics.

    Args:
        model: LLM model name.
        duration: Request duration in seconds.
        prompt_tokens: Number of prompt tokens.
        completion_tokens: Number of completion tokens.
        success: Whether the request succeeded.
    """
    status = "success" if success else "error"

    LLM_REQUEST_DURATION.labels(model=model, status=status).observe(duration)
    LLM_REQUEST_TOTAL.labels(model=model, status=status).inc()

    if success:
        LLM_TOKENS_TOTAL.labels(model=model, type="prompt").inc(prompt_tokens)
        LLM_TOKENS_TOTAL.labels(model=model, type="completion").inc(completion_tokens)


def track_label_cache(hits: int, misses: int, failures: int) -> None:
    """Track label embedding cache lookups for one resolution.

    Args:
        hits: Labels served from the cache.
        misses: Labels fetched and stored.
        failures: Labels whose embedding could not be fetched.
    """
    if hits:
        LABEL_CACHE_LOOKUPS.labels(result="hit").inc(hits)
    if misses:
        LABEL_CACHE_LOOKUPS.labels(result="miss").inc(misses)
    if failures:
        LABEL_CACHE_LOOKUPS.labels(result="failed").inc(failures)


def track_labels_selected(count: int) -> None:
    """Track how many labels were selected for one event."""
    LABELS_SELECTED.observe(count)


def track_agent_outcome(agent: str, outcome: str) -> None:
    """Track the outcome of one handled event.

    Args:
        agent: Agent name.
        outcome: ``emitted`` or a skip reason.
    """
    AGENT_EVENTS_TOTAL.labels(agent=agent, outcome=outcome).inc()
