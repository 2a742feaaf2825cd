"""Tests for observability module."""

import pytest
from httpx import ASGITransport, AsyncClient

from gigachat_agents.api.app import app
from gigachat_agents.observability.metrics import (
    get_metrics,
    track_agent_outcome,
    track_auth_request,
    track_embedding_request,
    track_label_cache,
    track_labels_selected,
    track_llm_request,
    track_token_cache,
)


class TestMetricsEndpoint:
    """Tests for /metrics endpoint."""

    @pytest.mark.asyncio
    async def test_metrics_endpoint_returns_prometheus_format(self) -> None:
        """Metrics endpoint returns Prometheus format."""
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/metrics")

        assert response.status_code == 200
        assert "text/plain" in response.headers["content-type"]
        assert b"# HELP" in response.content


class TestMetricsFunctions:
    """Tests for metrics tracking functions."""

    def test_get_metrics_returns_bytes(self) -> None:
        """get_metrics returns bytes."""
        assert isinstance(get_metrics(), bytes)

    def test_track_auth_request(self) -> None:
        """track_auth_request records token requests by scope."""
        track_auth_request("GIGACHAT_API_PERS", success=False)
        track_token_cache(hit=True)

        metrics = get_metrics().decode()
        assert 'gigachat_auth_requests_total{scope="GIGACHAT_API_PERS",status="error"}' in metrics
        assert 'gigachat_auth_token_cache_total{result="hit"}' in metrics

    def test_track_llm_request_success(self) -> None:
        """track_llm_request records successful request."""
        track_llm_request(
            model="GigaChat",
            duration=1.5,
            prompt_tokens=100,
            completion_tokens=50,
            success=True,
        )

        metrics = get_metrics().decode()
        assert "llm_request_duration_seconds" in metrics
        assert "llm_tokens_total" in metrics

    def test_track_embedding_request(self) -> None:
        """track_embedding_request records request."""
        track_embedding_request(model="Embeddings", duration=0.1, success=True)

        metrics = get_metrics().decode()
        assert "embedding_request_duration_seconds" in metrics
        assert 'embedding_requests_total{model="Embeddings",status="success"}' in metrics

    def test_track_label_cache(self) -> None:
        """track_label_cache records hits, misses and failures."""
        track_label_cache(hits=2, misses=1, failures=1)

        metrics = get_metrics().decode()
        assert 'label_embedding_cache_lookups_total{result="hit"}' in metrics
        assert 'label_embedding_cache_lookups_total{result="failed"}' in metrics

    def test_track_labels_selected(self) -> None:
        """track_labels_selected observes the selection size."""
        track_labels_selected(2)

        metrics = get_metrics().decode()
        assert "classifier_labels_selected_count" in metrics

    def test_track_agent_outcome(self) -> None:
        """track_agent_outcome counts outcomes per agent."""
        track_agent_outcome("embedding_classifier", "emitted")

        metrics = get_metrics().decode()
        assert 'agent_events_total{agent="embedding_classifier",outcome="emitted"}' in metrics


class TestMetricsMiddleware:
    """Tests for MetricsMiddleware."""

    @pytest.mark.asyncio
    async def test_middleware_records_request_metrics(self) -> None:
        """Middleware records HTTP request metrics."""
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            await client.get("/health")

        metrics = get_metrics().decode()
        assert "http_request_duration_seconds" in metrics
        assert "http_requests_total" in metrics

    @pytest.mark.asyncio
    async def test_middleware_normalizes_endpoints(self) -> None:
        """Health probes are grouped under /health."""
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            await client.get("/health/ready")
            await client.get("/health/live")

        metrics = get_metrics().decode()
        assert 'endpoint="/health/live"' not in metrics
        assert 'endpoint="/health"' in metrics
