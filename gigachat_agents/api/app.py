"""FastAPI application entry point.

Configures the application with logging, exception handling, metrics,
health checks and the agents built from settings.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from gigachat_agents import __version__
from gigachat_agents.agents.base import Agent
from gigachat_agents.agents.options import ClassifierOptions, CompletionOptions
from gigachat_agents.api.routes import CLASSIFIER, COMPLETION, get_agents, router
from gigachat_agents.classifier.pipeline import EmbeddingClassifierAgent
from gigachat_agents.completion.pipeline import CompletionAgent
from gigachat_agents.config import Settings, get_settings
from gigachat_agents.exceptions import ConfigurationError, ErrorCode, GigaChatAgentsError
from gigachat_agents.logging_config import get_logger, setup_logging
from gigachat_agents.observability.metrics import (
    MetricsMiddleware,
    get_metrics,
    get_metrics_content_type,
)

logger = get_logger(__name__)


def build_agents(settings: Settings) -> dict[str, Agent | None]:
    """Build every agent whose options validate; others are left out as None."""
    agents: dict[str, Agent | None] = {CLASSIFIER: None, COMPLETION: None}

    try:
        agents[CLASSIFIER] = EmbeddingClassifierAgent(
            ClassifierOptions.from_settings(settings),
            settings=settings.gigachat,
        )
    except ConfigurationError as e:
        logger.warning(
            "Classifier agent not configured",
            extra={"errors": e.details.get("errors", [])},
        )

    try:
        agents[COMPLETION] = CompletionAgent(
            CompletionOptions.from_settings(settings),
            settings=settings.gigachat,
        )
    except ConfigurationError as e:
        logger.warning(
            "Completion agent not configured",
            extra={"errors": e.details.get("errors", [])},
        )

    return agents


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Builds agents on startup and closes their HTTP clients on shutdown.
    """
    settings = get_settings()
    setup_logging(level=settings.log_level)
    logger.info(
        "Starting GigaChat agents",
        extra={
            "version": __version__,
            "environment": settings.environment.value,
        },
    )
    app.state.agents = build_agents(settings)

    yield

    logger.info("Shutting down GigaChat agents")
    for agent in app.state.agents.values():
        if agent is not None:
            await agent.close()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="GigaChat Agents",
        description="Embedding label classifier and completion agents backed by GigaChat",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.add_middleware(MetricsMiddleware)
    app.add_exception_handler(GigaChatAgentsError, agents_exception_handler)

    app.add_api_route("/health", health_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/health/ready", readiness_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/health/live", liveness_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/metrics", metrics_endpoint, methods=["GET"], tags=["Metrics"])
    app.include_router(router)

    return app


async def agents_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle GigaChatAgentsError exceptions.

    Converts exceptions to structured JSON responses.
    """
    if not isinstance(exc, GigaChatAgentsError):
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": ErrorCode.INTERNAL_ERROR.value,
                    "message": str(exc),
                    "details": {},
                }
            },
        )

    logger.error(
        f"Request failed: {exc.message}",
        extra={
            "error_code": exc.code.value,
            "path": request.url.path,
            "details": exc.details,
        },
    )

    return JSONResponse(
        status_code=_get_status_code(exc.code),
        content=exc.to_dict(),
    )


def _get_status_code(error_code: ErrorCode) -> int:
    """Map error code to HTTP status code."""
    if error_code in (ErrorCode.VALIDATION_ERROR, ErrorCode.TEMPLATE_ERROR):
        return 400

    if error_code in (ErrorCode.AUTH_FAILED, ErrorCode.AUTH_INVALID_RESPONSE):
        return 502

    if error_code == ErrorCode.LLM_RATE_LIMIT:
        return 429

    if error_code == ErrorCode.LLM_TIMEOUT:
        return 504

    if error_code == ErrorCode.CONFIGURATION_ERROR:
        return 503

    return 500


async def health_check() -> dict[str, Any]:
    """Basic health check endpoint.

    Returns:
        Health status with version and timestamp.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.now(UTC).isoformat(),
    }


async def readiness_check(request: Request) -> dict[str, Any]:
    """Readiness probe.

    Ready once at least one agent is configured.

    Returns:
        Readiness status with per-agent checks.
    """
    agents = get_agents(request)
    checks: dict[str, str] = {
        name: "ok" if agents.get(name) is not None else "not_configured"
        for name in (CLASSIFIER, COMPLETION)
    }

    ready = any(value == "ok" for value in checks.values())

    return {
        "status": "ready" if ready else "not_ready",
        "checks": checks,
        "timestamp": datetime.now(UTC).isoformat(),
    }


async def liveness_check() -> dict[str, str]:
    """Liveness probe.

    Returns:
        Liveness status.
    """
    return {"status": "alive"}


async def metrics_endpoint() -> Response:
    """Prometheus scrape endpoint."""
    return Response(content=get_metrics(), media_type=get_metrics_content_type())


# Create the application instance
app = create_app()
