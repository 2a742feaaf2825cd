"""HTTP client construction shared by GigaChat services."""

import uuid

import httpx

from gigachat_agents.config import GigaChatSettings


def build_client(settings: GigaChatSettings) -> httpx.AsyncClient:
    """Create an HTTP client with GigaChat timeouts and TLS settings.

    A configured CA bundle takes precedence over ``verify_ssl``.
    """
    verify: bool | str = settings.verify_ssl
    if settings.ca_bundle is not None:
        verify = str(settings.ca_bundle)

    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.timeout, connect=settings.connect_timeout),
        verify=verify,
    )


def new_request_id() -> str:
    """Unique id for the ``RqUID`` / ``X-Request-ID`` headers."""
    return str(uuid.uuid4())
