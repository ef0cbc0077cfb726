"""Shared HTTP client for the Microsoft Graph API."""

import httpx
from loguru import logger

from src.sso_reconcile.runtime.config.config_data import ConfigData

PHOTO_PATH = "/v1.0/me/photo/$value"


def photo_url(graph_endpoint: str) -> str:
    return f"{graph_endpoint.rstrip('/')}{PHOTO_PATH}"


def create_graph_client(
    config: ConfigData, transport: httpx.AsyncBaseTransport | None = None
) -> httpx.AsyncClient:
    """Create the pooled client used for every photo request.

    The caller owns the client and must close it (``await client.aclose()`` or
    ``async with``) when the application shuts down.
    """
    avatar_config = config.avatar
    logger.info(
        "Creating graph client: endpoint={}, timeout={}s, max_connections={}",
        config.sso.microsoft_graph_endpoint,
        avatar_config.fetch_timeout_seconds,
        avatar_config.max_connections,
    )
    return httpx.AsyncClient(
        timeout=httpx.Timeout(avatar_config.fetch_timeout_seconds),
        limits=httpx.Limits(
            max_connections=avatar_config.max_connections,
            max_keepalive_connections=avatar_config.max_connections,
        ),
        transport=transport,
    )
