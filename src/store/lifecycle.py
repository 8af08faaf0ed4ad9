"""
App Lifecycle Helpers

Shared by the items and users apps: building the pooled HTTP client on
startup and reporting remote store reachability for the health endpoint.
"""

import logging
from typing import Dict, Optional

import httpx

from src.store.client import StoreClient
from src.store.config import StoreConfig

logger = logging.getLogger(__name__)


def open_http_client(
    config: StoreConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """
    Create the shared HTTP client with the configured timeouts.

    Args:
        config: App configuration
        transport: Optional transport override (tests pass an httpx.MockTransport)
    """
    timeout = httpx.Timeout(
        connect=config.http_connect_timeout,
        read=config.http_read_timeout,
        write=config.http_read_timeout,
        pool=config.http_connect_timeout,
    )
    logger.info(
        f"Opening HTTP client for remote store {config.store_url}",
        extra={"connect_timeout": config.http_connect_timeout, "read_timeout": config.http_read_timeout}
    )
    return httpx.AsyncClient(timeout=timeout, transport=transport)


async def health_report(service: str, version: str, store: StoreClient) -> Dict[str, str]:
    """Root/health payload including whether the remote store answers."""
    store_ok = await store.check_health()
    return {
        "service": service,
        "status": "running",
        "version": version,
        "store": "reachable" if store_ok else "unreachable",
    }
