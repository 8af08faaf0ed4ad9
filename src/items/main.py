"""
Items App Main Application

This is the FastAPI application entry point for the HTML item manager.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, RedirectResponse
import httpx
import uvicorn

from src.items import views
from src.items.dependencies import get_store_client
from src.items.routers import items
from src.store.client import StoreClient
from src.store.config import StoreConfig, get_config
from src.store.controller import RecordController
from src.store.exceptions import ProxyException
from src.store.lifecycle import health_report, open_http_client
from src.store.log import configure_logging, get_logger
from src.store.middleware import RequestLoggingMiddleware
from src.store.resources import item_resource

logger = logging.getLogger(__name__)

SERVICE_NAME = "Items App"
VERSION = "1.0.0"


def create_app(
    config: Optional[StoreConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the items app.

    Args:
        config: Configuration (defaults to the global one)
        transport: Optional HTTP transport for the remote store client
    """
    config = config or get_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Handles startup and shutdown:
        - On startup: Initialize the HTTP client, store client and controller
        - On shutdown: Close the HTTP client
        """
        configure_logging(config)
        logger.info(f"Starting {SERVICE_NAME}...")
        logger.info(f"Configuration: store={config.store_url}, collection={config.items_collection}")

        http_client = open_http_client(config, transport)
        store_client = StoreClient(
            base_url=config.store_url,
            api_key=config.store_api_key,
            http_client=http_client,
            rest_path=config.store_rest_path,
        )
        resource = item_resource(config.items_collection)

        app.state.config = config
        app.state.http_client = http_client
        app.state.store_client = store_client
        app.state.item_controller = RecordController(
            client=store_client,
            resource=resource,
            logger=get_logger("src.items.controller", collection=resource.collection),
        )

        logger.info(f"{SERVICE_NAME} started successfully")

        yield

        logger.info(f"Shutting down {SERVICE_NAME}...")
        await http_client.aclose()
        logger.info(f"{SERVICE_NAME} shut down complete")

    app = FastAPI(
        title=SERVICE_NAME,
        description="Item manager backed by a remote record store",
        version=VERSION,
        lifespan=lifespan,
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.include_router(items.router, prefix="", tags=["Items"])

    @app.exception_handler(ProxyException)
    async def proxy_exception_handler(request: Request, exc: ProxyException):
        logger.error(f"Request error: {exc.message}", extra={"status_code": exc.status_code})
        return HTMLResponse(views.error_page(exc.message), status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.error(f"Validation error: {exc.errors()}")
        return HTMLResponse(views.error_page("Invalid request"), status_code=400)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unexpected error: {str(exc)}", exc_info=True)
        return HTMLResponse(views.error_page("Internal server error"), status_code=500)

    @app.get("/")
    async def root():
        return RedirectResponse("/items")

    @app.get("/health")
    async def health(store: StoreClient = Depends(get_store_client)):
        """Health check including remote store reachability."""
        return await health_report(SERVICE_NAME, VERSION, store)

    return app


app = create_app()


# CLI entrypoint
if __name__ == "__main__":
    config = get_config()
    uvicorn.run(
        "src.items.main:app",
        host=config.items_host,
        port=config.items_port,
        reload=False,
        log_level=config.log_level.lower()
    )
