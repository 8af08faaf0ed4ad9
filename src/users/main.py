"""
Users API Main Application

This is the FastAPI application entry point for the JSON user API.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import httpx
import uvicorn

from src.store.auth import AuthClient
from src.store.client import StoreClient
from src.store.config import StoreConfig, get_config
from src.store.controller import RecordController
from src.store.exceptions import ProxyException
from src.store.lifecycle import health_report, open_http_client
from src.store.log import configure_logging, get_logger
from src.store.middleware import RequestLoggingMiddleware, get_request_id
from src.store.resources import user_resource
from src.users.accounts import AccountService
from src.users.routers import users

logger = logging.getLogger(__name__)

SERVICE_NAME = "Users API"
VERSION = "1.0.0"


def create_app(
    config: Optional[StoreConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the users API.

    Args:
        config: Configuration (defaults to the global one)
        transport: Optional HTTP transport for the remote store and auth clients
    """
    config = config or get_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Handles startup and shutdown:
        - On startup: Initialize the HTTP client, store/auth clients and services
        - On shutdown: Close the HTTP client
        """
        configure_logging(config)
        logger.info(f"Starting {SERVICE_NAME}...")
        logger.info(f"Configuration: store={config.store_url}, collection={config.users_collection}")

        http_client = open_http_client(config, transport)
        store_client = StoreClient(
            base_url=config.store_url,
            api_key=config.store_api_key,
            http_client=http_client,
            rest_path=config.store_rest_path,
        )
        auth_client = AuthClient(
            base_url=config.store_url,
            api_key=config.store_api_key,
            http_client=http_client,
            auth_path=config.store_auth_path,
        )
        resource = user_resource(config.users_collection)
        user_controller = RecordController(
            client=store_client,
            resource=resource,
            logger=get_logger("src.users.controller", collection=resource.collection),
        )

        app.state.config = config
        app.state.http_client = http_client
        app.state.store_client = store_client
        app.state.user_controller = user_controller
        app.state.account_service = AccountService(
            auth=auth_client,
            users=user_controller,
            logger=get_logger("src.users.accounts"),
        )

        logger.info(f"{SERVICE_NAME} started successfully")

        yield

        logger.info(f"Shutting down {SERVICE_NAME}...")
        await http_client.aclose()
        logger.info(f"{SERVICE_NAME} shut down complete")

    app = FastAPI(
        title=SERVICE_NAME,
        description="User API backed by a remote record store and auth service",
        version=VERSION,
        lifespan=lifespan,
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.include_router(users.router, prefix="", tags=["Users"])

    @app.exception_handler(ProxyException)
    async def proxy_exception_handler(request: Request, exc: ProxyException):
        """Handle request-level exceptions."""
        exc.request_id = exc.request_id or get_request_id(request)
        logger.error(
            f"Request error: {exc.message}",
            extra={"request_id": exc.request_id, "status_code": exc.status_code}
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict()
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle request validation errors."""
        logger.error(f"Validation error: {exc.errors()}")
        return JSONResponse(
            status_code=400,
            content={
                "error": "Validation error",
                "details": str(exc.errors())
            }
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.error(f"Unexpected error: {str(exc)}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "details": str(exc)
            }
        )

    @app.get("/")
    async def root(request: Request):
        """Root endpoint - health check."""
        return await health_report(SERVICE_NAME, VERSION, request.app.state.store_client)

    return app


app = create_app()


# CLI entrypoint
if __name__ == "__main__":
    config = get_config()
    uvicorn.run(
        "src.users.main:app",
        host=config.users_host,
        port=config.users_port,
        reload=False,
        log_level=config.log_level.lower()
    )
