"""
Record Proxy Middleware

This module provides request logging and X-Request-Id handling, plus the
helper that reads request bodies from either HTML forms or JSON.
"""

import time
import uuid
import logging
from typing import Any, Callable, Dict
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from src.store.exceptions import InvalidRequestBody

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to tag each request with an id and log it.

    This middleware:
    1. Takes X-Request-Id from the request headers or generates one
    2. Stores it in request.state for use by route handlers
    3. Logs every request with method, path, status and latency
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-Id") or uuid.uuid4().hex
        request.state.request_id = request_id

        start_time = time.time()

        logger.info(
            f"Incoming request: {request.method} {request.url.path}",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "client": request.client.host if request.client else None,
            }
        )

        try:
            response = await call_next(request)
        except Exception as e:
            latency_ms = (time.time() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.url.path} - Error: {str(e)}",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "error": str(e),
                    "latency_ms": round(latency_ms, 2),
                },
                exc_info=True
            )
            raise

        latency_ms = (time.time() - start_time) * 1000
        logger.info(
            f"Request completed: {request.method} {request.url.path} - Status: {response.status_code}",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "latency_ms": round(latency_ms, 2),
            }
        )
        response.headers["X-Request-Id"] = request_id
        return response


def get_request_id(request: Request) -> str | None:
    """
    Helper function to get the request ID from request state.

    Args:
        request: The FastAPI request object

    Returns:
        Request ID if present, None otherwise
    """
    return getattr(request.state, "request_id", None)


async def read_input(request: Request) -> Dict[str, Any]:
    """
    Read submitted fields from a JSON body or a form body.

    Raises:
        InvalidRequestBody: If a JSON body is not an object
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            data = await request.json()
        except ValueError as e:
            raise InvalidRequestBody(details=str(e))
        if not isinstance(data, dict):
            raise InvalidRequestBody(details="Expected a JSON object")
        return data

    if not await request.body():
        return {}
    form = await request.form()
    return {key: value for key, value in form.items() if isinstance(value, str)}
