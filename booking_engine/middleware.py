"""
FastAPI middleware for request tracing and correlation.

Every request gets a unique ID that is returned to the client and bound into
the structlog context, so all log lines of one request can be correlated.
"""

from __future__ import annotations

import uuid
from typing import Awaitable, Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add unique request IDs to each HTTP request.

    The ID is:
    1. Taken from an incoming X-Request-ID header, or generated as a UUID
    2. Stored in request.state.request_id for route handlers
    3. Bound to structlog contextvars for the duration of the request
    4. Echoed back in the X-Request-ID response header

    Example:
        >>> app.add_middleware(RequestIDMiddleware)
        >>>
        >>> # Every log line emitted while handling the request carries it:
        >>> logger.info("booking_created", booking_id=...)
        {"event": "booking_created", "request_id": "550e8400-...", ...}
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """
        Process each request by adding a request ID.

        Args:
            request: Incoming FastAPI request
            call_next: Next middleware or route handler in chain

        Returns:
            Response with X-Request-ID header added
        """
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id", "method", "path")

        response.headers["X-Request-ID"] = request_id
        return response
