"""
Middleware for request logging and request ids.
"""

import time
import uuid
import logging
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

# Configure structured logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("advisor_crm")

# Requests slower than this are logged as warnings
SLOW_REQUEST_MS = 500


class PerformanceMiddleware(BaseHTTPMiddleware):
    """
    Middleware to track request duration and add request IDs.

    Features:
    - Adds X-Request-ID header (uses provided value or generates a UUID)
    - Adds X-Response-Time-Ms header
    - Logs request/response details
    """

    def __init__(self, app: ASGIApp, slow_request_ms: float = SLOW_REQUEST_MS):
        super().__init__(app)
        self.slow_request_ms = slow_request_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        # Store request ID in request state for access by endpoints
        request.state.request_id = request_id

        start_time = time.time()

        logger.info(
            f"Request started | "
            f"request_id={request_id} | "
            f"method={request.method} | "
            f"path={request.url.path} | "
            f"client={request.client.host if request.client else 'unknown'}"
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"Request failed | "
                f"request_id={request_id} | "
                f"method={request.method} | "
                f"path={request.url.path} | "
                f"duration_ms={duration_ms:.2f} | "
                f"error={str(e)}"
            )
            raise

        duration_ms = (time.time() - start_time) * 1000

        logger.info(
            f"Request completed | "
            f"request_id={request_id} | "
            f"method={request.method} | "
            f"path={request.url.path} | "
            f"status={response.status_code} | "
            f"duration_ms={duration_ms:.2f}"
        )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time-Ms"] = f"{duration_ms:.2f}"

        if duration_ms > self.slow_request_ms:
            logger.warning(
                f"Slow request | "
                f"request_id={request_id} | "
                f"path={request.url.path} | "
                f"duration_ms={duration_ms:.2f} | "
                f"threshold_ms={self.slow_request_ms}"
            )

        return response


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Middleware to inject request context into logs.

    Makes request_id available to all downstream handlers.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not hasattr(request.state, "request_id"):
            request.state.request_id = request.headers.get(
                "X-Request-ID",
                str(uuid.uuid4())
            )

        response = await call_next(request)
        return response
