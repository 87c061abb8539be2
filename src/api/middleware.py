"""Request logging middleware"""

import logging
import time
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

SKIP_PATHS = {"/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs method, path, status and duration of every request

    Bodies are never logged: webhook payloads carry buyer emails.
    """

    def __init__(self, app, slow_request_threshold: float = 1.0):
        super().__init__(app)
        self.slow_threshold = slow_request_threshold

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in SKIP_PATHS:
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start

        message = (
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"({duration * 1000:.1f}ms)"
        )
        if duration > self.slow_threshold:
            logger.warning(f"Slow request: {message}")
        else:
            logger.info(message)
        return response
