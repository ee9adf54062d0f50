"""
Request logging middleware recording method, path, status and timing.
"""

from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
import logging
import time

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs one line per request and exposes the processing time as the
    ``X-Processing-Time`` response header.
    """

    def __init__(self, app: ASGIApp, slow_request_threshold: float = 1.0):
        super().__init__(app)
        self.slow_request_threshold = slow_request_threshold

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            processing_time = time.perf_counter() - start_time
            logger.error(
                f"{request.method} {request.url.path} failed after {processing_time:.3f}s"
            )
            raise

        processing_time = time.perf_counter() - start_time
        response.headers["X-Processing-Time"] = f"{processing_time:.3f}"

        message = f"{request.method} {request.url.path} {response.status_code} {processing_time:.3f}s"
        if processing_time > self.slow_request_threshold:
            logger.warning(f"Slow request: {message}")
        elif response.status_code >= 500:
            logger.error(message)
        else:
            logger.info(message)

        return response
