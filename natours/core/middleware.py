"""Admission control and request logging middleware."""

import logging
import threading
import time
from typing import Any, Dict, Tuple

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse, Response
from starlette.datastructures import Headers
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from natours.config import settings
from natours.core.errors import AppError, PayloadTooLargeError, RateLimitError

logger = logging.getLogger(__name__)


def _error_response(exc: AppError) -> JSONResponse:
    # Middleware runs outside the exception handlers, so it renders errors itself
    response = JSONResponse(status_code=exc.status_code, content=exc.to_dict())
    if isinstance(exc, RateLimitError) and exc.retry_after is not None:
        response.headers["Retry-After"] = str(exc.retry_after)
    return response


class RateLimiter:
    """Fixed-window request counter per client key.

    Windows that have ended are swept once per window length, so clients that
    stop sending requests do not stay in memory.
    """

    def __init__(self, limit: int, window: int):
        self._limit = limit
        self._window = window
        self._counters: Dict[str, Tuple[float, int]] = {}
        self._lock = threading.Lock()
        self._next_sweep = time.monotonic() + window

    @property
    def tracked_clients(self) -> int:
        """Number of clients currently holding a window."""
        with self._lock:
            return len(self._counters)

    def check(self, key: str) -> Dict[str, Any]:
        """Count a request for ``key`` and report whether it is allowed."""
        now = time.monotonic()
        with self._lock:
            if now >= self._next_sweep:
                self._sweep(now)
            window_start, count = self._counters.get(key, (now, 0))
            if now - window_start >= self._window:
                window_start, count = now, 0

            if count >= self._limit:
                retry_after = int(self._window - (now - window_start)) + 1
                return {"allowed": False, "remaining": 0, "limit": self._limit, "retry_after": retry_after}

            count += 1
            self._counters[key] = (window_start, count)
            return {"allowed": True, "remaining": self._limit - count, "limit": self._limit}

    def _sweep(self, now: float) -> None:
        expired = [key for key, (window_start, _) in self._counters.items() if now - window_start >= self._window]
        for key in expired:
            del self._counters[key]
        self._next_sweep = now + self._window
        if expired:
            logger.debug(f"Dropped {len(expired)} expired rate limit windows")

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()


rate_limiter = RateLimiter(settings.rate_limit_max_requests, settings.rate_limit_window_seconds)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Limit requests to ``/api`` routes per client address."""

    def __init__(self, app: ASGIApp, limiter: RateLimiter = rate_limiter, path_prefix: str = "/api"):
        super().__init__(app)
        self.limiter = limiter
        self.path_prefix = path_prefix

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        client = request.client.host if request.client else "unknown"
        result = self.limiter.check(client)
        if not result["allowed"]:
            logger.info(f"Rate limit exceeded for {client}")
            return _error_response(RateLimitError(retry_after=result["retry_after"]))

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(result["limit"])
        response.headers["X-RateLimit-Remaining"] = str(result["remaining"])
        return response


class BodySizeLimitMiddleware:
    """Reject request bodies larger than ``max_bytes``.

    A declared ``Content-Length`` over the cap is refused before the app runs.
    Bodies without one (chunked uploads) are counted as they are received and
    the read fails with 413 once the cap is passed.
    """

    def __init__(self, app: ASGIApp, max_bytes: int = settings.max_body_bytes):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        message = f"Request body is larger than {self.max_bytes} bytes"
        content_length = Headers(scope=scope).get("content-length")
        if content_length is not None and content_length.isdigit() and int(content_length) > self.max_bytes:
            response = _error_response(PayloadTooLargeError(message))
            await response(scope, receive, send)
            return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            event = await receive()
            if event["type"] == "http.request":
                received += len(event.get("body", b""))
                if received > self.max_bytes:
                    # FastAPI re-raises HTTPExceptions hit while reading the body
                    raise HTTPException(status_code=PayloadTooLargeError.status_code, detail=message)
            return event

        await self.app(scope, limited_receive, send)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request in development."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        if not settings.is_production:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(f"{request.method} {request.url.path} {response.status_code} - {elapsed_ms:.1f} ms")
        return response
