"""
Pure ASGI Rate Limiter Middleware

This is a pure ASGI implementation that avoids the BaseHTTPMiddleware
"No response returned" issue.
"""

import asyncio
import logging
from typing import Optional

from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from ..core.config import settings
from ..errors import error_envelope
from .rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

EXEMPT_PATHS = {"/health", "/metrics"}


class RateLimitMiddlewareASGI:
    """
    Pure ASGI middleware for per-IP rate limiting.

    Answers 429 with a Retry-After header once a client exceeds
    RATE_LIMIT_REQUESTS within RATE_LIMIT_WINDOW_SECONDS.
    """

    def __init__(self, app: ASGIApp, rate_limiter: Optional[RateLimiter] = None) -> None:
        self.app = app
        self._rate_limiter = rate_limiter
        self.limit = settings.rate_limit_requests
        self.window_seconds = settings.rate_limit_window_seconds

    @property
    def rate_limiter(self) -> RateLimiter:
        if self._rate_limiter is None:
            self._rate_limiter = RateLimiter()
        return self._rate_limiter

    @staticmethod
    def _extract_client_ip(scope: Scope) -> str:
        headers = scope.get("headers") or []
        for key, value in headers:
            if key.decode().lower() == "x-forwarded-for":
                candidate: str = value.decode().split(",")[0].strip()
                if candidate:
                    return candidate
        client_info = scope.get("client")
        if isinstance(client_info, (tuple, list)) and client_info:
            host = client_info[0]
            if isinstance(host, str) and host:
                return host
        return "unknown"

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI application entrypoint."""

        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        if not settings.rate_limit_enabled:
            await self.app(scope, receive, send)
            return

        path = scope.get("path", "")
        method = scope.get("method", "GET")

        # Always allow CORS preflight requests and probes
        if method == "OPTIONS" or path in EXEMPT_PATHS:
            await self.app(scope, receive, send)
            return

        client_ip = self._extract_client_ip(scope)
        allowed, _, retry_after = await asyncio.to_thread(
            self.rate_limiter.check_rate_limit,
            identifier=client_ip,
            limit=self.limit,
            window_seconds=self.window_seconds,
            window_name="general",
        )

        if not allowed:
            logger.info(f"Rate limit exceeded for {client_ip} on {method} {path}")
            response = JSONResponse(
                status_code=429,
                content=error_envelope(
                    status_code=429,
                    message="Too many requests, please try again later.",
                    code="RATE_LIMIT_EXCEEDED",
                ),
                headers={"Retry-After": str(retry_after)},
            )
            await response(scope, receive, send)
            return

        await self.app(scope, receive, send)
