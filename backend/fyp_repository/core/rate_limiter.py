"""
Rate Limiting for the Project Repository API
============================================
One fixed window per client IP (default 100 requests per 15 minutes) shared
by every route except the health probe.

The slowapi Limiter owns the storage and strategy; RateLimitMiddleware hits it
for each request and answers 429 in the standard envelope. Storage defaults
to in-process memory; point RATE_LIMIT_STORAGE_URI at a shared backend when
running several workers.
"""

import time
from typing import Callable, Optional, Set

from limits import RateLimitItem, parse
from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from fyp_repository.core.config import settings
from fyp_repository.core.logging_config import logger
from fyp_repository.utils.responses import failure_response

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."

RATE_LIMIT_EXEMPT_PATHS: Set[str] = {"/health"}


def get_client_identifier(request: Request) -> str:
    return f"ip:{get_remote_address(request)}"


def create_limiter(enabled: Optional[bool] = None) -> Limiter:
    return Limiter(
        key_func=get_client_identifier,
        storage_uri=settings.RATE_LIMIT_STORAGE_URI,
        strategy="fixed-window",
        enabled=settings.RATE_LIMIT_ENABLED if enabled is None else enabled,
    )


limiter = create_limiter()


def rate_limit_exceeded_response(request: Request, item: RateLimitItem, retry_after: int) -> Response:
    """429 in the standard envelope, with Retry-After"""
    logger.warning(
        f"[RateLimit] Exceeded for {get_client_identifier(request)}: {item} on {request.method} {request.url.path}"
    )

    return failure_response(
        RATE_LIMIT_MESSAGE,
        429,
        error="RATE_LIMIT_EXCEEDED",
        headers={
            "Retry-After": str(retry_after),
            "X-RateLimit-Limit": str(item.amount),
            "X-RateLimit-Remaining": "0",
        }
    )


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Counts every request against a single per-IP window.

    The limiter is read from ``app.state.limiter`` so it can be swapped at
    runtime; requests pass through untouched when it is disabled.
    """

    def __init__(self, app: ASGIApp, limit: Optional[str] = None, exempt_paths: Optional[Set[str]] = None):
        super().__init__(app)
        self.item = parse(limit or settings.RATE_LIMIT)
        self.exempt_paths = RATE_LIMIT_EXEMPT_PATHS if exempt_paths is None else exempt_paths

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        active: Optional[Limiter] = getattr(request.app.state, "limiter", None)
        if active is None or not active.enabled or request.url.path in self.exempt_paths:
            return await call_next(request)

        key = get_client_identifier(request)
        if not active.limiter.hit(self.item, key):
            reset_time, _ = active.limiter.get_window_stats(self.item, key)
            retry_after = max(1, int(reset_time - time.time()))
            return rate_limit_exceeded_response(request, self.item, retry_after)

        return await call_next(request)
