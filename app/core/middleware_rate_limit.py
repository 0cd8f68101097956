from __future__ import annotations

import logging
from typing import Iterable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from app.core.rate_limit import InMemoryRateLimiter

logger = logging.getLogger(__name__)


class ApiRateLimitMiddleware(BaseHTTPMiddleware):
    """
    Per-client limit over everything under the API prefix.
    The gateway callback is exempt so Safaricom redeliveries are never dropped.
    """

    def __init__(self, app, limiter: InMemoryRateLimiter, prefix: str = "/api", exempt: Iterable[str] = ()):
        super().__init__(app)
        self.limiter = limiter
        self.prefix = prefix
        self.exempt = set(exempt)

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if path.startswith(self.prefix) and path not in self.exempt:
            client_key = request.client.host if request.client else "unknown"
            if not self.limiter.allow(client_key):
                logger.warning("rate limit exceeded", extra={"client": client_key, "path": path})
                return JSONResponse(
                    status_code=429,
                    content={
                        "success": False,
                        "message": "Too many requests from this IP, please try again later",
                    },
                    headers={"Retry-After": str(self.limiter.retry_after(client_key))},
                )
        return await call_next(request)
