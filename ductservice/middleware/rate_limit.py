"""Sliding-window request limiter for the DuctForge API."""

import math
import time
from collections import deque
from typing import Callable, Deque, Dict, Iterable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware


class RateLimitMiddleware(BaseHTTPMiddleware):
    """In-memory sliding-window limiter keyed by client address.

    Each client keeps a deque of request times inside the window. Limited
    responses carry ``Retry-After``; allowed ones report the remaining budget
    in ``X-RateLimit-*`` headers. State is per process.
    """

    def __init__(self, app, requests_per_minute: int = 60, window_seconds: float = 60.0,
                 exempt_paths: Iterable[str] = ("/api/health",)):
        super().__init__(app)
        self.limit = requests_per_minute
        self.window = window_seconds
        self.exempt_paths = frozenset(exempt_paths)
        self._hits: Dict[str, Deque[float]] = {}
        self._next_sweep = time.monotonic() + 5 * window_seconds

    @staticmethod
    def client_key(request: Request) -> str:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
        return request.client.host if request.client else "unknown"

    def _sweep(self, now: float) -> None:
        """Forget clients whose newest request has left the window."""
        if now < self._next_sweep:
            return
        self._next_sweep = now + 5 * self.window
        cutoff = now - self.window
        for key in [k for k, hits in self._hits.items() if not hits or hits[-1] <= cutoff]:
            del self._hits[key]

    def _admit(self, key: str, now: float):
        """Record a hit if the client has budget.

        Returns:
            (allowed, remaining, retry_after_seconds)
        """
        hits = self._hits.setdefault(key, deque())
        cutoff = now - self.window
        while hits and hits[0] <= cutoff:
            hits.popleft()

        if len(hits) >= self.limit:
            retry_after = max(1, math.ceil(hits[0] + self.window - now))
            return False, 0, retry_after

        hits.append(now)
        return True, self.limit - len(hits), 0

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.exempt_paths:
            return await call_next(request)

        now = time.monotonic()
        self._sweep(now)
        allowed, remaining, retry_after = self._admit(self.client_key(request), now)

        if not allowed:
            return JSONResponse(
                status_code=429,
                content={"detail": f"Rate limit of {self.limit} requests exceeded. Retry in {retry_after}s."},
                headers={"Retry-After": str(retry_after), "X-RateLimit-Limit": str(self.limit),
                         "X-RateLimit-Remaining": "0"},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.limit)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response
