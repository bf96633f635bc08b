import time
import asyncio
import logging
from collections import deque
from typing import Callable, Iterable
from fastapi import Request
from fastapi.responses import JSONResponse
from docarchive.errors import Unauthenticated
from docarchive.utils.security import TokenIssuer

logger = logging.getLogger(__name__)

class RateLimitMiddleware:
    """Sliding-window limiter for the anonymous entry points."""

    def __init__(
        self,
        app,
        *,
        window_seconds: int,
        max_calls: int,
        key_func: Callable[[Request], str],
        include_path_prefixes: Iterable[str] = ("/auth/login", "/auth/register", "/external"),
        clock: Callable[[], float] = time.monotonic,
    ):
        self.app = app
        self.window = window_seconds
        self.max_calls = max_calls
        self.key_func = key_func
        self.include_paths = tuple(include_path_prefixes)
        self.clock = clock

        self._hits: dict[str, deque[float]] = {}
        self._lock = asyncio.Lock()
        self._last_sweep: float | None = None

    def _evict_idle(self, now: float, cutoff: float):
        # at most one sweep per window
        if self._last_sweep is not None and now - self._last_sweep < self.window:
            return
        self._last_sweep = now
        # a key whose newest hit is outside the window has nothing left to count
        idle = [k for k, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for k in idle:
            del self._hits[k]

    def _should_guard(self, path: str) -> bool:
        return any(path.startswith(p) for p in self.include_paths)

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http" or not self._should_guard(scope.get("path", "")):
            return await self.app(scope, receive, send)

        key = self.key_func(Request(scope, receive=receive))

        now = self.clock()
        async with self._lock:
            cutoff = now - self.window
            self._evict_idle(now, cutoff)
            hits = self._hits.setdefault(key, deque())

            while hits and hits[0] <= cutoff:
                hits.popleft()

            if len(hits) >= self.max_calls:
                retry_after = max(1, int(hits[0] + self.window - now))
                logger.warning("Rate limit hit for %s on %s", key, scope.get("path"))
                resp = JSONResponse(
                    status_code=429,
                    content={"detail": "Too Many Requests", "try_again_in": retry_after},
                    headers={"Retry-After": str(retry_after)},
                )
                return await resp(scope, receive, send)

            hits.append(now)

        return await self.app(scope, receive, send)


def make_key_func(issuer_factory: Callable[[], TokenIssuer]) -> Callable[[Request], str]:
    def _key(req: Request) -> str:
        auth = req.headers.get("authorization", "")
        if auth.lower().startswith("bearer "):
            token = auth.split(" ", 1)[1].strip()
            try:
                return f"user:{issuer_factory().verify(token)}"
            except (Unauthenticated, RuntimeError):
                pass

        ip = req.client.host if req.client else "unknown"
        return f"ip:{ip}"
    return _key
