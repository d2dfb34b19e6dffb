"""Fixed-window request throttling for the public auth endpoints."""
from __future__ import annotations

import threading
import time
from typing import Callable, Dict, Tuple

from fastapi import HTTPException, Request


class FixedWindowLimiter:
    """Counts hits per key inside a window; the window restarts once it lapses."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._windows: Dict[str, Tuple[int, float]] = {}
        self._lock = threading.Lock()

    def hit(self, key: str, limit: int, window_seconds: int) -> bool:
        """Register one hit for ``key``; return False once ``limit`` is exceeded."""
        now = self._clock()
        with self._lock:
            count, expires = self._windows.get(key, (0, now + window_seconds))
            if now >= expires:
                count, expires = 0, now + window_seconds
            count += 1
            self._windows[key] = (count, expires)
            return count <= limit

    def clear(self) -> None:
        with self._lock:
            self._windows.clear()


limiter = FixedWindowLimiter()


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def throttle(scope: str, *, limit: int, window_seconds: int):
    """Build a FastAPI dependency that answers 429 when a client IP floods ``scope``."""

    def _dependency(request: Request) -> None:
        if not limiter.hit(f"{scope}:{client_ip(request)}", limit, window_seconds):
            raise HTTPException(429, "Too many requests. Try again shortly.")

    return _dependency
