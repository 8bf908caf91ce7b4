from __future__ import annotations

from collections import deque
from threading import Lock
import time
from typing import Callable

from fastapi import HTTPException, Request, status


class SlidingWindowLimiter:
    """Per-key sliding window of attempt timestamps.

    Keys combine scope, client address and the submitted identity, so the key
    space grows with every address/email pair seen. A key is dropped as soon
    as its window empties, and idle keys are swept at most once per window.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._expires_at: dict[str, float] = {}
        self._next_sweep = 0.0
        self._lock = Lock()

    def __len__(self) -> int:
        return len(self._hits)

    def hit(self, key: str, *, limit: int, window_seconds: int) -> int | None:
        """Record a hit; return seconds to wait when ``key`` is over ``limit``."""
        now = self._clock()
        with self._lock:
            if now >= self._next_sweep:
                self._sweep(now)
                self._next_sweep = now + window_seconds
            hits = self._hits.get(key)
            if hits is not None:
                while hits and hits[0] <= now - window_seconds:
                    hits.popleft()
                if len(hits) >= limit:
                    return max(1, int(hits[0] + window_seconds - now))
            else:
                hits = self._hits[key] = deque()
            hits.append(now)
            self._expires_at[key] = now + window_seconds
        return None

    def _sweep(self, now: float) -> None:
        for key in [key for key, expires_at in self._expires_at.items() if expires_at <= now]:
            del self._hits[key]
            del self._expires_at[key]

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()
            self._expires_at.clear()
            self._next_sweep = 0.0


_limiter = SlidingWindowLimiter()


def _client_address(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def enforce_rate_limit(*, request: Request, scope: str, limit: int, window_seconds: int, identity: str = "") -> None:
    key = f"{scope}|{_client_address(request)}|{identity.strip().lower()}"
    retry_after = _limiter.hit(key, limit=limit, window_seconds=window_seconds)
    if retry_after is None:
        return
    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail=f"Too many attempts. Try again in {retry_after} second(s).",
        headers={"Retry-After": str(retry_after)},
    )


def clear_rate_limiter() -> None:
    _limiter.reset()
