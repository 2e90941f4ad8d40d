"""
Fixed-window request rate limiter with temporary client blocking.

The limiter owns the policy; counters and blocks live in a RateLimitStore so a
shared backend (e.g. Redis) can replace the in-process store without touching callers.
"""
import math
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from estatehub.core.logger import logger


@dataclass
class WindowState:
    """Request counter for one client/route key."""
    count: int
    started_at: float


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a single rate limit check."""
    allowed: bool
    limit: int
    remaining: int
    reset_at: float
    message: Optional[str] = None

    def headers(self) -> Dict[str, str]:
        reset = datetime.fromtimestamp(self.reset_at, tz=timezone.utc)
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": reset.isoformat().replace("+00:00", "Z"),
        }


class RateLimitStore(ABC):
    """Storage contract for rate limit counters and client blocks."""

    @abstractmethod
    def get_window(self, key: str) -> Optional[WindowState]:
        raise NotImplementedError

    @abstractmethod
    def increment(self, key: str, now: float, window_seconds: float) -> WindowState:
        """
        Atomically counts one request for key and returns the updated window.
        A window older than window_seconds restarts at now with a count of 1.
        """
        raise NotImplementedError

    @abstractmethod
    def block(self, client: str, until: float) -> None:
        raise NotImplementedError

    @abstractmethod
    def blocked_until(self, client: str) -> Optional[float]:
        raise NotImplementedError

    @abstractmethod
    def unblock(self, client: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def sweep(self, now: float, window_seconds: float) -> int:
        """Evicts expired windows and lapsed blocks. Returns the number of evicted entries."""
        raise NotImplementedError


class InMemoryRateLimitStore(RateLimitStore):
    """Single-process store. Valid only when the API runs as one instance."""

    def __init__(self):
        self._windows: Dict[str, WindowState] = {}
        self._blocks: Dict[str, float] = {}
        self._lock = threading.Lock()

    def get_window(self, key: str) -> Optional[WindowState]:
        with self._lock:
            state = self._windows.get(key)
            return WindowState(state.count, state.started_at) if state else None

    def increment(self, key: str, now: float, window_seconds: float) -> WindowState:
        with self._lock:
            state = self._windows.get(key)
            if state is None or now - state.started_at > window_seconds:
                state = WindowState(count=0, started_at=now)
                self._windows[key] = state
            state.count += 1
            return WindowState(state.count, state.started_at)

    def block(self, client: str, until: float) -> None:
        with self._lock:
            self._blocks[client] = until

    def blocked_until(self, client: str) -> Optional[float]:
        with self._lock:
            return self._blocks.get(client)

    def unblock(self, client: str) -> None:
        with self._lock:
            self._blocks.pop(client, None)

    def sweep(self, now: float, window_seconds: float) -> int:
        with self._lock:
            stale_windows = [k for k, s in self._windows.items() if now - s.started_at > window_seconds]
            lapsed_blocks = [c for c, until in self._blocks.items() if now >= until]
            for key in stale_windows:
                del self._windows[key]
            for client in lapsed_blocks:
                del self._blocks[client]
        return len(stale_windows) + len(lapsed_blocks)


class RateLimiter:
    """
    Counts requests per (client, method, path) in fixed windows.
    A client exceeding max_requests on any route is blocked on every route for block_seconds.
    """

    def __init__(
        self,
        store: Optional[RateLimitStore] = None,
        window_seconds: int = 60,
        max_requests: int = 100,
        block_seconds: int = 900,
        clock: Callable[[], float] = time.time
    ):
        self.store = store or InMemoryRateLimitStore()
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self.block_seconds = block_seconds
        self._clock = clock
        self._last_sweep = clock()

    def hit(self, client: str, method: str, path: str) -> RateLimitDecision:
        """Registers one request and decides whether it may proceed."""
        now = self._clock()
        self._maybe_sweep(now)

        blocked_until = self.store.blocked_until(client)
        if blocked_until is not None:
            if now < blocked_until:
                minutes = math.ceil((blocked_until - now) / 60)
                return RateLimitDecision(
                    allowed=False,
                    limit=self.max_requests,
                    remaining=0,
                    reset_at=blocked_until,
                    message=f"Too many requests. Please try again in {minutes} minutes."
                )
            self.store.unblock(client)

        key = f"{client}:{method}:{path}"
        state = self.store.increment(key, now, self.window_seconds)

        decision = RateLimitDecision(
            allowed=state.count <= self.max_requests,
            limit=self.max_requests,
            remaining=max(0, self.max_requests - state.count),
            reset_at=state.started_at + self.window_seconds
        )
        if decision.allowed:
            return decision

        self.store.block(client, now + self.block_seconds)
        logger.warning(f"Rate limit exceeded: client={client} key={key} count={state.count}")
        return RateLimitDecision(
            allowed=False,
            limit=decision.limit,
            remaining=0,
            reset_at=decision.reset_at,
            message="Rate limit exceeded. Please try again later."
        )

    def _maybe_sweep(self, now: float) -> None:
        if now - self._last_sweep < self.window_seconds:
            return
        self._last_sweep = now
        evicted = self.store.sweep(now, self.window_seconds)
        if evicted:
            logger.debug(f"Rate limit sweep evicted {evicted} entries")
