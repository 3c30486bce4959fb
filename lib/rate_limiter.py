# =============================================================================
# lib/rate_limiter.py - Fixed-Window Rate Limiter
# =============================================================================
# In-memory, per-client request counters.
#
# Each client key gets a counter and a window that ends `window_seconds`
# after the first request. Within the window at most `max_requests` requests
# are allowed; the window is never extended by later requests. Once it has
# passed, the next request starts a fresh window with count = 1.
#
# A background sweep (an asyncio task, started and stopped explicitly) drops
# expired entries so memory only grows with active clients.
#
# State is per process. Multiple workers or instances each keep their own
# counters.
#
# Usage:
#   limiter = RateLimiter(max_requests=100, window_seconds=900)
#   decision = limiter.check_and_consume("203.0.113.7")
#   if not decision.allowed:
#       print(f"retry in {decision.retry_after}s")
# =============================================================================

from __future__ import annotations

import asyncio
import logging
import math
import threading
import time
from dataclasses import dataclass, replace
from typing import Callable

logger = logging.getLogger(__name__)


DEFAULT_MAX_REQUESTS = 100
DEFAULT_WINDOW_SECONDS = 15 * 60.0
DEFAULT_SWEEP_INTERVAL_SECONDS = 60.0


@dataclass
class RateLimitEntry:
    """Counter for one client key inside its current window."""
    client_key: str
    count: int
    window_reset_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.window_reset_at


@dataclass(frozen=True)
class RateLimitDecision:
    """
    Outcome of one check_and_consume() call.

    Attributes:
        allowed: Whether the request may proceed
        limit: Maximum requests in the window that applied
        remaining: Requests left in the current window after this one
        reset_at: Clock value at which the current window ends
        retry_after: Whole seconds until the window ends (0 when allowed)
    """
    allowed: bool
    limit: int
    remaining: int
    reset_at: float
    retry_after: int = 0


class RateLimiter:
    """
    Fixed-window counter keyed by client identity.

    All access to the entry table (request path and sweep) goes through one
    lock, so a sweep can never delete an entry that a request has just reset.
    Operations are O(1) except sweep(), which is O(n) in tracked clients.

    The clock is injectable so tests can move time without sleeping:

        now = [0.0]
        limiter = RateLimiter(max_requests=2, window_seconds=1.0, clock=lambda: now[0])
    """

    def __init__(
        self,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        sweep_interval: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_requests < 1:
            raise ValueError(f"max_requests must be at least 1, got {max_requests}")
        if window_seconds <= 0:
            raise ValueError(f"window_seconds must be positive, got {window_seconds}")
        if sweep_interval <= 0:
            raise ValueError(f"sweep_interval must be positive, got {sweep_interval}")

        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._entries: dict[str, RateLimitEntry] = {}
        self._lock = threading.Lock()
        self._sweep_task: asyncio.Task | None = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    # -------------------------------------------------------------------------
    # Request path
    # -------------------------------------------------------------------------

    def check_and_consume(
        self,
        client_key: str,
        max_requests: int | None = None,
        window_seconds: float | None = None,
    ) -> RateLimitDecision:
        """
        Count one request for `client_key` and decide whether it may proceed.

        Args:
            client_key: Identity of the caller (usually an IP address)
            max_requests: Override the limiter's default limit
            window_seconds: Override the limiter's default window length

        Returns:
            RateLimitDecision. Rejected requests are not counted.
        """
        limit = max_requests if max_requests is not None else self.max_requests
        window = window_seconds if window_seconds is not None else self.window_seconds

        with self._lock:
            now = self._clock()
            entry = self._entries.get(client_key)

            if entry is None or entry.is_expired(now):
                entry = RateLimitEntry(
                    client_key=client_key,
                    count=1,
                    window_reset_at=now + window,
                )
                self._entries[client_key] = entry
                return RateLimitDecision(
                    allowed=True,
                    limit=limit,
                    remaining=max(limit - 1, 0),
                    reset_at=entry.window_reset_at,
                )

            if entry.count < limit:
                entry.count += 1
                return RateLimitDecision(
                    allowed=True,
                    limit=limit,
                    remaining=limit - entry.count,
                    reset_at=entry.window_reset_at,
                )

            retry_after = max(math.ceil(entry.window_reset_at - now), 1)
            return RateLimitDecision(
                allowed=False,
                limit=limit,
                remaining=0,
                reset_at=entry.window_reset_at,
                retry_after=retry_after,
            )

    def get_entry(self, client_key: str) -> RateLimitEntry | None:
        """Return a copy of the entry for `client_key`, if tracked."""
        with self._lock:
            entry = self._entries.get(client_key)
            return replace(entry) if entry is not None else None

    def reset(self) -> None:
        """Forget every tracked client."""
        with self._lock:
            self._entries.clear()

    # -------------------------------------------------------------------------
    # Eviction
    # -------------------------------------------------------------------------

    def sweep(self) -> int:
        """
        Remove every entry whose window has passed.

        The whole scan-and-delete pass runs under the table lock.

        Returns:
            Number of entries removed
        """
        with self._lock:
            now = self._clock()
            expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired:
                del self._entries[key]

        if expired:
            logger.debug(f"Rate limiter swept {len(expired)} expired entries")
        return len(expired)

    @property
    def is_sweeping(self) -> bool:
        return self._sweep_task is not None and not self._sweep_task.done()

    def start(self) -> None:
        """
        Start the periodic sweep on the running event loop.

        Calling start() twice is a no-op while the sweep is running.
        """
        if self.is_sweeping:
            return
        self._sweep_task = asyncio.get_running_loop().create_task(self._run_sweeper())
        logger.info(f"Rate limiter sweep started (every {self.sweep_interval}s)")

    async def stop(self) -> None:
        """Cancel the periodic sweep and wait for it to finish."""
        task, self._sweep_task = self._sweep_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Rate limiter sweep stopped")

    async def _run_sweeper(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval)
            self.sweep()
