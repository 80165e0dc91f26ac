"""Request rate and concurrency limiters, shared per key."""

from __future__ import annotations

import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable

from simpleoneapi.limits import LimitType

Clock = Callable[[], float]


class LimiterTimeout(TimeoutError):
    """The limiter could not grant a request within the given timeout."""


def _deadline(timeout: float | None) -> float | None:
    return None if timeout is None else time.monotonic() + timeout


def _remaining(deadline: float | None) -> float | None:
    return None if deadline is None else deadline - time.monotonic()


class SlidingWindowLimiter:
    """Allows at most ``max_requests`` requests in any window of ``interval`` seconds."""

    def __init__(self, max_requests: int, interval: float = 60.0, *, clock: Clock = time.monotonic):
        self.max_requests = max_requests
        self.interval = interval
        self._clock = clock
        self._requests: deque[float] = deque()
        self._lock = threading.Lock()

    def allow(self) -> bool:
        """Record and allow a request if the window has room."""
        now = self._clock()
        window_start = now - self.interval
        with self._lock:
            while self._requests and self._requests[0] < window_start:
                self._requests.popleft()
            if len(self._requests) < self.max_requests:
                self._requests.append(now)
                return True
            return False

    def wait(self, timeout: float | None = None) -> None:
        """Block until a request is allowed; raise LimiterTimeout on timeout."""
        deadline = _deadline(timeout)
        wait_time = 0.01
        while not self.allow():
            remaining = _remaining(deadline)
            if remaining is not None and remaining <= 0:
                raise LimiterTimeout("sliding window limiter wait timed out")
            pause = wait_time if remaining is None else min(wait_time, remaining)
            time.sleep(max(pause, 0.0))
            if remaining is not None and remaining <= wait_time:
                raise LimiterTimeout("sliding window limiter wait timed out")
            with self._lock:
                if self._requests:
                    until_next = self._requests[0] + self.interval - self._clock()
                    if until_next < wait_time:
                        wait_time = max(until_next, 0.0)
                    else:
                        wait_time = min(wait_time * 2, 1.0)


class TokenBucketLimiter:
    """Token bucket refilled at ``rate`` tokens per second, holding up to ``burst``."""

    def __init__(self, rate: float, burst: int, *, clock: Clock = time.monotonic):
        self.rate = rate
        self.burst = burst
        self._clock = clock
        self._tokens = float(burst)
        self._last = clock()
        self._lock = threading.Lock()

    def _refill(self) -> float:
        now = self._clock()
        elapsed = max(now - self._last, 0.0)
        self._tokens = min(float(self.burst), self._tokens + elapsed * self.rate)
        self._last = now
        return now

    def allow(self) -> bool:
        """Take a token if one is available."""
        with self._lock:
            self._refill()
            if self._tokens >= 1:
                self._tokens -= 1
                return True
            return False

    def wait(self, timeout: float | None = None) -> None:
        """Reserve a token and sleep until it is due.

        Raises ValueError when the burst is below one token, and
        LimiterTimeout when the token would come after the timeout.
        """
        with self._lock:
            if self.burst < 1:
                raise ValueError(f"wait(n=1) exceeds limiter's burst {self.burst}")
            self._refill()
            self._tokens -= 1
            delay = 0.0
            if self._tokens < 0:
                delay = -self._tokens / self.rate if self.rate > 0 else float("inf")
            if timeout is not None and delay > timeout:
                self._tokens += 1
                raise LimiterTimeout(f"rate: wait(n=1) would exceed the timeout of {timeout}s")
        if delay > 0:
            time.sleep(delay)


@dataclass
class Limiter:
    """A rate limiter, a concurrency limiter, or neither."""

    qps_limiter: TokenBucketLimiter | None = None
    qpm_limiter: SlidingWindowLimiter | None = None
    concurrency_limiter: threading.BoundedSemaphore | None = None

    def wait(self, timeout: float | None = None) -> None:
        """Wait for the rate limiter, if any."""
        if self.qps_limiter is not None:
            self.qps_limiter.wait(timeout)
        elif self.qpm_limiter is not None:
            self.qpm_limiter.wait(timeout)

    def acquire(self, timeout: float | None = None) -> None:
        """Take a concurrency slot, if limited; raise LimiterTimeout on timeout."""
        if self.concurrency_limiter is None:
            return
        if timeout is None:
            self.concurrency_limiter.acquire()
        elif not self.concurrency_limiter.acquire(timeout=max(timeout, 0.0)):
            raise LimiterTimeout("concurrency limiter acquire timed out")

    def release(self) -> None:
        """Give back a concurrency slot; ValueError if none is held."""
        if self.concurrency_limiter is not None:
            self.concurrency_limiter.release()


def new_limiter(limit_type: LimitType | str | None, limit: float) -> Limiter:
    """Build a limiter for a limit type; unknown types give an unlimited one."""
    try:
        kind = LimitType(limit_type)
    except ValueError:
        return Limiter()
    if kind is LimitType.QPS:
        return Limiter(qps_limiter=TokenBucketLimiter(limit, int(limit)))
    if kind in (LimitType.QPM, LimitType.RPM):
        return Limiter(qpm_limiter=SlidingWindowLimiter(int(limit)))
    return Limiter(concurrency_limiter=threading.BoundedSemaphore(int(limit)))


_limiters: dict[str, Limiter] = {}
_limiters_lock = threading.Lock()


def get_limiter(key: str, limit_type: LimitType | str | None, limit: float) -> Limiter:
    """Return the limiter registered under ``key``, creating it on first use."""
    with _limiters_lock:
        limiter = _limiters.get(key)
        if limiter is None:
            limiter = new_limiter(limit_type, limit)
            _limiters[key] = limiter
        return limiter