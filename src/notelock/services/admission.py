"""Admission control in front of the note store.

Three independent policies are evaluated per request, each owning its own
per-client counters:

- a global limiter applied to every request,
- a stricter limiter applied to write (submit) requests only,
- a progressive slowdown that delays, rather than rejects, busy clients.

Hard limiters run before the slowdown so a rejected request never pays
the delay.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from threading import Lock

from notelock.core.errors import RateLimitedError
from notelock.core.settings import Settings

GLOBAL_POLICY = "global"
WRITE_POLICY = "write"

logger = logging.getLogger(__name__)


@dataclass
class ClientWindow:
    """Counting state for one client under one policy."""

    window_start: float
    count: int = 0


class FixedWindowCounter:
    """Per-client request counters over fixed windows of ``window_seconds``.

    A client's count resets once the current time exceeds the start of its
    window plus the window length.
    """

    def __init__(
        self,
        window_seconds: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.window_seconds = float(window_seconds)
        self._clock = clock
        self._windows: dict[str, ClientWindow] = {}
        self._lock = Lock()

    def hit(self, client_key: str) -> ClientWindow:
        """Count one request for ``client_key`` and return a copy of its window."""
        now = self._clock()
        with self._lock:
            window = self._windows.get(client_key)
            if window is None or now > window.window_start + self.window_seconds:
                window = ClientWindow(window_start=now)
                self._windows[client_key] = window
            window.count += 1
            return ClientWindow(window_start=window.window_start, count=window.count)

    def remaining_seconds(self, window: ClientWindow) -> float:
        return window.window_start + self.window_seconds - self._clock()

    def prune(self) -> int:
        """Drop windows that have rolled over; returns how many were dropped."""
        now = self._clock()
        with self._lock:
            stale = [
                key
                for key, window in self._windows.items()
                if now > window.window_start + self.window_seconds
            ]
            for key in stale:
                del self._windows[key]
        return len(stale)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)


class RateLimitPolicy(FixedWindowCounter):
    """Hard cap of ``max_requests`` per window; the next request is rejected."""

    def __init__(
        self,
        name: str,
        window_seconds: float,
        max_requests: int,
        *,
        message: str,
        writes_only: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        super().__init__(window_seconds, clock=clock)
        self.name = name
        self.max_requests = max_requests
        self.message = message
        self.writes_only = writes_only

    def applies_to(self, *, write: bool) -> bool:
        return write or not self.writes_only

    def check(self, client_key: str) -> None:
        """Count the request and raise if it exceeds the cap.

        Raises:
            RateLimitedError: when the client is over the cap for this window.
        """
        window = self.hit(client_key)
        if window.count > self.max_requests:
            logger.warning("%s limit exceeded by %s", self.name, client_key)
            raise RateLimitedError(
                policy=self.name,
                retry_after=self.remaining_seconds(window),
                detail=self.message,
            )


class SlowdownPolicy(FixedWindowCounter):
    """Delay requests past ``threshold`` by ``(count - threshold) * delay_seconds``.

    The delay is capped at ``max_delay_seconds``.
    """

    def __init__(
        self,
        window_seconds: float,
        threshold: int,
        delay_seconds: float,
        max_delay_seconds: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if threshold < 0:
            raise ValueError("threshold must not be negative")
        if delay_seconds < 0 or max_delay_seconds < 0:
            raise ValueError("delays must not be negative")
        super().__init__(window_seconds, clock=clock)
        self.threshold = threshold
        self.delay_seconds = float(delay_seconds)
        self.max_delay_seconds = float(max_delay_seconds)

    def delay_for_count(self, count: int) -> float:
        if count <= self.threshold:
            return 0.0
        return min((count - self.threshold) * self.delay_seconds, self.max_delay_seconds)

    def delay(self, client_key: str) -> float:
        """Count the request and return how long to hold its response."""
        return self.delay_for_count(self.hit(client_key).count)


class AdmissionController:
    """Pipeline of hard limiters followed by an optional slowdown policy."""

    def __init__(
        self,
        limits: Sequence[RateLimitPolicy],
        slowdown: SlowdownPolicy | None = None,
    ) -> None:
        self.limits = list(limits)
        self.slowdown = slowdown

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> AdmissionController:
        """Build the global, write and slowdown policies from configuration."""
        return cls(
            limits=[
                RateLimitPolicy(
                    GLOBAL_POLICY,
                    settings.global_rate_window_seconds,
                    settings.global_rate_max,
                    message="Too many requests, please try again later",
                    clock=clock,
                ),
                RateLimitPolicy(
                    WRITE_POLICY,
                    settings.write_rate_window_seconds,
                    settings.write_rate_max,
                    message="Too many write attempts, please try again later",
                    writes_only=True,
                    clock=clock,
                ),
            ],
            slowdown=SlowdownPolicy(
                settings.slowdown_window_seconds,
                settings.slowdown_threshold,
                settings.slowdown_delay_seconds,
                settings.slowdown_max_delay_seconds,
                clock=clock,
            ),
        )

    def admit(self, client_key: str, *, write: bool = False) -> float:
        """Evaluate every policy for one request.

        Returns:
            Seconds the caller should delay before responding (0 for none).

        Raises:
            RateLimitedError: when a hard limiter rejects the request.
        """
        for policy in self.limits:
            if policy.applies_to(write=write):
                policy.check(client_key)

        if self.slowdown is None:
            return 0.0
        return self.slowdown.delay(client_key)

    def prune(self) -> int:
        """Drop rolled-over client windows from every policy."""
        policies: list[FixedWindowCounter] = [*self.limits]
        if self.slowdown is not None:
            policies.append(self.slowdown)
        return sum(policy.prune() for policy in policies)

    def reset(self) -> None:
        for policy in self.limits:
            policy.reset()
        if self.slowdown is not None:
            self.slowdown.reset()
