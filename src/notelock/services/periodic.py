"""Cancellable background tasks run on a fixed interval.

Each task wraps a synchronous action that is executed off the event loop
via ``asyncio.to_thread``. A failing tick is logged and the schedule
continues; ``run_once`` lets callers trigger a tick deterministically.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from notelock.services.note_store import EphemeralNoteStore

logger = logging.getLogger(__name__)


class PeriodicTask:
    """Run ``action`` every ``interval_seconds`` until stopped.

    An interval of zero disables the task: ``start`` becomes a no-op.
    """

    def __init__(
        self,
        name: str,
        interval_seconds: float,
        action: Callable[[], Any],
    ) -> None:
        if interval_seconds < 0:
            raise ValueError("interval_seconds must not be negative")
        self.name = name
        self.interval_seconds = float(interval_seconds)
        self._action = action
        self._task: asyncio.Task[None] | None = None
        self._stopping: asyncio.Event | None = None

    @property
    def enabled(self) -> bool:
        return self.interval_seconds > 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the background loop."""
        if not self.enabled:
            return

        if self._task is None or self._task.done():
            # Bound to the running loop; an app may be started on several loops.
            self._stopping = asyncio.Event()
            self._task = asyncio.create_task(self._run(self._stopping), name=self.name)

    async def stop(self) -> None:
        """Stop the background loop, waiting for an in-flight tick to finish."""
        if self._task is None or self._stopping is None:
            return

        self._stopping.set()
        await self._task
        self._task = None

    async def run_once(self) -> Any:
        """Execute a single tick now; returns the action's result or None on failure."""
        try:
            return await asyncio.to_thread(self._action)
        except Exception:
            logger.exception("%s tick failed", self.name)
            return None

    async def _run(self, stopping: asyncio.Event) -> None:
        while not stopping.is_set():
            try:
                await asyncio.wait_for(stopping.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                await self.run_once()


class ExpirySweeper(PeriodicTask):
    """Evict notes whose age has reached the configured lifetime."""

    def __init__(
        self,
        store: EphemeralNoteStore,
        *,
        ttl_seconds: float,
        interval_seconds: float,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        super().__init__("expiry-sweeper", interval_seconds, self.sweep)
        self.store = store
        self.ttl_seconds = float(ttl_seconds)

    def sweep(self) -> int:
        logger.debug("Checking for notes older than %.0f seconds", self.ttl_seconds)
        removed = self.store.sweep_expired(self.ttl_seconds)
        if removed:
            logger.info("Purged %d expired note(s)", removed)
        else:
            logger.debug("No expired notes found")
        return removed


class StoreDumper(PeriodicTask):
    """Debug aid logging live note ids and their ages. Blobs are never logged."""

    def __init__(self, store: EphemeralNoteStore, *, interval_seconds: float) -> None:
        super().__init__("store-dumper", interval_seconds, self.dump)
        self.store = store

    def dump(self) -> int:
        rows = self.store.snapshot()
        if not rows:
            logger.info("Store is currently empty")
            return 0
        logger.info("Printing %d live note(s)", len(rows))
        for note_id, age in rows:
            logger.info("%s age=%.0fs", note_id, age)
        return len(rows)
