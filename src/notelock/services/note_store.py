"""In-memory store guaranteeing exactly-once delivery of notes.

Records live in a fixed number of shards, each guarded by its own lock.
Every mutation of a record happens under the lock of the shard that owns
its identifier, so existence checks and inserts/removals are a single
atomic step while operations on other shards proceed concurrently.
"""

from __future__ import annotations

import logging
import time
import zlib
from collections.abc import Callable
from dataclasses import dataclass, field
from threading import Lock

from notelock.core.errors import ExhaustedRetriesError, IdCollisionError
from notelock.services.ids import generate_id

DEFAULT_SHARD_COUNT = 16

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NoteRecord:
    """A live note: opaque ciphertext and the clock reading at insertion."""

    id: str
    blob: bytes = field(repr=False)
    created_at: float


@dataclass
class _Shard:
    lock: Lock = field(default_factory=Lock)
    records: dict[str, NoteRecord] = field(default_factory=dict)


class EphemeralNoteStore:
    """Process-local note store with atomic take-and-delete and age eviction."""

    def __init__(
        self,
        *,
        shard_count: int = DEFAULT_SHARD_COUNT,
        clock: Callable[[], float] = time.monotonic,
        id_factory: Callable[[], str] = generate_id,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if shard_count < 1:
            raise ValueError("shard_count must be at least 1")
        self._shards = [_Shard() for _ in range(shard_count)]
        self._clock = clock
        self._id_factory = id_factory
        self._sleep = sleep

    def _shard_for(self, note_id: str) -> _Shard:
        return self._shards[zlib.crc32(note_id.encode()) % len(self._shards)]

    def insert(self, note_id: str, blob: bytes) -> NoteRecord:
        """Bind ``blob`` to ``note_id`` if no live record holds that id.

        Raises:
            IdCollisionError: if ``note_id`` is already live.
        """
        shard = self._shard_for(note_id)
        with shard.lock:
            if note_id in shard.records:
                raise IdCollisionError(note_id)
            record = NoteRecord(id=note_id, blob=blob, created_at=self._clock())
            shard.records[note_id] = record
        return record

    def insert_unique(
        self,
        blob: bytes,
        *,
        max_attempts: int = 5,
        backoff_seconds: float = 0.001,
    ) -> str:
        """Store ``blob`` under a freshly generated identifier and return it.

        Colliding candidates are discarded and retried with exponential
        backoff. No lock is held while backing off.

        Raises:
            ExhaustedRetriesError: if ``max_attempts`` candidates all collided.
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        for attempt in range(max_attempts):
            candidate = self._id_factory()
            try:
                self.insert(candidate, blob)
            except IdCollisionError:
                logger.warning(
                    "Identifier collision on attempt %d of %d", attempt + 1, max_attempts
                )
                if attempt + 1 < max_attempts and backoff_seconds > 0:
                    self._sleep(backoff_seconds * (2**attempt))
                continue
            return candidate
        raise ExhaustedRetriesError(max_attempts)

    def take(self, note_id: str) -> bytes | None:
        """Remove the note and return its blob, or None if it is not live."""
        shard = self._shard_for(note_id)
        with shard.lock:
            record = shard.records.pop(note_id, None)
        if record is None:
            return None
        return record.blob

    def sweep_expired(self, ttl_seconds: float) -> int:
        """Remove every record whose age has reached ``ttl_seconds``.

        Returns:
            Number of records removed by this call.
        """
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        removed = 0
        for shard in self._shards:
            with shard.lock:
                cutoff = self._clock() - ttl_seconds
                expired = [
                    note_id
                    for note_id, record in shard.records.items()
                    if record.created_at <= cutoff
                ]
                for note_id in expired:
                    del shard.records[note_id]
            removed += len(expired)
        return removed

    def snapshot(self) -> list[tuple[str, float]]:
        """Return ``(id, age_seconds)`` for every live record, oldest first."""
        rows: list[tuple[str, float]] = []
        for shard in self._shards:
            with shard.lock:
                now = self._clock()
                rows.extend(
                    (note_id, now - record.created_at)
                    for note_id, record in shard.records.items()
                )
        rows.sort(key=lambda row: row[1], reverse=True)
        return rows

    def clear(self) -> int:
        """Discard every live record and return how many were dropped."""
        dropped = 0
        for shard in self._shards:
            with shard.lock:
                dropped += len(shard.records)
                shard.records.clear()
        return dropped

    def __contains__(self, note_id: object) -> bool:
        if not isinstance(note_id, str):
            return False
        shard = self._shard_for(note_id)
        with shard.lock:
            return note_id in shard.records

    def __len__(self) -> int:
        total = 0
        for shard in self._shards:
            with shard.lock:
                total += len(shard.records)
        return total
