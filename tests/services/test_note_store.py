"""Tests for the ephemeral note store."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from itertools import chain, repeat

import pytest

from notelock.core.errors import ExhaustedRetriesError, IdCollisionError
from notelock.services.note_store import EphemeralNoteStore
from tests.conftest import FakeClock

ID_A = "a" * 21
ID_B = "b" * 21


def test_take_returns_blob_exactly_once(store: EphemeralNoteStore) -> None:
    note_id = store.insert_unique(b"abc")

    assert store.take(note_id) == b"abc"
    assert store.take(note_id) is None
    assert note_id not in store


def test_take_unknown_id_returns_none(store: EphemeralNoteStore) -> None:
    assert store.take("never-issued-identifier") is None


def test_insert_rejects_live_id(store: EphemeralNoteStore) -> None:
    store.insert(ID_A, b"first")
    with pytest.raises(IdCollisionError):
        store.insert(ID_A, b"second")
    assert store.take(ID_A) == b"first"


def test_insert_unique_retries_on_collision_with_backoff(clock: FakeClock) -> None:
    sleeps: list[float] = []
    candidates = iter([ID_A, ID_A, ID_B])
    store = EphemeralNoteStore(
        clock=clock,
        id_factory=lambda: next(candidates),
        sleep=sleeps.append,
    )
    store.insert(ID_A, b"existing")

    assert store.insert_unique(b"new", backoff_seconds=0.01) == ID_B
    assert sleeps == [0.01, 0.02]
    assert store.take(ID_A) == b"existing"
    assert store.take(ID_B) == b"new"


def test_insert_unique_gives_up_after_max_attempts(clock: FakeClock) -> None:
    sleeps: list[float] = []
    store = EphemeralNoteStore(
        clock=clock,
        id_factory=lambda: ID_A,
        sleep=sleeps.append,
    )
    store.insert(ID_A, b"existing")

    with pytest.raises(ExhaustedRetriesError) as excinfo:
        store.insert_unique(b"new", max_attempts=3, backoff_seconds=0.001)

    assert excinfo.value.attempts == 3
    assert sleeps == [0.001, 0.002]
    assert len(store) == 1


def test_sweep_removes_only_records_at_or_past_ttl(
    store: EphemeralNoteStore, clock: FakeClock
) -> None:
    old_id = store.insert_unique(b"old")
    clock.advance(10)
    young_id = store.insert_unique(b"young")
    clock.advance(14)

    assert store.sweep_expired(24) == 1
    assert store.take(old_id) is None
    assert store.take(young_id) == b"young"


def test_sweep_schedule_scenario(store: EphemeralNoteStore, clock: FakeClock) -> None:
    note_id = store.insert_unique(b"abc")

    for tick in (5, 10, 15, 20):
        clock.now = tick
        assert store.sweep_expired(24) == 0
        assert note_id in store

    clock.now = 25
    assert store.sweep_expired(24) == 1
    clock.now = 26
    assert store.take(note_id) is None


def test_consumed_record_is_not_swept_or_resurrected(
    store: EphemeralNoteStore, clock: FakeClock
) -> None:
    note_id = store.insert_unique(b"abc")
    assert store.take(note_id) == b"abc"
    clock.advance(100)

    assert store.sweep_expired(24) == 0
    assert store.take(note_id) is None


def test_sweep_rejects_non_positive_ttl(store: EphemeralNoteStore) -> None:
    with pytest.raises(ValueError):
        store.sweep_expired(0)


def test_snapshot_lists_ids_and_ages_oldest_first(
    store: EphemeralNoteStore, clock: FakeClock
) -> None:
    first = store.insert_unique(b"1")
    clock.advance(5)
    second = store.insert_unique(b"2")
    clock.advance(1)

    assert store.snapshot() == [(first, 6.0), (second, 1.0)]


def test_clear_drops_everything(store: EphemeralNoteStore) -> None:
    for blob in (b"1", b"2", b"3"):
        store.insert_unique(blob)
    assert store.clear() == 3
    assert len(store) == 0


def test_concurrent_submissions_yield_distinct_retrievable_ids() -> None:
    store = EphemeralNoteStore()
    blobs = [f"note-{i}".encode() for i in range(200)]

    with ThreadPoolExecutor(max_workers=16) as pool:
        ids = list(pool.map(store.insert_unique, blobs))

    assert len(set(ids)) == len(blobs)
    for note_id, blob in zip(ids, blobs):
        assert store.take(note_id) == blob
        assert store.take(note_id) is None


def test_concurrent_takes_have_a_single_winner() -> None:
    store = EphemeralNoteStore()
    note_id = store.insert_unique(b"secret")
    barrier = threading.Barrier(16)

    def contender() -> bytes | None:
        barrier.wait()
        return store.take(note_id)

    with ThreadPoolExecutor(max_workers=16) as pool:
        results = list(pool.map(lambda _: contender(), range(16)))

    assert [r for r in results if r is not None] == [b"secret"]


def test_take_and_sweep_race_counts_each_record_once(clock: FakeClock) -> None:
    store = EphemeralNoteStore(clock=clock, shard_count=4)
    ids = [store.insert_unique(b"x") for _ in range(500)]
    clock.advance(30)

    with ThreadPoolExecutor(max_workers=8) as pool:
        sweep = pool.submit(store.sweep_expired, 24)
        taken = list(pool.map(store.take, ids))

    taken_count = sum(1 for blob in taken if blob is not None)
    assert taken_count + sweep.result() == len(ids)
    assert len(store) == 0


def test_rejects_invalid_shard_count() -> None:
    with pytest.raises(ValueError):
        EphemeralNoteStore(shard_count=0)


def test_id_factory_is_used(clock: FakeClock) -> None:
    candidates = chain([ID_A], repeat(ID_B))
    store = EphemeralNoteStore(clock=clock, id_factory=lambda: next(candidates))
    assert store.insert_unique(b"1") == ID_A
    assert store.insert_unique(b"2") == ID_B
