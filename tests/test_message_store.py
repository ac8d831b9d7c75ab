"""Unit tests for the in-memory message store."""

# Disabling pylint warning as it is a false positive due to pytest fixtures.
# pylint: disable=redefined-outer-name
import threading
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from msgboard.services.store import MessageStore

BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Returns a scripted sequence of timestamps, one per call."""

    def __init__(self, *times: datetime) -> None:
        self.times = list(times)

    def __call__(self) -> datetime:
        return self.times.pop(0)


def ticking_clock(step_seconds: float = 1.0):
    """Clock that advances by a fixed step on every read."""
    current = [BASE_TIME]

    def clock() -> datetime:
        current[0] = current[0] + timedelta(seconds=step_seconds)
        return current[0]

    return clock


@pytest.fixture
def store():
    """Store with strictly increasing timestamps."""
    return MessageStore(clock=ticking_clock())


def test_insert_returns_message(store):
    """Insert fills in id and timestamp and keeps text and ip as given."""
    msg = store.insert("hello", "10.0.0.1")

    assert msg.text == "hello"
    assert msg.source_ip == "10.0.0.1"
    assert msg.id
    assert msg.created_at is not None
    assert len(store) == 1


def test_insert_with_default_clock_is_utc():
    msg = MessageStore().insert("hi", "127.0.0.1")

    assert msg.created_at.tzinfo is not None
    assert msg.created_at.utcoffset() == timedelta(0)


def test_insert_accepts_blank_text(store):
    """Blank text is the gateway's problem, the store keeps it."""
    msg = store.insert("   ", "")

    assert msg.text == "   "
    assert store.recent(1) == [msg]


def test_ids_are_unique(store):
    ids = {store.insert(f"msg_{i}", "10.0.0.1").id for i in range(200)}

    assert len(ids) == 200


def test_recent_newest_first(store):
    store.insert("a", "10.0.0.1")
    store.insert("b", "10.0.0.2")

    assert [m.text for m in store.recent(2)] == ["b", "a"]


def test_recent_returns_top_n(store):
    for i in range(15):
        store.insert(f"msg_{i}", "10.0.0.1")

    latest = store.recent(10)

    assert [m.text for m in latest] == [f"msg_{i}" for i in range(14, 4, -1)]
    timestamps = [m.created_at for m in latest]
    assert timestamps == sorted(timestamps, reverse=True)
    assert len(set(timestamps)) == 10


def test_recent_clamps_to_size(store):
    store.insert("a", "10.0.0.1")
    store.insert("b", "10.0.0.1")

    assert len(store.recent(50)) == 2


@pytest.mark.parametrize("n", [0, -1, -100])
def test_recent_non_positive_is_empty(store, n):
    store.insert("x", "10.0.0.1")

    assert store.recent(n) == []


def test_recent_on_empty_store(store):
    assert store.recent(10) == []


def test_recent_does_not_mutate(store):
    store.insert("a", "10.0.0.1")

    first = store.recent(10)
    first.clear()

    assert len(store.recent(10)) == 1
    assert len(store) == 1


def test_equal_timestamps_prefer_later_insert():
    """Ties on created_at are broken by insertion order, newest insert first."""
    store = MessageStore(clock=lambda: BASE_TIME)
    for text in ["first", "second", "third"]:
        store.insert(text, "10.0.0.1")

    assert [m.text for m in store.recent(3)] == ["third", "second", "first"]


def test_clock_going_backwards_is_clamped():
    """A wall clock stepping back must not produce an older timestamp."""
    store = MessageStore(clock=FakeClock(BASE_TIME, BASE_TIME - timedelta(minutes=5), BASE_TIME + timedelta(1)))

    a = store.insert("a", "10.0.0.1")
    b = store.insert("b", "10.0.0.1")
    c = store.insert("c", "10.0.0.1")

    assert b.created_at == a.created_at
    assert c.created_at > b.created_at
    assert [m.text for m in store.recent(3)] == ["c", "b", "a"]


def test_messages_are_immutable(store):
    msg = store.insert("original", "10.0.0.1")

    with pytest.raises(ValidationError):
        msg.text = "changed"

    store.insert("other", "10.0.0.2")
    assert store.recent(2)[1].text == "original"
    assert msg.text == "original"


def test_concurrent_inserts():
    """1000 inserts from 10 threads are all kept, with distinct ids."""
    store = MessageStore()
    barrier = threading.Barrier(10)

    def worker(worker_id: int) -> None:
        barrier.wait()
        for i in range(100):
            store.insert(f"{worker_id}-{i}", f"10.0.0.{worker_id}")

    threads = [threading.Thread(target=worker, args=(w,)) for w in range(10)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    messages = store.recent(1000)

    assert len(store) == 1000
    assert len(messages) == 1000
    assert len({m.id for m in messages}) == 1000
    assert len({m.text for m in messages}) == 1000
    timestamps = [m.created_at for m in messages]
    assert timestamps == sorted(timestamps, reverse=True)
