"""Tests for the per-key lock table."""

import threading
import time
from datetime import date

import pytest

from booking_engine.locks import KeyedLocks


class TestEviction:
    def test_entry_dropped_after_release(self):
        locks = KeyedLocks()
        with locks.hold((date(2026, 10, 26), "plumbing")):
            assert len(locks) == 1
        assert len(locks) == 0

    def test_many_keys_leave_nothing_behind(self):
        locks = KeyedLocks()
        for day in range(1, 29):
            with locks.hold((date(2026, 2, day), None), ("customer", "c1", date(2026, 2, day))):
                assert len(locks) == 2
        assert len(locks) == 0

    def test_duplicate_keys_taken_once(self):
        locks = KeyedLocks()
        with locks.hold("a", "a"):
            assert len(locks) == 1
        assert len(locks) == 0

    def test_nested_holds_on_distinct_keys(self):
        locks = KeyedLocks()
        with locks.hold("a"):
            with locks.hold("b", "c"):
                assert len(locks) == 3
            assert len(locks) == 1
        assert len(locks) == 0

    def test_released_when_body_raises(self):
        locks = KeyedLocks()
        with pytest.raises(RuntimeError):
            with locks.hold("a", "b"):
                raise RuntimeError("boom")
        assert len(locks) == 0
        with locks.hold("a", "b"):
            pass


class TestMutualExclusion:
    def test_waiter_keeps_entry_alive(self):
        locks = KeyedLocks()
        entered = threading.Event()
        release = threading.Event()

        def first():
            with locks.hold("scope"):
                entered.set()
                release.wait(timeout=5)

        holder = threading.Thread(target=first)
        holder.start()
        entered.wait(timeout=5)
        waiter = threading.Thread(target=_hold_once, args=(locks,))
        waiter.start()
        time.sleep(0.05)
        assert len(locks) == 1
        release.set()
        holder.join(timeout=5)
        waiter.join(timeout=5)
        assert len(locks) == 0

    def test_same_key_is_exclusive(self):
        locks = KeyedLocks()
        inside = 0
        peak = 0
        counter_guard = threading.Lock()

        def worker():
            nonlocal inside, peak
            for _ in range(50):
                with locks.hold("scope", ("customer", "c1")):
                    with counter_guard:
                        inside += 1
                        peak = max(peak, inside)
                    time.sleep(0.0005)
                    with counter_guard:
                        inside -= 1

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)
        assert peak == 1
        assert len(locks) == 0

    def test_overlapping_key_sets_do_not_deadlock(self):
        locks = KeyedLocks()
        done = []

        def worker(keys):
            for _ in range(100):
                with locks.hold(*keys):
                    pass
            done.append(keys)

        threads = [
            threading.Thread(target=worker, args=(("a", "b"),)),
            threading.Thread(target=worker, args=(("b", "a"),)),
            threading.Thread(target=worker, args=(("b", "c", "a"),)),
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)
        assert len(done) == 3
        assert len(locks) == 0


def _hold_once(locks: KeyedLocks) -> None:
    with locks.hold("scope"):
        pass
