"""
Tests for per-account locks
"""

import threading

from finance_tracker.locking import AccountLockRegistry


class TestAccountLockRegistry:

    def setup_method(self):
        self.locks = AccountLockRegistry()

    def test_same_lock_per_account(self):
        assert self.locks.lock_for("a") is self.locks.lock_for("a")
        assert self.locks.lock_for("a") is not self.locks.lock_for("b")

    def test_forget_drops_lock(self):
        lock = self.locks.lock_for("a")
        self.locks.forget("a")
        self.locks.forget("never-used")
        assert self.locks.lock_for("a") is not lock

    def test_hold_is_reentrant(self):
        with self.locks.hold("a", "b"):
            with self.locks.hold("b", None):
                pass

    def test_hold_blocks_other_threads(self):
        acquired = []

        def try_acquire():
            lock = self.locks.lock_for("a")
            got = lock.acquire(blocking=False)
            acquired.append(got)
            if got:
                lock.release()

        with self.locks.hold("a"):
            thread = threading.Thread(target=try_acquire)
            thread.start()
            thread.join()

        assert acquired == [False]

    def test_released_after_exception(self):
        try:
            with self.locks.hold("a"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass

        result = []
        thread = threading.Thread(target=lambda: result.append(self.locks.lock_for("a").acquire(blocking=False)))
        thread.start()
        thread.join()
        assert result == [True]
