"""
Per-account write serialization.

Balance recomputation and allocation validation are read-modify-write
sequences over a single account; holding the account's lock across the
whole sequence stops two writers from both passing a capacity check against
the same stale balance.
"""

from contextlib import contextmanager, ExitStack
from typing import Dict, Optional
import threading


class AccountLockRegistry:
    """Re-entrant lock per account id, created on first use"""

    def __init__(self):
        self._locks: Dict[str, threading.RLock] = {}
        self._guard = threading.Lock()

    def lock_for(self, account_id: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(account_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[account_id] = lock
            return lock

    def forget(self, account_id: str) -> None:
        """Drop the lock of a deleted account"""
        with self._guard:
            self._locks.pop(account_id, None)

    @contextmanager
    def hold(self, *account_ids: Optional[str]):
        """Hold the locks of all given accounts; sorted order avoids deadlock"""
        ids = sorted({account_id for account_id in account_ids if account_id})
        with ExitStack() as stack:
            for account_id in ids:
                stack.enter_context(self.lock_for(account_id))
            yield
