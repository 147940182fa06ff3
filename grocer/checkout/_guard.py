"""
Checkout guard — at most one checkout in flight per account.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum, auto

from kungfu import Result, Error

from grocer.errors import CheckoutBusy

log = logging.getLogger("grocer.checkout")


class OnBusy(Enum):
    """
    What to do when a checkout arrives while another one for the same
    account is running.

    FAIL: return CheckoutBusy at once, no external call is made.
    WAIT: queue behind the running checkout. The queued one re-reads the
          cart, so an already-emptied cart fails its precondition.
    """

    FAIL = auto()
    WAIT = auto()


class CheckoutGuard:
    def __init__(self, on_busy: OnBusy = OnBusy.FAIL) -> None:
        self.on_busy = on_busy
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    def busy(self, account: str) -> bool:
        lock = self._locks.get(account)
        return lock is not None and lock.locked()

    async def run[T, E](
        self,
        account: str,
        operation: Callable[[], Awaitable[Result[T, E]]],
    ) -> Result[T, E | CheckoutBusy]:
        lock = self._locks.setdefault(account, asyncio.Lock())
        if self.on_busy is OnBusy.FAIL and lock.locked():
            log.warning("Rejected concurrent checkout for account %s", account)
            return Error(CheckoutBusy(account))
        self._users[account] = self._users.get(account, 0) + 1
        try:
            async with lock:
                return await operation()
        finally:
            # Last caller out (running or queued) drops the lock
            self._users[account] -= 1
            if not self._users[account]:
                del self._users[account]
                del self._locks[account]

    def __len__(self) -> int:
        """Accounts with a checkout running or queued."""
        return len(self._locks)


__all__ = ("OnBusy", "CheckoutGuard")
