"""
Per-user critical sections for check-then-insert sequences.

Booking creation and package adds read the store and then write to it; two
requests from the same user (two browser tabs) could otherwise both pass the
read. Requests for one user queue behind an asyncio.Lock; other users are not
affected. The lock is process-local, so the store-level unique indexes in
``vrtravel.indexes`` remain the cross-instance guarantee.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Tuple


_locks: Dict[Tuple[str, str], asyncio.Lock] = {}
_waiters: Dict[Tuple[str, str], int] = {}


@asynccontextmanager
async def user_lock(scope: str, user_id: str) -> AsyncIterator[None]:
    """Serialize the block for one (scope, user) pair."""

    key = (scope, user_id)
    lock = _locks.get(key)
    if lock is None:
        lock = asyncio.Lock()
        _locks[key] = lock
    _waiters[key] = _waiters.get(key, 0) + 1

    try:
        async with lock:
            yield
    finally:
        remaining = _waiters.get(key, 1) - 1
        if remaining <= 0:
            _waiters.pop(key, None)
            if _locks.get(key) is lock:
                _locks.pop(key, None)
        else:
            _waiters[key] = remaining


def held_lock_count() -> int:
    """Number of (scope, user) pairs with a live lock entry."""

    return len(_locks)
