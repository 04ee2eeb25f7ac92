# pos_bridge/services/epos/locks.py
import asyncio
from collections import defaultdict
from contextlib import asynccontextmanager
from typing import Dict, Hashable


class KeyedLocks:
    """
    One asyncio.Lock per key.

    Reconciliation of a product (allocation + persistence) holds the product's
    lock, so a webhook and a running full sync never interleave on the same
    product. Different products proceed independently.
    """

    def __init__(self):
        self._locks: Dict[Hashable, asyncio.Lock] = defaultdict(asyncio.Lock)

    def __len__(self):
        return len(self._locks)

    def is_locked(self, key: Hashable) -> bool:
        return key in self._locks and self._locks[key].locked()

    @asynccontextmanager
    async def hold(self, key: Hashable):
        async with self._locks[key]:
            yield
