from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from erc20pump.utils.errors import RpcError

logger = logging.getLogger("cache")

Resolver = Callable[[str], Awaitable[str]]


class RecipientCache:
    """Memoizes transaction hash -> recipient address lookups.

    Successful lookups are kept for the cache lifetime, zero addresses of
    contract deployments included. Failed lookups are not stored. Concurrent
    misses for the same hash share a single call to the fallback.
    """

    def __init__(self):
        self._store: dict[str, str] = {}
        self._pending: dict[str, asyncio.Future] = {}

    def get(self, tx_hash: str) -> str | None:
        return self._store.get(tx_hash.lower())

    async def resolve(self, tx_hash: str, fallback: Resolver) -> str:
        key = tx_hash.lower()
        if key in self._store:
            return self._store[key]

        pending = self._pending.get(key)
        if pending is not None:
            return await asyncio.shield(pending)

        future = asyncio.get_running_loop().create_future()
        self._pending[key] = future
        try:
            address = await fallback(tx_hash)
        except asyncio.CancelledError:
            # waiters were not cancelled themselves, they only lost the lookup
            future.set_exception(RpcError(f"recipient lookup for {tx_hash} cancelled"))
            future.exception()
            raise
        except Exception as e:
            future.set_exception(e)
            # nobody else may be waiting, mark retrieved to keep asyncio quiet
            future.exception()
            raise
        else:
            self._store[key] = address
            future.set_result(address)
            return address
        finally:
            self._pending.pop(key, None)

    def invalidate(self, tx_hash: str) -> None:
        self._store.pop(tx_hash.lower(), None)

    def clear(self) -> None:
        self._store.clear()

    @property
    def size(self) -> int:
        return len(self._store)


recipient_cache = RecipientCache()
