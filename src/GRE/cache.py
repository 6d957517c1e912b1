"""In-process cache of built repository trees."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Awaitable, Callable

from cachetools import LRUCache

from GRE.models import Directory

logger = logging.getLogger(__name__)


def tree_key(owner: str, repo: str, ref: str) -> str:
    return f"{owner}/{repo}@{ref}"


class TreeCache:
    """LRU cache of Directories keyed by ``owner/repo@ref``.

    Entries live until evicted; a branch that moves on upstream keeps showing
    the cached tree for the lifetime of the process.
    """

    def __init__(self, maxsize: int = 256):
        self._cache: LRUCache[str, Directory] = LRUCache(maxsize=maxsize)
        self._lock = threading.Lock()
        self._pending: dict[str, asyncio.Future] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._cache

    def get(self, key: str) -> Directory | None:
        with self._lock:
            return self._cache.get(key)

    def set(self, key: str, tree: Directory) -> None:
        with self._lock:
            self._cache[key] = tree

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    async def get_or_load(
        self,
        key: str,
        loader: Callable[[], Awaitable[Directory]],
    ) -> Directory:
        """Return the cached tree, running *loader* at most once per key.

        Callers arriving while a load is in flight wait for the same result.
        A failed load is not cached and its exception reaches every waiter.
        """
        tree = self.get(key)
        if tree is not None:
            return tree

        pending = self._pending.get(key)
        if pending is not None:
            return await pending

        future = asyncio.ensure_future(loader())
        self._pending[key] = future
        try:
            tree = await future
        finally:
            self._pending.pop(key, None)

        logger.debug("Cached tree %s", key)
        self.set(key, tree)
        return tree
