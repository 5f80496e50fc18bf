"""In-memory cache of rendered documents keyed on file modification time.

One lock guards the whole lookup: the hit check, the render on a miss, the
eviction of older versions and the insert all happen while it is held, so
concurrent requests for an uncached file render it exactly once. Renders
of unrelated files are serialized as well.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable

import structlog

log = structlog.get_logger()

Producer = Callable[[], Awaitable[str]]


@dataclass(frozen=True)
class CacheKey:
    path: Path
    # st_mtime_ns: the finest resolution the filesystem reports.
    modified_ns: int


class RenderCache:
    """Maps (path, mtime) to rendered HTML, keeping at most one entry per path.

    There is no TTL and no capacity bound; entries leave only when a newer
    version of the same file is rendered.
    """

    def __init__(self) -> None:
        self._entries: dict[CacheKey, str] = {}
        self._lock = asyncio.Lock()

    async def get_or_render(self, path: Path, modified_ns: int, producer: Producer) -> str:
        """Return cached HTML for this version of path, rendering it on a miss.

        ``producer`` is awaited only on a miss. If it raises, the exception
        propagates and the cache is left exactly as it was.
        """
        key = CacheKey(path=path, modified_ns=modified_ns)
        async with self._lock:
            cached = self._entries.get(key)
            if cached is not None:
                log.debug("render_cache_hit", path=str(path))
                return cached

            log.debug("render_cache_miss", path=str(path), modified_ns=modified_ns)
            html = await producer()
            evicted = self._evict(path)
            if evicted:
                log.info("render_cache_evict", path=str(path), evicted=evicted)
            self._entries[key] = html
            return html

    def _evict(self, path: Path) -> int:
        stale = [key for key in self._entries if key.path == path]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def keys_for(self, path: Path) -> list[CacheKey]:
        return [key for key in self._entries if key.path == path]

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
