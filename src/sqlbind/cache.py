"""
Process-wide LRU caches keyed by name.

Describing a target type walks its annotations, slots and properties, so
each descriptor is built once and kept in the 'target_descriptors' cache.
"""
import logging
import threading

import cachetools

logger = logging.getLogger(__name__)


class Cache:
    """Singleton holder of the named caches, guarded by a re-entrant lock.
    """

    _instance = None
    _lock = threading.RLock()

    def __init__(self):
        self._caches: dict[str, cachetools.LRUCache] = {}

    @classmethod
    def get_instance(cls) -> 'Cache':
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @property
    def lock(self) -> threading.RLock:
        """Lock held while reading or writing any managed cache."""
        return self._lock

    def get_cache(self, name: str, maxsize: int = 256) -> cachetools.LRUCache:
        """Return the named cache, creating it on first use.

        Args:
            name: Cache name
            maxsize: Capacity used only when the cache is created
        """
        with self._lock:
            cache = self._caches.get(name)
            if cache is None:
                cache = self._caches[name] = cachetools.LRUCache(maxsize=maxsize)
                logger.debug(f'Created cache {name} (maxsize={maxsize})')
            return cache

    def clear_all(self) -> None:
        with self._lock:
            for cache in self._caches.values():
                cache.clear()


def get_descriptor_cache() -> cachetools.LRUCache:
    """Cache of target type descriptors keyed by type."""
    return Cache.get_instance().get_cache('target_descriptors', maxsize=512)
