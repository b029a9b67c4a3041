"""Abstract base class for the link cache.

The cache is a disposable projection of the durable store: a miss is always a
valid answer and implementations never treat absence as an error.
"""

from abc import ABC, abstractmethod


class LinkCacheBaseDAO(ABC):
    """Interface for volatile short code -> target URL caches.

    Methods:
        get(shortcode: str) -> str | None:
            Return the cached target URL or None on a miss.
            Raises DataStoreError if the cache cannot be reached.

        set(shortcode: str, target: str, ttl: int) -> None:
            Cache a target URL for `ttl` seconds.
            Raises DataStoreError if the cache cannot be reached.

        delete(shortcode: str) -> None:
            Evict a cached target. Evicting a missing entry is not an error.
            Raises DataStoreError if the cache cannot be reached.
    """

    @abstractmethod
    def get(self, shortcode: str) -> str | None:
        pass

    @abstractmethod
    def set(self, shortcode: str, target: str, ttl: int) -> None:
        pass

    @abstractmethod
    def delete(self, shortcode: str) -> None:
        pass
