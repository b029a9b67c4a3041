"""Resolve short codes to target URLs (cache-aside)

State machine:

    CacheLookup ──hit──────────────────────────────> Resolved (no re-validation)
        │ miss / cache fault / no cache
        v
    DurableLookup ──not found──> NotFound
        │ found        └─store fault──> TransientError
        v
    Revalidate ──valid───> populate cache, Resolved
        └──invalid──> delete record, Invalidated(reason)

Click count increments and cache writes are fire-and-forget; the record
deletion on invalidation is awaited so an unsafe link is never served again.

A cache hit is trusted for at most the cache TTL (CacheTTL.HOT). That TTL is
the window in which a target that turned private can still be served.
"""

import logging
from collections.abc import Callable

from linkshortener.constants import CacheTTL
from linkshortener.models import ValidationResult
from linkshortener.dao.base import LinkBaseDAO, LinkCacheBaseDAO
from linkshortener.dao.exceptions import DataStoreError, ShortURLNotFoundError
from linkshortener.services.exceptions import InvalidInputError, LinkInvalidatedError, LinkNotFoundError, TransientError
from linkshortener.utils.tasks import BackgroundTasks
from linkshortener.utils.validator import validate_url


logger = logging.getLogger(__name__)


class RedirectResolver:
    """Resolve short codes through the cache, the durable store and the validator.

    Args:
        store (LinkBaseDAO):
            Durable link store.
        cache (LinkCacheBaseDAO | None):
            Optional cache. None behaves as an always-miss cache.
        tasks (BackgroundTasks | None):
            Dispatcher for fire-and-forget work.
        validator (Callable[[str], ValidationResult]):
            URL validator. Defaults to validate_url().
        cache_ttl (int):
            TTL in seconds of cache entries written on the miss path.
    """

    def __init__(
        self,
        store: LinkBaseDAO,
        cache: LinkCacheBaseDAO | None = None,
        tasks: BackgroundTasks | None = None,
        validator: Callable[[str], ValidationResult] = validate_url,
        cache_ttl: int = CacheTTL.HOT,
    ):
        self.store = store
        self.cache = cache
        self.tasks = tasks or BackgroundTasks()
        self.validator = validator
        self.cache_ttl = cache_ttl

    def resolve(self, shortcode: str | None) -> str:
        """Return the target URL for `shortcode`.

        Raises:
            InvalidInputError: If `shortcode` is missing or empty.
            LinkNotFoundError: If the code is unknown.
            LinkInvalidatedError: If the stored URL failed re-validation (the record is deleted).
            TransientError: If the durable store failed (read or delete).
        """
        if not isinstance(shortcode, str) or not shortcode.strip():
            raise InvalidInputError("Missing 'shortCode'.")

        # 1- CacheLookup
        cached_url = self._cache_lookup(shortcode)
        if cached_url:
            logger.debug('Cache hit.', extra={'shortcode': shortcode})
            self._count_click(shortcode)
            return cached_url

        # 2- DurableLookup
        try:
            record = self.store.get(shortcode)
        except ShortURLNotFoundError as e:
            raise LinkNotFoundError(f"Short code '{shortcode}' not found.") from e
        except DataStoreError as e:
            logger.error('Link store read failed.', extra={'shortcode': shortcode, 'reason': str(e)})
            raise TransientError(str(e)) from e

        # 3- Revalidate
        result = self.validator(record.target)
        if not result.valid:
            reason = result.reason or 'Invalid URL'
            self._invalidate(shortcode, reason)
            raise LinkInvalidatedError(shortcode, reason)

        if self.cache is not None:
            self.tasks.submit('populate_cache', self.cache.set, shortcode, record.target, int(self.cache_ttl))
        self._count_click(shortcode)
        return record.target

    def _cache_lookup(self, shortcode: str) -> str | None:
        if self.cache is None:
            return None
        try:
            return self.cache.get(shortcode)
        except DataStoreError as e:
            logger.warning('Cache lookup failed. Treating as a miss.', extra={'shortcode': shortcode, 'reason': str(e)})
            return None

    def _invalidate(self, shortcode: str, reason: str) -> None:
        logger.warning('Stored URL failed re-validation. Deleting link.', extra={'shortcode': shortcode, 'reason': reason})
        try:
            self.store.delete(shortcode)
        except DataStoreError as e:
            logger.error('Failed to delete invalidated link.', extra={'shortcode': shortcode, 'reason': str(e)})
            raise TransientError(str(e)) from e

        # Another resolver may have cached the target in the meantime
        if self.cache is not None:
            self.tasks.submit('evict_cache', self.cache.delete, shortcode)

    def _count_click(self, shortcode: str) -> None:
        self.tasks.submit('increment_clicks', self.store.increment_clicks, shortcode)
