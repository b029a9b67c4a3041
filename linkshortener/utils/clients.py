"""Process-lifetime pool of data store and cache clients

A Lambda container serves many invocations, so connections and the resolved
cache endpoint secret are created on first use and reused afterwards. The
pool is an explicit object handed to the services instead of module-level
client singletons.

Example:
    >>> pool = ClientPool(load_settings())
    >>> store = pool.store()     # LinkDynamoDBDAO or LinkRedisDAO
    >>> cache = pool.cache()     # LinkCacheDAO, or None when unavailable
"""

import time
import logging
import threading

from linkshortener.constants import Backend
from linkshortener.exceptions import SecretResolutionError
from linkshortener.dao.base import LinkBaseDAO, LinkCacheBaseDAO
from linkshortener.dao.cache import LinkCacheDAO
from linkshortener.dao.dynamodb import LinkDynamoDBDAO
from linkshortener.dao.redis import LinkRedisDAO
from linkshortener.dao.exceptions import DataStoreError
from linkshortener.utils.config import Settings
from linkshortener.utils.dns import DnsResolver


logger = logging.getLogger(__name__)


class ClientPool:
    """Lazily construct and reuse the store, cache and DNS clients.

    Cache construction failures (unreadable secret, unreachable endpoint) are
    logged and leave the pool cache-less for `cache_retry_seconds` before
    `cache()` tries again.
    """

    def __init__(self, settings: Settings, cache_retry_seconds: float = 60.0):
        self.settings = settings
        self.cache_retry_seconds = cache_retry_seconds
        self._store: LinkBaseDAO | None = None
        self._cache: LinkCacheBaseDAO | None = None
        self._cache_retry_at = 0.0
        self._resolver: DnsResolver | None = None
        self._lock = threading.Lock()

    def store(self) -> LinkBaseDAO:
        """Return the durable link store for the configured backend.

        Raises:
            DataStoreError:
                If the Redis backend is selected and Redis is unreachable.
        """
        with self._lock:
            if self._store is None:
                self._store = self._build_store()
            return self._store

    def cache(self) -> LinkCacheBaseDAO | None:
        """Return the link cache, or None if it isn't configured or can't be reached."""
        if not self.settings.cache_enabled:
            return None

        with self._lock:
            if self._cache is None:
                if time.monotonic() < self._cache_retry_at:
                    return None
                try:
                    self._cache = LinkCacheDAO(
                        prefix=self.settings.prefix,
                        endpoint=self.settings.cache_endpoint,
                        port=self.settings.cache_port,
                        secret_name=self.settings.cache_endpoint_secret,
                        redis_timeout=self.settings.cache_timeout,
                    )
                except (SecretResolutionError, DataStoreError) as e:
                    logger.warning(
                        'Cache unavailable. Continuing without cache.',
                        extra={'reason': str(e), 'error': e.__class__.__name__},
                    )
                    self._cache_retry_at = time.monotonic() + self.cache_retry_seconds
                    return None
            return self._cache

    def resolver(self) -> DnsResolver:
        with self._lock:
            if self._resolver is None:
                self._resolver = DnsResolver(timeout=self.settings.dns_timeout)
            return self._resolver

    def _build_store(self) -> LinkBaseDAO:
        if self.settings.backend is Backend.REDIS:
            logger.debug('Using Redis as the durable link store.')
            return LinkRedisDAO(
                redis_host=self.settings.redis_store_host,
                redis_port=self.settings.redis_store_port,
                redis_db=self.settings.redis_store_db,
                redis_timeout=self.settings.store_timeout,
                prefix=self.settings.prefix,
            )

        logger.debug('Using DynamoDB as the durable link store.', extra={'table': self.settings.table_name})
        return LinkDynamoDBDAO(
            table_name=self.settings.table_name,
            timeout=self.settings.store_timeout,
            endpoint_url=self.settings.aws_endpoint_url,
        )
