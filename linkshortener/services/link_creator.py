"""Publish new short links

LinkCreator validates a target URL, allocates a random short code and
persists the mapping with the store's atomic create-if-absent write. A
colliding code is an expected outcome and is retried with a fresh code; any
other store failure aborts immediately.

Example:
    >>> creator = LinkCreator(store=pool.store(), cache=pool.cache(), tasks=tasks)
    >>> link = creator.create('https://example.com/blog/article-123')
    >>> link.shortcode
    'aZ3kP0q'
"""

import time
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, UTC

from linkshortener.constants import CacheTTL, Retry, ShortCode
from linkshortener.models import CreatedLink, LinkRecord, ValidationResult
from linkshortener.dao.base import LinkBaseDAO, LinkCacheBaseDAO
from linkshortener.dao.exceptions import DataStoreError, ShortURLAlreadyExistsError
from linkshortener.services.exceptions import ExhaustedRetriesError, InvalidInputError, StoreError, ValidationFailedError
from linkshortener.utils.shortener import generate_shortcode
from linkshortener.utils.tasks import BackgroundTasks
from linkshortener.utils.validator import canonicalize_url, validate_url


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry for short code collisions (no backoff by default)."""

    max_attempts: int = Retry.MAX_ATTEMPTS
    backoff_seconds: float = 0.0


class LinkCreator:
    """Create short links with collision retry.

    Args:
        store (LinkBaseDAO):
            Durable link store providing the conditional insert.
        cache (LinkCacheBaseDAO | None):
            Optional cache warmed in the background after a successful create.
        tasks (BackgroundTasks | None):
            Dispatcher for fire-and-forget work.
        retry_policy (RetryPolicy):
            Maximum number of candidate codes to try.
        validator (Callable[[str], ValidationResult]):
            URL validator. Defaults to validate_url().
        generator (Callable[[int], str]):
            Short code generator. Defaults to generate_shortcode().
        shortcode_length (int):
            Length of generated codes.
        cache_ttl (int):
            TTL in seconds of the warmed cache entry.
    """

    def __init__(
        self,
        store: LinkBaseDAO,
        cache: LinkCacheBaseDAO | None = None,
        tasks: BackgroundTasks | None = None,
        retry_policy: RetryPolicy = RetryPolicy(),
        validator: Callable[[str], ValidationResult] = validate_url,
        generator: Callable[[int], str] = generate_shortcode,
        shortcode_length: int = ShortCode.LENGTH,
        cache_ttl: int = CacheTTL.HOT,
    ):
        self.store = store
        self.cache = cache
        self.tasks = tasks or BackgroundTasks()
        self.retry_policy = retry_policy
        self.validator = validator
        self.generator = generator
        self.shortcode_length = shortcode_length
        self.cache_ttl = cache_ttl

    def create(self, url: str | None) -> CreatedLink:
        """Validate `url` and persist it under a newly allocated short code.

        Raises:
            InvalidInputError: If `url` is missing or empty.
            ValidationFailedError: If the URL fails validation.
            StoreError: If the store fails for any reason other than a collision.
            ExhaustedRetriesError: If every attempted code collided.
        """
        if not isinstance(url, str) or not url.strip():
            raise InvalidInputError("Missing 'url'.")

        result = self.validator(url)
        if not result.valid:
            raise ValidationFailedError(result.reason or 'Invalid URL')

        target = canonicalize_url(url)
        shortcode = self._insert_with_retry(target)

        if self.cache is not None:
            self.tasks.submit('warm_cache', self.cache.set, shortcode, target, int(self.cache_ttl))

        logger.info('Created short link.', extra={'shortcode': shortcode, 'target': target})
        return CreatedLink(shortcode=shortcode, target=target)

    def _insert_with_retry(self, target: str) -> str:
        attempts = self.retry_policy.max_attempts
        rejected: set[str] = set()
        for attempt in range(1, attempts + 1):
            shortcode = self.generator(self.shortcode_length)
            if shortcode in rejected:
                # A code the store already refused is a collision without asking again
                logger.warning('Generator repeated a rejected short code.', extra={'shortcode': shortcode, 'attempt': attempt})
                continue

            record = LinkRecord.new(shortcode=shortcode, target=target, created_at=datetime.now(UTC))
            try:
                self.store.insert(record)
            except ShortURLAlreadyExistsError:
                rejected.add(shortcode)
                logger.warning(
                    'Short code collision detected. Retrying with a new code.',
                    extra={'shortcode': shortcode, 'attempt': attempt, 'maxAttempts': attempts},
                )
                if self.retry_policy.backoff_seconds:
                    time.sleep(self.retry_policy.backoff_seconds)
            except DataStoreError as e:
                logger.error('Link store write failed.', extra={'shortcode': shortcode, 'reason': str(e)})
                raise StoreError(str(e)) from e
            else:
                return shortcode

        raise ExhaustedRetriesError(attempts)
