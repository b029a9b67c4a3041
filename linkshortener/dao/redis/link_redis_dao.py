"""Data Access Object (DAO) implementation for managing link records in Redis

This module provides a Redis-based implementation of LinkBaseDAO, used when
the durable backend is configured as `redis` (e.g. local development or a
Redis deployment with persistence enabled).

Responsibilities:
    - Insert link records with an atomic create-if-absent write (SET NX);
    - Retrieve and delete link records;
    - Maintain per-link click counters with the same expiry as the record
      (incremented only while the record exists, in one Lua script);
    - Translate Redis failures into DAO exceptions.

Storage layout (see RedisKeySchema):
    <prefix>:links:<shortcode>          JSON {"target", "created_at", "expires_at"}
    <prefix>:links:<shortcode>:clicks   integer click counter

Example:
    >>> from datetime import datetime, UTC
    >>> from linkshortener.models import LinkRecord
    >>> from linkshortener.dao.redis import LinkRedisDAO

    >>> dao = LinkRedisDAO(prefix="app:dev")
    >>> dao.insert(LinkRecord.new("abc1234", "https://example.com/page", datetime.now(UTC)))
    <LinkRedisDAO>
    >>> dao.get("abc1234").target
    'https://example.com/page'
"""

import json
from datetime import datetime

from beartype import beartype

from linkshortener.models import LinkRecord
from linkshortener.dao.base import LinkBaseDAO
from linkshortener.dao.redis.mixins import RedisClientMixin
from linkshortener.dao.redis.helpers import handle_redis_connection_error
from linkshortener.dao.exceptions import DataStoreError, ShortURLAlreadyExistsError, ShortURLNotFoundError


# KEYS[1] = record key, KEYS[2] = click counter key. Returns the new count, or nil if the record is gone.
INCREMENT_IF_EXISTS = """
if redis.call('EXISTS', KEYS[1]) == 1 then
    return redis.call('INCR', KEYS[2])
end
return false
"""


class LinkRedisDAO(RedisClientMixin, LinkBaseDAO):
    """Redis-based Data Access Object (DAO) for managing link records

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._increment_if_exists = self.redis.register_script(INCREMENT_IF_EXISTS)

    @handle_redis_connection_error
    @beartype
    def insert(self, record: LinkRecord, **kwargs) -> 'LinkRedisDAO':
        """Insert a link record only if its short code is free

        Both SET commands run in one MULTI/EXEC transaction with NX, so the
        record and its click counter are created together and an existing
        record is never overwritten. The first reply tells whether the
        record key was created.

        Raises:
            ShortURLAlreadyExistsError:
                If a record with the same short code already exists.
            DataStoreError:
                If a Redis connection issue occurs during the transaction.
        """
        link_key = self.keys.link_key(record.shortcode)
        clicks_key = self.keys.link_clicks_key(record.shortcode)
        expiry = int(record.expires_at.timestamp())
        payload = json.dumps(
            {
                'target': record.target,
                'created_at': record.created_at.isoformat(),
                'expires_at': record.expires_at.isoformat(),
            }
        )

        with self.redis.pipeline(transaction=True) as pipe:
            pipe.set(link_key, payload, nx=True, exat=expiry)
            pipe.set(clicks_key, record.click_count, nx=True, exat=expiry)
            created, _ = pipe.execute()

        if not created:
            raise ShortURLAlreadyExistsError(f"Short URL with code '{record.shortcode}' already exists.")
        return self

    @handle_redis_connection_error
    @beartype
    def get(self, shortcode: str, **kwargs) -> LinkRecord:
        """Retrieve a stored link record by shortcode

        Raises:
            ShortURLNotFoundError:
                If the link record does not exist in Redis.
            DataStoreError:
                If Redis connectivity issues occur or the stored payload is corrupt.
        """
        with self.redis.pipeline(transaction=True) as pipe:
            pipe.get(self.keys.link_key(shortcode))
            pipe.get(self.keys.link_clicks_key(shortcode))
            payload, clicks = pipe.execute()

        if payload is None:
            raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' not found.")

        try:
            data = json.loads(payload)
            return LinkRecord(
                shortcode=shortcode,
                target=data['target'],
                created_at=datetime.fromisoformat(data['created_at']),
                expires_at=datetime.fromisoformat(data['expires_at']),
                click_count=int(clicks or 0),
            )
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise DataStoreError(f"Corrupt link record stored for code '{shortcode}'.") from e

    @handle_redis_connection_error
    @beartype
    def delete(self, shortcode: str, **kwargs) -> None:
        self.redis.delete(self.keys.link_key(shortcode), self.keys.link_clicks_key(shortcode))

    @handle_redis_connection_error
    @beartype
    def increment_clicks(self, shortcode: str, **kwargs) -> None:
        """Increment the click counter of a link record

        The existence check and INCR run server-side in one script, so a
        record deleted or expired concurrently never gets a new counter key
        without a TTL.

        Raises:
            ShortURLNotFoundError:
                If no link record with the given short code exists.
            DataStoreError:
                If Redis connectivity issues occur.
        """
        keys = [self.keys.link_key(shortcode), self.keys.link_clicks_key(shortcode)]
        if self._increment_if_exists(keys=keys) is None:
            raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' not found.")
