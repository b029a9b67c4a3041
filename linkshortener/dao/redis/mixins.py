"""Shared Redis wiring for the Redis-backed link DAOs

`RedisClientMixin` owns the `redis` client and the `keys` schema and refuses
to finish construction unless the server answers a PING.

    >>> class LinkRedisDAO(RedisClientMixin, LinkBaseDAO):
    ...     pass
    >>> dao = LinkRedisDAO(redis_host='redis.internal', prefix='linkshortener:prod')
"""

from typing import Optional

import redis

from linkshortener.constants import Timeout
from linkshortener.dao.redis.redis_key_schema import RedisKeySchema
from linkshortener.dao.redis.helpers import describe_connection
from linkshortener.dao.exceptions import DataStoreError


# Errors meaning "the server is not there", as opposed to a bad command
UNREACHABLE_ERRORS = (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError)


class RedisClientMixin:
    """Give a DAO a pinged Redis client (`self.redis`) and its key schema (`self.keys`).

    Pass `redis_client` to reuse a connection; otherwise one is opened from the
    `redis_*` parameters. `redis_timeout` bounds both connecting and every
    command, so a stalled server surfaces as a DataStoreError instead of a
    hung Lambda.

    Raises:
        DataStoreError: the initial PING fails.
    """

    def __init__(
        self,
        redis_host: Optional[str] = 'localhost',
        redis_port: Optional[int] = 6379,
        redis_db: Optional[int] = 0,
        redis_decode_responses: Optional[bool] = True,
        redis_username: Optional[str] = None,
        redis_password: Optional[str] = None,
        redis_timeout: Optional[float] = Timeout.STORE,
        redis_client: Optional[redis.Redis] = None,
        prefix: Optional[str] = None,
    ):
        if redis_client is None:
            redis_client = self._connect(
                host=redis_host,
                port=int(redis_port),
                db=int(redis_db),
                decode_responses=redis_decode_responses,
                username=redis_username,
                password=redis_password,
                timeout=redis_timeout,
            )
        self.redis = redis_client
        self.keys = RedisKeySchema(prefix=prefix)
        self._healthcheck()

    @staticmethod
    def _connect(timeout: Optional[float], **connection) -> redis.Redis:
        return redis.Redis(**connection, socket_timeout=timeout, socket_connect_timeout=timeout)

    def _healthcheck(self, raise_error: bool = True) -> bool:
        """PING the server; False (or DataStoreError when `raise_error`) if it is unreachable"""
        try:
            self.redis.ping()
        except UNREACHABLE_ERRORS as e:
            if not raise_error:
                return False
            raise DataStoreError(
                f"Can't connect to Redis at {describe_connection(self.redis)}. Check the provided configuration parameters."
            ) from e
        return True
