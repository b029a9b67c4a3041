import functools
from typing import TypeVar, Any
from collections.abc import Callable

import redis

from linkshortener.dao.exceptions import DataStoreError


__all__ = ['handle_redis_connection_error', 'describe_connection']

F = TypeVar('F', bound=Callable[..., Any])


def describe_connection(client: redis.Redis) -> str:
    """Return '<host>:<port>/<db>' for a Redis client, used in error messages."""
    info = client.connection_pool.connection_kwargs
    return f'{info.get("host")}:{info.get("port")}/{info.get("db")}'


def handle_redis_connection_error[F](method: F) -> F:
    """Wrap Redis-interacting DAO methods to handle connection errors and timeouts

    A timed out call is a store fault, never a miss, so both
    redis.exceptions.ConnectionError and redis.exceptions.TimeoutError
    are translated.

    Args:
        method (Callable[..., Any]):
            DAO method performing Redis operations.

    Returns:
        Callable[..., Any]:
            Wrapped method which raises DataStoreError on connectivity issues with Redis.

    Example:
        >>> @handle_redis_connection_error
        ... def get_target(self, shortcode):
        ...     return self.redis.get(shortcode)
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except redis.exceptions.TimeoutError as e:
            raise DataStoreError(f'Redis at {describe_connection(self.redis)} timed out.') from e
        except redis.exceptions.ConnectionError as e:
            raise DataStoreError(f"Can't connect to Redis at {describe_connection(self.redis)}.") from e

    return wrapper
