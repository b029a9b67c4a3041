import functools
from collections.abc import Callable


__all__ = ['RedisKeySchema', 'prefix_key']


def prefix_key(func: Callable) -> Callable:
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs) -> str:
        key = func(self, *args, **kwargs)
        return f'{self.prefix}:{key}' if self.prefix is not None else key

    return wrapper


class RedisKeySchema:
    """Key names for link records in Redis.

    With a prefix such as "linkshortener:prod" every key is namespaced per app
    and environment, so several deployments can share one Redis:

        linkshortener:prod:links:aZ3kP0q          (JSON record)
        linkshortener:prod:links:aZ3kP0q:clicks   (click counter)
    """

    def __init__(self, prefix: str | None = None):
        if prefix is not None and not isinstance(prefix, str):
            raise TypeError(f'Prefix must be of type string (given type: {type(prefix)}).')

        self.prefix = prefix

    @prefix_key
    def link_key(self, shortcode: str) -> str:
        return f'links:{shortcode}'

    @prefix_key
    def link_clicks_key(self, shortcode: str) -> str:
        return f'links:{shortcode}:clicks'
