from linkshortener.dao.redis.redis_key_schema import prefix_key


__all__ = ['CacheKeySchema']


class CacheKeySchema:
    """Provide standardized Redis keys for cached link targets in ElastiCache.

    An optional prefix can be provided to namespace all generated keys.
    All keys live under `cache:` so a cache cluster shared with the Redis
    datastore backend never collides with durable link records.
    """

    def __init__(self, prefix: str | None = None):
        if prefix is not None and not isinstance(prefix, str):
            raise TypeError(f'Prefix must be of type string (given type: {type(prefix)}).')

        self.prefix = f'cache:{prefix}' if prefix is not None else 'cache'

    @prefix_key
    def link_target_key(self, shortcode: str) -> str:
        return f'links:{shortcode}:target'
