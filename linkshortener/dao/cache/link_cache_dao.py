from beartype import beartype

from linkshortener.dao.base import LinkCacheBaseDAO
from linkshortener.dao.cache.mixins import ElastiCacheClientMixin
from linkshortener.dao.redis.helpers import handle_redis_connection_error


class LinkCacheDAO(ElastiCacheClientMixin, LinkCacheBaseDAO):
    """ElastiCache DAO shadowing link targets by short code.

    Entries are plain strings with their own TTL, independent of the durable
    record's expiry. A missing key is a miss (None); connectivity problems and
    timeouts raise DataStoreError, which callers downgrade to a miss.
    """

    @handle_redis_connection_error
    @beartype
    def get(self, shortcode: str) -> str | None:
        return self.redis.get(self.keys.link_target_key(shortcode))

    @handle_redis_connection_error
    @beartype
    def set(self, shortcode: str, target: str, ttl: int) -> None:
        self.redis.set(self.keys.link_target_key(shortcode), target, ex=ttl)

    @handle_redis_connection_error
    @beartype
    def delete(self, shortcode: str) -> None:
        self.redis.delete(self.keys.link_target_key(shortcode))
