from linkshortener.dao.cache.cache_key_schema import CacheKeySchema
from linkshortener.dao.cache.mixins import ElastiCacheClientMixin
from linkshortener.dao.cache.link_cache_dao import LinkCacheDAO

__all__ = [
    'CacheKeySchema',
    'ElastiCacheClientMixin',
    'LinkCacheDAO',
]
