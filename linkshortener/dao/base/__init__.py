from linkshortener.dao.base.link_base_dao import LinkBaseDAO
from linkshortener.dao.base.link_cache_base_dao import LinkCacheBaseDAO


__all__ = [
    'LinkBaseDAO',
    'LinkCacheBaseDAO',
]
