import pytest

from linkshortener.dao.redis import RedisKeySchema
from linkshortener.dao.cache import CacheKeySchema


@pytest.mark.parametrize(
    'prefix, expected_link, expected_clicks',
    [
        ('testapp:test', 'testapp:test:links:aZ3kP0q', 'testapp:test:links:aZ3kP0q:clicks'),
        (None, 'links:aZ3kP0q', 'links:aZ3kP0q:clicks'),
    ],
)
def test_redis_key_schema(prefix, expected_link, expected_clicks):
    keys = RedisKeySchema(prefix=prefix)

    assert keys.link_key('aZ3kP0q') == expected_link
    assert keys.link_clicks_key('aZ3kP0q') == expected_clicks


def test_redis_key_schema_with_invalid_prefix():
    with pytest.raises(TypeError):
        RedisKeySchema(prefix=123)


def test_cache_keys_never_collide_with_store_keys():
    store_keys = RedisKeySchema(prefix='testapp:test')
    cache_keys = CacheKeySchema(prefix='testapp:test')

    assert cache_keys.link_target_key('aZ3kP0q') not in {store_keys.link_key('aZ3kP0q'), store_keys.link_clicks_key('aZ3kP0q')}
