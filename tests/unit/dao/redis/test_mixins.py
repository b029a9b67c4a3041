"""Unit tests for Redis-based mixins.

Test coverage includes:
    1. Initialization and configuration
       - Ensures correct initialization with or without a Redis client.
       - Confirms invalid Redis configuration raises DataStoreError.
    2. Healthcheck behavior
       - Healthcheck pings Redis.
       - Unreachable or timed out Redis raises error (or returns False).
"""

from unittest.mock import MagicMock, patch

import pytest
import redis

from linkshortener.dao.exceptions import DataStoreError
from linkshortener.dao.redis import RedisKeySchema
from linkshortener.dao.redis.mixins import RedisClientMixin


# -------------------------------
# 1. Initialization and configuration
# -------------------------------


def test_initialize_without_redis_client():
    """Ensure mixin creates a Redis client with socket timeouts when none is provided."""
    redis_config = {
        'redis_host': 'redis',
        'redis_port': '6380',
        'redis_db': '1',
        'redis_decode_responses': True,
        'redis_username': 'default',
        'redis_password': 'password',
        'redis_timeout': 0.5,
    }

    with patch('linkshortener.dao.redis.mixins.redis.Redis', autospec=True) as redis_mock:
        redis_mock_instance = redis_mock.return_value
        mixin = RedisClientMixin(**redis_config, prefix='testapp:test')

        redis_mock.assert_called_once_with(
            host='redis',
            port=6380,
            db=1,
            decode_responses=True,
            username='default',
            password='password',
            socket_timeout=0.5,
            socket_connect_timeout=0.5,
        )
        assert mixin.redis is redis_mock_instance
        assert isinstance(mixin.keys, RedisKeySchema)
        assert mixin.keys.prefix == 'testapp:test'


def test_initialize_with_redis_client(redis_client):
    mixin = RedisClientMixin(redis_client=redis_client, prefix='testapp:test')
    assert mixin.redis is redis_client


def test_initialize_with_invalid_redis_config():
    exception_message = "Can't connect to Redis at 203.0.113.1:18000/5. Check the provided configuration parameters."

    with patch('linkshortener.dao.redis.mixins.redis.Redis', autospec=True) as redis_mock:
        redis_mock_instance = redis_mock.return_value
        redis_mock_instance.ping.side_effect = redis.exceptions.ConnectionError('Connection error')
        redis_mock_instance.connection_pool = MagicMock()
        redis_mock_instance.connection_pool.connection_kwargs = {'host': '203.0.113.1', 'port': 18000, 'db': 5}

        with pytest.raises(DataStoreError, match=exception_message):
            RedisClientMixin(redis_host='203.0.113.1', redis_port=18000, redis_db=5, prefix='testapp:test')


# -------------------------------
# 2. Healthcheck behavior
# -------------------------------


def test_healthcheck_passes(redis_client):
    mixin = RedisClientMixin(redis_client=redis_client, prefix='testapp:test')
    redis_client.ping.assert_called_once()  # initialization performs a healthcheck

    assert mixin._healthcheck() is True
    assert redis_client.ping.call_count == 2


@pytest.mark.parametrize('error', [redis.exceptions.ConnectionError('Connection error'), redis.exceptions.TimeoutError('Timeout')])
def test_healthcheck_fails(redis_client, error):
    redis_client.ping.side_effect = error

    with pytest.raises(DataStoreError):
        RedisClientMixin(redis_client=redis_client, prefix='testapp:test')


def test_healthcheck_without_raising(redis_client):
    mixin = RedisClientMixin(redis_client=redis_client, prefix='testapp:test')
    redis_client.ping.side_effect = redis.exceptions.ConnectionError('Connection error')

    assert mixin._healthcheck(raise_error=False) is False
