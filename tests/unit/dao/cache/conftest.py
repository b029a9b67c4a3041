import json
from unittest.mock import MagicMock

import pytest
import redis


@pytest.fixture
def redis_client() -> redis.Redis:
    """Mock a cache client with a successful ping."""
    client = MagicMock(spec=redis.Redis)
    client.connection_pool = MagicMock(
        spec=redis.ConnectionPool,
        connection_kwargs={'host': 'cache.internal', 'port': 6379, 'db': 0},
    )
    client.ping.return_value = True
    client.get.return_value = None
    return client


@pytest.fixture
def secrets_client() -> MagicMock:
    """Mock a Secrets Manager client returning the cache endpoint and credentials."""
    client = MagicMock(spec=['get_secret_value'])
    client.get_secret_value.return_value = {
        'SecretString': json.dumps({'REDIS_ENDPOINT': 'master.links-cache.use1.cache.amazonaws.com', 'password': 'p'}),
    }
    return client
