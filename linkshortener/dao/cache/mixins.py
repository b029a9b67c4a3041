"""ElastiCache wiring for the link cache

The endpoint (and optional credentials) live in a Secrets Manager secret:

    {"REDIS_ENDPOINT": "master.links-cache.abc123.use1.cache.amazonaws.com", "password": "..."}

Connections use TLS except under SAM local, where the cache is a plain Redis container.
"""

import os
import json
import logging
from typing import Optional

import redis
import boto3
from botocore.client import BaseClient
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from linkshortener.constants import ENV, Timeout
from linkshortener.exceptions import SecretResolutionError
from linkshortener.dao.cache.cache_key_schema import CacheKeySchema
from linkshortener.dao.redis.mixins import RedisClientMixin
from linkshortener.utils.runtime import running_locally


logger = logging.getLogger(__name__)


class ElastiCacheClientMixin(RedisClientMixin):
    """RedisClientMixin for the cache: resolves its endpoint and swaps in CacheKeySchema.

    An explicit `endpoint` skips the secret lookup; an explicit `redis_client`
    skips connecting altogether. The timeout defaults to Timeout.CACHE.

    Raises:
        SecretResolutionError: the endpoint secret is missing, unreadable or malformed.
        DataStoreError: the cache does not answer PING.
    """

    def __init__(
        self,
        prefix: Optional[str] = None,
        endpoint: Optional[str] = None,
        port: int = 6379,
        secret_name: Optional[str] = None,
        secrets_client: Optional[BaseClient] = None,
        redis_timeout: float = Timeout.CACHE,
        redis_client: Optional[redis.Redis] = None,
    ):
        if redis_client is None:
            username, password = None, None
            if endpoint is None:
                endpoint, username, password = self._resolve_secret(secret_name, secrets_client)

            redis_client = redis.Redis(
                host=endpoint,
                port=int(port),
                username=username,
                password=password,
                decode_responses=True,
                ssl=not running_locally(),
                socket_timeout=redis_timeout,
                socket_connect_timeout=redis_timeout,
            )
            logger.debug('Cache client initialized.', extra={'cacheHost': endpoint, 'cachePort': port})

        super().__init__(redis_client=redis_client, prefix=prefix)
        self.keys = CacheKeySchema(prefix=prefix)

    @staticmethod
    def _resolve_secret(
        secret_name: Optional[str],
        secrets_client: Optional[BaseClient],
    ) -> tuple[str, Optional[str], Optional[str]]:
        """Resolve (endpoint, username, password) from Secrets Manager.

        Raises:
            SecretResolutionError:
                If the secret name is missing, the AWS call fails, or the payload
                is not JSON or lacks 'REDIS_ENDPOINT'.
        """
        if not secret_name:
            raise SecretResolutionError('No cache endpoint given and no endpoint secret configured.')

        # fmt: off
        client_kwargs = {
            'endpoint_url': os.environ.get(ENV.LocalStack.ENDPOINT, 'http://localhost:4566'),
        } if running_locally() else {}
        # fmt: on
        config = Config(connect_timeout=Timeout.SECRETS, read_timeout=Timeout.SECRETS, retries={'max_attempts': 2})
        sm = secrets_client or boto3.client('secretsmanager', config=config, **client_kwargs)

        try:
            raw = sm.get_secret_value(SecretId=secret_name).get('SecretString')
            payload = json.loads(raw or '{}')
        except (BotoCoreError, ClientError) as e:
            raise SecretResolutionError(f"Can't read cache endpoint secret '{secret_name}'.") from e
        except json.JSONDecodeError as e:
            raise SecretResolutionError(f"Invalid JSON in cache endpoint secret '{secret_name}'.") from e

        endpoint = payload.get('REDIS_ENDPOINT')
        if not endpoint:
            raise SecretResolutionError(f"Cache endpoint secret '{secret_name}' has no 'REDIS_ENDPOINT' field.")

        return endpoint, payload.get('username'), payload.get('password')
