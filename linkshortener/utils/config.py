"""Utility functions for application configuration management.

Each Lambda reads its settings from environment variables set by the
deployment template. `load_settings()` collects them into a frozen
`Settings` object which the `ClientPool` and services are built from.

Environment variables (see linkshortener.constants.ENV):
    APP_NAME, APP_ENV             - key prefix '<name>:<env>' (APP_ENV defaults to 'local')
    LINK_STORE_BACKEND            - 'dynamodb' (default) or 'redis'
    URL_TABLE_NAME                - DynamoDB table (required for the 'dynamodb' backend)
    REDIS_STORE_HOST/PORT/DB      - Redis datastore (for the 'redis' backend)
    REDIS_ENDPOINT_NAME           - Secrets Manager secret holding the cache endpoint
    REDIS_ENDPOINT, REDIS_PORT    - direct cache endpoint (takes precedence over the secret)
    SHORT_URL_BASE                - public base URL for short links
    STORE_TIMEOUT_SECONDS, CACHE_TIMEOUT_SECONDS, DNS_TIMEOUT_SECONDS
    LOCALSTACK_ENDPOINT           - AWS endpoint used when running locally

Example:
    >>> os.environ['URL_TABLE_NAME'] = 'links'
    >>> settings = load_settings()
    >>> settings.backend
    <Backend.DYNAMODB: 'dynamodb'>
"""

import os
from dataclasses import dataclass

from linkshortener.constants import ENV, Backend, Timeout
from linkshortener.exceptions import BadConfigurationError
from linkshortener.utils.helpers import require_environment
from linkshortener.utils.runtime import running_locally


def app_env() -> str:
    return os.environ.get(ENV.App.APP_ENV, 'local').lower()


def app_name() -> str | None:
    return os.environ.get(ENV.App.APP_NAME)


def app_prefix() -> str | None:
    return None if app_name() is None else f'{app_name()}:{app_env()}'


# fmt: off
@dataclass(frozen=True)
class Settings:
    backend: Backend = Backend.DYNAMODB             # Durable link store implementation
    table_name: str | None = None                   # DynamoDB table name
    redis_store_host: str = 'localhost'             # Redis datastore host
    redis_store_port: int = 6379                    # Redis datastore port
    redis_store_db: int = 0                         # Redis datastore DB index
    cache_endpoint: str | None = None               # Cache host (bypasses secret lookup)
    cache_endpoint_secret: str | None = None        # Secrets Manager name of the cache endpoint
    cache_port: int = 6379                          # Cache port
    prefix: str | None = None                       # Key namespace '<app>:<env>'
    short_url_base: str | None = None               # Public base URL for short links
    store_timeout: float = Timeout.STORE            # DynamoDB/Redis store call timeout
    cache_timeout: float = Timeout.CACHE            # Cache call timeout
    dns_timeout: float = Timeout.DNS                # DNS resolution lifetime
    aws_endpoint_url: str | None = None             # LocalStack endpoint when running locally

    @property
    def cache_enabled(self) -> bool:
        return bool(self.cache_endpoint or self.cache_endpoint_secret)
# fmt: on


def _int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise BadConfigurationError(f'{name} must be an integer (given value: {raw!r}).') from e


def _positive_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise BadConfigurationError(f'{name} must be a number (given value: {raw!r}).') from e
    if value <= 0:
        raise BadConfigurationError(f'{name} must be positive (given value: {raw!r}).')
    return value


@require_environment(ENV.Store.TABLE_NAME)
def _table_name() -> str:
    return os.environ[ENV.Store.TABLE_NAME]


def load_settings() -> Settings:
    """Load application settings from the environment

    Raises:
        MissingEnvironmentVariableError:
            If the DynamoDB backend is selected and URL_TABLE_NAME is missing.
        BadConfigurationError:
            If a variable holds an invalid value (unknown backend, non-numeric timeout, etc.).
    """
    raw_backend = os.environ.get(ENV.Store.BACKEND, Backend.DYNAMODB).lower()
    try:
        backend = Backend(raw_backend)
    except ValueError as e:
        allowed = ', '.join(b.value for b in Backend)
        raise BadConfigurationError(f'Unknown link store backend {raw_backend!r} (expected one of: {allowed}).') from e

    # fmt: off
    aws_endpoint_url = os.environ.get(ENV.LocalStack.ENDPOINT, 'http://localhost:4566') \
                       if running_locally() else None
    # fmt: on

    return Settings(
        backend=backend,
        table_name=_table_name() if backend is Backend.DYNAMODB else os.environ.get(ENV.Store.TABLE_NAME),
        redis_store_host=os.environ.get(ENV.Store.REDIS_HOST, 'localhost'),
        redis_store_port=_int(ENV.Store.REDIS_PORT, 6379),
        redis_store_db=_int(ENV.Store.REDIS_DB, 0),
        cache_endpoint=os.environ.get(ENV.Cache.ENDPOINT) or None,
        cache_endpoint_secret=os.environ.get(ENV.Cache.ENDPOINT_SECRET) or None,
        cache_port=_int(ENV.Cache.PORT, 6379),
        prefix=app_prefix(),
        short_url_base=os.environ.get(ENV.App.SHORT_URL_BASE) or None,
        store_timeout=_positive_float(ENV.Store.TIMEOUT, Timeout.STORE),
        cache_timeout=_positive_float(ENV.Cache.TIMEOUT, Timeout.CACHE),
        dns_timeout=_positive_float(ENV.Dns.TIMEOUT, Timeout.DNS),
        aws_endpoint_url=aws_endpoint_url,
    )
