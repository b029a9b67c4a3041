import string
from enum import IntEnum, StrEnum


class TTL:
    """TTL durations in seconds."""

    # Durable link record retention period (30 days in seconds)
    LINK_RECORD = 2_592_000  # 60 * 60 * 24 * 30


class CacheTTL(IntEnum):
    """Cache TTL in seconds.

    Cache hits are served without re-validation, so HOT is also the SSRF
    exposure window for a link whose target later turns private.
    """

    HOT = 60 * 60  # 1 hour


class ShortCode:
    """Short code generation parameters."""

    # Base62 alphabet: 0-9, A-Z, a-z
    ALPHABET = string.digits + string.ascii_uppercase + string.ascii_lowercase
    LENGTH = 7
    # Random bytes drawn per batch (enough for a 7 character code after rejection)
    BATCH_BYTES = 10


class Retry:
    """Link creation retry bounds."""

    MAX_ATTEMPTS = 5


class Timeout:
    """Default external call timeouts in seconds."""

    STORE = 3.0
    CACHE = 1.0
    DNS = 2.0
    SECRETS = 2.0


class Backend(StrEnum):
    DYNAMODB = 'dynamodb'
    REDIS = 'redis'


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        AWS_SAM_LOCAL = 'AWS_SAM_LOCAL'
        LOG_LEVEL = 'LOG_LEVEL'
        SHORT_URL_BASE = 'SHORT_URL_BASE'

    class Store(StrEnum):
        BACKEND = 'LINK_STORE_BACKEND'
        TABLE_NAME = 'URL_TABLE_NAME'
        REDIS_HOST = 'REDIS_STORE_HOST'
        REDIS_PORT = 'REDIS_STORE_PORT'
        REDIS_DB = 'REDIS_STORE_DB'
        TIMEOUT = 'STORE_TIMEOUT_SECONDS'

    class Cache(StrEnum):
        # Secrets Manager name holding JSON: {"REDIS_ENDPOINT": "...", "password": "..."}
        ENDPOINT_SECRET = 'REDIS_ENDPOINT_NAME'  # noqa: S105
        ENDPOINT = 'REDIS_ENDPOINT'
        PORT = 'REDIS_PORT'
        TIMEOUT = 'CACHE_TIMEOUT_SECONDS'

    class Dns(StrEnum):
        TIMEOUT = 'DNS_TIMEOUT_SECONDS'

    class LocalStack(StrEnum):
        ENDPOINT = 'LOCALSTACK_ENDPOINT'  # usually http://localstack:4566


# Error codes
UNKNOWN_INTERNAL_SERVER_ERROR = 'UNKNOWN_INTERNAL_SERVER_ERROR'
