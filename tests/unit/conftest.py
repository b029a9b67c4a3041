import threading

import pytest
from pytest import MonkeyPatch

from linkshortener.constants import ENV
from linkshortener.models import LinkRecord, ValidationResult
from linkshortener.dao.base import LinkBaseDAO, LinkCacheBaseDAO
from linkshortener.dao.exceptions import ShortURLAlreadyExistsError, ShortURLNotFoundError
from linkshortener.utils.tasks import BackgroundTasks


@pytest.fixture(autouse=True)
def _env(monkeypatch: MonkeyPatch) -> None:
    """Run every test as a deployed (non-local) function with a clean environment."""
    monkeypatch.setenv(ENV.App.APP_ENV, 'test')
    monkeypatch.setenv(ENV.App.APP_NAME, 'testapp')
    for name in (
        ENV.App.AWS_SAM_LOCAL,
        ENV.App.SHORT_URL_BASE,
        ENV.App.LOG_LEVEL,
        *ENV.Store,
        *ENV.Cache,
        *ENV.Dns,
        *ENV.LocalStack,
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def app_prefix() -> str:
    return 'testapp:test'


# -------------------------------
# In-memory collaborators
# -------------------------------


class InMemoryLinkStore(LinkBaseDAO):
    """Dict-backed durable store honoring create-if-absent."""

    def __init__(self):
        self.records: dict[str, LinkRecord] = {}
        self.inserts: list[str] = []
        self._lock = threading.Lock()

    def insert(self, record, **kwargs):
        with self._lock:
            self.inserts.append(record.shortcode)
            if record.shortcode in self.records:
                raise ShortURLAlreadyExistsError(f"Short URL with code '{record.shortcode}' already exists.")
            self.records[record.shortcode] = record
        return self

    def get(self, shortcode, **kwargs):
        try:
            return self.records[shortcode]
        except KeyError:
            raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' not found.") from None

    def delete(self, shortcode, **kwargs):
        with self._lock:
            self.records.pop(shortcode, None)

    def increment_clicks(self, shortcode, **kwargs):
        with self._lock:
            record = self.get(shortcode)
            self.records[shortcode] = LinkRecord(
                shortcode=record.shortcode,
                target=record.target,
                created_at=record.created_at,
                expires_at=record.expires_at,
                click_count=record.click_count + 1,
            )


class InMemoryLinkCache(LinkCacheBaseDAO):
    def __init__(self):
        self.entries: dict[str, tuple[str, int]] = {}

    def get(self, shortcode):
        entry = self.entries.get(shortcode)
        return entry[0] if entry else None

    def set(self, shortcode, target, ttl):
        self.entries[shortcode] = (target, ttl)

    def delete(self, shortcode):
        self.entries.pop(shortcode, None)


class SwitchableValidator:
    """Validator whose verdict per URL can be flipped (e.g. DNS rebinding)."""

    def __init__(self):
        self.rejected: dict[str, str] = {}
        self.calls: list[str] = []

    def __call__(self, url):
        self.calls.append(url)
        if url in self.rejected:
            return ValidationResult(valid=False, reason=self.rejected[url])
        return ValidationResult(valid=True)


class SequenceGenerator:
    """Short code generator replaying a fixed sequence of codes."""

    def __init__(self, codes):
        self.codes = list(codes)
        self.calls = 0

    def __call__(self, length):
        code = self.codes[self.calls]
        self.calls += 1
        return code


@pytest.fixture
def store() -> InMemoryLinkStore:
    return InMemoryLinkStore()


@pytest.fixture
def cache() -> InMemoryLinkCache:
    return InMemoryLinkCache()


@pytest.fixture
def validator() -> SwitchableValidator:
    return SwitchableValidator()


@pytest.fixture
def tasks():
    _tasks = BackgroundTasks(max_workers=2)
    yield _tasks
    _tasks.shutdown()


@pytest.fixture
def sequence_generator():
    return SequenceGenerator
