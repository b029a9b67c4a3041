import json
import functools
from datetime import datetime, UTC
from typing import cast
from unittest.mock import MagicMock

import pytest
from pytest import MonkeyPatch

from linkshortener.types import LambdaEvent, LambdaContext
from linkshortener.lambdas.shorten_url import app
from linkshortener.models import LinkRecord
from linkshortener.services import LinkCreator
from linkshortener.dao.base import LinkBaseDAO
from linkshortener.dao.exceptions import DataStoreError
from linkshortener.exceptions import MissingEnvironmentVariableError
from linkshortener.utils.config import Settings
from linkshortener.utils.clients import ClientPool
from linkshortener.utils.validator import PRIVATE_IP


def make_event(body) -> LambdaEvent:
    return cast(LambdaEvent, {
        'resource': '/shorten',
        'httpMethod': 'POST',
        'path': '/shorten',
        'body': body if body is None or isinstance(body, str) else json.dumps(body),
        'requestContext': {'domainName': 'sho.rt', 'stage': 'Prod'},
    })


class TestShortenUrlHandler:

    @pytest.fixture
    def context(self) -> LambdaContext:
        return cast(LambdaContext, {'function_name': 'shorten_url'})

    @pytest.fixture
    def pool(self, store, cache) -> ClientPool:
        _pool = MagicMock(spec=ClientPool)
        _pool.settings = Settings(table_name='links', prefix='testapp:test')
        _pool.store.return_value = store
        _pool.cache.return_value = cache
        return _pool

    @pytest.fixture(autouse=True)
    def setup(self, monkeypatch: MonkeyPatch, context, pool, validator, tasks) -> None:
        # Patch Lambda dependencies
        monkeypatch.setattr(app, 'client_pool', lambda: pool)
        monkeypatch.setattr(app, 'validate_url', lambda url, resolver=None: validator(url))
        monkeypatch.setattr(app, 'TASKS', tasks)

        self.context = context
        self.pool = pool
        self.validator = validator
        self.tasks = tasks

    def test_lambda_handler(self, store, cache) -> None:
        response = app.lambda_handler(make_event({'url': 'https://Example.com/blog/article-123'}), self.context)
        body = json.loads(response['body'])
        assert self.tasks.join(timeout=5)

        assert response['statusCode'] == 201
        assert response['headers']['Content-Type'] == 'application/json'
        assert body['longUrl'] == 'https://example.com/blog/article-123'
        assert body['shortUrl'] == f'https://sho.rt/{body["shortCode"]}'
        assert store.records[body['shortCode']].target == 'https://example.com/blog/article-123'
        assert cache.entries[body['shortCode']][0] == 'https://example.com/blog/article-123'

    def test_lambda_handler_with_configured_base_url(self) -> None:
        self.pool.settings = Settings(table_name='links', short_url_base='https://go.example')

        response = app.lambda_handler(make_event({'url': 'https://example.com/'}), self.context)
        body = json.loads(response['body'])

        assert body['shortUrl'] == f'https://go.example/{body["shortCode"]}'

    def test_lambda_handler_without_cache(self, store) -> None:
        self.pool.cache.return_value = None

        response = app.lambda_handler(make_event({'url': 'https://example.com/'}), self.context)

        assert response['statusCode'] == 201
        assert json.loads(response['body'])['shortCode'] in store.records

    @pytest.mark.parametrize('body', ['{not json', '["https://example.com/"]'])
    def test_lambda_handler_with_invalid_json(self, body) -> None:
        response = app.lambda_handler(make_event(body), self.context)
        body = json.loads(response['body'])

        assert response['statusCode'] == 400
        assert body['errorCode'] == 'INVALID_JSON'

    @pytest.mark.parametrize('body', [None, {}, {'url': ''}, {'target_url': 'https://example.com/'}])
    def test_lambda_handler_with_missing_url(self, body) -> None:
        response = app.lambda_handler(make_event(body), self.context)
        body = json.loads(response['body'])

        assert response['statusCode'] == 400
        assert body['message'] == "Bad Request (missing 'url' in JSON body)"
        assert body['errorCode'] == 'MISSING_URL'

    def test_lambda_handler_with_rejected_url(self, store) -> None:
        self.validator.rejected['http://127.0.0.1/admin'] = PRIVATE_IP

        response = app.lambda_handler(make_event({'url': 'http://127.0.0.1/admin'}), self.context)
        body = json.loads(response['body'])

        assert response['statusCode'] == 400
        assert body['message'] == 'Bad Request (Private or invalid IP address)'
        assert body['errorCode'] == 'URL_VALIDATION_FAILED'
        assert store.records == {}

    def test_lambda_handler_with_exhausted_retries(self, store, monkeypatch: MonkeyPatch) -> None:
        store.records['aZ3kP0q'] = LinkRecord.new('aZ3kP0q', 'https://other.example/', datetime.now(UTC))
        monkeypatch.setattr(app, 'LinkCreator', functools.partial(LinkCreator, generator=lambda length: 'aZ3kP0q'))

        response = app.lambda_handler(make_event({'url': 'https://example.com/'}), self.context)
        body = json.loads(response['body'])

        assert response['statusCode'] == 507
        assert body['errorCode'] == 'SHORTCODE_SPACE_EXHAUSTED'

    def test_lambda_handler_with_store_failure(self) -> None:
        store = MagicMock(spec=LinkBaseDAO)
        store.insert.side_effect = DataStoreError('DynamoDB table links request failed (AccessDeniedException).')
        self.pool.store.return_value = store

        response = app.lambda_handler(make_event({'url': 'https://example.com/'}), self.context)
        body = json.loads(response['body'])

        assert response['statusCode'] == 500
        assert body['errorCode'] == 'LINK_STORE_ERROR'

    def test_lambda_handler_with_unreachable_store(self) -> None:
        self.pool.store.side_effect = DataStoreError("Can't connect to Redis at redis:6379/0.")

        response = app.lambda_handler(make_event({'url': 'https://example.com/'}), self.context)

        assert response['statusCode'] == 500
        assert json.loads(response['body'])['errorCode'] == 'dao:data_store_error'

    def test_lambda_handler_with_missing_configuration(self, monkeypatch: MonkeyPatch) -> None:
        def client_pool():
            raise MissingEnvironmentVariableError("Missing required environment variables: 'URL_TABLE_NAME'")

        monkeypatch.setattr(app, 'client_pool', client_pool)

        response = app.lambda_handler(make_event({'url': 'https://example.com/'}), self.context)

        assert response['statusCode'] == 500
        assert json.loads(response['body'])['errorCode'] == 'config:missing_environment_variable_error'

    @pytest.mark.parametrize('body, error_code', [('{not json', 'INVALID_JSON'), ({}, 'MISSING_URL')])
    def test_lambda_handler_rejects_bad_input_before_building_clients(self, body, error_code, monkeypatch: MonkeyPatch) -> None:
        client_pool = MagicMock(side_effect=MissingEnvironmentVariableError("Missing required environment variables: 'URL_TABLE_NAME'"))
        monkeypatch.setattr(app, 'client_pool', client_pool)

        response = app.lambda_handler(make_event(body), self.context)

        assert response['statusCode'] == 400
        assert json.loads(response['body'])['errorCode'] == error_code
        client_pool.assert_not_called()

    def test_lambda_handler_with_unexpected_error(self) -> None:
        self.pool.resolver.side_effect = RuntimeError('boom')

        response = app.lambda_handler(make_event({'url': 'https://example.com/'}), self.context)

        assert response['statusCode'] == 500
        assert json.loads(response['body'])['errorCode'] == 'UNKNOWN_INTERNAL_SERVER_ERROR'
