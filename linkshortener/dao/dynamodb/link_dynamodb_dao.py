"""Data Access Object (DAO) implementation for managing link records in DynamoDB

This is the default durable backend. The table is keyed by `shortCode` and
has DynamoDB TTL enabled on the `expiration` attribute (epoch seconds).

Item layout:
    {
        "shortCode": "aZ3kP0q",
        "originalUrl": "https://example.com/page",
        "createdAt": "2025-10-15T12:00:00+00:00",
        "expiration": 1763208000,
        "click_count": 0
    }

Example:
    >>> from datetime import datetime, UTC
    >>> from linkshortener.models import LinkRecord
    >>> from linkshortener.dao.dynamodb import LinkDynamoDBDAO

    >>> dao = LinkDynamoDBDAO(table_name='links')
    >>> dao.insert(LinkRecord.new('aZ3kP0q', 'https://example.com/page', datetime.now(UTC)))
    <LinkDynamoDBDAO>
"""

import threading
from datetime import datetime, UTC

import boto3
from beartype import beartype
from botocore.config import Config
from botocore.exceptions import ClientError

from linkshortener.constants import Timeout
from linkshortener.types import DynamoDBItem
from linkshortener.models import LinkRecord
from linkshortener.dao.base import LinkBaseDAO
from linkshortener.dao.dynamodb.helpers import handle_dynamodb_error, error_code, CONDITIONAL_CHECK_FAILED
from linkshortener.dao.exceptions import DataStoreError, ShortURLAlreadyExistsError, ShortURLNotFoundError


class LinkDynamoDBDAO(LinkBaseDAO):
    """DynamoDB-based Data Access Object (DAO) for managing link records

    boto3 resources must not be shared between threads, and click counts are
    incremented from background worker threads. Each thread therefore gets
    its own Session and Table resource, built on first use.

    Attributes:
        table_name (str):
            Name of the table holding the link records.
        table (boto3 DynamoDB Table resource):
            The calling thread's Table resource.

    Args:
        table_name (str | None):
            Name of the table. Ignored if `table` is given.
        table (Any | None):
            Pre-initialized Table resource used by every thread (tests only).
        timeout (float):
            botocore connect/read timeout in seconds.
        endpoint_url (str | None):
            Custom DynamoDB endpoint (LocalStack).
    """

    def __init__(
        self,
        table_name: str | None = None,
        table=None,
        timeout: float = Timeout.STORE,
        endpoint_url: str | None = None,
    ):
        if table is None and not table_name:
            raise ValueError('Either a DynamoDB table resource or a table name is required.')

        self.table_name = table.name if table is not None else table_name
        self._shared_table = table
        self._config = Config(connect_timeout=timeout, read_timeout=timeout, retries={'max_attempts': 2})
        self._endpoint_url = endpoint_url
        self._local = threading.local()

    @property
    def table(self):
        if self._shared_table is not None:
            return self._shared_table

        table = getattr(self._local, 'table', None)
        if table is None:
            session = boto3.session.Session()
            resource = session.resource('dynamodb', config=self._config, endpoint_url=self._endpoint_url)
            table = self._local.table = resource.Table(self.table_name)
        return table

    @handle_dynamodb_error
    @beartype
    def insert(self, record: LinkRecord, **kwargs) -> 'LinkDynamoDBDAO':
        """Conditionally put a link record (only if `shortCode` is absent)

        Raises:
            ShortURLAlreadyExistsError:
                If the conditional check fails (short code already taken).
            DataStoreError:
                On any other DynamoDB failure.
        """
        try:
            self.table.put_item(
                Item=self._to_item(record),
                ConditionExpression='attribute_not_exists(shortCode)',
            )
        except ClientError as e:
            if error_code(e) == CONDITIONAL_CHECK_FAILED:
                raise ShortURLAlreadyExistsError(f"Short URL with code '{record.shortcode}' already exists.") from e
            raise
        return self

    @handle_dynamodb_error
    @beartype
    def get(self, shortcode: str, **kwargs) -> LinkRecord:
        response = self.table.get_item(Key={'shortCode': shortcode})
        item = response.get('Item')
        if item is None:
            raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' not found.")
        return self._from_item(item)

    @handle_dynamodb_error
    @beartype
    def delete(self, shortcode: str, **kwargs) -> None:
        self.table.delete_item(Key={'shortCode': shortcode})

    @handle_dynamodb_error
    @beartype
    def increment_clicks(self, shortcode: str, **kwargs) -> None:
        """Atomically add 1 to `click_count`

        The `attribute_exists` condition prevents ADD from resurrecting a
        record that was deleted or expired in the meantime.

        Raises:
            ShortURLNotFoundError:
                If the record doesn't exist.
            DataStoreError:
                On any other DynamoDB failure.
        """
        try:
            self.table.update_item(
                Key={'shortCode': shortcode},
                UpdateExpression='ADD #cc :inc',
                ConditionExpression='attribute_exists(shortCode)',
                ExpressionAttributeNames={'#cc': 'click_count'},
                ExpressionAttributeValues={':inc': 1},
            )
        except ClientError as e:
            if error_code(e) == CONDITIONAL_CHECK_FAILED:
                raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' not found.") from e
            raise

    @staticmethod
    def _to_item(record: LinkRecord) -> DynamoDBItem:
        return {
            'shortCode': record.shortcode,
            'originalUrl': record.target,
            'createdAt': record.created_at.isoformat(),
            'expiration': int(record.expires_at.timestamp()),
            'click_count': record.click_count,
        }

    @staticmethod
    def _from_item(item: DynamoDBItem) -> LinkRecord:
        try:
            return LinkRecord(
                shortcode=item['shortCode'],
                target=item['originalUrl'],
                created_at=datetime.fromisoformat(item['createdAt']),
                # boto3 deserializes numbers as Decimal
                expires_at=datetime.fromtimestamp(int(item['expiration']), tz=UTC),
                click_count=int(item.get('click_count', 0)),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise DataStoreError(f'Malformed link record item: {item!r}') from e
