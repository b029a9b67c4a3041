import functools
from typing import TypeVar, Any
from collections.abc import Callable

from botocore.exceptions import BotoCoreError, ClientError

from linkshortener.dao.exceptions import DataStoreError


__all__ = ['handle_dynamodb_error', 'error_code']

F = TypeVar('F', bound=Callable[..., Any])

CONDITIONAL_CHECK_FAILED = 'ConditionalCheckFailedException'


def error_code(error: ClientError) -> str | None:
    """Return the AWS error code of a botocore ClientError."""
    return error.response.get('Error', {}).get('Code')


def handle_dynamodb_error[F](method: F) -> F:
    """Wrap DynamoDB-interacting DAO methods to translate AWS failures

    Methods handle the ClientErrors they expect (conditional check failures)
    themselves; whatever escapes is a store fault. botocore timeouts
    (ConnectTimeoutError, ReadTimeoutError) are BotoCoreErrors.

    Returns:
        Callable[..., Any]:
            Wrapped method which raises DataStoreError on AWS API or connectivity failures.
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except ClientError as e:
            raise DataStoreError(f'DynamoDB table {self.table_name} request failed ({error_code(e)}).') from e
        except BotoCoreError as e:
            raise DataStoreError(f"Can't reach DynamoDB table {self.table_name} ({e.__class__.__name__}).") from e

    return wrapper
