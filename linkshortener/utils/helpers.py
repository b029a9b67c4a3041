"""Lambda-side helpers: public URL building and handler decorators

    >>> event = {'requestContext': {'domainName': 'abc123.execute-api.us-east-1.amazonaws.com', 'stage': 'Prod'}}
    >>> get_short_url('aZ3kP0q', event)
    'https://abc123.execute-api.us-east-1.amazonaws.com/Prod/aZ3kP0q'
"""

import os
import json
import logging
import functools
from collections.abc import Callable

from linkshortener.types import LambdaEvent, LambdaContext, LambdaResponse
from linkshortener.constants import UNKNOWN_INTERNAL_SERVER_ERROR
from linkshortener.exceptions import MissingEnvironmentVariableError
from linkshortener.utils.runtime import running_locally


logger = logging.getLogger(__name__)

LOCAL_HOSTS = ('localhost', '127.0.0.1')
LOCAL_BASE_URL = 'http://localhost:3000'


def base_url(event: LambdaEvent) -> str:
    """Public origin the request came in on.

    The default execute-api domain needs the stage in the path; a custom
    domain maps the stage itself. Events without a domain (SAM CLI, tests)
    get the local API address.
    """
    request_context = event.get('requestContext') or {}
    domain = request_context.get('domainName', '')

    if not domain:
        return LOCAL_BASE_URL
    if domain.startswith(LOCAL_HOSTS):
        return f'http://{domain}'
    if 'execute-api' in domain:
        return f'https://{domain}/{request_context.get("stage", "")}'
    return f'https://{domain}'


def get_short_url(shortcode: str, event: LambdaEvent, base: str | None = None) -> str:
    """Full short URL for `shortcode`; `base` (SHORT_URL_BASE) wins over the event's origin"""
    return f'{(base or base_url(event)).rstrip("/")}/{shortcode}'


def require_environment(*names: str) -> Callable:
    """Fail fast with MissingEnvironmentVariableError if any of `names` is unset or empty.

        >>> @require_environment('LINK_TABLE_NAME')
        ... def load(): ...
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            if missing := [name for name in names if not os.environ.get(name)]:
                quoted = ', '.join(repr(name) for name in missing)
                raise MissingEnvironmentVariableError(f'Missing required environment variables: {quoted}')
            return func(*args, **kwargs)

        return wrapper

    return decorator


def guarantee_500_response(handler: Callable[[LambdaEvent, LambdaContext], LambdaResponse]) -> Callable:
    """Last-resort net for a Lambda handler: log the traceback, answer 500.

    Under SAM local the exception propagates instead, so it shows up in the terminal.
    """

    @functools.wraps(handler)
    def wrapper(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
        try:
            return handler(event, context)
        except Exception:
            if running_locally():
                raise
            logger.exception(
                'Unhandled exception in lambda handler. Responding with 500.',
                extra={'function': getattr(context, 'function_name', None)},
            )
            body = {'message': 'Internal Server Error', 'errorCode': UNKNOWN_INTERNAL_SERVER_ERROR}
            return {
                'statusCode': 500,
                'headers': {'Content-Type': 'application/json'},
                'body': json.dumps(body),
            }

    return wrapper
