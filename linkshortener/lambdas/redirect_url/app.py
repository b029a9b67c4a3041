import logging
import functools
from typing import Any

from linkshortener.exceptions import ConfigurationError
from linkshortener.dao.exceptions import DataStoreError
from linkshortener.services import RedirectResolver
from linkshortener.services.exceptions import InvalidInputError, LinkInvalidatedError, LinkNotFoundError, TransientError
from linkshortener.utils import get_short_url, guarantee_500_response, load_settings
from linkshortener.utils.clients import ClientPool
from linkshortener.utils.tasks import BackgroundTasks
from linkshortener.utils.validator import validate_url
from linkshortener.lambdas.responses import response_302, response_400, response_404, response_500
from linkshortener.lambdas.redirect_url.constants import (
    MISSING_SHORTCODE,
    SHORT_URL_NOT_FOUND,
    LINK_INVALIDATED,
    LINK_STORE_ERROR,
    CONFIGURATION_ERROR,
    REDIRECT_SUCCESS,
)


logger = logging.getLogger(__name__)

TASKS = BackgroundTasks()


@functools.cache
def client_pool() -> ClientPool:
    return ClientPool(load_settings())


def _shortcode(event: dict) -> str | None:
    path_parameters = event.get('pathParameters') or {}
    return path_parameters.get('shortCode') or path_parameters.get('shortcode')


@guarantee_500_response
def lambda_handler(event: dict, context: Any) -> dict:
    """Handle incoming API Gateway requests to redirect URLs

    This Lambda handler follows this procedure to redirect URLs:
    - Step 1: Extract shortcode from request path
    - Step 2: Get the process-wide store, cache and DNS clients
    - Step 3: Resolve the shortcode (cache, then database with re-validation)
    - Step 4: Redirect client to target URL

    HTTP responses:
        302: Successful redirect
            headers:
                Location: target URL destination
                Cache-Control: max-age=3600, public
        400: Bad client request
            message: missing shortcode, or the stored URL is no longer valid
        404: Not found
            message: unknown shortcode
        500: Internal server error
            message: server experienced an internal error

    Args:
        event (dict):
            API Gateway event payload containing the shortCode path parameter.
        context (LambdaContext):
            AWS Lambda runtime context object (not used directly).

    Returns:
        dict:
            API Gateway-compatible response including statusCode, headers, and body.

    Example:
        >>> event = {'pathParameters': {'shortCode': 'Gh71TCN'}}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        302
        >>> response['headers']['Location']
        'https://example.com/my-page'
    """
    # 1- Extract shortcode from request's path
    shortcode = _shortcode(event)
    if not shortcode:
        logger.info(
            'Missing "shortCode" in path. Responding with 400.',
            extra={'event': MISSING_SHORTCODE},
        )
        return response_400(message="missing 'shortCode' in path", error_code=MISSING_SHORTCODE)

    # 2- Get process-wide clients
    try:
        pool = client_pool()
        resolver = RedirectResolver(
            store=pool.store(),
            cache=pool.cache(),
            tasks=TASKS,
            validator=functools.partial(validate_url, resolver=pool.resolver()),
        )
    except ConfigurationError as e:
        logger.exception('Invalid function configuration. Responding with 500.', extra={'event': CONFIGURATION_ERROR})
        return response_500(error_code=e.error_code)
    except DataStoreError as e:
        logger.exception('Link store unavailable. Responding with 500.', extra={'event': LINK_STORE_ERROR})
        return response_500(message='data store unavailable', error_code=e.error_code)

    logger.debug('Client requested short URL %s.', get_short_url(shortcode, event, base=pool.settings.short_url_base))

    # 3- Resolve shortcode to target URL
    try:
        target_url = resolver.resolve(shortcode)
    except InvalidInputError:  # pragma: no cover
        return response_400(message="missing 'shortCode' in path", error_code=MISSING_SHORTCODE)
    except LinkNotFoundError:
        logger.info(
            'Short URL record not found. Responding with 404.',
            extra={'shortcode': shortcode, 'event': SHORT_URL_NOT_FOUND},
        )
        return response_404(message=f"short code '{shortcode}' doesn't exist", error_code=SHORT_URL_NOT_FOUND)
    except LinkInvalidatedError as e:
        logger.info(
            'Stored URL is no longer valid. Responding with 400.',
            extra={'shortcode': shortcode, 'event': LINK_INVALIDATED, 'reason': e.reason},
        )
        return response_400(message=f'The original URL is no longer valid: {e.reason}', error_code=LINK_INVALIDATED)
    except TransientError:
        logger.exception(
            'Link store failed while resolving. Responding with 500.',
            extra={'shortcode': shortcode, 'event': LINK_STORE_ERROR},
        )
        return response_500(error_code=LINK_STORE_ERROR)

    # 4- Redirect client to target URL
    logger.info(
        'Redirecting client to target URL. Responding with 302.',
        extra={'shortcode': shortcode, 'event': REDIRECT_SUCCESS},
    )
    return response_302(location=target_url)
