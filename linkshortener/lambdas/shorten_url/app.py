import json
import logging
import functools
from typing import Any

from linkshortener.exceptions import ConfigurationError
from linkshortener.dao.exceptions import DataStoreError
from linkshortener.services import LinkCreator
from linkshortener.services.exceptions import ExhaustedRetriesError, StoreError, ValidationFailedError
from linkshortener.utils import get_short_url, guarantee_500_response, load_settings
from linkshortener.utils.clients import ClientPool
from linkshortener.utils.tasks import BackgroundTasks
from linkshortener.utils.validator import validate_url
from linkshortener.lambdas.responses import response_201, response_400, response_500, response_507
from linkshortener.lambdas.shorten_url.constants import (
    INVALID_JSON,
    MISSING_URL,
    URL_VALIDATION_FAILED,
    SHORTCODE_SPACE_EXHAUSTED,
    LINK_STORE_ERROR,
    CONFIGURATION_ERROR,
    LINK_CREATED,
)


logger = logging.getLogger(__name__)

# Outlive a single invocation in a warm container
TASKS = BackgroundTasks()


@functools.cache
def client_pool() -> ClientPool:
    return ClientPool(load_settings())


@guarantee_500_response
def lambda_handler(event: dict, context: Any) -> dict:
    """Handle incoming API Gateway requests to shorten URLs

    This Lambda handler follows this procedure to shorten URLs:
    - Step 1: Extract the target URL from the request body
    - Step 2: Get the process-wide store, cache and DNS clients
    - Step 3: Validate the URL and persist it under a fresh short code
    - Step 4: Respond to the client with 201 created

    HTTP responses:
        201: Short link created
            shortCode: newly generated shortcode
            longUrl: canonical form of the provided URL
            shortUrl: newly generated short url
        400: Bad client request
            message: invalid JSON, missing 'url' or the validation failure reason
        500: Internal server error
            message: configuration or data store failure
        507: Insufficient storage
            message: no free short code found within the retry limit

    Args:
        event (dict):
            API Gateway event payload in Lambda Proxy format.
        context (Any):
            AWS Lambda context object (not used directly).

    Returns:
        dict:
            API Gateway-compatible response including statusCode, headers, and body.

    Example:
        >>> event = {'body': '{"url": "https://example.com"}'}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        201
        >>> json.loads(response['body'])['shortUrl']
        'https://sho.rt/aZ3kP0q'
    """
    # 1- Extract target URL from request body
    try:
        request_body = json.loads(event.get('body') or '{}')
    except json.JSONDecodeError:
        logger.info('Invalid JSON body. Responding with 400.', extra={'event': INVALID_JSON})
        return response_400(message='invalid JSON body', error_code=INVALID_JSON)
    if not isinstance(request_body, dict):
        logger.info('JSON body is not an object. Responding with 400.', extra={'event': INVALID_JSON})
        return response_400(message='JSON body must be an object', error_code=INVALID_JSON)

    url = request_body.get('url')
    if not isinstance(url, str) or not url.strip():
        logger.info('Missing "url" in body. Responding with 400.', extra={'event': MISSING_URL})
        return response_400(message="missing 'url' in JSON body", error_code=MISSING_URL)

    # 2- Get process-wide clients
    try:
        pool = client_pool()
        creator = LinkCreator(
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

    # 3- Validate and persist the link
    try:
        link = creator.create(url)
    except ValidationFailedError as e:
        logger.info(
            'URL failed validation. Responding with 400.',
            extra={'event': URL_VALIDATION_FAILED, 'reason': e.reason},
        )
        return response_400(message=e.reason, error_code=URL_VALIDATION_FAILED)
    except ExhaustedRetriesError as e:
        logger.error('Short code space exhausted. Responding with 507.', extra={'event': SHORTCODE_SPACE_EXHAUSTED})
        return response_507(message=str(e), error_code=SHORTCODE_SPACE_EXHAUSTED)
    except StoreError:
        logger.exception('Link store write failed. Responding with 500.', extra={'event': LINK_STORE_ERROR})
        return response_500(error_code=LINK_STORE_ERROR)

    # 4- Respond with the new short URL
    short_url = get_short_url(link.shortcode, event, base=pool.settings.short_url_base)
    logger.info(
        'Short link created. Responding with 201.',
        extra={'shortcode': link.shortcode, 'event': LINK_CREATED},
    )
    return response_201(shortcode=link.shortcode, long_url=link.target, short_url=short_url)
