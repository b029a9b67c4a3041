"""API Gateway Lambda proxy response builders shared by the handlers."""

import json

from linkshortener.constants import CacheTTL
from linkshortener.types import LambdaResponse


JSON_HEADERS = {'Content-Type': 'application/json'}


def _json_response(status_code: int, body: dict) -> LambdaResponse:
    return {
        'statusCode': status_code,
        'headers': dict(JSON_HEADERS),
        'body': json.dumps(body),
    }


def _error_body(base: str, message: str | None, error_code: str | None) -> dict:
    body = {'message': base if not message else f'{base} ({message})'}
    if error_code:
        body['errorCode'] = error_code
    return body


def response_201(*, shortcode: str, long_url: str, short_url: str) -> LambdaResponse:
    return _json_response(201, {'shortCode': shortcode, 'longUrl': long_url, 'shortUrl': short_url})


def response_302(*, location: str, max_age: int = CacheTTL.HOT) -> LambdaResponse:
    return {
        'statusCode': 302,
        'headers': {
            'Location': location,
            'Cache-Control': f'max-age={int(max_age)}, public',
        },
        'body': json.dumps({}),  # no body needed for redirects
    }


def response_400(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    return _json_response(400, _error_body('Bad Request', message, error_code))


def response_404(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    return _json_response(404, _error_body('Not Found', message, error_code))


def response_500(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    return _json_response(500, _error_body('Internal Server Error', message, error_code))


def response_507(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    return _json_response(507, _error_body('Insufficient Storage', message, error_code))
