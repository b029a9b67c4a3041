"""Outcomes of the create and resolve operations that are not a success.

Client-correctable:
    InvalidInputError        - missing/empty url or short code (400)
    ValidationFailedError    - url rejected by the SSRF guard (400)
    LinkInvalidatedError     - stored url no longer passes validation, record deleted (400)
    LinkNotFoundError        - unknown short code (404)

Infrastructure:
    ExhaustedRetriesError    - every candidate code collided (507, capacity condition)
    StoreError               - durable write failed on the create path (500)
    TransientError           - durable read/delete failed on the resolve path (500)
"""

from linkshortener.exceptions import LinkShortenerError


class ServiceError(LinkShortenerError):
    """Base class for create/resolve failures."""

    error_code = 'service:service_error'


class InvalidInputError(ServiceError):
    error_code = 'service:invalid_input_error'


class ValidationFailedError(ServiceError):
    error_code = 'service:validation_failed_error'

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class ExhaustedRetriesError(ServiceError):
    error_code = 'service:exhausted_retries_error'

    def __init__(self, attempts: int):
        super().__init__(f'Failed to generate a unique short code after {attempts} attempts.')
        self.attempts = attempts


class StoreError(ServiceError):
    error_code = 'service:store_error'


class LinkNotFoundError(ServiceError):
    error_code = 'service:link_not_found_error'


class LinkInvalidatedError(ServiceError):
    error_code = 'service:link_invalidated_error'

    def __init__(self, shortcode: str, reason: str):
        super().__init__(f"Link '{shortcode}' no longer points to a valid URL: {reason}")
        self.shortcode = shortcode
        self.reason = reason


class TransientError(ServiceError):
    error_code = 'service:transient_error'
