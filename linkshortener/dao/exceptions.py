"""Exceptions related to Data Access Objects (DAO) operations.

Classes:
    DAOError:
        Generic base class for DAO-related exceptions.

    ShortURLNotFoundError:
        Raised when a LinkRecord is not found in the data store.

    ShortURLAlreadyExistsError:
        Raised when the conditional create-if-absent write finds an existing record.

    DataStoreError:
        Raised when a data store or cache cannot be reached (connection issues, timeouts, etc.).

Example:
    >>> from linkshortener.dao.exceptions import ShortURLNotFoundError
    >>> raise ShortURLNotFoundError("Short URL with code 'abc1234' not found.")
    Traceback (most recent call last):
        ...
    linkshortener.dao.exceptions.ShortURLNotFoundError: Short URL with code 'abc1234' not found.
"""

from linkshortener.exceptions import LinkShortenerError


class DAOError(LinkShortenerError):
    """Generic base class for DAO-related exceptions."""

    error_code = 'dao:dao_error'


class ShortURLNotFoundError(DAOError):
    """Raised when a LinkRecord is not found in the data store."""

    error_code = 'dao:short_url_not_found_error'


class ShortURLAlreadyExistsError(DAOError):
    """Raised when inserting a LinkRecord whose short code already exists in the data store."""

    error_code = 'dao:short_url_already_exists_error'


class DataStoreError(DAOError):
    """Raised when the data store encounters an error.

    Examples include connection issues, timeouts, throttling and permission failures.
    """

    error_code = 'dao:data_store_error'
