"""Abstract base class for link record data access objects (DAOs).

This class establishes a consistent contract for all durable link stores,
regardless of the underlying storage mechanism (e.g., DynamoDB, Redis).

Responsibilities:
    - Provide an atomic create-if-absent primitive for new LinkRecord objects.
    - Standardize error handling across multiple data store implementations.
    - Separate legitimate absence (ShortURLNotFoundError) from store faults (DataStoreError).

Example:
    Typical usage with a datastore-specific implementation:

        >>> from datetime import datetime, UTC
        >>> from linkshortener.models import LinkRecord
        >>> from linkshortener.dao.dynamodb import LinkDynamoDBDAO

        >>> dao = LinkDynamoDBDAO(table=table)
        >>> record = LinkRecord.new('a1B2c3D', 'https://example.com/blog', datetime.now(UTC))
        >>> dao.insert(record)

        >>> dao.get('a1B2c3D').target
        'https://example.com/blog'
"""

from abc import ABC, abstractmethod

from linkshortener.models import LinkRecord


class LinkBaseDAO(ABC):
    """Interface for durable link record DAOs.

    Methods:
        insert(record: LinkRecord, **kwargs) -> LinkBaseDAO:
            Atomically insert a record only if its short code is absent.
            Raises ShortURLAlreadyExistsError if the short code already exists.
            Raises DataStoreError on connection or write failure.

        get(shortcode: str, **kwargs) -> LinkRecord:
            Retrieve a record by short code.
            Raises ShortURLNotFoundError if the entry does not exist.
            Raises DataStoreError on connection or read failure.

        delete(shortcode: str, **kwargs) -> None:
            Remove a record. Deleting a missing record is not an error.
            Raises DataStoreError on connection or write failure.

        increment_clicks(shortcode: str, **kwargs) -> None:
            Increment the record's click counter.
            Raises ShortURLNotFoundError if the entry does not exist.
            Raises DataStoreError on connection or write failure.

    NOTE:
        - Records expire through the store's own TTL mechanism (`expires_at`).
        - Uniqueness is enforced by the store's conditional write only.
    """

    @abstractmethod
    def insert(self, record: LinkRecord, **kwargs) -> 'LinkBaseDAO':
        """Insert a new LinkRecord only if no record with its short code exists.

        Raises:
            ShortURLAlreadyExistsError:
                If a record with the same short code already exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def get(self, shortcode: str, **kwargs) -> LinkRecord:
        """Retrieve a LinkRecord from the data store by its short code.

        Raises:
            ShortURLNotFoundError:
                If no record with the given short code exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def delete(self, shortcode: str, **kwargs) -> None:
        """Delete a LinkRecord by its short code.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def increment_clicks(self, shortcode: str, **kwargs) -> None:
        """Increment the click counter of a LinkRecord.

        Raises:
            ShortURLNotFoundError:
                If no record with the given short code exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass
