"""
Domain-Specific Exceptions for the Movie Store

Organized by where the failure originates:
1. Expression building and record decoding (local to the library)
2. Record validation before anything is sent to the store
3. Store failures surfaced by the DynamoDB client
"""

from typing import Any, Dict, Optional

from .base import MovieStoreError


# =============================================================================
# Expression and Codec Errors
# =============================================================================

class BuildError(MovieStoreError):
    """Raised when a filter, projection or update cannot be turned into a QuerySpec.

    Used for:
    - Predicates or projections naming a field outside the Movies schema
    - Literals that have no attribute value representation
    - Updates that try to assign a key attribute
    - Failures raised by boto3's condition expression builder
    """

    def __init__(self, message: str, field: Optional[str] = None, original_error: Optional[Exception] = None):
        self.field = field
        super().__init__(message, original_error, field=field)


class DecodeError(MovieStoreError):
    """Raised when an attribute map cannot be decoded into a Movie.

    Used for:
    - Missing Year or Title
    - An attribute tagged with the wrong type (e.g. Year stored as a string)
    - Number tokens that are not valid decimals
    """

    def __init__(self, message: str, attribute: Optional[str] = None, original_error: Optional[Exception] = None):
        self.attribute = attribute
        super().__init__(message, original_error, attribute=attribute)


# =============================================================================
# Data Validation Errors
# =============================================================================

class ValidationError(MovieStoreError):
    """Raised when movie data is rejected before reaching the store.

    Used for:
    - Pydantic model validation failures
    - Seed files that cannot be read or parsed
    - Empty titles on write
    """

    def __init__(self, message: str, errors: Optional[Dict[str, Any]] = None, original_error: Optional[Exception] = None):
        self.errors = errors or {}
        super().__init__(message, original_error, validation_errors=self.errors)


# =============================================================================
# Store Errors
# =============================================================================

class StoreError(MovieStoreError):
    """Raised when the DynamoDB client reports a failure.

    The error code reported by the store is kept as-is in ``error_code`` so
    callers can make their own decisions about it.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        operation: Optional[str] = None,
        table_name: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.error_code = error_code
        self.operation = operation
        self.table_name = table_name
        super().__init__(
            message,
            original_error,
            error_code=error_code,
            operation=operation,
            table_name=table_name,
        )


class ConnectionError(StoreError):
    """Raised when the store cannot be reached or refuses the credentials.

    Used for:
    - Client construction failures
    - Authentication/authorization failures
    - Expired tokens and invalid signatures
    """


class ConflictError(StoreError):
    """Raised when a conditional write fails or a resource is busy.

    Used for:
    - ConditionalCheckFailedException
    - TransactionConflictException
    - ResourceInUseException (e.g. creating a table that already exists)
    """

    def __init__(self, message: str, resource_id: Optional[str] = None, **kwargs: Any):
        self.resource_id = resource_id
        super().__init__(message, **kwargs)
        self.add_context(resource_id=resource_id)


class NotFoundError(StoreError):
    """Raised when the table (or another store resource) does not exist."""


class RetryableError(StoreError):
    """Raised for throttling and transient server failures.

    Nothing in this library retries; the error only tells the caller that a
    retry is reasonable.
    """
