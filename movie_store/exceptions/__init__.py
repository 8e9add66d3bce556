# Base exception class
from .base import MovieStoreError

from .domain_exceptions import (
    BuildError,
    DecodeError,
    ValidationError,
    StoreError,
    ConflictError,
    ConnectionError,
    NotFoundError,
    RetryableError,
)

__all__ = [
    # Base exception
    "MovieStoreError",

    # Local errors
    "BuildError",
    "DecodeError",
    "ValidationError",

    # Store errors (alphabetically ordered)
    "ConflictError",
    "ConnectionError",
    "NotFoundError",
    "RetryableError",
    "StoreError",
]
