from typing import Any, Dict, Optional


class MovieStoreError(Exception):
    """Root of every error raised by movie_store.

    ``context`` holds the identifiers that locate a failure: the field or
    attribute, the table, the operation, the store's error code. Subclasses
    pass them as keyword arguments; empty values are left out.

    Attributes:
        message: Human-readable error message
        original_error: Lower-level exception this error was raised from
        context: Identifiers describing where the failure happened
    """

    def __init__(
        self,
        message: str,
        original_error: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None,
        **details: Any
    ):
        self.message = message
        self.original_error = original_error
        self.context: Dict[str, Any] = {}
        self.add_context(**(context or {}), **details)
        super().__init__(message)

    def add_context(self, **details: Any) -> 'MovieStoreError':
        """Attach more identifiers, skipping None and empty values."""
        self.context.update((key, value) for key, value in details.items() if value)
        return self

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{key}={value}" for key, value in self.context.items())
        return f"{self.message} [{details}]"

    def __repr__(self) -> str:
        parts = [repr(self.message)]
        if self.context:
            parts.append(f"context={self.context!r}")
        if self.original_error is not None:
            parts.append(f"original_error={self.original_error!r}")
        return f"{type(self).__name__}({', '.join(parts)})"
