from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError


class PaginatorError(Exception):
    """Base exception for all pagealchemy errors."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class StoreError(PaginatorError):
    """Raised when the underlying SQLAlchemy statement fails."""

    def __init__(
        self, message: str, operation: str | None = None, original_error: Exception | None = None
    ) -> None:
        super().__init__(message, original_error)
        self.operation = operation


class RelationNotFoundError(PaginatorError):
    """Raised when a relation cannot be resolved on the owner's mapper."""

    def __init__(
        self, relation: str, model_name: str, original_error: Exception | None = None
    ) -> None:
        super().__init__(f"Relation '{relation}' not found on {model_name}", original_error)
        self.relation = relation
        self.model_name = model_name


class CountError(PaginatorError):
    """Raised when the total count sub-operation fails."""

    def __init__(
        self, message: str = "Counting records failed", original_error: Exception | None = None
    ) -> None:
        super().__init__(message, original_error)


class FetchError(PaginatorError):
    """Raised when the bounded fetch sub-operation fails."""

    def __init__(
        self, message: str = "Fetching records failed", original_error: Exception | None = None
    ) -> None:
        super().__init__(message, original_error)


@contextmanager
def handle_store_errors(operation: str | None = None) -> Generator[None, None, None]:
    """
    Context manager that catches sqlalchemy.exc.SQLAlchemyError
    and raises a StoreError carrying the failed operation.

    Args:
        operation: Optional operation name for better error messages

    Usage:
        with handle_store_errors(operation="count"):
            session.execute(...)
    """
    try:
        yield
    except SQLAlchemyError as e:
        label = operation or "statement"
        raise StoreError(
            message=f"Database error during {label}: {e}", operation=operation, original_error=e
        ) from e
