"""
Integration tests for error handling and edge cases against SQLite.

These tests verify that database failures surface as the documented
exceptions, and which failure wins when both sub-operations fail.
"""

import pytest

from pagealchemy import (
    CountError,
    FetchError,
    RelationNotFoundError,
    SQLAlchemyStore,
    StoreError,
    paginate,
    paginate_related,
    with_order,
)
from tests.helpers.models import Author, Book, Draft


@pytest.mark.integration
class TestErrorHandling:
    """Test error handling in various scenarios."""

    def test_missing_table_reports_count_failure(self, store):
        """Test that a missing table fails both queries and the count wins."""
        with pytest.raises(CountError) as exc_info:
            paginate(store, Draft)

        assert isinstance(exc_info.value.original_error, StoreError)
        assert exc_info.value.original_error.operation == "count"

    def test_invalid_order_clause_reports_fetch_failure(self, store, author_with_books):
        """Test that a broken sort clause only breaks the fetch."""
        books = ["untouched"]

        with pytest.raises(FetchError) as exc_info:
            paginate(store, Book, with_order("no_such_column DESC"), into=books)

        assert isinstance(exc_info.value.original_error, StoreError)
        assert exc_info.value.original_error.operation == "fetch"
        assert books == ["untouched"]

    def test_invalid_order_clause_on_related_fetch(self, store, author_with_books):
        """Test a broken sort clause on a related fetch."""
        with pytest.raises(FetchError) as exc_info:
            paginate_related(store, author_with_books, "books", with_order("nope"))

        assert exc_info.value.original_error.operation == "related_fetch"

    def test_unknown_relation(self, store, author_with_books):
        """Test that an unknown relation fails before touching the database."""
        books = ["untouched"]

        with pytest.raises(RelationNotFoundError, match="'chapters' not found on Author"):
            paginate_related(store, author_with_books, "chapters", into=books)

        assert books == ["untouched"]

    def test_transient_owner_reports_count_failure(self, store, author_with_books):
        """Test that an owner without a primary key fails as a count error."""
        with pytest.raises(CountError) as exc_info:
            paginate_related(store, Author(name="New"), "books")

        assert isinstance(exc_info.value.original_error, StoreError)
        assert exc_info.value.original_error.operation == "association_count"

    def test_unreachable_database(self, tmp_path):
        """Test that connection failures are wrapped as well."""
        from sqlalchemy import create_engine

        engine = create_engine(f"sqlite:///{tmp_path / 'missing' / 'nowhere.db'}")

        with pytest.raises(CountError) as exc_info:
            paginate(SQLAlchemyStore(engine), Book)

        assert isinstance(exc_info.value.original_error, StoreError)
