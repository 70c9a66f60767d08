"""
Shared pytest fixtures and configuration for pagealchemy tests.

This module provides common fixtures used across unit and integration tests,
including a mocked store, a file-backed SQLite database and seeded owners.
"""

from typing import TYPE_CHECKING
from unittest.mock import MagicMock

import pytest

from pagealchemy import SQLAlchemyStore

if TYPE_CHECKING:
    from tests.helpers.database import DatabaseHelper


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests with mocked dependencies")
    config.addinivalue_line("markers", "integration: Integration tests against SQLite")


@pytest.fixture
def mock_store():
    """
    Creates a fully mocked store.

    Builder methods return the same mock so that calls can be asserted on a
    single object; count() reports an empty table unless overridden.
    """
    store = MagicMock()
    store.order_by.return_value = store
    store.limit.return_value = store
    store.offset.return_value = store
    store.count.return_value = 0
    return store


@pytest.fixture
def mock_association(mock_store):
    """Mocked association returned by mock_store.association()."""
    association = MagicMock()
    association.count.return_value = 0
    mock_store.association.return_value = association
    return association


# Integration Test Fixtures


@pytest.fixture
def database(tmp_path) -> "DatabaseHelper":
    """Provides a DatabaseHelper with the schema created, dropped afterwards."""
    from tests.helpers.database import DatabaseHelper

    helper = DatabaseHelper(tmp_path)
    helper.create_schema()
    yield helper
    helper.dispose()


@pytest.fixture
def store(database) -> SQLAlchemyStore:
    """A store bound to the integration database engine."""
    return SQLAlchemyStore(database.engine)


@pytest.fixture
def author_with_books(database):
    """An author with 25 published books and 3 unpublished ones."""
    database.seed_author("Other", book_count=4)
    return database.seed_author("Book", book_count=25, unpublished=3)
