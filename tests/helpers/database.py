"""
Integration test helpers for pagealchemy.

This module provides utilities for setting up and seeding a file-backed
SQLite database during integration tests.
"""

from pathlib import Path

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session

from tests.helpers.models import Author, Base, Book, Post, Tag


class DatabaseHelper:
    """
    Helper class for managing the SQLite database in integration tests.

    Provides methods for creating the schema and seeding data. Seeded owners
    are returned detached with their attributes loaded.
    """

    def __init__(self, path: Path):
        """Create an engine for a database file under `path`."""
        self.engine: Engine = create_engine(
            f"sqlite:///{path / 'pagealchemy.db'}",
            connect_args={"check_same_thread": False},
        )

    def create_schema(self) -> None:
        Base.metadata.create_all(self.engine)

    def dispose(self) -> None:
        Base.metadata.drop_all(self.engine)
        self.engine.dispose()

    def seed_author(self, name: str, book_count: int, unpublished: int = 0) -> Author:
        """
        Inserts an author with `book_count` published books named "<name> 01", ...
        followed by `unpublished` unpublished ones.
        """
        with Session(self.engine, expire_on_commit=False) as session:
            author = Author(name=name)
            for i in range(1, book_count + unpublished + 1):
                author.books.append(Book(name=f"{name} {i:02d}", published=i <= book_count))
            session.add(author)
            session.commit()
            return author

    def seed_post(self, title: str, tag_names: list[str]) -> Post:
        """Inserts a post tagged with new tags named after `tag_names`."""
        with Session(self.engine, expire_on_commit=False) as session:
            post = Post(title=title, tags=[Tag(name=name) for name in tag_names])
            session.add(post)
            session.commit()
            return post
