import copy
from typing import Any, Protocol

from sqlalchemy import Engine, Select, func, inspect, select, text
from sqlalchemy.exc import NoInspectionAvailable
from sqlalchemy.orm import RelationshipProperty, Session, sessionmaker, with_parent

from ._logging import logger, redact_identity
from .exceptions import RelationNotFoundError, handle_store_errors


class Association(Protocol):
    """A resolved relation between one owner instance and its related records."""

    def count(self) -> int: ...


class Store(Protocol):
    """
    What the paginator needs from the data store.

    Builder methods never mutate the receiver: each returns a new store, so
    the count and the fetch can derive their statements from the same base
    concurrently.
    """

    def order_by(self, clause: str) -> "Store": ...

    def limit(self, limit: int) -> "Store": ...

    def offset(self, offset: int) -> "Store": ...

    def find(self, model: type[Any], into: list[Any]) -> None: ...

    def count(self, model: type[Any]) -> int: ...

    def association(self, owner: Any, relation: str) -> Association: ...

    def related(self, owner: Any, relation: str, into: list[Any]) -> None: ...


class SQLAlchemyStore:
    """
    Store backed by the SQLAlchemy ORM.

    Holds a session factory plus the filter criteria, sort clauses and window
    of the statement being built. Every execution opens its own Session, so a
    store can be shared between threads.

    Usage:
        store = SQLAlchemyStore(engine).where(User.active.is_(True))
        result = paginate(store, User, with_page(2))
    """

    def __init__(self, bind: Engine | sessionmaker[Session], *criteria: Any) -> None:
        if isinstance(bind, Engine):
            bind = sessionmaker(bind=bind, autoflush=False, expire_on_commit=False)

        self.session_factory: sessionmaker[Session] = bind
        self.criteria: tuple[Any, ...] = criteria
        self.order: tuple[str, ...] = ()
        self.limit_val: int | None = None
        self.offset_val: int | None = None

    def _clone(self, **changes: Any) -> "SQLAlchemyStore":
        clone = copy.copy(self)
        for name, value in changes.items():
            setattr(clone, name, value)
        return clone

    # --- BUILDER INTERFACE ---

    def where(self, *criteria: Any) -> "SQLAlchemyStore":
        """Adds filter criteria, combined with AND, to every statement of the store."""
        return self._clone(criteria=self.criteria + criteria)

    def order_by(self, clause: str) -> "SQLAlchemyStore":
        """Appends a raw SQL sort clause such as "name DESC"."""
        return self._clone(order=self.order + (clause,))

    def limit(self, limit: int) -> "SQLAlchemyStore":
        return self._clone(limit_val=limit)

    def offset(self, offset: int) -> "SQLAlchemyStore":
        return self._clone(offset_val=offset)

    # --- STATEMENTS ---

    def _filtered(self, model: type[Any]) -> Select[Any]:
        stmt = select(model)
        if self.criteria:
            stmt = stmt.where(*self.criteria)
        return stmt

    def _windowed(self, stmt: Select[Any]) -> Select[Any]:
        if self.order:
            stmt = stmt.order_by(*(text(clause) for clause in self.order))
        if self.limit_val is not None:
            stmt = stmt.limit(self.limit_val)
        if self.offset_val is not None:
            stmt = stmt.offset(self.offset_val)
        return stmt

    def _related(self, owner: Any, prop: RelationshipProperty[Any]) -> Select[Any]:
        # with_parent renders the join criteria for one-to-many and many-to-many alike
        stmt = select(prop.mapper.class_).where(with_parent(owner, prop.class_attribute))
        if self.criteria:
            stmt = stmt.where(*self.criteria)
        return stmt

    @staticmethod
    def _count_of(stmt: Select[Any]) -> Select[Any]:
        # Count over a subquery so joins and filters are preserved
        return select(func.count()).select_from(stmt.subquery())

    def statement(self, model: type[Any]) -> Select[Any]:
        """Returns the SELECT the store would run for `model`, window included."""
        return self._windowed(self._filtered(model))

    def count_statement(self, model: type[Any]) -> Select[Any]:
        """Returns the COUNT for `model`, without ordering or window."""
        return self._count_of(self._filtered(model))

    def related_statement(self, owner: Any, prop: RelationshipProperty[Any]) -> Select[Any]:
        """Returns the SELECT of the records related to `owner`, window included."""
        return self._windowed(self._related(owner, prop))

    def related_count_statement(self, owner: Any, prop: RelationshipProperty[Any]) -> Select[Any]:
        """Returns the COUNT of the records related to `owner`, without ordering or window."""
        return self._count_of(self._related(owner, prop))

    # --- EXECUTION ---

    def find(self, model: type[Any], into: list[Any]) -> None:
        """Runs the windowed SELECT and replaces the contents of `into` with the rows."""
        logger.debug(
            "Executing fetch",
            extra={
                "model": model.__name__,
                "operation": "fetch",
                "order": list(self.order),
                "limit": self.limit_val,
                "offset": self.offset_val,
            },
        )

        with handle_store_errors(operation="fetch"), self.session_factory() as session:
            into[:] = session.scalars(self.statement(model)).all()

    def count(self, model: type[Any]) -> int:
        """Counts the rows matching the store's criteria for `model`."""
        logger.debug("Executing count", extra={"model": model.__name__, "operation": "count"})

        with handle_store_errors(operation="count"), self.session_factory() as session:
            return session.scalar(self.count_statement(model)) or 0

    def association(self, owner: Any, relation: str) -> "SQLAlchemyAssociation":
        """
        Resolves a relationship of `owner` by attribute name.

        Raises:
            RelationNotFoundError: If the owner is not mapped or has no such relationship
        """
        model_name = type(owner).__name__
        try:
            mapper = inspect(type(owner))
        except NoInspectionAvailable as e:
            raise RelationNotFoundError(relation, model_name, original_error=e) from e

        if relation not in mapper.relationships:
            raise RelationNotFoundError(relation, model_name)

        return SQLAlchemyAssociation(self, owner, mapper.relationships[relation])

    def related(self, owner: Any, relation: str, into: list[Any]) -> None:
        """
        Runs the windowed SELECT of the records related to `owner` into `into`.

        Takes the relation by name, like every Store, so the relationship is
        looked up on the mapper again rather than passed in by the paginator.
        """
        association = self.association(owner, relation)

        logger.debug(
            "Executing related fetch",
            extra={
                "model": type(owner).__name__,
                "relation": relation,
                "owner_hash": redact_identity(owner),
                "operation": "related_fetch",
                "limit": self.limit_val,
                "offset": self.offset_val,
            },
        )

        stmt = self.related_statement(owner, association.property)
        with handle_store_errors(operation="related_fetch"), self.session_factory() as session:
            into[:] = session.scalars(stmt).all()


class SQLAlchemyAssociation:
    """A relationship of one owner instance, resolved against its mapper."""

    def __init__(self, store: SQLAlchemyStore, owner: Any, prop: RelationshipProperty[Any]):
        self.store = store
        self.owner = owner
        self.property = prop

    @property
    def name(self) -> str:
        return self.property.key

    def count(self) -> int:
        """Counts the related rows, honouring the store's criteria."""
        logger.debug(
            "Executing association count",
            extra={
                "model": type(self.owner).__name__,
                "relation": self.name,
                "owner_hash": redact_identity(self.owner),
                "operation": "association_count",
            },
        )

        with handle_store_errors(operation="association_count"):
            stmt = self.store.related_count_statement(self.owner, self.property)
            with self.store.session_factory() as session:
                return session.scalar(stmt) or 0
