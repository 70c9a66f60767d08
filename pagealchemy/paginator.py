from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, TypeVar

from ._logging import logger, redact_identity
from .config import Option, PaginatorOptions
from .exceptions import CountError, FetchError, RelationNotFoundError
from .pagination import PageResult, offset
from .store import Association, Store

T = TypeVar("T")


class Paginator:
    """
    Fetches one page of records and the total count concurrently.

    The count runs on a worker thread while the fetch runs on the calling
    thread; the call returns once both have finished.

    Usage:
        users: list[User] = []
        paginator = Paginator(store, with_page(2), with_order("name DESC"))
        result = paginator.paginate(User, into=users)
    """

    def __init__(self, store: Store, *options: Option) -> None:
        self.store = store
        self._options = PaginatorOptions.build(*options)
        self._order = tuple(self._options.order)

    @property
    def page(self) -> int:
        return self._options.page

    @property
    def limit(self) -> int:
        return self._options.limit

    @property
    def order(self) -> tuple[str, ...]:
        return self._order

    @property
    def offset(self) -> int:
        return offset(self.page, self.limit)

    def paginate(self, model: type[T], into: list[T] | None = None) -> PageResult[T]:
        """
        Returns the configured page of `model` records.

        Args:
            model: The mapped class to select
            into: Optional list to populate in place; becomes `records`

        Raises:
            CountError: If counting failed (takes priority over a fetch failure)
            FetchError: If fetching failed while counting succeeded
        """
        records: list[T] = [] if into is None else into
        base = self._prepare_store()

        logger.debug(
            "Paginating query",
            extra={
                "model": model.__name__,
                "operation": "paginate",
                "page": self.page,
                "limit": self.limit,
                "offset": self.offset,
            },
        )

        window = base.limit(self.limit).offset(self.offset)
        total = self._run(
            count=lambda: base.count(model),
            fetch=lambda: window.find(model, records),
        )

        return self._result(records, total, model=model.__name__, operation="paginate")

    def paginate_related(
        self, owner: Any, relation: str, into: list[Any] | None = None
    ) -> PageResult[Any]:
        """
        Returns the configured page of the records related to `owner`.

        Works for one-to-many and many-to-many relationships. The owner must be
        persisted (its primary key loaded): a transient owner makes both queries
        fail, which surfaces as CountError.

        Args:
            owner: The persisted mapped instance owning the relation
            relation: Name of the relationship attribute (e.g. "posts")
            into: Optional list to populate in place; becomes `records`

        Raises:
            RelationNotFoundError: If the relation cannot be resolved; nothing is queried
            CountError: If counting failed (takes priority over a fetch failure)
            FetchError: If fetching failed while counting succeeded
        """
        records: list[Any] = [] if into is None else into
        base = self._prepare_store()
        association = self._resolve(base, owner, relation)

        logger.debug(
            "Paginating relation",
            extra={
                "model": type(owner).__name__,
                "relation": relation,
                "owner_hash": redact_identity(owner),
                "operation": "paginate_related",
                "page": self.page,
                "limit": self.limit,
                "offset": self.offset,
            },
        )

        window = base.limit(self.limit).offset(self.offset)
        total = self._run(
            count=association.count,
            fetch=lambda: window.related(owner, relation, records),
        )

        return self._result(
            records, total, model=type(owner).__name__, operation="paginate_related"
        )

    def _prepare_store(self) -> Store:
        """Applies the order clauses, in sequence, to the store."""
        store = self.store
        for clause in self._order:
            store = store.order_by(clause)
        return store

    @staticmethod
    def _resolve(store: Store, owner: Any, relation: str) -> Association:
        try:
            return store.association(owner, relation)
        except RelationNotFoundError:
            raise
        except Exception as e:
            raise RelationNotFoundError(relation, type(owner).__name__, original_error=e) from e

    @staticmethod
    def _run(count: Callable[[], int], fetch: Callable[[], None]) -> int:
        """Runs count and fetch concurrently and returns the total."""
        with ThreadPoolExecutor(max_workers=1, thread_name_prefix="pagealchemy-count") as pool:
            count_future = pool.submit(count)

            fetch_error: Exception | None = None
            try:
                fetch()
            except Exception as e:
                fetch_error = e

            return _join(count_future, fetch_error)

    def _result(
        self, records: list[T], total: int, *, model: str, operation: str
    ) -> PageResult[T]:
        result: PageResult[T] = PageResult.from_records(
            records, page=self.page, limit=self.limit, total=total
        )

        logger.info(
            "Page fetched",
            extra={
                "model": model,
                "operation": operation,
                "page": result.current_page,
                "max_page": result.max_page,
                "total": result.total_records,
                "count": len(records),
            },
        )
        return result


def _join(count_future: "Future[int]", fetch_error: Exception | None) -> int:
    # Count failures win over fetch failures, even when the fetch succeeded
    try:
        total = count_future.result()
    except Exception as e:
        raise CountError(f"Counting records failed: {e}", original_error=e) from e

    if fetch_error is not None:
        raise FetchError(
            f"Fetching records failed: {fetch_error}", original_error=fetch_error
        ) from fetch_error

    return total


def paginate(
    store: Store, model: type[T], *options: Option, into: list[T] | None = None
) -> PageResult[T]:
    """
    Convenience wrapper for Paginator.paginate.

    Usage:
        result = paginate(store, User, with_page(2), with_limit(10))
    """
    return Paginator(store, *options).paginate(model, into=into)


def paginate_related(
    store: Store, owner: Any, relation: str, *options: Option, into: list[Any] | None = None
) -> PageResult[Any]:
    """
    Convenience wrapper for Paginator.paginate_related.

    Usage:
        result = paginate_related(store, author, "books", with_page(2))
    """
    return Paginator(store, *options).paginate_related(owner, relation, into=into)
