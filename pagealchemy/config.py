from collections.abc import Callable, Generator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any

# Page size used when no limit option is supplied.
DEFAULT_LIMIT = 20

_default_limit: int = DEFAULT_LIMIT
_default_limit_context: ContextVar[int | None] = ContextVar("default_limit", default=None)


def get_default_limit() -> int:
    """
    Returns the page size new configurations start from.

    A limit scoped with using_default_limit() wins over the process default.
    """
    ctx_limit = _default_limit_context.get()
    if ctx_limit is not None:
        return ctx_limit
    return _default_limit


def set_default_limit(limit: int) -> None:
    """
    Changes the process-wide default page size.

    Meant for application startup. Configurations that were already built keep
    their limit. Do not call this while other threads construct paginators;
    use using_default_limit() for scoped overrides.
    """
    global _default_limit
    _default_limit = limit


@contextmanager
def using_default_limit(limit: int) -> Generator[None, None, None]:
    """
    Context manager to scope a default page size to a block of code.
    Thread-safe and Async-safe using contextvars.

    Usage:
        with using_default_limit(50):
            result = paginate(store, User)
    """
    token = _default_limit_context.set(limit)
    try:
        yield
    finally:
        _default_limit_context.reset(token)


@dataclass
class PaginatorOptions:
    """
    Container for the page window of a single pagination call.
    Populated by applying Option callables over the defaults.
    """

    page: int = 1
    limit: int = field(default_factory=get_default_limit)
    order: list[str] = field(default_factory=list)

    @classmethod
    def build(cls, *options: "Option") -> "PaginatorOptions":
        """
        Creates the default configuration and applies each option in order.

        Args:
            *options: Option callables, applied left to right

        Returns:
            The populated PaginatorOptions
        """
        config = cls()
        for option in options:
            option(config)
        return config


Option = Callable[[PaginatorOptions], None]


def with_page(page: int) -> Option:
    """Sets the 1-based page number. Later calls overwrite earlier ones."""

    def apply(options: PaginatorOptions) -> None:
        options.page = page

    return apply


def with_limit(limit: int) -> Option:
    """Sets the page size. Later calls overwrite earlier ones."""

    def apply(options: PaginatorOptions) -> None:
        options.limit = limit

    return apply


def with_order(clause: str) -> Option:
    """
    Appends a sort clause such as "name DESC".

    Multiple order options accumulate; later clauses break ties of earlier ones.
    """

    def apply(options: PaginatorOptions) -> None:
        options.order.append(clause)

    return apply


def with_query_params(
    params: Mapping[str, Any],
    page_param: str = "page",
    limit_param: str = "limit",
    order_param: str = "order",
) -> Option:
    """
    Reads page, limit and order from query string parameters.

    Accepts a plain dict, the output of urllib.parse.parse_qs, a MultiDict or
    Starlette's QueryParams. For repeated page/limit keys the last value is
    used; values that are not integers leave page/limit unchanged. Order
    values are appended; a value may hold several comma separated clauses.

    Usage:
        # GET /users?page=2&limit=10&order=name%20DESC,id
        paginator = Paginator(store, with_query_params(request.query_params))
    """

    def apply(options: PaginatorOptions) -> None:
        page = _parse_int(_get_last(params, page_param))
        if page is not None:
            options.page = page

        limit = _parse_int(_get_last(params, limit_param))
        if limit is not None:
            options.limit = limit

        for value in _get_all(params, order_param):
            for clause in str(value).split(","):
                clause = clause.strip()
                if clause:
                    options.order.append(clause)

    return apply


def _parse_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _get_last(params: Mapping[str, Any], name: str) -> Any:
    # Repeated keys: the last occurrence wins
    values = _get_all(params, name)
    return values[-1] if values else None


def _get_all(params: Mapping[str, Any], name: str) -> list[Any]:
    # MultiDict-style containers keep repeated keys behind getlist()
    getlist = getattr(params, "getlist", None)
    if callable(getlist):
        return list(getlist(name))

    value = params.get(name)
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]
