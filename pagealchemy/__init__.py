from .config import (
    DEFAULT_LIMIT,
    Option,
    PaginatorOptions,
    get_default_limit,
    set_default_limit,
    using_default_limit,
    with_limit,
    with_order,
    with_page,
    with_query_params,
)
from .exceptions import (
    CountError,
    FetchError,
    PaginatorError,
    RelationNotFoundError,
    StoreError,
)
from .pagination import PageResult, max_page, offset
from .paginator import Paginator, paginate, paginate_related
from .store import Association, SQLAlchemyAssociation, SQLAlchemyStore, Store

__all__ = [
    "Paginator",
    "paginate",
    "paginate_related",
    "PageResult",
    "max_page",
    "offset",
    # Options
    "Option",
    "PaginatorOptions",
    "with_page",
    "with_limit",
    "with_order",
    "with_query_params",
    "DEFAULT_LIMIT",
    "get_default_limit",
    "set_default_limit",
    "using_default_limit",
    # Store
    "Store",  # Protocol for custom stores
    "Association",
    "SQLAlchemyStore",
    "SQLAlchemyAssociation",
    # Exceptions
    "PaginatorError",
    "StoreError",
    "RelationNotFoundError",
    "CountError",
    "FetchError",
]
