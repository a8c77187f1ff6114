# ABOUTME: Query options package: per-request listing state and its page-token codec.
# ABOUTME: Exports QueryOptions and the SortBy enumeration.

from calibrowse.query.options import (
    DEFAULT_BOOKS_PER_PAGE,
    ENTITIES,
    SORT_NAMES,
    QueryOptions,
    SortBy,
)

__all__ = [
    "DEFAULT_BOOKS_PER_PAGE",
    "ENTITIES",
    "SORT_NAMES",
    "QueryOptions",
    "SortBy",
]
