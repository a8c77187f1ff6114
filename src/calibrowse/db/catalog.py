# ABOUTME: Read-only queries against a Calibre library catalog.
# ABOUTME: Runs count and document queries for entity listings and text searches.

import logging
import sqlite3
from contextlib import closing
from dataclasses import dataclass
from typing import Any

from calibrowse.db.clauses import having, limit, order_by
from calibrowse.db.document import Document
from calibrowse.db.errors import NoDocumentsFoundError
from calibrowse.db.materializer import DocumentMaterializer
from calibrowse.db.schema import (
    BASE_QUERY,
    COUNT_QUERY,
    CUSTOM_COLUMNS_QUERY,
    DOC_MINI_QUERY,
    ID_QUERY,
)
from calibrowse.db.search import Search
from calibrowse.query.options import QueryOptions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CustomColumn:
    """A user-defined column of the Calibre library."""

    id: int
    label: str
    name: str
    datatype: str


class LibraryCatalog:
    """Wraps a sqlite3 connection and materializes documents from it.

    Each query opens its own cursor and closes it on every exit path, so
    one catalog can serve concurrent requests over a shared connection.
    """

    def __init__(self, conn: sqlite3.Connection, materializer: DocumentMaterializer) -> None:
        self._conn = conn
        self._materializer = materializer

    def _count(self, where: str, params: tuple[Any, ...] = ()) -> int:
        with closing(self._conn.execute(COUNT_QUERY + where, params)) as cursor:
            row = cursor.fetchone()
        return int(row[0]) if row else 0

    def _documents(self, query: str, params: tuple[Any, ...] = ()) -> list[Document]:
        with closing(self._conn.execute(query, params)) as cursor:
            return self._materializer.materialize_all(cursor)

    def query_by(self, options: QueryOptions) -> tuple[int, list[Document]]:
        """List the documents selected by the options' entity filter.

        The count query runs first; the document query only runs when
        something matched. No matches is not an error.

        Args:
            options: Entity/id filter, sort order, and page.

        Returns:
            Total number of matching documents and the requested page.
        """
        where = having(options.entity, options.id)
        count = self._count(where)
        if count <= 0:
            return 0, []
        documents = self._documents(
            BASE_QUERY
            + where
            + order_by(options.sort_by, options.descending)
            + limit(options.limit_start, options.limit_length)
        )
        return count, documents

    def query_search(self, options: QueryOptions) -> tuple[int, list[Document]]:
        """List the documents matching the options' search expression.

        Raises:
            NoDocumentsFoundError: If nothing matches the expression, or
                the expression holds no search term at all.
        """
        search = Search(options.matching)
        if not search:
            raise NoDocumentsFoundError("No documents found")
        where, params = search.clause(), search.params
        count = self._count(where, params)
        if count <= 0:
            raise NoDocumentsFoundError("No documents found")
        documents = self._documents(
            BASE_QUERY
            + where
            + order_by(options.sort_by, options.descending)
            + limit(options.limit_start, options.limit_length),
            params,
        )
        return count, documents

    def query(self, options: QueryOptions) -> tuple[int, list[Document]]:
        """Search when the options carry search text, list by entity otherwise.

        The total is stored in `options.query_count`.
        """
        if options.matching:
            count, documents = self.query_search(options)
        else:
            count, documents = self.query_by(options)
        options.query_count = count
        logger.debug("Query %s matched %d document(s)", options, count)
        return count, documents

    def query_document(self, doc_id: int) -> Document | None:
        """Return the document with `doc_id`, or None if there is none."""
        documents = self._documents(BASE_QUERY + "WHERE (b.id = ?) LIMIT 1", (doc_id,))
        return documents[0] if documents else None

    def query_doc_mini(self, doc_id: int) -> Document | None:
        """Return a document with only id, formats, path and title filled."""
        with closing(self._conn.execute(DOC_MINI_QUERY, (doc_id,))) as cursor:
            row = cursor.fetchone()
        return self._materializer.materialize_mini(row) if row else None

    def query_ids(self) -> list[Document]:
        """Return every document with only `id` and `path` set."""
        with closing(self._conn.execute(ID_QUERY)) as cursor:
            return [Document(id=row["id"], path=row["path"] or "") for row in cursor]

    def query_custom_columns(self) -> list[CustomColumn]:
        """Return the library's user-defined columns."""
        with closing(self._conn.execute(CUSTOM_COLUMNS_QUERY)) as cursor:
            return [
                CustomColumn(
                    id=row["id"],
                    label=row["label"],
                    name=row["name"],
                    datatype=row["datatype"],
                )
                for row in cursor
            ]
