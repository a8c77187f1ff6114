# ABOUTME: Wires a Calibre library's connection, preferences, and catalog together.
# ABOUTME: open_library() is a context manager that always closes the connection.

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from calibrowse.db.catalog import LibraryCatalog
from calibrowse.db.connection import DEFAULT_LIBRARY_PATH, open_catalog
from calibrowse.db.materializer import DocumentMaterializer
from calibrowse.db.prefs import CalibrePreferences, VirtualLibraries, load_preferences


@dataclass
class Library:
    """An opened library: its path, connection, preferences and catalog."""

    path: Path
    conn: sqlite3.Connection
    preferences: CalibrePreferences
    catalog: LibraryCatalog

    @property
    def virtual_libraries(self) -> VirtualLibraries:
        return self.preferences.virtual_libraries()


@contextmanager
def open_library(library_path: Path | None = None, *, sql_trace: bool = False) -> Iterator[Library]:
    """Open a library for querying and close its connection afterwards.

    Raises:
        CatalogNotFoundError: If the library or its metadata.db is missing.
    """
    path = library_path or DEFAULT_LIBRARY_PATH
    conn = open_catalog(path, sql_trace=sql_trace)
    try:
        preferences = load_preferences(conn)
        materializer = DocumentMaterializer(preferences.visibility(), library_path=path)
        yield Library(
            path=path,
            conn=conn,
            preferences=preferences,
            catalog=LibraryCatalog(conn, materializer),
        )
    finally:
        conn.close()
