# ABOUTME: Read-only SQLite connection management for a Calibre library.
# ABOUTME: Locates metadata.db, opens it in read-only mode, and enables SQL tracing.

import logging
import sqlite3
from pathlib import Path

from calibrowse.db.errors import CatalogNotFoundError

DEFAULT_LIBRARY_PATH = Path.home() / "Calibre Library"
METADATA_DB = "metadata.db"

sql_logger = logging.getLogger("calibrowse.sql")


def catalog_path(library_path: Path) -> Path:
    """Return the path of the library's metadata.db.

    Raises:
        CatalogNotFoundError: If the library or its database is missing.
    """
    db_path = library_path / METADATA_DB
    if not library_path.is_dir():
        raise CatalogNotFoundError(f"Library directory not found: {library_path}")
    if not db_path.is_file():
        raise CatalogNotFoundError(f"No {METADATA_DB} in library: {library_path}")
    return db_path


def open_catalog(library_path: Path | None = None, *, sql_trace: bool = False) -> sqlite3.Connection:
    """Open a Calibre library's metadata.db for reading.

    The database is opened through a read-only URI so this process can
    never modify the catalog. The connection may be shared between
    threads; every query uses its own cursor. Rows are returned as
    sqlite3.Row for name-based column access.

    Args:
        library_path: The Calibre library directory. Defaults to
            ~/Calibre Library.
        sql_trace: Log every executed statement to the calibrowse.sql
            logger at DEBUG level.

    Returns:
        A configured sqlite3.Connection.

    Raises:
        CatalogNotFoundError: If the library or its database is missing.
    """
    db_path = catalog_path(library_path or DEFAULT_LIBRARY_PATH)

    conn = sqlite3.connect(
        f"{db_path.resolve().as_uri()}?mode=ro",
        uri=True,
        check_same_thread=False,
    )
    conn.row_factory = sqlite3.Row
    if sql_trace:
        conn.set_trace_callback(sql_logger.debug)

    return conn
