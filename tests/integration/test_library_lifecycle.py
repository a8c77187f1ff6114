# ABOUTME: Integration tests for opening libraries and applying their preferences.
# ABOUTME: Covers connection setup, SQL tracing, display-field visibility, and virtual libraries.

import logging
import sqlite3
from pathlib import Path

import pytest

from calibrowse.db.connection import open_catalog
from calibrowse.db.errors import CatalogNotFoundError, NoDocumentsFoundError
from calibrowse.db.library import open_library
from calibrowse.db.prefs import AllFieldsVisible
from calibrowse.query.options import QueryOptions
from tests.fixtures.calibre_library import build_library

DEFAULT_PARAMS = {"sortby": "acquisition", "order": "descending"}


class TestOpenCatalog:
    """Tests for open_catalog."""

    def test_rows_by_name(self, library_conn: sqlite3.Connection) -> None:
        """Rows support access by column name."""
        row = library_conn.execute("SELECT id, title FROM books WHERE id = 2").fetchone()
        assert row["title"] == "Dune"

    def test_missing_directory(self, tmp_path: Path) -> None:
        """A non-existent library directory is reported."""
        with pytest.raises(CatalogNotFoundError, match="not found"):
            open_catalog(tmp_path / "nowhere")

    def test_missing_database(self, tmp_path: Path) -> None:
        """A directory without metadata.db is not a library."""
        with pytest.raises(CatalogNotFoundError, match="metadata.db"):
            open_catalog(tmp_path)

    def test_sql_trace(self, calibre_library: Path, caplog: pytest.LogCaptureFixture) -> None:
        """With tracing on, executed statements are logged."""
        with caplog.at_level(logging.DEBUG, logger="calibrowse.sql"):
            conn = open_catalog(calibre_library, sql_trace=True)
            conn.execute("SELECT COUNT(*) FROM books").fetchone()
            conn.close()
        assert "SELECT COUNT(*) FROM books" in caplog.text


class TestOpenLibrary:
    """Tests for the open_library context manager."""

    def test_preferences_loaded(self, calibre_library: Path) -> None:
        """Virtual libraries come from the preferences table."""
        with open_library(calibre_library) as library:
            assert library.path == calibre_library
            assert library.virtual_libraries.names() == ["Classics", "Eco", "Empty"]

    def test_connection_closed_on_exit(self, calibre_library: Path) -> None:
        """The connection is unusable after the block."""
        with open_library(calibre_library) as library:
            conn = library.conn
        with pytest.raises(sqlite3.ProgrammingError):
            conn.execute("SELECT 1")

    def test_connection_closed_on_error(self, calibre_library: Path) -> None:
        """Errors inside the block still close the connection."""
        with pytest.raises(RuntimeError):
            with open_library(calibre_library) as library:
                conn = library.conn
                raise RuntimeError("boom")
        with pytest.raises(sqlite3.ProgrammingError):
            conn.execute("SELECT 1")

    def test_missing_library(self, tmp_path: Path) -> None:
        """Opening a missing library raises before yielding."""
        with pytest.raises(CatalogNotFoundError):
            with open_library(tmp_path / "nowhere"):
                pass

    def test_no_preferences_table(self, tmp_path: Path) -> None:
        """Old libraries without preferences show every field."""
        path = build_library(tmp_path / "old", with_preferences_table=False)
        with open_library(path) as library:
            assert isinstance(library.preferences.visibility(), AllFieldsVisible)
            assert len(library.virtual_libraries) == 0
            doc = library.catalog.query_document(2)
        assert doc is not None
        assert doc.tags


class TestDisplayFields:
    """Library display preferences shape the returned documents."""

    def test_hidden_fields_empty(self, tmp_path: Path) -> None:
        """Fields switched off in the library are not populated."""
        path = build_library(
            tmp_path / "lib",
            preferences={"book_display_fields": [["title", True], ["tags", False], ["rating", True]]},
        )
        with open_library(path) as library:
            doc = library.catalog.query_document(2)
        assert doc is not None
        assert doc.title == "Dune"
        assert doc.rating == 10
        assert doc.tags == ()
        # not listed at all: hidden
        assert doc.authors == ()
        assert doc.publisher is None


class TestVirtualLibraryQueries:
    """Selecting a virtual library runs its stored search."""

    def test_virtual_library(self, calibre_library: Path) -> None:
        """The Classics library lists the books tagged Classics."""
        with open_library(calibre_library) as library:
            options = QueryOptions.new().apply_request(
                {**DEFAULT_PARAMS, "virtlib": "Classics"}, library.virtual_libraries
            )
            count, docs = library.catalog.query(options)
        assert count == 2
        assert {doc.id for doc in docs} == {1, 3}
        assert options.query_count == 2

    def test_empty_virtual_library(self, calibre_library: Path) -> None:
        """A virtual library matching nothing reports no documents."""
        with open_library(calibre_library) as library:
            options = QueryOptions.new().apply_request(
                {**DEFAULT_PARAMS, "virtlib": "Empty"}, library.virtual_libraries
            )
            with pytest.raises(NoDocumentsFoundError):
                library.catalog.query(options)
