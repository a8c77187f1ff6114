# ABOUTME: Shared pytest fixtures for calibrowse tests.
# ABOUTME: Provides a miniature Calibre library on disk and open catalogs over it.

import sqlite3
from collections.abc import Iterator
from pathlib import Path

import pytest

from calibrowse.db.catalog import LibraryCatalog
from calibrowse.db.connection import open_catalog
from calibrowse.db.materializer import DocumentMaterializer
from calibrowse.db.prefs import AllFieldsVisible
from tests.fixtures.calibre_library import build_library


@pytest.fixture
def calibre_library(tmp_path: Path) -> Path:
    """A Calibre library with five books, virtual libraries and one page count.

    Layout:
        Calibre Library/
            metadata.db
            Umberto Eco/The Name of the Rose (1)/metadata.opf   (no #pages)
            Frank Herbert/Dune (2)/metadata.opf                 (#pages = 412)
            Isaac Asimov/Foundation (3)/
            Umberto Eco/Il nome della rosa (4)/
            Terry Pratchett/Good Omens (5)/
    """
    return build_library(tmp_path / "Calibre Library")


@pytest.fixture
def library_conn(calibre_library: Path) -> Iterator[sqlite3.Connection]:
    """A read-only connection to the fixture library."""
    conn = open_catalog(calibre_library)
    yield conn
    conn.close()


@pytest.fixture
def catalog(library_conn: sqlite3.Connection, calibre_library: Path) -> LibraryCatalog:
    """A catalog over the fixture library with every field visible."""
    materializer = DocumentMaterializer(AllFieldsVisible(), library_path=calibre_library)
    return LibraryCatalog(library_conn, materializer)
