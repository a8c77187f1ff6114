# ABOUTME: Public API for the calibrowse catalog layer.
# ABOUTME: Exports connection management, catalog queries, and document types.

from calibrowse.db.catalog import CustomColumn, LibraryCatalog
from calibrowse.db.connection import DEFAULT_LIBRARY_PATH, open_catalog
from calibrowse.db.document import Document
from calibrowse.db.entities import Entity, decode_entities
from calibrowse.db.errors import (
    CatalogError,
    CatalogNotFoundError,
    NoDocumentsFoundError,
    PreferencesError,
)
from calibrowse.db.library import Library, open_library
from calibrowse.db.materializer import DocumentMaterializer
from calibrowse.db.prefs import CalibrePreferences, load_preferences

__all__ = [
    "DEFAULT_LIBRARY_PATH",
    "CalibrePreferences",
    "CatalogError",
    "CatalogNotFoundError",
    "CustomColumn",
    "Document",
    "DocumentMaterializer",
    "Entity",
    "Library",
    "LibraryCatalog",
    "NoDocumentsFoundError",
    "PreferencesError",
    "decode_entities",
    "load_preferences",
    "open_catalog",
    "open_library",
]
