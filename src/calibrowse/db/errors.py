# ABOUTME: Exception types raised by the calibrowse catalog layer.
# ABOUTME: Store errors from sqlite3 are not wrapped and propagate as-is.


class CatalogError(Exception):
    """Base class for catalog-level failures."""


class CatalogNotFoundError(CatalogError):
    """Raised when the library directory or its metadata.db is missing."""


class NoDocumentsFoundError(CatalogError):
    """Raised when a text search matches no documents."""


class PreferencesError(CatalogError):
    """Raised for unknown display fields or malformed library preferences."""
