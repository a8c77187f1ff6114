# ABOUTME: Library preferences read from Calibre's preferences table.
# ABOUTME: Provides the field visibility policy and the virtual library lookup.

import json
import logging
import sqlite3
from contextlib import closing
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from calibrowse.db.errors import PreferencesError
from calibrowse.db.schema import PREFERENCES_QUERY

logger = logging.getLogger(__name__)

DISPLAY_FIELDS_KEY = "book_display_fields"
VIRTUAL_LIBRARIES_KEY = "virtual_libraries"


@runtime_checkable
class FieldVisibility(Protocol):
    """Answers whether a named document field should be populated.

    Implementations may raise (typically PreferencesError); callers
    treat any error as "not visible".
    """

    def is_visible(self, name: str) -> bool: ...


class AllFieldsVisible:
    """Visibility policy for libraries without display preferences."""

    def is_visible(self, name: str) -> bool:
        return True


class DisplayFieldsPolicy:
    """Visibility taken from Calibre's `book_display_fields` preference."""

    def __init__(self, fields: dict[str, bool]) -> None:
        self._fields = fields

    @classmethod
    def from_preference(cls, value: Any) -> "DisplayFieldsPolicy":
        """Build the policy from the stored `[[name, visible], ...]` list.

        Raises:
            PreferencesError: If the value is not a list of pairs.
        """
        if not isinstance(value, list):
            raise PreferencesError(f"{DISPLAY_FIELDS_KEY} is not a list")
        fields: dict[str, bool] = {}
        for entry in value:
            if not isinstance(entry, (list, tuple)) or len(entry) != 2:
                raise PreferencesError(f"malformed {DISPLAY_FIELDS_KEY} entry: {entry!r}")
            fields[str(entry[0])] = bool(entry[1])
        return cls(fields)

    def is_visible(self, name: str) -> bool:
        """Return the configured flag for `name`.

        Raises:
            PreferencesError: If the field is not listed.
        """
        try:
            return self._fields[name]
        except KeyError:
            raise PreferencesError(f"unknown display field: {name}") from None


class VirtualLibraries:
    """Named search expressions defined in the library."""

    def __init__(self, definitions: dict[str, str] | None = None) -> None:
        self._definitions = dict(definitions or {})

    def resolve(self, name: str) -> str | None:
        """Return the search expression for `name`, or None if unknown."""
        return self._definitions.get(name)

    def names(self) -> list[str]:
        """Library names, alphabetically sorted."""
        return sorted(self._definitions)

    def items(self) -> list[tuple[str, str]]:
        return [(name, self._definitions[name]) for name in self.names()]

    def __len__(self) -> int:
        return len(self._definitions)


@dataclass
class CalibrePreferences:
    """Decoded key/value pairs from the library's preferences table."""

    values: dict[str, Any] = field(default_factory=dict)

    def visibility(self) -> FieldVisibility:
        """Return the field visibility policy for this library.

        Falls back to AllFieldsVisible when no display preference is
        stored or the stored value is malformed.
        """
        raw = self.values.get(DISPLAY_FIELDS_KEY)
        if raw is None:
            return AllFieldsVisible()
        try:
            return DisplayFieldsPolicy.from_preference(raw)
        except PreferencesError as exc:
            logger.warning("Ignoring display preferences: %s", exc)
            return AllFieldsVisible()

    def virtual_libraries(self) -> VirtualLibraries:
        raw = self.values.get(VIRTUAL_LIBRARIES_KEY)
        if not isinstance(raw, dict):
            return VirtualLibraries()
        return VirtualLibraries({str(k): str(v) for k, v in raw.items()})


def load_preferences(conn: sqlite3.Connection) -> CalibrePreferences:
    """Read and JSON-decode all rows of the preferences table.

    A library without a preferences table yields empty preferences;
    values that are not valid JSON are skipped with a warning.
    """
    try:
        with closing(conn.execute(PREFERENCES_QUERY)) as cursor:
            rows = cursor.fetchall()
    except sqlite3.OperationalError as exc:
        if "no such table" not in str(exc):
            raise
        logger.warning("Library has no preferences table; using defaults")
        return CalibrePreferences()

    values: dict[str, Any] = {}
    for key, raw in rows:
        try:
            values[key] = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Skipping malformed preference %r", key)
    return CalibrePreferences(values)
