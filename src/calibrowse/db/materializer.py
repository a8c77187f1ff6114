# ABOUTME: Turns rows of the document projection into visibility-filtered Documents.
# ABOUTME: Decodes packed columns and reads page counts from metadata.opf files.

import logging
import re
import sqlite3
from collections.abc import Callable, Iterable
from datetime import datetime
from pathlib import Path
from typing import Any

from calibrowse.db.document import Document
from calibrowse.db.entities import (
    decode_authors,
    decode_formats,
    decode_identifiers,
    decode_languages,
    decode_publisher,
    decode_series,
    decode_tags,
)
from calibrowse.db.prefs import AllFieldsVisible, FieldVisibility

logger = logging.getLogger(__name__)

METADATA_FILENAME = "metadata.opf"

# Page count stored by Calibre's "Count Pages" plugin as user metadata.
_PAGES_RE = re.compile(
    rb'<meta name="calibre:user_metadata:#pages" .*?, &quot;#value#&quot;: (\d+),',
    re.DOTALL | re.IGNORECASE,
)


def _read_bytes(path: Path) -> bytes:
    return path.read_bytes()


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _number(value: Any, kind: type = int) -> Any:
    try:
        return kind(value) if value is not None else kind()
    except (TypeError, ValueError):
        return kind()


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a Calibre timestamp column; unparsable values become None."""
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def extract_pages(metadata: bytes) -> int:
    """Return the #pages value from metadata.opf content, or 0."""
    match = _PAGES_RE.search(metadata)
    if match is None:
        return 0
    return int(match.group(1))


class DocumentMaterializer:
    """Builds Document records from rows of calibrowse.db.schema.BASE_QUERY.

    The visibility policy decides which fields are populated; hidden
    fields keep their zero value. Packed columns are decoded only for
    visible fields.
    """

    def __init__(
        self,
        visibility: FieldVisibility | None = None,
        library_path: Path | None = None,
        read_file: Callable[[Path], bytes] | None = None,
    ) -> None:
        self._visibility = visibility or AllFieldsVisible()
        self._library_path = library_path
        self._read_file = read_file or _read_bytes

    @property
    def library_path(self) -> Path | None:
        return self._library_path

    def _visible(self, name: str, fallback: str | None = None) -> bool:
        try:
            if self._visibility.is_visible(name):
                return True
        except Exception as exc:
            logger.debug("Treating field %s as hidden: %r", name, exc)
        if fallback is not None:
            return self._visible(fallback)
        return False

    def pages(self, path: str) -> int:
        """Read the page count from `<library>/<path>/metadata.opf`.

        A missing library path, unreadable file or absent value yields 0.
        """
        if self._library_path is None or not path:
            return 0
        opf = self._library_path / path / METADATA_FILENAME
        try:
            metadata = self._read_file(opf)
        except OSError as exc:
            logger.debug("No page count for %s: %s", path, exc)
            return 0
        return extract_pages(metadata)

    def materialize(self, row: sqlite3.Row) -> Document:
        """Convert one projection row into a Document."""
        doc = Document(
            id=_number(row["id"]),
            title=_text(row["title"]),
            title_sort=_text(row["title_sort"]),
            author_sort=_text(row["author_sort"]),
            rating=_number(row["rating"]),
            size=_number(row["size"]),
            series_index=_number(row["series_index"], float),
            isbn=_text(row["isbn"]),
            lccn=_text(row["lccn"]),
            path=_text(row["path"]),
            pubdate=parse_timestamp(row["pubdate"]),
            timestamp=parse_timestamp(row["timestamp"]),
            flags=_number(row["flags"]),
            uuid=_text(row["uuid"]),
            has_cover=bool(row["has_cover"]),
            comments=_text(row["comments"]),
        )

        if self._visible("authors", fallback="author_sort"):
            doc.authors = decode_authors(row["authors"])
        if not self._visible("comments"):
            doc.comments = ""
        if self._visible("formats"):
            doc.formats = decode_formats(row["formats"])
        if self._visible("identifiers"):
            doc.identifiers = decode_identifiers(row["identifiers"])
        if self._visible("languages"):
            doc.languages = decode_languages(row["languages"])
        # read before `path` may be cleared below
        if self._visible("#pages"):
            doc.pages = self.pages(doc.path)
        if not self._visible("path"):
            doc.path = ""
        if not self._visible("pubdate"):
            doc.pubdate = None
        if self._visible("publisher"):
            doc.publisher = decode_publisher(row["publisher"])
        if not self._visible("rating"):
            doc.rating = 0
        if self._visible("series"):
            doc.series = decode_series(row["series"])
        if self._visible("tags"):
            doc.tags = decode_tags(row["tags"])
        if not self._visible("timestamp"):
            doc.timestamp = None
        if not self._visible("title", fallback="sort"):
            doc.title = ""
        if not self._visible("size"):
            doc.size = 0
        if not self._visible("uuid"):
            doc.uuid = ""

        return doc

    def materialize_all(self, rows: Iterable[sqlite3.Row]) -> list[Document]:
        """Materialize rows in the order the store returned them."""
        return [self.materialize(row) for row in rows]

    def materialize_mini(self, row: sqlite3.Row) -> Document:
        """Convert a calibrowse.db.schema.DOC_MINI_QUERY row (no visibility checks)."""
        return Document(
            id=_number(row["id"]),
            formats=decode_formats(row["formats"]),
            path=_text(row["path"]),
            title=_text(row["title"]),
        )
