# ABOUTME: The Document record produced by catalog queries.
# ABOUTME: Scalar book columns plus decoded entity tuples, and file-path helpers.

import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from calibrowse.db.entities import Entity

COVER_FILENAME = "cover.jpg"

_ID_SUFFIX_RE = re.compile(r"\s*\(\d+\)$")


@dataclass
class Document:
    """A cataloged book as returned by a query.

    Fields hidden by the visibility policy keep their zero value
    (empty string, 0, empty tuple or None) instead of being dropped.
    """

    id: int = 0
    title: str = ""
    title_sort: str = ""
    author_sort: str = ""
    rating: int = 0
    size: int = 0
    series_index: float = 0.0
    isbn: str = ""
    lccn: str = ""
    path: str = ""
    pubdate: datetime | None = None
    timestamp: datetime | None = None
    flags: int = 0
    uuid: str = ""
    has_cover: bool = False
    comments: str = ""
    pages: int = 0
    authors: tuple[Entity, ...] = ()
    formats: tuple[Entity, ...] = ()
    identifiers: tuple[Entity, ...] = ()
    languages: tuple[Entity, ...] = ()
    tags: tuple[Entity, ...] = ()
    publisher: Entity | None = None
    series: Entity | None = None

    @property
    def author_names(self) -> str:
        """Joined author names for display."""
        return ", ".join(author.name for author in self.authors)

    def _directory(self, library_path: Path | None) -> Path:
        if library_path is None:
            return Path(self.path)
        return library_path / self.path

    def cover_path(self, library_path: Path | None = None) -> str:
        """Path of the cover image, relative unless a library path is given."""
        if not self.has_cover or not self.path:
            return ""
        return str(self._directory(library_path) / COVER_FILENAME)

    def filename(self, fmt: str, library_path: Path | None = None) -> str:
        """Path of the book file for `fmt`, or "" if that format is missing.

        Calibre stores a book under "<author>/<title> (<id>)/" and names
        its files "<title> - <author>.<ext>", so the name is rebuilt
        from the directory path rather than from the (possibly hidden)
        title and author fields.
        """
        wanted = fmt.upper()
        if not self.path or not any(f.name.upper() == wanted for f in self.formats):
            return ""
        relative = Path(self.path)
        title = _ID_SUFFIX_RE.sub("", relative.name)
        author = relative.parts[0] if len(relative.parts) > 1 else ""
        stem = f"{title} - {author}" if author else title
        return str(self._directory(library_path) / f"{stem}.{fmt.lower()}")

    def filenames(self, library_path: Path) -> dict[str, str]:
        """Map every available format to its absolute file path."""
        return {f.name: self.filename(f.name, library_path) for f in self.formats}
