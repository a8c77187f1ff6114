# ABOUTME: QueryOptions: the per-request state describing what to list and how.
# ABOUTME: Handles paging, request-parameter reconciliation, and the page-token codec.

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import IntEnum
from typing import Protocol

DEFAULT_BOOKS_PER_PAGE = 24

GUI_LANG_GERMAN = 0
GUI_LANG_ENGLISH = 1
LAYOUT_LIST = 0
LAYOUT_GRID = 1
THEME_LIGHT = 0
THEME_DARK = 1

# Entity names accepted as list filters; "all" means no restriction.
ENTITIES = ("all", "author", "format", "lang", "publisher", "series", "tag")

VIRTLIB_NONE = "-"


class SortBy(IntEnum):
    """Display order of documents. The values are part of the page token."""

    UNSORTED = 0
    ACQUISITION = 1
    AUTHOR = 2
    LANGUAGE = 3
    PUBLISHER = 4
    RATING = 5
    SERIES = 6
    SIZE = 7
    TAGS = 8
    TIME = 9
    TITLE = 10


SORT_NAMES: dict[str, SortBy] = {
    "acquisition": SortBy.ACQUISITION,
    "author": SortBy.AUTHOR,
    "language": SortBy.LANGUAGE,
    "publisher": SortBy.PUBLISHER,
    "rating": SortBy.RATING,
    "series": SortBy.SERIES,
    "size": SortBy.SIZE,
    "tags": SortBy.TAGS,
    "time": SortBy.TIME,
    "title": SortBy.TITLE,
}


class VirtualLibraryLookup(Protocol):
    """Resolves a virtual library name to its search expression."""

    def resolve(self, name: str) -> str | None: ...


# Page-token value patterns; each must be followed by the next "|".
_INT_RE = re.compile(r"\d+(?=\||$)")
_BOOL_RE = re.compile(r"(?:true|false)(?=\||$)")
_STR_RE = re.compile(r'"(?:[^"\\]|\\.)*"(?=\||$)', re.DOTALL)
_VIRTLIB_RE = re.compile(r'(?:-|"(?:[^"\\]|\\.)*")(?=\||$)', re.DOTALL)


def _quote(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def _unquote(token: str) -> str | None:
    try:
        value = json.loads(token)
    except ValueError:
        return None
    return value if isinstance(value, str) else None


def _to_sort(token: str) -> SortBy:
    try:
        return SortBy(int(token))
    except ValueError:
        return SortBy.UNSORTED


def _to_virtlib(token: str) -> str | None:
    if token == VIRTLIB_NONE:
        return ""
    return _unquote(token)


# Token layout: (attribute, value pattern, converter), in serialization order.
_TOKEN_FIELDS = (
    ("id", _INT_RE, int),
    ("descending", _BOOL_RE, lambda token: token == "true"),
    ("entity", _STR_RE, _unquote),
    ("gui_lang", _INT_RE, int),
    ("layout", _INT_RE, int),
    ("limit_length", _INT_RE, int),
    ("limit_start", _INT_RE, int),
    ("matching", _STR_RE, _unquote),
    ("query_count", _INT_RE, int),
    ("sort_by", _INT_RE, _to_sort),
    ("theme", _INT_RE, int),
    ("virt_lib", _VIRTLIB_RE, _to_virtlib),
)


def _param(params: Mapping[str, str], key: str) -> str:
    value = params.get(key)
    return str(value).strip() if value is not None else ""


@dataclass
class QueryOptions:
    """Options configuring a document query.

    An instance lives for one request: it is created with defaults,
    restored from the page token of the previous response, reconciled
    with the request parameters, and serialized again into the next
    page token.
    """

    id: int = 0
    descending: bool = False
    entity: str = ""
    gui_lang: int = GUI_LANG_GERMAN
    layout: int = LAYOUT_LIST
    limit_length: int = 0
    limit_start: int = 0
    matching: str = ""
    query_count: int = 0
    sort_by: SortBy = SortBy.UNSORTED
    theme: int = THEME_LIGHT
    virt_lib: str = ""

    @classmethod
    def new(cls, books_per_page: int | None = DEFAULT_BOOKS_PER_PAGE) -> "QueryOptions":
        """Return options with the request defaults applied."""
        if not isinstance(books_per_page, int) or books_per_page <= 0:
            books_per_page = DEFAULT_BOOKS_PER_PAGE
        return cls(descending=True, limit_length=books_per_page, sort_by=SortBy.ACQUISITION)

    # --- Paging ---

    def increment_page(self) -> "QueryOptions":
        """Advance to the next page. There is no upper bound check."""
        self.limit_start += self.limit_length
        return self

    def decrement_page(self) -> "QueryOptions":
        """Go back one page, never below offset 0."""
        if self.limit_start <= self.limit_length:
            self.limit_start = 0
        else:
            self.limit_start -= self.limit_length
        return self

    # --- Page token ---

    def serialize(self) -> str:
        """Encode all fields as a `|`-delimited page token.

        Layout: |id|descending|"entity"|gui_lang|layout|limit_length|
        limit_start|"matching"|query_count|sort_by|theme|"virt_lib"|
        An empty virtual library is written as a bare `-`.
        """
        virt_lib = _quote(self.virt_lib) if self.virt_lib else VIRTLIB_NONE
        fields = [
            str(self.id),
            "true" if self.descending else "false",
            _quote(self.entity),
            str(self.gui_lang),
            str(self.layout),
            str(self.limit_length),
            str(self.limit_start),
            _quote(self.matching),
            str(self.query_count),
            str(int(self.sort_by)),
            str(self.theme),
            virt_lib,
        ]
        return "|" + "|".join(fields) + "|"

    __str__ = serialize

    @classmethod
    def deserialize(cls, text: str) -> "QueryOptions":
        """Decode a page token; fields that fail to parse stay at zero."""
        return cls().scan(text)

    def scan(self, text: str) -> "QueryOptions":
        """Read a page token into this instance.

        Decoding is positional and lenient: a field that does not parse
        keeps its current value and scanning resumes after the next `|`.
        Never raises.
        """
        text = (text or "").strip()
        pos = 1 if text.startswith("|") else 0
        for name, pattern, convert in _TOKEN_FIELDS:
            if pos > len(text):
                break
            match = pattern.match(text, pos)
            if match is not None:
                value = convert(match.group(0))
                if value is not None:
                    setattr(self, name, value)
                pos = match.end() + 1
                continue
            next_pipe = text.find("|", pos)
            if next_pipe < 0:
                break
            pos = next_pipe + 1
        self.matching = self.matching.strip()
        self.virt_lib = "" if self.virt_lib == VIRTLIB_NONE else self.virt_lib.strip()
        return self

    # --- Request reconciliation ---

    def apply_request(
        self,
        params: Mapping[str, str],
        virtual_libraries: VirtualLibraryLookup | None = None,
    ) -> "QueryOptions":
        """Update the options from request parameters.

        Absent or empty parameters fall back to their defaults, except
        `limitlength`, which keeps the page size carried by the token.
        Any change of search text, sort field, sort direction, virtual
        library or entity filter restarts paging at offset 0.

        Args:
            params: Form/query parameters (guilang, layout, limitlength,
                matching, order, sortby, theme, virtlib, entity, id).
            virtual_libraries: Lookup used to turn a selected virtual
                library into its search expression.

        Returns:
            This instance, updated in place.
        """
        previous_filter = (self.entity, self.id, self.matching)

        self.gui_lang = GUI_LANG_ENGLISH if _param(params, "guilang") == "en" else GUI_LANG_GERMAN
        self.layout = LAYOUT_GRID if _param(params, "layout") == "grid" else LAYOUT_LIST

        raw_length = _param(params, "limitlength")
        if raw_length.isdecimal() and int(raw_length) > 0 and int(raw_length) != self.limit_length:
            self.decrement_page()
            self.limit_length = int(raw_length)

        matching = _param(params, "matching")
        if matching:
            if matching != self.matching:
                self.entity, self.id, self.matching = "", 0, matching
                self.limit_start, self.virt_lib = 0, ""
        else:
            self.entity, self.id, self.matching = "", 0, ""

        descending = _param(params, "order") == "descending"
        if descending != self.descending:
            self.descending, self.limit_start = descending, 0

        raw_sort = _param(params, "sortby")
        sort_by = SORT_NAMES.get(raw_sort, SortBy.UNSORTED) if raw_sort else SortBy.ACQUISITION
        if sort_by != self.sort_by:
            self.sort_by, self.limit_start = sort_by, 0

        self.theme = THEME_DARK if _param(params, "theme") == "dark" else THEME_LIGHT

        virt_lib = _param(params, "virtlib")
        if virt_lib == VIRTLIB_NONE:
            virt_lib = ""
        changed = virt_lib != self.virt_lib
        if changed:
            self.virt_lib = virt_lib
            self.entity, self.id, self.limit_start = "", 0, 0
        # the selected library's definition stands in for the search text
        if virt_lib and (changed or not self.matching) and virtual_libraries is not None:
            definition = virtual_libraries.resolve(virt_lib)
            if definition:
                self.matching = definition.strip()

        entity = _param(params, "entity")
        if entity in ENTITIES:
            raw_id = _param(params, "id")
            entity_id = int(raw_id) if raw_id.isdecimal() else 0
            self.entity, self.id = entity, entity_id
            self.matching, self.virt_lib = "", ""

        # a dropped or replaced filter never keeps the old offset
        if (self.entity, self.id, self.matching) != previous_filter:
            self.limit_start = 0

        return self
