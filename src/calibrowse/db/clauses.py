# ABOUTME: SQL clause fragments for filtering, sorting, and paging document queries.
# ABOUTME: Builds the entity JOIN/WHERE, ORDER BY, and LIMIT parts, plus search escaping.

from calibrowse.query.options import SortBy

# Entity name -> JOIN/WHERE fragment restricting books to one entity id.
_HAVING = {
    "author": "JOIN books_authors_link a ON(a.book = b.id) WHERE (a.author = {id}) ",
    "format": (
        "JOIN data d ON(b.id = d.book) JOIN data dd ON(d.format = dd.format) "
        "WHERE (dd.id = {id}) "
    ),
    "lang": "JOIN books_languages_link l ON(l.book = b.id) WHERE (l.lang_code = {id}) ",
    "publisher": "JOIN books_publishers_link p ON(p.book = b.id) WHERE (p.publisher = {id}) ",
    "series": "JOIN books_series_link s ON(s.book = b.id) WHERE (s.series = {id}) ",
    "tag": "JOIN books_tags_link t ON(t.book = b.id) WHERE (t.tag = {id}) ",
}

ENTITY_NAMES: frozenset[str] = frozenset(_HAVING)

# Sort key -> columns; the direction is appended to every column.
_ORDER_COLUMNS = {
    SortBy.ACQUISITION: ("b.timestamp", "b.pubdate", "b.author_sort"),
    SortBy.AUTHOR: ("b.author_sort", "b.timestamp"),
    SortBy.LANGUAGE: ("languages", "b.author_sort", "b.sort"),
    SortBy.PUBLISHER: ("publisher", "b.author_sort", "b.sort"),
    SortBy.RATING: ("rating", "b.author_sort", "b.sort"),
    SortBy.SERIES: ("series", "b.series_index", "b.sort"),
    SortBy.SIZE: ("size", "b.author_sort"),
    SortBy.TAGS: ("tags", "b.author_sort"),
    SortBy.TIME: ("b.pubdate", "b.timestamp", "b.author_sort"),
    SortBy.TITLE: ("b.sort", "b.author_sort"),
}

_ESCAPED = {"\n": "\\\n", "\r": "\\\r", "\\": "\\\\", '"': '\\"', "\x1a": "\\Z"}


def having(entity: str, entity_id: int) -> str:
    """Return a fragment limiting the query to books linked to `entity_id`.

    An empty entity, "all", an unknown entity name or a zero id yield an
    empty string, i.e. no restriction.
    """
    if not entity or entity == "all" or not entity_id:
        return ""
    template = _HAVING.get(entity)
    if template is None:
        return ""
    return template.format(id=int(entity_id))


def order_by(sort_by: SortBy | int, descending: bool) -> str:
    """Return an ORDER BY clause, or "" for unsorted/unknown keys."""
    try:
        columns = _ORDER_COLUMNS.get(SortBy(sort_by))
    except ValueError:
        return ""
    if not columns:
        return ""
    direction = " DESC" if descending else ""
    return " ORDER BY " + ", ".join(column + direction for column in columns) + " "


def limit(start: int, length: int) -> str:
    """Return a LIMIT clause for `length` rows beginning at offset `start`."""
    return f"LIMIT {int(start)},{int(length)}"


def escape_query(source: str) -> str:
    """Backslash-escape characters that could end a double-quoted term.

    Newline, carriage return, backslash and double quote get a leading
    backslash; Ctrl-Z becomes `\\Z`. Apostrophes are left alone since
    they are common in titles and terms are enclosed in double quotes.
    Applying this twice escapes the escapes, so call it once per raw term.
    """
    return "".join(_ESCAPED.get(char, char) for char in source)
