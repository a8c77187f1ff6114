# ABOUTME: Integration tests for text searches against a real metadata.db.
# ABOUTME: Validates field searches, exact matches, boolean operators, and the no-match error.

import pytest

from calibrowse.db.catalog import LibraryCatalog
from calibrowse.db.errors import NoDocumentsFoundError
from calibrowse.query.options import QueryOptions, SortBy


def _search(catalog: LibraryCatalog, expression: str, **fields: object) -> tuple[int, set[int]]:
    options = QueryOptions.new()
    options.matching = expression
    for name, value in fields.items():
        setattr(options, name, value)
    count, docs = catalog.query_search(options)
    return count, {doc.id for doc in docs}


class TestQuerySearch:
    """Tests for LibraryCatalog.query_search."""

    def test_plain_term(self, catalog: LibraryCatalog) -> None:
        """A plain term finds books by title, series and more."""
        assert _search(catalog, "dune") == (1, {2})

    def test_case_insensitive(self, catalog: LibraryCatalog) -> None:
        """Matching ignores ASCII case."""
        assert _search(catalog, "DUNE") == (1, {2})

    def test_plain_term_matches_authors(self, catalog: LibraryCatalog) -> None:
        """Author names are part of the plain-text search."""
        assert _search(catalog, "eco") == (2, {1, 4})

    def test_author_field(self, catalog: LibraryCatalog) -> None:
        """author: restricts to author names."""
        assert _search(catalog, "author:eco") == (2, {1, 4})

    def test_exact_author(self, catalog: LibraryCatalog) -> None:
        """An exact match needs the whole name."""
        assert _search(catalog, 'author:"=Umberto Eco"') == (2, {1, 4})

    def test_exact_partial_name_fails(self, catalog: LibraryCatalog) -> None:
        """Part of a name is not an exact match."""
        with pytest.raises(NoDocumentsFoundError):
            _search(catalog, 'author:"=Eco"')

    def test_title_field(self, catalog: LibraryCatalog) -> None:
        """title: searches only titles."""
        assert _search(catalog, "title:rose") == (1, {1})

    def test_or(self, catalog: LibraryCatalog) -> None:
        """Either alternative may match."""
        assert _search(catalog, "tag:classics or tag:mystery") == (2, {1, 3})

    def test_and_not(self, catalog: LibraryCatalog) -> None:
        """not excludes matches of the negated term."""
        assert _search(catalog, "eco and not lang:ita") == (1, {1})

    def test_identifier(self, catalog: LibraryCatalog) -> None:
        """Identifiers are searched as "type:value"."""
        assert _search(catalog, "identifier:isbn:978") == (2, {1, 2})

    def test_format(self, catalog: LibraryCatalog) -> None:
        """format: matches stored file formats."""
        assert _search(catalog, "format:mobi") == (1, {2})

    def test_comments(self, catalog: LibraryCatalog) -> None:
        """Comments are searched too."""
        assert _search(catalog, "comments:monastery") == (1, {1})

    def test_no_match_raises(self, catalog: LibraryCatalog) -> None:
        """A search without results is reported as an error."""
        with pytest.raises(NoDocumentsFoundError, match="No documents found"):
            _search(catalog, "zzz_no_such_term")

    @pytest.mark.parametrize("expression", ["not", "and or", "( )", 'tag:"="'])
    def test_no_search_term_raises(self, catalog: LibraryCatalog, expression: str) -> None:
        """Expressions without any term match nothing instead of everything."""
        with pytest.raises(NoDocumentsFoundError):
            _search(catalog, expression)

    @pytest.mark.parametrize(
        "expression",
        ['O\'Brien "unterminated', 'a"b\\c', "x'); DROP TABLE books; --", "50%", "_", "\x1a"],
    )
    def test_hostile_input_is_just_text(self, catalog: LibraryCatalog, expression: str) -> None:
        """Quotes, wildcards and SQL in the input never reach the statement."""
        with pytest.raises(NoDocumentsFoundError):
            _search(catalog, expression)
        assert len(catalog.query_ids()) == 5


class TestSearchOrderingAndPaging:
    """Search results honour sort order and limits."""

    def test_sorted_by_title(self, catalog: LibraryCatalog) -> None:
        """Search results follow the requested order."""
        options = QueryOptions.new()
        options.matching = "author:eco"
        options.sort_by, options.descending = SortBy.TITLE, False
        _, docs = catalog.query_search(options)
        assert [doc.id for doc in docs] == [1, 4]

    def test_count_covers_all_pages(self, catalog: LibraryCatalog) -> None:
        """The count is the total, the documents only one page."""
        options = QueryOptions.new(2)
        options.matching = "lang:eng"
        count, docs = catalog.query_search(options)
        assert count == 4
        assert [doc.id for doc in docs] == [5, 3]
