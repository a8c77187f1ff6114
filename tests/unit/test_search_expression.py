# ABOUTME: Unit tests for compiling search expressions into WHERE fragments.
# ABOUTME: Checks field prefixes, exact matches, boolean operators, and bound parameters.

from calibrowse.db.search import Search, like_pattern

PLAIN_FIELD_COUNT = 6


class TestLikePattern:
    """Tests for like_pattern."""

    def test_contains_match(self) -> None:
        """Non-exact patterns are wrapped in wildcards."""
        assert like_pattern("dune") == "%dune%"

    def test_exact_match(self) -> None:
        """Exact patterns carry no wildcards."""
        assert like_pattern("Dune", exact=True) == "Dune"

    def test_wildcards_are_literal(self) -> None:
        """% and _ in the term match themselves."""
        assert like_pattern("50%_off") == "%50\\%\\_off%"

    def test_ctrl_z_kept_literal(self) -> None:
        """Ctrl-Z is not turned into an escaped Z, which would match "Z"."""
        assert like_pattern("a\x1ab") == "%a\x1ab%"
        assert Search("\x1a").params == ("%\x1a%",) * PLAIN_FIELD_COUNT

    def test_quote_escaped_once(self) -> None:
        """Double quotes pass through escape_query exactly once."""
        assert like_pattern('say "hi"') == '%say \\"hi\\"%'


class TestSearchClause:
    """Tests for Search.clause and Search.params."""

    def test_empty_expression(self) -> None:
        """Blank input yields no clause and is falsy."""
        search = Search("   ")
        assert search.clause() == ""
        assert search.params == ()
        assert not search

    def test_plain_term_searches_text_fields(self) -> None:
        """A term without prefix is matched against every text field."""
        search = Search("dune")
        assert search.clause().startswith("WHERE (")
        assert search.params == ("%dune%",) * PLAIN_FIELD_COUNT
        assert "b.title" in search.clause()

    def test_field_prefix(self) -> None:
        """A field prefix restricts the match to that field."""
        search = Search("title:rose")
        assert search.clause() == "WHERE (b.title LIKE ? ESCAPE '\\') "
        assert search.params == ("%rose%",)

    def test_field_alias(self) -> None:
        """Singular field names are accepted."""
        assert Search("tag:mystery").params == Search("tags:mystery").params
        assert "JOIN tags t" in Search("tag:mystery").clause()

    def test_quoted_exact_value(self) -> None:
        """A leading = inside quotes asks for an exact match."""
        search = Search('author:"=Umberto Eco"')
        assert search.params == ("Umberto Eco",)

    def test_quoted_value_keeps_spaces(self) -> None:
        """Quoted values are one term even with spaces."""
        assert Search('title:"name of the"').params == ("%name of the%",)

    def test_escaped_quote_inside_value(self) -> None:
        """Backslash-escaped quotes are part of the value."""
        search = Search('title:"say \\"hi\\""')
        assert search.params == ('%say \\"hi\\"%',)

    def test_identifier_value_with_colon(self) -> None:
        """Identifier searches match "type:value"."""
        search = Search("identifier:isbn:978")
        assert search.params == ("%isbn:978%",)
        assert "i.type || ':' || i.val" in search.clause()

    def test_unknown_field_searched_as_text(self) -> None:
        """An unknown prefix is kept as part of the plain text."""
        assert Search("foo:bar").params == ("%foo:bar%",) * PLAIN_FIELD_COUNT

    def test_exact_without_value_ignored(self) -> None:
        """A bare = has nothing to match and is dropped."""
        assert not Search('tag:"="')


class TestSearchOperators:
    """Tests for and/or/not and grouping."""

    def test_implicit_and(self) -> None:
        """Adjacent terms must all match."""
        clause = Search("title:rose lang:ita").clause()
        assert " AND " in clause
        assert len(Search("title:rose lang:ita").params) == 2

    def test_or(self) -> None:
        """or joins alternatives."""
        search = Search("tag:classics or tag:mystery")
        assert " OR " in search.clause()
        assert search.params == ("%classics%", "%mystery%")

    def test_keywords_case_insensitive(self) -> None:
        """Operators are recognised in any case."""
        assert Search("tag:a OR tag:b").clause() == Search("tag:a or tag:b").clause()

    def test_not(self) -> None:
        """not negates the following term."""
        search = Search("eco and not lang:ita")
        assert "(NOT b.id IN (" in search.clause()
        assert search.params[-1] == "%ita%"

    def test_parentheses_group(self) -> None:
        """Parenthesised groups bind before and."""
        search = Search("(tag:a or tag:b) title:c")
        clause = search.clause()
        assert clause.startswith("WHERE ((")
        assert search.params == ("%a%", "%b%", "%c%")

    def test_unclosed_parenthesis(self) -> None:
        """A missing closing parenthesis is implied."""
        assert Search("(tag:a or tag:b").params == ("%a%", "%b%")

    def test_stray_operators_ignored(self) -> None:
        """Expressions of only operators compile to nothing."""
        assert not Search("or ) and")
        assert not Search("not")

    def test_user_input_never_in_sql(self) -> None:
        """Terms are bound, so quotes and keywords stay out of the SQL text."""
        search = Search("x'); DROP TABLE books; --")
        assert "DROP" not in search.clause()
        assert "'); " not in search.clause()
        assert any("DROP" in param for param in search.params)
