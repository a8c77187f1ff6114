# ABOUTME: Compiles Calibre-style search expressions into a SQL WHERE fragment.
# ABOUTME: Supports field prefixes, exact "=" matches, and/or/not, and parentheses.

import re
from dataclasses import dataclass

from calibrowse.db.clauses import escape_query

_LIKE = "LIKE ? ESCAPE '\\'"

# Field name -> condition on books b; {op} is replaced by the LIKE test.
_FIELD_CONDITIONS = {
    "authors": (
        "b.id IN (SELECT bal.book FROM books_authors_link bal "
        "JOIN authors a ON(bal.author = a.id) WHERE (a.name {op}))"
    ),
    "comments": "b.id IN (SELECT c.book FROM comments c WHERE (c.text {op}))",
    "formats": "b.id IN (SELECT d.book FROM data d WHERE (d.format {op}))",
    "identifiers": (
        "b.id IN (SELECT i.book FROM identifiers i WHERE ((i.type || ':' || i.val) {op}))"
    ),
    "languages": (
        "b.id IN (SELECT bll.book FROM books_languages_link bll "
        "JOIN languages l ON(bll.lang_code = l.id) WHERE (l.lang_code {op}))"
    ),
    "publisher": (
        "b.id IN (SELECT bpl.book FROM books_publishers_link bpl "
        "JOIN publishers p ON(bpl.publisher = p.id) WHERE (p.name {op}))"
    ),
    "series": (
        "b.id IN (SELECT bsl.book FROM books_series_link bsl "
        "JOIN series s ON(bsl.series = s.id) WHERE (s.name {op}))"
    ),
    "tags": (
        "b.id IN (SELECT btl.book FROM books_tags_link btl "
        "JOIN tags t ON(btl.tag = t.id) WHERE (t.name {op}))"
    ),
    "title": "(b.title {op})",
}

_FIELD_ALIASES = {
    "author": "authors",
    "comment": "comments",
    "format": "formats",
    "identifier": "identifiers",
    "lang": "languages",
    "language": "languages",
    "tag": "tags",
}

# Fields a term without prefix is matched against.
_PLAIN_FIELDS = ("title", "authors", "tags", "series", "publisher", "comments")

_KEYWORDS = frozenset({"and", "or", "not"})

_TOKEN_RE = re.compile(
    r"""\s*(?:
        (?P<lparen>\()
       |(?P<rparen>\))
       |(?:(?P<field>[\w\#]+):)?
        (?:"(?P<quoted>(?:[^"\\]|\\.?)*)(?:"|$)|(?P<bare>[^\s()"]+))
    )""",
    re.VERBOSE | re.DOTALL,
)

_UNESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)


@dataclass(frozen=True)
class _Token:
    kind: str  # "(", ")", "and", "or", "not" or "term"
    field: str = ""
    value: str = ""


def _tokenize(expression: str) -> list[_Token]:
    tokens: list[_Token] = []
    pos = 0
    text = expression.strip()
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None or match.end() == pos:
            pos += 1
            continue
        pos = match.end()
        if match.group("lparen"):
            tokens.append(_Token("("))
        elif match.group("rparen"):
            tokens.append(_Token(")"))
        elif match.group("quoted") is not None:
            value = _UNESCAPE_RE.sub(lambda m: m.group(1), match.group("quoted"))
            tokens.append(_Token("term", (match.group("field") or "").lower(), value))
        else:
            bare = match.group("bare")
            field = (match.group("field") or "").lower()
            if not field and bare.lower() in _KEYWORDS:
                tokens.append(_Token(bare.lower()))
            else:
                tokens.append(_Token("term", field, bare))
    return tokens


def like_pattern(value: str, exact: bool = False) -> str:
    """Build a LIKE pattern (escape character `\\`) matching `value` literally.

    Ctrl-Z is kept as is: its `\\Z` escape would match a plain "Z" under LIKE.
    """
    escaped = "\x1a".join(escape_query(part) for part in value.split("\x1a"))
    escaped = escaped.replace("%", "\\%").replace("_", "\\_")
    return escaped if exact else f"%{escaped}%"


_Fragment = tuple[str, list[str]]


class _Parser:
    """Recursive-descent parser emitting SQL fragments with bound values.

    Malformed input never raises: stray operators and closing parentheses
    are skipped and a missing closing parenthesis is implied.
    """

    def __init__(self, tokens: list[_Token]) -> None:
        self._tokens = tokens
        self._pos = 0

    def _peek(self) -> str | None:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos].kind
        return None

    def parse(self) -> _Fragment | None:
        parts = []
        while self._peek() is not None:
            node = self._parse_or()
            if node is not None:
                parts.append(node)
            if self._peek() is not None:
                self._pos += 1  # unbalanced ")" or a dangling "or"
        return _join(parts, "AND")

    def _parse_or(self) -> _Fragment | None:
        parts = []
        node = self._parse_and()
        if node is not None:
            parts.append(node)
        while self._peek() == "or":
            self._pos += 1
            node = self._parse_and()
            if node is not None:
                parts.append(node)
        return _join(parts, "OR")

    def _parse_and(self) -> _Fragment | None:
        parts = []
        while self._peek() not in (None, "or", ")"):
            if self._peek() == "and":
                self._pos += 1
                continue
            node = self._parse_not()
            if node is not None:
                parts.append(node)
        return _join(parts, "AND")

    def _parse_not(self) -> _Fragment | None:
        token = self._tokens[self._pos]
        self._pos += 1
        if token.kind == "not":
            if self._peek() in (None, "or", ")"):
                return None
            inner = self._parse_not()
            if inner is None:
                return None
            return f"(NOT {inner[0]})", inner[1]
        if token.kind == "(":
            inner = self._parse_or()
            if self._peek() == ")":
                self._pos += 1
            return inner
        return _term(token.field, token.value)


def _join(parts: list[_Fragment], operator: str) -> _Fragment | None:
    if not parts:
        return None
    if len(parts) == 1:
        return parts[0]
    sql = "(" + f" {operator} ".join(part[0] for part in parts) + ")"
    params = [param for part in parts for param in part[1]]
    return sql, params


def _term(field: str, value: str) -> _Fragment | None:
    exact = value.startswith("=")
    if exact:
        value = value[1:]
    if not value:
        return None
    pattern = like_pattern(value, exact)
    field = _FIELD_ALIASES.get(field, field)
    condition = _FIELD_CONDITIONS.get(field)
    if condition is not None:
        return condition.format(op=_LIKE), [pattern]
    if field:
        # unknown prefix: search the whole token as text
        pattern = like_pattern(f"{field}:{value}", exact)
    conditions = [_FIELD_CONDITIONS[name].format(op=_LIKE) for name in _PLAIN_FIELDS]
    return "(" + " OR ".join(conditions) + ")", [pattern] * len(_PLAIN_FIELDS)


class Search:
    """A parsed search expression.

    `clause()` returns the WHERE fragment to append to a document or
    count query and `params` the values bound to its placeholders.
    Every term is passed through `escape_query` exactly once and
    matched with LIKE, so user input never becomes part of the SQL text.
    """

    def __init__(self, expression: str) -> None:
        self.expression = expression.strip()
        compiled = _Parser(_tokenize(self.expression)).parse()
        self._where, self._params = compiled if compiled else ("", [])

    @property
    def params(self) -> tuple[str, ...]:
        return tuple(self._params)

    def clause(self) -> str:
        """Return "WHERE <condition> " or "" for an empty expression."""
        if not self._where:
            return ""
        return f"WHERE {self._where} "

    def __bool__(self) -> bool:
        return bool(self._where)
