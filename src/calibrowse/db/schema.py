# ABOUTME: SQL projection statements against Calibre's metadata.db schema.
# ABOUTME: Clause fragments from calibrowse.db.clauses are appended to these.

# Full document projection. One-to-many relations are packed into a
# single text column each ("name|id, name|id"), identifiers as
# "type|id|value". Appending a WHERE/ORDER BY/LIMIT clause narrows it.
BASE_QUERY = """SELECT b.id,
b.title,
IFNULL((SELECT group_concat(a.name || '|' || a.id, ', ')
    FROM authors a
    JOIN books_authors_link bal ON(bal.author = a.id)
    WHERE (bal.book = b.id)
), '') authors,
IFNULL((SELECT group_concat(p.name || '|' || p.id, ', ')
    FROM publishers p
    JOIN books_publishers_link bpl ON(p.id = bpl.publisher)
    WHERE (bpl.book = b.id)
), '') publisher,
IFNULL((SELECT r.rating
    FROM ratings r
    WHERE r.id IN (
        SELECT brl.rating
        FROM books_ratings_link brl
        WHERE (brl.book = b.id)
    )
), 0) rating,
b.timestamp,
IFNULL((SELECT MAX(data.uncompressed_size)
    FROM data
    WHERE (data.book = b.id)
), 0) size,
IFNULL((SELECT group_concat(t.name || '|' || t.id, ', ')
    FROM tags t
    JOIN books_tags_link btl ON(btl.tag = t.id)
    WHERE (btl.book = b.id)
), '') tags,
IFNULL((SELECT c.text
    FROM comments c
    WHERE (c.book = b.id)
), '') comments,
IFNULL((SELECT group_concat(s.name || '|' || s.id, ', ')
    FROM series s
    JOIN books_series_link bsl ON(bsl.series = s.id)
    WHERE (bsl.book = b.id)
), '') series,
b.series_index,
b.sort AS title_sort,
b.author_sort,
IFNULL((SELECT group_concat(d.format || '|' || d.id, ', ')
    FROM data d
    WHERE (d.book = b.id)
), '') formats,
IFNULL((SELECT group_concat(l.lang_code || '|' || l.id, ', ')
    FROM books_languages_link bll
    JOIN languages l ON(bll.lang_code = l.id)
    WHERE (bll.book = b.id)
), '') languages,
b.isbn,
IFNULL((SELECT group_concat(i.type || '|' || i.id || '|' || i.val, ', ')
    FROM identifiers i
    WHERE (i.book = b.id)
), '') identifiers,
b.path,
b.lccn,
b.pubdate,
b.flags,
b.uuid,
b.has_cover
FROM books b """

COUNT_QUERY = "SELECT COUNT(b.id) FROM books b "

# Only id, formats, path and title; enough to locate a document's files.
DOC_MINI_QUERY = """SELECT b.id,
IFNULL((SELECT group_concat(d.format || '|' || d.id, ', ')
    FROM data d
    WHERE (d.book = b.id)
), '') formats,
b.path,
b.title
FROM books b
WHERE (b.id = ?)"""

ID_QUERY = "SELECT id, path FROM books "

CUSTOM_COLUMNS_QUERY = "SELECT id, label, name, datatype FROM custom_columns "

PREFERENCES_QUERY = "SELECT key, val FROM preferences "
