# ABOUTME: Shared listing flow for the ls and search commands.
# ABOUTME: Builds QueryOptions from CLI input, runs the query, and prints a Rich table.

from rich.console import Console
from rich.table import Table

from calibrowse.db.document import Document
from calibrowse.db.library import Library
from calibrowse.query.options import QueryOptions


def build_options(
    library: Library,
    params: dict[str, str],
    *,
    limit: int | None,
    page_token: str | None,
) -> QueryOptions:
    """Restore options from a page token and apply the command's parameters."""
    options = QueryOptions.new(limit)
    if page_token:
        options.scan(page_token)
    if limit:
        params = {**params, "limitlength": str(limit)}
    return options.apply_request(params, library.virtual_libraries)


def _series_display(doc: Document) -> str:
    if doc.series is None:
        return ""
    return f"{doc.series.name} #{doc.series_index:g}"


def print_documents(
    console: Console,
    options: QueryOptions,
    count: int,
    documents: list[Document],
) -> None:
    """Print one page of documents plus the token for the next page."""
    table = Table()
    table.add_column("ID", style="dim", width=5)
    table.add_column("Title", style="bold")
    table.add_column("Author")
    table.add_column("Series")
    table.add_column("Lang", width=5)

    for doc in documents:
        table.add_row(
            str(doc.id),
            doc.title,
            doc.author_names or "[dim]unknown[/dim]",
            _series_display(doc),
            ", ".join(lang.name for lang in doc.languages) or "?",
        )

    console.print(table)
    first = options.limit_start + 1 if documents else 0
    last = options.limit_start + len(documents)
    console.print(f"\n[dim]{first}-{last} of {count} document(s)[/dim]")

    if last < count:
        token = options.increment_page().serialize()
        console.print("Next page:", token, markup=False, highlight=False, soft_wrap=True)
