"""Command-line interface for readinglist.

Built with Typer for commands and Rich for output.
"""

from pathlib import Path
from typing import Optional, Union

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import configure_logging
from .db import get_db
from .db.schemas import Book, BookFormat, ReadingStatus

# Create the main app
app = typer.Typer(
    name="readinglist",
    help="Import, reconcile and track your Notion reading list.",
    no_args_is_help=True,
)

# Rich console for pretty output
console = Console()


# ============================================================================
# Helper Functions
# ============================================================================


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


def format_rating(rating: Optional[float]) -> str:
    if not rating:
        return "-"
    stars = int(round(rating))
    return "★" * stars + "☆" * (5 - stars)


def format_book_table(books: list[Book], title: str = "Books") -> Table:
    """Create a rich table for displaying books."""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", max_width=8)
    table.add_column("Title", style="cyan", no_wrap=False, max_width=40)
    table.add_column("Author", style="green", max_width=25)
    table.add_column("Status", style="yellow")
    table.add_column("Format")
    table.add_column("Rating", justify="center")

    for book in books:
        table.add_row(
            book.id[:8],
            book.title,
            book.author,
            book.status.value,
            book.format.value,
            format_rating(book.rating),
        )

    return table


def _get_book_or_exit(book_id: str) -> Book:
    """Find a book by id or by a unique id prefix, as shown by `list`."""
    db = get_db()
    book = db.get_book(book_id)
    if book is not None:
        return book

    matches = [b for b in db.list_books() if b.id.startswith(book_id)]
    if len(matches) == 1:
        return matches[0]
    if matches:
        print_error(f"Ambiguous id: {book_id} ({len(matches)} books)")
    else:
        print_error(f"No book with id: {book_id}")
    raise typer.Exit(1)


@app.callback()
def main_callback(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level (default from READINGLIST_LOG_LEVEL)"
    ),
) -> None:
    """Import, reconcile and track your Notion reading list."""
    configure_logging(log_level)


# ============================================================================
# Import Commands
# ============================================================================


@app.command("import")
def import_cmd(
    files: list[Path] = typer.Argument(..., help="Notion CSV or Markdown exports"),
    enrich: bool = typer.Option(
        False, "--enrich", "-e", help="Fetch missing covers and metadata online"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Preview without saving"),
) -> None:
    """Import books from Notion exports and merge duplicates."""
    from .etl import import_files

    missing = [f for f in files if not f.exists()]
    if missing:
        for f in missing:
            print_error(f"File not found: {f}")
        raise typer.Exit(1)

    result = import_files(files, enrich=enrich, show_progress=enrich, dry_run=dry_run)

    for path in result.skipped_files:
        print_warning(f"Skipped {path}: not a .csv or .md file")

    if result.errors:
        for error in result.errors:
            print_error(error)
        raise typer.Exit(1)

    if dry_run:
        console.print(f"[dim]{result.summary}[/dim]")
        console.print("[dim]Dry run - no changes made.[/dim]")
        return

    print_success(f"Import complete! {result.summary}")


@app.command()
def dedupe(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Merge duplicate books in the reading list."""
    from .etl import count_duplicates, remove_duplicates

    duplicates = count_duplicates(get_db().list_books())
    if not duplicates:
        console.print("[dim]No duplicates found.[/dim]")
        return

    if not yes and not typer.confirm(f"Merge {duplicates} duplicate(s)?", default=True):
        console.print("[dim]Cancelled.[/dim]")
        raise typer.Exit(0)

    removed = remove_duplicates()
    if not removed:
        print_error("Could not save the merged reading list")
        raise typer.Exit(1)
    print_success(f"Merged {removed} duplicate(s)")


# ============================================================================
# Book Management Commands
# ============================================================================


@app.command()
def add(
    title: str = typer.Argument(..., help="Book title"),
    author: str = typer.Option(..., "--author", "-a", prompt="Author"),
    status: ReadingStatus = typer.Option(
        ReadingStatus.WANT_TO_READ, "--status", "-s", help="Reading status"
    ),
    format: Optional[BookFormat] = typer.Option(None, "--format", "-f", help="Book format"),
    lookup: bool = typer.Option(
        False, "--lookup/--no-lookup", help="Fetch cover and metadata online"
    ),
) -> None:
    """Add a book manually."""
    from .api import get_book_metadata
    from .etl import add_book

    book = add_book(
        title,
        author,
        status=status,
        format=format,
        lookup=get_book_metadata if lookup else None,
    )
    if book is None:
        print_error("Could not save the book")
        raise typer.Exit(1)

    print_success(f"Added: {book.title} by {book.author}")
    console.print(f"[dim]id: {book.id}[/dim]")


@app.command("list")
def list_books(
    status: Optional[ReadingStatus] = typer.Option(None, "--status", "-s", help="Filter by status"),
    format: Optional[BookFormat] = typer.Option(None, "--format", "-f", help="Filter by format"),
    rating: Optional[str] = typer.Option(
        None, "--rating", "-r", help="'rated', 'unrated' or a rating"
    ),
    search: Optional[str] = typer.Option(
        None, "--search", "-q", help="Match title or author"
    ),
) -> None:
    """List books, optionally filtered."""
    from .library import RATED, UNRATED, filter_books

    rating_filter: Optional[Union[str, float]] = rating
    if rating is not None and rating not in (RATED, UNRATED):
        try:
            rating_filter = float(rating)
        except ValueError:
            print_error(f"Invalid rating filter: {rating}")
            raise typer.Exit(1)

    all_books = get_db().list_books()
    books = filter_books(
        all_books, status=status, format=format, rating=rating_filter, query=search
    )

    if not books:
        console.print("[dim]No books found.[/dim]")
        return

    console.print(format_book_table(books, title="Reading List"))
    if len(books) < len(all_books):
        console.print(f"[dim]Showing {len(books)} of {len(all_books)} books[/dim]")


@app.command()
def show(
    book_id: str = typer.Argument(..., help="Book ID"),
) -> None:
    """Show all details of a book."""
    book = _get_book_or_exit(book_id)

    lines = [
        f"[bold]Author:[/bold] {book.author}",
        f"[bold]Status:[/bold] {book.status.value}",
        f"[bold]Format:[/bold] {book.format.value}",
        f"[bold]Rating:[/bold] {format_rating(book.rating)}",
    ]
    optional = [
        ("ISBN", book.isbn),
        ("Pages", book.page_count),
        ("Published", book.published_date),
        ("Genres", ", ".join(book.genres) if book.genres else None),
        ("Added", book.date_added),
        ("Started", book.date_started),
        ("Finished", book.date_finished),
        ("Cover", book.cover_url),
        ("Link", book.review_url),
    ]
    lines.extend(f"[bold]{label}:[/bold] {value}" for label, value in optional if value)
    if book.description:
        lines.append(f"\n{book.description}")
    if book.notes:
        lines.append(f"\n[italic]{book.notes}[/italic]")

    console.print(Panel("\n".join(lines), title=book.title, subtitle=book.id))


@app.command()
def status(
    book_id: str = typer.Argument(..., help="Book ID"),
    new_status: ReadingStatus = typer.Argument(..., help="New reading status"),
) -> None:
    """Change a book's reading status."""
    from .etl import update_status

    book = _get_book_or_exit(book_id)
    book = update_status(book.id, new_status)
    if book is None:
        print_error("Could not update the book")
        raise typer.Exit(1)
    print_success(f"{book.title}: {book.status.value}")


@app.command()
def rate(
    book_id: str = typer.Argument(..., help="Book ID"),
    rating: Optional[float] = typer.Argument(None, min=1, max=5, help="Rating 1-5"),
    clear: bool = typer.Option(False, "--clear", help="Remove the rating"),
) -> None:
    """Rate a book, or clear its rating."""
    from .etl import update_rating

    if rating is None and not clear:
        print_error("Give a rating or --clear")
        raise typer.Exit(1)

    book = _get_book_or_exit(book_id)
    book = update_rating(book.id, None if clear else rating)
    if book is None:
        print_error("Could not update the book")
        raise typer.Exit(1)
    print_success(f"{book.title}: {format_rating(book.rating)}")


@app.command()
def delete(
    book_id: str = typer.Argument(..., help="Book ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a book from the reading list."""
    book = _get_book_or_exit(book_id)

    if not yes and not typer.confirm(f"Delete '{book.title}'?", default=False):
        console.print("[dim]Cancelled.[/dim]")
        raise typer.Exit(0)

    get_db().delete_book(book.id)
    print_success(f"Deleted: {book.title}")


# ============================================================================
# Statistics and Export Commands
# ============================================================================


@app.command()
def stats() -> None:
    """Show reading statistics."""
    from .stats import calculate_reading_stats

    books = get_db().list_books()
    if not books:
        console.print("[dim]No books in reading list.[/dim]")
        return

    reading_stats = calculate_reading_stats(books)

    table = Table(title="Reading List Overview", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")

    table.add_row("Total books", str(reading_stats.total_books))
    table.add_row("Finished", str(reading_stats.finished_books))
    table.add_row("Currently reading", str(reading_stats.currently_reading))
    table.add_row("Want to read", str(reading_stats.want_to_read))
    table.add_row("Abandoned", str(reading_stats.abandoned))
    table.add_row("Finished this year", str(reading_stats.books_finished_this_year))
    table.add_row("Finished this month", str(reading_stats.books_finished_this_month))
    if reading_stats.total_ratings:
        table.add_row("Average rating", f"{reading_stats.average_rating:.1f} / 5")
    if reading_stats.total_pages:
        table.add_row("Pages", f"{reading_stats.total_pages:,}")

    console.print(table)

    if reading_stats.top_authors:
        console.print()
        authors = Table(title="Top Authors", show_header=True, header_style="bold")
        authors.add_column("Author", style="cyan")
        authors.add_column("Books", style="green", justify="right")
        for author, count in reading_stats.top_authors:
            authors.add_row(author, str(count))
        console.print(authors)

    if any(count for _, count in reading_stats.reading_timeline):
        console.print()
        timeline = Table(title="Finished per Month", show_header=True, header_style="bold")
        timeline.add_column("Month", style="cyan")
        timeline.add_column("Books", style="green", justify="right")
        for label, count in reading_stats.reading_timeline:
            timeline.add_row(label, str(count))
        console.print(timeline)


@app.command()
def export(
    output: Path = typer.Argument(..., help="Output JSON file"),
) -> None:
    """Export the reading list to JSON."""
    count = get_db().export_json(output)
    print_success(f"Exported {count} books to {output}")


# ============================================================================
# Version Command
# ============================================================================


@app.command()
def version() -> None:
    """Show version information."""
    from . import __version__

    console.print(f"readinglist version {__version__}")


# ============================================================================
# Main Entry Point
# ============================================================================


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
