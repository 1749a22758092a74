"""Tests for import orchestration."""

from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from readinglist.api import MetadataLookupError
from readinglist.db.schemas import BookFormat, ReadingStatus
from readinglist.etl.load import (
    ImportResult,
    add_book,
    enrich_books,
    import_files,
    import_text,
    remove_duplicates,
    update_rating,
    update_status,
)


def _store_error(*args, **kwargs):
    raise OperationalError("stmt", {}, Exception("disk I/O error"))


class TestImportText:
    """Tests for dispatching on export kind."""

    def test_csv(self):
        """Test CSV text."""
        books = import_text("title,author\nDune,Frank Herbert\n", "csv")
        assert books[0].title == "Dune"

    def test_markdown(self):
        """Test Markdown text."""
        books = import_text("# Dune\nAuthor: Frank Herbert\n", "markdown")
        assert books[0].title == "Dune"

    def test_unknown_kind(self):
        """Test an unknown kind is a programmer error."""
        with pytest.raises(ValueError):
            import_text("", "xml")


class TestImportFiles:
    """Tests for importing export files into the store."""

    def test_imports_csv_and_markdown(self, db, tmp_path, notion_csv, notion_markdown):
        """Test both exports are parsed, reconciled and stored."""
        csv_file = tmp_path / "books.csv"
        csv_file.write_text(notion_csv, encoding="utf-8")
        md_file = tmp_path / "books.md"
        md_file.write_text(notion_markdown, encoding="utf-8")

        result = import_files([csv_file, md_file], db=db)

        assert isinstance(result, ImportResult)
        assert result.parsed == 5
        assert result.duplicates_removed == 2
        assert result.total == 3
        assert [b.title for b in db.list_books()] == [
            "Project Hail Mary",
            "Dune",
            "The Long, Winding Road",
        ]

        phm = db.list_books()[0]
        assert phm.rating == 5
        assert phm.notes == "Loved it\n\n---\n\nRocky: best character"

    def test_stored_books_keep_ids(self, db, tmp_path, make_book):
        """Test existing records survive a re-import of the same book."""
        stored = db.create_book(make_book("Dune", "Frank Herbert", rating=3))
        csv_file = tmp_path / "books.csv"
        csv_file.write_text("title,author,rating\ndune,frank herbert,5\n", encoding="utf-8")

        result = import_files([csv_file], db=db)

        assert result.duplicates_removed == 1
        books = db.list_books()
        assert len(books) == 1
        assert books[0].id == stored.id
        assert books[0].rating == 5

    def test_reimport_is_stable(self, db, tmp_path, notion_csv):
        """Test importing the same file twice adds nothing."""
        csv_file = tmp_path / "books.csv"
        csv_file.write_text(notion_csv, encoding="utf-8")

        import_files([csv_file], db=db)
        first = db.list_books()
        import_files([csv_file], db=db)

        assert db.list_books() == first

    def test_skips_other_files(self, db, tmp_path):
        """Test unsupported files are reported and ignored."""
        txt = tmp_path / "notes.txt"
        txt.write_text("title,author\nDune,Frank Herbert\n", encoding="utf-8")

        result = import_files([txt], db=db)

        assert result.skipped_files == [txt]
        assert result.parsed == 0
        assert db.count_books() == 0

    def test_bom_is_ignored(self, db, tmp_path):
        """Test a UTF-8 byte-order mark does not break the headers."""
        csv_file = tmp_path / "books.csv"
        csv_file.write_bytes("title,author\nDune,Frank Herbert\n".encode("utf-8-sig"))

        result = import_files([csv_file], db=db)
        assert result.total == 1

    def test_cp1252_export(self, db, tmp_path):
        """Test a non-UTF-8 export is still read."""
        csv_file = tmp_path / "export.csv"
        csv_file.write_bytes("Title,Author\nLes Misérables,Victor Hugo\n".encode("cp1252"))

        result = import_files([csv_file], db=db)

        assert result.errors == []
        assert result.total == 1
        assert db.list_books()[0].title == "Les Misérables"

    def test_latin1_fallback(self, db, tmp_path):
        """Test bytes cp1252 leaves undefined fall back to latin-1."""
        csv_file = tmp_path / "export.csv"
        csv_file.write_bytes(b"Title,Author\nDune\x81,Frank Herbert\n")

        result = import_files([csv_file], db=db)

        assert result.total == 1
        assert db.list_books()[0].title == "Dune\x81"

    def test_unreadable_file_does_not_stop_import(self, db, tmp_path):
        """Test a file that cannot be read is reported and the rest imported."""
        unreadable = tmp_path / "folder.csv"
        unreadable.mkdir()
        csv_file = tmp_path / "books.csv"
        csv_file.write_text("title,author\nDune,Frank Herbert\n", encoding="utf-8")

        result = import_files([unreadable, csv_file], db=db)

        assert len(result.errors) == 1
        assert "folder.csv" in result.errors[0]
        assert result.total == 1
        assert db.count_books() == 1

    def test_dry_run_does_not_write(self, db, tmp_path):
        """Test dry run reconciles without saving."""
        csv_file = tmp_path / "books.csv"
        csv_file.write_text("title,author\nDune,Frank Herbert\n", encoding="utf-8")

        result = import_files([csv_file], db=db, dry_run=True)

        assert result.total == 1
        assert db.count_books() == 0

    def test_enrich_fills_missing(self, db, tmp_path, fake_lookup):
        """Test enrichment fills books without a cover."""
        csv_file = tmp_path / "books.csv"
        csv_file.write_text("title,author\nDune,Frank Herbert\n", encoding="utf-8")

        import_files([csv_file], db=db, enrich=True, lookup=fake_lookup)

        book = db.list_books()[0]
        assert book.cover_url == "https://covers.example.com/1.jpg"
        assert book.page_count == 300

    def test_enrich_skips_books_with_cover(self, db, tmp_path):
        """Test books that already have a cover are not looked up."""
        csv_file = tmp_path / "books.csv"
        csv_file.write_text(
            "title,author,cover\nDune,Frank Herbert,https://x.test/d.jpg\n", encoding="utf-8"
        )
        lookup = MagicMock()

        import_files([csv_file], db=db, enrich=True, lookup=lookup)

        lookup.assert_not_called()

    def test_store_read_failure(self, db, tmp_path):
        """Test a failing store read is reported and nothing is written."""
        csv_file = tmp_path / "books.csv"
        csv_file.write_text("title,author\nDune,Frank Herbert\n", encoding="utf-8")

        with patch.object(db, "list_books", side_effect=_store_error), patch.object(
            db, "replace_all"
        ) as replace_all:
            result = import_files([csv_file], db=db)

        assert result.errors
        replace_all.assert_not_called()

    def test_store_write_failure(self, db, tmp_path):
        """Test a failing store write is reported, not raised."""
        csv_file = tmp_path / "books.csv"
        csv_file.write_text("title,author\nDune,Frank Herbert\n", encoding="utf-8")

        with patch.object(db, "replace_all", side_effect=_store_error):
            result = import_files([csv_file], db=db)

        assert result.total == 1
        assert result.errors

    def test_summary(self):
        """Test summary text."""
        result = ImportResult(parsed=4, duplicates_removed=1, total=3)
        assert result.summary == "Parsed: 4, Duplicates removed: 1, Total: 3"


class TestEnrichBooks:
    """Tests for metadata enrichment."""

    def test_lookup_failure_leaves_book(self, make_book):
        """Test lookup errors do not stop the batch."""
        book = make_book()
        lookup = MagicMock(side_effect=MetadataLookupError("offline"))

        assert enrich_books([book], lookup) == [book]


class TestAddBook:
    """Tests for manual entry."""

    def test_add(self, db):
        """Test adding a book."""
        book = add_book("  Dune ", "Frank Herbert", db=db, format=BookFormat.BOOK)

        assert book.title == "Dune"
        assert book.status == ReadingStatus.WANT_TO_READ
        assert book.format == BookFormat.BOOK
        assert book.date_added
        assert db.get_book(book.id) == book

    def test_appends(self, db, make_book):
        """Test new books go to the end of the list."""
        db.replace_all([make_book("Emma", "Jane Austen")])
        add_book("Dune", "Frank Herbert", db=db)
        assert [b.title for b in db.list_books()] == ["Emma", "Dune"]

    def test_with_lookup(self, db, fake_lookup):
        """Test catalog metadata is folded in."""
        book = add_book("Dune", "Frank Herbert", db=db, lookup=fake_lookup)
        assert book.description == "From the catalog."

    def test_store_failure(self, db):
        """Test a failing write returns None."""
        with patch.object(db, "create_book", side_effect=_store_error):
            assert add_book("Dune", "Frank Herbert", db=db) is None


class TestUpdateStatus:
    """Tests for status changes."""

    def test_start_reading_stamps_date(self, db, make_book):
        """Test moving to currently-reading sets the start date."""
        book = db.create_book(make_book())
        updated = update_status(book.id, ReadingStatus.CURRENTLY_READING, db=db)
        assert updated.status == ReadingStatus.CURRENTLY_READING
        assert updated.date_started

    def test_finish_stamps_date(self, db, make_book):
        """Test moving to finished sets the finish date."""
        book = db.create_book(make_book())
        updated = update_status(book.id, ReadingStatus.FINISHED, db=db)
        assert updated.date_finished

    def test_existing_dates_kept(self, db, make_book):
        """Test dates already set are not overwritten."""
        book = db.create_book(make_book(date_finished="2024-01-01"))
        updated = update_status(book.id, ReadingStatus.FINISHED, db=db)
        assert updated.date_finished == "2024-01-01"

    def test_missing_book(self, db):
        """Test unknown ids give None."""
        assert update_status("nope", ReadingStatus.FINISHED, db=db) is None


class TestUpdateRating:
    """Tests for rating changes."""

    def test_set_and_clear(self, db, make_book):
        """Test setting then clearing a rating."""
        book = db.create_book(make_book())
        assert update_rating(book.id, 4.5, db=db).rating == 4.5
        assert update_rating(book.id, None, db=db).rating is None

    def test_out_of_range_cleared(self, db, make_book):
        """Test an invalid rating is stored as absent."""
        book = db.create_book(make_book(rating=3))
        assert update_rating(book.id, 9, db=db).rating is None


class TestRemoveDuplicates:
    """Tests for in-place deduplication."""

    def test_removes_and_writes(self, db, make_book):
        """Test duplicates are merged in the store."""
        db.replace_all(
            [
                make_book("Dune", "Frank Herbert", id="a"),
                make_book("Emma", "Jane Austen", id="b"),
                make_book("DUNE", "frank herbert", id="c", rating=4),
            ]
        )

        assert remove_duplicates(db=db) == 1

        books = db.list_books()
        assert [b.id for b in books] == ["a", "b"]
        assert books[0].rating == 4

    def test_nothing_to_do(self, db, sample_books):
        """Test a clean list reports zero."""
        db.replace_all(sample_books)
        assert remove_duplicates(db=db) == 0

    def test_dry_run(self, db, make_book):
        """Test dry run counts without writing."""
        db.replace_all([make_book(), make_book()])
        assert remove_duplicates(db=db, dry_run=True) == 1
        assert db.count_books() == 2
