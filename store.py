from __future__ import annotations

import json
import logging
import sqlite3
import threading
from dataclasses import replace
from pathlib import Path
from typing import Any, List, Optional

from catalog import Book, clean_book_fields, find_duplicate, generate_id
from config import DEFAULT_DB_PATH, STORAGE_KEY
from seed_data import seed_books

log = logging.getLogger("book_catalog.store")


class DuplicateBookError(ValueError):
    """A book with the same title and author is already catalogued."""

    def __init__(self, existing: Book, *, same_edition: bool):
        if same_edition:
            message = "This book already exists in the catalog"
        else:
            message = (
                f"A book with this title and author already exists ({existing.year})"
            )
        super().__init__(message)
        self.existing = existing
        self.same_edition = same_edition


class KeyValueStore:
    """SQLite-backed string key/value storage."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = Path(db_path or DEFAULT_DB_PATH)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        with self._conn:
            self._conn.execute(
                """
                CREATE TABLE IF NOT EXISTS storage (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );
                """
            )

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            row = self._conn.execute(
                "SELECT value FROM storage WHERE key = ?;", (key,)
            ).fetchone()
        return row["value"] if row else None

    def set_item(self, key: str, value: str) -> None:
        with self._lock, self._conn:
            self._conn.execute(
                """
                INSERT INTO storage (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value;
                """,
                (key, value),
            )

    def remove_item(self, key: str) -> None:
        with self._lock, self._conn:
            self._conn.execute("DELETE FROM storage WHERE key = ?;", (key,))

    def close(self) -> None:
        with self._lock:
            self._conn.close()


class CatalogStore:
    """Holds the catalog in memory and mirrors every change to the key/value store."""

    def __init__(self, db_path: Optional[Path] = None, *, storage_key: str = STORAGE_KEY):
        self.storage = KeyValueStore(db_path)
        self.storage_key = storage_key
        self._lock = threading.RLock()
        self._books: List[Book] = []
        self._load()

    # --------------------------------------------------------------------- #
    # Persistence
    # --------------------------------------------------------------------- #
    def _load(self) -> None:
        stored = self.storage.get_item(self.storage_key)
        if stored is None:
            self._books = seed_books()
            log.info("No catalog found under %s; loaded %d seed books", self.storage_key, len(self._books))
            self._save()
            return
        try:
            records = json.loads(stored)
            if not isinstance(records, list):
                raise TypeError("stored catalog is not a list")
            self._books = [Book.from_dict(record) for record in records]
        except (ValueError, TypeError, KeyError) as error:
            log.error("Error loading catalog from storage: %s", error)
            self._books = seed_books()
            self._save()
            return
        log.info("Loaded %d books from %s", len(self._books), self.storage_key)

    def _save(self) -> None:
        payload = json.dumps([book.to_dict() for book in self._books], ensure_ascii=False)
        self.storage.set_item(self.storage_key, payload)

    def reset(self) -> None:
        """Clear persisted state and start again from the seed list."""
        with self._lock:
            self.storage.remove_item(self.storage_key)
            self._load()

    def close(self) -> None:
        self.storage.close()

    # --------------------------------------------------------------------- #
    # Book management
    # --------------------------------------------------------------------- #
    def list_books(self) -> List[Book]:
        with self._lock:
            return list(self._books)

    def get_book(self, book_id: str) -> Optional[Book]:
        with self._lock:
            return next((book for book in self._books if book.id == book_id), None)

    def _check_duplicate(
        self,
        title: str,
        author: str,
        year: int,
        *,
        exclude_id: Optional[str],
        allow_edition: bool,
    ) -> None:
        existing = find_duplicate(self._books, title, author, exclude_id)
        if existing is None:
            return
        if existing.year == year:
            raise DuplicateBookError(existing, same_edition=True)
        if not allow_edition:
            raise DuplicateBookError(existing, same_edition=False)

    def add_book(
        self,
        title: str,
        author: str,
        genre: str,
        year: Any,
        *,
        allow_edition: bool = False,
    ) -> Book:
        """Validate and append a new book. ``allow_edition`` confirms a different-year duplicate."""
        title, author, genre, year = clean_book_fields(title, author, genre, year)
        with self._lock:
            self._check_duplicate(title, author, year, exclude_id=None, allow_edition=allow_edition)
            book = Book(id=generate_id(), title=title, author=author, genre=genre, year=year)
            self._books.append(book)
            self._save()
        log.info("Added %r by %s", book.title, book.author)
        return book

    def update_book(
        self,
        book_id: str,
        title: str,
        author: str,
        genre: str,
        year: Any,
        *,
        allow_edition: bool = False,
    ) -> Optional[Book]:
        title, author, genre, year = clean_book_fields(title, author, genre, year)
        with self._lock:
            index = next(
                (idx for idx, book in enumerate(self._books) if book.id == book_id),
                None,
            )
            if index is None:
                return None
            self._check_duplicate(title, author, year, exclude_id=book_id, allow_edition=allow_edition)
            updated = replace(self._books[index], title=title, author=author, genre=genre, year=year)
            self._books = self._books[:index] + [updated] + self._books[index + 1 :]
            self._save()
        log.info("Updated book %s", book_id)
        return updated

    def delete_book(self, book_id: str) -> bool:
        with self._lock:
            remaining = [book for book in self._books if book.id != book_id]
            deleted = len(remaining) < len(self._books)
            if deleted:
                self._books = remaining
                self._save()
        if deleted:
            log.info("Deleted book %s", book_id)
        return deleted


# ------------------------------------------------------------------------------
# Convenience factory
# ------------------------------------------------------------------------------
def open_store(db_path: Optional[Path] = None) -> CatalogStore:
    return CatalogStore(db_path=db_path)
