"""Starter books loaded the first time a catalog is opened."""

from __future__ import annotations

from typing import Any, Dict, List

from catalog import Book, generate_id

SEED_BOOKS: List[Dict[str, Any]] = [
    {"title": "Clean Code", "author": "Robert C. Martin", "genre": "Software", "year": 2008},
    {"title": "The Pragmatic Programmer", "author": "Andrew Hunt", "genre": "Software", "year": 1999},
    {"title": "Dune", "author": "Frank Herbert", "genre": "Science Fiction", "year": 1965},
    {"title": "1984", "author": "George Orwell", "genre": "Dystopian", "year": 1949},
    {"title": "Sapiens", "author": "Yuval Noah Harari", "genre": "History", "year": 2011},
    {"title": "Neuromancer", "author": "William Gibson", "genre": "Science Fiction", "year": 1984},
    {"title": "The Hobbit", "author": "J.R.R. Tolkien", "genre": "Fantasy", "year": 1937},
]


def seed_books() -> List[Book]:
    """Return the seed list with freshly generated identifiers."""
    return [Book(id=generate_id(), **entry) for entry in SEED_BOOKS]
