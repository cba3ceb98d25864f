from __future__ import annotations

from typing import List, Tuple

from catalog import Book, collation_key, group_books_by

REPORT_TITLES = {
    "genre": "Books by Genre",
    "author": "Books by Author",
}


def grouped_report(books: List[Book], field: str) -> List[Tuple[str, List[Book]]]:
    """Group books by ``field`` and order the groups alphabetically by key."""
    groups = group_books_by(books, field)
    return sorted(groups.items(), key=lambda item: collation_key(item[0]))


def _describe(book: Book, field: str) -> str:
    # The grouped field is already the heading, so show the other one.
    detail = book.author if field == "genre" else book.genre
    return f"{book.title} - {detail} ({book.year})"


def format_report(books: List[Book], field: str) -> str:
    lines = [REPORT_TITLES.get(field, f"Books by {field}")]
    entries = grouped_report(books, field)
    if not entries:
        lines.append("   No books to display")
        return "\n".join(lines)

    for key, members in entries:
        noun = "book" if len(members) == 1 else "books"
        lines.append(f"{key} ({len(members)} {noun})")
        for book in members:
            lines.append(f"   {_describe(book, field)}")
    return "\n".join(lines)
