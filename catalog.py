from __future__ import annotations

import re
import unicodedata
import uuid
from dataclasses import asdict, dataclass
from datetime import date
from functools import cmp_to_key
from typing import Any, Dict, List, Optional, Tuple

MIN_YEAR = 1450
# Plain ASCII digits, optionally signed.
YEAR_TEXT = re.compile(r"[+-]?[0-9]+")

SEARCH_FIELDS = ("title", "author", "genre")
SORT_FIELDS = ("id", "title", "author", "genre", "year")
GROUP_FIELDS = ("genre", "author")
SORT_DIRECTIONS = ("asc", "desc")


def current_year() -> int:
    return date.today().year


class ValidationError(ValueError):
    """Raised when book fields are rejected; ``reason`` is shown to the user."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


@dataclass(frozen=True)
class Book:
    id: str
    title: str
    author: str
    genre: str
    year: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, record: Dict[str, Any]) -> "Book":
        """Build a book from a stored record, rejecting records of the wrong shape."""
        year = record["year"]
        if isinstance(year, bool) or not isinstance(year, int):
            raise TypeError(f"year must be an integer, got {year!r}")
        fields = {}
        for key in ("id", "title", "author", "genre"):
            value = record[key]
            if not isinstance(value, str):
                raise TypeError(f"{key} must be a string, got {value!r}")
            fields[key] = value
        return cls(year=year, **fields)


@dataclass
class SearchCriteria:
    by: str = "title"
    query: str = ""


@dataclass
class SortConfig:
    key: str = "title"
    direction: str = "asc"


# --------------------------------------------------------------------------- #
# Input helpers
# --------------------------------------------------------------------------- #
def generate_id() -> str:
    return str(uuid.uuid4())


def sanitize_string(text: str) -> str:
    return text.strip()


def _coerce_year(year: Any) -> Optional[int]:
    if year is None or isinstance(year, bool):
        return None
    if isinstance(year, int):
        return year or None
    if isinstance(year, float):
        if not year.is_integer() or not year:
            return None
        return int(year)
    if isinstance(year, str):
        text = year.strip()
        if not YEAR_TEXT.fullmatch(text):
            return None
        return int(text) or None
    return None


def validate_book(title: str, author: str, genre: str, year: Any) -> None:
    """Check book fields, raising ``ValidationError`` on the first problem found."""
    if not sanitize_string(title or ""):
        raise ValidationError("Title is required")
    if not sanitize_string(author or ""):
        raise ValidationError("Author is required")
    if not sanitize_string(genre or ""):
        raise ValidationError("Genre is required")
    value = _coerce_year(year)
    if value is None:
        raise ValidationError("Valid year is required")
    latest = current_year()
    if value < MIN_YEAR or value > latest:
        raise ValidationError(f"Year must be between {MIN_YEAR} and {latest}")


def clean_book_fields(title: str, author: str, genre: str, year: Any) -> Tuple[str, str, str, int]:
    """Sanitize and validate raw form values. Returns (title, author, genre, year)."""
    title = sanitize_string(title or "")
    author = sanitize_string(author or "")
    genre = sanitize_string(genre or "")
    validate_book(title, author, genre, year)
    return title, author, genre, _coerce_year(year)  # type: ignore[return-value]


# --------------------------------------------------------------------------- #
# Catalog queries
# --------------------------------------------------------------------------- #
def find_duplicate(
    books: List[Book],
    title: str,
    author: str,
    exclude_id: Optional[str] = None,
) -> Optional[Book]:
    title_key = title.lower()
    author_key = author.lower()
    return next(
        (
            book
            for book in books
            if book.id != exclude_id
            and book.title.lower() == title_key
            and book.author.lower() == author_key
        ),
        None,
    )


def search_books(books: List[Book], criteria: SearchCriteria) -> List[Book]:
    """Partial, case-insensitive match on a single field, keeping catalog order."""
    query = criteria.query.lower().strip()
    if not query:
        return list(books)
    return [
        book
        for book in books
        if query in str(getattr(book, criteria.by, "")).lower()
    ]


def collation_key(value: str) -> Tuple[str, str, str]:
    """Sort key approximating locale collation: base letters, then accents, then case."""
    decomposed = unicodedata.normalize("NFKD", value)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), value.casefold(), value.swapcase()


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _compare_values(left: Any, right: Any) -> int:
    if isinstance(left, str) and isinstance(right, str):
        left_key, right_key = collation_key(left), collation_key(right)
        return (left_key > right_key) - (left_key < right_key)
    if _is_number(left) and _is_number(right):
        return (left > right) - (left < right)
    return 0


def sort_books(books: List[Book], config: SortConfig) -> List[Book]:
    def compare(a: Book, b: Book) -> int:
        return _compare_values(getattr(a, config.key, None), getattr(b, config.key, None))

    # sorted() stays stable with reverse=True, so ties keep catalog order both ways.
    return sorted(books, key=cmp_to_key(compare), reverse=config.direction == "desc")


def group_books_by(books: List[Book], field: str) -> Dict[str, List[Book]]:
    if field not in GROUP_FIELDS:
        raise ValueError(f"Cannot group books by {field!r}")
    groups: Dict[str, List[Book]] = {}
    for book in books:
        groups.setdefault(getattr(book, field), []).append(book)
    return groups
