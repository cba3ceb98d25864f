from __future__ import annotations

from pathlib import Path
from typing import List

import pandas

from catalog import Book

EXPORT_COLUMNS = ["id", "title", "author", "genre", "year"]


def books_frame(books: List[Book]) -> pandas.DataFrame:
    """Tabulate the catalog in its current order."""
    frame = pandas.DataFrame([book.to_dict() for book in books], columns=EXPORT_COLUMNS)
    return frame.astype({"year": "int64"})


def save_spreadsheet(frame: pandas.DataFrame, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(path, index=False)
    return path


def load_spreadsheet(path: Path) -> pandas.DataFrame:
    dtypes = {column: str for column in EXPORT_COLUMNS}
    dtypes["year"] = "int64"
    return pandas.read_csv(path, dtype=dtypes, keep_default_na=False)
