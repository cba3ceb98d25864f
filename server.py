from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import Depends, FastAPI, HTTPException, Query, Response, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from catalog import (
    Book,
    SearchCriteria,
    SortConfig,
    ValidationError,
    search_books,
    sort_books,
)
from config import setup_logging
from reports import grouped_report
from store import CatalogStore, DuplicateBookError, open_store

log = logging.getLogger("book_catalog.server")

setup_logging()


# -----------------------------------------------------------------------------
# Application setup
# -----------------------------------------------------------------------------

app = FastAPI(title="Book Catalog API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://127.0.0.1:5173", "*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_store() -> CatalogStore:
    if not hasattr(get_store, "_instance"):
        get_store._instance = open_store()
    return get_store._instance  # type: ignore[attr-defined]


@app.on_event("shutdown")
def _shutdown() -> None:
    store = getattr(get_store, "_instance", None)
    if isinstance(store, CatalogStore):
        store.close()


# -----------------------------------------------------------------------------
# Pydantic models
# -----------------------------------------------------------------------------


class BookRecord(BaseModel):
    id: str
    title: str
    author: str
    genre: str
    year: int


class BookPayload(BaseModel):
    title: str = ""
    author: str = ""
    genre: str = ""
    # Kept loose so that the catalog's own validation produces the error message.
    year: Any = None
    allow_edition: bool = False


class ReportGroup(BaseModel):
    key: str
    count: int
    books: List[BookRecord] = Field(default_factory=list)


# -----------------------------------------------------------------------------
# Helper utilities
# -----------------------------------------------------------------------------


def _record(book: Book) -> Dict[str, Any]:
    return book.to_dict()


def _duplicate_detail(error: DuplicateBookError) -> Dict[str, Any]:
    return {
        "message": str(error),
        "existing": _record(error.existing),
        "same_edition": error.same_edition,
    }


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------


@app.get("/api/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/api/books")
def list_books(
    by: str = Query("title", pattern="^(title|author|genre)$"),
    q: str = Query("", description="Partial, case-insensitive match on the selected field"),
    sort: str = Query("title", pattern="^(id|title|author|genre|year)$"),
    direction: str = Query("asc", pattern="^(asc|desc)$"),
    store: CatalogStore = Depends(get_store),
) -> List[Dict[str, Any]]:
    books = search_books(store.list_books(), SearchCriteria(by=by, query=q))
    books = sort_books(books, SortConfig(key=sort, direction=direction))
    return [_record(book) for book in books]


@app.get("/api/books/{book_id}")
def get_book(book_id: str, store: CatalogStore = Depends(get_store)) -> Dict[str, Any]:
    book = store.get_book(book_id)
    if not book:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found")
    return _record(book)


@app.post("/api/books", status_code=status.HTTP_201_CREATED)
def create_book(payload: BookPayload, store: CatalogStore = Depends(get_store)) -> Dict[str, Any]:
    try:
        book = store.add_book(
            payload.title,
            payload.author,
            payload.genre,
            payload.year,
            allow_edition=payload.allow_edition,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.reason)
    except DuplicateBookError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=_duplicate_detail(exc))
    return _record(book)


@app.put("/api/books/{book_id}")
def update_book(
    book_id: str,
    payload: BookPayload,
    store: CatalogStore = Depends(get_store),
) -> Dict[str, Any]:
    if not store.get_book(book_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found")
    try:
        book = store.update_book(
            book_id,
            payload.title,
            payload.author,
            payload.genre,
            payload.year,
            allow_edition=payload.allow_edition,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.reason)
    except DuplicateBookError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=_duplicate_detail(exc))
    if not book:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found")
    return _record(book)


@app.delete("/api/books/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_book(book_id: str, store: CatalogStore = Depends(get_store)) -> None:
    if not store.delete_book(book_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found")


@app.get("/api/reports/{field}", response_model=List[ReportGroup])
def report(field: str, store: CatalogStore = Depends(get_store)) -> List[ReportGroup]:
    if field not in ("genre", "author"):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown report")
    return [
        ReportGroup(key=key, count=len(members), books=[_record(book) for book in members])
        for key, members in grouped_report(store.list_books(), field)
    ]


@app.post(
    "/api/reset",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    response_model=None,
)
def reset_catalog(store: CatalogStore = Depends(get_store)) -> Response:
    store.reset()
    log.warning("Catalog reset to seed data")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
