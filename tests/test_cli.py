from __future__ import annotations

from pathlib import Path
from typing import Iterable

import pytest

import cli
from store import CatalogStore


@pytest.fixture
def store(tmp_path: Path) -> CatalogStore:
    test_store = CatalogStore(db_path=tmp_path / "catalog.db")
    yield test_store
    test_store.close()


def _feed(monkeypatch: pytest.MonkeyPatch, answers: Iterable[str]) -> None:
    replies = iter(answers)
    monkeypatch.setattr("builtins.input", lambda _prompt="": next(replies))


def test_add_book_then_quit(monkeypatch: pytest.MonkeyPatch, store: CatalogStore, capsys) -> None:
    _feed(monkeypatch, ["add", "Foundation", "Isaac Asimov", "Science Fiction", "1951", "quit"])
    cli.interactive_session(store)

    assert store.list_books()[-1].title == "Foundation"
    assert "Added 'Foundation' to the catalog." in capsys.readouterr().out


def test_add_reports_validation_error(monkeypatch: pytest.MonkeyPatch, store: CatalogStore, capsys) -> None:
    _feed(monkeypatch, ["add", "Foundation", "Isaac Asimov", "", "1951", "quit"])
    cli.interactive_session(store)

    assert "Cannot save: Genre is required" in capsys.readouterr().out
    assert len(store.list_books()) == 7


def test_different_edition_is_confirmed(monkeypatch: pytest.MonkeyPatch, store: CatalogStore) -> None:
    _feed(monkeypatch, ["add", "dune", "frank herbert", "Science Fiction", "1990", "y", "quit"])
    cli.interactive_session(store)

    editions = [book for book in store.list_books() if book.title.lower() == "dune"]
    assert [book.year for book in editions] == [1965, 1990]


def test_declined_edition_is_not_saved(monkeypatch: pytest.MonkeyPatch, store: CatalogStore, capsys) -> None:
    _feed(monkeypatch, ["add", "Dune", "Frank Herbert", "Science Fiction", "1990", "n", "quit"])
    cli.interactive_session(store)

    assert len(store.list_books()) == 7
    assert "Skipped saving this book." in capsys.readouterr().out


def test_exact_duplicate_is_refused(monkeypatch: pytest.MonkeyPatch, store: CatalogStore, capsys) -> None:
    _feed(monkeypatch, ["add", "Dune", "Frank Herbert", "Science Fiction", "1965", "quit"])
    cli.interactive_session(store)

    assert "This book already exists in the catalog" in capsys.readouterr().out
    assert len(store.list_books()) == 7


def test_delete_listed_book(monkeypatch: pytest.MonkeyPatch, store: CatalogStore) -> None:
    # Title order puts "1984" first.
    _feed(monkeypatch, ["list", "delete 1", "y", "quit"])
    cli.interactive_session(store)

    assert "1984" not in [book.title for book in store.list_books()]
    assert len(store.list_books()) == 6


def test_edit_keeps_blank_answers(monkeypatch: pytest.MonkeyPatch, store: CatalogStore) -> None:
    _feed(monkeypatch, ["list", "edit 3", "", "", "Classic SF", "", "quit"])
    cli.interactive_session(store)

    dune = next(book for book in store.list_books() if book.title == "Dune")
    assert dune.genre == "Classic SF"
    assert dune.year == 1965


def test_search_prints_matches(monkeypatch: pytest.MonkeyPatch, store: CatalogStore, capsys) -> None:
    _feed(monkeypatch, ["search", "genre", "science fiction", "quit"])
    cli.interactive_session(store)

    out = capsys.readouterr().out
    assert "1. Dune - Frank Herbert [Science Fiction, 1965]" in out
    assert "2. Neuromancer - William Gibson [Science Fiction, 1984]" in out
    assert "Clean Code" not in out


def test_report_and_export(monkeypatch: pytest.MonkeyPatch, store: CatalogStore, tmp_path: Path, capsys) -> None:
    target = tmp_path / "out" / "catalog.csv"
    _feed(monkeypatch, ["report", "author", "export", str(target), "quit"])
    cli.interactive_session(store)

    out = capsys.readouterr().out
    assert "Books by Author" in out
    assert target.exists()
    assert f"Saved 7 books to {target}" in out
