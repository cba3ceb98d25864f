from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Tuple

from catalog import (
    SEARCH_FIELDS,
    SORT_FIELDS,
    Book,
    SearchCriteria,
    SortConfig,
    ValidationError,
    search_books,
    sort_books,
)
from config import APP_DIR, setup_logging
from export import books_frame, save_spreadsheet
from reports import format_report
from store import CatalogStore, DuplicateBookError

MENU = """
Commands:
  list            show the catalog in its current sort order
  sort            change the sort field and direction
  add             add a new book
  edit <number>   update a listed book
  delete <number> remove a listed book
  search          search by title, author or genre
  report          books grouped by genre or author
  export          save the catalog to a CSV spreadsheet
  reset           discard the catalog and reload the starter books
  quit            leave the session
"""


def confirm(prompt: str) -> bool:
    return input(f"{prompt} (y/n): ").strip().lower() in {"y", "yes"}


def describe_book(book: Book, index: int) -> str:
    return f"{index}. {book.title} - {book.author} [{book.genre}, {book.year}]"


def print_books(books: List[Book]) -> None:
    if not books:
        print("No books to display.")
        return
    for idx, book in enumerate(books, start=1):
        print(describe_book(book, idx))


def pick_book(books: List[Book], argument: str) -> Optional[Book]:
    """Resolve a 1-based number from the last listing."""
    if not argument.isdigit():
        print("Use the number shown next to the book, e.g. 'edit 2'.")
        return None
    selection = int(argument)
    if 1 <= selection <= len(books):
        return books[selection - 1]
    print("That selection is out of range. Please try again.")
    return None


def prompt_fields(current: Optional[Book] = None) -> Tuple[str, str, str, str]:
    """Ask for each field; blank keeps the current value when editing."""
    values = []
    for label, attr in (("Title", "title"), ("Author", "author"), ("Genre", "genre"), ("Year", "year")):
        if current is not None:
            existing = str(getattr(current, attr))
            answer = input(f"{label} [{existing}]: ").strip()
            values.append(answer or existing)
        else:
            values.append(input(f"{label}: ").strip())
    return values[0], values[1], values[2], values[3]


def save_book(store: CatalogStore, fields: Tuple[str, str, str, str], book_id: Optional[str] = None) -> Optional[Book]:
    """Add or update a book, asking before saving a different edition."""
    allow_edition = False
    while True:
        try:
            if book_id is None:
                return store.add_book(*fields, allow_edition=allow_edition)
            return store.update_book(book_id, *fields, allow_edition=allow_edition)
        except ValidationError as error:
            print(f"Cannot save: {error.reason}")
            return None
        except DuplicateBookError as error:
            if error.same_edition:
                print(str(error))
                return None
            if not confirm(f"{error}. Add this as a different edition ({fields[3]})?"):
                print("Skipped saving this book.")
                return None
            allow_edition = True


def choose_option(prompt: str, options: Tuple[str, ...], default: str) -> str:
    answer = input(f"{prompt} ({'/'.join(options)}) [{default}]: ").strip().lower()
    if not answer:
        return default
    if answer not in options:
        print(f"Unknown option '{answer}', using {default}.")
        return default
    return answer


def interactive_session(store: Optional[CatalogStore] = None) -> None:
    """Run the interactive catalog session."""
    store = store or CatalogStore()
    sort_config = SortConfig()
    shown: List[Book] = []

    print("\nBook catalog. Type 'help' for commands.")

    while True:
        response = input("\n> ").strip()
        command, _, argument = response.partition(" ")
        command = command.lower()
        argument = argument.strip()

        if command in {"quit", "q", "exit"}:
            break
        if command in {"help", "?", ""}:
            print(MENU)
            continue

        if command == "list":
            shown = sort_books(store.list_books(), sort_config)
            print_books(shown)
        elif command == "sort":
            sort_config = SortConfig(
                key=choose_option("Sort by", SORT_FIELDS, sort_config.key),
                direction=choose_option("Direction", ("asc", "desc"), sort_config.direction),
            )
            shown = sort_books(store.list_books(), sort_config)
            print_books(shown)
        elif command == "add":
            book = save_book(store, prompt_fields())
            if book:
                print(f"Added '{book.title}' to the catalog.")
        elif command == "edit":
            chosen = pick_book(shown, argument)
            if chosen:
                book = save_book(store, prompt_fields(chosen), book_id=chosen.id)
                if book:
                    print(f"Updated '{book.title}'.")
                    shown = sort_books(store.list_books(), sort_config)
        elif command == "delete":
            chosen = pick_book(shown, argument)
            if chosen and confirm(f'Are you sure you want to delete "{chosen.title}"?'):
                if store.delete_book(chosen.id):
                    print("Book deleted.")
                shown = sort_books(store.list_books(), sort_config)
        elif command == "search":
            by = choose_option("Search by", SEARCH_FIELDS, "title")
            query = input("Query: ")
            shown = search_books(store.list_books(), SearchCriteria(by=by, query=query))
            print_books(shown)
        elif command == "report":
            field = choose_option("Group by", ("genre", "author"), "genre")
            print(format_report(store.list_books(), field))
        elif command == "export":
            default_path = APP_DIR / "catalog.csv"
            target = input(f"Spreadsheet path [{default_path}]: ").strip()
            path = save_spreadsheet(books_frame(store.list_books()), Path(target) if target else default_path)
            print(f"Saved {len(store.list_books())} books to {path}")
        elif command == "reset":
            if confirm("Discard the whole catalog and reload the starter books?"):
                store.reset()
                shown = []
                print("Catalog reset.")
        else:
            print("Unknown command. Type 'help' for the list of commands.")

    print("\nSession complete. Catalog saved.")


if __name__ == "__main__":
    setup_logging(logging.WARNING)
    interactive_session()
