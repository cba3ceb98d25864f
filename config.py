"""Paths and logging setup for the book catalog."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

APP_DIR = Path(os.getenv("BOOK_CATALOG_HOME") or Path.home() / ".book_catalog")
DEFAULT_DB_PATH = Path(os.getenv("BOOK_CATALOG_DB") or APP_DIR / "catalog.db")

# Key name carries the schema version of the persisted records.
STORAGE_KEY = "bookCatalog.v1"

LOGGER_NAME = "book_catalog"


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Attach a stderr handler to the application logger, once."""
    log = logging.getLogger(LOGGER_NAME)
    if log.handlers:
        return log

    log.setLevel(level)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    log.addHandler(handler)
    return log
