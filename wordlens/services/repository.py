"""
Repository - local relational store for search history and settings.

Search history is one row per unique word; settings are one JSON value
per top-level key. Single-user, single-process: last write wins.
"""

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional

import pandas as pd

from ..config import Config
from ..errors import StoreError
from ..models import SearchRecord

logger = logging.getLogger(__name__)


class SQLiteRepository:
    """
    SQLite-backed store.

    Provides:
    - Search history with favorites
    - Key/value settings persisted as JSON
    - Tabular export of the history
    """

    SCHEMA_VERSION = 1
    HISTORY_LIMIT = 50

    def __init__(self, db_path: Optional[str] = None):
        """
        Initialize SQLite repository.

        Args:
            db_path: Path to SQLite database file (``":memory:"`` is not
                supported since every call opens its own connection)
        """
        self.db_path = Path(db_path or Config.DB_FILE)
        self._ensure_db_dir()

    def _ensure_db_dir(self) -> None:
        """Ensure database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get database connection, translating driver errors to StoreError."""
        try:
            conn = sqlite3.connect(str(self.db_path))
        except sqlite3.Error as e:
            raise StoreError(f"Cannot open database {self.db_path}: {e}") from e
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreError(str(e)) from e
        finally:
            conn.close()

    def load(self) -> None:
        """Create tables and indexes if they do not exist yet."""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY,
                    applied_at TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS searches (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    word TEXT UNIQUE NOT NULL,
                    search_count INTEGER NOT NULL DEFAULT 1,
                    last_searched TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    is_favorite INTEGER NOT NULL DEFAULT 0,
                    favorited_at TEXT
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)

            cursor.execute("CREATE INDEX IF NOT EXISTS idx_searches_last ON searches(last_searched)")
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_searches_favorite ON searches(is_favorite)")

            cursor.execute("INSERT OR IGNORE INTO schema_version (version, applied_at) VALUES (?, ?)",
                           (self.SCHEMA_VERSION, datetime.now().isoformat()))

    # ==================== Search history ====================

    def add_search(self, word: str) -> None:
        """Record a search: insert with count 1, or bump count and timestamp."""
        now = datetime.now().isoformat()
        with self._get_connection() as conn:
            conn.execute("""
                INSERT INTO searches (word, search_count, last_searched, created_at)
                VALUES (?, 1, ?, ?)
                ON CONFLICT(word) DO UPDATE SET
                    search_count = search_count + 1,
                    last_searched = excluded.last_searched
            """, (word, now, now))

    def toggle_favorite(self, word: str, is_favorite: bool) -> None:
        """
        Set or clear the favorite flag.

        A word that was never searched gets a record with the default
        count of 1. Clearing the flag keeps the record and its counters.
        """
        now = datetime.now().isoformat()
        favorited_at = now if is_favorite else None
        flag = 1 if is_favorite else 0
        with self._get_connection() as conn:
            conn.execute("""
                INSERT INTO searches (word, search_count, last_searched, created_at, is_favorite, favorited_at)
                VALUES (?, 1, ?, ?, ?, ?)
                ON CONFLICT(word) DO UPDATE SET
                    is_favorite = excluded.is_favorite,
                    favorited_at = excluded.favorited_at
            """, (word, now, now, flag, favorited_at))

    def is_favorite(self, word: str) -> bool:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT is_favorite FROM searches WHERE word = ?", (word,)
            ).fetchone()
            return bool(row["is_favorite"]) if row else False

    def get_search(self, word: str) -> Optional[SearchRecord]:
        with self._get_connection() as conn:
            row = conn.execute("SELECT * FROM searches WHERE word = ?", (word,)).fetchone()
            return self._row_to_record(row) if row else None

    def get_search_history(self, favorites_only: bool = False) -> List[SearchRecord]:
        """Most recent first, capped at HISTORY_LIMIT rows."""
        where = "WHERE is_favorite = 1" if favorites_only else ""
        with self._get_connection() as conn:
            rows = conn.execute(
                f"SELECT * FROM searches {where} ORDER BY last_searched DESC, id DESC LIMIT ?",
                (self.HISTORY_LIMIT,)
            ).fetchall()
            return [self._row_to_record(row) for row in rows]

    def get_history_frame(self, favorites_only: bool = False) -> pd.DataFrame:
        """Get search history as a DataFrame (same order and cap as the listing)."""
        records = self.get_search_history(favorites_only)
        columns = ["word", "search_count", "last_searched_at", "created_at", "is_favorite", "favorited_at"]
        return pd.DataFrame(
            [{col: getattr(r, col) for col in columns} for r in records],
            columns=columns,
        )

    def export_history_csv(self, csv_path: str, favorites_only: bool = False) -> int:
        """
        Export search history to CSV.

        Returns:
            Number of rows written
        """
        df = self.get_history_frame(favorites_only)
        Path(csv_path).parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(csv_path, index=False, encoding="utf-8")
        return len(df)

    # ==================== Settings ====================

    def get_settings(self) -> Dict[str, Any]:
        """Return every stored settings key with its decoded value."""
        with self._get_connection() as conn:
            rows = conn.execute("SELECT key, value FROM settings").fetchall()

        stored: Dict[str, Any] = {}
        for row in rows:
            try:
                stored[row["key"]] = json.loads(row["value"])
            except json.JSONDecodeError:
                logger.warning("Settings key %r holds non-JSON data, using raw text", row["key"])
                stored[row["key"]] = row["value"]
        return stored

    def save_settings(self, values: Dict[str, Any]) -> None:
        """Upsert each key independently; keys not given are left untouched."""
        with self._get_connection() as conn:
            conn.executemany(
                "INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)",
                [(key, json.dumps(value, ensure_ascii=False)) for key, value in values.items()]
            )

    # ==================== Helpers ====================

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> SearchRecord:
        return SearchRecord(
            id=row["id"],
            word=row["word"],
            search_count=row["search_count"],
            last_searched_at=row["last_searched"],
            created_at=row["created_at"],
            is_favorite=bool(row["is_favorite"]),
            favorited_at=row["favorited_at"] or None,
        )
