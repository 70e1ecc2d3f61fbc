import sqlite3
from typing import Any, Dict, Optional

from expense_parser.config.settings import ConfigLoader
from expense_parser.database.connection import DatabaseManager
from expense_parser.domain.models import MappingEntry, MappingSnapshot
from expense_parser.logging_setup import get_logger
from expense_parser.repositories.base import MappingRepository, DuplicateMappingError, MappingNotFoundError

logger = get_logger("expense_parser.repositories.sqlite_mapping_repository")


class SQLiteMappingRepository(MappingRepository):
    """
    SQLite implementation of the MappingRepository.

    Keywords are stored upper-case and are unique.
    """

    def __init__(self, db_manager: DatabaseManager):
        self.db = db_manager

    def snapshot(self) -> MappingSnapshot:
        conn = self.db.get_connection()
        cursor = conn.execute("SELECT keyword, category FROM biller_mappings ORDER BY id")
        return MappingSnapshot.from_pairs(
            (row["keyword"], row["category"]) for row in cursor.fetchall()
        )

    def get(self, keyword: str) -> Optional[MappingEntry]:
        conn = self.db.get_connection()
        cursor = conn.execute(
            "SELECT keyword, category FROM biller_mappings WHERE keyword = ?",
            (self._normalize(keyword),)
        )
        row = cursor.fetchone()

        if row is None:
            return None

        return self._row_to_entry(row)

    def add(self, keyword: str, category: str) -> MappingEntry:
        entry = MappingEntry(keyword, category)
        if not entry.keyword:
            raise ValueError("Keyword cannot be empty")

        try:
            with self.db.transaction() as conn:
                conn.execute(
                    "INSERT INTO biller_mappings (keyword, category) VALUES (?, ?)",
                    (entry.keyword, entry.category),
                )
        except sqlite3.IntegrityError:
            raise DuplicateMappingError(f"Keyword already mapped: {entry.keyword}")

        logger.debug("Added mapping %s -> %s", entry.keyword, entry.category)
        return entry

    def update(self, keyword: str, category: str) -> MappingEntry:
        entry = MappingEntry(keyword, category)

        with self.db.transaction() as conn:
            cursor = conn.execute(
                """
                UPDATE biller_mappings
                SET category = ?, updated_at = CURRENT_TIMESTAMP
                WHERE keyword = ?
                """,
                (entry.category, entry.keyword),
            )

            if cursor.rowcount == 0:
                raise MappingNotFoundError(f"No mapping for keyword: {entry.keyword}")

        return entry

    def delete(self, keyword: str) -> bool:
        with self.db.transaction() as conn:
            cursor = conn.execute(
                "DELETE FROM biller_mappings WHERE keyword = ?",
                (self._normalize(keyword),)
            )
            return cursor.rowcount > 0

    def seed_defaults(self, config: Optional[Dict[str, Any]] = None) -> int:
        """
        Insert the default billers, leaving existing keywords alone.

        Args:
            config: Optional {"billers": [{"keyword", "category"}, ...]} dict.
                If None, loads 'billers.json' from the ConfigLoader.

        Returns:
            Number of keywords inserted
        """
        if config is None:
            config = ConfigLoader.load_billers_config()

        inserted = 0
        with self.db.transaction() as conn:
            for biller in config['billers']:
                entry = MappingEntry(biller['keyword'], biller['category'])
                cursor = conn.execute(
                    "INSERT OR IGNORE INTO biller_mappings (keyword, category) VALUES (?, ?)",
                    (entry.keyword, entry.category),
                )
                inserted += cursor.rowcount

        logger.info("Seeded %d default billers", inserted)
        return inserted

    @staticmethod
    def _normalize(keyword: str) -> str:
        return keyword.strip().upper()

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> MappingEntry:
        return MappingEntry(row["keyword"], row["category"])
