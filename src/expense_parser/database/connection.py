import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from expense_parser.logging_setup import get_logger

logger = get_logger("expense_parser.database.connection")

Connection = sqlite3.Connection

# Schema shipped with the package
SCHEMA_PATH = Path(__file__).parent / "schema.sql"

IN_MEMORY = ":memory:"


class DatabaseConfig:
    """Location of the biller mapping database"""

    def __init__(self, db_path: Path | str = "data/billers.db"):
        self.in_memory = str(db_path) == IN_MEMORY
        self.db_path = Path(db_path)
        if not self.in_memory:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def connection_string(self) -> str:
        """Absolute file path, or ':memory:'"""
        if self.in_memory:
            return IN_MEMORY
        return str(self.db_path.absolute())


def configure_connection(conn: Connection) -> None:
    """
    Apply standard configuration to a SQLite connection.

    Args:
        conn: SQLite connection to configure
    """
    conn.execute("PRAGMA foreign_keys = ON")

    # Rows behave like dicts
    conn.row_factory = sqlite3.Row


class DatabaseManager:
    """
    Owns the single SQLite connection used by the mapping repository.

    Usage:
        with DatabaseManager(DatabaseConfig()) as db:
            db.initialize()
            with db.transaction() as conn:
                conn.execute("INSERT INTO ...")
    """

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self._connection: Connection | None = None

    def get_connection(self) -> Connection:
        """Get or lazily open the connection"""
        if self._connection is None:
            self._connection = self._create_connection()
        return self._connection

    def _create_connection(self) -> Connection:
        logger.debug("Opening database %s", self.config.connection_string)
        conn = sqlite3.connect(
            self.config.connection_string,
            check_same_thread=False,
        )
        configure_connection(conn)
        return conn

    def initialize(self, schema_path: Path = SCHEMA_PATH) -> None:
        """Create tables if they don't exist yet"""
        execute_schema(self.get_connection(), schema_path)

    def close(self) -> None:
        """Close the database connection if open."""
        if self._connection:
            self._connection.close()
            self._connection = None

    @contextmanager
    def transaction(self) -> Generator[Connection, None, None]:
        """
        Context manager for database transactions.

        Commits on success, rolls back on exception.
        """
        conn = self.get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def __enter__(self) -> "DatabaseManager":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def execute_schema(conn: Connection, schema_path: Path = SCHEMA_PATH) -> None:
    """
    Execute a SQL schema file.

    Args:
        conn: Database connection
        schema_path: Path to .sql file
    """
    with open(schema_path, encoding="utf-8") as f:
        schema = f.read()

    conn.executescript(schema)
    conn.commit()
