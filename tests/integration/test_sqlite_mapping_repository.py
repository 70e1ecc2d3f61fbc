import pytest

from expense_parser.database.connection import DatabaseConfig, DatabaseManager
from expense_parser.repositories.sqlite_mapping_repository import SQLiteMappingRepository
from expense_parser.domain.models import MappingEntry
from expense_parser.repositories.base import DuplicateMappingError, MappingNotFoundError

@pytest.fixture
def test_db(tmp_path):
    """
    Create a real test database.

    Use pytest's tmp_path fixture to create a temporary directory.
    Database is automatically cleaned up after each test.
    """

    db_path = tmp_path / "billers.db"
    db_manager = DatabaseManager(DatabaseConfig(db_path))
    db_manager.initialize()

    yield db_manager

    db_manager.close()

@pytest.fixture
def repo(test_db):
    """Create a repository with a test database."""
    return SQLiteMappingRepository(test_db)

@pytest.mark.integration
class TestSQLiteMappingRepository:
    """Test suite for SQLite mapping repository. Uses a real temp db."""

    def test_add_and_get(self, repo: SQLiteMappingRepository):
        # Act
        entry = repo.add("swiggy", "Food")

        # Assert
        assert entry == MappingEntry("SWIGGY", "Food")
        assert repo.get("Swiggy") == entry

    def test_get_missing(self, repo: SQLiteMappingRepository):
        assert repo.get("nobody") is None

    def test_add_duplicate_keyword(self, repo: SQLiteMappingRepository):
        repo.add("SWIGGY", "Food")

        with pytest.raises(DuplicateMappingError):
            repo.add(" swiggy ", "Groceries")

    def test_add_empty_keyword(self, repo: SQLiteMappingRepository):
        with pytest.raises(ValueError):
            repo.add("   ", "Food")

    def test_update(self, repo: SQLiteMappingRepository):
        repo.add("BLINKIT", "Shopping")

        updated = repo.update("blinkit", "Groceries")

        assert updated.category == "Groceries"
        assert repo.get("BLINKIT").category == "Groceries"

    def test_update_missing(self, repo: SQLiteMappingRepository):
        with pytest.raises(MappingNotFoundError):
            repo.update("NOBODY", "Food")

    def test_delete(self, repo: SQLiteMappingRepository):
        repo.add("UBER", "Transport")

        assert repo.delete("uber") is True
        assert repo.delete("uber") is False
        assert repo.get("UBER") is None

    def test_snapshot_keeps_insertion_order(self, repo: SQLiteMappingRepository):
        # Arrange
        repo.add("ZOMATO", "Food")
        repo.add("AMAZON", "Shopping")

        # Act
        snapshot = repo.snapshot()

        # Assert
        assert [e.keyword for e in snapshot] == ["ZOMATO", "AMAZON"]
        assert snapshot.category_for("amazon") == "Shopping"

    def test_snapshot_is_detached_from_table(self, repo: SQLiteMappingRepository):
        repo.add("ZOMATO", "Food")
        snapshot = repo.snapshot()

        repo.add("AMAZON", "Shopping")

        assert len(snapshot) == 1
        assert len(repo.snapshot()) == 2

    def test_seed_defaults(self, repo: SQLiteMappingRepository):
        # Act
        inserted = repo.seed_defaults()

        # Assert
        assert inserted > 0
        assert repo.get("SWIGGY").category == "Food"
        assert repo.get("APPLE SERVICES").category == "Entertainment"

    def test_seed_keeps_user_edits(self, repo: SQLiteMappingRepository):
        # Arrange
        repo.add("SWIGGY", "Groceries")
        config = {"billers": [
            {"keyword": "SWIGGY", "category": "Food"},
            {"keyword": "ZEPTO", "category": "Groceries"},
        ]}

        # Act
        inserted = repo.seed_defaults(config)

        # Assert
        assert inserted == 1
        assert repo.get("SWIGGY").category == "Groceries"

    def test_in_memory_database(self):
        with DatabaseManager(DatabaseConfig(":memory:")) as db:
            db.initialize()
            repo = SQLiteMappingRepository(db)
            repo.add("NETFLIX", "Entertainment")

            assert len(repo.snapshot()) == 1

    def test_failed_transaction_rolls_back(self, test_db: DatabaseManager, repo: SQLiteMappingRepository):
        with pytest.raises(RuntimeError):
            with test_db.transaction() as conn:
                conn.execute(
                    "INSERT INTO biller_mappings (keyword, category) VALUES (?, ?)",
                    ("OLA", "Transport"),
                )
                raise RuntimeError("boom")

        assert repo.get("OLA") is None
