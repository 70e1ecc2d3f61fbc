#!/usr/bin/env python3
"""
Initialize the biller mapping database.

Creates the schema and seeds the default billers.
"""
from expense_parser.database.connection import SCHEMA_PATH, DatabaseConfig, DatabaseManager
from expense_parser.repositories.sqlite_mapping_repository import SQLiteMappingRepository

def main():
    """initialize the database."""

    config = DatabaseConfig()
    print(f"Initializing database at: {config.db_path}")

    with DatabaseManager(config) as db:
        print(f"Executing schema from: {SCHEMA_PATH}")
        db.initialize()

        inserted = SQLiteMappingRepository(db).seed_defaults()

        cursor = db.get_connection().execute(
            "SELECT version, description FROM schema_version ORDER BY version DESC LIMIT 1"
        )
        row = cursor.fetchone()

        if row:
            print(f"✓ Database initialized successfully!")
            print(f"  Schema version: {row['version']}")
            print(f"  Description: {row['description']}")
            print(f"  Default billers added: {inserted}")
        else:
            print("✗ Database initialization may have failed")

if __name__ == "__main__":
    main()
