"""
FinTrack - Database Management

PURPOSE: Database schema, migrations, and connection management
SCOPE: SQLite operations, schema versioning, and data persistence
DEPENDENCIES: aiosqlite, config.py
"""

import aiosqlite
import logging

from .config import config

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


class DatabaseManager:
    """Handles schema creation and migrations."""

    def __init__(self, db_file: str):
        self.db_file = db_file

    async def initialize_database(self) -> None:
        """Initialize SQLite database with proper schema and migrations."""
        async with aiosqlite.connect(self.db_file) as conn:
            await self._setup_schema_versioning(conn)
            current_version = await self._get_current_schema_version(conn)
            logger.info(f"Current database schema version: {current_version}")

            if current_version < 1:
                await self._migrate_to_version_1(conn)

            await self._insert_default_categories(conn)
            await conn.commit()

    async def _setup_schema_versioning(self, conn: aiosqlite.Connection) -> None:
        """Set up schema version tracking table."""
        await conn.execute('''
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY,
                applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        ''')

    async def _get_current_schema_version(self, conn: aiosqlite.Connection) -> int:
        """Get the current database schema version."""
        cursor = await conn.execute('SELECT MAX(version) FROM schema_version')
        result = await cursor.fetchone()
        return result[0] or 0

    async def _migrate_to_version_1(self, conn: aiosqlite.Connection) -> None:
        """Create the transactions and categories tables."""
        logger.info("Migrating to schema version 1: Creating transaction tables")

        # Amounts are stored as TEXT so Decimal values round-trip exactly
        await conn.execute('''
            CREATE TABLE IF NOT EXISTS transactions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                owner_id TEXT NOT NULL,
                type TEXT NOT NULL CHECK (type IN ('INCOME', 'EXPENSE')),
                amount TEXT NOT NULL,
                category TEXT NOT NULL,
                description TEXT NOT NULL DEFAULT '',
                date TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        ''')
        await conn.execute(
            'CREATE INDEX IF NOT EXISTS idx_transactions_owner_date ON transactions (owner_id, date)'
        )
        await conn.execute('''
            CREATE TABLE IF NOT EXISTS categories (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT UNIQUE NOT NULL
            )
        ''')

        await conn.execute('INSERT INTO schema_version (version) VALUES (?)', (SCHEMA_VERSION,))
        logger.info("Schema migration to version 1 completed")

    async def _insert_default_categories(self, conn: aiosqlite.Connection) -> None:
        """Insert the built-in categories."""
        for category in config.CATEGORY_NAMES:
            await conn.execute('INSERT OR IGNORE INTO categories (name) VALUES (?)', (category,))
