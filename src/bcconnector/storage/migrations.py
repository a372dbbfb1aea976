"""
SQLite Secure Store Migrations

Handles schema versioning for the credential database.
"""

import sqlite3
from typing import Dict, Any, List
import structlog

logger = structlog.get_logger(__name__)


SECURE_STORE_MIGRATIONS: List[Dict[str, Any]] = [
    {
        "version": 1,
        "description": "Secure values table",
        "sql": """
            CREATE TABLE IF NOT EXISTS secure_values (
                service TEXT NOT NULL,
                key TEXT NOT NULL,
                value TEXT NOT NULL,
                updated_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                PRIMARY KEY (service, key)
            );

            CREATE INDEX IF NOT EXISTS idx_secure_values_service ON secure_values(service);
        """,
    },
]


def get_current_schema_version(connection: sqlite3.Connection) -> int:
    """Get current schema version from SQLite database"""
    try:
        cursor = connection.execute("""
            SELECT name FROM sqlite_master
            WHERE type='table' AND name='schema_migrations'
        """)

        if cursor.fetchone():
            cursor = connection.execute("SELECT MAX(version) FROM schema_migrations")
            row = cursor.fetchone()
            version = row[0] if row else None
            return int(version) if version is not None else 0
        else:
            return 0

    except sqlite3.Error:
        return 0


def apply_migration(connection: sqlite3.Connection, migration: Dict[str, Any]) -> None:
    """Apply a single SQLite migration"""
    version = migration["version"]
    description = migration["description"]

    logger.info("Applying secure store migration", version=version, description=description)

    try:
        statements = [stmt.strip() for stmt in migration["sql"].split(";") if stmt.strip()]
        for statement in statements:
            connection.execute(statement)

        connection.execute(
            "INSERT OR REPLACE INTO schema_migrations (version, description) VALUES (?, ?)",
            (version, description),
        )
        connection.commit()

    except sqlite3.Error as e:
        connection.rollback()
        raise RuntimeError(f"Failed to apply secure store migration {version}: {e}") from e


def run_migrations(connection: sqlite3.Connection) -> None:
    """Run all pending migrations"""
    connection.execute("""
        CREATE TABLE IF NOT EXISTS schema_migrations (
            version INTEGER PRIMARY KEY,
            description TEXT NOT NULL,
            applied_at DATETIME DEFAULT CURRENT_TIMESTAMP
        )
    """)
    current_version = get_current_schema_version(connection)

    pending = [m for m in SECURE_STORE_MIGRATIONS if m["version"] > current_version]
    if not pending:
        logger.debug("No pending secure store migrations", version=current_version)
        return

    for migration in pending:
        apply_migration(connection, migration)

    logger.info("Secure store schema updated", version=get_current_schema_version(connection))
