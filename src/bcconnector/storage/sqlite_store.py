"""
SQLite Secure Store

Persists credentials in a local SQLite database readable only by the owner.
Values are stored unencrypted; the keyring store is the default.
"""

import os
import sqlite3
from pathlib import Path
from typing import Any, Mapping, Optional, Union
import structlog

from .interface import ISecureStore, SecureStoreError
from .migrations import run_migrations

logger = structlog.get_logger(__name__)

IN_MEMORY = ":memory:"

_SELECT_SQL = "SELECT value FROM secure_values WHERE service = ? AND key = ?"
_DELETE_SQL = "DELETE FROM secure_values WHERE service = ? AND key = ?"
_UPSERT_SQL = """
    INSERT INTO secure_values (service, key, value, updated_at)
    VALUES (?, ?, ?, CURRENT_TIMESTAMP)
    ON CONFLICT(service, key) DO UPDATE SET
        value = excluded.value,
        updated_at = CURRENT_TIMESTAMP
"""


class SQLiteSecureStore(ISecureStore):
    """SQLite-backed key-value store scoped to a service identifier"""

    def __init__(self, db_path: Union[str, Path], service: str = "BCConnector"):
        self.service = service
        self._in_memory = str(db_path) == IN_MEMORY
        self.db_path = Path(db_path) if not self._in_memory else None
        self._connection: Optional[sqlite3.Connection] = None

        if self.db_path is not None:
            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                logger.error("Failed to create secure store directory",
                             db_path=str(self.db_path), error=str(e))
                raise SecureStoreError(f"Cannot create secure store directory: {e}") from e

    def _connect(self) -> sqlite3.Connection:
        """Get database connection, creating and migrating the schema on first use"""
        if self._connection is None:
            target = IN_MEMORY if self._in_memory else str(self.db_path)
            try:
                connection = sqlite3.connect(target, check_same_thread=False, timeout=30.0)
                run_migrations(connection)
            except (sqlite3.Error, RuntimeError) as e:
                raise SecureStoreError(f"Failed to open secure store: {e}") from e

            if self.db_path is not None:
                self._restrict_permissions(self.db_path)

            self._connection = connection
            logger.debug("Secure store opened", db_path=target, service=self.service)

        return self._connection

    @staticmethod
    def _restrict_permissions(path: Path) -> None:
        try:
            os.chmod(path, 0o600)
        except OSError as e:
            # Not every filesystem supports POSIX modes
            logger.warning("Could not restrict secure store permissions",
                           db_path=str(path), error=str(e))

    def get(self, key: str) -> Optional[str]:
        connection = self._connect()
        try:
            cursor = connection.execute(_SELECT_SQL, (self.service, key))
            row = cursor.fetchone()
        except sqlite3.Error as e:
            raise SecureStoreError(f"Failed to read '{key}': {e}") from e
        return str(row[0]) if row else None

    def set(self, key: str, value: Optional[str]) -> None:
        if value is None:
            self.delete(key)
            return

        connection = self._connect()
        try:
            connection.execute(_UPSERT_SQL, (self.service, key, value))
            connection.commit()
        except sqlite3.Error as e:
            connection.rollback()
            raise SecureStoreError(f"Failed to write '{key}': {e}") from e

    def delete(self, key: str) -> None:
        connection = self._connect()
        try:
            connection.execute(_DELETE_SQL, (self.service, key))
            connection.commit()
        except sqlite3.Error as e:
            connection.rollback()
            raise SecureStoreError(f"Failed to delete '{key}': {e}") from e

    def set_many(self, values: Mapping[str, Optional[str]]) -> None:
        """Write all entries in one transaction"""
        connection = self._connect()
        try:
            for key, value in values.items():
                if value is None:
                    connection.execute(_DELETE_SQL, (self.service, key))
                else:
                    connection.execute(_UPSERT_SQL, (self.service, key, value))
            connection.commit()
        except sqlite3.Error as e:
            connection.rollback()
            raise SecureStoreError(f"Failed to write {sorted(values)}: {e}") from e

    def close(self) -> None:
        """Close database connection"""
        if self._connection:
            self._connection.close()
            self._connection = None
            logger.debug("Secure store closed", service=self.service)

    def __enter__(self) -> "SQLiteSecureStore":
        self._connect()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
