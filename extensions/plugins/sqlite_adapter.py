#!/usr/bin/env python3
"""
Mumble Migrator SQLite Adapter - Destination Backend

Write side of the migration:
- Table catalog listing (sqlite_master)
- Explicit BEGIN/COMMIT/ROLLBACK transactions
- Full-table clear and batched parameterized inserts
"""

import sqlite3
import logging
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Dict, Iterator, List, Optional, Sequence

from config.migrator_config import ConnectionParams
from core.errors import CatalogQueryError, ProvisioningError

logger = logging.getLogger(__name__)

# Murmur stores dates as "YYYY-MM-DD HH:MM:SS" text; bind driver-returned
# datetimes the same way the stdlib default adapter used to.
sqlite3.register_adapter(datetime, lambda value: value.isoformat(" "))
sqlite3.register_adapter(date, lambda value: value.isoformat())


def quote_identifier(identifier: str) -> str:
    """Quote an SQLite identifier (key and value are keywords)"""
    return '"' + identifier.replace('"', '""') + '"'


class SQLiteAdapter:
    """SQLite destination adapter."""

    def __init__(
        self,
        database: str = ':memory:',
        timeout: float = 30.0,
    ):
        """
        Initialize SQLite adapter.

        Args:
            database: Path to SQLite database file or ':memory:' for in-memory
            timeout: Busy timeout in seconds

        Raises:
            ProvisioningError: if the file cannot be opened
        """
        self.database = database
        self.timeout = timeout
        self._connection: Optional[sqlite3.Connection] = None
        self._in_transaction = False
        self._connect()
        logger.info(f"SQLite adapter initialized for {database}")

    def _connect(self) -> None:
        """Establish database connection."""
        try:
            # isolation_level=None: transactions are opened explicitly
            self._connection = sqlite3.connect(
                self.database,
                timeout=self.timeout,
                isolation_level=None
            )
            self._connection.row_factory = sqlite3.Row
            # sqlite3.connect is lazy about the file; touch it now
            self._connection.execute("SELECT name FROM sqlite_master LIMIT 1").fetchall()
            # An unwritable file opens read-only; take the write lock once to find out
            self._connection.execute("BEGIN IMMEDIATE")
            self._connection.execute("ROLLBACK")
            logger.debug(f"Connected to SQLite database: {self.database}")
        except sqlite3.Error as e:
            if self._connection is not None:
                self._connection.close()
                self._connection = None
            raise ProvisioningError(f"Unable to connect to sqlite at {self.database}: {e}",
                                    backend="sqlite") from e

    @property
    def connection(self) -> sqlite3.Connection:
        if self._connection is None:
            raise RuntimeError("SQLite adapter is closed")
        return self._connection

    @property
    def closed(self) -> bool:
        return self._connection is None

    def close(self) -> None:
        """Close database connection."""
        if self._connection:
            self._connection.close()
            self._connection = None
            logger.debug("SQLite adapter closed")

    def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Execute one statement and return the affected row count."""
        cursor = self.connection.execute(sql, tuple(params))
        return cursor.rowcount

    def query(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        """Execute a query and return rows as dictionaries."""
        cursor = self.connection.execute(sql, tuple(params))
        return [dict(row) for row in cursor.fetchall()]

    @contextmanager
    def transaction(self) -> Iterator['SQLiteAdapter']:
        """
        Run the enclosed statements in one transaction.

        Commits when the block exits normally, rolls back and re-raises
        otherwise.
        """
        if self._in_transaction:
            raise RuntimeError("Nested transactions are not supported")

        self.connection.execute("BEGIN")
        self._in_transaction = True
        try:
            yield self
        except BaseException:
            # SQLite may already have rolled back on its own (SQLITE_FULL, SQLITE_IOERR)
            if self.connection.in_transaction:
                self.connection.execute("ROLLBACK")
            raise
        else:
            try:
                self.connection.execute("COMMIT")
            except sqlite3.Error:
                # A busy COMMIT leaves the transaction open
                if self.connection.in_transaction:
                    self.connection.execute("ROLLBACK")
                raise
        finally:
            self._in_transaction = False

    def get_tables(self) -> List[str]:
        """
        Get list of tables in the database.

        Raises:
            CatalogQueryError: if the catalog cannot be read
        """
        try:
            rows = self.query("SELECT name FROM sqlite_master WHERE type = 'table'")
        except (sqlite3.Error, RuntimeError) as e:
            raise CatalogQueryError(f"Unable to list SQLite tables: {e}", backend="sqlite") from e

        tables = [row['name'] for row in rows]
        logger.debug(f"Found {len(tables)} tables: {tables}")
        return tables

    def delete_all(self, table_name: str) -> int:
        """Delete every row of a table."""
        return self.execute(f"DELETE FROM {quote_identifier(table_name)}")

    def insert_rows(self, table_name: str, columns: Sequence[str],
                    rows: Sequence[Sequence[Any]]) -> int:
        """
        Insert positional rows into the given columns.

        Returns:
            Number of rows inserted
        """
        if not rows:
            return 0
        column_list = ', '.join(quote_identifier(col) for col in columns)
        placeholders = ', '.join(['?'] * len(columns))
        sql = f"INSERT INTO {quote_identifier(table_name)}({column_list}) VALUES({placeholders})"
        self.connection.executemany(sql, [tuple(row) for row in rows])
        return len(rows)


def connect_sqlite(params: ConnectionParams, log: Optional[logging.Logger] = None) -> Optional[SQLiteAdapter]:
    """
    Open the SQLite destination.

    Returns None when the file cannot be opened for writing; the failure
    is logged, never raised.
    """
    log = log or logger
    log.info("Connecting to sqlite...")
    try:
        return SQLiteAdapter(**params.sqlite_params())
    except ProvisioningError as e:
        log.error(e.message)
        return None
    except Exception as e:
        log.error(f"Unable to connect to sqlite: {e}")
        return None
