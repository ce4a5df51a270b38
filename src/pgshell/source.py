"""Access to the relational data source (PostgreSQL through psycopg)."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import psycopg
from psycopg import sql

from pgshell.config import Credentials
from pgshell.errors import ConnectionFailedError, RetrievalError
from pgshell.schema import ColumnDescriptor, FetchResult
from pgshell.values import from_driver

logger = logging.getLogger(__name__)

DESCRIBE_QUERY = """
    SELECT column_name, data_type, is_nullable
    FROM information_schema.columns
    WHERE table_name = %s
    ORDER BY ordinal_position
"""

LIST_TABLES_QUERY = """
    SELECT table_name
    FROM information_schema.tables
    WHERE table_schema NOT IN ('pg_catalog', 'information_schema')
    ORDER BY table_name
"""


class RelationalSource(Protocol):
    """The three read operations pgshell needs from a database."""

    def fetch_rows(self, table_name: str) -> FetchResult: ...

    def describe_columns(self, table_name: str) -> list[ColumnDescriptor]: ...

    def list_tables(self) -> list[str]: ...


class PostgresSource:
    """PostgreSQL connection handler."""

    def __init__(self, credentials: Credentials) -> None:
        """Initialize the source.

        Args:
            credentials: Credentials used when the connection is opened
        """
        self.credentials = credentials
        self.conn: psycopg.Connection[Any] | None = None

    def __enter__(self) -> PostgresSource:
        """Enter context manager."""
        self.connect()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit context manager."""
        self.close()

    def connect(self) -> None:
        """Open the connection.

        Raises:
            ConnectionFailedError: If the server cannot be reached or rejects the login
        """
        logger.debug("Connecting with %r", self.credentials)
        try:
            self.conn = psycopg.connect(self.credentials.conninfo(), autocommit=True)
        except psycopg.Error as e:
            raise ConnectionFailedError(f"Could not connect: {e}") from e

    def close(self) -> None:
        if self.conn:
            self.conn.close()
            self.conn = None

    def _connection(self) -> psycopg.Connection[Any]:
        if not self.conn:
            raise RuntimeError("Database connection not established")
        return self.conn

    def fetch_rows(self, table_name: str) -> FetchResult:
        """Fetch every row of a table.

        Args:
            table_name: Table to read

        Returns:
            FetchResult with columns in the order the server returned them

        Raises:
            RetrievalError: If the query fails
        """
        query = sql.SQL("SELECT * FROM {}").format(sql.Identifier(table_name))
        try:
            with self._connection().cursor() as cur:
                cur.execute(query)
                description = cur.description or []
                records = cur.fetchall()
        except psycopg.Error as e:
            raise RetrievalError(f"Could not read table '{table_name}': {e}") from e

        columns = [col.name for col in description]
        type_codes = [col.type_code for col in description]
        rows = [
            [from_driver(type_code, raw) for type_code, raw in zip(type_codes, record)]
            for record in records
        ]
        logger.debug("Fetched %d row(s) from '%s'", len(rows), table_name)
        return FetchResult(columns=columns, rows=rows)

    def describe_columns(self, table_name: str) -> list[ColumnDescriptor]:
        """Describe the columns of a table from information_schema.

        Args:
            table_name: Table to describe

        Returns:
            Column descriptors in ordinal order (empty if the table is unknown)

        Raises:
            RetrievalError: If the query fails
        """
        try:
            with self._connection().cursor() as cur:
                cur.execute(DESCRIBE_QUERY, (table_name,))
                records = cur.fetchall()
        except psycopg.Error as e:
            raise RetrievalError(f"Could not describe table '{table_name}': {e}") from e

        return [
            ColumnDescriptor(name=name, data_type=data_type, is_nullable=is_nullable != "NO")
            for name, data_type, is_nullable in records
        ]

    def list_tables(self) -> list[str]:
        """List user tables.

        Raises:
            RetrievalError: If the query fails
        """
        try:
            with self._connection().cursor() as cur:
                cur.execute(LIST_TABLES_QUERY)
                records = cur.fetchall()
        except psycopg.Error as e:
            raise RetrievalError(f"Could not list tables: {e}") from e

        return [name for (name,) in records if not name.startswith("pg_")]


def open_source(credentials: Credentials) -> PostgresSource:
    """Create a connected PostgresSource.

    Raises:
        ConnectionFailedError: If the connection cannot be opened
    """
    source = PostgresSource(credentials)
    source.connect()
    return source
