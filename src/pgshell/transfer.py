"""Moving tables between the database and exchange or CSV files."""

from __future__ import annotations

import logging
from pathlib import Path

from pgshell.csv_projector import project_csv
from pgshell.errors import FileAccessError
from pgshell.exchange import decode_tables, encode_tables
from pgshell.schema import TableSnapshot
from pgshell.source import RelationalSource
from pgshell.type_mapping import normalize_columns

logger = logging.getLogger(__name__)


def read_text(path: Path) -> str:
    """Read a UTF-8 text file.

    Raises:
        FileAccessError: If the file cannot be read or decoded
    """
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileAccessError(path, str(e)) from e


def write_text(path: Path, text: str) -> None:
    """Write text to a file in a single buffered write.

    Raises:
        FileAccessError: If the file cannot be written
    """
    try:
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(text)
    except OSError as e:
        raise FileAccessError(path, str(e)) from e
    logger.info("Wrote %d characters to %s", len(text), path)


def build_snapshot(
    source: RelationalSource, table_name: str, normalize_types: bool = False
) -> TableSnapshot:
    """Fetch a table's schema and rows and combine them.

    Args:
        source: Database to read from
        table_name: Table to snapshot
        normalize_types: Replace catalog type names with exchange type labels

    Returns:
        TableSnapshot whose rows follow the fetch column order

    Raises:
        RetrievalError: If either the schema or the data cannot be fetched
    """
    columns = source.describe_columns(table_name)
    result = source.fetch_rows(table_name)

    if normalize_types:
        columns = normalize_columns(columns)

    return TableSnapshot(
        name=table_name,
        columns=columns,
        rows=result.rows,
        row_columns=result.columns,
    )


def export_tables(
    source: RelationalSource,
    path: Path,
    tables: list[str] | None = None,
    normalize_types: bool = False,
) -> list[TableSnapshot]:
    """Export tables to an exchange file.

    Every table is fetched before anything is written, so a failure on any
    table leaves the target file untouched.

    Args:
        source: Database to read from
        path: Exchange file to write
        tables: Tables to export (all tables when None or empty)
        normalize_types: Replace catalog type names with exchange type labels

    Returns:
        The exported snapshots

    Raises:
        RetrievalError: If a table cannot be fetched
        FileAccessError: If the file cannot be written
    """
    table_names = tables or source.list_tables()
    snapshots = [build_snapshot(source, name, normalize_types) for name in table_names]
    write_text(path, encode_tables(snapshots))
    logger.info("Exported %d table(s) to %s", len(snapshots), path)
    return snapshots


def export_csv(source: RelationalSource, table_name: str, path: Path) -> TableSnapshot:
    """Export one table's rows to a CSV file.

    Raises:
        RetrievalError: If the table cannot be fetched
        FileAccessError: If the file cannot be written
    """
    result = source.fetch_rows(table_name)
    snapshot = TableSnapshot(name=table_name, rows=result.rows, row_columns=result.columns)
    write_text(path, project_csv(snapshot))
    return snapshot


def import_tables(path: Path, strict: bool = False) -> list[TableSnapshot]:
    """Read and decode an exchange file.

    The decoded tables are returned only; nothing is written to the database.

    Args:
        path: Exchange file to read
        strict: Reject values that do not fit their declared type

    Returns:
        Decoded tables in file order

    Raises:
        FileAccessError: If the file cannot be read
        ExchangeFormatError: If the file is corrupt
    """
    tables = decode_tables(read_text(path), strict=strict)
    logger.info("Imported %d table(s) from %s", len(tables), path)
    return tables
