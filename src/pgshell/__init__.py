"""Terminal client for PostgreSQL with a typed table exchange format.

This package provides both a CLI tool and a programmatic API for inspecting
PostgreSQL tables and moving them to and from flat files.

CLI Usage:
    pgshell --host <host> --user <user> --database <db>
    pgshell export <file> [tables...]
    pgshell csv <table> <file>
    pgshell import <file>

Programmatic Usage:
    from pgshell import decode_tables, encode_tables

    text = encode_tables(snapshots)
    assert decode_tables(text)[0].name == snapshots[0].name
"""

__version__ = "0.1.0"

# Export main API functions
from pgshell.csv_projector import project_csv
from pgshell.errors import (
    CoercionError,
    ConnectionFailedError,
    ExchangeFormatError,
    FileAccessError,
    PgShellError,
    RetrievalError,
)
from pgshell.exchange import decode_tables, encode_table, encode_tables
from pgshell.schema import ColumnDescriptor, FetchResult, TableSnapshot
from pgshell.values import TaggedValue, ValueKind, from_declared, from_driver

__all__ = [
    "__version__",
    # Values and tables
    "TaggedValue",
    "ValueKind",
    "from_declared",
    "from_driver",
    "ColumnDescriptor",
    "FetchResult",
    "TableSnapshot",
    # Exchange format
    "encode_table",
    "encode_tables",
    "decode_tables",
    "project_csv",
    # Errors
    "PgShellError",
    "RetrievalError",
    "ConnectionFailedError",
    "ExchangeFormatError",
    "CoercionError",
    "FileAccessError",
]
