"""Reading and writing the pgshell table exchange format.

An exchange file holds any number of tables, one block per table::

    #table=users
    +schema:
    %|id|number|n_null
    %|active|boolean|y_null
    -schema
    +data:
    %id=_=1|active=_=true
    %id=_=2|active=_=
    -data


Schema lines carry a pipe after the ``%``; data lines do not. Values are
written with ``TaggedValue.render`` and read back with ``from_declared``
using the column's declared type, so only the 'boolean', 'number' and
'text' labels survive a round trip. Null and empty text both render as an
empty string and cannot be told apart once written.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from enum import Enum

from pgshell.errors import CoercionError, ExchangeFormatError
from pgshell.schema import ColumnDescriptor, TableSnapshot
from pgshell.values import TaggedValue, from_declared

logger = logging.getLogger(__name__)

TABLE_HEADER = "#table"
SCHEMA_START = "+schema"
SCHEMA_END = "-schema"
DATA_START = "+data"
DATA_END = "-data"
LINE_MARKER = "%"
FIELD_SEPARATOR = "|"
VALUE_SEPARATOR = "=_="
NULLABLE = "y_null"
NOT_NULLABLE = "n_null"


def encode_table(snapshot: TableSnapshot) -> str:
    """Encode one table as an exchange-format block.

    Args:
        snapshot: Table to encode. Row values are paired positionally with
            ``snapshot.names_for_row(index)``.

    Returns:
        The block text, terminated by two blank lines

    Raises:
        ValueError: If a row holds a different number of values than it has
            column names
    """
    parts = [f"{TABLE_HEADER}={snapshot.name}\n", f"{SCHEMA_START}:\n"]

    for col in snapshot.columns:
        marker = NULLABLE if col.is_nullable else NOT_NULLABLE
        parts.append(f"{LINE_MARKER}|{col.name}|{col.data_type}|{marker}\n")

    parts.append(f"{SCHEMA_END}\n")
    parts.append(f"{DATA_START}:")

    for index, row in enumerate(snapshot.rows):
        names = snapshot.names_for_row(index)
        if len(names) != len(row):
            raise ValueError(
                f"Table '{snapshot.name}' row {index} has {len(row)} value(s) "
                f"for {len(names)} column(s)"
            )
        fields = FIELD_SEPARATOR.join(
            f"{name}{VALUE_SEPARATOR}{value.render()}" for name, value in zip(names, row)
        )
        parts.append(f"\n{LINE_MARKER}{fields}")

    parts.append(f"\n{DATA_END}\n")
    parts.append("\n\n")
    return "".join(parts)


def encode_tables(snapshots: Iterable[TableSnapshot]) -> str:
    """Encode several tables into a single exchange document."""
    return "".join(encode_table(snapshot) for snapshot in snapshots)


class DecoderState(Enum):
    """Which part of a table block the decoder is reading."""

    OUTSIDE = "outside"
    IN_SCHEMA = "in_schema"
    IN_DATA = "in_data"


class _Decoder:
    """Line-by-line state machine behind ``decode_tables``."""

    def __init__(self, strict: bool) -> None:
        self.strict = strict
        self.state = DecoderState.OUTSIDE
        self.current = TableSnapshot.new()
        self.tables: list[TableSnapshot] = []
        self.skipped_lines = 0

    def feed(self, line_number: int, line: str) -> None:
        if self.state is DecoderState.IN_SCHEMA:
            self._feed_schema(line_number, line)
        elif self.state is DecoderState.IN_DATA:
            self._feed_data(line_number, line)
        else:
            self._feed_outside(line_number, line)

    def finish(self) -> list[TableSnapshot]:
        self._flush()
        if self.skipped_lines:
            logger.warning("Skipped %d malformed line(s) while decoding", self.skipped_lines)
        return self.tables

    def _flush(self) -> None:
        if self.current.is_open:
            logger.debug(
                "Decoded table '%s' (%d columns, %d rows)",
                self.current.name,
                len(self.current.columns),
                len(self.current.rows),
            )
            self.tables.append(self.current)
        self.current = TableSnapshot.new()

    def _feed_outside(self, line_number: int, line: str) -> None:
        if line.startswith(TABLE_HEADER):
            self._flush()
            fields = line.split("=")
            if len(fields) < 2:
                raise ExchangeFormatError(
                    f"Unparseable table header: {line!r}",
                    line_number=line_number,
                    tables=self.tables,
                )
            self.current.name = line.split("=", 1)[1]
            if not self.current.name:
                logger.warning("Table header on line %d has an empty name", line_number)
        elif line.startswith(SCHEMA_START):
            self.state = DecoderState.IN_SCHEMA
        elif line.startswith(DATA_START):
            self.state = DecoderState.IN_DATA

    def _feed_schema(self, line_number: int, line: str) -> None:
        if line.startswith(LINE_MARKER):
            column = _parse_column(line)
            if column is None:
                self._skip(line_number, "column definition", line)
            else:
                self.current.columns.append(column)
        elif SCHEMA_END in line:
            self.state = DecoderState.OUTSIDE

    def _feed_data(self, line_number: int, line: str) -> None:
        if line.startswith(LINE_MARKER):
            lookup = _parse_row_fields(line)
            if not lookup:
                self._skip(line_number, "data row", line)
                return
            present = [col for col in self.current.columns if col.name in lookup]
            try:
                row = [
                    from_declared(col.data_type, lookup[col.name], strict=self.strict)
                    for col in present
                ]
            except CoercionError as e:
                raise CoercionError(
                    f"Table '{self.current.name}': {e}",
                    line_number=line_number,
                    tables=self.tables,
                ) from e
            if len(present) != len(self.current.columns):
                self.current.sparse_rows[len(self.current.rows)] = [col.name for col in present]
            self.current.rows.append(row)
        elif DATA_END in line:
            self.state = DecoderState.OUTSIDE

    def _skip(self, line_number: int, what: str, line: str) -> None:
        self.skipped_lines += 1
        logger.warning("Skipping malformed %s on line %d: %r", what, line_number, line)


def _strip_marker(line: str) -> str:
    body = line[len(LINE_MARKER) :]
    if body.startswith(FIELD_SEPARATOR):
        body = body[len(FIELD_SEPARATOR) :]
    return body


def _parse_column(line: str) -> ColumnDescriptor | None:
    fields = _strip_marker(line).split(FIELD_SEPARATOR)
    if len(fields) < 3 or not fields[0]:
        return None
    return ColumnDescriptor(name=fields[0], data_type=fields[1], is_nullable=fields[2] == NULLABLE)


def _parse_row_fields(line: str) -> dict[str, str]:
    lookup: dict[str, str] = {}
    for field in _strip_marker(line).split(FIELD_SEPARATOR):
        if VALUE_SEPARATOR not in field:
            continue
        name, raw = field.split(VALUE_SEPARATOR, 1)
        lookup[name] = raw
    return lookup


def decode_tables(text: str, strict: bool = False) -> list[TableSnapshot]:
    """Decode an exchange document back into table snapshots.

    Malformed column and data lines are logged and skipped. A table header
    without '=' cannot be recovered from and aborts the whole decode.

    Args:
        text: Exchange document
        strict: Treat values that do not fit their declared type as errors
            instead of defaulting them (0 for numbers, false for booleans)

    Returns:
        Tables in the order they appear in the document

    Raises:
        ExchangeFormatError: If a table header cannot be parsed. Tables
            decoded before the header are available on the exception.
        CoercionError: In strict mode, if a value does not fit its type
    """
    decoder = _Decoder(strict=strict)
    for line_number, line in enumerate(text.split("\n"), start=1):
        decoder.feed(line_number, line.rstrip("\r"))
    return decoder.finish()
