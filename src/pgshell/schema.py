"""Table schema and snapshot containers."""

from __future__ import annotations

from dataclasses import dataclass, field

from pgshell.values import TaggedValue


@dataclass
class ColumnDescriptor:
    """Name, declared type and nullability of one column.

    ``data_type`` is an opaque label: either the catalog's type name
    (e.g. 'integer', 'character varying') or one of the exchange labels
    'boolean', 'number' and 'text'.
    """

    name: str
    data_type: str
    is_nullable: bool


@dataclass
class FetchResult:
    """Rows returned by a table fetch, with the column order the database used."""

    columns: list[str]
    rows: list[list[TaggedValue]]


@dataclass
class TableSnapshot:
    """Schema and row data of one table.

    Rows are positional. When ``row_columns`` is set (live fetch) the values
    follow that order; otherwise (decoded from an exchange file) they follow
    ``columns``. A decoded row may hold fewer values than there are columns
    when its line omitted fields; ``sparse_rows`` maps the index of each such
    row to the names of the columns it does hold.
    """

    name: str = ""
    columns: list[ColumnDescriptor] = field(default_factory=list)
    rows: list[list[TaggedValue]] = field(default_factory=list)
    row_columns: list[str] | None = None
    sparse_rows: dict[int, list[str]] = field(default_factory=dict)

    @classmethod
    def new(cls) -> TableSnapshot:
        """Create the empty, unnamed snapshot used before any table is open."""
        return cls()

    @property
    def is_open(self) -> bool:
        return bool(self.name)

    def row_column_names(self) -> list[str]:
        """Column names in the order row values are stored."""
        if self.row_columns is not None:
            return list(self.row_columns)
        return [col.name for col in self.columns]

    def names_for_row(self, index: int) -> list[str]:
        """Column names paired with the values of row ``index``."""
        if index in self.sparse_rows:
            return list(self.sparse_rows[index])
        return self.row_column_names()
