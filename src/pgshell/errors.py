"""Error types raised by pgshell."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pgshell.schema import TableSnapshot


class PgShellError(Exception):
    """Base class for every error pgshell reports to the user."""


class RetrievalError(PgShellError):
    """The database rejected a query or could not be reached."""


class ConnectionFailedError(RetrievalError):
    """A connection to the database could not be opened."""


class ExchangeFormatError(PgShellError):
    """An exchange file could not be decoded.

    Tables that were completely decoded before the failing line are kept
    on ``tables`` so callers can decide whether to use them.
    """

    def __init__(
        self,
        message: str,
        line_number: int | None = None,
        tables: list[TableSnapshot] | None = None,
    ) -> None:
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number
        self.tables = tables or []


class CoercionError(ExchangeFormatError):
    """A raw value did not match its declared type (strict mode only)."""


class FileAccessError(PgShellError):
    """A file could not be read or written."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Cannot access {path}: {reason}")
        self.path = path
