"""Interactive command loop for browsing tables and moving data."""

from __future__ import annotations

import logging
import shlex
from collections.abc import Callable
from pathlib import Path

from rich.align import Align
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from pgshell.config import ShellConfig
from pgshell.errors import ExchangeFormatError, PgShellError
from pgshell.schema import TableSnapshot
from pgshell.source import RelationalSource
from pgshell.transfer import export_csv, export_tables, import_tables

logger = logging.getLogger(__name__)

PROMPT = "> "
QUIT_COMMANDS = ("quit", "exit")

USAGE = {
    "get": "get <table>",
    "describe": "describe <table>",
    "tables": "tables",
    "csv": "csv <table> <file>",
    "export": "export <file> [table ...]",
    "import": "import <file>",
    "help": "help",
    "quit": "quit",
}

HELP = {
    "get": "Print every row of a table",
    "describe": "Print the columns of a table",
    "tables": "List the tables in the database",
    "csv": "Write a table to a CSV file",
    "export": "Write tables (all by default) to an exchange file",
    "import": "Read an exchange file and summarise its tables",
    "help": "Show this help",
    "quit": "Close the connection and leave",
}


class UsageError(Exception):
    """A command was given the wrong arguments."""


class Shell:
    """Reads commands, runs them against a source and prints the results."""

    def __init__(
        self,
        source: RelationalSource,
        console: Console | None = None,
        config: ShellConfig | None = None,
        read_line: Callable[[str], str] | None = None,
    ) -> None:
        """Initialize the shell.

        Args:
            source: Database the commands read from
            console: Console to print to (a new stdout console if omitted)
            config: Display and exchange settings
            read_line: Function used to read a command line (defaults to console.input)
        """
        self.source = source
        self.console = console or Console()
        self.config = config or ShellConfig()
        self.read_line = read_line or self.console.input
        self._handlers: dict[str, Callable[[list[str]], None]] = {
            "get": self._get,
            "describe": self._describe,
            "tables": self._tables,
            "csv": self._csv,
            "export": self._export,
            "import": self._import,
            "help": self._help,
        }

    def run(self) -> None:
        """Read and execute commands until quit or end of input."""
        while True:
            try:
                line = self.read_line(PROMPT)
            except (EOFError, KeyboardInterrupt):
                self.console.print()
                return
            if not self.execute(line):
                return

    def execute(self, line: str) -> bool:
        """Execute one command line.

        Args:
            line: Raw command line

        Returns:
            False when the command asks to leave the shell, True otherwise
        """
        try:
            words = shlex.split(line)
        except ValueError as e:
            self.console.print(f"[red]Error:[/red] {escape(str(e))}")
            return True

        if not words:
            return True

        verb, args = words[0].lower(), words[1:]
        if verb in QUIT_COMMANDS:
            return False

        handler = self._handlers.get(verb)
        if handler is None:
            self.console.print(f"[yellow]Unknown command:[/yellow] {escape(verb)}")
            self.console.print("[dim]Type 'help' to list commands[/dim]")
            return True

        try:
            handler(args)
        except UsageError:
            self.console.print("[red]Invalid usage![/red]")
            self.console.print(f"{verb}: {escape(USAGE[verb])}")
        except PgShellError as e:
            self.console.print(f"[red]Error:[/red] {escape(str(e))}")
        except Exception as e:
            logger.debug("Command %r failed", line, exc_info=True)
            self.console.print(f"[red]Unexpected error:[/red] {escape(str(e))}")
        return True

    def _get(self, args: list[str]) -> None:
        table_name = _single_arg(args)
        result = self.source.fetch_rows(table_name)

        width = self.config.column_width
        table = Table(title=table_name, show_lines=False)
        for col in result.columns:
            table.add_column(
                Text(col), justify="center", max_width=width, overflow="ellipsis", no_wrap=True
            )
        for row in result.rows:
            table.add_row(*(Text(value.render()) for value in row))

        self.console.print(table)
        self.console.print(f"[dim]{len(result.rows)} row(s)[/dim]")

    def _describe(self, args: list[str]) -> None:
        table_name = _single_arg(args)
        columns = self.source.describe_columns(table_name)
        if not columns:
            self.console.print(f"[yellow]No columns found for '{escape(table_name)}'[/yellow]")
            return

        table = Table(title=table_name)
        table.add_column("Column", style="cyan")
        table.add_column("Type", style="yellow")
        table.add_column("Nullable", style="magenta")
        for col in columns:
            table.add_row(Text(col.name), Text(col.data_type), "NULL" if col.is_nullable else "NOT NULL")
        self.console.print(table)

    def _tables(self, args: list[str]) -> None:
        if args:
            raise UsageError()
        names = self.source.list_tables()
        for name in names:
            self.console.print(Text(f"  {name}"))
        self.console.print(f"[dim]{len(names)} table(s)[/dim]")

    def _csv(self, args: list[str]) -> None:
        if len(args) != 2:
            raise UsageError()
        table_name, path = args[0], Path(args[1])
        snapshot = export_csv(self.source, table_name, path)
        self.console.print(
            f"[green]✓ Wrote {len(snapshot.rows)} row(s) from '{escape(table_name)}' "
            f"to {escape(str(path))}[/green]"
        )

    def _export(self, args: list[str]) -> None:
        if not args:
            raise UsageError()
        path, tables = Path(args[0]), args[1:]
        snapshots = export_tables(
            self.source, path, tables or None, normalize_types=self.config.normalize_types
        )
        self.console.print(
            f"[green]✓ Exported {len(snapshots)} table(s) to {escape(str(path))}[/green]"
        )
        for snapshot in snapshots:
            self.console.print(
                f"[dim]  {escape(snapshot.name)}: {len(snapshot.rows)} row(s)[/dim]"
            )

    def _import(self, args: list[str]) -> None:
        path = Path(_single_arg(args))
        try:
            tables = import_tables(path, strict=self.config.strict_coercion)
        except ExchangeFormatError as e:
            if e.tables:
                self.console.print(
                    f"[dim]{len(e.tables)} table(s) were decoded before the error[/dim]"
                )
            raise

        self.console.print(f"[green]✓ Read {len(tables)} table(s) from {escape(str(path))}[/green]")
        self.console.print(summary_table(tables))

    def _help(self, args: list[str]) -> None:
        table = Table(show_header=False, box=None, padding=(0, 2))
        table.add_column("Usage", style="cyan")
        table.add_column("Description", style="dim")
        for verb, usage in USAGE.items():
            table.add_row(escape(usage), HELP[verb])
        self.console.print(table)


def _single_arg(args: list[str]) -> str:
    if len(args) != 1:
        raise UsageError()
    return args[0]


def summary_table(tables: list[TableSnapshot]) -> Table:
    """Build a rich table listing each snapshot's column and row counts."""
    table = Table(title="Tables")
    table.add_column("Table", style="cyan")
    table.add_column("Columns", justify="right")
    table.add_column("Rows", justify="right", style="green")
    for snapshot in tables:
        table.add_row(Text(snapshot.name), str(len(snapshot.columns)), f"{len(snapshot.rows):,}")
    return table


def announce(console: Console, lines: list[str]) -> None:
    """Clear the screen and print lines centred in the terminal."""
    console.clear()
    padding = max(console.height // 2 - len(lines) - 2, 0)
    console.print("\n" * padding, end="")
    for line in lines:
        console.print(Align.center(Text(line)))
