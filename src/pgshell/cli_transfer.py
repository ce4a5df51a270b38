"""Non-interactive export, csv and import commands."""

from pathlib import Path

import click
from rich.markup import escape

from pgshell.cli_connection import connect_source, console
from pgshell.config import ShellConfig
from pgshell.errors import ExchangeFormatError, PgShellError
from pgshell.shell import summary_table
from pgshell.transfer import export_csv, export_tables, import_tables


@click.command(name="export")
@click.argument("file_path", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("tables", nargs=-1)
@click.option(
    "--normalize-types",
    is_flag=True,
    default=False,
    help="Write boolean/number/text type labels instead of catalog type names",
)
@click.pass_context
def export(
    ctx: click.Context, file_path: Path, tables: tuple[str, ...], normalize_types: bool
) -> None:
    """Export tables to an exchange file.

    Arguments:
        FILE_PATH: Exchange file to write (required)
        TABLES: Tables to export (default: every table)

    Examples:
        # Export every table
        pgshell --host localhost --database shop export shop.tbl

        # Export two tables with portable type labels
        pgshell export shop.tbl users orders --normalize-types
    """
    config: ShellConfig = ctx.obj["config"]
    normalize_types = normalize_types or config.normalize_types

    source = connect_source(ctx)
    try:
        snapshots = export_tables(source, file_path, list(tables) or None, normalize_types)
    except PgShellError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise click.Abort() from e
    finally:
        source.close()

    console.print(f"[green]✓ Exported {len(snapshots)} table(s)[/green]")
    console.print(f"[dim]  File: {escape(str(file_path))}[/dim]")
    for snapshot in snapshots:
        console.print(f"[dim]  {escape(snapshot.name)}: {len(snapshot.rows)} row(s)[/dim]")


@click.command(name="csv")
@click.argument("table", type=str)
@click.argument("file_path", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_context
def csv_command(ctx: click.Context, table: str, file_path: Path) -> None:
    """Write one table to a CSV file.

    Values are written as-is without quoting.

    Arguments:
        TABLE: Table to export (required)
        FILE_PATH: CSV file to write (required)
    """
    source = connect_source(ctx)
    try:
        snapshot = export_csv(source, table, file_path)
    except PgShellError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise click.Abort() from e
    finally:
        source.close()

    console.print(f"[green]✓ Wrote {len(snapshot.rows)} row(s) from '{escape(table)}'[/green]")
    console.print(f"[dim]  File: {escape(str(file_path))}[/dim]")


@click.command(name="import")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Fail on values that do not match their declared type instead of defaulting them",
)
@click.pass_context
def import_command(ctx: click.Context, file_path: Path, strict: bool) -> None:
    """Read an exchange file and summarise the tables it holds.

    No database connection is needed; the file is only decoded.

    Arguments:
        FILE_PATH: Exchange file to read (required)
    """
    config: ShellConfig = ctx.obj["config"]
    strict = strict or config.strict_coercion

    try:
        tables = import_tables(file_path, strict=strict)
    except ExchangeFormatError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        if e.tables:
            console.print(f"[dim]{len(e.tables)} table(s) were decoded before the error[/dim]")
        raise click.Abort() from e
    except PgShellError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise click.Abort() from e

    console.print(f"[green]✓ Read {len(tables)} table(s) from {escape(str(file_path))}[/green]")
    console.print(summary_table(tables))
