"""Command-line interface for pgshell."""

from pathlib import Path

import click
from rich.markup import escape

from pgshell import __version__
from pgshell.cli_connection import connect_source, console
from pgshell.cli_transfer import csv_command, export, import_command
from pgshell.config import ShellConfig
from pgshell.logging_config import setup_logging
from pgshell.shell import Shell, announce

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@click.group(invoke_without_command=True)
@click.version_option(version=__version__)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML configuration file (default: ~/.pgshell.yaml if present)",
)
@click.option("--host", "-h", envvar="PGSHELL_HOST", help="Database host (or set PGSHELL_HOST)")
@click.option(
    "--port",
    type=click.IntRange(1, 65535),
    envvar="PGSHELL_PORT",
    default=None,
    help="Database port (or set PGSHELL_PORT)",
)
@click.option("--user", "-u", envvar="PGSHELL_USER", help="Database user (or set PGSHELL_USER)")
@click.option(
    "--password", "-p", envvar="PGSHELL_PASSWORD", help="Database password (or set PGSHELL_PASSWORD)"
)
@click.option(
    "--database", "-d", envvar="PGSHELL_DATABASE", help="Database name (or set PGSHELL_DATABASE)"
)
@click.option(
    "--no-password",
    is_flag=True,
    default=False,
    help="Connect without a password and skip the password prompt",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging verbosity",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write log records (down to DEBUG) to this file",
)
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Path | None,
    host: str | None,
    port: int | None,
    user: str | None,
    password: str | None,
    database: str | None,
    no_password: bool,
    log_level: str,
    log_file: Path | None,
) -> None:
    """Browse a PostgreSQL database and move tables to and from files.

    Without a command, connects and starts the interactive shell. Missing
    connection details are prompted for.

    Examples:
        # Start the shell
        pgshell --host localhost --user postgres --database shop

        # Decode an exchange file without connecting
        pgshell import shop.tbl
    """
    setup_logging(log_level, log_file)

    try:
        config = ShellConfig.load_default(config_path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise click.Abort() from e

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["connection"] = {
        "host": host,
        "port": port,
        "username": user,
        "password": password,
        "database": database,
        "no_password": no_password,
    }

    if ctx.invoked_subcommand is None:
        _start_shell(ctx)


def _start_shell(ctx: click.Context) -> None:
    source = connect_source(ctx)
    credentials = source.credentials
    try:
        announce(
            console,
            [
                f"Connected to database '{credentials.database}'",
                f"as user '{credentials.username}'",
                "Type 'help' to list commands",
            ],
        )
        Shell(source, console=console, config=ctx.obj["config"]).run()
    finally:
        source.close()


# Register commands
main.add_command(export)
main.add_command(csv_command)
main.add_command(import_command)
