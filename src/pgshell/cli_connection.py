"""Credential resolution and connection setup shared by the CLI commands."""

from __future__ import annotations

from typing import Any

import click
from rich.console import Console
from rich.markup import escape

from pgshell.config import Credentials, ShellConfig
from pgshell.errors import ConnectionFailedError
from pgshell.source import PostgresSource, open_source

console = Console()

PROMPTS = {
    "host": "Host",
    "username": "Username",
    "password": "Password",
    "database": "Database",
}


def resolve_credentials(config: ShellConfig, options: dict[str, Any]) -> Credentials:
    """Combine config file credentials with command line / environment values.

    Args:
        config: Loaded configuration (lowest precedence)
        options: Values from the command line, keyed by credential field,
            plus 'no_password'

    Returns:
        Credentials with command line values taking precedence
    """
    credentials = config.credentials.merged_with(
        host=options.get("host"),
        port=options.get("port"),
        username=options.get("username"),
        password=options.get("password"),
        database=options.get("database"),
    )
    if options.get("no_password"):
        credentials.password_required = False
    return credentials


def prompt_missing(credentials: Credentials) -> Credentials:
    """Prompt for every credential field that is still empty."""
    for field in credentials.missing_fields():
        value = click.prompt(PROMPTS[field], hide_input=field == "password", err=True)
        setattr(credentials, field, value.strip())
    return credentials


def connect_source(ctx: click.Context) -> PostgresSource:
    """Open a database connection using the options stored on the context.

    Raises:
        click.Abort: If the connection cannot be opened
    """
    config: ShellConfig = ctx.obj["config"]
    credentials = prompt_missing(resolve_credentials(config, ctx.obj["connection"]))

    console.print(
        f"[dim]Connecting to database '{credentials.database}' on {credentials.host} "
        f"as {credentials.username}...[/dim]"
    )
    try:
        return open_source(credentials)
    except ConnectionFailedError as e:
        console.print("[red]Could not connect.[/red] Check credentials again.")
        console.print(f"[dim]{escape(str(e))}[/dim]")
        raise click.Abort() from e
