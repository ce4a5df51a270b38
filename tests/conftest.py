"""Pytest configuration and shared fixtures."""

from io import StringIO

import pytest
from click.testing import CliRunner
from rich.console import Console

from pgshell.schema import ColumnDescriptor, FetchResult, TableSnapshot
from pgshell.values import TaggedValue
from tests.fakes import FakeSource


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner.

    Returns:
        CliRunner instance for testing CLI commands
    """
    return CliRunner()


@pytest.fixture
def users_table() -> tuple[list[ColumnDescriptor], FetchResult]:
    """Provide a users table as the database would report it.

    The fetch column order (name, id, active) deliberately differs from the
    catalog order (id, name, active).
    """
    columns = [
        ColumnDescriptor("id", "integer", False),
        ColumnDescriptor("name", "text", True),
        ColumnDescriptor("active", "boolean", True),
    ]
    result = FetchResult(
        columns=["name", "id", "active"],
        rows=[
            [TaggedValue.text("Alice"), TaggedValue.integer(1), TaggedValue.boolean(True)],
            [TaggedValue.text("Bob"), TaggedValue.integer(2), TaggedValue.null()],
        ],
    )
    return columns, result


@pytest.fixture
def fake_source(users_table) -> FakeSource:
    """Provide a FakeSource holding a users table and an empty audit table."""
    return FakeSource(
        {
            "users": users_table,
            "audit": ([ColumnDescriptor("entry", "text", True)], FetchResult(["entry"], [])),
        }
    )


@pytest.fixture
def console_output() -> tuple[Console, StringIO]:
    """Provide a wide, colourless rich console that writes to a buffer."""
    buffer = StringIO()
    console = Console(file=buffer, width=120, color_system=None, force_terminal=False)
    return console, buffer


@pytest.fixture
def sample_snapshot() -> TableSnapshot:
    """Provide the two-row table used by the exchange format examples."""
    return TableSnapshot(
        name="t",
        columns=[
            ColumnDescriptor("id", "number", False),
            ColumnDescriptor("ok", "boolean", True),
        ],
        rows=[
            [TaggedValue.integer(1), TaggedValue.boolean(True)],
            [TaggedValue.integer(2), TaggedValue.null()],
        ],
    )
