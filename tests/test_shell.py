"""Tests for the interactive shell."""

from io import StringIO
from pathlib import Path

from rich.console import Console

from pgshell.config import ShellConfig
from pgshell.shell import Shell
from tests.fakes import SAMPLE_EXCHANGE_TEXT, FakeSource


def _make_shell(source: FakeSource, console_output, **config_kwargs) -> tuple[Shell, StringIO]:
    console, buffer = console_output
    return Shell(source, console=console, config=ShellConfig(**config_kwargs)), buffer


class TestExecute:
    """Test suite for Shell.execute dispatch."""

    def test_quit_and_exit(self, fake_source: FakeSource, console_output) -> None:
        """Test quit and exit stop the loop."""
        shell, _ = _make_shell(fake_source, console_output)
        assert shell.execute("quit") is False
        assert shell.execute("EXIT") is False

    def test_blank_line(self, fake_source: FakeSource, console_output) -> None:
        """Test blank lines are ignored."""
        shell, buffer = _make_shell(fake_source, console_output)
        assert shell.execute("   ") is True
        assert buffer.getvalue() == ""

    def test_unknown_command(self, fake_source: FakeSource, console_output) -> None:
        """Test unknown verbs are reported and the loop continues."""
        shell, buffer = _make_shell(fake_source, console_output)
        assert shell.execute("drop users") is True
        assert "Unknown command: drop" in buffer.getvalue()

    def test_invalid_usage(self, fake_source: FakeSource, console_output) -> None:
        """Test a wrong argument count prints the usage line."""
        shell, buffer = _make_shell(fake_source, console_output)
        assert shell.execute("get") is True
        output = buffer.getvalue()
        assert "Invalid usage!" in output
        assert "get: get <table>" in output

    def test_unbalanced_quotes(self, fake_source: FakeSource, console_output) -> None:
        """Test tokenising errors are reported instead of raised."""
        shell, buffer = _make_shell(fake_source, console_output)
        assert shell.execute('get "users') is True
        assert "Error:" in buffer.getvalue()

    def test_retrieval_error_keeps_loop_alive(self, fake_source: FakeSource, console_output) -> None:
        """Test database errors are printed and the shell carries on."""
        shell, buffer = _make_shell(fake_source, console_output)
        assert shell.execute("get missing") is True
        assert 'Error: relation "missing" does not exist' in buffer.getvalue()


class TestCommands:
    """Test suite for individual shell commands."""

    def test_get(self, fake_source: FakeSource, console_output) -> None:
        """Test get prints every row in fetch column order."""
        shell, buffer = _make_shell(fake_source, console_output)
        shell.execute("get users")
        output = buffer.getvalue()

        assert output.index("name") < output.index("id") < output.index("active")
        assert "Alice" in output
        assert "Bob" in output
        assert "true" in output
        assert "2 row(s)" in output

    def test_get_truncates_long_values(self, console_output) -> None:
        """Test values wider than the column width are cut short."""
        from pgshell.schema import FetchResult
        from pgshell.values import TaggedValue

        long_value = "x" * 50
        source = FakeSource(
            {"notes": ([], FetchResult(["body"], [[TaggedValue.text(long_value)]]))}
        )
        shell, buffer = _make_shell(source, console_output, column_width=10)
        shell.execute("get notes")

        assert long_value not in buffer.getvalue()
        assert "…" in buffer.getvalue()

    def test_describe(self, fake_source: FakeSource, console_output) -> None:
        """Test describe lists columns with type and nullability."""
        shell, buffer = _make_shell(fake_source, console_output)
        shell.execute("describe users")
        output = buffer.getvalue()

        assert "integer" in output
        assert "NOT NULL" in output
        assert "active" in output

    def test_tables(self, fake_source: FakeSource, console_output) -> None:
        """Test tables lists every table."""
        shell, buffer = _make_shell(fake_source, console_output)
        shell.execute("tables")
        output = buffer.getvalue()

        assert "users" in output
        assert "audit" in output
        assert "2 table(s)" in output

    def test_csv(self, fake_source: FakeSource, console_output, tmp_path: Path) -> None:
        """Test csv writes the file and confirms."""
        shell, buffer = _make_shell(fake_source, console_output)
        target = tmp_path / "users.csv"

        shell.execute(f'csv users "{target}"')

        assert target.read_text(encoding="utf-8").startswith("name,id,active\n")
        assert "Wrote 2 row(s)" in buffer.getvalue()

    def test_export_all(self, fake_source: FakeSource, console_output, tmp_path: Path) -> None:
        """Test export without table names writes every table."""
        shell, buffer = _make_shell(fake_source, console_output)
        target = tmp_path / "dump.tbl"

        shell.execute(f'export "{target}"')

        text = target.read_text(encoding="utf-8")
        assert "#table=users\n" in text
        assert "#table=audit\n" in text
        assert "Exported 2 table(s)" in buffer.getvalue()

    def test_export_uses_normalize_setting(
        self, fake_source: FakeSource, console_output, tmp_path: Path
    ) -> None:
        """Test the normalize_types setting is applied on export."""
        shell, _ = _make_shell(fake_source, console_output, normalize_types=True)
        target = tmp_path / "dump.tbl"

        shell.execute(f'export "{target}" users')

        assert "%|id|number|n_null\n" in target.read_text(encoding="utf-8")

    def test_import(self, fake_source: FakeSource, console_output, tmp_path: Path) -> None:
        """Test import prints a summary of the decoded tables."""
        source_file = tmp_path / "in.tbl"
        source_file.write_text(SAMPLE_EXCHANGE_TEXT, encoding="utf-8")
        shell, buffer = _make_shell(fake_source, console_output)

        shell.execute(f'import "{source_file}"')

        output = buffer.getvalue()
        assert "Read 1 table(s)" in output
        assert "t" in output

    def test_import_corrupt_file(self, fake_source: FakeSource, console_output, tmp_path: Path) -> None:
        """Test a corrupt header reports how many tables were decoded first."""
        source_file = tmp_path / "bad.tbl"
        source_file.write_text(SAMPLE_EXCHANGE_TEXT + "#table\n", encoding="utf-8")
        shell, buffer = _make_shell(fake_source, console_output)

        assert shell.execute(f'import "{source_file}"') is True

        output = buffer.getvalue()
        assert "1 table(s) were decoded before the error" in output
        assert "Unparseable table header" in output

    def test_import_strict_setting(self, fake_source: FakeSource, console_output, tmp_path: Path) -> None:
        """Test the strict_coercion setting rejects bad values."""
        source_file = tmp_path / "in.tbl"
        source_file.write_text(
            "#table=t\n+schema:\n%|n|number|n_null\n-schema\n+data:\n%n=_=abc\n-data\n",
            encoding="utf-8",
        )
        shell, buffer = _make_shell(fake_source, console_output, strict_coercion=True)

        shell.execute(f'import "{source_file}"')

        assert "not a number" in buffer.getvalue()

    def test_help(self, fake_source: FakeSource, console_output) -> None:
        """Test help lists every command."""
        shell, buffer = _make_shell(fake_source, console_output)
        shell.execute("help")
        output = buffer.getvalue()
        for usage in ("get <table>", "csv <table> <file>", "export <file> [table ...]", "quit"):
            assert usage in output


class TestRun:
    """Test suite for the Shell.run loop."""

    def test_runs_until_quit(self, fake_source: FakeSource, console_output) -> None:
        """Test commands are read until quit, and later lines are not read."""
        console, buffer = console_output
        lines = iter(["tables", "quit", "get users"])
        prompts: list[str] = []

        def read_line(prompt: str) -> str:
            prompts.append(prompt)
            return next(lines)

        Shell(fake_source, console=console, read_line=read_line).run()

        assert prompts == ["> ", "> "]
        assert "2 table(s)" in buffer.getvalue()
        assert "Alice" not in buffer.getvalue()

    def test_stops_at_end_of_input(self, fake_source: FakeSource, console_output) -> None:
        """Test end of input leaves the loop cleanly."""
        console, _ = console_output

        def read_line(prompt: str) -> str:
            raise EOFError

        Shell(fake_source, console=console, read_line=read_line).run()

    def test_uses_console_input_by_default(self, fake_source: FakeSource) -> None:
        """Test the console's input method is the default line reader."""
        console = Console(file=StringIO())
        shell = Shell(fake_source, console=console)
        assert shell.read_line == console.input
