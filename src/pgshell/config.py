"""Configuration file and connection credentials for pgshell."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from psycopg.conninfo import make_conninfo

DEFAULT_CONFIG_PATH = Path.home() / ".pgshell.yaml"
DEFAULT_COLUMN_WIDTH = 14

_CREDENTIAL_KEYS = ("host", "username", "password", "database")


class Credentials:
    """Connection credentials for a PostgreSQL server."""

    def __init__(
        self,
        host: str = "",
        username: str = "",
        password: str = "",
        database: str = "",
        password_required: bool = True,
        port: int | None = None,
    ) -> None:
        """Initialize credentials.

        Args:
            host: Server host name or address
            username: Login role
            password: Password for the role (ignored when password_required is False)
            database: Database to connect to
            password_required: Whether a password must be supplied (prompted for if empty)
            port: Server port (libpq default when None)
        """
        self.host = host
        self.username = username
        self.password = password
        self.database = database
        self.password_required = password_required
        self.port = port

    def missing_fields(self) -> list[str]:
        """Return the names of fields that still need a value.

        Returns:
            Field names in prompting order; 'password' is only listed when required
        """
        missing = []
        for key in _CREDENTIAL_KEYS:
            if key == "password" and not self.password_required:
                continue
            if not getattr(self, key):
                missing.append(key)
        return missing

    def merged_with(self, **overrides: Any) -> Credentials:
        """Return a copy with every non-empty override applied."""
        values = {key: getattr(self, key) for key in _CREDENTIAL_KEYS}
        values["port"] = self.port
        for key, value in overrides.items():
            if key not in values:
                raise ValueError(f"Unknown credential field '{key}'")
            if value:
                values[key] = value
        return Credentials(password_required=self.password_required, **values)

    def conninfo(self) -> str:
        """Build a libpq connection string from the credentials."""
        params = {"host": self.host, "user": self.username, "dbname": self.database}
        if self.port:
            params["port"] = str(self.port)
        if self.password_required and self.password:
            params["password"] = self.password
        return make_conninfo(**{key: value for key, value in params.items() if value})

    def __repr__(self) -> str:
        return (
            f"Credentials(host={self.host!r}, port={self.port!r}, username={self.username!r}, "
            f"database={self.database!r}, password_required={self.password_required})"
        )


class ShellConfig:
    """Settings loaded from the pgshell YAML configuration file."""

    def __init__(
        self,
        credentials: Credentials | None = None,
        column_width: int = DEFAULT_COLUMN_WIDTH,
        strict_coercion: bool = False,
        normalize_types: bool = False,
    ) -> None:
        """Initialize shell configuration.

        Args:
            credentials: Default connection credentials
            column_width: Width of each column when printing tables
            strict_coercion: Fail imports on values that do not fit their declared type
            normalize_types: Write exchange type labels instead of catalog type names on export
        """
        if column_width < 6:
            raise ValueError(f"column_width must be at least 6, got {column_width}")
        self.credentials = credentials or Credentials()
        self.column_width = column_width
        self.strict_coercion = strict_coercion
        self.normalize_types = normalize_types

    @classmethod
    def from_yaml(cls, config_path: Path) -> ShellConfig:
        """Load configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            ShellConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config file is invalid

        Example YAML structure:
            connection:
              host: localhost
              username: postgres
              database: shop
              password_required: false
            display:
              column_width: 20
            exchange:
              strict_coercion: true
              normalize_types: true
        """
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        try:
            with open(config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {config_path}: {e}") from e

        if data is None:
            return cls()

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping")

        credentials = cls._parse_connection(data.get("connection") or {})

        display = cls._section(data, "display")
        exchange = cls._section(data, "exchange")

        column_width = display.get("column_width", DEFAULT_COLUMN_WIDTH)
        if not isinstance(column_width, int) or isinstance(column_width, bool):
            raise ValueError("display.column_width must be an integer")

        strict_coercion = exchange.get("strict_coercion", False)
        normalize_types = exchange.get("normalize_types", False)
        for key, value in (("strict_coercion", strict_coercion), ("normalize_types", normalize_types)):
            if not isinstance(value, bool):
                raise ValueError(f"exchange.{key} must be true or false")

        return cls(
            credentials=credentials,
            column_width=column_width,
            strict_coercion=strict_coercion,
            normalize_types=normalize_types,
        )

    @classmethod
    def load_default(cls, config_path: Path | None = None) -> ShellConfig:
        """Load the given config file, or the default one if it exists."""
        if config_path is not None:
            return cls.from_yaml(config_path)
        if DEFAULT_CONFIG_PATH.exists():
            return cls.from_yaml(DEFAULT_CONFIG_PATH)
        return cls()

    @staticmethod
    def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
        section = data.get(name) or {}
        if not isinstance(section, dict):
            raise ValueError(f"'{name}' section must be a dictionary")
        return section

    @staticmethod
    def _parse_connection(conn_data: Any) -> Credentials:
        if not isinstance(conn_data, dict):
            raise ValueError("'connection' section must be a dictionary")

        values = {}
        for key in _CREDENTIAL_KEYS:
            value = conn_data.get(key, "")
            if value is None:
                value = ""
            if not isinstance(value, (str, int)):
                raise ValueError(f"connection.{key} must be a string")
            values[key] = str(value)

        password_required = conn_data.get("password_required", True)
        if not isinstance(password_required, bool):
            raise ValueError("connection.password_required must be true or false")

        port = conn_data.get("port")
        if port is not None and (
            isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536
        ):
            raise ValueError("connection.port must be an integer between 1 and 65535")

        return Credentials(password_required=password_required, port=port, **values)
