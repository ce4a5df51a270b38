"""Tagged cell values shared by the live fetch path and the exchange format."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any

from pgshell.errors import CoercionError

# Declared type labels understood by the exchange format
BOOLEAN_TYPE = "boolean"
NUMBER_TYPE = "number"
TEXT_TYPE = "text"


class ValueKind(Enum):
    """The four kinds of value a cell can hold."""

    BOOLEAN = "boolean"
    INTEGER = "integer"
    TEXT = "text"
    NULL = "null"


class DriverType(IntEnum):
    """PostgreSQL type OIDs recognised when tagging fetched cells."""

    BOOL = 16
    INT8 = 20
    INT2 = 21
    INT4 = 23
    TEXT = 25


_INTEGER_TYPES = frozenset({DriverType.INT2, DriverType.INT4, DriverType.INT8})


@dataclass(frozen=True)
class TaggedValue:
    """A single cell value together with its kind.

    Use the ``boolean``/``integer``/``text``/``null`` constructors rather
    than building instances directly so the kind and payload always agree.
    """

    kind: ValueKind
    value: bool | int | str | None = None

    @classmethod
    def boolean(cls, value: bool) -> TaggedValue:
        return cls(ValueKind.BOOLEAN, bool(value))

    @classmethod
    def integer(cls, value: int) -> TaggedValue:
        return cls(ValueKind.INTEGER, int(value))

    @classmethod
    def text(cls, value: str) -> TaggedValue:
        return cls(ValueKind.TEXT, value)

    @classmethod
    def null(cls) -> TaggedValue:
        return cls(ValueKind.NULL, None)

    @property
    def is_null(self) -> bool:
        return self.kind is ValueKind.NULL

    def render(self) -> str:
        """Render the value as exchange-format text.

        Null renders as the empty string, the same as an empty text value.

        Examples:
            >>> TaggedValue.boolean(True).render()
            'true'
            >>> TaggedValue.integer(-7).render()
            '-7'
            >>> TaggedValue.null().render()
            ''
        """
        if self.kind is ValueKind.BOOLEAN:
            return "true" if self.value else "false"
        if self.kind is ValueKind.INTEGER:
            return str(self.value)
        if self.kind is ValueKind.TEXT:
            return str(self.value)
        return ""

    def to_source_parameter(self) -> bool | int | str | None:
        """Return the value to bind as a query parameter (None for null)."""
        if self.kind is ValueKind.NULL:
            return None
        return self.value

    def __str__(self) -> str:
        return self.render()


def from_driver(type_tag: int, raw: Any) -> TaggedValue:
    """Tag a value fetched from the database.

    Args:
        type_tag: PostgreSQL type OID of the column
        raw: Value as decoded by the driver

    Returns:
        The tagged value. Unrecognised types, NULLs and values whose Python
        type does not match the column type all become null; this never raises.
    """
    try:
        driver_type = DriverType(type_tag)
    except ValueError:
        return TaggedValue.null()

    if driver_type is DriverType.BOOL:
        if isinstance(raw, bool):
            return TaggedValue.boolean(raw)
    elif driver_type in _INTEGER_TYPES:
        if isinstance(raw, int) and not isinstance(raw, bool):
            return TaggedValue.integer(raw)
    elif driver_type is DriverType.TEXT:
        if isinstance(raw, str):
            return TaggedValue.text(raw)

    return TaggedValue.null()


def from_declared(type_name: str, raw_text: str, strict: bool = False) -> TaggedValue:
    """Rebuild a value from its declared type label and rendered text.

    Args:
        type_name: Declared type label ('boolean', 'number' or 'text')
        raw_text: Rendered value text
        strict: Raise instead of defaulting when the text does not fit the type

    Returns:
        The tagged value. Unknown type labels give null. Outside strict mode a
        number that does not parse gives 0 and anything but 'true' gives false.

    Raises:
        CoercionError: In strict mode, if raw_text does not fit type_name

    Examples:
        >>> from_declared("number", "notanumber")
        TaggedValue(kind=<ValueKind.INTEGER: 'integer'>, value=0)
        >>> from_declared("boolean", "yes").value
        False
    """
    if type_name == BOOLEAN_TYPE:
        if strict and raw_text not in ("true", "false"):
            raise CoercionError(f"'{raw_text}' is not a boolean")
        return TaggedValue.boolean(raw_text == "true")

    if type_name == TEXT_TYPE:
        return TaggedValue.text(raw_text)

    if type_name == NUMBER_TYPE:
        try:
            return TaggedValue.integer(_parse_decimal(raw_text))
        except ValueError as e:
            if strict:
                raise CoercionError(f"'{raw_text}' is not a number") from e
            return TaggedValue.integer(0)

    return TaggedValue.null()


def _parse_decimal(text: str) -> int:
    # int() also accepts underscores, surrounding whitespace and non-ASCII digits
    if not text or not text.isascii() or text != text.strip() or "_" in text:
        raise ValueError(f"invalid decimal integer: {text!r}")
    return int(text, 10)
