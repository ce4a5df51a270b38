"""Map catalog type names onto the exchange format's type labels."""

import re

from pgshell.schema import ColumnDescriptor
from pgshell.values import BOOLEAN_TYPE, NUMBER_TYPE, TEXT_TYPE

_INTEGER_TYPES = {"smallint", "integer", "bigint", "int2", "int4", "int8", "int", "serial"}
_BOOLEAN_TYPES = {"boolean", "bool"}
_TEXT_PATTERNS = [
    r"^text$",
    r"^character varying(\(\d+\))?$",
    r"^varchar(\(\d+\))?$",
    r"^character(\(\d+\))?$",
    r"^char(\(\d+\))?$",
]


def exchange_type_for(catalog_type: str) -> str:
    """Return the exchange label for a catalog type name.

    Args:
        catalog_type: Type name as reported by information_schema

    Returns:
        'number', 'boolean' or 'text' when the type maps onto one of them,
        otherwise the catalog type unchanged

    Examples:
        >>> exchange_type_for("integer")
        'number'
        >>> exchange_type_for("character varying")
        'text'
        >>> exchange_type_for("timestamp without time zone")
        'timestamp without time zone'
    """
    normalized = catalog_type.strip().lower()

    if normalized in _INTEGER_TYPES:
        return NUMBER_TYPE

    if normalized in _BOOLEAN_TYPES:
        return BOOLEAN_TYPE

    if any(re.match(pattern, normalized) for pattern in _TEXT_PATTERNS):
        return TEXT_TYPE

    return catalog_type


def normalize_columns(columns: list[ColumnDescriptor]) -> list[ColumnDescriptor]:
    """Return copies of the columns with their types mapped to exchange labels."""
    return [
        ColumnDescriptor(
            name=col.name,
            data_type=exchange_type_for(col.data_type),
            is_nullable=col.is_nullable,
        )
        for col in columns
    ]
