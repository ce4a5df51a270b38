"""Flatten a table snapshot into simple comma-separated text."""

from pgshell.schema import TableSnapshot


def project_csv(snapshot: TableSnapshot) -> str:
    """Render a table as CSV text.

    The first line holds the column names, then one line per row using each
    value's rendered text. Values are not quoted or escaped, so text
    containing commas or newlines will not read back correctly.

    Args:
        snapshot: Table to render

    Returns:
        CSV text, every line terminated by a newline

    Examples:
        >>> from pgshell.values import TaggedValue
        >>> snap = TableSnapshot("t", row_columns=["id", "ok"],
        ...                      rows=[[TaggedValue.integer(1), TaggedValue.boolean(True)]])
        >>> project_csv(snap)
        'id,ok\\n1,true\\n'
    """
    lines = [",".join(snapshot.row_column_names())]
    for row in snapshot.rows:
        lines.append(",".join(value.render() for value in row))
    return "".join(f"{line}\n" for line in lines)
