"""Builders for the dynamic statements issued by the wrapper.

Every builder returns ``(query, params)`` with ``?`` placeholders. Identifiers
are always run through :func:`quote_identifier`; values are bound unless the
caller asked for raw inlining.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from sqlwrap.db.models import DEFAULT_COLUMN_TYPE, InsertMode, QueryValue
from sqlwrap.utils.escaping import column_list, placeholders, quote_identifier

Statement = Tuple[str, List[QueryValue]]


def show_columns(table_name: str, excluded_columns: Optional[Sequence[str]] = None) -> Statement:
    """``SHOW COLUMNS`` for ``table_name``, optionally filtering out names."""
    query = f"SHOW COLUMNS IN {quote_identifier(table_name)}"
    if not excluded_columns:
        return query, []
    query += f" WHERE `Field` NOT IN ({placeholders(len(excluded_columns))})"
    return query, list(excluded_columns)


def column_by_offset(table_name: str, column_name: str, offset: int) -> Statement:
    """
    Look up the column ``offset`` ordinal positions away from ``column_name``.

    The reference position comes from a subquery on the same catalog table, so
    a missing reference column or an out-of-range offset yields no row.
    """
    if isinstance(offset, bool) or not isinstance(offset, int):
        raise ValueError(f"Offset must be an integer, got {offset!r}")
    query = (
        "SELECT `c`.`COLUMN_NAME` AS `Field` "
        "FROM `information_schema`.`COLUMNS` AS `c` "
        "WHERE `c`.`TABLE_SCHEMA` = DATABASE() "
        "AND `c`.`TABLE_NAME` = ? "
        "AND `c`.`ORDINAL_POSITION` = ("
        "SELECT `r`.`ORDINAL_POSITION` + ? "
        "FROM `information_schema`.`COLUMNS` AS `r` "
        "WHERE `r`.`TABLE_SCHEMA` = DATABASE() "
        "AND `r`.`TABLE_NAME` = ? "
        "AND `r`.`COLUMN_NAME` = ?"
        ")"
    )
    return query, [table_name, offset, table_name, column_name]


def add_columns(
    table_name: str,
    columns: Sequence[str],
    after: Optional[str] = None,
    first: bool = False,
    column_type: str = DEFAULT_COLUMN_TYPE,
) -> Statement:
    """
    ``ALTER TABLE ... ADD COLUMN`` adding every name in ``columns``.

    Each column is placed ``AFTER after``, or ``FIRST`` when ``first`` is set,
    or appended at the end when neither is given. MySQL applies the clauses in
    order, so with an anchor the new columns end up in reverse order after it.
    """
    if not columns:
        raise ValueError("At least one column is required")
    if not column_type or not column_type.strip():
        raise ValueError("Column type must not be empty")
    if after is not None and first:
        raise ValueError("A column cannot be placed both FIRST and AFTER another column")

    if first:
        position = " FIRST"
    elif after is not None:
        position = f" AFTER {quote_identifier(after)}"
    else:
        position = ""

    clauses = ", ".join(
        f"ADD COLUMN {quote_identifier(column)} {column_type}{position}" for column in columns
    )
    return f"ALTER TABLE {quote_identifier(table_name)} {clauses}", []


def insert_rows(
    table_name: str,
    columns: Sequence[str],
    rows: Sequence[Sequence[QueryValue]],
    mode: InsertMode = InsertMode.PARAMETERIZED,
) -> Statement:
    """Multi-row ``INSERT INTO ... VALUES (...), (...)``."""
    if not columns:
        raise ValueError("At least one column is required")
    if not rows:
        raise ValueError("At least one row is required")
    for index, row in enumerate(rows):
        if len(row) != len(columns):
            raise ValueError(
                f"Row {index} has {len(row)} values but {len(columns)} columns were given"
            )

    head = f"INSERT INTO {quote_identifier(table_name)} ({column_list(columns)}) VALUES "

    if mode is InsertMode.RAW:
        # no escaping: the caller guarantees the values are already safe
        values = ", ".join("('" + "', '".join(str(value) for value in row) + "')" for row in rows)
        return head + values, []

    row_placeholders = f"({placeholders(len(columns))})"
    params: List[QueryValue] = [value for row in rows for value in row]
    return head + ", ".join([row_placeholders] * len(rows)), params
