"""Query execution and schema mutation over a MySQL connection."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional, Sequence, Union

import aiomysql

from sqlwrap.core import statements
from sqlwrap.utils.escaping import survives_escaping, to_driver_paramstyle
from sqlwrap.utils.formatters import fmt_ctx, shorten_query

from .errors import WrapperError
from .models import (
    DEFAULT_COLUMN_TYPE,
    ColumnPosition,
    InsertMode,
    QueryParams,
    QueryValue,
    Row,
)

if TYPE_CHECKING:
    from .connection import Database

logger = logging.getLogger(__name__)


def _prepare(query: str, params: Optional[QueryParams]):
    """Translate ``?`` placeholders for the driver, or pass the text through untouched."""
    if not params:
        return query, None
    return to_driver_paramstyle(query), tuple(params)


class Wrapper:
    """Statement builder and executor bound to a :class:`Database` handle.

    Every method is one round trip. Failures raise :class:`WrapperError`
    labelled with the chain of operations they passed through.
    """

    def __init__(self, database: "Database") -> None:
        self.database = database

    async def get_data(self, query: str, params: Optional[QueryParams] = None) -> List[Row]:
        """Run ``query`` and return every result row as a dict."""
        sql, args = _prepare(query, params)
        logger.debug("get_data %s", fmt_ctx({"query": shorten_query(query), "params": len(params or ())}))
        try:
            async with self.database.connection.cursor(aiomysql.DictCursor) as cur:
                await cur.execute(sql, args)
                rows = await cur.fetchall()
        except WrapperError as e:
            raise e.push("get_data") from e.cause
        except Exception as e:
            logger.exception("Query failed %s", fmt_ctx({"query": shorten_query(query)}))
            raise WrapperError.from_exception("get_data", e) from e
        return list(rows or [])

    async def get_one_data(self, query: str, params: Optional[QueryParams] = None) -> Optional[Row]:
        """Run ``query`` limited to one row; ``None`` when nothing matches."""
        try:
            rows = await self.get_data(f"{query} LIMIT 1", params)
        except WrapperError as e:
            raise e.push("get_one_data") from e.cause
        return rows[0] if rows else None

    async def execute(self, query: str, params: Optional[QueryParams] = None) -> int:
        """Run a mutating statement and return the generated insert id (0 if none)."""
        sql, args = _prepare(query, params)
        logger.debug("execute %s", fmt_ctx({"query": shorten_query(query), "params": len(params or ())}))
        try:
            async with self.database.connection.cursor() as cur:
                await cur.execute(sql, args)
                return cur.lastrowid or 0
        except WrapperError as e:
            raise e.push("execute") from e.cause
        except Exception as e:
            logger.exception("Statement failed %s", fmt_ctx({"query": shorten_query(query)}))
            raise WrapperError.from_exception("execute", e) from e

    async def get_columns(self, table_name: str, excluded_columns: Optional[Sequence[str]] = None) -> List[str]:
        """Column names of ``table_name`` in table order, minus ``excluded_columns``."""
        try:
            query, params = statements.show_columns(table_name, excluded_columns)
            rows = await self.get_data(query, params)
        except ValueError as e:
            raise WrapperError.from_exception("get_columns", e) from e
        except WrapperError as e:
            raise e.push("get_columns") from e.cause
        return [row["Field"] for row in rows]

    async def get_column_by_offset(self, table_name: str, column_name: str, offset: int) -> str:
        """
        Name of the column ``offset`` positions away from ``column_name``.

        ``0`` returns ``column_name`` itself, ``1`` the next column, ``-1`` the
        previous one. Raises when the reference column is missing or the offset
        falls outside the table.
        """
        name = await self._find_column_by_offset("get_column_by_offset", table_name, column_name, offset)
        if name is None:
            raise WrapperError(
                "get_column_by_offset",
                f"No column at offset {offset} from {column_name!r} in table {table_name!r}",
            )
        return name

    async def _find_column_by_offset(
        self, operation: str, table_name: str, column_name: str, offset: int
    ) -> Optional[str]:
        try:
            query, params = statements.column_by_offset(table_name, column_name, offset)
            row = await self.get_one_data(query, params)
        except ValueError as e:
            raise WrapperError.from_exception(operation, e) from e
        except WrapperError as e:
            raise e.push(operation) from e.cause
        return row["Field"] if row else None

    async def insert_columns(
        self,
        table_name: str,
        columns: Sequence[str],
        insert_after: Optional[str] = None,
        insert_before: Optional[str] = None,
        *,
        column_type: str = DEFAULT_COLUMN_TYPE,
    ) -> int:
        """
        Add ``columns`` to ``table_name`` in one ``ALTER TABLE`` statement.

        With ``insert_after`` every column is added right after that anchor, so
        ``[a, b]`` after ``x`` ends up as ``x, b, a``. With ``insert_before`` the
        anchor is whichever column currently precedes it (``FIRST`` when it is
        the first column). Without either, columns are appended. Passing both
        anchors is rejected.

        ``insert_before`` resolves its anchor through ``information_schema``
        with the raw names bound as values, while the ``ALTER TABLE`` uses the
        escaped identifiers. The two only agree for names the driver escaping
        leaves untouched, so a table, reference or anchor name containing a
        backslash, quote or control character is rejected on that path.
        """
        try:
            position = ColumnPosition(after=insert_after, before=insert_before)
        except ValueError as e:
            raise WrapperError("insert_columns", _validation_message(e), cause=e) from e

        after = position.after
        first = False
        if position.before is not None:
            _require_unescaped("insert_columns", table_name, position.before)
            # ensure the reference column exists before looking at its neighbour
            await self._require_column("insert_columns", table_name, position.before)
            after = await self._find_column_by_offset("insert_columns", table_name, position.before, -1)
            first = after is None
            if after is not None:
                _require_unescaped("insert_columns", after)

        try:
            query, params = statements.add_columns(
                table_name, columns, after=after, first=first, column_type=column_type
            )
            logger.info(
                "Adding columns %s",
                fmt_ctx({"table": table_name, "columns": list(columns), "after": after, "first": first or None}),
            )
            return await self.execute(query, params)
        except ValueError as e:
            raise WrapperError.from_exception("insert_columns", e) from e
        except WrapperError as e:
            raise e.push("insert_columns") from e.cause

    async def insert_column(
        self,
        table_name: str,
        column: str,
        insert_after: Optional[str] = None,
        insert_before: Optional[str] = None,
        *,
        column_type: str = DEFAULT_COLUMN_TYPE,
    ) -> int:
        try:
            return await self.insert_columns(
                table_name, [column], insert_after, insert_before, column_type=column_type
            )
        except WrapperError as e:
            raise e.push("insert_column") from e.cause

    async def insert_rows(
        self,
        table_name: str,
        columns: Sequence[str],
        rows: Sequence[Sequence[QueryValue]],
        mode: Union[InsertMode, bool, str] = InsertMode.PARAMETERIZED,
    ) -> int:
        """
        Insert ``rows`` with a single multi-row ``INSERT`` and return the first insert id.

        ``InsertMode.RAW`` inlines every value as ``'value'`` with no escaping at
        all. It exists for bulk loads of pre-sanitized data; a value containing a
        quote breaks the statement.
        """
        try:
            query, params = statements.insert_rows(table_name, columns, rows, InsertMode.coerce(mode))
            return await self.execute(query, params)
        except ValueError as e:
            raise WrapperError.from_exception("insert_rows", e) from e
        except WrapperError as e:
            raise e.push("insert_rows") from e.cause

    async def insert_row(
        self,
        table_name: str,
        columns: Sequence[str],
        row: Sequence[QueryValue],
        mode: Union[InsertMode, bool, str] = InsertMode.PARAMETERIZED,
    ) -> int:
        try:
            return await self.insert_rows(table_name, columns, [row], mode)
        except WrapperError as e:
            raise e.push("insert_row") from e.cause

    async def _require_column(self, operation: str, table_name: str, column_name: str) -> None:
        name = await self._find_column_by_offset(operation, table_name, column_name, 0)
        if name is None:
            raise WrapperError(operation, f"Column {column_name!r} not found in table {table_name!r}")


def _validation_message(exc: ValueError) -> str:
    # pydantic ValidationError lists every failed check; keep the first message
    errors = getattr(exc, "errors", None)
    if callable(errors):
        details = errors()
        if details:
            return str(details[0].get("msg", exc))
    return str(exc)


def _require_unescaped(operation: str, *names: str) -> None:
    for name in names:
        if not survives_escaping(name):
            raise WrapperError(
                operation,
                f"Name {name!r} is altered by identifier escaping and cannot be resolved by position",
            )
