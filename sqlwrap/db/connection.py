"""MySQL connection lifecycle.

Wraps a single `aiomysql` connection. Callers normally own a :class:`Database`
handle and open/close it explicitly (or use it as an async context manager).
The module-level :func:`get_wrapper` keeps the older process-wide shared
connection available for code that expects it.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Mapping, Optional, Union

import aiomysql

from sqlwrap.config import DatabaseSettings, get_settings
from sqlwrap.utils.formatters import fmt_ctx

from .errors import WrapperError
from .wrapper import Wrapper

logger = logging.getLogger(__name__)

ConnectOptions = Union[DatabaseSettings, Mapping[str, Any]]

_shared: Optional["Database"] = None
_shared_lock = asyncio.Lock()


def _connect_kwargs(options: Optional[ConnectOptions]) -> Dict[str, Any]:
    if options is None:
        return get_settings().db.connect_kwargs()
    if isinstance(options, DatabaseSettings):
        return options.connect_kwargs()
    kwargs = dict(options)
    # a bare driver connection does not autocommit; every call here is its own unit
    kwargs.setdefault("autocommit", True)
    return kwargs


def _default_timezone(options: Optional[ConnectOptions]) -> Optional[str]:
    if options is None:
        return get_settings().db.timezone
    if isinstance(options, DatabaseSettings):
        return options.timezone
    return None


class Database:
    """A caller-owned handle around one MySQL connection.

    Usage:
        async with Database(settings) as db:
            rows = await db.wrapper().get_data("SELECT * FROM t WHERE id = ?", [1])
    """

    def __init__(
        self,
        settings: Optional[ConnectOptions] = None,
        *,
        timezone: Optional[str] = None,
        **overrides: Any,
    ) -> None:
        self._connect_kwargs = _connect_kwargs(settings)
        self._connect_kwargs.update(overrides)
        self.timezone = timezone if timezone is not None else _default_timezone(settings)
        self._conn: Optional[aiomysql.Connection] = None

    @property
    def is_open(self) -> bool:
        return self._conn is not None and not self._conn.closed

    @property
    def connection(self) -> aiomysql.Connection:
        """The live driver connection."""
        if self._conn is None or self._conn.closed:
            raise WrapperError("connection", "Database connection is not open")
        return self._conn

    def wrapper(self) -> Wrapper:
        return Wrapper(self)

    async def open(self) -> "Database":
        """Connect and apply the session time zone. A no-op when already open."""
        if self.is_open:
            return self

        ctx = {
            "host": self._connect_kwargs.get("host"),
            "port": self._connect_kwargs.get("port"),
            "db": self._connect_kwargs.get("db"),
            "timezone": self.timezone,
        }
        try:
            self._conn = await aiomysql.connect(**self._connect_kwargs)
        except Exception as e:
            logger.exception("Failed to open MySQL connection %s", fmt_ctx(ctx))
            raise WrapperError.from_exception("connect", e) from e
        logger.info("MySQL connection opened %s", fmt_ctx(ctx))

        if self.timezone:
            try:
                await self.wrapper().execute("SET time_zone = ?", [self.timezone])
            except WrapperError as e:
                await self.close()
                raise e.push("connect") from e.cause
            logger.debug("Session time zone set to %s", self.timezone)
        return self

    async def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        conn, self._conn = self._conn, None
        if conn is None or conn.closed:
            return
        try:
            await conn.ensure_closed()
        except Exception as exc:  # pragma: no cover - cleanup best effort
            logger.warning("Error during MySQL QUIT, closing socket: %s", exc)
            conn.close()
        logger.info("MySQL connection closed")

    async def __aenter__(self) -> "Database":
        return await self.open()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


async def get_wrapper(options: Optional[ConnectOptions] = None, timezone: Optional[str] = None) -> Wrapper:
    """
    Return a wrapper bound to the process-wide shared connection.

    The first call connects with ``options`` and, when ``timezone`` is given,
    sets the session time zone. Later calls reuse that connection and ignore
    their arguments.
    """
    global _shared

    if _shared is None or not _shared.is_open:
        async with _shared_lock:
            if _shared is None or not _shared.is_open:
                logger.info("Initializing shared MySQL connection")
                database = Database(options, timezone=timezone)
                try:
                    await database.open()
                except WrapperError as e:
                    raise e.push("get_wrapper") from e.cause
                _shared = database

    return _shared.wrapper()


async def close_wrapper() -> None:
    """Close the shared connection so the next ``get_wrapper`` reconnects."""
    global _shared

    if _shared is None:
        return
    database, _shared = _shared, None
    await database.close()
