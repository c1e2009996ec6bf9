"""Async convenience layer over a MySQL connection."""

from sqlwrap.db.connection import Database, close_wrapper, get_wrapper
from sqlwrap.db.errors import WrapperError
from sqlwrap.db.models import ColumnPosition, InsertMode
from sqlwrap.db.wrapper import Wrapper

__all__ = [
    "ColumnPosition",
    "Database",
    "InsertMode",
    "Wrapper",
    "WrapperError",
    "close_wrapper",
    "get_wrapper",
]
