"""Escaping helpers for SQL text assembled by the wrapper."""

from __future__ import annotations

from typing import Final, Sequence

from pymysql.converters import escape_string

PLACEHOLDER: Final[str] = "?"
DRIVER_PLACEHOLDER: Final[str] = "%s"

_QUOTES: Final[str] = "'\"`"


def escape_identifier(name: str) -> str:
    """
    Escape a table or column name for interpolation between backticks.

    Applies the driver's string-literal escaping (the same escaping it uses for
    quoted values, minus the surrounding quotes) and doubles backticks so the
    name cannot close the quoted identifier.
    """
    if not isinstance(name, str):
        raise ValueError(f"Identifier must be a string, got {type(name).__name__}")
    if not name:
        raise ValueError("Identifier must not be empty")
    return escape_string(name).replace("`", "``")


def survives_escaping(name: str) -> bool:
    """
    True when the driver escaping leaves ``name`` as is, backticks aside.

    Names with a backslash, quote or control character are rewritten by
    :func:`escape_identifier`, so the quoted identifier no longer names the same
    object as the raw string bound in a catalog lookup.
    """
    return isinstance(name, str) and escape_string(name) == name


def quote_identifier(name: str) -> str:
    """Return ``name`` escaped and wrapped in backticks."""
    return f"`{escape_identifier(name)}`"


def column_list(columns: Sequence[str]) -> str:
    """Return a comma-joined list of quoted column names."""
    return ", ".join(quote_identifier(column) for column in columns)


def placeholders(count: int) -> str:
    """Return ``count`` comma-joined ``?`` placeholders."""
    return ", ".join([PLACEHOLDER] * count)


def to_driver_paramstyle(query: str) -> str:
    """
    Rewrite ``?`` placeholders into the driver's ``%s`` style.

    Question marks inside quoted literals, identifiers and comments (``-- ``,
    ``#`` and ``/* */``) are left alone. Every literal ``%`` is doubled because
    the driver %-formats the whole statement when arguments are supplied.
    """
    out = []
    quote = ""
    # text that closes the comment being copied: "\n" or "*/"
    comment_end = ""
    i = 0
    length = len(query)
    while i < length:
        ch = query[i]
        if ch == "%":
            out.append("%%")
        elif comment_end:
            if query.startswith(comment_end, i):
                out.append(comment_end)
                i += len(comment_end) - 1
                comment_end = ""
            else:
                out.append(ch)
        elif quote:
            out.append(ch)
            if ch == "\\" and quote != "`" and i + 1 < length:
                # keep the escaped character verbatim
                i += 1
                out.append("%%" if query[i] == "%" else query[i])
            elif ch == quote:
                quote = ""
        elif ch in _QUOTES:
            quote = ch
            out.append(ch)
        elif ch == "#" or _starts_line_comment(query, i):
            comment_end = "\n"
            out.append(ch)
        elif query.startswith("/*", i):
            comment_end = "*/"
            out.append("/*")
            i += 1
        elif ch == PLACEHOLDER:
            out.append(DRIVER_PLACEHOLDER)
        else:
            out.append(ch)
        i += 1
    return "".join(out)


def _starts_line_comment(query: str, i: int) -> bool:
    # MySQL only treats "--" as a comment when whitespace or the end follows it
    if not query.startswith("--", i):
        return False
    return i + 2 == len(query) or query[i + 2].isspace()
