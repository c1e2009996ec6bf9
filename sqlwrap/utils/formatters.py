from typing import Any, Dict

__all__ = ["fmt_ctx", "shorten_query"]

MAX_QUERY_LOG_LENGTH = 200


def fmt_ctx(ctx: Dict[str, Any]) -> str:
    """Return a deterministic key=value string used in log messages."""
    return " ".join(f"{k}={v}" for k, v in ctx.items() if v is not None)


def shorten_query(query: str, limit: int = MAX_QUERY_LOG_LENGTH) -> str:
    """Collapse whitespace in a statement and cut it to ``limit`` characters."""
    flat = " ".join(query.split())
    if len(flat) <= limit:
        return repr(flat)
    return repr(flat[: limit - 3] + "...")
