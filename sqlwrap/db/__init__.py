"""Database access layer.

Connection lifecycle, the statement executor and the error type live here so
that callers only deal with plain rows and insert ids.
"""
