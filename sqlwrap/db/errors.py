"""Error type raised by every wrapper operation."""

from __future__ import annotations

from typing import Iterable, Optional, Tuple


class WrapperError(Exception):
    """A failed wrapper operation.

    ``operations`` is the chain of operation labels the failure travelled
    through, outermost first: an error raised by ``execute`` and re-raised by
    ``insert_rows`` and then ``insert_row`` carries
    ``("insert_row", "insert_rows", "execute")``. ``message`` is the text of
    the original failure and ``cause`` the original exception, if any.
    """

    def __init__(
        self,
        operations: str | Iterable[str],
        message: str,
        *,
        cause: Optional[BaseException] = None,
    ) -> None:
        if isinstance(operations, str):
            operations = (operations,)
        self.operations: Tuple[str, ...] = tuple(operations)
        self.message = message
        self.cause = cause
        super().__init__(str(self))
        if cause is not None:
            self.__cause__ = cause

    @classmethod
    def from_exception(cls, operation: str, exc: BaseException) -> "WrapperError":
        """Wrap a driver exception under ``operation``."""
        return cls(operation, _exception_message(exc), cause=exc)

    @property
    def operation(self) -> str:
        return self.operations[0]

    @property
    def trail(self) -> str:
        return " > ".join(self.operations)

    def push(self, operation: str) -> "WrapperError":
        """Return a copy of this error relabelled by the calling ``operation``."""
        return WrapperError((operation, *self.operations), self.message, cause=self.cause)

    def __str__(self) -> str:
        return f"{self.operation} Exception: {self.message}"

    def __repr__(self) -> str:
        return f"WrapperError(operations={self.operations!r}, message={self.message!r})"


def _exception_message(exc: BaseException) -> str:
    # PyMySQL errors carry (errno, text) in args
    args = getattr(exc, "args", ())
    if len(args) == 2 and isinstance(args[0], int):
        return f"({args[0]}) {args[1]}"
    return str(exc) or exc.__class__.__name__
