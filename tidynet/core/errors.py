"""Error taxonomy for graph-table operations.

Every error derives from :class:`GraphTableError` and from the closest
builtin exception, so ``except ValueError`` / ``except KeyError`` keep working.
"""
from __future__ import annotations

__all__ = [
    "GraphTableError",
    "ReferentialIntegrityError",
    "DuplicateKeyError",
    "IncompleteKeyError",
    "UnknownColumnError",
    "ColumnLengthMismatchError",
    "InvalidActivationError",
]


class GraphTableError(Exception):
    """Base class for all tidynet errors."""


class ReferentialIntegrityError(GraphTableError, ValueError):
    """An edge references a node identity that does not exist."""

    def __init__(self, message: str, *, table: str = "edges", column: str | None = None, values=None):
        super().__init__(message)
        self.table = table
        self.column = column
        self.values = list(values) if values is not None else []


class DuplicateKeyError(GraphTableError, ValueError):
    """Two node records share a ``node_key``."""

    def __init__(self, message: str, *, keys=None):
        super().__init__(message)
        self.keys = list(keys) if keys is not None else []


class IncompleteKeyError(GraphTableError, ValueError):
    """The ``node_key`` column is only partially populated."""


class UnknownColumnError(GraphTableError, KeyError):
    """A verb referenced a column absent from the active table."""

    def __init__(self, column, *, table: str, available=None):
        self.column = column
        self.table = table
        self.available = list(available) if available is not None else []
        msg = f"Unknown column {column!r} on the {table} table"
        if self.available:
            msg += f"; available: {self.available}"
        super().__init__(msg)

    # KeyError would otherwise repr() the message
    def __str__(self) -> str:
        return str(self.args[0])


class ColumnLengthMismatchError(GraphTableError, ValueError):
    """A computed column does not match the active table's row count."""

    def __init__(self, name: str, *, table: str, expected: int, got: int):
        self.name = name
        self.table = table
        self.expected = expected
        self.got = got
        super().__init__(
            f"Column {name!r} has {got} values but the {table} table has {expected} rows"
        )


class InvalidActivationError(GraphTableError, ValueError):
    """A verb needing an ActiveView got none, or the target name is unknown."""
