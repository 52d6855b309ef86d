"""
relquery Exception Hierarchy

Contains all exception classes raised by the query builder.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Clause


class QueryError(Exception):
    """
    Base exception for all query builder operations.

    ::: This is-in-layer Utility-Layer.
    ::: This is a exception.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """
    pass


class DuplicateClauseError(QueryError):
    """
    Raised when a once-only clause (SELECT, FROM, GROUPBY, ORDERBY) is
    registered a second time on the same query.

    ::: This is-in-layer Utility-Layer.
    ::: This is a exception.
    ::: This is-in-process Main-Process.
    ::: This is stateless.

    Raised at registration time, before anything executes.
    """

    def __init__(self, clause: "Clause"):
        self.clause = clause
        super().__init__(f"Duplicate {clause.value}")


class QueryConsumedError(QueryError):
    """
    Raised when a clause or terminal call is made on a query that has
    already been executed.

    ::: This is-in-layer Utility-Layer.
    ::: This is a exception.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Query already executed; cannot call {operation}()")


__all__ = [
    "QueryError",
    "DuplicateClauseError",
    "QueryConsumedError",
]
