"""
relquery - in-memory relational queries over plain Python rows

A fluent builder applies SQL-like clauses (select, from, where, group by,
having, order by) to rows held in memory. Clauses are plain callables, not
query text, and may be registered in any order.

    >>> from relquery import new_query
    >>> new_query().from_([1, 2], [4, 5]).execute()
    [(1, 4), (1, 5), (2, 4), (2, 5)]
"""

__version__ = "0.1.0"

from .comparators import by_field, by_key, group_key, natural_compare, reverse
from .exceptions import DuplicateClauseError, QueryConsumedError, QueryError
from .models import Clause, Group, QueryState
from .query import Query, new_query
from .result import Err, Ok, Result, StageError

__all__ = [
    "Query",
    "new_query",
    "Clause",
    "Group",
    "QueryState",
    "QueryError",
    "DuplicateClauseError",
    "QueryConsumedError",
    "Result",
    "Ok",
    "Err",
    "StageError",
    "natural_compare",
    "reverse",
    "by_key",
    "by_field",
    "group_key",
]
