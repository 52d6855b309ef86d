"""
Query Models

Data types shared by the query builder and its stages:

- Clause: names of the clauses a query can register
- Group: a (key, members) pair produced by GROUP BY
- QueryState: the configuration a query accumulates before it executes
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, NamedTuple, Optional, Set

from .exceptions import DuplicateClauseError

Row = Any
Predicate = Callable[[Any], bool]
Selector = Callable[[Any], Any]
KeyFn = Callable[[Any], Any]
Comparator = Callable[[Any, Any], int]


class Clause(str, Enum):
    """Query clauses. SELECT, FROM, GROUPBY and ORDERBY are once-only."""
    SELECT = "SELECT"
    FROM = "FROM"
    WHERE = "WHERE"
    GROUPBY = "GROUPBY"
    HAVING = "HAVING"
    ORDERBY = "ORDERBY"


ONCE_ONLY_CLAUSES = frozenset({Clause.SELECT, Clause.FROM, Clause.GROUPBY, Clause.ORDERBY})


class Group(NamedTuple):
    """
    One group produced by GROUP BY.

    ``members`` holds rows at the deepest grouping level and nested Groups
    at every shallower level. Compares equal to a plain ``(key, members)``
    tuple.

    ::: This is-in-layer Domain-Specific-Language-Layer.
    ::: This is a value-object.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """
    key: Any
    members: List[Any]


@dataclass
class QueryState:
    """Clause configuration accumulated by a Query before execution.

    Filters are a list of predicate groups: predicates inside one group are
    OR-ed, groups are AND-ed. Having predicates are AND-ed.

    ::: This is-in-layer Domain-Specific-Language-Layer.
    ::: This is a context.
    ::: This is-in-process Main-Process.
    ::: This is stateful.
    """
    selector: Optional[Selector] = None
    tables: List[List[Row]] = field(default_factory=list)
    filters: List[List[Predicate]] = field(default_factory=list)
    key_fns: List[KeyFn] = field(default_factory=list)
    having: List[Predicate] = field(default_factory=list)
    comparator: Optional[Comparator] = None
    registered: Set[Clause] = field(default_factory=set)

    def claim(self, clause: Clause) -> None:
        """Record a clause, raising if a once-only clause was already registered."""
        if clause in ONCE_ONLY_CLAUSES and clause in self.registered:
            raise DuplicateClauseError(clause)
        self.registered.add(clause)

    def has(self, clause: Clause) -> bool:
        return clause in self.registered

    @property
    def grouped(self) -> bool:
        return bool(self.key_fns)
