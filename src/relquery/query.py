"""
Query - fluent builder for in-memory relational queries

Clause calls only record configuration and may come in any order; the
terminal call always runs the stages in the same order:

    FROM -> WHERE* -> GROUP BY -> HAVING -> ORDER BY -> SELECT

Example:
    result = (
        new_query()
        .select(lambda group: (group.key, len(group.members)))
        .from_(persons)
        .where(lambda p: p["age"] > 18)
        .group_by(lambda p: p["profession"])
        .having(lambda group: len(group.members) > 1)
        .order_by(group_key())
        .execute()
    )
"""

from __future__ import annotations

from typing import Any, Iterable, List, Optional

import pyarrow as pa

from .arrow import to_arrow, to_list
from .exceptions import QueryConsumedError, QueryError
from .logging_config import configure_logger_for_debug_trace
from .models import Clause, Comparator, KeyFn, Predicate, QueryState, Selector
from .result import StageResult
from .stages import (
    CrossJoinSource,
    FilterStage,
    GroupByStage,
    HavingStage,
    IdentityStage,
    OrderByStage,
    SelectStage,
    Stage,
)

logger = configure_logger_for_debug_trace(__name__)


class Query:
    """
    In-memory query over plain Python rows.

    Every clause method returns the same Query so calls can be chained.
    SELECT, FROM, GROUP BY and ORDER BY may be registered once each
    (DuplicateClauseError otherwise); WHERE and HAVING accumulate.

    A Query is single-use: after execute(), run() or to_arrow() any further
    call raises QueryConsumedError.

    ::: This is-in-layer Domain-Specific-Language-Layer.
    ::: This is a builder.
    ::: This is-in-process Main-Process.
    ::: This is stateful.
    """

    def __init__(self):
        self._state = QueryState()
        self._executed = False

    # -------------------------------------------------------------------------
    # Clauses
    # -------------------------------------------------------------------------

    def _register(self, clause: Clause, operation: str) -> None:
        if self._executed:
            raise QueryConsumedError(operation)
        self._state.claim(clause)
        logger.debug(f"registered {clause.value}")

    def select(self, selector: Optional[Selector] = None) -> "Query":
        """Project every result item through selector. No selector keeps items as-is."""
        self._register(Clause.SELECT, "select")
        self._state.selector = selector
        return self

    def from_(self, *tables: Iterable[Any]) -> "Query":
        """Set the source tables. Several tables are cross joined into tuples."""
        self._register(Clause.FROM, "from_")
        self._state.tables = [to_list(table) for table in tables]
        return self

    def where(self, *predicates: Predicate) -> "Query":
        """Keep rows accepted by any of the predicates. Repeated calls are AND-ed."""
        self._register(Clause.WHERE, "where")
        self._state.filters.append(list(predicates))
        return self

    def group_by(self, *key_fns: KeyFn) -> "Query":
        """Group rows by key_fns[0], then each group's members by key_fns[1], and so on."""
        self._register(Clause.GROUPBY, "group_by")
        self._state.key_fns = list(key_fns)
        return self

    def having(self, predicate: Predicate) -> "Query":
        """Keep top-level groups accepted by predicate. Repeated calls are AND-ed."""
        self._register(Clause.HAVING, "having")
        self._state.having.append(predicate)
        return self

    def order_by(self, comparator: Comparator) -> "Query":
        """Sort the result with a comparator returning <0, 0 or >0."""
        self._register(Clause.ORDERBY, "order_by")
        self._state.comparator = comparator
        return self

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    def _build(self) -> Stage:
        """Assemble the fixed stage chain for the registered clauses."""
        state = self._state
        chain: Stage = IdentityStage()
        for predicates in state.filters:
            chain = chain >> FilterStage(predicates)
        if state.grouped:
            chain = chain >> GroupByStage(state.key_fns)
            if state.having:
                chain = chain >> HavingStage(state.having)
        elif state.having:
            logger.warning(f"HAVING registered but no grouping functions were given; ignoring {len(state.having)} predicate(s)")
        if state.comparator is not None:
            chain = chain >> OrderByStage(state.comparator)
        if state.selector is not None:
            chain = chain >> SelectStage(state.selector)
        return chain

    def _consume(self, operation: str) -> None:
        if self._executed:
            raise QueryConsumedError(operation)
        self._executed = True

    def run(self) -> StageResult[List[Any]]:
        """
        Execute the query and return a Result.

        A failing callback does not raise here; it comes back as
        Err(StageError) with the original exception in ``cause``.
        """
        self._consume("run")
        return self._run()

    def _run(self) -> StageResult[List[Any]]:
        source = CrossJoinSource(self._state.tables).execute()
        if source.is_err():
            return source
        logger.debug(f"from: {len(self._state.tables)} table(s) -> {len(source.unwrap())} rows")
        return source.bind(self._build().execute)

    def execute(self) -> List[Any]:
        """Execute the query and return the result list.

        Exceptions raised by predicates, key functions, comparators or the
        selector propagate unchanged.
        """
        self._consume("execute")
        return self._unwrap(self._run())

    def _unwrap(self, result: StageResult[List[Any]]) -> List[Any]:
        if result.is_err():
            error = result.error
            logger.debug(f"query failed: {error}")
            if error.cause is not None:
                raise error.cause
            raise QueryError(str(error))
        return result.unwrap()

    def to_arrow(self) -> pa.Table:
        """Execute the query and return a result of dict records as an Arrow table."""
        self._consume("to_arrow")
        return to_arrow(self._unwrap(self._run()))

    def __repr__(self) -> str:
        registered = ", ".join(sorted(c.value for c in self._state.registered))
        status = "executed" if self._executed else "building"
        return f"Query({status}; {registered})"


def new_query() -> Query:
    """Start a new query."""
    return Query()

