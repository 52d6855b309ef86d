"""
Query Stages - the relational operators behind a Query

Each stage is a Kleisli arrow: rows -> Result[rows, StageError].
Stages compose with ``>>`` and a failing stage short-circuits the rest.

- CrossJoinSource: initial rows, the Cartesian product of the FROM tables
- FilterStage: one WHERE clause (predicates OR-ed)
- GroupByStage: recursive multi-level GROUP BY
- HavingStage: group filter (predicates AND-ed)
- OrderByStage: stable sort with a comparator
- SelectStage: projection
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import Any, Generic, List, Sequence, Tuple, TypeVar

import numpy as np

from .logging_config import configure_logger_for_debug_trace
from .models import Comparator, Group, KeyFn, Predicate, Row, Selector
from .result import StageResult, stage_err, stage_ok

logger = configure_logger_for_debug_trace(__name__)

T = TypeVar("T")
U = TypeVar("U")
V = TypeVar("V")


# =============================================================================
# Source
# =============================================================================

@dataclass
class CrossJoinSource:
    """Produces the initial rows of a query from its FROM tables.

    One table is returned as-is (copied, rows are not wrapped). Two or more
    tables produce their Cartesian product as tuples, first table varying
    slowest. No tables produce no rows.

    ::: This is-in-layer Domain-Specific-Language-Layer.
    ::: This is a source.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """
    tables: List[List[Row]] = field(default_factory=list)

    def execute(self) -> StageResult[List[Any]]:
        if not self.tables:
            return stage_ok([])
        if len(self.tables) == 1:
            return stage_ok(list(self.tables[0]))
        try:
            return stage_ok(cross_join(self.tables))
        except Exception as e:
            return stage_err("from", f"Cross join failed: {e}", e)


def cross_join(tables: Sequence[Sequence[Row]]) -> List[Tuple[Row, ...]]:
    """
    Cartesian product of two or more tables, in nested-loop order.

    Example:
        cross_join([[1, 2], [4, 5]]) == [(1, 4), (1, 5), (2, 4), (2, 5)]
    """
    shape = tuple(len(table) for table in tables)
    if 0 in shape:
        return []
    # Row-major index grid: one row per combination, one column per table
    grid = np.indices(shape, dtype=np.int64).reshape(len(shape), -1).T
    return [
        tuple(table[i] for table, i in zip(tables, combo))
        for combo in grid.tolist()
    ]


# =============================================================================
# Stage - Kleisli Arrow over rows
# =============================================================================

class Stage(ABC, Generic[T, U]):
    """
    A step of the query pipeline - a Kleisli arrow: T -> Result[U, StageError]

    ::: This is-in-layer Domain-Specific-Language-Layer.
    ::: This is a step.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """
    name: str = "stage"

    @abstractmethod
    def execute(self, data: T) -> StageResult[U]:
        """Transform input rows and return result."""
        pass

    def __rshift__(self, other: "Stage[U, V]") -> "ComposedStage[T, U, V]":
        """Compose stages: stage1 >> stage2"""
        return ComposedStage(self, other)


@dataclass
class ComposedStage(Stage[T, V], Generic[T, U, V]):
    """Composition of two stages (Kleisli composition).

    ::: This is-in-layer Domain-Specific-Language-Layer.
    ::: This is a step.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """
    first: Stage[T, U]
    second: Stage[U, V]

    def execute(self, data: T) -> StageResult[V]:
        return self.first.execute(data).bind(self.second.execute)


@dataclass
class IdentityStage(Stage[T, T]):
    """Passes rows through unchanged; the unit of ``>>``."""
    name = "identity"

    def execute(self, data: T) -> StageResult[T]:
        return stage_ok(data)


def accepts_any(predicates: Sequence[Predicate], item: Any) -> bool:
    """True when some predicate accepts item; False for no predicates."""
    # Plain loop: a StopIteration from a predicate must reach the caller as-is
    for predicate in predicates:
        if predicate(item):
            return True
    return False


def accepts_all(predicates: Sequence[Predicate], item: Any) -> bool:
    """True when every predicate accepts item."""
    for predicate in predicates:
        if not predicate(item):
            return False
    return True


@dataclass
class FilterStage(Stage[List[Row], List[Row]]):
    """One WHERE clause: keeps a row when any predicate accepts it.

    With no predicates nothing can accept a row, so every row is dropped.

    ::: This is-in-layer Domain-Specific-Language-Layer.
    ::: This is a step.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """
    predicates: List[Predicate] = field(default_factory=list)
    name = "where"

    def execute(self, data: List[Row]) -> StageResult[List[Row]]:
        try:
            kept = []
            for row in data:
                if accepts_any(self.predicates, row):
                    kept.append(row)
        except Exception as e:
            return stage_err(self.name, f"Filter failed: {e}", e)
        logger.debug(f"where: {len(data)} -> {len(kept)} rows")
        return stage_ok(kept)


class _KeyIndex:
    """Ordered key -> members mapping that compares keys by value.

    Hashable keys use a dict; unhashable ones (lists, dicts) fall back to a
    linear equality scan.
    """

    def __init__(self):
        self._slots: List[Tuple[Any, List[Row]]] = []
        self._hashed: dict = {}

    def add(self, key: Any, row: Row) -> None:
        try:
            slot = self._hashed.get(key)
        except TypeError:
            slot = self._scan(key)
            if slot is None:
                self._slots.append((key, [row]))
            else:
                self._slots[slot][1].append(row)
            return
        if slot is None:
            self._hashed[key] = len(self._slots)
            self._slots.append((key, [row]))
        else:
            self._slots[slot][1].append(row)

    def _scan(self, key: Any):
        for i, (k, _) in enumerate(self._slots):
            if k == key:
                return i
        return None

    def items(self) -> List[Tuple[Any, List[Row]]]:
        return self._slots


def partition(rows: Sequence[Row], key_fn: KeyFn) -> List[Group]:
    """Split rows into groups in first-occurrence order of their keys."""
    index = _KeyIndex()
    for row in rows:
        index.add(key_fn(row), row)
    return [Group(key, members) for key, members in index.items()]


def group_rows(rows: Sequence[Row], key_fns: Sequence[KeyFn]) -> List[Any]:
    """
    Group rows by each key function in turn, nesting one level per function.

    The first function groups the rows; every following function regroups
    the members of each group produced by the previous one. Only the
    deepest level holds rows.
    """
    if not key_fns:
        return list(rows)
    first, rest = key_fns[0], key_fns[1:]
    return [Group(group.key, group_rows(group.members, rest)) for group in partition(rows, first)]


@dataclass
class GroupByStage(Stage[List[Row], List[Group]]):
    """GROUP BY over one or more key functions.

    ::: This is-in-layer Domain-Specific-Language-Layer.
    ::: This is a step.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """
    key_fns: List[KeyFn] = field(default_factory=list)
    name = "group_by"

    def execute(self, data: List[Row]) -> StageResult[List[Group]]:
        try:
            groups = group_rows(data, self.key_fns)
        except Exception as e:
            return stage_err(self.name, f"Group by failed: {e}", e)
        logger.debug(f"group_by: {len(data)} rows -> {len(groups)} groups, depth {len(self.key_fns)}")
        return stage_ok(groups)


@dataclass
class HavingStage(Stage[List[Group], List[Group]]):
    """Keeps the top-level groups accepted by every predicate.

    ::: This is-in-layer Domain-Specific-Language-Layer.
    ::: This is a step.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """
    predicates: List[Predicate] = field(default_factory=list)
    name = "having"

    def execute(self, data: List[Group]) -> StageResult[List[Group]]:
        try:
            kept = []
            for group in data:
                if accepts_all(self.predicates, group):
                    kept.append(group)
        except Exception as e:
            return stage_err(self.name, f"Having failed: {e}", e)
        logger.debug(f"having: {len(data)} -> {len(kept)} groups")
        return stage_ok(kept)


@dataclass
class OrderByStage(Stage[List[Any], List[Any]]):
    """Stable sort with a tri-state comparator, into a new list.

    ::: This is-in-layer Domain-Specific-Language-Layer.
    ::: This is a step.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """
    comparator: Comparator
    name = "order_by"

    def execute(self, data: List[Any]) -> StageResult[List[Any]]:
        try:
            return stage_ok(sorted(data, key=cmp_to_key(self.comparator)))
        except Exception as e:
            return stage_err(self.name, f"Sort failed: {e}", e)


@dataclass
class SelectStage(Stage[List[Any], List[Any]]):
    """Maps every row (or group) through the selector.

    ::: This is-in-layer Domain-Specific-Language-Layer.
    ::: This is a step.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """
    selector: Selector
    name = "select"

    def execute(self, data: List[Any]) -> StageResult[List[Any]]:
        try:
            return stage_ok([self.selector(item) for item in data])
        except Exception as e:
            return stage_err(self.name, f"Select failed: {e}", e)
