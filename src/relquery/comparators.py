"""
Comparators for Query.order_by.

A comparator takes two items and returns a negative number, zero or a
positive number when the first sorts before, together with or after the
second.
"""

from typing import Any, Callable

from .models import Comparator, Group, KeyFn
from .result import identity


def natural_compare(a: Any, b: Any) -> int:
    """Compare with the items' own ``<`` and ``>``."""
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def reverse(comparator: Comparator) -> Comparator:
    """Invert a comparator."""
    return lambda a, b: comparator(b, a)


def by_key(key_fn: KeyFn = identity, descending: bool = False) -> Comparator:
    """Compare ``key_fn(a)`` with ``key_fn(b)``."""
    def compare(a: Any, b: Any) -> int:
        return natural_compare(key_fn(a), key_fn(b))
    return reverse(compare) if descending else compare


def by_field(field: str) -> Comparator:
    """Compare dict records by one field. Prefix with - for descending."""
    descending = field.startswith("-")
    if descending:
        field = field[1:]
    return by_key(lambda record: record[field], descending=descending)


def group_key(comparator: Comparator = natural_compare) -> Callable[[Group, Group], int]:
    """Compare groups by key only, ignoring members."""
    return lambda a, b: comparator(a.key, b.key)
